"""
Configuration management for ffbuild
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent


class ConfigLoader:
    """Loads the feature table and platform table"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_dir: Directory containing features.yaml and platforms.yaml,
                defaults to the tables shipped with the package
        """
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

        features_file = self.config_dir / "features.yaml"
        if not features_file.exists():
            raise FileNotFoundError(f"Features config not found: {features_file}")

        with open(features_file, 'r') as f:
            self.features_config = yaml.safe_load(f) or {}

        platforms_file = self.config_dir / "platforms.yaml"
        if not platforms_file.exists():
            raise FileNotFoundError(f"Platforms config not found: {platforms_file}")

        with open(platforms_file, 'r') as f:
            self.platforms_config = yaml.safe_load(f) or {}

    @property
    def version(self) -> int:
        """Version of the declared feature table"""
        return int(self.features_config.get("version", 0))

    def get_features(self) -> Dict[str, Dict[str, Any]]:
        """Get feature declarations in declaration order"""
        return self.features_config.get("features") or {}

    def get_platform_config(self, platform: str) -> Dict[str, Any]:
        """
        Get configuration for a specific platform

        Args:
            platform: Platform name (macos, linux, windows)

        Returns:
            Platform configuration dictionary
        """
        platforms = self.platforms_config.get("platforms") or {}
        if platform not in platforms:
            raise ValueError(f"Unknown platform: {platform}")
        return platforms[platform]

    def get_display_name(self, platform: str) -> str:
        """Human-readable platform name, falling back to the key"""
        return self.get_platform_config(platform).get("display_name") or platform

    def get_dependency_roots(self, platform: str, arch: Optional[str] = None) -> List[str]:
        """
        Get directories where the platform package manager installs libraries

        Args:
            platform: Platform name
            arch: Normalized architecture; selects an arch-specific entry if present

        Returns:
            List of root directories (each with include/ and lib/ below it)
        """
        roots = self.get_platform_config(platform).get("dependency_roots") or {}
        if arch and arch in roots:
            return list(roots[arch])
        return list(roots.get("default", []))

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get a build option

        Args:
            key: Option key
            default: Default value if not found

        Returns:
            Option value
        """
        options = self.features_config.get("build_options") or {}
        return options.get(key, default)


__all__ = ["ConfigLoader", "DEFAULT_CONFIG_DIR"]
