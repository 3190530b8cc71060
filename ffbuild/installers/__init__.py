"""
Installer components for native package managers
"""

from typing import Any

from ..build_types.configuration import Platform
from ..config import ConfigLoader
from ..utils.runner import CommandRunner
from .base_installer import BaseInstaller
from .brew_installer import BrewInstaller
from .apt_installer import AptInstaller
from .pacman_installer import PacmanInstaller

# Map package managers named in platforms.yaml to installer classes
INSTALLER_MAP = {
    "brew": BrewInstaller,
    "apt": AptInstaller,
    "pacman": PacmanInstaller,
}


def get_installer(platform: Platform,
                  config: ConfigLoader,
                  runner: CommandRunner,
                  logger: Any) -> BaseInstaller:
    """
    Get the installer for a platform's package manager

    Args:
        platform: Supported platform
        config: Configuration loader
        runner: Command runner
        logger: Logger instance

    Returns:
        Installer instance
    """
    platform_config = config.get_platform_config(platform.value)

    manager = platform_config.get("package_manager")
    if not manager:
        raise ValueError(f"No package manager specified for {platform.value}")

    installer_class = INSTALLER_MAP.get(manager)
    if not installer_class:
        raise ValueError(f"Unknown package manager: {manager}")

    return installer_class(
        platform=platform,
        config=platform_config,
        runner=runner,
        logger=logger,
        batch=bool(config.get_option("batch_installs", False))
    )


__all__ = [
    "BaseInstaller",
    "BrewInstaller",
    "AptInstaller",
    "PacmanInstaller",
    "INSTALLER_MAP",
    "get_installer",
]
