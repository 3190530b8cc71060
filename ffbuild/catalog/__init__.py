"""
Package catalog: maps features to native packages per platform
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..build_types.configuration import (SUPPORTED_PLATFORMS, Feature, PackageRequirement,
                                         Platform, Resolution)
from ..build_types.exceptions import CatalogError
from ..config import ConfigLoader

UNSUPPORTED_MARKER = "unsupported"

FeatureRef = Union[str, Feature]


class PackageCatalog:
    """Per-platform lookup table from feature name to package requirements.

    The table is built once from the feature config. Every feature must
    declare every supported platform, so resolve() is total over the declared
    feature x platform matrix; a missing pair is reported by check_coverage()
    and rejected at construction time.
    """

    def __init__(self, config: ConfigLoader, strict: bool = True):
        """
        Initialize catalog

        Args:
            config: Configuration loader
            strict: Raise CatalogError if the table does not cover every pair
        """
        self.config = config
        self._features: Dict[str, Feature] = {}
        self._table: Dict[str, Dict[Platform, Optional[Tuple[PackageRequirement, ...]]]] = {}

        for name, feature_config in config.get_features().items():
            feature_config = feature_config or {}
            self._features[name] = Feature(
                name=name,
                description=feature_config.get("description", ""),
                flags=tuple(feature_config.get("flags") or ()),
            )
            packages = feature_config.get("packages") or {}
            self._table[name] = {}
            for platform in SUPPORTED_PLATFORMS:
                if platform.value in packages:
                    self._table[name][platform] = self._parse_entry(
                        name, platform, packages[platform.value])

        if strict:
            missing = self.check_coverage()
            if missing:
                pairs = ", ".join(f"{f}/{p.value}" for f, p in missing)
                raise CatalogError(f"Feature catalog is incomplete: {pairs}")

    @staticmethod
    def _parse_requirement(feature: str, platform: Platform, entry: Any) -> PackageRequirement:
        if isinstance(entry, str):
            return PackageRequirement(platform=platform, package=entry)
        if isinstance(entry, dict) and entry.get("package"):
            return PackageRequirement(
                platform=platform,
                package=entry["package"],
                manual=bool(entry.get("manual", False)),
                instructions=tuple(entry.get("instructions") or ()),
            )
        raise CatalogError(f"Invalid package entry for {feature} on {platform.value}: {entry!r}")

    def _parse_entry(self, feature: str, platform: Platform,
                     entry: Any) -> Optional[Tuple[PackageRequirement, ...]]:
        """Parse one platform entry; None stands for unsupported"""
        if entry == UNSUPPORTED_MARKER:
            return None
        if not isinstance(entry, list):
            raise CatalogError(
                f"Packages for {feature} on {platform.value} must be a list "
                f"or '{UNSUPPORTED_MARKER}', got {entry!r}")
        return tuple(self._parse_requirement(feature, platform, item) for item in entry)

    def check_coverage(self) -> List[Tuple[str, Platform]]:
        """
        Check the table covers the full feature x platform matrix

        Returns:
            (feature, platform) pairs with no declaration, empty when complete
        """
        missing = []
        for name in self._features:
            for platform in SUPPORTED_PLATFORMS:
                if platform not in self._table[name]:
                    missing.append((name, platform))
        return missing

    def features(self) -> List[str]:
        """Declared feature names in declaration order"""
        return list(self._features.keys())

    def get_feature(self, name: str) -> Feature:
        if name not in self._features:
            raise CatalogError(f"Unknown feature: {name}")
        return self._features[name]

    def resolve(self, platform: Platform, feature: FeatureRef) -> Resolution:
        """
        Look up the requirements of a feature on a platform

        Args:
            platform: Supported platform
            feature: Feature name or Feature

        Returns:
            Resolution with either requirements or the unsupported marker set
        """
        name = feature.name if isinstance(feature, Feature) else feature
        declared = self.get_feature(name)
        if platform not in SUPPORTED_PLATFORMS:
            raise CatalogError(f"Cannot resolve {name} for platform {platform.value}")
        if platform not in self._table[name]:
            raise CatalogError(f"No declaration for {name} on {platform.value}")

        requirements = self._table[name][platform]
        if requirements is None:
            return Resolution(feature=declared, platform=platform, unsupported=True)
        return Resolution(feature=declared, platform=platform, requirements=requirements)

    def resolve_all(self, platform: Platform, features: Iterable[FeatureRef]) -> List[Resolution]:
        return [self.resolve(platform, feature) for feature in features]

    def toolchain(self, platform: Platform) -> Tuple[PackageRequirement, ...]:
        """Packages always required on the platform, independent of features"""
        packages = self.config.get_platform_config(platform.value).get("toolchain") or []
        return tuple(self._parse_requirement("toolchain", platform, item) for item in packages)

    def required_packages(self, platform: Platform,
                          features: Iterable[FeatureRef]) -> List[PackageRequirement]:
        """
        Collect toolchain and feature requirements for a platform

        Unsupported features contribute nothing. Packages shared by several
        features are listed once, at their first occurrence.
        """
        requirements: List[PackageRequirement] = []
        seen = set()
        candidates = list(self.toolchain(platform))
        for resolution in self.resolve_all(platform, features):
            candidates.extend(resolution.requirements)
        for requirement in candidates:
            if requirement.package not in seen:
                seen.add(requirement.package)
                requirements.append(requirement)
        return requirements


__all__ = ["PackageCatalog", "UNSUPPORTED_MARKER"]
