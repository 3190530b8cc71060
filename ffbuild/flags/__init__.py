"""
Flag composition: configure arguments and build environment
"""

from typing import Dict, Iterable, List, Optional

from ..build_types.configuration import ConfigurationFlagSet, InstallReport, Platform
from ..catalog import FeatureRef, PackageCatalog
from ..config import ConfigLoader


def dedupe(tokens: Iterable[str]) -> List[str]:
    """Drop repeated tokens, keeping the first occurrence in place"""
    seen = set()
    result = []
    for token in tokens:
        if token not in seen:
            seen.add(token)
            result.append(token)
    return result


class FlagComposer:
    """Builds the configure flag list and child environment for one run.

    compose() reads only its arguments and the static tables it was built
    with, so identical inputs always give identical output.
    """

    def __init__(self, catalog: PackageCatalog, config: ConfigLoader):
        self.catalog = catalog
        self.config = config

    def compose(self,
                platform: Platform,
                features: Iterable[FeatureRef],
                install_report: InstallReport,
                arch: Optional[str] = None,
                prefix: Optional[str] = None) -> ConfigurationFlagSet:
        """
        Compose flags and environment

        Args:
            platform: Detected platform
            features: Requested features, in the order their flags should appear
            install_report: Report from the package installer on this platform
            arch: Normalized architecture, selects dependency roots
            prefix: Install prefix, defaults to the platform prefix

        Returns:
            ConfigurationFlagSet
        """
        if install_report.platform != platform:
            raise ValueError(f"Install report is for {install_report.platform.value}, "
                             f"not {platform.value}")

        platform_config = self.config.get_platform_config(platform.value)
        prefix = str(prefix or platform_config["prefix"])

        flags: List[str] = list(self.config.get_option("baseline_flags") or [])
        enabled: List[str] = []
        omitted: Dict[str, str] = {}

        for resolution in self.catalog.resolve_all(platform, features):
            name = resolution.feature.name
            if name in enabled or name in omitted:
                continue

            if resolution.unsupported:
                omitted[name] = f"unsupported on {platform.value}"
                continue

            missing = [r.package for r in resolution.requirements
                       if not install_report.is_satisfied(r.package)]
            if missing:
                omitted[name] = f"missing {', '.join(missing)}"
                continue

            flags.extend(resolution.feature.flags)
            enabled.append(name)

        flags.extend(platform_config.get("platform_flags") or [])

        roots = dedupe(self.config.get_dependency_roots(platform.value, arch) + [prefix])
        flags.append("--extra-cflags=" + " ".join(f"-I{root}/include" for root in roots))
        flags.append("--extra-ldflags=" + " ".join(f"-L{root}/lib" for root in roots))

        optimization = self.config.get_option("optimization_flags", "")
        env = {
            "PKG_CONFIG_PATH": ":".join(f"{root}/lib/pkgconfig" for root in roots),
            "CFLAGS": optimization,
            "LDFLAGS": optimization,
            "PATH": f"{prefix}/bin",
        }

        return ConfigurationFlagSet(
            platform=platform,
            prefix=prefix,
            flags=tuple(dedupe(flags)),
            env=env,
            enabled_features=tuple(enabled),
            omitted_features=omitted,
        )


__all__ = ["FlagComposer", "dedupe"]
