#!/usr/bin/env python3
"""
Main entry point for ffbuild
Supports macOS (Homebrew), Linux (Debian/Ubuntu) and Windows (MSYS2)
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from .build_types.configuration import (Advisory, AdvisoryKind, InstallReport, Platform,
                                        PlatformInfo, RunReport, Stage, SUPPORTED_PLATFORMS)
from .build_types.exceptions import FFBuildError, PackageInstallError
from .builders import FFmpegBuilder
from .catalog import PackageCatalog
from .config import ConfigLoader
from .flags import FlagComposer
from .installers import get_installer
from .platform import PlatformDetector
from .utils import CommandRunner, Logger


class BuildSystem:
    """Runs the linear detect -> resolve -> install -> compose -> build pipeline"""

    builder_class = FFmpegBuilder

    def __init__(self,
                 source_dir: Optional[Path] = None,
                 prefix: Optional[str] = None,
                 platform: str = "auto",
                 arch: str = "auto",
                 features: Optional[List[str]] = None,
                 without: Optional[List[str]] = None,
                 config_dir: Optional[Path] = None,
                 jobs: Optional[int] = None,
                 verbose: bool = False,
                 dry_run: bool = False,
                 log_file: Optional[str] = None,
                 logger: Any = None,
                 runner: Optional[CommandRunner] = None,
                 detector: Optional[PlatformDetector] = None):
        """
        Initialize the build system

        Args:
            source_dir: FFmpeg source tree, defaults to the source_dir build option
            prefix: Install prefix, defaults to the platform prefix
            platform: Target platform (auto, macos, linux, windows)
            arch: Target architecture (auto or a normalized arch name)
            features: Restrict the build to these features
            without: Drop these features
            config_dir: Directory holding features.yaml and platforms.yaml
            jobs: Parallel compile jobs, defaults to the CPU count
            verbose: Enable verbose output
            dry_run: Log mutating commands instead of running them
            log_file: Optional log file path
        """
        supported = [p.value for p in SUPPORTED_PLATFORMS]
        if platform != "auto" and platform not in supported:
            raise ValueError(f"Unsupported platform: {platform}. "
                             f"Supported: {', '.join(supported)}")

        self.logger = logger or Logger(verbose=verbose, log_file=log_file)
        self.runner = runner or CommandRunner(self.logger, dry_run=dry_run)
        self.detector = detector or PlatformDetector()
        self.requested_platform = platform
        self.requested_arch = arch
        self.prefix = prefix
        self.jobs = jobs

        self.config = ConfigLoader(config_dir)
        self.catalog = PackageCatalog(self.config)
        self.composer = FlagComposer(self.catalog, self.config)
        self.source_dir = Path(source_dir or self.config.get_option("source_dir", "FFmpeg"))
        self.features = self._select_features(features, without)

    def _select_features(self, features: Optional[List[str]],
                         without: Optional[List[str]]) -> List[str]:
        """Selected feature names, in catalog declaration order"""
        declared = self.catalog.features()
        for name in (features or []) + (without or []):
            if name not in declared:
                raise ValueError(f"Unknown feature: {name}. "
                                 f"Available: {', '.join(declared)}")

        selected = [name for name in declared if not features or name in features]
        return [name for name in selected if name not in (without or [])]

    def detect(self) -> PlatformInfo:
        """Detect the host, or honour an explicit platform override"""
        if self.requested_platform == "auto":
            info = self.detector.require_supported()
        else:
            detected = self.detector.detect()
            info = PlatformInfo(platform=Platform(self.requested_platform),
                                arch=detected.arch, system=detected.system)
        if self.requested_arch != "auto":
            info = PlatformInfo(platform=info.platform, arch=self.requested_arch,
                                system=info.system)
        return info

    def run(self) -> RunReport:
        """
        Run the whole pipeline

        Returns:
            RunReport; stage is DONE on success and FAILED otherwise
        """
        report = RunReport()
        builder = None

        try:
            report.stage = Stage.DETECTING
            info = self.detect()
            report.platform = info
            self.logger.info(f"Platform: {self.config.get_display_name(info.platform.value)} "
                             f"({info.arch})")

            report.stage = Stage.RESOLVING
            resolutions = self.catalog.resolve_all(info.platform, self.features)
            for resolution in resolutions:
                if resolution.unsupported:
                    report.advise(AdvisoryKind.UNSUPPORTED_FEATURE, resolution.feature.name,
                                  f"{resolution.feature.name} is not available on "
                                  f"{info.platform.value}")
            requirements = self.catalog.required_packages(info.platform, self.features)
            self.logger.info(f"Resolved {len(requirements)} package(s) for "
                             f"{len(self.features)} feature(s)")

            report.stage = Stage.INSTALLING
            installer = get_installer(info.platform, self.config, self.runner, self.logger)
            try:
                install_report = installer.ensure(requirements)
            except PackageInstallError as e:
                report.install_report = e.report
                raise
            report.install_report = install_report
            self._advise_manual(report, resolutions, install_report)

            report.stage = Stage.COMPOSING
            flag_set = self.composer.compose(info.platform, self.features, install_report,
                                             arch=info.arch, prefix=self.prefix)
            report.flag_set = flag_set
            self.logger.info(f"Enabled {len(flag_set.enabled_features)} feature(s)")
            self.logger.debug(f"Configure flags: {' '.join(flag_set.flags)}")

            report.stage = Stage.BUILDING
            platform_config = self.config.get_platform_config(info.platform.value)
            builder = self.builder_class(
                source_dir=self.source_dir,
                flag_set=flag_set,
                runner=self.runner,
                logger=self.logger,
                privilege_command=platform_config.get("privilege_command"),
                options={
                    "clean_targets": self.config.get_option("clean_targets", ["clean", "distclean"]),
                    "fetch_submodules": self.config.get_option("fetch_submodules", False),
                    "jobs": self.jobs,
                },
            )
            builder.execute()

            report.stage = Stage.DONE
        except FFBuildError as e:
            report.failed_stage = report.stage
            report.stage = Stage.FAILED
            report.error = str(e)
            report.diagnostics = getattr(e, "output", "") or None
            if report.diagnostics:
                self.logger.raw(report.diagnostics)
        finally:
            if builder is not None:
                for failure in builder.clean_failures:
                    report.advise(AdvisoryKind.CLEAN_FAILURE, "clean", failure)

        self._log_summary(report)
        return report

    def _advise_manual(self, report: RunReport, resolutions, install_report: InstallReport) -> None:
        for resolution in resolutions:
            for requirement in resolution.requirements:
                if requirement.package in install_report.manual:
                    report.advise(
                        AdvisoryKind.MANUAL_DEPENDENCY, resolution.feature.name,
                        f"{requirement.package} must be installed manually; "
                        f"{' '.join(resolution.feature.flags)} omitted",
                        list(requirement.instructions))

    def _log_summary(self, report: RunReport) -> None:
        for advisory in report.advisories:
            self._log_advisory(advisory)

        if report.stage == Stage.DONE:
            self.logger.success(
                f"FFmpeg built successfully with {len(report.flag_set.enabled_features)} "
                f"feature(s), installed to {report.flag_set.prefix}")
        else:
            stage = report.failed_stage.value if report.failed_stage else "unknown"
            self.logger.error(f"Build failed during {stage}: {report.error}")

    def _log_advisory(self, advisory: Advisory) -> None:
        self.logger.warning(f"[{advisory.kind.value}] {advisory.subject}: {advisory.message}")
        for step in advisory.instructions:
            self.logger.info(f"  {step}")

    def show_features(self) -> None:
        """Show the feature table for the target platform"""
        from . import __version__

        info = self.detect()
        print(f"\nffbuild v{__version__} (feature table v{self.config.version})")
        print(f"{'='*50}")
        print(f"Platform: {self.config.get_display_name(info.platform.value)} ({info.arch})")
        print(f"Source Directory: {self.source_dir}")
        print(f"\nFeatures ({len(self.features)}):")

        for resolution in self.catalog.resolve_all(info.platform, self.features):
            if resolution.unsupported:
                packages = "[X] unsupported"
            else:
                packages = " ".join(
                    r.package + (" (manual)" if r.manual else "")
                    for r in resolution.requirements) or "-"
            print(f"  - {resolution.feature.name:20} {packages}")


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface"""
    parser = argparse.ArgumentParser(
        description="ffbuild - install FFmpeg build dependencies and build FFmpeg from source",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Full build with every feature
  %(prog)s --dry-run -v                     # Show what would be installed and run
  %(prog)s --without libfdk-aac             # Skip a feature
  %(prog)s --list-features                  # Show the feature table
        """
    )

    parser.add_argument(
        "--platform",
        choices=["auto"] + [p.value for p in SUPPORTED_PLATFORMS],
        default="auto",
        help="Target platform (default: auto-detect)"
    )

    parser.add_argument(
        "--arch",
        default="auto",
        help="Target architecture (default: auto-detect)"
    )

    parser.add_argument(
        "--source-dir",
        type=Path,
        default=os.environ.get("FFBUILD_SOURCE_DIR"),
        help="FFmpeg source directory (env: FFBUILD_SOURCE_DIR)"
    )

    parser.add_argument(
        "--prefix",
        default=os.environ.get("FFBUILD_PREFIX"),
        help="Installation prefix (env: FFBUILD_PREFIX)"
    )

    parser.add_argument(
        "--feature",
        action="append",
        help="Only build this feature (can be used multiple times)"
    )

    parser.add_argument(
        "--without",
        action="append",
        help="Drop this feature (can be used multiple times)"
    )

    parser.add_argument(
        "--jobs", "-j",
        type=int,
        default=os.environ.get("FFBUILD_MAX_JOBS") or None,
        help="Parallel compile jobs (default: CPU count, env: FFBUILD_MAX_JOBS)"
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory with features.yaml and platforms.yaml"
    )

    parser.add_argument(
        "--log-file",
        help="Write a full debug log to this file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log installs and build steps without running them"
    )

    parser.add_argument(
        "--list-features",
        action="store_true",
        help="Show the feature table for the platform and exit"
    )

    args = parser.parse_args(argv)

    try:
        bs = BuildSystem(
            source_dir=args.source_dir,
            prefix=args.prefix,
            platform=args.platform,
            arch=args.arch,
            features=args.feature,
            without=args.without,
            config_dir=args.config_dir,
            jobs=args.jobs,
            verbose=args.verbose,
            dry_run=args.dry_run,
            log_file=args.log_file
        )
    except (FFBuildError, ValueError, FileNotFoundError) as e:
        print(f"Error initializing ffbuild: {e}", file=sys.stderr)
        return 1

    try:
        if args.list_features:
            bs.show_features()
            return 0
        return bs.run().exit_code
    except FFBuildError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nBuild interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
