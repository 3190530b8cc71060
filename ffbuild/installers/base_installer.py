"""
Base installer class that all package manager installers inherit from
"""

import os
import shutil
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from ..build_types.configuration import (InstallReport, PackageRequirement, PackageResult,
                                         PackageStatus, Platform)
from ..build_types.exceptions import PackageInstallError
from ..utils.runner import CommandRunner


class BaseInstaller(ABC):
    """Abstract base class for native package manager installers"""

    executable: str = ""
    """Package manager binary that must be on PATH before installing"""
    needs_privilege: bool = False
    """Whether install and refresh commands run through the privilege command"""

    def __init__(self,
                 platform: Platform,
                 config: Dict[str, Any],
                 runner: CommandRunner,
                 logger: Any,
                 batch: bool = False):
        """
        Initialize base installer

        Args:
            platform: Platform the installer runs on
            config: Platform configuration (platforms.yaml entry)
            runner: Command runner
            logger: Logger instance
            batch: Install all missing packages with one invocation
        """
        self.platform = platform
        self.config = config
        self.runner = runner
        self.logger = logger
        self.batch = batch
        self.privilege_command = list(config.get("privilege_command") or [])

    @abstractmethod
    def query_command(self, package: str) -> List[str]:
        """Command that checks whether a package is installed"""
        pass

    @abstractmethod
    def install_command(self, packages: List[str]) -> List[str]:
        """Command that installs the given packages"""
        pass

    def refresh_command(self) -> Optional[List[str]]:
        """Command that refreshes the package index, if the manager has one"""
        return None

    def _query_succeeded(self, result) -> bool:
        return result.returncode == 0

    def _privileged(self, cmd: List[str]) -> List[str]:
        if not self.needs_privilege or _is_root():
            return cmd
        return self.privilege_command + cmd

    def is_available(self) -> bool:
        """Check the package manager executable is on PATH"""
        return shutil.which(self.executable) is not None

    def is_installed(self, requirement: PackageRequirement) -> bool:
        """
        Check whether a requirement is already satisfied

        Manual packages are installed outside the package manager, so they are
        looked up through pkg-config instead.
        """
        if requirement.manual:
            result = self.runner.run(["pkg-config", "--exists", requirement.package],
                                     capture_output=True, mutating=False)
            return result.returncode == 0

        result = self.runner.run(self.query_command(requirement.package),
                                 capture_output=True, mutating=False)
        return self._query_succeeded(result)

    def ensure(self, requirements: Iterable[PackageRequirement]) -> InstallReport:
        """
        Ensure every requirement is present, installing only what is missing

        Args:
            requirements: Requirements for this installer's platform

        Returns:
            InstallReport with one result per distinct package

        Raises:
            PackageInstallError: if the package manager failed for any package;
                the exception carries the report in ``report``
        """
        report = InstallReport(platform=self.platform)
        pending: List[PackageRequirement] = []
        manual: List[PackageRequirement] = []
        seen = set()

        for requirement in requirements:
            package = requirement.package
            if package in seen:
                continue
            seen.add(package)

            if requirement.manual:
                manual.append(requirement)
            elif self.is_installed(requirement):
                self.logger.debug(f"{package} already installed")
                report.results[package] = PackageResult(
                    package=package, status=PackageStatus.ALREADY_INSTALLED)
            else:
                pending.append(requirement)

        if pending:
            self.logger.info(f"Installing {len(pending)} package(s) with {self.executable}: "
                             f"{' '.join(r.package for r in pending)}")
            self._ensure_manager(report)
            self.refresh(report)
            if self.batch:
                self._install_batch(pending, report)
            else:
                for requirement in pending:
                    self._install_one(requirement, report)
        else:
            self.logger.info("All required packages already installed")

        # pkg-config may itself be among the pending toolchain packages
        for requirement in manual:
            self._check_manual(requirement, report)

        failed = report.failed
        if failed:
            output = "\n".join(report.results[p].output for p in failed if report.results[p].output)
            error = PackageInstallError(self.platform.value, failed, output)
            error.report = report
            raise error

        return report

    def refresh(self, report: InstallReport) -> None:
        """Refresh the package index before installing"""
        cmd = self.refresh_command()
        if not cmd:
            return

        self.logger.info(f"Refreshing {self.executable} package index...")
        result = self.runner.run(self._privileged(cmd), capture_output=True)
        report.invocations += 1
        if result.returncode != 0:
            raise PackageInstallError(
                self.platform.value, [], _output(result),
                message=f"{' '.join(cmd)} failed with exit code {result.returncode}")

    def _ensure_manager(self, report: InstallReport) -> None:
        """Make sure the package manager exists, bootstrapping it if configured"""
        if self.is_available():
            return

        bootstrap = (self.config.get("bootstrap") or {}).get("command")
        if not bootstrap:
            raise PackageInstallError(
                self.platform.value, [], "",
                message=f"{self.executable} not found. Install it and re-run.")

        self.logger.warning(f"{self.executable} not found. Installing {self.executable}...")
        result = self.runner.run(list(bootstrap), capture_output=True)
        report.invocations += 1
        if result.returncode != 0:
            raise PackageInstallError(
                self.platform.value, [self.executable], _output(result),
                message=f"Failed to bootstrap {self.executable}")

        if not self.runner.dry_run and not self.is_available():
            raise PackageInstallError(
                self.platform.value, [self.executable], "",
                message=f"{self.executable} was installed but is not on PATH")

    def _check_manual(self, requirement: PackageRequirement, report: InstallReport) -> None:
        package = requirement.package
        if self.is_installed(requirement):
            self.logger.debug(f"{package} already installed")
            report.results[package] = PackageResult(
                package=package, status=PackageStatus.ALREADY_INSTALLED, manual=True)
            return

        self.logger.warning(f"{package} is not available through {self.executable} "
                            f"and must be installed manually")
        for step in requirement.instructions:
            self.logger.info(f"  {step}")
        report.results[package] = PackageResult(
            package=package, status=PackageStatus.MANUAL, manual=True,
            instructions=requirement.instructions)

    def _install_one(self, requirement: PackageRequirement, report: InstallReport) -> None:
        package = requirement.package
        result = self.runner.run(self._privileged(self.install_command([package])),
                                 capture_output=True)
        report.invocations += 1

        if result.returncode == 0:
            self.logger.debug(f"Installed {package}")
            report.results[package] = PackageResult(package=package, status=PackageStatus.INSTALLED)
        else:
            self.logger.error(f"Failed to install {package} (exit code {result.returncode})")
            report.results[package] = PackageResult(
                package=package, status=PackageStatus.FAILED, output=_output(result))

    def _install_batch(self, pending: List[PackageRequirement], report: InstallReport) -> None:
        packages = [r.package for r in pending]
        result = self.runner.run(self._privileged(self.install_command(packages)),
                                 capture_output=True)
        report.invocations += 1

        if result.returncode == 0:
            for package in packages:
                report.results[package] = PackageResult(package=package,
                                                        status=PackageStatus.INSTALLED)
            return

        # Attribute the batch failure to whichever packages are still missing
        output = _output(result)
        for requirement in pending:
            if self.is_installed(requirement):
                status = PackageStatus.INSTALLED
            else:
                status = PackageStatus.FAILED
                self.logger.error(f"Failed to install {requirement.package}")
            report.results[requirement.package] = PackageResult(
                package=requirement.package, status=status,
                output=output if status == PackageStatus.FAILED else "")


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def _output(result) -> str:
    return (result.stdout or "") + (result.stderr or "")
