"""
Base builder class for the downstream build system
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..build_types.configuration import ConfigurationFlagSet
from ..build_types.exceptions import ExternalBuildError, SourceDirectoryError
from ..utils.runner import CommandRunner


class BaseBuilder(ABC):
    """Abstract base class that sequences a fail-fast source build"""

    def __init__(self,
                 source_dir: Path,
                 flag_set: ConfigurationFlagSet,
                 runner: CommandRunner,
                 logger: Any,
                 privilege_command: Optional[List[str]] = None,
                 options: Optional[Dict[str, Any]] = None):
        """
        Initialize base builder

        Args:
            source_dir: Framework source tree
            flag_set: Composed flags and environment
            runner: Command runner
            logger: Logger instance
            privilege_command: Prefix for commands that write outside the user's area
            options: Build options (clean_targets, fetch_submodules, jobs)
        """
        self.source_dir = Path(source_dir).expanduser().resolve()
        self.flag_set = flag_set
        self.prefix = Path(flag_set.prefix)
        self.runner = runner
        self.logger = logger
        self.privilege_command = list(privilege_command or [])
        self.options = options or {}
        self.clean_failures: List[str] = []

        self.env = self._setup_environment()

    def _setup_environment(self) -> Dict[str, str]:
        """Child environment: ours, overlaid with the composed variables"""
        env = os.environ.copy()
        for key, value in self.flag_set.env.items():
            if key == "PATH" and env.get("PATH"):
                env["PATH"] = value + os.pathsep + env["PATH"]
            else:
                env[key] = value
        return env

    def run_command(self, cmd: List[str], capture_output: bool = False):
        """Run a command inside the source tree with the build environment"""
        return self.runner.run(cmd, cwd=self.source_dir, env=self.env,
                               capture_output=capture_output)

    def needs_privilege(self, path: Path) -> bool:
        """Check whether writing below path requires the privilege command"""
        if hasattr(os, "geteuid") and os.geteuid() == 0:
            return False
        existing = path
        while not existing.exists() and existing != existing.parent:
            existing = existing.parent
        return not os.access(existing, os.W_OK)

    def _privileged(self, cmd: List[str]) -> List[str]:
        if self.privilege_command and self.needs_privilege(self.prefix):
            return self.privilege_command + cmd
        return cmd

    def check_source(self) -> None:
        """Fail fast when the source tree is missing"""
        if not self.source_dir.is_dir():
            raise SourceDirectoryError(f"Source directory not found: {self.source_dir}")

    def ensure_prefix(self) -> None:
        """Create the install prefix, escalating privilege when needed"""
        if self.prefix.is_dir():
            return

        self.logger.info(f"Creating install prefix {self.prefix}")
        if self.privilege_command and self.needs_privilege(self.prefix):
            result = self.runner.run(self.privilege_command + ["mkdir", "-p", str(self.prefix)],
                                     capture_output=True)
            if result.returncode != 0:
                raise ExternalBuildError("prefix", result.returncode,
                                         (result.stdout or "") + (result.stderr or ""))
        elif self.runner.dry_run:
            self.logger.info(f"[DRY RUN] Would create {self.prefix}")
        else:
            try:
                self.prefix.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ExternalBuildError("prefix", 1, f"Cannot create {self.prefix}: {e}\n")

    @abstractmethod
    def clean(self) -> None:
        """Best-effort removal of previous build artifacts"""
        pass

    @abstractmethod
    def configure(self) -> None:
        """Configure the build"""
        pass

    @abstractmethod
    def build(self) -> None:
        """Compile"""
        pass

    @abstractmethod
    def install(self) -> None:
        """Install into the prefix"""
        pass

    def execute(self) -> int:
        """
        Execute the full build process

        Returns:
            0 on success; every failure raises
        """
        self.check_source()
        self.ensure_prefix()

        self.logger.info(f"Cleaning previous build in {self.source_dir}...")
        self.clean()

        self.logger.info("Configuring...")
        self.configure()

        self.logger.info("Compiling...")
        self.build()

        self.logger.info(f"Installing to {self.prefix}...")
        self.install()

        return 0
