"""
FFmpeg builder implementation
"""

import os
from pathlib import Path

from ..build_types.exceptions import ExternalBuildError, SourceDirectoryError
from .base_builder import BaseBuilder


class FFmpegBuilder(BaseBuilder):
    """Builder for FFmpeg's configure + make tree"""

    make_cmd = "make"

    def check_source(self) -> None:
        super().check_source()
        if not (self.source_dir / "configure").exists():
            raise SourceDirectoryError(
                f"No configure script in {self.source_dir}; "
                f"is the source checked out? (git submodule update --init --recursive)")

    def fetch_submodules(self, root: Path) -> None:
        """Update git submodules of the project containing the source tree"""
        self.logger.info("Updating git submodules...")
        result = self.runner.run(["git", "submodule", "update", "--init", "--recursive"],
                                 cwd=root)
        if result.returncode != 0:
            raise ExternalBuildError("submodules", result.returncode)

    def execute(self) -> int:
        if self.options.get("fetch_submodules"):
            self.fetch_submodules(Path(self.options.get("submodule_root") or Path.cwd()))
        return super().execute()

    def clean(self) -> None:
        """Run make clean/distclean; failures are recorded, never raised"""
        if not (self.source_dir / "Makefile").exists():
            self.logger.debug("No Makefile, nothing to clean")
            return

        for target in self.options.get("clean_targets", ["clean", "distclean"]):
            result = self.run_command([self.make_cmd, target], capture_output=True)
            if result.returncode != 0:
                message = f"make {target} exited with {result.returncode}"
                self.logger.debug(message)
                self.clean_failures.append(message)

    def configure(self) -> None:
        cmd = ["./configure", f"--prefix={self.prefix}", *self.flag_set.flags]
        result = self.run_command(cmd, capture_output=True)
        output = (result.stdout or "") + (result.stderr or "")

        if result.returncode != 0:
            raise ExternalBuildError("configure", result.returncode, output)

        self.logger.debug(output)

    def jobs(self) -> int:
        return int(self.options.get("jobs") or os.cpu_count() or 1)

    def build(self) -> None:
        # Output streams straight to the terminal
        result = self.run_command([self.make_cmd, f"-j{self.jobs()}"])
        if result.returncode != 0:
            raise ExternalBuildError("compile", result.returncode)

    def install(self) -> None:
        result = self.run_command(self._privileged([self.make_cmd, "install"]))
        if result.returncode != 0:
            raise ExternalBuildError("install", result.returncode)
