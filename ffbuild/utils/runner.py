"""
External process execution
"""

import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional


class CommandRunner:
    """Runs external commands with logging and dry-run support.

    Every process ffbuild spawns (package manager queries and installs,
    configure, make) goes through run(), so tests can substitute a recorder.
    """

    def __init__(self, logger: Any, dry_run: bool = False):
        """
        Initialize runner

        Args:
            logger: Logger instance
            dry_run: If True, mutating commands are logged but not executed
        """
        self.logger = logger
        self.dry_run = dry_run

    def run(self,
            cmd: List[str],
            cwd: Optional[Path] = None,
            env: Optional[Dict[str, str]] = None,
            check: bool = False,
            capture_output: bool = False,
            mutating: bool = True) -> subprocess.CompletedProcess:
        """
        Run a command with logging

        Args:
            cmd: Command and arguments
            cwd: Working directory
            env: Full environment for the child, inherits ours when None
            check: Raise CalledProcessError on non-zero exit
            capture_output: Capture stdout/stderr instead of streaming them
            mutating: False for read-only queries, which also run in dry-run mode

        Returns:
            CompletedProcess instance; a missing executable yields returncode 127,
            one that cannot be executed yields 126
        """
        cmd_str = " ".join(str(c) for c in cmd)
        self.logger.debug(f"Running: {cmd_str}")
        if cwd:
            self.logger.debug(f"  in: {cwd}")

        if self.dry_run and mutating:
            self.logger.info(f"[DRY RUN] Would run: {cmd_str}")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        try:
            result = subprocess.run(
                [str(c) for c in cmd],
                cwd=str(cwd) if cwd else None,
                env=env,
                check=check,
                capture_output=capture_output,
                text=True
            )
        except FileNotFoundError:
            self.logger.debug(f"Executable not found: {cmd[0]}")
            if check:
                raise
            return subprocess.CompletedProcess(cmd, 127, "", f"{cmd[0]}: command not found\n")
        except OSError as e:
            # Not executable (missing exec bit, wrong format): the shell's 126
            self.logger.debug(f"Cannot execute {cmd[0]}: {e}")
            if check:
                raise
            return subprocess.CompletedProcess(cmd, 126, "", f"{cmd[0]}: {e.strerror or e}\n")
        except subprocess.CalledProcessError as e:
            self.logger.error(f"Command failed: {cmd_str}")
            if e.stdout:
                self.logger.error(f"stdout: {e.stdout}")
            if e.stderr:
                self.logger.error(f"stderr: {e.stderr}")
            raise

        if capture_output and result.stdout:
            self.logger.debug(f"Output: {result.stdout}")

        return result


__all__ = ["CommandRunner"]
