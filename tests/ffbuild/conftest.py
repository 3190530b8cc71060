import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Optional, Set

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from ffbuild.catalog import PackageCatalog
from ffbuild.config import ConfigLoader
from ffbuild.utils import CommandRunner, Logger


class FakeRunner(CommandRunner):
    """Records commands instead of spawning them.

    ``responder`` maps a command to a return code or a (return code, stdout)
    tuple; every command succeeds with no output by default.
    """

    def __init__(self, logger, responder: Optional[Callable] = None, dry_run: bool = False):
        super().__init__(logger, dry_run=dry_run)
        self.responder = responder or (lambda cmd: 0)
        self.calls: List[List[str]] = []
        self.cwds = []
        self.envs = []

    def run(self, cmd, cwd=None, env=None, check=False, capture_output=False, mutating=True):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        self.cwds.append(cwd)
        self.envs.append(env)
        if self.dry_run and mutating:
            return subprocess.CompletedProcess(cmd, 0, "", "")
        response = self.responder(cmd)
        if isinstance(response, tuple):
            returncode, stdout = response
        else:
            returncode, stdout = response, ""
        return subprocess.CompletedProcess(cmd, returncode, stdout, "")

    def ran(self, *prefix: str) -> List[List[str]]:
        """Recorded commands containing the given tokens in order"""
        size = len(prefix)
        return [c for c in self.calls
                if any(c[i:i + size] == list(prefix) for i in range(len(c)))]


class FakeHost:
    """Package database of a pretend host, shared by query and install commands"""

    def __init__(self, installed: Optional[Set[str]] = None, broken: Optional[Set[str]] = None):
        self.installed = set(installed or ())
        self.broken = set(broken or ())
        self.manual_present: Set[str] = set()

    def respond(self, cmd: List[str]):
        if cmd[0] == "dpkg-query":
            return (0, "install ok installed") if cmd[-1] in self.installed else (1, "")
        if cmd[:3] == ["brew", "list", "--formula"]:
            return (0, f"{cmd[-1]} 1.0") if cmd[-1] in self.installed else (1, "")
        if cmd[:2] == ["pacman", "-Q"]:
            return 0 if cmd[-1] in self.installed else 1
        if cmd[:2] == ["pkg-config", "--exists"]:
            return 0 if cmd[-1] in self.manual_present else 1

        if "install" in cmd or "-S" in cmd:
            packages = [c for c in cmd[cmd.index("install" if "install" in cmd else "-S") + 1:]
                        if not c.startswith("-")]
            failed = [p for p in packages if p in self.broken]
            self.installed.update(p for p in packages if p not in self.broken)
            if failed:
                return (100, f"E: Unable to locate package {failed[0]}")
            return 0
        return 0


@pytest.fixture
def logger():
    return Logger(verbose=True, name="ffbuild.tests")


@pytest.fixture
def config():
    return ConfigLoader()


@pytest.fixture
def catalog(config):
    return PackageCatalog(config)


@pytest.fixture
def make_runner(logger):
    def _make(responder=None, dry_run=False):
        return FakeRunner(logger, responder=responder, dry_run=dry_run)
    return _make


@pytest.fixture
def make_host():
    return FakeHost
