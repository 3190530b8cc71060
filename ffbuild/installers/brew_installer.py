"""
Homebrew installer implementation
"""

from typing import List, Optional

from .base_installer import BaseInstaller


class BrewInstaller(BaseInstaller):
    """Installer for Homebrew formulae (macOS)"""

    executable = "brew"
    # Homebrew refuses to run as root
    needs_privilege = False

    def query_command(self, package: str) -> List[str]:
        return ["brew", "list", "--formula", "--versions", package]

    def _query_succeeded(self, result) -> bool:
        # `brew list --versions` prints nothing for formulae that are not installed
        return result.returncode == 0 and bool((result.stdout or "").strip())

    def install_command(self, packages: List[str]) -> List[str]:
        return ["brew", "install", *packages]

    def refresh_command(self) -> Optional[List[str]]:
        return ["brew", "update"]
