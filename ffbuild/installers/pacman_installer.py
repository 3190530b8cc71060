"""
pacman installer implementation
"""

from typing import List, Optional

from .base_installer import BaseInstaller


class PacmanInstaller(BaseInstaller):
    """Installer for MSYS2 packages"""

    executable = "pacman"
    needs_privilege = False

    def query_command(self, package: str) -> List[str]:
        return ["pacman", "-Q", package]

    def install_command(self, packages: List[str]) -> List[str]:
        return ["pacman", "-S", "--noconfirm", "--needed", *packages]

    def refresh_command(self) -> Optional[List[str]]:
        return ["pacman", "-Sy", "--noconfirm"]
