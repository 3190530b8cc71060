"""
APT installer implementation
"""

from typing import List, Optional

from .base_installer import BaseInstaller


class AptInstaller(BaseInstaller):
    """Installer for Debian/Ubuntu packages"""

    executable = "apt-get"
    needs_privilege = True

    def query_command(self, package: str) -> List[str]:
        return ["dpkg-query", "-W", "-f=${Status}", package]

    def _query_succeeded(self, result) -> bool:
        # Removed packages keep a "deinstall ok config-files" status
        return result.returncode == 0 and "install ok installed" in (result.stdout or "")

    def install_command(self, packages: List[str]) -> List[str]:
        # env rather than the parent environment: sudo resets it
        return ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", *packages]

    def refresh_command(self) -> Optional[List[str]]:
        return ["apt-get", "update"]
