"""
Platform detection
"""

import os
import platform
from typing import Mapping, Optional

from ..build_types.configuration import Platform, PlatformInfo
from ..build_types.exceptions import UnsupportedPlatformError


class PlatformDetector:
    """Detects the host OS family and CPU architecture"""

    # uname prefixes reported by the MSYS2, MinGW and Cygwin runtimes
    COMPAT_LAYER_PREFIXES = ("MINGW", "MSYS", "CYGWIN")

    def __init__(self,
                 system: Optional[str] = None,
                 machine: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize detector

        Args:
            system: OS identifier, defaults to platform.system()
            machine: Machine identifier, defaults to platform.machine()
            environ: Environment to inspect, defaults to os.environ
        """
        self.system = system if system is not None else platform.system()
        self.machine = machine if machine is not None else platform.machine()
        self.environ = environ if environ is not None else os.environ

    def detect(self) -> PlatformInfo:
        """
        Detect current platform and architecture

        Returns:
            PlatformInfo; platform is UNSUPPORTED for unrecognized systems
        """
        return PlatformInfo(
            platform=self._get_platform(),
            arch=self._get_architecture(),
            system=self.system,
        )

    def require_supported(self) -> PlatformInfo:
        """Detect and raise UnsupportedPlatformError unless the host is supported"""
        info = self.detect()
        if info.platform == Platform.UNSUPPORTED:
            raise UnsupportedPlatformError(self.system or "<empty>")
        return info

    def _get_platform(self) -> Platform:
        """Get normalized platform"""
        system = self.system or ""

        if system == "Darwin":
            return Platform.MACOS
        elif system == "Linux":
            return Platform.LINUX
        elif system.upper().startswith(self.COMPAT_LAYER_PREFIXES):
            return Platform.WINDOWS
        elif system == "Windows" and self.environ.get("MSYSTEM"):
            # MinGW Python reports plain "Windows" but runs inside MSYS2
            return Platform.WINDOWS
        return Platform.UNSUPPORTED

    def _get_architecture(self) -> str:
        """Get normalized architecture"""
        machine = (self.machine or "").lower()

        if machine in ["x86_64", "amd64", "x64"]:
            return "x64"
        elif machine in ["aarch64", "arm64"]:
            return "aarch64"
        elif machine in ["i386", "i686", "x86"]:
            return "x86"
        return machine or "unknown"


__all__ = ["PlatformDetector"]
