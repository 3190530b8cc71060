"""Holds exceptions used by ffbuild"""

from typing import List, Optional


class FFBuildError(Exception):
    """Base class for fatal orchestration errors"""

    stage: str = "failed"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class UnsupportedPlatformError(FFBuildError):
    """Raised when the host OS is not one of the supported platforms"""

    stage = "detecting"

    def __init__(self, system: str):
        super().__init__(f"Unsupported platform: {system}")
        self.system = system


class CatalogError(FFBuildError):
    """Raised when the feature catalog is incomplete or queried for an undeclared pair.

    This is always a bug in the feature table, never a host condition."""

    stage = "resolving"


class PackageInstallError(FFBuildError):
    """Raised when the package manager fails for one or more required packages"""

    stage = "installing"

    def __init__(self, platform: str, packages: List[str], output: str = "",
                 message: Optional[str] = None):
        super().__init__(
            message or f"Failed to install {', '.join(packages)} on {platform}")
        self.platform = platform
        self.packages = list(packages)
        self.output = output
        self.report = None


class SourceDirectoryError(FFBuildError):
    """Raised when the framework source tree is absent or not fetched"""

    stage = "building"


class ExternalBuildError(FFBuildError):
    """Raised when configure, compile or install exits non-zero.

    ``output`` holds the tool's diagnostics exactly as the tool printed them."""

    stage = "building"

    def __init__(self, step: str, returncode: int, output: str = ""):
        super().__init__(f"{step} failed with exit code {returncode}")
        self.step = step
        self.returncode = returncode
        self.output = output
