"""Contains models passed between the detector, catalog, installer, composer and driver"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Host operating system family"""
    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"
    """Windows through an MSYS2, MinGW or Cygwin compat layer"""
    UNSUPPORTED = "unsupported"


SUPPORTED_PLATFORMS: Tuple[Platform, ...] = (Platform.MACOS, Platform.LINUX, Platform.WINDOWS)


class Stage(str, Enum):
    """Orchestrator pipeline stage"""
    DETECTING = "detecting"
    RESOLVING = "resolving"
    INSTALLING = "installing"
    COMPOSING = "composing"
    BUILDING = "building"
    DONE = "done"
    FAILED = "failed"


class PlatformInfo(BaseModel):
    """Result of host introspection"""
    model_config = ConfigDict(frozen=True)

    platform: Platform
    arch: str
    system: str
    """Raw OS identifier the platform was derived from"""


class Feature(BaseModel):
    """An optional capability of the framework, gated behind configure flags"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    flags: Tuple[str, ...] = ()
    """Configure tokens emitted when the feature is enabled"""


class PackageRequirement(BaseModel):
    """A native package needed on a platform"""
    model_config = ConfigDict(frozen=True)

    platform: Platform
    package: str
    manual: bool = False
    """True when no package manager on this platform provides the package"""
    instructions: Tuple[str, ...] = ()
    """Steps printed to the user when a manual package is missing"""


class Resolution(BaseModel):
    """Catalog answer for one (platform, feature) pair"""
    model_config = ConfigDict(frozen=True)

    feature: Feature
    platform: Platform
    requirements: Tuple[PackageRequirement, ...] = ()
    unsupported: bool = False


class PackageStatus(str, Enum):
    """Outcome of ensuring a single package"""
    ALREADY_INSTALLED = "already_installed"
    INSTALLED = "installed"
    MANUAL = "manual"
    FAILED = "failed"


class PackageResult(BaseModel):
    """Per-package entry of an install report"""
    package: str
    status: PackageStatus
    manual: bool = False
    instructions: Tuple[str, ...] = ()
    output: str = ""
    """Package manager output, kept for failed installs"""

    @property
    def satisfied(self) -> bool:
        return self.status in (PackageStatus.ALREADY_INSTALLED, PackageStatus.INSTALLED)


class InstallReport(BaseModel):
    """What the package installer found and did on one platform"""
    platform: Platform
    results: Dict[str, PackageResult] = Field(default_factory=dict)
    invocations: int = 0
    """Number of package manager install/refresh invocations"""

    def is_satisfied(self, package: str) -> bool:
        result = self.results.get(package)
        return result is not None and result.satisfied

    @property
    def satisfied(self) -> List[str]:
        return [name for name, result in self.results.items() if result.satisfied]

    @property
    def manual(self) -> List[str]:
        return [name for name, result in self.results.items()
                if result.status == PackageStatus.MANUAL]

    @property
    def failed(self) -> List[str]:
        return [name for name, result in self.results.items()
                if result.status == PackageStatus.FAILED]


class ConfigurationFlagSet(BaseModel):
    """Flags and environment handed whole to the build driver"""
    model_config = ConfigDict(frozen=True)

    platform: Platform
    prefix: str
    flags: Tuple[str, ...]
    env: Dict[str, str]
    enabled_features: Tuple[str, ...] = ()
    omitted_features: Dict[str, str] = Field(default_factory=dict)
    """Feature name to the reason it was left out"""


class AdvisoryKind(str, Enum):
    """Kinds of non-fatal conditions collected during a run"""
    MANUAL_DEPENDENCY = "manual_dependency"
    UNSUPPORTED_FEATURE = "unsupported_feature"
    CLEAN_FAILURE = "clean_failure"


class Advisory(BaseModel):
    """A non-fatal condition surfaced at the end of the run"""
    kind: AdvisoryKind
    subject: str
    message: str
    instructions: List[str] = Field(default_factory=list)


class RunReport(BaseModel):
    """Everything the orchestrator knows at the end of a run"""
    stage: Stage = Stage.DETECTING
    platform: Optional[PlatformInfo] = None
    advisories: List[Advisory] = Field(default_factory=list)
    install_report: Optional[InstallReport] = None
    flag_set: Optional[ConfigurationFlagSet] = None
    failed_stage: Optional[Stage] = None
    error: Optional[str] = None
    diagnostics: Optional[str] = None
    """Raw output of the external tool that failed"""

    @property
    def exit_code(self) -> int:
        return 0 if self.stage == Stage.DONE else 1

    def advise(self, kind: AdvisoryKind, subject: str, message: str,
               instructions: Optional[List[str]] = None) -> None:
        """Record a non-fatal condition"""
        self.advisories.append(Advisory(kind=kind, subject=subject, message=message,
                                        instructions=list(instructions or [])))
