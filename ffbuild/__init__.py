"""
ffbuild
Installs FFmpeg's third-party libraries through the native package manager
and builds FFmpeg from source with a full feature set.
Supports macOS (Homebrew), Linux (apt) and Windows (MSYS2 pacman)
"""

__version__ = "1.0.0"
__supported_platforms__ = ["macos", "linux", "windows"]

from .main import BuildSystem

__all__ = ["BuildSystem", "__version__", "__supported_platforms__"]
