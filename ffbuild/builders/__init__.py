"""
Builder components for the downstream build system
"""

from .base_builder import BaseBuilder
from .ffmpeg_builder import FFmpegBuilder

__all__ = [
    "BaseBuilder",
    "FFmpegBuilder",
]
