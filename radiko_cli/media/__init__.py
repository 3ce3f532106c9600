"""
Media Processing Layer.

This package is responsible for building the ffmpeg invocation that records a
timefree program, running it, and validating the recorded file.
"""

from .downloader import RadikoDownloader, StreamDescriptor
from .ffmpeg import FFmpeg, FFmpegCommand, FFmpegFactory
from .integrity import FileIntegrityChecker

__all__ = [
    "FFmpeg",
    "FFmpegCommand",
    "FFmpegFactory",
    "FileIntegrityChecker",
    "RadikoDownloader",
    "StreamDescriptor",
]
