"""Record radiko timefree programs with ffmpeg."""

__version__ = "0.1.0"
