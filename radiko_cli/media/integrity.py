"""
Provides methods for checking the integrity of recorded audio files.
"""

import logging

import mutagen
from mutagen import MutagenError

log = logging.getLogger(__name__)


class FileIntegrityChecker:
    """A collection of static methods for validating recorded files."""

    @staticmethod
    def check_audio(filepath: str) -> bool:
        """
        Performs a basic integrity check on a recorded audio file.

        Checks if the file can be opened by mutagen and has a positive duration.

        Args:
            filepath: Path to the audio file (m4a, aac, mp3, ...).

        Returns:
            True if the file appears to be valid, False otherwise.
        """
        try:
            audio = mutagen.File(filepath)
        except MutagenError as e:
            log.warning(f"Integrity check failed for '{filepath}': {e}")
            return False

        if audio is None:
            log.warning(
                f"Integrity check failed for '{filepath}': Unrecognised audio format."
            )
            return False
        if audio.info and audio.info.length > 0:
            return True
        log.warning(f"Integrity check failed for '{filepath}': No valid stream info.")
        return False

    @staticmethod
    def has_cover(filepath: str) -> bool:
        """True if an MP4 file carries embedded cover art."""
        try:
            audio = mutagen.File(filepath)
        except MutagenError as e:
            log.debug(f"Cover check failed for '{filepath}': {e}")
            return False
        return bool(audio is not None and audio.tags and audio.tags.get("covr"))
