"""
Utilities for building output paths for recordings.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pathvalidate import sanitize_filename, sanitize_filepath


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


class PathFormatter:
    """
    Formats an output path template string using recording metadata.
    """

    def __init__(self, template: str) -> None:
        self.template = template

    def format_path(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
        title: Optional[str],
        file_extension: str,
    ) -> Path:
        """
        Generates a final, sanitized file path from the template.
        """
        template_vars = self._get_template_vars(
            station_id, start, end, title, file_extension
        )
        final_str = self.template.format(**template_vars)
        return Path(sanitize_filepath(final_str, platform="auto"))

    @staticmethod
    def _get_template_vars(
        station_id: str,
        start: datetime,
        end: datetime,
        title: Optional[str],
        ext: str,
    ) -> Dict[str, Any]:
        """Builds the variable dictionary for template formatting."""
        return {
            "station_id": sanitize_filename(station_id),
            "date": start.strftime("%Y%m%d"),
            "start": start.strftime("%H%M"),
            "end": end.strftime("%H%M"),
            "title": sanitize_filename(title or "radiko"),
            "ext": ext,
        }
