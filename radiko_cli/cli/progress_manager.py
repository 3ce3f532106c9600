"""
Manages a Rich progress bar that follows ffmpeg while a program is recorded.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from radiko_cli.media.ffmpeg import FFmpegProgress
from radiko_cli.utils.formatting import format_size


class ProgressManager:
    """
    Shows how much of the broadcast has been recorded, measured in seconds of
    audio written by ffmpeg.
    """

    def __init__(self, console: Console):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TextColumn("{task.fields[size]}"),
            "•",
            TimeElapsedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None
        self._total = 0.0

    def __enter__(self) -> "ProgressManager":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.progress.stop()

    def start_recording(self, description: str, duration_seconds: float) -> None:
        self._total = max(duration_seconds, 1.0)
        self._task_id = self.progress.add_task(
            description, total=self._total, size=format_size(0)
        )

    def update(self, progress: FFmpegProgress) -> None:
        """Progress callback handed to `FFmpeg.execute`."""
        if self._task_id is None:
            return
        self.progress.update(
            self._task_id,
            completed=progress.out_time_seconds,
            size=format_size(progress.total_size or 0),
        )
        if progress.progress == "end":
            self.progress.update(self._task_id, completed=self._total)
