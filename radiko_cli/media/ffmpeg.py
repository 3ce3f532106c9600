"""
Builds and runs ffmpeg command lines.

A command is an immutable value assembled from inputs and outputs; it is
handed once to `FFmpeg.execute`, which owns the child process.
"""

import asyncio
import logging
import shutil
from collections import deque
from dataclasses import dataclass, replace
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, Sequence

from pydantic import BaseModel

from radiko_cli.exceptions import FFmpegAbnormalExitError

log = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20


@dataclass(frozen=True)
class FFmpegInput:
    """An input URL or path with the options that precede its `-i`."""

    url: str
    arguments: tuple[str, ...] = ()

    def add_arguments(self, *arguments: str) -> "FFmpegInput":
        return replace(self, arguments=self.arguments + arguments)

    def to_args(self) -> list[str]:
        return [*self.arguments, "-i", self.url]


@dataclass(frozen=True)
class FFmpegOutput:
    """An output path with the options that precede it."""

    path: str
    arguments: tuple[str, ...] = ()

    def add_arguments(self, *arguments: str) -> "FFmpegOutput":
        return replace(self, arguments=self.arguments + arguments)

    def to_args(self) -> list[str]:
        return [*self.arguments, self.path]


@dataclass(frozen=True)
class FFmpegCommand:
    """A complete ffmpeg invocation, minus the executable."""

    inputs: tuple[FFmpegInput, ...] = ()
    outputs: tuple[FFmpegOutput, ...] = ()
    overwrite_output: bool = False

    def with_input(self, ffmpeg_input: FFmpegInput) -> "FFmpegCommand":
        return replace(self, inputs=self.inputs + (ffmpeg_input,))

    def with_output(self, ffmpeg_output: FFmpegOutput) -> "FFmpegCommand":
        return replace(self, outputs=self.outputs + (ffmpeg_output,))

    def with_overwrite(self, overwrite: bool = True) -> "FFmpegCommand":
        return replace(self, overwrite_output=overwrite)

    def to_args(self) -> list[str]:
        args = ["-y"] if self.overwrite_output else ["-n"]
        for ffmpeg_input in self.inputs:
            args.extend(ffmpeg_input.to_args())
        for ffmpeg_output in self.outputs:
            args.extend(ffmpeg_output.to_args())
        return args


class FFmpegProgress(BaseModel):
    """
    Structured representation of ffmpeg progress output.
    Available fields are listed under fftools/ffmpeg.c::print_report()
    """

    total_size: Optional[int] = None

    # output stream duration in microseconds
    out_time_us: Optional[int] = None
    out_time: Optional[str] = None

    bitrate: Optional[str] = None
    speed: Optional[str] = None
    progress: str = "continue"

    @property
    def out_time_seconds(self) -> float:
        return (self.out_time_us or 0) / 1_000_000

    @classmethod
    async def from_process_stream(
        cls, stdout: Optional[asyncio.StreamReader]
    ) -> AsyncIterator["FFmpegProgress"]:
        """
        Yields instances from an open asyncio stream.

        ffmpeg must be launched with ("-progress", "pipe:1"); it then reports
        line-delimited key / value pairs with a "progress" key marking the end
        of a given update.
        """
        if not stdout:
            return
        state: dict[str, str] = {}
        while True:
            raw_line = await stdout.readline()
            if not raw_line:
                return
            key, sep, value = raw_line.decode(errors="replace").strip().partition("=")
            if not sep:
                continue
            if key == "progress":
                state["progress"] = value
                yield cls.model_validate(
                    {k: v for k, v in state.items() if k in cls.model_fields}
                )
                state.clear()
                continue
            if value == "N/A":
                # omit fields that are represented as 'N/A' in ffmpeg output
                continue
            state[key] = value


ProgressCallback = Callable[[FFmpegProgress], None]


class FFmpeg:
    """Runs `FFmpegCommand`s with one ffmpeg executable."""

    GLOBAL_ARGUMENTS: Sequence[str] = ("-hide_banner", "-nostdin", "-loglevel", "error")

    def __init__(self, executable: str):
        self.executable = executable

    def build_argv(
        self, command: FFmpegCommand, with_progress: bool = False
    ) -> list[str]:
        argv = [self.executable, *self.GLOBAL_ARGUMENTS]
        if with_progress:
            argv.extend(["-progress", "pipe:1", "-nostats"])
        argv.extend(command.to_args())
        return argv

    async def execute(
        self,
        command: FFmpegCommand,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """
        Runs ffmpeg and waits for it to exit.

        Raises:
            FFmpegAbnormalExitError: If ffmpeg exits with a non-zero status.
            FileNotFoundError: If the executable does not exist.
        """
        argv = self.build_argv(command, with_progress=progress_callback is not None)
        log.debug(f"Running: {' '.join(argv)}")

        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=(
                asyncio.subprocess.PIPE
                if progress_callback
                else asyncio.subprocess.DEVNULL
            ),
            stderr=asyncio.subprocess.PIPE,
        )
        stderr_task = asyncio.ensure_future(self._read_stderr_tail(proc.stderr))
        try:
            await self._report_progress(proc.stdout, progress_callback)
            stderr_tail = await stderr_task
            returncode = await proc.wait()
        except BaseException:
            # cancellation or a failing progress callback: never leave ffmpeg behind
            stderr_task.cancel()
            if proc.returncode is None:
                log.debug("Recording interrupted, stopping ffmpeg.")
                proc.kill()
                await proc.wait()
            await asyncio.gather(stderr_task, return_exceptions=True)
            raise

        if returncode != 0:
            raise FFmpegAbnormalExitError(returncode, stderr_tail)

    @staticmethod
    async def _read_stderr_tail(stderr: Optional[asyncio.StreamReader]) -> str:
        if not stderr:
            return ""
        lines: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        while raw_line := await stderr.readline():
            line = raw_line.decode(errors="replace").rstrip()
            if line:
                lines.append(line)
        return "\n".join(lines)

    @staticmethod
    async def _report_progress(
        stdout: Optional[asyncio.StreamReader],
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        if not progress_callback:
            return
        async for progress in FFmpegProgress.from_process_stream(stdout):
            progress_callback(progress)


class FFmpegFactory:
    """
    Creates `FFmpeg` runners for the executable found in `ffmpeg_dir`, or on
    PATH when no directory is configured.
    """

    def __init__(self, ffmpeg_dir: Optional[Path] = None):
        self.ffmpeg_dir = ffmpeg_dir

    def resolve_executable(self) -> str:
        if self.ffmpeg_dir is not None:
            return str(Path(self.ffmpeg_dir) / "ffmpeg")
        return shutil.which("ffmpeg") or "ffmpeg"

    def create(self) -> FFmpeg:
        return FFmpeg(self.resolve_executable())
