"""
Records timefree programs by pointing ffmpeg at radiko's signed playlist.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlencode

from radiko_cli.api.auth import X_RADIKO_AUTHTOKEN, AuthResult, RadikoAuthenticator
from radiko_cli.exceptions import DownloadError, FFmpegAbnormalExitError

from .ffmpeg import (
    FFmpegCommand,
    FFmpegFactory,
    FFmpegInput,
    FFmpegOutput,
    ProgressCallback,
)

log = logging.getLogger(__name__)

PLAYLIST_URL = "https://radiko.jp/v2/api/ts/playlist.m3u8"
X_RADIKO_AREAID = "X-Radiko-AreaId"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
LSID_BYTES = 16

# Maps cover URL suffixes to the codec used for the attached picture
COVER_CODECS = {
    ".jpg": "mjpeg",
    ".jpeg": "mjpeg",
    ".png": "png",
}


@dataclass(frozen=True)
class StreamDescriptor:
    """Playlist URL and the headers ffmpeg must send to fetch it."""

    url: str
    headers: str
    lsid: str


def get_cover_codec(cover_url: Optional[str]) -> Optional[str]:
    """Returns the image codec for a cover URL, or None if it cannot be embedded."""
    if not cover_url:
        return None
    lowered = cover_url.lower()
    for suffix, codec in COVER_CODECS.items():
        if lowered.endswith(suffix):
            return codec
    return None


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


class RadikoDownloader:
    """
    Downloads a station's broadcast between two points in time.

    Only one download runs per instance at a time.
    """

    def __init__(
        self,
        authenticator: RadikoAuthenticator,
        ffmpeg_factory: FFmpegFactory,
        token_hex: Callable[[int], str] = secrets.token_hex,
    ):
        """
        Initializes the downloader.

        Args:
            authenticator: Supplies the stream token and area id.
            ffmpeg_factory: Creates the ffmpeg runner for each download.
            token_hex: Random hex source for the per-request `lsid`.
        """
        self.authenticator = authenticator
        self.ffmpeg_factory = ffmpeg_factory
        self._token_hex = token_hex
        self._lock = asyncio.Lock()

    def build_stream_descriptor(
        self, station_id: str, from_: datetime, to: datetime, auth: AuthResult
    ) -> StreamDescriptor:
        from_str = format_timestamp(from_)
        to_str = format_timestamp(to)
        lsid = self._token_hex(LSID_BYTES)

        query = urlencode(
            [
                ("station_id", station_id),
                ("start_at", from_str),
                ("ft", from_str),
                ("end_at", to_str),
                ("to", to_str),
                ("seek", from_str),
                ("l", "15"),
                ("lsid", lsid),
                ("type", "c"),
            ]
        )
        headers = "\r\n".join(
            [
                f"{X_RADIKO_AREAID}: {auth.area_id}",
                f"{X_RADIKO_AUTHTOKEN}: {auth.authtoken}",
            ]
        )
        return StreamDescriptor(url=f"{PLAYLIST_URL}?{query}", headers=headers, lsid=lsid)

    @staticmethod
    def build_command(
        stream: StreamDescriptor, output_path: Path, cover_url: Optional[str] = None
    ) -> FFmpegCommand:
        stream_input = FFmpegInput(stream.url).add_arguments(
            "-fflags", "+discardcorrupt", "-headers", stream.headers
        )
        output = FFmpegOutput(str(output_path)).add_arguments(
            "-map", "0:a", "-c:a", "copy", "-bsf:a", "aac_adtstoasc"
        )
        command = FFmpegCommand().with_input(stream_input)

        if codec := get_cover_codec(cover_url):
            command = command.with_input(FFmpegInput(cover_url))
            output = output.add_arguments(
                "-map", "1:v", "-c:v", codec, "-disposition:v:0", "attached_pic"
            )
        elif cover_url:
            log.debug(f"Cover image not embedded, unsupported format: {cover_url}")

        return command.with_output(output).with_overwrite(True)

    async def download(
        self,
        station_id: str,
        from_: datetime,
        to: datetime,
        output_path: Path,
        cover_url: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Records `station_id` from `from_` to `to` into `output_path`.

        The container is chosen by ffmpeg from the output extension. An
        existing file is overwritten.

        Raises:
            DownloadError: If ffmpeg exits abnormally.
        """
        async with self._lock:
            auth = await self.authenticator.auth()
            stream = self.build_stream_descriptor(station_id, from_, to, auth)
            log.debug(f"Playlist URL: {stream.url}")

            command = self.build_command(stream, output_path, cover_url)
            ffmpeg = self.ffmpeg_factory.create()

            log.info(
                f"Recording {station_id} {format_timestamp(from_)}-"
                f"{format_timestamp(to)} to '{output_path}'"
            )
            try:
                await ffmpeg.execute(command, progress_callback=progress_callback)
            except FFmpegAbnormalExitError as e:
                raise DownloadError(e) from e

            log.debug(f"Recording finished: {output_path}")
            return output_path
