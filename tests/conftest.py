import asyncio
from pathlib import Path

import pytest

from radiko_cli.api.auth import AUTH1_URL, AUTH2_URL, AuthResult
from radiko_cli.api.http import HttpRequest, HttpResponse

AUTHTOKEN = "token1xxxxxxxxxxxxxxxx"


def make_response(status_code=200, body="", headers=None) -> HttpResponse:
    """Builds a response with lower-cased, list-valued headers like the real client."""
    return HttpResponse(
        status_code=status_code,
        headers={k.lower(): [v] for k, v in (headers or {}).items()},
        body=body,
    )


def auth1_response(token=AUTHTOKEN, offset="16", length="10") -> HttpResponse:
    return make_response(
        body="please send a partial key",
        headers={
            "X-Radiko-AuthToken": token,
            "X-Radiko-KeyOffset": offset,
            "X-Radiko-KeyLength": length,
        },
    )


def auth2_response(body="JP14,神奈川県,kanagawa Japan") -> HttpResponse:
    return make_response(body=body)


class FakeHttpClient:
    """
    Records requests and answers them from a per-URL queue.

    The last queued response for a URL is repeated once the queue is drained.
    Queued exceptions are raised instead of returned.
    """

    def __init__(self):
        self.routes: dict[str, list] = {}
        self.requests: list[tuple[str, HttpRequest]] = []

    def add(self, url: str, *responses) -> "FakeHttpClient":
        self.routes.setdefault(url, []).extend(responses)
        return self

    def requests_to(self, url: str) -> list[HttpRequest]:
        return [request for _, request in self.requests if request.url == url]

    async def get(self, request: HttpRequest) -> HttpResponse:
        # yield like real network I/O so concurrent callers interleave
        await asyncio.sleep(0)
        return self._dispatch("GET", request)

    async def post_form(self, request: HttpRequest) -> HttpResponse:
        await asyncio.sleep(0)
        return self._dispatch("POST", request)

    def _dispatch(self, method: str, request: HttpRequest) -> HttpResponse:
        self.requests.append((method, request))
        queue = self.routes.get(request.url)
        if not queue:
            raise AssertionError(f"unexpected request: {method} {request.url}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        return response


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthenticator:
    def __init__(self, result=AuthResult(AUTHTOKEN, "JP14"), error=None):
        self.result = result
        self.error = error
        self.calls = 0

    async def auth(self) -> AuthResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class FakeFFmpeg:
    def __init__(self, error=None, progress=(), duration=0.0):
        self.error = error
        self.progress = progress
        self.duration = duration
        self.commands = []
        self.running = 0
        self.max_running = 0

    async def execute(self, command, progress_callback=None):
        self.commands.append(command)
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep(self.duration)
            if progress_callback:
                for item in self.progress:
                    progress_callback(item)
            if self.error is not None:
                raise self.error
        finally:
            self.running -= 1


class FakeFFmpegFactory:
    def __init__(self, ffmpeg: FakeFFmpeg | None = None):
        self.ffmpeg = ffmpeg or FakeFFmpeg()
        self.created = 0

    def create(self) -> FakeFFmpeg:
        self.created += 1
        return self.ffmpeg


class FakeProcess:
    """Stands in for `asyncio.subprocess.Process`; must be built inside a running loop."""

    def __init__(self, exit_code=0, stdout=b"", stderr=b"", hang=False):
        self.stdout = self._reader(stdout, eof=not hang)
        self.stderr = self._reader(stderr, eof=not hang)
        self.returncode = None
        self.killed = False
        self._exit_code = exit_code
        self._exited = asyncio.Event()
        if not hang:
            self._exited.set()

    @staticmethod
    def _reader(data: bytes, eof: bool) -> asyncio.StreamReader:
        reader = asyncio.StreamReader()
        if data:
            reader.feed_data(data)
        if eof:
            reader.feed_eof()
        return reader

    async def wait(self) -> int:
        await self._exited.wait()
        if self.returncode is None:
            self.returncode = self._exit_code
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9
        self._exited.set()


@pytest.fixture
def http_client() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def auth_client(http_client) -> FakeHttpClient:
    """A fake client that answers both auth phases successfully."""
    return http_client.add(AUTH1_URL, auth1_response()).add(AUTH2_URL, auth2_response())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def output_path(tmp_path) -> Path:
    return tmp_path / "TBS" / "20251222_1000_news.m4a"
