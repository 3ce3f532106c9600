"""
Thin async HTTP layer used by every radiko endpoint client.

Requests and responses are plain value objects so that the authenticator and
the metadata services can be exercised against a fake client in tests.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlencode

import aiohttp

from radiko_cli.exceptions import HttpError, ResponseError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    """A GET or form-POST request against a radiko endpoint."""

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    parameters: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class HttpResponse:
    """
    Status, headers and decoded body of a finished request.

    Header names are stored lower-cased; use `first_header` for lookups.
    """

    status_code: int
    headers: Mapping[str, List[str]] = field(default_factory=dict)
    body: Optional[str] = None

    def first_header(self, name: str) -> Optional[str]:
        values = self.headers.get(name.lower(), [])
        return values[0] if values else None


def check_body(response: HttpResponse) -> str:
    """
    Validates a response and returns its body.

    Raises:
        HttpError: If the status is not 200.
        ResponseError: If the status is 200 but the body is empty or blank.
    """
    if response.status_code != 200:
        raise HttpError(response.status_code, response.body)
    if response.body is None or not response.body.strip():
        raise ResponseError("empty body")
    return response.body


def encode_parameters(parameters: Optional[Mapping[str, str]]) -> str:
    """URL-encodes parameters in key order, as the radiko endpoints expect."""
    if not parameters:
        return ""
    return urlencode(sorted(parameters.items()))


class RadikoHttpClient:
    """
    Async client for the radiko web endpoints.

    The client never retries and never raises on HTTP status codes; callers
    decide what a status means via `check_body`.
    """

    USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0"

    def __init__(self, timeout: float = 30.0):
        """
        Initializes the HTTP client.

        Args:
            timeout: Total timeout in seconds applied to each request.
        """
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "RadikoHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get(self, request: HttpRequest) -> HttpResponse:
        """Performs a GET request; parameters are appended as a query string."""
        query = encode_parameters(request.parameters)
        url = f"{request.url}?{query}" if query else request.url
        log.debug(f"GET {request.url}")

        session = await self._initialize_session()
        async with session.get(url, headers=dict(request.headers)) as r:
            return await self._to_response(r)

    async def post_form(self, request: HttpRequest) -> HttpResponse:
        """Performs a POST with an `application/x-www-form-urlencoded` body."""
        headers = {
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
            **request.headers,
        }
        log.debug(f"POST {request.url}")

        session = await self._initialize_session()
        async with session.post(
            request.url,
            data=encode_parameters(request.parameters).encode("utf-8"),
            headers=headers,
        ) as r:
            return await self._to_response(r)

    @staticmethod
    async def _to_response(r: aiohttp.ClientResponse) -> HttpResponse:
        headers: Dict[str, List[str]] = {}
        for key, value in r.headers.items():
            headers.setdefault(key.lower(), []).append(value)
        body = await r.text(errors="replace")
        log.debug(f"Response {r.status} from {r.url.with_query(None)}")
        return HttpResponse(status_code=r.status, headers=headers, body=body)
