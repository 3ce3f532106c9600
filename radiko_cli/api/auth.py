"""
Handles authentication with radiko, including premium member login and the
two-phase auth1/auth2 handshake that yields a stream token and area id.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from radiko_cli.exceptions import ResponseError
from radiko_cli.utils.validation import is_blank, require_not_blank

from .http import HttpRequest, HttpResponse, RadikoHttpClient, check_body
from .partial_key import DEFAULT_AUTHKEY, derive_partial_key

log = logging.getLogger(__name__)

LOGIN_URL = "https://radiko.jp/v4/api/member/login"
LOGOUT_URL = "https://radiko.jp/v4/api/member/logout"
AUTH1_URL = "https://radiko.jp/v2/api/auth1"
AUTH2_URL = "https://radiko.jp/v2/api/auth2"

X_RADIKO_APP = "X-Radiko-App"
X_RADIKO_APP_VERSION = "X-Radiko-App-Version"
X_RADIKO_DEVICE = "X-Radiko-Device"
X_RADIKO_USER = "X-Radiko-User"
X_RADIKO_AUTHTOKEN = "X-Radiko-AuthToken"
X_RADIKO_KEYOFFSET = "X-Radiko-Keyoffset"
X_RADIKO_KEYLENGTH = "X-Radiko-Keylength"
X_RADIKO_PARTIALKEY = "X-Radiko-PartialKey"
RADIKO_SESSION = "radiko_session"

DEVICE = "pc"
DUMMY_USER = "dummy_user"

DEFAULT_REAUTHENTICATION_INTERVAL = 60 * 60


@dataclass(frozen=True)
class AuthResult:
    """Token and area id needed to request a timefree stream."""

    authtoken: str
    area_id: str


class RadikoAuthenticator:
    """
    Manages the radiko session and the cached stream token.

    `login`, `logout` and `auth` share one lock, so a single instance can be
    used from several tasks without interleaving their state updates.
    """

    def __init__(
        self,
        http_client: RadikoHttpClient,
        reauthentication_interval: float = DEFAULT_REAUTHENTICATION_INTERVAL,
        authkey: bytes | str = DEFAULT_AUTHKEY,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initializes the authenticator.

        Args:
            http_client: Client used for every auth request.
            reauthentication_interval: Seconds a token is reused before auth1/auth2
                run again. Zero or less disables caching.
            authkey: Key material for the partial key derivation.
            clock: Monotonic time source, in seconds.
        """
        self._http_client = http_client
        self.reauthentication_interval = reauthentication_interval
        self._authkey = (
            authkey.encode("utf-8") if isinstance(authkey, str) else bytes(authkey)
        )
        self._clock = clock
        self._lock = asyncio.Lock()

        self._radiko_session: Optional[str] = None
        self._authtoken: Optional[str] = None
        self._area_id: Optional[str] = None
        self._acquired_at = 0.0

    async def login(self, mail: str, password: str) -> None:
        """
        Logs in as a premium member and stores the session id.

        A successful login drops the cached token, so the next `auth` call
        performs a full handshake carrying the new session.
        """
        require_not_blank(mail, "mail")
        require_not_blank(password, "password")

        async with self._lock:
            log.info(f"Logging in as: {mail}")
            response = await self._http_client.post_form(
                HttpRequest(url=LOGIN_URL, parameters={"mail": mail, "pass": password})
            )
            body = check_body(response)

            try:
                payload = json.loads(body)
            except json.JSONDecodeError as e:
                raise ResponseError(f"invalid JSON response. body={body}") from e

            session = payload.get(RADIKO_SESSION) if isinstance(payload, dict) else None
            if session is None:
                raise ResponseError(
                    f"{RADIKO_SESSION} does not exist in response. body={body}"
                )

            self._radiko_session = str(session)
            self._authtoken = None
            log.debug("Login succeeded, cached auth token invalidated.")

    async def logout(self) -> None:
        """Ends the premium session. Does nothing when not logged in."""
        async with self._lock:
            if is_blank(self._radiko_session):
                return

            response = await self._http_client.post_form(
                HttpRequest(
                    url=LOGOUT_URL, parameters={RADIKO_SESSION: self._radiko_session}
                )
            )
            check_body(response)

            self._radiko_session = None
            self._authtoken = None
            log.info("Logged out.")

    def is_logged_in(self) -> bool:
        return not is_blank(self._radiko_session)

    async def auth(self) -> AuthResult:
        """
        Returns a valid token and area id, running auth1/auth2 when the cached
        token is missing or older than the reauthentication interval.
        """
        async with self._lock:
            now = self._clock()
            if (
                self._authtoken is not None
                and now - self._acquired_at < self.reauthentication_interval
            ):
                log.debug("Reusing cached auth token.")
                return AuthResult(self._authtoken, self._area_id)

            authtoken, partial_key = await self._auth1()
            area_id = await self._auth2(authtoken, partial_key)

            self._authtoken = authtoken
            self._area_id = area_id
            self._acquired_at = self._clock()
            log.debug(f"Authenticated for area {area_id}.")
            return AuthResult(authtoken, area_id)

    async def _auth1(self) -> tuple[str, str]:
        """Requests a token and the offset/length of the partial key to send back."""
        headers = {
            X_RADIKO_APP: "pc_html5",
            X_RADIKO_APP_VERSION: "0.0.1",
            X_RADIKO_DEVICE: DEVICE,
            X_RADIKO_USER: DUMMY_USER,
        }
        response = await self._http_client.get(
            HttpRequest(url=AUTH1_URL, headers=headers)
        )
        check_body(response)

        token = self._require_header(response, X_RADIKO_AUTHTOKEN)
        offset_value = self._require_header(response, X_RADIKO_KEYOFFSET)
        length_value = self._require_header(response, X_RADIKO_KEYLENGTH)
        try:
            offset = int(offset_value)
            length = int(length_value)
        except ValueError as e:
            raise ResponseError(
                f"invalid key offset/length in header: {offset_value!r}, {length_value!r}"
            ) from e

        log.debug(f"auth1: keyoffset={offset}, keylength={length}")
        return token, derive_partial_key(offset, length, self._authkey)

    async def _auth2(self, authtoken: str, partial_key: str) -> str:
        """Registers the partial key and returns the area id of this client."""
        headers = {
            X_RADIKO_DEVICE: DEVICE,
            X_RADIKO_USER: DUMMY_USER,
            X_RADIKO_AUTHTOKEN: authtoken,
            X_RADIKO_PARTIALKEY: partial_key,
        }
        parameters = None
        if not is_blank(self._radiko_session):
            parameters = {RADIKO_SESSION: self._radiko_session}

        response = await self._http_client.get(
            HttpRequest(url=AUTH2_URL, headers=headers, parameters=parameters)
        )
        body = check_body(response)
        log.debug(f"auth2: {body.strip()}")
        return body.split(",")[0]

    @staticmethod
    def _require_header(response: HttpResponse, name: str) -> str:
        value = response.first_header(name)
        if value is None:
            raise ResponseError(f"{name} is not present in header")
        return value
