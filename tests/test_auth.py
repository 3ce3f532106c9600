import asyncio

import pytest

from conftest import AUTHTOKEN, auth1_response, auth2_response, make_response
from radiko_cli.api.auth import (
    AUTH1_URL,
    AUTH2_URL,
    LOGIN_URL,
    LOGOUT_URL,
    AuthResult,
    RadikoAuthenticator,
)
from radiko_cli.exceptions import HttpError, ResponseError

LOGIN_OK = make_response(body='{"radiko_session": "session1", "areafree": "1"}')


@pytest.mark.asyncio
async def test_auth_runs_both_phases(auth_client, clock):
    authenticator = RadikoAuthenticator(auth_client, clock=clock)

    result = await authenticator.auth()

    assert result == AuthResult(AUTHTOKEN, "JP14")
    [auth1] = auth_client.requests_to(AUTH1_URL)
    assert auth1.headers == {
        "X-Radiko-App": "pc_html5",
        "X-Radiko-App-Version": "0.0.1",
        "X-Radiko-Device": "pc",
        "X-Radiko-User": "dummy_user",
    }
    [auth2] = auth_client.requests_to(AUTH2_URL)
    assert auth2.headers == {
        "X-Radiko-Device": "pc",
        "X-Radiko-User": "dummy_user",
        "X-Radiko-AuthToken": AUTHTOKEN,
        "X-Radiko-PartialKey": "ZTFlZjJmZDY2Yw==",
    }
    assert auth2.parameters is None


@pytest.mark.asyncio
async def test_auth_reuses_token_within_interval(auth_client, clock):
    authenticator = RadikoAuthenticator(auth_client, 60, clock=clock)

    first = await authenticator.auth()
    clock.advance(59)
    second = await authenticator.auth()

    assert first == second
    assert len(auth_client.requests) == 2


@pytest.mark.asyncio
async def test_auth_renews_token_after_interval(http_client, clock):
    http_client.add(AUTH1_URL, auth1_response(), auth1_response(token="token2"))
    http_client.add(AUTH2_URL, auth2_response(), auth2_response("JP13,東京都,tokyo Japan"))
    authenticator = RadikoAuthenticator(http_client, 60, clock=clock)

    await authenticator.auth()
    clock.advance(60)
    result = await authenticator.auth()

    assert result == AuthResult("token2", "JP13")
    assert len(http_client.requests) == 4


@pytest.mark.asyncio
async def test_auth_with_zero_interval_never_caches(auth_client, clock):
    authenticator = RadikoAuthenticator(auth_client, 0, clock=clock)

    await authenticator.auth()
    await authenticator.auth()

    assert len(auth_client.requests_to(AUTH1_URL)) == 2


@pytest.mark.asyncio
async def test_auth_keeps_empty_trailing_fields(http_client, clock):
    http_client.add(AUTH1_URL, auth1_response()).add(AUTH2_URL, auth2_response("JP14,,"))
    authenticator = RadikoAuthenticator(http_client, clock=clock)

    assert (await authenticator.auth()).area_id == "JP14"


@pytest.mark.asyncio
async def test_auth_sends_session_after_login(auth_client, clock):
    auth_client.add(LOGIN_URL, LOGIN_OK)
    authenticator = RadikoAuthenticator(auth_client, clock=clock)

    await authenticator.login("user@example.com", "secret")
    await authenticator.auth()

    [login] = auth_client.requests_to(LOGIN_URL)
    assert login.parameters == {"mail": "user@example.com", "pass": "secret"}
    [auth2] = auth_client.requests_to(AUTH2_URL)
    assert auth2.parameters == {"radiko_session": "session1"}
    assert authenticator.is_logged_in()


@pytest.mark.asyncio
async def test_login_invalidates_cached_token(auth_client, clock):
    auth_client.add(LOGIN_URL, LOGIN_OK)
    authenticator = RadikoAuthenticator(auth_client, clock=clock)

    await authenticator.auth()
    await authenticator.login("user@example.com", "secret")
    await authenticator.auth()

    assert len(auth_client.requests_to(AUTH1_URL)) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response, message",
    [
        (make_response(401, "unauthorized"), "HTTP error code: 401"),
        (make_response(body="<html></html>"), "invalid JSON response. body=<html></html>"),
        (
            make_response(body='{"aaa":"bbb"}'),
            'radiko_session does not exist in response. body={"aaa":"bbb"}',
        ),
        (make_response(body="  "), "empty body"),
    ],
)
async def test_login_errors(http_client, response, message):
    http_client.add(LOGIN_URL, response)
    authenticator = RadikoAuthenticator(http_client)

    with pytest.raises((HttpError, ResponseError)) as exc_info:
        await authenticator.login("user@example.com", "secret")

    assert str(exc_info.value) == message
    assert not authenticator.is_logged_in()


@pytest.mark.asyncio
@pytest.mark.parametrize("mail, password", [("", "secret"), ("user@example.com", " ")])
async def test_login_rejects_blank_credentials(http_client, mail, password):
    authenticator = RadikoAuthenticator(http_client)

    with pytest.raises(ValueError):
        await authenticator.login(mail, password)

    assert http_client.requests == []


@pytest.mark.asyncio
async def test_logout_without_session_is_a_no_op(http_client):
    authenticator = RadikoAuthenticator(http_client)

    await authenticator.logout()

    assert http_client.requests == []


@pytest.mark.asyncio
async def test_logout_clears_session(auth_client, clock):
    auth_client.add(LOGIN_URL, LOGIN_OK).add(LOGOUT_URL, make_response(body="{}"))
    authenticator = RadikoAuthenticator(auth_client, clock=clock)
    await authenticator.login("user@example.com", "secret")
    await authenticator.auth()

    await authenticator.logout()

    [logout] = auth_client.requests_to(LOGOUT_URL)
    assert logout.parameters == {"radiko_session": "session1"}
    assert not authenticator.is_logged_in()

    await authenticator.auth()
    assert auth_client.requests_to(AUTH2_URL)[-1].parameters is None


@pytest.mark.asyncio
async def test_failed_logout_keeps_session(http_client):
    http_client.add(LOGIN_URL, LOGIN_OK).add(LOGOUT_URL, make_response(500, "error"))
    authenticator = RadikoAuthenticator(http_client)
    await authenticator.login("user@example.com", "secret")

    with pytest.raises(HttpError, match="HTTP error code: 500"):
        await authenticator.logout()

    assert authenticator.is_logged_in()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "missing", ["X-Radiko-AuthToken", "X-Radiko-KeyOffset", "X-Radiko-KeyLength"]
)
async def test_auth1_missing_header(http_client, missing):
    headers = {
        "X-Radiko-AuthToken": AUTHTOKEN,
        "X-Radiko-KeyOffset": "16",
        "X-Radiko-KeyLength": "10",
    }
    del headers[missing]
    http_client.add(AUTH1_URL, make_response(body="ok", headers=headers))
    authenticator = RadikoAuthenticator(http_client)

    with pytest.raises(ResponseError, match="is not present in header"):
        await authenticator.auth()

    assert http_client.requests_to(AUTH2_URL) == []


@pytest.mark.asyncio
async def test_auth1_rejects_non_numeric_offset(http_client):
    http_client.add(AUTH1_URL, auth1_response(offset="abc"))
    authenticator = RadikoAuthenticator(http_client)

    with pytest.raises(ResponseError) as exc_info:
        await authenticator.auth()

    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_failed_auth2_leaves_no_cached_token(http_client, clock):
    http_client.add(AUTH1_URL, auth1_response())
    http_client.add(AUTH2_URL, make_response(403, "forbidden"), auth2_response())
    authenticator = RadikoAuthenticator(http_client, clock=clock)

    with pytest.raises(HttpError, match="HTTP error code: 403"):
        await authenticator.auth()
    result = await authenticator.auth()

    assert result == AuthResult(AUTHTOKEN, "JP14")
    assert len(http_client.requests_to(AUTH1_URL)) == 2


@pytest.mark.asyncio
async def test_auth1_http_error(http_client):
    http_client.add(AUTH1_URL, make_response(500, ""))
    authenticator = RadikoAuthenticator(http_client)

    with pytest.raises(HttpError) as exc_info:
        await authenticator.auth()

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_concurrent_auth_calls_share_one_handshake(auth_client, clock):
    authenticator = RadikoAuthenticator(auth_client, clock=clock)

    results = await asyncio.gather(*(authenticator.auth() for _ in range(5)))

    assert set(results) == {AuthResult(AUTHTOKEN, "JP14")}
    assert len(auth_client.requests_to(AUTH1_URL)) == 1
    assert len(auth_client.requests_to(AUTH2_URL)) == 1


@pytest.mark.asyncio
async def test_login_waits_for_running_auth(auth_client, clock):
    auth_client.add(LOGIN_URL, LOGIN_OK)
    authenticator = RadikoAuthenticator(auth_client, clock=clock)

    await asyncio.gather(
        authenticator.auth(), authenticator.login("user@example.com", "secret")
    )

    urls = [request.url for _, request in auth_client.requests]
    assert urls == [AUTH1_URL, AUTH2_URL, LOGIN_URL]
