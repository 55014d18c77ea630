from __future__ import annotations

import base64
import time
from typing import Any, Callable
from urllib.parse import parse_qs

import httpx
import orjson
import pytest

from steamguard.account import SteamGuardAccount
from steamguard.api.client import SteamWebClient, unwrap_response
from steamguard.api.services import (
    AuthenticationService,
    ConfirmationService,
    PhoneService,
    TwoFactorService,
    UserAccountService,
)
from steamguard.core.clock import ClockAligner, FixedTimeSource
from steamguard.core.errors import RemoteOperationError
from steamguard.core.retry import RetryConfig
from steamguard.core.settings import HttpSettings
from steamguard.models.account import CredentialRecord, SteamGuardScheme
from steamguard.models.session import SessionData

pytestmark = pytest.mark.integration

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, **kwargs: Any) -> SteamWebClient:
    return SteamWebClient(
        HttpSettings(web_api_base="https://api.test/", community_base="https://community.test"),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode())


class _Recorder:
    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def test_unwrap_response() -> None:
    assert unwrap_response({"response": {"a": 1}}) == {"a": 1}
    assert unwrap_response({"response": None}) is None
    assert unwrap_response([]) is None
    assert unwrap_response(None) is None


async def test_query_time_posts_to_web_api() -> None:
    rec = _Recorder(httpx.Response(200, json={"response": {"server_time": "1700000000"}}))
    async with _client(rec) as client:
        assert await TwoFactorService(client).query_time() == 1_700_000_000

    request = rec.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.test/ITwoFactorService/QueryTime/v1/"
    assert request.headers["User-Agent"].startswith("Dalvik/")


async def test_query_time_without_envelope_raises() -> None:
    rec = _Recorder(httpx.Response(200, json={}))
    async with _client(rec) as client:
        with pytest.raises(RemoteOperationError):
            await TwoFactorService(client).query_time()


async def test_add_authenticator_form_and_parsing() -> None:
    rec = _Recorder(
        httpx.Response(
            200,
            json={
                "response": {
                    "shared_secret": "c2VjcmV0",
                    "serial_number": 1234567890123,
                    "revocation_code": "R00001",
                    "uri": "otpauth://totp/Steam:alice",
                    "server_time": "1700000000",
                    "account_name": "alice",
                    "token_gid": "abc",
                    "identity_secret": "aWRlbnRpdHk=",
                    "secret_1": "czE=",
                    "status": 1,
                }
            },
        )
    )
    session = SessionData(steam_id=76561198000000000, access_token="tok")
    async with _client(rec) as client:
        record = await TwoFactorService.for_session(client, session).add_authenticator(
            "android:xyz", 1_700_000_000
        )

    assert record is not None
    assert record.status == 1
    assert record.serial_number == "1234567890123"
    assert record.revocation_code == "R00001"
    request = rec.requests[0]
    assert request.url.params["access_token"] == "tok"
    form = _form(request)
    assert form["steamid"] == ["76561198000000000"]
    assert form["device_identifier"] == ["android:xyz"]
    assert form["authenticator_time"] == ["1700000000"]
    assert form["authenticator_type"] == ["1"]


async def test_finalize_and_remove_forms() -> None:
    rec = _Recorder(
        httpx.Response(200, json={"response": {"success": True, "want_more": True, "status": 1}}),
        httpx.Response(200, json={"response": {"success": True}}),
    )
    async with _client(rec) as client:
        service = TwoFactorService(client, 1, "tok")
        finalize = await service.finalize_add_authenticator("ABCDE", "12345", 99)
        removed = await service.remove_authenticator("R1", SteamGuardScheme.NONE)

    assert finalize is not None and finalize.want_more
    assert removed is not None and removed.success
    f1, f2 = (_form(r) for r in rec.requests)
    assert f1["authenticator_code"] == ["ABCDE"]
    assert f1["activation_code"] == ["12345"]
    assert f2["revocation_code"] == ["R1"]
    assert f2["steamguard_scheme"] == ["2"]


async def test_phone_user_account_and_auth_services() -> None:
    rec = _Recorder(
        httpx.Response(200, json={"response": {"awaiting_email_confirmation": True}}),
        httpx.Response(200, json={"response": {"confirmation_email_address": "a@b"}}),
        httpx.Response(200, json={"response": {"country": "NL"}}),
        httpx.Response(200, json={"response": {"access_token": "new"}}),
    )
    async with _client(rec) as client:
        assert await PhoneService(client).is_account_waiting_for_email_confirmation() is True
        resp = await PhoneService(client).set_account_phone_number("+31", "NL")
        assert resp is not None and resp.confirmation_email_address == "a@b"
        assert await UserAccountService(client).get_user_country() == "NL"
        token = await AuthenticationService(client).generate_access_token_for_app("rt", 5)
        assert token == "new"

    assert _form(rec.requests[1])["phone_country_code"] == ["NL"]
    auth_form = _form(rec.requests[3])
    assert auth_form == {"steamid": ["5"], "refresh_token": ["rt"]}


async def test_http_error_status_raises() -> None:
    rec = _Recorder(httpx.Response(500, text="oops"))
    async with _client(rec) as client:
        with pytest.raises(RemoteOperationError) as excinfo:
            await TwoFactorService(client).query_time()
    assert excinfo.value.status_code == 500


async def test_transport_error_wrapped() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(_boom) as client:
        with pytest.raises(RemoteOperationError) as excinfo:
            await UserAccountService(client).get_user_country()
    assert isinstance(excinfo.value.cause, httpx.ConnectError)


async def test_invalid_json_raises() -> None:
    rec = _Recorder(httpx.Response(200, text="<html>"))
    async with _client(rec) as client:
        with pytest.raises(RemoteOperationError):
            await UserAccountService(client).get_user_country()


async def test_retry_recovers_from_transport_error() -> None:
    attempts = {"n": 0}

    def _flaky(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={"response": {"country": "FR"}})

    config = RetryConfig(max_attempts=2, base_delay=0.0, jitter=False)
    async with _client(_flaky, retry_config=config) as client:
        assert await UserAccountService(client).get_user_country() == "FR"
    assert attempts["n"] == 2


async def test_confirmation_service_requests() -> None:
    rec = _Recorder(
        httpx.Response(200, json={"success": True, "conf": []}),
        httpx.Response(200, json={"success": True}),
        httpx.Response(200, json={"success": False}),
    )
    session = SessionData(steam_id=42, access_token="tok", session_id="SID")
    params = {"p": "android:1", "a": "42", "k": "a+b/c=", "t": "1", "m": "react", "tag": "conf"}
    async with _client(rec) as client:
        service = ConfirmationService(client, session)
        assert await service.get_list(params) == {"success": True, "conf": []}
        assert await service.send_action("allow", params, 7, 8) is True
        assert await service.send_multiple_action("cancel", params, [(1, 2), (3, 4)]) is False

    listing, single, multi = rec.requests
    assert listing.url.path == "/mobileconf/getlist"
    assert listing.url.params["k"] == "a+b/c="
    assert "steamLoginSecure=42%7C%7Ctok" in listing.headers["Cookie"]
    assert "sessionid=SID" in listing.headers["Cookie"]
    assert single.url.path == "/mobileconf/ajaxop"
    assert single.url.params["op"] == "allow"
    assert single.url.params["cid"] == "7"
    assert single.url.params["ck"] == "8"
    assert multi.method == "POST"
    form = _form(multi)
    assert form["cid[]"] == ["1", "3"]
    assert form["ck[]"] == ["2", "4"]
    assert form["op"] == ["cancel"]


async def test_session_bound_service_reads_token_per_request() -> None:
    rec = _Recorder(
        httpx.Response(200, json={"response": {"country": "SE"}}),
        httpx.Response(200, json={"response": {"country": "SE"}}),
    )
    session = SessionData(steam_id=11, access_token="first")
    async with _client(rec) as client:
        service = UserAccountService.for_session(client, session)
        await service.get_user_country()
        session.access_token = "second"
        await service.get_user_country()

    assert [r.url.params["access_token"] for r in rec.requests] == ["first", "second"]
    assert _form(rec.requests[1])["steamid"] == ["11"]


async def test_removal_after_refresh_uses_new_token() -> None:
    refresh = "h." + base64.urlsafe_b64encode(
        orjson.dumps({"exp": int(time.time()) + 3600})
    ).decode().rstrip("=") + ".s"

    requests: list[httpx.Request] = []

    def _steam(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/GenerateAccessTokenForApp/v1/"):
            return httpx.Response(200, json={"response": {"access_token": "NEW"}})
        return httpx.Response(200, json={"response": {"success": True}})

    record = CredentialRecord(
        revocation_code="R1",
        session=SessionData(steam_id=12, access_token="OLD", refresh_token=refresh),
    )

    async with _client(_steam) as client:
        account = SteamGuardAccount.from_client(record, client, ClockAligner(FixedTimeSource()))
        assert await account.refresh_session() == "NEW"
        assert await account.deactivate_authenticator() is True

    removal = requests[-1]
    assert removal.url.path == "/ITwoFactorService/RemoveAuthenticator/v1/"
    assert removal.url.params["access_token"] == "NEW"


def test_retry_config_is_not_mutated() -> None:
    config = RetryConfig(max_attempts=2, base_delay=0.0)
    before = list(config.retryable_exceptions)
    client = SteamWebClient(retry_config=config)

    assert config.retryable_exceptions == before
    assert client._retrier is not None
    assert httpx.TransportError in client._retrier.config.retryable_exceptions
