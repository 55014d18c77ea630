from __future__ import annotations

import base64
import json
import time

import pytest

from steamguard.core.errors import (
    InvalidRefreshTokenError,
    TokenMalformedError,
    TokenRefreshFailedError,
)
from steamguard.core.tokens import (
    TokenLifecycle,
    decode_token_payload,
    is_token_expired,
    token_expiry,
)
from steamguard.models.session import SessionData

pytestmark = pytest.mark.security


def make_jwt(exp: float | None, **claims: object) -> str:
    def seg(obj: object) -> str:
        raw = json.dumps(obj).encode()
        return base64.urlsafe_b64encode(raw).decode().rstrip("=")

    payload: dict[str, object] = dict(claims)
    if exp is not None:
        payload["exp"] = int(exp)
    return f"{seg({'alg': 'EdDSA', 'typ': 'JWT'})}.{seg(payload)}.c2lnbmF0dXJl"


class _Issuer:
    def __init__(self, result: object = "new-access") -> None:
        self.result = result
        self.calls: list[tuple[str, int | None]] = []

    async def generate_access_token_for_app(
        self, refresh_token: str, steam_id: int | None = None
    ) -> str | None:
        self.calls.append((refresh_token, steam_id))
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result  # type: ignore[return-value]


def test_expiry_one_second_either_side() -> None:
    now = 1_700_000_000
    assert is_token_expired(make_jwt(now - 1), now=now) is True
    assert is_token_expired(make_jwt(now + 1), now=now) is False


def test_expiry_uses_wall_clock_by_default() -> None:
    assert is_token_expired(make_jwt(time.time() + 3600)) is False
    assert is_token_expired(make_jwt(time.time() - 3600)) is True


def test_payload_decoded_without_padding() -> None:
    token = make_jwt(123, sub="76561198000000000")
    assert decode_token_payload(token)["sub"] == "76561198000000000"
    assert token_expiry(token) == 123


@pytest.mark.parametrize(
    "token",
    ["", "onlyonesegment", "a..c", "a.A.c", "a.bm90IGpzb24.c", "a.WzEsMl0.c"],
)
def test_malformed_tokens_raise(token: str) -> None:
    with pytest.raises(TokenMalformedError):
        is_token_expired(token, now=0)


def test_missing_exp_raises() -> None:
    with pytest.raises(TokenMalformedError):
        token_expiry(make_jwt(None, sub="1"))


async def test_refresh_replaces_access_token() -> None:
    refresh = make_jwt(time.time() + 3600)
    session = SessionData(steam_id=7, access_token="old", refresh_token=refresh)
    issuer = _Issuer("fresh")

    assert await TokenLifecycle(session, issuer).refresh_access_token() == "fresh"
    assert session.access_token == "fresh"
    assert issuer.calls == [(refresh, 7)]


@pytest.mark.parametrize("refresh", ["", make_jwt(1), "not-a-jwt", "a.A.c"])
async def test_refresh_requires_valid_refresh_token(refresh: str) -> None:
    session = SessionData(refresh_token=refresh, access_token="old")
    issuer = _Issuer()
    with pytest.raises(InvalidRefreshTokenError):
        await TokenLifecycle(session, issuer).refresh_access_token()
    assert issuer.calls == []
    assert session.access_token == "old"


async def test_issuer_failure_wrapped_with_cause() -> None:
    session = SessionData(refresh_token=make_jwt(time.time() + 3600), access_token="old")
    boom = ConnectionError("down")
    with pytest.raises(TokenRefreshFailedError) as excinfo:
        await TokenLifecycle(session, _Issuer(boom)).refresh_access_token()
    assert excinfo.value.cause is boom
    assert session.access_token == "old"


async def test_empty_issuer_response_fails() -> None:
    session = SessionData(refresh_token=make_jwt(time.time() + 3600))
    with pytest.raises(TokenRefreshFailedError):
        await TokenLifecycle(session, _Issuer(None)).refresh_access_token()


async def test_ensure_fresh_skips_valid_access_token() -> None:
    session = SessionData(
        access_token=make_jwt(time.time() + 3600),
        refresh_token=make_jwt(time.time() + 7200),
    )
    issuer = _Issuer()
    assert await TokenLifecycle(session, issuer).ensure_fresh_access_token() is False
    assert issuer.calls == []


async def test_ensure_fresh_refreshes_expired_access_token() -> None:
    session = SessionData(
        access_token=make_jwt(time.time() - 10),
        refresh_token=make_jwt(time.time() + 7200),
    )
    assert await TokenLifecycle(session, _Issuer("x")).ensure_fresh_access_token() is True
    assert session.access_token == "x"


async def test_malformed_refresh_token_keeps_cause() -> None:
    session = SessionData(refresh_token="a.bm90IGpzb24.c")
    with pytest.raises(InvalidRefreshTokenError) as excinfo:
        await TokenLifecycle(session, _Issuer()).refresh_access_token()
    assert isinstance(excinfo.value.cause, TokenMalformedError)
