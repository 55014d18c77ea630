"""
Access/refresh token inspection and refresh orchestration.

Steam session tokens are JWTs. Only the payload's ``exp`` claim matters
here; signatures are not verified. Expiry is checked against local UTC time
because token issuance is independent of the Steam Guard clock.
"""

from __future__ import annotations

import binascii
import json
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from . import diagnostics
from .encoding import b64url_decode
from .errors import (
    InvalidRefreshTokenError,
    TokenMalformedError,
    TokenRefreshFailedError,
)

if TYPE_CHECKING:
    from ..models.session import SessionData


def decode_token_payload(token: str) -> dict[str, Any]:
    """Return the decoded JSON payload (middle segment) of ``token``."""
    if not isinstance(token, str) or not token:
        raise TokenMalformedError("token is empty")
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        raise TokenMalformedError("token has no payload segment")
    try:
        raw = b64url_decode(parts[1])
        payload = json.loads(raw)
    except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
        raise TokenMalformedError("token payload is not valid base64url JSON", cause=exc) from exc
    if not isinstance(payload, dict):
        raise TokenMalformedError("token payload is not a JSON object")
    return payload


def token_expiry(token: str) -> int:
    payload = decode_token_payload(token)
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenMalformedError("token payload has no numeric exp claim")
    return int(exp)


def is_token_expired(token: str, *, now: float | None = None) -> bool:
    """True iff the token's ``exp`` is strictly before ``now``."""
    current = time.time() if now is None else now
    return token_expiry(token) < current


@runtime_checkable
class AccessTokenIssuer(Protocol):
    async def generate_access_token_for_app(
        self, refresh_token: str, steam_id: int | None = None
    ) -> str | None:
        """Exchange a refresh token for a new access token."""
        ...


class TokenLifecycle:
    """Refreshes the access token of a ``SessionData`` in place."""

    def __init__(self, session: SessionData, issuer: AccessTokenIssuer) -> None:
        self._session = session
        self._issuer = issuer

    @property
    def session(self) -> SessionData:
        return self._session

    async def refresh_access_token(self) -> str:
        session = self._session
        if not session.refresh_token:
            raise InvalidRefreshTokenError("refresh token is empty")
        try:
            expired = is_token_expired(session.refresh_token)
        except TokenMalformedError as exc:
            raise InvalidRefreshTokenError("refresh token is malformed", cause=exc) from exc
        if expired:
            raise InvalidRefreshTokenError("refresh token is expired")

        try:
            new_token = await self._issuer.generate_access_token_for_app(
                session.refresh_token, session.steam_id
            )
        except Exception as exc:
            diagnostics.warn(
                "tokens",
                "access token refresh failed",
                steam_id=session.steam_id,
                error_type=type(exc).__name__,
            )
            raise TokenRefreshFailedError(
                f"failed to refresh access token: {exc}", cause=exc
            ) from exc

        if not new_token:
            raise TokenRefreshFailedError("failed to refresh access token: empty response")

        session.access_token = new_token
        return new_token

    async def ensure_fresh_access_token(self) -> bool:
        """Refresh only when the access token is expired; True if refreshed."""
        if not self._session.is_access_token_expired():
            return False
        await self.refresh_access_token()
        return True
