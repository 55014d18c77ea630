"""
Credential record for a linked mobile authenticator (the ".maFile" record).
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field

from .session import SessionData


class SteamGuardScheme(IntEnum):
    """Steam Guard method to fall back to when removing the authenticator."""

    RETURN_TO_EMAIL = 1
    NONE = 2


class CredentialRecord(BaseModel):
    """Authenticator secrets and identifiers as returned by AddAuthenticator.

    ``shared_secret`` and ``identity_secret`` are base64 strings. A missing
    secret is kept as ``None`` and omitted on serialization rather than being
    rewritten as an empty string.
    """

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    shared_secret: str | None = None
    serial_number: str | None = None
    revocation_code: str = ""
    uri: str | None = None
    server_time: int = 0
    account_name: str | None = None
    token_gid: str | None = None
    identity_secret: str | None = None
    secret_1: str | None = None
    status: int = 0
    device_id: str | None = None
    fully_enrolled: bool = False
    session: SessionData | None = Field(default=None, alias="Session")

    @property
    def steam_id(self) -> int | None:
        if self.session is None or not self.session.steam_id:
            return None
        return self.session.steam_id

    @property
    def is_linked(self) -> bool:
        return bool(self.shared_secret)
