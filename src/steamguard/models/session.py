"""
Session portion of a credential record.
"""

from __future__ import annotations

import secrets

from pydantic import BaseModel, ConfigDict, Field

from ..core.tokens import is_token_expired

MOBILE_CLIENT = "android"
MOBILE_CLIENT_VERSION = "777777 3.6.4"
COOKIE_DOMAINS = ("steamcommunity.com", "store.steampowered.com")


def generate_session_id() -> str:
    return secrets.token_hex(16).upper()


class SessionData(BaseModel):
    """Steam web session for a mobile-app login.

    ``access_token`` is only replaced by ``TokenLifecycle.refresh_access_token``
    after construction. ``session_id`` is created on first cookie use and kept
    for the life of the object.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    steam_id: int = Field(default=0, alias="SteamID")
    access_token: str = Field(default="", alias="AccessToken")
    refresh_token: str = Field(default="", alias="RefreshToken")
    session_id: str | None = Field(default=None, alias="SessionID")

    def is_access_token_expired(self) -> bool:
        if not self.access_token:
            return True
        return is_token_expired(self.access_token)

    def is_refresh_token_expired(self) -> bool:
        if not self.refresh_token:
            return True
        return is_token_expired(self.refresh_token)

    def ensure_session_id(self) -> str:
        if not self.session_id:
            self.session_id = generate_session_id()
        return self.session_id

    @property
    def steam_login_secure(self) -> str:
        return f"{self.steam_id}%7C%7C{self.access_token}"

    def cookie_values(self) -> dict[str, str]:
        return {
            "steamLoginSecure": self.steam_login_secure,
            "sessionid": self.ensure_session_id(),
            "mobileClient": MOBILE_CLIENT,
            "mobileClientVersion": MOBILE_CLIENT_VERSION,
        }

    def get_cookies(self) -> dict[str, dict[str, str]]:
        """Cookie values keyed by the domain they must be set for."""
        values = self.cookie_values()
        return {domain: dict(values) for domain in COOKIE_DOMAINS}

    def cookie_header(self) -> str:
        """``Cookie`` header value authenticating requests as this session."""
        return "; ".join(f"{name}={value}" for name, value in self.cookie_values().items())
