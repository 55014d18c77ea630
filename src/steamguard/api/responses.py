"""
Response models for the Steam Web API calls the library consumes.

Only fields that the library reads are declared; everything else in Steam's
payloads is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class QueryTimeResponse(_Response):
    server_time: int = 0
    skew_tolerance_seconds: int = 0
    large_time_jink: int = 0
    probe_frequency_seconds: int = 0
    adjusted_time_probe_frequency_seconds: int = 0
    hint_probe_frequency_seconds: int = 0
    sync_timeout: int = 0
    try_again_seconds: int = 0
    max_attempts: int = 0


class FinalizeAddAuthenticatorResponse(_Response):
    success: bool = False
    want_more: bool = False
    server_time: int = 0
    status: int = 0


class RemoveAuthenticatorResponse(_Response):
    success: bool = False
    revocation_attempts_remaining: int = 0


class EmailConfirmationStatusResponse(_Response):
    awaiting_email_confirmation: bool = False
    seconds_to_wait: int = 0


class SetAccountPhoneNumberResponse(_Response):
    confirmation_email_address: str | None = None
    phone_number_formatted: str | None = None


class UserCountryResponse(_Response):
    country: str | None = None


class GenerateAccessTokenResponse(_Response):
    access_token: str | None = None
    refresh_token: str | None = None


class SendConfirmationResponse(_Response):
    success: bool = False
