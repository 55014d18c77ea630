"""
Configuration models for steamguard using Pydantic v2 Settings.

Values come from keyword arguments or ``STEAMGUARD_``-prefixed environment
variables, with ``__`` separating nested groups, e.g.
``STEAMGUARD_ENROLLMENT__SMS_DELAY_SECONDS=3``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LATEST_CONFIG_SCHEMA_VERSION = "1.0"

MOBILE_APP_USER_AGENT = "Dalvik/2.1.0 (Linux; U; Android 9; Valve Steam App Version/3)"


class CoreSettings(BaseModel):
    """Library-wide toggles."""

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/WARN diagnostics for non-fatal internal errors",
    )


class HttpSettings(BaseModel):
    """Transport defaults for the bundled httpx client."""

    web_api_base: str = Field(
        default="https://api.steampowered.com",
        description="Base URL of the Steam Web API",
    )
    community_base: str = Field(
        default="https://steamcommunity.com",
        description="Base URL of the community site serving mobile confirmations",
    )
    user_agent: str = Field(
        default=MOBILE_APP_USER_AGENT,
        description="User-Agent header sent with every request",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Per-request timeout",
    )
    max_connections: int = Field(
        default=8,
        ge=1,
        description="Connection pool limit for the shared client",
    )

    @field_validator("web_api_base", "community_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base URL must not be empty")
        return value


class TimeSettings(BaseModel):
    realign_interval_seconds: int = Field(
        default=6 * 60 * 60,
        ge=1,
        description="Maximum age of a clock alignment before it is refreshed",
    )
    failure_backoff_seconds: int = Field(
        default=60,
        ge=0,
        description="Wait after a failed alignment before querying the server again",
    )


class EnrollmentSettings(BaseModel):
    """Knobs for the authenticator linking flow."""

    device_platform: str = Field(
        default="android",
        description="Platform tag prefixed to generated device ids",
    )
    sms_delay_seconds: float = Field(
        default=1.5,
        ge=0.0,
        description="Wait after requesting the SMS code before adding the authenticator",
    )
    max_finalize_attempts: int = Field(
        default=10,
        ge=1,
        description="Upper bound on finalize submissions per SMS code",
    )
    default_country_code: str = Field(
        default="US",
        min_length=2,
        description="Country used when the account country cannot be looked up",
    )


class StorageSettings(BaseModel):
    mafile_directory: str = Field(
        default="maFiles",
        description="Directory holding persisted credential records",
    )


class Settings(BaseSettings):
    """Top-level configuration model with versioning and grouped settings."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    time: TimeSettings = Field(default_factory=TimeSettings)
    enrollment: EnrollmentSettings = Field(default_factory=EnrollmentSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    model_config = SettingsConfigDict(
        env_prefix="STEAMGUARD_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_json(self) -> str:
        import json

        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )
