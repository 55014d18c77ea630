"""
Mobile confirmation entries (trades, market listings, ...).
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfirmationType(IntEnum):
    INVALID = 0
    TEST = 1
    TRADE = 2
    MARKET_LISTING = 3
    FEATURE_OPT_OUT = 4
    PHONE_NUMBER_CHANGE = 5
    ACCOUNT_RECOVERY = 6


class Confirmation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    nonce: int = Field(alias="nonce")
    creator_id: int = 0
    headline: str = ""
    summary: list[str] = Field(default_factory=list)
    accept: str = ""
    cancel: str = ""
    icon: str = ""
    type: ConfirmationType = ConfirmationType.INVALID

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> ConfirmationType:
        try:
            return ConfirmationType(int(value))
        except (TypeError, ValueError):
            if isinstance(value, str) and value.upper() in ConfirmationType.__members__:
                return ConfirmationType[value.upper()]
            return ConfirmationType.INVALID

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    @property
    def key(self) -> int:
        """The nonce sent back as ``ck`` when acting on this confirmation."""
        return self.nonce


class ConfirmationsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    message: str = ""
    needs_authentication: bool = Field(default=False, alias="needauth")
    confirmations: list[Confirmation] = Field(default_factory=list, alias="conf")

    @field_validator("confirmations", mode="before")
    @classmethod
    def _coerce_confirmations(cls, value: Any) -> Any:
        return [] if value is None else value
