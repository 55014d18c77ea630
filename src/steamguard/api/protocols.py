"""
Structural interfaces for the remote operations the core depends on.

The enrollment flow, account facade and token lifecycle only talk to these
protocols; ``steamguard.api.services`` provides httpx-backed implementations
and tests provide in-memory stubs.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable

from ..models.account import CredentialRecord, SteamGuardScheme
from .responses import (
    FinalizeAddAuthenticatorResponse,
    RemoveAuthenticatorResponse,
    SetAccountPhoneNumberResponse,
)


@runtime_checkable
class TwoFactorApi(Protocol):
    async def query_time(self) -> int: ...

    async def add_authenticator(
        self, device_id: str, aligned_time: int
    ) -> CredentialRecord | None: ...

    async def finalize_add_authenticator(
        self, authenticator_code: str, sms_code: str, aligned_time: int
    ) -> FinalizeAddAuthenticatorResponse | None: ...

    async def remove_authenticator(
        self,
        revocation_code: str,
        scheme: SteamGuardScheme = SteamGuardScheme.RETURN_TO_EMAIL,
    ) -> RemoveAuthenticatorResponse | None: ...


@runtime_checkable
class PhoneApi(Protocol):
    async def is_account_waiting_for_email_confirmation(self) -> bool: ...

    async def send_phone_verification_code(self) -> bool: ...

    async def set_account_phone_number(
        self, phone_number: str, country_code: str
    ) -> SetAccountPhoneNumberResponse | None: ...


@runtime_checkable
class UserAccountApi(Protocol):
    async def get_user_country(self) -> str | None: ...


@runtime_checkable
class ConfirmationApi(Protocol):
    async def get_list(self, params: Mapping[str, str]) -> Mapping[str, object] | None: ...

    async def send_action(
        self, op: str, params: Mapping[str, str], confirmation_id: int, nonce: int
    ) -> bool: ...

    async def send_multiple_action(
        self,
        op: str,
        params: Mapping[str, str],
        confirmations: Iterable[tuple[int, int]],
    ) -> bool: ...
