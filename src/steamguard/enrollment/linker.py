"""
Authenticator linking: binds a new mobile authenticator to an account.

The flow is driven by two calls that the owner may have to repeat:

1. ``add_authenticator()`` asks Steam to create the authenticator. If the
   account has no phone number, one is set (the owner then has to click an
   emailed link and call ``add_authenticator()`` again). On success the
   freshly created ``CredentialRecord`` is available as ``linked_account``.
   Its ``revocation_code`` is only ever returned at this point and must be
   persisted by the caller now.
2. ``finalize_add_authenticator(sms_code)`` activates it by submitting
   generated codes together with the SMS code Steam sent.

Progress is tracked as a single tagged ``LinkState``. The state only moves
forward after the awaited remote call has returned, so a call cancelled at
any ``await`` leaves the linker where it was and the next call resumes
instead of re-submitting the phone number or the authenticator. A linker is
meant for sequential use by one caller.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING, Awaitable, Callable

from ..core import diagnostics
from ..core.clock import ClockAligner
from ..core.codes import generate_code
from ..core.errors import LinkerStateError, RemoteOperationError
from ..core.settings import EnrollmentSettings
from ..api.protocols import PhoneApi, TwoFactorApi, UserAccountApi
from ..api.responses import FinalizeAddAuthenticatorResponse, SetAccountPhoneNumberResponse
from ..models.account import CredentialRecord
from ..models.session import SessionData
from .results import (
    AddAuthenticatorStatus,
    AwaitingEmailClick,
    AwaitingFinalization,
    EmailConfirmed,
    Finalized,
    FinalizeResult,
    FinalizeStatus,
    LinkResult,
    LinkState,
    Start,
)

if TYPE_CHECKING:
    from ..api.client import SteamWebClient

Sleep = Callable[[float], Awaitable[None]]


def generate_device_id(platform: str = "android") -> str:
    """Random device id of the form ``android:<uuid4>``."""
    return f"{platform}:{uuid.uuid4()}"


class AuthenticatorLinker:
    def __init__(
        self,
        session: SessionData,
        *,
        two_factor: TwoFactorApi,
        phone: PhoneApi,
        user_account: UserAccountApi,
        aligner: ClockAligner,
        phone_number: str | None = None,
        phone_country_code: str | None = None,
        settings: EnrollmentSettings | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._session = session
        self._two_factor = two_factor
        self._phone = phone
        self._user_account = user_account
        self._aligner = aligner
        self._settings = settings or EnrollmentSettings()
        self._sleep = sleep
        self.phone_number = phone_number
        self.phone_country_code = phone_country_code
        self._device_id = generate_device_id(self._settings.device_platform)
        self._state: LinkState = Start()

    @classmethod
    def from_client(
        cls,
        session: SessionData,
        client: SteamWebClient,
        aligner: ClockAligner,
        **kwargs: object,
    ) -> AuthenticatorLinker:
        """Build a linker wired to the httpx-backed services for ``session``."""
        from ..api.services import PhoneService, TwoFactorService, UserAccountService

        return cls(
            session,
            two_factor=TwoFactorService.for_session(client, session),
            phone=PhoneService.for_session(client, session),
            user_account=UserAccountService.for_session(client, session),
            aligner=aligner,
            **kwargs,  # type: ignore[arg-type]
        )

    # State views -------------------------------------------------------------

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def confirmation_email_sent(self) -> bool:
        return isinstance(self._state, (AwaitingEmailClick, EmailConfirmed))

    @property
    def confirmation_email_address(self) -> str | None:
        if isinstance(self._state, (AwaitingEmailClick, EmailConfirmed)):
            return self._state.email_address
        return None

    @property
    def linked_account(self) -> CredentialRecord | None:
        if isinstance(self._state, (AwaitingFinalization, Finalized)):
            return self._state.account
        return None

    @property
    def finalized(self) -> bool:
        return isinstance(self._state, Finalized)

    # Step 1 ------------------------------------------------------------------

    async def add_authenticator(self) -> LinkResult:
        state = self._state
        if isinstance(state, Finalized):
            raise LinkerStateError("authenticator is already finalized")
        if isinstance(state, AwaitingFinalization):
            return LinkResult.AWAITING_FINALIZATION

        if isinstance(state, AwaitingEmailClick):
            try:
                still_waiting = await self._phone.is_account_waiting_for_email_confirmation()
            except RemoteOperationError as exc:
                self._warn("email confirmation check failed", exc)
                return LinkResult.GENERAL_FAILURE
            if still_waiting:
                return LinkResult.MUST_CONFIRM_EMAIL
            try:
                await self._phone.send_phone_verification_code()
            except RemoteOperationError as exc:
                self._warn("requesting the SMS code failed", exc)
                return LinkResult.GENERAL_FAILURE
            self._state = EmailConfirmed(state.email_address)
            await self._sleep(self._settings.sms_delay_seconds)

        aligned_time = await self._aligner.get_aligned_time()
        try:
            response = await self._two_factor.add_authenticator(self._device_id, aligned_time)
        except RemoteOperationError as exc:
            self._warn("AddAuthenticator failed", exc)
            response = None
        if response is None:
            return LinkResult.GENERAL_FAILURE

        status = response.status
        if status == AddAuthenticatorStatus.NO_PHONE_NUMBER:
            return await self._assign_phone_number()
        if status == AddAuthenticatorStatus.AUTHENTICATOR_PRESENT:
            return LinkResult.AUTHENTICATOR_PRESENT
        if status != AddAuthenticatorStatus.SUCCESS:
            diagnostics.warn("enrollment", "unexpected AddAuthenticator status", status=status)
            return LinkResult.GENERAL_FAILURE

        account = response.model_copy(
            update={"device_id": self._device_id, "session": self._session}
        )
        self._state = AwaitingFinalization(account)
        return LinkResult.AWAITING_FINALIZATION

    async def _assign_phone_number(self) -> LinkResult:
        if not self.phone_number:
            return LinkResult.MUST_PROVIDE_PHONE_NUMBER

        country_code = self.phone_country_code or await self._lookup_country()
        response: SetAccountPhoneNumberResponse | None
        try:
            response = await self._phone.set_account_phone_number(self.phone_number, country_code)
        except RemoteOperationError as exc:
            self._warn("SetAccountPhoneNumber failed", exc)
            response = None

        if response is not None and response.confirmation_email_address:
            self._state = AwaitingEmailClick(response.confirmation_email_address)
            return LinkResult.MUST_CONFIRM_EMAIL
        return LinkResult.FAILURE_ADDING_PHONE

    async def _lookup_country(self) -> str:
        try:
            country = await self._user_account.get_user_country()
        except RemoteOperationError as exc:
            self._warn("GetUserCountry failed", exc)
            country = None
        return country or self._settings.default_country_code

    # Step 2 ------------------------------------------------------------------

    async def finalize_add_authenticator(self, sms_code: str) -> FinalizeResult:
        state = self._state
        if isinstance(state, Finalized):
            raise LinkerStateError("authenticator is already finalized")
        if not isinstance(state, AwaitingFinalization):
            raise LinkerStateError("add_authenticator() has not succeeded yet")

        account = state.account
        max_attempts = self._settings.max_finalize_attempts
        for attempt in range(1, max_attempts + 1):
            # Fresh code every attempt; the server may ask for consecutive codes.
            aligned_time = await self._aligner.get_aligned_time()
            code = generate_code(account.shared_secret, aligned_time)

            response: FinalizeAddAuthenticatorResponse | None
            try:
                response = await self._two_factor.finalize_add_authenticator(
                    code, sms_code, aligned_time
                )
            except RemoteOperationError as exc:
                self._warn("FinalizeAddAuthenticator failed", exc)
                response = None

            if response is None:
                return FinalizeResult.GENERAL_FAILURE
            if response.status == FinalizeStatus.BAD_SMS_CODE:
                return FinalizeResult.BAD_SMS_CODE
            if response.status == FinalizeStatus.UNABLE_TO_GENERATE_CORRECT_CODES:
                if attempt >= max_attempts:
                    return FinalizeResult.UNABLE_TO_GENERATE_CORRECT_CODES
                diagnostics.debug("enrollment", "code rejected, retrying", attempt=attempt)
                continue
            if not response.success:
                return FinalizeResult.GENERAL_FAILURE
            if response.want_more:
                continue

            account.fully_enrolled = True
            self._state = Finalized(account)
            return FinalizeResult.SUCCESS

        return FinalizeResult.TOO_MANY_TRIES

    def _warn(self, message: str, exc: BaseException) -> None:
        diagnostics.warn(
            "enrollment",
            message,
            device_id=self._device_id,
            error=str(exc),
            error_type=type(exc).__name__,
        )
