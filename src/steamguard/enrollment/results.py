"""
Status codes, outcomes and states of the authenticator linking flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from ..core.errors import (
    AuthenticatorAlreadyLinkedError,
    BadVerificationCodeError,
    ClockDriftExceededError,
    PhoneAssignmentFailedError,
    PhoneNumberRequiredError,
    RemoteOperationError,
    SteamGuardError,
)
from ..models.account import CredentialRecord


class AddAuthenticatorStatus(IntEnum):
    """``status`` values of an AddAuthenticator response."""

    SUCCESS = 1
    NO_PHONE_NUMBER = 2  # account has no phone on file
    AUTHENTICATOR_PRESENT = 29


class FinalizeStatus(IntEnum):
    """``status`` values of a FinalizeAddAuthenticator response."""

    SUCCESS = 1
    UNABLE_TO_GENERATE_CORRECT_CODES = 88  # server rejected the generated code
    BAD_SMS_CODE = 89


class LinkResult(str, Enum):
    MUST_PROVIDE_PHONE_NUMBER = "must_provide_phone_number"
    MUST_REMOVE_PHONE_NUMBER = "must_remove_phone_number"
    MUST_CONFIRM_EMAIL = "must_confirm_email"
    AWAITING_FINALIZATION = "awaiting_finalization"
    GENERAL_FAILURE = "general_failure"
    AUTHENTICATOR_PRESENT = "authenticator_present"
    FAILURE_ADDING_PHONE = "failure_adding_phone"

    @property
    def description(self) -> str:
        return _LINK_DESCRIPTIONS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (LinkResult.AUTHENTICATOR_PRESENT, LinkResult.GENERAL_FAILURE)

    def to_error(self) -> SteamGuardError | None:
        """Equivalent error for failure outcomes, ``None`` otherwise."""
        if self is LinkResult.MUST_PROVIDE_PHONE_NUMBER:
            return PhoneNumberRequiredError(self.description)
        if self is LinkResult.FAILURE_ADDING_PHONE:
            return PhoneAssignmentFailedError(self.description)
        if self is LinkResult.AUTHENTICATOR_PRESENT:
            return AuthenticatorAlreadyLinkedError(self.description)
        if self is LinkResult.GENERAL_FAILURE:
            return RemoteOperationError(self.description)
        return None


_LINK_DESCRIPTIONS = {
    LinkResult.MUST_PROVIDE_PHONE_NUMBER: "No phone number linked to the account.",
    LinkResult.MUST_REMOVE_PHONE_NUMBER: (
        "A phone number is already linked to the account. "
        "This must be removed before continuing."
    ),
    LinkResult.MUST_CONFIRM_EMAIL: "You need to click the link from the confirmation email.",
    LinkResult.AWAITING_FINALIZATION: "Awaiting finalization, you must provide an SMS code.",
    LinkResult.GENERAL_FAILURE: "Unknown failure.",
    LinkResult.AUTHENTICATOR_PRESENT: "Authenticator already set up.",
    LinkResult.FAILURE_ADDING_PHONE: "Unknown issue adding the phone number to the account.",
}


class FinalizeResult(str, Enum):
    GENERAL_FAILURE = "general_failure"
    BAD_SMS_CODE = "bad_sms_code"
    UNABLE_TO_GENERATE_CORRECT_CODES = "unable_to_generate_correct_codes"
    SUCCESS = "success"
    TOO_MANY_TRIES = "too_many_tries"

    @property
    def description(self) -> str:
        return _FINALIZE_DESCRIPTIONS[self]

    def to_error(self) -> SteamGuardError | None:
        if self is FinalizeResult.BAD_SMS_CODE:
            return BadVerificationCodeError(self.description)
        if self in (
            FinalizeResult.UNABLE_TO_GENERATE_CORRECT_CODES,
            FinalizeResult.TOO_MANY_TRIES,
        ):
            return ClockDriftExceededError(self.description)
        if self is FinalizeResult.GENERAL_FAILURE:
            return RemoteOperationError(self.description)
        return None


_FINALIZE_DESCRIPTIONS = {
    FinalizeResult.GENERAL_FAILURE: "Unknown failure.",
    FinalizeResult.BAD_SMS_CODE: "Provided SMS confirmation code was incorrect.",
    FinalizeResult.UNABLE_TO_GENERATE_CORRECT_CODES: (
        "Unable to generate correct/valid authentication codes."
    ),
    FinalizeResult.SUCCESS: "Successfully linked.",
    FinalizeResult.TOO_MANY_TRIES: "Too many attempts.",
}


# Linker states ---------------------------------------------------------------


@dataclass(frozen=True)
class Start:
    """Nothing has been submitted yet."""


@dataclass(frozen=True)
class AwaitingEmailClick:
    """A phone number was set; the owner must click the emailed link."""

    email_address: str


@dataclass(frozen=True)
class EmailConfirmed:
    """The email link was clicked and the SMS code was requested."""

    email_address: str


@dataclass(frozen=True)
class AwaitingFinalization:
    """Steam accepted the authenticator; an SMS code is needed to activate it."""

    account: CredentialRecord


@dataclass(frozen=True)
class Finalized:
    account: CredentialRecord


LinkState = Union[Start, AwaitingEmailClick, EmailConfirmed, AwaitingFinalization, Finalized]
