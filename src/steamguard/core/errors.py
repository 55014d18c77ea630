"""
Error hierarchy for steamguard.

Every error raised by the library derives from ``SteamGuardError`` and carries
an ``ErrorContext`` describing its category and severity, so callers can
branch on the class or inspect ``error.context`` when logging.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    SECRET = "secret"
    TIME = "time"
    ENROLLMENT = "enrollment"
    TOKEN = "token"
    NETWORK = "network"
    CONFIRMATION = "confirmation"
    STORAGE = "storage"
    STATE = "state"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Metadata attached to every ``SteamGuardError``."""

    category: ErrorCategory = ErrorCategory.SYSTEM
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "severity": self.severity.value,
            "component_name": self.component_name,
            "metadata": dict(self.metadata),
        }


class SteamGuardError(Exception):
    """Base error with context preservation and optional cause chaining."""

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        component_name: str | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(
            category=category or self.default_category,
            severity=severity or self.default_severity,
            component_name=component_name,
            metadata=metadata,
        )
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured diagnostics."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.__cause__ is not None:
            data["cause"] = {
                "error_type": type(self.__cause__).__name__,
                "message": str(self.__cause__),
            }
        return data


# Secrets -------------------------------------------------------------------


class InvalidSecretError(SteamGuardError):
    """A secret required for signing is missing or not valid base64."""

    default_category = ErrorCategory.SECRET
    default_severity = ErrorSeverity.HIGH


# Time ----------------------------------------------------------------------


class ClockAlignmentUnavailableError(SteamGuardError):
    """The authoritative time source could not be reached.

    ``ClockAligner`` never lets this escape; it is raised by time sources and
    absorbed into a stale offset.
    """

    default_category = ErrorCategory.TIME
    default_severity = ErrorSeverity.LOW


# Enrollment ----------------------------------------------------------------


class EnrollmentError(SteamGuardError):
    default_category = ErrorCategory.ENROLLMENT
    default_severity = ErrorSeverity.HIGH


class BadVerificationCodeError(EnrollmentError):
    """The SMS activation code was rejected (status 89)."""


class ClockDriftExceededError(EnrollmentError):
    """The server kept rejecting generated codes (status 88)."""


class AuthenticatorAlreadyLinkedError(EnrollmentError):
    """An authenticator is already active on the account (status 29)."""


class PhoneNumberRequiredError(EnrollmentError):
    """The account has no phone number and none was supplied."""


class PhoneAssignmentFailedError(EnrollmentError):
    """Setting the account phone number did not trigger a confirmation email."""


class LinkerStateError(EnrollmentError):
    """An enrollment step was invoked out of order."""

    default_category = ErrorCategory.STATE


# Tokens --------------------------------------------------------------------


class TokenError(SteamGuardError):
    default_category = ErrorCategory.TOKEN
    default_severity = ErrorSeverity.HIGH


class TokenExpiredError(TokenError):
    pass


class TokenMalformedError(TokenError):
    """A token could not be split, base64url-decoded or parsed."""


class InvalidRefreshTokenError(TokenError):
    """The refresh token is empty or expired; no refresh was attempted."""


class TokenRefreshFailedError(TokenError):
    pass


# Remote --------------------------------------------------------------------


class RemoteOperationError(SteamGuardError):
    """Transport failure or unexpected response from a remote operation."""

    default_category = ErrorCategory.NETWORK

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, status_code=status_code, endpoint=endpoint, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint


class ConfirmationFetchError(SteamGuardError):
    """The confirmation list request was answered with ``success=false``."""

    default_category = ErrorCategory.CONFIRMATION


class NeedsAuthenticationError(ConfirmationFetchError):
    """The confirmation list requires re-authentication of the session."""


# Storage -------------------------------------------------------------------


class CredentialStoreError(SteamGuardError):
    default_category = ErrorCategory.STORAGE
    default_severity = ErrorSeverity.HIGH


# Retry ---------------------------------------------------------------------


class RetryExhaustedError(SteamGuardError):
    default_category = ErrorCategory.NETWORK

    def __init__(self, message: str, *, retry_stats: Any = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_stats = retry_stats


__all__ = [
    "AuthenticatorAlreadyLinkedError",
    "BadVerificationCodeError",
    "ClockAlignmentUnavailableError",
    "ClockDriftExceededError",
    "ConfirmationFetchError",
    "CredentialStoreError",
    "EnrollmentError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "InvalidRefreshTokenError",
    "InvalidSecretError",
    "LinkerStateError",
    "NeedsAuthenticationError",
    "PhoneAssignmentFailedError",
    "PhoneNumberRequiredError",
    "RemoteOperationError",
    "RetryExhaustedError",
    "SteamGuardError",
    "TokenError",
    "TokenExpiredError",
    "TokenMalformedError",
    "TokenRefreshFailedError",
]
