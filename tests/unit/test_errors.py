"""
Tests for the error hierarchy and retry helper.
"""

import pytest

from steamguard.core.errors import (
    BadVerificationCodeError,
    EnrollmentError,
    ErrorCategory,
    ErrorSeverity,
    NeedsAuthenticationError,
    ConfirmationFetchError,
    RemoteOperationError,
    RetryExhaustedError,
    SteamGuardError,
    TokenMalformedError,
)
from steamguard.core.retry import AsyncRetrier, RetryConfig


class TestErrorTypes:
    def test_context_defaults_from_class(self) -> None:
        error = TokenMalformedError("bad token")
        assert error.message == "bad token"
        assert error.context.category is ErrorCategory.TOKEN
        assert isinstance(error.context.severity, ErrorSeverity)

    def test_explicit_category_and_metadata(self) -> None:
        error = SteamGuardError(
            "oops",
            category=ErrorCategory.STATE,
            severity=ErrorSeverity.HIGH,
            component_name="linker",
            attempt=3,
        )
        data = error.to_dict()
        assert data["error_type"] == "SteamGuardError"
        assert data["context"]["category"] == "state"
        assert data["context"]["component_name"] == "linker"
        assert data["context"]["metadata"] == {"attempt": 3}

    def test_cause_is_chained(self) -> None:
        root = ValueError("root")
        error = RemoteOperationError("wrapped", cause=root, status_code=502)
        assert error.cause is root
        assert error.__cause__ is root
        assert error.status_code == 502
        assert error.to_dict()["cause"] == {"error_type": "ValueError", "message": "root"}

    def test_hierarchy(self) -> None:
        assert issubclass(BadVerificationCodeError, EnrollmentError)
        assert issubclass(NeedsAuthenticationError, ConfirmationFetchError)
        assert issubclass(EnrollmentError, SteamGuardError)


class TestRetry:
    async def test_succeeds_after_retryable_failures(self) -> None:
        calls = {"n": 0}

        async def flaky() -> str:
            calls["n"] += 1
            if calls["n"] < 3:
                raise ConnectionError("nope")
            return "ok"

        retrier = AsyncRetrier(RetryConfig(max_attempts=3, base_delay=0.0, jitter=False))
        assert await retrier(flaky) == "ok"
        assert retrier.stats.attempt_count == 3

    async def test_exhaustion_raises_with_stats(self) -> None:
        async def always() -> None:
            raise TimeoutError("slow")

        retrier = AsyncRetrier(RetryConfig(max_attempts=2, base_delay=0.0))
        with pytest.raises(RetryExhaustedError) as excinfo:
            await retrier.retry(always)
        assert isinstance(excinfo.value.cause, TimeoutError)
        assert excinfo.value.retry_stats.attempt_count == 2

    async def test_non_retryable_propagates(self) -> None:
        calls = {"n": 0}

        async def broken() -> None:
            calls["n"] += 1
            raise KeyError("x")

        with pytest.raises(KeyError):
            await AsyncRetrier(RetryConfig(max_attempts=5, base_delay=0.0)).retry(broken)
        assert calls["n"] == 1

    def test_config_validation(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)
