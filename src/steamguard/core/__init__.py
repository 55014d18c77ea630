from .clock import ClockAligner, FixedTimeSource, TimeSource
from .codes import CODE_ALPHABET, CODE_LENGTH, TIME_STEP_SECONDS, generate_code
from .errors import ErrorCategory, ErrorSeverity, SteamGuardError
from .retry import AsyncRetrier, RetryConfig
from .settings import Settings
from .signing import ConfirmationOp, ConfirmationTag, build_query_parameters, sign
from .tokens import TokenLifecycle, is_token_expired

__all__ = [
    "AsyncRetrier",
    "CODE_ALPHABET",
    "CODE_LENGTH",
    "ClockAligner",
    "ConfirmationOp",
    "ConfirmationTag",
    "ErrorCategory",
    "ErrorSeverity",
    "FixedTimeSource",
    "RetryConfig",
    "Settings",
    "SteamGuardError",
    "TIME_STEP_SECONDS",
    "TimeSource",
    "TokenLifecycle",
    "build_query_parameters",
    "generate_code",
    "is_token_expired",
    "sign",
]
