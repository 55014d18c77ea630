from .linker import AuthenticatorLinker, generate_device_id
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

__all__ = [
    "AddAuthenticatorStatus",
    "AuthenticatorLinker",
    "AwaitingEmailClick",
    "AwaitingFinalization",
    "EmailConfirmed",
    "FinalizeResult",
    "FinalizeStatus",
    "Finalized",
    "LinkResult",
    "LinkState",
    "Start",
    "generate_device_id",
]
