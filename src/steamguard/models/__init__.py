from .account import CredentialRecord, SteamGuardScheme
from .confirmation import Confirmation, ConfirmationsResponse, ConfirmationType
from .session import SessionData

__all__ = [
    "Confirmation",
    "ConfirmationType",
    "ConfirmationsResponse",
    "CredentialRecord",
    "SessionData",
    "SteamGuardScheme",
]
