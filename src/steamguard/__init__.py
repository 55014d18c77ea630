"""
Steam Guard mobile authenticator.

Generates login codes, signs mobile confirmations, links new authenticators
and keeps the account session's access token fresh. All network calls are
async; clock alignment is owned by an explicit ``ClockAligner`` instance.
"""

from __future__ import annotations

from ._version import __version__
from .account import SteamGuardAccount
from .api.client import SteamWebClient
from .core.clock import ClockAligner
from .core.codes import generate_code
from .core.settings import Settings
from .core.signing import ConfirmationTag, sign
from .enrollment import AuthenticatorLinker, FinalizeResult, LinkResult
from .models import Confirmation, CredentialRecord, SessionData
from .storage import MaFileStore

VERSION = __version__

__all__ = [
    "AuthenticatorLinker",
    "ClockAligner",
    "Confirmation",
    "ConfirmationTag",
    "CredentialRecord",
    "FinalizeResult",
    "LinkResult",
    "MaFileStore",
    "SessionData",
    "Settings",
    "SteamGuardAccount",
    "SteamWebClient",
    "VERSION",
    "__version__",
    "generate_code",
    "sign",
]
