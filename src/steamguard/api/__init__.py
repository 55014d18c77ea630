from .client import SteamWebClient
from .protocols import ConfirmationApi, PhoneApi, TwoFactorApi, UserAccountApi
from .services import (
    AuthenticationService,
    ConfirmationService,
    PhoneService,
    TwoFactorService,
    UserAccountService,
)

__all__ = [
    "AuthenticationService",
    "ConfirmationApi",
    "ConfirmationService",
    "PhoneApi",
    "PhoneService",
    "SteamWebClient",
    "TwoFactorApi",
    "TwoFactorService",
    "UserAccountApi",
    "UserAccountService",
]
