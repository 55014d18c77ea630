"""
Day-to-day operations on a linked authenticator.

``SteamGuardAccount`` combines a ``CredentialRecord`` with a ``ClockAligner``
and the remote services needed after enrollment: generating login codes,
listing and answering mobile confirmations, refreshing the session and
removing the authenticator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from .api.protocols import ConfirmationApi, TwoFactorApi
from .core import diagnostics
from .core.clock import ClockAligner
from .core.codes import generate_code
from .core.errors import (
    ConfirmationFetchError,
    InvalidRefreshTokenError,
    InvalidSecretError,
    NeedsAuthenticationError,
)
from .core.signing import ConfirmationOp, ConfirmationTag, build_query_parameters
from .core.tokens import AccessTokenIssuer, TokenLifecycle
from .models.account import CredentialRecord, SteamGuardScheme
from .models.confirmation import Confirmation, ConfirmationsResponse

if TYPE_CHECKING:
    from .api.client import SteamWebClient


class SteamGuardAccount:
    def __init__(
        self,
        record: CredentialRecord,
        aligner: ClockAligner,
        *,
        confirmations: ConfirmationApi | None = None,
        two_factor: TwoFactorApi | None = None,
        token_issuer: AccessTokenIssuer | None = None,
    ) -> None:
        self.record = record
        self._aligner = aligner
        self._confirmations = confirmations
        self._two_factor = two_factor
        self._token_issuer = token_issuer

    @classmethod
    def from_client(
        cls, record: CredentialRecord, client: SteamWebClient, aligner: ClockAligner
    ) -> SteamGuardAccount:
        """Wire the account to httpx-backed services using its stored session."""
        from .api.services import AuthenticationService, ConfirmationService, TwoFactorService
        from .models.session import SessionData

        session = record.session or SessionData()
        return cls(
            record,
            aligner,
            confirmations=ConfirmationService(client, session),
            two_factor=TwoFactorService.for_session(client, session),
            token_issuer=AuthenticationService.for_session(client, session),
        )

    # Codes -------------------------------------------------------------------

    def generate_steam_guard_code_for_time(self, aligned_time: int) -> str:
        return generate_code(self.record.shared_secret, aligned_time)

    async def generate_steam_guard_code(self) -> str:
        """Current login code; realigns the clock first when needed."""
        return self.generate_steam_guard_code_for_time(await self._aligner.get_aligned_time())

    # Confirmations -----------------------------------------------------------

    def _require(self, api: object, name: str) -> None:
        if api is None:
            raise RuntimeError(f"{name} service is not configured for this account")

    async def _query_parameters(self, tag: ConfirmationTag) -> dict[str, str]:
        aligned_time = await self._aligner.get_aligned_time()
        if not self.record.identity_secret:
            raise InvalidSecretError("identity_secret is required for confirmations")
        return build_query_parameters(
            self.record.device_id,
            self.record.steam_id,
            self.record.identity_secret,
            aligned_time,
            tag,
        )

    async def fetch_confirmations(self) -> list[Confirmation]:
        self._require(self._confirmations, "confirmation")
        assert self._confirmations is not None
        params = await self._query_parameters(ConfirmationTag.LIST)
        payload = await self._confirmations.get_list(params)
        if payload is None:
            return []

        response = ConfirmationsResponse.model_validate(payload)
        if not response.success:
            raise ConfirmationFetchError(response.message or "confirmation list request failed")
        if response.needs_authentication:
            raise NeedsAuthenticationError("session needs to be re-authenticated")
        return list(response.confirmations)

    async def _respond(self, confirmation: Confirmation, op: ConfirmationOp) -> bool:
        self._require(self._confirmations, "confirmation")
        assert self._confirmations is not None
        params = await self._query_parameters(op.tag)
        return await self._confirmations.send_action(
            op.value, params, confirmation.id, confirmation.nonce
        )

    async def _respond_many(
        self, confirmations: Sequence[Confirmation], op: ConfirmationOp
    ) -> bool:
        self._require(self._confirmations, "confirmation")
        assert self._confirmations is not None
        if not confirmations:
            return True
        params = await self._query_parameters(op.tag)
        pairs: Iterable[tuple[int, int]] = [(c.id, c.nonce) for c in confirmations]
        return await self._confirmations.send_multiple_action(op.value, params, pairs)

    async def accept_confirmation(self, confirmation: Confirmation) -> bool:
        return await self._respond(confirmation, ConfirmationOp.ALLOW)

    async def deny_confirmation(self, confirmation: Confirmation) -> bool:
        return await self._respond(confirmation, ConfirmationOp.CANCEL)

    async def accept_multiple_confirmations(self, confirmations: Sequence[Confirmation]) -> bool:
        return await self._respond_many(confirmations, ConfirmationOp.ALLOW)

    async def deny_multiple_confirmations(self, confirmations: Sequence[Confirmation]) -> bool:
        return await self._respond_many(confirmations, ConfirmationOp.CANCEL)

    # Session -----------------------------------------------------------------

    async def refresh_session(self) -> str:
        self._require(self._token_issuer, "token")
        assert self._token_issuer is not None
        if self.record.session is None:
            raise InvalidRefreshTokenError("account has no session")
        return await TokenLifecycle(self.record.session, self._token_issuer).refresh_access_token()

    # Removal -----------------------------------------------------------------

    async def deactivate_authenticator(
        self, scheme: SteamGuardScheme = SteamGuardScheme.RETURN_TO_EMAIL
    ) -> bool:
        """Remove the authenticator using the stored revocation code."""
        self._require(self._two_factor, "two-factor")
        assert self._two_factor is not None
        response = await self._two_factor.remove_authenticator(self.record.revocation_code, scheme)
        if response is None:
            return False
        if not response.success:
            diagnostics.warn(
                "account",
                "authenticator removal rejected",
                account_name=self.record.account_name,
                revocation_attempts_remaining=response.revocation_attempts_remaining,
            )
        return response.success
