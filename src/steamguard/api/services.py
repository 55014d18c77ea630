"""
httpx-backed implementations of the remote operations.

Each class mirrors one Steam Web API "interface" (``ITwoFactorService``,
``IPhoneService``, ...). Requests authenticate with the session's access
token as a query parameter and carry ``steamid`` in the form body when it is
known. Missing ``response`` envelopes are reported as ``None`` so callers can
treat them as a general failure; transport problems raise
``RemoteOperationError`` from ``SteamWebClient``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core.errors import RemoteOperationError
from ..models.account import CredentialRecord, SteamGuardScheme
from ..models.session import SessionData
from .client import SteamWebClient, unwrap_response
from .responses import (
    EmailConfirmationStatusResponse,
    FinalizeAddAuthenticatorResponse,
    GenerateAccessTokenResponse,
    QueryTimeResponse,
    RemoveAuthenticatorResponse,
    SendConfirmationResponse,
    SetAccountPhoneNumberResponse,
    UserCountryResponse,
)


class WebApiService:
    """Common plumbing for one Web API interface."""

    interface = ""

    def __init__(
        self,
        client: SteamWebClient,
        steam_id: int | None = None,
        access_token: str | None = None,
        *,
        session: SessionData | None = None,
    ) -> None:
        self._client = client
        self._steam_id = steam_id
        self._access_token = access_token or ""
        self._session = session

    @classmethod
    def for_session(cls, client: SteamWebClient, session: SessionData) -> Any:
        """Bind to ``session``; its token is read at request time, so refreshes apply."""
        return cls(client, session=session)

    @property
    def steam_id(self) -> int | None:
        if self._session is not None:
            return self._session.steam_id or None
        return self._steam_id

    @property
    def access_token(self) -> str:
        if self._session is not None:
            return self._session.access_token
        return self._access_token

    def url(self, method: str, version: int = 1) -> str:
        return f"{self._client.web_api_base}/{self.interface}/{method}/v{version}/"

    def _params(self) -> dict[str, str]:
        if self.access_token:
            return {"access_token": self.access_token}
        return {}

    def _body(self, **fields: str) -> dict[str, str]:
        body: dict[str, str] = {}
        if self.steam_id is not None:
            body["steamid"] = str(self.steam_id)
        body.update(fields)
        return body

    async def _post(self, method: str, **fields: str) -> dict[str, Any] | None:
        payload = await self._client.post_form(
            self.url(method), data=self._body(**fields), params=self._params()
        )
        return unwrap_response(payload)


class TwoFactorService(WebApiService):
    interface = "ITwoFactorService"

    async def query_time(self) -> int:
        inner = await self._post("QueryTime")
        if inner is None:
            raise RemoteOperationError(
                "QueryTime returned no response", endpoint=self.url("QueryTime")
            )
        return QueryTimeResponse.model_validate(inner).server_time

    async def add_authenticator(
        self, device_id: str, aligned_time: int
    ) -> CredentialRecord | None:
        inner = await self._post(
            "AddAuthenticator",
            authenticator_time=str(aligned_time),
            authenticator_type="1",
            device_identifier=device_id,
            sms_phone_id="1",
        )
        if inner is None:
            return None
        return CredentialRecord.model_validate(inner)

    async def finalize_add_authenticator(
        self, authenticator_code: str, sms_code: str, aligned_time: int
    ) -> FinalizeAddAuthenticatorResponse | None:
        inner = await self._post(
            "FinalizeAddAuthenticator",
            authenticator_time=str(aligned_time),
            authenticator_code=authenticator_code,
            activation_code=sms_code,
            sms_phone_id="1",
        )
        if inner is None:
            return None
        return FinalizeAddAuthenticatorResponse.model_validate(inner)

    async def remove_authenticator(
        self,
        revocation_code: str,
        scheme: SteamGuardScheme = SteamGuardScheme.RETURN_TO_EMAIL,
    ) -> RemoveAuthenticatorResponse | None:
        inner = await self._post(
            "RemoveAuthenticator",
            revocation_code=revocation_code,
            revocation_reason="1",
            steamguard_scheme=str(int(scheme)),
            remove_all_steamguard_cookies="false",
        )
        if inner is None:
            return None
        return RemoveAuthenticatorResponse.model_validate(inner)


class PhoneService(WebApiService):
    interface = "IPhoneService"

    async def is_account_waiting_for_email_confirmation(self) -> bool:
        inner = await self._post("IsAccountWaitingForEmailConfirmation")
        if inner is None:
            return False
        return EmailConfirmationStatusResponse.model_validate(inner).awaiting_email_confirmation

    async def send_phone_verification_code(self) -> bool:
        await self._post("SendPhoneVerificationCode")
        return True

    async def set_account_phone_number(
        self, phone_number: str, country_code: str
    ) -> SetAccountPhoneNumberResponse | None:
        inner = await self._post(
            "SetAccountPhoneNumber",
            phone_number=phone_number,
            phone_country_code=country_code,
        )
        if inner is None:
            return None
        return SetAccountPhoneNumberResponse.model_validate(inner)


class UserAccountService(WebApiService):
    interface = "IUserAccountService"

    async def get_user_country(self) -> str | None:
        inner = await self._post("GetUserCountry")
        if inner is None:
            return None
        return UserCountryResponse.model_validate(inner).country


class AuthenticationService(WebApiService):
    interface = "IAuthenticationService"

    async def generate_access_token_for_app(
        self, refresh_token: str, steam_id: int | None = None
    ) -> str | None:
        fields = {"refresh_token": refresh_token}
        if steam_id is not None:
            fields["steamid"] = str(steam_id)
        inner = await self._post("GenerateAccessTokenForApp", **fields)
        if inner is None:
            return None
        return GenerateAccessTokenResponse.model_validate(inner).access_token


class ConfirmationService:
    """Community ``/mobileconf`` endpoints, authenticated with session cookies."""

    def __init__(self, client: SteamWebClient, session: SessionData) -> None:
        self._client = client
        self._session = session

    def url(self, path: str) -> str:
        return f"{self._client.community_base}/mobileconf/{path}"

    async def get_list(self, params: Mapping[str, str]) -> Mapping[str, object] | None:
        payload = await self._client.get_json(
            self.url("getlist"),
            params=params,
            cookie_header=self._session.cookie_header(),
        )
        return payload if isinstance(payload, dict) else None

    async def send_action(
        self, op: str, params: Mapping[str, str], confirmation_id: int, nonce: int
    ) -> bool:
        query = {"op": op, **params, "cid": str(confirmation_id), "ck": str(nonce)}
        payload = await self._client.get_json(
            self.url("ajaxop"),
            params=query,
            cookie_header=self._session.cookie_header(),
        )
        if not isinstance(payload, dict):
            return False
        return SendConfirmationResponse.model_validate(payload).success

    async def send_multiple_action(
        self,
        op: str,
        params: Mapping[str, str],
        confirmations: Iterable[tuple[int, int]],
    ) -> bool:
        ids: list[str] = []
        nonces: list[str] = []
        for confirmation_id, nonce in confirmations:
            ids.append(str(confirmation_id))
            nonces.append(str(nonce))
        form: dict[str, str | list[str]] = {"op": op, **params, "cid[]": ids, "ck[]": nonces}
        payload = await self._client.post_form(
            self.url("multiajaxop"),
            data=form,
            cookie_header=self._session.cookie_header(),
        )
        if not isinstance(payload, dict):
            return False
        return SendConfirmationResponse.model_validate(payload).success
