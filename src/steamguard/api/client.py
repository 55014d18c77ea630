"""
Shared async HTTP client for the Steam Web API and community endpoints.

Wraps a single ``httpx.AsyncClient`` (connection reuse, bounded pool) and
normalizes every failure mode into ``RemoteOperationError``: transport
errors, HTTP status >= 400 and undecodable JSON. Optional retry/backoff is
enabled by passing a ``RetryConfig``.
"""

from __future__ import annotations

import dataclasses
import types
from typing import Any, Mapping

import httpx
import orjson

from ..core import diagnostics
from ..core.errors import RemoteOperationError
from ..core.retry import AsyncRetrier, RetryConfig
from ..core.settings import HttpSettings

FormData = Mapping[str, str | list[str]]


class SteamWebClient:
    """Thin pooled client used by every service wrapper."""

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.settings = settings or HttpSettings()
        self._client = client
        self._owns_client = client is None
        self._transport = transport
        self._retrier: AsyncRetrier | None = None
        if retry_config is not None:
            if httpx.TransportError not in retry_config.retryable_exceptions:
                retry_config = dataclasses.replace(
                    retry_config,
                    retryable_exceptions=[
                        *retry_config.retryable_exceptions,
                        httpx.TransportError,
                    ],
                )
            self._retrier = AsyncRetrier(retry_config)

    @property
    def web_api_base(self) -> str:
        return self.settings.web_api_base

    @property
    def community_base(self) -> str:
        return self.settings.community_base

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.settings.user_agent},
                timeout=self.settings.timeout_seconds,
                limits=httpx.Limits(max_connections=self.settings.max_connections),
                transport=self._transport,
            )

    async def stop(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> SteamWebClient:
        await self.start()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.stop()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.start()
        assert self._client is not None
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: FormData | None = None,
        cookie_header: str | None = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        headers: dict[str, str] = {}
        if cookie_header:
            headers["Cookie"] = cookie_header

        async def _do_request() -> httpx.Response:
            return await client.request(
                method, url, params=params, data=data, headers=headers
            )

        try:
            if self._retrier is not None:
                response = await self._retrier.retry(_do_request)
            else:
                response = await _do_request()
        except httpx.HTTPError as exc:
            diagnostics.warn(
                "http",
                "request failed",
                method=method,
                endpoint=url,
                error=str(exc),
            )
            raise RemoteOperationError(
                f"{method} {url} failed: {exc}", endpoint=url, cause=exc
            ) from exc
        except RemoteOperationError:
            raise
        except Exception as exc:
            raise RemoteOperationError(
                f"{method} {url} failed: {exc}", endpoint=url, cause=exc
            ) from exc

        if response.status_code >= 400:
            snippet = None
            try:
                snippet = response.text[:256]
            except Exception:
                snippet = None
            diagnostics.warn(
                "http",
                "unexpected status",
                method=method,
                endpoint=url,
                status_code=response.status_code,
                body=snippet,
            )
            raise RemoteOperationError(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=url,
            )
        return response

    @staticmethod
    def decode_json(response: httpx.Response) -> Any:
        """Decode a response body; an empty body decodes to ``None``."""
        body = response.content
        if not body or not body.strip():
            return None
        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as exc:
            try:
                endpoint: str | None = str(response.request.url)
            except RuntimeError:
                endpoint = None
            raise RemoteOperationError(
                "response body is not valid JSON",
                status_code=response.status_code,
                endpoint=endpoint,
                cause=exc,
            ) from exc

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        cookie_header: str | None = None,
    ) -> Any:
        response = await self.request("GET", url, params=params, cookie_header=cookie_header)
        return self.decode_json(response)

    async def post_form(
        self,
        url: str,
        *,
        data: FormData | None = None,
        params: Mapping[str, str] | None = None,
        cookie_header: str | None = None,
    ) -> Any:
        response = await self.request(
            "POST", url, params=params, data=data, cookie_header=cookie_header
        )
        return self.decode_json(response)


def unwrap_response(payload: Any) -> dict[str, Any] | None:
    """Return the ``response`` object of a Web API envelope, if any."""
    if not isinstance(payload, dict):
        return None
    inner = payload.get("response")
    if not isinstance(inner, dict):
        return None
    return inner
