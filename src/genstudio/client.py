"""HTTP client for the generation backend."""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from loguru import logger

from genstudio.config import Settings
from genstudio.credentials import CredentialProvider, SettingsCredentials
from genstudio.errors import AuthError, NetworkError, ServerError, classify_status
from genstudio.types import FrameworkKind

CHAT_PATH = "/copywriting/{id}/chat"
CREATE_TEMPLATE_PATH = "/copywriting/{id}/templates"
TEMPLATE_PATH = "/templates/{id}"


class StudioClient:
    """
    Async client for the generation backend's JSON contract.

    Handles:
    - Bearer authentication through an injected credential provider
    - Classifying HTTP and transport failures into studio errors
    - Rejecting envelopes that do not report ``success: true``
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> StudioClient:
        return cls(
            settings.api_base,
            kwargs.pop("credentials", None) or SettingsCredentials(settings),
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    @property
    def credentials(self) -> CredentialProvider:
        return self._credentials

    async def __aenter__(self) -> StudioClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        token = self._credentials.get_token()
        if not token:
            raise AuthError("Authentication required")
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        headers = self._headers()
        client = self._get_client()
        start = time.monotonic()
        try:
            response = await client.request(method, path, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("client.request.timeout method={} path={}", method, path)
            raise NetworkError(f"request timed out: {exc!s}") from exc
        except httpx.RequestError as exc:
            logger.warning("client.request.error method={} path={} error={}", method, path, exc)
            raise NetworkError(str(exc)) from exc

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "client.request.done method={} path={} status={} elapsed_ms={}",
            method,
            path,
            response.status_code,
            elapsed_ms,
        )
        if response.is_error:
            raise classify_status(response.status_code, _error_message(response))

        try:
            data = response.json()
        except ValueError as exc:
            raise ServerError("response body is not JSON") from exc
        if isinstance(data, dict) and data.get("status") == "error":
            raise ServerError(str(data.get("message") or "request failed"))
        return data

    async def _post_envelope(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", path, body)
        if not isinstance(data, dict) or data.get("success") is not True:
            message = data.get("message") if isinstance(data, dict) else None
            raise ServerError(str(message or "request was not successful"))
        payload = data.get("data")
        return payload if isinstance(payload, dict) else {}

    async def generate(self, kind: FrameworkKind, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Run a generation; returns the envelope's ``data`` object."""
        return await self._post_envelope(f"/{kind.collection}/{framework_id}/generate", body)

    async def chat(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Send chat feedback; returns the envelope's ``data`` object."""
        return await self._post_envelope(CHAT_PATH.format(id=framework_id), body)

    async def create_template(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", CREATE_TEMPLATE_PATH.format(id=framework_id), body)
        return _unwrap_record(data)

    async def update_template(self, template_id: str, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("PUT", TEMPLATE_PATH.format(id=template_id), body)
        return _unwrap_record(data)

    async def get_template(self, template_id: str) -> dict[str, Any]:
        data = await self._request("GET", TEMPLATE_PATH.format(id=template_id))
        return _unwrap_record(data)

    async def get_framework(self, kind: FrameworkKind, framework_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"/{kind.collection}/{framework_id}")
        return _unwrap_record(data)


def _unwrap_record(data: Any) -> dict[str, Any]:
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        return data["data"]
    if isinstance(data, dict):
        return data
    raise ServerError("unexpected response shape")


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.reason_phrase}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code}: {response.reason_phrase}"
