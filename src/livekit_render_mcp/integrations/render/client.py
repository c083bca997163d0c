from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import quote

import httpx

from livekit_render_mcp.config.constants import DEFAULT_RENDER_API_BASE_URL
from livekit_render_mcp.infrastructure.errors import (
    AuthenticationMissingError,
    RemoteApiError,
)
from livekit_render_mcp.infrastructure.logging import BoundLogger, get_logger, log_remote_event

from .models import Deploy, LogEntry, Service, unwrap_collection


def _create_http_client(
    base_url: str,
    *,
    verify: bool | str = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    client_kwargs: dict[str, Any] = {
        "base_url": base_url,
        "headers": {
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        "verify": verify,
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    return httpx.AsyncClient(**client_kwargs)


def _service_path(service_id: str, *segments: str) -> str:
    return "/".join(("/services", quote(service_id, safe=""), *segments))


class RenderClient:
    """Thin pass-through client for the Render REST API.

    Every request carries the bearer credential given at construction. There
    is no retry, caching or timeout override; non-2xx responses and transport
    failures surface as :class:`RemoteApiError`.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = DEFAULT_RENDER_API_BASE_URL,
        verify: bool | str = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[BoundLogger] = None,
    ) -> None:
        self._api_key = api_key or None
        self._base_url = base_url.rstrip("/")
        self._http = _create_http_client(self._base_url, verify=verify, transport=transport)
        self._logger = logger or get_logger("livekit_render_mcp.render")

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_credentials(self) -> bool:
        return self._api_key is not None

    async def __aenter__(self) -> "RenderClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body."""

        if not self._api_key:
            raise AuthenticationMissingError()

        method = method.upper()
        log_remote_event(self._logger, "request", method=method, endpoint=endpoint)
        try:
            response = await self._http.request(
                method,
                endpoint,
                json=dict(body) if body is not None else None,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            log_remote_event(
                self._logger,
                "error",
                method=method,
                endpoint=endpoint,
                level=logging.WARNING,
                error=str(exc),
            )
            raise RemoteApiError(0, type(exc).__name__, str(exc), endpoint=endpoint) from exc

        if not response.is_success:
            log_remote_event(
                self._logger,
                "error",
                method=method,
                endpoint=endpoint,
                level=logging.WARNING,
                status_code=response.status_code,
            )
            raise RemoteApiError(
                response.status_code,
                response.reason_phrase,
                response.text,
                endpoint=endpoint,
            )

        log_remote_event(
            self._logger,
            "response",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
        )
        if not response.content:
            return {}
        return response.json()

    async def list_services(self) -> list[Service]:
        payload = await self.call("/services")
        return [Service.model_validate(item) for item in unwrap_collection(payload, "services")]

    async def get_service(self, service_id: str) -> Service:
        payload = await self.call(_service_path(service_id))
        if isinstance(payload, dict) and isinstance(payload.get("service"), dict):
            payload = payload["service"]
        return Service.model_validate(payload)

    async def get_logs(self, service_id: str, limit: int = 100) -> list[LogEntry]:
        payload = await self.call(f"{_service_path(service_id, 'logs')}?limit={limit}")
        return [LogEntry.model_validate(item) for item in unwrap_collection(payload, "logs")]

    async def list_deploys(self, service_id: str, limit: int = 10) -> list[Deploy]:
        payload = await self.call(f"{_service_path(service_id, 'deploys')}?limit={limit}")
        return [Deploy.from_payload(item) for item in unwrap_collection(payload, "deploys")]

    async def update_env_vars(self, service_id: str, env_vars: Mapping[str, str]) -> Any:
        """Replace the service environment with exactly ``env_vars``."""

        return await self.call(
            _service_path(service_id, "env-vars"),
            method="PUT",
            body={"envVars": dict(env_vars)},
        )

    async def create_deploy(self, service_id: str, *, clear_cache: bool = False) -> Deploy:
        payload = await self.call(
            _service_path(service_id, "deploys"),
            method="POST",
            body={"clearCache": clear_cache},
        )
        return Deploy.from_payload(payload)


__all__ = ["RenderClient"]
