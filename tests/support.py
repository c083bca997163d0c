"""Shared fakes and sample documents for the test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

TEST_API_KEY = "rnd_test_key"
TEST_BASE_URL = "https://api.render.test/v1"

SAMPLE_TOPOLOGY = """\
services:
  - type: web
    name: livekit-server
    env: docker
    envVars:
      - key: LIVEKIT_KEYS
        value: "APIabc123: a-very-long-secret-value"
      - key: PORT
        value: 7880
      - key: REDIS_URL
        fromService:
          type: redis
          name: cache
          property: connectionString
"""

SAMPLE_RUNTIME_CONFIG = """\
port: 7880
rtc:
  tcp_port: 7881
keys:
  APIabc123: secret-one
  APIdef456: secret-two
"""

Responder = Callable[[httpx.Request], httpx.Response]


class RenderStub:
    """Route table for an ``httpx.MockTransport`` standing in for Render."""

    def __init__(self, prefix: str = "/v1") -> None:
        self._prefix = prefix
        self._routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        status_code: int = 200,
        text: str | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            if json is None:
                return httpx.Response(status_code)
            return httpx.Response(status_code, json=json)

        self._routes[(method.upper(), path)] = respond

    def fail(self, method: str, path: str, exc: Exception) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._routes[(method.upper(), path)] = respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(self._prefix):
            path = path[len(self._prefix):]
        responder = self._routes.get((request.method, path))
        if responder is None:
            return httpx.Response(404, json={"message": f"no route for {path}"})
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        if method is None:
            return list(self.requests)
        return [request for request in self.requests if request.method == method.upper()]


def service_payload(
    service_id: str,
    name: str,
    *,
    type_: str = "web_service",
    status: str | None = "live",
    url: str | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": service_id,
        "name": name,
        "type": type_,
        "environment": "docker",
        "suspended": "not_suspended",
        "serviceDetails": {"url": url} if url else {},
    }
    if status is not None:
        payload["status"] = status
    return payload

