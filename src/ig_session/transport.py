"""HTTP transport used by sessions to reach the IG gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from ig_session.config import DEMO_API_BASE, LIVE_API_BASE, TransportConfig
from ig_session.exceptions import TransportError

Headers = Sequence[tuple[str, str]]

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    content: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class Transport(ABC):
    """Moves one request to the gateway and hands back the raw response.

    Implementations raise `TransportError` when no response could be obtained
    and never interpret status codes.
    """

    @abstractmethod
    async def get(self, demo: bool, path: str, headers: Headers) -> TransportResponse:
        raise NotImplementedError

    @abstractmethod
    async def post(self, demo: bool, path: str, headers: Headers, json_body: dict[str, Any]) -> TransportResponse:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class HttpxTransport(Transport):
    def __init__(self, cfg: TransportConfig | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._cfg = cfg or TransportConfig()
        self._client = client
        self._owns_client = client is None

    def base_url(self, demo: bool) -> str:
        if demo:
            return self._cfg.demo_base_url or DEMO_API_BASE
        return self._cfg.live_base_url or LIVE_API_BASE

    async def get(self, demo: bool, path: str, headers: Headers) -> TransportResponse:
        return await self._send("GET", demo, path, headers)

    async def post(self, demo: bool, path: str, headers: Headers, json_body: dict[str, Any]) -> TransportResponse:
        return await self._send("POST", demo, path, headers, json_body=json_body)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._cfg.request_timeout_seconds, connect=self._cfg.connect_timeout_seconds),
            )
        return self._client

    async def _send(
        self,
        method: str,
        demo: bool,
        path: str,
        headers: Headers,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> TransportResponse:
        url = f"{self.base_url(demo)}{path}"
        request_headers = [("Accept", JSON_CONTENT_TYPE), ("Content-Type", JSON_CONTENT_TYPE), *headers]

        try:
            response = await self._ensure_client().request(method, url, headers=request_headers, json=json_body)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"{method} {path} timed out",
                timeout=True,
                details={"path": path, "error": str(exc)},
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"{method} {path} failed: {exc}",
                details={"path": path, "error_type": type(exc).__name__},
            ) from exc

        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )
