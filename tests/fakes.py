"""Test doubles shared across the suite."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

from ig_session.exceptions import TransportError
from ig_session.transport import Headers, Transport, TransportResponse

LOGIN_BODY: dict[str, Any] = {
    "accountType": "CFD",
    "accountInfo": {"balance": 10000.0, "deposit": 0.0, "profitLoss": 0.0, "available": 10000.0},
    "currencyIsoCode": "GBP",
    "currencySymbol": "£",
    "currentAccountId": "ABC123",
    "lightstreamerEndpoint": "https://demo-apd.marketdatasystems.com",
    "accounts": [
        {"accountId": "ABC123", "accountName": "CFD", "preferred": True, "accountType": "CFD"},
        {"accountId": "XYZ789", "accountName": "Spread bet", "preferred": False, "accountType": "SPREADBET"},
    ],
    "clientId": "100112233",
    "timezoneOffset": 1,
    "hasActiveDemoAccounts": True,
    "hasActiveLiveAccounts": False,
    "trailingStopsEnabled": True,
    "reroutingEnvironment": None,
    "dealingEnabled": True,
}


def json_response(payload: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> TransportResponse:
    return TransportResponse(status_code=status_code, content=json.dumps(payload).encode("utf-8"), headers=headers or {})


def login_response(cst: str = "cst-1", security_token: str = "xst-1", body: dict[str, Any] | None = None) -> TransportResponse:
    return json_response(body or LOGIN_BODY, headers={"CST": cst, "X-SECURITY-TOKEN": security_token})


@dataclass
class RecordedCall:
    method: str
    demo: bool
    path: str
    headers: list[tuple[str, str]]
    json_body: dict[str, Any] | None = None

    def header(self, name: str) -> str | None:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


@dataclass
class FakeTransport(Transport):
    """Replays queued responses per path and records every call made."""

    responses: dict[str, list[TransportResponse | Exception]] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    closed: bool = False

    def add(self, path: str, *responses: TransportResponse | Exception) -> None:
        self.responses.setdefault(path, []).extend(responses)

    def gate(self, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[path] = event
        return event

    async def get(self, demo: bool, path: str, headers: Headers) -> TransportResponse:
        self.calls.append(RecordedCall("GET", demo, path, list(headers)))
        return await self._reply(path)

    async def post(self, demo: bool, path: str, headers: Headers, json_body: dict[str, Any]) -> TransportResponse:
        self.calls.append(RecordedCall("POST", demo, path, list(headers), json_body))
        return await self._reply(path)

    async def aclose(self) -> None:
        self.closed = True

    async def _reply(self, path: str) -> TransportResponse:
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        queued = self.responses.get(path)
        if not queued:
            raise TransportError(f"no fake response queued for {path}")
        reply = queued.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

