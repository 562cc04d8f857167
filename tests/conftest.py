from __future__ import annotations

import os
from typing import Any

import pytest

from fakes import FakeTransport
from ig_session.session import IGSession


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_session(transport: FakeTransport):
    def _make(**overrides: Any) -> IGSession:
        kwargs: dict[str, Any] = {"demo": True, "transport": transport}
        kwargs.update(overrides)
        return IGSession("alice", "s3cret", "api-key-1", **kwargs)

    return _make


@pytest.fixture(autouse=True)
def clear_ig_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ.keys()):
        if key.startswith("IG_"):
            monkeypatch.delenv(key, raising=False)
