"""Shared fixtures: a stand-in for aiohttp.ClientSession that never touches the network."""

from __future__ import annotations

import json

import pytest


class FakeResponse:
    def __init__(self, status: int = 200, body: str = "{}") -> None:
        self.status = status
        self._body = body

    async def json(self, content_type=None):
        return json.loads(self._body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response: FakeResponse | None = None) -> None:
        self.response = response or FakeResponse()
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.response


@pytest.fixture
def make_session():
    def _make(status: int = 200, payload=None, body: str | None = None) -> FakeSession:
        if body is None:
            body = json.dumps(payload if payload is not None else {"elements": []})
        return FakeSession(FakeResponse(status=status, body=body))

    return _make
