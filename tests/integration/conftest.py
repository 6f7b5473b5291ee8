"""Integration test fixtures (scripted HTTP service).

Provides an httpx client backed by MockTransport so that the full
request -> classify -> retry path runs against real httpx responses
without any network access.
"""

from typing import Callable

import httpx
import pytest
import pytest_asyncio


class ScriptedService:
    """Replays a list of (status, headers, json) responses and records requests."""

    def __init__(self):
        self.responses: list[tuple[int, dict, object]] = []
        self.requests: list[httpx.Request] = []
        self.failure: Callable[[httpx.Request], None] = None

    def respond(self, status: int, json: object = None, headers: dict = None) -> "ScriptedService":
        self.responses.append((status, headers or {}, json))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failure is not None:
            self.failure(request)
        index = min(len(self.requests), len(self.responses)) - 1
        status, headers, body = self.responses[index]
        return httpx.Response(status, headers=headers, json=body)


@pytest.fixture
def service() -> ScriptedService:
    return ScriptedService()


@pytest_asyncio.fixture
async def http_client(service):
    async with httpx.AsyncClient(
        base_url="https://records.example.com",
        transport=httpx.MockTransport(service.handler),
    ) as client:
        yield client
