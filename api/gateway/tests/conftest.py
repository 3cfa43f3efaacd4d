"""Shared pytest fixtures for gateway tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gateway.api.deps import get_gateway
from gateway.ingestion.observability import upstream_monitor
from gateway.main import app
from gateway.models.media import Provider
from gateway.services.dispatcher import Dispatcher
from gateway.tests.utils import StubClient


@pytest.fixture(autouse=True)
def _reset_monitor():
    upstream_monitor.reset()
    yield
    upstream_monitor.reset()


@pytest.fixture()
def stub_clients() -> dict[Provider, StubClient]:
    return {provider: StubClient(provider) for provider in Provider}


@pytest.fixture()
def dispatcher(stub_clients: dict[Provider, StubClient]) -> Dispatcher:
    return Dispatcher(clients=stub_clients)


@pytest_asyncio.fixture()
async def client(dispatcher: Dispatcher) -> AsyncClient:
    async def _get_test_gateway() -> Dispatcher:
        return dispatcher

    app.dependency_overrides[get_gateway] = _get_test_gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_gateway, None)
