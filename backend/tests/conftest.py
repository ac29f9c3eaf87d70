"""Pytest configuration and fixtures for async testing."""
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from churnwatch.integrations.analytics_api import AnalyticsApiClient
from churnwatch.services.dashboard_controller import DashboardController
from tests.utils.fake_backend import BASE_URL, FakeAnalyticsBackend


@pytest.fixture(scope="function")
def backend() -> FakeAnalyticsBackend:
    """
    Fresh fake analytics backend with healthy static datasets and an empty queue.

    Returns:
        FakeAnalyticsBackend: Backend to configure per test
    """
    return FakeAnalyticsBackend()


@pytest_asyncio.fixture(scope="function")
async def api_client(backend: FakeAnalyticsBackend) -> AsyncGenerator[AnalyticsApiClient, None]:
    """
    Analytics API client wired to the fake backend.

    Yields:
        AnalyticsApiClient: Client whose requests never leave the process
    """
    async with AnalyticsApiClient(base_url=BASE_URL, timeout=2.0, transport=backend.transport) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def controller(api_client: AnalyticsApiClient) -> AsyncGenerator[DashboardController, None]:
    """
    Dashboard controller with a short debounce so tests stay fast.

    Yields:
        DashboardController: Controller over a fresh DashboardState
    """
    dashboard = DashboardController(api_client, page_size=50, debounce_seconds=0.02)
    yield dashboard
    await dashboard.close()
