"""Integration tests for the analytics API client."""
import asyncio

import httpx
import pytest

from churnwatch.errors import AnalyticsApiError, ErrorCode
from churnwatch.integrations.analytics_api import AnalyticsApiClient
from churnwatch.schemas.datasets import Dimension
from tests.utils.fake_backend import BASE_URL, FakeAnalyticsBackend


@pytest.mark.asyncio
async def test_get_json_joins_base_path(api_client: AnalyticsApiClient, backend: FakeAnalyticsBackend) -> None:
    """Test that endpoint paths are resolved under the API root."""
    data = await api_client.get_trend()

    assert data == backend.payloads["/trend"]
    assert str(backend.requests[0].url) == f"{BASE_URL}/trend"


@pytest.mark.asyncio
async def test_summary_sends_dimension(api_client: AnalyticsApiClient, backend: FakeAnalyticsBackend) -> None:
    await api_client.get_summary(Dimension.REVENUE_BAND)

    assert backend.requests[0].url.params["dim"] == "faixa"


@pytest.mark.asyncio
async def test_bad_status_raises_api_error(api_client: AnalyticsApiClient, backend: FakeAnalyticsBackend) -> None:
    backend.statuses["/waterfall"] = 500

    with pytest.raises(AnalyticsApiError) as exc_info:
        await api_client.get_waterfall()

    assert exc_info.value.code == ErrorCode.HTTP_STATUS
    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "/waterfall"
    assert "500" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_json_raises_api_error(api_client: AnalyticsApiClient, backend: FakeAnalyticsBackend) -> None:
    backend.raw_bodies["/kpis"] = b"<html>oops</html>"

    with pytest.raises(AnalyticsApiError) as exc_info:
        await api_client.get_kpis()

    assert exc_info.value.code == ErrorCode.INVALID_JSON
    assert exc_info.value.remediation


@pytest.mark.asyncio
async def test_transport_error_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with AnalyticsApiClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AnalyticsApiError) as exc_info:
            await client.get_kpis()

    assert exc_info.value.code == ErrorCode.TRANSPORT_ERROR


@pytest.mark.asyncio
async def test_slow_response_times_out() -> None:
    """Test that every request is bounded by the configured timeout."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, json=[])

    async with AnalyticsApiClient(base_url=BASE_URL, timeout=0.05, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AnalyticsApiError) as exc_info:
            await client.get_trend()

    assert exc_info.value.code == ErrorCode.TIMEOUT
