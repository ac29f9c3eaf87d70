"""Integration tests for the refresh/debounce controller."""
import asyncio

import httpx
import pytest
from prometheus_client import REGISTRY

from churnwatch.schemas.datasets import Dimension
from churnwatch.services.dashboard_controller import DashboardController
from churnwatch.services.derived_views import prioritized_view, revenue_at_risk
from tests.utils.factories import CustomerFactory
from tests.utils.fake_backend import FakeAnalyticsBackend


def _customers(count: int, **overrides) -> list[dict]:
    return [CustomerFactory.create({"id": f"C-{i}", **overrides}) for i in range(count)]


@pytest.mark.asyncio
async def test_mount_loads_static_and_batched_queue(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    """Test that mount commits every dataset plus the batched queue, then clears loading."""
    backend.customers = _customers(230)

    await controller.mount()

    state = controller.state
    assert state.loading is False
    assert state.error_message == ""
    assert len(state.customers) == 230
    assert state.total_customers == 230
    assert state.page == 0
    assert state.datasets.trend
    assert revenue_at_risk(state.datasets.renewal_windows, state.filters.renewal_window) == 180000
    assert [request.url.params["limit"] for request in backend.queue_requests()] == ["100", "100", "100"]


@pytest.mark.asyncio
async def test_mount_with_failed_queue_surfaces_error(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    backend.statuses["/queue"] = 500

    await controller.mount()

    assert controller.state.error_message.startswith("Erro ao carregar dados:")
    assert "500" in controller.state.error_message
    assert controller.state.customers == []
    assert controller.state.datasets.waterfall
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_customers(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    """Test that a failed queue fetch leaves the last good collection in place."""
    backend.customers = _customers(40)
    await controller.mount()
    previous = controller.state.customers

    backend.statuses["/queue"] = 503
    await controller.refresh()

    assert controller.state.customers == previous
    assert controller.state.total_customers == 40
    assert controller.state.error_message

    # A later success clears the message
    del backend.statuses["/queue"]
    await controller.refresh()
    assert controller.state.error_message == ""


@pytest.mark.asyncio
async def test_filter_changes_are_debounced_into_one_fetch(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    """Test that rapid edits produce a single page-0 request with the final values."""
    backend.customers = _customers(10)

    for value in ("1", "10", "100", "1000"):
        assert controller.update_filters(mrr_min=value) is True
    await controller.flush()

    requests = backend.queue_requests()
    assert len(requests) == 1
    assert requests[0].url.params["mrr_min"] == "1000"
    assert requests[0].url.params["offset"] == "0"
    assert requests[0].url.params["limit"] == "50"


@pytest.mark.asyncio
async def test_display_only_filters_do_not_fetch(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    assert controller.update_filters(category="Varejo", dimension=Dimension.REGION, renewal_window="31–60") is False
    assert controller.update_filters(category="Varejo") is False
    await controller.flush()

    assert backend.queue_requests() == []
    assert controller.state.filters.category == "Varejo"
    assert controller.state.filters.dimension == Dimension.REGION


@pytest.mark.asyncio
async def test_unknown_filter_field_is_rejected(controller: DashboardController) -> None:
    with pytest.raises(TypeError):
        controller.update_filters(riscoMin=10)


@pytest.mark.asyncio
async def test_refresh_cancels_pending_debounce(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    backend.customers = _customers(5, uf="SP")
    controller.update_filters(region="SP")

    await controller.refresh()
    await controller.flush()

    # Only the batched walk ran; the debounced page fetch was dropped
    assert [request.url.params["limit"] for request in backend.queue_requests()] == ["100"]
    assert backend.queue_requests()[0].url.params["uf"] == "SP"


@pytest.mark.asyncio
async def test_stale_response_is_discarded(controller: DashboardController, backend: FakeAnalyticsBackend) -> None:
    """Test that a slow earlier fetch never overwrites a faster later one."""
    backend.customers = _customers(3, uf="SP") + _customers(2, uf="RJ")

    def delay(request: httpx.Request) -> float:
        return 0.2 if request.url.params.get("uf") == "SP" else 0.0

    backend.delay = delay

    controller.update_filters(region="SP")
    await asyncio.sleep(0.06)  # SP fetch is now in flight
    controller.update_filters(region="RJ")
    await controller.flush()

    assert len(backend.queue_requests()) == 2
    assert {customer.region for customer in controller.state.customers} == {"RJ"}
    assert controller.state.total_customers == 2
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_pagination_moves_within_total(controller: DashboardController, backend: FakeAnalyticsBackend) -> None:
    backend.customers = _customers(120)
    controller.update_filters(risk_min=0.5)
    await controller.flush()
    assert controller.state.total_customers == 120

    assert await controller.previous_page() is False
    assert await controller.next_page() is True
    assert controller.state.page == 1
    assert await controller.next_page() is True
    assert controller.state.page == 2
    assert len(controller.state.customers) == 20

    # Page 3 would start at offset 150, beyond the 120 known matches
    assert await controller.next_page() is False
    assert controller.state.page == 2

    assert await controller.previous_page() is True
    assert controller.state.page == 1
    offsets = [request.url.params["offset"] for request in backend.queue_requests()]
    assert offsets == ["0", "50", "100", "50"]


@pytest.mark.asyncio
async def test_prioritized_view_follows_risk_min(controller: DashboardController, backend: FakeAnalyticsBackend) -> None:
    """Test that the risk filter sent to the server is the same one applied in memory."""
    backend.customers = [
        CustomerFactory.create({"id": f"C-{risk}", "risco": risk, "mrr": 1000}) for risk in range(0, 100, 10)
    ]
    await controller.mount()

    controller.update_filters(risk_min=40)
    view = prioritized_view(controller.state)

    assert [customer.id for customer in view] == ["C-90", "C-80", "C-70", "C-60", "C-50", "C-40"]
    await controller.flush()
    assert backend.queue_requests()[-1].url.params["risco_min"] == "40"


def _stale_discards(kind: str) -> float:
    return REGISTRY.get_sample_value("churn_stale_cycles_discarded_total", {"kind": kind}) or 0.0


@pytest.mark.asyncio
async def test_overlapping_refresh_keeps_latest_static_datasets(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    """Test that a slow first refresh cannot overwrite the datasets of a later one."""
    trend_calls = []

    def delay(request: httpx.Request) -> float:
        if backend.endpoint(request) != "/trend":
            return 0.0
        trend_calls.append(request)
        return 0.2 if len(trend_calls) == 1 else 0.0

    backend.delay = delay
    before = _stale_discards("static")

    first = asyncio.create_task(controller.refresh())
    await asyncio.sleep(0.05)  # first refresh now waits on /trend
    backend.payloads["/kpis"] = {
        "churn_logos_pct": 3.1, "clientes_em_risco": 40, "save_rate_pct": 58.0, "nrr_pct": 99.5,
    }
    await controller.refresh()
    assert controller.state.datasets.kpis.nrr_pct == 99.5

    await first

    assert controller.state.datasets.kpis.nrr_pct == 99.5
    assert _stale_discards("static") == before + 1
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_rapid_next_page_calls_advance_one_page_each(
    controller: DashboardController, backend: FakeAnalyticsBackend
) -> None:
    """Test that a second next_page issued before the first commits moves past it."""
    backend.customers = _customers(120)
    await controller.mount()
    backend.delay = lambda request: 0.05

    results = await asyncio.gather(controller.next_page(), controller.next_page())

    assert results == [True, True]
    assert controller.state.page == 2
    assert len(controller.state.customers) == 20
    assert sorted(request.url.params["offset"] for request in backend.queue_requests()[-2:]) == ["100", "50"]

    # The cursor settles on the committed page; a third call is past the total
    assert await controller.next_page() is False
    assert await controller.previous_page() is True
    assert controller.state.page == 1
