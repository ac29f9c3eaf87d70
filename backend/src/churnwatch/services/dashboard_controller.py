"""
Refresh and debounce orchestration for the churn dashboard.

Triggers:
- mount(): static datasets + batched queue walk, once
- refresh(): the same, unconditionally, cancelling any pending debounce
- update_filters(): debounced single-page queue fetch at page 0 when a
  queue-relevant filter changed
- next_page() / previous_page(): single-page fetch, no-op outside the range

Each fetch cycle takes a generation number. Results are committed only if
no newer cycle of the same kind started meanwhile, so a slow earlier
response can never overwrite a faster later one.
"""
from typing import Any

import structlog

from churnwatch.config import settings
from churnwatch.errors import QueueRetrievalError
from churnwatch.integrations.analytics_api import AnalyticsApiClient
from churnwatch.metrics import queue_records_loaded, stale_cycles_discarded_total
from churnwatch.schemas.customer import QueuePage
from churnwatch.schemas.dashboard import DashboardState
from churnwatch.schemas.filters import QUEUE_FILTER_FIELDS, FilterState
from churnwatch.services.queue_service import QueueService
from churnwatch.services.static_loader import StaticDatasetLoader
from churnwatch.utils.debounce import Debouncer

logger = structlog.get_logger(__name__)

ERROR_PREFIX = "Erro ao carregar dados"


class Generation:
    """Monotonic counter identifying the latest fetch cycle of one kind."""

    def __init__(self) -> None:
        self.current = 0

    def begin(self) -> int:
        self.current += 1
        return self.current

    def is_current(self, token: int) -> bool:
        return token == self.current


class DashboardController:
    """Owns the DashboardState and decides when fetches run."""

    def __init__(
        self,
        api: AnalyticsApiClient,
        state: DashboardState | None = None,
        page_size: int | None = None,
        debounce_seconds: float | None = None,
    ):
        """
        Initialize dashboard controller.

        Args:
            api: Analytics API client
            state: Initial state (a fresh one by default)
            page_size: Rows per page in single-page mode (defaults to settings.page_size)
            debounce_seconds: Filter debounce delay (defaults to settings.debounce_seconds)
        """
        self.state = state or DashboardState()
        self.page_size = page_size or settings.page_size
        self.static_loader = StaticDatasetLoader(api)
        self.queue_service = QueueService(api)
        self.debouncer = Debouncer(
            settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._static_generation = Generation()
        self._queue_generation = Generation()
        self._in_flight = 0
        # Page requested by the latest in-flight page fetch, None when settled
        self._requested_page: int | None = None

    # Loading flag stays up while any cycle is running

    def _start_cycle(self) -> None:
        self._in_flight += 1
        self.state.loading = True

    def _end_cycle(self) -> None:
        self._in_flight -= 1
        self.state.loading = self._in_flight > 0

    def _page_cursor(self) -> int:
        """Page the table is on, or heading to while a page fetch is in flight."""
        return self.state.page if self._requested_page is None else self._requested_page

    # Triggers

    async def mount(self) -> None:
        """Initial load: static datasets, then the full batched queue."""
        await self._load_everything(trigger="mount")

    async def refresh(self) -> None:
        """Manual refresh. Bypasses and cancels any pending debounced fetch."""
        self.debouncer.cancel()
        await self._load_everything(trigger="refresh")

    def update_filters(self, **changes: Any) -> bool:
        """
        Apply filter changes.

        A change to a queue-relevant field schedules a debounced page-0
        fetch; pure display filters (category, window, dimension) only
        affect derived views.

        Args:
            **changes: FilterState field values

        Returns:
            True if a queue fetch was scheduled

        Raises:
            TypeError: If a key is not a FilterState field
        """
        unknown = set(changes) - set(FilterState.model_fields)
        if unknown:
            raise TypeError(f"unknown filter fields: {', '.join(sorted(unknown))}")

        current = self.state.filters
        changed = {key for key, value in changes.items() if getattr(current, key) != value}
        if not changed:
            return False

        self.state.filters = FilterState.model_validate({**current.model_dump(), **changes})
        logger.debug("filters_updated", fields=sorted(changed))

        if not changed & QUEUE_FILTER_FIELDS:
            return False

        self.debouncer.schedule(self._fetch_first_page)
        return True

    async def next_page(self) -> bool:
        """Move to the next page. Returns False (no-op) past the known total."""
        next_page = self._page_cursor() + 1
        if next_page * self.page_size >= self.state.total_customers:
            return False
        await self._load_page(next_page, trigger="next_page")
        return True

    async def previous_page(self) -> bool:
        """Move to the previous page. Returns False (no-op) on the first page."""
        previous_page = self._page_cursor() - 1
        if previous_page < 0:
            return False
        await self._load_page(previous_page, trigger="previous_page")
        return True

    async def flush(self) -> None:
        """Wait until any debounced fetch has run and committed."""
        await self.debouncer.wait()

    async def close(self) -> None:
        await self.debouncer.shutdown()

    # Fetch cycles

    async def _fetch_first_page(self) -> None:
        await self._load_page(0, trigger="filters")

    async def _load_everything(self, trigger: str) -> None:
        static_token = self._static_generation.begin()
        queue_token = self._queue_generation.begin()
        self._requested_page = None
        structlog.contextvars.bind_contextvars(trigger=trigger, generation=queue_token)

        self._start_cycle()
        self.state.error_message = ""
        try:
            datasets = await self.static_loader.load()
            if self._static_generation.is_current(static_token):
                self.state.datasets = datasets
            else:
                self._discard("static", static_token)

            try:
                page = await self.queue_service.fetch_all(self.state.filters)
            except QueueRetrievalError as e:
                self._fail_queue(queue_token, e)
                return
            self._commit_queue(queue_token, page, page_number=0)
        finally:
            self._end_cycle()
            structlog.contextvars.unbind_contextvars("trigger", "generation")

    async def _load_page(self, page_number: int, trigger: str) -> None:
        queue_token = self._queue_generation.begin()
        self._requested_page = page_number
        structlog.contextvars.bind_contextvars(trigger=trigger, generation=queue_token)

        self._start_cycle()
        self.state.error_message = ""
        try:
            try:
                page = await self.queue_service.fetch_page(
                    self.state.filters, page=page_number, page_size=self.page_size
                )
            except QueueRetrievalError as e:
                self._fail_queue(queue_token, e)
                return
            self._commit_queue(queue_token, page, page_number=page_number)
        finally:
            if self._queue_generation.is_current(queue_token):
                self._requested_page = None
            self._end_cycle()
            structlog.contextvars.unbind_contextvars("trigger", "generation")

    def _commit_queue(self, token: int, page: QueuePage, page_number: int) -> None:
        if not self._queue_generation.is_current(token):
            self._discard("queue", token)
            return
        self.state.customers = page.items
        self.state.total_customers = page.total
        self.state.page = page_number
        queue_records_loaded.set(len(page.items))
        logger.info("queue_committed", records=len(page.items), total=page.total, page=page_number)

    def _fail_queue(self, token: int, exc: QueueRetrievalError) -> None:
        if not self._queue_generation.is_current(token):
            self._discard("queue", token)
            return
        # Previous customers stay in place so the table does not flash empty
        self.state.error_message = f"{ERROR_PREFIX}: {exc}"
        logger.error(
            "queue_fetch_failed",
            endpoint=exc.endpoint,
            code=exc.code,
            status_code=exc.status_code,
            offset=exc.offset,
        )

    def _discard(self, kind: str, token: int) -> None:
        stale_cycles_discarded_total.labels(kind=kind).inc()
        current = self._static_generation if kind == "static" else self._queue_generation
        logger.info("stale_cycle_discarded", kind=kind, token=token, current=current.current)
