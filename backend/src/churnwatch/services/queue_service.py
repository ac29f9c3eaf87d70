"""
Retrieval of the prioritized at-risk customer queue.

Two modes share one FilterState:
- single-page: one request bound to the table's pagination controls
- batched: a sequential walk over fixed-size batches that assembles the
  whole at-risk population (up to a safety cap) for scatter/cluster views

The backend identifier is not unique (duplicates and name fallbacks occur),
so every record gets a composite row identity at ingestion time.
"""
from collections.abc import Mapping
from typing import Any

import structlog

from churnwatch.config import settings
from churnwatch.errors import AnalyticsApiError, ErrorCode, QueueRetrievalError
from churnwatch.integrations.analytics_api import AnalyticsApiClient
from churnwatch.schemas.customer import CustomerRiskRecord, QueuePage
from churnwatch.schemas.filters import FilterState
from churnwatch.services.filter_params import build_queue_params
from churnwatch.services.normalizer import normalize_customer, safe_int

logger = structlog.get_logger(__name__)


def _fingerprint_part(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def content_fingerprint(raw: Mapping[str, Any]) -> str:
    """Fingerprint built from identifier, state, renewal days, MRR and risk."""
    identifier = raw.get("id")
    if identifier is None:
        identifier = raw.get("cliente")
    if identifier is None:
        identifier = "_"
    return "|".join(
        _fingerprint_part(part)
        for part in (identifier, raw.get("uf"), raw.get("renovacao"), raw.get("mrr"), raw.get("risco"))
    )


def row_identity(raw: Mapping[str, Any], offset: int, index: int) -> str:
    """
    Composite render identity for a queue record.

    Only for list rendering stability. Never use it as a business key.
    """
    return f"{content_fingerprint(raw)}|{offset}|{index}"


class QueueService:
    """Fetches the customer queue in single-page or batched mode."""

    def __init__(self, api: AnalyticsApiClient):
        """
        Initialize queue service.

        Args:
            api: Analytics API client
        """
        self.api = api

    async def _fetch_envelope(self, filters: FilterState, offset: int, limit: int) -> tuple[list[Any], int]:
        params = build_queue_params(filters, offset=offset, limit=limit)
        try:
            data = await self.api.get_queue(params)
        except AnalyticsApiError as e:
            raise QueueRetrievalError.from_api_error(e, offset=offset) from e

        if not isinstance(data, Mapping):
            logger.warning("queue_invalid_envelope", offset=offset, body_type=type(data).__name__)
            raise QueueRetrievalError(
                "response is not a {items, total} envelope",
                endpoint="/queue",
                code=ErrorCode.INVALID_ENVELOPE,
                offset=offset,
            )

        items = data.get("items")
        if not isinstance(items, list):
            items = []
        total = max(0, safe_int(data.get("total")))
        return items, total

    @staticmethod
    def _ingest(items: list[Any], offset: int) -> list[CustomerRiskRecord]:
        return [
            normalize_customer(raw, row_identity(raw, offset, index))
            for index, raw in enumerate(items)
            if isinstance(raw, Mapping)
        ]

    async def fetch_page(
        self,
        filters: FilterState,
        page: int,
        page_size: int | None = None,
    ) -> QueuePage:
        """
        Fetch a single page of the queue.

        Args:
            filters: Current filter state
            page: Zero-based page index
            page_size: Rows per page (defaults to settings.page_size)

        Returns:
            QueuePage with the page's items and the server-side total

        Raises:
            QueueRetrievalError: If the request fails or the envelope is unusable
        """
        page_size = page_size or settings.page_size
        offset = max(0, page) * page_size

        items, total = await self._fetch_envelope(filters, offset=offset, limit=page_size)
        records = self._ingest(items, offset)

        logger.info("queue_page_fetched", page=page, offset=offset, items=len(records), total=total)
        return QueuePage(items=records, total=total, offset=offset)

    async def fetch_all(
        self,
        filters: FilterState,
        batch_size: int | None = None,
        cap: int | None = None,
    ) -> QueuePage:
        """
        Walk the queue in sequential batches and assemble one collection.

        Stops when a batch comes back short, when the offset reaches the cap,
        or when the offset reaches the total reported by the first batch.
        Later totals are ignored.

        Args:
            filters: Current filter state
            batch_size: Rows per request (defaults to settings.queue_batch_size)
            cap: Maximum offset walked (defaults to settings.queue_cap)

        Returns:
            QueuePage with every loaded record and the first batch's total

        Raises:
            QueueRetrievalError: If any batch fails; nothing partial is returned
        """
        batch_size = batch_size or settings.queue_batch_size
        cap = cap or settings.queue_cap

        offset = 0
        total = 0
        records: list[CustomerRiskRecord] = []

        while offset < cap:
            items, batch_total = await self._fetch_envelope(filters, offset=offset, limit=batch_size)
            if offset == 0:
                total = batch_total

            records.extend(self._ingest(items, offset))
            logger.debug("queue_batch_fetched", offset=offset, items=len(items), total=total)

            if len(items) < batch_size:
                break
            offset += batch_size
            if offset >= total:
                break

        logger.info("queue_batched_fetch_completed", records=len(records), total=total, last_offset=offset)
        return QueuePage(items=records, total=total, offset=0)
