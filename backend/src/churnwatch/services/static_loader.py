"""
Loader for the slow-changing dashboard datasets.

Fetches KPIs, trend, waterfall, the three dimensional summaries, NPS by
risk and renewal windows concurrently. A failing endpoint degrades to its
empty default instead of aborting the others, so a partial backend outage
still leaves a usable dashboard.
"""
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from churnwatch.errors import AnalyticsApiError
from churnwatch.integrations.analytics_api import AnalyticsApiClient
from churnwatch.metrics import static_dataset_failures_total
from churnwatch.schemas.datasets import Dimension, StaticDatasets
from churnwatch.services.normalizer import (
    normalize_kpis,
    normalize_many,
    normalize_nps_row,
    normalize_renewal_bucket,
    normalize_summary_row,
    normalize_trend_point,
    normalize_waterfall_step,
)

logger = structlog.get_logger(__name__)


class StaticDatasetLoader:
    """Loads every static dataset in one concurrent batch."""

    def __init__(self, api: AnalyticsApiClient):
        self.api = api

    async def _fetch(self, dataset: str, request: Callable[[], Awaitable[Any]], expected: type) -> Any:
        """
        Run one dataset request, degrading to ``expected()`` on any failure.

        Args:
            dataset: Dataset name for logs and metrics
            request: Coroutine factory performing the request
            expected: Top-level JSON type the dataset must have (dict or list)

        Returns:
            Decoded body, or an empty instance of ``expected``
        """
        try:
            data = await request()
        except AnalyticsApiError as e:
            static_dataset_failures_total.labels(dataset=dataset).inc()
            logger.warning(
                "static_dataset_failed",
                dataset=dataset,
                endpoint=e.endpoint,
                code=e.code,
                status_code=e.status_code,
                error=e.message,
            )
            return expected()

        if not isinstance(data, expected):
            static_dataset_failures_total.labels(dataset=dataset).inc()
            logger.warning(
                "static_dataset_wrong_shape",
                dataset=dataset,
                expected=expected.__name__,
                received=type(data).__name__,
            )
            return expected()

        return data

    async def load(self) -> StaticDatasets:
        """
        Fetch and normalize all static datasets.

        Waits for every request to settle before returning, so callers never
        see a mix of old and new datasets.

        Returns:
            StaticDatasets with empty defaults for any endpoint that failed
        """
        logger.info("static_load_started")

        (
            kpis,
            trend,
            waterfall,
            by_segment,
            by_region,
            by_revenue_band,
            nps,
            renewal,
        ) = await asyncio.gather(
            self._fetch("kpis", self.api.get_kpis, dict),
            self._fetch("trend", self.api.get_trend, list),
            self._fetch("waterfall", self.api.get_waterfall, list),
            self._fetch("summary_segmento", lambda: self.api.get_summary(Dimension.SEGMENT), list),
            self._fetch("summary_uf", lambda: self.api.get_summary(Dimension.REGION), list),
            self._fetch("summary_faixa", lambda: self.api.get_summary(Dimension.REVENUE_BAND), list),
            self._fetch("nps_risco", self.api.get_nps_by_risk, list),
            self._fetch("renovacao", self.api.get_renewal_windows, list),
        )

        datasets = StaticDatasets(
            kpis=normalize_kpis(kpis),
            trend=normalize_many(trend, normalize_trend_point),
            waterfall=normalize_many(waterfall, normalize_waterfall_step),
            summaries={
                Dimension.SEGMENT: normalize_many(by_segment, normalize_summary_row),
                Dimension.REGION: normalize_many(by_region, normalize_summary_row),
                Dimension.REVENUE_BAND: normalize_many(by_revenue_band, normalize_summary_row),
            },
            nps_by_risk=normalize_many(nps, normalize_nps_row),
            renewal_windows=normalize_many(renewal, normalize_renewal_bucket),
        )

        logger.info(
            "static_load_completed",
            kpis=len(datasets.kpis.metrics),
            trend=len(datasets.trend),
            waterfall=len(datasets.waterfall),
            summary_segmento=len(by_segment),
            summary_uf=len(by_region),
            summary_faixa=len(by_revenue_band),
            nps_risco=len(datasets.nps_by_risk),
            renovacao=len(datasets.renewal_windows),
        )
        return datasets
