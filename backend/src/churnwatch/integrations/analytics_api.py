"""Churn analytics API integration.

Thin async wrapper over the analytics backend. It issues GET requests,
records request metrics and turns every failure mode (non-2xx status,
transport error, timeout, unreadable JSON) into an AnalyticsApiError so
callers only have one exception type to degrade on.
"""
import asyncio
import time
from typing import Any

import httpx
import structlog

from churnwatch.config import settings
from churnwatch.errors import AnalyticsApiError, ErrorCode
from churnwatch.metrics import api_request_duration_seconds, api_requests_total
from churnwatch.schemas.datasets import Dimension

logger = structlog.get_logger(__name__)


class AnalyticsApiClient:
    """
    Async client for the churn analytics API.

    Endpoints:
    - /kpis, /trend, /waterfall, /nps_risco, /renovacao (static datasets)
    - /summary?dim=... (risk distribution per dimension)
    - /queue (paginated at-risk customers)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root (defaults to settings.api_base_url)
            timeout: Per-request timeout in seconds (defaults to settings.request_timeout_seconds)
            transport: Optional httpx transport, used to fake the backend in tests
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "AnalyticsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """
        GET an endpoint and decode its JSON body.

        Args:
            path: Endpoint path relative to the API root (e.g. "/trend")
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            AnalyticsApiError: On non-2xx status, transport failure, timeout or invalid JSON
        """
        endpoint = path if not params or "dim" not in params else f"{path}?dim={params['dim']}"
        start_time = time.perf_counter()

        try:
            # httpx timeouts are per phase; wait_for bounds the whole request
            response = await asyncio.wait_for(self._client.get(path, params=params), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            api_requests_total.labels(endpoint=endpoint, status="error").inc()
            logger.warning("analytics_api_timeout", endpoint=endpoint, timeout=self.timeout)
            raise AnalyticsApiError(
                f"timed out after {self.timeout}s", endpoint=endpoint, code=ErrorCode.TIMEOUT
            ) from e
        except httpx.HTTPError as e:
            api_requests_total.labels(endpoint=endpoint, status="error").inc()
            logger.warning("analytics_api_transport_error", endpoint=endpoint, error=str(e))
            raise AnalyticsApiError(str(e) or type(e).__name__, endpoint=endpoint, code=ErrorCode.TRANSPORT_ERROR) from e
        finally:
            api_request_duration_seconds.labels(endpoint=endpoint).observe(time.perf_counter() - start_time)

        api_requests_total.labels(endpoint=endpoint, status=str(response.status_code)).inc()

        if not response.is_success:
            logger.warning(
                "analytics_api_bad_status",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise AnalyticsApiError(
                f"{response.status_code} {response.reason_phrase}",
                endpoint=endpoint,
                code=ErrorCode.HTTP_STATUS,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("analytics_api_invalid_json", endpoint=endpoint, status_code=response.status_code)
            raise AnalyticsApiError(
                "invalid JSON body",
                endpoint=endpoint,
                code=ErrorCode.INVALID_JSON,
                status_code=response.status_code,
            ) from e

        logger.debug("analytics_api_response", endpoint=endpoint, status_code=response.status_code)
        return data

    async def get_kpis(self) -> Any:
        return await self.get_json("/kpis")

    async def get_trend(self) -> Any:
        return await self.get_json("/trend")

    async def get_waterfall(self) -> Any:
        return await self.get_json("/waterfall")

    async def get_summary(self, dimension: Dimension) -> Any:
        return await self.get_json("/summary", params={"dim": dimension.value})

    async def get_nps_by_risk(self) -> Any:
        return await self.get_json("/nps_risco")

    async def get_renewal_windows(self) -> Any:
        return await self.get_json("/renovacao")

    async def get_queue(self, params: dict[str, str]) -> Any:
        """
        Fetch one page of the at-risk queue.

        Args:
            params: Sanitized query parameters including limit and offset

        Returns:
            Raw envelope ``{"items": [...], "total": N}``
        """
        return await self.get_json("/queue", params=params)
