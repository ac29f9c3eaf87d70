"""Pydantic schemas for dashboard data."""

from churnwatch.schemas.customer import (
    UNKNOWN,
    CustomerRiskRecord,
    QueuePage,
    RiskLevel,
)
from churnwatch.schemas.dashboard import DashboardState
from churnwatch.schemas.datasets import (
    RENEWAL_WINDOWS,
    WATERFALL_STAGES,
    Dimension,
    DimensionSummaryRow,
    DistributionRow,
    KpiSummary,
    NpsByRisk,
    RenewalWindowBucket,
    StaticDatasets,
    TimeSeriesPoint,
    WaterfallStep,
)
from churnwatch.schemas.filters import ALL_REGIONS, QUEUE_FILTER_FIELDS, FilterState

__all__ = [
    "ALL_REGIONS",
    "QUEUE_FILTER_FIELDS",
    "RENEWAL_WINDOWS",
    "UNKNOWN",
    "WATERFALL_STAGES",
    "CustomerRiskRecord",
    "DashboardState",
    "Dimension",
    "DimensionSummaryRow",
    "DistributionRow",
    "FilterState",
    "KpiSummary",
    "NpsByRisk",
    "QueuePage",
    "RenewalWindowBucket",
    "RiskLevel",
    "StaticDatasets",
    "TimeSeriesPoint",
    "WaterfallStep",
]
