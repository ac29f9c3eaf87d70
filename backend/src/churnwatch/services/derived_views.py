"""
Derived views over already-fetched dashboard data.

Pure functions. Inputs are never mutated; every view is a new collection.
"""
import math
from collections.abc import Iterable, Sequence

from churnwatch.schemas.customer import CustomerRiskRecord, RiskLevel
from churnwatch.schemas.dashboard import DashboardState
from churnwatch.schemas.datasets import (
    Dimension,
    DimensionSummaryRow,
    DistributionRow,
    RenewalWindowBucket,
    StaticDatasets,
    TimeSeriesPoint,
    WaterfallStep,
)
from churnwatch.services.filter_params import sanitize_filters

# Risk score thresholds for the badge bands
HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


def _share(count: float, total: float) -> float:
    return (count / total) * 100 if total else 0.0


def risk_distribution(rows: Iterable[DimensionSummaryRow]) -> list[DistributionRow]:
    """
    Add each risk bucket's percentage of the row total.

    Rows whose buckets sum to zero get 0 for all three percentages.
    """
    distribution = []
    for row in rows:
        total = row.total
        distribution.append(
            DistributionRow(
                **row.model_dump(),
                low_pct=_share(row.low, total),
                medium_pct=_share(row.medium, total),
                high_pct=_share(row.high, total),
            )
        )
    return distribution


def distribution_for(datasets: StaticDatasets, dimension: Dimension) -> list[DistributionRow]:
    return risk_distribution(datasets.summary_for(dimension))


def _matches_category(customer: CustomerRiskRecord, category: str) -> bool:
    return category in (customer.segment, customer.region, customer.revenue_band)


def prioritized_queue(
    customers: Iterable[CustomerRiskRecord],
    risk_threshold: float,
    category: str | None = None,
) -> list[CustomerRiskRecord]:
    """
    Filter and order the customer queue for action.

    Args:
        customers: Loaded customer records
        risk_threshold: Minimum risk score kept
        category: Optional category; matches segment, region or revenue band

    Returns:
        Records sorted by impact score (risk * MRR), highest first. Ties keep
        their original order.
    """
    kept = [
        customer
        for customer in customers
        if customer.risk >= risk_threshold and (not category or _matches_category(customer, category))
    ]
    return sorted(kept, key=lambda customer: customer.impact_score, reverse=True)


def _find_window(buckets: Iterable[RenewalWindowBucket], window: str) -> RenewalWindowBucket | None:
    return next((bucket for bucket in buckets if bucket.window == window), None)


def revenue_at_risk(buckets: Iterable[RenewalWindowBucket], window: str) -> float:
    """At-risk MRR of the selected renewal window, 0 when the window is absent."""
    bucket = _find_window(buckets, window)
    return bucket.mrr if bucket else 0.0


def customers_at_risk(buckets: Iterable[RenewalWindowBucket], window: str) -> int:
    bucket = _find_window(buckets, window)
    return bucket.customers if bucket else 0


def risk_level(score: float) -> RiskLevel:
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def trend_axis_max(points: Sequence[TimeSeriesPoint]) -> int:
    """Upper bound for the churn-rate axis: one point of headroom above the peak."""
    peak = max([0.0, *(point.logo_churn_pct for point in points)])
    return math.ceil(peak + 1)


def waterfall_bounds(steps: Sequence[WaterfallStep]) -> tuple[float, float]:
    """Axis bounds of the MRR bridge, always including zero."""
    values = [step.value for step in steps]
    return min([0.0, *values]), max([0.0, *values])


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, math.ceil(total / page_size))


def has_next_page(page: int, total: int, page_size: int) -> bool:
    return (page + 1) * page_size < total


def has_previous_page(page: int) -> bool:
    return page > 0


def prioritized_view(state: DashboardState) -> list[CustomerRiskRecord]:
    """Prioritized queue for the state's current filters."""
    filters = sanitize_filters(state.filters)
    return prioritized_queue(state.customers, filters.risk_min, filters.category)
