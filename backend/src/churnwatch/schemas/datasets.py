"""Pydantic schemas for the slow-changing dashboard datasets."""
import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Dimension(str, enum.Enum):
    """Dimensions the risk distribution can be summarized by."""

    SEGMENT = "segmento"
    REGION = "uf"
    REVENUE_BAND = "faixa"


# Waterfall stages in the order the backend sends them
WATERFALL_STAGES = ("start", "new", "expansion", "contraction", "churn", "end")

# Renewal windows offered by the window selector
RENEWAL_WINDOWS = ("0–30", "31–60", "61–90")


class TimeSeriesPoint(BaseModel):
    """One month of the churn trend."""

    model_config = ConfigDict(frozen=True)

    month: str
    logo_churn_pct: float = 0.0
    revenue_churn: float = 0.0
    grr_pct: float = 0.0
    nrr_pct: float = 0.0


class WaterfallStep(BaseModel):
    """One bar of the MRR bridge. Order is authoritative."""

    model_config = ConfigDict(frozen=True)

    stage: str
    value: float = 0.0


class DimensionSummaryRow(BaseModel):
    """Risk-bucket counts and MRR sums for one category of a dimension."""

    model_config = ConfigDict(frozen=True)

    category: str
    low: float = Field(default=0.0, ge=0)
    medium: float = Field(default=0.0, ge=0)
    high: float = Field(default=0.0, ge=0)
    mrr_low: float = 0.0
    mrr_medium: float = 0.0
    mrr_high: float = 0.0

    @property
    def total(self) -> float:
        return self.low + self.medium + self.high


class DistributionRow(DimensionSummaryRow):
    """Summary row with each bucket's share of the row total."""

    low_pct: float = 0.0
    medium_pct: float = 0.0
    high_pct: float = 0.0


class NpsByRisk(BaseModel):
    """Satisfaction score for one risk bucket."""

    model_config = ConfigDict(frozen=True)

    risk_bucket: str
    score: float = 0.0


class RenewalWindowBucket(BaseModel):
    """At-risk MRR and customer count for one renewal window."""

    model_config = ConfigDict(frozen=True)

    window: str
    mrr: float = 0.0
    customers: int = 0


class KpiSummary(BaseModel):
    """Scalar KPI summary. Unknown metrics are kept as received."""

    metrics: dict[str, Any] = Field(default_factory=dict)

    def _metric(self, key: str) -> float:
        value = self.metrics.get(key, 0.0)
        return value if isinstance(value, float) else 0.0

    @property
    def churn_logos_pct(self) -> float:
        return self._metric("churn_logos_pct")

    @property
    def customers_at_risk(self) -> float:
        return self._metric("clientes_em_risco")

    @property
    def save_rate_pct(self) -> float:
        return self._metric("save_rate_pct")

    @property
    def nrr_pct(self) -> float:
        return self._metric("nrr_pct")


def _empty_summaries() -> dict[Dimension, list[DimensionSummaryRow]]:
    return {dimension: [] for dimension in Dimension}


class StaticDatasets(BaseModel):
    """Everything the static loader fetches in one cycle."""

    kpis: KpiSummary = Field(default_factory=KpiSummary)
    trend: list[TimeSeriesPoint] = Field(default_factory=list)
    waterfall: list[WaterfallStep] = Field(default_factory=list)
    summaries: dict[Dimension, list[DimensionSummaryRow]] = Field(default_factory=_empty_summaries)
    nps_by_risk: list[NpsByRisk] = Field(default_factory=list)
    renewal_windows: list[RenewalWindowBucket] = Field(default_factory=list)

    def summary_for(self, dimension: Dimension) -> list[DimensionSummaryRow]:
        return self.summaries.get(dimension, [])
