"""Pydantic schemas for the prioritized customer queue."""
import enum

from pydantic import BaseModel, ConfigDict, Field

# Placeholder shown for text fields the backend left empty
UNKNOWN = "—"


class RiskLevel(str, enum.Enum):
    """Risk band used to badge a customer's score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CustomerRiskRecord(BaseModel):
    """One tracked account from the at-risk queue, after normalization."""

    model_config = ConfigDict(frozen=True)

    row_id: str = Field(..., description="Composite render identity (fingerprint|offset|index), not a business key")
    id: str = Field(..., description="Backend identifier; not guaranteed unique")
    name: str = Field(..., description="Customer display name")
    mrr: float = Field(..., ge=0, description="Monthly recurring revenue")
    risk: float = Field(..., ge=0, le=100, description="Churn risk score")
    renewal_days: int = Field(..., ge=0, description="Days until contract renewal")
    cluster: str = Field(default=UNKNOWN, description="Behavioral cluster label")
    usage_trend: str = Field(default=UNKNOWN, description="Usage trend over the last 30 days")
    tickets_30d: int | str = Field(default=UNKNOWN, description="Support tickets opened in the last 30 days")
    sla_pct: float | str = Field(default=UNKNOWN, description="Service level percentage")
    nps: float | str = Field(default=UNKNOWN, description="Satisfaction score")
    reasons: list[str] = Field(default_factory=list, description="Top churn reasons in backend order")
    playbook: str = Field(default=UNKNOWN, description="Recommended retention action")
    owner: str = Field(default=UNKNOWN, description="Account owner")
    segment: str = Field(default=UNKNOWN, description="Customer segment")
    region: str = Field(default=UNKNOWN, description="State (UF)")
    revenue_band: str = Field(default=UNKNOWN, description="Revenue band")

    @property
    def impact_score(self) -> float:
        """Risk weighted by revenue, used to prioritize the queue."""
        return self.risk * self.mrr


class QueuePage(BaseModel):
    """Envelope returned by the /queue endpoint after normalization."""

    items: list[CustomerRiskRecord] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Server-side match count across all pages")
    offset: int = Field(default=0, ge=0, description="Offset of the first item")
