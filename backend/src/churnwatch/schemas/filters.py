"""Pydantic schema for the user-controlled dashboard filters."""
from typing import Any

from pydantic import BaseModel, Field

from churnwatch.schemas.datasets import Dimension

# Region selector value meaning "no state filter"
ALL_REGIONS = "Todas"

# Bounds used when a filter value is missing or not a number
MRR_CEILING = 999_999_999
RISK_CEILING = 100
RENEWAL_CEILING = 3650

# Fields whose change requires a new /queue request
QUEUE_FILTER_FIELDS = frozenset(
    {"mrr_min", "mrr_max", "risk_min", "risk_max", "renewal_min", "renewal_max", "region"}
)


class FilterState(BaseModel):
    """
    Filter state as the user left it.

    Numeric bounds hold raw input (numbers or strings typed into a range
    box) and are only coerced and clamped when query parameters are built.
    `risk_min` is both the server-side lower bound and the in-memory risk
    threshold of the prioritized queue.
    """

    mrr_min: Any = 0
    mrr_max: Any = MRR_CEILING
    risk_min: Any = 0
    risk_max: Any = RISK_CEILING
    renewal_min: Any = 0
    renewal_max: Any = RENEWAL_CEILING
    region: str = Field(default=ALL_REGIONS, description="State (UF) or the all-regions sentinel")
    category: str | None = Field(default=None, description="Category picked on a distribution chart")
    renewal_window: str = Field(default="0–30", description="Selected renewal window label")
    dimension: Dimension = Field(default=Dimension.SEGMENT, description="Dimension shown in the distribution chart")
