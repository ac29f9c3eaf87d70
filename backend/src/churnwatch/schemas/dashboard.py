"""Pydantic schema for the dashboard orchestration state."""
from pydantic import BaseModel, Field

from churnwatch.schemas.customer import CustomerRiskRecord
from churnwatch.schemas.datasets import StaticDatasets
from churnwatch.schemas.filters import FilterState


class DashboardState(BaseModel):
    """
    Single owner of everything the dashboard displays.

    Written only by the controller. Derived views read it and return new
    collections.
    """

    filters: FilterState = Field(default_factory=FilterState)
    datasets: StaticDatasets = Field(default_factory=StaticDatasets)
    customers: list[CustomerRiskRecord] = Field(default_factory=list)
    total_customers: int = Field(default=0, ge=0, description="Server-side total of the last queue fetch")
    page: int = Field(default=0, ge=0)
    loading: bool = False
    error_message: str = ""
