from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, conint

from .personnel import PersonnelCostBreakdown


class OPEXAllocation(BaseModel):
    """Fixed monthly non-personnel spend, one amount per category."""

    model_config = ConfigDict(frozen=True)

    product_development: float = 0.0
    marketing_and_sales: float = 0.0
    legal_and_professional: float = 0.0
    office_and_equipment: float = 0.0
    travel_and_events: float = 0.0

    def subtotal(self) -> float:
        return (
            self.product_development
            + self.marketing_and_sales
            + self.legal_and_professional
            + self.office_and_equipment
            + self.travel_and_events
        )


class FundingRoundAllocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    start_month: conint(ge=1) = Field(..., description="Absolute month the allocation takes effect")
    allocation: OPEXAllocation


class MonthlyOPEX(BaseModel):
    month: int
    personnel_cost: float
    product_development: float
    marketing_and_sales: float
    legal_and_professional: float
    office_and_equipment: float
    travel_and_events: float
    operating_subtotal: float
    total_opex: float


class OpexYear(BaseModel):
    year: int
    opex: float


class OpexSummary(BaseModel):
    month: int
    headcount: int
    personnel_cost: float
    personnel_breakdown: PersonnelCostBreakdown
    total_opex: float
    cumulative_opex: float
