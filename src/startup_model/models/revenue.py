from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, conint

from .common import StepSchedule


class LicenseTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    arr_per_year: float
    setup_fee: float = 0.0
    distribution: confloat(ge=0, le=1) = Field(..., description="Share of customers on this tier")


class RevenueAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    tam: conint(ge=1) = Field(..., description="Addressable market, in customer units")
    target_penetration: confloat(ge=0, le=1)
    years_to_target: float = Field(..., gt=0)
    year1_customers: conint(ge=1)
    base_arr: float = Field(..., ge=0, description="List ARR per customer in year 1")
    setup_fee: float = 0.0
    annual_price_increase: float = 0.0
    churn_rate: Optional[confloat(ge=0, le=1)] = Field(default=None, description="Flat annual churn, used when no schedule is set")
    churn_schedule: Optional[StepSchedule] = None
    discount_schedule: Optional[StepSchedule] = None
    license_tiers: List[LicenseTier] = Field(default_factory=list)
    cogs_rate: confloat(ge=0, le=1) = 0.25


class CustomerMetrics(BaseModel):
    year: int
    market_penetration: float
    total_customers: int
    new_customers: int
    churned_customers: int
    arr_per_customer: float


class YearlyRevenue(BaseModel):
    year: int
    discount: float
    arr_per_customer: float
    arr: float
    setup_fees: float
    total_revenue: float
    cogs: float
    gross_profit: float
    gross_margin: float


class LicenseEquivalents(BaseModel):
    single_user: int
    team: int
    enterprise: int


class RevenueMetrics(BaseModel):
    year: int
    month: int
    absolute_month: int
    arr: float
    setup_fees: float
    total_revenue: float
    customers: int
    cogs: float
    gross_profit: float
    gross_margin: float
    license_equivalents: Optional[LicenseEquivalents] = None


class YearSnapshot(BaseModel):
    arr: float
    customers: int
    revenue: float
    gross_profit: float


class RevenueSummary(BaseModel):
    year5: Optional[YearSnapshot] = None
    year10: Optional[YearSnapshot] = None
    final_year: Optional[RevenueMetrics] = None
