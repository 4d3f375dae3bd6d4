from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, conint


class FundingEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: conint(ge=1)
    amount: float = Field(..., ge=0)


class CashPosition(BaseModel):
    month: int
    year: int
    revenue: float
    opex: float
    funding: float
    net_burn: float = Field(..., description="Revenue minus OPEX, negative while burning cash")
    cash_balance: float
    months_of_runway: float


class BurnRateMetrics(BaseModel):
    average_monthly_burn: float
    peak_monthly_burn: float
    current_runway: float
    projected_cash_out: int = Field(..., description="First month with cash <= 0, 0 if never")
