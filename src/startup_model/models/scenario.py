from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, confloat, conint

from .common import ScenarioMeta
from .equity import EquityRound, ExitSettings, FounderInput
from .financials import FinancialAssumptions
from .opex import FundingRoundAllocation
from .personnel import PersonnelRole
from .revenue import RevenueAssumptions


class ScenarioInput(BaseModel):
    meta: ScenarioMeta
    years: conint(ge=1, le=30) = 10
    starting_cash: float = 0.0
    revenue: RevenueAssumptions
    personnel: List[PersonnelRole]
    opex_rounds: List[FundingRoundAllocation] = Field(default_factory=list, description="Empty means the default round table")
    funding_rounds: List[EquityRound] = Field(default_factory=list, description="Chronological order")
    founders: List[FounderInput]
    esop_pool_size: confloat(ge=0, lt=1) = 0.15
    exit: ExitSettings = Field(default_factory=ExitSettings)
    financials: FinancialAssumptions = Field(default_factory=FinancialAssumptions)
