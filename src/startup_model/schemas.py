from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, conint

from .models.cash import BurnRateMetrics, CashPosition
from .models.equity import CapTableEntry, CapTableSnapshot, EquityRound, ExitScenario, ExitSettings, FounderInput
from .models.financials import FinancialAssumptions, FinancialStatements, FundingYear, RevenueYear
from .models.opex import FundingRoundAllocation, MonthlyOPEX, OpexSummary, OpexYear
from .models.personnel import PersonnelRole
from .models.results import ScenarioResult
from .models.revenue import CustomerMetrics, RevenueAssumptions, RevenueMetrics, RevenueSummary
from .models.scenario import ScenarioInput


class ScenarioCreateRequest(BaseModel):
    scenario: ScenarioInput
    clone_from: Optional[str] = Field(default=None, description="Scenario ID to clone from")


class ScenarioCreateResponse(BaseModel):
    scenario_id: str


class ScenarioRunRequest(BaseModel):
    scenario_id: Optional[str] = None
    scenario: Optional[ScenarioInput] = None
    years: Optional[conint(ge=1, le=30)] = None


class ScenarioListResponse(BaseModel):
    scenarios: List[str]


class ScenarioCompareResponse(BaseModel):
    scenario_ids: List[str]
    final_arr: List[float]
    ending_cash: List[float]


class ScenarioRunResponse(BaseModel):
    result: ScenarioResult


class RevenueSummaryRequest(BaseModel):
    years: conint(ge=1, le=30) = 10
    assumptions: Optional[RevenueAssumptions] = None


class RevenueSummaryResponse(BaseModel):
    summary: RevenueSummary
    customer_projections: List[CustomerMetrics]
    assumptions: RevenueAssumptions


class RevenueProjectionRequest(BaseModel):
    years: conint(ge=1, le=30) = 10
    assumptions: Optional[RevenueAssumptions] = None
    monthly: bool = Field(default=False, description="Twelve records per year instead of one")


class RevenueProjectionResponse(BaseModel):
    projections: List[RevenueMetrics]


class OpexProjectionRequest(BaseModel):
    start_month: conint(ge=1) = 1
    end_month: conint(ge=1) = 120
    roles: Optional[List[PersonnelRole]] = None
    rounds: List[FundingRoundAllocation] = Field(default_factory=list)


class OpexProjectionResponse(BaseModel):
    projections: List[MonthlyOPEX]
    average_monthly_opex: float


class OpexSummaryRequest(BaseModel):
    months: List[conint(ge=1)] = Field(default_factory=lambda: [12, 36])
    roles: Optional[List[PersonnelRole]] = None
    rounds: List[FundingRoundAllocation] = Field(default_factory=list)


class OpexSummaryResponse(BaseModel):
    summaries: List[OpexSummary]


class CashRunwayRequest(BaseModel):
    years: conint(ge=1, le=30) = 10
    starting_cash: float = 0.0
    assumptions: Optional[RevenueAssumptions] = None
    roles: Optional[List[PersonnelRole]] = None
    funding_rounds: List[EquityRound] = Field(default_factory=list)


class CashRunwayResponse(BaseModel):
    positions: List[CashPosition]
    metrics: BurnRateMetrics


class CapTableRequest(BaseModel):
    founders: List[FounderInput]
    esop_pool_size: float = 0.15
    rounds: List[EquityRound] = Field(default_factory=list)


class CapTableResponse(BaseModel):
    cap_table: List[CapTableEntry]
    history: List[CapTableSnapshot]


class ExitScenarioRequest(CapTableRequest):
    arr: float
    ebitda: float
    exit: ExitSettings = Field(default_factory=ExitSettings)


class ExitScenarioResponse(BaseModel):
    exit_year: int
    arr: float
    ebitda: float
    scenarios: List[ExitScenario]
    cap_table: List[CapTableEntry]


class FinancialsRequest(BaseModel):
    years: conint(ge=1, le=30) = 10
    revenue: List[RevenueYear] = Field(default_factory=list)
    opex: List[OpexYear] = Field(default_factory=list)
    funding: List[FundingYear] = Field(default_factory=list)
    assumptions: FinancialAssumptions = Field(default_factory=FinancialAssumptions)


class FinancialsResponse(BaseModel):
    statements: FinancialStatements
