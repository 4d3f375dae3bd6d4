from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel

from .cash import BurnRateMetrics, CashPosition
from .equity import CapTableEntry, CapTableSnapshot, ExitScenario
from .financials import FinancialStatements
from .opex import MonthlyOPEX
from .revenue import CustomerMetrics, RevenueMetrics, RevenueSummary


class MonthlyProjection(BaseModel):
    month: int
    revenue: RevenueMetrics
    opex: MonthlyOPEX
    cash: CashPosition
    headcount: int


class AnnualSummary(BaseModel):
    year: int
    customers: int
    arr: float
    total_revenue: float
    total_opex: float
    ebitda: float
    ending_cash: float


class DashboardSlice(BaseModel):
    name: str
    data: Dict[str, float | list | dict]


class ScenarioResult(BaseModel):
    customers: List[CustomerMetrics]
    monthly: List[MonthlyProjection]
    annual: List[AnnualSummary]
    revenue_summary: RevenueSummary
    burn_rate: BurnRateMetrics
    financials: FinancialStatements
    cap_table_history: List[CapTableSnapshot]
    cap_table: List[CapTableEntry]
    exit_year: int
    exit_valuation: float
    exit_scenarios: List[ExitScenario]
    dashboards: List[DashboardSlice]
