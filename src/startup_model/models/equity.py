from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, conint


class StakeholderType(str, Enum):
    FOUNDER = "Founder"
    ESOP = "ESOP"
    ESOP_REFRESH = "ESOP Refresh"
    INVESTOR = "Investor"


class ExitMethod(str, Enum):
    ARR = "arr"
    EBITDA = "ebitda"
    AVERAGE = "average"


class FounderInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    ownership: confloat(ge=0, le=1) = Field(..., description="Share of founder equity before the ESOP carve-out")


class EquityRound(BaseModel):
    model_config = ConfigDict(frozen=True)

    round_name: str
    amount: float = Field(..., ge=0)
    post_money_valuation: float
    close_month: Optional[conint(ge=1)] = None
    esop_refresh: Optional[confloat(ge=0, lt=1)] = Field(default=None, description="Target ESOP pool after the round")

    @property
    def close_year(self) -> int:
        if self.close_month is None:
            return 1
        return (self.close_month - 1) // 12 + 1


class CapTableEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    stakeholder: str
    type: StakeholderType
    shares: conint(ge=0)
    ownership: float
    round_name: Optional[str] = None


class FounderEquity(BaseModel):
    name: str
    initial_ownership: float
    current_ownership: float
    shares: int


class ESOPPool(BaseModel):
    pool_size: float
    allocated: float = 0.0
    available: float
    shares: int


class InitialCapTable(BaseModel):
    founders: List[FounderEquity]
    esop: ESOPPool
    total_shares: int

    def entries(self, esop_name: str = "ESOP Pool") -> List[CapTableEntry]:
        rows = [
            CapTableEntry(
                stakeholder=founder.name,
                type=StakeholderType.FOUNDER,
                shares=founder.shares,
                ownership=founder.current_ownership,
            )
            for founder in self.founders
        ]
        rows.append(
            CapTableEntry(
                stakeholder=esop_name,
                type=StakeholderType.ESOP,
                shares=self.esop.shares,
                ownership=self.esop.pool_size,
            )
        )
        return rows


class DilutionResult(BaseModel):
    new_investor_ownership: float
    dilution_factor: float
    price_per_share: float
    shares_issued: int
    updated_cap_table: List[CapTableEntry]


class ESOPRefreshResult(BaseModel):
    refresh_ownership: float
    refresh_shares: int
    updated_cap_table: List[CapTableEntry]


class CapTableSnapshot(BaseModel):
    stage: str
    entries: List[CapTableEntry]

    def total_ownership(self) -> float:
        return sum(entry.ownership for entry in self.entries)


class ExitReturns(BaseModel):
    equity_value: float
    roi: float
    roi_percent: float
    cagr: float


class RoundReturn(ExitReturns):
    round_name: str
    investment: float
    equity_ownership: float


class ExitScenario(BaseModel):
    multiple: float
    arr_multiple: float
    ebitda_multiple: float
    exit_valuation: float
    round_returns: List[RoundReturn]


class ExitSettings(BaseModel):
    exit_year: conint(ge=1) = 5
    arr_multiple: float = 10.0
    ebitda_multiple: float = 15.0
    method: ExitMethod = ExitMethod.AVERAGE
    multiples: List[float] = Field(default_factory=lambda: [2, 3, 5, 6, 8, 10, 15, 20, 25])
