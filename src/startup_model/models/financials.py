from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FinancialAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    depreciation_rate: float = Field(0.10, description="Depreciation as a share of revenue")
    tax_rate: float = 0.21
    interest_expense: float = 0.0
    capex_rate: float = Field(0.05, description="Capex as a share of revenue")


class RevenueYear(BaseModel):
    year: int
    revenue: float
    cogs: float = 0.0


class FundingYear(BaseModel):
    year: int
    amount: float


class IncomeStatement(BaseModel):
    year: int
    revenue: float
    cogs: float
    gross_profit: float
    gross_margin: float
    opex: float
    ebitda: float
    ebitda_margin: float
    depreciation: float
    ebit: float
    interest_expense: float
    ebt: float
    taxes: float
    net_income: float
    net_margin: float


class CashFlowStatement(BaseModel):
    year: int
    net_income: float
    depreciation: float
    operating_cash_flow: float
    capex: float
    investing_cash_flow: float
    debt_proceeds: float
    equity_proceeds: float
    financing_cash_flow: float
    net_cash_flow: float
    cash_balance: float


class BalanceSheet(BaseModel):
    year: int
    cash: float
    accounts_receivable: float
    total_assets: float
    accounts_payable: float
    total_liabilities: float
    equity: float
    contributed_capital: float = 0.0
    retained_earnings: float = 0.0


class FinancialStatements(BaseModel):
    income_statements: List[IncomeStatement]
    cash_flows: List[CashFlowStatement]
    balance_sheets: List[BalanceSheet]
