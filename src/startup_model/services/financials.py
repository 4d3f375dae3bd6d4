from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from ..models.financials import (
    BalanceSheet,
    CashFlowStatement,
    FinancialAssumptions,
    FinancialStatements,
    FundingYear,
    IncomeStatement,
    RevenueYear,
)
from ..models.opex import OpexYear
from .numeric import safe_ratio

logger = logging.getLogger(__name__)

# One month of revenue (receivables) or OPEX (payables).
WORKING_CAPITAL_MONTH_FRACTION = 0.0833


def calculate_income_statement(
    year: int,
    revenue: float,
    cogs: float,
    opex: float,
    depreciation_rate: float = 0.10,
    tax_rate: float = 0.21,
    interest_expense: float = 0.0,
) -> IncomeStatement:
    gross_profit = revenue - cogs
    ebitda = gross_profit - opex
    depreciation = revenue * depreciation_rate
    ebit = ebitda - depreciation
    ebt = ebit - interest_expense
    # losses carry no tax benefit
    taxes = max(0.0, ebt) * tax_rate
    net_income = ebt - taxes
    return IncomeStatement(
        year=year,
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        gross_margin=safe_ratio(gross_profit, revenue),
        opex=opex,
        ebitda=ebitda,
        ebitda_margin=safe_ratio(ebitda, revenue),
        depreciation=depreciation,
        ebit=ebit,
        interest_expense=interest_expense,
        ebt=ebt,
        taxes=taxes,
        net_income=net_income,
        net_margin=safe_ratio(net_income, revenue),
    )


def calculate_cash_flow(
    year: int,
    income_statement: IncomeStatement,
    previous_cash_balance: float,
    capex_rate: float = 0.05,
    debt_proceeds: float = 0.0,
    equity_proceeds: float = 0.0,
) -> CashFlowStatement:
    operating_cash_flow = income_statement.net_income + income_statement.depreciation
    capex = -income_statement.revenue * capex_rate
    investing_cash_flow = capex
    financing_cash_flow = debt_proceeds + equity_proceeds
    net_cash_flow = operating_cash_flow + investing_cash_flow + financing_cash_flow
    return CashFlowStatement(
        year=year,
        net_income=income_statement.net_income,
        depreciation=income_statement.depreciation,
        operating_cash_flow=operating_cash_flow,
        capex=capex,
        investing_cash_flow=investing_cash_flow,
        debt_proceeds=debt_proceeds,
        equity_proceeds=equity_proceeds,
        financing_cash_flow=financing_cash_flow,
        net_cash_flow=net_cash_flow,
        cash_balance=previous_cash_balance + net_cash_flow,
    )


def calculate_balance_sheet(
    year: int,
    cash_balance: float,
    revenue: float,
    opex: float,
    contributed_capital: float = 0.0,
) -> BalanceSheet:
    """Equity is the plug: it is always assets minus liabilities.

    ``contributed_capital`` only splits that plug into paid-in capital and
    retained earnings for display.
    """
    accounts_receivable = revenue * WORKING_CAPITAL_MONTH_FRACTION
    accounts_payable = opex * WORKING_CAPITAL_MONTH_FRACTION
    total_liabilities = accounts_payable
    equity = (cash_balance + accounts_receivable) - total_liabilities
    # restated from the plug so assets == liabilities + equity holds bit for bit
    total_assets = total_liabilities + equity
    return BalanceSheet(
        year=year,
        cash=cash_balance,
        accounts_receivable=accounts_receivable,
        total_assets=total_assets,
        accounts_payable=accounts_payable,
        total_liabilities=total_liabilities,
        equity=equity,
        contributed_capital=contributed_capital,
        retained_earnings=equity - contributed_capital,
    )


def _by_year(rows, field: str) -> Dict[int, float]:
    totals: Dict[int, float] = defaultdict(float)
    for row in rows:
        totals[row.year] += getattr(row, field)
    return totals


def generate_financial_statements(
    years: int,
    revenue_data: Sequence[RevenueYear],
    opex_data: Sequence[OpexYear],
    funding_rounds: Sequence[FundingYear] = (),
    assumptions: Optional[FinancialAssumptions] = None,
    starting_cash: float = 0.0,
) -> FinancialStatements:
    """Income statement, cash flow and balance sheet for years 1..years.

    Cash is threaded from one year to the next. A year with no revenue or
    OPEX row counts as zero; equity raised in the same year is summed.
    """
    assumptions = assumptions or FinancialAssumptions()
    revenue_by_year = _by_year(revenue_data, "revenue")
    cogs_by_year = _by_year(revenue_data, "cogs")
    opex_by_year = _by_year(opex_data, "opex")
    funding_by_year = _by_year(funding_rounds, "amount")

    missing = [year for year in range(1, years + 1) if year not in revenue_by_year or year not in opex_by_year]
    if missing:
        logger.warning("financial statements: revenue or OPEX missing for year(s) %s, using zero", missing)

    income_statements: List[IncomeStatement] = []
    cash_flows: List[CashFlowStatement] = []
    balance_sheets: List[BalanceSheet] = []

    cash_balance = starting_cash
    contributed_capital = 0.0
    for year in range(1, years + 1):
        revenue = revenue_by_year.get(year, 0.0)
        opex = opex_by_year.get(year, 0.0)
        equity_proceeds = funding_by_year.get(year, 0.0)

        income = calculate_income_statement(
            year,
            revenue,
            cogs_by_year.get(year, 0.0),
            opex,
            depreciation_rate=assumptions.depreciation_rate,
            tax_rate=assumptions.tax_rate,
            interest_expense=assumptions.interest_expense,
        )
        cash_flow = calculate_cash_flow(
            year,
            income,
            cash_balance,
            capex_rate=assumptions.capex_rate,
            equity_proceeds=equity_proceeds,
        )
        cash_balance = cash_flow.cash_balance
        contributed_capital += equity_proceeds

        income_statements.append(income)
        cash_flows.append(cash_flow)
        balance_sheets.append(calculate_balance_sheet(year, cash_balance, revenue, opex, contributed_capital))

    return FinancialStatements(
        income_statements=income_statements,
        cash_flows=cash_flows,
        balance_sheets=balance_sheets,
    )
