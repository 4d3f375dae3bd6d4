from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from ..models.cash import CashPosition, FundingEvent
from ..models.equity import CapTableEntry, ExitScenario
from ..models.financials import FinancialStatements, FundingYear, RevenueYear
from ..models.results import AnnualSummary, DashboardSlice, MonthlyProjection, ScenarioResult
from ..models.revenue import RevenueMetrics
from ..models.scenario import ScenarioInput
from . import cash, equity, financials, opex, personnel, revenue

logger = logging.getLogger(__name__)


class ScenarioCalculator:
    def run(self, scenario: ScenarioInput) -> ScenarioResult:
        years = scenario.years
        months = years * 12
        opex_rounds = scenario.opex_rounds or None

        customers = revenue.customer_projections(years, scenario.revenue)
        monthly_revenue = revenue.monthly_revenue_projections(years, scenario.revenue)
        annual_revenue = revenue.revenue_projections(years, scenario.revenue)
        monthly_opex = opex.opex_projections(scenario.personnel, 1, months, rounds=opex_rounds)

        funding_events = self._funding_events(scenario)
        positions = cash.cash_positions(monthly_revenue, monthly_opex, funding_events, scenario.starting_cash)
        burn_rate = cash.burn_rate_metrics(positions)

        statements = financials.generate_financial_statements(
            years,
            [RevenueYear(year=item.year, revenue=item.total_revenue, cogs=item.cogs) for item in annual_revenue],
            opex.annual_opex(monthly_opex),
            self._funding_years(funding_events),
            assumptions=scenario.financials,
            starting_cash=scenario.starting_cash,
        )

        history = equity.generate_cap_table_history(scenario.founders, scenario.esop_pool_size, scenario.funding_rounds)
        cap_table = history[-1].entries
        exit_year, exit_valuation, exits = self._exit_analysis(scenario, annual_revenue, statements, cap_table)

        monthly = [
            MonthlyProjection(
                month=revenue_record.absolute_month,
                revenue=revenue_record,
                opex=opex_record,
                cash=position,
                headcount=personnel.headcount(scenario.personnel, revenue_record.absolute_month),
            )
            for revenue_record, opex_record, position in zip(monthly_revenue, monthly_opex, positions)
        ]
        annual = self._build_annual_summaries(annual_revenue, statements, positions)
        dashboards = self._build_dashboards(positions, annual, cap_table)

        logger.debug(
            "scenario %s: %d months, cash out month %d, final cash %.2f",
            scenario.meta.id,
            months,
            burn_rate.projected_cash_out,
            positions[-1].cash_balance if positions else scenario.starting_cash,
        )
        return ScenarioResult(
            customers=customers,
            monthly=monthly,
            annual=annual,
            revenue_summary=revenue.revenue_summary(years, scenario.revenue),
            burn_rate=burn_rate,
            financials=statements,
            cap_table_history=history,
            cap_table=cap_table,
            exit_year=exit_year,
            exit_valuation=exit_valuation,
            exit_scenarios=exits,
            dashboards=dashboards,
        )

    def _funding_events(self, scenario: ScenarioInput) -> List[FundingEvent]:
        return cash.funding_events_from_rounds(
            {"close_month": item.close_month, "amount_raised": item.amount} for item in scenario.funding_rounds
        )

    def _funding_years(self, events: List[FundingEvent]) -> List[FundingYear]:
        totals: Dict[int, float] = defaultdict(float)
        for event in events:
            totals[(event.month - 1) // 12 + 1] += event.amount
        return [FundingYear(year=year, amount=amount) for year, amount in sorted(totals.items())]

    def _exit_analysis(
        self,
        scenario: ScenarioInput,
        annual_revenue: List[RevenueMetrics],
        statements: FinancialStatements,
        cap_table: List[CapTableEntry],
    ) -> Tuple[int, float, List[ExitScenario]]:
        """Headline exit valuation plus the multiple grid, both at the exit year."""
        settings = scenario.exit
        exit_year = min(settings.exit_year, scenario.years)
        if exit_year != settings.exit_year:
            logger.warning("exit year %d is past the %d-year horizon, using year %d", settings.exit_year, scenario.years, exit_year)
        arr = annual_revenue[exit_year - 1].arr
        ebitda = statements.income_statements[exit_year - 1].ebitda
        headline = equity.calculate_exit_valuation(arr, ebitda, settings.arr_multiple, settings.ebitda_multiple, settings.method)
        grid = equity.exit_scenarios(
            arr,
            ebitda,
            cap_table,
            scenario.funding_rounds,
            exit_year,
            multiples=settings.multiples,
            method=settings.method,
        )
        return exit_year, headline, grid

    def _build_annual_summaries(
        self,
        annual_revenue: List[RevenueMetrics],
        statements: FinancialStatements,
        positions: List[CashPosition],
    ) -> List[AnnualSummary]:
        ending_cash: Dict[int, float] = {}
        for position in positions:
            ending_cash[position.year] = position.cash_balance
        summaries: List[AnnualSummary] = []
        for record, income in zip(annual_revenue, statements.income_statements):
            summaries.append(
                AnnualSummary(
                    year=record.year,
                    customers=record.customers,
                    arr=record.arr,
                    total_revenue=record.total_revenue,
                    total_opex=income.opex,
                    ebitda=income.ebitda,
                    ending_cash=ending_cash.get(record.year, 0.0),
                )
            )
        return summaries

    def _build_dashboards(
        self,
        positions: List[CashPosition],
        annual: List[AnnualSummary],
        cap_table: List[CapTableEntry],
    ) -> List[DashboardSlice]:
        revenue_trend = {
            "years": [summary.year for summary in annual],
            "arr": [summary.arr for summary in annual],
            "customers": [summary.customers for summary in annual],
            "ebitda": [summary.ebitda for summary in annual],
        }
        cash_trend = {
            "months": [position.month for position in positions],
            "cash": [position.cash_balance for position in positions],
            "net_burn": [position.net_burn for position in positions],
        }
        ownership = {entry.stakeholder: entry.ownership for entry in cap_table}
        return [
            DashboardSlice(name="revenue", data=revenue_trend),
            DashboardSlice(name="cash", data=cash_trend),
            DashboardSlice(name="ownership", data=ownership),
        ]
