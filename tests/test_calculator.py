from __future__ import annotations

import pytest

from startup_model.sample_data import build_sample_scenario
from startup_model.services.calculator import ScenarioCalculator
from startup_model.services.equity import calculate_exit_valuation


def test_sample_scenario_generates_results():
    scenario = build_sample_scenario()
    calculator = ScenarioCalculator()
    result = calculator.run(scenario)

    assert len(result.monthly) == scenario.years * 12
    assert len(result.annual) == scenario.years
    assert result.monthly[11].headcount == 3
    assert result.monthly[0].revenue.total_revenue > 0
    assert result.annual[4].customers == 631
    assert result.revenue_summary.year10 is not None


def test_cash_rolls_forward_across_horizon():
    result = ScenarioCalculator().run(build_sample_scenario())
    positions = [item.cash for item in result.monthly]
    assert positions[2].funding == 1_500_000
    assert positions[26].funding == 8_000_000
    for previous, current in zip(positions, positions[1:]):
        assert current.cash_balance == pytest.approx(previous.cash_balance + current.funding + current.net_burn)
    assert result.annual[-1].ending_cash == pytest.approx(positions[-1].cash_balance)


def test_statements_and_cap_table_close():
    result = ScenarioCalculator().run(build_sample_scenario())
    for sheet in result.financials.balance_sheets:
        assert sheet.total_assets == pytest.approx(sheet.total_liabilities + sheet.equity)
    assert result.financials.cash_flows[0].equity_proceeds == pytest.approx(1_500_000)
    assert result.financials.cash_flows[2].equity_proceeds == pytest.approx(8_000_000)
    for snapshot in result.cap_table_history:
        assert snapshot.total_ownership() == pytest.approx(1.0, abs=1e-5)
    assert result.cap_table_history[-1].stage == "Series A ESOP Refresh"


def test_exit_analysis_uses_exit_year():
    scenario = build_sample_scenario()
    result = ScenarioCalculator().run(scenario)
    assert result.exit_year == 7
    assert len(result.exit_scenarios) == 9
    year7 = result.annual[6]
    assert result.exit_valuation == pytest.approx(calculate_exit_valuation(year7.arr, year7.ebitda, 8.0, 15.0))
    for scenario_row in result.exit_scenarios:
        assert [item.round_name for item in scenario_row.round_returns] == ["Pre-Seed", "Series A"]


def test_exit_year_is_clipped_to_horizon():
    scenario = build_sample_scenario().model_copy(update={"years": 5})
    result = ScenarioCalculator().run(scenario)
    assert result.exit_year == 5
    assert len(result.monthly) == 60


def test_dashboards():
    result = ScenarioCalculator().run(build_sample_scenario())
    slices = {item.name: item.data for item in result.dashboards}
    assert set(slices) == {"revenue", "cash", "ownership"}
    assert slices["revenue"]["years"] == list(range(1, 11))
    assert len(slices["cash"]["cash"]) == 120
    assert sum(slices["ownership"].values()) == pytest.approx(1.0, abs=1e-5)
