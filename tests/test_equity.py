from __future__ import annotations

import pytest

from startup_model.errors import DegenerateDilution, DegenerateReturns, InvalidAssumptions
from startup_model.models.equity import EquityRound, ExitMethod, FounderInput, StakeholderType
from startup_model.services.equity import (
    calculate_esop_refresh,
    calculate_exit_returns,
    calculate_exit_valuation,
    calculate_funding_round_dilution,
    esop_ownership,
    exit_scenarios,
    generate_cap_table,
    generate_cap_table_history,
    initialize_cap_table,
    total_shares,
)

SOLO = [FounderInput(name="Founder", ownership=1.0)]
PAIR = [FounderInput(name="Founder 1", ownership=0.6), FounderInput(name="Founder 2", ownership=0.4)]


def _initial_entries(founders=SOLO, esop_pool_size=0.10):
    return initialize_cap_table(founders, esop_pool_size).entries()


def test_initial_table_carves_out_esop():
    table = initialize_cap_table(PAIR, 0.15)
    assert [row.current_ownership for row in table.founders] == pytest.approx([0.51, 0.34])
    assert [row.shares for row in table.founders] == [5_100_000, 3_400_000]
    assert table.esop.shares == 1_500_000
    assert table.total_shares == 10_000_000


def test_founders_must_cover_founder_equity():
    with pytest.raises(InvalidAssumptions):
        initialize_cap_table([FounderInput(name="Only", ownership=0.7)], 0.15)
    with pytest.raises(InvalidAssumptions):
        initialize_cap_table(SOLO, 1.0)


def test_round_dilutes_everyone_pro_rata():
    result = calculate_funding_round_dilution(_initial_entries(), 2_000_000, 10_000_000)
    assert result.new_investor_ownership == pytest.approx(0.2)
    assert result.dilution_factor == pytest.approx(0.8)
    assert result.shares_issued == 2_500_000
    assert result.price_per_share == pytest.approx(0.8)
    founder = result.updated_cap_table[0]
    assert founder.ownership == pytest.approx(0.72)
    assert founder.shares == 9_000_000


@pytest.mark.parametrize(
    "amount, post_money",
    [
        (1_000_000, 0),
        (1_000_000, -5_000_000),
        (-1, 10_000_000),
        (10_000_000, 10_000_000),
        (12_000_000, 10_000_000),
    ],
)
def test_degenerate_rounds_are_rejected(amount, post_money):
    with pytest.raises(DegenerateDilution):
        calculate_funding_round_dilution(_initial_entries(), amount, post_money)


def test_empty_cap_table_cannot_price_a_round():
    with pytest.raises(DegenerateDilution):
        calculate_funding_round_dilution([], 1_000_000, 10_000_000)


def test_esop_refresh_tops_up_to_target():
    entries = _initial_entries(esop_pool_size=0.10)
    result = calculate_esop_refresh(entries, 0.15, "Series A")
    assert result.refresh_ownership == pytest.approx(0.05 / 0.9)
    assert esop_ownership(result.updated_cap_table) == pytest.approx(0.15)
    assert sum(entry.ownership for entry in result.updated_cap_table) == pytest.approx(1.0)
    refresh = result.updated_cap_table[-1]
    assert refresh.type == StakeholderType.ESOP_REFRESH
    assert refresh.stakeholder == "Series A ESOP Refresh"
    assert total_shares(result.updated_cap_table) == total_shares(entries) + result.refresh_shares


def test_esop_refresh_is_noop_when_pool_is_large_enough():
    entries = _initial_entries(esop_pool_size=0.20)
    result = calculate_esop_refresh(entries, 0.15)
    assert result.refresh_ownership == 0
    assert result.updated_cap_table == entries


def test_esop_refresh_rejects_full_pool_target():
    with pytest.raises(DegenerateDilution):
        calculate_esop_refresh(_initial_entries(), 1.0)


def test_history_closes_at_one_hundred_percent():
    rounds = [
        EquityRound(round_name="Pre-Seed", amount=1_500_000, post_money_valuation=7_500_000, close_month=3),
        EquityRound(round_name="Seed", amount=3_000_000, post_money_valuation=15_000_000, close_month=14),
        EquityRound(
            round_name="Series A",
            amount=8_000_000,
            post_money_valuation=40_000_000,
            close_month=27,
            esop_refresh=0.15,
        ),
    ]
    history = generate_cap_table_history(PAIR, 0.15, rounds)
    assert [snapshot.stage for snapshot in history] == [
        "Initial",
        "Pre-Seed",
        "Seed",
        "Series A",
        "Series A ESOP Refresh",
    ]
    for snapshot in history:
        assert snapshot.total_ownership() == pytest.approx(1.0, abs=1e-5)
    assert esop_ownership(history[-1].entries) == pytest.approx(0.15)


def test_round_order_changes_investor_stakes():
    early = EquityRound(round_name="Early", amount=1_000_000, post_money_valuation=5_000_000)
    late = EquityRound(round_name="Late", amount=5_000_000, post_money_valuation=25_000_000)
    forward = {entry.stakeholder: entry.ownership for entry in generate_cap_table(SOLO, 0.1, [early, late])}
    backward = {entry.stakeholder: entry.ownership for entry in generate_cap_table(SOLO, 0.1, [late, early])}
    assert forward["Early Investors"] == pytest.approx(0.16)
    assert backward["Early Investors"] == pytest.approx(0.2)
    assert forward["Founder"] == pytest.approx(backward["Founder"])


def test_exit_valuation_methods():
    assert calculate_exit_valuation(10e6, 2e6, 10, 15, ExitMethod.ARR) == pytest.approx(100e6)
    assert calculate_exit_valuation(10e6, 2e6, 10, 15, ExitMethod.EBITDA) == pytest.approx(30e6)
    assert calculate_exit_valuation(10e6, 2e6, 10, 15) == pytest.approx(65e6)


def test_exit_returns():
    returns = calculate_exit_returns(5, 40e6, 1e6, 0.1, investment_year=1)
    assert returns.equity_value == pytest.approx(4e6)
    assert returns.roi == pytest.approx(4)
    assert returns.roi_percent == pytest.approx(300)
    assert returns.cagr == pytest.approx(41.42, abs=0.01)


def test_exit_returns_edge_cases():
    with pytest.raises(DegenerateReturns):
        calculate_exit_returns(5, 40e6, 0, 0.1)
    assert calculate_exit_returns(3, 40e6, 1e6, 0.1, investment_year=3).cagr == 0
    assert calculate_exit_returns(5, 0, 1e6, 0.1).cagr == -100


def test_exit_scenario_grid():
    rounds = [
        EquityRound(round_name="Pre-Seed", amount=1_500_000, post_money_valuation=7_500_000, close_month=3),
        EquityRound(round_name="Grant", amount=0, post_money_valuation=1_000_000),
        EquityRound(round_name="Series A", amount=8_000_000, post_money_valuation=40_000_000, close_month=27),
    ]
    table = generate_cap_table(PAIR, 0.15, [rounds[0], rounds[2]])
    scenarios = exit_scenarios(5e6, 1e6, table, rounds, exit_year=7)
    assert [scenario.multiple for scenario in scenarios] == [2, 3, 5, 6, 8, 10, 15, 20, 25]
    for scenario in scenarios:
        assert [item.round_name for item in scenario.round_returns] == ["Pre-Seed", "Series A"]
    series_a = scenarios[5].round_returns[1]
    assert scenarios[5].exit_valuation == pytest.approx(30e6)
    assert series_a.equity_ownership == pytest.approx(0.2)
    assert series_a.roi == pytest.approx(30e6 * 0.2 / 8e6)


def test_same_named_tranches_keep_their_own_stakes():
    rounds = [
        EquityRound(round_name="Seed", amount=1_000_000, post_money_valuation=5_000_000),
        EquityRound(round_name="Seed", amount=2_000_000, post_money_valuation=20_000_000),
    ]
    table = generate_cap_table(SOLO, 0.1, rounds)
    scenarios = exit_scenarios(10e6, 2e6, table, rounds, exit_year=5, multiples=[10])
    stakes = [(item.investment, item.equity_ownership) for item in scenarios[0].round_returns]
    assert stakes == [(1_000_000, pytest.approx(0.18)), (2_000_000, pytest.approx(0.1))]
