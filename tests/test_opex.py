from __future__ import annotations

import pytest

from startup_model.models.opex import FundingRoundAllocation, OPEXAllocation
from startup_model.models.personnel import PersonnelRole
from startup_model.services.opex import (
    allocation_for_month,
    annual_opex,
    average_monthly_opex,
    cumulative_opex,
    default_funding_rounds,
    monthly_opex,
    opex_projections,
    opex_summary,
    pre_seed_allocation,
    round_for_month,
    series_a_allocation,
    series_x_allocation,
    zero_allocation,
)
from startup_model.services.personnel import default_personnel_roles, monthly_personnel_total


def test_default_round_table():
    rounds = default_funding_rounds()
    assert [item.name for item in rounds] == ["Bootstrap", "Pre-Seed", "Series A", "Series X"]
    assert [item.start_month for item in rounds] == [1, 3, 27, 51]


@pytest.mark.parametrize(
    "month, expected",
    [
        (1, zero_allocation()),
        (2, zero_allocation()),
        (3, pre_seed_allocation()),
        (26, pre_seed_allocation()),
        (27, series_a_allocation()),
        (50, series_a_allocation()),
        (51, series_x_allocation()),
        (400, series_x_allocation()),
    ],
)
def test_allocation_by_month(month, expected):
    assert allocation_for_month(month) == expected


def test_months_before_first_round_use_first_round():
    assert round_for_month(0).name == "Bootstrap"


def test_series_x_split_of_budget():
    allocation = series_x_allocation()
    total = allocation.subtotal()
    assert total == pytest.approx(166667 * 0.60)
    assert allocation.product_development / total == pytest.approx(0.2 / 0.6)
    assert allocation.marketing_and_sales / total == pytest.approx(0.25 / 0.6)


def test_monthly_opex_adds_personnel_and_operating():
    roles = default_personnel_roles()
    month12 = monthly_opex(roles, 12)
    assert month12.personnel_cost == pytest.approx(53666.67, abs=0.01)
    assert month12.operating_subtotal == pytest.approx(45833)
    assert month12.total_opex == pytest.approx(month12.personnel_cost + month12.operating_subtotal)


def test_bootstrap_months_have_no_operating_spend():
    month1 = monthly_opex(default_personnel_roles(), 1)
    assert month1.operating_subtotal == 0
    assert month1.total_opex == 0


def test_explicit_allocation_overrides_round_table():
    custom = OPEXAllocation(product_development=1000, travel_and_events=500)
    result = monthly_opex([], 60, allocation=custom)
    assert result.operating_subtotal == 1500
    assert result.total_opex == 1500


def test_custom_round_table_is_sorted_before_lookup():
    rounds = [
        FundingRoundAllocation(name="Seed", start_month=6, allocation=OPEXAllocation(marketing_and_sales=2000)),
        FundingRoundAllocation(name="Garage", start_month=1, allocation=OPEXAllocation(office_and_equipment=100)),
    ]
    assert round_for_month(5, rounds).name == "Garage"
    assert round_for_month(6, rounds).name == "Seed"
    assert monthly_opex([], 7, rounds=rounds).total_opex == 2000


def test_cumulative_crosses_round_boundary():
    roles = default_personnel_roles()
    expected = sum(monthly_opex(roles, month).total_opex for month in range(1, 31))
    assert cumulative_opex(roles, 30) == pytest.approx(expected)
    assert cumulative_opex(roles, 27) - cumulative_opex(roles, 26) == pytest.approx(
        monthly_personnel_total(roles, 27) + series_a_allocation().subtotal()
    )


def test_default_total_opex_is_non_decreasing():
    projections = opex_projections(default_personnel_roles(), 1, 120)
    totals = [item.total_opex for item in projections]
    for previous, current in zip(totals, totals[1:]):
        assert current >= previous


def test_average_monthly_opex():
    roles = [PersonnelRole(role_name="Engineer", base_salary=120000, start_month=1)]
    flat = OPEXAllocation(product_development=1000)
    assert average_monthly_opex(roles, 1, 12, allocation=flat) == pytest.approx(15000)
    assert average_monthly_opex(roles, 5, 4) == 0


def test_annual_roll_up():
    projections = opex_projections(default_personnel_roles(), 1, 24)
    years = annual_opex(projections)
    assert [item.year for item in years] == [1, 2]
    assert years[0].opex == pytest.approx(sum(item.total_opex for item in projections[:12]))
    assert years[1].opex == pytest.approx(sum(item.total_opex for item in projections[12:]))


def test_month_twelve_summary():
    roles = default_personnel_roles()
    summary = opex_summary(roles, 12)
    assert summary.headcount == 3
    assert summary.personnel_cost == pytest.approx(53666.67, abs=0.01)
    assert summary.total_opex == pytest.approx(53666.67 + 45833, abs=0.01)
    assert summary.cumulative_opex == pytest.approx(cumulative_opex(roles, 12))
    assert summary.personnel_breakdown.total == pytest.approx(summary.personnel_cost * 1.35 / 1.4)
