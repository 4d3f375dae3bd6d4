from __future__ import annotations

import pytest

from startup_model.models.cash import FundingEvent
from startup_model.models.opex import MonthlyOPEX
from startup_model.models.revenue import RevenueMetrics
from startup_model.services.cash import (
    RUNWAY_SENTINEL,
    burn_rate_metrics,
    cash_positions,
    funding_events_from_rounds,
    months_of_runway,
)
from startup_model.services.opex import opex_projections
from startup_model.services.personnel import default_personnel_roles
from startup_model.services.revenue import default_revenue_assumptions, monthly_revenue_projections


def _revenue(month: int, total: float) -> RevenueMetrics:
    return RevenueMetrics(
        year=(month - 1) // 12 + 1,
        month=(month - 1) % 12 + 1,
        absolute_month=month,
        arr=total,
        setup_fees=0.0,
        total_revenue=total,
        customers=1,
        cogs=0.0,
        gross_profit=total,
        gross_margin=1.0 if total else 0.0,
    )


def _opex(month: int, total: float) -> MonthlyOPEX:
    return MonthlyOPEX(
        month=month,
        personnel_cost=total,
        product_development=0.0,
        marketing_and_sales=0.0,
        legal_and_professional=0.0,
        office_and_equipment=0.0,
        travel_and_events=0.0,
        operating_subtotal=0.0,
        total_opex=total,
    )


def test_balance_rolls_forward_with_funding():
    revenue = [_revenue(month, 10000) for month in range(1, 7)]
    opex = [_opex(month, 30000) for month in range(1, 7)]
    positions = cash_positions(revenue, opex, [FundingEvent(month=3, amount=100000)], starting_cash=50000)

    assert positions[0].cash_balance == pytest.approx(30000)
    assert positions[2].funding == 100000
    assert positions[2].cash_balance == pytest.approx(30000 - 20000 + 100000 - 20000)
    for previous, current in zip(positions, positions[1:]):
        assert current.cash_balance == pytest.approx(previous.cash_balance + current.funding + current.net_burn)


def test_same_month_events_are_summed():
    positions = cash_positions(
        [_revenue(1, 0)],
        [_opex(1, 0)],
        [FundingEvent(month=1, amount=1000), FundingEvent(month=1, amount=500)],
    )
    assert positions[0].funding == 1500
    assert positions[0].cash_balance == 1500


def test_runway_uses_sentinel_when_not_burning():
    assert months_of_runway(100000, 5000) == RUNWAY_SENTINEL
    assert months_of_runway(100000, 0) == RUNWAY_SENTINEL
    assert months_of_runway(100000, -20000) == pytest.approx(5)


def test_missing_opex_month_counts_as_zero():
    positions = cash_positions([_revenue(1, 1000), _revenue(2, 1000)], [_opex(1, 400)])
    assert positions[1].opex == 0
    assert positions[1].cash_balance == pytest.approx(1600)


def test_burn_metrics_only_count_burning_months():
    revenue = [_revenue(1, 0), _revenue(2, 0), _revenue(3, 50000), _revenue(4, 0)]
    opex = [_opex(1, 10000), _opex(2, 30000), _opex(3, 10000), _opex(4, 20000)]
    positions = cash_positions(revenue, opex, starting_cash=35000)
    metrics = burn_rate_metrics(positions)

    assert metrics.average_monthly_burn == pytest.approx(20000)
    assert metrics.peak_monthly_burn == pytest.approx(30000)
    assert metrics.projected_cash_out == 2
    assert metrics.current_runway == pytest.approx(positions[-1].cash_balance / 20000)


def test_profitable_path_never_runs_out():
    positions = cash_positions([_revenue(1, 5000)], [_opex(1, 1000)])
    metrics = burn_rate_metrics(positions)
    assert metrics.average_monthly_burn == 0
    assert metrics.current_runway == RUNWAY_SENTINEL
    assert metrics.projected_cash_out == 0


def test_funding_events_from_persisted_rows():
    events = funding_events_from_rounds(
        [
            {"close_month": 15, "amount_raised": 5000000},
            {"close_month": None, "amount_raised": 2000000},
            {"close_month": 5, "amount_raised": None},
            {},
        ]
    )
    assert [(event.month, event.amount) for event in events] == [(15, 5000000), (3, 2000000), (5, 0), (3, 0)]


def test_default_projection_burns_after_pre_seed():
    monthly_revenue = monthly_revenue_projections(3, default_revenue_assumptions())
    monthly_opex = opex_projections(default_personnel_roles(), 1, 36)
    positions = cash_positions(monthly_revenue, monthly_opex, [FundingEvent(month=3, amount=1500000)])
    assert len(positions) == 36
    assert positions[2].net_burn < 0
    assert positions[2].months_of_runway > 0
