from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..models.cash import BurnRateMetrics, CashPosition, FundingEvent
from ..models.opex import MonthlyOPEX
from ..models.revenue import RevenueMetrics

logger = logging.getLogger(__name__)

# Stands in for "infinite" runway so records stay JSON-serializable.
RUNWAY_SENTINEL = 999.0
DEFAULT_CLOSE_MONTH = 3


def months_of_runway(cash_balance: float, net_burn: float) -> float:
    if net_burn < 0:
        return cash_balance / abs(net_burn)
    return RUNWAY_SENTINEL


def cash_positions(
    revenue_projections: Sequence[RevenueMetrics],
    opex_projections: Sequence[MonthlyOPEX],
    funding_events: Iterable[FundingEvent] = (),
    starting_cash: float = 0.0,
) -> List[CashPosition]:
    """Roll the cash balance forward month by month.

    Funding landing in a month is added before that month's net burn.
    Months without an OPEX record are treated as zero spend.
    """
    opex_by_month = {item.month: item.total_opex for item in opex_projections}
    funding_by_month: Dict[int, float] = defaultdict(float)
    for event in funding_events:
        funding_by_month[event.month] += event.amount

    missing = [revenue.absolute_month for revenue in revenue_projections if revenue.absolute_month not in opex_by_month]
    if missing:
        logger.warning("no OPEX for %d month(s) starting at month %d, using zero", len(missing), missing[0])

    positions: List[CashPosition] = []
    cash_balance = starting_cash
    for revenue in revenue_projections:
        month = revenue.absolute_month
        opex = opex_by_month.get(month, 0.0)
        funding = funding_by_month.get(month, 0.0)
        net_burn = revenue.total_revenue - opex
        cash_balance += funding
        cash_balance += net_burn
        positions.append(
            CashPosition(
                month=month,
                year=revenue.year,
                revenue=revenue.total_revenue,
                opex=opex,
                funding=funding,
                net_burn=net_burn,
                cash_balance=cash_balance,
                months_of_runway=months_of_runway(cash_balance, net_burn),
            )
        )
    return positions


def burn_rate_metrics(positions: Sequence[CashPosition]) -> BurnRateMetrics:
    burning = [abs(position.net_burn) for position in positions if position.net_burn < 0]
    if not burning:
        return BurnRateMetrics(
            average_monthly_burn=0.0,
            peak_monthly_burn=0.0,
            current_runway=RUNWAY_SENTINEL,
            projected_cash_out=0,
        )
    cash_out = next((position.month for position in positions if position.cash_balance <= 0), 0)
    return BurnRateMetrics(
        average_monthly_burn=sum(burning) / len(burning),
        peak_monthly_burn=max(burning),
        current_runway=positions[-1].months_of_runway,
        projected_cash_out=cash_out,
    )


def funding_events_from_rounds(rounds: Iterable[Mapping[str, Any]]) -> List[FundingEvent]:
    """Map persisted funding-round rows (close_month, amount_raised) to events."""
    return [
        FundingEvent(
            month=row.get("close_month") or DEFAULT_CLOSE_MONTH,
            amount=row.get("amount_raised") or 0.0,
        )
        for row in rounds
    ]
