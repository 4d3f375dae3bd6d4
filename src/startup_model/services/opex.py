from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..models.opex import FundingRoundAllocation, MonthlyOPEX, OPEXAllocation, OpexSummary, OpexYear
from ..models.personnel import PersonnelRole
from .personnel import headcount, monthly_personnel_breakdown, monthly_personnel_total

logger = logging.getLogger(__name__)

SERIES_X_MONTHLY_BUDGET = 166667.0
SERIES_X_SPLIT = (0.20, 0.25, 0.05, 0.05, 0.05)


def zero_allocation() -> OPEXAllocation:
    return OPEXAllocation()


def pre_seed_allocation() -> OPEXAllocation:
    return OPEXAllocation(
        product_development=25000,
        marketing_and_sales=16667,
        legal_and_professional=2083,
        office_and_equipment=833,
        travel_and_events=1250,
    )


def series_a_allocation() -> OPEXAllocation:
    return OPEXAllocation(
        product_development=16667,
        marketing_and_sales=58333,
        legal_and_professional=8333,
        office_and_equipment=8333,
        travel_and_events=8333,
    )


def series_x_allocation(monthly_budget: float = SERIES_X_MONTHLY_BUDGET) -> OPEXAllocation:
    product, marketing, legal, office, travel = SERIES_X_SPLIT
    return OPEXAllocation(
        product_development=monthly_budget * product,
        marketing_and_sales=monthly_budget * marketing,
        legal_and_professional=monthly_budget * legal,
        office_and_equipment=monthly_budget * office,
        travel_and_events=monthly_budget * travel,
    )


def default_funding_rounds() -> List[FundingRoundAllocation]:
    # Pre-Seed closes in month 3, so months 1-2 carry no operating spend
    return [
        FundingRoundAllocation(name="Bootstrap", start_month=1, allocation=zero_allocation()),
        FundingRoundAllocation(name="Pre-Seed", start_month=3, allocation=pre_seed_allocation()),
        FundingRoundAllocation(name="Series A", start_month=27, allocation=series_a_allocation()),
        FundingRoundAllocation(name="Series X", start_month=51, allocation=series_x_allocation()),
    ]


def round_for_month(month: int, rounds: Optional[Sequence[FundingRoundAllocation]] = None) -> FundingRoundAllocation:
    table = sorted(rounds or default_funding_rounds(), key=lambda item: item.start_month)
    current = table[0]
    for funding_round in table:
        if funding_round.start_month <= month:
            current = funding_round
        else:
            break
    return current


def allocation_for_month(month: int, rounds: Optional[Sequence[FundingRoundAllocation]] = None) -> OPEXAllocation:
    return round_for_month(month, rounds).allocation


def monthly_opex(
    roles: Sequence[PersonnelRole],
    month: int,
    allocation: Optional[OPEXAllocation] = None,
    rounds: Optional[Sequence[FundingRoundAllocation]] = None,
) -> MonthlyOPEX:
    """Personnel cost plus the five non-personnel categories for one month.

    An explicit ``allocation`` overrides the funding-round table.
    """
    personnel_cost = monthly_personnel_total(roles, month)
    active = allocation if allocation is not None else allocation_for_month(month, rounds)
    operating_subtotal = active.subtotal()
    return MonthlyOPEX(
        month=month,
        personnel_cost=personnel_cost,
        product_development=active.product_development,
        marketing_and_sales=active.marketing_and_sales,
        legal_and_professional=active.legal_and_professional,
        office_and_equipment=active.office_and_equipment,
        travel_and_events=active.travel_and_events,
        operating_subtotal=operating_subtotal,
        total_opex=personnel_cost + operating_subtotal,
    )


def opex_projections(
    roles: Sequence[PersonnelRole],
    start_month: int,
    end_month: int,
    allocation: Optional[OPEXAllocation] = None,
    rounds: Optional[Sequence[FundingRoundAllocation]] = None,
) -> List[MonthlyOPEX]:
    projections = [monthly_opex(roles, month, allocation, rounds) for month in range(start_month, end_month + 1)]
    logger.debug("OPEX projections for months %s-%s, %d record(s)", start_month, end_month, len(projections))
    return projections


def cumulative_opex(
    roles: Sequence[PersonnelRole],
    target_month: int,
    rounds: Optional[Sequence[FundingRoundAllocation]] = None,
) -> float:
    cumulative = 0.0
    for month in range(1, target_month + 1):
        cumulative += monthly_opex(roles, month, rounds=rounds).total_opex
    return cumulative


def average_monthly_opex(
    roles: Sequence[PersonnelRole],
    start_month: int,
    end_month: int,
    allocation: Optional[OPEXAllocation] = None,
    rounds: Optional[Sequence[FundingRoundAllocation]] = None,
) -> float:
    if end_month < start_month:
        return 0.0
    projections = opex_projections(roles, start_month, end_month, allocation, rounds)
    return sum(item.total_opex for item in projections) / len(projections)


def annual_opex(projections: Sequence[MonthlyOPEX]) -> List[OpexYear]:
    totals: Dict[int, float] = {}
    for item in projections:
        year = (item.month - 1) // 12 + 1
        totals[year] = totals.get(year, 0.0) + item.total_opex
    return [OpexYear(year=year, opex=totals[year]) for year in sorted(totals)]


def opex_summary(
    roles: Sequence[PersonnelRole],
    month: int,
    rounds: Optional[Sequence[FundingRoundAllocation]] = None,
) -> OpexSummary:
    current = monthly_opex(roles, month, rounds=rounds)
    return OpexSummary(
        month=month,
        headcount=headcount(roles, month),
        personnel_cost=current.personnel_cost,
        personnel_breakdown=monthly_personnel_breakdown(roles, month),
        total_opex=current.total_opex,
        cumulative_opex=cumulative_opex(roles, month, rounds=rounds),
    )
