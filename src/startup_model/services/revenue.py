from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidAssumptions
from ..models.common import StepSchedule
from ..models.revenue import (
    CustomerMetrics,
    LicenseEquivalents,
    LicenseTier,
    RevenueAssumptions,
    RevenueMetrics,
    RevenueSummary,
    YearlyRevenue,
    YearSnapshot,
)
from .numeric import round_half_up, safe_ratio

logger = logging.getLogger(__name__)

# Single user : team : enterprise license mix
LICENSE_MIX = (0.899, 0.090, 0.011)


def default_discount_schedule() -> StepSchedule:
    return StepSchedule.from_values([0.40, 0.30, 0.20, 0.10, 0.10, 0.075, 0.05, 0.05, 0.03, 0.025])


def default_churn_schedule() -> StepSchedule:
    return StepSchedule.from_values([0.00, 0.20, 0.20, 0.18, 0.17, 0.17, 0.16, 0.15, 0.15, 0.15])


def default_license_tiers() -> List[LicenseTier]:
    return [
        LicenseTier(name="Starter", arr_per_year=12000, setup_fee=1000, distribution=0.50),
        LicenseTier(name="Professional", arr_per_year=24000, setup_fee=2500, distribution=0.35),
        LicenseTier(name="Enterprise", arr_per_year=48000, setup_fee=5000, distribution=0.15),
    ]


def default_revenue_assumptions() -> RevenueAssumptions:
    return RevenueAssumptions(
        tam=30000,
        target_penetration=0.05,
        years_to_target=7,
        year1_customers=10,
        base_arr=24000,
        setup_fee=2500,
        annual_price_increase=0.03,
        churn_schedule=default_churn_schedule(),
        discount_schedule=default_discount_schedule(),
        cogs_rate=0.25,
    )


def growth_exponent(assumptions: RevenueAssumptions) -> float:
    """Exponent of the penetration curve linking year-1 customers to the target.

    ln(year1 / target_customers) / ln(1 / years_to_target)
    """
    target_customers = assumptions.tam * assumptions.target_penetration
    if target_customers <= 0:
        raise InvalidAssumptions("tam * target_penetration must be positive")
    if assumptions.year1_customers >= target_customers:
        raise InvalidAssumptions(
            f"year1_customers ({assumptions.year1_customers}) must be below the target of {target_customers:g} customers"
        )
    # exponent is undefined at 1 and negative below it
    if assumptions.years_to_target <= 1:
        raise InvalidAssumptions(f"years_to_target must be above 1, got {assumptions.years_to_target:g}")
    ratio = assumptions.year1_customers / target_customers
    return math.log(ratio) / math.log(1 / assumptions.years_to_target)


def market_penetration(year: int, assumptions: RevenueAssumptions, exponent: Optional[float] = None) -> float:
    if year <= 0:
        return 0.0
    if exponent is None:
        exponent = growth_exponent(assumptions)
    penetration = assumptions.target_penetration * (year / assumptions.years_to_target) ** exponent
    return min(penetration, assumptions.target_penetration)


def total_customers(year: int, assumptions: RevenueAssumptions, exponent: Optional[float] = None) -> int:
    return round_half_up(assumptions.tam * market_penetration(year, assumptions, exponent))


def churn_for_year(year: int, assumptions: RevenueAssumptions) -> float:
    if assumptions.churn_schedule is not None:
        return assumptions.churn_schedule.value_for(year)
    if assumptions.churn_rate is not None:
        return assumptions.churn_rate
    return default_churn_schedule().value_for(year)


def discount_for_year(year: int, schedule: Optional[StepSchedule] = None) -> float:
    active = schedule if schedule is not None else default_discount_schedule()
    return active.value_for(year)


def list_arr_per_customer(year: int, assumptions: RevenueAssumptions) -> float:
    return assumptions.base_arr * (1 + assumptions.annual_price_increase) ** (year - 1)


def customer_metrics(
    year: int,
    previous: Optional[CustomerMetrics],
    assumptions: RevenueAssumptions,
    exponent: Optional[float] = None,
) -> CustomerMetrics:
    if exponent is None:
        exponent = growth_exponent(assumptions)
    penetration = market_penetration(year, assumptions, exponent)
    customers = total_customers(year, assumptions, exponent)

    if previous is not None:
        churned = round_half_up(previous.total_customers * churn_for_year(year, assumptions))
        new_customers = customers - (previous.total_customers - churned)
    else:
        churned = 0
        new_customers = assumptions.year1_customers if year == 1 else customers

    return CustomerMetrics(
        year=year,
        market_penetration=penetration,
        total_customers=customers,
        new_customers=new_customers,
        churned_customers=churned,
        arr_per_customer=list_arr_per_customer(year, assumptions),
    )


def customer_projections(years: int, assumptions: RevenueAssumptions) -> List[CustomerMetrics]:
    exponent = growth_exponent(assumptions)
    projections: List[CustomerMetrics] = []
    previous: Optional[CustomerMetrics] = None
    for year in range(1, years + 1):
        previous = customer_metrics(year, previous, assumptions, exponent)
        projections.append(previous)
    return projections


def weighted_pricing(
    tiers: Sequence[LicenseTier],
    year: int,
    annual_increase: float,
    discount_schedule: Optional[StepSchedule] = None,
) -> Tuple[float, float]:
    """Distribution-weighted (discounted ARR, setup fee) across license tiers."""
    discount = discount_for_year(year, discount_schedule)
    weighted_arr = 0.0
    weighted_setup = 0.0
    for tier in tiers:
        adjusted = tier.arr_per_year * (1 + annual_increase) ** (year - 1)
        weighted_arr += adjusted * (1 - discount) * tier.distribution
        weighted_setup += tier.setup_fee * tier.distribution
    return weighted_arr, weighted_setup


def yearly_revenue(metrics: CustomerMetrics, assumptions: RevenueAssumptions) -> YearlyRevenue:
    discount = discount_for_year(metrics.year, assumptions.discount_schedule)
    if assumptions.license_tiers:
        arr_per_customer, setup_fee = weighted_pricing(
            assumptions.license_tiers,
            metrics.year,
            assumptions.annual_price_increase,
            assumptions.discount_schedule,
        )
    else:
        arr_per_customer = metrics.arr_per_customer * (1 - discount)
        setup_fee = assumptions.setup_fee

    arr = metrics.total_customers * arr_per_customer
    setup_fees = metrics.new_customers * setup_fee
    total_revenue = arr + setup_fees
    cogs = total_revenue * assumptions.cogs_rate
    gross_profit = total_revenue - cogs
    return YearlyRevenue(
        year=metrics.year,
        discount=discount,
        arr_per_customer=arr_per_customer,
        arr=arr,
        setup_fees=setup_fees,
        total_revenue=total_revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        gross_margin=safe_ratio(gross_profit, total_revenue),
    )


def license_equivalents(customers: int) -> LicenseEquivalents:
    _, team_share, enterprise_share = LICENSE_MIX
    team = round_half_up(customers * team_share)
    enterprise = round_half_up(customers * enterprise_share)
    # largest tier takes the rounding residual so the tiers add up to the total
    return LicenseEquivalents(single_user=customers - team - enterprise, team=team, enterprise=enterprise)


def monthly_revenue(metrics: CustomerMetrics, assumptions: RevenueAssumptions) -> List[RevenueMetrics]:
    annual = yearly_revenue(metrics, assumptions)
    equivalents = license_equivalents(metrics.total_customers)
    return [
        RevenueMetrics(
            year=metrics.year,
            month=month,
            absolute_month=(metrics.year - 1) * 12 + month,
            arr=annual.arr / 12,
            setup_fees=annual.setup_fees / 12,
            total_revenue=annual.total_revenue / 12,
            customers=metrics.total_customers,
            cogs=annual.cogs / 12,
            gross_profit=annual.gross_profit / 12,
            gross_margin=annual.gross_margin,
            license_equivalents=equivalents,
        )
        for month in range(1, 13)
    ]


def revenue_projections(years: int, assumptions: RevenueAssumptions) -> List[RevenueMetrics]:
    """One year-end record per year."""
    projections: List[RevenueMetrics] = []
    for metrics in customer_projections(years, assumptions):
        annual = yearly_revenue(metrics, assumptions)
        projections.append(
            RevenueMetrics(
                year=metrics.year,
                month=12,
                absolute_month=metrics.year * 12,
                arr=annual.arr,
                setup_fees=annual.setup_fees,
                total_revenue=annual.total_revenue,
                customers=metrics.total_customers,
                cogs=annual.cogs,
                gross_profit=annual.gross_profit,
                gross_margin=annual.gross_margin,
                license_equivalents=license_equivalents(metrics.total_customers),
            )
        )
    logger.debug("revenue projections over %d years, final ARR %.2f", years, projections[-1].arr if projections else 0.0)
    return projections


def monthly_revenue_projections(years: int, assumptions: RevenueAssumptions) -> List[RevenueMetrics]:
    monthly: List[RevenueMetrics] = []
    for metrics in customer_projections(years, assumptions):
        monthly.extend(monthly_revenue(metrics, assumptions))
    return monthly


def _snapshot(record: RevenueMetrics) -> YearSnapshot:
    return YearSnapshot(
        arr=record.arr,
        customers=record.customers,
        revenue=record.total_revenue,
        gross_profit=record.gross_profit,
    )


def revenue_summary(years: int, assumptions: RevenueAssumptions) -> RevenueSummary:
    projections = revenue_projections(years, assumptions)
    return RevenueSummary(
        year5=_snapshot(projections[4]) if len(projections) >= 5 else None,
        year10=_snapshot(projections[9]) if len(projections) >= 10 else None,
        final_year=projections[-1] if projections else None,
    )
