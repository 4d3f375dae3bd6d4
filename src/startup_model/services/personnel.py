from __future__ import annotations

import logging
from typing import List, Sequence

from ..models.personnel import MonthlyPersonnel, PersonnelCostBreakdown, PersonnelRole

logger = logging.getLogger(__name__)

# Flat loading used for every projection: payroll tax, benefits and insurance.
OVERHEAD_MULTIPLIER = 1.4

# Itemized loading for display. Adds up to 35%, so the breakdown total runs
# about 3.6% below the flat-multiplier cost.
PAYROLL_TAX_RATE = 0.0765
BENEFITS_RATE = 0.20
MISC_OVERHEAD_RATE = 0.0735


def personnel_cost(role: PersonnelRole, month: int) -> float:
    """Monthly loaded cost of one role, 0 outside its active window."""
    if not role.is_active(month):
        return 0.0
    return (role.base_salary * OVERHEAD_MULTIPLIER) / 12


def personnel_cost_breakdown(role: PersonnelRole, month: int) -> PersonnelCostBreakdown:
    if not role.is_active(month):
        return PersonnelCostBreakdown(base_salary=0.0, payroll_taxes=0.0, benefits=0.0, total=0.0)
    monthly_salary = role.base_salary / 12
    payroll_taxes = monthly_salary * PAYROLL_TAX_RATE
    benefits = monthly_salary * BENEFITS_RATE + monthly_salary * MISC_OVERHEAD_RATE
    return PersonnelCostBreakdown(
        base_salary=monthly_salary,
        payroll_taxes=payroll_taxes,
        benefits=benefits,
        total=monthly_salary + payroll_taxes + benefits,
    )


def monthly_personnel_total(roles: Sequence[PersonnelRole], month: int) -> float:
    return sum(personnel_cost(role, month) for role in roles)


def cumulative_personnel_cost(roles: Sequence[PersonnelRole], target_month: int) -> float:
    cumulative = 0.0
    for month in range(1, target_month + 1):
        cumulative += monthly_personnel_total(roles, month)
    return cumulative


def headcount(roles: Sequence[PersonnelRole], month: int) -> int:
    return sum(1 for role in roles if role.is_active(month))


def personnel_projections(roles: Sequence[PersonnelRole], start_month: int, end_month: int) -> List[MonthlyPersonnel]:
    projections = [
        MonthlyPersonnel(
            month=month,
            headcount=headcount(roles, month),
            personnel_cost=monthly_personnel_total(roles, month),
        )
        for month in range(start_month, end_month + 1)
    ]
    logger.debug("personnel projections for months %s-%s across %d roles", start_month, end_month, len(roles))
    return projections


def default_personnel_roles() -> List[PersonnelRole]:
    return [
        PersonnelRole(role_name="CEO", base_salary=160000, start_month=6, end_month=120),
        PersonnelRole(role_name="CTO", base_salary=160000, start_month=3, end_month=120),
        PersonnelRole(role_name="Sr. Full-Stack Developer", base_salary=140000, start_month=3, end_month=120),
        PersonnelRole(role_name="Product/Customer Success", base_salary=105000, start_month=13, end_month=120),
        PersonnelRole(role_name="Sales/Partnership Lead", base_salary=140000, start_month=25, end_month=120),
        PersonnelRole(role_name="UI/UX Designer", base_salary=100000, start_month=18, end_month=120),
        PersonnelRole(role_name="Backend Engineer", base_salary=120000, start_month=13, end_month=120),
        PersonnelRole(role_name="Marketing Manager", base_salary=110000, start_month=18, end_month=120),
    ]


def monthly_personnel_breakdown(roles: Sequence[PersonnelRole], month: int) -> PersonnelCostBreakdown:
    """Itemized cost of all active roles; runs below monthly_personnel_total."""
    rows = [personnel_cost_breakdown(role, month) for role in roles]
    return PersonnelCostBreakdown(
        base_salary=sum(row.base_salary for row in rows),
        payroll_taxes=sum(row.payroll_taxes for row in rows),
        benefits=sum(row.benefits for row in rows),
        total=sum(row.total for row in rows),
    )
