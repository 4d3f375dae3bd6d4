from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint


class PersonnelRole(BaseModel):
    model_config = ConfigDict(frozen=True)

    role_name: str
    base_salary: float = Field(..., ge=0, description="Annual base salary")
    start_month: conint(ge=1) = 1
    end_month: Optional[int] = Field(default=None, description="Last active month, None means ongoing")

    def is_active(self, month: int) -> bool:
        if month < self.start_month:
            return False
        return self.end_month is None or month <= self.end_month


class PersonnelCostBreakdown(BaseModel):
    base_salary: float
    payroll_taxes: float
    benefits: float
    total: float


class MonthlyPersonnel(BaseModel):
    month: int
    headcount: int
    personnel_cost: float
