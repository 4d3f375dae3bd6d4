from __future__ import annotations


class CalculationError(ValueError):
    """Base class for inputs that make a projection mathematically undefined."""


class InvalidAssumptions(CalculationError):
    pass


class DegenerateDilution(CalculationError):
    pass


class DegenerateReturns(CalculationError):
    pass
