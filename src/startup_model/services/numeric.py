from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    # builtin round() is banker's rounding; counts here round .5 upwards
    return int(math.floor(value + 0.5))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    if denominator == 0:
        return default
    return numerator / denominator
