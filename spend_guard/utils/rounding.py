"""Rounding helpers for currency figures"""

import math


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)"""
    return math.floor(value + 0.5)


def round_to(value: float, digits: int) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
