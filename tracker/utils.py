import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with .5 going up, unlike the builtin banker's rounding"""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
