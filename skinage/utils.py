import math


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (not Python's banker's rounding)."""
    return int(math.floor(value + 0.5))
