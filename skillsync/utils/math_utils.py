"""Numeric helpers."""
import math
from typing import Optional


def round_half_up(value: Optional[float]) -> int:
    """Round to the nearest integer with halves going up (72.5 -> 73), None -> 0."""
    if value is None:
        return 0
    return int(math.floor(float(value) + 0.5))
