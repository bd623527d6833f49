"""Half-up rounding for displayed amounts and scores."""
from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (42.5 -> 43), unlike ``round``."""
    return math.floor(value + 0.5)
