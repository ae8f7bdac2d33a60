"""
Numeric helpers shared by the regulator and the interlock engine.
"""

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Bound value to [lo, hi].

    No ordering check is done on the bounds; with lo > hi the result is hi.
    """
    return float(np.clip(value, lo, hi))


def percent(fraction: float) -> float:
    """Convert a 0-1 fraction to a percentage."""
    return fraction * 100.0
