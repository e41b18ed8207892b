"""
Numeric helpers shared by the bar controllers and the coordinator.
Positions are vertical centers in host units (points or css pixels),
growing downward.
"""

import math
from dataclasses import dataclass, replace

import numpy as np

# unit in the last place of a single precision 1.0;
# all "is it there yet" comparisons use this tolerance
EPSILON = float(np.finfo(np.float32).eps)


def negligible(x) -> bool:
    return float(np.float32(abs(x))) < EPSILON

def close(a, b) -> bool:
    return negligible(a - b)

def clamp(x, lo, hi):
    return max(lo, min(hi, x))

def clamp32(x, lo, hi) -> float:
    # clamp in single precision, as opacities are stored
    return float(np.clip(np.float32(x), np.float32(lo), np.float32(hi)))

def unset(x) -> bool:
    return x is None or math.isnan(x)


@dataclass(frozen=True)
class Insets:
    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0

    def with_top(self, top):
        return replace(self, top=top)
