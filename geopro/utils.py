# utils.py

import math
from typing import Union

import numpy as np

Number = Union[int, float]


def deg2rad(degrees: Number) -> float:
    """Convert an angle from degrees to radians."""
    return degrees * math.pi / 180.0


def rad2deg(radians: Number) -> float:
    """Convert an angle from radians to degrees."""
    return radians * 180.0 / math.pi


def round_to(value: Union[Number, np.ndarray], digits: int = 6) -> Union[float, np.ndarray]:
    """
    Round to a number of decimal digits. Arrays are rounded element-wise.
    Negative zero is returned as zero.
    """
    if isinstance(value, np.ndarray):
        return np.round(value, digits) + 0.0
    return round(float(value), digits) + 0.0
