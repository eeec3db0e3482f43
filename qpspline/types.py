"""Typing helpers (internal)."""

from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

FloatNDArray: TypeAlias = NDArray[np.float64]
IntNDArray: TypeAlias = NDArray[np.intp]

__all__ = [
    "FloatNDArray",
    "IntNDArray",
]
