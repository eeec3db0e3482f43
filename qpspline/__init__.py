"""
qpspline.

Provides
  1. Conversion of dense cost and constraint matrices to compressed sparse column form
  2. Assembly of inequality and equality spline constraints into two sided bounds
  3. Quadratic program setup and solving through OSQP
  4. A spline solver writing the solved parameters back into spline segments

Available subpackages
---------------------
cvxopt
    QP assembly and OSQP solve orchestration
spline
    Spline solver interface
util
    Utilities
"""

import logging

from . import cvxopt, spline, util

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = ["cvxopt", "spline", "util", "__version__"]
