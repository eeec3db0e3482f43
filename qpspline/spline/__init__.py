"""Spline fitting on top of the QP solver."""

from ._base_spline_solver import (
    ConstraintBlockSource,
    ConstraintSource,
    KernelSource,
    Spline1dSolver,
    SplineTarget,
)
from .spline_solver import OsqpSpline1dSolver, apply_solution

__all__ = [
    "KernelSource",
    "ConstraintBlockSource",
    "ConstraintSource",
    "SplineTarget",
    "Spline1dSolver",
    "OsqpSpline1dSolver",
    "apply_solution",
]
