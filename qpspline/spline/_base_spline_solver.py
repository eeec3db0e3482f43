"""
Base classes and collaborator interfaces for spline solvers.

A spline solver reads a quadratic cost from a kernel, linear constraints from
a constraint source, and writes the solved parameters back into a spline.
How these objects derive their matrices from the knots and the polynomial
basis is up to them; the solver only relies on the protocols below.
"""

__all__ = [
    "KernelSource",
    "ConstraintBlockSource",
    "ConstraintSource",
    "SplineTarget",
    "Spline1dSolver",
]

from abc import ABC, abstractmethod
from typing import Optional, Protocol

from numpy.typing import ArrayLike

from qpspline.types import FloatNDArray


class KernelSource(Protocol):
    """Quadratic cost of the fit, ``1/2 x^T P x + q^T x``."""

    def kernel_matrix(self) -> ArrayLike:
        """Return P, an n x n matrix."""
        ...

    def offset(self) -> ArrayLike:
        """Return q as an (n, 1) column."""
        ...


class ConstraintBlockSource(Protocol):
    def constraint_matrix(self) -> ArrayLike:
        ...

    def constraint_boundary(self) -> ArrayLike:
        ...


class ConstraintSource(Protocol):
    """Inequality (``G x >= g``) and equality (``E x = e``) constraint blocks."""

    def inequality_constraint(self) -> ConstraintBlockSource:
        ...

    def equality_constraint(self) -> ConstraintBlockSource:
        ...


class SplineTarget(Protocol):
    """Spline that accepts a solved parameter column."""

    spline_order: int

    def set_spline_segments(self, params: FloatNDArray, order: int) -> bool:
        """Split params into segment coefficients; return True on success."""
        ...


class Spline1dSolver(ABC):
    """
    Mother class for one dimensional spline fitting solvers.

    Attributes
    ----------
    kernel : KernelSource
        Source of the quadratic cost.
    constraint : ConstraintSource
        Source of the inequality and equality constraint blocks.
    spline : SplineTarget
        Spline receiving the solved parameters.
    order : int
        Spline order passed along with the parameters. Defaults to
        spline.spline_order.
    """

    def __init__(
        self,
        kernel: KernelSource,
        constraint: ConstraintSource,
        spline: SplineTarget,
        order: Optional[int] = None,
    ) -> None:
        self.kernel = kernel
        self.constraint = constraint
        self.spline = spline
        self.order = int(order) if order is not None else int(spline.spline_order)
        if self.order < 0:
            raise ValueError(f"Spline order must be non-negative, got {self.order}.")

    @abstractmethod
    def solve(self) -> bool:
        """Fit the spline; return True if the spline segments were updated."""
        raise NotImplementedError
