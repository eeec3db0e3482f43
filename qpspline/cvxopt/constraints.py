"""
Constraint assembly for spline QPs.

OSQP only knows two sided row constraints ``l <= A x <= u``. Spline
constraints come in two blocks:

    inequality rows   G x >= g      ->  g <= G x <= INEQUALITY_UPPER_LIMIT
    equality rows     E x  = e      ->  e - tol <= E x <= e + tol

and are stacked with all inequality rows first. The bound vectors are built
by indexing on that split, so the order is part of the contract.
"""

__all__ = [
    "INEQUALITY_UPPER_LIMIT",
    "EQUALITY_TOLERANCE",
    "ConstraintBlock",
    "ConstraintSystem",
    "assemble_constraints",
]

import logging
from dataclasses import dataclass

import numpy as np

from qpspline.types import FloatNDArray

from .exceptions import DimensionMismatchError, EmptyConstraintsError

logger = logging.getLogger(__name__)

# Finite stand-in for "no upper bound" on inequality rows. Must stay far above
# any value the spline parameters can reach for realistic cost scales.
INEQUALITY_UPPER_LIMIT: float = 1e9

# Half width of the interval encoding an equality row. Must stay below every
# legitimate inequality margin of the problem, otherwise an equality target
# and a nearby inequality bound can cross over.
EQUALITY_TOLERANCE: float = 1e-9


@dataclass
class ConstraintBlock:
    """
    A block of linear constraint rows and their boundary column.

    Attributes
    ----------
    matrix : FloatNDArray
        Constraint matrix of shape (rows, num_params).
    boundary : FloatNDArray
        Boundary values, one per row, stored as a (rows, 1) column.
    """

    matrix: FloatNDArray
    boundary: FloatNDArray

    def __post_init__(self) -> None:
        self.matrix = np.asarray(self.matrix, dtype=float)
        if self.matrix.ndim != 2:
            raise ValueError("Constraint matrix must be 2-D.")
        boundary = np.asarray(self.boundary, dtype=float)
        if boundary.ndim == 1:
            boundary = boundary.reshape(-1, 1)
        if boundary.ndim != 2 or boundary.shape[1] != 1:
            raise ValueError(
                f"Constraint boundary must be a single column, got shape {boundary.shape}."
            )
        if boundary.shape[0] != self.matrix.shape[0]:
            raise DimensionMismatchError(
                f"Constraint boundary has {boundary.shape[0]} rows but the matrix "
                f"has {self.matrix.shape[0]}."
            )
        self.boundary = boundary

    @classmethod
    def empty(cls, num_params: int = 0) -> "ConstraintBlock":
        """Return a block without rows."""
        return cls(np.zeros((0, num_params)), np.zeros((0, 1)))

    @property
    def num_rows(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def num_params(self) -> int:
        return int(self.matrix.shape[1])


@dataclass
class ConstraintSystem:
    """
    Stacked constraint system ``lower <= A x <= upper``.

    Attributes
    ----------
    A : FloatNDArray
        Combined constraint matrix; rows [0, num_inequality) hold the
        inequality block, the remaining rows hold the equality block.
    lower : FloatNDArray
        Lower bound of every row.
    upper : FloatNDArray
        Upper bound of every row.
    num_inequality : int
        Number of inequality rows.
    num_equality : int
        Number of equality rows.
    equality_tolerance : float
        Half width used to encode the equality rows.
    upper_limit : float
        Sentinel used as upper bound of the inequality rows.
    """

    A: FloatNDArray
    lower: FloatNDArray
    upper: FloatNDArray
    num_inequality: int
    num_equality: int
    equality_tolerance: float = EQUALITY_TOLERANCE
    upper_limit: float = INEQUALITY_UPPER_LIMIT

    @property
    def num_constraints(self) -> int:
        return self.num_inequality + self.num_equality

    @property
    def num_params(self) -> int:
        return int(self.A.shape[1])

    def inequality_rows(self) -> slice:
        """Row slice of the inequality block."""
        return slice(0, self.num_inequality)

    def equality_rows(self) -> slice:
        """Row slice of the equality block."""
        return slice(self.num_inequality, self.num_constraints)


def assemble_constraints(
    inequality: ConstraintBlock,
    equality: ConstraintBlock,
    *,
    equality_tolerance: float = EQUALITY_TOLERANCE,
    upper_limit: float = INEQUALITY_UPPER_LIMIT,
) -> ConstraintSystem:
    """
    Stack inequality and equality blocks into one bounded constraint system.

    Parameters
    ----------
    inequality : ConstraintBlock
        Rows of the form ``G x >= g``.
    equality : ConstraintBlock
        Rows of the form ``E x = e``.
    equality_tolerance : float, optional
        Half width of the interval used for equality rows.
        Default: EQUALITY_TOLERANCE.
    upper_limit : float, optional
        Upper bound given to the inequality rows. Default: INEQUALITY_UPPER_LIMIT.

    Returns
    -------
    ConstraintSystem
        The stacked system with inequality rows first.

    Raises
    ------
    EmptyConstraintsError
        If both blocks are empty.
    DimensionMismatchError
        If the blocks disagree on the number of parameters.
    ValueError
        If the tolerance is negative.
    """
    if equality_tolerance < 0:
        raise ValueError("equality_tolerance must be non-negative.")

    num_ineq = inequality.num_rows
    num_eq = equality.num_rows
    if num_ineq + num_eq == 0:
        raise EmptyConstraintsError("No constraint rows supplied.")

    if num_ineq > 0 and num_eq > 0 and inequality.num_params != equality.num_params:
        raise DimensionMismatchError(
            f"Inequality block has {inequality.num_params} columns but equality "
            f"block has {equality.num_params}."
        )
    num_params = inequality.num_params if num_ineq > 0 else equality.num_params

    A = np.zeros((num_ineq + num_eq, num_params), dtype=float)
    if num_ineq > 0:
        A[:num_ineq, :] = inequality.matrix
    if num_eq > 0:
        A[num_ineq:, :] = equality.matrix

    ineq_bound = inequality.boundary[:, 0]
    eq_target = equality.boundary[:, 0]
    lower = np.concatenate([ineq_bound, eq_target - equality_tolerance])
    upper = np.concatenate(
        [np.full(num_ineq, upper_limit, dtype=float), eq_target + equality_tolerance]
    )
    logger.debug("A: %d, %d (%d inequality, %d equality rows)",
                 A.shape[0], A.shape[1], num_ineq, num_eq)

    return ConstraintSystem(
        A=A,
        lower=lower,
        upper=upper,
        num_inequality=num_ineq,
        num_equality=num_eq,
        equality_tolerance=equality_tolerance,
        upper_limit=upper_limit,
    )
