"""
QP problem assembly.

The problem handed to OSQP is

    minimize_x   1/2 x^T P x + q^T x
    subject to   l <= A x <= u

with P taken from the spline kernel, q from the kernel offset, and A, l, u
from a stacked :class:`ConstraintSystem`.
"""

__all__ = ["QPProblem", "build_qp_problem"]

import logging
from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike

from qpspline.types import FloatNDArray
from qpspline.util import CSCMatrix, dense_to_csc

from .constraints import ConstraintSystem
from .exceptions import DimensionMismatchError, EmptyConstraintsError, EmptyProblemError

logger = logging.getLogger(__name__)


@dataclass
class QPProblem:
    """
    A fully populated quadratic program.

    Attributes
    ----------
    n : int
        Number of parameters.
    m : int
        Number of constraint rows.
    P : CSCMatrix
        Quadratic cost, n x n.
    q : FloatNDArray
        Linear cost, length n.
    A : CSCMatrix
        Constraint matrix, m x n.
    l : FloatNDArray
        Lower bounds, length m.
    u : FloatNDArray
        Upper bounds, length m.
    """

    n: int
    m: int
    P: CSCMatrix
    q: FloatNDArray
    A: CSCMatrix
    l: FloatNDArray
    u: FloatNDArray

    def __post_init__(self) -> None:
        if self.P.shape != (self.n, self.n):
            raise DimensionMismatchError(
                f"P has shape {self.P.shape}, expected {(self.n, self.n)}."
            )
        if self.A.shape != (self.m, self.n):
            raise DimensionMismatchError(
                f"A has shape {self.A.shape}, expected {(self.m, self.n)}."
            )
        if self.q.shape != (self.n,):
            raise DimensionMismatchError(f"q has length {self.q.size}, expected {self.n}.")
        if self.l.shape != (self.m,) or self.u.shape != (self.m,):
            raise DimensionMismatchError(f"Bounds must have length {self.m}.")
        if np.any(self.l > self.u):
            raise ValueError("Lower bounds must not exceed upper bounds.")

    def osqp_data(self) -> Dict[str, Any]:
        """
        Return the problem in the layout ``osqp.OSQP.setup`` expects.

        OSQP only reads the upper triangle of P, so only that part is passed.
        """
        P = sp.csc_matrix(self.P.to_scipy())
        return {
            "P": sp.triu(P, format="csc"),
            "q": np.array(self.q, dtype=float),
            "A": sp.csc_matrix(self.A.to_scipy()),
            "l": np.array(self.l, dtype=float),
            "u": np.array(self.u, dtype=float),
        }


def build_qp_problem(
    kernel_matrix: ArrayLike,
    offset: ArrayLike,
    constraints: ConstraintSystem,
) -> QPProblem:
    """
    Assemble the QP from the cost terms and a stacked constraint system.

    Parameters
    ----------
    kernel_matrix : ArrayLike
        Quadratic cost P, n x n.
    offset : ArrayLike
        Linear cost q, either length n or an (n, 1) column.
    constraints : ConstraintSystem
        Stacked constraint rows and bounds.

    Returns
    -------
    QPProblem
        The problem with P and A in CSC form and q, l, u copied verbatim.

    Raises
    ------
    EmptyProblemError
        If the kernel matrix has no rows.
    EmptyConstraintsError
        If the constraint system has no rows.
    DimensionMismatchError
        If the kernel is not square or disagrees with the offset or the
        constraint matrix on the number of parameters.
    """
    P_dense = np.asarray(kernel_matrix, dtype=float)
    if P_dense.ndim != 2:
        raise DimensionMismatchError("Kernel matrix must be 2-D.")
    logger.debug("P: %d, %d", P_dense.shape[0], P_dense.shape[1])
    if P_dense.shape[0] == 0:
        raise EmptyProblemError("Kernel matrix has no rows; nothing to solve for.")
    if P_dense.shape[0] != P_dense.shape[1]:
        raise DimensionMismatchError(f"Kernel matrix must be square, got {P_dense.shape}.")
    n = P_dense.shape[0]

    q = np.asarray(offset, dtype=float)
    if q.ndim == 2 and q.shape[1] == 1:
        q = q[:, 0]
    if q.shape != (n,):
        raise DimensionMismatchError(f"Offset has shape {q.shape}, expected ({n},) or ({n}, 1).")

    m = constraints.num_constraints
    if m == 0:
        raise EmptyConstraintsError("Constraint system has no rows.")
    if constraints.num_params != n:
        raise DimensionMismatchError(
            f"Constraint matrix has {constraints.num_params} columns, kernel has {n}."
        )

    return QPProblem(
        n=n,
        m=m,
        P=dense_to_csc(P_dense),
        q=q.copy(),
        A=dense_to_csc(constraints.A),
        l=np.array(constraints.lower, dtype=float),
        u=np.array(constraints.upper, dtype=float),
    )
