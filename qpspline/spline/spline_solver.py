"""
OSQP backed spline fitting.

The fit is posed as

    minimize_x   1/2 x^T P x + q^T x
    subject to   G x >= g,   E x = e

where P, q come from the spline kernel and (G, g), (E, e) from the constraint
source. The solved x holds the stacked coefficients of all spline segments and
is written back to the spline as one (n, 1) column.
"""

__all__ = ["OsqpSpline1dSolver", "apply_solution"]

import logging
from typing import Optional

import numpy as np

from qpspline.cvxopt import (
    ConstraintBlock,
    EmptyConstraintsError,
    EmptyProblemError,
    OsqpQPSolver,
    SolveResult,
    SolverConfig,
    assemble_constraints,
    build_qp_problem,
)

from ._base_spline_solver import (
    ConstraintBlockSource,
    ConstraintSource,
    KernelSource,
    Spline1dSolver,
    SplineTarget,
)

logger = logging.getLogger(__name__)


def apply_solution(result: SolveResult, spline: SplineTarget, order: int) -> bool:
    """
    Push a solved parameter vector into the spline segments.

    Only call this with a successful result; the spline decides whether the
    parameters are usable and its answer is returned as is.

    Parameters
    ----------
    result : SolveResult
        Successful solve result holding x.
    spline : SplineTarget
        Spline receiving the parameters.
    order : int
        Spline order forwarded to the spline.

    Returns
    -------
    bool
        Return value of ``spline.set_spline_segments``.
    """
    return bool(spline.set_spline_segments(result.params_column(), order))


def _read_block(source: ConstraintBlockSource) -> ConstraintBlock:
    return ConstraintBlock(source.constraint_matrix(), source.constraint_boundary())


class OsqpSpline1dSolver(Spline1dSolver):
    """
    Spline solver using OSQP as QP backend.

    Parameters
    ----------
    kernel : KernelSource
        Source of the quadratic cost.
    constraint : ConstraintSource
        Source of the constraint blocks.
    spline : SplineTarget
        Spline receiving the solution.
    order : int, optional
        Spline order. Default: spline.spline_order
    config : SolverConfig, optional
        OSQP settings. Default: SolverConfig()

    Attributes
    ----------
    qp_solver : OsqpQPSolver
        Orchestrator owning the OSQP workspace.
    last_result : SolveResult | None
        Result of the last solve that reached the solver.
    """

    def __init__(
        self,
        kernel: KernelSource,
        constraint: ConstraintSource,
        spline: SplineTarget,
        order: Optional[int] = None,
        config: Optional[SolverConfig] = None,
    ) -> None:
        super().__init__(kernel, constraint, spline, order)
        self.qp_solver = OsqpQPSolver(config)
        self.last_result: Optional[SolveResult] = None

    @property
    def config(self) -> SolverConfig:
        return self.qp_solver.config

    @property
    def last_num_params(self) -> int:
        return self.qp_solver.last_num_params

    @property
    def last_num_constraints(self) -> int:
        return self.qp_solver.last_num_constraints

    def solve(self) -> bool:
        """
        Fit the spline.

        Returns
        -------
        bool
            True if OSQP solved the problem and the spline accepted the
            parameters. False for empty kernels or constraints, rejected
            setups, and non converged solves; the spline is left untouched
            in those cases.

        Raises
        ------
        DimensionMismatchError
            If kernel and constraints disagree on the number of parameters.
        """
        kernel_matrix = np.asarray(self.kernel.kernel_matrix(), dtype=float)
        if kernel_matrix.ndim == 2 and kernel_matrix.shape[0] == 0:
            logger.warning("Spline QP not built: kernel matrix is empty")
            return False

        try:
            constraints = assemble_constraints(
                _read_block(self.constraint.inequality_constraint()),
                _read_block(self.constraint.equality_constraint()),
            )
            problem = build_qp_problem(kernel_matrix, self.kernel.offset(), constraints)
        except (EmptyProblemError, EmptyConstraintsError) as e:
            logger.warning("Spline QP not built: %s", e)
            return False

        result = self.qp_solver.solve(problem)
        self.last_result = result
        if not result.success:
            return False
        return apply_solution(result, self.spline, self.order)

    def reset_solver(self, config: Optional[SolverConfig] = None) -> None:
        """Release the OSQP workspace and start over with config."""
        self.qp_solver.reset(config if config is not None else self.config)
        self.last_result = None

    def close(self) -> None:
        self.qp_solver.close()

    def __enter__(self) -> "OsqpSpline1dSolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
