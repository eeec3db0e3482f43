"""
OSQP solve orchestration.

A :class:`OsqpQPSolver` walks each problem through

    IDLE --setup--> CONFIGURED --invoke--> SOLVED | FAILED --cleanup--> IDLE

and owns at most one :class:`QPWorkspace` at a time. Every workspace that is
set up is released exactly once, before the next setup or when the solver is
closed.
"""

__all__ = ["SolverState", "SolveResult", "QPWorkspace", "OsqpQPSolver"]

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, cast

import numpy as np
import osqp

from qpspline.types import FloatNDArray

from .exceptions import SetupFailureError
from .problem import QPProblem
from .settings import SolverConfig

logger = logging.getLogger(__name__)

SOLVED_STATUS = "solved"

try:
    from osqp.interface import OSQPException
except ImportError:
    # osqp < 1.0 reports bad data as ValueError only
    _SETUP_ERRORS: tuple = (ValueError,)
else:
    _SETUP_ERRORS = (ValueError, OSQPException)


def _solve_kwargs(solver: osqp.OSQP) -> Dict[str, Any]:
    """Keep osqp >= 1.0 from raising on infeasible or unconverged problems."""
    if "raise_error" in inspect.signature(solver.solve).parameters:
        return {"raise_error": False}
    return {}


class SolverState(Enum):
    IDLE = "idle"
    CONFIGURED = "configured"
    SOLVED = "solved"
    FAILED = "failed"


@dataclass
class SolveResult:
    """
    Outcome of one solve.

    Attributes
    ----------
    success : bool
        True only if OSQP reported the problem as solved.
    status : str
        OSQP status string, or "setup failed".
    x : FloatNDArray | None
        Primal solution of length num_params. None unless success.
    y : FloatNDArray | None
        Dual solution of length num_constraints. None unless success.
    num_params : int
        Number of parameters of the solved problem.
    num_constraints : int
        Number of constraint rows of the solved problem.
    iterations : int
        ADMM iterations run (0 if the solver never ran).
    objective : float
        Objective value reported by OSQP (nan if unavailable).
    """

    success: bool
    status: str
    x: Optional[FloatNDArray] = None
    y: Optional[FloatNDArray] = None
    num_params: int = 0
    num_constraints: int = 0
    iterations: int = 0
    objective: float = float("nan")

    def params_column(self) -> FloatNDArray:
        """Return x as an (n, 1) parameter column."""
        if self.x is None:
            raise ValueError(f"No solution available (status: {self.status}).")
        return cast(FloatNDArray, self.x.reshape(-1, 1))


class QPWorkspace:
    """
    Scoped owner of one OSQP instance.

    The workspace is armed by :meth:`setup` and disarmed by :meth:`release`.
    Releasing twice is a no-op; setting up an armed workspace is an error.

    Attributes
    ----------
    live_count : int
        Class wide number of armed workspaces.
    """

    live_count: int = 0

    def __init__(self) -> None:
        self._solver: Optional[osqp.OSQP] = None
        self._armed = False

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def solver(self) -> osqp.OSQP:
        if not self._armed or self._solver is None:
            raise RuntimeError("Workspace is not set up.")
        return self._solver

    def setup(self, problem: QPProblem, config: SolverConfig) -> None:
        """Bind problem and settings to a fresh OSQP instance."""
        if self._armed:
            raise RuntimeError("Workspace already set up; release it first.")
        solver = osqp.OSQP()
        try:
            solver.setup(**problem.osqp_data(), **config.to_osqp_settings())
        except _SETUP_ERRORS as e:
            raise SetupFailureError(f"OSQP setup failed: {e}") from e
        self._solver = solver
        self._armed = True
        QPWorkspace.live_count += 1

    def release(self) -> None:
        if not self._armed:
            return
        self._solver = None
        self._armed = False
        QPWorkspace.live_count -= 1

    def __enter__(self) -> "QPWorkspace":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __del__(self) -> None:
        if getattr(self, "_armed", False):
            self.release()


class OsqpQPSolver:
    """
    Solve orchestrator for :class:`QPProblem` instances.

    Parameters
    ----------
    config : SolverConfig, optional
        Solver settings reused for every solve. Default: SolverConfig().

    Attributes
    ----------
    config : SolverConfig
        Current settings.
    state : SolverState
        Where the solver stands in the setup/invoke/cleanup cycle.
    last_num_params : int
        Number of parameters of the last problem that was set up.
    last_num_constraints : int
        Number of constraint rows of the last problem that was set up.

    Notes
    -----
    Not thread safe. Use one solver per fitting task or serialize access.
    """

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self.config = config if config is not None else SolverConfig()
        self.state = SolverState.IDLE
        self.last_num_params = 0
        self.last_num_constraints = 0
        self._workspace: Optional[QPWorkspace] = None
        self._last_x: Optional[FloatNDArray] = None
        self._last_y: Optional[FloatNDArray] = None

    def setup(self, problem: QPProblem) -> None:
        """
        Create a fresh workspace for problem, cleaning up any previous one.

        Raises
        ------
        SetupFailureError
            If OSQP rejects the problem.
        """
        self.cleanup()
        workspace = QPWorkspace()
        try:
            workspace.setup(problem, self.config)
        except SetupFailureError:
            self.state = SolverState.FAILED
            raise
        self._workspace = workspace
        self.state = SolverState.CONFIGURED
        logger.debug("OSQP set up with n=%d, m=%d", problem.n, problem.m)

        if (
            self.config.warm_start
            and self._last_x is not None
            and problem.n == self.last_num_params
            and problem.m == self.last_num_constraints
        ):
            workspace.solver.warm_start(x=self._last_x, y=self._last_y)
            logger.debug("Warm starting from previous solution")
        self.last_num_params = problem.n
        self.last_num_constraints = problem.m

    def invoke(self) -> SolveResult:
        """Run OSQP on the configured problem."""
        if self.state is not SolverState.CONFIGURED or self._workspace is None:
            raise RuntimeError("Solver must be set up before it is invoked.")
        solver = self._workspace.solver
        res = solver.solve(**_solve_kwargs(solver))
        status = str(res.info.status)
        iterations = int(res.info.iter)
        objective = float(res.info.obj_val)

        if status != SOLVED_STATUS:
            logger.warning("OSQP did not solve the problem: %s", status)
            self.state = SolverState.FAILED
            return SolveResult(
                success=False,
                status=status,
                num_params=self.last_num_params,
                num_constraints=self.last_num_constraints,
                iterations=iterations,
                objective=objective,
            )

        x = np.array(res.x, dtype=float)
        y = np.array(res.y, dtype=float)
        self._last_x, self._last_y = x, y
        self.state = SolverState.SOLVED
        return SolveResult(
            success=True,
            status=status,
            x=x.copy(),
            y=y.copy(),
            num_params=self.last_num_params,
            num_constraints=self.last_num_constraints,
            iterations=iterations,
            objective=objective,
        )

    def cleanup(self) -> None:
        """Release the current workspace, if any."""
        if self._workspace is not None:
            self._workspace.release()
            self._workspace = None
            logger.debug("OSQP workspace released")
        self.state = SolverState.IDLE

    def solve(self, problem: QPProblem) -> SolveResult:
        """
        Set up, run and clean up OSQP for one problem.

        Parameters
        ----------
        problem : QPProblem
            The problem to solve.

        Returns
        -------
        SolveResult
            success is False if setup was rejected or OSQP did not converge;
            no solution vector is attached in that case.
        """
        try:
            try:
                self.setup(problem)
            except SetupFailureError as e:
                logger.warning("%s", e)
                return SolveResult(
                    success=False,
                    status="setup failed",
                    num_params=problem.n,
                    num_constraints=problem.m,
                )
            return self.invoke()
        finally:
            self.cleanup()

    def reset(self, config: Optional[SolverConfig] = None) -> None:
        """Clean up and start over with config, forgetting warm start data."""
        self.cleanup()
        self.config = config if config is not None else SolverConfig()
        self._last_x = None
        self._last_y = None
        self.last_num_params = 0
        self.last_num_constraints = 0

    def close(self) -> None:
        self.cleanup()

    def __enter__(self) -> "OsqpQPSolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_workspace", None) is not None:
            self.cleanup()
