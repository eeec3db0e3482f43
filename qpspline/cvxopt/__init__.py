from .constraints import (
    EQUALITY_TOLERANCE,
    INEQUALITY_UPPER_LIMIT,
    ConstraintBlock,
    ConstraintSystem,
    assemble_constraints,
)
from .exceptions import (
    DimensionMismatchError,
    EmptyConstraintsError,
    EmptyProblemError,
    QPSplineError,
    SetupFailureError,
)
from .problem import QPProblem, build_qp_problem
from .settings import SolverConfig
from .solver import OsqpQPSolver, QPWorkspace, SolveResult, SolverState

__all__ = ['ConstraintBlock', 'ConstraintSystem', 'assemble_constraints',
           'EQUALITY_TOLERANCE', 'INEQUALITY_UPPER_LIMIT',
           'QPProblem', 'build_qp_problem', 'SolverConfig',
           'OsqpQPSolver', 'QPWorkspace', 'SolveResult', 'SolverState',
           'QPSplineError', 'EmptyProblemError', 'EmptyConstraintsError',
           'DimensionMismatchError', 'SetupFailureError']
