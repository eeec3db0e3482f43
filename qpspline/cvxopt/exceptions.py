"""Errors raised while building and solving spline QPs."""

__all__ = [
    "QPSplineError",
    "EmptyProblemError",
    "EmptyConstraintsError",
    "DimensionMismatchError",
    "SetupFailureError",
]


class QPSplineError(Exception):
    """Base class for qpspline errors."""


class EmptyProblemError(QPSplineError, ValueError):
    """The cost matrix has no rows, so there are no parameters to solve for."""


class EmptyConstraintsError(QPSplineError, ValueError):
    """No constraint rows were supplied."""


class DimensionMismatchError(QPSplineError, ValueError):
    """Cost and constraint structures disagree on their sizes."""


class SetupFailureError(QPSplineError, RuntimeError):
    """OSQP rejected the assembled problem during setup."""
