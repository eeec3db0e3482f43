"""Unit tests for QP assembly and solver settings."""

import numpy as np
import pytest
import scipy.sparse as sp

from qpspline.cvxopt import (
    ConstraintBlock,
    ConstraintSystem,
    DimensionMismatchError,
    EmptyConstraintsError,
    EmptyProblemError,
    SolverConfig,
    assemble_constraints,
    build_qp_problem,
)


@pytest.fixture
def constraints():
    ineq = ConstraintBlock(np.array([[1.0, 0.0]]), np.array([[1.0]]))
    eq = ConstraintBlock(np.array([[0.0, 1.0]]), np.array([[3.0]]))
    return assemble_constraints(ineq, eq)


def test_build_dimensions(constraints):
    P = np.array([[2.0, 0.5], [0.5, 2.0]])
    q = np.array([[1.0], [-1.0]])
    problem = build_qp_problem(P, q, constraints)
    assert problem.n == 2
    assert problem.m == 2
    assert np.array_equal(problem.P.todense(), P)
    assert np.array_equal(problem.A.todense(), constraints.A)
    assert problem.q.tolist() == [1.0, -1.0]
    assert np.array_equal(problem.l, constraints.lower)
    assert np.array_equal(problem.u, constraints.upper)


def test_build_copies_inputs(constraints):
    q = np.array([1.0, 2.0])
    problem = build_qp_problem(np.eye(2), q, constraints)
    q[0] = 10.0
    constraints.lower[0] = -5.0
    assert problem.q[0] == 1.0
    assert problem.l[0] == 1.0


def test_osqp_data_upper_triangle(constraints):
    P = np.array([[2.0, 0.5], [0.5, 2.0]])
    data = build_qp_problem(P, np.zeros(2), constraints).osqp_data()
    assert sp.issparse(data["P"]) and data["P"].format == "csc"
    assert np.array_equal(data["P"].toarray(), np.triu(P))
    assert data["A"].format == "csc"
    assert np.array_equal(data["A"].toarray(), constraints.A)
    assert data["l"].shape == (2,) and data["u"].shape == (2,)


def test_empty_kernel(constraints):
    with pytest.raises(EmptyProblemError):
        build_qp_problem(np.zeros((0, 0)), np.zeros((0, 1)), constraints)


def test_empty_constraints():
    empty = ConstraintSystem(
        A=np.zeros((0, 2)), lower=np.zeros(0), upper=np.zeros(0),
        num_inequality=0, num_equality=0,
    )
    with pytest.raises(EmptyConstraintsError):
        build_qp_problem(np.eye(2), np.zeros(2), empty)


def test_dimension_mismatches(constraints):
    with pytest.raises(DimensionMismatchError):
        build_qp_problem(np.ones((2, 3)), np.zeros(2), constraints)
    with pytest.raises(DimensionMismatchError):
        build_qp_problem(np.eye(2), np.zeros(3), constraints)
    with pytest.raises(DimensionMismatchError):
        build_qp_problem(np.eye(3), np.zeros(3), constraints)


def test_solver_config_defaults():
    config = SolverConfig()
    assert config.alpha == 1.0
    assert config.eps_abs == 1e-3
    assert config.eps_rel == 1e-3
    assert config.max_iter == 5000
    assert config.warm_start is True
    assert config.verbose is False
    assert config.polish is None

    settings = config.to_osqp_settings()
    assert settings["alpha"] == 1.0
    assert settings["max_iter"] == 5000
    assert settings["verbose"] is False
    assert settings["warm_start"] is True
    assert "polish" not in settings
    assert "warm_starting" not in settings and "polishing" not in settings


def test_solver_config_from_params():
    config = SolverConfig.from_params({"eps_abs": 1e-6, "polish": True})
    assert config.eps_abs == 1e-6
    assert config.eps_rel == 1e-3
    settings = config.to_osqp_settings()
    assert settings["polish"] is True
    assert SolverConfig.from_params(None) == SolverConfig()
    assert config.replace(max_iter=10).max_iter == 10
    assert config.as_dict()["eps_abs"] == 1e-6

    with pytest.raises(ValueError):
        SolverConfig.from_params({"rho": 0.1})


@pytest.mark.parametrize(
    "params",
    [{"alpha": 0.0}, {"alpha": 2.0}, {"eps_abs": -1.0}, {"eps_rel": -1e-3}, {"max_iter": 0}],
)
def test_solver_config_validation(params):
    with pytest.raises(ValueError):
        SolverConfig(**params)
