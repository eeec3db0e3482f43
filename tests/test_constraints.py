"""Unit tests for stacking spline constraints into two sided bounds."""

import numpy as np
import pytest

from qpspline.cvxopt import (
    EQUALITY_TOLERANCE,
    INEQUALITY_UPPER_LIMIT,
    ConstraintBlock,
    DimensionMismatchError,
    EmptyConstraintsError,
    assemble_constraints,
)

np.random.seed(1)


@pytest.fixture
def blocks():
    G = np.random.randn(3, 4)
    g = np.random.randn(3, 1)
    E = np.random.randn(2, 4)
    e = np.random.randn(2, 1)
    return {
        "inequality": ConstraintBlock(G, g),
        "equality": ConstraintBlock(E, e),
        "G": G, "g": g, "E": E, "e": e,
    }


def test_stacking_order(blocks):
    system = assemble_constraints(blocks["inequality"], blocks["equality"])
    assert system.A.shape == (5, 4)
    assert np.array_equal(system.A[system.inequality_rows()], blocks["G"])
    assert np.array_equal(system.A[system.equality_rows()], blocks["E"])
    assert system.num_inequality == 3
    assert system.num_equality == 2
    assert system.num_constraints == 5
    assert system.num_params == 4


def test_inequality_bounds(blocks):
    system = assemble_constraints(blocks["inequality"], blocks["equality"])
    rows = system.inequality_rows()
    assert np.array_equal(system.lower[rows], blocks["g"][:, 0])
    assert np.all(system.upper[rows] == INEQUALITY_UPPER_LIMIT)
    assert INEQUALITY_UPPER_LIMIT == 1e9


def test_equality_bounds(blocks):
    system = assemble_constraints(blocks["inequality"], blocks["equality"])
    rows = system.equality_rows()
    target = blocks["e"][:, 0]
    lower, upper = system.lower[rows], system.upper[rows]
    assert np.allclose(upper - lower, 2 * EQUALITY_TOLERANCE, rtol=1e-6, atol=0.0)
    assert np.allclose((upper + lower) / 2, target, rtol=0.0, atol=1e-15)
    assert np.all(lower <= upper)
    assert EQUALITY_TOLERANCE == 1e-9


def test_equality_width_exact_at_zero_target():
    eq = ConstraintBlock(np.eye(2), np.zeros((2, 1)))
    system = assemble_constraints(ConstraintBlock.empty(2), eq)
    assert np.all(system.upper - system.lower == 2 * EQUALITY_TOLERANCE)
    assert np.all((system.upper + system.lower) / 2 == 0.0)


def test_custom_tolerance_and_limit(blocks):
    system = assemble_constraints(
        blocks["inequality"], blocks["equality"], equality_tolerance=0.5, upper_limit=42.0
    )
    assert np.all(system.upper[system.inequality_rows()] == 42.0)
    assert np.allclose(
        system.upper[system.equality_rows()] - system.lower[system.equality_rows()], 1.0
    )
    assert system.equality_tolerance == 0.5
    assert system.upper_limit == 42.0


def test_only_one_block():
    ineq = ConstraintBlock(np.array([[1.0, 0.0]]), np.array([1.0]))
    system = assemble_constraints(ineq, ConstraintBlock.empty())
    assert system.A.shape == (1, 2)
    assert system.lower.tolist() == [1.0]

    eq = ConstraintBlock(np.array([[0.0, 1.0]]), np.array([[3.0]]))
    system = assemble_constraints(ConstraintBlock.empty(), eq)
    assert system.A.shape == (1, 2)
    assert system.num_inequality == 0
    assert system.equality_rows() == slice(0, 1)


def test_empty_blocks_fail():
    with pytest.raises(EmptyConstraintsError):
        assemble_constraints(ConstraintBlock.empty(3), ConstraintBlock.empty(3))


def test_column_mismatch():
    ineq = ConstraintBlock(np.ones((1, 2)), np.ones(1))
    eq = ConstraintBlock(np.ones((1, 3)), np.ones(1))
    with pytest.raises(DimensionMismatchError):
        assemble_constraints(ineq, eq)


def test_boundary_validation():
    with pytest.raises(DimensionMismatchError):
        ConstraintBlock(np.ones((2, 2)), np.ones((3, 1)))
    with pytest.raises(ValueError):
        ConstraintBlock(np.ones((2, 2)), np.ones((2, 2)))
    with pytest.raises(ValueError):
        assemble_constraints(
            ConstraintBlock(np.ones((1, 1)), np.ones(1)),
            ConstraintBlock.empty(1),
            equality_tolerance=-1.0,
        )


def test_equality_inequality_crossover():
    """An equality target closer than 2 * tol below an inequality bound crosses it."""
    bound = 1.0
    target = bound - 3 * EQUALITY_TOLERANCE
    ineq = ConstraintBlock(np.array([[1.0]]), np.array([bound]))
    eq = ConstraintBlock(np.array([[1.0]]), np.array([target]))
    system = assemble_constraints(ineq, eq)
    # the equality interval ends below the inequality bound: empty feasible set
    assert system.upper[1] < system.lower[0]

    target = bound - 0.5 * EQUALITY_TOLERANCE
    eq = ConstraintBlock(np.array([[1.0]]), np.array([target]))
    system = assemble_constraints(ineq, eq)
    assert system.upper[1] >= system.lower[0]
