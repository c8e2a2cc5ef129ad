"""Tests of the sparse direct solver and its detection of singular systems."""
import numpy as np
import pytest
import scipy.sparse as sps

import porewell as pw


def test_solve():
    A = sps.csr_matrix(np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]]))
    b = np.array([1.0, 2.0, 3.0])
    x = pw.solve_linear_system(A, b)
    assert np.allclose(A @ x, b)


def test_singular_matrix():
    A = sps.csr_matrix(np.array([[1.0, 2.0], [2.0, 4.0]]))
    with pytest.raises(pw.SingularJacobianError):
        pw.solve_linear_system(A, np.ones(2))


def test_zero_column():
    A = sps.csr_matrix(np.array([[1.0, 0.0], [1.0, 0.0]]))
    with pytest.raises(pw.ConvergenceError):
        pw.solve_linear_system(A, np.ones(2))


def test_pivot_ratio():
    A = sps.diags([1.0, 1e-14]).tocsr()
    b = np.ones(2)
    # Accepted without the check
    x = pw.solve_linear_system(A, b)
    assert np.allclose(x, [1, 1e14])
    with pytest.raises(pw.SingularJacobianError):
        pw.solve_linear_system(A, b, min_pivot_ratio=1e-10)


def test_shape_mismatch():
    with pytest.raises(ValueError):
        pw.solve_linear_system(sps.identity(3), np.ones(2))


def test_empty_system():
    x = pw.solve_linear_system(sps.csr_matrix((0, 0)), np.zeros(0))
    assert x.size == 0
