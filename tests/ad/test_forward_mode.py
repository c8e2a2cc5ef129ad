"""Collection of unit tests for the automatic differentiation forward mode. For the class
AdArray, tests are being conducted on the public attributes self.val and self.jac, the
joint initiation of multiple dependent variables, and the arithmetic operations
implemented in AdArray.

"""
from __future__ import annotations

import numpy as np
import pytest
import scipy.sparse as sps

from porewell.ad.forward_mode import AdArray, apply, initAdArrays


def test_quadratic_function():
    x, y = initAdArrays([np.array([1]), np.array([2])])
    z = 1 * x + 2 * y + 3 * x * y + 4 * x * x + 5 * y * y
    val = 35
    assert z.val == val and np.all(z.jac.toarray() == [15, 25])


def test_vector_quadratic():
    x, y = initAdArrays([np.array([1, 1]), np.array([2, 3])])
    z = 1 * x + 2 * y + 3 * x * y + 4 * x * x + 5 * y * y
    val = np.array([35, 65])
    J = np.array([[15, 0, 25, 0], [0, 18, 0, 35]])

    assert np.all(z.val == val) and np.sum(z.jac != J) == 0


def test_mapping_m_to_n():
    x, y = initAdArrays([np.array([1, 1, 3]), np.array([2, 3])])
    A = sps.csc_matrix(np.array([[1, 2, 1], [2, 3, 4]]))

    z = y * (A @ x)
    val = np.array([12, 51])
    J = np.array([[2, 4, 2, 6, 0], [6, 9, 12, 0, 17]])

    assert np.all(z.val == val) and np.sum(z.jac != J) == 0


def test_apply_matches_matmul():
    x = initAdArrays(np.array([1.0, 2.0, 3.0]))
    A = sps.csr_matrix(np.array([[1, -1, 0], [0, 2, 1]]))
    z1 = A @ x
    z2 = apply(A, x)
    assert np.allclose(z1.val, z2.val)
    assert np.allclose(z1.jac.toarray(), A.toarray())
    assert np.allclose(z2.jac.toarray(), A.toarray())
    # Ordinary arrays are passed through
    assert np.allclose(apply(A, x.val), A @ x.val)


def test_dense_matrix_from_left():
    x = initAdArrays(np.array([1.0, 2.0]))
    A = np.array([[2.0, 0.0], [1.0, 1.0]])
    z = A @ x
    assert isinstance(z, AdArray)
    assert np.allclose(z.val, [2, 3])
    assert np.allclose(z.jac.toarray(), A)


def test_add_two_ad_variables_init():
    a, b = initAdArrays([np.array([1]), np.array([-10])])
    c = a + b
    assert c.val == -9 and np.all(c.jac.toarray() == [1, 1])
    assert a.val == 1 and np.all(a.jac.toarray() == [1, 0])
    assert b.val == -10 and np.all(b.jac.toarray() == [0, 1])


def test_sub_var_init_with_var_init():
    a, b = initAdArrays([np.array([3]), np.array([2])])
    c = b - a
    assert np.allclose(c.val, -1) and np.all(c.jac.toarray() == [-1, 1])


def test_rsub_scalar():
    a = initAdArrays(np.array([3.0, 4.0]))
    c = 10 - a
    assert np.allclose(c.val, [7, 6])
    assert np.allclose(c.jac.toarray(), -np.eye(2))


def test_mul_ad_var_init():
    a, b = initAdArrays([np.array([3]), np.array([2])])
    c = a * b
    assert a.val == 3 and np.all(a.jac.toarray() == [1, 0])
    assert b.val == 2 and np.all(b.jac.toarray() == [0, 1])
    assert c.val == 6 and np.all(c.jac.toarray() == [2, 3])


def test_mul_scal_ad_var_init():
    a, b = initAdArrays([np.array([3]), np.array([2])])
    d = 3.0
    c = d * a
    assert c.val == 9 and np.all(c.jac.toarray() == [3, 0])
    assert a.val == 3 and np.all(a.jac.toarray() == [1, 0])


def test_numpy_array_on_the_left():
    # numpy arrays defer to the reflected operators of AdArray
    a = initAdArrays(np.array([1.0, 2.0]))
    w = np.array([3.0, 4.0])
    for c in (w * a, w + a, w - a):
        assert isinstance(c, AdArray)
    c = w * a
    assert np.allclose(c.val, [3, 8])
    assert np.allclose(c.jac.toarray(), np.diag(w))
    c = w - a
    assert np.allclose(c.val, [2, 2])
    assert np.allclose(c.jac.toarray(), -np.eye(2))


def test_mul_sparse_matrix_raises():
    a = initAdArrays(np.array([1.0, 2.0]))
    with pytest.raises(TypeError):
        a * sps.identity(2)


def test_div_ad_var():
    a, b = initAdArrays([np.array([4.0]), np.array([2.0])])
    c = a / b
    assert np.allclose(c.val, 2)
    # d(a/b)/da = 1/b, d(a/b)/db = -a/b^2
    assert np.allclose(c.jac.toarray(), [[0.5, -1.0]])


def test_rdiv_scalar():
    a = initAdArrays(np.array([2.0, 4.0]))
    c = 1 / a
    assert np.allclose(c.val, [0.5, 0.25])
    assert np.allclose(c.jac.toarray(), np.diag([-0.25, -1 / 16]))


def test_power_scalar_exponent():
    a = initAdArrays(np.array([2.0, 3.0]))
    c = a**3
    assert np.allclose(c.val, [8, 27])
    assert np.allclose(c.jac.toarray(), np.diag([12, 27]))


def test_power_ad_exponent():
    a, b = initAdArrays([np.array([2.0]), np.array([3.0])])
    c = a**b
    assert np.allclose(c.val, 8)
    assert np.allclose(c.jac.toarray(), [[12, 8 * np.log(2)]])


def test_rpow():
    a = initAdArrays(np.array([1.0, 2.0]))
    c = 2**a
    assert np.allclose(c.val, [2, 4])
    assert np.allclose(c.jac.toarray(), np.diag([2, 4]) * np.log(2))


def test_neg():
    a = initAdArrays(np.array([1.0, -2.0]))
    c = -a
    assert np.allclose(c.val, [-1, 2])
    assert np.allclose(c.jac.toarray(), -np.eye(2))


def test_getitem_gathers_rows():
    x, y = initAdArrays([np.array([1.0, 2.0, 3.0]), np.array([4.0])])
    z = x * x
    sub = z[np.array([2, 0, 2])]
    assert np.allclose(sub.val, [9, 1, 9])
    assert np.allclose(
        sub.jac.toarray(), [[0, 0, 6, 0], [2, 0, 0, 0], [0, 0, 6, 0]]
    )
    single = z[1]
    assert single.size == 1
    assert np.allclose(single.jac.toarray(), [[0, 4, 0, 0]])


def test_sum():
    x = initAdArrays(np.array([1.0, 2.0, 3.0]))
    s = (x * x).sum()
    assert s.size == 1
    assert np.allclose(s.val, 14)
    assert np.allclose(s.jac.toarray(), [[2, 4, 6]])


def test_broadcast_size_one():
    x, y = initAdArrays([np.array([1.0, 2.0]), np.array([3.0])])
    z = x * y
    assert np.allclose(z.val, [3, 6])
    assert np.allclose(z.jac.toarray(), [[3, 0, 1], [0, 3, 2]])


def test_mismatching_unknowns_raises():
    x = initAdArrays(np.array([1.0, 2.0]))
    y = initAdArrays(np.array([1.0, 2.0, 3.0]))
    with pytest.raises(ValueError):
        x + y[np.array([0, 1])]


def test_copy_is_independent():
    a = initAdArrays(np.array([1.0, 2.0]))
    b = a.copy()
    b.val[0] = 10
    b.jac[0, 0] = 5
    assert a.val[0] == 1 and a.jac[0, 0] == 1


def test_diagonal_scaling_of_jacobian():
    a, b = initAdArrays([np.array([1.0, 2.0]), np.array([3.0])])
    c = a * b
    J = c.jac.toarray()
    d = np.array([2.0, -1.0, 4.0])
    assert np.allclose(c.jac_mul_diagvec(d).toarray(), J @ np.diag(d))
    assert np.allclose(c.diagvec_mul_jac([3.0, 5.0]).toarray(), np.diag([3, 5]) @ J)
    assert np.allclose(c.jac_mul_diagvec(2.0).toarray(), 2 * J)


def test_full_jac_is_csr():
    a, b = initAdArrays([np.array([1.0]), np.array([2.0])])
    assert sps.isspmatrix_csr((a * b).full_jac())


def test_jacobian_rows_must_match_values():
    with pytest.raises(ValueError):
        AdArray(np.array([1.0, 2.0]), sps.identity(3))
