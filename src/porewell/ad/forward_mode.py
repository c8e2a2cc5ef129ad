"""Forward mode automatic differentiation on sparse Jacobians.

An :class:`AdArray` carries a value vector together with the Jacobian of that vector
with respect to the full set of unknowns of a problem. The unknowns are declared in
blocks (e.g. cell pressures, bottom-hole pressures, surface rates) by
:func:`initAdArrays`; the columns of every Jacobian are ordered as the blocks were
declared. Each arithmetic operation applies the corresponding differentiation rule to
the Jacobian, so derivatives are exact up to floating point round-off.

Example:

    >>> p, q = initAdArrays([np.array([1.0, 2.0]), np.array([3.0])])
    >>> r = p * p + q
    >>> r.val
    array([4., 7.])
    >>> r.jac.toarray()
    array([[2., 0., 1.],
           [0., 4., 1.]])

"""

from __future__ import annotations

from typing import Union

import numpy as np
import scipy.sparse as sps

__all__ = ["initAdArrays", "AdArray", "apply"]


def initAdArrays(variables: list[np.ndarray]) -> list[AdArray]:
    """Initialize a set of AD arrays, one per block of unknowns.

    The Jacobian of each returned array is the identity with respect to its own block
    and zero with respect to all other blocks.

    Parameters:
        variables: Values of the unknowns, one array per block. A single array (not in
            a list) gives a single AD array with an identity Jacobian.

    Returns:
        One AD array per block, in the order of ``variables``.

    """
    if not isinstance(variables, list):
        val = np.atleast_1d(np.asarray(variables, dtype=float))
        return AdArray(val, sps.identity(val.size, format="csr"))

    vals = [np.atleast_1d(np.asarray(v, dtype=float)) for v in variables]
    num_val = [v.size for v in vals]
    num_dofs = sum(num_val)
    offsets = np.cumsum([0] + num_val)

    ad_arrays = []
    for i, val in enumerate(vals):
        n = num_val[i]
        rows = np.arange(n)
        # Identity on the columns of block i, zero elsewhere
        jac = sps.csr_matrix(
            (np.ones(n), (rows, offsets[i] + rows)), shape=(n, num_dofs)
        )
        ad_arrays.append(AdArray(val, jac))

    return ad_arrays


class AdArray:
    """A value vector with its Jacobian.

    Parameters:
        val: ``shape=(n,)`` Values.
        jac: ``shape=(n, num_dofs)`` Jacobian of the values with respect to all
            unknowns.

    """

    # Make numpy arrays return NotImplemented for binary operators with AdArrays, so
    # that the reflected operators of this class are used. Without this, an
    # expression like ``np.ones(3) * x`` would be evaluated elementwise by numpy.
    __array_ufunc__ = None

    def __init__(self, val: np.ndarray, jac: sps.spmatrix) -> None:
        self.val: np.ndarray = np.atleast_1d(np.asarray(val, dtype=float))
        self.jac: sps.csr_matrix = sps.csr_matrix(jac)
        if self.jac.shape[0] != self.val.size:
            raise ValueError(
                f"Jacobian with {self.jac.shape[0]} rows does not match "
                f"{self.val.size} values"
            )

    def __repr__(self) -> str:
        s = f"Ad array of size {self.val.size}\n"
        s += f"Jacobian is of size {self.jac.shape} and has {self.jac.nnz} elements"
        return s

    @property
    def size(self) -> int:
        """Number of values."""
        return self.val.size

    @property
    def num_dofs(self) -> int:
        """Number of unknowns, i.e., number of columns in the Jacobian."""
        return self.jac.shape[1]

    def copy(self) -> AdArray:
        return AdArray(self.val.copy(), self.jac.copy())

    def full_jac(self) -> sps.csr_matrix:
        """The Jacobian with respect to all unknowns."""
        return self.jac

    # Arithmetic

    def __add__(self, other) -> AdArray:
        if isinstance(other, AdArray):
            a, b = _broadcast(self, other)
            return AdArray(a.val + b.val, a.jac + b.jac)
        val = self.val + other
        return AdArray(val, self._expand_jac(val.size))

    def __radd__(self, other) -> AdArray:
        return self.__add__(other)

    def __sub__(self, other) -> AdArray:
        return self + (-other)

    def __rsub__(self, other) -> AdArray:
        return (-self) + other

    def __neg__(self) -> AdArray:
        return AdArray(-self.val, -self.jac)

    def __mul__(self, other) -> AdArray:
        if isinstance(other, AdArray):
            # Product rule
            a, b = _broadcast(self, other)
            val = a.val * b.val
            jac = a.diagvec_mul_jac(b.val) + b.diagvec_mul_jac(a.val)
            return AdArray(val, jac)
        if sps.issparse(other):
            raise TypeError("Use the @ operator to apply a sparse matrix to an AdArray")
        other = np.asarray(other, dtype=float)
        val = self.val * other
        jac = self._expand_jac(val.size)
        if other.ndim == 0:
            return AdArray(val, jac * float(other))
        return AdArray(val, _diag(other * np.ones(val.shape)) @ jac)

    def __rmul__(self, other) -> AdArray:
        # Elementwise multiplication commutes.
        return self.__mul__(other)

    def __truediv__(self, other) -> AdArray:
        if isinstance(other, AdArray):
            return self * other**-1
        return self * (1.0 / np.asarray(other, dtype=float))

    def __rtruediv__(self, other) -> AdArray:
        return self**-1 * other

    def __pow__(self, other) -> AdArray:
        if not isinstance(other, AdArray):
            other = np.asarray(other, dtype=float)
            val = self.val**other
            jac = self.diagvec_mul_jac(other * self.val ** (other - 1))
            return AdArray(val, jac)
        a, b = _broadcast(self, other)
        val = a.val**b.val
        jac = a.diagvec_mul_jac(b.val * a.val ** (b.val - 1)) + b.diagvec_mul_jac(
            val * np.log(a.val)
        )
        return AdArray(val, jac)

    def __rpow__(self, other) -> AdArray:
        other = np.asarray(other, dtype=float)
        val = other**self.val
        jac = self.diagvec_mul_jac(val * np.log(other))
        return AdArray(val, jac)

    def __rmatmul__(self, other) -> AdArray:
        # Linear operator (dense or sparse matrix) applied from the left.
        return apply(other, self)

    def __matmul__(self, other):
        raise TypeError("An AdArray can only be multiplied by a matrix from the left")

    # Indexing and reduction

    def __getitem__(self, key) -> AdArray:
        """Gather a subset of the values and the corresponding Jacobian rows."""
        if isinstance(key, (int, np.integer)):
            key = [key]
        return AdArray(self.val[key], self.jac[key])

    def sum(self) -> AdArray:
        """Sum of all values, as an AD array of size 1."""
        return AdArray(
            np.array([self.val.sum()]), sps.csr_matrix(self.jac.sum(axis=0))
        )

    # Jacobian helpers

    def diagvec_mul_jac(self, a) -> sps.csr_matrix:
        """Left multiply the Jacobian by the diagonal matrix formed by ``a``."""
        a = np.asarray(a, dtype=float)
        if a.ndim == 0:
            return self.jac * float(a)
        return _diag(a) @ self.jac

    def jac_mul_diagvec(self, a) -> sps.csr_matrix:
        """Right multiply the Jacobian by the diagonal matrix formed by ``a``."""
        a = np.asarray(a, dtype=float)
        if a.ndim == 0:
            return self.jac * float(a)
        return self.jac @ _diag(a)

    def _expand_jac(self, n: int) -> sps.csr_matrix:
        """The Jacobian, with rows repeated if a size-1 array is broadcast to n."""
        if n == self.val.size:
            return self.jac
        if self.val.size != 1:
            raise ValueError(
                f"Cannot broadcast AdArray of size {self.val.size} to size {n}"
            )
        return sps.csr_matrix(np.ones((n, 1))) @ self.jac


def apply(
    matrix: Union[np.ndarray, sps.spmatrix], x: Union[AdArray, np.ndarray]
) -> Union[AdArray, np.ndarray]:
    """Apply a linear operator to an AD array or an ordinary array.

    The derivative of ``A x`` is ``A`` times the Jacobian of ``x``.

    Parameters:
        matrix: ``shape=(m, n)`` Linear operator.
        x: ``shape=(n,)`` Argument.

    Returns:
        ``shape=(m,)`` The operator applied to ``x``, of the same kind as ``x``.

    """
    if isinstance(x, AdArray):
        return AdArray(matrix @ x.val, sps.csr_matrix(matrix @ x.jac))
    return matrix @ x


def _broadcast(a: AdArray, b: AdArray) -> tuple[AdArray, AdArray]:
    """Broadcast two AD arrays to a common size, allowing size-1 arrays only."""
    if a.num_dofs != b.num_dofs:
        raise ValueError(
            f"AdArrays depend on {a.num_dofs} and {b.num_dofs} unknowns, respectively"
        )
    if a.val.size == b.val.size:
        return a, b
    n = max(a.val.size, b.val.size)
    return AdArray(a.val * np.ones(n), a._expand_jac(n)), AdArray(
        b.val * np.ones(n), b._expand_jac(n)
    )


def _diag(a: np.ndarray) -> sps.csr_matrix:
    """Sparse diagonal matrix, also for empty arrays."""
    n = a.size
    idx = np.arange(n)
    return sps.csr_matrix((a, (idx, idx)), shape=(n, n))
