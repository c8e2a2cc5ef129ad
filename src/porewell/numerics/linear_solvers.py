"""Solution of the linear systems arising in Newton iterations.

The systems are solved by a sparse LU factorization. Failures of the factorization
are reported as :class:`~porewell.utils.exceptions.SingularJacobianError`, so that the
nonlinear solver can treat them as a failed time step.

"""

from __future__ import annotations

import logging
import warnings

import numpy as np
import scipy.sparse as sps
import scipy.sparse.linalg as spla

import porewell as pw

__all__ = ["solve_linear_system"]

module_sections = ["numerics"]

logger = logging.getLogger(__name__)


@pw.time_logger(sections=module_sections)
def solve_linear_system(
    A: sps.spmatrix, b: np.ndarray, min_pivot_ratio: float = 0.0
) -> np.ndarray:
    """Solve ``A x = b`` by sparse LU factorization.

    Parameters:
        A: ``shape=(n, n)`` System matrix.
        b: ``shape=(n,)`` Right-hand side.
        min_pivot_ratio: Lower bound for the ratio between the smallest and the largest
            absolute pivot of the factorization. A smaller ratio is taken as a
            numerically singular matrix. Zero disables the check.

    Raises:
        SingularJacobianError: If the matrix is singular, the pivot ratio is too
            small, or the solution is not finite.

    Returns:
        The solution ``x``.

    """
    A = sps.csc_matrix(A)
    if A.shape[0] != A.shape[1] or A.shape[0] != b.size:
        raise ValueError(
            f"Matrix of shape {A.shape} does not match right-hand side of size {b.size}"
        )
    if b.size == 0:
        return np.zeros(0)

    try:
        # Singular matrices are reported by SuperLU as RuntimeError. Near-singular
        # ones may trigger warnings instead, these are turned into errors.
        with warnings.catch_warnings():
            warnings.simplefilter("error", spla.MatrixRankWarning)
            lu = spla.splu(A)
    except (RuntimeError, spla.MatrixRankWarning) as err:
        raise pw.SingularJacobianError(
            f"Sparse LU factorization failed: {err}"
        ) from err

    if min_pivot_ratio > 0:
        pivots = np.abs(lu.U.diagonal())
        ratio = pivots.min() / pivots.max() if pivots.max() > 0 else 0.0
        if ratio < min_pivot_ratio:
            raise pw.SingularJacobianError(
                f"Jacobian is numerically singular, pivot ratio {ratio:.2e}"
            )

    x = lu.solve(np.asarray(b, dtype=float))
    if not np.all(np.isfinite(x)):
        raise pw.SingularJacobianError("Linear solve gave non-finite values")
    logger.debug(f"Solved linear system with {b.size} unknowns")
    return x
