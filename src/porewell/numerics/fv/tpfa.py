"""Two-point flux approximation: transmissibilities and discrete operators.

The transmissibility of a face is the harmonic average of the one-sided
(half-)transmissibilities of the two cells sharing the face. The one-sided
transmissibilities are computed from the cell permeability, the vector from the cell
center to the face center and the area-weighted face normal. Boundary faces are
no-flow and are left out.

Together with the pore volumes, the transmissibilities and the discrete gradient,
divergence and average operators hold all information from the geological model
needed by a first-order finite-volume discretization of the flow equations.

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import scipy.sparse as sps

import porewell as pw
from porewell.ad.forward_mode import apply

__all__ = ["half_transmissibilities", "transmissibility", "DiscreteOperators"]

module_sections = ["discretization"]

logger = logging.getLogger(__name__)


def _check_permeability(g: pw.Grid, perm: np.ndarray) -> np.ndarray:
    perm = np.asarray(perm, dtype=float)
    if perm.ndim != 1 or perm.size < g.num_cells:
        raise pw.ConfigurationError(
            f"Permeability of size {perm.size} given for a grid with "
            f"{g.num_cells} cells"
        )
    perm = perm[: g.num_cells]
    if not np.all(np.isfinite(perm) & (perm > 0)):
        raise pw.ConfigurationError("Permeability must be positive and finite")
    return perm


@pw.time_logger(sections=module_sections)
def half_transmissibilities(
    g: pw.Grid, perm: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """One-sided transmissibilities of all cell-face pairs.

    Parameters:
        g: Grid.
        perm: Cell-wise scalar permeability.

    Returns:
        A 3-tuple containing the face indices, the cell indices and the
        transmissibility of each cell-face pair.

    """
    perm = _check_permeability(g, perm)
    fi, ci, sgn = sps.find(g.cell_faces)

    # Normal vectors, pointing out of the cell
    n = g.face_normals[:, fi] * sgn
    # Distance from cell center to face center
    fc_cc = g.face_centers[:, fi] - g.cell_centers[:, ci]

    t_face = perm[ci] * np.sum(n * fc_cc, axis=0)
    dist_face_cell = np.power(fc_cc, 2).sum(axis=0)
    return fi, ci, t_face / dist_face_cell


@pw.time_logger(sections=module_sections)
def transmissibility(g: pw.Grid, perm: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Transmissibilities of the interior faces of a grid.

    Parameters:
        g: Grid.
        perm: Cell-wise scalar permeability.

    Returns:
        A 2-tuple containing the indices of the interior faces and their
        transmissibilities.

    """
    fi, _, ht = half_transmissibilities(g, perm)
    # Harmonic average
    t = 1 / np.bincount(fi, weights=1 / ht, minlength=g.num_faces)
    interior = g.get_internal_faces()
    return interior, t[interior]


class DiscreteOperators:
    """Transmissibilities and discrete differential operators on the interior faces.

    The operators act on cell-wise quantities (arrays or AD arrays):

    - :meth:`grad` maps a cell vector to the difference between the second and the
      first neighbor cell of each interior face.
    - :meth:`div` maps a face vector to the net outflow of each cell; it is the
      negative transpose of the gradient.
    - :meth:`avg` maps a cell vector to the arithmetic mean of the two neighbors of
      each interior face.

    All quantities are computed once, at construction, and are not changed afterwards.

    Parameters:
        faces: Indices of the interior faces in the grid.
        neighbors: ``shape=(num_interior_faces, 2)`` Neighboring cells of each face.
        transmissibility: Transmissibility of each interior face.
        num_cells: Number of cells.
        depth: Cell-wise depth.
        constants: Physical constants. Defaults to standard gravity.

    """

    def __init__(
        self,
        faces: np.ndarray,
        neighbors: np.ndarray,
        transmissibility: np.ndarray,
        num_cells: int,
        depth: np.ndarray,
        constants: Optional[pw.PhysicalConstants] = None,
    ) -> None:
        self.faces: np.ndarray = np.asarray(faces)
        """Interior faces of the grid."""
        self.neighbors: np.ndarray = np.asarray(neighbors, dtype=int).reshape(-1, 2)
        """Neighbor cells of the interior faces."""
        self.T: np.ndarray = np.asarray(transmissibility, dtype=float)
        """Transmissibility of each interior face."""
        self.num_cells: int = num_cells
        self.constants: pw.PhysicalConstants = (
            pw.PhysicalConstants() if constants is None else constants
        )

        n = self.neighbors.shape[0]
        rows = np.tile(np.arange(n), 2)
        cols = np.hstack((self.neighbors[:, 0], self.neighbors[:, 1]))
        self.C: sps.csr_matrix = sps.csr_matrix(
            (np.hstack((-np.ones(n), np.ones(n))), (rows, cols)),
            shape=(n, num_cells),
        )
        """Gradient matrix, ``shape=(num_interior_faces, num_cells)``."""
        self.A: sps.csr_matrix = sps.csr_matrix(
            (0.5 * np.ones(2 * n), (rows, cols)), shape=(n, num_cells)
        )
        """Average matrix, ``shape=(num_interior_faces, num_cells)``."""
        self.D: sps.csr_matrix = sps.csr_matrix(-self.C.T)
        """Divergence matrix, ``shape=(num_cells, num_interior_faces)``."""

        self.depth: np.ndarray = np.asarray(depth, dtype=float)
        self.grad_depth: np.ndarray = self.grad(self.depth)
        """Depth difference across each interior face."""

    @classmethod
    def from_grid(
        cls,
        g: pw.Grid,
        perm: np.ndarray,
        constants: Optional[pw.PhysicalConstants] = None,
    ) -> DiscreteOperators:
        """Build the operators from a grid and a cell-wise permeability.

        Raises:
            ConfigurationError: If the permeability does not cover all cells, or is
                not positive.

        """
        faces, T = transmissibility(g, perm)
        neighbors = g.cell_face_as_dense()[:, faces].T
        logger.debug(
            f"Discretized {g.num_cells} cells with {faces.size} interior faces"
        )
        return cls(faces, neighbors, T, g.num_cells, g.cell_depths, constants)

    def __repr__(self) -> str:
        return (
            f"Discrete operators on {self.num_cells} cells and "
            f"{self.T.size} interior faces"
        )

    @property
    def num_faces(self) -> int:
        """Number of interior faces."""
        return self.T.size

    def grad(self, x):
        return apply(self.C, x)

    def div(self, x):
        return apply(self.D, x)

    def avg(self, x):
        return apply(self.A, x)
