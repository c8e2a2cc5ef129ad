"""Module containing the grid container consumed by the discretization.

See documentation of class :class:`Grid` for further details.

.. rubric:: Acknowledgements
    The data structure for the grid is inspired by that used in the
    `Matlab Reservoir Simulation Toolbox (MRST) <www.sintef.no/projectweb/mrst/>`_
    developed by SINTEF ICT.

"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy import sparse as sps


class Grid:
    """Container for grid topology and geometry.

    The grid is read-only input to the simulator. Construction of the geometry for
    general grids is not part of this package; subclasses (see
    :class:`~porewell.grids.structured.TensorGrid`) or external code provide the
    geometric fields.

    The z-axis points downwards, thus the third coordinate of a cell center is its
    depth.

    Parameters:
        dim: Grid dimension.
        cell_faces: ``shape=(num_faces, num_cells)``

            A map from cells to faces bordering the respective cell. Matrix elements
            have value +-1, where + corresponds to the face normal vector being
            outwards.
        cell_centers: ``shape=(3, num_cells)`` Cell center coordinates.
        cell_volumes: ``shape=(num_cells,)`` Cell volumes.
        face_centers: ``shape=(3, num_faces)`` Face center coordinates.
        face_normals: ``shape=(3, num_faces)``

            Face normal vectors, scaled with the face area.
        name: Name of grid.
        history: ``default=None``

            Information on the formation of the grid.

    """

    def __init__(
        self,
        dim: int,
        cell_faces: sps.spmatrix,
        cell_centers: np.ndarray,
        cell_volumes: np.ndarray,
        face_centers: np.ndarray,
        face_normals: np.ndarray,
        name: str = "Grid",
        history: Optional[list[str]] = None,
    ) -> None:
        if not (dim >= 0 and dim <= 3):
            raise ValueError("A grid has to be of dimension 0, 1, 2, or 3.")

        self.dim: int = dim
        """Grid dimension."""

        cell_faces = sps.csc_matrix(cell_faces)
        # Force topological information to be stored as integers.
        cell_faces.data = cell_faces.data.astype(int)

        self.cell_faces: sps.csc_matrix = cell_faces
        """An array with ``shape=(num_faces, num_cells)`` representing the map from
        cells to faces bordering respective cell."""

        self.num_faces: int = cell_faces.shape[0]
        """Number of faces in the grid."""
        self.num_cells: int = cell_faces.shape[1]
        """Number of cells in the grid."""

        self.cell_centers: np.ndarray = np.asarray(cell_centers, dtype=float)
        """Cell centers, ``shape=(3, num_cells)``."""
        self.cell_volumes: np.ndarray = np.asarray(cell_volumes, dtype=float)
        """Cell volumes, ``shape=(num_cells,)``."""
        self.face_centers: np.ndarray = np.asarray(face_centers, dtype=float)
        """Face centers, ``shape=(3, num_faces)``."""
        self.face_normals: np.ndarray = np.asarray(face_normals, dtype=float)
        """Face normals scaled with face areas, ``shape=(3, num_faces)``."""

        self.name: str = name
        """Name assigned to this grid."""
        self.history: list[str] = [] if history is None else list(history)
        """Information on the formation of the grid."""

        self._check_geometry()

    def __repr__(self) -> str:
        s = f"Grid of dimension {self.dim} with name {self.name}\n"
        s += f"Number of cells {self.num_cells}\n"
        s += f"Number of faces {self.num_faces}\n"
        return s

    @property
    def face_areas(self) -> np.ndarray:
        """Face areas, ``shape=(num_faces,)``."""
        return np.linalg.norm(self.face_normals, axis=0)

    @property
    def cell_depths(self) -> np.ndarray:
        """Depth of the cell centers, ``shape=(num_cells,)``."""
        return self.cell_centers[2]

    def cell_face_as_dense(self) -> np.ndarray:
        """Obtain the cell-face relation in the form of two rows, rather than a
        sparse matrix.

        Each column in the array corresponds to a face, and the elements in that column
        refers to cell indices. The value -1 signifies a boundary. The normal vector of
        the face points from the first to the second row.

        Returns:
            Array representation of face-cell relations with ``shape=(2, num_faces)``.

        """
        fi, ci, sgn = sps.find(self.cell_faces)
        neighs = -np.ones((2, self.num_faces), dtype=int)
        # The normal vector points out of the first neighbor, into the second.
        neighs[0, fi[sgn > 0]] = ci[sgn > 0]
        neighs[1, fi[sgn < 0]] = ci[sgn < 0]
        return neighs

    def get_internal_faces(self) -> np.ndarray:
        """Get internal faces id of the grid.

        Returns:
            Integer indices of internal faces, ``shape=(num_internal_faces,)``.

        """
        neighs = self.cell_face_as_dense()
        return np.flatnonzero(np.all(neighs >= 0, axis=0))

    def get_all_boundary_faces(self) -> np.ndarray:
        """Get indices of all faces tagged as boundary faces."""
        neighs = self.cell_face_as_dense()
        return np.flatnonzero(np.any(neighs < 0, axis=0))

    def _check_geometry(self) -> None:
        if self.cell_centers.shape != (3, self.num_cells):
            raise ValueError("Cell centers should have shape (3, num_cells)")
        if self.cell_volumes.shape != (self.num_cells,):
            raise ValueError("Cell volumes should have shape (num_cells,)")
        if self.face_centers.shape != (3, self.num_faces):
            raise ValueError("Face centers should have shape (3, num_faces)")
        if self.face_normals.shape != (3, self.num_faces):
            raise ValueError("Face normals should have shape (3, num_faces)")
        # Each face has at most two neighboring cells, with opposite signs.
        counts = np.bincount(
            sps.find(self.cell_faces)[0], minlength=self.num_faces
        )
        if np.any(counts > 2):
            raise ValueError("A face can have at most two neighboring cells")
