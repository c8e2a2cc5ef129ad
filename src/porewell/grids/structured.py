""" Module containing classes for structured grids.

Cells and faces are numbered with the x-index running fastest, then y, then z. Faces
are numbered with all x-faces first, then y-faces, then z-faces.

Acknowledgements:
    The implementation of structured grids is in practice a translation of the
    corresponding functions found in the Matlab Reservoir Simulation Toolbox
    (MRST) developed by SINTEF ICT, see www.sintef.no/projectweb/mrst/

"""
import numpy as np
import scipy.sparse as sps

from porewell.grids.grid import Grid


class TensorGrid(Grid):
    """Representation of a 3D grid formed by a tensor product of line point
    distributions.

    The geometry (cell centers and volumes, face centers and normals) is computed
    directly from the node coordinates.

    For information on attributes and methods, see the documentation of the
    parent Grid class.

    """

    def __init__(self, x, y, z, name=None):
        """
        Constructor for 3D tensor grid.

        Parameters
            x (np.ndarray): Node coordinates in x-direction
            y (np.ndarray): Node coordinates in y-direction
            z (np.ndarray): Node coordinates in z-direction, pointing downwards
            name (str): Name of grid, passed to super constructor
        """
        if name is None:
            name = "TensorGrid"

        nodes_x, nodes_y, nodes_z = (np.asarray(v, dtype=float) for v in (x, y, z))
        for v in (nodes_x, nodes_y, nodes_z):
            if v.size < 2 or np.any(np.diff(v) <= 0):
                raise ValueError("Node coordinates must be strictly increasing")

        self.cart_dims = np.array([nodes_x.size, nodes_y.size, nodes_z.size]) - 1
        """Number of cells in each direction."""

        cell_faces = self._create_3d_topology()
        geometry = self._compute_3d_geometry(nodes_x, nodes_y, nodes_z)

        super().__init__(3, cell_faces, *geometry, name=name)

    def _create_3d_topology(self):
        """Compute the cell-face map.

        This is really a part of the constructor, but put it here to improve
        readability.

        """
        num_x, num_y, num_z = self.cart_dims

        num_cells = num_x * num_y * num_z
        num_faces_x = (num_x + 1) * num_y * num_z
        num_faces_y = num_x * (num_y + 1) * num_z
        num_faces_z = num_x * num_y * (num_z + 1)
        num_faces = num_faces_x + num_faces_y + num_faces_z

        face_x = np.arange(num_faces_x).reshape(num_x + 1, num_y, num_z, order="F")
        face_y = num_faces_x + np.arange(num_faces_y).reshape(
            num_x, num_y + 1, num_z, order="F"
        )
        face_z = (
            num_faces_x
            + num_faces_y
            + np.arange(num_faces_z).reshape(num_x, num_y, num_z + 1, order="F")
        )

        face_west = face_x[:-1, :, :].ravel(order="F")
        face_east = face_x[1:, :, :].ravel(order="F")
        face_south = face_y[:, :-1, :].ravel(order="F")
        face_north = face_y[:, 1:, :].ravel(order="F")
        face_top = face_z[:, :, :-1].ravel(order="F")
        face_bottom = face_z[:, :, 1:].ravel(order="F")

        cell_faces = np.vstack(
            (face_west, face_east, face_south, face_north, face_top, face_bottom)
        ).ravel(order="F")

        num_faces_per_cell = 6
        indptr = np.append(
            np.arange(0, num_faces_per_cell * num_cells, num_faces_per_cell),
            num_faces_per_cell * num_cells,
        )
        # Normal vectors point in the positive coordinate directions, thus out of the
        # cell on the east, north and bottom sides.
        data = np.tile([-1, 1, -1, 1, -1, 1], num_cells)
        return sps.csc_matrix((data, cell_faces, indptr), shape=(num_faces, num_cells))

    def _compute_3d_geometry(self, nodes_x, nodes_y, nodes_z):
        dx, dy, dz = np.diff(nodes_x), np.diff(nodes_y), np.diff(nodes_z)
        xc = 0.5 * (nodes_x[:-1] + nodes_x[1:])
        yc = 0.5 * (nodes_y[:-1] + nodes_y[1:])
        zc = 0.5 * (nodes_z[:-1] + nodes_z[1:])

        def tensor(a, b, c):
            # Fortran ordering, x running fastest
            return [
                v.ravel(order="F") for v in np.meshgrid(a, b, c, indexing="ij")
            ]

        cx, cy, cz = tensor(xc, yc, zc)
        cell_centers = np.vstack((cx, cy, cz))
        vx, vy, vz = tensor(dx, dy, dz)
        cell_volumes = vx * vy * vz
        self.cell_dimensions = np.vstack((vx, vy, vz))
        """Cell extent in each coordinate direction, ``shape=(3, num_cells)``."""

        # x-faces
        fx_x, fx_y, fx_z = tensor(nodes_x, yc, zc)
        _, ax_y, ax_z = tensor(nodes_x, dy, dz)
        # y-faces
        fy_x, fy_y, fy_z = tensor(xc, nodes_y, zc)
        ay_x, _, ay_z = tensor(dx, nodes_y, dz)
        # z-faces
        fz_x, fz_y, fz_z = tensor(xc, yc, nodes_z)
        az_x, az_y, _ = tensor(dx, dy, nodes_z)

        face_centers = np.vstack(
            (
                np.hstack((fx_x, fy_x, fz_x)),
                np.hstack((fx_y, fy_y, fz_y)),
                np.hstack((fx_z, fy_z, fz_z)),
            )
        )
        num_fx, num_fy, num_fz = fx_x.size, fy_x.size, fz_x.size
        face_normals = np.zeros((3, num_fx + num_fy + num_fz))
        face_normals[0, :num_fx] = ax_y * ax_z
        face_normals[1, num_fx : num_fx + num_fy] = ay_x * ay_z
        face_normals[2, num_fx + num_fy :] = az_x * az_y

        return cell_centers, cell_volumes, face_centers, face_normals

    def cell_index(self, i, j, k):
        """Linear cell index from (0-based) logical indices, x running fastest."""
        i, j, k = np.asarray(i), np.asarray(j), np.asarray(k)
        num_x, num_y, _ = self.cart_dims
        return i + num_x * (j + num_y * k)


class CartGrid(TensorGrid):
    """Representation of a 3D Cartesian grid.

    For information on attributes and methods, see the documentation of the
    parent Grid class.

    """

    def __init__(self, nx, physdims=None):
        """
        Constructor for Cartesian grid

        Parameters
        ----------
        nx (np.ndarray): Number of cells in each direction. Should be 3D.
        physdims (np.ndarray): Physical dimensions in each direction.
            Defaults to same as nx, that is, cells of unit size.
        """
        nx = np.asarray(nx, dtype=int)
        if physdims is None:
            physdims = nx
        physdims = np.asarray(physdims, dtype=float)

        if nx.shape != (3,) or physdims.shape != (3,):
            raise ValueError("Cartesian grid is only implemented in three dimensions")

        # Create point distribution, and then leave construction to
        # TensorGrid constructor
        nodes_x = np.linspace(0, physdims[0], nx[0] + 1)
        nodes_y = np.linspace(0, physdims[1], nx[1] + 1)
        nodes_z = np.linspace(0, physdims[2], nx[2] + 1)
        super().__init__(nodes_x, nodes_y, nodes_z, name="CartGrid")
