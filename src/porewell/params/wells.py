"""Well descriptions.

A well is given by its perforated cells, a well index (connection transmissibility)
per perforation, and the depth of each perforation relative to the reference depth of
the bottom-hole pressure. The well is operated under a control, which is either a
fixed bottom-hole pressure or a fixed surface rate.

The well index can be computed by Peaceman's formula for wells aligned with one of the
axes of a Cartesian grid, see :func:`peaceman_well_index` and :func:`well_along_axis`.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

import porewell as pw

__all__ = [
    "BhpControl",
    "RateControl",
    "Well",
    "peaceman_well_index",
    "well_along_axis",
]


def _as_cell_indices(cells) -> np.ndarray:
    """Cell indices as an integer array.

    Raises:
        ConfigurationError: If an index is not integral.

    """
    cells = np.array(cells, ndmin=1)
    if cells.size > 0 and not np.array_equal(cells, np.round(cells)):
        raise pw.ConfigurationError(
            f"Perforated cells must be integer indices, got {cells}"
        )
    return cells.astype(int)


@dataclass(frozen=True)
class BhpControl:
    """Fixed bottom-hole pressure [Pa]."""

    target: float = 100 * pw.BAR


@dataclass(frozen=True)
class RateControl:
    """Fixed surface volume rate [m^3/s].

    The sign convention is that of the surface rate unknown: negative values mean
    production, positive values injection.

    """

    target: float


@dataclass(frozen=True, kw_only=True, eq=False)
class Well:
    """A well with its perforations and control."""

    cells: np.ndarray
    """Perforated cells (0-based), ``shape=(num_perforations,)``."""
    well_index: np.ndarray
    """Peaceman well index of each perforation [m^3]."""
    depth_offset: np.ndarray
    """Depth of each perforation relative to the bottom-hole reference depth [m],
    positive downwards."""
    control: Union[BhpControl, RateControl] = field(default_factory=BhpControl)
    """Operating control of the well."""
    name: str = "well"

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", _as_cell_indices(self.cells))
        for key in ("well_index", "depth_offset"):
            value = np.array(getattr(self, key), dtype=float, ndmin=1)
            if value.size == 1 and self.cells.size > 1:
                value = value * np.ones(self.cells.size)
            object.__setattr__(self, key, value)

        if self.cells.size == 0:
            raise pw.ConfigurationError(f"Well {self.name} has no perforations")
        if self.well_index.size != self.cells.size:
            raise pw.ConfigurationError(
                f"Well {self.name}: {self.well_index.size} well indices given for "
                f"{self.cells.size} perforations"
            )
        if self.depth_offset.size != self.cells.size:
            raise pw.ConfigurationError(
                f"Well {self.name}: {self.depth_offset.size} depth offsets given for "
                f"{self.cells.size} perforations"
            )
        if np.any(self.well_index < 0):
            raise pw.ConfigurationError(f"Well {self.name} has negative well index")

    @property
    def num_perforations(self) -> int:
        return self.cells.size

    def check_grid(self, g: pw.Grid) -> None:
        """Check that all perforations refer to existing cells of a grid.

        Raises:
            ConfigurationError: If a perforation is outside the grid.

        """
        self.check_cells(g.num_cells)

    def check_cells(self, num_cells: int) -> None:
        """Check that all perforations refer to cells in ``range(num_cells)``.

        Raises:
            ConfigurationError: If a perforation is outside that range.

        """
        outside = (self.cells < 0) | (self.cells >= num_cells)
        if np.any(outside):
            raise pw.ConfigurationError(
                f"Well {self.name} perforates cells {self.cells[outside]}, the grid "
                f"has {num_cells} cells"
            )


def peaceman_well_index(
    g: pw.Grid,
    permeability: np.ndarray,
    cells: np.ndarray,
    direction: str = "z",
    radius: float = 0.1,
    skin: float = 0.0,
) -> np.ndarray:
    """Well index of perforations in a Cartesian grid by Peaceman's formula.

    For a well along the axis ``direction`` and isotropic cell permeability ``k``,

        ``WI = 2 pi k L / (ln(r_e / r_w) + skin)``, ``r_e = 0.14 sqrt(d_1^2 + d_2^2)``,

    where ``L`` is the cell extent along the well and ``d_1, d_2`` the extents in the
    two transverse directions.

    Parameters:
        g: Grid with the attribute ``cell_dimensions``, e.g. a
            :class:`~porewell.grids.structured.CartGrid`.
        permeability: Cell-wise permeability of the whole grid.
        cells: Perforated cells.
        direction: ``"x"``, ``"y"`` or ``"z"``.
        radius: Wellbore radius.
        skin: Skin factor.

    Raises:
        ConfigurationError: If the grid has no cell dimensions, the direction is
            unknown, or the equivalent radius is smaller than the well radius.

    Returns:
        Well index per perforation.

    """
    if not hasattr(g, "cell_dimensions"):
        raise pw.ConfigurationError(
            "Peaceman well index requires a grid with cell dimensions"
        )
    axes = {"x": 0, "y": 1, "z": 2}
    if direction not in axes:
        raise pw.ConfigurationError(f"Unknown well direction {direction}")
    cells = _as_cell_indices(cells)

    dims = g.cell_dimensions[:, cells]
    along = axes[direction]
    transverse = [i for i in range(3) if i != along]

    length = dims[along]
    equivalent_radius = 0.14 * np.sqrt(np.sum(dims[transverse] ** 2, axis=0))
    if np.any(equivalent_radius <= radius):
        raise pw.ConfigurationError(
            "Well radius exceeds the equivalent radius of the perforated cells"
        )
    k = np.asarray(permeability)[cells]
    return 2 * np.pi * k * length / (np.log(equivalent_radius / radius) + skin)


def well_along_axis(
    g: pw.Grid,
    rock: pw.CompressibleRock,
    cells: np.ndarray,
    direction: str = "z",
    control: Optional[Union[BhpControl, RateControl]] = None,
    name: str = "producer",
    radius: float = 0.1,
    skin: float = 0.0,
    reference_depth: Optional[float] = None,
) -> Well:
    """Create a well perforating a set of cells along a grid axis.

    Parameters:
        g: Cartesian grid.
        rock: Rock, providing the permeability.
        cells: Perforated cells, ordered from the reference perforation.
        direction: Axis of the well, ``"x"``, ``"y"`` or ``"z"``.
        control: Well control. Defaults to a bottom-hole pressure of 100 bar.
        name: Name of the well.
        radius: Wellbore radius.
        skin: Skin factor.
        reference_depth: Depth of the bottom-hole pressure. Defaults to the depth of
            the first perforated cell.

    Returns:
        The well.

    """
    rock.check_grid(g)
    cells = _as_cell_indices(cells)
    if np.any((cells < 0) | (cells >= g.num_cells)):
        raise pw.ConfigurationError(f"Well {name} perforates cells outside the grid")

    depths = g.cell_depths[cells]
    if reference_depth is None:
        reference_depth = depths[0]

    wi = peaceman_well_index(g, rock.permeability, cells, direction, radius, skin)
    return Well(
        cells=cells,
        well_index=wi,
        depth_offset=depths - reference_depth,
        control=BhpControl() if control is None else control,
        name=name,
    )
