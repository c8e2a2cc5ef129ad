"""Rock model: permeability, porosity and pressure-dependent pore volume."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Union

import numpy as np

import porewell as pw
from porewell.ad import functions as af

__all__ = ["CompressibleRock", "PoreVolume"]


@dataclass(frozen=True, kw_only=True, eq=False)
class CompressibleRock:
    """Rock of constant compressibility with a scalar permeability per cell.

    Example:

        >>> g = pw.CartGrid([10, 10, 10], [200, 200, 50])
        >>> rock = CompressibleRock(
        ...     permeability=30 * pw.MILLIDARCY * np.ones(g.num_cells), porosity=0.3
        ... )
        >>> pv = rock.pore_volume_law(g)

    """

    permeability: np.ndarray
    """Cell-wise permeability [m^2]."""
    porosity: Union[float, np.ndarray] = 0.3
    """Porosity at the reference pressure, scalar or cell-wise."""
    reference_pressure: float = 200 * pw.BAR
    """Pressure at which the porosity is given [Pa]."""
    compressibility: float = 1e-6 / pw.BAR
    """Rock compressibility [1/Pa]."""

    def __post_init__(self) -> None:
        # Store copies as floats, the arrays are not to be changed after construction.
        object.__setattr__(
            self, "permeability", np.array(self.permeability, dtype=float, ndmin=1)
        )
        if not np.all(np.isfinite(self.permeability) & (self.permeability > 0)):
            raise pw.ConfigurationError("Permeability must be positive and finite")
        if np.any(np.asarray(self.porosity) <= 0):
            raise pw.ConfigurationError("Porosity must be positive")

    def with_permeability(self, permeability: np.ndarray) -> CompressibleRock:
        """A copy of the rock with the permeability replaced."""
        return dataclasses.replace(self, permeability=permeability)

    def check_grid(self, g: pw.Grid) -> None:
        """Check that the cell-wise fields cover all cells of a grid.

        Raises:
            ConfigurationError: If the fields are too short.

        """
        if self.permeability.size != g.num_cells:
            raise pw.ConfigurationError(
                f"Permeability of size {self.permeability.size} given for a grid "
                f"with {g.num_cells} cells"
            )
        poro = np.asarray(self.porosity)
        if poro.ndim > 0 and poro.size != g.num_cells:
            raise pw.ConfigurationError(
                f"Porosity of size {poro.size} given for a grid "
                f"with {g.num_cells} cells"
            )

    def pore_volume(self, g: pw.Grid) -> np.ndarray:
        """Pore volume at reference pressure, porosity times cell volume [m^3]."""
        self.check_grid(g)
        return self.porosity * g.cell_volumes

    def pore_volume_law(self, g: pw.Grid) -> PoreVolume:
        """The pressure-dependent pore volume on a grid."""
        return PoreVolume(
            reference_volume=self.pore_volume(g),
            reference_pressure=self.reference_pressure,
            compressibility=self.compressibility,
        )


@dataclass(frozen=True, kw_only=True, eq=False)
class PoreVolume:
    """Pore volume ``pv(p) = pv_r * exp(c_r * (p - p_r))``."""

    reference_volume: np.ndarray
    reference_pressure: float
    compressibility: float

    def __call__(self, p):
        return self.reference_volume * af.exp(
            self.compressibility * (p - self.reference_pressure)
        )
