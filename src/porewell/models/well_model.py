"""Well equations.

Each well contributes two unknowns, the bottom-hole pressure (bhp) and the surface
volume rate, and two equations:

* The rate equation equates the surface rate to the sum of the mass rates of the
  connections, divided by the surface density.
* The control equation fixes either the bhp or the surface rate.

The connections to the reservoir are described by

* ``p_conn = bhp + g dz rho(bhp)``, the hydrostatic pressure distribution inside the
  wellbore, which relates the connection pressure to the bhp, and
* ``q_conn = WI rho(p) / mu (p_conn - p)``, the Peaceman well model relating the mass
  rate of a connection to the difference between the connection pressure and the
  reservoir pressure.

A positive ``q_conn`` is a flow from the wellbore into the reservoir, thus a producer
has negative connection rates and a negative surface rate. The connection rates enter
the mass balance of the perforated cells as sources, see :meth:`WellModel.source`.

All wells are treated together, with the equations ordered as the wells.

"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import scipy.sparse as sps

import porewell as pw
from porewell.ad.forward_mode import apply

__all__ = ["WellModel"]


class WellModel:
    """Connection pressures and rates, rate and control equations of a set of wells.

    Parameters:
        wells: The wells. They are independent of each other.
        num_cells: Number of cells in the reservoir grid.
        fluid: Fluid model.
        constants: Physical constants. Defaults to standard gravity.

    Raises:
        ConfigurationError: If a well perforates a cell outside the grid.

    """

    def __init__(
        self,
        wells: Sequence[pw.Well],
        num_cells: int,
        fluid: pw.SlightlyCompressibleFluid,
        constants: Optional[pw.PhysicalConstants] = None,
    ) -> None:
        self.wells: list[pw.Well] = list(wells)
        self.num_cells = num_cells
        self.fluid = fluid
        self.constants = pw.PhysicalConstants() if constants is None else constants

        for w in self.wells:
            w.check_cells(num_cells)

        nw = len(self.wells)
        if nw > 0:
            self.cells = np.concatenate([w.cells for w in self.wells])
            self.well_index = np.concatenate([w.well_index for w in self.wells])
            self.depth_offset = np.concatenate([w.depth_offset for w in self.wells])
            perf_to_well = np.concatenate(
                [i * np.ones(w.num_perforations, dtype=int) for i, w in enumerate(self.wells)]
            )
        else:
            self.cells = np.zeros(0, dtype=int)
            self.well_index = np.zeros(0)
            self.depth_offset = np.zeros(0)
            perf_to_well = np.zeros(0, dtype=int)

        num_perf = self.cells.size
        self.well_to_perforation: sps.csr_matrix = sps.csr_matrix(
            (np.ones(num_perf), (np.arange(num_perf), perf_to_well)),
            shape=(num_perf, nw),
        )
        """Map from wells to their perforations, ``shape=(num_perforations,
        num_wells)``."""
        self.perforation_to_cell: sps.csr_matrix = sps.csr_matrix(
            (np.ones(num_perf), (self.cells, np.arange(num_perf))),
            shape=(num_cells, num_perf),
        )
        """Map from perforations to the perforated cells, ``shape=(num_cells,
        num_perforations)``. Several perforations in the same cell are summed."""

        self._is_bhp_controlled = np.array(
            [isinstance(w.control, pw.BhpControl) for w in self.wells], dtype=float
        )
        self._targets = np.array([w.control.target for w in self.wells], dtype=float)

    def __repr__(self) -> str:
        return (
            f"Well model with {self.num_wells} wells and "
            f"{self.cells.size} perforations"
        )

    @property
    def num_wells(self) -> int:
        return len(self.wells)

    def connection_pressure(self, bhp):
        """Pressure in the wellbore at each perforation.

        Parameters:
            bhp: Bottom-hole pressure of each well.

        Returns:
            Connection pressure of each perforation.

        """
        bhp_perf = apply(self.well_to_perforation, bhp)
        g = self.constants.gravity
        return bhp_perf + g * self.depth_offset * self.fluid.density(bhp_perf)

    def connection_rates(self, p, bhp):
        """Mass rate of each connection, positive from the wellbore into the reservoir.

        Parameters:
            p: Cell pressures of the reservoir.
            bhp: Bottom-hole pressure of each well.

        Returns:
            Mass rate [kg/s] of each perforation.

        """
        p_perf = p[self.cells]
        mobility = self.fluid.density(p_perf) / self.fluid.viscosity
        return self.well_index * mobility * (self.connection_pressure(bhp) - p_perf)

    def source(self, p, bhp):
        """Cell-wise mass source from the wells [kg/s]."""
        return apply(self.perforation_to_cell, self.connection_rates(p, bhp))

    def rate_equation(self, p, bhp, surface_rate):
        """Residual equating the surface rate to the sum of connection rates."""
        well_rates = apply(self.well_to_perforation.T, self.connection_rates(p, bhp))
        return surface_rate - well_rates / self.fluid.surface_density

    def control_equation(self, bhp, surface_rate):
        """Residual of the well controls.

        For a well under bottom-hole pressure control the residual is ``bhp - target``,
        for a well under rate control it is ``surface_rate - target``.

        """
        bhp_ctrl = self._is_bhp_controlled
        return bhp_ctrl * (bhp - self._targets) + (1 - bhp_ctrl) * (
            surface_rate - self._targets
        )

    def surface_rates(self, p: np.ndarray, bhp: np.ndarray) -> np.ndarray:
        """Surface rate of each well computed from pressures, i.e. the surface rate
        that satisfies the rate equation."""
        q_conn = self.connection_rates(np.asarray(p), np.asarray(bhp))
        return self.well_to_perforation.T @ q_conn / self.fluid.surface_density
