"""Mass balance equation of a single-phase, slightly compressible fluid.

The flow equations are discretized in time by the backward Euler method and in space
by a two-point finite-volume method, and written on residual form, ``F(p) = 0``:

    ``(pv(p) rho(p) - pv(p0) rho(p0)) / dt + div(avg(rho(p)) v(p)) = 0``,

with the Darcy flux

    ``v(p) = -(T / mu) (grad(p) - g avg(rho(p)) grad(z))``.

Well source terms are added by :class:`~porewell.models.well_model.WellModel`.

"""

from __future__ import annotations

from typing import Optional

import porewell as pw

__all__ = ["FlowEquations"]

module_sections = ["models", "assembly"]


class FlowEquations:
    """Darcy flux and cell-wise mass balance.

    The object captures only the discrete operators and the physical laws; all methods
    are pure functions of their pressure arguments, which may be ordinary arrays or AD
    arrays.

    Parameters:
        operators: Transmissibilities and discrete operators.
        pore_volume: Pore volume as a function of pressure.
        fluid: Fluid model.
        constants: Physical constants. Defaults to those of ``operators``.

    """

    def __init__(
        self,
        operators: pw.DiscreteOperators,
        pore_volume: pw.PoreVolume,
        fluid: pw.SlightlyCompressibleFluid,
        constants: Optional[pw.PhysicalConstants] = None,
    ) -> None:
        self.operators = operators
        self.pore_volume = pore_volume
        self.fluid = fluid
        self.constants = operators.constants if constants is None else constants

    def flux(self, p):
        """Darcy flux over the interior faces [m^3/s].

        Parameters:
            p: Cell pressures.

        Returns:
            Volumetric flux from the first to the second neighbor of each face.

        """
        ops = self.operators
        g = self.constants.gravity
        rho_face = ops.avg(self.fluid.density(p))
        return -(ops.T / self.fluid.viscosity) * (
            ops.grad(p) - g * rho_face * ops.grad_depth
        )

    def mass_flux(self, p):
        """Mass flux over the interior faces [kg/s], density averaged on faces."""
        return self.operators.avg(self.fluid.density(p)) * self.flux(p)

    def accumulation(self, p, p0, dt: float):
        """Mass accumulation rate in each cell over a time step [kg/s]."""
        rho = self.fluid.density
        return (1 / dt) * (
            self.pore_volume(p) * rho(p) - self.pore_volume(p0) * rho(p0)
        )

    @pw.time_logger(sections=module_sections)
    def pressure_equation(self, p, p0, dt: float):
        """Residual of the mass balance in each cell.

        Parameters:
            p: Cell pressures at the new time level, typically an AD array.
            p0: Cell pressures at the previous time level.
            dt: Time step size.

        Returns:
            Cell-wise residual; zero for a converged solution without wells.

        """
        return self.accumulation(p, p0, dt) + self.operators.div(self.mass_flux(p))
