"""Fluid models. Properties are pure functions of pressure, and accept ordinary arrays
as well as AD arrays."""

from __future__ import annotations

from dataclasses import dataclass

import porewell as pw
from porewell.ad import functions as af

__all__ = ["SlightlyCompressibleFluid"]


@dataclass(frozen=True, kw_only=True)
class SlightlyCompressibleFluid:
    """Single-phase fluid of constant compressibility.

    The density follows ``rho(p) = rho_r * exp(c * (p - p_r))``. Default values
    correspond to a light oil, all in SI units.

    """

    reference_density: float = 850 * pw.KILOGRAM / pw.METER**3
    """Density at the reference pressure [kg/m^3]."""
    reference_pressure: float = 200 * pw.BAR
    """Reference pressure [Pa]."""
    compressibility: float = 1e-3 / pw.BAR
    """Fluid compressibility [1/Pa]."""
    viscosity: float = 5 * pw.CENTI * pw.POISE
    """Dynamic viscosity [Pa s]."""
    surface_density: float = 750 * pw.KILOGRAM / pw.METER**3
    """Density at surface conditions [kg/m^3]."""

    def __post_init__(self) -> None:
        for name in ("reference_density", "viscosity", "surface_density"):
            if not getattr(self, name) > 0:
                raise pw.ConfigurationError(f"Fluid {name} must be positive")

    def density(self, p):
        """Fluid density at pressure ``p``.

        Parameters:
            p: Pressure [Pa], array or AD array.

        Returns:
            Density [kg/m^3], of the same kind as ``p``.

        """
        return self.reference_density * af.exp(
            self.compressibility * (p - self.reference_pressure)
        )
