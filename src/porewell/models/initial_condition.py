"""Initial conditions.

The reservoir is initially at rest, with a hydrostatic pressure distribution given by

    ``dp/dz = g rho(p)``, ``p(z_ref) = p_ref``,

where z points downwards. Since the density depends on the pressure, the profile is
integrated numerically by an explicit Runge-Kutta (2,3) method, and the dense output
of the integrator is evaluated at the cell depths.

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy.integrate import solve_ivp

import porewell as pw

__all__ = ["hydrostatic_pressure"]

module_sections = ["models"]

logger = logging.getLogger(__name__)


@pw.time_logger(sections=module_sections)
def hydrostatic_pressure(
    depths: np.ndarray,
    fluid: pw.SlightlyCompressibleFluid,
    constants: Optional[pw.PhysicalConstants] = None,
    reference_depth: float = 0.0,
    reference_pressure: Optional[float] = None,
    rtol: float = 1e-3,
    atol: float = 1e-6,
) -> np.ndarray:
    """Hydrostatic pressure at given depths.

    Parameters:
        depths: Depths at which to evaluate the pressure, typically
            ``g.cell_depths``. All depths must be at or below the reference depth.
        fluid: Fluid, providing the density law.
        constants: Physical constants. Defaults to standard gravity.
        reference_depth: Depth at which the pressure is known.
        reference_pressure: Pressure at the reference depth. Defaults to the
            reference pressure of the fluid.
        rtol: Relative tolerance of the integrator.
        atol: Absolute tolerance of the integrator.

    Raises:
        ConfigurationError: If a depth is above the reference depth.
        RuntimeError: If the integration fails.

    Returns:
        Pressure at each depth.

    """
    constants = pw.PhysicalConstants() if constants is None else constants
    if reference_pressure is None:
        reference_pressure = fluid.reference_pressure
    depths = np.array(depths, dtype=float, ndmin=1)

    if np.any(depths < reference_depth):
        raise pw.ConfigurationError(
            f"Depths above the reference depth {reference_depth} are not supported"
        )
    max_depth = depths.max() if depths.size > 0 else reference_depth
    if max_depth == reference_depth:
        return reference_pressure * np.ones(depths.size)

    g = constants.gravity

    def dp_dz(z, p):
        return g * fluid.density(p)

    sol = solve_ivp(
        dp_dz,
        (reference_depth, max_depth),
        [reference_pressure],
        method="RK23",
        rtol=rtol,
        atol=atol,
        dense_output=True,
    )
    if not sol.success:
        raise RuntimeError(f"Integration of hydrostatic pressure failed: {sol.message}")

    logger.debug(
        f"Hydrostatic pressure integrated in {sol.t.size - 1} steps from depth "
        f"{reference_depth} to {max_depth}"
    )
    return sol.sol(depths)[0]
