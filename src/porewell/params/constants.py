"""Physical constants entering the discretization of the flow and well equations."""

from __future__ import annotations

from dataclasses import dataclass

import porewell as pw

__all__ = ["PhysicalConstants"]


@dataclass(frozen=True, kw_only=True)
class PhysicalConstants:
    """Constants that are not properties of a particular rock or fluid.

    The object is passed explicitly to the operator builder, the flow equations and the
    well model, so that e.g. a gravity-free problem is set up by
    ``PhysicalConstants(gravity=0)``.

    """

    gravity: float = pw.GRAVITY_ACCELERATION
    """Magnitude of the gravitational acceleration [m/s^2]. Gravity acts along the
    positive z-axis (downwards)."""

    rate_unit: float = pw.METER**3 / pw.DAY
    """Unit in which volumetric production rates are reported. The SI value of a
    rate is divided by this number."""
