"""Tests of the hydrostatic initial pressure against the closed-form solution.

With ``rho(p) = rho_r exp(c (p - p_r))``, the solution of ``dp/dz = g rho(p)`` with
``p(z_0) = p_0`` is

    ``p(z) = p_r - ln(exp(-c (p_0 - p_r)) - c g rho_r (z - z_0)) / c``.

"""
import numpy as np
import pytest

import porewell as pw


def _closed_form(z, fluid, z0, p0, g=pw.GRAVITY_ACCELERATION):
    c, rho_r = fluid.compressibility, fluid.reference_density
    p_r = fluid.reference_pressure
    return p_r - np.log(np.exp(-c * (p0 - p_r)) - c * g * rho_r * (z - z0)) / c


def test_closed_form_default_reference(fluid):
    depths = np.linspace(0, 2500, 11)
    p = pw.hydrostatic_pressure(depths, fluid, rtol=1e-10, atol=1e-8)
    expected = _closed_form(depths, fluid, 0.0, fluid.reference_pressure)
    assert np.allclose(p, expected, rtol=1e-7)
    assert np.isclose(p[0], fluid.reference_pressure)


def test_closed_form_custom_reference(fluid):
    depths = np.array([1250.0, 1000.0, 1100.0])
    p = pw.hydrostatic_pressure(
        depths,
        fluid,
        reference_depth=1000.0,
        reference_pressure=150 * pw.BAR,
        rtol=1e-10,
        atol=1e-8,
    )
    expected = _closed_form(depths, fluid, 1000.0, 150 * pw.BAR)
    assert np.allclose(p, expected, rtol=1e-7)


def test_zero_gravity_is_constant(fluid):
    depths = np.array([10.0, 20.0])
    p = pw.hydrostatic_pressure(depths, fluid, pw.PhysicalConstants(gravity=0))
    assert np.allclose(p, fluid.reference_pressure)


def test_all_cells_at_reference_depth(fluid):
    p = pw.hydrostatic_pressure(np.zeros(4), fluid, reference_pressure=123.0)
    assert np.allclose(p, 123.0)


def test_cell_depths(grid, fluid):
    p = pw.hydrostatic_pressure(grid.cell_depths, fluid)
    assert p.shape == (grid.num_cells,)
    # Pressure increases with depth, by roughly rho g per meter
    top = grid.cell_index(0, 0, 0)
    bottom = grid.cell_index(0, 0, 2)
    dz = grid.cell_depths[bottom] - grid.cell_depths[top]
    expected = 850 * pw.GRAVITY_ACCELERATION * dz
    assert np.isclose(p[bottom] - p[top], expected, rtol=1e-2)


def test_depth_above_reference(fluid):
    with pytest.raises(pw.ConfigurationError):
        pw.hydrostatic_pressure(np.array([5.0, 10.0]), fluid, reference_depth=6.0)


def test_default_tolerances_on_reservoir_scale(fluid):
    # Over a few tens of meters the profile is close to linear, and the default
    # integrator tolerances are more than sufficient.
    depths = np.linspace(0, 50, 7)
    p = pw.hydrostatic_pressure(depths, fluid)
    expected = _closed_form(depths, fluid, 0.0, fluid.reference_pressure)
    assert np.allclose(p, expected, rtol=1e-8)
