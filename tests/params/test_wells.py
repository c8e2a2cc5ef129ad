"""Tests of well descriptions and the Peaceman well index."""
import numpy as np
import pytest

import porewell as pw


@pytest.fixture
def g():
    return pw.CartGrid([6, 6, 4], [200, 200, 50])


@pytest.fixture
def rock(g):
    return pw.CompressibleRock(permeability=30 * pw.MILLIDARCY * np.ones(g.num_cells))


def test_peaceman_vertical_well(g, rock):
    cells = g.cell_index(2, 3, np.arange(4))
    wi = pw.peaceman_well_index(g, rock.permeability, cells, direction="z")
    dx = dy = 200 / 6
    dz = 50 / 4
    re = 0.14 * np.sqrt(dx**2 + dy**2)
    expected = 2 * np.pi * 30 * pw.MILLIDARCY * dz / np.log(re / 0.1)
    assert np.allclose(wi, expected)


def test_peaceman_horizontal_well_with_skin(g, rock):
    cells = g.cell_index(0, np.arange(4), 1)
    wi = pw.peaceman_well_index(
        g, rock.permeability, cells, direction="y", radius=0.2, skin=1.5
    )
    dx, dy, dz = 200 / 6, 200 / 6, 50 / 4
    re = 0.14 * np.sqrt(dx**2 + dz**2)
    expected = 2 * np.pi * 30 * pw.MILLIDARCY * dy / (np.log(re / 0.2) + 1.5)
    assert wi.shape == (4,)
    assert np.allclose(wi, expected)


def test_peaceman_unknown_direction(g, rock):
    with pytest.raises(pw.ConfigurationError):
        pw.peaceman_well_index(g, rock.permeability, [0], direction="w")


def test_well_along_axis(g, rock):
    cells = g.cell_index(0, np.arange(4), 1)
    w = pw.well_along_axis(g, rock, cells, direction="y")
    assert w.num_perforations == 4
    # Horizontal well: all perforations at the reference depth
    assert np.allclose(w.depth_offset, 0)
    assert isinstance(w.control, pw.BhpControl)
    assert np.isclose(w.control.target, 100 * pw.BAR)


def test_well_reference_depth(g, rock):
    cells = g.cell_index(3, 3, np.arange(4))
    w = pw.well_along_axis(g, rock, cells, direction="z", reference_depth=0.0)
    assert np.allclose(w.depth_offset, g.cell_depths[cells])
    w = pw.well_along_axis(g, rock, cells, direction="z")
    assert np.allclose(w.depth_offset, [0, 12.5, 25, 37.5])


def test_well_outside_grid(g, rock):
    with pytest.raises(pw.ConfigurationError):
        pw.well_along_axis(g, rock, [0, g.num_cells])


def test_well_broadcasts_scalars():
    w = pw.Well(cells=[1, 2, 3], well_index=1e-12, depth_offset=0.0)
    assert w.well_index.shape == (3,)
    assert w.depth_offset.shape == (3,)


def test_well_mismatching_lengths():
    with pytest.raises(pw.ConfigurationError):
        pw.Well(cells=[1, 2, 3], well_index=[1e-12, 1e-12], depth_offset=0.0)
    with pytest.raises(pw.ConfigurationError):
        pw.Well(cells=[], well_index=[], depth_offset=[])
    with pytest.raises(pw.ConfigurationError):
        pw.Well(cells=[1], well_index=[-1.0], depth_offset=[0.0])


def test_check_grid(g):
    w = pw.Well(cells=[g.num_cells + 1], well_index=1.0, depth_offset=0.0)
    with pytest.raises(pw.ConfigurationError):
        w.check_grid(g)


def test_non_integer_cells():
    with pytest.raises(pw.ConfigurationError):
        pw.Well(cells=[1.7], well_index=1.0, depth_offset=0.0)
    with pytest.raises(pw.ConfigurationError):
        pw.Well(cells=[np.nan], well_index=1.0, depth_offset=0.0)
    # Integral floats are accepted
    w = pw.Well(cells=[2.0, 3.0], well_index=1.0, depth_offset=0.0)
    assert w.cells.dtype.kind == "i"
    assert np.all(w.cells == [2, 3])


def test_well_along_axis_non_integer_cells(g, rock):
    with pytest.raises(pw.ConfigurationError):
        pw.well_along_axis(g, rock, [0.5, 1.5])


def test_check_cells():
    w = pw.Well(cells=[0, 3], well_index=1.0, depth_offset=0.0)
    w.check_cells(4)
    with pytest.raises(pw.ConfigurationError):
        w.check_cells(3)
