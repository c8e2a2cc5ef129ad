"""Fixtures shared by the model, solver and time stepping tests.

The standard case is a small box with a horizontal producer along the y-axis in the
second layer, operated at a bottom-hole pressure of 100 bar.

"""
import numpy as np
import pytest

import porewell as pw


@pytest.fixture
def grid():
    return pw.CartGrid([4, 4, 3], [200, 200, 50])


@pytest.fixture
def rock(grid):
    rng = np.random.default_rng(42)
    perm = 30 * pw.MILLIDARCY * np.exp(0.5 * rng.normal(size=grid.num_cells))
    return pw.CompressibleRock(permeability=perm, porosity=0.3)


@pytest.fixture
def fluid():
    return pw.SlightlyCompressibleFluid()


@pytest.fixture
def producer(grid, rock):
    cells = grid.cell_index(0, np.arange(4), 1)
    return pw.well_along_axis(grid, rock, cells, direction="y")


@pytest.fixture
def model(grid, rock, producer, fluid):
    return pw.ReservoirModel.from_grid(grid, rock, [producer], fluid)


@pytest.fixture
def initial_state(grid, model, fluid):
    p_init = pw.hydrostatic_pressure(grid.cell_depths, fluid)
    return model.initial_state(p_init)
