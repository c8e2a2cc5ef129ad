"""Depletion of a closed box by a horizontal producer.

A 10 x 10 x 10 grid covers a 200 m x 200 m x 50 m box with homogeneous rock of 30 mD
and porosity 0.3. A horizontal well with eight perforations along the y-axis in the
fifth layer produces at a bottom-hole pressure of 100 bar for one year, with weekly
time steps. The reservoir is initially in hydrostatic equilibrium.

Run as ``python horizontal_well.py``; the production rate of each week is printed.

"""
import logging

import numpy as np

import porewell as pw

logger = logging.getLogger(__name__)


def setup_case():
    g = pw.CartGrid([10, 10, 10], [200, 200, 50])
    rock = pw.CompressibleRock(
        permeability=30 * pw.MILLIDARCY * np.ones(g.num_cells), porosity=0.3
    )
    num_perf = 8
    cells = g.cell_index(1, np.arange(1, num_perf + 1), 4)
    well = pw.well_along_axis(
        g, rock, cells, direction="y", control=pw.BhpControl(100 * pw.BAR), name="P1"
    )
    return g, rock, well


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    g, rock, well = setup_case()

    total_time = 365 * pw.DAY
    dt = total_time / 52
    x_out, trajectory, q_o = pw.reservoir_simulator(
        rock.permeability, g, [well], rock, total_time, dt
    )

    for sol, q in zip(trajectory.steps[1:], q_o[:, 0]):
        print(f"Day {sol.time / pw.DAY:6.1f}: {q:8.2f} m^3/day")
    logger.info(
        f"Final mean pressure {trajectory.final.pressure.mean() / pw.BAR:.2f} bar, "
        f"output vector of size {x_out.size}"
    )


if __name__ == "__main__":
    main()
