"""This module contains the entry point for running a production simulation.

The function :func:`reservoir_simulator` maps a permeability field to the pressure
and production history of the wells. It is intended as the forward model in a
history-matching or optimization loop, where the permeability is the control vector.

"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np

import porewell as pw

__all__ = ["reservoir_simulator"]

# Module-wide logger
logger = logging.getLogger(__name__)


def reservoir_simulator(
    x: np.ndarray,
    g: pw.Grid,
    wells: Sequence[pw.Well],
    rock: pw.CompressibleRock,
    total_time: float,
    dt: float,
    fluid: Optional[pw.SlightlyCompressibleFluid] = None,
    constants: Optional[pw.PhysicalConstants] = None,
    initial_pressure: Optional[np.ndarray] = None,
    solver_params: Optional[dict[str, Any]] = None,
) -> tuple[np.ndarray, pw.Trajectory, np.ndarray]:
    """Run a production simulation for a given permeability field.

    The reservoir is initially in hydrostatic equilibrium, with the reference pressure
    of the fluid at depth zero, unless an initial pressure is given. The bottom-hole
    pressure of each well is initialized to the pressure of its first perforated cell,
    and the surface rates to zero.

    Parameters:
        x: Control vector. The first ``g.num_cells`` entries are taken as the cell
            permeabilities [m^2], overriding those of ``rock``.
        g: Grid.
        wells: Wells. Their well indices are not recomputed from ``x``.
        rock: Rock; porosity and compressibility are used.
        total_time: Simulated time [s].
        dt: Time step size [s].
        fluid: Fluid. Defaults to :class:`SlightlyCompressibleFluid` defaults.
        constants: Physical constants.
        initial_pressure: Initial cell pressures. Defaults to the hydrostatic pressure.
        solver_params: Parameters for the :class:`NewtonSolver`.

    Raises:
        ConfigurationError: If the input is inconsistent. Raised before the first time
            step.
        ConvergenceError: If a time step does not converge.

    Returns:
        A 3-tuple containing

        - The output vector ``[permeability; final pressure; ones(num_cells);
          final production rates]``, with one final production rate per well in
          ``constants.rate_unit``.
        - The trajectory of states.
        - ``shape=(num_steps, num_wells)`` The production rate of each well after each
          time step, in ``constants.rate_unit``.

    """
    fluid = pw.SlightlyCompressibleFluid() if fluid is None else fluid
    constants = pw.PhysicalConstants() if constants is None else constants

    x = np.asarray(x, dtype=float).ravel()
    if x.size < g.num_cells:
        raise pw.ConfigurationError(
            f"Control vector of size {x.size} given for a grid with {g.num_cells} cells"
        )
    rock = rock.with_permeability(x[: g.num_cells])

    model = pw.ReservoirModel.from_grid(g, rock, wells, fluid, constants)

    if initial_pressure is None:
        initial_pressure = pw.hydrostatic_pressure(g.cell_depths, fluid, constants)
    initial_state = model.initial_state(initial_pressure)

    stepper = pw.TimeStepper(model, pw.NewtonSolver(solver_params))
    logger.info(
        f"Running {model} for {total_time / pw.DAY:.2f} days with time step "
        f"{dt / pw.DAY:.2f} days"
    )
    trajectory = stepper.run(initial_state, total_time, dt)

    q_o = trajectory.production_rates(constants.rate_unit)
    x_out = np.concatenate(
        (
            rock.permeability,
            trajectory.final.pressure,
            np.ones(g.num_cells),
            q_o[-1],
        )
    )
    return x_out, trajectory, q_o
