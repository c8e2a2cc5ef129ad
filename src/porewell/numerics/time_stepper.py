"""Fixed-step time loop for the coupled reservoir-well system.

The time interval ``[0, total_time]`` is divided into ``floor(total_time / dt)``
steps of equal size. Each step is solved by Newton's method, starting from the state
of the previous step. A step that fails to converge aborts the whole run; there is no
step reduction.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

import porewell as pw

__all__ = ["StepSolution", "Trajectory", "TimeStepper"]

module_sections = ["numerics"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class StepSolution:
    """Snapshot of the unknowns after an accepted time step."""

    time: float
    state: pw.ReservoirState
    iterations: int = 0
    """Number of Newton iterations used for the step; zero for the initial state."""

    @property
    def pressure(self) -> np.ndarray:
        return self.state.pressure

    @property
    def bhp(self) -> np.ndarray:
        return self.state.bhp

    @property
    def surface_rate(self) -> np.ndarray:
        return self.state.surface_rate


@dataclass
class Trajectory:
    """Ordered sequence of step solutions. The first entry is the initial state."""

    steps: list[StepSolution] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, i: int) -> StepSolution:
        return self.steps[i]

    def __iter__(self):
        return iter(self.steps)

    def append(self, sol: StepSolution) -> None:
        self.steps.append(sol)

    @property
    def final(self) -> StepSolution:
        return self.steps[-1]

    @property
    def times(self) -> np.ndarray:
        return np.array([s.time for s in self.steps])

    def production_rates(self, unit: float = pw.METER**3 / pw.DAY) -> np.ndarray:
        """Production rate of each well after each time step.

        The production rate is the negated surface rate, so that a producing well has
        a positive rate.

        Parameters:
            unit: Unit of the returned rates, e.g. ``pw.METER**3 / pw.DAY``.

        Returns:
            ``shape=(num_steps, num_wells)`` Production rates. The initial state is not
            included.

        """
        nw = self.steps[0].surface_rate.size if self.steps else 0
        rates = [-s.surface_rate / unit for s in self.steps[1:]]
        if not rates:
            return np.zeros((0, nw))
        return np.vstack(rates)


class TimeStepper:
    """Advance a reservoir model in time with fixed time steps.

    Parameters:
        model: The coupled reservoir model.
        solver: Newton solver. Defaults to a solver with default parameters.

    """

    def __init__(
        self, model: pw.ReservoirModel, solver: Optional[pw.NewtonSolver] = None
    ) -> None:
        self.model = model
        self.solver = pw.NewtonSolver() if solver is None else solver

    @staticmethod
    def number_of_steps(total_time: float, dt: float) -> int:
        """Number of whole time steps of size ``dt`` in ``total_time``.

        Raises:
            ConfigurationError: If ``dt`` or ``total_time`` is not positive and finite,
                or if ``total_time`` is smaller than ``dt``.

        """
        if not (dt > 0 and np.isfinite(dt)):
            raise pw.ConfigurationError(
                f"Time step must be positive and finite, got {dt}"
            )
        if not (total_time > 0 and np.isfinite(total_time)):
            raise pw.ConfigurationError(
                f"Total time must be positive and finite, got {total_time}"
            )
        # Guard against round-off, e.g. total_time = 5 * dt computed in floating point.
        num_steps = int(np.floor(total_time / dt * (1 + 1e-10)))
        if num_steps < 1:
            raise pw.ConfigurationError(
                f"Total time {total_time} is smaller than the time step {dt}"
            )
        return num_steps

    @pw.time_logger(sections=module_sections)
    def run(
        self, initial_state: pw.ReservoirState, total_time: float, dt: float
    ) -> Trajectory:
        """Run the simulation.

        Parameters:
            initial_state: State at time zero.
            total_time: Length of the simulated time interval [s].
            dt: Time step size [s].

        Raises:
            ConfigurationError: If the time stepping parameters or the initial state
                are invalid. Raised before the first step.
            ConvergenceError: If a time step fails. No partial trajectory is returned.

        Returns:
            The trajectory, with ``num_steps + 1`` entries.

        """
        num_steps = self.number_of_steps(total_time, dt)
        if initial_state.pressure.size != self.model.num_cells:
            raise pw.ConfigurationError(
                f"Initial pressure of size {initial_state.pressure.size} given for "
                f"{self.model.num_cells} cells"
            )
        nw = self.model.well_model.num_wells
        if initial_state.bhp.size != nw or initial_state.surface_rate.size != nw:
            raise pw.ConfigurationError(
                f"Initial well state does not match the number of wells {nw}"
            )

        logger.info(f"Time stepping using {num_steps} steps of size {dt:.4e}")
        trajectory = Trajectory([StepSolution(0.0, initial_state)])
        state = initial_state

        for n in range(1, num_steps + 1):
            try:
                state, info = self.solver.solve(self.model, state, dt, step=n)
            except pw.ConvergenceError as err:
                logger.error(f"Time step {n} failed: {err}")
                raise
            trajectory.append(StepSolution(n * dt, state, info.iterations))
            logger.info(
                f"Time step {n} of {num_steps} at time {n * dt:.4e}: "
                f"{info.iterations} Newton iterations, residual norm "
                f"{info.residual_norm:.2e}"
            )

        return trajectory
