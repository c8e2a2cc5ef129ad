"""Solver statistics object for the Newton loop of a time-dependent simulation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from porewell.numerics.nonlinear.convergence_check import (
    ConvergenceInfo,
    ConvergenceStatus,
)

__all__ = ["SolverStatistics"]

logger = logging.getLogger(__name__)


@dataclass
class SolverStatistics:
    """Statistics object which keeps track of the Newton iterations of each time step.

    Example:

        After storing solver statistics to file, we can load the file and inspect the
        stored data, here for the first time step.

        >>> import json
        >>> with open("solver_statistics.json", "r") as f:
        >>>     history = json.load(f)
        >>> history["1"]["residual_norms"]

    """

    counter: int = field(default=0)
    """Number of time steps logged."""
    path: Optional[Path] = None
    """Path to save the statistics object to."""
    convergence_status: ConvergenceStatus = field(
        default=ConvergenceStatus.NOT_CONVERGED
    )
    """Convergence status of the latest time step."""
    num_iterations: list[int] = field(default_factory=list)
    """Number of Newton iterations of each time step."""
    residual_norms: list[list[float]] = field(default_factory=list)
    """Residual norms of the Newton iterations of each time step."""

    def log_step(self, info: ConvergenceInfo) -> None:
        """Record the outcome of the Newton iteration of one time step.

        Parameters:
            info: Convergence information of the time step.

        """
        self.counter += 1
        self.convergence_status = info.status
        self.num_iterations.append(info.iterations)
        self.residual_norms.append(list(info.residual_norms))

    def reset(self) -> None:
        """Reset the statistics object, and restart counting time steps."""
        self.counter = 0
        self.convergence_status = ConvergenceStatus.NOT_CONVERGED
        self.num_iterations.clear()
        self.residual_norms.clear()

    @property
    def total_iterations(self) -> int:
        return sum(self.num_iterations)

    def append_data(self, data: dict[str, dict]) -> dict[str, dict]:
        """Append the current statistics to the data dictionary.

        Parameters:
            data: Dictionary to append the statistics to.

        Returns:
            dict: Updated dictionary with global data and one entry per time step.

        """
        data["global"] = {
            "convergence_status": str(self.convergence_status),
            "latest_counter": self.counter,
            "num_iteration": self.num_iterations,
        }
        for i, (its, norms) in enumerate(
            zip(self.num_iterations, self.residual_norms), start=1
        ):
            data[str(i)] = {"num_iteration": its, "residual_norms": norms}
        return data

    def save(self) -> None:
        """Save the statistics object to a JSON file, if a path is set."""
        if self.path is None:
            return
        data = self.append_data({})
        with self.path.open("w") as file:
            json.dump(data, file, indent=4)
        logger.debug(f"Saved solver statistics to {self.path}")
