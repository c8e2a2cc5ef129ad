"""Exceptions raised by porewell.

Two kinds of failure are distinguished. A :class:`ConfigurationError` is raised
while a simulation is set up, before the first time step, when input data is
inconsistent. A :class:`ConvergenceError` is raised during time stepping when the
nonlinear solver fails; it is fatal for the whole run.

"""

from __future__ import annotations

from typing import Optional

__all__ = ["ConfigurationError", "ConvergenceError", "SingularJacobianError"]


class ConfigurationError(ValueError):
    """Malformed simulation input.

    Examples are a permeability vector that is shorter than the number of cells, a
    well perforating a cell that does not exist, or a non-positive time step.

    """


class ConvergenceError(RuntimeError):
    """The Newton iteration did not converge within the allowed number of iterations.

    Parameters:
        message: Description of the failure.
        step: Index of the time step that failed (1 for the first step), if known.
        residual_norm: Euclidean norm of the last residual evaluated.
        iterations: Number of Newton iterations performed.

    """

    def __init__(
        self,
        message: str,
        step: Optional[int] = None,
        residual_norm: float = float("nan"),
        iterations: int = 0,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.residual_norm = residual_norm
        self.iterations = iterations

    def __str__(self) -> str:
        details = [
            f"{self.iterations} iterations",
            f"residual norm {self.residual_norm:.4e}",
        ]
        if self.step is not None:
            details.insert(0, f"time step {self.step}")
        return f"{super().__str__()} ({', '.join(details)})"


class SingularJacobianError(ConvergenceError):
    """The Jacobian of the nonlinear system is singular or numerically unusable."""
