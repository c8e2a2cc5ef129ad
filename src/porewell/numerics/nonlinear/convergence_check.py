"""Collection of objects related to convergence checking of the Newton iteration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

__all__ = ["ConvergenceStatus", "ConvergenceInfo"]


class ConvergenceStatus(Enum):
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"
    DIVERGED = "diverged"

    def __str__(self):
        return self.value

    @classmethod
    def from_str(cls, status_str: str):
        """Convert a string to a ConvergenceStatus."""
        return cls[status_str.upper()]

    def is_converged(self) -> bool:
        """Check if the status indicates convergence."""
        return self == ConvergenceStatus.CONVERGED

    def is_not_converged(self) -> bool:
        """Check if the status indicates not converged."""
        return self == ConvergenceStatus.NOT_CONVERGED

    def is_diverged(self) -> bool:
        """Check if the status indicates divergence."""
        return self == ConvergenceStatus.DIVERGED


@dataclass
class ConvergenceInfo:
    """Progress of the Newton iteration of one time step."""

    status: ConvergenceStatus = ConvergenceStatus.NOT_CONVERGED
    iterations: int = 0
    """Number of Newton iterations performed, i.e. number of linear solves."""
    residual_norms: list[float] = field(default_factory=list)
    """Euclidean norm of the residual at each evaluation."""

    @property
    def residual_norm(self) -> float:
        """The last residual norm, nan if no residual was evaluated."""
        return self.residual_norms[-1] if self.residual_norms else np.nan

    def check(self, residual_norm: float, tol: float) -> ConvergenceStatus:
        """Record a residual norm and update the status.

        A non-finite norm means divergence; a norm at or below the tolerance means
        convergence.

        """
        self.residual_norms.append(float(residual_norm))
        if not np.isfinite(residual_norm):
            self.status = ConvergenceStatus.DIVERGED
        elif residual_norm <= tol:
            self.status = ConvergenceStatus.CONVERGED
        else:
            self.status = ConvergenceStatus.NOT_CONVERGED
        return self.status
