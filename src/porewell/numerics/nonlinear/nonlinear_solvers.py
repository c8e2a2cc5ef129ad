"""Newton's method for the nonlinear system of one implicit time step.

Each iteration assembles the residual ``F`` and its Jacobian ``J`` at the current
state by automatic differentiation, solves ``J dx = -F`` and adds the full update to
the state. The Jacobian is recomputed in every iteration.

The norm reported for an iteration is that of the residual at the state the iteration
started from, and the update of the iteration is applied also when that norm is below
the tolerance. A state that already solves the system is thus returned after a single
iteration, with an update of round-off size.

Parameters are taken from, in increasing order of precedence, the defaults below, the
``[nonlinear]`` section of ``porewell.cfg`` and the ``params`` given to the solver:

    max_iterations (int): Maximum number of iterations. Default 10.
    nl_convergence_tol (float): Tolerance for the Euclidean norm of the residual.
        Default 1e-3.
    min_pivot_ratio (float): See
        :func:`~porewell.numerics.linear_solvers.solve_linear_system`. Default 0,
        that is, only exactly singular Jacobians are detected.
    solver_statistics_file (str): If given, solver statistics are written to this
        JSON file after each time step.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

import porewell as pw
from porewell.numerics.linear_solvers import solve_linear_system
from porewell.numerics.nonlinear.convergence_check import (
    ConvergenceInfo,
    ConvergenceStatus,
)
from porewell.utils.solver_statistics import SolverStatistics

__all__ = ["NewtonSolver"]

module_sections = ["numerics"]

logger = logging.getLogger(__name__)


class NewtonSolver:
    """Newton-Raphson solver for a :class:`~porewell.models.reservoir_model.
    ReservoirModel`.

    Parameters:
        params: Solver parameters, see the module documentation.

    """

    def __init__(self, params: Optional[dict[str, Any]] = None) -> None:
        default_options: dict[str, Any] = {
            "max_iterations": 10,
            "nl_convergence_tol": 1e-3,
            "min_pivot_ratio": 0.0,
            "solver_statistics_file": None,
        }
        default_options.update(pw.config.get("nonlinear", {}))
        default_options.update(params or {})

        self.params = default_options
        """Dictionary of parameters for the nonlinear solver."""
        self.max_iterations = int(self.params["max_iterations"])
        self.tol = float(self.params["nl_convergence_tol"])
        self.min_pivot_ratio = float(self.params["min_pivot_ratio"])

        path = self.params["solver_statistics_file"]
        self.statistics = SolverStatistics(path=None if path is None else Path(path))
        """Statistics of all time steps solved by this solver."""

    def __repr__(self) -> str:
        return (
            f"Newton solver with tolerance {self.tol:.1e} and at most "
            f"{self.max_iterations} iterations"
        )

    def iteration(
        self,
        model: pw.ReservoirModel,
        state: pw.ReservoirState,
        p0: np.ndarray,
        dt: float,
    ) -> tuple[pw.ReservoirState, float]:
        """Perform one Newton iteration.

        Parameters:
            model: The coupled reservoir model.
            state: State at which to linearize.
            p0: Cell pressures at the previous time level.
            dt: Time step size.

        Raises:
            SingularJacobianError: If the linear system cannot be solved. The error
                carries the norm of the residual at ``state``.

        Returns:
            A 2-tuple containing the updated state and the norm of the residual at
            ``state``.

        """
        eq = model.assemble(state, p0, dt)
        residual_norm = float(np.linalg.norm(eq.val))
        try:
            dx = solve_linear_system(eq.full_jac(), -eq.val, self.min_pivot_ratio)
        except pw.SingularJacobianError as err:
            raise pw.SingularJacobianError(
                err.args[0], residual_norm=residual_norm
            ) from err
        return state.increment(model.variables, dx), residual_norm

    @pw.time_logger(sections=module_sections)
    def solve(
        self,
        model: pw.ReservoirModel,
        state: pw.ReservoirState,
        dt: float,
        step: Optional[int] = None,
        p0: Optional[np.ndarray] = None,
    ) -> tuple[pw.ReservoirState, ConvergenceInfo]:
        """Solve one backward Euler time step.

        Parameters:
            model: The coupled reservoir model.
            state: State at the previous time level, also used as the initial guess.
            dt: Time step size.
            step: Index of the time step, for error messages.
            p0: Cell pressures at the previous time level. Defaults to the pressure
                of ``state``.

        Raises:
            ConvergenceError: If the iteration does not converge within the maximum
                number of iterations, or the residual is not finite. A maximum of zero
                iterations raises before the residual is evaluated.
            SingularJacobianError: If a linear system cannot be solved.

        Returns:
            A 2-tuple containing the state at the new time level and information on
            the iteration.

        """
        if p0 is None:
            p0 = state.pressure
        info = ConvergenceInfo()

        while True:
            if info.iterations >= self.max_iterations:
                info.status = ConvergenceStatus.DIVERGED
                self._log_statistics(info)
                raise pw.ConvergenceError(
                    "Newton iteration reached the maximum number of iterations",
                    step=step,
                    residual_norm=info.residual_norm,
                    iterations=info.iterations,
                )
            try:
                new_state, residual_norm = self.iteration(model, state, p0, dt)
            except pw.SingularJacobianError as err:
                info.residual_norms.append(err.residual_norm)
                info.status = ConvergenceStatus.DIVERGED
                self._log_statistics(info)
                raise pw.SingularJacobianError(
                    err.args[0],
                    step=step,
                    residual_norm=err.residual_norm,
                    iterations=info.iterations,
                ) from err

            info.iterations += 1
            status = info.check(residual_norm, self.tol)
            logger.debug(
                f"Newton iteration {info.iterations}: residual norm "
                f"{residual_norm:.4e}"
            )

            if status.is_diverged():
                self._log_statistics(info)
                raise pw.ConvergenceError(
                    "Residual is not finite",
                    step=step,
                    residual_norm=residual_norm,
                    iterations=info.iterations,
                )
            state = new_state
            if status.is_converged():
                self._log_statistics(info)
                return state, info

    def _log_statistics(self, info: ConvergenceInfo) -> None:
        self.statistics.log_step(info)
        self.statistics.save()
