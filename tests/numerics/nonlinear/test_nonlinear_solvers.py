"""Tests of the Newton solver: convergence, failure modes and parameters."""
import numpy as np
import pytest

import porewell as pw

DT = 7 * pw.DAY


def test_default_parameters():
    solver = pw.NewtonSolver()
    assert solver.max_iterations == 10
    assert np.isclose(solver.tol, 1e-3)


def test_parameters_from_config_and_params(monkeypatch):
    monkeypatch.setitem(
        pw.config, "nonlinear", {"max_iterations": "4", "nl_convergence_tol": "1e-5"}
    )
    solver = pw.NewtonSolver()
    assert solver.max_iterations == 4
    assert np.isclose(solver.tol, 1e-5)
    # Parameters given to the solver take precedence over the configuration file
    solver = pw.NewtonSolver({"max_iterations": 6})
    assert solver.max_iterations == 6
    assert np.isclose(solver.tol, 1e-5)


def test_converges(model, initial_state):
    solver = pw.NewtonSolver()
    state, info = solver.solve(model, initial_state, DT, step=1)
    assert info.status.is_converged()
    assert 1 <= info.iterations <= solver.max_iterations
    assert info.residual_norm <= solver.tol
    # The bhp control is linear, and is satisfied after the first iteration.
    assert np.isclose(state.bhp[0], 100 * pw.BAR)
    # Producer: flow from the reservoir into the well
    assert state.surface_rate[0] < 0
    # The residual decreases monotonically in the last iterations
    norms = info.residual_norms
    assert norms[-1] < norms[-2]


def test_fixed_point(model, initial_state):
    solver = pw.NewtonSolver()
    state, _ = solver.solve(model, initial_state, DT)
    p0 = initial_state.pressure

    again, info = solver.solve(model, state, DT, p0=p0)
    assert info.iterations == 1
    assert info.residual_norms[0] <= solver.tol
    assert np.allclose(again.pressure, state.pressure, rtol=1e-6)
    assert np.allclose(again.bhp, state.bhp, rtol=1e-6)
    assert np.allclose(again.surface_rate, state.surface_rate, rtol=1e-4)


def test_iteration_is_pure(model, initial_state):
    solver = pw.NewtonSolver()
    before = initial_state.to_vector().copy()
    new_state, norm = solver.iteration(
        model, initial_state, initial_state.pressure, DT
    )
    assert new_state is not initial_state
    assert np.all(initial_state.to_vector() == before)
    assert norm > solver.tol


def test_zero_iterations_raises(model, initial_state):
    solver = pw.NewtonSolver({"max_iterations": 0})
    before = initial_state.to_vector().copy()
    with pytest.raises(pw.ConvergenceError) as excinfo:
        solver.solve(model, initial_state, DT, step=3)
    assert excinfo.value.iterations == 0
    assert excinfo.value.step == 3
    assert np.isnan(excinfo.value.residual_norm)
    assert np.all(initial_state.to_vector() == before)


def test_iteration_cap(model, initial_state):
    solver = pw.NewtonSolver({"max_iterations": 1})
    with pytest.raises(pw.ConvergenceError) as excinfo:
        solver.solve(model, initial_state, DT, step=2)
    err = excinfo.value
    assert err.iterations == 1
    assert err.step == 2
    assert err.residual_norm > solver.tol
    assert "time step 2" in str(err)
    assert solver.statistics.convergence_status.is_diverged()


def test_singular_jacobian(grid, rock, fluid, initial_state):
    # Without connection to the reservoir, the bhp of a rate controlled well is
    # undetermined.
    well = pw.Well(
        cells=[0],
        well_index=0.0,
        depth_offset=0.0,
        control=pw.RateControl(-1e-3),
    )
    model = pw.ReservoirModel.from_grid(grid, rock, [well], fluid)
    state = model.initial_state(initial_state.pressure)
    with pytest.raises(pw.SingularJacobianError) as excinfo:
        pw.NewtonSolver().solve(model, state, DT, step=1)
    assert excinfo.value.step == 1
    assert excinfo.value.iterations == 0
    # The residual was evaluated before the failed linear solve
    assert np.isfinite(excinfo.value.residual_norm)
    assert excinfo.value.residual_norm > 0


def test_statistics(model, initial_state, tmp_path):
    path = tmp_path / "statistics.json"
    solver = pw.NewtonSolver({"solver_statistics_file": str(path)})
    state, info = solver.solve(model, initial_state, DT)
    solver.solve(model, state, DT)
    stats = solver.statistics
    assert stats.counter == 2
    assert stats.num_iterations[0] == info.iterations
    assert stats.residual_norms[0] == info.residual_norms
    assert stats.convergence_status.is_converged()
    assert path.exists()
