"""   porewell.

Root directory for the porewell package: a single-phase, slightly compressible flow
simulator with wells, solved by Newton's method on Jacobians obtained from automatic
differentiation. Contains the following sub-packages:

ad: Forward-mode automatic differentiation on sparse Jacobians.

grids: Grid container and Cartesian grid construction.

params: Rock, fluid and well descriptions, physical constants.

numerics: Discrete operators, linear and nonlinear solvers, time stepping.

models: Flow and well equations, initial conditions, run functions.

utils: Units, logging, exceptions and solver statistics.


isort:skip_file

"""

import os
import configparser
from pathlib import Path


__version__ = "0.3.0"

# Try to read the config file from the directory where python process was launched.
# A missing file leaves the configuration empty.
try:
    cwd = Path(os.getcwd())
    pth = cwd / Path("porewell.cfg")
    cfg = configparser.ConfigParser()
    cfg.read(pth)
    config = {
        section: dict(cfg[section]) for section in cfg.sections()
    }
except (OSError, configparser.Error):
    config = {}

# ------------------------------------
# Simplified namespaces. Classes and functions a user is exposed to have a shortcut
# here.

from porewell.utils.common_constants import *
from porewell.utils.logging import time_logger
from porewell.utils.exceptions import (
    ConfigurationError,
    ConvergenceError,
    SingularJacobianError,
)

from porewell import ad

# Grids
from porewell.grids.grid import Grid
from porewell.grids.structured import TensorGrid, CartGrid

# Parameters
from porewell.params.constants import PhysicalConstants
from porewell.params.rock import CompressibleRock, PoreVolume
from porewell.params.fluid import SlightlyCompressibleFluid
from porewell.params.wells import (
    Well,
    BhpControl,
    RateControl,
    peaceman_well_index,
    well_along_axis,
)

# Discretization
from porewell.numerics.fv.tpfa import DiscreteOperators
from porewell.numerics.linear_solvers import solve_linear_system
from porewell.numerics.nonlinear.convergence_check import (
    ConvergenceInfo,
    ConvergenceStatus,
)
from porewell.numerics.nonlinear.nonlinear_solvers import NewtonSolver
from porewell.utils.solver_statistics import SolverStatistics

# Models
from porewell.models.flow_equations import FlowEquations
from porewell.models.well_model import WellModel
from porewell.models.reservoir_model import ReservoirModel, ReservoirState
from porewell.models.initial_condition import hydrostatic_pressure
from porewell.numerics.time_stepper import StepSolution, TimeStepper, Trajectory
from porewell.models.run_models import reservoir_simulator
