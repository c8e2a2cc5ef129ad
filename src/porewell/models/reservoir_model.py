"""The coupled reservoir and well system solved in each time step.

The unknowns are laid out in three blocks, in this order:

    ``pressure`` (one per cell), ``bhp`` (one per well), ``surface_rate`` (one per well).

The equations are ordered the same way: the mass balance of each cell with the well
sources subtracted, the rate equation of each well and the control equation of each
well. The Jacobian of the concatenated residual is thus square.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

import porewell as pw
from porewell.ad.forward_mode import AdArray
from porewell.ad.utils import VariableBlocks, concatenate

__all__ = ["ReservoirState", "ReservoirModel"]

module_sections = ["models", "assembly"]

logger = logging.getLogger(__name__)

VARIABLE_NAMES = ("pressure", "bhp", "surface_rate")


@dataclass(frozen=True, kw_only=True, eq=False)
class ReservoirState:
    """Values of all unknowns at one time level.

    States are not modified; a Newton update creates a new state, see
    :meth:`increment`.

    """

    pressure: np.ndarray
    """Cell pressures [Pa]."""
    bhp: np.ndarray
    """Bottom-hole pressure of each well [Pa]."""
    surface_rate: np.ndarray
    """Surface volume rate of each well [m^3/s], negative for production."""

    def __post_init__(self) -> None:
        for name in VARIABLE_NAMES:
            value = np.array(getattr(self, name), dtype=float, ndmin=1)
            object.__setattr__(self, name, value)

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in VARIABLE_NAMES}

    def to_vector(self) -> np.ndarray:
        """All unknowns in a single vector, ordered by block."""
        return np.concatenate([getattr(self, name) for name in VARIABLE_NAMES])

    def increment(self, blocks: VariableBlocks, dx: np.ndarray) -> ReservoirState:
        """A new state with the update ``dx`` added.

        Parameters:
            blocks: Layout of the unknowns in ``dx``.
            dx: Update of all unknowns.

        """
        update = blocks.split(dx)
        return ReservoirState(
            **{name: getattr(self, name) + update[name] for name in VARIABLE_NAMES}
        )


class ReservoirModel:
    """Residual and Jacobian of the coupled reservoir-well system.

    Parameters:
        flow: Flow equations of the reservoir.
        well_model: Well equations. The well model must refer to the same number of
            cells as the flow equations.

    """

    def __init__(self, flow: pw.FlowEquations, well_model: pw.WellModel) -> None:
        self.flow = flow
        self.well_model = well_model
        self.num_cells: int = flow.operators.num_cells
        if well_model.num_cells != self.num_cells:
            raise pw.ConfigurationError(
                f"Well model on {well_model.num_cells} cells, reservoir has "
                f"{self.num_cells} cells"
            )
        nw = well_model.num_wells
        self.variables = VariableBlocks(
            {"pressure": self.num_cells, "bhp": nw, "surface_rate": nw}
        )
        """Layout of the unknowns."""

    @classmethod
    def from_grid(
        cls,
        g: pw.Grid,
        rock: pw.CompressibleRock,
        wells: Sequence[pw.Well],
        fluid: Optional[pw.SlightlyCompressibleFluid] = None,
        constants: Optional[pw.PhysicalConstants] = None,
    ) -> ReservoirModel:
        """Discretize the flow equations on a grid and couple them to the wells.

        Parameters:
            g: Grid.
            rock: Rock, covering all cells of the grid.
            wells: Wells. May be empty.
            fluid: Fluid. Defaults to :class:`SlightlyCompressibleFluid` defaults.
            constants: Physical constants. Defaults to standard gravity.

        Raises:
            ConfigurationError: If the rock or the wells do not fit the grid.

        """
        fluid = pw.SlightlyCompressibleFluid() if fluid is None else fluid
        constants = pw.PhysicalConstants() if constants is None else constants

        rock.check_grid(g)
        for w in wells:
            w.check_grid(g)

        operators = pw.DiscreteOperators.from_grid(g, rock.permeability, constants)
        flow = pw.FlowEquations(operators, rock.pore_volume_law(g), fluid, constants)
        well_model = pw.WellModel(wells, g.num_cells, fluid, constants)
        logger.debug(f"Set up reservoir model: {operators}, {well_model}")
        return cls(flow, well_model)

    def __repr__(self) -> str:
        return (
            f"Reservoir model with {self.num_cells} cells and "
            f"{self.well_model.num_wells} wells, {self.variables.num_dofs} unknowns"
        )

    @property
    def num_dofs(self) -> int:
        return self.variables.num_dofs

    def initial_state(self, initial_pressure: np.ndarray) -> ReservoirState:
        """State at the start of a simulation.

        The bottom-hole pressure of each well is set to the initial pressure of its
        first perforated cell, and all surface rates to zero.

        Raises:
            ConfigurationError: If the initial pressure does not have one value per
                cell.

        """
        p = np.array(initial_pressure, dtype=float, ndmin=1)
        if p.shape != (self.num_cells,):
            raise pw.ConfigurationError(
                f"Initial pressure of size {p.size} given for {self.num_cells} cells"
            )
        wells = self.well_model.wells
        bhp = np.array([p[w.cells[0]] for w in wells], dtype=float)
        return ReservoirState(pressure=p, bhp=bhp, surface_rate=np.zeros(len(wells)))

    def equations(
        self,
        p: Union[AdArray, np.ndarray],
        bhp: Union[AdArray, np.ndarray],
        surface_rate: Union[AdArray, np.ndarray],
        p0: np.ndarray,
        dt: float,
    ) -> dict[str, Union[AdArray, np.ndarray]]:
        """Residuals of the three groups of equations.

        Parameters:
            p: Cell pressures at the new time level.
            bhp: Bottom-hole pressures at the new time level.
            surface_rate: Surface rates at the new time level.
            p0: Cell pressures at the previous time level.
            dt: Time step size.

        Returns:
            Dictionary with keys ``"mass_balance"``, ``"rate"`` and ``"control"``.
            The well equations are left out if there are no wells.

        """
        eqs = {"mass_balance": self.flow.pressure_equation(p, p0, dt)}
        if self.well_model.num_wells == 0:
            return eqs

        eqs["mass_balance"] = eqs["mass_balance"] - self.well_model.source(p, bhp)
        eqs["rate"] = self.well_model.rate_equation(p, bhp, surface_rate)
        eqs["control"] = self.well_model.control_equation(bhp, surface_rate)
        return eqs

    @pw.time_logger(sections=module_sections)
    def assemble(self, state: ReservoirState, p0: np.ndarray, dt: float) -> AdArray:
        """Residual and Jacobian of the full system at a state.

        Parameters:
            state: State at which to linearize.
            p0: Cell pressures at the previous time level.
            dt: Time step size.

        Returns:
            The concatenated residual, with the Jacobian with respect to all unknowns.

        """
        x = self.variables.initialize(state.as_dict())
        eqs = self.equations(x["pressure"], x["bhp"], x["surface_rate"], p0, dt)
        return concatenate(list(eqs.values()))

    def residual(self, state: ReservoirState, p0: np.ndarray, dt: float) -> np.ndarray:
        """The concatenated residual at a state, without derivatives."""
        eqs = self.equations(state.pressure, state.bhp, state.surface_rate, p0, dt)
        return np.concatenate([np.atleast_1d(v) for v in eqs.values()])

    def surface_rates(self, state: ReservoirState) -> np.ndarray:
        """Well surface rates computed from the pressures of a state."""
        return self.well_model.surface_rates(state.pressure, state.bhp)
