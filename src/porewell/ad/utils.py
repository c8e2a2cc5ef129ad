"""Utility functions for AD arrays: concatenation and bookkeeping of named blocks of
unknowns."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import scipy.sparse as sps

from porewell.ad.forward_mode import AdArray, initAdArrays

__all__ = ["concatenate", "VariableBlocks"]


def concatenate(variables: Sequence[Union[AdArray, np.ndarray]]) -> AdArray:
    """Stack a sequence of AD arrays into a single AD array.

    Values are concatenated, and the Jacobians are stacked vertically. Since all
    Jacobians share the same column layout (that of the unknowns), the result is the
    Jacobian of the stacked system. Ordinary arrays are accepted as well, they get a
    zero Jacobian.

    Parameters:
        variables: The arrays to stack. At least one must be an AD array.

    Returns:
        The stacked AD array.

    """
    num_dofs = None
    for var in variables:
        if isinstance(var, AdArray):
            num_dofs = var.num_dofs
            break
    if num_dofs is None:
        raise ValueError("At least one of the concatenated arrays must be an AdArray")

    vals, jacs = [], []
    for var in variables:
        if isinstance(var, AdArray):
            if var.num_dofs != num_dofs:
                raise ValueError("Concatenated AdArrays depend on different unknowns")
            vals.append(var.val)
            jacs.append(var.jac)
        else:
            val = np.atleast_1d(np.asarray(var, dtype=float))
            vals.append(val)
            jacs.append(sps.csr_matrix((val.size, num_dofs)))

    return AdArray(np.concatenate(vals), sps.vstack(jacs, format="csr"))


class VariableBlocks:
    """Named blocks of unknowns, laid out consecutively in the order of declaration.

    The class keeps track of where each block is located in the vector of unknowns, and
    thereby in the columns of the Jacobians of AD arrays initialized through it.

    Parameters:
        sizes: Mapping from block name to number of unknowns in the block. The order of
            the mapping defines the ordering of the unknowns.

    Example:

        >>> blocks = VariableBlocks({"pressure": 3, "bhp": 1})
        >>> blocks.slice("bhp")
        slice(3, 4, None)

    """

    def __init__(self, sizes: dict[str, int]) -> None:
        self.names: list[str] = list(sizes.keys())
        self.sizes: dict[str, int] = {k: int(v) for k, v in sizes.items()}
        offsets = np.cumsum([0] + [self.sizes[k] for k in self.names])
        self._slices: dict[str, slice] = {
            name: slice(int(offsets[i]), int(offsets[i + 1]))
            for i, name in enumerate(self.names)
        }
        self.num_dofs: int = int(offsets[-1])

    def __repr__(self) -> str:
        s = f"VariableBlocks with {self.num_dofs} unknowns in {len(self.names)} blocks:"
        for name in self.names:
            s += f"\n  {name}: {self.sizes[name]}"
        return s

    def slice(self, name: str) -> slice:
        """Position of a block in the vector of unknowns."""
        return self._slices[name]

    def initialize(self, values: dict[str, np.ndarray]) -> dict[str, AdArray]:
        """Create AD arrays for all blocks.

        Parameters:
            values: Initial values, one entry per block name.

        Returns:
            AD arrays keyed by block name.

        """
        arrays = []
        for name in self.names:
            val = np.atleast_1d(np.asarray(values[name], dtype=float))
            if val.size != self.sizes[name]:
                raise ValueError(
                    f"Block {name} has {self.sizes[name]} unknowns, "
                    f"got {val.size} values"
                )
            arrays.append(val)
        return dict(zip(self.names, initAdArrays(arrays)))

    def split(self, vector: np.ndarray) -> dict[str, np.ndarray]:
        """Split a vector of all unknowns (e.g. a Newton update) into blocks."""
        return {name: vector[self._slices[name]] for name in self.names}

    def jacobian_blocks(self, var: AdArray) -> dict[str, sps.csr_matrix]:
        """Partial derivatives of an AD array with respect to each block."""
        jac = var.jac.tocsc()
        return {name: jac[:, self._slices[name]].tocsr() for name in self.names}
