"""Automatic differentiation in forward mode."""
from . import functions
from .forward_mode import AdArray, apply, initAdArrays
from .utils import VariableBlocks, concatenate
