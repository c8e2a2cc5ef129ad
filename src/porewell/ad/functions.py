"""Elementwise functions acting on AD arrays and ordinary arrays alike.

The functions dispatch on the argument type: an :class:`AdArray` gets value and
Jacobian (chain rule), while anything else is handed to the numpy counterpart. This
lets physical laws be written once, e.g. ``rho_r * exp(c * (p - p_r))``, and be
evaluated on both unknowns and plain numbers.

"""
import numpy as np

from porewell.ad.forward_mode import AdArray

__all__ = ["exp", "log", "abs", "sign", "sum"]


def exp(var):
    if isinstance(var, AdArray):
        val = np.exp(var.val)
        der = var.diagvec_mul_jac(val)
        return AdArray(val, der)
    else:
        return np.exp(var)


def log(var):
    if not isinstance(var, AdArray):
        return np.log(var)

    val = np.log(var.val)
    der = var.diagvec_mul_jac(1 / var.val)
    return AdArray(val, der)


def sign(var):
    if not isinstance(var, AdArray):
        return np.sign(var)
    else:
        return np.sign(var.val)


def abs(var):
    if not isinstance(var, AdArray):
        return np.abs(var)
    else:
        val = np.abs(var.val)
        jac = var.diagvec_mul_jac(sign(var))
        return AdArray(val, jac)


def sum(var):
    """Sum of all entries. An AD array is reduced to an AD array of size 1."""
    if isinstance(var, AdArray):
        return var.sum()
    return np.sum(var)
