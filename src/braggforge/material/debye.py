"""Isotropic Debye model for atomic mean-squared displacements.

    msd = 3 hbar^2 / (M k_B Theta) * [1/4 + (T/Theta)^2 * Phi(Theta/T)]

with Phi(x) = integral_0^x t / (exp(t) - 1) dt. The result is the
displacement along one direction, in Angstrom^2.
"""

from __future__ import annotations

import math

import numpy as np
from scipy import integrate

from braggforge.constants import HBAR2_PER_AMU_KB
from braggforge.errors import ConfigurationError


def _bose_integrand(t: float) -> float:
    if t == 0.0:
        return 1.0
    return t / np.expm1(t)


def debye_integral(x: float) -> float:
    """Phi(x) = integral of t/(e^t - 1) from 0 to x."""
    if x <= 0.0:
        return 0.0
    # the integrand is below 1e-20 past t = 50
    value, _ = integrate.quad(_bose_integrand, 0.0, min(x, 50.0), limit=200)
    return float(value)


def debye_msd(debye_temperature: float, temperature: float, mass: float) -> float:
    """
    Mean-squared displacement of an atom in an isotropic Debye solid.

    Parameters
    ----------
    debye_temperature : float
        Debye temperature Theta (K).
    temperature : float
        Material temperature T (K).
    mass : float
        Atomic mass M (amu).

    Returns
    -------
    float
        Mean-squared displacement in Angstrom^2.
    """
    for name, value in (("debye_temperature", debye_temperature), ("temperature", temperature), ("mass", mass)):
        if not math.isfinite(value) or value <= 0.0:
            raise ConfigurationError(f"Debye model needs a positive {name}, got {value}")
    ratio = temperature / debye_temperature
    prefactor = 3.0 * HBAR2_PER_AMU_KB / (mass * debye_temperature)
    return prefactor * (0.25 + ratio * ratio * debye_integral(1.0 / ratio))


def zero_point_msd(debye_temperature: float, mass: float) -> float:
    """T -> 0 limit of :func:`debye_msd`."""
    return 0.75 * HBAR2_PER_AMU_KB / (mass * debye_temperature)


__all__ = ["debye_integral", "debye_msd", "zero_point_msd"]
