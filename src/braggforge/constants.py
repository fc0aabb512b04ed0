"""
Physical constants and neutron kinematics.

Units follow the thermal-neutron conventions used throughout the package:
lengths in Angstrom, energies in eV, cross sections in barn, masses in amu.
"""

from __future__ import annotations

import math

import numpy as np

# h^2 / (2 m_n) in eV * Angstrom^2
EKIN_WLSQ = 0.081804209605330899

# CODATA 2018
HBAR = 1.054571817e-34          # J s
BOLTZMANN = 1.380649e-23        # J / K
AMU = 1.66053906660e-27         # kg
NEUTRON_MASS_AMU = 1.00866491595

# hbar^2 / (amu * k_B) expressed in Angstrom^2 * K
HBAR2_PER_AMU_KB = HBAR ** 2 / (AMU * BOLTZMANN) * 1e20

# 1 barn = 100 fm^2
FM2_TO_BARN = 0.01

ZERO_CELSIUS = 273.15


def wl2ekin(wavelength):
    """Neutron kinetic energy (eV) for a wavelength in Angstrom.

    Accepts scalars or numpy arrays. A zero wavelength maps to infinity.
    """
    if np.ndim(wavelength) == 0:
        wl = float(wavelength)
        return EKIN_WLSQ / (wl * wl) if wl != 0.0 else math.inf
    wl = np.asarray(wavelength, dtype=float)
    with np.errstate(divide="ignore"):
        return EKIN_WLSQ / (wl * wl)


def ekin2wl(energy):
    """Neutron wavelength (Angstrom) for a kinetic energy in eV."""
    if np.ndim(energy) == 0:
        e = float(energy)
        return math.sqrt(EKIN_WLSQ / e) if e > 0.0 else math.inf
    e = np.asarray(energy, dtype=float)
    with np.errstate(divide="ignore"):
        return np.sqrt(EKIN_WLSQ / e)


def bound_to_free_factor(mass_amu: float) -> float:
    """Return (M / (M + m_n))^2, the bound-to-free cross section ratio."""
    ratio = mass_amu / (mass_amu + NEUTRON_MASS_AMU)
    return ratio * ratio


__all__ = [
    "EKIN_WLSQ",
    "HBAR2_PER_AMU_KB",
    "NEUTRON_MASS_AMU",
    "FM2_TO_BARN",
    "ZERO_CELSIUS",
    "wl2ekin",
    "ekin2wl",
    "bound_to_free_factor",
]
