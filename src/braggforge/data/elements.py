"""
Element data for species identification.

Provides element symbols, atomic numbers, standard atomic weights, and the
species-label parser used by the material loader.
"""

from __future__ import annotations

import re
from typing import Tuple

from braggforge.errors import ConfigurationError

# Symbols indexed by atomic number (index 0 is unused)
_SYMBOLS = (
    "n H He Li Be B C N O F Ne Na Mg Al Si P S Cl Ar K Ca "
    "Sc Ti V Cr Mn Fe Co Ni Cu Zn Ga Ge As Se Br Kr Rb Sr Y Zr "
    "Nb Mo Tc Ru Rh Pd Ag Cd In Sn Sb Te I Xe Cs Ba La Ce Pr Nd "
    "Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Lu Hf Ta W Re Os Ir Pt Au Hg "
    "Tl Pb Bi Po At Rn Fr Ra Ac Th Pa U Np Pu Am Cm Bk Cf Es Fm"
).split()

# Atomic number to element symbol mapping
ELEMENT_SYMBOLS = {z: symbol for z, symbol in enumerate(_SYMBOLS) if z > 0}

# Reverse mapping: symbol to atomic number
ATOMIC_NUMBERS = {v: k for k, v in ELEMENT_SYMBOLS.items()}

# Standard atomic weights (amu), indexed like _SYMBOLS
_WEIGHTS = (
    0.0,
    1.008, 4.0026, 6.94, 9.0122, 10.81, 12.011, 14.007, 15.999, 18.998, 20.180,
    22.990, 24.305, 26.982, 28.085, 30.974, 32.06, 35.45, 39.948, 39.098, 40.078,
    44.956, 47.867, 50.942, 51.996, 54.938, 55.845, 58.933, 58.693, 63.546, 65.38,
    69.723, 72.63, 74.922, 78.971, 79.904, 83.798, 85.468, 87.62, 88.906, 91.224,
    92.906, 95.95, 98.0, 101.07, 102.91, 106.42, 107.87, 112.41, 114.82, 118.71,
    121.76, 127.60, 126.90, 131.29, 132.91, 137.33, 138.91, 140.12, 140.91, 144.24,
    145.0, 150.36, 151.96, 157.25, 158.93, 162.50, 164.93, 167.26, 168.93, 173.05,
    174.97, 178.49, 180.95, 183.84, 186.21, 190.23, 192.22, 195.08, 196.97, 200.59,
    204.38, 207.2, 208.98, 209.0, 210.0, 222.0, 223.0, 226.0, 227.0, 232.04,
    231.04, 238.03, 237.0, 244.0, 243.0, 247.0, 247.0, 251.0, 252.0, 257.0,
)

ATOMIC_MASSES = {ELEMENT_SYMBOLS[z]: w for z, w in enumerate(_WEIGHTS) if z > 0}

# Hydrogen isotopes with their own symbols
_SPECIAL_LABELS = {"D": (1, 2), "T": (1, 3)}

_LABEL_RE = re.compile(r"^([A-Z][a-z]?)(?:-?(\d+))?$")


def element_from_z(z: int) -> str:
    """Get element symbol from atomic number."""
    return ELEMENT_SYMBOLS.get(z, f"Z{z}")


def z_from_element(symbol: str) -> int:
    """Get atomic number from element symbol."""
    return ATOMIC_NUMBERS.get(symbol, 0)


def atomic_mass(symbol: str) -> float:
    """Get standard atomic weight for element."""
    return ATOMIC_MASSES.get(symbol, 0.0)


def parse_species_label(label: str) -> Tuple[int, int]:
    """
    Parse a species label like 'Al', 'Al27', 'Al-27', 'D' or 'T'.

    Returns
    -------
    tuple
        (Z, A) with A = 0 for a natural element.

    Raises
    ------
    ConfigurationError
        If the label names no known element or has an impossible mass number.
    """
    text = str(label).strip()
    if text in _SPECIAL_LABELS:
        return _SPECIAL_LABELS[text]
    match = _LABEL_RE.match(text)
    if not match or match.group(1) not in ATOMIC_NUMBERS:
        raise ConfigurationError(f"Cannot parse species label: {label!r}")
    z = ATOMIC_NUMBERS[match.group(1)]
    a = int(match.group(2)) if match.group(2) else 0
    if match.group(2) and a < z:
        raise ConfigurationError(f"Mass number {a} is smaller than Z={z} in {label!r}")
    return z, a


def format_species(z: int, a: int = 0) -> str:
    """Format (Z, A) as a label, e.g. (13, 0) -> 'Al', (1, 2) -> 'H2'."""
    symbol = element_from_z(z)
    return symbol if a == 0 else f"{symbol}{a}"


__all__ = [
    "ELEMENT_SYMBOLS",
    "ATOMIC_NUMBERS",
    "ATOMIC_MASSES",
    "element_from_z",
    "z_from_element",
    "atomic_mass",
    "parse_species_label",
    "format_species",
]
