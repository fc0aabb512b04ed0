"""Unit-cell geometry and diffraction-plane generation.

Planes are enumerated from Miller indices in the box ``|h| <= a/dcutoff``
(likewise for k and l), which contains every reflection with
``d >= dcutoff``. Reflections with equal d-spacing and equal F^2 are merged
into one family whose multiplicity is the number of merged members, so a
family and its Friedel mates count together.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from braggforge.constants import FM2_TO_BARN
from braggforge.errors import ConfigurationError
from braggforge.material.model import DiffractionPlane

logger = logging.getLogger(__name__)

# Relative tolerance for merging reflections into one family
FAMILY_RTOL = 1e-7


@dataclass(frozen=True)
class AtomSite:
    """Atoms of one kind in the unit cell.

    Attributes
    ----------
    scattering_length : float
        Bound coherent scattering length (fm).
    msd : float
        Mean-squared displacement (Angstrom^2) for the Debye-Waller factor.
    positions : sequence of (x, y, z)
        Fractional coordinates.
    """

    scattering_length: float
    msd: float
    positions: Sequence[Sequence[float]]


def _check_cell(lengths: Sequence[float], angles: Sequence[float]) -> None:
    if len(lengths) != 3 or len(angles) != 3:
        raise ConfigurationError("Unit cell needs three lengths and three angles")
    if any(not (length > 0.0) for length in lengths):
        raise ConfigurationError(f"Cell lengths must be positive, got {list(lengths)}")
    if any(not (0.0 < angle < 180.0) for angle in angles):
        raise ConfigurationError(f"Cell angles must lie in (0, 180) degrees, got {list(angles)}")


def metric_tensor(lengths: Sequence[float], angles: Sequence[float]) -> np.ndarray:
    """Direct-space metric tensor G (Angstrom^2)."""
    _check_cell(lengths, angles)
    a, b, c = (float(x) for x in lengths)
    cos_alpha, cos_beta, cos_gamma = (math.cos(math.radians(x)) for x in angles)
    return np.array([
        [a * a, a * b * cos_gamma, a * c * cos_beta],
        [a * b * cos_gamma, b * b, b * c * cos_alpha],
        [a * c * cos_beta, b * c * cos_alpha, c * c],
    ])


def cell_volume(lengths: Sequence[float], angles: Sequence[float]) -> float:
    """Unit cell volume (Angstrom^3)."""
    det = float(np.linalg.det(metric_tensor(lengths, angles)))
    if det <= 0.0:
        raise ConfigurationError(f"Degenerate unit cell: lengths={list(lengths)}, angles={list(angles)}")
    return math.sqrt(det)


def reciprocal_metric(lengths: Sequence[float], angles: Sequence[float]) -> np.ndarray:
    """Reciprocal metric tensor G* = G^-1, so that 1/d^2 = h G* h."""
    cell_volume(lengths, angles)
    return np.linalg.inv(metric_tensor(lengths, angles))


def d_spacing(hkl: Sequence[int], lengths: Sequence[float], angles: Sequence[float]) -> float:
    """Interplanar spacing of one (hkl) in Angstrom."""
    h = np.asarray(hkl, dtype=float)
    inv_d2 = float(h @ reciprocal_metric(lengths, angles) @ h)
    if inv_d2 <= 0.0:
        raise ConfigurationError(f"Miller indices {tuple(hkl)} do not define a plane")
    return 1.0 / math.sqrt(inv_d2)


def _miller_grid(lengths: Sequence[float], dcutoff: float) -> np.ndarray:
    limits = [int(math.floor(length / dcutoff)) for length in lengths]
    axes = [np.arange(-n, n + 1) for n in limits]
    grid = np.stack(np.meshgrid(*axes, indexing="ij"), axis=-1).reshape(-1, 3)
    return grid[np.any(grid != 0, axis=1)]


def _group_families(d: np.ndarray, fsq: np.ndarray) -> List[DiffractionPlane]:
    order = np.lexsort((np.round(fsq, 10), -np.round(d, 10)))
    planes: List[DiffractionPlane] = []
    start = 0
    for i in range(1, len(order) + 1):
        if i < len(order):
            first, current = order[start], order[i]
            same_d = math.isclose(d[current], d[first], rel_tol=FAMILY_RTOL)
            same_f = math.isclose(fsq[current], fsq[first], rel_tol=FAMILY_RTOL, abs_tol=1e-12)
            if same_d and same_f:
                continue
        members = order[start:i]
        planes.append(
            DiffractionPlane(
                d_spacing=float(np.mean(d[members])),
                fsquared=float(np.mean(fsq[members])),
                multiplicity=int(len(members)),
            )
        )
        start = i
    return planes


def generate_planes(
    lengths: Sequence[float],
    angles: Sequence[float],
    atoms: Sequence[AtomSite],
    dcutoff: float,
    dcutoffup: float = math.inf,
    fsquarecut: float = 0.0,
) -> List[DiffractionPlane]:
    """
    Enumerate the diffraction planes of a unit cell.

    Parameters
    ----------
    lengths, angles : sequence of float
        Cell lengths (Angstrom) and angles (degrees).
    atoms : sequence of AtomSite
        Scattering length, displacement and positions of each atom kind.
    dcutoff, dcutoffup : float
        Keep planes with dcutoff <= d <= dcutoffup.
    fsquarecut : float
        Drop planes with F^2 <= fsquarecut (barn).

    Returns
    -------
    list of DiffractionPlane
        Plane families sorted by decreasing d-spacing.
    """
    if not dcutoff > 0.0:
        raise ConfigurationError(f"dcutoff must be positive, got {dcutoff}")
    gstar = reciprocal_metric(lengths, angles)
    hkl = _miller_grid(lengths, dcutoff)
    inv_d2 = np.einsum("ij,jk,ik->i", hkl, gstar, hkl)
    d = 1.0 / np.sqrt(inv_d2)
    keep = (d >= dcutoff) & (d <= dcutoffup)
    hkl, d = hkl[keep], d[keep]
    if len(d) == 0:
        logger.warning("No reflections with %g <= d <= %g Aa", dcutoff, dcutoffup)
        return []

    q2 = (2.0 * np.pi / d) ** 2
    amplitude = np.zeros(len(d), dtype=complex)
    for site in atoms:
        positions = np.asarray(site.positions, dtype=float).reshape(-1, 3)
        phases = np.exp(2j * np.pi * (hkl @ positions.T)).sum(axis=1)
        amplitude += site.scattering_length * np.exp(-0.5 * site.msd * q2) * phases
    fsq = np.abs(amplitude) ** 2 * FM2_TO_BARN

    strong = fsq > fsquarecut
    logger.debug("Dropped %d of %d reflections with F^2 <= %g barn", int(np.sum(~strong)), len(fsq), fsquarecut)
    planes = _group_families(d[strong], fsq[strong])
    logger.debug("Generated %d plane families down to d=%g Aa", len(planes), dcutoff)
    return planes


__all__ = [
    "AtomSite",
    "metric_tensor",
    "cell_volume",
    "reciprocal_metric",
    "d_spacing",
    "generate_planes",
]
