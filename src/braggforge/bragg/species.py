"""Species matching and incoherent-contribution ranking.

One pass over the VDOS components of a material does two things:

* ranks every component, mixtures included, by its normalized incoherent
  contribution ``f/(1-f) * sigma_inc`` to find the species whose incoherent
  scattering is smallest (the redistribution candidate);
* finds the component whose species is the requested (Z, A), either a single
  isotope with that A or a natural element when A == 0.

The validator then requires exactly one match.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from braggforge.data.elements import format_species
from braggforge.errors import AmbiguousMatchError, NotFoundError
from braggforge.material.model import AtomSpecies, DynamicComponent, MaterialModel

logger = logging.getLogger(__name__)


def incoherent_contribution(fraction: float, incoherent_xs: float) -> float:
    """Normalized incoherent contribution ``f/(1-f) * sigma_inc``.

    Zero for ``f == 0``. A component making up the whole material
    (``f >= 1``) ranks as infinite.
    """
    if fraction == 0.0:
        return 0.0
    if fraction >= 1.0:
        return math.inf
    return fraction / (1.0 - fraction) * incoherent_xs


def matches_species(species: AtomSpecies, target_z: int, target_a: int) -> bool:
    """True if ``species`` is the requested isotope or natural element."""
    if not species.is_element:
        return False
    if species.z != target_z:
        return False
    return (species.is_single_isotope and species.a == target_a) or (
        species.is_natural_element and target_a == 0
    )


@dataclass
class RedistributionRanking:
    """Running minimum of the normalized incoherent contribution.

    ``candidate`` is the (Z, A) key of the first component holding the
    minimum, or None before any component has been seen.
    """

    minimum: Optional[float] = None
    candidate: Optional[Tuple[int, int]] = None

    def update(self, component: DynamicComponent) -> bool:
        """Fold one component into the ranking; True if it took the lead."""
        value = incoherent_contribution(component.fraction, component.species.incoherent_xs)
        if self.minimum is not None and not value < self.minimum:
            return False
        self.minimum = value
        self.candidate = component.species.key
        logger.debug(
            "Smallest incoherent contribution so far: %s (%g)",
            format_species(*self.candidate),
            value,
        )
        return True


@dataclass(frozen=True)
class CapturedSpecies:
    """Static data of a matching component."""

    species: AtomSpecies
    incoherent_xs: float
    coherent_xs: float
    free_xs: float
    fraction: float
    msd: float


@dataclass
class SpeciesScan:
    """Outcome of :func:`scan_components`: all matches plus the ranking."""

    matches: List[CapturedSpecies] = field(default_factory=list)
    ranking: RedistributionRanking = field(default_factory=RedistributionRanking)

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass(frozen=True)
class SpeciesMatch:
    """Validated per-isotope data for the requested species.

    Attributes
    ----------
    captured : CapturedSpecies
        Cross sections, fraction and displacement of the matched component.
    redistribute : bool
        True when the requested species is also the one with the smallest
        incoherent contribution.
    min_incoherent_contribution : float
        The ranking minimum over all VDOS components.
    """

    captured: CapturedSpecies
    redistribute: bool
    min_incoherent_contribution: float


def scan_components(model: MaterialModel, target_z: int, target_a: int) -> SpeciesScan:
    """Rank all VDOS components and capture those matching (Z, A)."""
    scan = SpeciesScan()
    for component in model.components:
        if not component.carries_vdos:
            continue
        scan.ranking.update(component)
        species = component.species
        if not matches_species(species, target_z, target_a):
            continue
        scan.matches.append(
            CapturedSpecies(
                species=species,
                incoherent_xs=species.incoherent_xs,
                coherent_xs=species.coherent_xs,
                free_xs=species.free_scattering_xs,
                fraction=component.fraction,
                msd=model.msd_for(component),
            )
        )
    return scan


def validate_scan(scan: SpeciesScan, target_z: int, target_a: int) -> SpeciesMatch:
    """Require exactly one match and decide the redistribution flag.

    Raises
    ------
    NotFoundError
        If no component matched.
    AmbiguousMatchError
        If more than one component matched.
    """
    target = format_species(target_z, target_a)
    if scan.match_count == 0:
        raise NotFoundError(f"The requested species {target} (Z={target_z}, A={target_a}) cannot be found in the material")
    if scan.match_count > 1:
        roles = ", ".join(match.species.display_name for match in scan.matches)
        raise AmbiguousMatchError(
            f"The requested species {target} (Z={target_z}, A={target_a}) has {scan.match_count} roles in the material: {roles}"
        )
    redistribute = scan.ranking.candidate == (target_z, target_a)
    logger.info(
        "Matched %s; redistribution %s",
        scan.matches[0].species.display_name,
        "enabled" if redistribute else "disabled",
    )
    return SpeciesMatch(
        captured=scan.matches[0],
        redistribute=redistribute,
        min_incoherent_contribution=scan.ranking.minimum,
    )


__all__ = [
    "incoherent_contribution",
    "matches_species",
    "RedistributionRanking",
    "CapturedSpecies",
    "SpeciesScan",
    "SpeciesMatch",
    "scan_components",
    "validate_scan",
]
