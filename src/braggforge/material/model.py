"""Material model consumed by the Bragg-edge extraction.

The model is built fresh for one configuration and one temperature and holds
everything the extraction reads: the dynamic scattering components with their
atomic species, the per-atom mean-squared displacements, the unit cell, and
the diffraction-plane list.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from braggforge.data.elements import format_species
from braggforge.errors import ConfigurationError


@dataclass(frozen=True)
class AtomSpecies:
    """Identity and static cross sections of an element, isotope or mixture.

    Attributes
    ----------
    z : int
        Atomic number (0 for a mixture of several elements).
    a : int
        Mass number, 0 for a natural element or a mixture.
    is_element : bool
        True when all members share one atomic number.
    is_single_isotope : bool
        True when ``a`` names one specific isotope.
    is_natural_element : bool
        True for an element with its natural isotopic composition.
    incoherent_xs, coherent_xs, free_scattering_xs : float
        Bound incoherent, bound coherent and free-atom cross sections (barn).
    mass : float
        Atomic mass (amu).
    label : str
        Display label, e.g. ``"Al"`` or ``"H2"``.
    """

    z: int
    a: int
    is_element: bool
    is_single_isotope: bool
    is_natural_element: bool
    incoherent_xs: float
    coherent_xs: float
    free_scattering_xs: float
    mass: float = 0.0
    label: str = ""

    def __post_init__(self):
        if self.is_single_isotope and self.is_natural_element:
            raise ConfigurationError(f"Species {self.display_name} cannot be both a single isotope and a natural element")
        for name in ("incoherent_xs", "coherent_xs", "free_scattering_xs"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ConfigurationError(f"{name} of {self.display_name} must be a non-negative number, got {value}")

    @property
    def key(self) -> Tuple[int, int]:
        """(Z, A) identity, with A reported as 0 for natural elements."""
        return (self.z, 0 if self.is_natural_element else self.a)

    @property
    def display_name(self) -> str:
        return self.label or format_species(self.z, self.a)


class DynamicKind(Enum):
    """Kinds of dynamic scattering components."""

    VDOS = "vdos"
    VDOS_DEBYE = "vdosdebye"
    FREE_GAS = "freegas"
    SCATTER_KERNEL = "scatknl"
    STERILE = "sterile"

    @classmethod
    def from_label(cls, label: str) -> "DynamicKind":
        text = str(label).strip().lower()
        for kind in cls:
            if kind.value == text:
                return kind
        raise ConfigurationError(f"Unknown dynamics kind {label!r}; expected one of {[k.value for k in cls]}")


@dataclass(frozen=True)
class DynamicComponent:
    """One scattering contributor bound to an atomic species.

    ``atom_index`` keys into :attr:`MaterialModel.msd_by_atom`.
    """

    species: AtomSpecies
    fraction: float
    kind: DynamicKind = DynamicKind.VDOS
    atom_index: int = 0

    @property
    def carries_vdos(self) -> bool:
        """True for components with a vibrational density of states."""
        return self.kind is DynamicKind.VDOS


@dataclass(frozen=True)
class DiffractionPlane:
    """One Bragg reflection family: d-spacing (Angstrom), F^2 (barn), multiplicity."""

    d_spacing: float
    fsquared: float
    multiplicity: int


@dataclass(frozen=True)
class StructureInfo:
    """Unit cell volume (Angstrom^3) and number of atoms per cell."""

    volume: float
    n_atoms: float
    lengths: Optional[Tuple[float, float, float]] = None
    angles: Optional[Tuple[float, float, float]] = None


@dataclass
class MaterialModel:
    """Polycrystalline material at one temperature."""

    name: str
    temperature: float
    structure: StructureInfo
    components: List[DynamicComponent] = field(default_factory=list)
    planes: List[DiffractionPlane] = field(default_factory=list)
    msd_by_atom: Dict[int, float] = field(default_factory=dict)
    is_single_crystal: bool = False

    def __post_init__(self):
        for component in self.components:
            if not 0.0 <= component.fraction <= 1.0:
                raise ConfigurationError(
                    f"Fraction of {component.species.display_name} must lie in [0, 1], got {component.fraction}"
                )
            if component.atom_index not in self.msd_by_atom:
                raise ConfigurationError(
                    f"No mean-squared displacement for atom {component.atom_index} ({component.species.display_name})"
                )

    def msd_for(self, component: DynamicComponent) -> float:
        """Mean-squared displacement (Angstrom^2) of the component's atom."""
        return self.msd_by_atom[component.atom_index]

    @property
    def n_planes(self) -> int:
        return len(self.planes)

    def vdos_components(self) -> List[DynamicComponent]:
        return [component for component in self.components if component.carries_vdos]

    def summary(self) -> str:
        species = ", ".join(
            f"{c.species.display_name}({c.kind.value}, f={c.fraction:.4g})" for c in self.components
        )
        return (
            f"{self.name} at {self.temperature:g} K: {len(self.components)} component(s) [{species}], "
            f"{self.n_planes} plane(s), V={self.structure.volume:.6g} Aa^3, n_atoms={self.structure.n_atoms:g}"
        )


__all__ = [
    "AtomSpecies",
    "DynamicKind",
    "DynamicComponent",
    "DiffractionPlane",
    "StructureInfo",
    "MaterialModel",
]
