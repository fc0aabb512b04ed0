"""Bragg-edge tabulation and the extraction entry point.

Every diffraction plane becomes one ``(E, w)`` pair:

    lambda = 2 d
    E      = wl2ekin(lambda)
    w      = E * F^2 * m * d * 0.5 / (V * N) * lambda^2

with V the unit cell volume and N the number of atoms per cell. The packed
layout handed to a kernel generator holds two float64 slots per plane,
energy first, in plane order, and the generator must reserve strictly more
than ``2 * n_planes`` slots.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

import numpy as np

from braggforge.bragg.species import scan_components, validate_scan
from braggforge.constants import wl2ekin
from braggforge.errors import CapacityError, ConfigurationError
from braggforge.material.config import MaterialConfig
from braggforge.material.loader import load_material
from braggforge.material.model import MaterialModel, StructureInfo

logger = logging.getLogger(__name__)


def _json_number(value: float) -> Union[float, str]:
    """Strict JSON has no infinities; they travel as "inf"/"-inf"/"nan" strings."""
    return value if math.isfinite(value) else str(value)


class BraggEdge(NamedTuple):
    """Edge energy (eV) and energy-weighted cross section (eV barn)."""

    energy: float
    weighted_xs: float


def check_capacity(n_planes: int, output_capacity: int) -> None:
    """Raise :class:`CapacityError` unless ``output_capacity > 2 * n_planes``."""
    if not output_capacity > 2 * n_planes:
        raise CapacityError(
            f"Number of Bragg edges ({n_planes}) needs more than {2 * n_planes} output slots, "
            f"but only {output_capacity} were reserved; increase the capacity"
        )


def xs_normalization(structure: StructureInfo) -> float:
    """Cross-section factor ``0.5 / (V * N)``; V and N must be positive."""
    if not (structure.volume > 0.0 and math.isfinite(structure.volume)):
        raise ConfigurationError(f"Unit cell volume must be positive, got {structure.volume}")
    if not (structure.n_atoms > 0.0 and math.isfinite(structure.n_atoms)):
        raise ConfigurationError(f"Atom count per cell must be positive, got {structure.n_atoms}")
    return 0.5 / (structure.volume * structure.n_atoms)


def tabulate_bragg_edges(model: MaterialModel, output_capacity: int) -> List[BraggEdge]:
    """
    Convert the model's planes into Bragg edges, in plane order.

    Raises
    ------
    CapacityError
        If ``output_capacity <= 2 * n_planes``.
    ConfigurationError
        If the cell volume or atom count is not positive, or any plane has a
        non-positive d-spacing. Nothing is emitted in that case.
    """
    n = model.n_planes
    check_capacity(n, output_capacity)
    xsectfact = xs_normalization(model.structure)
    bad = [i for i, plane in enumerate(model.planes) if not plane.d_spacing > 0.0]
    if bad:
        raise ConfigurationError(f"Planes {bad} of {model.name} have non-positive d-spacing")

    edges = []
    for plane in model.planes:
        wl = 2.0 * plane.d_spacing
        energy = wl2ekin(wl)
        fdm = plane.fsquared * plane.multiplicity * plane.d_spacing
        edges.append(BraggEdge(energy, energy * fdm * xsectfact * wl * wl))
    return edges


@dataclass(frozen=True)
class BraggEdgeResult:
    """Everything extracted for one species at one temperature."""

    plane_count: int
    edges: List[BraggEdge]
    bound_incoherent_xs: float
    bound_coherent_xs: float
    free_atom_xs: float
    msd: float
    fraction: float
    min_incoherent_contribution: float
    redistribute: bool
    temperature: float = 0.0
    target_z: int = 0
    target_a: int = 0
    material_name: str = ""
    units: Dict[str, str] = field(
        default_factory=lambda: {
            "energy": "eV",
            "weighted_xs": "eV*barn",
            "cross_sections": "barn",
            "msd": "Aa^2",
            "temperature": "K",
        }
    )

    @property
    def energies(self) -> np.ndarray:
        return np.array([edge.energy for edge in self.edges], dtype=np.float64)

    @property
    def weighted_xs(self) -> np.ndarray:
        return np.array([edge.weighted_xs for edge in self.edges], dtype=np.float64)

    def packed(self) -> np.ndarray:
        """Flat float64 array: E_0, w_0, E_1, w_1, ..."""
        data = np.empty(2 * self.plane_count, dtype=np.float64)
        data[0::2] = self.energies
        data[1::2] = self.weighted_xs
        return data

    def write_into(self, buffer: np.ndarray) -> int:
        """Write the packed layout into a caller-owned float64 buffer.

        Only the first ``2 * plane_count`` slots are written. Returns the
        plane count.
        """
        check_capacity(self.plane_count, len(buffer))
        buffer[: 2 * self.plane_count] = self.packed()
        return self.plane_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material_name": self.material_name,
            "temperature": self.temperature,
            "target_z": self.target_z,
            "target_a": self.target_a,
            "plane_count": self.plane_count,
            "edges": [[edge.energy, edge.weighted_xs] for edge in self.edges],
            "bound_incoherent_xs": self.bound_incoherent_xs,
            "bound_coherent_xs": self.bound_coherent_xs,
            "free_atom_xs": self.free_atom_xs,
            "msd": self.msd,
            "fraction": self.fraction,
            "min_incoherent_contribution": _json_number(self.min_incoherent_contribution),
            "redistribute": self.redistribute,
            "units": dict(self.units),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BraggEdgeResult":
        edges = [BraggEdge(float(e), float(w)) for e, w in payload.get("edges", [])]
        return cls(
            plane_count=int(payload["plane_count"]),
            edges=edges,
            bound_incoherent_xs=float(payload["bound_incoherent_xs"]),
            bound_coherent_xs=float(payload["bound_coherent_xs"]),
            free_atom_xs=float(payload["free_atom_xs"]),
            msd=float(payload["msd"]),
            fraction=float(payload["fraction"]),
            min_incoherent_contribution=float(payload["min_incoherent_contribution"]),
            redistribute=bool(payload["redistribute"]),
            temperature=float(payload.get("temperature", 0.0)),
            target_z=int(payload.get("target_z", 0)),
            target_a=int(payload.get("target_a", 0)),
            material_name=str(payload.get("material_name", "")),
        )


MaterialLoader = Callable[[Union[str, MaterialConfig], float], MaterialModel]


def extract_bragg_edges(
    material_config: Union[str, MaterialConfig],
    temperature: float,
    target_z: int,
    target_a: int,
    output_capacity: int,
    *,
    loader: Optional[MaterialLoader] = None,
) -> BraggEdgeResult:
    """
    Extract Bragg edges and per-isotope data for one species and temperature.

    Parameters
    ----------
    material_config : str or MaterialConfig
        Material configuration, e.g. ``"Al.yaml;dcutoff=0.5"``.
    temperature : float
        Temperature in kelvin.
    target_z, target_a : int
        Requested species; ``target_a == 0`` requests the natural element.
    output_capacity : int
        Slots reserved by the caller; must exceed twice the plane count.
    loader : callable, optional
        Material-model provider, defaults to :func:`load_material`.

    Raises
    ------
    ConfigurationError, NotFoundError, AmbiguousMatchError, CapacityError
        Any failure aborts the extraction; there is no partial result.
    """
    model = (loader or load_material)(material_config, temperature)
    if model.is_single_crystal:
        raise ConfigurationError(f"{model.name}: single-crystal materials are not supported")

    match = validate_scan(scan_components(model, target_z, target_a), target_z, target_a)
    edges = tabulate_bragg_edges(model, output_capacity)
    captured = match.captured
    logger.info("%s at %g K: %d Bragg edge(s)", model.name, model.temperature, len(edges))
    return BraggEdgeResult(
        plane_count=len(edges),
        edges=edges,
        bound_incoherent_xs=captured.incoherent_xs,
        bound_coherent_xs=captured.coherent_xs,
        free_atom_xs=captured.free_xs,
        msd=captured.msd,
        fraction=captured.fraction,
        min_incoherent_contribution=match.min_incoherent_contribution,
        redistribute=match.redistribute,
        temperature=model.temperature,
        target_z=target_z,
        target_a=target_a,
        material_name=model.name,
    )


__all__ = [
    "BraggEdge",
    "BraggEdgeResult",
    "check_capacity",
    "xs_normalization",
    "tabulate_bragg_edges",
    "extract_bragg_edges",
]
