"""
Temperature scan workflow

Runs one independent Bragg-edge extraction per temperature, the way a
thermal-scattering kernel generator loops over its temperature grid. The
first failure stops the scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from braggforge.bragg.edges import BraggEdgeResult, MaterialLoader, extract_bragg_edges
from braggforge.data.elements import format_species
from braggforge.errors import ConfigurationError
from braggforge.material.config import MaterialConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Scan Configuration
# ============================================================================

@dataclass
class TemperatureScanConfig:
    """Configuration for a temperature scan."""

    # Output slots reserved per extraction
    output_capacity: int = 20000

    # Material-model provider; None selects the file loader
    loader: Optional[MaterialLoader] = None

    # Sort temperatures ascending before scanning
    sort_temperatures: bool = False


@dataclass
class TemperatureScanResult:
    """Results of a temperature scan, one entry per temperature."""

    material_config: str
    target_z: int
    target_a: int
    results: List[BraggEdgeResult] = field(default_factory=list)

    @property
    def temperatures(self) -> List[float]:
        return [result.temperature for result in self.results]

    def summary(self) -> str:
        lines = [
            f"Temperature scan of {self.material_config} for {format_species(self.target_z, self.target_a)}",
            f"{'T [K]':>10} {'edges':>6} {'sigma_inc':>11} {'sigma_coh':>11} {'sigma_free':>11} "
            f"{'msd [Aa^2]':>11} {'redistribute':>12}",
        ]
        for r in self.results:
            lines.append(
                f"{r.temperature:10.2f} {r.plane_count:6d} {r.bound_incoherent_xs:11.5g} "
                f"{r.bound_coherent_xs:11.5g} {r.free_atom_xs:11.5g} {r.msd:11.5g} {str(r.redistribute):>12}"
            )
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per temperature with the per-isotope quantities."""
        rows: List[Dict[str, object]] = []
        for r in self.results:
            rows.append({
                "temperature_K": r.temperature,
                "plane_count": r.plane_count,
                "bound_incoherent_xs": r.bound_incoherent_xs,
                "bound_coherent_xs": r.bound_coherent_xs,
                "free_atom_xs": r.free_atom_xs,
                "msd": r.msd,
                "fraction": r.fraction,
                "min_incoherent_contribution": r.min_incoherent_contribution,
                "redistribute": r.redistribute,
                "first_edge_eV": r.edges[0].energy if r.edges else float("nan"),
            })
        return pd.DataFrame(rows)

    def edges_dataframe(self) -> pd.DataFrame:
        """Long table of all edges: temperature, plane index, energy, weighted XS."""
        rows = [
            {"temperature_K": r.temperature, "plane": i, "energy_eV": edge.energy, "weighted_xs": edge.weighted_xs}
            for r in self.results
            for i, edge in enumerate(r.edges)
        ]
        return pd.DataFrame(rows, columns=["temperature_K", "plane", "energy_eV", "weighted_xs"])


# ============================================================================
# Scan
# ============================================================================

def run_temperature_scan(
    material_config: Union[str, MaterialConfig],
    temperatures: Sequence[float],
    target_z: int,
    target_a: int = 0,
    config: Optional[TemperatureScanConfig] = None,
) -> TemperatureScanResult:
    """
    Extract Bragg edges at each temperature.

    Parameters
    ----------
    material_config : str or MaterialConfig
        Material configuration shared by all temperatures.
    temperatures : sequence of float
        Temperatures in kelvin.
    target_z, target_a : int
        Requested species.
    config : TemperatureScanConfig, optional
        Scan settings.

    Returns
    -------
    TemperatureScanResult
        Extraction results in scan order.
    """
    config = config or TemperatureScanConfig()
    temps = [float(t) for t in temperatures]
    if not temps:
        raise ConfigurationError("Temperature scan needs at least one temperature")
    if config.sort_temperatures:
        temps.sort()

    label = material_config if isinstance(material_config, str) else material_config.to_string()
    scan = TemperatureScanResult(material_config=label, target_z=target_z, target_a=target_a)
    for temperature in temps:
        logger.info("Extracting %s at %g K", format_species(target_z, target_a), temperature)
        scan.results.append(
            extract_bragg_edges(
                material_config,
                temperature,
                target_z,
                target_a,
                config.output_capacity,
                loader=config.loader,
            )
        )
    return scan


__all__ = ["TemperatureScanConfig", "TemperatureScanResult", "run_temperature_scan"]
