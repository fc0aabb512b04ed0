"""
BraggForge Extraction
=====================

Species matching, redistribution ranking and Bragg-edge tabulation.

Example Usage
-------------
>>> from braggforge.bragg import extract_bragg_edges
>>> result = extract_bragg_edges("Al.yaml", 293.6, 13, 0, 20000)
>>> result.plane_count, result.redistribute
"""

from .edges import (
    BraggEdge,
    BraggEdgeResult,
    check_capacity,
    extract_bragg_edges,
    tabulate_bragg_edges,
    xs_normalization,
)
from .species import (
    CapturedSpecies,
    RedistributionRanking,
    SpeciesMatch,
    SpeciesScan,
    incoherent_contribution,
    matches_species,
    scan_components,
    validate_scan,
)

__all__ = [
    "BraggEdge",
    "BraggEdgeResult",
    "check_capacity",
    "extract_bragg_edges",
    "tabulate_bragg_edges",
    "xs_normalization",
    "CapturedSpecies",
    "RedistributionRanking",
    "SpeciesMatch",
    "SpeciesScan",
    "incoherent_contribution",
    "matches_species",
    "scan_components",
    "validate_scan",
]
