"""Artifact read/write helpers for BraggForge JSON/YAML bundles."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import yaml

from braggforge.bragg.edges import BraggEdgeResult
from braggforge.core.provenance import build_provenance, hash_file
from braggforge.core.schemas import _schema_id


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write_text(path: Path, payload: str) -> None:
    path.write_text(payload, encoding="utf-8")


def write_artifact(path: Path, payload: Dict[str, Any]) -> None:
    """Write artifact data as JSON or YAML depending on extension."""
    path = Path(path)
    if path.suffix.lower() in {".yml", ".yaml"}:
        _write_text(path, yaml.safe_dump(payload, sort_keys=False))
    else:
        _write_text(path, json.dumps(payload, indent=2, allow_nan=False))


def read_artifact(path: Path) -> Dict[str, Any]:
    """Read artifact data from JSON or YAML."""
    path = Path(path)
    if path.suffix.lower() in {".yml", ".yaml"}:
        return yaml.safe_load(_read_text(path))
    return json.loads(_read_text(path))


def make_bragg_edge_artifact(
    result: BraggEdgeResult,
    *,
    source_path: Optional[Path] = None,
    material_config: Optional[str] = None,
) -> Dict[str, Any]:
    definitions = {
        "edges": "[energy, weighted_xs] per diffraction plane, in plane order",
        "weighted_xs": "E * F^2 * multiplicity * d * 0.5/(V*N) * (2d)^2",
        "min_incoherent_contribution": "smallest f/(1-f)*sigma_inc over VDOS components",
        "redistribute": "requested species holds the smallest incoherent contribution",
    }
    hashes = {"source": hash_file(source_path)} if source_path else None
    inputs = {"material_config": material_config} if material_config else None
    provenance = build_provenance(
        units=dict(result.units),
        definitions=definitions,
        source_hashes=hashes,
        inputs=inputs,
    )
    return {
        "schema": _schema_id("bragg_edges"),
        "result": result.to_dict(),
        "provenance": provenance,
    }


def write_bragg_edge_artifact(
    path: Path,
    result: BraggEdgeResult,
    *,
    source_path: Optional[Path] = None,
    material_config: Optional[str] = None,
) -> Dict[str, Any]:
    payload = make_bragg_edge_artifact(result, source_path=source_path, material_config=material_config)
    write_artifact(path, payload)
    return payload


def read_bragg_edge_artifact(path: Path) -> BraggEdgeResult:
    payload = read_artifact(path)
    if payload.get("schema") != _schema_id("bragg_edges"):
        raise ValueError(f"{path} is not a Bragg-edge artifact (schema={payload.get('schema')!r})")
    return BraggEdgeResult.from_dict(payload["result"])


def write_edges_csv(result: BraggEdgeResult, path: Path) -> pd.DataFrame:
    """Write ``energy_eV,weighted_xs`` rows, one per plane."""
    frame = pd.DataFrame({"energy_eV": result.energies, "weighted_xs": result.weighted_xs})
    frame.to_csv(path, index=False, float_format="%.17g")
    return frame


__all__ = [
    "write_artifact",
    "read_artifact",
    "make_bragg_edge_artifact",
    "write_bragg_edge_artifact",
    "read_bragg_edge_artifact",
    "write_edges_csv",
]
