"""Artifact schema definitions for BraggForge outputs."""

from __future__ import annotations

from typing import Any, Dict, List


def _schema_id(name: str, version: str = "v1") -> str:
    return f"braggforge.{name}.{version}"


BRAGG_EDGES_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "BraggEdges",
    "type": "object",
    "required": ["schema", "result", "provenance"],
    "properties": {
        "schema": {"const": _schema_id("bragg_edges")},
        "result": {
            "type": "object",
            "required": [
                "plane_count",
                "edges",
                "bound_incoherent_xs",
                "bound_coherent_xs",
                "free_atom_xs",
                "msd",
                "fraction",
                "min_incoherent_contribution",
                "redistribute",
            ],
            "properties": {
                "material_name": {"type": "string"},
                "temperature": {"type": "number"},
                "target_z": {"type": "integer"},
                "target_a": {"type": "integer"},
                "plane_count": {"type": "integer"},
                "edges": {
                    "type": "array",
                    "items": {"type": "array", "items": {"type": "number"}, "minItems": 2, "maxItems": 2},
                },
                "bound_incoherent_xs": {"type": "number"},
                "bound_coherent_xs": {"type": "number"},
                "free_atom_xs": {"type": "number"},
                "msd": {"type": "number"},
                "fraction": {"type": "number"},
                "min_incoherent_contribution": {"type": ["number", "string"]},
                "redistribute": {"type": "boolean"},
            },
        },
        "provenance": {"type": "object"},
    },
}

SCHEMAS: Dict[str, Dict[str, Any]] = {
    _schema_id("bragg_edges"): BRAGG_EDGES_SCHEMA,
}


def validate_artifact(payload: Dict[str, Any]) -> List[str]:
    """Check an artifact against its schema's required keys.

    Returns a list of problems; an empty list means the artifact is valid.
    """
    schema_id = payload.get("schema")
    schema = SCHEMAS.get(schema_id)
    if schema is None:
        return [f"unknown schema {schema_id!r}"]
    problems = [f"missing '{key}'" for key in schema["required"] if key not in payload]
    for key, definition in schema["properties"].items():
        if key in payload and definition.get("type") == "object" and "required" in definition:
            problems.extend(f"missing '{key}.{sub}'" for sub in definition["required"] if sub not in payload[key])
    result = payload.get("result") or {}
    if "edges" in result and "plane_count" in result and len(result["edges"]) != result["plane_count"]:
        problems.append("plane_count does not match the number of edges")
    return problems


__all__ = ["BRAGG_EDGES_SCHEMA", "SCHEMAS", "validate_artifact"]
