"""Readers and writers for BraggForge artifacts."""

from .artifacts import (
    make_bragg_edge_artifact,
    read_artifact,
    read_bragg_edge_artifact,
    write_artifact,
    write_bragg_edge_artifact,
    write_edges_csv,
)

__all__ = [
    "make_bragg_edge_artifact",
    "read_artifact",
    "read_bragg_edge_artifact",
    "write_artifact",
    "write_bragg_edge_artifact",
    "write_edges_csv",
]
