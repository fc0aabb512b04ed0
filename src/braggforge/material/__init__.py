"""Material models: configuration, loading, crystal geometry and Debye displacements."""

from .config import MaterialConfig, parse_material_config
from .loader import build_material, load_material, read_material_file
from .model import (
    AtomSpecies,
    DiffractionPlane,
    DynamicComponent,
    DynamicKind,
    MaterialModel,
    StructureInfo,
)

__all__ = [
    "MaterialConfig",
    "parse_material_config",
    "build_material",
    "load_material",
    "read_material_file",
    "AtomSpecies",
    "DiffractionPlane",
    "DynamicComponent",
    "DynamicKind",
    "MaterialModel",
    "StructureInfo",
]
