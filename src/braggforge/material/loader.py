"""Material loader: configuration string + temperature -> MaterialModel.

Material-model files are YAML (``.yaml``/``.yml``) or JSON::

    name: Al
    cell:
      lengths: [4.04958, 4.04958, 4.04958]   # Angstrom
      angles: [90, 90, 90]                   # degrees
    atoms:
      - species: Al
        coherent_scattering_length: 3.449    # fm
        incoherent_xs: 0.0082                # barn
        debye_temperature: 410.4             # K
        positions: [[0, 0, 0], [0, 0.5, 0.5], [0.5, 0, 0.5], [0.5, 0.5, 0]]

Each atom entry becomes one dynamic component (``dynamics``, default
``vdos``). An explicit ``planes`` list replaces plane generation, in which
case ``cell`` may give ``volume`` and ``n_atoms`` directly.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from braggforge.constants import FM2_TO_BARN, bound_to_free_factor
from braggforge.data.elements import atomic_mass, element_from_z, format_species, parse_species_label
from braggforge.errors import ConfigurationError
from braggforge.material.config import MaterialConfig, parse_material_config
from braggforge.material.crystal import AtomSite, cell_volume, generate_planes
from braggforge.material.debye import debye_msd
from braggforge.material.model import (
    AtomSpecies,
    DiffractionPlane,
    DynamicComponent,
    DynamicKind,
    MaterialModel,
    StructureInfo,
)

logger = logging.getLogger(__name__)

MIXTURE_FRACTION_TOL = 1e-6


def read_material_file(path: Path) -> Dict[str, Any]:
    """Read a material-model file as a mapping."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read material file {path}: {exc}") from exc
    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Malformed material file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Material file {path} must contain a mapping at the top level")
    return data


def _number(entry: Mapping[str, Any], key: str, context: str, default: Optional[float] = None) -> float:
    if key not in entry:
        if default is None:
            raise ConfigurationError(f"{context}: missing '{key}'")
        return default
    try:
        value = float(entry[key])
    except (TypeError, ValueError):
        raise ConfigurationError(f"{context}: '{key}' must be a number, got {entry[key]!r}") from None
    if not math.isfinite(value):
        raise ConfigurationError(f"{context}: '{key}' must be finite, got {value}")
    return value


def _nuclide(entry: Mapping[str, Any], context: str) -> Tuple[int, int, float, float, float]:
    """(z, a, b_fm, sigma_inc, mass) of one element or isotope entry."""
    if "species" not in entry:
        raise ConfigurationError(f"{context}: missing 'species'")
    z, a = parse_species_label(entry["species"])
    default_mass = float(a) if a else atomic_mass(element_from_z(z))
    b = _number(entry, "coherent_scattering_length", context)
    sigma_inc = _number(entry, "incoherent_xs", context, default=0.0)
    mass = _number(entry, "mass", context, default=default_mass)
    if sigma_inc < 0.0 or mass <= 0.0:
        raise ConfigurationError(f"{context}: incoherent_xs must be >= 0 and mass > 0")
    return z, a, b, sigma_inc, mass


def build_species(entry: Mapping[str, Any], context: str = "atom") -> Tuple[AtomSpecies, float]:
    """
    Build the species of one atom entry.

    Returns
    -------
    tuple
        (AtomSpecies, coherent scattering length in fm)
    """
    label = entry.get("label")
    if "mixture" not in entry:
        z, a, b, sigma_inc, mass = _nuclide(entry, context)
        sigma_coh = 4.0 * math.pi * b * b * FM2_TO_BARN
        species = AtomSpecies(
            z=z,
            a=a,
            is_element=True,
            is_single_isotope=a > 0,
            is_natural_element=a == 0,
            incoherent_xs=sigma_inc,
            coherent_xs=sigma_coh,
            free_scattering_xs=(sigma_coh + sigma_inc) * bound_to_free_factor(mass),
            mass=mass,
            label=label or format_species(z, a),
        )
        return species, b

    members = entry["mixture"]
    if not isinstance(members, list) or not members:
        raise ConfigurationError(f"{context}: 'mixture' must be a non-empty list")
    parsed = []
    for i, member in enumerate(members):
        member_context = f"{context} mixture member {i}"
        if not isinstance(member, dict):
            raise ConfigurationError(f"{member_context}: expected a mapping")
        weight = _number(member, "fraction", member_context)
        if weight <= 0.0:
            raise ConfigurationError(f"{member_context}: fraction must be positive")
        parsed.append((weight, _nuclide(member, member_context)))
    total = sum(weight for weight, _ in parsed)
    if abs(total - 1.0) > MIXTURE_FRACTION_TOL:
        raise ConfigurationError(f"{context}: mixture fractions sum to {total}, expected 1")

    b = sum(w * nuc[2] for w, nuc in parsed)
    b2 = sum(w * nuc[2] ** 2 for w, nuc in parsed)
    sigma_inc = sum(w * nuc[3] for w, nuc in parsed) + 4.0 * math.pi * (b2 - b * b) * FM2_TO_BARN
    sigma_coh = 4.0 * math.pi * b * b * FM2_TO_BARN
    sigma_free = sum(
        w * (4.0 * math.pi * nuc[2] ** 2 * FM2_TO_BARN + nuc[3]) * bound_to_free_factor(nuc[4])
        for w, nuc in parsed
    )
    z_values = {nuc[0] for _, nuc in parsed}
    single_z = len(z_values) == 1
    z = z_values.pop() if single_z else 0
    default_label = "+".join(f"{w:g}{format_species(nuc[0], nuc[1])}" for w, nuc in parsed)
    species = AtomSpecies(
        z=z,
        a=0,
        is_element=single_z,
        is_single_isotope=False,
        is_natural_element=False,
        incoherent_xs=max(sigma_inc, 0.0),
        coherent_xs=sigma_coh,
        free_scattering_xs=sigma_free,
        mass=sum(w * nuc[4] for w, nuc in parsed),
        label=label or default_label,
    )
    return species, b


def _triple(value: Any, context: str) -> Tuple[float, float, float]:
    """Three finite numbers, e.g. cell lengths or one fractional position."""
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigurationError(f"{context}: expected a list of three numbers, got {value!r}")
    try:
        numbers = tuple(float(x) for x in value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{context}: expected a list of three numbers, got {value!r}") from None
    if not all(math.isfinite(x) for x in numbers):
        raise ConfigurationError(f"{context}: values must be finite, got {value!r}")
    return numbers


def _atom_count(entry: Mapping[str, Any], context: str) -> float:
    if "positions" in entry:
        positions = entry["positions"]
        if not isinstance(positions, list) or not positions:
            raise ConfigurationError(f"{context}: 'positions' must be a non-empty list")
        for i, position in enumerate(positions):
            _triple(position, f"{context} position {i}")
        return float(len(positions))
    count = _number(entry, "count", context)
    if count <= 0.0:
        raise ConfigurationError(f"{context}: count must be positive")
    return count


def _atom_msd(entry: Mapping[str, Any], species: AtomSpecies, temperature: float, context: str) -> float:
    if "msd" in entry:
        msd = _number(entry, "msd", context)
        if msd < 0.0:
            raise ConfigurationError(f"{context}: msd must not be negative")
        return msd
    if "debye_temperature" in entry:
        return debye_msd(_number(entry, "debye_temperature", context), temperature, species.mass)
    raise ConfigurationError(f"{context}: need either 'msd' or 'debye_temperature'")


def _parse_planes(raw: Any) -> List[DiffractionPlane]:
    if not isinstance(raw, list):
        raise ConfigurationError(f"'planes' must be a list, got {raw!r}")
    planes = []
    for i, item in enumerate(raw):
        context = f"plane {i}"
        if isinstance(item, dict):
            values = (item.get("d_spacing"), item.get("fsquared"), item.get("multiplicity"))
        elif isinstance(item, (list, tuple)) and len(item) == 3:
            values = tuple(item)
        else:
            raise ConfigurationError(f"{context}: expected [d_spacing, fsquared, multiplicity]")
        try:
            d, fsq, mult = float(values[0]), float(values[1]), float(values[2])
        except (TypeError, ValueError):
            raise ConfigurationError(f"{context}: cannot interpret {item!r}") from None
        if not mult.is_integer():
            raise ConfigurationError(f"{context}: multiplicity must be a whole number, got {values[2]!r}")
        mult = int(mult)
        if fsq < 0.0 or mult < 1:
            raise ConfigurationError(f"{context}: need fsquared >= 0 and multiplicity >= 1")
        planes.append(DiffractionPlane(d_spacing=d, fsquared=fsq, multiplicity=mult))
    return planes


def _structure(cell: Mapping[str, Any], total_atoms: float) -> StructureInfo:
    lengths = cell.get("lengths")
    angles = cell.get("angles", [90.0, 90.0, 90.0])
    if lengths is not None:
        lengths = _triple(lengths, "cell lengths")
        angles = _triple(angles, "cell angles")
        volume = _number(cell, "volume", "cell", default=cell_volume(lengths, angles))
    else:
        angles = None
        volume = _number(cell, "volume", "cell")
    n_atoms = _number(cell, "n_atoms", "cell", default=total_atoms)
    return StructureInfo(volume=volume, n_atoms=n_atoms, lengths=lengths, angles=angles)


def build_material(data: Mapping[str, Any], config: MaterialConfig) -> MaterialModel:
    """Build a :class:`MaterialModel` from parsed file content.

    ``config.temperature`` must be set; it drives the Debye displacements.
    """
    temperature = config.temperature
    if temperature is None:
        raise ConfigurationError("No temperature given for the material")
    name = str(data.get("name") or Path(config.filename).stem)
    single_crystal = data.get("single_crystal", False)
    if not isinstance(single_crystal, bool):
        raise ConfigurationError(f"Material {name}: 'single_crystal' must be true or false, got {single_crystal!r}")
    if single_crystal:
        raise ConfigurationError(f"Material {name} is a single crystal; only polycrystalline materials are supported")

    atoms = data.get("atoms")
    if not isinstance(atoms, list) or not atoms:
        raise ConfigurationError(f"Material {name} lists no atoms")

    entries = []
    for index, entry in enumerate(atoms):
        context = f"{name} atom {index}"
        if not isinstance(entry, dict):
            raise ConfigurationError(f"{context}: expected a mapping")
        species, b = build_species(entry, context)
        count = _atom_count(entry, context)
        msd = _atom_msd(entry, species, temperature, context)
        kind = DynamicKind.from_label(entry.get("dynamics", DynamicKind.VDOS.value))
        entries.append((entry, species, b, count, msd, kind))

    total_atoms = sum(count for _, _, _, count, _, _ in entries)
    cell = data.get("cell") or {}
    if not isinstance(cell, dict):
        raise ConfigurationError(f"Material {name}: 'cell' must be a mapping")
    structure = _structure(cell, total_atoms)

    components = []
    msd_by_atom = {}
    for index, (entry, species, _, count, msd, kind) in enumerate(entries):
        fraction = _number(entry, "fraction", f"{name} atom {index}", default=count / total_atoms)
        if fraction == 0.0:
            logger.warning("Component %s of %s has zero fraction", species.display_name, name)
        components.append(DynamicComponent(species=species, fraction=fraction, kind=kind, atom_index=index))
        msd_by_atom[index] = msd

    if "planes" in data:
        planes = _parse_planes(data["planes"] if data["planes"] is not None else [])
    else:
        if structure.lengths is None:
            raise ConfigurationError(f"Material {name}: plane generation needs cell 'lengths'")
        missing = [i for i, (entry, *_rest) in enumerate(entries) if "positions" not in entry]
        if missing:
            raise ConfigurationError(f"Material {name}: plane generation needs positions for atoms {missing}")
        sites = [AtomSite(scattering_length=b, msd=msd, positions=entry["positions"])
                 for entry, _, b, _, msd, _ in entries]
        planes = generate_planes(
            structure.lengths,
            structure.angles,
            sites,
            dcutoff=config.effective_dcutoff,
            dcutoffup=config.dcutoffup,
            fsquarecut=config.fsquarecut,
        )

    model = MaterialModel(
        name=name,
        temperature=temperature,
        structure=structure,
        components=components,
        planes=planes,
        msd_by_atom=msd_by_atom,
        is_single_crystal=single_crystal,
    )
    logger.info("Loaded %s", model.summary())
    return model


def load_material(
    config: Union[str, MaterialConfig],
    temperature: Optional[float] = None,
) -> MaterialModel:
    """
    Build a material model from a configuration string and a temperature.

    Parameters
    ----------
    config : str or MaterialConfig
        Configuration such as ``"Al.yaml;dcutoff=0.5"``.
    temperature : float, optional
        Temperature in kelvin; overrides any ``temp`` in the configuration.

    Raises
    ------
    ConfigurationError
        For a malformed configuration or file, or a single-crystal material.
        Single-crystal configurations are rejected before the file is read.
    """
    cfg = config if isinstance(config, MaterialConfig) else parse_material_config(config)
    if cfg.is_single_crystal:
        raise ConfigurationError(
            f"{cfg.filename}: single-crystal configurations are not supported (mos/dir1/dir2 given)"
        )
    if temperature is not None:
        cfg = cfg.with_temperature(temperature)
    if cfg.temperature is None:
        raise ConfigurationError(f"{cfg.filename}: no temperature given")
    logger.debug("Loading material from %s", cfg.to_string())
    return build_material(read_material_file(Path(cfg.filename)), cfg)


__all__ = [
    "read_material_file",
    "build_species",
    "build_material",
    "load_material",
]
