"""Material configuration strings.

A configuration string names a material-model file followed by optional
``key=value`` settings separated by semicolons::

    "Al.yaml;temp=293.6K;dcutoff=0.4Aa"

Any of ``mos``, ``dir1`` or ``dir2`` marks the configuration as a single
crystal. Those values are kept verbatim and never interpreted here.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, Optional, Union

from braggforge.constants import ZERO_CELSIUS
from braggforge.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Used when dcutoff is left at 0
AUTO_DCUTOFF = 0.5
DEFAULT_FSQUARECUT = 1e-5

KNOWN_KEYS = ("temp", "dcutoff", "dcutoffup", "fsquarecut", "mos", "dir1", "dir2", "dirtol")
SINGLE_CRYSTAL_KEYS = ("mos", "dir1", "dir2")


@dataclass(frozen=True)
class MaterialConfig:
    """Parsed material configuration.

    Attributes
    ----------
    filename : str
        Path of the material-model file.
    temperature : float, optional
        Temperature in kelvin, or None to leave it to the caller.
    dcutoff, dcutoffup : float
        d-spacing window in Angstrom for generated planes. ``dcutoff == 0``
        selects ``AUTO_DCUTOFF``.
    fsquarecut : float
        Planes with F^2 at or below this value (barn) are dropped.
    mos, dir1, dir2, dirtol : str, optional
        Single-crystal parameters, stored as given.
    """

    filename: str
    temperature: Optional[float] = None
    dcutoff: float = 0.0
    dcutoffup: float = math.inf
    fsquarecut: float = DEFAULT_FSQUARECUT
    mos: Optional[str] = None
    dir1: Optional[str] = None
    dir2: Optional[str] = None
    dirtol: Optional[str] = None

    @property
    def is_single_crystal(self) -> bool:
        return any(getattr(self, key) is not None for key in SINGLE_CRYSTAL_KEYS)

    @property
    def effective_dcutoff(self) -> float:
        return self.dcutoff if self.dcutoff > 0.0 else AUTO_DCUTOFF

    def with_temperature(self, temperature: float) -> "MaterialConfig":
        """Return a copy bound to ``temperature`` (kelvin)."""
        value = float(temperature)
        if not math.isfinite(value) or value <= 0.0:
            raise ConfigurationError(f"Temperature must be positive, got {temperature!r}")
        return replace(self, temperature=value)

    def to_string(self) -> str:
        parts = [self.filename]
        if self.temperature is not None:
            parts.append(f"temp={self.temperature!r}K")
        if self.dcutoff != 0.0:
            parts.append(f"dcutoff={self.dcutoff!r}Aa")
        if math.isfinite(self.dcutoffup):
            parts.append(f"dcutoffup={self.dcutoffup!r}Aa")
        if self.fsquarecut != DEFAULT_FSQUARECUT:
            parts.append(f"fsquarecut={self.fsquarecut!r}")
        for key in ("mos", "dir1", "dir2", "dirtol"):
            value = getattr(self, key)
            if value is not None:
                parts.append(f"{key}={value}")
        return ";".join(parts)


def _parse_number(key: str, text: str, suffixes=()) -> float:
    value = text.strip()
    for suffix in suffixes:
        if value.endswith(suffix):
            value = value[: -len(suffix)].strip()
            break
    try:
        number = float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {key}: {text!r}") from None
    if math.isnan(number):
        raise ConfigurationError(f"Invalid value for {key}: {text!r}")
    return number


def parse_temperature(text: str) -> float:
    """Parse ``'300'``, ``'300K'`` or ``'26.85C'`` into kelvin."""
    value = text.strip()
    if value.endswith("C"):
        kelvin = _parse_number("temp", value[:-1]) + ZERO_CELSIUS
    else:
        kelvin = _parse_number("temp", value, suffixes=("K",))
    if not math.isfinite(kelvin) or kelvin <= 0.0:
        raise ConfigurationError(f"Temperature must be positive, got {text!r}")
    return kelvin


def parse_material_config(text: str) -> MaterialConfig:
    """Parse a configuration string into a :class:`MaterialConfig`.

    Raises
    ------
    ConfigurationError
        On an empty filename, a setting without ``=``, an unknown or repeated
        key, or a value that cannot be parsed.
    """
    if not isinstance(text, str):
        raise ConfigurationError(f"Material configuration must be a string, got {type(text).__name__}")
    filename, *settings = text.split(";")
    filename = filename.strip()
    if not filename:
        raise ConfigurationError(f"Material configuration has no filename: {text!r}")

    raw: Dict[str, str] = {}
    for setting in settings:
        if not setting.strip():
            continue
        if "=" not in setting:
            raise ConfigurationError(f"Expected key=value in material configuration, got {setting!r}")
        key, value = (part.strip() for part in setting.split("=", 1))
        key = key.lower()
        if key not in KNOWN_KEYS:
            raise ConfigurationError(f"Unknown material configuration key {key!r}")
        if key in raw:
            raise ConfigurationError(f"Material configuration key {key!r} given more than once")
        if not value:
            raise ConfigurationError(f"Missing value for {key!r}")
        raw[key] = value

    fields: Dict[str, Union[str, float]] = {"filename": filename}
    if "temp" in raw:
        fields["temperature"] = parse_temperature(raw["temp"])
    for key in ("dcutoff", "dcutoffup"):
        if key in raw:
            fields[key] = _parse_number(key, raw[key], suffixes=("Aa",))
    if "fsquarecut" in raw:
        fields["fsquarecut"] = _parse_number("fsquarecut", raw["fsquarecut"])
    for key in ("mos", "dir1", "dir2", "dirtol"):
        if key in raw:
            fields[key] = raw[key]

    config = MaterialConfig(**fields)
    if config.dcutoff < 0.0:
        raise ConfigurationError(f"dcutoff must not be negative, got {config.dcutoff}")
    if config.dcutoffup <= config.effective_dcutoff:
        raise ConfigurationError(
            f"dcutoffup ({config.dcutoffup}) must exceed dcutoff ({config.effective_dcutoff})"
        )
    if config.fsquarecut < 0.0:
        raise ConfigurationError(f"fsquarecut must not be negative, got {config.fsquarecut}")
    logger.debug("Parsed material configuration %r -> %s", text, config)
    return config


__all__ = [
    "AUTO_DCUTOFF",
    "DEFAULT_FSQUARECUT",
    "MaterialConfig",
    "parse_temperature",
    "parse_material_config",
]
