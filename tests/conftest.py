import json

import pytest

from braggforge.material.model import (
    AtomSpecies,
    DiffractionPlane,
    DynamicComponent,
    DynamicKind,
    MaterialModel,
    StructureInfo,
)

AL_LATTICE = 4.04958
FCC_POSITIONS = [[0, 0, 0], [0, 0.5, 0.5], [0.5, 0, 0.5], [0.5, 0.5, 0]]


def make_species(z, a=0, *, incoherent=1.0, coherent=1.0, free=2.0, mixture=False, label=""):
    """Element (a == 0), isotope (a > 0) or mixture species with given cross sections."""
    return AtomSpecies(
        z=z,
        a=a,
        is_element=not mixture or z > 0,
        is_single_isotope=not mixture and a > 0,
        is_natural_element=not mixture and a == 0,
        incoherent_xs=incoherent,
        coherent_xs=coherent,
        free_scattering_xs=free,
        mass=float(a or 1),
        label=label,
    )


def make_model(components, planes=(), *, volume=100.0, n_atoms=2.0, msd=None, single_crystal=False):
    """Model whose atom i has the i-th component and msd 0.01*(i+1) unless given."""
    comps = [
        DynamicComponent(species=species, fraction=fraction, kind=kind, atom_index=i)
        for i, (species, fraction, kind) in enumerate(
            (c if len(c) == 3 else (c[0], c[1], DynamicKind.VDOS)) for c in components
        )
    ]
    msd_by_atom = msd if msd is not None else {i: 0.01 * (i + 1) for i in range(len(comps))}
    return MaterialModel(
        name="test",
        temperature=300.0,
        structure=StructureInfo(volume=volume, n_atoms=n_atoms),
        components=comps,
        planes=[DiffractionPlane(*p) for p in planes],
        msd_by_atom=msd_by_atom,
        is_single_crystal=single_crystal,
    )


@pytest.fixture
def aluminium_file(tmp_path):
    """fcc aluminium with a Debye model, written as JSON."""
    data = {
        "name": "Al",
        "cell": {"lengths": [AL_LATTICE] * 3, "angles": [90, 90, 90]},
        "atoms": [
            {
                "species": "Al",
                "coherent_scattering_length": 3.449,
                "incoherent_xs": 0.0082,
                "debye_temperature": 410.4,
                "positions": FCC_POSITIONS,
            }
        ],
    }
    path = tmp_path / "Al.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def polyethylene_like_file(tmp_path):
    """Two-species material with explicit planes, written as YAML."""
    text = """\
name: CH2-test
cell:
  volume: 93.0
  n_atoms: 12
atoms:
  - species: C
    coherent_scattering_length: 6.646
    incoherent_xs: 0.001
    msd: 0.012
    count: 4
  - species: H
    coherent_scattering_length: -3.739
    incoherent_xs: 80.26
    msd: 0.025
    count: 8
planes:
  - [4.1, 1.5, 4]
  - [3.7, 0.8, 2]
  - {d_spacing: 2.5, fsquared: 0.3, multiplicity: 8}
"""
    path = tmp_path / "ch2.yaml"
    path.write_text(text)
    return path
