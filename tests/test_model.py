"""Tests for the material data model."""

import pytest

from braggforge.errors import ConfigurationError
from braggforge.material.model import (
    AtomSpecies,
    DynamicComponent,
    DynamicKind,
    MaterialModel,
    StructureInfo,
)

from conftest import make_model, make_species


class TestAtomSpecies:
    """Test species identity and validation."""

    def test_key_of_natural_element(self):
        assert make_species(13, 0).key == (13, 0)

    def test_key_of_isotope(self):
        assert make_species(1, 2).key == (1, 2)

    def test_display_name(self):
        assert make_species(1, 2).display_name == "H2"
        assert make_species(1, 0, label="H-in-CH2").display_name == "H-in-CH2"

    def test_negative_cross_section_rejected(self):
        with pytest.raises(ConfigurationError):
            make_species(1, 0, incoherent=-1.0)

    def test_isotope_and_natural_is_contradictory(self):
        with pytest.raises(ConfigurationError):
            AtomSpecies(
                z=1, a=1, is_element=True, is_single_isotope=True, is_natural_element=True,
                incoherent_xs=0.0, coherent_xs=0.0, free_scattering_xs=0.0,
            )


class TestDynamicKind:
    """Test the component discriminant."""

    def test_from_label(self):
        assert DynamicKind.from_label("VDOS") is DynamicKind.VDOS
        assert DynamicKind.from_label("freegas") is DynamicKind.FREE_GAS

    def test_unknown_label(self):
        with pytest.raises(ConfigurationError):
            DynamicKind.from_label("phonon")

    def test_only_vdos_carries_vdos(self):
        species = make_species(13, 0)
        assert DynamicComponent(species, 1.0).carries_vdos
        for kind in DynamicKind:
            if kind is not DynamicKind.VDOS:
                assert not DynamicComponent(species, 1.0, kind=kind).carries_vdos


class TestMaterialModel:
    """Test model construction checks and lookups."""

    def test_msd_lookup(self):
        model = make_model([(make_species(6, 0), 0.5), (make_species(1, 0), 0.5)], msd={0: 0.002, 1: 0.03})
        assert [model.msd_for(c) for c in model.components] == [0.002, 0.03]

    def test_missing_msd_rejected(self):
        with pytest.raises(ConfigurationError, match="mean-squared displacement"):
            make_model([(make_species(6, 0), 0.5)], msd={})

    @pytest.mark.parametrize("fraction", [-0.1, 1.5])
    def test_fraction_range(self, fraction):
        with pytest.raises(ConfigurationError):
            make_model([(make_species(6, 0), fraction)])

    def test_vdos_components_and_counts(self):
        model = make_model(
            [(make_species(6, 0), 0.5), (make_species(1, 0), 0.5, DynamicKind.FREE_GAS)],
            planes=[(2.0, 1.0, 6)],
        )
        assert [c.species.z for c in model.vdos_components()] == [6]
        assert model.n_planes == 1
        assert "2 component(s)" in model.summary()

    def test_empty_model_is_allowed(self):
        model = MaterialModel(name="empty", temperature=300.0, structure=StructureInfo(volume=1.0, n_atoms=1.0))
        assert model.components == []
        assert model.n_planes == 0
