"""
Tests for Bragg-edge tabulation and the extraction entry point.
"""

import numpy as np
import pytest

from braggforge.bragg.edges import (
    BraggEdge,
    BraggEdgeResult,
    check_capacity,
    extract_bragg_edges,
    tabulate_bragg_edges,
    xs_normalization,
)
from braggforge.constants import wl2ekin
from braggforge.errors import (
    AmbiguousMatchError,
    CapacityError,
    ConfigurationError,
    NotFoundError,
)
from braggforge.material.model import StructureInfo

from conftest import make_model, make_species


def _loader_for(model):
    calls = []

    def loader(config, temperature):
        calls.append((config, temperature))
        return model

    loader.calls = calls
    return loader


@pytest.fixture
def hydrogen_model():
    """One natural-hydrogen component and one plane."""
    species = make_species(1, 0, incoherent=80.0, coherent=1.0, free=81.0)
    return make_model([(species, 0.5)], planes=[(1.0, 2.0, 4)], volume=100.0, n_atoms=2.0)


# ============================================================================
# Capacity and normalization
# ============================================================================

class TestCapacity:
    """Test the strict output-capacity bound."""

    def test_boundary_is_strict(self):
        check_capacity(3, 7)
        with pytest.raises(CapacityError):
            check_capacity(3, 6)
        with pytest.raises(CapacityError):
            check_capacity(3, 3)

    def test_empty_plane_list_needs_one_slot(self):
        check_capacity(0, 1)
        with pytest.raises(CapacityError):
            check_capacity(0, 0)


class TestNormalization:
    """Test 0.5/(V*N) and its preconditions."""

    def test_value(self):
        assert xs_normalization(StructureInfo(volume=100.0, n_atoms=2.0)) == pytest.approx(0.0025)

    @pytest.mark.parametrize("volume,n_atoms", [(0.0, 2.0), (-1.0, 2.0), (100.0, 0.0)])
    def test_non_positive_cell_rejected(self, volume, n_atoms):
        with pytest.raises(ConfigurationError):
            xs_normalization(StructureInfo(volume=volume, n_atoms=n_atoms))


# ============================================================================
# Tabulation
# ============================================================================

class TestTabulate:
    """Test per-plane energies and weighted cross sections."""

    def test_single_plane_values(self, hydrogen_model):
        edges = tabulate_bragg_edges(hydrogen_model, 3)
        energy = wl2ekin(2.0)
        assert len(edges) == 1
        assert edges[0].energy == pytest.approx(energy)
        assert edges[0].weighted_xs == pytest.approx(energy * 2.0 * 4 * 1.0 * (0.5 / 200) * 4.0)

    def test_plane_order_preserved(self):
        planes = [(1.2, 1.0, 6), (2.3, 0.5, 8), (0.9, 2.0, 12)]
        model = make_model([(make_species(13, 0), 1.0)], planes=planes)
        edges = tabulate_bragg_edges(model, 100)
        assert [e.energy for e in edges] == [wl2ekin(2.0 * d) for d, _, _ in planes]

    def test_zero_structure_factor_gives_zero_weight(self):
        model = make_model([(make_species(13, 0), 1.0)], planes=[(2.0, 0.0, 6)])
        assert tabulate_bragg_edges(model, 3)[0].weighted_xs == 0.0

    def test_non_positive_d_spacing_rejected(self):
        model = make_model([(make_species(13, 0), 1.0)], planes=[(2.0, 1.0, 6), (0.0, 1.0, 6)])
        with pytest.raises(ConfigurationError, match="d-spacing"):
            tabulate_bragg_edges(model, 100)

    def test_capacity_checked(self, hydrogen_model):
        with pytest.raises(CapacityError):
            tabulate_bragg_edges(hydrogen_model, 2)


# ============================================================================
# Extraction entry point
# ============================================================================

class TestExtract:
    """Test loader -> scan -> validate -> tabulate."""

    def test_reference_example(self, hydrogen_model):
        result = extract_bragg_edges("any.yaml", 300.0, 1, 0, 3, loader=_loader_for(hydrogen_model))
        energy = wl2ekin(2.0)
        assert result.plane_count == 1
        assert result.bound_incoherent_xs == 80.0
        assert result.bound_coherent_xs == 1.0
        assert result.free_atom_xs == 81.0
        assert result.fraction == 0.5
        assert result.redistribute is True
        assert result.min_incoherent_contribution == pytest.approx(80.0)
        assert result.edges[0].energy == pytest.approx(energy)
        assert result.edges[0].weighted_xs == pytest.approx(energy * 2.0 * 4 * 1.0 * (0.5 / 200) * 4.0)

    def test_loader_receives_config_and_temperature(self, hydrogen_model):
        loader = _loader_for(hydrogen_model)
        extract_bragg_edges("mat.yaml;dcutoff=0.4", 296.0, 1, 0, 3, loader=loader)
        assert loader.calls == [("mat.yaml;dcutoff=0.4", 296.0)]

    def test_missing_species(self, hydrogen_model):
        with pytest.raises(NotFoundError):
            extract_bragg_edges("x", 300.0, 6, 12, 3, loader=_loader_for(hydrogen_model))

    def test_ambiguous_species(self):
        h = make_species(1, 0)
        model = make_model([(h, 0.4), (h, 0.4)], planes=[(1.0, 1.0, 1)])
        with pytest.raises(AmbiguousMatchError):
            extract_bragg_edges("x", 300.0, 1, 0, 10, loader=_loader_for(model))

    def test_single_crystal_rejected_before_scan(self, hydrogen_model):
        model = make_model(
            [(make_species(1, 0, incoherent=80.0), 0.5)],
            planes=[(1.0, 2.0, 4)],
            single_crystal=True,
        )
        with pytest.raises(ConfigurationError, match="single-crystal"):
            extract_bragg_edges("x", 300.0, 1, 0, 3, loader=_loader_for(model))

    def test_single_crystal_config_rejected_before_file_is_read(self, tmp_path):
        missing = tmp_path / "does-not-exist.yaml"
        with pytest.raises(ConfigurationError, match="single-crystal"):
            extract_bragg_edges(f"{missing};mos=0.5deg;dir1=@crys_hkl:0,0,1@lab:0,0,1", 300.0, 1, 0, 3)

    def test_capacity_boundary(self):
        planes = [(2.0, 1.0, 6), (1.5, 1.0, 12), (1.0, 1.0, 24)]
        model = make_model([(make_species(13, 0), 1.0)], planes=planes)
        loader = _loader_for(model)
        assert extract_bragg_edges("x", 300.0, 13, 0, 7, loader=loader).plane_count == 3
        with pytest.raises(CapacityError):
            extract_bragg_edges("x", 300.0, 13, 0, 6, loader=loader)

    def test_deterministic(self, hydrogen_model):
        loader = _loader_for(hydrogen_model)
        first = extract_bragg_edges("x", 300.0, 1, 0, 3, loader=loader)
        second = extract_bragg_edges("x", 300.0, 1, 0, 3, loader=loader)
        assert first == second
        assert first.packed().tobytes() == second.packed().tobytes()

    def test_extract_from_file(self, aluminium_file):
        result = extract_bragg_edges(f"{aluminium_file};dcutoff=0.8", 293.6, 13, 0, 1000)
        assert result.material_name == "Al"
        assert result.temperature == 293.6
        assert result.plane_count > 0
        assert result.fraction == 1.0
        assert result.redistribute is True
        assert result.msd > 0
        energies = result.energies
        # planes come sorted by decreasing d, so edge energies rise
        assert np.all(np.diff(energies) > 0)
        assert energies[0] == pytest.approx(wl2ekin(2.0 * 4.04958 / np.sqrt(3)), rel=1e-9)


# ============================================================================
# Result layout
# ============================================================================

class TestResultLayout:
    """Test the packed two-slots-per-plane layout."""

    def _result(self):
        return BraggEdgeResult(
            plane_count=2,
            edges=[BraggEdge(0.005, 0.1), BraggEdge(0.01, 0.3)],
            bound_incoherent_xs=0.1,
            bound_coherent_xs=1.5,
            free_atom_xs=1.4,
            msd=0.01,
            fraction=1.0,
            min_incoherent_contribution=0.0,
            redistribute=False,
        )

    def test_packed(self):
        packed = self._result().packed()
        assert packed.dtype == np.float64
        assert packed.tolist() == [0.005, 0.1, 0.01, 0.3]

    def test_write_into_leaves_tail_untouched(self):
        buffer = np.full(6, -1.0)
        assert self._result().write_into(buffer) == 2
        assert buffer.tolist() == [0.005, 0.1, 0.01, 0.3, -1.0, -1.0]

    def test_write_into_checks_capacity(self):
        with pytest.raises(CapacityError):
            self._result().write_into(np.zeros(4))

    def test_dict_round_trip(self):
        result = self._result()
        assert BraggEdgeResult.from_dict(result.to_dict()) == result
