"""Tests for material configuration strings."""

import math

import pytest

from braggforge.errors import ConfigurationError
from braggforge.material.config import (
    AUTO_DCUTOFF,
    DEFAULT_FSQUARECUT,
    MaterialConfig,
    parse_material_config,
    parse_temperature,
)


class TestParseTemperature:
    """Test temperature values with and without units."""

    def test_kelvin(self):
        assert parse_temperature("300") == 300.0
        assert parse_temperature("293.6K") == 293.6
        assert parse_temperature(" 20 K ") == 20.0

    def test_celsius(self):
        assert parse_temperature("20C") == pytest.approx(293.15)

    @pytest.mark.parametrize("text", ["0", "-5K", "-300C", "warm", "nanK"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_temperature(text)


class TestParseMaterialConfig:
    """Test the '<file>;key=value' syntax."""

    def test_filename_only(self):
        config = parse_material_config("Al.yaml")
        assert config == MaterialConfig(filename="Al.yaml")
        assert config.temperature is None
        assert config.effective_dcutoff == AUTO_DCUTOFF
        assert config.fsquarecut == DEFAULT_FSQUARECUT
        assert math.isinf(config.dcutoffup)
        assert not config.is_single_crystal

    def test_all_polycrystal_keys(self):
        config = parse_material_config("Al.yaml; temp=350K ;dcutoff=0.4Aa;dcutoffup=5;fsquarecut=1e-3;")
        assert config.temperature == 350.0
        assert config.dcutoff == 0.4
        assert config.effective_dcutoff == 0.4
        assert config.dcutoffup == 5.0
        assert config.fsquarecut == 1e-3

    def test_keys_are_case_insensitive(self):
        assert parse_material_config("Al.yaml;TEMP=300").temperature == 300.0

    @pytest.mark.parametrize("key", ["mos=0.5deg", "dir1=@crys_hkl:0,0,1@lab:0,0,1", "dir2=@crys:1,0,0@lab:1,0,0"])
    def test_single_crystal_keys(self, key):
        assert parse_material_config(f"Al.yaml;{key}").is_single_crystal

    def test_dirtol_alone_is_not_single_crystal(self):
        assert not parse_material_config("Al.yaml;dirtol=1deg").is_single_crystal

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "  ;temp=300",
            "Al.yaml;temp",
            "Al.yaml;colour=blue",
            "Al.yaml;temp=300;temp=400",
            "Al.yaml;dcutoff=abc",
            "Al.yaml;dcutoff=-1",
            "Al.yaml;dcutoff=1.0;dcutoffup=0.5",
            "Al.yaml;fsquarecut=-0.1",
            "Al.yaml;mos=",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ConfigurationError):
            parse_material_config(text)

    def test_non_string_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_material_config(42)


class TestMaterialConfig:
    """Test the config dataclass helpers."""

    def test_with_temperature(self):
        config = parse_material_config("Al.yaml;temp=300").with_temperature(77)
        assert config.temperature == 77.0

    def test_with_bad_temperature(self):
        with pytest.raises(ConfigurationError):
            MaterialConfig(filename="Al.yaml").with_temperature(0.0)

    def test_to_string_round_trip(self):
        text = "Al.yaml;temp=350K;dcutoff=0.4Aa;dcutoffup=5;fsquarecut=0.001;mos=0.5deg"
        config = parse_material_config(text)
        assert parse_material_config(config.to_string()) == config
