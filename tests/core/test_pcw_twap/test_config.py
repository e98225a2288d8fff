"""Tests for src/core/pcw_twap/config.py — params loading."""

import json

import pytest
import yaml

from src.core.pcw_twap import OracleParams, build_oracle, load_params, params_from_mapping


class TestOracleParams:
    def test_defaults(self):
        params = OracleParams(init_price=10_000)
        assert params.start_delay_ms == 0
        assert params.cap_ppm == 1_000
        assert params.validate() == []

    def test_validation_collects_errors(self):
        params = OracleParams(init_price=0, start_delay_ms=30_000, cap_ppm=0)
        errors = params.validate()
        assert len(errors) == 3
        assert any("init_price" in e for e in errors)
        assert any("cap_ppm" in e for e in errors)
        assert any("multiple" in e for e in errors)

    def test_type_errors(self):
        params = OracleParams(init_price="10000")  # type: ignore[arg-type]
        assert params.validate() == ["init_price must be an int"]

    def test_build_oracle(self):
        config, state = build_oracle(OracleParams(init_price=10_000, start_delay_ms=60_000, cap_ppm=1_000))
        assert config.cap_step == 10
        assert state.market_start_time is None


class TestParamsFromMapping:
    def test_valid(self):
        params = params_from_mapping({"init_price": 5, "start_delay_ms": 120_000, "cap_ppm": 10})
        assert params == OracleParams(5, 120_000, 10)

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="unknown"):
            params_from_mapping({"init_price": 5, "window": 1})

    def test_missing_price(self):
        with pytest.raises(ValueError):
            params_from_mapping({"cap_ppm": 10})

    def test_invalid_logs_each_error(self, caplog):
        with caplog.at_level("ERROR"):
            with pytest.raises(ValueError):
                params_from_mapping({"init_price": 0, "cap_ppm": 0})
        assert len([r for r in caplog.records if "validation error" in r.getMessage()]) == 2

    def test_not_a_mapping(self):
        with pytest.raises(TypeError):
            params_from_mapping([1, 2, 3])  # type: ignore[arg-type]


class TestLoadParams:
    def test_yaml(self, tmp_path):
        path = tmp_path / "oracle.yaml"
        path.write_text(yaml.safe_dump({"init_price": 10_000, "start_delay_ms": 60_000, "cap_ppm": 1_000}))
        assert load_params(path) == OracleParams(10_000, 60_000, 1_000)

    def test_yaml_nested(self, tmp_path):
        path = tmp_path / "venue.yml"
        path.write_text(yaml.safe_dump({"oracle": {"init_price": 7}}))
        assert load_params(path) == OracleParams(init_price=7)

    def test_json(self, tmp_path):
        path = tmp_path / "oracle.json"
        path.write_text(json.dumps({"init_price": 10_000, "cap_ppm": 500}))
        assert load_params(str(path)).cap_ppm == 500

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "oracle.toml"
        path.write_text("init_price = 1")
        with pytest.raises(ValueError, match="Unsupported"):
            load_params(path)
