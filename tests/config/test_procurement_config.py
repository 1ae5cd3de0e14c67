"""Tests for procurement configuration loading (procure_config)."""

import logging
from pathlib import Path

import pytest
import yaml

from procure_config import get_active_config
from procure_config.loader import compute_checksum, load_config, parse_config
from procure_config.schema import ProcurementConfig


def write_yaml(tmp_path: Path, data) -> Path:
    path = tmp_path / "procurement.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestSchema:

    def test_defaults(self):
        config = ProcurementConfig.with_defaults()
        assert config.currency == "INR"
        assert config.carry_over_purchaser_reason is True
        assert config.require_invoice_number is True

    def test_currency_normalised(self):
        assert ProcurementConfig(currency=" usd ").currency == "USD"

    @pytest.mark.parametrize("code", ["", "RUPEE", "12A"])
    def test_bad_currency(self, code):
        with pytest.raises(ValueError):
            ProcurementConfig(currency=code)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown procurement config keys"):
            ProcurementConfig.from_dict({"currency": "INR", "auto_approve": True})

    def test_flag_must_be_bool(self):
        with pytest.raises(ValueError):
            ProcurementConfig.from_dict({"require_invoice_number": "yes"})

    def test_to_dict_round_trip(self):
        config = ProcurementConfig(currency="EUR", carry_over_purchaser_reason=False)
        assert ProcurementConfig.from_dict(config.to_dict()) == config


class TestLoader:

    def test_load_from_yaml(self, tmp_path):
        path = write_yaml(tmp_path, {"procurement": {"carry_over_purchaser_reason": False}})
        config = load_config(path)
        assert config.carry_over_purchaser_reason is False
        assert config.currency == "INR"

    def test_missing_section(self):
        with pytest.raises(ValueError, match="procurement"):
            parse_config({"other": {}})

    def test_empty_section_uses_defaults(self):
        assert parse_config({"procurement": None}) == ProcurementConfig()

    def test_top_level_must_be_mapping(self, tmp_path):
        path = write_yaml(tmp_path, ["a", "b"])
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_checksum_stable_and_sensitive(self):
        a = compute_checksum(ProcurementConfig())
        assert a == compute_checksum(ProcurementConfig())
        assert a != compute_checksum(ProcurementConfig(require_invoice_number=False))


class TestGetActiveConfig:

    def test_bundled_default(self):
        assert get_active_config() == ProcurementConfig()

    def test_explicit_path_and_trace(self, tmp_path, caplog):
        path = write_yaml(tmp_path, {"procurement": {"currency": "usd"}})
        with caplog.at_level(logging.INFO, logger="procure_kernel.config"):
            config = get_active_config(path)

        assert config.currency == "USD"
        traces = [r for r in caplog.records if r.getMessage() == "PROCURE_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0].checksum == compute_checksum(config)
        assert traces[0].config_path == str(path)
