"""
Tests for loading the application config.
"""

from datetime import time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from bookingengine.config import AppConfig, BusinessHoursConfig


def _write(tmp_path, text: str):
    path = tmp_path / "bookingengine.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig defaults and YAML loading."""

    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "Europe/Warsaw"
        assert config.business_hours.get_open_time() == time(8, 0)
        assert config.business_hours.get_close_time() == time(20, 0)
        assert config.suggestions.per_day == 3
        assert config.suggestions.max_total == 10
        assert config.pricing.base_rate_physiotherapy == Decimal("150")
        assert config.data_file is None

    def test_load_from_yaml(self, tmp_path):
        path = _write(
            tmp_path,
            "timezone: Europe/Berlin\n"
            "business_hours:\n"
            "  open_hour: 9\n"
            "  close_hour: 17\n"
            "  allow_overrun: false\n"
            "pricing:\n"
            "  dead_hour_discount: 0.1\n"
            "data_file: data.json\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "Europe/Berlin"
        assert config.business_hours.open_hour == 9
        assert config.pricing.dead_hour_discount == Decimal("0.1")
        assert config.pricing.base_rate_other == Decimal("100")
        assert config.data_file == tmp_path / "data.json"

    def test_empty_file_gives_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "timezone: [unclosed\n"))

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- a\n- b\n"))

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_invalid_pricing_section(self, tmp_path):
        with pytest.raises(ValidationError):
            AppConfig.load_from_yaml(_write(tmp_path, "pricing:\n  dead_hours_start: 24\n"))

    def test_builds_slot_calculator(self):
        config = AppConfig(business_hours={"open_hour": 9, "close_hour": 12, "allow_overrun": False})

        calculator = config.build_slot_calculator()

        assert calculator.timezone == "Europe/Warsaw"
        assert calculator.business_hours.open_time == time(9, 0)
        assert calculator.business_hours.close_time == time(12, 0)
        assert calculator.business_hours.allow_overrun is False


class TestBusinessHoursConfig:
    """Tests for opening-hours validation."""

    @pytest.mark.parametrize(
        "values",
        [
            {"open_hour": 24},
            {"close_hour": -1},
            {"open_hour": 18, "close_hour": 8},
            {"open_hour": 8, "close_hour": 8},
            {"slot_step_minutes": 0},
        ],
    )
    def test_invalid_values(self, values):
        with pytest.raises(ValidationError):
            BusinessHoursConfig(**values)
