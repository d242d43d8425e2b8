"""Tests for YAML settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from scancheck.checks.walls import check_nib_walls
from scancheck.exceptions import ConfigurationError
from scancheck.models.raw_scan import RawScan
from scancheck.settings import CheckSettings, LoggingSettings, Settings, get_settings
from tests.utils_scan import make_scan, make_wall

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    monkeypatch.delenv("SCANCHECK_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_without_config():
    settings = Settings.load()
    assert settings.checks == CheckSettings.default()
    assert settings.logging.level == "INFO"


def test_meter_conversions():
    checks = CheckSettings()
    assert checks.touching_threshold_m == pytest.approx(0.0254)
    assert checks.wall_gap_max_m == pytest.approx(0.3048)
    assert checks.nib_wall_threshold_m == pytest.approx(0.3048)
    assert checks.low_ceiling_threshold_m == pytest.approx(2.286)
    assert (checks.tub_gap_min_m, checks.tub_gap_max_m) == pytest.approx((0.0254, 0.1524))


def test_shipped_config_matches_defaults():
    settings = Settings.load(DEFAULT_CONFIG)
    assert settings.checks == CheckSettings()
    assert settings.logging == LoggingSettings()


def test_partial_config_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("checks:\n  wall_gap_max_in: 6\nlogging:\n  level: debug\n", encoding="utf-8")
    settings = Settings.load(path)
    assert settings.checks.wall_gap_max_in == 6.0
    assert settings.checks.touching_threshold_in == 1.0
    assert settings.logging.level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert Settings.load(path) == Settings()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Settings.load(tmp_path / "missing.yaml")


def test_non_mapping_raises_configuration_error(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc_info:
        Settings.load(path)
    assert exc_info.value.details["path"] == str(path)


@pytest.mark.parametrize(
    "body",
    [
        "checks:\n  touching_threshold_in: -1\n",
        "checks:\n  tub_gap_min_in: 4\n  tub_gap_max_in: 2\n",
        "logging:\n  level: LOUD\n",
    ],
)
def test_invalid_values_raise_configuration_error(tmp_path, body):
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        Settings.load(path)


def test_tub_band_must_be_ordered():
    with pytest.raises(ValidationError):
        CheckSettings(tub_gap_min_in=4.0, tub_gap_max_in=2.0)


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("checks:\n  nib_wall_threshold_ft: 2\n", encoding="utf-8")
    monkeypatch.setenv("SCANCHECK_CONFIG", str(path))
    assert get_settings().checks.nib_wall_threshold_ft == 2.0


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_configured_tolerances_reach_checks(tmp_path, monkeypatch):
    """Checks called without explicit settings use the loaded configuration."""
    scan = RawScan.from_dict(make_scan(walls=[make_wall("wall-1", length=1.0)]))
    assert check_nib_walls(scan) is False

    path = tmp_path / "nib.yaml"
    path.write_text("checks:\n  nib_wall_threshold_ft: 5.0\n", encoding="utf-8")
    monkeypatch.setenv("SCANCHECK_CONFIG", str(path))
    get_settings.cache_clear()

    assert CheckSettings.default().nib_wall_threshold_ft == 5.0
    assert check_nib_walls(scan) is True
