from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from scancheck.exceptions import ConfigurationError
from scancheck.geometry import contract

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


class CheckSettings(BaseModel):
    """
    Tolerances used by the structural checks.

    Imperial values mirror how the thresholds are specified for bathroom scans;
    the ``*_m`` properties give the meter equivalents the checks compare with.
    """

    touching_threshold_in: float = Field(contract.TOUCHING_THRESHOLD_INCHES, gt=0.0, le=12.0)
    wall_gap_max_in: float = Field(contract.WALL_GAP_MAX_INCHES, gt=0.0, le=120.0)
    crooked_angle_max_deg: float = Field(contract.CROOKED_ANGLE_MAX_DEG, ge=0.0, le=45.0)
    corner_junction_min_deg: float = Field(contract.CORNER_JUNCTION_MIN_DEG, ge=0.0, le=90.0)
    colinear_gap_max_in: float = Field(contract.COLINEAR_WALL_GAP_MAX_INCHES, ge=0.0, le=24.0)
    colinear_parallel_threshold: float = Field(contract.COLINEAR_WALL_PARALLEL_THRESHOLD, ge=0.0, le=1.0)
    nib_wall_threshold_ft: float = Field(contract.NIB_WALL_THRESHOLD_FT, ge=0.0, le=10.0)
    low_ceiling_threshold_ft: float = Field(contract.LOW_CEILING_THRESHOLD_FT, ge=0.0, le=20.0)
    tub_gap_min_in: float = Field(contract.TUB_GAP_MIN_INCHES, ge=0.0, le=24.0)
    tub_gap_max_in: float = Field(contract.TUB_GAP_MAX_INCHES, ge=0.0, le=48.0)
    door_clearance_m: float = Field(contract.DOOR_CLEARANCE_METERS, ge=0.0, le=5.0)
    step_over_height_m: float = Field(contract.STEP_OVER_HEIGHT_METERS, ge=0.0, le=1.0)
    door_width_shrink_m: float = Field(contract.DOOR_WIDTH_SHRINK_METERS, ge=0.0, le=1.0)
    overlap_tolerance_m: float = Field(contract.OVERLAP_TOLERANCE_METERS, ge=0.0, le=0.5)
    default_wall_thickness_m: float = Field(contract.DEFAULT_WALL_THICKNESS_METERS, gt=0.0, le=2.0)
    external_opening_perimeter_m: float = Field(contract.EXTERNAL_OPENING_PERIMETER_METERS, ge=0.0, le=10.0)
    expected_version: int = contract.EXPECTED_SCAN_VERSION

    @field_validator("tub_gap_max_in")
    @classmethod
    def _tub_band_ordered(cls, value: float, info: ValidationInfo) -> float:
        low = info.data.get("tub_gap_min_in")
        if low is not None and value < low:
            raise ValueError("tub_gap_max_in must not be below tub_gap_min_in")
        return value

    @classmethod
    def default(cls) -> "CheckSettings":
        """Tolerances from the loaded configuration (``SCANCHECK_CONFIG`` or built-ins)."""
        return get_settings().checks

    @property
    def touching_threshold_m(self) -> float:
        return contract.inches_to_meters(self.touching_threshold_in)

    @property
    def wall_gap_max_m(self) -> float:
        return contract.inches_to_meters(self.wall_gap_max_in)

    @property
    def colinear_gap_max_m(self) -> float:
        return contract.inches_to_meters(self.colinear_gap_max_in)

    @property
    def nib_wall_threshold_m(self) -> float:
        return contract.feet_to_meters(self.nib_wall_threshold_ft)

    @property
    def low_ceiling_threshold_m(self) -> float:
        return contract.feet_to_meters(self.low_ceiling_threshold_ft)

    @property
    def tub_gap_min_m(self) -> float:
        return contract.inches_to_meters(self.tub_gap_min_in)

    @property
    def tub_gap_max_m(self) -> float:
        return contract.inches_to_meters(self.tub_gap_max_in)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    log_file: Path | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:  # noqa: D401
        if value is None:
            return "INFO"
        level = str(value).upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class Settings(BaseModel):
    checks: CheckSettings = Field(default_factory=CheckSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from a YAML configuration file.
        
        Args:
            path: Optional path to configuration file. If not provided, uses
                the SCANCHECK_CONFIG environment variable, and falls back to
                built-in defaults when neither is set.
        
        Returns:
            Settings instance with loaded configuration.
        
        Raises:
            FileNotFoundError: If an explicitly configured file does not exist.
            ConfigurationError: If configuration is invalid.
        """
        env_path = os.getenv("SCANCHECK_CONFIG")
        config_path = path or (Path(env_path) if env_path else None)
        if config_path is None:
            return cls()
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        if not isinstance(payload, dict):
            raise ConfigurationError(
                "Invalid configuration: top level must be a mapping",
                {"path": str(config_path)},
            )
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "CheckSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
