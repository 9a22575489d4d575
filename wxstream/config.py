"""
Configuration loading and validation for wxstream.

This module provides Pydantic models for validating the wxstream.yaml
configuration file and utility functions for loading configurations,
writing a starter template and setting up logging.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = Field(..., description="Project name")
    description: str = Field("", description="Project description")


class LocationConfig(BaseModel):
    """Station location and clock settings."""

    latitude: float = Field(51.0, ge=-90.0, le=90.0, description="Degrees north")
    longitude: float = Field(-115.0, ge=-180.0, le=180.0, description="Degrees east")
    utc_offset: float = Field(-7.0, ge=-14.0, le=14.0, description="Standard-time UTC offset (hours)")
    daylight_saving: bool = Field(False, description="Wall clock is one hour ahead of standard time")


class SeedConfig(BaseModel):
    """Starting codes and default weather."""

    ffmc: float = Field(85.0, ge=0.0, le=101.0)
    dmc: float = Field(6.0, ge=0.0, le=500.0)
    dc: float = Field(15.0, ge=0.0, le=1500.0)
    temperature: float = Field(0.0, ge=-50.0, le=60.0, description="Temperature for days without weather")
    wind_speed: float = Field(0.0, ge=0.0, description="Wind speed for days without weather")
    relative_humidity: float = Field(50.0, ge=0.0, le=100.0, description="RH for days without weather")
    rain: float = Field(0.0, ge=0.0, description="Rain before day 0 counted in its 24 h total")
    hourly_ffmc: float | None = Field(None, ge=0.0, le=101.0, description="Starting hourly FFMC")
    hourly_ffmc_hour: int | None = Field(None, ge=0, le=23, description="Local hour of hourly_ffmc")

    @model_validator(mode="after")
    def check_hourly_seed(self) -> "SeedConfig":
        """Hourly FFMC and its hour must be given together."""
        if (self.hourly_ffmc is None) != (self.hourly_ffmc_hour is None):
            raise ValueError("hourly_ffmc and hourly_ffmc_hour must be set together")
        return self


class CurveShapeConfig(BaseModel):
    """Diurnal curve parameters for one quantity."""

    alpha: float = Field(..., description="Hours after sunrise of the minimum")
    beta: float = Field(..., description="Hours after solar noon of the maximum")
    gamma: float = Field(..., description="Night-time decay rate")


class DiurnalConfig(BaseModel):
    """Curve shapes for temperature and wind."""

    temperature: CurveShapeConfig = Field(
        default_factory=lambda: CurveShapeConfig(alpha=-0.77, beta=2.80, gamma=-2.20)
    )
    wind: CurveShapeConfig = Field(
        default_factory=lambda: CurveShapeConfig(alpha=1.00, beta=1.24, gamma=-3.59)
    )


class BurnConditionConfig(BaseModel):
    """Stream-wide default burn condition."""

    effective: bool = Field(True)
    start_hour: int = Field(0, ge=0, le=23)
    end_hour: int = Field(23, ge=0, le=23)
    max_wind_speed: float = Field(200.0, ge=0.0)
    min_relative_humidity: float = Field(0.0, ge=0.0, le=100.0)


class CalculationConfig(BaseModel):
    """Fire-index calculation settings."""

    engine: Literal["default", "alternate"] = Field("default", description="Fire-index engine")
    user_specified: bool = Field(False, description="Honour user-entered codes from the start")

    @field_validator("engine", mode="before")
    @classmethod
    def lower_engine(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class InputConfig(BaseModel):
    """Weather inputs."""

    start_date: date = Field(..., description="Local calendar day of day 0")
    num_days: int = Field(0, ge=0, description="Blank days to create before import")
    daily_path: Path | None = Field(None, description="CSV of daily observations")
    hourly_path: Path | None = Field(None, description="CSV of hourly observations")
    invalid: Literal["fail", "skip"] = Field("fail", description="Action on rejected rows")


class OutputConfig(BaseModel):
    """Output configuration."""

    daily_path: Path | None = Field(None, description="Daily table CSV")
    hourly_path: Path | None = Field(None, description="Hourly table CSV")
    state_path: Path | None = Field(None, description="Saved stream JSON")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO")
    log_file: Path | None = Field(None)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class WxStreamConfig(BaseModel):
    """Root configuration model for wxstream."""

    project: ProjectConfig
    location: LocationConfig = Field(default_factory=LocationConfig)
    seeds: SeedConfig = Field(default_factory=SeedConfig)
    diurnal: DiurnalConfig = Field(default_factory=DiurnalConfig)
    burn_condition: BurnConditionConfig = Field(default_factory=BurnConditionConfig)
    calculation: CalculationConfig = Field(default_factory=CalculationConfig)
    input: InputConfig
    output: OutputConfig = Field(default_factory=OutputConfig)


# =============================================================================
# Loading
# =============================================================================


def load_config(config_path: str | Path) -> WxStreamConfig:
    """
    Load and validate configuration from a YAML file.

    Parameters
    ----------
    config_path : str or Path
        Path to the wxstream.yaml configuration file.

    Returns
    -------
    WxStreamConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the configuration is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raise ValueError(f"Empty configuration file: {config_path}")
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration must be a mapping: {config_path}")

    # Resolve relative paths relative to config file location
    raw_config = _resolve_paths(raw_config, config_path.parent)

    config = WxStreamConfig.model_validate(raw_config)

    logger.info(f"Configuration loaded: {config.project.name}")

    return config


def _resolve_paths(config: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Resolve ``./`` and ``../`` paths against the config file's directory."""

    def resolve(obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: resolve(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [resolve(item) for item in obj]
        elif isinstance(obj, str):
            if obj.startswith("./") or obj.startswith("../"):
                return str(base_dir / obj)
            return obj
        return obj

    return resolve(config)


def default_config(name: str = "my_stream", start_date: date | None = None) -> WxStreamConfig:
    """Configuration with default settings and conventional file names."""
    return WxStreamConfig(
        project=ProjectConfig(name=name, description="Template configuration - customize as needed"),
        input=InputConfig(
            start_date=start_date or date.today(),
            daily_path=Path("./daily.csv"),
        ),
        output=OutputConfig(
            daily_path=Path("./output/daily_fwi.csv"),
            hourly_path=Path("./output/hourly_fwi.csv"),
            state_path=Path("./output/stream.json"),
        ),
    )


def write_template(path: str | Path, name: str = "my_stream") -> Path:
    """Write a starter configuration file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = default_config(name).model_dump(mode="json")
    # Keep the ./ prefix so paths stay relative to the config file
    for section in ("input", "output"):
        for key, value in data[section].items():
            if key.endswith("_path") and value is not None and not value.startswith("."):
                data[section][key] = f"./{value}"

    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)

    logger.info(f"Wrote configuration template to {path}")
    return path


def setup_logging(config: WxStreamConfig, level: int | None = None) -> None:
    """
    Configure logging based on configuration.

    Parameters
    ----------
    config : WxStreamConfig
        Configuration object.
    level : int, optional
        Overrides ``output.log_level`` (used by the CLI's verbosity flags).
    """
    if level is None:
        level = getattr(logging, config.output.log_level)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if config.output.log_file:
        log_path = Path(config.output.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
