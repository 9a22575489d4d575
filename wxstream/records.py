"""
Data model for weather streams.

A stream is a sequence of :class:`DailyRecord` objects, one per local
calendar day. Each record carries raw weather in exactly one mode
(daily extremes or hourly observations), any user-specified fire-index
codes, an optional burn-condition override and the cached results of the
last computation.

Records are plain containers. External callers go through
:class:`wxstream.stream.WeatherStream`; only the reconciliation and
invalidation modules mutate a record directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntFlag

import numpy as np

HOURS_PER_DAY = 24

# Physical ranges accepted from callers and imports
TEMPERATURE_RANGE = (-50.0, 60.0)
RH_RANGE = (0.0, 100.0)
WIND_DIRECTION_RANGE = (0.0, 360.0)
FFMC_RANGE = (0.0, 101.0)
DMC_RANGE = (0.0, 500.0)
DC_RANGE = (0.0, 1500.0)


class DayMode(Enum):
    """Source of truth for a day's raw weather."""

    UNSET = "unset"
    DAILY = "daily"
    HOURLY = "hourly"


class DailyFlags(IntFlag):
    """Bits reported by ``WeatherStream.is_daily_used``."""

    NONE = 0
    FFMC = 0x01
    ISI = 0x02
    BUI = 0x04
    DMC = 0x08
    DC = 0x10
    FWI = 0x20
    DAILY_WEATHER = 0x40


class WeatherOptions(IntFlag):
    """Stream-wide calculation options."""

    NONE = 0
    FFMC_VAN_WAGNER = 0x1
    USER_SPECIFIED = 0x4


@dataclass
class DailyWeather:
    """Daily extremes for a day in daily mode."""

    min_temp: float
    max_temp: float
    min_ws: float
    max_ws: float
    rh: float       # minimum relative humidity (%)
    precip: float   # daily precipitation (mm)
    wd: float       # wind direction (degrees)


@dataclass
class HourlyObservation:
    """
    One hour of weather.

    ``specified`` is False for hours seeded from a derived curve. ``ffmc``
    is only filled on read-back, with the user-set hourly FFMC if any.
    """

    temp: float
    rh: float
    precip: float
    ws: float
    wd: float
    specified: bool = True
    ffmc: float | None = None


@dataclass
class BurnCondition:
    """Hour window and weather thresholds for burning."""

    effective: bool = True
    start_hour: int = 0
    end_hour: int = 23
    max_wind_speed: float = 200.0
    min_relative_humidity: float = 0.0

    def __post_init__(self):
        for name in ("start_hour", "end_hour"):
            value = getattr(self, name)
            if not 0 <= value < HOURS_PER_DAY:
                raise ValueError(f"{name} must be within 0-23, got {value}")
        if self.max_wind_speed < 0:
            raise ValueError("max_wind_speed must be non-negative")
        if not RH_RANGE[0] <= self.min_relative_humidity <= RH_RANGE[1]:
            raise ValueError("min_relative_humidity must be within 0-100")


@dataclass
class SeedValues:
    """
    Starting conditions of a stream.

    ``ffmc``, ``dmc`` and ``dc`` stand in for the day before day 0.
    ``temperature``, ``wind_speed`` and ``relative_humidity`` fill days
    that have no weather of their own, and ``rain`` is precipitation
    before the first hour that counts toward day 0. When both
    ``hourly_ffmc`` and ``hourly_ffmc_hour`` are set the hourly FFMC
    chain starts from that value at that hour of day 0.
    """

    ffmc: float = 85.0
    dmc: float = 6.0
    dc: float = 15.0
    temperature: float = 0.0
    wind_speed: float = 0.0
    relative_humidity: float = 50.0
    rain: float = 0.0
    hourly_ffmc: float | None = None
    hourly_ffmc_hour: int | None = None

    def __post_init__(self):
        problems = validate_codes(ffmc=self.ffmc, dmc=self.dmc, dc=self.dc)
        problems += [
            p for p in (
                _check_range("temperature", self.temperature, *TEMPERATURE_RANGE),
                _check_range("wind_speed", self.wind_speed, 0.0),
                _check_range("relative_humidity", self.relative_humidity, *RH_RANGE),
                _check_range("rain", self.rain, 0.0),
            ) if p
        ]
        if self.hourly_ffmc is not None:
            problems += validate_codes(ffmc=self.hourly_ffmc)
        if self.hourly_ffmc_hour is not None and not 0 <= self.hourly_ffmc_hour < HOURS_PER_DAY:
            problems.append(f"hourly_ffmc_hour={self.hourly_ffmc_hour} outside 0-23")
        if problems:
            raise ValueError("Invalid seed values: " + "; ".join(problems))

    def blank_weather(self) -> DailyWeather:
        """Flat daily weather used for days with no observations."""
        return DailyWeather(
            min_temp=self.temperature,
            max_temp=self.temperature,
            min_ws=self.wind_speed,
            max_ws=self.wind_speed,
            rh=self.relative_humidity,
            precip=0.0,
            wd=0.0,
        )


@dataclass
class HourlyWeather:
    """Complete 24-hour weather arrays for one day."""

    temp: np.ndarray
    rh: np.ndarray
    ws: np.ndarray
    wd: np.ndarray
    precip: np.ndarray


@dataclass
class DerivedDay:
    """Cached results of the last computation of a day."""

    weather: HourlyWeather
    rain_24h: float
    ffmc: float
    dmc: float
    dc: float
    bui: float
    isi: float
    fwi: float
    dsr: float
    hourly_ffmc: np.ndarray
    hourly_isi: np.ndarray
    hourly_fwi: np.ndarray


def _empty_hours() -> list:
    return [None] * HOURS_PER_DAY


def _empty_hour_codes() -> list[dict[str, float]]:
    return [{} for _ in range(HOURS_PER_DAY)]


@dataclass(eq=False)
class DailyRecord:
    """
    One calendar day of a weather stream.

    ``specified_codes`` holds user daily values keyed by ``ffmc``, ``dmc``,
    ``dc`` and ``bui``; ``specified_hourly_codes`` holds per-hour values
    keyed by ``ffmc``, ``isi`` and ``fwi``.
    """

    day: date
    mode: DayMode = DayMode.UNSET
    daily: DailyWeather | None = None
    hourly: list[HourlyObservation | None] = field(default_factory=_empty_hours)
    specified_codes: dict[str, float] = field(default_factory=dict)
    specified_hourly_codes: list[dict[str, float]] = field(default_factory=_empty_hour_codes)
    burn_condition: BurnCondition | None = None
    derived: DerivedDay | None = None

    def has_user_codes(self) -> bool:
        return bool(self.specified_codes) or any(self.specified_hourly_codes)

    def clear_user_codes(self) -> None:
        self.specified_codes.clear()
        for codes in self.specified_hourly_codes:
            codes.clear()


# =============================================================================
# Validation
# =============================================================================


def _check_range(name: str, value: float, low: float, high: float | None = None) -> str | None:
    if value is None or not np.isfinite(value):
        return f"{name} is missing or not finite"
    if value < low or (high is not None and value > high):
        bound = f"[{low}, {high}]" if high is not None else f">= {low}"
        return f"{name}={value} outside {bound}"
    return None


def validate_daily(weather: DailyWeather) -> list[str]:
    """
    Check daily extremes against physical ranges.

    Returns
    -------
    list[str]
        Problems found (empty when the values are acceptable).
    """
    checks = [
        _check_range("min_temp", weather.min_temp, *TEMPERATURE_RANGE),
        _check_range("max_temp", weather.max_temp, *TEMPERATURE_RANGE),
        _check_range("min_ws", weather.min_ws, 0.0),
        _check_range("max_ws", weather.max_ws, 0.0),
        _check_range("rh", weather.rh, *RH_RANGE),
        _check_range("precip", weather.precip, 0.0),
        _check_range("wd", weather.wd, *WIND_DIRECTION_RANGE),
    ]
    problems = [c for c in checks if c]
    if not problems:
        if weather.min_temp > weather.max_temp:
            problems.append(f"min_temp {weather.min_temp} exceeds max_temp {weather.max_temp}")
        if weather.min_ws > weather.max_ws:
            problems.append(f"min_ws {weather.min_ws} exceeds max_ws {weather.max_ws}")
    return problems


def validate_hourly(observation: HourlyObservation) -> list[str]:
    """Check one hour of weather against physical ranges."""
    checks = [
        _check_range("temp", observation.temp, *TEMPERATURE_RANGE),
        _check_range("rh", observation.rh, *RH_RANGE),
        _check_range("precip", observation.precip, 0.0),
        _check_range("ws", observation.ws, 0.0),
        _check_range("wd", observation.wd, *WIND_DIRECTION_RANGE),
    ]
    return [c for c in checks if c]


def validate_codes(**codes: float | None) -> list[str]:
    """Check user-specified fire-index codes; ``None`` values are ignored."""
    ranges = {
        "ffmc": FFMC_RANGE,
        "dmc": DMC_RANGE,
        "dc": DC_RANGE,
        "bui": (0.0, None),
        "isi": (0.0, None),
        "fwi": (0.0, None),
    }
    problems = []
    for name, value in codes.items():
        if value is None:
            continue
        if name not in ranges:
            problems.append(f"unknown code '{name}'")
            continue
        problem = _check_range(name, value, *ranges[name])
        if problem:
            problems.append(problem)
    return problems
