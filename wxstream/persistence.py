"""
Versioned save and restore of weather streams.

A stream is encoded as a JSON-compatible dictionary holding its settings,
every day's raw inputs, user codes and burn overrides, the dirty marker
and the cached results of days that are still valid. Decoding restores
the marker exactly, so a loaded stream recomputes nothing until it is
modified.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

import numpy as np

from wxstream.diurnal import CurveShape
from wxstream.engines import engine_from_name
from wxstream.invalidation import is_valid
from wxstream.location import WorldLocation
from wxstream.records import (
    HOURS_PER_DAY,
    BurnCondition,
    DailyRecord,
    DailyWeather,
    DayMode,
    DerivedDay,
    HourlyObservation,
    HourlyWeather,
    SeedValues,
    WeatherOptions,
)
from wxstream.stream import WeatherStream

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_WEATHER_FIELDS = ("temp", "rh", "ws", "wd", "precip")
_HOURLY_INDEX_FIELDS = ("hourly_ffmc", "hourly_isi", "hourly_fwi")
_DAILY_INDEX_FIELDS = ("rain_24h", "ffmc", "dmc", "dc", "bui", "isi", "fwi", "dsr")


class StreamDecodeError(ValueError):
    """Raised when a saved stream cannot be restored."""


# =============================================================================
# Encoding
# =============================================================================


def _encode_derived(derived: DerivedDay) -> dict[str, Any]:
    data: dict[str, Any] = {
        "weather": {name: getattr(derived.weather, name).tolist() for name in _WEATHER_FIELDS},
    }
    for name in _DAILY_INDEX_FIELDS:
        data[name] = getattr(derived, name)
    for name in _HOURLY_INDEX_FIELDS:
        data[name] = getattr(derived, name).tolist()
    return data


def _encode_record(record: DailyRecord, valid: bool) -> dict[str, Any]:
    entry: dict[str, Any] = {"day": record.day.isoformat(), "mode": record.mode.value}
    if record.daily is not None:
        entry["daily"] = asdict(record.daily)
    if record.mode is DayMode.HOURLY:
        entry["hourly"] = [
            None if obs is None else {k: v for k, v in asdict(obs).items() if k != "ffmc"}
            for obs in record.hourly
        ]
    if record.specified_codes:
        entry["codes"] = dict(record.specified_codes)
    hour_codes = {str(h): dict(c) for h, c in enumerate(record.specified_hourly_codes) if c}
    if hour_codes:
        entry["hourly_codes"] = hour_codes
    if record.burn_condition is not None:
        entry["burn_condition"] = asdict(record.burn_condition)
    if valid and record.derived is not None:
        entry["derived"] = _encode_derived(record.derived)
    return entry


def encode_stream(stream: WeatherStream) -> dict[str, Any]:
    """
    Encode a stream as a JSON-compatible dictionary.

    Parameters
    ----------
    stream : WeatherStream
        Stream to encode. It is not recalculated; stale days are saved
        without caches.

    Returns
    -------
    dict
        Payload tagged with ``format_version``.
    """
    marker = stream.dirty_marker
    return {
        "format_version": FORMAT_VERSION,
        "start_date": stream.start_date.isoformat(),
        "location": asdict(stream.location),
        "daylight_saving": stream.daylight_saving,
        "seeds": asdict(stream.seeds),
        "temperature_shape": asdict(stream.temperature_shape),
        "wind_shape": asdict(stream.wind_shape),
        "options": int(stream.options),
        "engine": stream.engine.name,
        "burn_condition": asdict(stream.burn_condition),
        "dirty_marker": marker,
        "days": [
            _encode_record(record, is_valid(marker, index))
            for index, record in enumerate(stream)
        ],
    }


# =============================================================================
# Decoding
# =============================================================================


def _decode_derived(data: dict[str, Any]) -> DerivedDay:
    weather = HourlyWeather(
        **{name: np.asarray(data["weather"][name], dtype=float) for name in _WEATHER_FIELDS}
    )
    for name in _WEATHER_FIELDS:
        if getattr(weather, name).shape != (HOURS_PER_DAY,):
            raise StreamDecodeError(f"Cached {name} does not hold {HOURS_PER_DAY} hours")
    return DerivedDay(
        weather=weather,
        **{name: float(data[name]) for name in _DAILY_INDEX_FIELDS},
        **{name: np.asarray(data[name], dtype=float) for name in _HOURLY_INDEX_FIELDS},
    )


def _decode_record(record: DailyRecord, entry: dict[str, Any]) -> None:
    if date.fromisoformat(entry["day"]) != record.day:
        raise StreamDecodeError(f"Day {entry['day']} is out of sequence (expected {record.day})")

    record.mode = DayMode(entry["mode"])
    if "daily" in entry:
        record.daily = DailyWeather(**entry["daily"])
    if "hourly" in entry:
        hourly = entry["hourly"]
        if len(hourly) != HOURS_PER_DAY:
            raise StreamDecodeError(f"{record.day}: expected {HOURS_PER_DAY} hourly slots")
        record.hourly = [None if obs is None else HourlyObservation(**obs) for obs in hourly]
    record.specified_codes.update(entry.get("codes", {}))
    for hour, codes in entry.get("hourly_codes", {}).items():
        record.specified_hourly_codes[int(hour)].update(codes)
    if "burn_condition" in entry:
        record.burn_condition = BurnCondition(**entry["burn_condition"])
    if "derived" in entry:
        record.derived = _decode_derived(entry["derived"])


def decode_stream(data: dict[str, Any]) -> WeatherStream:
    """
    Rebuild a stream from :func:`encode_stream` output.

    Raises
    ------
    StreamDecodeError
        If the format version is unsupported or the payload is corrupt.
    """
    if not isinstance(data, dict):
        raise StreamDecodeError("Stream payload must be a mapping")
    version = data.get("format_version")
    if version != FORMAT_VERSION:
        raise StreamDecodeError(
            f"Unsupported stream format version {version!r} (expected {FORMAT_VERSION})"
        )

    try:
        stream = WeatherStream(
            start=date.fromisoformat(data["start_date"]),
            location=WorldLocation(**data["location"]),
            seeds=SeedValues(**data["seeds"]),
            temperature_shape=CurveShape(**data["temperature_shape"]),
            wind_shape=CurveShape(**data["wind_shape"]),
            burn_condition=BurnCondition(**data["burn_condition"]),
            options=WeatherOptions(data["options"]),
            daylight_saving=bool(data["daylight_saving"]),
            engine=engine_from_name(data["engine"]),
        )
        days = data["days"]
        stream.increase_conditions(len(days))
        for record, entry in zip(stream, days):
            _decode_record(record, entry)
        marker = data["dirty_marker"]
        if marker is not None and (
            isinstance(marker, bool) or not isinstance(marker, int) or not 0 <= marker < len(days)
        ):
            raise StreamDecodeError(f"Invalid dirty marker {marker!r} for {len(days)} days")
    except StreamDecodeError:
        raise
    except (KeyError, TypeError, ValueError, IndexError) as e:
        raise StreamDecodeError(f"Corrupt stream payload: {e}") from e

    # Days without a cache must be recomputed even if the marker says otherwise
    missing = [i for i, record in enumerate(stream) if record.derived is None]
    if missing:
        marker = missing[0] if marker is None else min(marker, missing[0])
    stream._restore_marker(marker)
    return stream


# =============================================================================
# Files
# =============================================================================


def save_stream(stream: WeatherStream, path: str | Path) -> Path:
    """Write a stream to a JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(encode_stream(stream), f, indent=2)
    logger.info(f"Saved stream ({stream.num_days()} days) to {path}")
    return path


def load_stream(path: str | Path) -> WeatherStream:
    """
    Load a stream saved by :func:`save_stream`.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    StreamDecodeError
        If the file is not valid JSON or not a supported stream.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stream file not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise StreamDecodeError(f"Invalid JSON in {path}: {e}") from e

    stream = decode_stream(data)
    logger.info(f"Loaded stream ({stream.num_days()} days) from {path}")
    return stream
