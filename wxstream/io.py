"""
CSV import and table export for weather streams.

Input files may use any of the common column spellings for fire weather
(``TEMP``/``TEMPERATURE``, ``RH``/``MIN_RH``, ``WS``/``WIND_SPEED``, ...).
Readers standardize them to upper-case canonical names; importers feed
the rows through the stream's setter API so that every value passes the
same validation as interactive input.
"""

from __future__ import annotations

import logging
from datetime import datetime, time as dt_time
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from wxstream.records import HOURS_PER_DAY, validate_codes
from wxstream.stream import WeatherStream

logger = logging.getLogger(__name__)

INVALID_ACTIONS = ("fail", "skip")

DAILY_COLUMNS = {
    "MIN_TEMP": "MIN_TEMP",
    "MINTEMP": "MIN_TEMP",
    "TEMP_MIN": "MIN_TEMP",
    "MAX_TEMP": "MAX_TEMP",
    "MAXTEMP": "MAX_TEMP",
    "TEMP_MAX": "MAX_TEMP",
    "MIN_WS": "MIN_WS",
    "WS_MIN": "MIN_WS",
    "MAX_WS": "MAX_WS",
    "WS_MAX": "MAX_WS",
    "RH": "RELATIVE_HUMIDITY",
    "MIN_RH": "RELATIVE_HUMIDITY",
    "RELATIVE_HUMIDITY": "RELATIVE_HUMIDITY",
    "PRECIP": "PRECIPITATION",
    "RAIN": "PRECIPITATION",
    "PRECIPITATION": "PRECIPITATION",
    "WD": "WIND_DIRECTION",
    "DIR": "WIND_DIRECTION",
    "WIND_DIRECTION": "WIND_DIRECTION",
}

HOURLY_COLUMNS = {
    "TEMP": "TEMPERATURE",
    "TEMPERATURE": "TEMPERATURE",
    "AIR_TEMP": "TEMPERATURE",
    "RH": "RELATIVE_HUMIDITY",
    "RELATIVE_HUMIDITY": "RELATIVE_HUMIDITY",
    "WS": "WIND_SPEED",
    "WIND_SPEED": "WIND_SPEED",
    "WINDSPEED": "WIND_SPEED",
    "WD": "WIND_DIRECTION",
    "DIR": "WIND_DIRECTION",
    "WIND_DIRECTION": "WIND_DIRECTION",
    "PRECIP": "PRECIPITATION",
    "RAIN": "PRECIPITATION",
    "PRECIPITATION": "PRECIPITATION",
    "HR": "HOUR",
    "HOUR": "HOUR",
    "HFFMC": "FFMC",
    "INITIAL_SPREAD_INDEX": "ISI",
    "BUILDUP_INDEX": "BUI",
    "FIRE_WEATHER_INDEX": "FWI",
}

DAILY_REQUIRED = (
    "DATE", "MIN_TEMP", "MAX_TEMP", "MIN_WS", "MAX_WS",
    "RELATIVE_HUMIDITY", "PRECIPITATION", "WIND_DIRECTION",
)
HOURLY_REQUIRED = (
    "DATE", "HOUR", "TEMPERATURE", "RELATIVE_HUMIDITY",
    "WIND_SPEED", "WIND_DIRECTION", "PRECIPITATION",
)
DAILY_CODE_COLUMNS = ("FFMC", "DMC", "DC", "BUI")


# =============================================================================
# CSV I/O
# =============================================================================


def read_csv(
    path: str | Path,
    columns: dict[str, str] | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    """
    Read a CSV file with upper-case, optionally renamed columns.

    Parameters
    ----------
    path : str or Path
        Path to CSV file.
    columns : dict, optional
        Mapping of upper-case source names to canonical names.
    **kwargs
        Additional arguments passed to pd.read_csv.

    Returns
    -------
    DataFrame
        Loaded data.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")
    logger.debug(f"Reading CSV: {path}")

    df = pd.read_csv(path, **kwargs)
    df.columns = df.columns.str.strip().str.upper()

    if columns:
        rename_map = {col: columns[col] for col in df.columns if col in columns}
        df = df.rename(columns=rename_map)

    return df


def write_csv(
    df: pd.DataFrame,
    path: str | Path,
    **kwargs: Any,
) -> None:
    """Write a DataFrame to CSV, creating the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Writing CSV: {path}")

    kwargs.setdefault("index", False)
    df.to_csv(path, **kwargs)


def _require(df: pd.DataFrame, required: tuple[str, ...], path: Path) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing required columns {missing}")


def read_daily_csv(path: str | Path) -> pd.DataFrame:
    """
    Read a file of daily observations.

    Returns
    -------
    DataFrame
        Columns ``DATE`` (``datetime.date``), ``MIN_TEMP``, ``MAX_TEMP``,
        ``MIN_WS``, ``MAX_WS``, ``RELATIVE_HUMIDITY``, ``PRECIPITATION``,
        ``WIND_DIRECTION`` and any of ``FFMC``, ``DMC``, ``DC``, ``BUI``.
    """
    path = Path(path)
    df = read_csv(path, columns=DAILY_COLUMNS)
    _require(df, DAILY_REQUIRED, path)

    df["DATE"] = pd.to_datetime(df["DATE"]).dt.date
    logger.info(f"Read {len(df)} daily records from {path}")
    return df


def read_hourly_csv(path: str | Path) -> pd.DataFrame:
    """
    Read a file of hourly observations.

    Accepts either ``DATE`` plus ``HOUR`` columns or a single
    ``DATETIME`` column. Optional ``FFMC``, ``ISI`` and ``FWI`` are
    hourly codes; ``DMC``, ``DC`` and ``BUI`` are daily codes.
    """
    path = Path(path)
    df = read_csv(path, columns=HOURLY_COLUMNS)

    if "DATETIME" in df.columns:
        stamps = pd.to_datetime(df["DATETIME"])
        if "HOUR" not in df.columns:
            df["HOUR"] = stamps.dt.hour
        df["DATE"] = stamps.dt.date
    elif "DATE" in df.columns:
        df["DATE"] = pd.to_datetime(df["DATE"]).dt.date

    _require(df, HOURLY_REQUIRED, path)
    df["HOUR"] = pd.to_numeric(df["HOUR"], errors="coerce")
    logger.info(f"Read {len(df)} hourly records from {path}")
    return df


# =============================================================================
# Import
# =============================================================================


def _value(row: pd.Series, column: str) -> float | None:
    """Float value of an optional column, None when absent or blank."""
    if column not in row.index or pd.isna(row[column]):
        return None
    return float(row[column])


def _number(row: pd.Series, column: str) -> float:
    value = row[column]
    return float(value) if not pd.isna(value) else float("nan")


def _reject(message: str, invalid: str) -> None:
    if invalid == "fail":
        raise ValueError(message)
    logger.warning(f"Skipping {message}")


def _check_invalid(invalid: str) -> None:
    if invalid not in INVALID_ACTIONS:
        raise ValueError(f"invalid must be one of {INVALID_ACTIONS}, got '{invalid}'")


def import_daily(stream: WeatherStream, df: pd.DataFrame, invalid: str = "fail") -> int:
    """
    Load daily observations into a stream.

    Parameters
    ----------
    stream : WeatherStream
        Target stream; days are added as needed.
    df : DataFrame
        Output of :func:`read_daily_csv`.
    invalid : {"fail", "skip"}
        Whether a rejected row raises ``ValueError`` or is logged and
        skipped.

    Returns
    -------
    int
        Number of rows imported.
    """
    _check_invalid(invalid)
    imported = 0

    for i, row in df.iterrows():
        day = row["DATE"]
        codes = {col.lower(): _value(row, col) for col in DAILY_CODE_COLUMNS}
        problems = validate_codes(**codes)
        if problems:
            _reject(f"daily row {i} ({day}): {'; '.join(problems)}", invalid)
            continue

        ok = stream.set_daily_values(
            day,
            min_temp=_number(row, "MIN_TEMP"),
            max_temp=_number(row, "MAX_TEMP"),
            min_ws=_number(row, "MIN_WS"),
            max_ws=_number(row, "MAX_WS"),
            rh=_number(row, "RELATIVE_HUMIDITY"),
            precip=_number(row, "PRECIPITATION"),
            wd=_number(row, "WIND_DIRECTION"),
        )
        if not ok:
            _reject(f"daily row {i} ({day}): values rejected", invalid)
            continue

        if any(v is not None for v in codes.values()):
            stream.set_daily_codes(day, **codes)
        imported += 1

    logger.info(f"Imported {imported} of {len(df)} daily records")
    return imported


def import_hourly(stream: WeatherStream, df: pd.DataFrame, invalid: str = "fail") -> int:
    """
    Load hourly observations into a stream.

    Parameters
    ----------
    stream : WeatherStream
        Target stream; days are added as needed.
    df : DataFrame
        Output of :func:`read_hourly_csv`.
    invalid : {"fail", "skip"}
        Whether a rejected row raises ``ValueError`` or is logged and
        skipped.

    Returns
    -------
    int
        Number of rows imported.
    """
    _check_invalid(invalid)
    imported = 0

    for i, row in df.iterrows():
        hour = row["HOUR"]
        if pd.isna(hour) or not 0 <= hour < HOURS_PER_DAY:
            _reject(f"hourly row {i}: hour {hour} outside 0-23", invalid)
            continue
        when = datetime.combine(row["DATE"], dt_time(int(hour)))

        ffmc = _value(row, "FFMC")
        hour_codes = {"isi": _value(row, "ISI"), "fwi": _value(row, "FWI")}
        day_codes = {"dmc": _value(row, "DMC"), "dc": _value(row, "DC"), "bui": _value(row, "BUI")}
        problems = validate_codes(ffmc=ffmc, **hour_codes, **day_codes)
        if problems:
            _reject(f"hourly row {i} ({when}): {'; '.join(problems)}", invalid)
            continue

        ok = stream.set_hourly_values(
            when,
            temp=_number(row, "TEMPERATURE"),
            rh=_number(row, "RELATIVE_HUMIDITY"),
            precip=_number(row, "PRECIPITATION"),
            ws=_number(row, "WIND_SPEED"),
            wd=_number(row, "WIND_DIRECTION"),
            ffmc=ffmc,
        )
        if not ok:
            _reject(f"hourly row {i} ({when}): values rejected", invalid)
            continue

        if any(v is not None for v in hour_codes.values()):
            stream.set_hourly_codes(when, **hour_codes)
        if any(v is not None for v in day_codes.values()):
            stream.set_daily_codes(when, **day_codes)
        imported += 1

    logger.info(f"Imported {imported} of {len(df)} hourly records")
    return imported


# =============================================================================
# Export
# =============================================================================


def daily_table(stream: WeatherStream) -> pd.DataFrame:
    """One row per day with the day's weather and computed codes."""
    stream.calculate_values()
    rows = []
    for record in stream:
        derived = record.derived
        weather = stream.get_daily_values(record.day)
        rows.append({
            "DATE": record.day,
            "MODE": record.mode.value,
            "MIN_TEMP": weather.min_temp if weather else np.nan,
            "MAX_TEMP": weather.max_temp if weather else np.nan,
            "MIN_WS": weather.min_ws if weather else np.nan,
            "MAX_WS": weather.max_ws if weather else np.nan,
            "RELATIVE_HUMIDITY": weather.rh if weather else np.nan,
            "PRECIPITATION": weather.precip if weather else np.nan,
            "WIND_DIRECTION": weather.wd if weather else np.nan,
            "RAIN_24H": derived.rain_24h,
            "FFMC": derived.ffmc,
            "DMC": derived.dmc,
            "DC": derived.dc,
            "BUI": derived.bui,
            "ISI": derived.isi,
            "FWI": derived.fwi,
            "DSR": derived.dsr,
        })
    return pd.DataFrame(rows)


def hourly_table(stream: WeatherStream) -> pd.DataFrame:
    """One row per hour with derived weather and hourly indices."""
    stream.calculate_values()
    frames = []
    for record in stream:
        derived = record.derived
        weather = derived.weather
        hours = np.arange(HOURS_PER_DAY)
        frames.append(pd.DataFrame({
            "DATETIME": [datetime.combine(record.day, dt_time(int(h))) for h in hours],
            "DATE": record.day,
            "HOUR": hours,
            "TEMPERATURE": weather.temp,
            "RELATIVE_HUMIDITY": weather.rh,
            "WIND_SPEED": weather.ws,
            "WIND_DIRECTION": weather.wd,
            "PRECIPITATION": weather.precip,
            "FFMC": derived.hourly_ffmc,
            "ISI": derived.hourly_isi,
            "FWI": derived.hourly_fwi,
            "STATUS": [stream.status(datetime.combine(record.day, dt_time(int(h)))) for h in hours],
        }))
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def export_daily(stream: WeatherStream, path: str | Path) -> Path:
    path = Path(path)
    df = daily_table(stream)
    write_csv(df, path, float_format="%.4f")
    logger.info(f"Wrote {len(df)} daily rows to {path}")
    return path


def export_hourly(stream: WeatherStream, path: str | Path) -> Path:
    path = Path(path)
    df = hourly_table(stream)
    write_csv(df, path, float_format="%.4f")
    logger.info(f"Wrote {len(df)} hourly rows to {path}")
    return path
