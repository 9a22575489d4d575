"""
Reconciliation of daily and hourly weather sources.

Decides, per day, which mode holds the raw weather, which quantities are
user-specified and how an hourly day with gaps is completed. Functions
here mutate records in place and return ``False`` when a request
conflicts with the day's mode; the caller is responsible for moving the
stream's dirty marker afterwards.
"""

from __future__ import annotations

import logging

import numpy as np

from wxstream.records import (
    HOURS_PER_DAY,
    DailyFlags,
    DailyRecord,
    DailyWeather,
    DayMode,
    DerivedDay,
    HourlyObservation,
    HourlyWeather,
    SeedValues,
)

logger = logging.getLogger(__name__)

_CODE_FLAGS = {
    "ffmc": DailyFlags.FFMC,
    "dmc": DailyFlags.DMC,
    "dc": DailyFlags.DC,
    "bui": DailyFlags.BUI,
    "isi": DailyFlags.ISI,
    "fwi": DailyFlags.FWI,
}


# =============================================================================
# Raw Weather
# =============================================================================


def accept_daily(record: DailyRecord, weather: DailyWeather) -> bool:
    """Store daily extremes; fails on a day in hourly mode."""
    if record.mode is DayMode.HOURLY:
        logger.warning(f"{record.day}: daily values rejected, day holds hourly observations")
        return False
    record.mode = DayMode.DAILY
    record.daily = weather
    return True


def accept_hourly(record: DailyRecord, hour: int, observation: HourlyObservation) -> bool:
    """Store one hourly observation; fails on a day in daily mode."""
    if record.mode is DayMode.DAILY:
        logger.warning(f"{record.day}: hourly values rejected, day holds daily observations")
        return False
    record.mode = DayMode.HOURLY
    record.hourly[hour] = observation
    return True


def to_hourly(record: DailyRecord) -> None:
    """
    Switch a day to hourly observations.

    A daily day is seeded from its derived hourly curve, so ``record.derived``
    must be current. All seeded hours are flagged as not user-specified and
    any user codes are cleared.
    """
    if record.mode is DayMode.DAILY:
        weather = record.derived.weather
        record.hourly = [
            HourlyObservation(
                temp=float(weather.temp[h]),
                rh=float(weather.rh[h]),
                precip=float(weather.precip[h]),
                ws=float(weather.ws[h]),
                wd=float(weather.wd[h]),
                specified=False,
            )
            for h in range(HOURS_PER_DAY)
        ]
    record.mode = DayMode.HOURLY
    record.daily = None
    record.clear_user_codes()


def to_daily(record: DailyRecord, noon_hour: int) -> None:
    """
    Switch a day to daily observations.

    Extremes, minimum RH, the day's own rain and the noon wind direction are
    taken from the day's derived hourly weather, so ``record.derived`` must
    be current for an hourly day.
    """
    if record.mode is DayMode.HOURLY:
        record.daily = summarize_hourly(record.derived, noon_hour)
    record.mode = DayMode.DAILY
    record.hourly = [None] * HOURS_PER_DAY
    record.clear_user_codes()


def summarize_hourly(derived: DerivedDay, noon_hour: int) -> DailyWeather:
    """
    Collapse a computed day into daily extremes.

    Precipitation is the total of the day's own hours, not the noon-to-noon
    ``rain_24h``, which already holds the previous afternoon's rain.
    """
    weather = derived.weather
    return DailyWeather(
        min_temp=float(weather.temp.min()),
        max_temp=float(weather.temp.max()),
        min_ws=float(weather.ws.min()),
        max_ws=float(weather.ws.max()),
        rh=float(weather.rh.min()),
        precip=float(weather.precip.sum()),
        wd=float(weather.wd[noon_hour]),
    )


def _interpolate_direction(hours: np.ndarray, known: np.ndarray, directions: np.ndarray) -> np.ndarray:
    """Interpolate wind direction through its vector components."""
    radians = np.radians(directions)
    x = np.interp(hours, known, np.cos(radians))
    y = np.interp(hours, known, np.sin(radians))
    return np.degrees(np.arctan2(y, x)) % 360.0


def fill_hourly(record: DailyRecord, seeds: SeedValues) -> HourlyWeather:
    """
    Complete an hourly day.

    Missing hours are linearly interpolated between present hours (held
    constant beyond the first and last), wind direction is interpolated
    circularly and missing precipitation is zero. A day with no hours at
    all takes the seed weather.
    """
    hours = np.arange(HOURS_PER_DAY, dtype=float)
    present = [h for h, obs in enumerate(record.hourly) if obs is not None]

    if not present:
        return HourlyWeather(
            temp=np.full(HOURS_PER_DAY, seeds.temperature),
            rh=np.full(HOURS_PER_DAY, seeds.relative_humidity),
            ws=np.full(HOURS_PER_DAY, seeds.wind_speed),
            wd=np.zeros(HOURS_PER_DAY),
            precip=np.zeros(HOURS_PER_DAY),
        )

    known = np.array(present, dtype=float)
    obs = [record.hourly[h] for h in present]

    def column(name: str) -> np.ndarray:
        return np.array([getattr(o, name) for o in obs], dtype=float)

    precip = np.zeros(HOURS_PER_DAY)
    precip[present] = column("precip")

    return HourlyWeather(
        temp=np.interp(hours, known, column("temp")),
        rh=np.clip(np.interp(hours, known, column("rh")), 0.0, 100.0),
        ws=np.maximum(np.interp(hours, known, column("ws")), 0.0),
        wd=_interpolate_direction(hours, known, column("wd")),
        precip=precip,
    )


# =============================================================================
# User Flags
# =============================================================================


def set_codes(record: DailyRecord, **codes: float | None) -> None:
    """Record user-specified daily codes; ``None`` leaves a code unchanged."""
    for name, value in codes.items():
        if value is not None:
            record.specified_codes[name] = float(value)


def set_hour_codes(record: DailyRecord, hour: int, **codes: float | None) -> None:
    """Record user-specified codes for one hour."""
    for name, value in codes.items():
        if value is not None:
            record.specified_hourly_codes[hour][name] = float(value)


def clear_code(record: DailyRecord, name: str) -> bool:
    """
    Drop a user-specified code from the day and all of its hours.

    Returns
    -------
    bool
        True if anything was removed.
    """
    removed = record.specified_codes.pop(name, None) is not None
    for codes in record.specified_hourly_codes:
        removed = (codes.pop(name, None) is not None) or removed
    return removed


def user_flags(record: DailyRecord, index: int) -> DailyFlags:
    """
    Bit set of the quantities that are user-supplied on a day.

    Day 0 always reports FFMC, DMC and DC because its prior-day values
    are the stream's seeds.
    """
    flags = DailyFlags.NONE
    if record.mode is DayMode.DAILY:
        flags |= DailyFlags.DAILY_WEATHER
    if index == 0:
        flags |= DailyFlags.FFMC | DailyFlags.DMC | DailyFlags.DC

    for name in record.specified_codes:
        flags |= _CODE_FLAGS[name]
    for codes in record.specified_hourly_codes:
        for name in codes:
            flags |= _CODE_FLAGS[name]
    return flags


def hour_status(record: DailyRecord, hour: int) -> int:
    """1 if the hour's weather was set by the user, else 0."""
    obs = record.hourly[hour]
    return int(record.mode is DayMode.HOURLY and obs is not None and obs.specified)


def set_hour_status(record: DailyRecord, hour: int, value: int) -> bool:
    """Mark an existing hourly observation as user-set (1) or derived (0)."""
    if record.mode is not DayMode.HOURLY or record.hourly[hour] is None:
        logger.debug(f"{record.day} hour {hour}: no hourly observation to flag")
        return False
    record.hourly[hour].specified = bool(value)
    return True
