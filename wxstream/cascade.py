"""
Per-day derivation of hourly weather and fire-index values.

:func:`compute_day` is the unit of work the invalidation controller
runs for each dirty day, strictly in chronological order: it completes
the day's hourly weather, totals the 24-hour rain ending at local
standard noon, then runs the FWI cascade from the previous day's codes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

import numpy as np

from wxstream.diurnal import TEMPERATURE_SHAPE, WIND_SHAPE, CurveShape, derive_hourly
from wxstream.engines import DefaultEngine, FireIndexEngine
from wxstream.location import SolarTimes, WorldLocation
from wxstream.reconcile import fill_hourly
from wxstream.records import (
    HOURS_PER_DAY,
    DailyRecord,
    DayMode,
    DerivedDay,
    HourlyWeather,
    SeedValues,
    WeatherOptions,
)

logger = logging.getLogger(__name__)


@dataclass
class CalculationContext:
    """Stream-level settings every day's computation depends on."""

    location: WorldLocation
    seeds: SeedValues
    engine: FireIndexEngine = field(default_factory=DefaultEngine)
    options: WeatherOptions = WeatherOptions.FFMC_VAN_WAGNER
    temperature_shape: CurveShape = TEMPERATURE_SHAPE
    wind_shape: CurveShape = WIND_SHAPE
    daylight_saving: bool = False

    @property
    def dst_hours(self) -> int:
        return 1 if self.daylight_saving else 0

    @property
    def noon_hour(self) -> int:
        """Wall-clock hour of local standard noon."""
        return 12 + self.dst_hours

    @property
    def honour_user_codes(self) -> bool:
        return bool(self.options & WeatherOptions.USER_SPECIFIED)

    def solar_times(self, day: date) -> SolarTimes:
        return self.location.solar_times(day).shifted(self.dst_hours)


def hourly_weather(
    record: DailyRecord,
    previous: DailyRecord | None,
    context: CalculationContext,
) -> HourlyWeather:
    """Complete 24 hours of weather for a day according to its mode."""
    if record.mode is DayMode.HOURLY:
        return fill_hourly(record, context.seeds)

    daily = record.daily if record.mode is DayMode.DAILY else context.seeds.blank_weather()
    carry = previous.derived.weather if previous is not None else None
    return derive_hourly(
        daily,
        context.solar_times(record.day),
        context.noon_hour,
        temperature_shape=context.temperature_shape,
        wind_shape=context.wind_shape,
        carry=carry,
    )


def rain_24h(
    weather: HourlyWeather,
    previous: DailyRecord | None,
    context: CalculationContext,
) -> float:
    """Precipitation for the 24 hours ending at local standard noon."""
    noon = context.noon_hour
    rain = float(weather.precip[:noon + 1].sum())
    if previous is None:
        return context.seeds.rain + rain
    return float(previous.derived.weather.precip[noon + 1:].sum()) + rain


def _hourly_ffmc(
    record: DailyRecord,
    previous: DailyRecord | None,
    weather: HourlyWeather,
    daily_ffmc: float,
    context: CalculationContext,
) -> np.ndarray:
    engine = context.engine
    seeds = context.seeds
    specified = [
        codes.get("ffmc") if context.honour_user_codes else None
        for codes in record.specified_hourly_codes
    ]
    values = np.empty(HOURS_PER_DAY)

    if previous is None:
        if seeds.hourly_ffmc is not None and seeds.hourly_ffmc_hour is not None:
            anchor, value = seeds.hourly_ffmc_hour, seeds.hourly_ffmc
        else:
            anchor, value = context.noon_hour, daily_ffmc
        # Hours up to the anchor hold the starting value
        for h in range(anchor + 1):
            values[h] = specified[h] if specified[h] is not None else value
        start = anchor + 1
        ffmc = values[anchor]
    else:
        start = 0
        ffmc = float(previous.derived.hourly_ffmc[-1])

    for h in range(start, HOURS_PER_DAY):
        if specified[h] is not None:
            ffmc = specified[h]
        else:
            ffmc = engine.hourly_fine_fuel_moisture(
                ffmc, weather.temp[h], weather.rh[h], weather.ws[h], weather.precip[h]
            )
        values[h] = ffmc
    return values


def compute_day(
    record: DailyRecord,
    previous: DailyRecord | None,
    context: CalculationContext,
) -> DerivedDay:
    """
    Recompute a day's derived weather and fire-index values.

    Parameters
    ----------
    record : DailyRecord
        Day to compute. Its ``derived`` cache is replaced.
    previous : DailyRecord or None
        The preceding day, already computed; None for day 0, which
        starts from the stream seeds.
    context : CalculationContext
        Stream settings.

    Returns
    -------
    DerivedDay
        The new cache, also stored on ``record``.
    """
    engine = context.engine
    seeds = context.seeds
    noon = context.noon_hour

    weather = hourly_weather(record, previous, context)
    rain = rain_24h(weather, previous, context)

    temp = float(weather.temp[noon])
    rh = float(weather.rh[noon])
    ws = float(weather.ws[noon])
    month = record.day.month
    latitude = context.location.latitude

    if previous is None:
        prev_ffmc, prev_dmc, prev_dc = seeds.ffmc, seeds.dmc, seeds.dc
    else:
        prev_ffmc = previous.derived.ffmc
        prev_dmc = previous.derived.dmc
        prev_dc = previous.derived.dc

    specified = record.specified_codes if context.honour_user_codes else {}

    dc = specified.get("dc")
    if dc is None:
        dc = engine.drought(prev_dc, temp, rain, month, latitude)
    dmc = specified.get("dmc")
    if dmc is None:
        dmc = engine.duff_moisture(prev_dmc, temp, rh, rain, month, latitude)
    bui = specified.get("bui")
    if bui is None:
        bui = engine.buildup(dmc, dc)
    ffmc = specified.get("ffmc")
    if ffmc is None:
        ffmc = engine.fine_fuel_moisture(prev_ffmc, temp, rh, ws, rain)

    isi = engine.initial_spread(ffmc, ws)
    fwi = engine.fire_weather(isi, bui)

    hourly_ffmc = _hourly_ffmc(record, previous, weather, ffmc, context)
    hourly_isi = np.empty(HOURS_PER_DAY)
    hourly_fwi = np.empty(HOURS_PER_DAY)
    for h in range(HOURS_PER_DAY):
        codes = record.specified_hourly_codes[h] if context.honour_user_codes else {}
        hour_isi = codes.get("isi")
        if hour_isi is None:
            hour_isi = engine.initial_spread(hourly_ffmc[h], weather.ws[h])
        hour_fwi = codes.get("fwi")
        if hour_fwi is None:
            hour_fwi = engine.fire_weather(hour_isi, bui)
        hourly_isi[h] = hour_isi
        hourly_fwi[h] = hour_fwi

    record.derived = DerivedDay(
        weather=weather,
        rain_24h=rain,
        ffmc=float(ffmc),
        dmc=float(dmc),
        dc=float(dc),
        bui=float(bui),
        isi=float(isi),
        fwi=float(fwi),
        dsr=float(engine.daily_severity(fwi)),
        hourly_ffmc=hourly_ffmc,
        hourly_isi=hourly_isi,
        hourly_fwi=hourly_fwi,
    )
    return record.derived
