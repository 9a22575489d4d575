"""
Diurnal interpolation of daily weather extremes.

Builds 24 hourly values from a day's minimum and maximum following the
Beck & Trevitt (1989) curve used for temperature and wind in Canadian
fire growth modelling:

- minimum at ``sunrise + alpha``
- sine rise to the maximum at ``solar_noon + beta``
- the sine continues past the maximum until sunset
- exponential decay toward the minimum after sunset, rate ``gamma``

Hours are local wall-clock hours; callers pass solar times already
shifted for daylight saving. Humidity follows the temperature curve at
constant absolute vapour pressure, precipitation is placed in the
local-standard-noon hour and wind direction is constant.

References
----------
- Beck, J.A. & Trevitt, A.C.F. (1989). Forecasting diurnal variations in
  meteorological parameters for predicting fire behaviour. Canadian
  Journal of Forest Research 19.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from wxstream.location import SolarTimes
from wxstream.records import HOURS_PER_DAY, DailyWeather, HourlyWeather

HOURS = np.arange(HOURS_PER_DAY, dtype=float)


@dataclass(frozen=True)
class CurveShape:
    """Shape parameters for one diurnal quantity."""

    alpha: float  # hours after sunrise of the minimum
    beta: float   # hours after solar noon of the maximum
    gamma: float  # night-time exponential decay rate


TEMPERATURE_SHAPE = CurveShape(alpha=-0.77, beta=2.80, gamma=-2.20)
WIND_SHAPE = CurveShape(alpha=1.00, beta=1.24, gamma=-3.59)


def anchor_hours(solar: SolarTimes, shape: CurveShape) -> tuple[int, int, int]:
    """
    Whole hours of the curve minimum, maximum and evening decay start.

    Always satisfies ``0 <= tn < tx <= ts <= 23``.
    """
    tn = min(max(round(solar.sunrise + shape.alpha), 0), HOURS_PER_DAY - 3)
    tx = min(max(round(solar.solar_noon + shape.beta), tn + 1), HOURS_PER_DAY - 2)
    ts = min(max(round(solar.sunset), tx), HOURS_PER_DAY - 1)
    return tn, tx, ts


def diurnal_curve(
    minimum: float,
    maximum: float,
    solar: SolarTimes,
    shape: CurveShape,
    carry: float | None = None,
) -> np.ndarray:
    """
    Interpolate 24 hourly values from daily extremes.

    Parameters
    ----------
    minimum, maximum : float
        Daily extremes; ``minimum <= maximum``.
    solar : SolarTimes
        Sunrise, solar noon and sunset in local wall-clock hours.
    shape : CurveShape
        Curve parameters for the quantity.
    carry : float, optional
        Value of the previous day's last hour. Starts the pre-dawn
        decay; when omitted the day's own sunset value is used.

    Returns
    -------
    np.ndarray
        24 values whose minimum equals ``minimum`` and whose maximum
        equals ``maximum``.
    """
    minimum = float(minimum)
    maximum = float(maximum)
    tn, tx, ts = anchor_hours(solar, shape)
    span = maximum - minimum

    values = np.empty(HOURS_PER_DAY)

    fraction = np.minimum((HOURS - tn) / (tx - tn), 2.0)
    daytime = minimum + span * np.sin(fraction * np.pi / 2.0)
    values[tn:ts + 1] = daytime[tn:ts + 1]
    sunset_value = values[ts]

    if ts < HOURS_PER_DAY - 1:
        night = HOURS_PER_DAY - ts + tn
        elapsed = HOURS[ts + 1:] - ts
        values[ts + 1:] = minimum + (sunset_value - minimum) * np.exp(shape.gamma * elapsed / night)

    if tn > 0:
        start = sunset_value if carry is None else float(np.clip(carry, minimum, maximum))
        elapsed = HOURS[:tn] + 1.0
        values[:tn] = minimum + (start - minimum) * np.exp(shape.gamma * elapsed / (tn + 1))

    values[tn] = minimum
    values[tx] = maximum
    return np.clip(values, minimum, maximum)


def saturation_vapour_pressure(temperature: np.ndarray | float) -> np.ndarray | float:
    """Magnus saturation vapour pressure (hPa) over water."""
    return 6.108 * np.exp(17.27 * temperature / (temperature + 237.3))


def humidity_curve(
    temperature: np.ndarray,
    max_temperature: float,
    min_rh: float,
) -> np.ndarray:
    """
    Hourly relative humidity at constant absolute humidity.

    The vapour content implied by ``min_rh`` at ``max_temperature`` is
    held for the whole day, so RH rises as the temperature falls and
    equals ``min_rh`` at the daily maximum.
    """
    temperature = np.asarray(temperature, dtype=float)
    vapour = saturation_vapour_pressure(max_temperature) * min_rh
    rh = vapour * (273.17 + temperature) / (
        (273.17 + max_temperature) * saturation_vapour_pressure(temperature)
    )
    return np.clip(rh, 0.0, 100.0)


def precipitation_hours(total: float, noon_hour: int) -> np.ndarray:
    """Place the daily precipitation in the local-standard-noon hour."""
    precip = np.zeros(HOURS_PER_DAY)
    precip[noon_hour] = total
    return precip


def derive_hourly(
    weather: DailyWeather,
    solar: SolarTimes,
    noon_hour: int,
    temperature_shape: CurveShape = TEMPERATURE_SHAPE,
    wind_shape: CurveShape = WIND_SHAPE,
    carry: HourlyWeather | None = None,
) -> HourlyWeather:
    """
    Derive a full day of hourly weather from daily extremes.

    Parameters
    ----------
    weather : DailyWeather
        Daily extremes, minimum RH, precipitation and wind direction.
    solar : SolarTimes
        Solar times in local wall-clock hours.
    noon_hour : int
        Wall-clock hour of local standard noon.
    temperature_shape, wind_shape : CurveShape
        Curve parameters.
    carry : HourlyWeather, optional
        Previous day's hourly weather, used to continue the night curve.

    Returns
    -------
    HourlyWeather
        Hourly temperature, RH, wind speed, wind direction and precipitation.
    """
    carry_temp = float(carry.temp[-1]) if carry is not None else None
    carry_ws = float(carry.ws[-1]) if carry is not None else None

    temp = diurnal_curve(weather.min_temp, weather.max_temp, solar, temperature_shape, carry_temp)
    ws = diurnal_curve(weather.min_ws, weather.max_ws, solar, wind_shape, carry_ws)
    rh = humidity_curve(temp, weather.max_temp, weather.rh)

    return HourlyWeather(
        temp=temp,
        rh=rh,
        ws=np.maximum(ws, 0.0),
        wd=np.full(HOURS_PER_DAY, float(weather.wd)),
        precip=precipitation_hours(weather.precip, noon_hour),
    )
