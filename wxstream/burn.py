"""
Burn-condition evaluation.
"""

from __future__ import annotations

from wxstream.records import BurnCondition


def in_window(hour: int, start_hour: int, end_hour: int) -> bool:
    """
    True if ``hour`` lies in the inclusive window ``[start_hour, end_hour]``.

    A window whose end precedes its start wraps past midnight, so
    ``(20, 4)`` covers 20:00 through 04:59.
    """
    if start_hour <= end_hour:
        return start_hour <= hour <= end_hour
    return hour >= start_hour or hour <= end_hour


def can_burn(
    hour: int,
    wind_speed: float,
    relative_humidity: float,
    condition: BurnCondition,
) -> bool:
    """
    Check whether burning is allowed for one hour of weather.

    Parameters
    ----------
    hour : int
        Local wall-clock hour (0-23).
    wind_speed : float
        Wind speed for the hour (km/h).
    relative_humidity : float
        Relative humidity for the hour (percent).
    condition : BurnCondition
        Window and thresholds to test against.

    Returns
    -------
    bool
        True only if the condition is effective, the hour is inside the
        window, the wind is at or below the maximum and the humidity is
        at or above the minimum.
    """
    if not condition.effective:
        return False
    if not in_window(hour, condition.start_hour, condition.end_hour):
        return False
    if wind_speed > condition.max_wind_speed:
        return False
    return relative_humidity >= condition.min_relative_humidity
