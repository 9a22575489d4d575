"""
Location and solar-time services.

Supplies the time geometry a weather stream needs: conversion of
timestamps to local wall-clock time and the sunrise, solar noon and
sunset that anchor the diurnal curves. Solar positions use the NOAA
general solar position approximation, which is accurate to a minute or
two at mid latitudes and is clamped for polar day and night.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import numpy as np

# Zenith angle for sunrise/sunset including refraction (degrees)
SUNRISE_ZENITH = 90.833


@dataclass(frozen=True)
class SolarTimes:
    """Sunrise, solar noon and sunset in local standard hours (0-24)."""

    sunrise: float
    solar_noon: float
    sunset: float

    @property
    def day_length(self) -> float:
        return self.sunset - self.sunrise

    def shifted(self, hours: float) -> "SolarTimes":
        """Return the same times offset by ``hours`` (e.g. daylight saving)."""
        return SolarTimes(self.sunrise + hours, self.solar_noon + hours, self.sunset + hours)


@dataclass(frozen=True)
class WorldLocation:
    """
    A point on the earth with its standard-time UTC offset.

    Attributes
    ----------
    latitude : float
        Degrees north.
    longitude : float
        Degrees east (negative west).
    utc_offset : float
        Hours from UTC of local standard time (e.g. -7 for MST).
    """

    latitude: float = 51.0
    longitude: float = -115.0
    utc_offset: float = -7.0

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")
        if not -14.0 <= self.utc_offset <= 14.0:
            raise ValueError(f"utc_offset out of range: {self.utc_offset}")

    def to_local(self, moment: datetime, daylight_saving: float = 0.0) -> datetime:
        """
        Convert a timestamp to naive local wall-clock time.

        Aware datetimes are converted through UTC. Naive datetimes are
        assumed to already be local wall-clock time and are returned as is.
        """
        if moment.tzinfo is None:
            return moment
        utc = moment.astimezone(timezone.utc).replace(tzinfo=None)
        return utc + timedelta(hours=self.utc_offset + daylight_saving)

    def to_utc(self, local: datetime, daylight_saving: float = 0.0) -> datetime:
        """Convert naive local wall-clock time to an aware UTC datetime."""
        utc = local - timedelta(hours=self.utc_offset + daylight_saving)
        return utc.replace(tzinfo=timezone.utc)

    def solar_times(self, day: date) -> SolarTimes:
        """
        Compute sunrise, solar noon and sunset for a calendar day.

        Parameters
        ----------
        day : date
            Local calendar day.

        Returns
        -------
        SolarTimes
            Times in local standard hours. Under polar night the sunrise
            and sunset collapse onto solar noon; under midnight sun they
            are spread twelve hours either side of it.
        """
        day_of_year = day.timetuple().tm_yday
        g = 2.0 * math.pi / 365.0 * (day_of_year - 1)

        # Equation of time (minutes) and solar declination (radians)
        eqtime = 229.18 * (
            0.000075 + 0.001868 * math.cos(g) - 0.032077 * math.sin(g)
            - 0.014615 * math.cos(2 * g) - 0.040849 * math.sin(2 * g)
        )
        decl = (
            0.006918 - 0.399912 * math.cos(g) + 0.070257 * math.sin(g)
            - 0.006758 * math.cos(2 * g) + 0.000907 * math.sin(2 * g)
            - 0.002697 * math.cos(3 * g) + 0.00148 * math.sin(3 * g)
        )

        lat = math.radians(self.latitude)
        cos_ha = (
            math.cos(math.radians(SUNRISE_ZENITH)) / (math.cos(lat) * math.cos(decl))
            - math.tan(lat) * math.tan(decl)
        )
        hour_angle = math.degrees(math.acos(float(np.clip(cos_ha, -1.0, 1.0))))

        noon_utc = 720.0 - 4.0 * self.longitude - eqtime
        offset = self.utc_offset * 60.0

        sunrise = (noon_utc - 4.0 * hour_angle + offset) / 60.0
        noon = (noon_utc + offset) / 60.0
        sunset = (noon_utc + 4.0 * hour_angle + offset) / 60.0

        return SolarTimes(sunrise=sunrise, solar_noon=noon, sunset=sunset)
