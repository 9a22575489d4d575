"""
Fire-index engines.

A weather stream delegates every FWI System equation to a single engine
object injected at construction. Engines must honour the contracts of the
functions in :mod:`wxstream.fwi` (ranges and monotonic responses) but are
free to change the numerical formulation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from wxstream import fwi

logger = logging.getLogger(__name__)


class FireIndexEngine(ABC):
    """Strategy interface for the FWI System equations."""

    name: str = "abstract"

    @abstractmethod
    def fine_fuel_moisture(
        self,
        ffmc_prev: float,
        temperature: float,
        relative_humidity: float,
        wind_speed: float,
        precipitation: float,
    ) -> float:
        """Daily FFMC from noon weather and 24-hour rain."""

    @abstractmethod
    def hourly_fine_fuel_moisture(
        self,
        ffmc_prev: float,
        temperature: float,
        relative_humidity: float,
        wind_speed: float,
        precipitation: float,
    ) -> float:
        """FFMC at the end of one hour."""

    @abstractmethod
    def initial_spread(self, ffmc: float, wind_speed: float) -> float:
        """Initial Spread Index."""

    def duff_moisture(
        self,
        dmc_prev: float,
        temperature: float,
        relative_humidity: float,
        precipitation: float,
        month: int,
        latitude: float,
    ) -> float:
        return fwi.calculate_dmc(
            temperature, relative_humidity, precipitation, dmc_prev, month, latitude
        )

    def drought(
        self,
        dc_prev: float,
        temperature: float,
        precipitation: float,
        month: int,
        latitude: float,
    ) -> float:
        return fwi.calculate_dc(temperature, precipitation, dc_prev, month, latitude)

    def buildup(self, dmc: float, dc: float) -> float:
        return fwi.calculate_bui(dmc, dc)

    def fire_weather(self, isi: float, bui: float) -> float:
        return fwi.calculate_fwi(isi, bui)

    def daily_severity(self, fwi_value: float) -> float:
        return fwi.calculate_dsr(fwi_value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DefaultEngine(FireIndexEngine):
    """Standard Van Wagner (1987) equations with the 147.2 moisture coefficient."""

    name = "default"
    coefficient = fwi.FFMC_COEFFICIENT

    def fine_fuel_moisture(self, ffmc_prev, temperature, relative_humidity, wind_speed, precipitation):
        return fwi.calculate_ffmc(
            temperature, relative_humidity, wind_speed, precipitation,
            ffmc_prev, coefficient=self.coefficient,
        )

    def hourly_fine_fuel_moisture(self, ffmc_prev, temperature, relative_humidity, wind_speed, precipitation):
        return fwi.calculate_hourly_ffmc(
            temperature, relative_humidity, wind_speed, precipitation,
            ffmc_prev, coefficient=self.coefficient,
        )

    def initial_spread(self, ffmc, wind_speed):
        return fwi.calculate_isi(ffmc, wind_speed, coefficient=self.coefficient)


class AlternateEngine(DefaultEngine):
    """
    Equations using the precise moisture conversion coefficient.

    Uses 250 * 59.5 / 101 (about 147.27723) in place of 147.2 when
    converting between FFMC and moisture content (Wang et al. 2017).
    """

    name = "alternate"
    coefficient = fwi.PRECISE_FFMC_COEFFICIENT


ENGINES: dict[str, type[FireIndexEngine]] = {
    DefaultEngine.name: DefaultEngine,
    AlternateEngine.name: AlternateEngine,
}


def engine_from_name(name: str) -> FireIndexEngine:
    """
    Instantiate an engine by its registered name.

    Raises
    ------
    ValueError
        If the name is not registered.
    """
    try:
        engine_cls = ENGINES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown fire-index engine '{name}'. Available: {sorted(ENGINES)}"
        ) from None
    logger.debug(f"Using fire-index engine: {engine_cls.__name__}")
    return engine_cls()
