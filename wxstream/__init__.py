"""
wxstream: Fire Weather Streams
==============================

A day-indexed weather stream for wildfire growth simulation. Daily
extremes or hourly observations go in; hourly weather and the Canadian
Forest Fire Weather Index (FWI) System codes and indices come out,
recomputed lazily from the earliest day that changed.

The system integrates:
- Diurnal interpolation of temperature, wind and humidity
- Daily and hourly FFMC, DMC, DC, ISI, BUI, FWI and DSR
- User-specified codes with forward recalculation
- Burn-condition windows
- CSV import/export and versioned JSON persistence

Modules
-------
config : Configuration loading and validation
stream : WeatherStream facade
timeline : Day-indexed record storage
records : Data model and input validation
location : Local time and sunrise/sunset
diurnal : Hourly curves from daily extremes
fwi : Fire Weather Index System calculations
engines : Swappable fire-index implementations
cascade : Per-day computation
invalidation : Dirty marker and forward recalculation
reconcile : Daily/hourly mode handling and user codes
burn : Burn-condition evaluation
io : CSV import and table export
persistence : Save and restore streams

References
----------
- Van Wagner (1977). A method of computing fine fuel moisture content
  throughout the diurnal cycle.
- Van Wagner (1987). Development and Structure of the Canadian Forest
  Fire Weather Index System.
- Beck & Trevitt (1989). Forecasting diurnal variations in
  meteorological parameters for predicting fire behaviour.
"""

__version__ = "0.1.0"
__author__ = "Fire Engine Framework Contributors"

from wxstream.config import WxStreamConfig, load_config, setup_logging
from wxstream.diurnal import TEMPERATURE_SHAPE, WIND_SHAPE, CurveShape
from wxstream.engines import AlternateEngine, DefaultEngine, FireIndexEngine, engine_from_name
from wxstream.location import SolarTimes, WorldLocation
from wxstream.persistence import StreamDecodeError, load_stream, save_stream
from wxstream.records import (
    BurnCondition,
    DailyFlags,
    DailyRecord,
    DailyWeather,
    DayMode,
    HourlyObservation,
    SeedValues,
    WeatherOptions,
)
from wxstream.stream import SimulationValues, WeatherStream

__all__ = [
    "__version__",
    "WxStreamConfig",
    "load_config",
    "setup_logging",
    "CurveShape",
    "TEMPERATURE_SHAPE",
    "WIND_SHAPE",
    "FireIndexEngine",
    "DefaultEngine",
    "AlternateEngine",
    "engine_from_name",
    "SolarTimes",
    "WorldLocation",
    "StreamDecodeError",
    "load_stream",
    "save_stream",
    "BurnCondition",
    "DailyFlags",
    "DailyRecord",
    "DailyWeather",
    "DayMode",
    "HourlyObservation",
    "SeedValues",
    "WeatherOptions",
    "SimulationValues",
    "WeatherStream",
]
