"""
Weather stream facade.

:class:`WeatherStream` owns a timeline of daily records together with the
stream-wide settings (location, seeds, curve shapes, options, engine and
default burn condition) and a single dirty marker. Every mutation moves the
marker back to the earliest affected day; every read recomputes only as far
as the day it needs.

Times accepted by the public methods:

- timezone-aware ``datetime``: converted to local wall-clock time
- naive ``datetime``: taken as local wall-clock time
- ``date``: hour 0 of that local day
- ``int``: hours since local midnight of day 0

Expected failures (a time outside the stream, a mode conflict, malformed
values) are logged and reported as ``False`` or ``None``; they never raise
and never change state.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import replace
from datetime import date, datetime, time as dt_time, timedelta
from typing import TYPE_CHECKING, Iterator, NamedTuple, Union

import numpy as np

from wxstream import burn, reconcile
from wxstream.cascade import CalculationContext
from wxstream.diurnal import TEMPERATURE_SHAPE, WIND_SHAPE, CurveShape
from wxstream.engines import DefaultEngine, FireIndexEngine, engine_from_name
from wxstream.invalidation import is_valid, mark_dirty, recompute
from wxstream.location import WorldLocation
from wxstream.records import (
    HOURS_PER_DAY,
    BurnCondition,
    DailyFlags,
    DailyRecord,
    DailyWeather,
    DayMode,
    HourlyObservation,
    SeedValues,
    WeatherOptions,
    validate_codes,
    validate_daily,
    validate_hourly,
)
from wxstream.timeline import Timeline

if TYPE_CHECKING:
    from wxstream.config import WxStreamConfig

logger = logging.getLogger(__name__)

TimeLike = Union[datetime, date, int]


class SimulationValues(NamedTuple):
    """Per-hour values handed to a fire growth simulation."""

    ffmc: float
    dc: float
    dmc: float
    wind_speed: float
    wind_direction: float


class WeatherStream:
    """
    A day-indexed weather stream with memoized FWI calculations.

    Parameters
    ----------
    start : date or datetime
        Local calendar day of day 0. Aware datetimes are converted to
        local time first.
    location : WorldLocation, optional
        Position and UTC offset used for solar times and time conversion.
    seeds : SeedValues, optional
        Starting codes and default weather.
    temperature_shape, wind_shape : CurveShape, optional
        Diurnal curve parameters.
    burn_condition : BurnCondition, optional
        Stream-wide default burn condition.
    options : WeatherOptions, optional
        Calculation options bitmask.
    daylight_saving : bool, optional
        Whether wall-clock times are one hour ahead of standard time.
    engine : FireIndexEngine, optional
        Fire-index implementation; defaults to :class:`DefaultEngine`.
    """

    def __init__(
        self,
        start: date | datetime,
        location: WorldLocation | None = None,
        seeds: SeedValues | None = None,
        temperature_shape: CurveShape = TEMPERATURE_SHAPE,
        wind_shape: CurveShape = WIND_SHAPE,
        burn_condition: BurnCondition | None = None,
        options: WeatherOptions = WeatherOptions.FFMC_VAN_WAGNER,
        daylight_saving: bool = False,
        engine: FireIndexEngine | None = None,
    ):
        location = location or WorldLocation()
        self._context = CalculationContext(
            location=location,
            seeds=seeds or SeedValues(),
            engine=engine or DefaultEngine(),
            options=WeatherOptions(options),
            temperature_shape=temperature_shape,
            wind_shape=wind_shape,
            daylight_saving=daylight_saving,
        )
        if isinstance(start, datetime):
            start = location.to_local(start, self._context.dst_hours).date()
        self._timeline = Timeline(start)
        self._burn_condition = burn_condition or BurnCondition()
        self._marker: int | None = None

    @classmethod
    def from_config(cls, config: "WxStreamConfig") -> "WeatherStream":
        """Build an empty stream from a loaded configuration."""
        loc = config.location
        seeds = config.seeds
        calc = config.calculation
        diurnal = config.diurnal
        burn_cfg = config.burn_condition

        options = WeatherOptions.FFMC_VAN_WAGNER
        if calc.user_specified:
            options |= WeatherOptions.USER_SPECIFIED

        stream = cls(
            start=config.input.start_date,
            location=WorldLocation(
                latitude=loc.latitude,
                longitude=loc.longitude,
                utc_offset=loc.utc_offset,
            ),
            seeds=SeedValues(**seeds.model_dump()),
            temperature_shape=CurveShape(**diurnal.temperature.model_dump()),
            wind_shape=CurveShape(**diurnal.wind.model_dump()),
            burn_condition=BurnCondition(**burn_cfg.model_dump()),
            options=options,
            daylight_saving=loc.daylight_saving,
            engine=engine_from_name(calc.engine),
        )
        if config.input.num_days:
            stream.increase_conditions(config.input.num_days)
        logger.info(f"Created stream starting {stream.start_date} with {stream.num_days()} days")
        return stream

    def __repr__(self) -> str:
        return (
            f"WeatherStream(start={self.start_date}, days={len(self._timeline)}, "
            f"engine={self.engine.name!r})"
        )

    def __len__(self) -> int:
        return len(self._timeline)

    def __iter__(self) -> Iterator[DailyRecord]:
        return iter(self._timeline)

    # =========================================================================
    # Settings
    # =========================================================================

    @property
    def location(self) -> WorldLocation:
        return self._context.location

    @property
    def seeds(self) -> SeedValues:
        return self._context.seeds

    @property
    def engine(self) -> FireIndexEngine:
        return self._context.engine

    @property
    def options(self) -> WeatherOptions:
        return self._context.options

    @property
    def daylight_saving(self) -> bool:
        return self._context.daylight_saving

    @property
    def temperature_shape(self) -> CurveShape:
        return self._context.temperature_shape

    @property
    def wind_shape(self) -> CurveShape:
        return self._context.wind_shape

    @property
    def dirty_marker(self) -> int | None:
        """Index of the first stale day, or None when every cache is valid."""
        return self._marker

    @property
    def initial_ffmc(self) -> float:
        return self._context.seeds.ffmc

    @property
    def initial_dmc(self) -> float:
        return self._context.seeds.dmc

    @property
    def initial_dc(self) -> float:
        return self._context.seeds.dc

    def _invalidate_all(self) -> None:
        if self._timeline:
            self._marker = 0

    def _invalidate(self, index: int) -> None:
        self._marker = mark_dirty(self._marker, index)

    def _restore_marker(self, marker: int | None) -> None:
        """Reinstate a saved dirty marker; used when loading a stream."""
        if marker is not None and not 0 <= marker < len(self._timeline):
            raise ValueError(f"Dirty marker {marker} outside {len(self._timeline)} days")
        self._marker = marker

    def reset_initial_values(self, **changes) -> bool:
        """
        Replace seed values and invalidate the whole stream.

        Keyword arguments are :class:`SeedValues` fields. Invalid values are
        rejected and leave the current seeds in place.
        """
        try:
            seeds = replace(self._context.seeds, **changes)
        except (TypeError, ValueError) as e:
            logger.warning(f"Rejected seed values: {e}")
            return False
        self._context.seeds = seeds
        self._invalidate_all()
        return True

    def set_location(self, location: WorldLocation) -> None:
        self._context.location = location
        self._invalidate_all()

    def set_daylight_saving(self, enabled: bool) -> None:
        if enabled != self._context.daylight_saving:
            self._context.daylight_saving = bool(enabled)
            self._invalidate_all()

    def set_options(self, options: WeatherOptions) -> None:
        options = WeatherOptions(options)
        if options != self._context.options:
            self._context.options = options
            self._invalidate_all()

    def set_engine(self, engine: FireIndexEngine) -> None:
        self._context.engine = engine
        self._invalidate_all()

    def set_curve_shapes(
        self,
        temperature: CurveShape | None = None,
        wind: CurveShape | None = None,
    ) -> None:
        if temperature is not None:
            self._context.temperature_shape = temperature
        if wind is not None:
            self._context.wind_shape = wind
        self._invalidate_all()

    def _enable_user_codes(self) -> None:
        if not self._context.honour_user_codes:
            self._context.options |= WeatherOptions.USER_SPECIFIED
            self._invalidate_all()

    # =========================================================================
    # Time and Range
    # =========================================================================

    @property
    def start_date(self) -> date:
        return self._timeline.start

    @property
    def start_time(self) -> datetime:
        """Local midnight of day 0 as an aware UTC datetime."""
        midnight = datetime.combine(self._timeline.start, dt_time())
        return self.location.to_utc(midnight, self._context.dst_hours)

    @property
    def end_time(self) -> datetime | None:
        """Last second of the last day as an aware UTC datetime."""
        if not self._timeline:
            return None
        return self.start_time + timedelta(days=len(self._timeline), seconds=-1)

    def _locate(self, when: TimeLike) -> tuple[int, int]:
        """Day offset and wall-clock hour of a time."""
        if isinstance(when, (int, np.integer)) and not isinstance(when, bool):
            day, hour = divmod(int(when), HOURS_PER_DAY)
            return day, hour
        if isinstance(when, datetime):
            local = self.location.to_local(when, self._context.dst_hours)
            return self._timeline.offset_of(local.date()), local.hour
        if isinstance(when, date):
            return self._timeline.offset_of(when), 0
        raise TypeError(f"Unsupported time type: {type(when).__name__}")

    def _resolve(self, when: TimeLike, add: bool = False) -> tuple[int, int, DailyRecord] | None:
        """Index, hour and record for a time, optionally growing the range."""
        day, hour = self._locate(when)
        n_days = len(self._timeline)
        if 0 <= day < n_days:
            return day, hour, self._timeline[day]
        if not add:
            logger.debug(f"{when} is outside the stream ({n_days} days from {self.start_date})")
            return None
        if day >= n_days:
            self.increase_conditions(day - n_days + 1)
        else:
            self.increase_conditions(-day, at_start=True)
            day = 0
        return day, hour, self._timeline[day]

    def get_reading(self, when: TimeLike, add: bool = False) -> DailyRecord | None:
        """
        Record of the local day containing ``when``.

        With ``add`` the range grows (at either end) to include the day.
        """
        resolved = self._resolve(when, add=add)
        return resolved[2] if resolved else None

    def index_of_day(self, record: DailyRecord) -> int | None:
        return self._timeline.index_of(record)

    def num_days(self) -> int:
        return len(self._timeline)

    def increase_conditions(self, count: int, at_start: bool = False) -> int:
        """
        Add ``count`` blank days at the end (or the start).

        Returns
        -------
        int
            Number of days added.
        """
        if count <= 0:
            return 0
        first_new = len(self._timeline)
        for _ in range(count):
            if at_start:
                self._timeline.appendleft()
            else:
                self._timeline.append()
        if at_start:
            self._marker = 0
        else:
            self._invalidate(first_new)
        return count

    def decrease_conditions(self, count: int, at_start: bool = False) -> int:
        """
        Remove up to ``count`` days from the end (or the start).

        Returns
        -------
        int
            Number of days removed.
        """
        count = max(0, min(count, len(self._timeline)))
        for _ in range(count):
            if at_start:
                self._timeline.popleft()
            else:
                self._timeline.pop()

        n_days = len(self._timeline)
        if n_days == 0:
            self._marker = None
        elif at_start and count:
            self._marker = 0
        elif self._marker is not None and self._marker >= n_days:
            self._marker = None
        return count

    def set_end_time(self, when: TimeLike) -> bool:
        """
        Grow or shrink the tail so the stream ends on the day of ``when``.

        New days copy the weather of the current last day.
        """
        if not self._timeline:
            logger.warning("Cannot set the end time of an empty stream")
            return False
        day, _ = self._locate(when)
        if day < 0:
            logger.warning(f"End time {when} is before the stream start")
            return False

        last = len(self._timeline) - 1
        if day < last:
            self.decrease_conditions(last - day)
        elif day > last:
            source = self._timeline[last]
            self.increase_conditions(day - last)
            for index in range(last + 1, day + 1):
                self._copy_weather(source, self._timeline[index])
        return True

    def _copy_weather(self, source: DailyRecord, target: DailyRecord) -> None:
        target.mode = source.mode
        target.daily = copy.copy(source.daily)
        target.hourly = [copy.copy(obs) for obs in source.hourly]

    # =========================================================================
    # Recalculation
    # =========================================================================

    def _ensure(self, index: int) -> None:
        if not is_valid(self._marker, index):
            self._marker = recompute(self._timeline, self._marker, self._context, upto=index)

    def calculate_values(self) -> None:
        """Bring every day's cache up to date."""
        if self._marker is not None:
            logger.debug(f"Calculating from day {self._marker} of {len(self._timeline)}")
        self._marker = recompute(self._timeline, self._marker, self._context)

    def _computed(self, when: TimeLike) -> tuple[int, DailyRecord] | None:
        resolved = self._resolve(when)
        if resolved is None:
            return None
        index, hour, record = resolved
        self._ensure(index)
        return hour, record

    # =========================================================================
    # Weather Values
    # =========================================================================

    def set_daily_values(
        self,
        when: TimeLike,
        min_temp: float,
        max_temp: float,
        min_ws: float,
        max_ws: float,
        rh: float,
        precip: float,
        wd: float,
    ) -> bool:
        """Store daily extremes for the day of ``when``, adding it if needed."""
        weather = DailyWeather(
            min_temp=min_temp,
            max_temp=max_temp,
            min_ws=min_ws,
            max_ws=max_ws,
            rh=rh,
            precip=precip,
            wd=wd,
        )
        problems = validate_daily(weather)
        if problems:
            logger.warning(f"Rejected daily values for {when}: {'; '.join(problems)}")
            return False

        target = self._resolve(when)
        if target is not None and target[2].mode is DayMode.HOURLY:
            return reconcile.accept_daily(target[2], weather)
        index, _, record = self._resolve(when, add=True)
        reconcile.accept_daily(record, weather)
        self._invalidate(index)
        return True

    def get_daily_values(self, when: TimeLike) -> DailyWeather | None:
        """Daily extremes of a day; hourly days are summarized."""
        resolved = self._resolve(when)
        if resolved is None:
            return None
        index, _, record = resolved
        if record.mode is DayMode.DAILY:
            return copy.copy(record.daily)
        if record.mode is DayMode.HOURLY:
            self._ensure(index)
            return reconcile.summarize_hourly(record.derived, self._context.noon_hour)
        logger.debug(f"{record.day} has no weather")
        return None

    def set_hourly_values(
        self,
        when: TimeLike,
        temp: float,
        rh: float,
        precip: float,
        ws: float,
        wd: float,
        ffmc: float | None = None,
    ) -> bool:
        """Store one hour of observations, optionally with a user FFMC."""
        observation = HourlyObservation(temp=temp, rh=rh, precip=precip, ws=ws, wd=wd)
        problems = validate_hourly(observation) + validate_codes(ffmc=ffmc)
        if problems:
            logger.warning(f"Rejected hourly values for {when}: {'; '.join(problems)}")
            return False

        target = self._resolve(when)
        if target is not None and target[2].mode is DayMode.DAILY:
            return reconcile.accept_hourly(target[2], target[1], observation)
        index, hour, record = self._resolve(when, add=True)
        reconcile.accept_hourly(record, hour, observation)
        if ffmc is not None:
            reconcile.set_hour_codes(record, hour, ffmc=ffmc)
            self._enable_user_codes()
        self._invalidate(index)
        return True

    def get_hourly_values(self, when: TimeLike) -> HourlyObservation | None:
        """Hourly weather at ``when``; fails on a day with no weather."""
        resolved = self._resolve(when)
        if resolved is None:
            return None
        index, hour, record = resolved
        if record.mode is DayMode.UNSET:
            logger.debug(f"{record.day} has no weather")
            return None
        self._ensure(index)
        weather = record.derived.weather
        return HourlyObservation(
            temp=float(weather.temp[hour]),
            rh=float(weather.rh[hour]),
            precip=float(weather.precip[hour]),
            ws=float(weather.ws[hour]),
            wd=float(weather.wd[hour]),
            specified=bool(reconcile.hour_status(record, hour)),
            ffmc=record.specified_hourly_codes[hour].get("ffmc"),
        )

    def make_hourly_observations(self, when: TimeLike) -> bool:
        """Switch a day to hourly mode, seeding hours from its derived curve."""
        resolved = self._resolve(when, add=True)
        index, _, record = resolved
        if record.mode is DayMode.HOURLY:
            return True
        if record.mode is DayMode.DAILY:
            self._ensure(index)
        reconcile.to_hourly(record)
        self._invalidate(index)
        return True

    def make_daily_observations(self, when: TimeLike) -> bool:
        """Switch a day to daily mode, summarizing any hourly observations."""
        resolved = self._resolve(when, add=True)
        index, _, record = resolved
        if record.mode is DayMode.DAILY:
            return True
        if record.mode is DayMode.HOURLY:
            self._ensure(index)
            reconcile.to_daily(record, self._context.noon_hour)
        else:
            reconcile.accept_daily(record, self._context.seeds.blank_weather())
        self._invalidate(index)
        return True

    def is_hourly_observations(self, when: TimeLike) -> bool | None:
        resolved = self._resolve(when)
        if resolved is None:
            return None
        return resolved[2].mode is DayMode.HOURLY

    def day_mode(self, when: TimeLike) -> DayMode | None:
        resolved = self._resolve(when)
        return resolved[2].mode if resolved else None

    # =========================================================================
    # User-Specified Codes
    # =========================================================================

    def set_daily_codes(
        self,
        when: TimeLike,
        ffmc: float | None = None,
        dmc: float | None = None,
        dc: float | None = None,
        bui: float | None = None,
    ) -> bool:
        """Override computed daily codes for one day."""
        problems = validate_codes(ffmc=ffmc, dmc=dmc, dc=dc, bui=bui)
        if problems:
            logger.warning(f"Rejected daily codes for {when}: {'; '.join(problems)}")
            return False
        index, _, record = self._resolve(when, add=True)
        reconcile.set_codes(record, ffmc=ffmc, dmc=dmc, dc=dc, bui=bui)
        self._enable_user_codes()
        self._invalidate(index)
        return True

    def set_hourly_codes(
        self,
        when: TimeLike,
        ffmc: float | None = None,
        isi: float | None = None,
        fwi: float | None = None,
    ) -> bool:
        """Override computed hourly values for one hour."""
        problems = validate_codes(ffmc=ffmc, isi=isi, fwi=fwi)
        if problems:
            logger.warning(f"Rejected hourly codes for {when}: {'; '.join(problems)}")
            return False
        index, hour, record = self._resolve(when, add=True)
        reconcile.set_hour_codes(record, hour, ffmc=ffmc, isi=isi, fwi=fwi)
        self._enable_user_codes()
        self._invalidate(index)
        return True

    def _clear_user(self, name: str, when: TimeLike | None) -> bool:
        if when is None:
            for index, record in enumerate(self._timeline):
                if reconcile.clear_code(record, name):
                    self._invalidate(index)
            return True

        resolved = self._resolve(when)
        if resolved is None:
            return False
        index, _, record = resolved
        if reconcile.clear_code(record, name):
            self._invalidate(index)
        return True

    def clear_user_ffmc(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("ffmc", when)

    def clear_user_isi(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("isi", when)

    def clear_user_bui(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("bui", when)

    def clear_user_fwi(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("fwi", when)

    def clear_user_dmc(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("dmc", when)

    def clear_user_dc(self, when: TimeLike | None = None) -> bool:
        return self._clear_user("dc", when)

    def is_daily_used(self, when: TimeLike) -> DailyFlags | None:
        """Bit set of the user-supplied quantities of a day."""
        resolved = self._resolve(when)
        if resolved is None:
            return None
        index, _, record = resolved
        return reconcile.user_flags(record, index)

    def status(self, when: TimeLike) -> int | None:
        """1 if the hour's weather was set by the user, 0 if derived."""
        resolved = self._resolve(when)
        if resolved is None:
            return None
        _, hour, record = resolved
        return reconcile.hour_status(record, hour)

    def set_status(self, when: TimeLike, value: int) -> bool:
        resolved = self._resolve(when)
        if resolved is None:
            return False
        index, hour, record = resolved
        if not reconcile.set_hour_status(record, hour, value):
            return False
        self._invalidate(index)
        return True

    # =========================================================================
    # Point Queries
    # =========================================================================

    def get_simulation_values(self, when: TimeLike) -> SimulationValues | None:
        """Hourly FFMC, daily DC and DMC and the hour's wind."""
        computed = self._computed(when)
        if computed is None:
            return None
        hour, record = computed
        derived = record.derived
        return SimulationValues(
            ffmc=float(derived.hourly_ffmc[hour]),
            dc=derived.dc,
            dmc=derived.dmc,
            wind_speed=float(derived.weather.ws[hour]),
            wind_direction=float(derived.weather.wd[hour]),
        )

    def _hourly(self, when: TimeLike, attribute: str) -> float | None:
        computed = self._computed(when)
        if computed is None:
            return None
        hour, record = computed
        return float(getattr(record.derived, attribute)[hour])

    def _daily(self, when: TimeLike, attribute: str) -> float | None:
        computed = self._computed(when)
        if computed is None:
            return None
        return getattr(computed[1].derived, attribute)

    def ffmc(self, when: TimeLike) -> float | None:
        """Hourly FFMC."""
        return self._hourly(when, "hourly_ffmc")

    def isi(self, when: TimeLike) -> float | None:
        """Hourly ISI."""
        return self._hourly(when, "hourly_isi")

    def fwi(self, when: TimeLike) -> float | None:
        """Hourly FWI."""
        return self._hourly(when, "hourly_fwi")

    def daily_ffmc(self, when: TimeLike) -> float | None:
        """Daily standard FFMC."""
        return self._daily(when, "ffmc")

    def daily_isi(self, when: TimeLike) -> float | None:
        return self._daily(when, "isi")

    def daily_fwi(self, when: TimeLike) -> float | None:
        return self._daily(when, "fwi")

    def dmc(self, when: TimeLike) -> float | None:
        return self._daily(when, "dmc")

    def dc(self, when: TimeLike) -> float | None:
        return self._daily(when, "dc")

    def bui(self, when: TimeLike) -> float | None:
        return self._daily(when, "bui")

    def dsr(self, when: TimeLike) -> float | None:
        return self._daily(when, "dsr")

    def rain_24h(self, when: TimeLike) -> float | None:
        """Precipitation for the 24 hours ending at local standard noon."""
        return self._daily(when, "rain_24h")

    # =========================================================================
    # Burn Conditions
    # =========================================================================

    @property
    def burn_condition(self) -> BurnCondition:
        return self._burn_condition

    def set_burn_condition(self, condition: BurnCondition) -> None:
        self._burn_condition = condition

    @property
    def burn_start_hour(self) -> int:
        return self._burn_condition.start_hour

    @property
    def burn_end_hour(self) -> int:
        return self._burn_condition.end_hour

    @property
    def burn_condition_effective(self) -> bool:
        return self._burn_condition.effective

    def get_day_burn_condition(self, when: TimeLike) -> BurnCondition | None:
        """The day's override, or the stream default when it has none."""
        resolved = self._resolve(when)
        if resolved is None:
            return None
        record = resolved[2]
        return record.burn_condition or self._burn_condition

    def set_day_burn_condition(self, when: TimeLike, condition: BurnCondition) -> bool:
        resolved = self._resolve(when)
        if resolved is None:
            return False
        resolved[2].burn_condition = condition
        return True

    def clear_day_burn_condition(self, when: TimeLike) -> bool:
        resolved = self._resolve(when)
        if resolved is None:
            return False
        resolved[2].burn_condition = None
        return True

    def set_all_daily_burn_condition(self) -> int:
        """
        Copy the stream default to every day without an override.

        Returns
        -------
        int
            Number of days updated.
        """
        updated = 0
        for record in self._timeline:
            if record.burn_condition is None:
                record.burn_condition = replace(self._burn_condition)
                updated += 1
        return updated

    def can_burn(self, when: TimeLike, condition: BurnCondition | None = None) -> bool | None:
        """
        Whether burning is allowed at ``when``.

        Uses ``condition`` when given, otherwise the day's effective
        condition, against the hour's derived wind and humidity.
        """
        computed = self._computed(when)
        if computed is None:
            return None
        hour, record = computed
        condition = condition or record.burn_condition or self._burn_condition
        weather = record.derived.weather
        return burn.can_burn(hour, float(weather.ws[hour]), float(weather.rh[hour]), condition)
