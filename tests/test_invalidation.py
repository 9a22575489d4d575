"""
Tests for the invalidation and cascade modules.
"""

from datetime import date

import numpy as np
import pytest

from wxstream.cascade import CalculationContext, compute_day, rain_24h
from wxstream.invalidation import is_valid, mark_dirty, recompute
from wxstream.location import WorldLocation
from wxstream.reconcile import accept_daily, set_codes, set_hour_codes
from wxstream.records import DailyWeather, SeedValues, WeatherOptions
from wxstream.timeline import Timeline

START = date(2024, 7, 1)
WEATHER = DailyWeather(min_temp=5.0, max_temp=20.0, min_ws=10.0, max_ws=20.0, rh=40.0, precip=0.0, wd=270.0)


def make_timeline(n_days=3, weather=WEATHER):
    tl = Timeline(START)
    for _ in range(n_days):
        accept_daily(tl.append(), weather)
    return tl


def make_context(**kwargs):
    return CalculationContext(location=WorldLocation(), seeds=SeedValues(**kwargs))


class TestMarker:
    """Tests for dirty-marker arithmetic."""

    def test_mark_dirty(self):
        """Test the marker only moves backwards."""
        assert mark_dirty(None, 4) == 4
        assert mark_dirty(2, 4) == 2
        assert mark_dirty(6, 4) == 4
        assert mark_dirty(None, -3) == 0

    def test_is_valid(self):
        """Test validity relative to the marker."""
        assert is_valid(None, 10)
        assert is_valid(3, 2)
        assert not is_valid(3, 3)


class TestRecompute:
    """Tests for forward recomputation."""

    def test_full(self):
        """Test recomputing to the end clears the marker."""
        tl = make_timeline()
        assert recompute(tl, 0, make_context()) is None
        assert all(r.derived is not None for r in tl)

    def test_partial(self):
        """Test recomputing up to a day leaves later days stale."""
        tl = make_timeline()
        assert recompute(tl, 0, make_context(), upto=0) == 1
        assert tl[0].derived is not None
        assert tl[1].derived is None

    def test_nothing_dirty(self):
        """Test a clean timeline is left alone."""
        tl = make_timeline()
        assert recompute(tl, None, make_context()) is None
        assert tl[0].derived is None

    def test_upto_before_marker(self):
        """Test asking for an already valid day changes nothing."""
        tl = make_timeline()
        assert recompute(tl, 2, make_context(), upto=1) == 2

    def test_codes_carry_forward(self):
        """Test moisture codes accumulate over drying days."""
        tl = make_timeline()
        recompute(tl, 0, make_context())
        dmc = [r.derived.dmc for r in tl]
        dc = [r.derived.dc for r in tl]
        assert dmc == sorted(dmc) and dmc[0] > 6.0
        assert dc == sorted(dc) and dc[0] > 15.0


class TestComputeDay:
    """Tests for the per-day cascade."""

    def test_rain_day_zero_includes_seed(self):
        """Test day 0 counts the seed rain."""
        tl = make_timeline(1, DailyWeather(5.0, 20.0, 10.0, 20.0, 40.0, 3.0, 270.0))
        context = make_context(rain=2.0)
        derived = compute_day(tl[0], None, context)
        assert derived.rain_24h == pytest.approx(5.0)

    def test_rain_after_noon_counts_next_day(self):
        """Test rain after standard noon belongs to the next day's total."""
        tl = make_timeline(2)
        context = make_context()
        first = compute_day(tl[0], None, context)
        first.weather.precip[18] = 4.0
        weather = compute_day(tl[1], tl[0], context).weather
        assert rain_24h(weather, tl[0], context) == pytest.approx(4.0)

    def test_hourly_anchor_at_noon(self):
        """Test day 0 hourly FFMC starts from the daily FFMC at noon."""
        tl = make_timeline(1)
        derived = compute_day(tl[0], None, make_context())
        assert derived.hourly_ffmc[12] == pytest.approx(derived.ffmc)
        assert np.all(derived.hourly_ffmc[:12] == derived.hourly_ffmc[12])

    def test_hourly_seed(self):
        """Test an hourly FFMC seed anchors the chain at its hour."""
        tl = make_timeline(1)
        derived = compute_day(tl[0], None, make_context(hourly_ffmc=70.0, hourly_ffmc_hour=6))
        assert derived.hourly_ffmc[6] == pytest.approx(70.0)
        assert derived.hourly_ffmc[7] != pytest.approx(70.0)

    def test_user_codes_need_option(self):
        """Test user codes apply only with USER_SPECIFIED."""
        tl = make_timeline(1)
        set_codes(tl[0], dmc=40.0)
        set_hour_codes(tl[0], 15, ffmc=60.0)
        context = make_context()
        assert compute_day(tl[0], None, context).dmc != pytest.approx(40.0)

        context.options = WeatherOptions.FFMC_VAN_WAGNER | WeatherOptions.USER_SPECIFIED
        derived = compute_day(tl[0], None, context)
        assert derived.dmc == pytest.approx(40.0)
        assert derived.hourly_ffmc[15] == pytest.approx(60.0)
