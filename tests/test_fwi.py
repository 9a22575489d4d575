"""
Tests for the FWI module.
"""

import pytest

from wxstream.fwi import (
    FFMC_COEFFICIENT,
    PRECISE_FFMC_COEFFICIENT,
    calculate_bui,
    calculate_dc,
    calculate_dmc,
    calculate_dsr,
    calculate_ffmc,
    calculate_fwi,
    calculate_hourly_ffmc,
    calculate_isi,
    ffmc_to_moisture,
    moisture_to_ffmc,
)


class TestMoistureConversion:
    """Tests for FFMC/moisture conversion."""

    def test_precise_coefficient_round_trip(self):
        """Test the precise coefficient converts back exactly."""
        for ffmc in (40.0, 85.0, 96.0):
            m = ffmc_to_moisture(ffmc, PRECISE_FFMC_COEFFICIENT)
            assert moisture_to_ffmc(m, PRECISE_FFMC_COEFFICIENT) == pytest.approx(ffmc)

    def test_default_coefficient_round_trip(self):
        """Test the standard coefficient converts back within rounding."""
        for ffmc in (50.0, 85.0, 95.0):
            m = ffmc_to_moisture(ffmc, FFMC_COEFFICIENT)
            assert moisture_to_ffmc(m, FFMC_COEFFICIENT) == pytest.approx(ffmc, abs=0.1)

    def test_moisture_decreases_with_ffmc(self):
        """Test drier fuel has a higher code."""
        assert ffmc_to_moisture(90.0) < ffmc_to_moisture(70.0)


class TestFFMC:
    """Tests for daily and hourly FFMC."""

    def test_drying_day_raises_ffmc(self):
        """Test a warm, dry, windy day raises FFMC above its start."""
        assert calculate_ffmc(25.0, 30.0, 15.0, 0.0, 85.0) > 85.0

    def test_rain_lowers_ffmc(self):
        """Test more rain never raises FFMC."""
        values = [calculate_ffmc(20.0, 40.0, 15.0, rain, 88.0) for rain in (0.0, 1.0, 5.0, 20.0)]
        assert values == sorted(values, reverse=True)
        assert values[-1] < values[0]

    def test_small_rain_ignored(self):
        """Test rain up to 0.5 mm has no effect on daily FFMC."""
        assert calculate_ffmc(20.0, 40.0, 15.0, 0.5, 88.0) == calculate_ffmc(20.0, 40.0, 15.0, 0.0, 88.0)

    def test_monotonic_in_weather(self):
        """Test hotter, windier or drier weather never lowers FFMC."""
        base = calculate_ffmc(20.0, 40.0, 10.0, 0.0, 80.0)
        assert calculate_ffmc(30.0, 40.0, 10.0, 0.0, 80.0) >= base
        assert calculate_ffmc(20.0, 20.0, 10.0, 0.0, 80.0) >= base
        assert calculate_ffmc(20.0, 40.0, 30.0, 0.0, 80.0) >= base

    def test_range(self):
        """Test FFMC stays within 0-101 for extreme weather."""
        assert 0.0 <= calculate_ffmc(45.0, 0.0, 100.0, 0.0, 100.0) <= 101.0
        assert 0.0 <= calculate_ffmc(5.0, 100.0, 0.0, 100.0, 10.0) <= 101.0

    def test_hourly_drying(self):
        """Test one dry hour raises FFMC a little."""
        ffmc = calculate_hourly_ffmc(25.0, 25.0, 20.0, 0.0, 85.0)
        assert 85.0 < ffmc < 90.0

    def test_hourly_rain(self):
        """Test one hour of rain lowers FFMC."""
        assert calculate_hourly_ffmc(15.0, 90.0, 5.0, 3.0, 85.0) < 85.0


class TestDMC:
    """Tests for DMC calculation."""

    def test_dry_day_increases(self):
        """Test DMC rises on a dry day."""
        assert calculate_dmc(20.0, 40.0, 0.0, 6.0, month=7) > 6.0

    def test_heavy_rain_lowers(self):
        """Test heavy rain lowers DMC."""
        assert calculate_dmc(20.0, 40.0, 20.0, 30.0, month=7) < 30.0

    def test_cold_day_unchanged(self):
        """Test no drying below -1.1 degrees."""
        assert calculate_dmc(-5.0, 40.0, 0.0, 12.0, month=1) == pytest.approx(12.0)

    def test_non_negative(self):
        """Test DMC is never negative."""
        assert calculate_dmc(10.0, 100.0, 100.0, 0.0) >= 0.0


class TestDC:
    """Tests for DC calculation."""

    def test_dry_day_increases(self):
        """Test DC rises on a dry summer day."""
        assert calculate_dc(20.0, 0.0, 15.0, month=7) > 15.0

    def test_heavy_rain_lowers(self):
        """Test heavy rain lowers DC."""
        assert calculate_dc(20.0, 30.0, 300.0, month=7) < 300.0

    def test_equatorial_day_length(self):
        """Test the equatorial factor south of 20N."""
        assert calculate_dc(-5.0, 0.0, 15.0, month=1, latitude=10.0) == pytest.approx(15.7)
        assert calculate_dc(-5.0, 0.0, 15.0, month=1, latitude=51.0) == pytest.approx(15.0)


class TestIndices:
    """Tests for ISI, BUI, FWI and DSR."""

    def test_isi_increases(self):
        """Test ISI increases with FFMC and wind."""
        assert calculate_isi(92.0, 20.0) > calculate_isi(85.0, 20.0)
        assert calculate_isi(85.0, 30.0) > calculate_isi(85.0, 10.0)
        assert calculate_isi(0.0, 0.0) >= 0.0

    def test_bui_zero(self):
        """Test BUI is zero when both codes are zero."""
        assert calculate_bui(0.0, 0.0) == 0.0

    def test_bui_increases_with_dmc(self):
        """Test BUI increases with DMC."""
        assert calculate_bui(40.0, 200.0) > calculate_bui(20.0, 200.0)
        assert calculate_bui(20.0, 200.0) >= 0.0

    def test_fwi(self):
        """Test FWI is zero without spread and grows with ISI."""
        assert calculate_fwi(0.0, 50.0) == 0.0
        assert calculate_fwi(10.0, 50.0) > calculate_fwi(5.0, 50.0)

    def test_dsr(self):
        """Test DSR formula."""
        assert calculate_dsr(10.0) == pytest.approx(0.0272 * 10.0 ** 1.77)
        assert calculate_dsr(0.0) == 0.0
