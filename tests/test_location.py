"""
Tests for the location module.
"""

from datetime import date, datetime, timezone

import pytest

from wxstream.location import SolarTimes, WorldLocation


class TestSolarTimes:
    """Tests for sunrise, solar noon and sunset."""

    def test_summer_order(self):
        """Test sunrise precedes solar noon precedes sunset."""
        solar = WorldLocation().solar_times(date(2024, 6, 21))
        assert solar.sunrise < solar.solar_noon < solar.sunset
        assert solar.day_length > 15.0

    def test_solar_noon_longitude(self):
        """Test solar noon is later west of the time-zone meridian."""
        solar = WorldLocation(latitude=51.0, longitude=-115.0, utc_offset=-7.0).solar_times(date(2024, 6, 21))
        assert 12.4 < solar.solar_noon < 13.1

    def test_winter_shorter(self):
        """Test winter days are shorter than summer days."""
        loc = WorldLocation()
        assert loc.solar_times(date(2024, 12, 21)).day_length < loc.solar_times(date(2024, 6, 21)).day_length

    def test_polar_clamped(self):
        """Test midnight sun and polar night are clamped."""
        loc = WorldLocation(latitude=80.0, longitude=0.0, utc_offset=0.0)
        assert loc.solar_times(date(2024, 6, 21)).day_length == pytest.approx(24.0)
        assert loc.solar_times(date(2024, 12, 21)).day_length == pytest.approx(0.0)

    def test_shifted(self):
        """Test shifting moves all three times."""
        solar = SolarTimes(5.0, 12.0, 20.0).shifted(1.0)
        assert (solar.sunrise, solar.solar_noon, solar.sunset) == (6.0, 13.0, 21.0)


class TestLocalTime:
    """Tests for time conversion."""

    def test_aware_to_local(self):
        """Test aware datetimes convert through UTC."""
        loc = WorldLocation(utc_offset=-7.0)
        moment = datetime(2024, 7, 1, 19, 0, tzinfo=timezone.utc)
        assert loc.to_local(moment) == datetime(2024, 7, 1, 12, 0)
        assert loc.to_local(moment, 1.0) == datetime(2024, 7, 1, 13, 0)

    def test_naive_unchanged(self):
        """Test naive datetimes are already local."""
        moment = datetime(2024, 7, 1, 9, 30)
        assert WorldLocation().to_local(moment) == moment

    def test_to_utc_inverse(self):
        """Test to_utc undoes to_local."""
        loc = WorldLocation(utc_offset=-7.0)
        moment = datetime(2024, 7, 1, 19, 0, tzinfo=timezone.utc)
        assert loc.to_utc(loc.to_local(moment, 1.0), 1.0) == moment

    def test_invalid_latitude(self):
        """Test out-of-range coordinates raise."""
        with pytest.raises(ValueError):
            WorldLocation(latitude=95.0)
