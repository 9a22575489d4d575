"""
Tests for the persistence module.
"""

import json
from datetime import date, datetime, timedelta

import pytest

from wxstream.engines import AlternateEngine
from wxstream.persistence import (
    FORMAT_VERSION,
    StreamDecodeError,
    decode_stream,
    encode_stream,
    load_stream,
    save_stream,
)
from wxstream.records import BurnCondition, DayMode, SeedValues
from wxstream.stream import WeatherStream

START = date(2024, 7, 1)


def sample_stream():
    stream = WeatherStream(START, seeds=SeedValues(ffmc=87.0, dmc=12.0, dc=80.0), engine=AlternateEngine())
    for i in range(2):
        stream.set_daily_values(START + timedelta(days=i), 5.0, 20.0, 10.0, 20.0, 40.0, 0.0, 270.0)
    stream.set_hourly_values(datetime(2024, 7, 3, 14), 26.0, 25.0, 0.0, 18.0, 250.0, ffmc=91.0)
    stream.set_daily_codes(START + timedelta(days=1), dc=120.0)
    stream.set_day_burn_condition(START, BurnCondition(start_hour=9, end_hour=19))
    return stream


class TestEncode:
    """Tests for encoding."""

    def test_json_compatible(self):
        """Test the payload survives a JSON round trip."""
        stream = sample_stream()
        stream.calculate_values()
        data = encode_stream(stream)
        assert data["format_version"] == FORMAT_VERSION
        assert json.loads(json.dumps(data)) == data

    def test_stale_days_without_cache(self):
        """Test only valid days carry cached results."""
        stream = sample_stream()
        stream.dc(START)
        days = encode_stream(stream)["days"]
        assert "derived" in days[0]
        assert "derived" not in days[1]


class TestRoundTrip:
    """Tests for decode after encode."""

    def test_values_preserved(self):
        """Test a restored stream reports the same values."""
        stream = sample_stream()
        stream.calculate_values()
        restored = decode_stream(encode_stream(stream))
        assert restored.num_days() == 3
        assert restored.dirty_marker is None
        assert isinstance(restored.engine, AlternateEngine)
        assert restored.initial_dc == 80.0
        for hour in (12, 40, 62):
            assert restored.ffmc(hour) == stream.ffmc(hour)
            assert restored.dc(hour) == stream.dc(hour)
        assert restored.day_mode(START + timedelta(days=2)) is DayMode.HOURLY
        assert restored.is_daily_used(START + timedelta(days=1)) == stream.is_daily_used(START + timedelta(days=1))
        assert restored.get_day_burn_condition(START).start_hour == 9

    def test_marker_restored(self):
        """Test a partly computed stream keeps its dirty marker."""
        stream = sample_stream()
        stream.dc(START)
        restored = decode_stream(encode_stream(stream))
        assert restored.dirty_marker == stream.dirty_marker == 1
        assert restored.dc(2 * 24) == stream.dc(2 * 24)

    def test_file_round_trip(self, tmp_path):
        """Test saving to and loading from a file."""
        stream = sample_stream()
        path = save_stream(stream, tmp_path / "state" / "stream.json")
        assert path.exists()
        assert load_stream(path).dsr(50) == stream.dsr(50)


class TestErrors:
    """Tests for decode failures."""

    def test_unsupported_version(self):
        """Test an unknown format version is rejected."""
        data = encode_stream(sample_stream())
        data["format_version"] = FORMAT_VERSION + 1
        with pytest.raises(StreamDecodeError):
            decode_stream(data)

    def test_corrupt_payload(self):
        """Test a payload with missing fields is rejected."""
        data = encode_stream(sample_stream())
        del data["seeds"]
        with pytest.raises(ValueError):
            decode_stream(data)

    def test_out_of_sequence(self):
        """Test days must follow the start date."""
        data = encode_stream(sample_stream())
        data["days"][1]["day"] = "2024-08-01"
        with pytest.raises(StreamDecodeError):
            decode_stream(data)

    def test_invalid_marker(self):
        """Test a dirty marker that is not a day index is rejected."""
        for marker in ("x", 1.5, True, -1, 99):
            data = encode_stream(sample_stream())
            data["dirty_marker"] = marker
            with pytest.raises(StreamDecodeError):
                decode_stream(data)

    def test_restore_marker_bounds(self):
        """Test the stream refuses a marker past its last day."""
        stream = sample_stream()
        with pytest.raises(ValueError):
            stream._restore_marker(stream.num_days())

    def test_missing_file(self, tmp_path):
        """Test loading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_stream(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test a file that is not JSON is rejected."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(StreamDecodeError):
            load_stream(path)
