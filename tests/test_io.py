"""
Tests for the io module.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from wxstream.io import (
    daily_table,
    export_daily,
    export_hourly,
    hourly_table,
    import_daily,
    import_hourly,
    read_daily_csv,
    read_hourly_csv,
)
from wxstream.records import DailyFlags, DayMode
from wxstream.stream import WeatherStream

START = date(2024, 7, 1)

DAILY_CSV = """Date,Min_Temp,Max_Temp,Min_WS,Max_WS,Min_RH,Rain,Dir
2024-07-01,5,20,10,20,40,0,270
2024-07-02,6,22,8,18,35,0,250
2024-07-03,8,24,5,25,30,2.5,200
"""

HOURLY_CSV = """DateTime,Temp,RH,WS,WD,Precip,HFFMC
2024-07-01 10:00,18,45,12,180,0,
2024-07-01 14:00,24,30,18,200,0,89.5
2024-07-01 18:00,20,38,10,220,0.4,
"""


@pytest.fixture
def daily_path(tmp_path):
    path = tmp_path / "daily.csv"
    path.write_text(DAILY_CSV)
    return path


@pytest.fixture
def hourly_path(tmp_path):
    path = tmp_path / "hourly.csv"
    path.write_text(HOURLY_CSV)
    return path


class TestRead:
    """Tests for CSV readers."""

    def test_daily_aliases(self, daily_path):
        """Test daily column spellings are standardized."""
        df = read_daily_csv(daily_path)
        assert {"DATE", "MIN_TEMP", "RELATIVE_HUMIDITY", "PRECIPITATION", "WIND_DIRECTION"} <= set(df.columns)
        assert df["DATE"].iloc[0] == START

    def test_hourly_datetime(self, hourly_path):
        """Test DATE and HOUR are split from a datetime column."""
        df = read_hourly_csv(hourly_path)
        assert list(df["HOUR"]) == [10, 14, 18]
        assert df["DATE"].iloc[0] == START
        assert "FFMC" in df.columns

    def test_missing_columns(self, tmp_path):
        """Test a file without required columns is rejected."""
        path = tmp_path / "bad.csv"
        path.write_text("Date,Temp\n2024-07-01,20\n")
        with pytest.raises(ValueError):
            read_daily_csv(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            read_daily_csv(tmp_path / "nope.csv")


class TestImport:
    """Tests for loading frames into a stream."""

    def test_import_daily(self, daily_path):
        """Test daily rows become daily days."""
        stream = WeatherStream(START)
        assert import_daily(stream, read_daily_csv(daily_path)) == 3
        assert stream.num_days() == 3
        assert stream.get_daily_values(date(2024, 7, 3)).precip == pytest.approx(2.5)

    def test_invalid_fail(self, daily_path):
        """Test a rejected row raises by default."""
        df = read_daily_csv(daily_path)
        df.loc[1, "RELATIVE_HUMIDITY"] = 140.0
        with pytest.raises(ValueError):
            import_daily(WeatherStream(START), df)

    def test_invalid_skip(self, daily_path):
        """Test rejected rows can be skipped."""
        df = read_daily_csv(daily_path)
        df.loc[1, "MIN_TEMP"] = 30.0
        stream = WeatherStream(START)
        assert import_daily(stream, df, invalid="skip") == 2
        assert stream.day_mode(date(2024, 7, 2)) is DayMode.UNSET

    def test_daily_codes(self, daily_path):
        """Test code columns become user-specified codes."""
        df = read_daily_csv(daily_path)
        df["DC"] = [None, 200.0, None]
        stream = WeatherStream(START)
        import_daily(stream, df)
        assert stream.dc(date(2024, 7, 2)) == pytest.approx(200.0)
        assert stream.is_daily_used(date(2024, 7, 2)) & DailyFlags.DC

    def test_bad_code_leaves_stream_unchanged(self, daily_path):
        """Test a row with an impossible code writes no weather."""
        df = read_daily_csv(daily_path)
        df["FFMC"] = [None, None, 150.0]
        stream = WeatherStream(START)
        assert import_daily(stream, df, invalid="skip") == 2
        assert stream.num_days() == 2
        assert stream.day_mode(date(2024, 7, 3)) is None

    def test_bad_code_fails_before_writing(self, daily_path):
        """Test a failing row raises without creating its day."""
        df = read_daily_csv(daily_path).iloc[:1].copy()
        df["DC"] = [-5.0]
        stream = WeatherStream(START)
        with pytest.raises(ValueError):
            import_daily(stream, df)
        assert stream.num_days() == 0

    def test_bad_hourly_code_skipped(self, hourly_path):
        """Test an hourly row with a bad code creates no day."""
        df = read_hourly_csv(hourly_path)
        df["ISI"] = [None, None, -1.0]
        df["DATE"] = [START, START, date(2024, 7, 2)]
        stream = WeatherStream(START)
        assert import_hourly(stream, df, invalid="skip") == 2
        assert stream.num_days() == 1
        assert stream.day_mode(date(2024, 7, 2)) is None
        assert stream.day_mode(START) is DayMode.HOURLY

    def test_import_hourly(self, hourly_path):
        """Test hourly rows become hourly observations."""
        stream = WeatherStream(START)
        assert import_hourly(stream, read_hourly_csv(hourly_path)) == 3
        assert stream.is_hourly_observations(START)
        assert stream.ffmc(datetime(2024, 7, 1, 14)) == pytest.approx(89.5)
        assert stream.status(datetime(2024, 7, 1, 10)) == 1
        assert stream.status(datetime(2024, 7, 1, 11)) == 0

    def test_bad_action(self, daily_path):
        """Test unknown invalid actions are rejected."""
        with pytest.raises(ValueError):
            import_daily(WeatherStream(START), read_daily_csv(daily_path), invalid="ignore")


class TestExport:
    """Tests for table export."""

    def test_daily_table(self, daily_path):
        """Test one row per day with codes."""
        stream = WeatherStream(START)
        import_daily(stream, read_daily_csv(daily_path))
        df = daily_table(stream)
        assert len(df) == 3
        assert {"FFMC", "DMC", "DC", "BUI", "ISI", "FWI", "DSR"} <= set(df.columns)
        assert (df["MODE"] == "daily").all()

    def test_hourly_table(self, daily_path):
        """Test one row per hour."""
        stream = WeatherStream(START)
        import_daily(stream, read_daily_csv(daily_path))
        df = hourly_table(stream)
        assert len(df) == 72
        assert df["HOUR"].iloc[25] == 1

    def test_export_files(self, daily_path, tmp_path):
        """Test exports write readable CSV files."""
        stream = WeatherStream(START)
        import_daily(stream, read_daily_csv(daily_path))
        daily = export_daily(stream, tmp_path / "out" / "daily.csv")
        hourly = export_hourly(stream, tmp_path / "out" / "hourly.csv")
        assert len(pd.read_csv(daily)) == 3
        assert len(pd.read_csv(hourly)) == 72
