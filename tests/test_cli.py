"""
Tests for the cli module.
"""

import logging

import pandas as pd
import pytest
from click.testing import CliRunner

from wxstream.cli import main

DAILY_CSV = """DATE,MIN_TEMP,MAX_TEMP,MIN_WS,MAX_WS,RH,PRECIP,WD
2024-07-01,5,20,10,20,40,0,270
2024-07-02,6,22,8,18,35,0,250
2024-07-03,8,24,5,25,30,2.5,200
"""

CONFIG_YAML = """
project:
  name: cli_test
input:
  start_date: 2024-07-01
  daily_path: ./daily.csv
output:
  daily_path: ./output/daily_fwi.csv
  hourly_path: ./output/hourly_fwi.csv
  state_path: ./output/stream.json
"""


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def project(tmp_path):
    (tmp_path / "daily.csv").write_text(DAILY_CSV)
    config = tmp_path / "wxstream.yaml"
    config.write_text(CONFIG_YAML)
    return config


class TestInit:
    """Tests for the init command."""

    def test_creates_file(self, tmp_path):
        """Test a template is written."""
        path = tmp_path / "new.yaml"
        result = CliRunner().invoke(main, ["init", "-o", str(path), "-n", "demo"])
        assert result.exit_code == 0
        assert path.exists()
        assert "demo" in path.read_text()

    def test_refuses_overwrite(self, tmp_path):
        """Test an existing file needs --force."""
        path = tmp_path / "new.yaml"
        runner = CliRunner()
        runner.invoke(main, ["init", "-o", str(path)])
        assert runner.invoke(main, ["init", "-o", str(path)]).exit_code == 1
        assert runner.invoke(main, ["init", "-o", str(path), "--force"]).exit_code == 0


class TestValidate:
    """Tests for the validate command."""

    def test_valid(self, project):
        """Test a config with existing inputs passes."""
        result = CliRunner().invoke(main, ["validate", str(project)])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_missing_input(self, project):
        """Test a missing input file fails."""
        (project.parent / "daily.csv").unlink()
        result = CliRunner().invoke(main, ["validate", str(project)])
        assert result.exit_code == 1


class TestRun:
    """Tests for the run and info commands."""

    def test_run_writes_outputs(self, project):
        """Test run imports, calculates and exports."""
        result = CliRunner().invoke(main, ["run", str(project), "-q"])
        assert result.exit_code == 0
        out = project.parent / "output"
        daily = pd.read_csv(out / "daily_fwi.csv")
        assert len(daily) == 3
        assert daily["FWI"].notna().all()
        assert len(pd.read_csv(out / "hourly_fwi.csv")) == 72
        assert (out / "stream.json").exists()

    def test_output_override(self, project, tmp_path):
        """Test -o redirects every output."""
        target = tmp_path / "elsewhere"
        result = CliRunner().invoke(main, ["run", str(project), "-o", str(target)])
        assert result.exit_code == 0
        assert (target / "daily_fwi.csv").exists()
        assert "Days: 3" in result.output

    def test_info(self, project):
        """Test info summarizes a saved stream."""
        runner = CliRunner()
        runner.invoke(main, ["run", str(project), "-q"])
        result = runner.invoke(main, ["info", str(project.parent / "output" / "stream.json")])
        assert result.exit_code == 0
        assert "Days: 3" in result.output
        assert "Dirty from day: none" in result.output

    def test_bad_rows_fail(self, project):
        """Test rejected rows stop the run."""
        csv = project.parent / "daily.csv"
        csv.write_text(DAILY_CSV.replace(",40,0,270", ",140,0,270"))
        result = CliRunner().invoke(main, ["run", str(project), "-q"])
        assert result.exit_code == 1
