"""Test the command-line interface."""

from typer.testing import CliRunner

from peakshave_engine import __version__
from peakshave_engine.cli import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_schedule_report(tmp_path):
    """Test creating, scheduling and reporting on a demo bundle."""
    bundle = str(tmp_path / "demo")

    result = runner.invoke(app, ["init-bundle", bundle, "--days", "2"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["validate", bundle])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["schedule", bundle])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["report", bundle])
    assert result.exit_code == 0, result.output
    assert "SCHEDULE RESULTS" in result.output


def test_report_without_results(tmp_path):
    result = runner.invoke(app, ["report", str(tmp_path)])
    assert result.exit_code == 1
