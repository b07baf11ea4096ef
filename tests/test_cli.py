"""Tests for the command line tools."""
import json

import numpy as np
import pytest
from typer.testing import CliRunner

from scroll_velocity.cli import app, fling_positions, replay_samples, result_kind
from scroll_velocity.settings import load_settings
from scroll_velocity.tracking.clock import ManualClock
from scroll_velocity.tracking.velocity import INSUFFICIENT_DATA, ZERO, Value, VelocityEstimator

runner = CliRunner()


def write_csv(path, rows, header="t_seconds,position"):
    lines = [header] if header else []
    lines += [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestReplay:
    def test_replay_to_stdout(self, tmp_path):
        csv = write_csv(tmp_path / "s.csv", [(0.0, 0.0), (1.0, 100.0)])
        res = runner.invoke(app, ["replay", str(csv), "--alpha", "1.0"])
        assert res.exit_code == 0, res.output
        kinds = {"insufficient_data", "zero", "value"}
        lines = [line for line in res.output.splitlines() if line.count(",") == 2 and line.split(",")[1] in kinds]
        assert lines == ["0.000000,insufficient_data,0.000000", "1.000000,value,100.000000"]

    def test_replay_extent_columns_and_output_file(self, tmp_path):
        rows = [(0.0, -5.0, 0.0, 100.0), (0.5, 5.0, 0.0, 100.0), (1.5, 15.0, 0.0, 100.0), (2.5, 25.0, 0.0, 100.0)]
        csv = write_csv(tmp_path / "s.csv", rows, header=None)
        out = tmp_path / "v.csv"
        res = runner.invoke(app, ["replay", str(csv), "--output", str(out)])
        assert res.exit_code == 0, res.output
        kinds = [line.split(",")[1] for line in out.read_text(encoding="utf-8").splitlines()]
        assert kinds == ["zero", "insufficient_data", "value", "value"]
        last = float(out.read_text(encoding="utf-8").splitlines()[-1].split(",")[2])
        assert last == pytest.approx(10.0)

    def test_replay_rejects_backward_time(self, tmp_path):
        csv = write_csv(tmp_path / "s.csv", [(1.0, 0.0), (0.5, 10.0)])
        res = runner.invoke(app, ["replay", str(csv)])
        assert res.exit_code != 0

    def test_replay_rejects_bad_alpha(self, tmp_path):
        csv = write_csv(tmp_path / "s.csv", [(0.0, 0.0)])
        res = runner.invoke(app, ["replay", str(csv), "--alpha", "0"])
        assert res.exit_code != 0

    def test_replay_rejects_malformed_settings(self, tmp_path, isolated_settings):
        isolated_settings.write_text("{bad", encoding="utf-8")
        csv = write_csv(tmp_path / "s.csv", [(0.0, 0.0), (1.0, 10.0)])
        res = runner.invoke(app, ["replay", str(csv)])
        assert res.exit_code == 2
        assert not isinstance(res.exception, json.JSONDecodeError)

    @pytest.mark.parametrize("row", [("nan", 5.0), (1.0, "nan"), ("inf", 5.0)])
    def test_replay_rejects_non_finite_samples(self, tmp_path, row):
        csv = write_csv(tmp_path / "s.csv", [(0.0, 0.0), row])
        res = runner.invoke(app, ["replay", str(csv)])
        assert res.exit_code == 2
        assert "finite" in res.output

    def test_replay_samples_helper(self):
        clock = ManualClock()
        est = VelocityEstimator(alpha=1.0, clock=clock)
        samples = np.array([[0.0, 0.0], [1.0, 50.0], [1.0, 80.0], [2.0, 150.0]])
        results = [r for _, r in replay_samples(samples, est, clock, min_extent=0.0, max_extent=120.0)]
        assert results[0] is INSUFFICIENT_DATA
        assert results[1] == Value(pytest.approx(50.0))
        assert results[2] == Value(pytest.approx(50.0))
        assert results[3] is ZERO


class TestSimulate:
    def test_simulate_runs(self):
        res = runner.invoke(app, ["simulate", "--steps", "20"])
        assert res.exit_code == 0, res.output
        assert "Broadcast delivered 22 events" in res.output

    @pytest.mark.parametrize("dt", ["0", "0.0"])
    def test_simulate_rejects_zero_dt(self, dt):
        res = runner.invoke(app, ["simulate", "--steps", "5", "--dt", dt])
        assert res.exit_code == 2
        assert "nan" not in res.output

    def test_simulate_rejects_zero_alpha(self):
        res = runner.invoke(app, ["simulate", "--alpha", "0"])
        assert res.exit_code != 0

    def test_fling_overshoots_extent(self):
        positions = fling_positions(60, 1 / 60, 1000.0)
        assert positions[0] == pytest.approx(0.0)
        assert positions.max() > 1000.0
        assert positions[-1] < positions.max()


class TestCalibrate:
    ROWS = [(0.0, 0.0), (1.0, 100.0), (2.0, 300.0), (3.0, 600.0), (4.0, 1000.0), (5.0, 900.0), (6.0, 700.0)]

    def test_calibrate_saves_thresholds(self, tmp_path, isolated_settings):
        csv = write_csv(tmp_path / "s.csv", self.ROWS)
        res = runner.invoke(app, ["calibrate", str(csv), "--alpha", "1.0"])
        assert res.exit_code == 0, res.output
        assert "toggle 2 times" in res.output

        saved = load_settings(isolated_settings)
        assert saved["hide_velocity"] == pytest.approx(340.0)
        assert saved["show_velocity"] == pytest.approx(160.0)
        assert saved["alpha"] == pytest.approx(1.0)

    def test_calibrate_without_saving(self, tmp_path, isolated_settings):
        csv = write_csv(tmp_path / "s.csv", self.ROWS)
        res = runner.invoke(app, ["calibrate", str(csv), "--alpha", "1.0", "--no-save"])
        assert res.exit_code == 0, res.output
        assert "hide_velocity=340.0" in res.output
        assert not isolated_settings.exists()

    def test_calibrate_needs_estimates(self, tmp_path, isolated_settings):
        csv = write_csv(tmp_path / "s.csv", [(0.0, 0.0)])
        res = runner.invoke(app, ["calibrate", str(csv)])
        assert res.exit_code == 2
        assert not isolated_settings.exists()


def test_result_kind_labels():
    assert result_kind(INSUFFICIENT_DATA) == "insufficient_data"
    assert result_kind(ZERO) == "zero"
    assert result_kind(Value(1.0)) == "value"
