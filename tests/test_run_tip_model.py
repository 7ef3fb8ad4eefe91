"""Command line runner."""

import importlib.util
import json
import sys
from pathlib import Path

import pytest


SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "run_tip_model.py"


@pytest.fixture
def runner():
    module_spec = importlib.util.spec_from_file_location("run_tip_model", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def missing_data_params(tmp_path):
    params = json.loads((SCRIPT.parent.parent / "params" / "tip_model_default.json").read_text())
    params["data"]["train_path"] = "nowhere/train.csv"
    params["data"]["holdout_path"] = "nowhere/holdout.csv"
    params["output"]["save_path"] = "results"
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(params))
    return path


def test_failed_run_reports_one_line(runner, missing_data_params, capsys):
    assert runner.run_single(missing_data_params, quiet=True) is False

    out = capsys.readouterr().out
    assert "Error running broken.json" in out
    assert "Traceback" not in out


def test_failed_run_exits_with_status_one(runner, missing_data_params, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["run_tip_model.py", str(missing_data_params), "--quiet"])
    with pytest.raises(SystemExit) as excinfo:
        runner.main()
    assert excinfo.value.code == 1


def test_validate_only(runner, capsys):
    default = SCRIPT.parent.parent / "params" / "tip_model_default.json"
    assert runner.run_single(default, validate_only=True) is True
    assert "are valid" in capsys.readouterr().out


def test_batch_collects_failures(runner, missing_data_params, capsys):
    assert runner.run_multiple(missing_data_params.parent, quiet=True) is False
    assert "1 of 1 runs failed" in capsys.readouterr().out
