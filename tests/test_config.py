"""Parameter file loading and validation."""

import copy
import json
import warnings
from pathlib import Path

import numpy as np
import pytest

from subsetcv.config import load_params, get_penalty_grid, resolve_path, validate_params


DEFAULT_PARAMS = Path(__file__).resolve().parent.parent / "params" / "tip_model_default.json"


@pytest.fixture
def params():
    return load_params(DEFAULT_PARAMS)


def test_shipped_parameter_file_is_valid(params):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        validated = validate_params(params)

    assert validated["model"]["max_size"] == 20
    assert get_penalty_grid(validated["model"]["penalty_grid"]) == [0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0]


def test_load_params_reads_json(tmp_path):
    path = tmp_path / "p.json"
    path.write_text(json.dumps({"model": {"max_size": 3}}))
    assert load_params(path) == {"model": {"max_size": 3}}


def test_execution_section_is_optional(params):
    del params["execution"]
    assert validate_params(params)["execution"] == {}


@pytest.mark.parametrize("section", ["data", "model", "cv", "output"])
def test_missing_section(params, section):
    del params[section]
    with pytest.raises(ValueError, match=section):
        validate_params(params)


@pytest.mark.parametrize("max_size", [0, -3, 2.5, "10"])
def test_bad_max_size(params, max_size):
    params["model"]["max_size"] = max_size
    with pytest.raises(ValueError):
        validate_params(params)


@pytest.mark.parametrize("grid", [
    {"type": "log"},
    {"type": "list", "values": []},
    {"type": "list", "values": [1.0, -2.0]},
    {"type": "range", "params": {"min": 0, "max": 10}},
    {"type": "range", "params": {"min": 5, "max": 1, "num_points": 3}},
])
def test_bad_penalty_grid(params, grid):
    params["model"]["penalty_grid"] = grid
    with pytest.raises(ValueError):
        validate_params(params)


def test_single_fold_rejected(params):
    params["cv"]["n_folds"] = 1
    with pytest.raises(ValueError):
        validate_params(params)


def test_unknown_fold_error_policy(params):
    params["cv"]["on_fold_error"] = "ignore"
    with pytest.raises(ValueError):
        validate_params(params)


def test_hour_and_time_of_day_both_categorical(params):
    params["data"]["numeric_features"].remove("hour_of_day")
    params["data"]["categorical_features"].append("hour_of_day")
    with pytest.raises(ValueError, match="linearly dependent"):
        validate_params(params)


def test_feature_in_both_lists(params):
    params["data"]["numeric_features"].append("payment_type")
    with pytest.raises(ValueError):
        validate_params(params)


def test_unknown_cleaning_rule(params):
    params["data"]["cleaning"]["max_tolls"] = 20.0
    with pytest.raises(ValueError):
        validate_params(params)


def test_missing_random_state_warns(params):
    del params["cv"]["random_state"]
    with pytest.warns(UserWarning, match="random_state"):
        validate_params(params)


def test_duplicate_penalties_warn(params):
    params["model"]["penalty_grid"]["values"] = [1, 2, 2]
    with pytest.warns(UserWarning, match="duplicate"):
        validate_params(params)


def test_validation_does_not_add_sections_to_input(params):
    original = copy.deepcopy(params)
    del original["execution"]
    trimmed = copy.deepcopy(original)
    validate_params(trimmed)
    assert "execution" not in trimmed


def test_range_and_geometric_grids():
    linear = get_penalty_grid({"type": "range", "params": {"min": 0, "max": 10, "num_points": 6}})
    assert linear == [0.0, 2.0, 4.0, 6.0, 8.0, 10.0]

    geometric = get_penalty_grid({"type": "geometric", "params": {"min": 0.1, "max": 10, "num_points": 3}})
    assert np.allclose(geometric, [0.1, 1.0, 10.0])

    with pytest.raises(ValueError):
        get_penalty_grid({"type": "geometric", "params": {"min": 0, "max": 10, "num_points": 3}})


def test_relative_paths_resolve_against_parameter_file(tmp_path):
    param_path = tmp_path / "params" / "run.json"
    assert resolve_path("../data/train.csv", param_path) == tmp_path / "params" / ".." / "data" / "train.csv"
    assert resolve_path(tmp_path / "x.csv", param_path) == tmp_path / "x.csv"
