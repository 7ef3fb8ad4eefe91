"""
Parameter validation utilities.

This module validates model parameters to catch configuration
errors early and provide helpful error messages.
"""

from typing import Dict, Any
import warnings

from ..data.preprocessing import CATEGORY_LEVELS, DEFAULT_CLEANING


def validate_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate model parameters and return validated/processed params.

    Parameters
    ----------
    params : dict
        Raw parameters loaded from JSON

    Returns
    -------
    dict
        Validated parameters, with optional sections filled with defaults

    Raises
    ------
    ValueError
        If parameters are invalid or inconsistent
    """
    for section in ('data', 'model', 'cv', 'output'):
        if section not in params:
            raise ValueError(f"Missing required parameter section: {section}")

    validated_params = params.copy()
    validated_params.setdefault('execution', {})

    _validate_data_params(validated_params['data'])
    _validate_model_params(validated_params['model'])
    _validate_cv_params(validated_params['cv'])
    _validate_execution_params(validated_params['execution'])
    _validate_output_params(validated_params['output'])

    _validate_parameter_combinations(validated_params)

    return validated_params


def _validate_data_params(data_params: Dict[str, Any]) -> None:
    """Validate data preparation parameters."""
    required_keys = ['train_path', 'holdout_path']
    for key in required_keys:
        if key not in data_params:
            raise ValueError(f"Missing required data parameter: {key}")

    if data_params.get('target', 'tip_amount') != 'tip_amount':
        raise ValueError("target must be 'tip_amount'")

    for key in ('numeric_features', 'categorical_features'):
        if key in data_params and not isinstance(data_params[key], list):
            raise ValueError(f"{key} must be a list of column names")

    for col in data_params.get('categorical_features', []):
        if col not in CATEGORY_LEVELS:
            raise ValueError(
                f"categorical feature '{col}' must be one of {sorted(CATEGORY_LEVELS)}"
            )

    cleaning = data_params.get('cleaning', {})
    for key, value in cleaning.items():
        if key not in DEFAULT_CLEANING:
            raise ValueError(f"Unknown cleaning rule: {key}")
        if value <= 0:
            raise ValueError(f"cleaning rule {key} must be positive")


def _validate_model_params(model_params: Dict[str, Any]) -> None:
    """Validate model parameters."""
    required_keys = ['max_size', 'penalty_grid']
    for key in required_keys:
        if key not in model_params:
            raise ValueError(f"Missing required model parameter: {key}")

    if not isinstance(model_params['max_size'], int) or model_params['max_size'] <= 0:
        raise ValueError("max_size must be a positive integer")

    grid = model_params['penalty_grid']
    valid_grid_types = ['list', 'range', 'geometric']
    if grid.get('type') not in valid_grid_types:
        raise ValueError(f"penalty_grid type must be one of {valid_grid_types}")
    if grid['type'] == 'list':
        if not grid.get('values'):
            raise ValueError("penalty_grid of type 'list' needs non-empty values")
        if any(v < 0 for v in grid['values']):
            raise ValueError("penalties must be non-negative")
    else:
        for key in ('min', 'max', 'num_points'):
            if key not in grid.get('params', {}):
                raise ValueError(f"{key} required in penalty_grid params")
        if grid['params']['min'] < 0 or grid['params']['max'] < grid['params']['min']:
            raise ValueError("penalty_grid needs 0 <= min <= max")
        if grid['params']['num_points'] <= 0:
            raise ValueError("penalty_grid num_points must be positive")

    if 'rss_floor' in model_params and not model_params['rss_floor'] > 0:
        raise ValueError("rss_floor must be positive")


def _validate_cv_params(cv_params: Dict[str, Any]) -> None:
    """Validate cross-validation parameters."""
    if 'n_folds' not in cv_params:
        raise ValueError("Missing required cv parameter: n_folds")

    if not isinstance(cv_params['n_folds'], int) or cv_params['n_folds'] < 2:
        raise ValueError("n_folds must be an integer of at least 2")

    if 'random_state' not in cv_params:
        warnings.warn("cv.random_state not set; the fold assignment will not be reproducible")
    elif cv_params['random_state'] is not None and not isinstance(cv_params['random_state'], int):
        raise ValueError("random_state must be an integer")

    if cv_params.get('on_fold_error', 'raise') not in ('raise', 'skip'):
        raise ValueError("on_fold_error must be 'raise' or 'skip'")


def _validate_execution_params(execution_params: Dict[str, Any]) -> None:
    """Validate execution parameters."""
    n_workers = execution_params.get('n_workers', 1)
    if n_workers is not None and (not isinstance(n_workers, int) or (n_workers < 1 and n_workers != -1)):
        raise ValueError("n_workers must be a positive integer, -1 or null")


def _validate_output_params(output_params: Dict[str, Any]) -> None:
    """Validate output parameters."""
    if 'save_path' not in output_params:
        raise ValueError("Missing required output parameter: save_path")


def _validate_parameter_combinations(params: Dict[str, Any]) -> None:
    """Validate cross-parameter constraints."""
    categorical = params['data'].get('categorical_features', [])
    numeric = params['data'].get('numeric_features', [])

    overlap = set(categorical) & set(numeric)
    if overlap:
        raise ValueError(f"Features listed as both numeric and categorical: {sorted(overlap)}")

    if 'hour_of_day' in categorical and 'time_of_day' in categorical:
        raise ValueError(
            "hour_of_day and time_of_day cannot both be categorical; "
            "their indicators are linearly dependent"
        )

    grid = params['model']['penalty_grid']
    if grid['type'] == 'list' and len(set(grid['values'])) < len(grid['values']):
        warnings.warn("penalty_grid has duplicate values; each is evaluated separately")
