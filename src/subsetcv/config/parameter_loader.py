"""
Parameter loading and processing utilities.

This module handles loading model parameters from JSON files and turning
the penalty grid specification into the list of penalties to compare.
"""

import json
import numpy as np
from pathlib import Path
from typing import Dict, List, Any, Union


def load_params(param_path: Union[str, Path]) -> Dict[str, Any]:
    """Load parameters from JSON file."""
    with open(param_path, 'r') as f:
        params = json.load(f)
    return params


def get_penalty_grid(grid_params: Dict[str, Any]) -> List[float]:
    """
    Get the penalty grid based on parameters.

    Parameters
    ----------
    grid_params : dict
        Dictionary containing either:
        - type: "list" and values with the penalties
        - type: "range" and params with min, max, num_points (evenly spaced)
        - type: "geometric" and params with min, max, num_points
          (evenly spaced on a log scale, min must be positive)

    Returns
    -------
    list
        Penalties in the order they will be reported
    """
    if grid_params['type'] == 'list':
        return [float(x) for x in grid_params['values']]
    elif grid_params['type'] == 'range':
        return [float(x) for x in np.linspace(
            grid_params['params']['min'],
            grid_params['params']['max'],
            grid_params['params']['num_points']
        )]
    elif grid_params['type'] == 'geometric':
        if grid_params['params']['min'] <= 0:
            raise ValueError("geometric penalty grid needs a positive min")
        return [float(x) for x in np.geomspace(
            grid_params['params']['min'],
            grid_params['params']['max'],
            grid_params['params']['num_points']
        )]
    else:
        raise ValueError(f"Unknown penalty_grid type: {grid_params['type']}")


def resolve_path(path: Union[str, Path], param_path: Union[str, Path]) -> Path:
    """Interpret a relative data path against the parameter file's folder."""
    path = Path(path)
    if path.is_absolute():
        return path
    return Path(param_path).parent / path
