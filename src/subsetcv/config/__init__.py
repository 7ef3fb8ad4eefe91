"""Configuration management for tip model runs."""

from .parameter_loader import load_params, get_penalty_grid, resolve_path
from .parameter_validator import validate_params
