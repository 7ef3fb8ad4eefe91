"""Trip data preparation and design matrix diagnostics."""

from .preprocessing import (
    standardize_columns,
    load_trips,
    derive_features,
    clean_trips,
    encode_design,
    align_design_columns,
    prepare_dataset,
)
from .matrix_utils import check_matrix_rank, print_matrix_diagnostics, find_constant_columns
