from .core.search import SubsetPath, SubsetResult, backward_elimination
from .core.selector import FittedModel, penalized_scores, select_size, select
from .core.cv import CVResult, assign_folds, predict_fold, cross_validate
from .core.estimator import BackwardSubsetRegressor, BackwardSubsetCV, fit_final, score
from .exceptions import (
    SubsetSelectionError,
    RankDeficiencyError,
    DegenerateFitError,
    SchemaMismatchError,
    InvalidFoldCountError,
    DroppedColumnWarning,
    SkippedFoldWarning,
)
from .mse import mspe

__version__ = "0.1.0"

__all__ = [
    'backward_elimination',
    'SubsetPath',
    'SubsetResult',
    'penalized_scores',
    'select_size',
    'select',
    'FittedModel',
    'assign_folds',
    'predict_fold',
    'cross_validate',
    'CVResult',
    'fit_final',
    'score',
    'BackwardSubsetRegressor',
    'BackwardSubsetCV',
    'mspe',
    'SubsetSelectionError',
    'RankDeficiencyError',
    'DegenerateFitError',
    'SchemaMismatchError',
    'InvalidFoldCountError',
    'DroppedColumnWarning',
    'SkippedFoldWarning',
]
