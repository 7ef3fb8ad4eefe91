from .search import SubsetPath, SubsetResult, backward_elimination
from .selector import FittedModel, penalized_scores, select_size, select, fit_subset
from .cv import CVResult, assign_folds, predict_fold, cross_validate
from .estimator import BackwardSubsetRegressor, BackwardSubsetCV, fit_final, score
