"""
Tip model pipeline.

This module provides the TipModelPipeline class that runs the complete
workflow for one parameter file: prepare the training and holdout periods,
choose the penalty by cross-validation, refit on the full training period
and score the holdout period.
"""

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..config.parameter_loader import load_params, get_penalty_grid, resolve_path
from ..config.parameter_validator import validate_params
from ..core.cv import cross_validate
from ..core.estimator import fit_final, score
from ..core.selector import DEFAULT_RSS_FLOOR
from ..data.matrix_utils import check_matrix_rank, print_matrix_diagnostics
from ..data.preprocessing import align_design_columns, prepare_dataset


Source = Union[str, Path, pd.DataFrame]


class TipModelPipeline:
    """
    Runs penalized backward subset selection on taxi trip data.

    Parameters
    ----------
    params : dict
        Parameters with data, model, cv, execution and output sections.
    param_path : str or Path, optional
        Location of the parameter file; relative data paths are read
        against its folder.
    verbose : bool
        Print progress and a summary.
    """

    def __init__(self, params: Dict[str, Any],
                 param_path: Optional[Union[str, Path]] = None,
                 verbose: bool = True):
        self.params = validate_params(params)
        self.param_path = Path(param_path) if param_path is not None else None
        self.verbose = verbose
        self.start_time = None

    @classmethod
    def from_file(cls, param_path: Union[str, Path], verbose: bool = True) -> "TipModelPipeline":
        return cls(load_params(param_path), param_path=param_path, verbose=verbose)

    @classmethod
    def run_from_config(cls, param_path: Union[str, Path], verbose: bool = True) -> Dict[str, Any]:
        """
        Convenience method to run the pipeline from a parameter file.

        Parameters
        ----------
        param_path : str
            Path to the parameters JSON file

        Returns
        -------
        dict
            See run()
        """
        return cls.from_file(param_path, verbose=verbose).run()

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)

    def _source(self, key: str, given: Optional[Source]) -> Source:
        if given is not None:
            return given
        path = self.params['data'][key]
        if self.param_path is not None:
            return resolve_path(path, self.param_path)
        return Path(path)

    def prepare(self, train: Optional[Source] = None,
                holdout: Optional[Source] = None) -> Tuple[pd.DataFrame, pd.Series, pd.DataFrame, pd.Series]:
        """
        Prepare both periods with the same cleaning rules and column schema.

        Parameters
        ----------
        train, holdout : path or DataFrame, optional
            Override the paths in the data section.

        Returns
        -------
        tuple
            (X_train, y_train, X_holdout, y_holdout)
        """
        data_params = self.params['data']

        self._log("   Training period:")
        X_train, y_train = prepare_dataset(self._source('train_path', train), data_params,
                                           verbose=self.verbose)
        self._log("   Holdout period:")
        X_holdout, y_holdout = prepare_dataset(self._source('holdout_path', holdout), data_params,
                                               verbose=self.verbose)

        X_holdout = align_design_columns(X_holdout, list(X_train.columns))
        return X_train, y_train, X_holdout, y_holdout

    def run(self, train: Optional[Source] = None,
            holdout: Optional[Source] = None) -> Dict[str, Any]:
        """
        Run the full workflow.

        Returns
        -------
        dict
            best_penalty, cv_mse (Series), coefficients (Series), mspe, rmspe,
            selected_features, n_train, n_holdout, skipped_folds, runtime_sec
        """
        model_params = self.params['model']
        cv_params = self.params['cv']
        execution_params = self.params['execution']

        self._log("Starting Tip Model Pipeline")
        self._log("=" * 60)
        self.start_time = time.time()

        self._log("\n1. Preparing data...")
        X_train, y_train, X_holdout, y_holdout = self.prepare(train, holdout)

        self._log("\n2. Checking training design...")
        if self.verbose:
            rank_info = print_matrix_diagnostics(X_train.to_numpy(), "training design")
        else:
            rank_info = check_matrix_rank(X_train.to_numpy())

        penalties = get_penalty_grid(model_params['penalty_grid'])
        rss_floor = model_params.get('rss_floor', DEFAULT_RSS_FLOOR)

        self._log(f"\n3. Cross-validating {len(penalties)} penalties "
                  f"over {cv_params['n_folds']} folds...")
        cv_result = cross_validate(
            X_train, y_train,
            n_folds=cv_params['n_folds'],
            penalties=penalties,
            max_size=model_params['max_size'],
            random_state=cv_params.get('random_state'),
            rss_floor=rss_floor,
            n_jobs=execution_params.get('n_workers', 1),
            on_fold_error=cv_params.get('on_fold_error', 'raise'),
            verbose=self.verbose,
        )

        self._log(f"\n4. Fitting final model with penalty {cv_result.best_penalty:g}...")
        model = fit_final(X_train, y_train, cv_result.best_penalty,
                          model_params['max_size'], rss_floor=rss_floor)

        self._log("\n5. Scoring holdout period...")
        holdout_mspe = score(model, X_holdout, y_holdout)

        results = {
            'best_penalty': cv_result.best_penalty,
            'cv_mse': cv_result.cv_mse,
            'coefficients': model.coefficients(),
            'selected_features': model.selected_features,
            'mspe': holdout_mspe,
            'rmspe': float(np.sqrt(holdout_mspe)),
            'n_train': int(len(y_train)),
            'n_holdout': int(len(y_holdout)),
            'skipped_folds': cv_result.skipped_folds,
            'rank_check': rank_info,
            'runtime_sec': time.time() - self.start_time,
        }

        save_path = self.params['output'].get('save_path')
        if save_path is not None:
            self._log("\n6. Saving results...")
            self._save_results(results, save_path)

        self._print_summary(results)
        return results

    def _save_results(self, results: Dict[str, Any], save_path: Union[str, Path]) -> Path:
        out_dir = Path(save_path)
        if self.param_path is not None and not out_dir.is_absolute():
            out_dir = resolve_path(out_dir, self.param_path)
        out_dir.mkdir(parents=True, exist_ok=True)

        results['cv_mse'].to_csv(out_dir / 'cv_mse.csv', header=True)
        results['coefficients'].to_csv(out_dir / 'coefficients.csv', header=True,
                                       index_label='term')

        summary = {
            'timestamp': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            'best_penalty': results['best_penalty'],
            'mspe': results['mspe'],
            'rmspe': results['rmspe'],
            'selected_features': results['selected_features'],
            'n_train': results['n_train'],
            'n_holdout': results['n_holdout'],
            'skipped_folds': [int(f) for f in results['skipped_folds']],
            'rank_check': results['rank_check'],
            'params': self.params,
        }
        with open(out_dir / 'summary.json', 'w') as f:
            json.dump(summary, f, indent=2, default=str)

        self._log(f"   Results saved to {out_dir}")
        return out_dir

    def _print_summary(self, results: Dict[str, Any]) -> None:
        if not self.verbose:
            return
        print("\n" + "=" * 60)
        print("TIP MODEL COMPLETED")
        print("=" * 60)
        print(f"Total runtime: {results['runtime_sec']:.1f} seconds")
        print(f"Training rows: {results['n_train']:,}  Holdout rows: {results['n_holdout']:,}")
        print("\nCV mean squared error by penalty:")
        print("-" * 30)
        for penalty, mse in results['cv_mse'].items():
            marker = "  <- best" if penalty == results['best_penalty'] else ""
            print(f"  {penalty:>10g}: {mse:.4f}{marker}")
        print(f"\nSelected {len(results['selected_features'])} columns:")
        print(results['coefficients'].to_string())
        print(f"\nHoldout MSPE: {results['mspe']:.4f}  (RMSPE {results['rmspe']:.4f} in target units)")
