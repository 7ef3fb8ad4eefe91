"""
Run the tip model for one parameter file or every file in a folder.
"""

import sys
import argparse
from pathlib import Path
from datetime import datetime

from subsetcv.config import load_params, validate_params
from subsetcv.pipeline import TipModelPipeline


def run_single(param_file, validate_only=False, quiet=False):
    """
    Run (or only validate) a single parameter file.

    Returns
    -------
    bool
        True if the run succeeded
    """
    param_path = Path(param_file)
    if not param_path.exists():
        print(f"Error: parameter file not found: {param_path}")
        return False

    if validate_only:
        try:
            validate_params(load_params(param_path))
        except ValueError as e:
            print(f"Parameter validation failed: {e}")
            return False
        print(f"Parameters in {param_path.name} are valid")
        return True

    try:
        TipModelPipeline.run_from_config(param_path, verbose=not quiet)
    except KeyboardInterrupt:
        print("\nRun interrupted by user")
        return False
    except (ValueError, OSError) as e:
        print(f"Error running {param_path.name}: {type(e).__name__}: {e}")
        return False
    return True


def run_multiple(params_dir='params', pattern=None, quiet=False):
    params_path = Path(params_dir)
    if pattern:
        param_files = sorted(params_path.glob(f'*{pattern}*.json'))
    else:
        param_files = sorted(params_path.glob('*.json'))

    if not param_files:
        print(f"No parameter files found in {params_dir} matching pattern: {pattern}")
        return False

    print(f"Found {len(param_files)} parameter files:")
    for i, param_file in enumerate(param_files, 1):
        print(f"{i}. {param_file.name}")

    failed = []
    for param_file in param_files:
        print(f"\n{'='*80}")
        print(f"Running tip model with parameters from: {param_file.name}")
        print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print('='*80)

        if not run_single(param_file, quiet=quiet):
            failed.append(param_file.name)

    if failed:
        print(f"\n{len(failed)} of {len(param_files)} runs failed: {failed}")
    return not failed


def main():
    parser = argparse.ArgumentParser(
        description="Fit the penalized backward subset tip model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_tip_model.py params/tip_model_default.json
    python run_tip_model.py --validate-only params/tip_model_default.json
    python run_tip_model.py --params-dir params --pattern 2019
        """
    )
    parser.add_argument('param_file', nargs='?', default=None,
                        help='Parameter JSON file. If omitted, runs every file in --params-dir')
    parser.add_argument('--validate-only', action='store_true',
                        help='Only validate the parameter file')
    parser.add_argument('--params-dir', type=str, default='params',
                        help='Directory containing parameter files (default: params)')
    parser.add_argument('--pattern', type=str,
                        help='Pattern to match parameter files when running a directory')
    parser.add_argument('--quiet', action='store_true', help='Suppress progress output')

    args = parser.parse_args()

    if args.param_file is not None:
        success = run_single(args.param_file, args.validate_only, args.quiet)
    else:
        if args.validate_only:
            print("Error: --validate-only only works with a specific parameter file")
            sys.exit(1)
        success = run_multiple(args.params_dir, args.pattern, args.quiet)

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
