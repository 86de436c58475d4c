"""
Batch fitting script for chifit.

Usage:
    python chifit_batch.py "data/*.txt" --profile polynomial --ncoef 3
    python chifit_batch.py "data/*.txt" --profile gaussian --components 2 \
        --centers 10,20 --widths 1,1 --amplitudes 1,0.8 --plot

Notes:
- Input files hold columns x, y and optionally sigma (unit weights if absent).
- Profiles:
    polynomial: linear fit with --ncoef coefficients (c0 + c1 x + ...)
    gaussian, lorentzian: Levenberg-Marquardt fit of --components peaks
- Peak guesses: per-component lists for centers, widths (standard deviation)
  and amplitudes; missing values come from --init even|gmm.
- --fix takes comma-separated coefficient indices to hold fixed.
- Outputs: for each file, writes <base>_results.txt and <base>_data.txt
  alongside the input file (and <base>_fit.png with --plot).
- A log of the run is written to --log_dir (default logs/).
"""

import argparse
import glob
import logging
import os
import sys

import numpy as np

from chifit.data_import import load_data_file
from chifit.errors import FitError
from chifit.fitting import CurveFitter
from chifit.fitting.initializers import components_to_coefficients, init_evenly_spaced, init_with_gmm
from utils.logger import log_error, log_info, log_warning, setup_logger


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Batch chi-squared fitting")
    p.add_argument("pattern", help="Glob pattern for data files, e.g. 'data/*.txt'")

    # Model
    p.add_argument("--profile", default="polynomial", choices=["polynomial", "gaussian", "lorentzian"],
                   help="Model profile")
    p.add_argument("--ncoef", type=int, default=2, help="Number of polynomial coefficients")
    p.add_argument("--fix", type=str, default=None, help="Comma-separated indices of coefficients to hold fixed")

    # Peak components
    p.add_argument("--components", type=int, default=1, help="Number of peak components")
    p.add_argument("--centers", type=str, default=None, help="Comma-separated centers")
    p.add_argument("--widths", type=str, default=None, help="Comma-separated widths (standard deviations)")
    p.add_argument("--amplitudes", type=str, default=None, help="Comma-separated amplitudes")
    p.add_argument("--init", default="even", choices=["even", "gmm"], help="Initial guess method for missing values")

    # Iteration
    p.add_argument("--max_iter", type=int, default=200, help="Maximum Levenberg-Marquardt steps")
    p.add_argument("--tol", type=float, default=1e-3, help="Negligible chi-squared improvement")

    # Output
    p.add_argument("--plot", action="store_true", help="Save a PNG plot of each fit")
    p.add_argument("--log_level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level")
    p.add_argument("--log_dir", default="logs", help="Directory for the log file (empty for none)")

    return p.parse_args(argv)


def parse_list(arg, n):
    if arg is None:
        return [None] * n
    parts = [float(x) for x in arg.split(",")]
    if len(parts) != n:
        raise ValueError(f"Expected {n} values, got {len(parts)}")
    return parts


def parse_fixed(arg, ncoef):
    free = np.ones(ncoef, dtype=bool)
    if not arg:
        return free
    for item in arg.split(","):
        index = int(item)
        if not 0 <= index < ncoef:
            raise ValueError(f"Fixed coefficient index {index} out of range 0..{ncoef - 1}")
        free[index] = False
    return free


def initial_peak_coefficients(x, y, args):
    n = args.components
    centers = parse_list(args.centers, n)
    widths = parse_list(args.widths, n)
    amplitudes = parse_list(args.amplitudes, n)

    guesses = None
    if args.init == "gmm":
        guesses = init_with_gmm(x, y, n)
        if guesses is None:
            log_warning("GMM initialization failed; using evenly spaced components")
    if guesses is None:
        guesses = init_evenly_spaced(x, n, y)

    components = []
    for i in range(n):
        guess = guesses[i]
        components.append({
            'center': centers[i] if centers[i] is not None else guess['center'],
            'width': widths[i] if widths[i] is not None else guess['width'],
            'amplitude': amplitudes[i] if amplitudes[i] is not None else guess['amplitude'],
        })
    return components_to_coefficients(components, args.profile)


def export_results(base_path, fitter):
    results_file = f"{base_path}_results.txt"
    data_file = f"{base_path}_data.txt"
    result = fitter.result

    with open(results_file, "w", encoding="utf-8") as f:
        f.write(fitter.get_fit_report())
        f.write("\nStatistics:\n")
        for k, v in fitter.get_statistics().items():
            if k in ('correlation', 'errors'):
                continue
            f.write(f"{k}: {v}\n")

    header = "X\tY\tSigma\tY_Fit\tResidual"
    with open(data_file, "w", encoding="utf-8") as f:
        f.write(header + "\n")
        for xi, yi, si, fi, ri in zip(fitter.x, fitter.y, fitter.sigma, result.best_fit, result.residual):
            f.write(f"{xi:.6e}\t{yi:.6e}\t{si:.6e}\t{fi:.6e}\t{ri:.6e}\n")

    return results_file, data_file


def fit_file(fname, args):
    x, y, sigma = load_data_file(fname)
    fitter = CurveFitter(x, y, sigma)

    if args.profile == "polynomial":
        free = parse_fixed(args.fix, args.ncoef)
        fitter.fit_linear("polynomial", np.zeros(args.ncoef), free)
    else:
        coef = initial_peak_coefficients(fitter.x, fitter.y, args)
        free = parse_fixed(args.fix, coef.size)
        fitter.fit_nonlinear(args.profile, coef, free, max_iter=args.max_iter, tol=args.tol)

    base, _ = os.path.splitext(fname)
    export_results(base, fitter)

    if args.plot:
        from chifit.plotting import plot_fit
        plot_fit(fitter.x, fitter.y, fitter.sigma, fitter.result.best_fit, f"{base}_fit.png",
                 title=os.path.basename(fname))

    return fitter


def main(argv=None):
    args = parse_args(argv)
    setup_logger(log_dir=args.log_dir, log_level=getattr(logging, args.log_level))

    files = sorted(glob.glob(args.pattern))
    if not files:
        print(f"No files matched pattern: {args.pattern}")
        sys.exit(1)

    n_failed = 0
    for fname in files:
        try:
            fit_file(fname, args)
            log_info(f"Processed {fname}")
            print(f"Processed {fname}")
        except (FitError, ValueError, ArithmeticError, OSError) as e:
            n_failed += 1
            log_error(f"Error processing {fname}", e)
            print(f"Error processing {fname}: {e}", file=sys.stderr)

    return n_failed


if __name__ == "__main__":
    sys.exit(1 if main() else 0)
