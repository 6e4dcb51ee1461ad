# ============================================================================
# optimize.py
# ============================================================================
# Bounded univariate minimisation of a risk function of the tuning parameter.
# `lbfgsb_minimize` is the strategy shared by the LOOCV search and the
# multi-start focused search; any callable with the same signature can be
# injected in its place.
# ============================================================================
from typing import NamedTuple

import numpy as np
from joblib import Parallel, delayed
from scipy.optimize import minimize

from . import config


class OptimizeOutcome(NamedTuple):
    """Result of one bounded search."""
    tuning: float
    value: float
    start: float
    converged: bool


def _finite_objective(objective):
    def wrapped(x):
        value = float(objective(float(x[0])))
        if not np.isfinite(value):
            return config.UNSTABLE_RISK
        return value
    return wrapped


def lbfgsb_minimize(objective, lower, upper, start, factr, verbose=False):
    """
    Minimise `objective(lam)` over [lower, upper] with L-BFGS-B.

    Args:
        objective : callable float -> float
        lower, upper : float
            Bounds, `upper` may be np.inf.
        start : float
            Starting value, clipped into the bounds.
        factr : float
            Relative reduction tolerance in multiples of machine epsilon.
        verbose : bool
            Print a warning line when the search stops without converging.

    Returns:
        OptimizeOutcome. A search that does not converge still returns its
        best iterate.
    """
    start = float(np.clip(start, lower, upper))
    bounds = [(lower, None if np.isinf(upper) else upper)]

    res = minimize(
        _finite_objective(objective), np.array([start]), method="L-BFGS-B",
        bounds=bounds,
        options={
            "ftol": factr * np.finfo(float).eps,
            "gtol": 0.0,
            "eps": config.FD_STEP,
            "maxiter": config.MAX_ITER,
        },
    )

    if not res.success and verbose:
        print(f"Warning: Optimization from start {start:g} did not converge. Message: {res.message}")

    return OptimizeOutcome(
        tuning=float(res.x[0]),
        value=float(res.fun),
        start=start,
        converged=bool(res.success),
    )


def best_outcome(outcomes):
    """Smallest value wins; exact ties go to the smallest start."""
    return min(outcomes, key=lambda o: (o.value, o.start))


def multi_start_minimize(objective, starts=None, minimizer=lbfgsb_minimize,
                         factr=config.FOCUSED_FACTR, n_jobs=None, verbose=False):
    """
    Run a bounded search over [0, inf) from every start and keep the best.

    Args:
        objective : callable float -> float
        starts : array-like or None
            Start ladder, defaults to `config.START_LADDER`.
        minimizer : callable
            Strategy with the signature of `lbfgsb_minimize`.
        factr : float
            Tolerance passed to the minimizer.
        n_jobs : int or None
            Run the starts through joblib when given. The reduction does not
            depend on the order in which starts finish.

    Returns:
        best : OptimizeOutcome
        outcomes : list[OptimizeOutcome], in the order of `starts`
    """
    if starts is None:
        starts = config.START_LADDER
    starts = [float(s) for s in np.atleast_1d(starts)]
    if not starts:
        raise ValueError("At least one start value is required")

    if n_jobs is None:
        outcomes = [
            minimizer(objective, 0.0, np.inf, s, factr, verbose=verbose)
            for s in starts
        ]
    else:
        outcomes = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(minimizer)(objective, 0.0, np.inf, s, factr, verbose=verbose)
            for s in starts
        )

    return best_outcome(outcomes), list(outcomes)
