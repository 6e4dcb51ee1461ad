import numpy as np

from . import config
from .decomposition import fitted_values, hat_diagonal
from .optimize import lbfgsb_minimize


def loocv_risk(lam, svd, y):
    """
    Exact leave-one-out CV error of ridge regression at `lam`, without refits.

        R(lam) = mean_i [ ((I - H) y)_i / (1 - H_ii) ]^2

    Only the diagonal of H(lam) is formed. A leverage complement of zero
    (interpolating fit at lam = 0) gives `config.UNSTABLE_RISK`.
    """
    y = np.asarray(y, dtype=float)
    residuals = y - fitted_values(lam, svd, y)
    complement = 1.0 - hat_diagonal(lam, svd)

    with np.errstate(divide="ignore", invalid="ignore"):
        loo_residuals = residuals / complement
        risk = np.mean(loo_residuals ** 2)

    if not np.isfinite(risk) or np.any(np.abs(complement) < config.EPS):
        return config.UNSTABLE_RISK
    return float(risk)


def minimize_loocv(svd, y, minimizer=lbfgsb_minimize, start=config.LOOCV_START,
                   factr=config.LOOCV_FACTR, verbose=False):
    """
    Single bounded search for the LOOCV tuning parameter over [0, inf).

    Returns:
        OptimizeOutcome with the minimising tuning parameter and its risk.
    """
    y = np.asarray(y, dtype=float)
    return minimizer(lambda lam: loocv_risk(lam, svd, y), 0.0, np.inf, start, factr,
                     verbose=verbose)
