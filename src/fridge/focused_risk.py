# ============================================================================
# focused_risk.py
# ============================================================================
# Asymptotic mean squared error of the ridge prediction at a focus point x0,
# as a function of the tuning parameter:
#
#     risk(lam) = bias(lam)^2 + sigma2 * x0^T V diag(d^2 / (d^2 + lam)^2) V^T x0
#
# The bias is estimated by plugging in either the least-squares coefficients
# (OLS) or the ridge coefficients at the LOOCV tuning parameter (RLOOCV).
# ============================================================================
from functools import partial

import numpy as np

from .variance import PlugIn


def _projections(svd, y, x0):
    return svd.project_focus(x0), svd.project_response(y)


def _variance_term(lam, d, w, sigma2):
    d2 = d ** 2
    with np.errstate(divide="ignore", invalid="ignore"):
        factors = np.where(d2 + lam > 0, d2 / (d2 + lam) ** 2, 0.0)
    return sigma2 * float(np.sum(w ** 2 * factors))


def _ols_bias(lam, d, w, z):
    d2 = d ** 2
    with np.errstate(divide="ignore", invalid="ignore"):
        factors = np.where(d > 0, 1.0 / ((d2 + lam) * d), 0.0)
    return lam * float(np.sum(w * factors * z))


def _ridge_bias(lam, d, w, z, loocv_tuning):
    d2 = d ** 2
    with np.errstate(divide="ignore", invalid="ignore"):
        factors = np.where(d > 0, d / ((d2 + lam) * (d2 + loocv_tuning)), 0.0)
    return lam * float(np.sum(w * factors * z))


def risk_components(lam, svd, y, x0, sigma2, plug_in, loocv_tuning=None):
    """
    Squared bias and variance of the ridge prediction at x0.

    Args:
        lam : float
            Candidate tuning parameter.
        svd : SVDTriple
        y : ndarray (n,)
        x0 : ndarray (p,)
            Focus covariate vector.
        sigma2 : float
            Plug-in residual variance.
        plug_in : PlugIn or str
        loocv_tuning : float or None
            Fixed LOOCV tuning parameter, required for the RLOOCV variant.

    Returns:
        (bias_sq, variance) : tuple[float, float]
    """
    plug_in = PlugIn.coerce(plug_in)
    lam = float(lam)
    w, z = _projections(svd, y, x0)
    d = svd.d

    if plug_in is PlugIn.OLS:
        bias = _ols_bias(lam, d, w, z)
    else:
        if loocv_tuning is None:
            raise ValueError("RLOOCV focused risk needs the LOOCV tuning parameter")
        bias = _ridge_bias(lam, d, w, z, loocv_tuning)

    return bias ** 2, _variance_term(lam, d, w, sigma2)


def ols_plugin_risk(lam, svd, y, x0, sigma2):
    """Focused risk with the least-squares plug-in (n > p only)."""
    bias_sq, variance = risk_components(lam, svd, y, x0, sigma2, PlugIn.OLS)
    return bias_sq + variance


def ridge_plugin_risk(lam, svd, y, x0, sigma2, loocv_tuning):
    """Focused risk with the ridge plug-in at the LOOCV tuning parameter."""
    bias_sq, variance = risk_components(lam, svd, y, x0, sigma2, PlugIn.RLOOCV,
                                        loocv_tuning=loocv_tuning)
    return bias_sq + variance


def make_focused_risk(plug_in, svd, y, x0, sigma2, loocv_tuning=None):
    """Bind the focused risk of the chosen variant to everything but lambda."""
    plug_in = PlugIn.coerce(plug_in)
    y = np.asarray(y, dtype=float)
    x0 = np.asarray(x0, dtype=float)

    if plug_in is PlugIn.OLS:
        risk = partial(ols_plugin_risk, svd=svd, y=y, x0=x0, sigma2=sigma2)
    else:
        if loocv_tuning is None:
            raise ValueError("RLOOCV focused risk needs the LOOCV tuning parameter")
        risk = partial(ridge_plugin_risk, svd=svd, y=y, x0=x0, sigma2=sigma2,
                       loocv_tuning=loocv_tuning)
    return risk
