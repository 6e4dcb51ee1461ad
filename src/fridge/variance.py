from enum import Enum

import numpy as np

from .decomposition import fitted_values, shrinkage
from .errors import DegenerateVariance, InvalidDimension


class PlugIn(Enum):
    """Which estimate stands in for the unknown coefficients and noise level."""
    OLS = "OLS"
    RLOOCV = "RLOOCV"

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"plug_in must be one of {[m.value for m in cls]}, got {value!r}")


def _residual_variance(residuals, dof):
    if not dof > 0:
        raise DegenerateVariance(
            f"Residual degrees of freedom must be positive, got {dof:.6g}"
        )
    return float(np.sum(residuals ** 2) / dof)


def estimate_sigma2(y, svd, plug_in, loocv_tuning=None):
    """
    Plug-in estimate of the residual variance.

    Parameters
    ----------
    y : ndarray (n,)
        Response.
    svd : SVDTriple
        Decomposition of the design matrix.
    plug_in : PlugIn or str
        'OLS' uses the least-squares projection U U^T and divides by n - p.
        'RLOOCV' uses the ridge hat matrix at `loocv_tuning` and divides by
        n - trace(H), the effective residual degrees of freedom.
    loocv_tuning : float or None
        Required for 'RLOOCV'.

    Returns
    -------
    sigma2 : float
    """
    plug_in = PlugIn.coerce(plug_in)
    y = np.asarray(y, dtype=float)
    n, p = svd.n, svd.p

    if plug_in is PlugIn.OLS:
        if p >= n:
            raise InvalidDimension("OLS plug-in cannot be used for high-dimensional data (p >= n)")
        # lambda = 0 projects onto the column space; zero singular values drop out
        residuals = y - fitted_values(0.0, svd, y)
        return _residual_variance(residuals, n - p)

    if loocv_tuning is None:
        raise ValueError("RLOOCV plug-in needs the LOOCV tuning parameter")
    residuals = y - fitted_values(loocv_tuning, svd, y)
    effective_dof = np.sum(shrinkage(svd.d, loocv_tuning))
    return _residual_variance(residuals, n - effective_dof)
