# ============================================================================
# decomposition.py
# ============================================================================
# Thin SVD of the design matrix and the ridge quantities that are closed form
# in it: shrinkage factors, hat-matrix diagonal, coefficients and the fitted
# value at a focus point.
# ============================================================================
from typing import NamedTuple

import numpy as np
from scipy import linalg


class SVDTriple(NamedTuple):
    """
    Thin singular value decomposition X = U diag(d) V^T.

    Attributes
    ----------
    u : ndarray (n, r)
        Left singular vectors, orthonormal columns.
    d : ndarray (r,)
        Singular values, non-negative.
    v : ndarray (p, r)
        Right singular vectors, orthonormal columns.
    """
    u: np.ndarray
    d: np.ndarray
    v: np.ndarray

    @property
    def n(self):
        return self.u.shape[0]

    @property
    def p(self):
        return self.v.shape[0]

    def project_response(self, y):
        """Return U^T y."""
        return self.u.T @ np.asarray(y, dtype=float)

    def project_focus(self, x0):
        """Return V^T x0."""
        return self.v.T @ np.asarray(x0, dtype=float)


def compute_svd(X):
    """Compute the thin SVD of X once; r = min(n, p) triples."""
    X = np.asarray(X, dtype=float)
    u, d, vt = linalg.svd(X, full_matrices=False)
    # values below the numerical-rank tolerance are exact zeros (rank-deficient X)
    if d.size:
        tol = d.max() * max(X.shape) * np.finfo(float).eps
        d = np.where(d > tol, d, 0.0)
    return SVDTriple(u=u, d=d, v=vt.T)


def _safe_ratio(num, den):
    # 0/0 only happens for a zero singular value at lambda = 0
    num, den = np.broadcast_arrays(np.asarray(num, dtype=float), np.asarray(den, dtype=float))
    out = np.zeros_like(num)
    np.divide(num, den, out=out, where=den != 0)
    return out


def shrinkage(d, lam):
    """Ridge shrinkage factors d^2 / (d^2 + lambda)."""
    d2 = np.asarray(d, dtype=float) ** 2
    return _safe_ratio(d2, d2 + lam)


def hat_diagonal(lam, svd):
    """Diagonal of H(lambda) = U diag(s) U^T without forming the n x n matrix."""
    s = shrinkage(svd.d, lam)
    return (svd.u ** 2) @ s


def fitted_values(lam, svd, y):
    """Ridge fitted values H(lambda) y."""
    s = shrinkage(svd.d, lam)
    return svd.u @ (s * svd.project_response(y))


def ridge_coefficients(lam, svd, y):
    """Ridge coefficients V diag(d / (d^2 + lambda)) U^T y."""
    d = svd.d
    factors = _safe_ratio(d, d ** 2 + lam)
    return svd.v @ (factors * svd.project_response(y))


def ridge_prediction(lam, svd, y, x0):
    """Ridge fitted value at the focus point x0."""
    d = svd.d
    factors = _safe_ratio(d, d ** 2 + lam)
    w = svd.project_focus(x0)
    z = svd.project_response(y)
    return float(np.sum(w * factors * z))
