# ============================================================================
# model.py
# ============================================================================
# Focused ridge: picks the ridge tuning parameter that minimises the estimated
# mean squared error of the prediction at one focus covariate vector x0, next
# to the usual leave-one-out cross-validation choice.
# ============================================================================
from dataclasses import asdict, dataclass

import joblib
import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.exceptions import NotFittedError

from . import config
from .decomposition import compute_svd, ridge_coefficients, ridge_prediction
from .errors import InvalidDimension, UnstableRisk
from .focused_risk import make_focused_risk, risk_components
from .loocv import minimize_loocv
from .optimize import multi_start_minimize
from .plotting import curve_endpoint, plot_risk_curve, risk_curve
from .run_logging import sha256_array
from .variance import PlugIn, estimate_sigma2


@dataclass(frozen=True)
class FridgeResult:
    """Tuning parameters and predictions at the focus point."""
    focused_tuning: float
    loocv_tuning: float
    focused_prediction: float
    loocv_prediction: float

    def to_dict(self):
        return asdict(self)


class FocusedRidge(BaseEstimator):
    """
    Ridge regression tuned for the prediction at a focus point x0.

    Two tuning parameters are selected on the same data:

        loocv_tuning    minimises the closed-form leave-one-out CV error
        focused_tuning  minimises  bias(lam)^2 + sigma2 * var(lam)  at x0

    The bias uses a plug-in coefficient estimate and sigma2 a plug-in residual
    variance, both from least squares ('OLS', needs n > p) or from ridge at
    the LOOCV tuning parameter ('RLOOCV'). The focused risk is not unimodal in
    lam, so it is minimised from every value of a fixed start ladder.

    Parameters
    ----------
    plug_in : {'OLS', 'RLOOCV'} (default 'OLS')
        Plug-in estimate for the focused risk.
    starts : array-like or None
        Start ladder for the focused search, defaults to 10^1 ... 10^7.
    n_jobs : int or None
        Run the starts in parallel with joblib.
    verbose : bool (default False)
        Print warnings for searches that stop without converging.

    No intercept is fitted; centre X and y beforehand if one is wanted.
    """

    def __init__(self, plug_in="OLS", starts=None, n_jobs=None, verbose=False):
        self.plug_in = plug_in
        self.starts = starts
        self.n_jobs = n_jobs
        self.verbose = verbose

    # ---------- Utility methods ----------
    def _prepare_data(self, X, y, x0, plug_in):
        """Validate shapes before any decomposition."""
        if isinstance(X, (pd.DataFrame, pd.Series)):
            X = X.values
        if isinstance(y, (pd.DataFrame, pd.Series)):
            y = y.values
        if isinstance(x0, (pd.DataFrame, pd.Series)):
            x0 = x0.values

        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).ravel()
        x0 = np.asarray(x0, dtype=float).ravel()

        if X.ndim != 2:
            raise InvalidDimension(f"X must be 2D, got shape {X.shape}")
        n, p = X.shape
        if n < 1 or p < 1:
            raise InvalidDimension(f"X must have at least one row and one column, got shape {X.shape}")
        if y.shape[0] != n:
            raise InvalidDimension(f"Dimensions of y ({y.shape[0]}) and X ({n} rows) do not agree")
        if x0.shape[0] != p:
            raise InvalidDimension(f"Dimensions of x0 ({x0.shape[0]}) and X ({p} columns) do not agree")
        if plug_in is PlugIn.OLS and p >= n:
            raise InvalidDimension(
                f"OLS plug-in cannot be used for high-dimensional data (n={n}, p={p})"
            )

        if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y)) and np.all(np.isfinite(x0))):
            raise ValueError("X, y and x0 must not contain NaN or infinite values.")

        return X, y, x0

    def _check_fitted(self):
        if not hasattr(self, "focused_tuning_"):
            raise NotFittedError("Model must be fitted first")

    # ---------- Public API ----------
    def fit(self, X, y, x0):
        """
        Select the LOOCV and focused tuning parameters.

        Args:
            X : array-like (n_samples, n_features)
                Design matrix.
            y : array-like (n_samples,)
                Response.
            x0 : array-like (n_features,)
                Focus covariate vector.

        Returns:
            self : object
                Fitted model.
        """
        plug_in = PlugIn.coerce(self.plug_in)
        X, y, x0 = self._prepare_data(X, y, x0, plug_in)
        starts = config.START_LADDER if self.starts is None else np.atleast_1d(self.starts).astype(float)

        svd = compute_svd(X)

        cv = minimize_loocv(svd, y, verbose=self.verbose)
        sigma2 = estimate_sigma2(y, svd, plug_in, loocv_tuning=cv.tuning)

        risk = make_focused_risk(plug_in, svd, y, x0, sigma2, loocv_tuning=cv.tuning)
        best, outcomes = multi_start_minimize(
            risk, starts=starts, n_jobs=self.n_jobs, verbose=self.verbose
        )
        if not best.value < config.UNSTABLE_RISK:
            raise UnstableRisk(
                f"Focused risk is non-finite from every start (plug_in={plug_in.value})"
            )

        self.plug_in_ = plug_in
        self.starts_ = starts
        self.n_samples_, self.n_features_ = X.shape
        self.svd_ = svd
        self.x0_ = x0
        self.y_ = y
        self.inputs_sha256_ = sha256_array(X, y, x0)

        self.loocv_tuning_ = cv.tuning
        self.loocv_risk_ = cv.value
        self.sigma2_hat_ = sigma2

        self.risk_function_ = risk
        self.focused_tuning_ = best.tuning
        self.focused_risk_ = best.value
        self.start_results_ = pd.DataFrame(
            [o._asdict() for o in outcomes], columns=["start", "tuning", "value", "converged"]
        )
        self.curve_endpoint_ = curve_endpoint(best.tuning)

        self.focused_prediction_ = ridge_prediction(best.tuning, svd, y, x0)
        self.loocv_prediction_ = ridge_prediction(cv.tuning, svd, y, x0)
        self.coef_ = ridge_coefficients(best.tuning, svd, y)
        self.loocv_coef_ = ridge_coefficients(cv.tuning, svd, y)

        if self.verbose:
            print(f"LOOCV tuning: {cv.tuning:.4f}, focused tuning: {best.tuning:.4f}, sigma2_hat: {sigma2:.4f}")

        return self

    @property
    def result_(self):
        self._check_fitted()
        return FridgeResult(
            focused_tuning=self.focused_tuning_,
            loocv_tuning=self.loocv_tuning_,
            focused_prediction=self.focused_prediction_,
            loocv_prediction=self.loocv_prediction_,
        )

    def predict(self, X, tuning="focused"):
        """
        Ridge predictions with the focused or the LOOCV tuning parameter.

        Args:
            X : array-like (n_samples, n_features) or (n_features,)
            tuning : {'focused', 'loocv'}

        Returns:
            y_pred : ndarray
        """
        self._check_fitted()
        if tuning == "focused":
            coef = self.coef_
        elif tuning == "loocv":
            coef = self.loocv_coef_
        else:
            raise ValueError("tuning must be 'focused' or 'loocv'")

        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.shape[1] != self.n_features_:
            raise InvalidDimension("Wrong number of features")
        return X @ coef

    def get_risk_curve(self, n_points=config.CURVE_POINTS):
        """Focused MSE on [0, curve_endpoint_] as a DataFrame (tuning, mse)."""
        self._check_fitted()
        return risk_curve(self.risk_function_, self.curve_endpoint_, n_points=n_points)

    def plot_curve(self, ax=None, n_points=config.CURVE_POINTS):
        """Plot the focused MSE curve with the selected minimum marked."""
        self._check_fitted()
        return plot_risk_curve(self.risk_function_, self.curve_endpoint_,
                               self.focused_tuning_, ax=ax, n_points=n_points)

    def get_tuning_summary(self):
        """
        Focused MSE, split into squared bias and variance, at both tuning
        parameters.

        Returns:
            summary : pd.DataFrame
        """
        self._check_fitted()
        rows = []
        for criterion, lam, pred in [
            ("focused", self.focused_tuning_, self.focused_prediction_),
            ("loocv", self.loocv_tuning_, self.loocv_prediction_),
        ]:
            bias_sq, variance = risk_components(
                lam, self.svd_, self.y_, self.x0_, self.sigma2_hat_, self.plug_in_,
                loocv_tuning=self.loocv_tuning_,
            )
            rows.append({
                "criterion": criterion,
                "tuning": lam,
                "prediction": pred,
                "bias_sq": bias_sq,
                "variance": variance,
                "focused_mse": bias_sq + variance,
            })
        return pd.DataFrame(rows)

    def report(self):
        """Print model summary."""
        summary = self.get_tuning_summary()
        print("\n--- Focused ridge summary ---")
        print(f"Plug-in: {self.plug_in_.value}")
        print(f"n = {self.n_samples_}, p = {self.n_features_}")
        print(f"sigma2_hat: {self.sigma2_hat_:.4f}")
        print("\nTuning:")
        print(summary.to_string(index=False))
        print("\nStarts:")
        print(self.start_results_.to_string(index=False))

    def save_model(self, path):
        """Save model to disk."""
        joblib.dump(self, path)
        if self.verbose:
            print(f"Saved model → {path}")

    @staticmethod
    def load_model(path):
        """Load model from disk."""
        return joblib.load(path)


def fridge(X, y, x0, plug_in="OLS", plot_curve=False, ax=None, n_jobs=None, verbose=False):
    """
    Focused ridge tuning parameter and prediction at x0.

    Args:
        X : array-like (n, p)
        y : array-like (n,)
        x0 : array-like (p,)
            Focus covariate vector.
        plug_in : {'OLS', 'RLOOCV'}
            'OLS' can only be used when p < n.
        plot_curve : bool
            Draw the focused MSE curve with the minimum marked.
        ax : matplotlib Axes or None
            Axes to draw on when `plot_curve` is set.
        n_jobs : int or None
            Parallelise the multi-start search with joblib.

    Returns:
        FridgeResult
    """
    model = FocusedRidge(plug_in=plug_in, n_jobs=n_jobs, verbose=verbose)
    model.fit(X, y, x0)
    if plot_curve:
        model.plot_curve(ax=ax)
    return model.result_
