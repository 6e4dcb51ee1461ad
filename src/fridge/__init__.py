from .decomposition import SVDTriple, compute_svd, ridge_coefficients, ridge_prediction
from .errors import DegenerateVariance, FridgeError, InvalidDimension, UnstableRisk
from .focused_risk import make_focused_risk, ols_plugin_risk, ridge_plugin_risk, risk_components
from .loocv import loocv_risk, minimize_loocv
from .model import FocusedRidge, FridgeResult, fridge
from .optimize import OptimizeOutcome, lbfgsb_minimize, multi_start_minimize
from .variance import PlugIn, estimate_sigma2

__all__ = [
    "FocusedRidge",
    "FridgeResult",
    "fridge",
    "PlugIn",
    "SVDTriple",
    "compute_svd",
    "ridge_coefficients",
    "ridge_prediction",
    "estimate_sigma2",
    "loocv_risk",
    "minimize_loocv",
    "risk_components",
    "ols_plugin_risk",
    "ridge_plugin_risk",
    "make_focused_risk",
    "OptimizeOutcome",
    "lbfgsb_minimize",
    "multi_start_minimize",
    "FridgeError",
    "InvalidDimension",
    "DegenerateVariance",
    "UnstableRisk",
]
