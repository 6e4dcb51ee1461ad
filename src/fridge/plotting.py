import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from . import config


def curve_endpoint(focused_tuning):
    """Right end of the plotted domain: twice the minimiser, capped at 1e5."""
    if focused_tuning < config.PLOT_ENDPOINT_CAP:
        return 2.0 * focused_tuning
    return config.PLOT_ENDPOINT_CAP


def risk_curve(risk, endpoint, n_points=config.CURVE_POINTS):
    """Evaluate a bound risk function on [0, endpoint]."""
    grid = np.linspace(0.0, endpoint, n_points)
    return pd.DataFrame({
        "tuning": grid,
        "mse": [risk(lam) for lam in grid],
    })


def plot_risk_curve(risk, endpoint, minimum, ax=None, n_points=config.CURVE_POINTS):
    """
    Draw the MSE curve over the tuning parameter and mark the minimum.

    Args:
        risk : callable float -> float
            Focused risk bound to its data.
        endpoint : float
            Right end of the domain.
        minimum : float
            Tuning parameter to mark.
        ax : matplotlib Axes or None

    Returns:
        ax : matplotlib Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    curve = risk_curve(risk, endpoint, n_points=n_points)
    ax.plot(curve["tuning"], curve["mse"], color="black")
    ax.axvline(minimum, color="red")
    ax.set_title(f"The minimum MSE is given at {round(minimum, 1)}")
    ax.set_xlabel("Tuning parameter")
    ax.set_ylabel("MSE")
    return ax
