"""Centralized configuration for focused tuning."""

import os

import numpy as np
from dotenv import load_dotenv

load_dotenv()

# Random seed for reproducibility
RANDOM_SEED = 42

# Start values for the focused-risk search, 10^1 ... 10^7
START_LADDER = 10.0 ** np.arange(1, 8)

# LOOCV search starts from a single point
LOOCV_START = 1.0

# L-BFGS-B tolerances, in multiples of machine epsilon. The focused starts
# run tighter than the LOOCV search (1e2 < 1e4), not looser.
LOOCV_FACTR = 1e4
FOCUSED_FACTR = 1e2

# Absolute finite-difference step for the gradient
FD_STEP = 1e-3
MAX_ITER = 100

# Stand-in value for risks that blow up numerically
UNSTABLE_RISK = 1e100

# Numerical stability
EPS = 1e-12

# Risk curve
PLOT_ENDPOINT_CAP = 1e5
CURVE_POINTS = 500

# Where run records are written
RUNS_DIR = os.getenv("FRIDGE_RUNS_DIR", "runs")
