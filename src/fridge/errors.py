class FridgeError(Exception):
    """Base class for errors raised by fridge."""


class InvalidDimension(FridgeError, ValueError):
    """Inputs do not agree in shape, or OLS plug-in requested with p >= n."""


class DegenerateVariance(FridgeError, ArithmeticError):
    """Effective residual degrees of freedom are not positive."""


class UnstableRisk(FridgeError, ArithmeticError):
    """Focused risk was non-finite or blew up from every start."""
