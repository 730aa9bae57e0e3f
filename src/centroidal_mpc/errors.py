"""Exceptions raised by the centroidal MPC package."""


class CentroidalMpcError(Exception):
    """Base class of all errors raised by this package."""


class OutOfDomainError(CentroidalMpcError, ValueError):
    """A function was evaluated outside of its domain."""

    def __init__(self, t: float, lower: float, upper: float, name: str = "PiecewiseFunc"):
        self.t = t
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"[{name}] Argument is out of function range. It should be {lower} <= {t} <= {upper}"
        )


class InvalidConfigurationError(CentroidalMpcError, ValueError):
    """Invalid parameters given at construction time."""


class ManagerNotResetError(CentroidalMpcError, RuntimeError):
    """A manager was updated before reset() was called."""
