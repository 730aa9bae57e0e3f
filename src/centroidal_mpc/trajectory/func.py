"""Mathematical functions of one real argument (time).

A function value can be a scalar, a numpy array or any object that supports
addition, multiplication by a scalar and exposes a ``zero()`` method returning
its additive identity.
"""

import copy
import math
import numbers
from abc import ABC, abstractmethod
from bisect import bisect_left
from typing import Any, Iterator, List, Sequence, Tuple

import numpy as np

from ..errors import InvalidConfigurationError, OutOfDomainError


def zero_like(value: Any) -> Any:
    """Return the additive identity of the type of ``value``."""
    if isinstance(value, np.ndarray):
        return np.zeros_like(value)
    if isinstance(value, numbers.Number):
        return type(value)(0)
    zero = getattr(value, 'zero', None)
    if callable(zero):
        return zero()
    raise TypeError(
        f"Cannot build the additive identity of {type(value).__name__}: "
        "value type must be a number, a numpy array or provide a zero() method"
    )


def _freeze(value: Any) -> Any:
    if isinstance(value, numbers.Number):
        return float(value)
    if isinstance(value, (np.ndarray, list, tuple)):
        arr = np.array(value, dtype=float)
        arr.setflags(write=False)
        return arr
    return copy.copy(value)


def _thaw(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return np.array(value)
    return copy.copy(value)


class Func(ABC):
    """Function of time with derivatives of arbitrary order."""

    @abstractmethod
    def __call__(self, t: float) -> Any:
        """Evaluate function value at ``t``."""

    @abstractmethod
    def derivative(self, t: float, order: int = 1) -> Any:
        """Evaluate the ``order``-th derivative at ``t``."""

    def domain_lower_limit(self) -> float:
        return -math.inf

    def domain_upper_limit(self) -> float:
        return math.inf


class PiecewiseFunc(Func):
    """Function made of segments, each valid up to its upper bound.

    The segment owning ``t`` is the first one whose upper bound is not less
    than ``t``, so a boundary value belongs to the segment ending there.
    Segment functions are held by reference and may be shared with other
    containers.
    """

    def __init__(self):
        self._bounds: List[float] = []
        self._funcs: List[Func] = []
        self._t_lower_limit = -math.inf

    def __call__(self, t: float) -> Any:
        return self._find_func(t)(t)

    def derivative(self, t: float, order: int = 1) -> Any:
        return self._find_func(t).derivative(t, order)

    def domain_lower_limit(self) -> float:
        return self._t_lower_limit

    def domain_upper_limit(self) -> float:
        if not self._bounds:
            return math.inf
        return self._bounds[-1]

    def clear_funcs(self):
        self._bounds.clear()
        self._funcs.clear()
        self._t_lower_limit = -math.inf

    def append_func(self, t: float, func: Func):
        """Append a terminal segment whose domain ends at ``t``."""
        if not isinstance(func, Func):
            raise InvalidConfigurationError(
                f"[PiecewiseFunc] Segment must be a Func, got {type(func).__name__}"
            )
        if self._bounds and not t > self._bounds[-1]:
            raise InvalidConfigurationError(
                f"[PiecewiseFunc] Upper bound {t} must be greater than the last upper bound {self._bounds[-1]}"
            )
        self._bounds.append(float(t))
        self._funcs.append(func)

    def set_domain_lower_limit(self, t: float):
        self._t_lower_limit = float(t)

    def segments(self) -> Iterator[Tuple[float, Func]]:
        """Iterate over (upper bound, function) pairs in ascending order."""
        return iter(list(zip(self._bounds, self._funcs)))

    def __len__(self) -> int:
        return len(self._funcs)

    def _find_func(self, t: float) -> Func:
        self._check_arg(t)
        return self._funcs[bisect_left(self._bounds, t)]

    def _check_arg(self, t: float):
        upper = self.domain_upper_limit()
        if not self._bounds or not (self._t_lower_limit <= t <= upper):
            raise OutOfDomainError(t, self._t_lower_limit, upper)


class Polynomial(Func):
    """Polynomial of ``t - t0``.

    Args:
        coeff: Coefficients from low order (constant term) to high order.
        t0: Offset of the function argument.
    """

    ORDER = None

    def __init__(self, coeff: Sequence[Any], t0: float = 0.0):
        coeff = list(coeff)
        if not coeff:
            raise InvalidConfigurationError("[Polynomial] At least one coefficient is required")
        if self.ORDER is not None and len(coeff) != self.ORDER + 1:
            raise InvalidConfigurationError(
                f"[{type(self).__name__}] Expected {self.ORDER + 1} coefficients, got {len(coeff)}"
            )
        self._coeff = tuple(_freeze(c) for c in coeff)
        self._t0 = float(t0)

    @property
    def order(self) -> int:
        return len(self._coeff) - 1

    @property
    def coeff(self) -> Tuple[Any, ...]:
        return self._coeff

    @property
    def t0(self) -> float:
        return self._t0

    def __call__(self, t: float) -> Any:
        dt = t - self._t0
        ret = _thaw(self._coeff[0])
        for i in range(1, self.order + 1):
            ret = ret + self._coeff[i] * dt ** i
        return ret

    def derivative(self, t: float, order: int = 1) -> Any:
        if order < 0:
            raise ValueError(f"[Polynomial] Derivative order must be non-negative, got {order}")
        if order == 0:
            return self(t)
        if order > self.order:
            return zero_like(self._coeff[0])

        # Falling factorial (i + order)! / i! scales each remaining coefficient
        dt = t - self._t0
        ret = self._coeff[order] * math.perm(order, order)
        for i in range(1, self.order - order + 1):
            ret = ret + self._coeff[i + order] * (math.perm(i + order, order) * dt ** i)
        return ret

    def __repr__(self) -> str:
        return f"{type(self).__name__}(coeff={list(self._coeff)!r}, t0={self._t0})"


class Constant(Polynomial):
    """Constant function; the argument does not affect the value."""

    ORDER = 0

    def __init__(self, value: Any):
        super().__init__([value])

    def __call__(self, t: float = 0.0) -> Any:
        return super().__call__(t)


class LinearPolynomial(Polynomial):
    ORDER = 1


class QuadraticPolynomial(Polynomial):
    ORDER = 2


class CubicPolynomial(Polynomial):
    ORDER = 3
