"""Time-parametrised functions used to describe reference trajectories."""

from .func import (
    Func,
    PiecewiseFunc,
    Polynomial,
    Constant,
    LinearPolynomial,
    QuadraticPolynomial,
    CubicPolynomial,
    zero_like,
)

__all__ = [
    'Func',
    'PiecewiseFunc',
    'Polynomial',
    'Constant',
    'LinearPolynomial',
    'QuadraticPolynomial',
    'CubicPolynomial',
    'zero_like',
]
