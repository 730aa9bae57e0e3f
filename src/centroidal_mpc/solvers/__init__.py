"""Optimal control solvers used by the centroidal managers."""

from .ddp_zmp import (
    DdpZmp,
    RefData,
    InitialParam,
    PlannedData,
    WeightParam,
    DdpSolverConfig,
)

__all__ = ['DdpZmp', 'RefData', 'InitialParam', 'PlannedData', 'WeightParam', 'DdpSolverConfig']
