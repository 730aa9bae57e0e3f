"""Centroidal model predictive control for bipedal walking."""

from .config import (
    CentroidalManagerConfig,
    DdpZmpConfig,
    LinearMpcZmpConfig,
    ZmpReferenceConfig,
)
from .errors import (
    CentroidalMpcError,
    InvalidConfigurationError,
    ManagerNotResetError,
    OutOfDomainError,
)

__version__ = "0.1.0"
