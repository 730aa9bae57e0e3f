"""Centroidal managers planning the ZMP with model predictive control."""

from .centroidal_manager import CentroidalManager, ManagerState, RefZmpProvider
from .centroidal_manager_ddp_zmp import CentroidalManagerDdpZmp
from .centroidal_manager_linear_mpc_zmp import CentroidalManagerLinearMpcZmp


def create_centroidal_manager(config, foot_manager) -> CentroidalManager:
    """Create the centroidal manager selected by ``config.method``."""
    method = config.method.lower()

    if method == "ddpzmp":
        return CentroidalManagerDdpZmp(config, foot_manager)
    elif method == "linearmpczmp":
        return CentroidalManagerLinearMpcZmp(config, foot_manager)
    else:
        raise ValueError(f"Unknown method: {config.method}. Must be 'DdpZmp' or 'LinearMpcZmp'")


__all__ = [
    'CentroidalManager',
    'ManagerState',
    'RefZmpProvider',
    'CentroidalManagerDdpZmp',
    'CentroidalManagerLinearMpcZmp',
    'create_centroidal_manager',
]
