"""Dynamics models of the robot centroidal motion."""

from .centroidal_model import CentroidalZmpModel
from .lipm_model import LIPMModel

__all__ = ['CentroidalZmpModel', 'LIPMModel']
