"""Base class of the centroidal managers.

A centroidal manager plans the ZMP and the vertical contact force every
control tick from the current CoM state, and integrates the planned CoM
trajectory for the task layer that consumes it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from ..config import CentroidalManagerConfig
from ..errors import ManagerNotResetError
from ..models.centroidal_model import CentroidalZmpModel
from ..utils.logger import DataLogger

logger = logging.getLogger(__name__)


class RefZmpProvider(Protocol):
    def calc_ref_zmp(self, t: float) -> np.ndarray:
        """Return the reference ZMP (3-D, z = 0) at time ``t``."""


class ManagerState(Enum):
    """Lifecycle state of a centroidal manager."""
    IDLE = 'IDLE'
    RESET = 'RESET'
    RUNNING = 'RUNNING'


class CentroidalManager(ABC):
    """Centroidal manager running one MPC solve per control tick."""

    def __init__(self, config: CentroidalManagerConfig, foot_manager: RefZmpProvider):
        self.config = replace(config)
        self.foot_manager = foot_manager
        self.model = CentroidalZmpModel(self.config.robot_mass, self.config.gravity)
        self.state = ManagerState.IDLE

        self.t = 0.0
        self.anchor_com = np.zeros(3)

        # Initial condition of the MPC
        self.mpc_com = np.zeros(3)
        self.mpc_com_vel = np.zeros(3)

        self.ref_zmp = np.zeros(3)
        self.planned_zmp = np.zeros(3)
        self.planned_force_z = 0.0
        self.planned_com = np.zeros(3)
        self.planned_com_vel = np.zeros(3)
        self.planned_com_acc = np.zeros(3)

    @property
    def robot_mass(self) -> float:
        return self.config.robot_mass

    @property
    def name(self) -> str:
        return self.config.name

    def reset(self, com: np.ndarray, com_vel: Optional[np.ndarray] = None, t: float = 0.0):
        """(Re)initialize the MPC from the current CoM and start running."""
        self.state = ManagerState.RESET

        com = np.array(com, dtype=float).reshape(3)
        com_vel = np.zeros(3) if com_vel is None else np.array(com_vel, dtype=float).reshape(3)
        self.t = t
        self.anchor_com = com.copy()
        self.mpc_com = com.copy()
        self.mpc_com_vel = com_vel.copy()
        self.planned_com = com.copy()
        self.planned_com_vel = com_vel.copy()
        self.planned_com_acc = np.zeros(3)

        # Static equilibrium until the first solve
        self.planned_zmp = np.array([com[0], com[1], 0.0])
        self.planned_force_z = self.robot_mass * self.config.gravity
        self.ref_zmp = self.calc_ref_zmp(t)

        self._reset_mpc()
        self.state = ManagerState.RUNNING
        logger.info("[%s] Reset at t=%.3f with CoM %s", self.name, t, np.round(com, 3))

    def update(self, t: float, com: Optional[np.ndarray] = None, com_vel: Optional[np.ndarray] = None):
        """Run one control tick at time ``t``.

        Args:
            t: Current time (s).
            com: Measured CoM position, used if ``use_actual_state_for_mpc`` is set.
            com_vel: Measured CoM velocity; the planned velocity is used if omitted.
        """
        if self.state != ManagerState.RUNNING:
            raise ManagerNotResetError(f"[{self.name}] reset() must be called before update()")

        self.t = t
        if self.config.use_actual_state_for_mpc and com is not None:
            self.mpc_com = np.array(com, dtype=float).reshape(3)
            self.mpc_com_vel = (self.planned_com_vel.copy() if com_vel is None
                                else np.array(com_vel, dtype=float).reshape(3))
        else:
            self.mpc_com = self.planned_com.copy()
            self.mpc_com_vel = self.planned_com_vel.copy()

        self.ref_zmp = self.calc_ref_zmp(t)
        self.run_mpc()
        self.calc_planned_data()

    @abstractmethod
    def run_mpc(self):
        """Solve the MPC from `mpc_com` and set `planned_zmp` and `planned_force_z`."""

    @abstractmethod
    def _reset_mpc(self):
        """Create the MPC solver."""

    def calc_ref_zmp(self, t: float) -> np.ndarray:
        return np.array(self.foot_manager.calc_ref_zmp(t), dtype=float).reshape(3)

    def calc_planned_data(self):
        """Integrate the planned CoM over one control period."""
        x = np.concatenate([self.mpc_com, self.mpc_com_vel])
        u = np.array([self.planned_zmp[0], self.planned_zmp[1], self.planned_force_z])
        self.planned_com_acc = self.model.acc(x, u)
        x_next = self.model.step(x, u, self.config.dt)
        self.planned_com = x_next[:3]
        self.planned_com_vel = x_next[3:]

    def current_planned_zmp(self) -> np.ndarray:
        return self.planned_zmp.copy()

    def current_planned_force_z(self) -> float:
        return self.planned_force_z

    def add_to_logger(self, logger: DataLogger):
        prefix = self.name + "_"
        for i, axis in enumerate("xy"):
            logger.add_log_entry(prefix + "ref_zmp_" + axis, self, lambda i=i: self.ref_zmp[i])
            logger.add_log_entry(prefix + "planned_zmp_" + axis, self, lambda i=i: self.planned_zmp[i])
        logger.add_log_entry(prefix + "planned_force_z", self, lambda: self.planned_force_z)
        for i, axis in enumerate("xyz"):
            logger.add_log_entry(prefix + "planned_com_" + axis, self, lambda i=i: self.planned_com[i])
            logger.add_log_entry(prefix + "mpc_com_" + axis, self, lambda i=i: self.mpc_com[i])

    def remove_from_logger(self, logger: DataLogger):
        logger.remove_log_entries(self)
