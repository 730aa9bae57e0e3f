"""Centroidal manager planning the ZMP and vertical force with DDP."""

import logging
from dataclasses import replace
from typing import List, Optional

import numpy as np

from ..config import DdpZmpConfig
from ..solvers.ddp_zmp import DdpZmp, InitialParam, PlannedData, RefData, WeightParam
from ..utils.logger import DataLogger
from .centroidal_manager import CentroidalManager, RefZmpProvider

logger = logging.getLogger(__name__)


class CentroidalManagerDdpZmp(CentroidalManager):
    """Receding-horizon DDP warm-started from the previous solution."""

    def __init__(self, config: DdpZmpConfig, foot_manager: RefZmpProvider,
                 weight_param: Optional[WeightParam] = None):
        super().__init__(config, foot_manager)
        self.weight_param = weight_param
        self.ddp: Optional[DdpZmp] = None
        self.planned_data: Optional[PlannedData] = None

        # Number of discarded warm starts since reset
        self.stale_warm_start_count = 0
        self._horizon_changed = False

    def _reset_mpc(self):
        self.ddp = DdpZmp(self.robot_mass, self.config.horizon_dt, self.config.horizon_steps,
                          weight_param=self.weight_param, gravity=self.config.gravity)
        self.ddp.config.max_iter = self.config.ddp_max_iter
        self.planned_data = None
        self.stale_warm_start_count = 0
        self._horizon_changed = False

    def update_horizon(self, horizon_duration: Optional[float] = None, horizon_dt: Optional[float] = None):
        """Change the horizon without reset. The retained input sequence is not reused."""
        self.config = replace(
            self.config,
            horizon_duration=self.config.horizon_duration if horizon_duration is None else horizon_duration,
            horizon_dt=self.config.horizon_dt if horizon_dt is None else horizon_dt,
        )
        if self.ddp is not None:
            self.ddp.set_horizon(self.config.horizon_dt, self.config.horizon_steps)
            self._horizon_changed = True

    def run_mpc(self):
        horizon_steps = self.ddp.config.horizon_steps
        u_list = self.ddp.control_data.u_list
        if u_list and len(u_list) == horizon_steps and not self._horizon_changed:
            initial_u_list = [u.copy() for u in u_list]
        else:
            if u_list:
                self.stale_warm_start_count += 1
                logger.warning("[%s] Discard warm start of %d steps planned for another horizon (%d steps of %.3f s)",
                               self.name, len(u_list), horizon_steps, self.ddp.config.horizon_dt)
            initial_u_list = self.nominal_input_list(horizon_steps)
        self._horizon_changed = False

        initial_param = InitialParam(pos=self.mpc_com.copy(), vel=self.mpc_com_vel.copy(), u_list=initial_u_list)
        self.planned_data = self.ddp.plan_once(self.calc_ref_data, initial_param, self.t)
        self.planned_zmp = np.array([self.planned_data.zmp[0], self.planned_data.zmp[1], 0.0])
        self.planned_force_z = self.planned_data.force_z

    def nominal_input_list(self, horizon_steps: int) -> List[np.ndarray]:
        """Static equilibrium input: ZMP below the CoM and force balancing gravity."""
        return [np.array([self.mpc_com[0], self.mpc_com[1], self.robot_mass * self.config.gravity])
                for _ in range(horizon_steps)]

    def calc_ref_data(self, t: float) -> RefData:
        return RefData(zmp=self.calc_ref_zmp(t)[:2], com_z=self.config.ref_com_z)

    def add_to_logger(self, logger: DataLogger):
        super().add_to_logger(logger)

        logger.add_log_entry(self.name + "_DDP_computationDuration", self,
                             lambda: 0.0 if self.ddp is None else self.ddp.computation_duration.solve)
        logger.add_log_entry(self.name + "_DDP_iter", self,
                             lambda: 0 if self.ddp is None or not self.ddp.trace_data_list
                             else self.ddp.trace_data_list[-1].iter)
        logger.add_log_entry(self.name + "_DDP_converged", self,
                             lambda: self.planned_data is not None and self.planned_data.converged)
