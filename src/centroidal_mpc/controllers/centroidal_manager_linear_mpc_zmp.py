"""Centroidal manager based on linear MPC of the LIPM with jerk input."""

import time

import cvxpy as cp
import numpy as np

from ..config import LinearMpcZmpConfig
from ..models.lipm_model import LIPMModel
from ..utils.logger import DataLogger
from .centroidal_manager import CentroidalManager, RefZmpProvider


class CentroidalManagerLinearMpcZmp(CentroidalManager):
    """ZMP tracking MPC over decoupled x/y LIPMs at constant CoM height.

    Without ``zmp_limit_margin`` the unconstrained QP is solved in closed
    form. Otherwise the predicted ZMP is kept within the margin around the
    reference by an OSQP solve.
    """

    def __init__(self, config: LinearMpcZmpConfig, foot_manager: RefZmpProvider):
        super().__init__(config, foot_manager)
        self.lipm = None
        self.lipm_ctrl = None
        self.predicted_zmp = None
        self.Px = None
        self.Pu = None
        self._gain = None
        self._problem = None
        self.computation_duration = 0.0

    def _reset_mpc(self):
        nb_steps = self.config.horizon_steps
        self.lipm = LIPMModel(self.config.horizon_dt, self.config.ref_com_z, self.config.gravity)
        self.lipm_ctrl = LIPMModel(self.config.dt, self.config.ref_com_z, self.config.gravity)
        self.Px, self.Pu = self.lipm.preview_matrices(nb_steps)
        self.computation_duration = 0.0

        if self.config.zmp_limit_margin is None:
            self._gain = np.linalg.inv(
                self.Pu.T @ self.Pu + self.config.R / self.config.Q * np.eye(nb_steps)) @ self.Pu.T
            self._problem = None
        else:
            self._build_problem(nb_steps)

    def _build_problem(self, nb_steps: int):
        self._jerk = cp.Variable(nb_steps)
        self._free_zmp = cp.Parameter(nb_steps)
        self._z_ref = cp.Parameter(nb_steps)
        margin = self.config.zmp_limit_margin

        z_pred = self._free_zmp + self.Pu @ self._jerk
        objective = 0.5 * self.config.Q * cp.sum_squares(z_pred - self._z_ref) \
            + 0.5 * self.config.R * cp.sum_squares(self._jerk)
        constraints = [z_pred <= self._z_ref + margin, z_pred >= self._z_ref - margin]
        self._problem = cp.Problem(cp.Minimize(objective), constraints)

    def run_mpc(self):
        start_time = time.perf_counter()
        dt = self.config.horizon_dt
        z_ref = np.array([self.calc_ref_zmp(self.t + (i + 1) * dt)[:2]
                          for i in range(self.config.horizon_steps)])

        planned_zmp = np.zeros(3)
        self.predicted_zmp = np.zeros_like(z_ref)
        for axis in range(2):
            x_init = np.array([[self.mpc_com[axis]], [self.mpc_com_vel[axis]], [self.planned_com_acc[axis]]])
            jerk = self._solve_axis(x_init, z_ref[:, axis])
            self.predicted_zmp[:, axis] = (self.Px @ x_init).flatten() + self.Pu @ jerk
            # Jerk is held over one control period
            planned_zmp[axis] = self.lipm_ctrl.get_zmp(self.lipm_ctrl.step(x_init, jerk[0:1].reshape(1, 1)))

        self.planned_zmp = planned_zmp
        self.planned_force_z = self.robot_mass * self.config.gravity
        self.computation_duration = time.perf_counter() - start_time

    def _solve_axis(self, x_init: np.ndarray, z_ref: np.ndarray) -> np.ndarray:
        """Return the jerk sequence minimizing the ZMP tracking error for one axis."""
        free_zmp = (self.Px @ x_init).flatten()
        if self._problem is None:
            return -self._gain @ (free_zmp - z_ref)

        self._free_zmp.value = free_zmp
        self._z_ref.value = z_ref
        self._problem.solve(solver=cp.OSQP, warm_start=True)
        if self._jerk.value is None:
            raise RuntimeError(f"QP solver did not find a solution (status: {self._problem.status}).")
        return np.array(self._jerk.value)

    def add_to_logger(self, logger: DataLogger):
        super().add_to_logger(logger)

        logger.add_log_entry(self.name + "_MPC_computationDuration", self, lambda: self.computation_duration)
