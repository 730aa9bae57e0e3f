"""Differential dynamic programming (DDP) for the ZMP-driven centroidal model.

The solver plans the ZMP and the vertical contact force over a receding
horizon so that the ZMP tracks a reference and the CoM height stays at its
reference value. It is an iterative LQR (Gauss-Newton DDP) with
Levenberg-Marquardt regularization and a backtracking line search.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..config import GRAVITY
from ..errors import InvalidConfigurationError
from ..models.centroidal_model import CentroidalZmpModel

logger = logging.getLogger(__name__)


@dataclass
class RefData:
    """Reference at one horizon instant."""

    zmp: np.ndarray
    com_z: float


@dataclass
class InitialParam:
    """Initial condition and initial guess of the input sequence."""

    pos: np.ndarray
    vel: np.ndarray
    u_list: List[np.ndarray] = field(default_factory=list)


@dataclass
class WeightParam:
    running_zmp: float = 1e1
    running_force_z: float = 1e-5
    running_com_pos_z: float = 1e2
    running_com_vel_z: float = 1.0
    terminal_com_pos_xy: float = 1e1
    terminal_com_vel_xy: float = 1e1
    terminal_com_pos_z: float = 1e2
    terminal_com_vel_z: float = 1.0


@dataclass
class DdpSolverConfig:
    horizon_dt: float
    horizon_steps: int
    max_iter: int = 1
    # Relative cost improvement below which the solve is converged
    tol: float = 1e-4
    initial_reg: float = 1e-6
    min_reg: float = 1e-9
    max_reg: float = 1e6
    reg_factor: float = 10.0
    alpha_list: Sequence[float] = (1.0, 0.5, 0.25, 0.125, 0.0625)


@dataclass
class ControlData:
    """Solution retained between solves."""

    u_list: List[np.ndarray] = field(default_factory=list)
    x_list: List[np.ndarray] = field(default_factory=list)
    k_list: List[np.ndarray] = field(default_factory=list)
    K_list: List[np.ndarray] = field(default_factory=list)


@dataclass
class TraceData:
    iter: int
    cost: float
    reg: float
    alpha: float
    duration_backward: float = 0.0
    duration_forward: float = 0.0


@dataclass
class ComputationDuration:
    """Durations of the last solve (s)."""

    setup: float = 0.0
    solve: float = 0.0


@dataclass
class PlannedData:
    """Result of one solve; ``zmp`` and ``force_z`` are the first horizon step."""

    zmp: np.ndarray
    force_z: float
    u_list: List[np.ndarray]
    x_list: List[np.ndarray]
    iter: int
    converged: bool
    computation_duration: float


class DdpZmp:
    """Receding-horizon DDP planner of the ZMP and the vertical force."""

    def __init__(self, mass: float, horizon_dt: float, horizon_steps: int,
                 weight_param: Optional[WeightParam] = None, gravity: float = GRAVITY):
        self.model = CentroidalZmpModel(mass, gravity)
        self.weight_param = weight_param or WeightParam()
        self.config = DdpSolverConfig(horizon_dt=horizon_dt, horizon_steps=horizon_steps)
        self.set_horizon(horizon_dt, horizon_steps)
        self.control_data = ControlData()
        self.trace_data_list: List[TraceData] = []
        self.computation_duration = ComputationDuration()

    @property
    def mass(self) -> float:
        return self.model.mass

    def set_horizon(self, horizon_dt: float, horizon_steps: int):
        """Change the horizon; a retained input sequence of another length becomes stale."""
        if horizon_dt <= 0.0:
            raise InvalidConfigurationError(f"horizon_dt must be positive, got {horizon_dt}")
        if horizon_steps <= 0:
            raise InvalidConfigurationError(f"horizon_steps must be positive, got {horizon_steps}")
        self.config.horizon_dt = horizon_dt
        self.config.horizon_steps = int(horizon_steps)

    def plan_once(self, ref_data_func: Callable[[float], RefData],
                  initial_param: InitialParam, current_t: float) -> PlannedData:
        """Solve the horizon problem once from the given initial guess."""
        start_time = time.perf_counter()
        n = self.config.horizon_steps
        dt = self.config.horizon_dt
        if len(initial_param.u_list) != n:
            raise InvalidConfigurationError(
                f"Initial input sequence has {len(initial_param.u_list)} steps, expected {n}"
            )

        ref_data_list = [ref_data_func(current_t + i * dt) for i in range(n + 1)]
        x_init = np.concatenate([np.asarray(initial_param.pos, dtype=float),
                                 np.asarray(initial_param.vel, dtype=float)])
        u_list = [np.array(u, dtype=float) for u in initial_param.u_list]
        x_list = self._rollout(x_init, u_list)
        cost = self._total_cost(x_list, u_list, ref_data_list)
        setup_time = time.perf_counter()

        self.trace_data_list = []
        reg = self.config.initial_reg
        converged = False
        iter_num = 0
        while iter_num < self.config.max_iter:
            iter_num += 1
            backward_start = time.perf_counter()
            k_list, K_list, reg = self._backward_pass(x_list, u_list, ref_data_list, reg)
            forward_start = time.perf_counter()

            accepted = False
            for alpha in self.config.alpha_list:
                new_x_list, new_u_list = self._forward_pass(x_list, u_list, k_list, K_list, alpha)
                new_cost = self._total_cost(new_x_list, new_u_list, ref_data_list)
                if new_cost < cost:
                    accepted = True
                    break
            forward_end = time.perf_counter()

            if accepted:
                rel_improvement = (cost - new_cost) / max(abs(cost), 1e-12)
                x_list, u_list, cost = new_x_list, new_u_list, new_cost
                reg = max(reg / self.config.reg_factor, self.config.min_reg)
                converged = rel_improvement < self.config.tol
            else:
                # No descent along the Newton direction: either at a minimum or regularization is too small
                reg = min(reg * self.config.reg_factor, self.config.max_reg)
                converged = reg >= self.config.max_reg

            self.trace_data_list.append(TraceData(
                iter=iter_num, cost=cost, reg=reg, alpha=alpha if accepted else 0.0,
                duration_backward=forward_start - backward_start,
                duration_forward=forward_end - forward_start))
            self.control_data.k_list = k_list
            self.control_data.K_list = K_list
            if converged:
                break

        self.control_data.u_list = u_list
        self.control_data.x_list = x_list
        end_time = time.perf_counter()
        self.computation_duration.setup = setup_time - start_time
        self.computation_duration.solve = end_time - start_time

        if not converged:
            logger.debug("DDP stopped after %d iterations without convergence (cost: %g)", iter_num, cost)

        return PlannedData(
            zmp=u_list[0][:2].copy(),
            force_z=float(u_list[0][2]),
            u_list=u_list,
            x_list=x_list,
            iter=iter_num,
            converged=converged,
            computation_duration=self.computation_duration.solve,
        )

    def _rollout(self, x_init: np.ndarray, u_list: List[np.ndarray]) -> List[np.ndarray]:
        x_list = [x_init]
        for u in u_list:
            x_list.append(self.model.step(x_list[-1], u, self.config.horizon_dt))
        return x_list

    def _running_cost(self, x: np.ndarray, u: np.ndarray, ref: RefData) -> float:
        w = self.weight_param
        return 0.5 * (w.running_zmp * float(np.sum((u[:2] - ref.zmp) ** 2))
                      + w.running_force_z * (u[2] - self.model.mass * self.model.g) ** 2
                      + w.running_com_pos_z * (x[2] - ref.com_z) ** 2
                      + w.running_com_vel_z * x[5] ** 2)

    def _terminal_cost(self, x: np.ndarray, ref: RefData) -> float:
        w = self.weight_param
        return 0.5 * (w.terminal_com_pos_xy * float(np.sum((x[:2] - ref.zmp) ** 2))
                      + w.terminal_com_vel_xy * float(np.sum(x[3:5] ** 2))
                      + w.terminal_com_pos_z * (x[2] - ref.com_z) ** 2
                      + w.terminal_com_vel_z * x[5] ** 2)

    def _total_cost(self, x_list, u_list, ref_data_list) -> float:
        cost = sum(self._running_cost(x, u, ref) for x, u, ref in zip(x_list[:-1], u_list, ref_data_list[:-1]))
        return cost + self._terminal_cost(x_list[-1], ref_data_list[-1])

    def _running_cost_deriv(self, x: np.ndarray, u: np.ndarray, ref: RefData):
        w = self.weight_param
        lx = np.zeros(6)
        lx[2] = w.running_com_pos_z * (x[2] - ref.com_z)
        lx[5] = w.running_com_vel_z * x[5]
        lxx = np.diag([0.0, 0.0, w.running_com_pos_z, 0.0, 0.0, w.running_com_vel_z])
        lu = np.empty(3)
        lu[:2] = w.running_zmp * (u[:2] - ref.zmp)
        lu[2] = w.running_force_z * (u[2] - self.model.mass * self.model.g)
        luu = np.diag([w.running_zmp, w.running_zmp, w.running_force_z])
        return lx, lxx, lu, luu

    def _terminal_cost_deriv(self, x: np.ndarray, ref: RefData):
        w = self.weight_param
        lx = np.empty(6)
        lx[:2] = w.terminal_com_pos_xy * (x[:2] - ref.zmp)
        lx[2] = w.terminal_com_pos_z * (x[2] - ref.com_z)
        lx[3:5] = w.terminal_com_vel_xy * x[3:5]
        lx[5] = w.terminal_com_vel_z * x[5]
        lxx = np.diag([w.terminal_com_pos_xy, w.terminal_com_pos_xy, w.terminal_com_pos_z,
                       w.terminal_com_vel_xy, w.terminal_com_vel_xy, w.terminal_com_vel_z])
        return lx, lxx

    def _backward_pass(self, x_list, u_list, ref_data_list, reg):
        n = len(u_list)
        dt = self.config.horizon_dt
        derivs = [self.model.state_eq_deriv(x, u, dt) for x, u in zip(x_list[:-1], u_list)]
        cost_derivs = [self._running_cost_deriv(x, u, ref)
                       for x, u, ref in zip(x_list[:-1], u_list, ref_data_list[:-1])]
        terminal_lx, terminal_lxx = self._terminal_cost_deriv(x_list[-1], ref_data_list[-1])

        while True:
            Vx, Vxx = terminal_lx, terminal_lxx
            k_list: List[np.ndarray] = [None] * n
            K_list: List[np.ndarray] = [None] * n
            failed = False
            for i in reversed(range(n)):
                A, B = derivs[i]
                lx, lxx, lu, luu = cost_derivs[i]
                Qx = lx + A.T @ Vx
                Qu = lu + B.T @ Vx
                Qxx = lxx + A.T @ Vxx @ A
                Quu = luu + B.T @ Vxx @ B + reg * np.eye(len(lu))
                Qux = B.T @ Vxx @ A
                try:
                    np.linalg.cholesky(Quu)
                except np.linalg.LinAlgError:
                    failed = True
                    break
                k = -np.linalg.solve(Quu, Qu)
                K = -np.linalg.solve(Quu, Qux)
                k_list[i] = k
                K_list[i] = K
                Vx = Qx + K.T @ Quu @ k + K.T @ Qu + Qux.T @ k
                Vxx = Qxx + K.T @ Quu @ K + K.T @ Qux + Qux.T @ K
                Vxx = 0.5 * (Vxx + Vxx.T)

            if not failed:
                return k_list, K_list, reg
            if reg >= self.config.max_reg:
                raise np.linalg.LinAlgError("DDP backward pass failed with maximum regularization")
            reg = min(max(reg, self.config.min_reg) * self.config.reg_factor, self.config.max_reg)

    def _forward_pass(self, x_list, u_list, k_list, K_list, alpha):
        new_x_list = [x_list[0]]
        new_u_list = []
        for i, u in enumerate(u_list):
            new_u = u + alpha * k_list[i] + K_list[i] @ (new_x_list[-1] - x_list[i])
            new_u_list.append(new_u)
            new_x_list.append(self.model.step(new_x_list[-1], new_u, self.config.horizon_dt))
        return new_x_list, new_u_list
