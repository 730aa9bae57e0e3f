"""Centroidal dynamics driven by the ZMP and the vertical contact force."""

import numpy as np
from typing import Tuple


class CentroidalZmpModel:
    """Point-mass model whose input is the ZMP and the total vertical force.

    State is ``[pos (3), vel (3)]`` of the CoM and input is
    ``[zmp_x, zmp_y, force_z]``. The ZMP lies on the ground plane ``z = 0``:

        acc_xy = force_z / (mass * pos_z) * (pos_xy - zmp_xy)
        acc_z = force_z / mass - g
    """

    STATE_DIM = 6
    INPUT_DIM = 3

    def __init__(self, mass: float, gravity: float):
        self.mass = mass
        self.g = gravity

    def acc(self, x: np.ndarray, u: np.ndarray) -> np.ndarray:
        """Compute the CoM acceleration."""
        pos = x[:3]
        zmp, force_z = u[:2], u[2]
        acc = np.empty(3)
        acc[:2] = force_z / (self.mass * pos[2]) * (pos[:2] - zmp)
        acc[2] = force_z / self.mass - self.g
        return acc

    def step(self, x: np.ndarray, u: np.ndarray, dt: float) -> np.ndarray:
        """Compute next state by explicit Euler integration."""
        x_next = np.empty(self.STATE_DIM)
        x_next[:3] = x[:3] + dt * x[3:]
        x_next[3:] = x[3:] + dt * self.acc(x, u)
        return x_next

    def state_eq_deriv(self, x: np.ndarray, u: np.ndarray, dt: float) -> Tuple[np.ndarray, np.ndarray]:
        """Compute the Jacobians of `step` with respect to state and input."""
        pos = x[:3]
        zmp, force_z = u[:2], u[2]
        inv_mz = 1.0 / (self.mass * pos[2])

        A = np.eye(self.STATE_DIM)
        A[0:3, 3:6] += dt * np.eye(3)
        A[3:5, 0:2] += dt * force_z * inv_mz * np.eye(2)
        A[3:5, 2] += -dt * force_z * inv_mz / pos[2] * (pos[:2] - zmp)

        B = np.zeros((self.STATE_DIM, self.INPUT_DIM))
        B[3:5, 0:2] = -dt * force_z * inv_mz * np.eye(2)
        B[3:5, 2] = dt * inv_mz * (pos[:2] - zmp)
        B[5, 2] = dt / self.mass
        return A, B
