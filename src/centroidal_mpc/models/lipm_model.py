"""Linear Inverted Pendulum Model (LIPM) with CoM jerk input."""

import numpy as np
from typing import Tuple


class LIPMModel:
    """Linear Inverted Pendulum Model for one horizontal axis.

    State is ``[pos, vel, acc]`` of the CoM, input is the CoM jerk.
    """

    def __init__(self, dt: float, com_height: float, gravity: float):
        self.dt = dt
        self.h = com_height
        self.g = gravity
        self.A = np.array([
            [1.0, self.dt, self.dt**2 / 2.0],
            [0.0, 1.0, self.dt],
            [0.0, 0.0, 1.0]
        ])
        self.B = np.array([
            [self.dt**3 / 6.0],
            [self.dt**2 / 2.0],
            [self.dt]
        ])
        self.C = np.array([[1.0, 0.0, -self.h / self.g]])

    def step(self, x: np.ndarray, u: np.ndarray) -> np.ndarray:
        """Compute next state given current state and control input."""
        return self.A @ x + self.B @ u

    def get_zmp(self, x: np.ndarray) -> float:
        """Compute Zero Moment Point (ZMP) from state."""
        return float((self.C @ x).item())

    def preview_matrices(self, nb_steps: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Build the ZMP prediction matrices over ``nb_steps`` future steps.

        The predicted ZMP sequence is ``Px @ x_init + Pu @ jerk``.

        Returns:
            Tuple of (Px, Pu) with shapes [nb_steps, 3] and [nb_steps, nb_steps]
        """
        Px = np.zeros((nb_steps, 3))
        Pu = np.zeros((nb_steps, nb_steps))
        T = self.dt

        for i in range(nb_steps):
            Px[i, 0] = 1
            Px[i, 1] = T * (i + 1)
            Px[i, 2] = (T ** 2) / 2 * (i + 1) ** 2 - self.h / self.g
            for j in range(i + 1):
                Pu[i, j] = (T ** 3) / 6 * (1 + 3*(i-j) + 3*(i-j)**2) - T * self.h / self.g
        return Px, Pu
