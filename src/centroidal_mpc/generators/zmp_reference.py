"""Reference ZMP trajectory built from a footstep sequence."""

from bisect import bisect_left
from enum import Enum
from typing import List, Sequence

import numpy as np

from ..config import ZmpReferenceConfig
from ..trajectory.func import Constant, LinearPolynomial, PiecewiseFunc


class State(Enum):
    """Walking state enum."""
    STANDING = 'STANDING'
    DOUBLE_SUPPORT = 'DOUBLE_SUPPORT'
    SINGLE_SUPPORT = 'SINGLE_SUPPORT'


def _to_xy(footstep) -> np.ndarray:
    if hasattr(footstep, 'x') and hasattr(footstep, 'y'):
        return np.array([footstep.x, footstep.y], dtype=float)
    return np.asarray(footstep, dtype=float)[:2]


class ZmpReferenceGenerator:
    """
    Generates the reference ZMP to be tracked by a centroidal manager.

    The ZMP stands between the feet, moves linearly onto the support foot
    during each double support phase, stays there during single support, and
    returns between the feet after the last step.
    """

    def __init__(self, config: ZmpReferenceConfig):
        self.ssp_duration = config.ssp_duration
        self.dsp_duration = config.dsp_duration
        self.standing_duration = config.standing_duration
        self.zmp_func = PiecewiseFunc()
        self._phase_ends: List[float] = []
        self._phase_states: List[State] = []

    def generate(self, footsteps: Sequence, start_time: float = 0.0) -> PiecewiseFunc:
        """
        Build the reference ZMP function.

        Args:
            footsteps: Contacts (or [x, y] points); the first two are the initial feet
            start_time: Time at which the reference starts

        Returns:
            Piecewise function of the 2-D reference ZMP
        """
        if len(footsteps) < 2:
            raise ValueError(f"At least two footsteps are required, got {len(footsteps)}")

        self.zmp_func.clear_funcs()
        self.zmp_func.set_domain_lower_limit(start_time)
        self._phase_ends = []
        self._phase_states = []

        positions = [_to_xy(footstep) for footstep in footsteps]
        t = start_time
        zmp = 0.5 * (positions[0] + positions[1])
        t = self._append_constant(t, self.standing_duration, zmp, State.STANDING)

        for i in range(2, len(positions)):
            support_pos = positions[i - 1]
            t = self._append_transfer(t, zmp, support_pos)
            zmp = support_pos
            t = self._append_constant(t, self.ssp_duration, zmp, State.SINGLE_SUPPORT)

        final_zmp = 0.5 * (positions[-2] + positions[-1])
        t = self._append_transfer(t, zmp, final_zmp)
        self._append_constant(t, self.standing_duration, final_zmp, State.STANDING)
        return self.zmp_func

    @property
    def start_time(self) -> float:
        return self.zmp_func.domain_lower_limit()

    @property
    def end_time(self) -> float:
        return self.zmp_func.domain_upper_limit()

    def calc_ref_zmp(self, t: float) -> np.ndarray:
        """Reference ZMP (3-D, z = 0); the end values are held outside the planned window."""
        t = min(max(t, self.start_time), self.end_time)
        zmp = self.zmp_func(t)
        return np.array([zmp[0], zmp[1], 0.0])

    def state_at(self, t: float) -> State:
        if not self._phase_ends:
            raise ValueError("Reference ZMP has not been generated")
        idx = min(bisect_left(self._phase_ends, t), len(self._phase_ends) - 1)
        return self._phase_states[idx]

    def _append_constant(self, t: float, duration: float, zmp: np.ndarray, state: State) -> float:
        t_end = t + duration
        self.zmp_func.append_func(t_end, Constant(zmp))
        self._phase_ends.append(t_end)
        self._phase_states.append(state)
        return t_end

    def _append_transfer(self, t: float, zmp_from: np.ndarray, zmp_to: np.ndarray) -> float:
        t_end = t + self.dsp_duration
        self.zmp_func.append_func(t_end, LinearPolynomial([zmp_from, (zmp_to - zmp_from) / self.dsp_duration], t0=t))
        self._phase_ends.append(t_end)
        self._phase_states.append(State.DOUBLE_SUPPORT)
        return t_end
