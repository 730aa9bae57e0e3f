"""Straight-line footstep sequence."""

from dataclasses import dataclass
from typing import List, Tuple

# Sole length and width (m)
DEFAULT_FOOT_SHAPE = (0.11, 0.05)


@dataclass
class Contact:
    """Rectangular foot contact centered on (x, y); ``shape`` is (length, width)."""

    x: float
    y: float
    shape: Tuple[float, float] = DEFAULT_FOOT_SHAPE


def generate_footsteps(distance: float, step_length: float, foot_spread: float,
                       shape: Tuple[float, float] = DEFAULT_FOOT_SHAPE) -> List[Contact]:
    """
    Generate footsteps walking straight along x, starting with the right foot.

    The first two contacts are the initial right and left feet. The last steps
    are shortened so that the walk ends at ``distance``, and the final contact
    brings the feet side by side.
    """
    if step_length <= 0.0:
        raise ValueError(f"step_length must be positive, got {step_length}")

    footsteps = [Contact(0.0, -foot_spread, shape), Contact(0.0, foot_spread, shape)]
    x = 0.0
    side = -1.0
    while distance - x > 1e-9:
        remaining = distance - x
        x += step_length if remaining > step_length else min(remaining, 0.5 * step_length)
        footsteps.append(Contact(x, side * foot_spread, shape))
        side = -side
    footsteps.append(Contact(x, side * foot_spread, shape))
    return footsteps
