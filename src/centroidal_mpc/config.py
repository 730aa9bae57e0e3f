"""Configuration classes for the centroidal managers and the reference generator.

Each manager policy extends `CentroidalManagerConfig` with its own MPC
parameters. Configurations are validated once at construction and are not
meant to be changed while a manager is running.
"""

import json
from dataclasses import asdict, dataclass, fields
from typing import Optional, Union

from .errors import InvalidConfigurationError

# Standard gravity (m/s^2)
GRAVITY = 9.80665


@dataclass
class CentroidalManagerConfig:
    """Parameters shared by all centroidal manager policies."""

    name: str = "CentroidalManager"
    method: str = ""

    # Control period (s)
    dt: float = 0.005

    robot_mass: float = 100.0
    gravity: float = GRAVITY

    # Reference CoM height (m)
    ref_com_z: float = 0.8

    # Use the measured CoM as MPC initial condition instead of the planned one
    use_actual_state_for_mpc: bool = True

    def __post_init__(self):
        if self.dt <= 0.0:
            raise InvalidConfigurationError(f"dt must be positive, got {self.dt}")
        if self.robot_mass <= 0.0:
            raise InvalidConfigurationError(f"robot_mass must be positive, got {self.robot_mass}")
        if self.ref_com_z <= 0.0:
            raise InvalidConfigurationError(f"ref_com_z must be positive, got {self.ref_com_z}")


def _horizon_steps(horizon_duration: float, horizon_dt: float) -> int:
    if horizon_dt <= 0.0:
        raise InvalidConfigurationError(f"horizon_dt must be positive, got {horizon_dt}")
    steps = int(horizon_duration / horizon_dt)
    if steps <= 0:
        raise InvalidConfigurationError(
            f"Horizon resolves to {steps} steps (horizon_duration={horizon_duration}, horizon_dt={horizon_dt})"
        )
    return steps


@dataclass
class DdpZmpConfig(CentroidalManagerConfig):
    """Configuration of the DDP-based ZMP MPC."""

    name: str = "DdpZmp"
    method: str = "DdpZmp"

    # Horizon duration and step (s)
    horizon_duration: float = 2.0
    horizon_dt: float = 0.02

    ddp_max_iter: int = 1

    def __post_init__(self):
        super().__post_init__()
        _horizon_steps(self.horizon_duration, self.horizon_dt)
        if self.ddp_max_iter < 1:
            raise InvalidConfigurationError(f"ddp_max_iter must be at least 1, got {self.ddp_max_iter}")

    @property
    def horizon_steps(self) -> int:
        return _horizon_steps(self.horizon_duration, self.horizon_dt)


@dataclass
class LinearMpcZmpConfig(CentroidalManagerConfig):
    """Configuration of the linear (LIPM jerk) ZMP MPC."""

    name: str = "LinearMpcZmp"
    method: str = "LinearMpcZmp"

    horizon_duration: float = 2.0
    horizon_dt: float = 0.02

    # ZMP tracking and jerk weights
    Q: float = 1.0
    R: float = 1e-6

    # If set, predicted ZMP is constrained to ref +/- margin (m)
    zmp_limit_margin: Optional[float] = None

    def __post_init__(self):
        super().__post_init__()
        _horizon_steps(self.horizon_duration, self.horizon_dt)
        if self.zmp_limit_margin is not None and self.zmp_limit_margin < 0.0:
            raise InvalidConfigurationError(
                f"zmp_limit_margin must be non-negative, got {self.zmp_limit_margin}"
            )

    @property
    def horizon_steps(self) -> int:
        return _horizon_steps(self.horizon_duration, self.horizon_dt)


@dataclass
class ZmpReferenceConfig:
    """Timing of the walking phases used to build the reference ZMP."""

    ssp_duration: float = 0.8
    dsp_duration: float = 0.2
    standing_duration: float = 1.0

    # Footstep generation
    distance: float = 1.2
    step_length: float = 0.2
    foot_spread: float = 0.1

    def __post_init__(self):
        for name in ("ssp_duration", "dsp_duration", "standing_duration"):
            if getattr(self, name) <= 0.0:
                raise InvalidConfigurationError(f"{name} must be positive, got {getattr(self, name)}")


ManagerConfig = Union[DdpZmpConfig, LinearMpcZmpConfig]

_MANAGER_CONFIG_CLASSES = {
    "ddpzmp": DdpZmpConfig,
    "linearmpczmp": LinearMpcZmpConfig,
}


def manager_config_from_dict(config_dict: dict) -> ManagerConfig:
    """Build a manager configuration; the class is selected by ``method``."""
    config_dict = dict(config_dict)
    method = str(config_dict.get("method", "DdpZmp"))
    config_cls = _MANAGER_CONFIG_CLASSES.get(method.lower())
    if config_cls is None:
        raise ValueError(f"Unknown centroidal manager method: {method}")
    known = {f.name for f in fields(config_cls)}
    unknown = set(config_dict) - known
    if unknown:
        raise InvalidConfigurationError(f"Unknown {config_cls.__name__} keys: {sorted(unknown)}")
    config_dict["method"] = config_cls.method
    return config_cls(**config_dict)


def load_config_from_json(config_file: str):
    """Load ``(manager_config, zmp_reference_config)`` from a JSON file."""
    with open(config_file, 'r') as f:
        config_dict = json.load(f)

    manager_config = manager_config_from_dict(config_dict.get("centroidal_manager", {}))
    ref_config = ZmpReferenceConfig(**config_dict.get("zmp_reference", {}))
    return manager_config, ref_config


def create_default_config_file(output_file: str, method: str = "DdpZmp"):
    """Write a configuration file holding the default values."""
    default_config = {
        "centroidal_manager": asdict(manager_config_from_dict({"method": method})),
        "zmp_reference": asdict(ZmpReferenceConfig()),
    }
    with open(output_file, 'w') as f:
        json.dump(default_config, f, indent=4)
