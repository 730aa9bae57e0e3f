"""Configuration tests."""

import json

import pytest

from centroidal_mpc.config import (
    DdpZmpConfig,
    LinearMpcZmpConfig,
    ZmpReferenceConfig,
    create_default_config_file,
    load_config_from_json,
    manager_config_from_dict,
)
from centroidal_mpc.errors import InvalidConfigurationError


class TestManagerConfig:

    def test_defaults(self):
        config = DdpZmpConfig()
        assert config.method == "DdpZmp"
        assert config.horizon_steps == 100
        assert config.ddp_max_iter == 1

    def test_horizon_steps(self):
        assert DdpZmpConfig(horizon_duration=1.0, horizon_dt=0.1).horizon_steps == 10
        assert LinearMpcZmpConfig(horizon_duration=1.6, horizon_dt=0.05).horizon_steps == 32

    @pytest.mark.parametrize("kwargs", [
        {"horizon_duration": 0.01, "horizon_dt": 0.02},
        {"horizon_dt": 0.0},
        {"robot_mass": 0.0},
        {"dt": -0.005},
        {"ref_com_z": 0.0},
        {"ddp_max_iter": 0},
    ])
    def test_invalid_ddp_config(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            DdpZmpConfig(**kwargs)

    def test_invalid_zmp_limit_margin(self):
        with pytest.raises(InvalidConfigurationError):
            LinearMpcZmpConfig(zmp_limit_margin=-0.01)

    def test_invalid_reference_timing(self):
        with pytest.raises(InvalidConfigurationError):
            ZmpReferenceConfig(dsp_duration=0.0)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            DdpZmpConfig(robot_mass=-1.0)


class TestConfigFromDict:

    def test_routing(self):
        assert isinstance(manager_config_from_dict({"method": "DdpZmp"}), DdpZmpConfig)
        assert isinstance(manager_config_from_dict({"method": "linearmpczmp"}), LinearMpcZmpConfig)
        assert isinstance(manager_config_from_dict({}), DdpZmpConfig)

    def test_method_is_normalized(self):
        assert manager_config_from_dict({"method": "ddpzmp"}).method == "DdpZmp"

    def test_values(self):
        config = manager_config_from_dict({"method": "DdpZmp", "robot_mass": 60.0, "horizon_dt": 0.05})
        assert config.robot_mass == 60.0
        assert config.horizon_steps == 40

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            manager_config_from_dict({"method": "PreviewControl"})

    def test_unknown_key(self):
        with pytest.raises(InvalidConfigurationError):
            manager_config_from_dict({"method": "DdpZmp", "zmp_limit_margin": 0.02})


class TestJsonConfig:

    def test_default_file_round_trip(self, tmp_path):
        config_file = tmp_path / "config.json"
        create_default_config_file(str(config_file))
        manager_config, ref_config = load_config_from_json(str(config_file))
        assert manager_config == DdpZmpConfig()
        assert ref_config == ZmpReferenceConfig()

    def test_linear_mpc_default_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        create_default_config_file(str(config_file), method="LinearMpcZmp")
        manager_config, _ = load_config_from_json(str(config_file))
        assert manager_config == LinearMpcZmpConfig()

    def test_partial_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "centroidal_manager": {"method": "LinearMpcZmp", "zmp_limit_margin": 0.03},
            "zmp_reference": {"step_length": 0.3},
        }))
        manager_config, ref_config = load_config_from_json(str(config_file))
        assert manager_config.zmp_limit_margin == 0.03
        assert manager_config.horizon_dt == 0.02
        assert ref_config.step_length == 0.3
        assert ref_config.ssp_duration == 0.8
