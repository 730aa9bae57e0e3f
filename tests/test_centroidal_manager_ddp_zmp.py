"""DDP ZMP centroidal manager tests."""

import logging

import numpy as np
import pytest

from centroidal_mpc.config import DdpZmpConfig
from centroidal_mpc.controllers import CentroidalManagerDdpZmp, ManagerState
from centroidal_mpc.errors import InvalidConfigurationError, ManagerNotResetError
from centroidal_mpc.utils import DataLogger


class StubFootManager:
    """Reference ZMP provider returning a fixed point and recording queries."""

    def __init__(self, zmp=(0.0, 0.0)):
        self.zmp = np.array([zmp[0], zmp[1], 0.0])
        self.times = []

    def calc_ref_zmp(self, t):
        self.times.append(t)
        return self.zmp.copy()


@pytest.fixture
def config():
    return DdpZmpConfig(robot_mass=50.0, ref_com_z=0.8, horizon_duration=1.0, horizon_dt=0.1, dt=0.005)


@pytest.fixture
def manager(config):
    return CentroidalManagerDdpZmp(config, StubFootManager())


def spy_plan_once(monkeypatch, manager):
    """Record the initial guess passed to each solve."""
    captured = []
    original = manager.ddp.plan_once

    def plan_once(ref_data_func, initial_param, current_t):
        captured.append(initial_param)
        return original(ref_data_func, initial_param, current_t)

    monkeypatch.setattr(manager.ddp, "plan_once", plan_once)
    return captured


class TestLifecycle:

    def test_update_before_reset(self, manager):
        assert manager.state == ManagerState.IDLE
        with pytest.raises(ManagerNotResetError):
            manager.update(0.0)

    def test_reset_starts_running(self, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        assert manager.state == ManagerState.RUNNING
        assert manager.ddp.config.horizon_steps == 10
        assert manager.ddp.config.max_iter == 1
        np.testing.assert_array_equal(manager.anchor_com, [0.0, 0.0, 0.8])

    def test_reset_publishes_static_equilibrium(self, manager):
        manager.reset(np.array([0.1, 0.2, 0.8]))
        np.testing.assert_array_equal(manager.current_planned_zmp(), [0.1, 0.2, 0.0])
        assert manager.current_planned_force_z() == pytest.approx(50.0 * manager.config.gravity)

    def test_config_is_copied(self, config):
        manager = CentroidalManagerDdpZmp(config, StubFootManager())
        config.robot_mass = 80.0
        assert manager.robot_mass == 50.0


class TestWarmStart:

    def test_first_solve_uses_static_equilibrium(self, monkeypatch, manager):
        com = np.array([0.03, -0.02, 0.8])
        manager.reset(com)
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0, com, np.zeros(3))

        assert len(captured) == 1
        u_list = captured[0].u_list
        assert len(u_list) == 10
        for u in u_list:
            np.testing.assert_allclose(u, [0.03, -0.02, 50.0 * manager.config.gravity])

    def test_previous_solution_is_reused(self, monkeypatch, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.foot_manager.zmp = np.array([0.0, 0.05, 0.0])
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0)
        previous = [u.copy() for u in manager.ddp.control_data.u_list]
        manager.update(0.005)

        assert len(captured) == 2
        for u, u_prev in zip(captured[1].u_list, previous):
            np.testing.assert_array_equal(u, u_prev)

    def test_horizon_change_invalidates_warm_start(self, monkeypatch, manager, caplog):
        com = np.array([0.0, 0.0, 0.8])
        manager.reset(com)
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0, com, np.zeros(3))

        manager.update_horizon(horizon_duration=0.5)
        assert manager.ddp.config.horizon_steps == 5
        with caplog.at_level(logging.WARNING):
            manager.update(0.005, com, np.zeros(3))

        u_list = captured[-1].u_list
        assert len(u_list) == 5
        for u in u_list:
            np.testing.assert_allclose(u, [0.0, 0.0, 50.0 * manager.config.gravity])
        assert manager.stale_warm_start_count == 1
        assert "Discard warm start" in caplog.text
        assert len(manager.ddp.control_data.u_list) == 5

    def test_horizon_step_change_invalidates_warm_start(self, monkeypatch, manager, caplog):
        com = np.array([0.0, 0.0, 0.8])
        manager.reset(com)
        manager.foot_manager.zmp = np.array([0.0, 0.05, 0.0])
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0, com, np.zeros(3))

        # Same number of steps on a coarser time grid
        manager.update_horizon(horizon_duration=2.0, horizon_dt=0.2)
        assert manager.ddp.config.horizon_steps == 10
        assert manager.ddp.config.horizon_dt == 0.2
        with caplog.at_level(logging.WARNING):
            manager.update(0.005, com, np.zeros(3))

        for u in captured[-1].u_list:
            np.testing.assert_allclose(u, [0.0, 0.0, 50.0 * manager.config.gravity])
        assert manager.stale_warm_start_count == 1
        assert "Discard warm start" in caplog.text

        # The new solution is reused again on the next tick
        previous = [u.copy() for u in manager.ddp.control_data.u_list]
        manager.update(0.01, com, np.zeros(3))
        for u, u_prev in zip(captured[-1].u_list, previous):
            np.testing.assert_array_equal(u, u_prev)
        assert manager.stale_warm_start_count == 1

    def test_horizon_change_before_first_solve(self, monkeypatch, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.update_horizon(horizon_dt=0.05)
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0)
        assert len(captured[0].u_list) == 20
        assert manager.stale_warm_start_count == 0

    def test_invalid_horizon_change(self, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        with pytest.raises(InvalidConfigurationError):
            manager.update_horizon(horizon_duration=0.01)
        assert manager.ddp.config.horizon_steps == 10

    def test_reset_discards_previous_solution(self, monkeypatch, manager):
        com = np.array([0.0, 0.0, 0.8])
        manager.reset(com)
        manager.foot_manager.zmp = np.array([0.0, 0.05, 0.0])
        manager.update(0.0)

        manager.reset(com)
        assert manager.ddp.control_data.u_list == []
        captured = spy_plan_once(monkeypatch, manager)
        manager.update(0.0)
        for u in captured[0].u_list:
            np.testing.assert_allclose(u, [0.0, 0.0, 50.0 * manager.config.gravity])
        assert manager.stale_warm_start_count == 0


class TestPlanning:

    def test_equilibrium(self, manager):
        com = np.array([0.0, 0.0, 0.8])
        manager.reset(com)
        for i in range(10):
            manager.update(i * 0.005)
        np.testing.assert_allclose(manager.planned_zmp, [0.0, 0.0, 0.0], atol=1e-6)
        assert manager.planned_force_z == pytest.approx(50.0 * manager.config.gravity, rel=1e-4)
        np.testing.assert_allclose(manager.planned_com, com, atol=1e-6)

    def test_planned_zmp_is_on_ground(self, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.foot_manager.zmp = np.array([0.02, 0.05, 0.0])
        manager.update(0.0)
        assert manager.current_planned_zmp().shape == (3,)
        assert manager.current_planned_zmp()[2] == 0.0

    def test_reference_data(self, manager):
        manager.foot_manager.zmp = np.array([0.3, -0.1, 0.0])
        ref_data = manager.calc_ref_data(2.0)
        np.testing.assert_array_equal(ref_data.zmp, [0.3, -0.1])
        assert ref_data.com_z == 0.8

    def test_reference_queried_over_horizon(self, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.foot_manager.times.clear()
        manager.update(0.5)
        times = manager.foot_manager.times
        assert min(times) == pytest.approx(0.5)
        assert max(times) == pytest.approx(0.5 + 1.0)

    def test_com_follows_reference(self, config):
        manager = CentroidalManagerDdpZmp(config, StubFootManager(zmp=(0.0, 0.05)))
        manager.reset(np.array([0.0, 0.0, 0.8]))
        for i in range(300):
            manager.update(i * config.dt)
        assert np.all(np.isfinite(manager.planned_com))
        assert 0.01 < manager.planned_com[1] < 0.09
        assert manager.planned_com[2] == pytest.approx(0.8, abs=0.02)

    def test_planned_state_is_used_without_measurement(self, config):
        config.use_actual_state_for_mpc = False
        manager = CentroidalManagerDdpZmp(config, StubFootManager(zmp=(0.0, 0.05)))
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.update(0.0)
        planned_com = manager.planned_com.copy()
        manager.update(0.005, com=np.array([1.0, 1.0, 0.8]))
        np.testing.assert_array_equal(manager.mpc_com, planned_com)

    def test_measured_state_is_used(self, manager):
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.update(0.0, com=np.array([0.01, 0.0, 0.8]), com_vel=np.array([0.1, 0.0, 0.0]))
        np.testing.assert_array_equal(manager.mpc_com, [0.01, 0.0, 0.8])
        np.testing.assert_array_equal(manager.mpc_com_vel, [0.1, 0.0, 0.0])


class TestTelemetry:

    def test_log_entries(self, manager):
        data_logger = DataLogger()
        manager.reset(np.array([0.0, 0.0, 0.8]))
        manager.add_to_logger(data_logger)
        for i in range(3):
            manager.update(i * 0.005)
            data_logger.log(i * 0.005)

        name = manager.name
        assert data_logger.latest(name + "_DDP_iter") == 1
        assert data_logger.latest(name + "_DDP_computationDuration") >= 0.0
        assert data_logger.latest(name + "_DDP_converged") in (0.0, 1.0)
        times, force_z = data_logger.get(name + "_planned_force_z")
        assert len(times) == 3
        assert force_z[-1] == pytest.approx(manager.planned_force_z)

    def test_remove_from_logger(self, manager):
        data_logger = DataLogger()
        manager.add_to_logger(data_logger)
        assert data_logger.has_entry(manager.name + "_DDP_iter")
        manager.remove_from_logger(data_logger)
        assert data_logger.entry_names() == []
