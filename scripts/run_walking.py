#!/usr/bin/env python3
"""
Simulate straight walking with a centroidal manager tracking the reference ZMP.

Parameters come from a JSON configuration file and can be overridden from the
command line.
"""

import argparse
import logging
import os

import numpy as np
from tqdm import tqdm

from centroidal_mpc.config import (
    DdpZmpConfig,
    ZmpReferenceConfig,
    create_default_config_file,
    load_config_from_json,
    manager_config_from_dict,
)
from centroidal_mpc.controllers import create_centroidal_manager
from centroidal_mpc.generators import ZmpReferenceGenerator, generate_footsteps
from centroidal_mpc.utils import DataLogger
from centroidal_mpc.utils.visualization import plot_footsteps, plot_zmp_tracking, visualize_com_trajectory_3d

logger = logging.getLogger("run_walking")


def main():
    parser = argparse.ArgumentParser(
        description='Centroidal MPC simulation of bipedal walking',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default parameters (DDP ZMP MPC)
  python scripts/run_walking.py

  # Configuration file
  python scripts/run_walking.py --config configs/default.json

  # Linear MPC with ZMP limits
  python scripts/run_walking.py --method LinearMpcZmp --zmp-limit-margin 0.03

  # Write a default configuration file
  python scripts/run_walking.py --create-config configs/my_config.json
        """
    )

    parser.add_argument('--config', type=str, help='JSON configuration file')
    parser.add_argument('--create-config', type=str, metavar='FILE',
                        help='Write a default configuration file')

    # Reference ZMP
    parser.add_argument('--distance', type=float, help='Walking distance (m)')
    parser.add_argument('--step-length', type=float, dest='step_length', help='Step length (m)')
    parser.add_argument('--foot-spread', type=float, dest='foot_spread', help='Lateral foot offset (m)')
    parser.add_argument('--ssp-duration', type=float, dest='ssp_duration', help='Single support duration (s)')
    parser.add_argument('--dsp-duration', type=float, dest='dsp_duration', help='Double support duration (s)')
    parser.add_argument('--standing-duration', type=float, dest='standing_duration', help='Standing duration (s)')

    # Centroidal manager
    parser.add_argument('--method', type=str, choices=['DdpZmp', 'LinearMpcZmp'], help='Centroidal manager method')
    parser.add_argument('--dt', type=float, help='Control period (s)')
    parser.add_argument('--horizon-duration', type=float, dest='horizon_duration', help='MPC horizon duration (s)')
    parser.add_argument('--horizon-dt', type=float, dest='horizon_dt', help='MPC horizon step (s)')
    parser.add_argument('--ddp-max-iter', type=int, dest='ddp_max_iter', help='DDP iterations per tick')
    parser.add_argument('--zmp-limit-margin', type=float, dest='zmp_limit_margin',
                        help='ZMP limit around the reference for LinearMpcZmp (m)')
    parser.add_argument('--mass', type=float, dest='robot_mass', help='Robot mass (kg)')
    parser.add_argument('--com-z', type=float, dest='ref_com_z', help='Reference CoM height (m)')

    parser.add_argument('--no-visualization', action='store_true', help='Do not show the plots')
    parser.add_argument('--output-dir', type=str, default='results', help='Output directory')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    if args.create_config:
        os.makedirs(os.path.dirname(args.create_config) or '.', exist_ok=True)
        create_default_config_file(args.create_config, method=args.method or "DdpZmp")
        logger.info("Default configuration written to %s", args.create_config)
        return

    if args.config:
        manager_config, ref_config = load_config_from_json(args.config)
    else:
        manager_config, ref_config = DdpZmpConfig(), ZmpReferenceConfig()

    # Command line overrides
    manager_dict = vars(manager_config).copy()
    if args.method is not None and args.method.lower() != manager_config.method.lower():
        manager_dict = {"method": args.method}
    for key in ('dt', 'horizon_duration', 'horizon_dt', 'ddp_max_iter', 'zmp_limit_margin',
                'robot_mass', 'ref_com_z'):
        value = getattr(args, key)
        if value is not None:
            manager_dict[key] = value
    if manager_dict.get("method", "").lower() == "ddpzmp":
        manager_dict.pop("zmp_limit_margin", None)
    else:
        manager_dict.pop("ddp_max_iter", None)
    manager_config = manager_config_from_dict(manager_dict)

    ref_dict = vars(ref_config).copy()
    for key in ('distance', 'step_length', 'foot_spread', 'ssp_duration', 'dsp_duration', 'standing_duration'):
        value = getattr(args, key)
        if value is not None:
            ref_dict[key] = value
    ref_config = ZmpReferenceConfig(**ref_dict)

    os.makedirs(args.output_dir, exist_ok=True)

    print("=" * 60)
    print("Centroidal MPC walking simulation")
    print("=" * 60)
    print(f"  Method: {manager_config.method}")
    print(f"  Control period: {manager_config.dt} s")
    print(f"  Horizon: {manager_config.horizon_duration} s ({manager_config.horizon_steps} steps)")
    print(f"  Mass: {manager_config.robot_mass} kg, CoM height: {manager_config.ref_com_z} m")
    print(f"  Distance: {ref_config.distance} m, step length: {ref_config.step_length} m")
    print("=" * 60)

    footsteps = generate_footsteps(ref_config.distance, ref_config.step_length, ref_config.foot_spread)
    plot_footsteps(footsteps, output_dir=args.output_dir)
    foot_manager = ZmpReferenceGenerator(ref_config)
    foot_manager.generate(footsteps)

    manager = create_centroidal_manager(manager_config, foot_manager)
    data_logger = DataLogger()
    init_zmp = foot_manager.calc_ref_zmp(0.0)
    manager.reset(np.array([init_zmp[0], init_zmp[1], manager_config.ref_com_z]))
    manager.add_to_logger(data_logger)

    t_list = np.arange(0.0, foot_manager.end_time, manager_config.dt)
    com = manager.planned_com.copy()
    com_vel = manager.planned_com_vel.copy()
    for t in tqdm(t_list, desc="Running centroidal MPC"):
        manager.update(t, com, com_vel)
        data_logger.log(t)
        com, com_vel = manager.planned_com.copy(), manager.planned_com_vel.copy()

    name = manager.name
    t_log, _ = data_logger.get(name + "_planned_zmp_x")
    ref_zmp = np.column_stack([data_logger.get(name + "_ref_zmp_" + a)[1] for a in "xy"])
    planned_zmp = np.column_stack([data_logger.get(name + "_planned_zmp_" + a)[1] for a in "xy"])
    planned_com = np.column_stack([data_logger.get(name + "_planned_com_" + a)[1] for a in "xyz"])

    error = np.abs(planned_zmp - ref_zmp).max()
    logger.info("Maximum ZMP tracking error: %.4f m", error)
    if data_logger.has_entry(name + "_DDP_computationDuration"):
        _, durations = data_logger.get(name + "_DDP_computationDuration")
        logger.info("DDP solve duration: mean %.2f ms, max %.2f ms",
                    1e3 * durations.mean(), 1e3 * durations.max())

    np.savez(os.path.join(args.output_dir, 'centroidal_log.npz'), t=t_log, **data_logger.to_dict())

    if not args.no_visualization:
        plot_zmp_tracking(t_log, ref_zmp, planned_zmp, planned_com, axis=1,
                          title=f"ZMP tracking ({manager_config.method})").show()
        visualize_com_trajectory_3d(planned_com, planned_zmp)

    print("\nSimulation finished.")


if __name__ == "__main__":
    main()
