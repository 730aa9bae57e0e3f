"""Plots of the planned centroidal trajectory."""

import os
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go


def plot_footsteps(footsteps: Sequence, output_dir: Optional[str] = None):
    """Draw the foot contacts as rectangles; saved as footsteps.png if ``output_dir`` is given."""
    fig, ax = plt.subplots()
    for contact in footsteps:
        x, y = contact.x, contact.y
        w, h = contact.shape
        rect = plt.Rectangle((x - w/2, y - h/2), w, h, edgecolor='b', facecolor='none')
        ax.add_patch(rect)
    X = [contact.x for contact in footsteps]
    Y = [contact.y for contact in footsteps]
    ax.scatter(X, Y, color='r', s=0.2)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title("Footsteps (rectangles centered on contacts)")
    ax.set_aspect('equal')

    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
        fig.savefig(os.path.join(output_dir, 'footsteps.png'))
        plt.close(fig)
    return fig, ax


def plot_zmp_tracking(t: np.ndarray, ref_zmp: np.ndarray, planned_zmp: np.ndarray,
                      planned_com: np.ndarray, axis: int = 1, title: str = "ZMP tracking") -> go.Figure:
    """
    Plot reference ZMP, planned ZMP and planned CoM along one horizontal axis.

    Args:
        t: Time samples (shape: [n_steps])
        ref_zmp: Reference ZMP (shape: [n_steps, 2])
        planned_zmp: Planned ZMP (shape: [n_steps, 2])
        planned_com: Planned CoM (shape: [n_steps, 2 or 3])
        axis: 0 for x, 1 for y
    """
    axis_name = "XY"[axis]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=t, y=ref_zmp[:, axis],
        mode='lines',
        name='ref zmp',
        line=dict(color='red', dash='dash')
    ))
    fig.add_trace(go.Scatter(
        x=t, y=planned_zmp[:, axis],
        mode='lines',
        name='planned zmp',
        line=dict(color='green', dash='dash')
    ))
    fig.add_trace(go.Scatter(
        x=t, y=planned_com[:, axis],
        mode='lines',
        name='com',
        line=dict(color='black')
    ))
    fig.update_layout(
        title=title,
        xaxis_title="Time (s)",
        yaxis_title=f"{axis_name} Axis (m)",
        legend=dict(x=0, y=1),
        template="plotly_white"
    )
    return fig


def visualize_com_trajectory_3d(com_trajectory: np.ndarray, zmp_trajectory: Optional[np.ndarray] = None,
                                output_file: Optional[str] = None):
    """
    Plot the CoM trajectory in 3D, with the planned ZMP on the ground.

    Args:
        com_trajectory: CoM positions (shape: [n_steps, 3])
        zmp_trajectory: ZMP positions (shape: [n_steps, 2])
        output_file: If given, the figure is saved there instead of shown
    """
    fig = plt.figure(figsize=(12, 9))
    ax = fig.add_subplot(111, projection='3d')

    ax.plot(com_trajectory[:, 0], com_trajectory[:, 1], com_trajectory[:, 2],
            'b-', linewidth=2, alpha=0.6, label='CoM')
    if zmp_trajectory is not None:
        ax.plot(zmp_trajectory[:, 0], zmp_trajectory[:, 1], np.zeros(len(zmp_trajectory)),
                'g--', linewidth=1.5, alpha=0.8, label='ZMP')

    ax.scatter(*com_trajectory[0], color='green', s=100, marker='o', label='Start')
    ax.scatter(*com_trajectory[-1], color='red', s=100, marker='s', label='End')

    margin = 0.1
    x_min, x_max = com_trajectory[:, 0].min() - margin, com_trajectory[:, 0].max() + margin
    y_min, y_max = com_trajectory[:, 1].min() - margin, com_trajectory[:, 1].max() + margin
    z_max = com_trajectory[:, 2].max() + margin
    ax.set_xlim([x_min, x_max])
    ax.set_ylim([y_min, y_max])
    ax.set_zlim([0, z_max])
    ax.set_box_aspect([x_max - x_min, y_max - y_min, z_max])

    ax.set_xlabel('X (m)', fontsize=12)
    ax.set_ylabel('Y (m)', fontsize=12)
    ax.set_zlabel('Z (m)', fontsize=12)
    ax.set_title('Planned CoM trajectory', fontsize=14, fontweight='bold')
    ax.legend(loc='upper left')
    ax.grid(True, alpha=0.3)

    if output_file is not None:
        fig.savefig(output_file)
        plt.close(fig)
    else:
        plt.show()
    return fig, ax
