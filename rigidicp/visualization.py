"""Visualization utilities for ICP results."""

import matplotlib.pyplot as plt
import numpy as np

from .matcher import apply_transformation


def plot_convergence(errors, save_path='icp_convergence.png', show=True):
    """
    Plot ICP convergence curve.

    Args:
        errors: List of per-iteration errors (ICP.errors)
        save_path: Path to save the plot, or None to skip saving
        show: Whether to open the plot window

    Returns:
        The matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(12, 7))

    ax.plot(np.arange(1, len(errors) + 1), errors, marker='o', linewidth=2, markersize=4,
            color='#2E86AB', label='Registration Error')

    ax.set_xlabel('Iteration', fontsize=12)
    ax.set_ylabel('Error (sum of residual norms)', fontsize=12)

    title = 'ICP Convergence'
    if len(errors) > 0:
        title += f"\nInitial: {errors[0]:.4f} → Final: {errors[-1]:.4f}"
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='best')

    plt.tight_layout()
    if save_path is not None:
        plt.savefig(save_path, dpi=150)
        print(f"Convergence plot saved to '{save_path}'")
    if show:
        plt.show()
    return fig


def plot_alignment(reference, target, aligned=None, save_path='icp_alignment.png', show=True):
    """
    Scatter the reference, target and (optionally) aligned reference.

    2D point sets are drawn on a plane, 3D point sets on 3D axes.
    Colors: red = reference, blue = target, green = aligned.

    Returns:
        The matplotlib Figure
    """
    reference = np.asarray(reference, dtype=float)
    target = np.asarray(target, dtype=float)
    dim = reference.shape[1]

    fig = plt.figure(figsize=(10, 8))
    if dim == 3:
        ax = fig.add_subplot(111, projection='3d')
    else:
        ax = fig.add_subplot(111)

    layers = [(reference, 'red', 'Reference'), (target, 'blue', 'Target')]
    if aligned is not None:
        layers.append((np.asarray(aligned, dtype=float), 'green', 'Aligned'))

    for points, color, label in layers:
        coords = [points[:, k] for k in range(min(dim, 3))]
        ax.scatter(*coords, c=color, s=20, alpha=0.7, label=label)

    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    if dim == 3:
        ax.set_zlabel('Z')
    else:
        ax.set_aspect('equal', adjustable='datalim')
        ax.grid(True, alpha=0.3)
    ax.set_title('ICP Alignment', fontsize=14, fontweight='bold')
    ax.legend(loc='best')

    plt.tight_layout()
    if save_path is not None:
        plt.savefig(save_path, dpi=150)
        print(f"Alignment plot saved to '{save_path}'")
    if show:
        plt.show()
    return fig


def to_o3d(points, color=None):
    """
    Convert a point set to an Open3D PointCloud (requires the 'viewer' extra).

    Args:
        points: Array (N, 2) or (N, 3); 2D points are placed at z = 0
        color: Optional uniform color [r, g, b]

    Returns:
        Open3D PointCloud object
    """
    import open3d as o3d

    points = np.asarray(points, dtype=float)
    if points.shape[1] == 2:
        points = np.hstack([points, np.zeros((points.shape[0], 1))])

    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(points)
    if color is not None:
        pcd.paint_uniform_color(color)
    return pcd


def show_alignment(reference, target, rotation, translation):
    """
    Open an Open3D window with the aligned reference (red) over the target (blue).

    Args:
        reference: Reference points (N, D)
        target: Target points (N, D)
        rotation: Rotation matrix from ICP.solve()
        translation: Translation vector from ICP.solve()
    """
    import open3d as o3d

    aligned = apply_transformation(reference, translation, rotation)
    o3d.visualization.draw_geometries(
        [to_o3d(aligned, [1, 0, 0]), to_o3d(target, [0, 0, 1])],
        window_name="Final State (After ICP Alignment)",
        width=1024,
        height=768
    )
