"""
rigidicp - Rigid point set registration using Iterative Closest Point (ICP)

A small registration library featuring:
- Closed-form rotation/translation fitting (Kabsch method via SVD)
- Brute-force nearest neighbor correspondence search
- 2D and 3D point sets with a fixed iteration budget
- Convergence and alignment plots
"""

from .errors import ICPError, ShapeMismatchError, InvalidConfigurationError, DegenerateInputError
from .icp import ICP, ICPSettings
from .matcher import (get_centroid, solve_for_optimal_rotation, solve_for_optimal_translation,
                      rmse, apply_transformation)
from .point import Point
from .visualization import plot_convergence, plot_alignment

__version__ = "1.0.0"
__all__ = ["ICP", "ICPSettings", "Point",
           "get_centroid", "solve_for_optimal_rotation", "solve_for_optimal_translation",
           "rmse", "apply_transformation",
           "ICPError", "ShapeMismatchError", "InvalidConfigurationError", "DegenerateInputError",
           "plot_convergence", "plot_alignment"]
