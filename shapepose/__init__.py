"""Contour matching and pose estimation for targets and balls."""

from .alignment import match_target_points, reorder_points, resolve_orientation
from .classify import find_circles, find_targets
from .config import Camera, PipelineConfig, load_config
from .geometry import GeometryError, Transform
from .library import ShapeLibrary, load_camera, load_library
from .models import Circle, CircleMatch, Pose, ReferenceShape, ShapeMatch, Sphere
from .pipeline import FrameResult, ShapePosePipeline
from .pose import PoseSolveError, estimate_ball_pose, estimate_target_pose, solve_pnp
from .raster import CanonicalRaster, normalized_contour_image
from .simplify import approximate_ngon

__all__ = [
    "Camera",
    "CanonicalRaster",
    "Circle",
    "CircleMatch",
    "FrameResult",
    "GeometryError",
    "PipelineConfig",
    "Pose",
    "PoseSolveError",
    "ReferenceShape",
    "ShapeLibrary",
    "ShapeMatch",
    "ShapePosePipeline",
    "Sphere",
    "Transform",
    "approximate_ngon",
    "estimate_ball_pose",
    "estimate_target_pose",
    "find_circles",
    "find_targets",
    "load_camera",
    "load_config",
    "load_library",
    "match_target_points",
    "normalized_contour_image",
    "reorder_points",
    "resolve_orientation",
    "solve_pnp",
]
