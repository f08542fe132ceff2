"""Records exchanged between the classification, alignment and pose stages."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from scipy.spatial.transform import Rotation

from .geometry import as_points


def _frozen_array(values, width: int) -> np.ndarray:
    array = np.array(values, dtype=np.float64).reshape(-1, width)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class ReferenceShape:
    """Named planar shape in model space."""

    name: str
    points: np.ndarray

    def __post_init__(self) -> None:
        points = _frozen_array(as_points(self.points), 2)
        if len(points) < 3:
            raise ValueError(f"reference shape {self.name!r} needs at least 3 points, got {len(points)}")
        object.__setattr__(self, "points", points)

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class ShapeMatch:
    """Observed contour matched to a reference shape.

    Coarse matches carry the raw contour and the moment distance. Aligned
    matches carry correspondence-ordered points on both sides, the winning
    canvas rotation and the normalized raster disagreement.
    """

    contour: np.ndarray
    shape: ReferenceShape
    score: float
    rotation_deg: Optional[float] = None

    @property
    def aligned(self) -> bool:
        return self.rotation_deg is not None


@dataclass(frozen=True)
class Sphere:
    """Ball model: radius and centre in model space."""

    radius: float
    center: Union[Sequence[float], np.ndarray] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if not self.radius > 0:
            raise ValueError(f"sphere radius must be positive, got {self.radius}")
        center = _frozen_array(self.center, 3)
        if center.shape != (1, 3):
            raise ValueError("sphere centre must be a single 3-D point")
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "center", center[0])

    def points(self) -> np.ndarray:
        """Centre followed by the +x, +y, -x, -y extremes."""
        r = self.radius
        offsets = np.array([[0, 0, 0], [r, 0, 0], [0, r, 0], [-r, 0, 0], [0, -r, 0]], dtype=np.float64)
        return offsets + self.center


@dataclass(frozen=True)
class Circle:
    """Image-space circle fitted around a contour."""

    radius: float
    center: Tuple[float, float]

    def __post_init__(self) -> None:
        if not self.radius >= 0:
            raise ValueError(f"circle radius must be non-negative, got {self.radius}")
        x, y = self.center
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "center", (float(x), float(y)))

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius

    def points(self) -> np.ndarray:
        """Centre followed by the +x, +y, -x, -y extremes."""
        r = self.radius
        offsets = np.array([[0, 0], [r, 0], [0, r], [-r, 0], [0, -r]], dtype=np.float64)
        return offsets + np.asarray(self.center, dtype=np.float64)


@dataclass
class CircleMatch:
    contour: np.ndarray
    circle: Circle
    fill_ratio: float


@dataclass
class Pose:
    """Pose estimate for one match.

    A failed solve keeps ``rvec``/``tvec`` as ``None`` and records the reason
    in ``failure``; check :attr:`ok` before drawing or publishing.
    """

    match: Union[ShapeMatch, CircleMatch]
    rvec: Optional[np.ndarray] = None
    tvec: Optional[np.ndarray] = None
    reprojection_error: float = math.inf
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def rotation_matrix(self) -> np.ndarray:
        if not self.ok:
            raise ValueError(f"pose is unavailable: {self.failure}")
        matrix, _ = cv2.Rodrigues(np.asarray(self.rvec, dtype=np.float64).reshape(3, 1))
        return matrix

    def euler_angles(self) -> np.ndarray:
        """Roll, pitch and yaw in degrees (extrinsic x-y-z)."""
        if not self.ok:
            raise ValueError(f"pose is unavailable: {self.failure}")
        rotvec = np.asarray(self.rvec, dtype=np.float64).reshape(3)
        return Rotation.from_rotvec(rotvec).as_euler("xyz", degrees=True)


__all__ = ["Circle", "CircleMatch", "Pose", "ReferenceShape", "ShapeMatch", "Sphere"]
