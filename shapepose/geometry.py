"""Small linear-algebra helpers for 2-D point sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2
import numpy as np


class GeometryError(ValueError):
    """Raised when a point set or transform is degenerate."""


def as_points(points) -> np.ndarray:
    """Return ``points`` as an ``(N, 2)`` float64 array.

    Accepts lists of ``(x, y)`` tuples as well as OpenCV contours shaped
    ``(N, 1, 2)``.
    """

    array = np.asarray(points, dtype=np.float64)
    if array.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    array = array.reshape(-1, 2)
    return array


def contour_area(points) -> float:
    """Unsigned area enclosed by a closed point sequence."""
    pts = as_points(points)
    if len(pts) < 3:
        return 0.0
    return float(cv2.contourArea(pts.astype(np.float32)))


@dataclass(frozen=True)
class Transform:
    """3x3 homogeneous transform acting on 2-D points.

    ``a @ b`` is the transform that applies ``b`` first and then ``a``, which
    matches matrix multiplication of the underlying matrices.
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=np.float64)
        if matrix.shape == (2, 3):
            matrix = np.vstack([matrix, [0.0, 0.0, 1.0]])
        if matrix.shape != (3, 3):
            raise ValueError(f"transform must be 3x3, got {matrix.shape}")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    @classmethod
    def identity(cls) -> "Transform":
        return cls(np.eye(3))

    @classmethod
    def perspective(cls, src: Sequence[Sequence[float]], dst: Sequence[Sequence[float]]) -> "Transform":
        """Projective transform mapping four ``src`` corners onto ``dst``."""

        src_arr = as_points(src).astype(np.float32)
        dst_arr = as_points(dst).astype(np.float32)
        if src_arr.shape != (4, 2) or dst_arr.shape != (4, 2):
            raise ValueError("perspective transforms need exactly four corner pairs")
        try:
            matrix = cv2.getPerspectiveTransform(src_arr, dst_arr)
        except cv2.error as exc:
            raise GeometryError("corner set does not define a projective transform") from exc
        return cls(matrix)

    @classmethod
    def rotation(cls, angle_deg: float, center: Tuple[float, float] = (0.0, 0.0)) -> "Transform":
        """Rotation about ``center`` using the OpenCV angle convention."""

        matrix = cv2.getRotationMatrix2D((float(center[0]), float(center[1])), float(angle_deg), 1.0)
        return cls(matrix)

    def __matmul__(self, other: "Transform") -> "Transform":
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(self.matrix @ other.matrix)

    def then(self, other: "Transform") -> "Transform":
        """Apply this transform first, then ``other``."""
        return other @ self

    def inverse(self) -> "Transform":
        det = float(np.linalg.det(self.matrix))
        if not np.isfinite(det) or abs(det) < 1e-12:
            raise GeometryError("transform is singular and cannot be inverted")
        return Transform(np.linalg.inv(self.matrix))

    @property
    def affine(self) -> np.ndarray:
        """Top two rows, as expected by ``cv2.warpAffine``."""
        return np.array(self.matrix[:2])

    def apply(self, points) -> np.ndarray:
        """Map points through the transform, returning an ``(N, 2)`` array."""

        pts = as_points(points)
        if len(pts) == 0:
            return pts
        homogeneous = np.hstack([pts, np.ones((len(pts), 1))]) @ self.matrix.T
        w = homogeneous[:, 2:3]
        if np.any(np.abs(w) < 1e-12):
            raise GeometryError("point maps to infinity under transform")
        return homogeneous[:, :2] / w


__all__ = ["GeometryError", "Transform", "as_points", "contour_area"]
