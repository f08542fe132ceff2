"""Project point sets into a fixed square frame and rasterize them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from .geometry import GeometryError, Transform, as_points


DEFAULT_CANVAS_SIZE = 256


@dataclass
class CanonicalRaster:
    """Result of :func:`normalized_contour_image`."""

    transform: Transform
    points: np.ndarray
    image: np.ndarray


def canvas_center(size: int) -> Tuple[float, float]:
    """Pixel-grid centre of an ``size x size`` canvas."""
    half = (size - 1) / 2.0
    return half, half


def canvas_corners(size: int) -> np.ndarray:
    last = float(size - 1)
    return np.array([[0.0, last], [0.0, 0.0], [last, 0.0], [last, last]], dtype=np.float64)


def rasterize(points, size: int) -> np.ndarray:
    """Fill a canvas-space polygon on a blank ``size x size`` mask."""

    image = np.zeros((size, size), dtype=np.uint8)
    pts = np.round(as_points(points)).astype(np.int32)
    if len(pts) >= 3:
        cv2.fillPoly(image, [pts.reshape(-1, 1, 2)], 255)
    return image


def normalized_contour_image(points, size: int = DEFAULT_CANVAS_SIZE) -> CanonicalRaster:
    """Map ``points`` onto a square canvas through their minimum-area rectangle.

    The rectangle corners, in ``cv2.boxPoints`` order, always land on the
    canvas corners bottom-left, top-left, top-right, bottom-right. The result
    is independent of position and scale but not of rotation.

    Raises
    ------
    GeometryError
        If the bounding rectangle has no area.
    """

    if size < 2:
        raise ValueError(f"canvas size must be at least 2, got {size}")

    pts = as_points(points)
    if len(pts) < 3:
        raise GeometryError("at least 3 points are needed to build a canonical frame")

    rect = cv2.minAreaRect(pts.astype(np.float32))
    (_, _), (width, height), _ = rect
    if width < 1e-6 or height < 1e-6:
        raise GeometryError(f"bounding rectangle is degenerate ({width:.3g} x {height:.3g})")

    box = cv2.boxPoints(rect)
    transform = Transform.perspective(box, canvas_corners(size))
    projected = transform.apply(pts)
    return CanonicalRaster(transform=transform, points=projected, image=rasterize(projected, size))


__all__ = [
    "CanonicalRaster",
    "DEFAULT_CANVAS_SIZE",
    "canvas_center",
    "canvas_corners",
    "normalized_contour_image",
    "rasterize",
]
