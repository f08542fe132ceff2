"""Overlay helpers for matches and poses."""
from __future__ import annotations

from typing import Iterable, Tuple

import cv2
import numpy as np

from .config import Camera
from .models import CircleMatch, Pose, ShapeMatch


def draw_axis(image: np.ndarray, pose: Pose, camera: Camera, size: float = 1.0, thickness: int = 4) -> np.ndarray:
    """Draw the pose frame axes (x red, y green, z blue). Failed poses are skipped."""
    if not pose.ok:
        return image
    cv2.drawFrameAxes(
        image,
        camera.matrix,
        camera.distortion,
        np.asarray(pose.rvec, dtype=np.float64),
        np.asarray(pose.tvec, dtype=np.float64),
        size,
        thickness,
    )
    return image


def draw_target_matches(
    image: np.ndarray,
    matches: Iterable[ShapeMatch],
    color: Tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
) -> np.ndarray:
    for match in matches:
        pts = np.round(np.asarray(match.contour)).astype(np.int32).reshape(-1, 1, 2)
        cv2.polylines(image, [pts], True, color, thickness, cv2.LINE_AA)
        x, y = pts[0, 0]
        cv2.putText(
            image,
            f"{match.shape.name} {match.score:.3f}",
            (int(x) + 5, int(y) - 5),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            1,
            cv2.LINE_AA,
        )
    return image


def draw_circle_matches(
    image: np.ndarray,
    circles: Iterable[CircleMatch],
    color: Tuple[int, int, int] = (255, 0, 0),
    thickness: int = 2,
) -> np.ndarray:
    for match in circles:
        cx, cy = match.circle.center
        center = (int(round(cx)), int(round(cy)))
        cv2.circle(image, center, int(round(match.circle.radius)), color, thickness, cv2.LINE_AA)
        cv2.circle(image, center, 2, color, -1)
    return image


__all__ = ["draw_axis", "draw_circle_matches", "draw_target_matches"]
