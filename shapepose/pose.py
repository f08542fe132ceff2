"""Perspective-n-Point pose estimation for matched targets and balls."""

from __future__ import annotations

from typing import Iterable, List, Tuple

import cv2
import numpy as np

from .config import Camera
from .geometry import as_points
from .models import CircleMatch, Pose, ShapeMatch, Sphere
from .utils.logging import get_logger


LOGGER = get_logger("pose")

MIN_CORRESPONDENCES = 4


class PoseSolveError(RuntimeError):
    """Raised when correspondences cannot produce a pose."""


def lift_to_plane(points) -> np.ndarray:
    """Place 2-D model points on the ``z = 0`` plane."""
    pts = as_points(points)
    return np.hstack([pts, np.zeros((len(pts), 1))])


def _is_collinear(points: np.ndarray) -> bool:
    centered = points - points.mean(axis=0)
    singular = np.linalg.svd(centered, compute_uv=False)
    if singular[0] <= 1e-9:
        return True
    return singular[1] <= 1e-6 * singular[0]


def solve_pnp(object_points, image_points, camera: Camera) -> Tuple[np.ndarray, np.ndarray, float]:
    """Solve for the rotation and translation of ``object_points``.

    Parameters
    ----------
    object_points:
        ``(N, 3)`` model points.
    image_points:
        ``(N, 2)`` image points in the same order.
    camera:
        Intrinsics and distortion used for projection.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, float]
        Rodrigues rotation vector, translation vector and RMS reprojection
        error in pixels. A large error means a converged but poor fit.

    Raises
    ------
    PoseSolveError
        If the correspondences are insufficient or degenerate, or the solver
        does not return a finite pose.
    """

    obj = np.asarray(object_points, dtype=np.float64).reshape(-1, 3)
    img = as_points(image_points)

    if len(obj) != len(img):
        raise PoseSolveError(f"{len(obj)} model points but {len(img)} image points")
    if len(obj) < MIN_CORRESPONDENCES:
        raise PoseSolveError(f"need at least {MIN_CORRESPONDENCES} correspondences, got {len(obj)}")
    if _is_collinear(img):
        raise PoseSolveError("image points are collinear")
    if _is_collinear(obj):
        raise PoseSolveError("model points are collinear")

    try:
        ok, rvec, tvec = cv2.solvePnP(obj, img, camera.matrix, camera.distortion, flags=cv2.SOLVEPNP_ITERATIVE)
    except cv2.error as exc:
        raise PoseSolveError(f"solvePnP failed: {exc}") from exc

    if not ok or rvec is None or tvec is None:
        raise PoseSolveError("solvePnP did not return a pose")
    rvec = rvec.reshape(3)
    tvec = tvec.reshape(3)
    if not (np.all(np.isfinite(rvec)) and np.all(np.isfinite(tvec))):
        raise PoseSolveError("solvePnP returned a non-finite pose")

    projected, _ = cv2.projectPoints(obj, rvec, tvec, camera.matrix, camera.distortion)
    residual = projected.reshape(-1, 2) - img
    error = float(np.sqrt(np.mean(np.sum(residual * residual, axis=1))))
    return rvec, tvec, error


def _solve_for(match, object_points, image_points, camera: Camera, label: str) -> Pose:
    try:
        rvec, tvec, error = solve_pnp(object_points, image_points, camera)
    except PoseSolveError as exc:
        LOGGER.warning("No pose for %s: %s", label, exc)
        return Pose(match=match, failure=str(exc))
    return Pose(match=match, rvec=rvec, tvec=tvec, reprojection_error=error)


def estimate_target_pose(matches: Iterable[ShapeMatch], camera: Camera) -> List[Pose]:
    """One pose per aligned target match, planar model at ``z = 0``."""

    poses: List[Pose] = []
    for match in matches:
        model = lift_to_plane(match.shape.points)
        poses.append(_solve_for(match, model, match.contour, camera, f"target {match.shape.name!r}"))
    return poses


def estimate_ball_pose(circles: Iterable[CircleMatch], sphere: Sphere, camera: Camera) -> List[Pose]:
    """One pose per circle, pairing sphere extremes with circle extremes.

    A circle carries no orientation, so the extremes stand in for true
    correspondences. Partial occlusion shifts the fitted circle and makes the
    estimate wobble.
    """

    model = sphere.points()
    poses: List[Pose] = []
    for match in circles:
        poses.append(_solve_for(match, model, match.circle.points(), camera, "ball"))
    return poses


__all__ = [
    "MIN_CORRESPONDENCES",
    "PoseSolveError",
    "estimate_ball_pose",
    "estimate_target_pose",
    "lift_to_plane",
    "solve_pnp",
]
