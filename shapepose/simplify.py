"""Reduce a contour to a polygon with an exact vertex count."""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from .geometry import as_points


def approximate_ngon(
    points,
    n: int,
    start: float = 0.0,
    end: float = 100.0,
    step: float = 0.1,
) -> Optional[np.ndarray]:
    """Search Douglas-Peucker tolerances for an ``n``-vertex approximation.

    Tolerances ``start, start + step, ...`` below ``end`` are tried in order.
    Vertex counts only shrink as the tolerance grows, so the search stops as
    soon as an approximation has fewer than ``n`` vertices.

    Parameters
    ----------
    points:
        Closed point sequence.
    n:
        Required vertex count, at least 3.
    start, end, step:
        Tolerance range in the units of ``points``.

    Returns
    -------
    Optional[np.ndarray]
        The first ``(n, 2)`` approximation found, or ``None`` when the count
        jumps below ``n`` or the range is exhausted.
    """

    if n < 3:
        raise ValueError(f"polygons need at least 3 vertices, got {n}")
    if step <= 0:
        raise ValueError(f"tolerance step must be positive, got {step}")

    curve = as_points(points).astype(np.float32)
    if len(curve) < n:
        return None

    index = 0
    epsilon = start
    while epsilon < end:
        approx = cv2.approxPolyDP(curve, epsilon, True).reshape(-1, 2)
        if len(approx) < n:
            return None
        if len(approx) == n:
            return approx.astype(np.float64)
        index += 1
        epsilon = start + index * step

    return None


__all__ = ["approximate_ngon"]
