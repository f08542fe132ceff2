"""Coarse contour classification against targets and circles."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import cv2
import numpy as np

from .geometry import as_points, contour_area
from .models import Circle, CircleMatch, ReferenceShape, ShapeMatch
from .utils.logging import get_logger


LOGGER = get_logger("classify")


def _candidate_contours(contours: Iterable, min_area: float):
    """Yield ``(points, area)`` for contours above the area floor."""

    for contour in contours:
        points = as_points(contour)
        area = contour_area(points)
        if area <= 0 or area < min_area:
            LOGGER.debug("Ignoring contour with area %.1f (floor %.1f)", area, min_area)
            continue
        yield points, area


def find_targets(
    contours: Iterable,
    shapes: Sequence[ReferenceShape],
    min_area: float,
    max_distance: float,
) -> List[ShapeMatch]:
    """Match each contour to its closest reference shape.

    Distances come from ``cv2.matchShapes`` (Hu-moment method I1), which is
    invariant to translation, scale and rotation. A contour is kept when its
    best distance is strictly below ``max_distance``.
    """

    matches: List[ShapeMatch] = []
    for points, _ in _candidate_contours(contours, min_area):
        contour = points.astype(np.float32)
        best: Optional[ReferenceShape] = None
        best_distance = max_distance
        for shape in shapes:
            distance = cv2.matchShapes(contour, shape.points.astype(np.float32), cv2.CONTOURS_MATCH_I1, 0)
            if distance < best_distance:
                best = shape
                best_distance = distance

        if best is not None:
            matches.append(ShapeMatch(contour=points, shape=best, score=float(best_distance)))

    LOGGER.debug("Matched %d target contour(s)", len(matches))
    return matches


def find_circles(contours: Iterable, min_area: float, min_fill: float) -> List[CircleMatch]:
    """Keep contours that fill most of their minimal enclosing circle."""

    matches: List[CircleMatch] = []
    for points, area in _candidate_contours(contours, min_area):
        (cx, cy), radius = cv2.minEnclosingCircle(points.astype(np.float32))
        circle = Circle(radius=float(radius), center=(float(cx), float(cy)))
        if circle.area <= 0:
            continue

        fill_ratio = min(area / circle.area, 1.0)
        if fill_ratio > min_fill:
            matches.append(CircleMatch(contour=points, circle=circle, fill_ratio=fill_ratio))

    LOGGER.debug("Matched %d circular contour(s)", len(matches))
    return matches


__all__ = ["find_circles", "find_targets"]
