"""Fine alignment of coarse shape matches.

A coarse :class:`~shapepose.models.ShapeMatch` only says *which* reference a
contour resembles. This module works out *how* they line up: both shapes are
projected into the canonical square frame, the observed raster is tested at a
few discrete rotations against the reference raster, and the observed contour
is reduced to the reference vertex count. Both vertex sequences are then put
in a canonical winding and start index so that vertex ``i`` of one corresponds
to vertex ``i`` of the other.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .config import PipelineConfig
from .geometry import GeometryError, Transform, as_points
from .models import ReferenceShape, ShapeMatch
from .raster import canvas_center, normalized_contour_image
from .simplify import approximate_ngon
from .utils.logging import get_logger


LOGGER = get_logger("alignment")


def rotate_raster(image: np.ndarray, angle_deg: float) -> np.ndarray:
    """Rotate a square mask about its pixel-grid centre."""

    size = image.shape[0]
    if angle_deg == 0:
        return image
    rotation = Transform.rotation(angle_deg, canvas_center(size))
    return cv2.warpAffine(
        image,
        rotation.affine,
        (image.shape[1], image.shape[0]),
        flags=cv2.INTER_NEAREST,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )


def raster_disagreement(a: np.ndarray, b: np.ndarray) -> int:
    """Number of pixels set in exactly one of the two masks."""
    return int(np.count_nonzero((a > 0) != (b > 0)))


def resolve_orientation(
    observed: np.ndarray,
    reference: np.ndarray,
    rotations: Sequence[float] = (0.0, 90.0, 180.0, 270.0),
) -> Tuple[float, int]:
    """Pick the rotation of ``observed`` that best overlaps ``reference``.

    Returns the winning angle and its pixel disagreement. On ties the
    earliest candidate in ``rotations`` wins.
    """

    if observed.shape != reference.shape:
        raise ValueError(f"raster shapes differ: {observed.shape} vs {reference.shape}")

    best_angle: Optional[float] = None
    best_count = 0
    for angle in rotations:
        count = raster_disagreement(rotate_raster(observed, angle), reference)
        if best_angle is None or count < best_count:
            best_angle = float(angle)
            best_count = count

    if best_angle is None:
        raise ValueError("no candidate rotations given")
    return best_angle, best_count


def reorder_points(points, origin: Tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """Canonical winding and start index for a closed vertex sequence.

    The sequence is reversed when its signed area is negative, then rolled so
    it starts at the vertex closest to ``origin``. Applying it twice gives the
    same result as applying it once.
    """

    pts = as_points(points)
    if len(pts) == 0:
        return pts
    if len(pts) >= 3 and cv2.contourArea(pts.astype(np.float32), oriented=True) < 0:
        pts = pts[::-1]
    offsets = pts - np.asarray(origin, dtype=np.float64)
    start = int(np.argmin(np.einsum("ij,ij->i", offsets, offsets)))
    return np.roll(pts, -start, axis=0)


def align_match(match: ShapeMatch, config: PipelineConfig = PipelineConfig()) -> Optional[ShapeMatch]:
    """Refine one coarse match into a point-for-point correspondence.

    Returns ``None`` when the match cannot be aligned.
    """

    size = config.canvas_size
    try:
        observed = normalized_contour_image(match.contour, size)
        reference = normalized_contour_image(match.shape.points, size)
    except GeometryError as exc:
        LOGGER.debug("Dropping %s match: %s", match.shape.name, exc)
        return None

    angle, disagreement = resolve_orientation(observed.image, reference.image, config.rotations)
    rotation = Transform.rotation(angle, canvas_center(size)) if angle else Transform.identity()
    rotated = rotation.apply(observed.points)

    vertex_count = len(match.shape)
    simplified = approximate_ngon(
        rotated,
        vertex_count,
        start=config.approx_start,
        end=config.approx_end,
        step=config.approx_step,
    )
    if simplified is None:
        LOGGER.info(
            "Skipping %s match: contour does not reduce to %d vertices",
            match.shape.name,
            vertex_count,
        )
        return None

    observed_ordered = reorder_points(simplified)
    reference_ordered = reorder_points(reference.points)

    try:
        to_image = (rotation @ observed.transform).inverse()
        to_model = reference.transform.inverse()
        image_points = to_image.apply(observed_ordered)
        model_points = to_model.apply(reference_ordered)
    except GeometryError as exc:
        LOGGER.debug("Dropping %s match: %s", match.shape.name, exc)
        return None

    return ShapeMatch(
        contour=image_points,
        shape=ReferenceShape(name=match.shape.name, points=model_points),
        score=disagreement / float(size * size),
        rotation_deg=angle,
    )


def match_target_points(
    matches: Iterable[ShapeMatch],
    config: PipelineConfig = PipelineConfig(),
) -> List[ShapeMatch]:
    """Align every coarse match, dropping those that cannot be aligned."""

    refined: List[ShapeMatch] = []
    for match in matches:
        result = align_match(match, config)
        if result is not None:
            refined.append(result)
    return refined


__all__ = [
    "align_match",
    "match_target_points",
    "raster_disagreement",
    "reorder_points",
    "resolve_orientation",
    "rotate_raster",
]
