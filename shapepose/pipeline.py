"""Contour list in, target and ball poses out."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .alignment import match_target_points
from .classify import find_circles, find_targets
from .config import Camera, PipelineConfig
from .library import ShapeLibrary
from .models import CircleMatch, Pose, ShapeMatch
from .pose import estimate_ball_pose, estimate_target_pose
from .utils.logging import get_logger


LOGGER = get_logger("pipeline")


@dataclass
class FrameResult:
    """Everything produced for one contour list."""

    targets: List[ShapeMatch] = field(default_factory=list)
    target_poses: List[Pose] = field(default_factory=list)
    circles: List[CircleMatch] = field(default_factory=list)
    ball_poses: List[Pose] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)


class ShapePosePipeline:
    """Classify contours, align targets and solve their poses.

    The library, camera and config are treated as read-only; nothing is
    carried over between calls to :meth:`process`.
    """

    def __init__(
        self,
        library: ShapeLibrary,
        camera: Camera,
        config: PipelineConfig = PipelineConfig(),
    ) -> None:
        self.library = library
        self.camera = camera
        self.config = config

    def process(self, contours: Iterable) -> FrameResult:
        contours = list(contours)
        result = FrameResult()
        start = time.perf_counter()

        stage = time.perf_counter()
        targets = find_targets(
            contours,
            self.library.targets,
            self.config.target_min_area,
            self.config.target_max_distance,
        )
        circles = []
        if self.library.sphere is not None:
            circles = find_circles(contours, self.config.circle_min_area, self.config.circle_min_fill)
        result.timings["match"] = time.perf_counter() - stage

        stage = time.perf_counter()
        if self.config.align_targets:
            targets = match_target_points(targets, self.config)
        result.timings["align"] = time.perf_counter() - stage

        stage = time.perf_counter()
        result.targets = targets
        result.target_poses = estimate_target_pose(targets, self.camera)
        result.circles = circles
        if self.library.sphere is not None:
            result.ball_poses = estimate_ball_pose(circles, self.library.sphere, self.camera)
        result.timings["pose"] = time.perf_counter() - stage

        result.timings["total"] = time.perf_counter() - start
        LOGGER.debug(
            "%d contour(s): %d target(s), %d ball(s) in %.2f ms",
            len(contours),
            len(result.targets),
            len(result.circles),
            result.timings["total"] * 1000.0,
        )
        return result


__all__ = ["FrameResult", "ShapePosePipeline"]
