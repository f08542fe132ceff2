"""Configuration helpers for the shapepose pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

import numpy as np
import yaml


@dataclass(frozen=True)
class Camera:
    """Camera intrinsic matrix and lens distortion coefficients."""

    matrix: np.ndarray
    distortion: np.ndarray

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=np.float64)
        distortion = np.array(self.distortion, dtype=np.float64).reshape(-1)
        if matrix.shape != (3, 3):
            raise ValueError(f"camera matrix must be 3x3, got {matrix.shape}")
        if distortion.size < 4:
            raise ValueError(f"at least 4 distortion coefficients are required, got {distortion.size}")
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "distortion", distortion)

    @classmethod
    def from_intrinsics(
        cls,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        distortion: Sequence[float] = (0.0, 0.0, 0.0, 0.0, 0.0),
    ) -> "Camera":
        """Build a pinhole camera from focal lengths and principal point."""

        matrix = [[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]]
        return cls(matrix=matrix, distortion=distortion)


@dataclass(frozen=True)
class PipelineConfig:
    """All tunable parameters for matching and alignment."""

    target_min_area: float = 50.0
    target_max_distance: float = 0.2
    circle_min_area: float = 50.0
    circle_min_fill: float = 0.6
    canvas_size: int = 256
    rotations: Tuple[float, ...] = (0.0, 90.0, 180.0, 270.0)
    approx_start: float = 0.0
    approx_end: float = 100.0
    approx_step: float = 0.1
    align_targets: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotations", tuple(float(angle) for angle in self.rotations))
        if not self.rotations:
            raise ValueError("at least one candidate rotation is required")
        if self.canvas_size < 2:
            raise ValueError(f"canvas_size must be at least 2, got {self.canvas_size}")
        if self.approx_step <= 0:
            raise ValueError(f"approx_step must be positive, got {self.approx_step}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create a config from a flat dictionary."""

        return cls(**data)


def load_config(path: str | Path) -> PipelineConfig:
    """Load a YAML configuration file. Missing keys keep their defaults."""

    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return PipelineConfig.from_dict(data)


__all__ = ["Camera", "PipelineConfig", "load_config"]
