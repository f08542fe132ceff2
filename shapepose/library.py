"""Loading of reference shapes, ball models and camera parameters.

The persisted library is a YAML document validated with `pydantic` before any
runtime object is built::

    targets:
      - name: square
        shape: [[0, 0], [100, 0], [100, 100], [0, 100]]
    ball:
      radius: 3.5
      center: [0, 0, 0]
    camera:
      matrix: [[800, 0, 320], [0, 800, 240], [0, 0, 1]]
      distortion: [0, 0, 0, 0, 0]

The returned objects are immutable and safe to share between pipeline calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Camera
from .models import ReferenceShape, Sphere


class TargetModel(BaseModel):
    """Schema for one persisted reference shape."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    shape: List[Tuple[float, float]]

    @field_validator("shape")
    @classmethod
    def _validate_shape(cls, value: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
        if len(value) < 3:
            raise ValueError("a target shape needs at least 3 points")
        return value


class BallModel(BaseModel):
    """Schema for the persisted ball model."""

    model_config = ConfigDict(extra="forbid")

    radius: float = Field(gt=0.0)
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)


class CameraModel(BaseModel):
    """Schema for persisted calibration results."""

    model_config = ConfigDict(extra="forbid")

    matrix: List[List[float]]
    distortion: List[float]

    @field_validator("matrix")
    @classmethod
    def _validate_matrix(cls, value: List[List[float]]) -> List[List[float]]:
        if len(value) != 3 or any(len(row) != 3 for row in value):
            raise ValueError("camera matrix must be 3x3")
        return value

    @field_validator("distortion")
    @classmethod
    def _validate_distortion(cls, value: List[float]) -> List[float]:
        if len(value) < 4:
            raise ValueError("at least 4 distortion coefficients are required")
        return value


class LibraryModel(BaseModel):
    """Top-level schema of a library file."""

    model_config = ConfigDict(extra="forbid")

    targets: List[TargetModel] = Field(default_factory=list)
    ball: Optional[BallModel] = None
    camera: Optional[CameraModel] = None


@dataclass(frozen=True)
class ShapeLibrary:
    """Reference shapes and optional ball model used for matching."""

    targets: Tuple[ReferenceShape, ...] = field(default_factory=tuple)
    sphere: Optional[Sphere] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))

    def names(self) -> List[str]:
        return [target.name for target in self.targets]


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def library_from_dict(data: Dict[str, Any]) -> ShapeLibrary:
    """Validate a parsed library document and build a :class:`ShapeLibrary`."""

    parsed = LibraryModel.model_validate(data)
    targets = tuple(ReferenceShape(name=t.name, points=t.shape) for t in parsed.targets)
    sphere = None
    if parsed.ball is not None:
        sphere = Sphere(radius=parsed.ball.radius, center=parsed.ball.center)
    return ShapeLibrary(targets=targets, sphere=sphere)


def load_library(path: Union[str, Path]) -> ShapeLibrary:
    """Load a :class:`ShapeLibrary` from a YAML file.

    Raises
    ------
    pydantic.ValidationError
        If the document does not match the schema.
    """

    return library_from_dict(_read_yaml(path))


def load_camera(path: Union[str, Path]) -> Camera:
    """Load the ``camera`` section of a YAML file."""

    parsed = LibraryModel.model_validate(_read_yaml(path))
    if parsed.camera is None:
        raise ValueError(f"{path} has no camera section")
    return Camera(matrix=parsed.camera.matrix, distortion=parsed.camera.distortion)


__all__ = [
    "BallModel",
    "CameraModel",
    "LibraryModel",
    "ShapeLibrary",
    "TargetModel",
    "library_from_dict",
    "load_camera",
    "load_library",
]
