from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

from shapepose.config import Camera, PipelineConfig, load_config
from shapepose.library import library_from_dict, load_camera, load_library
from shapepose.models import ReferenceShape, Sphere

CONFIGS = Path(__file__).resolve().parents[1] / "configs"


def test_default_yaml_matches_defaults():
    config = load_config(CONFIGS / "default.yaml")

    assert config == PipelineConfig()
    assert config.rotations == (0.0, 90.0, 180.0, 270.0)


def test_partial_config_keeps_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("circle_min_fill: 0.8\nrotations: [0, 180]\n", encoding="utf-8")

    config = load_config(path)

    assert config.circle_min_fill == 0.8
    assert config.rotations == (0.0, 180.0)
    assert config.canvas_size == 256


def test_invalid_config_values():
    with pytest.raises(ValueError):
        PipelineConfig(approx_step=0.0)
    with pytest.raises(ValueError):
        PipelineConfig(rotations=())
    with pytest.raises(TypeError):
        PipelineConfig.from_dict({"unknown_key": 1})


def test_library_yaml():
    library = load_library(CONFIGS / "library.yaml")

    assert library.names() == ["square", "triangle", "house"]
    assert len(library.targets[2]) == 5
    assert library.sphere.radius == 3.5
    np.testing.assert_allclose(library.sphere.center, (0.0, 0.0, 0.0))


def test_camera_yaml():
    camera = load_camera(CONFIGS / "library.yaml")

    assert camera.matrix.shape == (3, 3)
    assert camera.matrix[0, 0] == 800.0
    assert camera.distortion.shape == (5,)


def test_library_rejects_short_shapes():
    with pytest.raises(ValidationError):
        library_from_dict({"targets": [{"name": "line", "shape": [[0, 0], [1, 1]]}]})


def test_library_rejects_bad_ball():
    with pytest.raises(ValidationError):
        library_from_dict({"ball": {"radius": 0.0}})


def test_camera_section_is_required(tmp_path):
    path = tmp_path / "shapes.yaml"
    path.write_text("targets: []\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_camera(path)


def test_camera_validation():
    with pytest.raises(ValueError):
        Camera(matrix=np.eye(2), distortion=np.zeros(5))
    with pytest.raises(ValueError):
        Camera(matrix=np.eye(3), distortion=np.zeros(3))


def test_model_validation():
    with pytest.raises(ValueError):
        ReferenceShape("pair", [(0, 0), (1, 1)])
    with pytest.raises(ValueError):
        Sphere(radius=0.0)

    shape = ReferenceShape("tri", [(0, 0), (1, 0), (0, 1)])
    with pytest.raises(ValueError):
        shape.points[0, 0] = 5.0
