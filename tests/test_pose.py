import cv2
import numpy as np
import pytest

from shapepose.config import Camera
from shapepose.models import Circle, CircleMatch, Pose, ReferenceShape, ShapeMatch, Sphere
from shapepose.pose import PoseSolveError, estimate_ball_pose, estimate_target_pose, lift_to_plane, solve_pnp

CAMERA = Camera.from_intrinsics(fx=800.0, fy=800.0, cx=320.0, cy=240.0)


def _project(points, rvec, tvec, camera=CAMERA):
    projected, _ = cv2.projectPoints(
        np.asarray(points, dtype=np.float64),
        np.asarray(rvec, dtype=np.float64),
        np.asarray(tvec, dtype=np.float64),
        camera.matrix,
        camera.distortion,
    )
    return projected.reshape(-1, 2)


def test_round_trip_recovers_pose():
    cube = np.array(
        [[x, y, z] for x in (-0.25, 0.25) for y in (-0.25, 0.25) for z in (-0.25, 0.25)],
        dtype=np.float64,
    )
    rvec = np.array([0.1, -0.2, 0.05])
    tvec = np.array([0.1, -0.05, 5.0])

    solved_r, solved_t, error = solve_pnp(cube, _project(cube, rvec, tvec), CAMERA)

    np.testing.assert_allclose(solved_r, rvec, atol=1e-4)
    np.testing.assert_allclose(solved_t, tvec, atol=1e-3)
    assert error < 1e-3


def test_round_trip_with_distortion():
    camera = Camera.from_intrinsics(600.0, 620.0, 300.0, 220.0, distortion=(0.05, -0.01, 0.001, 0.0, 0.0))
    cube = np.array(
        [[x, y, z] for x in (-1.0, 1.0) for y in (-1.0, 1.0) for z in (0.0, 1.0)],
        dtype=np.float64,
    )
    rvec = np.array([-0.2, 0.3, 0.1])
    tvec = np.array([0.5, 0.2, 12.0])

    solved_r, solved_t, _ = solve_pnp(cube, _project(cube, rvec, tvec, camera), camera)

    np.testing.assert_allclose(solved_r, rvec, atol=1e-4)
    np.testing.assert_allclose(solved_t, tvec, atol=1e-3)


def test_three_correspondences_fail():
    shape = ReferenceShape("triangle", [(0, 0), (120, 0), (60, 104)])
    image = np.array([(100, 100), (220, 100), (160, 204)], dtype=float)

    with pytest.raises(PoseSolveError):
        solve_pnp(lift_to_plane(shape.points), image, CAMERA)

    poses = estimate_target_pose([ShapeMatch(contour=image, shape=shape, score=0.0, rotation_deg=0.0)], CAMERA)

    assert len(poses) == 1
    assert not poses[0].ok
    assert poses[0].rvec is None and poses[0].tvec is None
    assert "correspondences" in poses[0].failure


def test_collinear_points_fail():
    model = lift_to_plane([(0, 0), (1, 0), (2, 0), (3, 0)])
    image = np.array([(0, 0), (10, 10), (20, 20), (30, 30)], dtype=float)

    with pytest.raises(PoseSolveError):
        solve_pnp(model, image, CAMERA)


def test_length_mismatch_fails():
    model = lift_to_plane([(0, 0), (100, 0), (100, 100), (0, 100)])
    image = np.array([(0, 0), (10, 0), (10, 10), (5, 15), (0, 10)], dtype=float)

    with pytest.raises(PoseSolveError):
        solve_pnp(model, image, CAMERA)


def test_target_pose_from_planar_shape():
    shape = ReferenceShape("square", [(0, 0), (100, 0), (100, 100), (0, 100)])
    rvec = np.array([0.2, -0.1, 0.05])
    tvec = np.array([-40.0, -30.0, 900.0])
    image = _project(lift_to_plane(shape.points), rvec, tvec)

    poses = estimate_target_pose([ShapeMatch(contour=image, shape=shape, score=0.0, rotation_deg=0.0)], CAMERA)

    assert poses[0].ok
    np.testing.assert_allclose(poses[0].rvec, rvec, atol=1e-3)
    np.testing.assert_allclose(poses[0].tvec, tvec, atol=0.5)
    assert poses[0].reprojection_error < 1e-2


def test_poor_fit_is_reported_not_failed():
    shape = ReferenceShape("pentagon", [(0, 0), (100, 0), (100, 100), (50, 150), (0, 100)])
    image = _project(lift_to_plane(shape.points), np.zeros(3), np.array([0.0, 0.0, 900.0]))
    image[4] += (25.0, -30.0)

    pose = estimate_target_pose([ShapeMatch(contour=image, shape=shape, score=0.0, rotation_deg=0.0)], CAMERA)[0]

    assert pose.ok
    assert pose.reprojection_error > 1.0


def test_ball_pose_from_circle_extremes():
    sphere = Sphere(radius=10.0)
    # sphere at 500 units on the optical axis projects to radius 800 * 10 / 500
    circle = Circle(radius=16.0, center=(320.0, 240.0))
    match = CircleMatch(contour=circle.points(), circle=circle, fill_ratio=1.0)

    poses = estimate_ball_pose([match], sphere, CAMERA)

    assert poses[0].ok
    np.testing.assert_allclose(poses[0].tvec, (0.0, 0.0, 500.0), atol=1e-2)


def test_ball_pose_fails_for_degenerate_circle():
    circle = Circle(radius=0.0, center=(320.0, 240.0))
    match = CircleMatch(contour=np.zeros((0, 2)), circle=circle, fill_ratio=0.0)

    poses = estimate_ball_pose([match], Sphere(radius=10.0), CAMERA)

    assert not poses[0].ok


def test_circle_rejects_negative_radius():
    with pytest.raises(ValueError):
        Circle(radius=-1.0, center=(0.0, 0.0))

    circle = Circle(radius=np.float32(2.0), center=np.array([3, 4]))
    assert circle.center == (3.0, 4.0)
    assert circle.area == pytest.approx(4.0 * np.pi)


def test_euler_angles_and_rotation_matrix():
    pose = Pose(match=None, rvec=np.array([0.0, 0.0, np.pi / 2]), tvec=np.zeros(3), reprojection_error=0.0)

    np.testing.assert_allclose(pose.euler_angles(), (0.0, 0.0, 90.0), atol=1e-9)
    np.testing.assert_allclose(pose.rotation_matrix(), [[0, -1, 0], [1, 0, 0], [0, 0, 1]], atol=1e-9)


def test_failed_pose_has_no_rotation():
    pose = Pose(match=None, failure="no correspondences")

    assert not pose.ok
    with pytest.raises(ValueError):
        pose.euler_angles()
