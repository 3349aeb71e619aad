import numpy as np
import pytest

from raycost.core.camera import PinholeCamera


def test_from_colmap_simple_pinhole_shares_focal():
    cam = PinholeCamera.from_colmap("SIMPLE_PINHOLE", 640, 480, [500.0, 320.0, 240.0])
    assert cam.fx == cam.fy == 500.0
    assert (cam.cx, cam.cy) == (320.0, 240.0)
    assert not cam.has_distortion


def test_from_colmap_opencv_and_radial():
    cam = PinholeCamera.from_colmap("opencv", 640, 480, [500, 510, 320, 240, -0.1, 0.01, 1e-3, -2e-3])
    assert (cam.fx, cam.fy, cam.k1, cam.k2, cam.p1, cam.p2) == (500.0, 510.0, -0.1, 0.01, 1e-3, -2e-3)
    radial = PinholeCamera.from_colmap("RADIAL", 640, 480, [500, 320, 240, -0.1, 0.01])
    assert radial.k2 == 0.01 and radial.p1 == 0.0


def test_from_colmap_rejects_bad_input():
    with pytest.raises(ValueError):
        PinholeCamera.from_colmap("FISHEYE", 640, 480, [1, 2, 3])
    with pytest.raises(ValueError):
        PinholeCamera.from_colmap("PINHOLE", 640, 480, [500.0, 320.0, 240.0])


def test_intrinsic_matrix():
    cam = PinholeCamera(width=640, height=480, fx=500.0, fy=505.0, cx=320.0, cy=240.0)
    K = cam.K()
    assert K.shape == (3, 3)
    assert (K[0, 0], K[1, 1], K[0, 2], K[1, 2], K[2, 2]) == (500.0, 505.0, 320.0, 240.0, 1.0)


def test_cam_from_img_inverts_img_from_cam_with_distortion():
    cam = PinholeCamera(width=640, height=480, fx=500.0, fy=500.0, cx=320.0, cy=240.0, k1=-0.05, k2=0.01, p1=1e-3, p2=-5e-4)
    rng = np.random.default_rng(0)
    xy = rng.uniform(-0.5, 0.5, size=(200, 2))
    xyz = np.concatenate([xy, np.ones((200, 1))], axis=-1) * 3.0
    uv = cam.img_from_cam(xyz)
    np.testing.assert_allclose(cam.cam_from_img(uv), xy, atol=1e-9)


def test_principal_point_maps_to_optical_axis():
    cam = PinholeCamera(width=640, height=480, fx=500.0, fy=500.0, cx=320.0, cy=240.0, k1=-0.2)
    assert np.array_equal(cam.cam_from_img([320.0, 240.0]), [0.0, 0.0])


def test_img_from_cam_points_on_camera_plane_are_nan():
    cam = PinholeCamera(width=640, height=480, fx=500.0, fy=500.0, cx=320.0, cy=240.0)
    uv = cam.img_from_cam(np.array([[1.0, 1.0, 0.0], [0.0, 0.0, 2.0]]))
    assert np.all(np.isnan(uv[0]))
    assert np.array_equal(uv[1], [320.0, 240.0])
