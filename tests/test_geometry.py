import warnings

import numpy as np

from raycost.core.geometry import angle_between, homogeneous, normalize, spherical_direction_from_pixel


def test_homogeneous_appends_one():
    x = np.array([[1.0, 2.0], [3.0, 4.0]])
    h = homogeneous(x)
    assert h.shape == (2, 3)
    assert np.array_equal(h[:, 2], [1.0, 1.0])
    assert np.array_equal(homogeneous([0.5, -2.0]), [0.5, -2.0, 1.0])


def test_normalize_zero_vector_is_nan_without_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        v = normalize(np.zeros(3))
    assert np.all(np.isnan(v))


def test_spherical_direction_at_principal_point_is_forward_axis():
    d = spherical_direction_from_pixel([320.0, 240.0], 320.0, 240.0)
    assert np.array_equal(d, [0.0, 0.0, 1.0])


def test_spherical_direction_known_angles():
    cx, cy = 320.0, 240.0
    # u = 1.5 cx -> theta = pi/2 (right); v = 0 -> phi = -pi/2 (up).
    right = spherical_direction_from_pixel([1.5 * cx, cy], cx, cy)
    up = spherical_direction_from_pixel([cx, 0.0], cx, cy)
    back = spherical_direction_from_pixel([2.0 * cx, cy], cx, cy)
    np.testing.assert_allclose(right, [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(up, [0.0, -1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(back, [0.0, 0.0, -1.0], atol=1e-12)


def test_spherical_direction_batch_is_unit_norm():
    rng = np.random.default_rng(0)
    uv = np.stack([rng.uniform(0, 640, size=500), rng.uniform(0, 480, size=500)], axis=-1)
    d = spherical_direction_from_pixel(uv, 320.0, 240.0)
    assert d.shape == (500, 3)
    np.testing.assert_allclose(np.linalg.norm(d, axis=-1), 1.0, atol=1e-12)


def test_spherical_direction_zero_principal_point_is_not_finite():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        d = spherical_direction_from_pixel([10.0, 10.0], 0.0, 0.0)
    assert not np.all(np.isfinite(d))


def test_angle_between_right_angle():
    a = angle_between([1.0, 0.0, 0.0], [0.0, 0.0, 3.0])
    assert abs(a - np.pi / 2) < 1e-12
