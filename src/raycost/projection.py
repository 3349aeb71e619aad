"""
Error metrics between an observed pixel and a hypothesized 3D point.

Every function accepts a single observation ((2,) pixel, (3,) point) or a batch
((N,2), (N,3)) and returns a float/bool or an (N,) array accordingly. Numeric
degeneracies are not trapped: they come back as nan/inf (or False for the
depth band) for the caller to reject.
"""

from __future__ import annotations

import numpy as np

from raycost.core.camera import Camera
from raycost.core.geometry import angle_between, homogeneous, normalize, spherical_direction_from_pixel
from raycost.core.pose import PoseLike, as_pose

# Admissible inverse distance from the camera center, exclusive on both ends.
MIN_INVERSE_DEPTH = 1e-3
MAX_INVERSE_DEPTH = 1e3


def _unwrap(x: np.ndarray):
    x = np.asarray(x)
    if x.ndim == 0:
        return x.item()
    return x


def squared_reprojection_error(
    uv_px: np.ndarray,
    xyz: np.ndarray,
    cam_from_world: PoseLike,
    camera: Camera,
):
    """
    Ray-angle surrogate for the squared reprojection error.

    The observed direction M comes from the equirectangular mapping of the pixel
    around the principal point, the predicted direction m from the camera-space
    point. With d = M.m the result is

      4 (1 - d) / (1 + d) = 4 tan^2(angle / 2)

    which is 0 for coincident directions and diverges for antipodal ones
    (+inf or nan at d = -1). Requires cx != 0 and cy != 0.
    """
    p_cam = as_pose(cam_from_world).apply(xyz)
    with np.errstate(divide="ignore", invalid="ignore"):
        m = normalize(p_cam)
        M = spherical_direction_from_pixel(uv_px, camera.cx, camera.cy)
        d = np.sum(M * m, axis=-1)
        err = 4.0 * (1.0 - d) / (1.0 + d)
    return _unwrap(err)


def normalized_angular_error(xy: np.ndarray, xyz: np.ndarray, cam_from_world: PoseLike):
    """
    Angle in radians between the ray (x, y, 1) and the camera-space point.

    The cosine is not clipped: values rounded past +/-1 give nan, as does a
    point at the camera center.
    """
    xy = np.asarray(xy, dtype=np.float64)
    if xy.shape[-1] != 2:
        raise ValueError(f"xy must have shape (...,2), got {xy.shape}")
    ray1 = homogeneous(xy)
    ray2 = as_pose(cam_from_world).apply(xyz)
    return _unwrap(angle_between(ray1, ray2))


def angular_error(
    uv_px: np.ndarray,
    xyz: np.ndarray,
    cam_from_world: PoseLike,
    camera: Camera,
):
    """Angle in radians between the camera ray of `uv_px` and the point."""
    return normalized_angular_error(camera.cam_from_img(uv_px), xyz, cam_from_world)


def is_within_depth_band(cam_from_world: PoseLike, xyz: np.ndarray):
    """
    True where the point's Euclidean distance from the camera center lies
    strictly inside (1 / MAX_INVERSE_DEPTH, 1 / MIN_INVERSE_DEPTH).

    This bounds distance only. The sign of the camera z coordinate is not
    checked, so points behind the camera pass when they are in range.
    """
    T = np.eye(4, dtype=np.float64)
    T[:3, :] = as_pose(cam_from_world).as_matrix()
    xyz = np.asarray(xyz, dtype=np.float64)
    if xyz.shape[-1] != 3:
        raise ValueError(f"xyz must have shape (...,3), got {xyz.shape}")
    p_cam = (homogeneous(xyz) @ T.T)[..., :3]
    distance = np.linalg.norm(p_cam, axis=-1)

    valid = distance >= np.finfo(np.float64).eps
    with np.errstate(divide="ignore", invalid="ignore"):
        inverse_distance = 1.0 / np.where(valid, distance, 1.0)
    ok = valid & (inverse_distance > MIN_INVERSE_DEPTH) & (inverse_distance < MAX_INVERSE_DEPTH)
    return _unwrap(ok)


# Historical name. Despite it, no positivity test is made; see is_within_depth_band.
has_point_positive_depth = is_within_depth_band
