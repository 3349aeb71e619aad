from __future__ import annotations

import numpy as np


def homogeneous(x: np.ndarray) -> np.ndarray:
    """Append a trailing 1 along the last axis: (...,n) -> (...,n+1)."""
    x = np.asarray(x, dtype=np.float64)
    return np.concatenate([x, np.ones_like(x[..., :1])], axis=-1)


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Scale vectors to unit length along the last axis.

    Zero vectors come back as NaN; callers decide how to treat them.
    """
    v = np.asarray(v, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        return v / np.linalg.norm(v, axis=-1, keepdims=True)


def spherical_direction_from_pixel(uv_px: np.ndarray, cx: float, cy: float) -> np.ndarray:
    """
    Map pixels to unit viewing directions with an equirectangular model.

    The principal point (cx, cy) is taken as the image center, so u spans
    [0, 2*cx] over longitude [-pi, pi] and v spans [0, 2*cy] over latitude
    [-pi/2, pi/2]:

      theta = (u - cx) * pi / cx
      phi   = (v - cy) * pi / (2 * cy)
      d     = (cos(phi) sin(theta), sin(phi), cos(phi) cos(theta))

    Only the principal point is used; other intrinsics are ignored.
    """
    uv_px = np.asarray(uv_px, dtype=np.float64)
    if uv_px.shape[-1] != 2:
        raise ValueError(f"uv_px must have shape (...,2), got {uv_px.shape}")
    cx = float(cx)
    cy = float(cy)
    with np.errstate(divide="ignore", invalid="ignore"):
        theta = (uv_px[..., 0] - cx) * np.pi / cx
        phi = (uv_px[..., 1] - cy) * np.pi / (2.0 * cy)
        cos_phi = np.cos(phi)
        return np.stack([cos_phi * np.sin(theta), np.sin(phi), cos_phi * np.cos(theta)], axis=-1)


def angle_between(a: np.ndarray, b: np.ndarray, *, clip: bool = False) -> np.ndarray:
    """
    Angle in radians between direction vectors along the last axis.

    By default the cosine is not clipped to [-1, 1]; rounding outside that
    range gives NaN. With clip=True it is clamped first, so only zero-length
    vectors give NaN.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        cos = np.sum(normalize(a) * normalize(b), axis=-1)
        if clip:
            cos = np.clip(cos, -1.0, 1.0)
        return np.arccos(cos)
