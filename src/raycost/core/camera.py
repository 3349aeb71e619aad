from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np


class Camera(Protocol):
    """
    What the error metrics need from a camera model: the principal point and a
    pixel -> normalized camera ray conversion (x=X/Z, y=Y/Z).
    """

    @property
    def cx(self) -> float: ...

    @property
    def cy(self) -> float: ...

    def cam_from_img(self, uv_px: np.ndarray) -> np.ndarray: ...


# COLMAP model name -> parameter names, in the order they are stored.
COLMAP_MODELS: dict[str, tuple[str, ...]] = {
    "SIMPLE_PINHOLE": ("f", "cx", "cy"),
    "PINHOLE": ("fx", "fy", "cx", "cy"),
    "SIMPLE_RADIAL": ("f", "cx", "cy", "k1"),
    "RADIAL": ("f", "cx", "cy", "k1", "k2"),
    "OPENCV": ("fx", "fy", "cx", "cy", "k1", "k2", "p1", "p2"),
}


@dataclass(frozen=True)
class PinholeCamera:
    """
    Pinhole intrinsics with optional Brown-Conrady distortion applied on
    normalized camera coordinates (radial k1, k2; tangential p1, p2).
    """

    width: int
    height: int
    fx: float
    fy: float
    cx: float
    cy: float
    k1: float = 0.0
    k2: float = 0.0
    p1: float = 0.0
    p2: float = 0.0

    @classmethod
    def from_colmap(cls, model: str, width: int, height: int, params: Sequence[float]) -> "PinholeCamera":
        names = COLMAP_MODELS.get(str(model).upper())
        if names is None:
            raise ValueError(f"unsupported camera model {model!r}; expected one of {sorted(COLMAP_MODELS)}")
        if len(params) != len(names):
            raise ValueError(f"{model} expects {len(names)} params {names}, got {len(params)}")
        p = {name: float(v) for name, v in zip(names, params)}
        if "f" in p:
            p["fx"] = p["fy"] = p.pop("f")
        return cls(width=int(width), height=int(height), **p)

    @property
    def has_distortion(self) -> bool:
        return any(c != 0.0 for c in (self.k1, self.k2, self.p1, self.p2))

    def K(self) -> np.ndarray:
        return np.array(
            [[float(self.fx), 0.0, float(self.cx)], [0.0, float(self.fy), float(self.cy)], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )

    def distort(self, xy: np.ndarray) -> np.ndarray:
        xy = np.asarray(xy, dtype=np.float64)
        x = xy[..., 0]
        y = xy[..., 1]
        r2 = x * x + y * y
        radial = 1.0 + self.k1 * r2 + self.k2 * r2 * r2
        xd = x * radial + 2.0 * self.p1 * x * y + self.p2 * (r2 + 2.0 * x * x)
        yd = y * radial + self.p1 * (r2 + 2.0 * y * y) + 2.0 * self.p2 * x * y
        return np.stack([xd, yd], axis=-1)

    def undistort(self, xy_d: np.ndarray, iterations: int = 20) -> np.ndarray:
        """
        Fixed-point inverse of distort(); adequate for small/moderate distortion.
        """
        xy_d = np.asarray(xy_d, dtype=np.float64)
        if not self.has_distortion:
            return xy_d.copy()
        xy = xy_d.copy()
        for _ in range(int(iterations)):
            xy = xy + (xy_d - self.distort(xy))
        return xy

    def cam_from_img(self, uv_px: np.ndarray) -> np.ndarray:
        uv_px = np.asarray(uv_px, dtype=np.float64)
        if uv_px.shape[-1] != 2:
            raise ValueError(f"uv_px must have shape (...,2), got {uv_px.shape}")
        xy_d = np.stack([(uv_px[..., 0] - self.cx) / self.fx, (uv_px[..., 1] - self.cy) / self.fy], axis=-1)
        return self.undistort(xy_d)

    def img_from_cam(self, xyz_cam: np.ndarray) -> np.ndarray:
        xyz_cam = np.asarray(xyz_cam, dtype=np.float64)
        if xyz_cam.shape[-1] != 3:
            raise ValueError(f"xyz_cam must have shape (...,3), got {xyz_cam.shape}")
        z = xyz_cam[..., 2]
        good = np.isfinite(z) & (np.abs(z) > 1e-12)
        z_safe = np.where(good, z, 1.0)
        xy = xyz_cam[..., :2] / z_safe[..., None]
        xy_d = self.distort(xy)
        uv = np.stack([self.fx * xy_d[..., 0] + self.cx, self.fy * xy_d[..., 1] + self.cy], axis=-1)
        return np.where(good[..., None], uv, np.nan)
