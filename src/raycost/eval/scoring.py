from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import numpy as np

from raycost.core.camera import Camera
from raycost.core.pose import PoseLike, as_pose
from raycost.core.geometry import angle_between, homogeneous
from raycost.projection import is_within_depth_band, squared_reprojection_error

logger = logging.getLogger(__name__)

Metric = Literal["reprojection", "angular"]
METRICS: tuple[str, ...] = ("reprojection", "angular")


@dataclass(frozen=True)
class ObservationScores:
    """
    Per-observation errors for one camera/pose hypothesis.

    Errors are in radians for "angular" and unitless (4 tan^2(angle/2)) for
    "reprojection". Angular cosines are clamped to [-1, 1], so exact matches score
    0. Non-finite errors are kept as-is and never count as inliers.
    """

    metric: str
    errors: np.ndarray  # (N,)
    in_depth_band: np.ndarray  # (N,) bool
    threshold: float | None = None

    @property
    def finite(self) -> np.ndarray:
        return np.isfinite(self.errors)

    @property
    def inliers(self) -> np.ndarray:
        mask = self.finite & self.in_depth_band
        if self.threshold is not None:
            with np.errstate(invalid="ignore"):
                mask &= self.errors <= float(self.threshold)
        return mask

    def summary(self) -> dict[str, float]:
        e = self.errors[self.finite]
        if e.size:
            stats = {
                "mean": float(np.mean(e)),
                "median": float(np.median(e)),
                "rms": float(np.sqrt(np.mean(e * e))),
                "max": float(np.max(e)),
            }
        else:
            stats = {"mean": float("nan"), "median": float("nan"), "rms": float("nan"), "max": float("nan")}
        return {
            "count": float(self.errors.size),
            "finite": float(np.count_nonzero(self.finite)),
            "in_depth_band": float(np.count_nonzero(self.in_depth_band)),
            "inliers": float(np.count_nonzero(self.inliers)),
            **stats,
        }


def score_observations(
    uv_px: np.ndarray,
    xyz: np.ndarray,
    cam_from_world: PoseLike,
    camera: Camera,
    *,
    metric: Metric = "angular",
    threshold: float | None = None,
) -> ObservationScores:
    if metric not in METRICS:
        raise ValueError(f"unknown metric {metric!r}; expected one of {METRICS}")
    uv_px = np.asarray(uv_px, dtype=np.float64).reshape(-1, 2)
    xyz = np.asarray(xyz, dtype=np.float64).reshape(-1, 3)
    if uv_px.shape[0] != xyz.shape[0]:
        raise ValueError("uv_px and xyz must have the same length")

    pose = as_pose(cam_from_world)
    if metric == "reprojection":
        errors = squared_reprojection_error(uv_px, xyz, pose, camera)
    else:
        # Exact matches can round the cosine to 1 + ulp; clamp so they score 0, not nan.
        errors = angle_between(homogeneous(camera.cam_from_img(uv_px)), pose.apply(xyz), clip=True)
    errors = np.asarray(errors, dtype=np.float64).reshape(-1)
    in_band = np.asarray(is_within_depth_band(pose, xyz), dtype=bool).reshape(-1)

    n_bad = int(np.count_nonzero(~np.isfinite(errors)))
    if n_bad:
        logger.debug("%d/%d %s errors are non-finite", n_bad, errors.size, metric)
    return ObservationScores(metric=metric, errors=errors, in_depth_band=in_band, threshold=threshold)
