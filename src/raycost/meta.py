from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from scipy.spatial.transform import Rotation

from raycost.core.camera import COLMAP_MODELS, PinholeCamera
from raycost.core.pose import MatrixPose, Pose, RigidPose

SCENE_SCHEMA = "raycost.scene.v0"


class MetaValidationError(ValueError):
    pass


@dataclass(frozen=True)
class SceneMeta:
    camera: PinholeCamera
    pose: Pose
    uv_px: np.ndarray  # (N,2)
    xyz: np.ndarray  # (N,3)

    @property
    def num_observations(self) -> int:
        return int(self.uv_px.shape[0])


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise MetaValidationError(msg)


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _finite_vector(raw: Any, n: int, name: str) -> np.ndarray:
    _require(isinstance(raw, (list, tuple)) and len(raw) == n, f"{name} must be a list of {n} numbers")
    _require(all(_is_number(x) for x in raw), f"{name} must contain only numbers")
    v = np.asarray([float(x) for x in raw], dtype=np.float64)
    _require(bool(np.all(np.isfinite(v))), f"{name} must be finite")
    return v


def parse_camera_meta(data: dict[str, Any]) -> PinholeCamera:
    model = str(data.get("model", "")).upper()
    _require(model in COLMAP_MODELS, f"camera.model must be one of {sorted(COLMAP_MODELS)}")

    w_raw = data.get("width")
    h_raw = data.get("height")
    _require(w_raw is not None and h_raw is not None, "camera.width and camera.height are required")
    _require(
        all(_is_number(x) and float(x).is_integer() for x in (w_raw, h_raw)),
        "camera.width and camera.height must be integers",
    )
    w, h = int(w_raw), int(h_raw)
    _require(w > 0 and h > 0, "camera.width and camera.height must be > 0")

    params = data.get("params")
    n = len(COLMAP_MODELS[model])
    p = _finite_vector(params, n, f"camera.params ({model})")
    cam = PinholeCamera.from_colmap(model, w, h, p.tolist())
    _require(cam.fx != 0.0 and cam.fy != 0.0, "camera focal length must be non-zero")
    return cam


def parse_pose_meta(data: dict[str, Any]) -> Pose:
    kind = data.get("type", "rigid")
    _require(kind in ("rigid", "matrix"), "pose.type must be 'rigid' or 'matrix'")

    if kind == "matrix":
        rows = data.get("matrix")
        _require(isinstance(rows, (list, tuple)) and len(rows) == 3, "pose.matrix must be 3 rows of 4 numbers")
        m = np.stack([_finite_vector(r, 4, "pose.matrix row") for r in rows], axis=0)
        return MatrixPose(m)

    tvec = _finite_vector(data.get("tvec", [0.0, 0.0, 0.0]), 3, "pose.tvec")
    has_rvec = "rvec" in data
    has_qvec = "qvec" in data
    _require(not (has_rvec and has_qvec), "pose must give rvec or qvec, not both")
    if has_qvec:
        qvec = _finite_vector(data["qvec"], 4, "pose.qvec")
        _require(float(np.linalg.norm(qvec)) > 0.0, "pose.qvec must be non-zero")
        return RigidPose.from_quat(qvec, tvec)
    rvec = _finite_vector(data.get("rvec", [0.0, 0.0, 0.0]), 3, "pose.rvec")
    return RigidPose.from_rotvec(rvec, tvec)


def pose_to_meta(pose: Pose) -> dict[str, Any]:
    if isinstance(pose, MatrixPose):
        return {"type": "matrix", "matrix": pose.matrix.tolist()}
    return {
        "type": "rigid",
        "rvec": Rotation.from_matrix(pose.rotation).as_rotvec().tolist(),
        "tvec": pose.translation.tolist(),
    }


def camera_to_meta(cam: PinholeCamera) -> dict[str, Any]:
    return {
        "model": "OPENCV",
        "width": int(cam.width),
        "height": int(cam.height),
        "params": [cam.fx, cam.fy, cam.cx, cam.cy, cam.k1, cam.k2, cam.p1, cam.p2],
    }


def parse_scene_meta(data: dict[str, Any]) -> SceneMeta:
    schema_version = data.get("schema_version")
    _require(schema_version == SCENE_SCHEMA, f"schema_version must be {SCENE_SCHEMA}")

    camera_raw = data.get("camera")
    pose_raw = data.get("pose")
    _require(isinstance(camera_raw, dict), "camera block is required")
    _require(isinstance(pose_raw, dict), "pose block is required")
    camera = parse_camera_meta(camera_raw)
    pose = parse_pose_meta(pose_raw)

    obs = data.get("observations", [])
    _require(isinstance(obs, list), "observations must be a list")
    uv = np.zeros((len(obs), 2), dtype=np.float64)
    xyz = np.zeros((len(obs), 3), dtype=np.float64)
    for i, o in enumerate(obs):
        _require(isinstance(o, dict), f"observations[{i}] must be an object")
        uv[i] = _finite_vector(o.get("uv_px"), 2, f"observations[{i}].uv_px")
        xyz[i] = _finite_vector(o.get("xyz"), 3, f"observations[{i}].xyz")

    return SceneMeta(camera=camera, pose=pose, uv_px=uv, xyz=xyz)


def load_scene_meta(path: Path) -> SceneMeta:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_scene_meta(data)


def save_scene_meta(path: Path, scene: SceneMeta) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    meta = {
        "schema_version": SCENE_SCHEMA,
        "camera": camera_to_meta(scene.camera),
        "pose": pose_to_meta(scene.pose),
        "observations": [
            {"uv_px": uv.tolist(), "xyz": p.tolist()} for uv, p in zip(scene.uv_px, scene.xyz)
        ],
    }
    path.write_text(json.dumps(meta, indent=2, sort_keys=True), encoding="utf-8")
    return path
