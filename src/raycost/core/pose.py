from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np
from scipy.spatial.transform import Rotation

from raycost.core.geometry import homogeneous


def _as_points(xyz: np.ndarray) -> np.ndarray:
    xyz = np.asarray(xyz, dtype=np.float64)
    if xyz.shape[-1] != 3:
        raise ValueError(f"xyz must have shape (...,3), got {xyz.shape}")
    return xyz


@dataclass(frozen=True)
class RigidPose:
    """
    Camera-from-world rigid transform X_cam = R X_world + t.
    """

    rotation: np.ndarray  # (3,3)
    translation: np.ndarray  # (3,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotation", np.asarray(self.rotation, dtype=np.float64).reshape(3, 3))
        object.__setattr__(self, "translation", np.asarray(self.translation, dtype=np.float64).reshape(3))

    @classmethod
    def identity(cls) -> "RigidPose":
        return cls(rotation=np.eye(3, dtype=np.float64), translation=np.zeros((3,), dtype=np.float64))

    @classmethod
    def from_rotvec(cls, rvec: np.ndarray, tvec: np.ndarray) -> "RigidPose":
        rot = Rotation.from_rotvec(np.asarray(rvec, dtype=np.float64).reshape(3)).as_matrix()
        return cls(rotation=rot, translation=tvec)

    @classmethod
    def from_quat(cls, qvec: np.ndarray, tvec: np.ndarray) -> "RigidPose":
        """
        Build from a scalar-first quaternion (qw, qx, qy, qz), the order used by
        COLMAP images.txt. scipy expects scalar-last.
        """
        qw, qx, qy, qz = (float(q) for q in np.asarray(qvec, dtype=np.float64).reshape(4))
        rot = Rotation.from_quat([qx, qy, qz, qw]).as_matrix()
        return cls(rotation=rot, translation=tvec)

    @property
    def center(self) -> np.ndarray:
        """Camera center in the world frame, -R^T t."""
        return -self.rotation.T @ self.translation

    def inverse(self) -> "RigidPose":
        return RigidPose(rotation=self.rotation.T, translation=self.center)

    def apply(self, xyz: np.ndarray) -> np.ndarray:
        xyz = _as_points(xyz)
        return xyz @ self.rotation.T + self.translation

    def as_matrix(self) -> np.ndarray:
        return np.concatenate([self.rotation, self.translation.reshape(3, 1)], axis=1)


@dataclass(frozen=True)
class MatrixPose:
    """
    Camera-from-world transform stored as a dense 3x4 matrix [R | t].

    Points are homogenized and each camera coordinate is the dot product of a
    matrix row with [X, Y, Z, 1].
    """

    matrix: np.ndarray  # (3,4)

    def __post_init__(self) -> None:
        m = np.asarray(self.matrix, dtype=np.float64)
        if m.shape != (3, 4):
            raise ValueError(f"matrix must be (3,4), got {m.shape}")
        object.__setattr__(self, "matrix", m)

    def apply(self, xyz: np.ndarray) -> np.ndarray:
        return homogeneous(_as_points(xyz)) @ self.matrix.T

    def as_matrix(self) -> np.ndarray:
        return self.matrix.copy()


Pose = Union[RigidPose, MatrixPose]
PoseLike = Union[RigidPose, MatrixPose, np.ndarray]


def as_pose(cam_from_world: PoseLike) -> Pose:
    """
    Accept either pose object, a (3,4) matrix, or a (4,4) rigid matrix.
    """
    if isinstance(cam_from_world, (RigidPose, MatrixPose)):
        return cam_from_world
    m = np.asarray(cam_from_world, dtype=np.float64)
    if m.shape == (3, 4):
        return MatrixPose(m)
    if m.shape == (4, 4):
        if not np.array_equal(m[3], np.array([0.0, 0.0, 0.0, 1.0])):
            raise ValueError("4x4 pose must have last row [0, 0, 0, 1]")
        return MatrixPose(m[:3])
    raise ValueError(f"unsupported pose of shape {m.shape}; expected (3,4) or (4,4)")
