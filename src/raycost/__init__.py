from raycost import meta
from raycost.core.camera import Camera, PinholeCamera
from raycost.core.geometry import spherical_direction_from_pixel
from raycost.core.pose import MatrixPose, RigidPose, as_pose
from raycost.eval.scoring import ObservationScores, score_observations
from raycost.projection import (
    MAX_INVERSE_DEPTH,
    MIN_INVERSE_DEPTH,
    angular_error,
    has_point_positive_depth,
    is_within_depth_band,
    normalized_angular_error,
    squared_reprojection_error,
)

__all__ = [
    "meta",
    "Camera",
    "PinholeCamera",
    "RigidPose",
    "MatrixPose",
    "as_pose",
    "spherical_direction_from_pixel",
    "squared_reprojection_error",
    "angular_error",
    "normalized_angular_error",
    "is_within_depth_band",
    "has_point_positive_depth",
    "MIN_INVERSE_DEPTH",
    "MAX_INVERSE_DEPTH",
    "ObservationScores",
    "score_observations",
]
