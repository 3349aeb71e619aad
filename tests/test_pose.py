import numpy as np
import pytest

from raycost.core.pose import MatrixPose, RigidPose, as_pose


def _random_pose(seed: int = 0) -> RigidPose:
    rng = np.random.default_rng(seed)
    return RigidPose.from_rotvec(rng.normal(scale=0.5, size=3), rng.normal(scale=2.0, size=3))


def test_rigid_and_matrix_forms_agree():
    pose = _random_pose()
    mpose = MatrixPose(pose.as_matrix())
    xyz = np.random.default_rng(1).normal(size=(100, 3)) * 10.0
    np.testing.assert_allclose(pose.apply(xyz), mpose.apply(xyz), atol=1e-12)
    np.testing.assert_allclose(pose.apply(xyz[0]), mpose.apply(xyz[0]), atol=1e-12)


def test_identity_is_noop():
    xyz = np.array([1.0, -2.0, 3.0])
    assert np.array_equal(RigidPose.identity().apply(xyz), xyz)


def test_from_quat_matches_from_rotvec():
    # 90 degrees about z, scalar-first quaternion.
    c = np.cos(np.pi / 4)
    s = np.sin(np.pi / 4)
    pq = RigidPose.from_quat([c, 0.0, 0.0, s], [1.0, 2.0, 3.0])
    pr = RigidPose.from_rotvec([0.0, 0.0, np.pi / 2], [1.0, 2.0, 3.0])
    np.testing.assert_allclose(pq.rotation, pr.rotation, atol=1e-12)
    np.testing.assert_allclose(pq.apply([1.0, 0.0, 0.0]), [1.0, 3.0, 3.0], atol=1e-12)


def test_center_and_inverse():
    pose = _random_pose(3)
    # The camera center maps to the camera origin.
    np.testing.assert_allclose(pose.apply(pose.center), np.zeros(3), atol=1e-12)
    xyz = np.array([0.3, -1.2, 4.0])
    np.testing.assert_allclose(pose.inverse().apply(pose.apply(xyz)), xyz, atol=1e-12)

    t = RigidPose(rotation=np.eye(3), translation=[1.0, 2.0, 3.0])
    assert np.array_equal(t.center, [-1.0, -2.0, -3.0])


def test_as_pose_accepts_arrays():
    m = _random_pose().as_matrix()
    assert isinstance(as_pose(m), MatrixPose)
    m44 = np.vstack([m, [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(as_pose(m44).as_matrix(), m)
    p = RigidPose.identity()
    assert as_pose(p) is p


def test_as_pose_rejects_bad_shapes():
    with pytest.raises(ValueError):
        as_pose(np.eye(3))
    bad = np.eye(4)
    bad[3, 0] = 1.0
    with pytest.raises(ValueError):
        as_pose(bad)
    with pytest.raises(ValueError):
        MatrixPose(np.eye(3))


def test_apply_rejects_non_3d_points():
    with pytest.raises(ValueError):
        RigidPose.identity().apply([1.0, 2.0])
