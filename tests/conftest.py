import numpy as np
import pytest

from uni_rotation import RotationQuaternion


def _normalized(q):
    q = np.asarray(q, dtype=np.float64)
    return q / np.linalg.norm(q)


@pytest.fixture
def np_rng():
    """Seeded random number generator."""
    return np.random.default_rng(seed=20240917)


@pytest.fixture
def set_of_quaternions(np_rng):
    """Unit quaternions (wxyz): special cases followed by random samples."""
    h = np.sqrt(0.5)
    specials = np.array([
        [1., 0., 0., 0.],
        [0., 1., 0., 0.],
        [0., 0., 1., 0.],
        [0., 0., 0., 1.],
        [h, 0., h, 0.],                      # +90 deg about y, gimbal lock for both euler orders
        [h, 0., -h, 0.],
        [h, h, 0., 0.],
        [0., h, -h, 0.],
        _normalized([1., 1e-9, 0., 0.]),     # tiny angle
        _normalized([1., 0., 2e-7, -1e-7]),
        _normalized([1e-9, 0., 0., 1.]),     # just below pi
        _normalized([-1e-9, 1., 1., 0.]),    # just above pi
    ])
    random = np_rng.normal(size=(40, 4))
    random /= np.linalg.norm(random, axis=1, keepdims=True)
    return np.vstack([specials, random])


@pytest.fixture
def set_of_rotations(set_of_quaternions):
    return [RotationQuaternion(q) for q in set_of_quaternions]


@pytest.fixture
def random_rotations(np_rng):
    """Random rotations away from the special cases."""
    q = np_rng.normal(size=(20, 4))
    q /= np.linalg.norm(q, axis=1, keepdims=True)
    return [RotationQuaternion(x) for x in q]
