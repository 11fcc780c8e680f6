"""
Interoperability with :class:`scipy.spatial.transform.Rotation`.

SciPy stores quaternions as xyzw (scalar-last); this library uses wxyz. Only
single rotations are exchanged.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from scipy.spatial.transform import Rotation as ScipyRotation

from ._core import RotationKind, to_backend, to_numpy
from .rotation import Rotation, representation_class, resolve_kind


def to_scipy(rotation: Rotation) -> ScipyRotation:
    """
    Convert any rotation to a SciPy rotation.

    Torch tensors are detached and moved to the CPU.
    """
    wxyz = to_numpy(rotation.as_quaternion()).astype(np.float64)
    return ScipyRotation.from_quat(wxyz[[1, 2, 3, 0]])


def from_scipy(
    scipy_rotation: ScipyRotation,
    to: Union[str, RotationKind, type] = RotationKind.QUATERNION,
    *,
    backend="numpy",
    dtype=None,
    device=None,
) -> Rotation:
    """
    Convert a single SciPy rotation to any representation.

    Args:
        scipy_rotation: Single (not stacked) SciPy rotation
        to: Target rotation class, RotationKind or kind name
        backend: "numpy" or "torch"
        dtype: Precision of the result
        device: Torch device

    Raises:
        ValueError: If ``scipy_rotation`` holds more than one rotation
    """
    if not scipy_rotation.single:
        raise ValueError(
            f"Only single rotations can be converted, got a stack of {len(scipy_rotation)}"
        )
    xyzw = scipy_rotation.as_quat()
    wxyz = to_backend(xyzw[[3, 0, 1, 2]], backend, dtype=dtype, device=device)
    quaternion = representation_class(RotationKind.QUATERNION)(wxyz, validate=False)
    return representation_class(resolve_kind(to)).from_rotation(quaternion)
