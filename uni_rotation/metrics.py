"""
Distances between rotations.

The geodesic distance on SO(3) is the angle of the relative rotation R1ᵀ R2.
"""

from __future__ import annotations

import math

from ._core import ArrayLike, matmul, namespace, transpose_last_two


def rotation_angle(matrix: ArrayLike) -> ArrayLike:
    """
    Rotation angle of a matrix, in [0, π].

    Evaluated as atan2(|axial vector|, (trace - 1) / 2). Unlike arccos of the
    trace this stays accurate for angles near zero.
    """
    xp = namespace(matrix)
    m = matrix
    sx = m[2, 1] - m[1, 2]
    sy = m[0, 2] - m[2, 0]
    sz = m[1, 0] - m[0, 1]
    sin_angle = xp.sqrt(sx * sx + sy * sy + sz * sz) / 2
    cos_angle = (m[0, 0] + m[1, 1] + m[2, 2] - 1) / 2
    return xp.atan2(sin_angle, cos_angle)


def geodesic_distance(R1: ArrayLike, R2: ArrayLike, degrees: bool = False) -> float:
    """
    Geodesic distance between two rotation matrices.

    Args:
        R1: First rotation matrix (3, 3)
        R2: Second rotation matrix (3, 3)
        degrees: If True, return the angle in degrees

    Returns:
        Angle of R1ᵀ R2 in [0, π] (or [0, 180])
    """
    angle = float(rotation_angle(matmul(transpose_last_two(R1), R2)))
    return math.degrees(angle) if degrees else angle
