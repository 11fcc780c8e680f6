"""
Rotation conversion functions between different representations.

Supported representations (coefficient layout):
- rotation matrix (3, 3)
- quaternion (4,) in wxyz order
- angle-axis (4,) as [angle, axis_x, axis_y, axis_z]
- rotation vector (3,), magnitude is the angle in radians
- euler angles XYZ (3,) as [x, y, z], R = Rx(x) @ Ry(y) @ Rz(z)
- euler angles ZYX (3,) as [z, y, x], R = Rz(z) @ Ry(y) @ Rx(x)

All rotations are active. Every function accepts NumPy arrays and PyTorch tensors
and returns the same backend and dtype as its input.
"""

from __future__ import annotations

import itertools
import math
from typing import Callable, Dict, Tuple, Union, overload

import numpy as np
import torch

from ._core import (
    ArrayLike,
    REP_SHAPES,
    RotationKind,
    cbrt,
    clone,
    det,
    dummy_precision,
    get_backend,
    namespace,
    norm,
    stack_scalars,
)


# =============================================================================
# Quaternion Operations (wxyz convention)
# =============================================================================


@overload
def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_multiply(q1: torch.Tensor, q2: torch.Tensor) -> torch.Tensor: ...


def quaternion_multiply(q1: ArrayLike, q2: ArrayLike) -> ArrayLike:
    """
    Multiply two quaternions (Hamilton product).

    The result represents the composition of rotations: first q2, then q1.

    Args:
        q1: First quaternion in wxyz format (4,)
        q2: Second quaternion in wxyz format (4,)

    Returns:
        Product quaternion in wxyz format (4,)
    """
    w1, x1, y1, z1 = q1[0], q1[1], q1[2], q1[3]
    w2, x2, y2, z2 = q2[0], q2[1], q2[2], q2[3]

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return stack_scalars([w, x, y, z], like=q1)


@overload
def quaternion_conjugate(q: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_conjugate(q: torch.Tensor) -> torch.Tensor: ...


def quaternion_conjugate(q: ArrayLike) -> ArrayLike:
    """Compute quaternion conjugate. For unit quaternions, equals inverse."""
    return stack_scalars([q[0], -q[1], -q[2], -q[3]], like=q)


@overload
def quaternion_to_matrix(quat: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_to_matrix(quat: torch.Tensor) -> torch.Tensor: ...


def quaternion_to_matrix(quat: ArrayLike) -> ArrayLike:
    """
    Convert quaternion (wxyz) to rotation matrix.

    Args:
        quat: Unit quaternion in wxyz format (4,)

    Returns:
        Rotation matrix (3, 3)
    """
    w, x, y, z = quat[0], quat[1], quat[2], quat[3]

    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z

    return stack_scalars([
        1 - 2 * (yy + zz), 2 * (xy - wz), 2 * (xz + wy),
        2 * (xy + wz), 1 - 2 * (xx + zz), 2 * (yz - wx),
        2 * (xz - wy), 2 * (yz + wx), 1 - 2 * (xx + yy),
    ], like=quat, shape=(3, 3))


@overload
def matrix_to_quaternion(matrix: np.ndarray) -> np.ndarray: ...
@overload
def matrix_to_quaternion(matrix: torch.Tensor) -> torch.Tensor: ...


def matrix_to_quaternion(matrix: ArrayLike) -> ArrayLike:
    """
    Convert rotation matrix to quaternion (wxyz).

    Uses Shepperd's method for numerical stability. The result has w >= 0.

    Args:
        matrix: Rotation matrix (3, 3)

    Returns:
        Quaternion in wxyz format (4,)
    """
    xp = namespace(matrix)
    m = matrix

    trace = m[0, 0] + m[1, 1] + m[2, 2]

    if float(trace) > 0:
        s = xp.sqrt(trace + 1.0) * 2
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif float(m[0, 0]) > float(m[1, 1]) and float(m[0, 0]) > float(m[2, 2]):
        s = xp.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif float(m[1, 1]) > float(m[2, 2]):
        s = xp.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = xp.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s

    quat = stack_scalars([w, x, y, z], like=matrix)

    # Ensure positive w (canonical form)
    return -quat if float(quat[0]) < 0 else quat


# =============================================================================
# Angle-Axis
# =============================================================================


@overload
def angle_axis_to_matrix(angle_axis: np.ndarray) -> np.ndarray: ...
@overload
def angle_axis_to_matrix(angle_axis: torch.Tensor) -> torch.Tensor: ...


def angle_axis_to_matrix(angle_axis: ArrayLike) -> ArrayLike:
    """
    Convert angle-axis [angle, x, y, z] to rotation matrix (Rodrigues formula).

    Args:
        angle_axis: Angle in radians followed by the unit axis (4,)

    Returns:
        Rotation matrix (3, 3)
    """
    xp = namespace(angle_axis)
    angle = angle_axis[0]
    x, y, z = angle_axis[1], angle_axis[2], angle_axis[3]

    c = xp.cos(angle)
    s = xp.sin(angle)
    t = 1 - c

    return stack_scalars([
        t * x * x + c, t * x * y - s * z, t * x * z + s * y,
        t * x * y + s * z, t * y * y + c, t * y * z - s * x,
        t * x * z - s * y, t * y * z + s * x, t * z * z + c,
    ], like=angle_axis, shape=(3, 3))


@overload
def angle_axis_to_quaternion(angle_axis: np.ndarray) -> np.ndarray: ...
@overload
def angle_axis_to_quaternion(angle_axis: torch.Tensor) -> torch.Tensor: ...


def angle_axis_to_quaternion(angle_axis: ArrayLike) -> ArrayLike:
    """Convert angle-axis to quaternion (wxyz): q = [cos(θ/2), axis * sin(θ/2)]."""
    xp = namespace(angle_axis)
    half_angle = angle_axis[0] / 2
    s = xp.sin(half_angle)
    return stack_scalars(
        [xp.cos(half_angle), s * angle_axis[1], s * angle_axis[2], s * angle_axis[3]],
        like=angle_axis,
    )


@overload
def quaternion_to_angle_axis(quat: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_to_angle_axis(quat: torch.Tensor) -> torch.Tensor: ...


def quaternion_to_angle_axis(quat: ArrayLike) -> ArrayLike:
    """
    Convert quaternion (wxyz) to angle-axis.

    The angle is in [0, π]; the axis is flipped for quaternions with negative w.
    Without a defined axis (zero rotation) the axis is (1, 0, 0).
    """
    xp = namespace(quat)
    w = quat[0]
    vec = quat[1:4]
    n = norm(vec)

    if float(n) < dummy_precision(quat.dtype):
        return stack_scalars([0.0, 1.0, 0.0, 0.0], like=quat)

    angle = 2 * xp.atan2(n, xp.abs(w))
    axis = -vec / n if float(w) < 0 else vec / n
    return stack_scalars([angle, axis[0], axis[1], axis[2]], like=quat)


@overload
def angle_axis_to_rotvec(angle_axis: np.ndarray) -> np.ndarray: ...
@overload
def angle_axis_to_rotvec(angle_axis: torch.Tensor) -> torch.Tensor: ...


def angle_axis_to_rotvec(angle_axis: ArrayLike) -> ArrayLike:
    """Convert angle-axis to rotation vector (axis * angle)."""
    return angle_axis[1:4] * angle_axis[0]


@overload
def rotvec_to_angle_axis(rotvec: np.ndarray) -> np.ndarray: ...
@overload
def rotvec_to_angle_axis(rotvec: torch.Tensor) -> torch.Tensor: ...


def rotvec_to_angle_axis(rotvec: ArrayLike) -> ArrayLike:
    """Convert rotation vector to angle-axis; zero vectors map to axis (1, 0, 0)."""
    angle = norm(rotvec)
    if float(angle) < dummy_precision(rotvec.dtype):
        return stack_scalars([0.0, 1.0, 0.0, 0.0], like=rotvec)
    axis = rotvec / angle
    return stack_scalars([angle, axis[0], axis[1], axis[2]], like=rotvec)


# =============================================================================
# Rotation Vector
# =============================================================================


@overload
def rotvec_to_matrix(rotvec: np.ndarray) -> np.ndarray: ...
@overload
def rotvec_to_matrix(rotvec: torch.Tensor) -> torch.Tensor: ...


def rotvec_to_matrix(rotvec: ArrayLike) -> ArrayLike:
    """
    Convert rotation vector to rotation matrix.

    Below the precision threshold the linearized form I + [v]x is used, which
    avoids dividing by the vanishing norm. Above it, the half-angle expansion.

    Args:
        rotvec: Rotation vector (3,) where magnitude is angle in radians

    Returns:
        Rotation matrix (3, 3)
    """
    xp = namespace(rotvec)
    v1, v2, v3 = rotvec[0], rotvec[1], rotvec[2]
    v = norm(rotvec)

    if float(v) < dummy_precision(rotvec.dtype):
        return stack_scalars([
            1.0, -v3, v2,
            v3, 1.0, -v1,
            -v2, v1, 1.0,
        ], like=rotvec, shape=(3, 3))

    t3 = v * (1.0 / 2.0)
    t2 = xp.sin(t3)
    t4 = xp.cos(t3)
    t5 = 1.0 / (v * v)
    t6 = t4 * v * v3
    t7 = t2 * v1 * v2
    t8 = t2 * t2
    t9 = v1 * v1
    t10 = v2 * v2
    t11 = v3 * v3
    t12 = v * v
    t13 = t4 * t4
    t14 = t12 * t13
    t15 = t2 * v1 * v3
    t16 = t4 * v * v1
    t17 = t2 * v2 * v3

    r00 = t5 * (t14 - t8 * (-t9 + t10 + t11))
    r10 = t2 * t5 * (t6 + t7) * 2.0
    r20 = t2 * t5 * (t15 - t4 * v * v2) * 2.0
    r01 = t2 * t5 * (t6 - t7) * -2.0
    r11 = t5 * (t14 - t8 * (t9 - t10 + t11))
    r21 = t2 * t5 * (t16 + t17) * 2.0
    r02 = t2 * t5 * (t15 + t4 * v * v2) * 2.0
    r12 = t2 * t5 * (t16 - t17) * -2.0
    r22 = t5 * (t14 - t8 * (t9 + t10 - t11))

    return stack_scalars([
        r00, r01, r02,
        r10, r11, r12,
        r20, r21, r22,
    ], like=rotvec, shape=(3, 3))


@overload
def rotvec_to_quaternion(rotvec: np.ndarray) -> np.ndarray: ...
@overload
def rotvec_to_quaternion(rotvec: torch.Tensor) -> torch.Tensor: ...


def rotvec_to_quaternion(rotvec: ArrayLike) -> ArrayLike:
    """
    Convert rotation vector to quaternion (wxyz).

    Uses the formula: q = [cos(θ/2), axis * sin(θ/2)] where θ = ||rotvec||.
    """
    xp = namespace(rotvec)
    angle = norm(rotvec)
    half_angle = angle / 2

    if float(angle) > dummy_precision(rotvec.dtype):
        scale = xp.sin(half_angle) / angle
    else:
        scale = 0.5

    xyz = rotvec * scale
    return stack_scalars([xp.cos(half_angle), xyz[0], xyz[1], xyz[2]], like=rotvec)


@overload
def quaternion_to_rotvec(quat: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_to_rotvec(quat: torch.Tensor) -> torch.Tensor: ...


def quaternion_to_rotvec(quat: ArrayLike) -> ArrayLike:
    """
    Convert quaternion (wxyz) to rotation vector.

    Note:
        Uses sign flipping to ensure w >= 0, so the angle is at most π.
    """
    xp = namespace(quat)
    if float(quat[0]) < 0:
        quat = -quat

    w = quat[0]
    xyz = quat[1:4]
    n = norm(xyz)
    angle = 2 * xp.atan2(n, w)

    if float(n) > dummy_precision(quat.dtype):
        scale = angle / n
    else:
        scale = 2.0

    return xyz * scale


# =============================================================================
# Euler Angles
# =============================================================================


@overload
def euler_xyz_to_matrix(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_xyz_to_matrix(euler: torch.Tensor) -> torch.Tensor: ...


def euler_xyz_to_matrix(euler: ArrayLike) -> ArrayLike:
    """
    Convert XYZ euler angles [x, y, z] to R = Rx(x) @ Ry(y) @ Rz(z).

    Args:
        euler: Angles about x, y and z in radians (3,)

    Returns:
        Rotation matrix (3, 3)
    """
    xp = namespace(euler)
    sr, cr = xp.sin(euler[0]), xp.cos(euler[0])
    sp, cp = xp.sin(euler[1]), xp.cos(euler[1])
    sy, cy = xp.sin(euler[2]), xp.cos(euler[2])

    srsy = sr * sy
    srcy = sr * cy
    crsy = cr * sy
    crcy = cr * cy

    return stack_scalars([
        cp * cy, -cp * sy, sp,
        crsy + srcy * sp, crcy - srsy * sp, -sr * cp,
        srsy - crcy * sp, srcy + crsy * sp, cr * cp,
    ], like=euler, shape=(3, 3))


@overload
def euler_zyx_to_matrix(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_zyx_to_matrix(euler: torch.Tensor) -> torch.Tensor: ...


def euler_zyx_to_matrix(euler: ArrayLike) -> ArrayLike:
    """
    Convert ZYX euler angles [z, y, x] to R = Rz(z) @ Ry(y) @ Rx(x).

    Args:
        euler: Yaw, pitch and roll in radians (3,)

    Returns:
        Rotation matrix (3, 3)
    """
    xp = namespace(euler)
    sy, cy = xp.sin(euler[0]), xp.cos(euler[0])
    sp, cp = xp.sin(euler[1]), xp.cos(euler[1])
    sr, cr = xp.sin(euler[2]), xp.cos(euler[2])

    sysr = sy * sr
    sycr = sy * cr
    cysr = cy * sr
    cycr = cy * cr

    return stack_scalars([
        cy * cp, cysr * sp - sycr, sysr + cycr * sp,
        cp * sy, sysr * sp + cycr, sycr * sp - cysr,
        -sp, cp * sr, cp * cr,
    ], like=euler, shape=(3, 3))


@overload
def euler_xyz_to_quaternion(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_xyz_to_quaternion(euler: torch.Tensor) -> torch.Tensor: ...


def euler_xyz_to_quaternion(euler: ArrayLike) -> ArrayLike:
    """Convert XYZ euler angles to quaternion (wxyz) as qx ⊗ qy ⊗ qz."""
    xp = namespace(euler)
    half = euler / 2
    ca, sa = xp.cos(half[0]), xp.sin(half[0])
    cb, sb = xp.cos(half[1]), xp.sin(half[1])
    cc, sc = xp.cos(half[2]), xp.sin(half[2])

    return stack_scalars([
        ca * cb * cc - sa * sb * sc,
        sa * cb * cc + ca * sb * sc,
        ca * sb * cc - sa * cb * sc,
        ca * cb * sc + sa * sb * cc,
    ], like=euler)


@overload
def euler_zyx_to_quaternion(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_zyx_to_quaternion(euler: torch.Tensor) -> torch.Tensor: ...


def euler_zyx_to_quaternion(euler: ArrayLike) -> ArrayLike:
    """Convert ZYX euler angles to quaternion (wxyz) as qz ⊗ qy ⊗ qx."""
    xp = namespace(euler)
    half = euler / 2
    ca, sa = xp.cos(half[0]), xp.sin(half[0])
    cb, sb = xp.cos(half[1]), xp.sin(half[1])
    cc, sc = xp.cos(half[2]), xp.sin(half[2])

    return stack_scalars([
        ca * cb * cc + sa * sb * sc,
        ca * cb * sc - sa * sb * cc,
        ca * sb * cc + sa * cb * sc,
        sa * cb * cc - ca * sb * sc,
    ], like=euler)


@overload
def matrix_to_euler_xyz(matrix: np.ndarray) -> np.ndarray: ...
@overload
def matrix_to_euler_xyz(matrix: torch.Tensor) -> torch.Tensor: ...


def matrix_to_euler_xyz(matrix: ArrayLike) -> ArrayLike:
    """
    Extract XYZ euler angles [x, y, z] from a rotation matrix.

    The middle angle is in [-π/2, π/2], the outer angles in (-π, π]. At gimbal
    lock only x ± z is defined; z is set to 0.
    """
    xp = namespace(matrix)
    m = matrix
    cos_y = xp.sqrt(m[0, 0] * m[0, 0] + m[0, 1] * m[0, 1])
    y = xp.atan2(m[0, 2], cos_y)

    if float(cos_y) < dummy_precision(matrix.dtype):
        if float(m[0, 2]) > 0:
            x = xp.atan2(m[1, 0], m[1, 1])
        else:
            x = xp.atan2(-m[1, 0], m[1, 1])
        return stack_scalars([x, y, 0.0], like=matrix)

    x = xp.atan2(-m[1, 2], m[2, 2])
    # Rx(-x) @ m = Ry(y) @ Rz(z), whose middle row is [sin z, cos z, 0]
    c, s = xp.cos(x), xp.sin(x)
    z = xp.atan2(c * m[1, 0] + s * m[2, 0], c * m[1, 1] + s * m[2, 1])
    return stack_scalars([x, y, z], like=matrix)


@overload
def matrix_to_euler_zyx(matrix: np.ndarray) -> np.ndarray: ...
@overload
def matrix_to_euler_zyx(matrix: torch.Tensor) -> torch.Tensor: ...


def matrix_to_euler_zyx(matrix: ArrayLike) -> ArrayLike:
    """
    Extract ZYX euler angles [z, y, x] from a rotation matrix.

    The middle angle is in [-π/2, π/2], the outer angles in (-π, π]. At gimbal
    lock only z ∓ x is defined; x is set to 0.
    """
    xp = namespace(matrix)
    m = matrix
    cos_y = xp.sqrt(m[0, 0] * m[0, 0] + m[1, 0] * m[1, 0])
    y = xp.atan2(-m[2, 0], cos_y)

    if float(cos_y) < dummy_precision(matrix.dtype):
        z = xp.atan2(-m[0, 1], m[1, 1])
        return stack_scalars([z, y, 0.0], like=matrix)

    z = xp.atan2(m[1, 0], m[0, 0])
    # Rz(-z) @ m = Ry(y) @ Rx(x), whose middle row is [0, cos x, -sin x]
    c, s = xp.cos(z), xp.sin(z)
    x = xp.atan2(s * m[0, 2] - c * m[1, 2], c * m[1, 1] - s * m[0, 1])
    return stack_scalars([z, y, x], like=matrix)


# =============================================================================
# Canonical Forms
# =============================================================================


def _wrap_angle(angle):
    """Wrap into (-π, π]; values already in range are returned untouched."""
    if -math.pi < float(angle) <= math.pi:
        return angle
    return math.pi - (math.pi - angle) % (2 * math.pi)


def _first_nonzero_negative(vector: ArrayLike, tol: float = 0.0) -> bool:
    for value in vector:
        if abs(float(value)) > tol:
            return float(value) < 0
    return False


@overload
def canonical_quaternion(quat: np.ndarray) -> np.ndarray: ...
@overload
def canonical_quaternion(quat: torch.Tensor) -> torch.Tensor: ...


def canonical_quaternion(quat: ArrayLike) -> ArrayLike:
    """
    Resolve the double cover q ~ -q.

    The sign is chosen so that w > 0; for w == 0 the tie is broken on x, then y, then z.
    """
    if _first_nonzero_negative(quat):
        return -quat
    return clone(quat)


@overload
def canonical_angle_axis(angle_axis: np.ndarray) -> np.ndarray: ...
@overload
def canonical_angle_axis(angle_axis: torch.Tensor) -> torch.Tensor: ...


def canonical_angle_axis(angle_axis: ArrayLike) -> ArrayLike:
    """
    Canonical angle-axis with the angle in [0, π].

    A zero angle gets axis (1, 0, 0). Within dummy_precision of π the angle is
    snapped to π and the axis is chosen with its first non-zero component positive.
    """
    angle = _wrap_angle(angle_axis[0])
    axis = angle_axis[1:4]
    if float(angle) < 0:
        angle = -angle
        axis = -axis
    if float(angle) == 0:
        return stack_scalars([0.0, 1.0, 0.0, 0.0], like=angle_axis)
    tol = dummy_precision(angle_axis.dtype)
    if abs(float(angle) - math.pi) <= tol:
        if _first_nonzero_negative(axis, tol):
            axis = -axis
        angle = math.pi
    return stack_scalars([angle, axis[0], axis[1], axis[2]], like=angle_axis)


@overload
def canonical_rotvec(rotvec: np.ndarray) -> np.ndarray: ...
@overload
def canonical_rotvec(rotvec: torch.Tensor) -> torch.Tensor: ...


def canonical_rotvec(rotvec: ArrayLike) -> ArrayLike:
    """Canonical rotation vector with norm in [0, π], same tie-break as angle-axis at π."""
    angle = float(norm(rotvec))
    tol = dummy_precision(rotvec.dtype)
    if angle < math.pi - tol:
        return clone(rotvec)
    if angle <= math.pi + tol:
        return -rotvec if _first_nonzero_negative(rotvec, tol) else clone(rotvec)
    return angle_axis_to_rotvec(canonical_angle_axis(rotvec_to_angle_axis(rotvec)))


def canonical_euler(euler: ArrayLike, gimbal_sign: float) -> ArrayLike:
    """
    Canonical Tait-Bryan angles.

    Outer angles are wrapped into (-π, π] and the middle angle folded into
    [-π/2, π/2] with (a + π, π - b, c + π). At gimbal lock only a + s*c is
    defined, where s = gimbal_sign * sign(b); the third angle is set to 0.

    Args:
        euler: Angles (3,) in rotation order
        gimbal_sign: +1 for XYZ, -1 for ZYX
    """
    a, b, c = _wrap_angle(euler[0]), _wrap_angle(euler[1]), _wrap_angle(euler[2])

    if float(b) > math.pi / 2:
        a, b, c = _wrap_angle(a + math.pi), math.pi - b, _wrap_angle(c + math.pi)
    elif float(b) < -math.pi / 2:
        a, b, c = _wrap_angle(a + math.pi), -math.pi - b, _wrap_angle(c + math.pi)

    if math.cos(float(b)) < dummy_precision(euler.dtype):
        direction = 1.0 if float(b) > 0 else -1.0
        a = _wrap_angle(a + gimbal_sign * direction * c)
        c = 0.0

    return stack_scalars([a, b, c], like=euler)


# =============================================================================
# Utility Functions
# =============================================================================


@overload
def orthogonalize_matrix(matrix: np.ndarray) -> np.ndarray: ...
@overload
def orthogonalize_matrix(matrix: torch.Tensor) -> torch.Tensor: ...


def orthogonalize_matrix(matrix: ArrayLike) -> ArrayLike:
    """
    Project matrix to SO(3) using SVD.

    Useful for correcting accumulated numerical errors.

    Args:
        matrix: Approximate rotation matrix (3, 3)

    Returns:
        Valid rotation matrix (3, 3)
    """
    if get_backend(matrix) == "torch":
        U, _, Vh = torch.linalg.svd(matrix)
        R = U @ Vh
        return -R if float(torch.linalg.det(R)) < 0 else R

    U, _, Vh = np.linalg.svd(matrix)
    R = U @ Vh
    return -R if float(np.linalg.det(R)) < 0 else R


@overload
def rescale_matrix(matrix: np.ndarray) -> np.ndarray: ...
@overload
def rescale_matrix(matrix: torch.Tensor) -> torch.Tensor: ...


def rescale_matrix(matrix: ArrayLike) -> ArrayLike:
    """Divide by the cube root of the determinant, giving unit determinant."""
    return matrix * (1 / cbrt(det(matrix)))


# =============================================================================
# Generic Conversion Dispatch
# =============================================================================

ConversionHandler = Callable[[ArrayLike], ArrayLike]


def _via(first: ConversionHandler, second: ConversionHandler) -> ConversionHandler:
    """Chain two direct conversions through a pivot representation."""

    def convert(rotation: ArrayLike) -> ArrayLike:
        return second(first(rotation))

    return convert


def _make_conversion_table() -> Dict[Tuple[RotationKind, RotationKind], ConversionHandler]:
    """Create handlers for every ordered pair of representations."""
    M = RotationKind.MATRIX
    Q = RotationKind.QUATERNION
    AA = RotationKind.ANGLE_AXIS
    RV = RotationKind.ROTATION_VECTOR
    EX = RotationKind.EULER_XYZ
    EZ = RotationKind.EULER_ZYX

    return {
        # From matrix
        (M, M): clone,
        (M, Q): matrix_to_quaternion,
        (M, AA): _via(matrix_to_quaternion, quaternion_to_angle_axis),
        (M, RV): _via(matrix_to_quaternion, quaternion_to_rotvec),
        (M, EX): matrix_to_euler_xyz,
        (M, EZ): matrix_to_euler_zyx,
        # From quaternion
        (Q, M): quaternion_to_matrix,
        (Q, Q): clone,
        (Q, AA): quaternion_to_angle_axis,
        (Q, RV): quaternion_to_rotvec,
        (Q, EX): _via(quaternion_to_matrix, matrix_to_euler_xyz),
        (Q, EZ): _via(quaternion_to_matrix, matrix_to_euler_zyx),
        # From angle-axis
        (AA, M): angle_axis_to_matrix,
        (AA, Q): angle_axis_to_quaternion,
        (AA, AA): clone,
        (AA, RV): angle_axis_to_rotvec,
        (AA, EX): _via(angle_axis_to_matrix, matrix_to_euler_xyz),
        (AA, EZ): _via(angle_axis_to_matrix, matrix_to_euler_zyx),
        # From rotation vector
        (RV, M): rotvec_to_matrix,
        (RV, Q): rotvec_to_quaternion,
        (RV, AA): rotvec_to_angle_axis,
        (RV, RV): clone,
        (RV, EX): _via(rotvec_to_matrix, matrix_to_euler_xyz),
        (RV, EZ): _via(rotvec_to_matrix, matrix_to_euler_zyx),
        # From euler XYZ
        (EX, M): euler_xyz_to_matrix,
        (EX, Q): euler_xyz_to_quaternion,
        (EX, AA): _via(euler_xyz_to_quaternion, quaternion_to_angle_axis),
        (EX, RV): _via(euler_xyz_to_quaternion, quaternion_to_rotvec),
        (EX, EX): clone,
        (EX, EZ): _via(euler_xyz_to_matrix, matrix_to_euler_zyx),
        # From euler ZYX
        (EZ, M): euler_zyx_to_matrix,
        (EZ, Q): euler_zyx_to_quaternion,
        (EZ, AA): _via(euler_zyx_to_quaternion, quaternion_to_angle_axis),
        (EZ, RV): _via(euler_zyx_to_quaternion, quaternion_to_rotvec),
        (EZ, EX): _via(euler_zyx_to_matrix, matrix_to_euler_xyz),
        (EZ, EZ): clone,
    }


CONVERSION_TABLE = _make_conversion_table()

_missing = set(itertools.product(RotationKind, RotationKind)) - set(CONVERSION_TABLE)
if _missing:
    raise RuntimeError(f"Conversion table is missing pairs: {sorted(_missing)}")


def convert_rotation(
    rotation: ArrayLike,
    from_rep: Union[str, RotationKind],
    to_rep: Union[str, RotationKind],
) -> ArrayLike:
    """
    Convert between rotation representations.

    Args:
        rotation: Coefficients in source representation
        from_rep: Source representation ("matrix", "quat", "angle_axis", "rot_vec",
            "euler_xyz", "euler_zyx")
        to_rep: Target representation

    Returns:
        Coefficients in target representation, same backend and dtype

    Raises:
        ValueError: If a representation is unknown or the input shape does not match
    """
    from_rep = RotationKind(from_rep)
    to_rep = RotationKind(to_rep)
    expected = REP_SHAPES[from_rep]
    if tuple(rotation.shape) != expected:
        raise ValueError(
            f"{from_rep.value} rotation must have shape {expected}, got {tuple(rotation.shape)}"
        )
    return CONVERSION_TABLE[(from_rep, to_rep)](rotation)


