"""
Concrete rotation representations.

Each class stores the minimal coefficients of its parameterization in ``data``
(NumPy array or PyTorch tensor) and implements the :class:`Rotation` interface.
Constructors copy their input, so every instance is an independent value.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import ClassVar, Tuple

from ._core import (
    ArrayLike,
    Backend,
    InvalidRepresentationError,
    MATRIX_TOLERANCE,
    QUATERNION_NORM_TOLERANCE,
    RotationKind,
    as_float_array,
    clone,
    det,
    eye_like,
    format_scalars,
    matmul,
    max_abs,
    norm,
    normalize,
    stack_scalars,
    take_indices,
    to_backend,
    to_numpy,
    transpose_last_two,
)
from .conversions import (
    canonical_angle_axis,
    canonical_euler,
    canonical_quaternion,
    canonical_rotvec,
    convert_rotation,
    orthogonalize_matrix,
    quaternion_conjugate,
    rescale_matrix,
)
from .quaternion import UnitQuaternion
from .rotation import Rotation


# =============================================================================
# Rotation Matrix
# =============================================================================


@dataclass(slots=True, eq=False, repr=False)
class RotationMatrix(Rotation):
    """
    Rotation as a 3x3 orthogonal matrix with unit determinant.

    Example:
        >>> R = RotationMatrix.from_elements(0, -1, 0, 1, 0, 0, 0, 0, 1)
        >>> R.rotate([1.0, 0.0, 0.0])
        array([0., 1., 0.])
    """

    kind: ClassVar[RotationKind] = RotationKind.MATRIX
    _product_kind: ClassVar[RotationKind] = RotationKind.MATRIX
    _coefficient_names: ClassVar[Tuple[str, ...]] = (
        "r11", "r12", "r13", "r21", "r22", "r23", "r31", "r32", "r33",
    )

    data: ArrayLike  # (3, 3)
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_elements(
        cls,
        r11: float, r12: float, r13: float,
        r21: float, r22: float, r23: float,
        r31: float, r32: float, r33: float,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "RotationMatrix":
        """Create from nine scalars in row-major order."""
        rows = [[r11, r12, r13], [r21, r22, r23], [r31, r32, r33]]
        return cls(to_backend(rows, backend, dtype=dtype, device=device))

    def _check(self) -> None:
        R = self.data
        if max_abs(matmul(R, transpose_last_two(R)) - eye_like(R)) > MATRIX_TOLERANCE:
            raise InvalidRepresentationError("Input matrix is not orthogonal.")
        if abs(float(det(R)) - 1.0) > MATRIX_TOLERANCE:
            raise InvalidRepresentationError("Input matrix determinant is not 1.")

    @property
    def matrix(self) -> ArrayLike:
        """Rotation matrix (3, 3)."""
        return self.data

    @matrix.setter
    def matrix(self, value) -> None:
        self._set_coefficients(value)

    def determinant(self) -> float:
        """Determinant of the matrix (1 for a valid rotation)."""
        return float(det(self.data))

    def transposed(self) -> "RotationMatrix":
        """Return the transpose, which is the inverse rotation."""
        return self.inverted()

    def transpose(self) -> "RotationMatrix":
        """Transpose in place."""
        return self.invert()

    def _inverted_data(self) -> ArrayLike:
        return clone(transpose_last_two(self.data))

    def _unique_data(self) -> ArrayLike:
        return clone(self.data)

    def _fixed_data(self) -> ArrayLike:
        return orthogonalize_matrix(rescale_matrix(self.data))

    def __str__(self) -> str:
        """Matrix rows, one per line."""
        return "\n".join(format_scalars(row) for row in to_numpy(self.data))


# =============================================================================
# Rotation Quaternion
# =============================================================================


@dataclass(slots=True, eq=False, repr=False)
class RotationQuaternion(Rotation):
    """
    Rotation as a unit quaternion, coefficients in wxyz order.

    q and -q describe the same rotation; ``get_unique`` picks the one with w > 0.
    """

    kind: ClassVar[RotationKind] = RotationKind.QUATERNION
    _coefficient_names: ClassVar[Tuple[str, ...]] = ("w", "x", "y", "z")

    data: ArrayLike  # (4,) wxyz
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_wxyz(
        cls,
        w: float,
        x: float,
        y: float,
        z: float,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "RotationQuaternion":
        """Create from the four coefficients."""
        return cls(to_backend([w, x, y, z], backend, dtype=dtype, device=device))

    @classmethod
    def from_unit_quaternion(cls, quaternion: UnitQuaternion) -> "RotationQuaternion":
        """Create from a unit quaternion."""
        return cls(quaternion.data)

    def to_unit_quaternion(self) -> UnitQuaternion:
        """Return the coefficients as a UnitQuaternion."""
        return UnitQuaternion(clone(self.data), validate=False)

    def _check(self) -> None:
        if abs(float(norm(self.data)) - 1.0) > QUATERNION_NORM_TOLERANCE:
            raise InvalidRepresentationError("Input quaternion has not unit length.")

    @property
    def w(self):
        return self.data[0]

    @property
    def x(self):
        return self.data[1]

    @property
    def y(self):
        return self.data[2]

    @property
    def z(self):
        return self.data[3]

    def set_values(self, w: float, x: float, y: float, z: float) -> None:
        """Replace the coefficients, validating the unit norm."""
        self._set_coefficients([w, x, y, z])

    def as_xyzw(self) -> ArrayLike:
        """Coefficients in xyzw order (SciPy/ROS convention)."""
        return take_indices(self.data, (1, 2, 3, 0))

    def norm(self) -> float:
        return float(norm(self.data))

    def conjugated(self) -> "RotationQuaternion":
        """Return the conjugate, which is the inverse rotation."""
        return self.inverted()

    def conjugate(self) -> "RotationQuaternion":
        """Conjugate in place."""
        return self.invert()

    def normalized(self) -> "RotationQuaternion":
        """Return a copy rescaled to unit norm."""
        return self.fixed()

    def normalize(self) -> "RotationQuaternion":
        """Rescale to unit norm in place."""
        return self.fix()

    def _inverted_data(self) -> ArrayLike:
        return quaternion_conjugate(self.data)

    def _unique_data(self) -> ArrayLike:
        return canonical_quaternion(self.data)

    def _fixed_data(self) -> ArrayLike:
        return normalize(self.data)


# =============================================================================
# Angle-Axis
# =============================================================================


@dataclass(slots=True, eq=False, repr=False)
class AngleAxis(Rotation):
    """Rotation by ``angle`` (radians) about a unit ``axis``, stored as [angle, x, y, z]."""

    kind: ClassVar[RotationKind] = RotationKind.ANGLE_AXIS
    _coefficient_names: ClassVar[Tuple[str, ...]] = ("angle", "x", "y", "z")

    data: ArrayLike  # (4,) [angle, axis]
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_angle_axis(
        cls,
        angle: float,
        axis,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "AngleAxis":
        """Create from an angle in radians and a unit axis (3,)."""
        axis = as_float_array(to_backend(axis, backend, dtype=dtype, device=device))
        return cls(stack_scalars([angle, axis[0], axis[1], axis[2]], like=axis))

    @property
    def angle(self):
        return self.data[0]

    @angle.setter
    def angle(self, value) -> None:
        self.data[0] = value

    @property
    def axis(self) -> ArrayLike:
        return self.data[1:4]

    @axis.setter
    def axis(self, value) -> None:
        self.data[1:4] = to_backend(value, self.backend, dtype=self.dtype, device=self.device)

    @property
    def vector(self) -> ArrayLike:
        """Coefficients [angle, x, y, z]."""
        return self.data

    @vector.setter
    def vector(self, value) -> None:
        self._set_coefficients(value)

    def _inverted_data(self) -> ArrayLike:
        return stack_scalars([-self.data[0], self.data[1], self.data[2], self.data[3]], like=self.data)

    def _unique_data(self) -> ArrayLike:
        return canonical_angle_axis(self.data)

    def _fixed_data(self) -> ArrayLike:
        axis_norm = norm(self.data[1:4])
        if float(axis_norm) == 0:
            return stack_scalars([self.data[0], 1.0, 0.0, 0.0], like=self.data)
        axis = self.data[1:4] / axis_norm
        return stack_scalars([self.data[0], axis[0], axis[1], axis[2]], like=self.data)


# =============================================================================
# Rotation Vector
# =============================================================================


@dataclass(slots=True, eq=False, repr=False)
class RotationVector(Rotation):
    """Rotation as axis * angle; the norm is the angle in radians."""

    kind: ClassVar[RotationKind] = RotationKind.ROTATION_VECTOR
    _coefficient_names: ClassVar[Tuple[str, ...]] = ("x", "y", "z")

    data: ArrayLike  # (3,)
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_xyz(
        cls,
        x: float,
        y: float,
        z: float,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "RotationVector":
        """Create from the three components."""
        return cls(to_backend([x, y, z], backend, dtype=dtype, device=device))

    @property
    def vector(self) -> ArrayLike:
        return self.data

    @vector.setter
    def vector(self, value) -> None:
        self._set_coefficients(value)

    @property
    def angle(self):
        """Rotation angle (norm of the vector)."""
        return norm(self.data)

    @property
    def axis(self) -> ArrayLike:
        """Unit rotation axis, (1, 0, 0) for the zero rotation."""
        return convert_rotation(self.data, self.kind, RotationKind.ANGLE_AXIS)[1:4]

    def _inverted_data(self) -> ArrayLike:
        return -self.data

    def _unique_data(self) -> ArrayLike:
        return canonical_rotvec(self.data)


# =============================================================================
# Euler Angles
# =============================================================================


@dataclass(slots=True, eq=False, repr=False)
class EulerAnglesXyz(Rotation):
    """
    Tait-Bryan angles [x, y, z] (roll, pitch, yaw) with R = Rx(x) @ Ry(y) @ Rz(z).

    Rotations are intrinsic: about x, then the new y, then the new z.
    """

    kind: ClassVar[RotationKind] = RotationKind.EULER_XYZ
    _product_kind: ClassVar[RotationKind] = RotationKind.MATRIX
    _coefficient_names: ClassVar[Tuple[str, ...]] = ("x", "y", "z")

    data: ArrayLike  # (3,) [x, y, z]
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_angles(
        cls,
        x: float,
        y: float,
        z: float,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "EulerAnglesXyz":
        """Create from the angles about x, y and z in radians."""
        return cls(to_backend([x, y, z], backend, dtype=dtype, device=device))

    @property
    def x(self):
        return self.data[0]

    @property
    def y(self):
        return self.data[1]

    @property
    def z(self):
        return self.data[2]

    @property
    def roll(self):
        return self.data[0]

    @property
    def pitch(self):
        return self.data[1]

    @property
    def yaw(self):
        return self.data[2]

    def set_angles(self, x: float, y: float, z: float) -> None:
        self._set_coefficients([x, y, z])

    def _inverted_data(self) -> ArrayLike:
        # Rx(a) Ry(b) Rz(c) inverts to Rz(-c) Ry(-b) Rx(-a)
        reversed_angles = -take_indices(self.data, (2, 1, 0))
        return convert_rotation(reversed_angles, RotationKind.EULER_ZYX, self.kind)

    def _unique_data(self) -> ArrayLike:
        return canonical_euler(self.data, gimbal_sign=1.0)


@dataclass(slots=True, eq=False, repr=False)
class EulerAnglesZyx(Rotation):
    """
    Tait-Bryan angles [z, y, x] (yaw, pitch, roll) with R = Rz(z) @ Ry(y) @ Rx(x).

    Rotations are intrinsic: about z, then the new y, then the new x.
    """

    kind: ClassVar[RotationKind] = RotationKind.EULER_ZYX
    _product_kind: ClassVar[RotationKind] = RotationKind.MATRIX
    _coefficient_names: ClassVar[Tuple[str, ...]] = ("z", "y", "x")

    data: ArrayLike  # (3,) [z, y, x]
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def from_angles(
        cls,
        z: float,
        y: float,
        x: float,
        *,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "EulerAnglesZyx":
        """Create from yaw, pitch and roll in radians."""
        return cls(to_backend([z, y, x], backend, dtype=dtype, device=device))

    @property
    def yaw(self):
        return self.data[0]

    @property
    def pitch(self):
        return self.data[1]

    @property
    def roll(self):
        return self.data[2]

    def set_angles(self, z: float, y: float, x: float) -> None:
        self._set_coefficients([z, y, x])

    def _inverted_data(self) -> ArrayLike:
        # Rz(a) Ry(b) Rx(c) inverts to Rx(-c) Ry(-b) Rz(-a)
        reversed_angles = -take_indices(self.data, (2, 1, 0))
        return convert_rotation(reversed_angles, RotationKind.EULER_XYZ, self.kind)

    def _unique_data(self) -> ArrayLike:
        return canonical_euler(self.data, gimbal_sign=-1.0)
