"""
Plain quaternions.

:class:`Quaternion` is an arbitrary element of the quaternion algebra and
:class:`UnitQuaternion` one of unit length. Neither is a rotation by itself;
use :class:`~uni_rotation.representations.RotationQuaternion` for that.
Coefficients are stored in wxyz order.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import TypeVar, Union

from ._core import (
    ArrayLike,
    Backend,
    InvalidRepresentationError,
    QUATERNION_NORM_TOLERANCE,
    as_float_array,
    cast,
    clone,
    format_scalars,
    get_backend,
    max_abs,
    norm,
    normalize,
    stack_scalars,
    to_backend,
    to_numpy,
    validation_enabled,
)
from .conversions import quaternion_conjugate, quaternion_multiply


Q = TypeVar("Q", bound="_QuaternionBase")


class _QuaternionBase:
    """Storage, accessors and the Hamilton product shared by both quaternion types."""

    __slots__ = ()

    data: ArrayLike
    backend: Backend

    def _setup(self, validate: bool) -> None:
        self.data = as_float_array(self.data)
        if tuple(self.data.shape) != (4,):
            raise ValueError(
                f"{type(self).__name__} coefficients must have shape (4,), got {tuple(self.data.shape)}"
            )
        self.backend = get_backend(self.data)
        if validate and validation_enabled():
            self._check()

    def _check(self) -> None:
        pass

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
    ):
        """Create from the four coefficients."""
        return cls(to_backend([w, x, y, z], backend, dtype=dtype, device=device))

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

    @property
    def dtype(self):
        return self.data.dtype

    def set_values(self, w: float, x: float, y: float, z: float) -> None:
        """Replace all four coefficients, validating like the constructor."""
        self.data = type(self)(stack_scalars([w, x, y, z], like=self.data)).data

    def norm(self) -> float:
        return float(norm(self.data))

    def normalized(self: Q) -> Q:
        """Return a copy scaled to unit norm."""
        return type(self)(normalize(self.data), validate=False)

    def normalize(self: Q) -> Q:
        """Scale to unit norm in place."""
        self.data = normalize(self.data)
        return self

    def multiply(self, other: "_QuaternionBase") -> Union["Quaternion", "UnitQuaternion"]:
        """
        Hamilton product self * other.

        The product of two unit quaternions is a UnitQuaternion, anything else a
        Quaternion.
        """
        if self.backend != other.backend:
            raise ValueError(
                f"Cannot multiply quaternions with different backends: "
                f"{self.backend} vs {other.backend}"
            )
        product = quaternion_multiply(self.data, cast(other.data, self.dtype))
        if isinstance(self, UnitQuaternion) and isinstance(other, UnitQuaternion):
            return UnitQuaternion(product, validate=False)
        return Quaternion(product)

    def __mul__(self, other: "_QuaternionBase"):
        return self.multiply(other)

    def is_equal(self, other: "_QuaternionBase") -> bool:
        """Exact equality of the coefficients."""
        if self.backend != other.backend:
            return False
        return max_abs(self.data - cast(other.data, self.dtype)) == 0.0

    def __str__(self) -> str:
        """Coefficients as ``w x y z``."""
        return format_scalars(to_numpy(self.data))

    def __repr__(self) -> str:
        w, x, y, z = (float(v) for v in to_numpy(self.data))
        return f"{type(self).__name__}(w={w!r}, x={x!r}, y={y!r}, z={z!r}, backend={self.backend})"


@dataclass(slots=True, eq=False, repr=False)
class Quaternion(_QuaternionBase):
    """
    Quaternion without norm constraint.

    Example:
        >>> q = Quaternion.from_wxyz(1, 2, 3, 4)
        >>> (q * q.inverted()).is_equal(Quaternion.from_wxyz(1, 0, 0, 0))
        True
    """

    data: ArrayLike  # (4,) wxyz
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    @classmethod
    def zero(cls, backend: Backend = "numpy", dtype=None, device=None) -> "Quaternion":
        """The quaternion 0 + 0i + 0j + 0k."""
        return cls.from_wxyz(0.0, 0.0, 0.0, 0.0, backend=backend, dtype=dtype, device=device)

    @_QuaternionBase.w.setter
    def w(self, value) -> None:
        self.data[0] = value

    @_QuaternionBase.x.setter
    def x(self, value) -> None:
        self.data[1] = value

    @_QuaternionBase.y.setter
    def y(self, value) -> None:
        self.data[2] = value

    @_QuaternionBase.z.setter
    def z(self, value) -> None:
        self.data[3] = value

    def conjugated(self) -> "Quaternion":
        return Quaternion(quaternion_conjugate(self.data))

    def inverted(self) -> "Quaternion":
        """Multiplicative inverse: conjugate divided by the squared norm."""
        squared_norm = norm(self.data) ** 2
        if float(squared_norm) == 0:
            raise InvalidRepresentationError("Cannot invert a quaternion of zero norm.")
        return Quaternion(quaternion_conjugate(self.data) / squared_norm)

    def to_unit(self) -> "UnitQuaternion":
        """Unit quaternion pointing in the same direction."""
        return UnitQuaternion(normalize(self.data), validate=False)


@dataclass(slots=True, eq=False, repr=False)
class UnitQuaternion(_QuaternionBase):
    """Quaternion of unit length; construction checks the norm to 1e-6."""

    data: ArrayLike  # (4,) wxyz
    backend: Backend = field(init=False)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        self._setup(validate)

    def _check(self) -> None:
        if abs(float(norm(self.data)) - 1.0) > QUATERNION_NORM_TOLERANCE:
            raise InvalidRepresentationError("Input quaternion has not unit length.")

    @classmethod
    def identity(cls, backend: Backend = "numpy", dtype=None, device=None) -> "UnitQuaternion":
        return cls.from_wxyz(1.0, 0.0, 0.0, 0.0, backend=backend, dtype=dtype, device=device)

    def conjugated(self) -> "UnitQuaternion":
        return UnitQuaternion(quaternion_conjugate(self.data), validate=False)

    def inverted(self) -> "UnitQuaternion":
        """For unit length the inverse is the conjugate."""
        return self.conjugated()

    def to_quaternion(self) -> Quaternion:
        return Quaternion(clone(self.data))

    def to_unit(self) -> "UnitQuaternion":
        return UnitQuaternion(clone(self.data), validate=False)
