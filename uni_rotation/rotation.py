"""
Rotation interface implementing the generic rotation algebra.

Every representation (matrix, quaternion, angle-axis, rotation vector, euler
angles) derives from :class:`Rotation`. Composition, inversion, comparison and
conversion are written once here on top of the conversion dispatch table, so
they work across any pair of representations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Dict, Tuple, Type, TypeVar, Union

from ._core import (
    ArrayLike,
    Backend,
    DEFAULT_TOLERANCE,
    REP_SHAPES,
    RotationKind,
    as_float_array,
    cast,
    clone,
    eye,
    format_scalars,
    get_backend,
    matmul,
    max_abs,
    to_backend,
    to_numpy,
    transpose_last_two,
    validation_enabled,
)
from .conversions import canonical_quaternion, convert_rotation, quaternion_multiply
from .metrics import geodesic_distance


logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Rotation")

_REPRESENTATIONS: Dict[RotationKind, Type["Rotation"]] = {}

# Native composition per representation kind
_PRODUCTS = {
    RotationKind.MATRIX: matmul,
    RotationKind.QUATERNION: quaternion_multiply,
}


def representation_class(kind: Union[str, RotationKind]) -> Type["Rotation"]:
    """Concrete rotation class registered for a representation kind."""
    kind = RotationKind(kind)
    try:
        return _REPRESENTATIONS[kind]
    except KeyError:
        raise ValueError(f"No rotation class registered for: {kind.value}") from None


def resolve_kind(target: Union[str, RotationKind, Type["Rotation"], "Rotation"]) -> RotationKind:
    """Representation kind of a rotation class, instance, enum member or name."""
    if isinstance(target, Rotation) or (isinstance(target, type) and issubclass(target, Rotation)):
        return target.kind
    return RotationKind(target)


class Rotation(ABC):
    """
    Interface shared by all rotation representations.

    Subclasses are dataclasses holding their coefficients in ``data`` (a NumPy
    array or PyTorch tensor) and declare their ``kind``. Defining a subclass with
    a ``kind`` registers it for conversion lookups.

    Example:
        >>> aa = AngleAxis.from_angle_axis(np.pi / 2, [0, 0, 1])
        >>> R = RotationMatrix.from_rotation(aa)
        >>> q = aa @ R  # composed in angle-axis, R applied first
        >>> q.is_near(RotationVector.from_xyz(0, 0, np.pi))
        True
    """

    __slots__ = ()

    kind: ClassVar[RotationKind]
    _product_kind: ClassVar[RotationKind] = RotationKind.QUATERNION
    _coefficient_names: ClassVar[Tuple[str, ...]] = ()

    data: ArrayLike
    backend: Backend

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if "kind" in cls.__dict__:
            _REPRESENTATIONS[cls.kind] = cls

    def _setup(self, validate: bool) -> None:
        """Take ownership of the coefficients, check shape and (optionally) validity."""
        self.data = as_float_array(self.data)
        expected = REP_SHAPES[self.kind]
        if tuple(self.data.shape) != expected:
            raise ValueError(
                f"{type(self).__name__} coefficients must have shape {expected}, "
                f"got {tuple(self.data.shape)}"
            )
        self.backend = get_backend(self.data)
        if validate and validation_enabled():
            self._check()

    def _check(self) -> None:
        """Raise InvalidRepresentationError if the coefficients are off the manifold."""

    def _set_coefficients(self, values) -> None:
        """Replace the coefficients in place, validating like the constructor."""
        data = to_backend(values, self.backend, dtype=self.dtype, device=self.device)
        self.data = type(self)(data).data

    @abstractmethod
    def _inverted_data(self) -> ArrayLike:
        """Coefficients of the inverse rotation."""

    @abstractmethod
    def _unique_data(self) -> ArrayLike:
        """Coefficients of the canonical member of the equivalence class."""

    def _fixed_data(self) -> ArrayLike:
        """Coefficients re-projected onto the manifold."""
        return clone(self.data)

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def _from_data(cls: Type[R], data: ArrayLike) -> R:
        """Wrap freshly computed coefficients without re-validating them."""
        return cls(data, validate=False)

    @classmethod
    def identity(
        cls: Type[R],
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> R:
        """Create identity rotation."""
        matrix = eye(3, backend, dtype=dtype, device=device)
        return cls._from_data(convert_rotation(matrix, RotationKind.MATRIX, cls.kind))

    @classmethod
    def from_rotation(cls: Type[R], other: "Rotation", *, dtype=None) -> R:
        """
        Create from any other rotation via the conversion table.

        Args:
            other: Rotation in any representation
            dtype: Precision of the result; the source is cast before converting

        Returns:
            New, independent rotation of this class
        """
        data = cast(other.data, dtype)
        return cls._from_data(convert_rotation(data, other.kind, cls.kind))

    @classmethod
    def exp_map(cls: Type[R], vector, *, dtype=None) -> R:
        """Create from a rotation vector (exponential map of so(3))."""
        rotvec = as_float_array(vector, dtype=dtype)
        return cls._from_data(convert_rotation(rotvec, RotationKind.ROTATION_VECTOR, cls.kind))

    # -------------------------------------------------------------------------
    # Conversion Methods
    # -------------------------------------------------------------------------

    def to(self, target, *, dtype=None) -> "Rotation":
        """
        Convert to another representation.

        Args:
            target: Rotation class, RotationKind or kind name ("matrix", "quat", ...)
            dtype: Precision of the result

        Returns:
            New rotation of the target representation
        """
        return representation_class(resolve_kind(target)).from_rotation(self, dtype=dtype)

    def assign(self: R, other: "Rotation") -> R:
        """Overwrite this rotation in place with ``other`` converted to this representation."""
        self._check_backend(other)
        data = cast(other.data, self.dtype)
        self.data = convert_rotation(data, other.kind, self.kind)
        return self

    def as_matrix(self) -> ArrayLike:
        """Return rotation matrix (3, 3)."""
        return convert_rotation(self.data, self.kind, RotationKind.MATRIX)

    def as_quaternion(self) -> ArrayLike:
        """Return quaternion (wxyz format)."""
        return convert_rotation(self.data, self.kind, RotationKind.QUATERNION)

    def log_map(self) -> ArrayLike:
        """Return rotation vector (logarithmic map to so(3))."""
        return convert_rotation(self.data, self.kind, RotationKind.ROTATION_VECTOR)

    # -------------------------------------------------------------------------
    # Rotation Operations
    # -------------------------------------------------------------------------

    def compose(self: R, other: "Rotation") -> R:
        """
        Compose rotations: the result applies ``other`` first, then ``self``.

        The product is evaluated in this representation's native form (matrix or
        quaternion product); each operand is converted straight to that form. The
        result has this rotation's type and dtype.
        """
        self._check_backend(other)
        product_kind = self._product_kind
        lhs = convert_rotation(self.data, self.kind, product_kind)
        rhs = convert_rotation(cast(other.data, self.dtype), other.kind, product_kind)
        product = _PRODUCTS[product_kind](lhs, rhs)
        return self._from_data(convert_rotation(product, product_kind, self.kind))

    def __matmul__(self: R, other: "Rotation") -> R:
        """Compose rotations: self @ other applies other first, then self."""
        return self.compose(other)

    def inverted(self: R) -> R:
        """Return the inverse rotation."""
        return self._from_data(self._inverted_data())

    def invert(self: R) -> R:
        """Invert the rotation in place."""
        self.data = self._inverted_data()
        return self

    def rotate(self, vector) -> ArrayLike:
        """
        Apply rotation to a vector.

        Args:
            vector: Vector to rotate (3,)

        Returns:
            Rotated vector (3,), same backend and dtype as the rotation
        """
        v = to_backend(vector, self.backend, dtype=self.dtype, device=self.device)
        return matmul(self.as_matrix(), v)

    def inverse_rotate(self, vector) -> ArrayLike:
        """Apply the inverse rotation to a vector."""
        v = to_backend(vector, self.backend, dtype=self.dtype, device=self.device)
        return matmul(transpose_last_two(self.as_matrix()), v)

    def box_plus(self: R, vector) -> R:
        """Perturb by a rotation vector: exp(vector) ∘ self."""
        v = to_backend(vector, self.backend, dtype=self.dtype, device=self.device)
        return type(self).exp_map(v).compose(self)

    def box_minus(self, other: "Rotation") -> ArrayLike:
        """Rotation vector v such that other.box_plus(v) equals self."""
        return self.compose(other.inverted()).log_map()

    # -------------------------------------------------------------------------
    # Canonicalization and Drift Correction
    # -------------------------------------------------------------------------

    def get_unique(self: R) -> R:
        """Return the canonical representative of this rotation."""
        return self._from_data(self._unique_data())

    def set_unique(self: R) -> R:
        """Canonicalize in place."""
        self.data = self._unique_data()
        return self

    def fixed(self: R) -> R:
        """Return a copy with accumulated numerical drift removed."""
        return self._from_data(self._fixed_data())

    def fix(self: R) -> R:
        """Remove accumulated numerical drift in place."""
        logger.debug(f"Fixing {type(self).__name__} coefficients {format_scalars(to_numpy(self.data).ravel())}")
        self.data = self._fixed_data()
        return self

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def _canonical_quaternions(self, other: "Rotation") -> Tuple[ArrayLike, ArrayLike]:
        self._check_backend(other)
        q1 = canonical_quaternion(self.as_quaternion())
        q2 = canonical_quaternion(
            convert_rotation(cast(other.data, self.dtype), other.kind, RotationKind.QUATERNION)
        )
        return q1, q2

    def is_near(self, other: "Rotation", tol: float = DEFAULT_TOLERANCE) -> bool:
        """
        Check whether two rotations are equal within tolerance, in any representations.

        Both are compared as canonical quaternions; the antipodal quaternion is
        accepted too, since near 180° the sign tie-break is itself subject to noise.
        """
        q1, q2 = self._canonical_quaternions(other)
        return max_abs(q1 - q2) <= tol or max_abs(q1 + q2) <= tol

    def is_equal(self, other: "Rotation") -> bool:
        """Exact equality of the canonical quaternions."""
        q1, q2 = self._canonical_quaternions(other)
        return max_abs(q1 - q2) == 0.0

    def disparity_angle(self, other: "Rotation", degrees: bool = False) -> float:
        """Angle of the rotation taking ``other`` to ``self``, in [0, π]."""
        self._check_backend(other)
        other_matrix = convert_rotation(cast(other.data, self.dtype), other.kind, RotationKind.MATRIX)
        return geodesic_distance(other_matrix, self.as_matrix(), degrees=degrees)

    def _check_backend(self, other: "Rotation") -> None:
        if self.backend != other.backend:
            raise ValueError(
                f"Cannot combine rotations with different backends: "
                f"{self.backend} vs {other.backend}"
            )

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    @property
    def dtype(self):
        """Get data type."""
        return self.data.dtype

    @property
    def device(self):
        """Get device (for PyTorch tensors)."""
        if self.backend == "torch":
            return self.data.device
        return None

    def cast(self: R, dtype) -> R:
        """Return a copy with coefficients cast to another precision."""
        return self._from_data(cast(self.data, dtype))

    def clone(self: R) -> R:
        """Create a copy of the rotation."""
        return self._from_data(clone(self.data))

    def __str__(self) -> str:
        """Raw coefficients in storage order."""
        return format_scalars(to_numpy(self.data).ravel())

    def __repr__(self) -> str:
        """String representation."""
        values = to_numpy(self.data).ravel()
        coefficients = ", ".join(
            f"{name}={float(value)!r}" for name, value in zip(self._coefficient_names, values)
        )
        return f"{type(self).__name__}({coefficients}, backend={self.backend}, dtype={self.dtype})"
