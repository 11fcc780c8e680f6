"""
Core utilities: types, constants, configuration and backend-agnostic operations.

This module provides the foundational building blocks used throughout uni_rotation.
All internal modules depend on this module.
"""

from __future__ import annotations

import contextlib
import logging
import os
from enum import Enum
from typing import Iterator, List, Literal, Sequence, Tuple, Union

import numpy as np
import torch


logger = logging.getLogger(__name__)


# =============================================================================
# Type Definitions
# =============================================================================

ArrayLike = Union[np.ndarray, torch.Tensor]
Backend = Literal["numpy", "torch"]


# =============================================================================
# Numerical Constants
# =============================================================================

MATRIX_TOLERANCE = 1e-4  # Orthogonality / determinant check for matrices
QUATERNION_NORM_TOLERANCE = 1e-6  # Unit-norm check for quaternions
DEFAULT_TOLERANCE = 1e-6  # Default for rotation comparison

# Below these, small-angle branches are taken (Eigen's dummy_precision)
DOUBLE_DUMMY_PRECISION = 1e-12
SINGLE_DUMMY_PRECISION = 1e-5

_TORCH_SINGLE_DTYPES = (torch.float16, torch.bfloat16, torch.float32)


def dummy_precision(dtype) -> float:
    """Threshold below which a magnitude is treated as zero for the given precision."""
    if isinstance(dtype, torch.dtype):
        return SINGLE_DUMMY_PRECISION if dtype in _TORCH_SINGLE_DTYPES else DOUBLE_DUMMY_PRECISION
    return SINGLE_DUMMY_PRECISION if np.dtype(dtype).itemsize <= 4 else DOUBLE_DUMMY_PRECISION


# =============================================================================
# Enums
# =============================================================================


class RotationKind(str, Enum):
    """Rotation representation kinds."""

    MATRIX = "matrix"
    QUATERNION = "quat"
    ANGLE_AXIS = "angle_axis"
    ROTATION_VECTOR = "rot_vec"
    EULER_XYZ = "euler_xyz"
    EULER_ZYX = "euler_zyx"


# Shape of the coefficient array of each representation
REP_SHAPES = {
    RotationKind.MATRIX: (3, 3),
    RotationKind.QUATERNION: (4,),
    RotationKind.ANGLE_AXIS: (4,),
    RotationKind.ROTATION_VECTOR: (3,),
    RotationKind.EULER_XYZ: (3,),
    RotationKind.EULER_ZYX: (3,),
}


class InvalidRepresentationError(ValueError):
    """Raised when coefficients violate the manifold constraint of their representation."""

    pass


# =============================================================================
# Validation Configuration
# =============================================================================

_VALIDATION_ENV = "UNI_ROTATION_VALIDATE"
_validation = os.environ.get(_VALIDATION_ENV, "1").strip().lower() not in ("0", "false", "off", "no")


def validation_enabled() -> bool:
    """Whether validity-checked constructors run their check (never under ``python -O``)."""
    return __debug__ and _validation


def set_validation(enabled: bool) -> None:
    """Enable or disable construction-time validity checks process-wide."""
    global _validation
    if enabled != _validation:
        logger.info(f"Representation validation {'enabled' if enabled else 'disabled'}.")
    _validation = bool(enabled)


@contextlib.contextmanager
def validation(enabled: bool) -> Iterator[None]:
    """Temporarily enable or disable validity checks."""
    previous = _validation
    set_validation(enabled)
    try:
        yield
    finally:
        set_validation(previous)


# =============================================================================
# Backend Detection
# =============================================================================


def get_backend(x: ArrayLike) -> Backend:
    """Determine backend from input type."""
    return "torch" if isinstance(x, torch.Tensor) else "numpy"


def to_backend(
    x,
    backend: Backend,
    dtype=None,
    device=None,
) -> ArrayLike:
    """Convert array to specified backend."""
    if backend == "torch":
        if isinstance(x, torch.Tensor):
            return x.to(dtype=dtype, device=device) if dtype or device else x
        return torch.as_tensor(x, dtype=dtype, device=device)
    return np.asarray(x, dtype=dtype)


def as_float_array(x, dtype=None, device=None) -> ArrayLike:
    """
    Copy input into an owned floating-point array.

    Tensors stay tensors, everything else becomes a NumPy array. Integer input is
    promoted to float64 (NumPy) or the default torch dtype.
    """
    if isinstance(x, torch.Tensor):
        x = x.to(dtype=dtype, device=device) if dtype or device else x
        if not x.is_floating_point():
            x = x.to(torch.get_default_dtype())
        return x.clone()
    x = np.array(x, dtype=dtype)
    if not np.issubdtype(x.dtype, np.floating):
        x = x.astype(np.float64)
    return x


def namespace(x: ArrayLike):
    """Array module (numpy or torch) matching the input."""
    return torch if isinstance(x, torch.Tensor) else np


def cast(x: ArrayLike, dtype) -> ArrayLike:
    """Cast to dtype, no-op when dtype is None."""
    if dtype is None:
        return x
    if isinstance(x, torch.Tensor):
        return x.to(dtype=dtype)
    return x.astype(dtype)


def clone(x: ArrayLike) -> ArrayLike:
    """Independent copy of an array."""
    if isinstance(x, torch.Tensor):
        return x.clone()
    return x.copy()


# =============================================================================
# Backend-Agnostic Operations
# =============================================================================


def stack_scalars(values: Sequence, like: ArrayLike, shape: Tuple[int, ...] = None) -> ArrayLike:
    """Assemble scalars into an array with the dtype and device of ``like``."""
    if isinstance(like, torch.Tensor):
        out = torch.stack(
            [torch.as_tensor(v, dtype=like.dtype, device=like.device) for v in values]
        )
    else:
        out = np.array(values, dtype=like.dtype)
    return out.reshape(shape) if shape is not None else out


def norm(x: ArrayLike) -> ArrayLike:
    """Euclidean norm of a vector, as a scalar of the same backend."""
    if isinstance(x, torch.Tensor):
        return torch.linalg.vector_norm(x)
    return np.linalg.norm(x)


def normalize(x: ArrayLike) -> ArrayLike:
    """Scale a vector to unit norm. A zero vector has no direction and raises."""
    n = norm(x)
    if float(n) == 0:
        raise InvalidRepresentationError("Cannot normalize a vector of zero norm.")
    return x / n


def cbrt(x: ArrayLike) -> ArrayLike:
    """Real cube root, keeping the sign."""
    if isinstance(x, torch.Tensor):
        return torch.sign(x) * torch.abs(x) ** (1.0 / 3.0)
    return np.cbrt(x)


def take_indices(x: ArrayLike, indices: Tuple[int, ...], dim: int = -1) -> ArrayLike:
    """Index selection along the last dimension."""
    if isinstance(x, torch.Tensor):
        idx_tensor = torch.tensor(indices, dtype=torch.long, device=x.device)
        return x.index_select(dim, idx_tensor)
    return np.take(x, list(indices), axis=dim)


def transpose_last_two(x: ArrayLike) -> ArrayLike:
    """Transpose last two dimensions."""
    if isinstance(x, torch.Tensor):
        return x.transpose(-1, -2)
    return np.swapaxes(x, -1, -2)


def matmul(a: ArrayLike, b: ArrayLike) -> ArrayLike:
    """Matrix multiplication."""
    if isinstance(a, torch.Tensor):
        return torch.matmul(a, b)
    return np.matmul(a, b)


def det(x: ArrayLike) -> ArrayLike:
    """Determinant of a square matrix."""
    if isinstance(x, torch.Tensor):
        return torch.linalg.det(x)
    return np.linalg.det(x)


def max_abs(x: ArrayLike) -> float:
    """Largest absolute entry as a Python float."""
    if isinstance(x, torch.Tensor):
        return float(torch.max(torch.abs(x)))
    return float(np.max(np.abs(x)))


def eye(n: int, backend: Backend, dtype=None, device=None) -> ArrayLike:
    """Identity matrix."""
    if backend == "torch":
        return torch.eye(n, dtype=dtype, device=device)
    return np.eye(n, dtype=dtype or np.float64)


def eye_like(x: ArrayLike) -> ArrayLike:
    """Identity matrix with the dtype and device of a square matrix."""
    if isinstance(x, torch.Tensor):
        return torch.eye(x.shape[-1], dtype=x.dtype, device=x.device)
    return np.eye(x.shape[-1], dtype=x.dtype)


def to_numpy(x: ArrayLike) -> np.ndarray:
    """Detached NumPy copy of an array."""
    if isinstance(x, torch.Tensor):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def format_scalars(values: List[float]) -> str:
    """Space-separated shortest round-trip decimal text."""
    return " ".join(repr(float(v)) for v in values)
