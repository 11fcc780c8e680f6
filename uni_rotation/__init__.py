"""
Rotation representations supporting both NumPy and PyTorch backends.

API Styles
----------
This library provides two API styles:

1. Conversion Functions (for raw coefficient arrays):
   - Direct functions for a fixed pair, e.g. quaternion_to_matrix(), rotvec_to_quaternion()
   - convert_rotation() for a pair chosen at runtime

2. Class-based API (for typed rotations):
   - RotationMatrix, RotationQuaternion, AngleAxis, RotationVector,
     EulerAnglesXyz, EulerAnglesZyx
   - Shared algebra: compose (@), inverted, is_near, get_unique, fix, ...
   - Quaternion / UnitQuaternion for plain quaternion arithmetic

Usage Examples
--------------
Generic conversion (dynamic path):
    matrix = convert_rotation(rotation, from_rep=input_format, to_rep="matrix")

Typed rotations:
    aa = AngleAxis.from_angle_axis(np.pi / 2, [0, 0, 1])
    R = RotationMatrix.from_rotation(aa)
    euler = aa.to(EulerAnglesZyx)
    composed = R @ euler  # euler applied first, result is a RotationMatrix
    assert composed.is_near(RotationVector.from_xyz(0, 0, np.pi))

Conventions
-----------
- Quaternion: wxyz
- Angle-axis: [angle, axis_x, axis_y, axis_z]
- Euler XYZ: [x, y, z], R = Rx @ Ry @ Rz (intrinsic)
- Euler ZYX: [z, y, x], R = Rz @ Ry @ Rx (intrinsic)
- All rotations are active; single rotations only (no batch dimension)
"""

# Types, constants and configuration
from ._core import (
    ArrayLike,
    Backend,
    DEFAULT_TOLERANCE,
    InvalidRepresentationError,
    MATRIX_TOLERANCE,
    QUATERNION_NORM_TOLERANCE,
    RotationKind,
    dummy_precision,
    set_validation,
    validation,
    validation_enabled,
)

# Conversion functions
from .conversions import (
    CONVERSION_TABLE,
    # Quaternion
    quaternion_multiply,
    quaternion_conjugate,
    quaternion_to_matrix,
    matrix_to_quaternion,
    # Angle-axis
    angle_axis_to_matrix,
    angle_axis_to_quaternion,
    quaternion_to_angle_axis,
    angle_axis_to_rotvec,
    rotvec_to_angle_axis,
    # Rotation vector
    rotvec_to_matrix,
    rotvec_to_quaternion,
    quaternion_to_rotvec,
    # Euler angles
    euler_xyz_to_matrix,
    euler_zyx_to_matrix,
    euler_xyz_to_quaternion,
    euler_zyx_to_quaternion,
    matrix_to_euler_xyz,
    matrix_to_euler_zyx,
    # Generic conversion
    convert_rotation,
    # Utilities
    orthogonalize_matrix,
)

# Classes
from .quaternion import Quaternion, UnitQuaternion
from .rotation import Rotation, representation_class
from .representations import (
    AngleAxis,
    EulerAnglesXyz,
    EulerAnglesZyx,
    RotationMatrix,
    RotationQuaternion,
    RotationVector,
)

# Metrics and interoperability
from .metrics import geodesic_distance, rotation_angle
from .interop import from_scipy, to_scipy

__all__ = [
    # Types, constants and configuration
    "ArrayLike",
    "Backend",
    "DEFAULT_TOLERANCE",
    "InvalidRepresentationError",
    "MATRIX_TOLERANCE",
    "QUATERNION_NORM_TOLERANCE",
    "RotationKind",
    "dummy_precision",
    "set_validation",
    "validation",
    "validation_enabled",
    # Conversion functions
    "CONVERSION_TABLE",
    "quaternion_multiply",
    "quaternion_conjugate",
    "quaternion_to_matrix",
    "matrix_to_quaternion",
    "angle_axis_to_matrix",
    "angle_axis_to_quaternion",
    "quaternion_to_angle_axis",
    "angle_axis_to_rotvec",
    "rotvec_to_angle_axis",
    "rotvec_to_matrix",
    "rotvec_to_quaternion",
    "quaternion_to_rotvec",
    "euler_xyz_to_matrix",
    "euler_zyx_to_matrix",
    "euler_xyz_to_quaternion",
    "euler_zyx_to_quaternion",
    "matrix_to_euler_xyz",
    "matrix_to_euler_zyx",
    "convert_rotation",
    "orthogonalize_matrix",
    # Classes
    "Quaternion",
    "UnitQuaternion",
    "Rotation",
    "representation_class",
    "AngleAxis",
    "EulerAnglesXyz",
    "EulerAnglesZyx",
    "RotationMatrix",
    "RotationQuaternion",
    "RotationVector",
    # Metrics and interoperability
    "geodesic_distance",
    "rotation_angle",
    "from_scipy",
    "to_scipy",
]

__version__ = "0.1.0"
