import logging

import numpy as np
import pytest

from uni_rotation import (
    AngleAxis,
    EulerAnglesXyz,
    EulerAnglesZyx,
    InvalidRepresentationError,
    RotationKind,
    RotationMatrix,
    RotationQuaternion,
    RotationVector,
    UnitQuaternion,
    representation_class,
    set_validation,
    validation,
    validation_enabled,
)

ALL_REPRESENTATIONS = [
    RotationMatrix,
    RotationQuaternion,
    AngleAxis,
    RotationVector,
    EulerAnglesXyz,
    EulerAnglesZyx,
]


class TestValidation:

    def test_matrix_not_orthogonal(self):
        with pytest.raises(InvalidRepresentationError, match='not orthogonal'):
            RotationMatrix(np.ones((3, 3)))

    def test_matrix_reflection(self):
        with pytest.raises(InvalidRepresentationError, match='determinant is not 1'):
            RotationMatrix(-np.eye(3))

    def test_matrix_within_tolerance(self):
        RotationMatrix(np.eye(3) + 2e-5 * np.eye(3))

    def test_quaternion_norm(self):
        with pytest.raises(InvalidRepresentationError, match='unit length'):
            RotationQuaternion.from_wxyz(1, 1, 0, 0)
        RotationQuaternion.from_wxyz(1 + 5e-7, 0, 0, 0)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            RotationQuaternion.from_wxyz(2, 0, 0, 0)

    @pytest.mark.parametrize('cls', ALL_REPRESENTATIONS)
    def test_wrong_shape(self, cls):
        with pytest.raises(ValueError, match='shape'):
            cls(np.zeros(5))

    def test_skip_per_instance(self):
        R = RotationMatrix(np.ones((3, 3)), validate=False)
        np.testing.assert_array_equal(R.matrix, np.ones((3, 3)))

    def test_switch(self):
        assert validation_enabled()
        with validation(False):
            assert not validation_enabled()
            RotationMatrix(np.ones((3, 3)))
            UnitQuaternion.from_wxyz(2, 0, 0, 0)
        assert validation_enabled()
        with pytest.raises(InvalidRepresentationError):
            RotationMatrix(np.ones((3, 3)))

    def test_switch_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger='uni_rotation'):
            set_validation(False)
            set_validation(True)
        assert 'validation disabled' in caplog.text
        assert 'validation enabled' in caplog.text

    def test_unconstrained_representations(self):
        AngleAxis(np.array([0.3, 0.0, 0.0, 5.0]))
        RotationVector.from_xyz(10.0, 0.0, 0.0)
        EulerAnglesXyz.from_angles(7.0, 4.0, -9.0)


class TestConstruction:

    def test_copies_input(self):
        data = np.eye(3)
        R = RotationMatrix(data)
        data[0, 0] = 5.0
        assert R.matrix[0, 0] == 1.0

    def test_integer_input_is_promoted(self):
        assert RotationMatrix(np.eye(3, dtype=int)).dtype == np.float64
        assert RotationVector.from_xyz(1, 2, 3).dtype == np.float64

    @pytest.mark.parametrize('cls', ALL_REPRESENTATIONS)
    def test_identity(self, cls):
        identity = cls.identity()
        np.testing.assert_allclose(identity.as_matrix(), np.eye(3), atol=1e-15)

    def test_from_elements(self):
        R = RotationMatrix.from_elements(0, -1, 0, 1, 0, 0, 0, 0, 1)
        np.testing.assert_array_equal(R.matrix, [[0, -1, 0], [1, 0, 0], [0, 0, 1]])

    def test_from_angle_axis(self):
        aa = AngleAxis.from_angle_axis(0.5, [0, 1, 0])
        assert float(aa.angle) == 0.5
        np.testing.assert_array_equal(aa.axis, [0, 1, 0])

    @pytest.mark.parametrize('target', [RotationKind.EULER_ZYX, 'euler_zyx', EulerAnglesZyx])
    def test_to_accepts_kind_name_and_class(self, target):
        euler = RotationVector.from_xyz(0.0, 0.0, 0.4).to(target)
        assert isinstance(euler, EulerAnglesZyx)
        np.testing.assert_allclose(euler.data, [0.4, 0, 0], atol=1e-12)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            representation_class('rodrigues')

    def test_registry(self):
        for cls in ALL_REPRESENTATIONS:
            assert representation_class(cls.kind) is cls


class TestAccessors:

    def test_matrix(self):
        R = RotationMatrix.identity()
        R.matrix = [[0, -1, 0], [1, 0, 0], [0, 0, 1]]
        assert R.determinant() == pytest.approx(1.0)
        np.testing.assert_array_equal(R.transposed().matrix, [[0, 1, 0], [-1, 0, 0], [0, 0, 1]])
        R.transpose()
        np.testing.assert_array_equal(R.matrix, [[0, 1, 0], [-1, 0, 0], [0, 0, 1]])

    def test_matrix_setter_validates(self):
        R = RotationMatrix.identity()
        with pytest.raises(InvalidRepresentationError):
            R.matrix = np.ones((3, 3))
        np.testing.assert_array_equal(R.matrix, np.eye(3))

    def test_quaternion(self):
        q = RotationQuaternion.from_wxyz(0, 1, 0, 0)
        assert (q.w, q.x, q.y, q.z) == (0, 1, 0, 0)
        np.testing.assert_array_equal(q.as_xyzw(), [1, 0, 0, 0])
        np.testing.assert_array_equal(q.conjugated().data, [0, -1, 0, 0])
        q.set_values(0, 0, 1, 0)
        np.testing.assert_array_equal(q.data, [0, 0, 1, 0])
        with pytest.raises(InvalidRepresentationError):
            q.set_values(1, 1, 1, 1)
        np.testing.assert_array_equal(q.data, [0, 0, 1, 0])

    def test_quaternion_normalized(self):
        q = RotationQuaternion(np.array([2.0, 0.0, 0.0, 0.0]), validate=False)
        np.testing.assert_array_equal(q.normalized().data, [1, 0, 0, 0])
        assert q.norm() == 2.0

    def test_unit_quaternion_bridge(self):
        unit = UnitQuaternion.from_wxyz(0, 0, 0, 1)
        q = RotationQuaternion.from_unit_quaternion(unit)
        np.testing.assert_array_equal(q.data, unit.data)
        assert isinstance(q.to_unit_quaternion(), UnitQuaternion)
        np.testing.assert_array_equal(q.to_unit_quaternion().data, [0, 0, 0, 1])

    def test_angle_axis(self):
        aa = AngleAxis.from_angle_axis(0.5, [1, 0, 0])
        aa.angle = 1.0
        aa.axis = [0, 0, 1]
        np.testing.assert_array_equal(aa.vector, [1.0, 0, 0, 1])
        np.testing.assert_allclose(aa.rotate([1, 0, 0]), [np.cos(1.0), np.sin(1.0), 0], atol=1e-15)
        aa.vector = [0.5, 0, 1, 0]
        assert aa.angle == 0.5
        np.testing.assert_array_equal(aa.axis, [0, 1, 0])

    def test_rotation_vector(self):
        rv = RotationVector.from_xyz(0, 0, -0.5)
        assert rv.angle == 0.5
        np.testing.assert_array_equal(rv.axis, [0, 0, -1])
        np.testing.assert_array_equal(RotationVector.from_xyz(0, 0, 0).axis, [1, 0, 0])
        rv.vector = [0.1, 0.0, 0.0]
        np.testing.assert_array_equal(rv.data, [0.1, 0, 0])
        assert rv.angle == pytest.approx(0.1)

    def test_euler(self):
        xyz = EulerAnglesXyz.from_angles(0.1, 0.2, 0.3)
        assert (xyz.roll, xyz.pitch, xyz.yaw) == (0.1, 0.2, 0.3)
        assert (xyz.x, xyz.y, xyz.z) == (0.1, 0.2, 0.3)
        zyx = EulerAnglesZyx.from_angles(0.3, 0.2, 0.1)
        assert (zyx.yaw, zyx.pitch, zyx.roll) == (0.3, 0.2, 0.1)
        zyx.set_angles(0.0, 0.0, 0.5)
        np.testing.assert_array_equal(zyx.data, [0.0, 0.0, 0.5])

    def test_assign(self):
        R = RotationMatrix.identity()
        assert R.assign(AngleAxis.from_angle_axis(np.pi / 2, [0, 0, 1])) is R
        np.testing.assert_allclose(R.matrix, [[0, -1, 0], [1, 0, 0], [0, 0, 1]], atol=1e-15)


class TestUtilities:

    @pytest.mark.parametrize('cls', ALL_REPRESENTATIONS)
    def test_cast(self, cls):
        r = cls.identity()
        single = r.cast(np.float32)
        assert single.dtype == np.float32
        assert r.dtype == np.float64

    @pytest.mark.parametrize('cls', ALL_REPRESENTATIONS)
    def test_clone(self, cls):
        r = RotationVector.from_xyz(0.1, 0.2, 0.3).to(cls)
        c = r.clone()
        assert c is not r and c.data is not r.data
        np.testing.assert_array_equal(c.data, r.data)

    def test_str(self):
        assert str(RotationQuaternion.identity()) == '1.0 0.0 0.0 0.0'
        assert str(RotationMatrix.identity()) == '1.0 0.0 0.0\n0.0 1.0 0.0\n0.0 0.0 1.0'
        assert str(RotationVector.from_xyz(0.5, 0, 0)) == '0.5 0.0 0.0'

    def test_repr(self):
        text = repr(EulerAnglesZyx.from_angles(0.5, 0, 0))
        assert text.startswith('EulerAnglesZyx(z=0.5, y=0.0, x=0.0')
        assert 'backend=numpy' in text

    def test_no_instance_dict(self):
        with pytest.raises(AttributeError):
            RotationVector.from_xyz(0, 0, 0).foo = 1
