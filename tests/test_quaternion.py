import numpy as np
import pytest
import torch

from uni_rotation import InvalidRepresentationError, Quaternion, UnitQuaternion


class TestQuaternion:

    def test_zero(self):
        q = Quaternion.zero()
        assert str(q) == '0.0 0.0 0.0 0.0'
        assert q.norm() == 0.0

    def test_accessors(self):
        q = Quaternion.from_wxyz(1, 2, 3, 4)
        assert (q.w, q.x, q.y, q.z) == (1, 2, 3, 4)
        q.w = -1.0
        q.z = 0.5
        np.testing.assert_array_equal(q.data, [-1, 2, 3, 0.5])
        q.set_values(0, 0, 0, 2)
        np.testing.assert_array_equal(q.data, [0, 0, 0, 2])

    def test_hamilton_units(self):
        i = Quaternion.from_wxyz(0, 1, 0, 0)
        j = Quaternion.from_wxyz(0, 0, 1, 0)
        k = Quaternion.from_wxyz(0, 0, 0, 1)
        minus_one = Quaternion.from_wxyz(-1, 0, 0, 0)
        assert (i * j).is_equal(k)
        assert (j * k).is_equal(i)
        assert (k * i).is_equal(j)
        assert (j * i).is_equal(Quaternion.from_wxyz(0, 0, 0, -1))
        assert (i * i).is_equal(minus_one)
        assert i.multiply(j).is_equal(k)

    def test_inverse(self):
        q = Quaternion.from_wxyz(1, 2, 3, 4)
        np.testing.assert_allclose((q * q.inverted()).data, [1, 0, 0, 0], atol=1e-15)
        np.testing.assert_array_equal(q.conjugated().data, [1, -2, -3, -4])

    def test_normalization(self):
        q = Quaternion.from_wxyz(0, 3, 0, 4)
        assert q.norm() == 5.0
        np.testing.assert_allclose(q.normalized().data, [0, 0.6, 0, 0.8])
        assert q.norm() == 5.0
        assert q.normalize() is q
        np.testing.assert_allclose(q.data, [0, 0.6, 0, 0.8])

    def test_to_unit(self):
        unit = Quaternion.from_wxyz(0, 0, 2, 0).to_unit()
        assert isinstance(unit, UnitQuaternion)
        np.testing.assert_array_equal(unit.data, [0, 0, 1, 0])

    def test_zero_has_no_direction(self):
        q = Quaternion.zero()
        with pytest.raises(InvalidRepresentationError, match='zero norm'):
            q.normalized()
        with pytest.raises(InvalidRepresentationError, match='zero norm'):
            q.normalize()
        with pytest.raises(InvalidRepresentationError, match='zero norm'):
            q.to_unit()
        with pytest.raises(InvalidRepresentationError, match='zero norm'):
            q.inverted()
        np.testing.assert_array_equal(q.data, [0, 0, 0, 0])

    def test_is_equal_is_exact(self):
        a = Quaternion.from_wxyz(1, 0, 0, 0)
        assert a.is_equal(Quaternion.from_wxyz(1, 0, 0, 0))
        assert not a.is_equal(Quaternion.from_wxyz(1 + 1e-15, 0, 0, 0))
        assert not a.is_equal(Quaternion.from_wxyz(-1, 0, 0, 0))

    def test_backend_mismatch(self):
        a = Quaternion.from_wxyz(1, 0, 0, 0)
        b = Quaternion.from_wxyz(1, 0, 0, 0, backend='torch', dtype=torch.float64)
        with pytest.raises(ValueError, match='different backends'):
            a * b

    def test_repr(self):
        assert repr(Quaternion.from_wxyz(1, 2, 3, 4)) == 'Quaternion(w=1.0, x=2.0, y=3.0, z=4.0, backend=numpy)'


class TestUnitQuaternion:

    def test_norm_checked(self):
        with pytest.raises(InvalidRepresentationError, match='unit length'):
            UnitQuaternion.from_wxyz(1, 1, 0, 0)
        with pytest.raises(InvalidRepresentationError):
            UnitQuaternion.identity().set_values(0, 0, 0, 0)

    def test_identity(self):
        assert str(UnitQuaternion.identity()) == '1.0 0.0 0.0 0.0'

    def test_product_types(self):
        h = np.sqrt(0.5)
        a = UnitQuaternion.from_wxyz(h, h, 0, 0)
        b = UnitQuaternion.from_wxyz(h, 0, h, 0)
        assert isinstance(a * b, UnitQuaternion)
        assert isinstance(a * b.to_quaternion(), Quaternion)
        assert not isinstance(a * b.to_quaternion(), UnitQuaternion)
        np.testing.assert_allclose((a * b).norm(), 1.0)

    def test_inverse_is_conjugate(self):
        h = np.sqrt(0.5)
        q = UnitQuaternion.from_wxyz(h, 0, 0, -h)
        assert isinstance(q.inverted(), UnitQuaternion)
        np.testing.assert_array_equal(q.inverted().data, q.conjugated().data)
        np.testing.assert_allclose((q * q.inverted()).data, [1, 0, 0, 0], atol=1e-15)

    def test_conversions(self):
        q = UnitQuaternion.from_wxyz(0, 1, 0, 0)
        plain = q.to_quaternion()
        assert type(plain) is Quaternion
        plain.w = 5.0
        assert q.w == 0.0
        assert isinstance(q.to_unit(), UnitQuaternion)
