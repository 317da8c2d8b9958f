"""
Tests for the Values container: typed insert/update/at/exists and friends.
"""

from dataclasses import dataclass

import numpy as np
import pytest

from manifold_values import (
    ErrorKind,
    GenericValue,
    Matrix,
    MatrixX,
    NoMatchFoundForFixed,
    Value,
    Values,
    ValuesConfig,
    ValuesIncorrectType,
    ValuesKeyAlreadyExists,
    ValuesKeyDoesNotExist,
    Vector,
    Vector3,
    VectorX,
    symbol,
)


@dataclass
class Landmark:
    x: float
    y: float


class TaggedLandmark(Landmark):
    pass


class TestInsertAndAt:
    """Typed insertion and retrieval."""

    def test_roundtrip_float(self):
        v = Values()
        v.insert(1, 2.5)
        assert v.at(1, float) == 2.5

    def test_roundtrip_user_type_is_copied(self):
        v = Values()
        lm = Landmark(1.0, 2.0)
        v.insert(7, lm)
        out = v.at(7, Landmark)
        assert out == lm
        assert out is not lm
        out.x = 99.0
        assert v.at(7, Landmark).x == 1.0

    def test_insert_copies_input(self):
        v = Values()
        lm = Landmark(1.0, 2.0)
        v.insert(7, lm)
        lm.x = -5.0
        assert v.at(7, Landmark).x == 1.0

    def test_at_missing_key(self):
        v = Values()
        with pytest.raises(ValuesKeyDoesNotExist) as exc:
            v.at(3, float)
        assert exc.value.key == 3
        assert exc.value.kind is ErrorKind.KEY_NOT_FOUND
        assert isinstance(exc.value, KeyError)

    def test_at_wrong_type(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]))
        with pytest.raises(ValuesIncorrectType) as exc:
            v.at(0, float)
        assert exc.value.stored_type == "VectorX"
        assert exc.value.requested_type == "float"
        assert exc.value.kind is ErrorKind.TYPE_MISMATCH

    def test_subclass_is_a_different_type(self):
        v = Values()
        v.insert(0, Landmark(0.0, 0.0))
        with pytest.raises(ValuesIncorrectType):
            v.at(0, TaggedLandmark)

    def test_at_value_returns_wrapper(self):
        v = Values()
        v.insert(0, 1.5)
        wrapper = v.at(0, Value)
        assert isinstance(wrapper, GenericValue)
        assert wrapper.type_id == "float"
        assert v[0] is wrapper

    def test_duplicate_insert_keeps_original(self):
        v = Values()
        v.insert(4, 1.0)
        with pytest.raises(ValuesKeyAlreadyExists) as exc:
            v.insert(4, 2.0)
        assert exc.value.kind is ErrorKind.KEY_ALREADY_EXISTS
        assert v.at(4, float) == 1.0
        assert v.size() == 1

    def test_declared_type_must_match(self):
        v = Values()
        with pytest.raises(TypeError):
            v.insert(0, 1, float)
        assert v.empty()

    def test_bad_keys(self):
        v = Values()
        with pytest.raises(TypeError):
            v.insert("x1", 1.0)
        with pytest.raises(TypeError):
            v.insert(True, 1.0)
        with pytest.raises(ValueError):
            v.insert(-1, 1.0)
        v.insert(np.int64(5), 1.0)
        assert v.keys() == [5]


class TestFixedAndDynamicArrays:
    """Fixed-shape inserts are stored dynamic; fixed requests fall back."""

    def test_fixed_vector_read_back_as_dynamic(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]), Vector3)
        assert v.at(0, Value).type_id == "VectorX"
        np.testing.assert_array_equal(v.at(0, VectorX), [1.0, 2.0, 3.0])

    def test_fixed_vector_read_back_as_fixed(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]), Vector3)
        np.testing.assert_array_equal(v.at(0, Vector3), [1.0, 2.0, 3.0])

    def test_wrong_fixed_size(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]), Vector3)
        with pytest.raises(NoMatchFoundForFixed) as exc:
            v.at(0, Vector(4))
        assert exc.value.requested_shape == (4, 1)
        assert exc.value.stored_shape == (3, 1)
        assert exc.value.kind is ErrorKind.SHAPE_MISMATCH

    def test_vector_is_not_a_matrix(self):
        v = Values()
        v.insert(0, np.zeros(6))
        with pytest.raises(ValuesIncorrectType):
            v.at(0, MatrixX)
        with pytest.raises(ValuesIncorrectType):
            v.at(0, Matrix(2, 3))

    def test_fixed_matrix(self):
        v = Values()
        m = np.arange(6.0).reshape(2, 3)
        v.insert(1, m, Matrix(2, 3))
        np.testing.assert_array_equal(v.at(1, Matrix(2, 3)), m)
        np.testing.assert_array_equal(v.at(1, MatrixX), m)
        with pytest.raises(NoMatchFoundForFixed):
            v.at(1, Matrix(3, 2))
        with pytest.raises(ValuesIncorrectType):
            v.at(1, Vector(6))

    def test_column_array_stored_as_vector(self):
        v = Values()
        v.insert(0, np.array([[1.0], [2.0], [3.0]]), Vector3)
        assert v.at(0, VectorX).shape == (3,)

    def test_fixed_insert_with_wrong_size_leaves_container_unchanged(self):
        v = Values()
        with pytest.raises(NoMatchFoundForFixed):
            v.insert(0, np.zeros(4), Vector3)
        assert v.empty()

    def test_at_returns_independent_copy(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0]))
        out = v.at(0, VectorX)
        out[0] = 42.0
        assert v.at(0, VectorX)[0] == 1.0

    def test_stored_array_independent_of_input(self):
        v = Values()
        arr = np.array([1.0, 2.0])
        v.insert(0, arr)
        arr[0] = 9.0
        assert v.at(0, VectorX)[0] == 1.0


class TestExists:

    def test_absent_key_is_none(self):
        assert Values().exists(3, float) is None

    def test_present_returns_reference(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]))
        ref = v.exists(0, VectorX)
        assert ref is v.at(0, Value).value
        assert not ref.flags.writeable

    def test_present_object_is_shared(self):
        v = Values()
        v.insert(0, Landmark(1.0, 2.0))
        assert v.exists(0, Landmark) is v.at(0, Value).value
        assert v.at(0, Landmark) is not v.exists(0, Landmark)

    def test_present_fixed_request(self):
        v = Values()
        v.insert(0, np.array([1.0, 2.0, 3.0]))
        np.testing.assert_array_equal(v.exists(0, Vector3), [1.0, 2.0, 3.0])

    def test_present_wrong_type_raises(self):
        v = Values()
        v.insert(0, 1.0)
        with pytest.raises(ValuesIncorrectType):
            v.exists(0, Landmark)

    def test_contains(self):
        v = Values()
        v.insert(0, 1.0)
        assert 0 in v
        assert 1 not in v
        assert "0" not in v


class TestUpdateErase:

    def test_update_may_change_type(self):
        v = Values()
        v.insert(2, 1.0)
        v.update(2, np.array([4.0, 5.0]))
        np.testing.assert_array_equal(v.at(2, VectorX), [4.0, 5.0])
        with pytest.raises(ValuesIncorrectType):
            v.at(2, float)

    def test_update_missing_key(self):
        v = Values()
        with pytest.raises(ValuesKeyDoesNotExist):
            v.update(2, 1.0)
        assert v.empty()

    def test_insert_or_assign(self):
        v = Values()
        v.insert_or_assign(1, 1.0)
        v.insert_or_assign(1, 2.0)
        assert v.at(1, float) == 2.0
        assert v.keys() == [1]

    def test_erase(self):
        v = Values()
        v.insert(1, 1.0)
        v.insert(2, 2.0)
        v.erase(1)
        assert v.keys() == [2]
        with pytest.raises(ValuesKeyDoesNotExist):
            v.erase(1)
        del v[2]
        assert v.empty()

    def test_clear_and_swap(self):
        a = Values(config=ValuesConfig(tolerance=1e-3))
        a.insert(1, 1.0)
        b = Values(config=ValuesConfig(key_format="int"))
        a.swap(b)
        assert a.empty() and b.keys() == [1]
        assert b.config.tolerance == 1e-3
        assert a.config.key_format == "int"
        b.clear()
        assert b.size() == 0


class TestIteration:

    def test_key_order(self):
        v = Values()
        for k in (5, 1, 3):
            v.insert(k, float(k))
        assert v.keys() == [1, 3, 5]
        pairs = list(v)
        assert [p.key for p in pairs] == [1, 3, 5]
        assert all(isinstance(p.value, Value) for p in pairs)
        assert pairs[1].value.value == 3.0

    def test_len_and_empty(self):
        v = Values()
        assert v.empty() and len(v) == 0
        v.insert(0, 0.0)
        assert not v.empty() and len(v) == 1


class TestBulkOperations:

    def test_insert_values_is_atomic(self):
        a = Values()
        a.insert(1, 1.0)
        b = Values()
        b.insert(0, 0.0)
        b.insert(1, 5.0)
        with pytest.raises(ValuesKeyAlreadyExists):
            a.insert_values(b)
        assert a.keys() == [1]

    def test_insert_values(self):
        a = Values()
        a.insert(1, 1.0)
        b = Values()
        b.insert(2, 2.0)
        a.insert_values(b)
        assert a.keys() == [1, 2]

    def test_update_values_is_atomic(self):
        a = Values()
        a.insert(1, 1.0)
        b = Values()
        b.insert(1, 3.0)
        b.insert(2, 2.0)
        with pytest.raises(ValuesKeyDoesNotExist):
            a.update_values(b)
        assert a.at(1, float) == 1.0
        b.erase(2)
        a.update_values(b)
        assert a.at(1, float) == 3.0

    def test_copy_is_independent(self):
        a = Values()
        a.insert(1, Landmark(1.0, 1.0))
        b = a.copy()
        b.update(1, 2.0)
        assert a.at(1, Landmark) == Landmark(1.0, 1.0)

    def test_count_and_extract(self):
        v = Values()
        v.insert(0, 0.5)
        v.insert(1, np.zeros(3))
        v.insert(2, np.ones(2))
        assert v.count(VectorX) == 2
        assert v.count(Vector3) == 1
        out = v.extract(VectorX)
        assert sorted(out) == [1, 2]
        out[1][0] = 7.0
        assert v.at(1, VectorX)[0] == 0.0


class TestEqualityAndPrinting:

    def test_equals_with_tolerance(self):
        a = Values()
        a.insert(0, np.array([1.0, 2.0]))
        b = Values()
        b.insert(0, np.array([1.0, 2.0 + 1e-7]))
        assert not a.equals(b)
        assert a.equals(b, tol=1e-6)

    def test_equals_checks_types_and_keys(self):
        a = Values()
        a.insert(0, 1.0)
        b = Values()
        b.insert(0, np.array([1.0]))
        assert a != b
        c = Values()
        c.insert(1, 1.0)
        assert a != c
        d = Values()
        d.insert(0, 1.0)
        assert a == d

    def test_describe_uses_symbols(self):
        v = Values()
        v.insert(symbol("x", 1), 0.5)
        text = v.describe("estimate ")
        assert text.startswith("estimate Values with 1 values:")
        assert "Value x1: (float) 0.5" in text


class TestManifoldDelegation:

    def test_dim_and_zero_vectors(self):
        v = Values()
        v.insert(0, np.zeros(3))
        v.insert(1, 2.0)
        v.insert(2, np.zeros((2, 2)))
        assert v.dim() == 8
        zeros = v.zero_vectors()
        assert [z.shape for z in zeros.values()] == [(3,), (1,), (4,)]

    def test_retract_and_local_coordinates(self):
        v = Values()
        v.insert(0, np.array([1.0, 1.0]))
        v.insert(1, 2.0)
        moved = v.retract({0: np.array([0.5, -1.0]), 1: np.array([1.0])})
        np.testing.assert_allclose(moved.at(0, VectorX), [1.5, 0.0])
        assert moved.at(1, float) == 3.0
        np.testing.assert_allclose(v.at(0, VectorX), [1.0, 1.0])
        delta = v.local_coordinates(moved)
        np.testing.assert_allclose(delta[0], [0.5, -1.0])
        np.testing.assert_allclose(delta[1], [1.0])

    def test_retract_unknown_key(self):
        v = Values()
        with pytest.raises(ValuesKeyDoesNotExist):
            v.retract({3: np.zeros(1)})

    def test_matrix_tangent_is_column_major(self):
        v = Values()
        v.insert(0, np.zeros((2, 2)))
        moved = v.retract({0: np.array([1.0, 2.0, 3.0, 4.0])})
        np.testing.assert_array_equal(moved.at(0, MatrixX), [[1.0, 3.0], [2.0, 4.0]])


class TestResults:

    def test_try_at(self):
        v = Values()
        v.insert(0, 1.0)
        assert v.try_at(0, float).unwrap() == 1.0
        missing = v.try_at(1, float)
        assert not missing and missing.kind is ErrorKind.KEY_NOT_FOUND
        wrong = v.try_at(0, VectorX)
        assert wrong.kind is ErrorKind.TYPE_MISMATCH
        with pytest.raises(ValuesIncorrectType):
            wrong.unwrap()

    def test_try_exists_keeps_asymmetry(self):
        v = Values()
        v.insert(0, 1.0)
        absent = v.try_exists(5, float)
        assert absent.ok and absent.value is None
        assert v.try_exists(0, VectorX).kind is ErrorKind.TYPE_MISMATCH

    def test_try_mutations(self):
        v = Values()
        assert v.try_insert(0, np.zeros(3), Vector3).ok
        assert v.try_insert(0, 1.0).kind is ErrorKind.KEY_ALREADY_EXISTS
        assert v.try_update(9, 1.0).kind is ErrorKind.KEY_NOT_FOUND
        assert v.try_at(0, Vector(2)).kind is ErrorKind.SHAPE_MISMATCH
        assert v.try_erase(0).ok
        assert v.try_erase(0).unwrap_or("gone") == "gone"
