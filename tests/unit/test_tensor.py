"""
Unit tests for Tensor, TensorArray and serialization.

These tests verify:
1. Storage layout and bounds-checked element access
2. Floating-point mirrors and deep copies
3. Subtensor extraction and inner products
4. Serialization order and idempotence
5. CSV dump format
"""

import io

import numpy as np
import pytest

from convsim.tensor import (
    REF_DTYPE,
    SIM_DTYPE,
    Tensor,
    TensorArray,
    Vector,
    deserialize_vector,
    serialize_tensor,
)


@pytest.fixture
def counting():
    """A [2,3,4] tensor whose element (i, j, k) is i*12 + j*4 + k."""
    return Tensor.from_array(np.arange(24).reshape(2, 3, 4))


class TestTensor:
    """Test suite for Tensor."""

    def test_dimensions(self):
        t = Tensor(5, 4, 3)
        assert t.width == 5
        assert t.height == 4
        assert t.depth == 3
        assert t.shape == (5, 4, 3)
        assert t.length == 60
        assert t.dtype == SIM_DTYPE
        assert t.geometry() == "[5,4,3]"

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            Tensor(0, 1, 1)

    def test_from_array_indexing(self, counting):
        assert counting[1, 2, 3] == 12 + 8 + 3
        np.testing.assert_array_equal(counting.to_array(), np.arange(24).reshape(2, 3, 4))

    def test_storage_order(self, counting):
        flat = counting.flat()
        w, h = counting.width, counting.height
        for i in range(counting.width):
            for j in range(counting.height):
                for k in range(counting.depth):
                    assert flat[(k * h + j) * w + i] == counting[i, j, k]

    @pytest.mark.parametrize("index", [(2, 0, 0), (0, 3, 0), (0, 0, 4), (-1, 0, 0)])
    def test_out_of_range(self, counting, index):
        with pytest.raises(IndexError):
            counting[index]

    def test_from_float_truncates(self):
        t = Tensor.from_array([[[2.9, -2.9]]])
        assert t[0, 0, 0] == 2
        assert t[0, 0, 1] == -2

    def test_float_mirror(self, counting):
        mirror = counting.astype(REF_DTYPE)
        assert mirror.dtype == REF_DTYPE
        assert mirror.shape == counting.shape
        np.testing.assert_array_equal(mirror.to_array(), counting.to_array())

    def test_copy_is_deep(self, counting):
        copy = counting.copy()
        assert copy == counting
        copy[0, 0, 0] = 100
        assert counting[0, 0, 0] == 0
        assert copy != counting

    def test_extract_subtensor(self, counting):
        sub = counting.extract_subtensor(1, 1, 2, 1, 2, 2)
        assert sub.shape == (1, 2, 2)
        assert sub[0, 0, 0] == counting[1, 1, 2]
        assert sub[0, 1, 1] == counting[1, 2, 3]

    def test_extract_subtensor_out_of_bounds(self, counting):
        with pytest.raises(IndexError):
            counting.extract_subtensor(1, 0, 0, 2, 1, 1)
        with pytest.raises(IndexError):
            counting.extract_subtensor(0, 0, 3, 1, 1, 2)

    def test_dot(self):
        ones = Tensor.from_array(np.ones((2, 2, 2)))
        twos = Tensor.from_array(np.full((2, 2, 2), 2))
        assert ones.dot(twos) == 16

    def test_dot_shape_mismatch(self):
        with pytest.raises(ValueError):
            Tensor(2, 2, 2).dot(Tensor(2, 2, 1))


class TestTensorArray:
    """Test suite for TensorArray (filter banks)."""

    def test_dimensions(self):
        filters = TensorArray(3, 3, 3, 1)
        assert filters.count == 3
        assert len(filters) == 3
        assert filters.shape == (3, 3, 1)
        assert filters.length == 9
        assert filters.geometry() == "3 X [3,3,1]"

    def test_from_tensors_copies(self, counting):
        filters = TensorArray.from_tensors([counting, counting])
        filters[0][0, 0, 0] = 5
        assert counting[0, 0, 0] == 0
        assert filters[1][0, 0, 0] == 0

    def test_from_tensors_shape_mismatch(self):
        with pytest.raises(ValueError):
            TensorArray.from_tensors([Tensor(2, 2, 1), Tensor(2, 2, 2)])

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            TensorArray(2, 1, 1, 1)[2]

    def test_astype(self, counting):
        mirror = TensorArray.from_tensors([counting]).astype(REF_DTYPE)
        assert mirror.dtype == REF_DTYPE
        np.testing.assert_array_equal(mirror[0].to_array(), counting.to_array())


class TestSerialization:
    """Test tensor <-> vector flattening."""

    def test_serialize_matches_storage_order(self, counting):
        vec = serialize_tensor(Vector(counting.length), counting)
        np.testing.assert_array_equal(vec.to_array(), counting.flat())

    def test_serialize_is_idempotent(self, counting):
        first = serialize_tensor(Vector(counting.length), counting)
        second = serialize_tensor(Vector(counting.length), counting)
        assert first == second

    def test_deserialize_restores_tensor(self, counting):
        vec = serialize_tensor(Vector(counting.length), counting)
        restored = deserialize_vector(Tensor(2, 3, 4), vec)
        assert restored == counting

    def test_width_mismatch(self, counting):
        with pytest.raises(ValueError):
            serialize_tensor(Vector(counting.length - 1), counting)
        with pytest.raises(ValueError):
            deserialize_vector(Tensor(2, 3, 4), Vector(5))


class TestCsvDump:
    """Test the diagnostic CSV section format."""

    def test_int_tensor(self):
        t = Tensor.from_array([[[1, 2]], [[3, 4]]])
        stream = io.StringIO()
        t.csv_dump(stream, "act")
        assert stream.getvalue() == "act,[2,1,2]\ni,j,0,1\n0,0,1,2\n1,0,3,4\n\n"

    def test_float_tensor(self):
        t = Tensor.from_array([[[1.5]]], REF_DTYPE)
        stream = io.StringIO()
        t.csv_dump(stream, "ref")
        assert stream.getvalue() == "ref,[1,1,1]\ni,j,0\n0,0,1.500000\n\n"

    def test_rows_are_j_outer_i_inner(self):
        t = Tensor(2, 2, 1)
        stream = io.StringIO()
        t.csv_dump(stream, "t")
        rows = stream.getvalue().splitlines()[2:6]
        assert [r.split(",")[:2] for r in rows] == [["0", "0"], ["1", "0"], ["0", "1"], ["1", "1"]]

    def test_filter_bank_sections(self):
        stream = io.StringIO()
        TensorArray(2, 1, 1, 1).csv_dump(stream, "filters")
        titles = [line for line in stream.getvalue().splitlines() if line.startswith("filters")]
        assert titles == ["filters[0],[1,1,1]", "filters[1],[1,1,1]"]
