"""Tests for MutableTensor."""

import pytest

import strider as st
from strider import MutableTensor, ShapeMismatch, Tensor


class TestSet:
    """Tests for scalar and sub-tensor writes."""

    def test_set_scalar(self):
        m = MutableTensor.zeros(2, 3)
        m.set((1, 2), 0.5)
        m[0, 1] = -1
        assert m.get(1, 2) == 0.5
        assert m[0, 1] == -1.0
        assert m == st.tensor([[0, -1, 0], [0, 0, 0.5]])

    def test_set_rank_1(self):
        m = MutableTensor([1.0, 2.0])
        m[0] = 5.0
        m.set(1, 6.0)
        assert m == st.tensor([5.0, 6.0])

    def test_negative_index(self):
        m = MutableTensor.zeros(3)
        m[-1] = 2.0
        assert m == st.tensor([0, 0, 2])

    def test_set_sub_tensor(self):
        """A sub-tensor write replaces every scalar under the prefix."""
        m = MutableTensor.zeros(2, 2, 2)
        m[1] = st.tensor([[1, 2], [3, 4]])
        m[0, 1] = st.tensor([5, 6])
        assert m == st.tensor([[[0, 0], [5, 6]], [[1, 2], [3, 4]]])

    def test_sub_tensor_is_copied(self):
        row = MutableTensor([1.0, 2.0])
        m = MutableTensor.zeros(2, 2)
        m[0] = row
        row[0] = 9.0
        assert m[0, 0] == 1.0

    def test_wrong_index_count(self):
        m = MutableTensor.zeros(2, 2)
        with pytest.raises(ShapeMismatch):
            m[0] = 1.0
        with pytest.raises(ShapeMismatch):
            m[0, 0, 0] = 1.0

    def test_out_of_bounds(self):
        m = MutableTensor.zeros(2, 2)
        with pytest.raises(ShapeMismatch):
            m[2, 0] = 1.0

    def test_sub_tensor_shape_mismatch(self):
        m = MutableTensor.zeros(2, 3)
        with pytest.raises(ShapeMismatch):
            m[0] = st.tensor([1.0, 2.0])
        with pytest.raises(ShapeMismatch):
            m[0, 1] = st.tensor([1.0])
        assert m == st.zeros(2, 3)

    def test_invalid_value(self):
        with pytest.raises(TypeError):
            MutableTensor.zeros(2)[0] = "x"


class TestInPlace:
    """Tests for in-place arithmetic."""

    def test_scalar(self):
        m = MutableTensor([1.0, 2.0])
        m += 1
        assert m == st.tensor([2.0, 3.0])
        m *= 2
        assert m == st.tensor([4.0, 6.0])
        m -= 1.0
        assert m == st.tensor([3.0, 5.0])
        m /= 2
        assert m == st.tensor([1.5, 2.5])

    def test_tensor(self):
        m = MutableTensor([[1.0, 2.0], [3.0, 4.0]])
        original = m
        m += st.tensor([[1.0, 1.0], [1.0, 1.0]])
        m *= MutableTensor([[2.0, 0.0], [1.0, -1.0]])
        assert m is original
        assert m == st.tensor([[4.0, 0.0], [4.0, -5.0]])

    def test_shape_mismatch_leaves_target_unchanged(self):
        m = MutableTensor([1.0, 2.0])
        with pytest.raises(ShapeMismatch):
            m += st.tensor([1.0, 2.0, 3.0])
        assert m == st.tensor([1.0, 2.0])

    def test_fill(self):
        m = MutableTensor.zeros(2, 2)
        m.fill(3)
        assert m == st.tensor([[3, 3], [3, 3]])

    def test_plain_operators_return_tensor(self):
        m = MutableTensor([1.0, 2.0])
        result = m + 1
        assert type(result) is Tensor
        assert m == st.tensor([1.0, 2.0])


class TestConversions:
    """Tests that conversions never share storage."""

    def test_copy_is_independent(self):
        m = MutableTensor([1.0, 2.0])
        c = m.copy()
        assert isinstance(c, MutableTensor)
        c[0] = 5.0
        assert m[0] == 1.0

    def test_to_tensor_snapshot(self):
        m = MutableTensor([[1.0, 2.0], [3.0, 4.0]])
        frozen = m.to_tensor()
        m[0, 0] = 10.0
        assert type(frozen) is Tensor
        assert frozen[0, 0] == 1.0
        hash(frozen)

    def test_reads_return_snapshots(self):
        m = MutableTensor([[1.0, 2.0], [3.0, 4.0]])
        row = m[0]
        column = m.select(None, 0)
        reshaped = m.reshape(4)
        m[0, 0] = 10.0
        assert row == st.tensor([1.0, 2.0])
        assert column == st.tensor([1.0, 3.0])
        assert reshaped == st.tensor([1.0, 2.0, 3.0, 4.0])

    def test_transpose_of_row_matrix_is_detached(self):
        """A [1, n] transpose must not alias the mutable buffer."""
        m = MutableTensor([[1.0, 2.0, 3.0]])
        t = m.transpose()
        before = hash(t)
        m[0, 0] = 99.0
        m[0, 1] = 7.0
        assert t == st.tensor([[1.0], [2.0], [3.0]])
        assert hash(t) == before

    def test_transpose_of_matrix_is_detached(self):
        m = MutableTensor([[1.0, 2.0], [3.0, 4.0]])
        t = m.T
        m.fill(0.0)
        assert t == st.tensor([[1.0, 3.0], [2.0, 4.0]])

    def test_mutable_factories(self):
        m = MutableTensor.generate(2, 2, fn=float)
        assert isinstance(m, MutableTensor)
        m[1, 1] = 0.0
        assert m == st.tensor([[0, 1], [2, 0]])

    def test_argmax_on_mutable(self, rng):
        q = MutableTensor.zeros(4, 2)
        q[2, 1] = 0.5
        assert q.argmax(rng) == 5
