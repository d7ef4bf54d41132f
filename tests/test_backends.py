"""Tests for GEMM backends and the backend registry."""

import random

import numpy as np
import pytest

import strider as st
from strider import BlasBackend, ReferenceBackend, ShapeMismatch
from strider.backends import (
    REFERENCE,
    available_backends,
    get_backend,
    register_backend,
)


@pytest.fixture(params=["reference", "blas"])
def backend(request):
    """Every backend that is always installed."""
    return get_backend(request.param)


@pytest.fixture
def operands():
    """Random [4, 3] and [3, 5] matrices with a [4, 5] accumulator."""
    rng = random.Random(42)
    return (
        st.rand(4, 3, random=rng),
        st.rand(3, 5, random=rng),
        st.rand(4, 5, random=rng),
    )


class TestGemm:
    """Tests for alpha * (a x b) + beta * c."""

    def test_product(self, backend, operands):
        a, b, _ = operands
        expected = a.numpy() @ b.numpy()
        np.testing.assert_allclose(backend.gemm(a, b).numpy(), expected, rtol=1e-12)

    def test_scaled_accumulate(self, backend, operands):
        a, b, c = operands
        expected = 2.0 * (a.numpy() @ b.numpy()) - 0.5 * c.numpy()
        result = backend.gemm(a, b, c, alpha=2.0, beta=-0.5)
        np.testing.assert_allclose(result.numpy(), expected, rtol=1e-12)

    def test_accumulator_ignored_when_beta_zero(self, backend, operands):
        a, b, c = operands
        np.testing.assert_allclose(
            backend.gemm(a, b, c).numpy(), backend.gemm(a, b).numpy(), rtol=1e-12
        )

    def test_inputs_unchanged(self, backend, operands):
        a, b, c = operands
        before = c.to_tensor()
        backend.gemm(a, b, c.to_mutable(), beta=1.0)
        assert c == before

    def test_result_is_immutable(self, backend, operands):
        a, b, _ = operands
        result = backend.gemm(a, b)
        assert type(result) is st.Tensor
        assert result.shape == (4, 5)

    def test_shape_mismatch(self, backend, operands):
        a, b, c = operands
        with pytest.raises(ShapeMismatch):
            backend.gemm(a, a)
        with pytest.raises(ShapeMismatch):
            backend.gemm(a, b, a)
        with pytest.raises(ShapeMismatch):
            backend.gemm(st.tensor([1.0, 2.0, 3.0]), b)

    def test_backends_agree(self, operands):
        a, b, c = operands
        reference = get_backend("reference").gemm(a, b, c, alpha=1.5, beta=2.0)
        blas = get_backend("blas").gemm(a, b, c, alpha=1.5, beta=2.0)
        assert reference.approx_equals(blas, 1e-12)


class TestRegistry:
    """Tests for looking up and registering backends."""

    def test_builtin_backends(self):
        assert get_backend("reference") is REFERENCE
        assert isinstance(get_backend("blas"), BlasBackend)
        assert get_backend("blas") is get_backend("blas")

    def test_available(self):
        names = available_backends()
        assert "reference" in names
        assert "blas" in names

    def test_unknown_backend(self):
        with pytest.raises(KeyError, match="Available"):
            get_backend("no-such-backend")

    def test_register(self):
        class Custom(ReferenceBackend):
            name = "custom"

        register_backend("custom", Custom)
        backend = get_backend("custom")
        assert isinstance(backend, Custom)
        assert get_backend("custom") is backend
        assert "custom" in available_backends()

    def test_register_replaces_cached_instance(self):
        register_backend("replaced", ReferenceBackend)
        first = get_backend("replaced")
        register_backend("replaced", ReferenceBackend)
        assert get_backend("replaced") is not first

    def test_repr(self):
        assert repr(REFERENCE) == "ReferenceBackend()"


class TestTorchBackend:
    """Tests for the torch backend; skipped when torch is not installed."""

    def test_matches_reference(self, operands):
        pytest.importorskip("torch")
        a, b, c = operands
        torch_backend = get_backend("torch")
        assert "torch" in available_backends()
        result = torch_backend.gemm(a, b, c, alpha=2.0, beta=0.5)
        assert result.approx_equals(REFERENCE.gemm(a, b, c, alpha=2.0, beta=0.5), 1e-10)
        assert torch_backend.gemm(a, b).approx_equals(REFERENCE.gemm(a, b), 1e-10)

    def test_explicit_cpu_device(self, matrix_2x2):
        pytest.importorskip("torch")
        from strider.backends.torch_backend import TorchBackend

        backend = TorchBackend(device="cpu")
        assert repr(backend) == "TorchBackend(device='cpu')"
        assert backend.gemm(matrix_2x2, matrix_2x2) == st.tensor([[7, 10], [15, 22]])
