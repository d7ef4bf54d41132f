"""Pytest configuration and fixtures."""

import random

import pytest
import strider as st


@pytest.fixture
def rng():
    """Seeded random source for reproducible shuffles and tie-breaks."""
    return random.Random(0)


@pytest.fixture
def matrix_2x2():
    """Fixture for the 2x2 matrix [[1, 2], [3, 4]]."""
    return st.tensor([[1.0, 2.0], [3.0, 4.0]])


@pytest.fixture
def matrix_3x3():
    """Fixture for an invertible 3x3 matrix with determinant 12."""
    return st.tensor([[-1.0, 1.0, 3.0], [2.0, 1.0, 0.0], [4.0, 3.0, -2.0]])


@pytest.fixture
def cube():
    """Fixture for a 3x3x3 tensor holding 1..27."""
    return st.generate(3, 3, 3, fn=lambda i: i + 1.0)


@pytest.fixture(autouse=True)
def default_display():
    """Restore default display options after every test."""
    previous = st.get_display_options()
    yield
    st.set_display_options(truncate=previous.truncate)
