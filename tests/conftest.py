import pytest

from .helpers import gradient_buffer


@pytest.fixture
def gradient():
    return gradient_buffer(12, 9)
