import numpy as np
import pytest

from bar_builders import build_bars


@pytest.fixture
def bar_factory():
    return build_bars


@pytest.fixture
def uptrend_bars():
    """250 daily bars, closes rising linearly from 100 to 150."""
    return build_bars(np.linspace(100, 150, 250))
