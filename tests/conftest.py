import numpy as np
import pytest


class ConstantRng:
    """Random source that always returns the same value and counts draws."""

    def __init__(self, value=0.0):
        self.value = value
        self.draws = 0

    def random(self, size=None):
        if size is None:
            self.draws += 1
            return self.value
        out = np.full(size, self.value, dtype=float)
        self.draws += out.size
        return out


class SequenceRng:
    """Random source that replays a fixed list of values."""

    def __init__(self, values):
        self.values = list(values)
        self.draws = 0

    def _next(self):
        value = self.values[self.draws]
        self.draws += 1
        return value

    def random(self, size=None):
        if size is None:
            return self._next()
        count = int(np.prod(size))
        return np.array([self._next() for _ in range(count)], dtype=float).reshape(size)


@pytest.fixture
def zero_rng():
    return ConstantRng(0.0)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)
