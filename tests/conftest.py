import numpy as np
import pytest

SAMPLE_RATE = 44100
BLOCK_SIZE = 4096


def make_sine(frequency, amplitude=0.5, length=BLOCK_SIZE, sample_rate=SAMPLE_RATE):
    t = np.arange(length) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def make_pluck(frequency, harmonics=10, amplitude=0.1, length=BLOCK_SIZE, sample_rate=SAMPLE_RATE):
    """Equal-strength harmonic series, bright like a freshly plucked string."""
    t = np.arange(length) / sample_rate
    return amplitude * sum(
        np.sin(2 * np.pi * k * frequency * t) for k in range(1, harmonics + 1)
    )


@pytest.fixture
def sine():
    return make_sine


@pytest.fixture
def pluck():
    return make_pluck
