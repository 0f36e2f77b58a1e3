import math

import numpy as np
import pytest

from conftest import make_pluck, make_sine
from guitar_tuner.core.config import ConfigurationError, DetectorConfig
from guitar_tuner.detection.pitch_detector import PitchDetector
from guitar_tuner.note_utils import map_frequency
from guitar_tuner.tuning import STANDARD_TUNING


@pytest.fixture
def detector():
    return PitchDetector()


@pytest.mark.parametrize("frequency", [329.63, 440.0, 659.25, 1000.0])
def test_sine_round_trip(detector, frequency):
    result = detector.detect(make_sine(frequency))
    assert result.is_valid
    assert result.frequency == pytest.approx(frequency, rel=0.01)
    assert 0.5 < result.confidence <= 1.0
    assert result.rms == pytest.approx(0.5 / math.sqrt(2), rel=0.01)


@pytest.mark.parametrize("string", STANDARD_TUNING, ids=lambda s: s.note_name)
def test_open_strings(detector, string):
    result = detector.detect(make_pluck(string.frequency))
    assert result.is_valid
    assert result.frequency == pytest.approx(string.frequency, rel=0.01)

    note = map_frequency(result.frequency)
    assert note.full_name == string.note_name
    assert abs(note.cents_offset) < 5


def test_low_e_pluck_maps_to_e2(detector):
    result = detector.detect(make_pluck(82.41))
    note = map_frequency(result.frequency)
    assert note.pitch_class == "E"
    assert note.octave == 2
    assert abs(note.cents_offset) < 5


@pytest.mark.parametrize("length", [0, 1, 100, 4096])
def test_silence(detector, length):
    result = detector.detect(np.zeros(length))
    assert not result.is_valid
    assert result.frequency == 0.0
    assert result.confidence == 0.0
    assert result.rms == 0.0


def test_quiet_signal_below_threshold(detector):
    result = detector.detect(make_sine(440.0, amplitude=0.01))
    assert not result.is_valid
    assert result.frequency == 0.0
    assert result.rms == pytest.approx(0.01 / math.sqrt(2), rel=0.01)


def test_rms_equal_to_threshold_passes_gate():
    detector = PitchDetector(signal_threshold=0.5)
    result = detector.detect(np.full(4096, 0.5))
    assert result.rms == 0.5
    assert result.frequency > 0


def test_rms_just_below_threshold_is_silence():
    detector = PitchDetector(signal_threshold=0.5000001)
    result = detector.detect(np.full(4096, 0.5))
    assert not result.is_valid
    assert result.frequency == 0.0
    assert result.rms == 0.5


def test_buffer_shorter_than_longest_period(detector):
    # max_lag is 44100 // 70 = 630 samples
    result = detector.detect(make_sine(440.0, length=630))
    assert not result.is_valid
    assert result.frequency == 0.0
    assert result.confidence == 0.0
    assert result.rms > 0.1


def test_out_of_range_pitch_is_reported_invalid():
    # Alternating samples correlate positively at every even lag. With
    # min_lag = 44100 // 1470 = 30 the peak sits on the first computed lag and
    # the parabola through the uncomputed lag 29 pulls it below 30.
    detector = PitchDetector(max_frequency=1470)
    samples = 0.5 * np.where(np.arange(4096) % 2 == 0, 1.0, -1.0)

    result = detector.detect(samples)

    window = 2 * (44100 // 70)
    beta = 0.25 * (window - 30)
    gamma = -0.25 * (window - 31)
    offset = 0.5 * (0.0 - gamma) / (0.0 - 2 * beta + gamma)
    assert result.frequency == pytest.approx(44100 / (30 + offset), rel=1e-9)
    assert result.frequency > 1470
    assert not result.is_valid
    assert result.confidence == 0.0
    assert result.rms == 0.5


def test_idempotent(detector):
    samples = make_pluck(196.0)
    assert detector.detect(samples) == detector.detect(samples)


def test_does_not_mutate_input(detector):
    samples = make_sine(440.0)
    original = samples.copy()
    detector.detect(samples)
    np.testing.assert_array_equal(samples, original)


def test_accepts_lists_and_float32(detector):
    samples = make_sine(440.0)
    from_list = detector.detect(samples.tolist())
    from_float32 = detector.detect(samples.astype(np.float32))
    assert from_list.frequency == pytest.approx(440.0, rel=0.01)
    assert from_float32.frequency == pytest.approx(440.0, rel=0.01)


def test_multichannel_input_uses_first_channel(detector):
    stereo = np.column_stack([make_sine(440.0), np.zeros(4096)])
    result = detector.detect(stereo)
    assert result.is_valid
    assert result.frequency == pytest.approx(440.0, rel=0.01)


def test_nan_input_does_not_raise(detector):
    samples = make_sine(440.0)
    samples[0] = np.nan
    result = detector.detect(samples)
    assert not result.is_valid
    assert math.isnan(result.rms)


def test_inf_input_does_not_raise(detector):
    samples = make_sine(440.0)
    samples[0] = np.inf
    result = detector.detect(samples)
    assert not result.is_valid


def test_find_peak_prefers_first_maximum():
    data = np.array([0.0, 0.0, 3.0, 1.0, 3.0, 2.0])
    assert PitchDetector._find_peak(data, 1, 5) == 2


def test_find_peak_skips_nan():
    data = np.array([0.0, np.nan, 1.0, np.nan, 0.5])
    assert PitchDetector._find_peak(data, 1, 4) == 2
    assert PitchDetector._find_peak(np.array([0.0, np.nan, np.nan]), 1, 2) == 0


def test_parabolic_interpolation():
    # Samples of -(x - 2.25)^2 recover the vertex exactly
    data = np.array([-(x - 2.25) ** 2 for x in range(5)])
    assert PitchDetector._parabolic_interpolation(data, 2) == pytest.approx(2.25)


def test_parabolic_interpolation_edges_and_flat_peak():
    data = np.array([1.0, 1.0, 1.0, 1.0])
    assert PitchDetector._parabolic_interpolation(data, 0) == 0.0
    assert PitchDetector._parabolic_interpolation(data, 3) == 3.0
    assert PitchDetector._parabolic_interpolation(data, 1) == 1.0


def test_confidence_guards(detector):
    samples = make_sine(440.0, length=1000)
    # Period of 600 samples is longer than half the buffer
    assert detector._calculate_confidence(samples, 44100 / 600) == 0.0
    assert detector._calculate_confidence(samples, 0.0) == 0.0
    assert detector._calculate_confidence(samples, float("nan")) == 0.0
    assert detector._calculate_confidence(np.zeros(1000), 440.0) == 0.0


def test_confidence_is_clamped(detector):
    # A period of 2 samples lines up every sample with its negation
    samples = np.tile([1.0, -1.0, -1.0, 1.0], 250)
    assert detector._calculate_confidence(samples, 44100 / 2) == 0.0


def test_config_properties():
    detector = PitchDetector(sample_rate=48000, min_frequency=80, max_frequency=1000)
    assert detector.sample_rate == 48000
    assert detector.config.min_lag == 48
    assert detector.config.max_lag == 600


def test_from_config():
    config = DetectorConfig(signal_threshold=0.05)
    detector = PitchDetector.from_config(config)
    assert detector.config is config
    assert detector.signal_threshold == 0.05


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sample_rate": 0},
        {"min_frequency": 0},
        {"min_frequency": 1500, "max_frequency": 70},
        {"min_frequency": 500, "max_frequency": 500},
        {"sample_rate": 1000, "max_frequency": 1500},
        {"signal_threshold": -0.1},
        {"signal_threshold": 1.5},
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ConfigurationError):
        PitchDetector(**kwargs)
