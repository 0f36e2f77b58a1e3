"""Autocorrelation pitch detection for single-string guitar signals."""

from __future__ import annotations
import math
from typing import ClassVar, Optional, Sequence, TypeAlias, Union

import numpy as np

from ..core.config import DetectorConfig
from ..logger import get_logger
from ..note_types import PitchResult

logger = get_logger(__name__)

Samples: TypeAlias = Union[np.ndarray, Sequence[float]]


class PitchDetector:
    """Estimates the fundamental frequency of a block of audio samples.

    The detector holds nothing but its immutable configuration: detect() is a
    pure function of the buffer, so one instance may be called from several
    threads as long as callers do not mutate a buffer while it is analysed.
    """

    # Correlation at the detected period needed for a valid result
    MIN_CONFIDENCE: ClassVar[float] = 0.5

    def __init__(
        self,
        sample_rate: int = 44100,
        min_frequency: int = 70,
        max_frequency: int = 1500,
        signal_threshold: float = 0.1,
        config: Optional[DetectorConfig] = None,
    ) -> None:
        """Initialize the PitchDetector.

        Args:
            sample_rate: Sample rate of the analysed buffers in Hz
            min_frequency: Lowest fundamental to report in Hz
            max_frequency: Highest fundamental to report in Hz
            signal_threshold: RMS level below which a buffer counts as silence
            config: Ready-made configuration; overrides the other arguments

        Raises:
            ConfigurationError: If the settings are out of range
        """
        self._config = config or DetectorConfig(
            sample_rate=sample_rate,
            min_frequency=min_frequency,
            max_frequency=max_frequency,
            signal_threshold=signal_threshold,
        )
        logger.debug(
            f"Pitch detector initialized: sample_rate={self._config.sample_rate}Hz, "
            f"range={self._config.min_frequency}-{self._config.max_frequency}Hz, "
            f"lags={self._config.min_lag}-{self._config.max_lag}, "
            f"threshold={self._config.signal_threshold}"
        )

    @classmethod
    def from_config(cls, config: DetectorConfig) -> "PitchDetector":
        return cls(config=config)

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def sample_rate(self) -> int:
        return self._config.sample_rate

    @property
    def min_frequency(self) -> int:
        return self._config.min_frequency

    @property
    def max_frequency(self) -> int:
        return self._config.max_frequency

    @property
    def signal_threshold(self) -> float:
        return self._config.signal_threshold

    def detect(self, samples: Samples) -> PitchResult:
        """Detect the fundamental frequency of a block of samples.

        Args:
            samples: Mono audio samples normalised to [-1.0, 1.0]. For 2-D
                input (frames x channels) only the first channel is used.

        Returns:
            PitchResult: The estimate. Silence, too-short buffers, out-of-range
            pitches and weak periodicity all come back with is_valid=False.

        Note:
            The method follows these steps:
            1. Return an empty result for an empty buffer
            2. Calculate signal level (RMS) and gate on the threshold
            3. Refuse buffers too short to hold the longest period
            4. Estimate the frequency by autocorrelation
            5. Mark out-of-range frequencies invalid
            6. Score confidence at the detected period
        """
        audio_data = np.asarray(samples, dtype=np.float64)
        if audio_data.ndim > 1:
            audio_data = audio_data[:, 0]

        if audio_data.size == 0:
            return PitchResult(frequency=0.0, confidence=0.0, is_valid=False, rms=0.0)

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            # Calculate signal level (RMS)
            rms = float(np.sqrt(np.mean(audio_data**2)))

            # Skip if signal is too weak; a level equal to the threshold passes
            if rms < self._config.signal_threshold:
                logger.debug(f"Signal below threshold: rms={rms:.4f}")
                return PitchResult(frequency=0.0, confidence=0.0, is_valid=False, rms=rms)

            if audio_data.size <= self._config.max_lag:
                logger.debug(
                    f"Buffer too short for {self._config.min_frequency}Hz: "
                    f"{audio_data.size} <= {self._config.max_lag} samples"
                )
                return PitchResult(frequency=0.0, confidence=0.0, is_valid=False, rms=rms)

            frequency = self._autocorrelation_pitch(audio_data)

            if (
                frequency < self._config.min_frequency
                or frequency > self._config.max_frequency
            ):
                logger.debug(f"Pitch out of range: {frequency:.2f} Hz")
                return PitchResult(
                    frequency=frequency, confidence=0.0, is_valid=False, rms=rms
                )

            confidence = self._calculate_confidence(audio_data, frequency)

        logger.debug(
            f"Pitch: {frequency:.2f} Hz, Confidence: {confidence:.4f}, Signal: {rms:.4f}"
        )
        return PitchResult(
            frequency=frequency,
            confidence=confidence,
            is_valid=confidence > self.MIN_CONFIDENCE,
            rms=rms,
        )

    def _autocorrelation_pitch(self, audio_data: np.ndarray) -> float:
        """Find the period with the strongest self-similarity and return its frequency."""
        min_lag = self._config.min_lag
        max_lag = self._config.max_lag
        window = min(audio_data.size, 2 * max_lag)
        segment = audio_data[:window]

        # full[window - 1 + lag] == sum(segment[i] * segment[i + lag])
        full = np.correlate(segment, segment, mode="full")
        lags = full[window - 1 :]

        # Lags below min_lag are never computed and stay zero
        autocorrelation = np.zeros(max_lag + 1)
        upper = min(max_lag, window - 1)
        if upper >= min_lag:
            autocorrelation[min_lag : upper + 1] = lags[min_lag : upper + 1]

        peak_lag = self._find_peak(autocorrelation, min_lag, max_lag)
        if peak_lag == 0:
            return 0.0

        refined_lag = self._parabolic_interpolation(autocorrelation, peak_lag)
        return float(np.float64(self._config.sample_rate) / refined_lag)

    @staticmethod
    def _find_peak(autocorrelation: np.ndarray, min_lag: int, max_lag: int) -> int:
        """Return the lag of the highest value in [min_lag, max_lag].

        Ties go to the smallest lag and NaN never wins; 0 means no candidate.
        """
        candidates = autocorrelation[min_lag : max_lag + 1]
        usable = candidates > -np.inf
        if not usable.any():
            return 0
        masked = np.where(usable, candidates, -np.inf)
        return min_lag + int(np.argmax(masked))

    @staticmethod
    def _parabolic_interpolation(data: np.ndarray, index: int) -> float:
        """Refine a peak position by fitting a parabola through its neighbours."""
        if index <= 0 or index >= len(data) - 1:
            return float(index)

        alpha = data[index - 1]
        beta = data[index]
        gamma = data[index + 1]

        denominator = alpha - 2 * beta + gamma
        if denominator == 0:
            # Flat peak: the vertex is undefined
            return float(index)

        offset = 0.5 * (alpha - gamma) / denominator
        return float(index + offset)

    def _calculate_confidence(self, audio_data: np.ndarray, frequency: float) -> float:
        """Score how closely the buffer repeats itself one period later.

        This is the buffer's correlation with itself at the detected period,
        divided by the energy of the leading segment only. It is not a true
        normalised cross-correlation, so harmonically rich signals can score
        higher than pure tones.
        """
        if not np.isfinite(frequency) or frequency <= 0:
            return 0.0

        period = math.floor(self._config.sample_rate / frequency)
        if period <= 0 or period >= audio_data.size / 2:
            return 0.0

        count = min(audio_data.size - period, period * 2)
        head = audio_data[:count]
        shifted = audio_data[period : period + count]

        energy = float(np.dot(head, head))
        if energy == 0:
            return 0.0

        correlation = float(np.dot(head, shifted)) / energy
        return float(np.clip(correlation, 0.0, 1.0))
