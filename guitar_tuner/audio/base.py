"""Base class shared by the tuner's audio sources."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

import numpy as np

from ..core.config import ConfigurationError
from ..core.interfaces import IAudioInput

MAX_GAIN = 10.0


class AudioInputHandler(IAudioInput, ABC):
    """Abstract base class for audio input handlers."""

    def __init__(self, sample_rate: int, frames_per_buffer: int, gain: float = 1.0):
        if sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")
        if frames_per_buffer <= 0:
            raise ConfigurationError(
                f"frames_per_buffer must be positive, got {frames_per_buffer}"
            )
        self._sample_rate = int(sample_rate)
        self._frames_per_buffer = int(frames_per_buffer)
        self.gain = gain

        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def frames_per_buffer(self) -> int:
        return self._frames_per_buffer

    @property
    def gain(self) -> float:
        """Input gain applied to every block (0.0 to 10.0)."""
        return self._gain

    @gain.setter
    def gain(self, value: float) -> None:
        value = float(value)
        if not 0.0 <= value <= MAX_GAIN:
            raise ConfigurationError(
                f"Gain must be between 0.0 and {MAX_GAIN}, got {value}"
            )
        self._gain = value

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running

    def _prepare_block(self, data: np.ndarray) -> np.ndarray:
        """Reduce a block to mono float32 and apply gain with clipping."""
        # Extract mono audio data (take first channel if multi-channel)
        audio_data = data[:, 0] if data.ndim > 1 else data
        audio_data = np.array(audio_data, dtype=np.float32)
        if self._gain != 1.0:
            audio_data *= self._gain
            np.clip(audio_data, -1.0, 1.0, out=audio_data)
        return audio_data

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio and pass it to the callback.

        Args:
            callback: Function to call with audio data and timestamp

        Returns:
            True if started successfully, False otherwise
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass


