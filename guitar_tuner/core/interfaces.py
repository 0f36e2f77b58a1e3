"""Defines the core interfaces for the guitar tuner."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

import numpy as np

from ..note_types import TunerReading


class IAudioInput(ABC):
    """Interface for audio sources feeding the tuner."""

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio, passing each mono block and its timestamp to callback."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the delivered blocks."""
        pass


class ITunerService(ABC):
    """Interface for the tuner loop that turns audio into readings."""

    @abstractmethod
    def start(self, callback: Callable[[TunerReading], None]) -> bool:
        """Start the tuner."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the tuner."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the tuner is running."""
        pass

    @abstractmethod
    def latest_reading(self) -> Optional[TunerReading]:
        """The most recent reading, if any."""
        pass
