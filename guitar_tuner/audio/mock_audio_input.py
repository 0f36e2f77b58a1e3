"""Audio input driven by hand, for tests and offline use."""

from typing import Callable, Optional

import numpy as np

from .base import AudioInputHandler


class MockAudioInput(AudioInputHandler):
    """An audio input for unit tests. Blocks are pushed in manually."""

    def __init__(self, sample_rate: int = 44100, frames_per_buffer: int = 4096):
        super().__init__(sample_rate=sample_rate, frames_per_buffer=frames_per_buffer)

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        self._callback = callback
        self._running = True
        return True

    def stop(self) -> None:
        self._running = False
        self._callback = None

    def push(self, samples: np.ndarray, timestamp: Optional[float] = None) -> None:
        """Deliver one block as if it had just been captured."""
        if self._running and self._callback:
            self._callback(self._prepare_block(np.asarray(samples)), timestamp or 0.0)
