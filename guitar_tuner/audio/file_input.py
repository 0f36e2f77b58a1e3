"""Audio input that streams a recording from disk."""

from __future__ import annotations
import threading
import time
from typing import Callable, Iterator, Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from .base import AudioInputHandler

logger = get_logger(__name__)


class WavFileInput(AudioInputHandler):
    """Provides audio blocks by reading from a sound file."""

    def __init__(
        self,
        file_path: str,
        frames_per_buffer: int = 4096,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ):
        """Initialize the file input.

        Args:
            file_path: Path to any format soundfile can read (WAV, FLAC, ...)
            frames_per_buffer: Frames per delivered block
            loop: Restart from the beginning when the file ends
            gain: Gain multiplier between 0.0 and 10.0
            realtime: Sleep between blocks to simulate live capture

        Raises:
            ConfigurationError: If a setting is out of range
            RuntimeError: If the file cannot be opened (soundfile.LibsndfileError)
        """
        with sf.SoundFile(file_path) as f:
            sample_rate = f.samplerate
            self._channels = f.channels
            self._frames = f.frames

        super().__init__(
            sample_rate=sample_rate, frames_per_buffer=frames_per_buffer, gain=gain
        )
        self._file_path = file_path
        self._loop = loop
        self._realtime = realtime
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def duration(self) -> float:
        """Length of the recording in seconds."""
        return self._frames / self._sample_rate

    def blocks(self) -> Iterator[np.ndarray]:
        """Yield the recording as prepared mono blocks, once, without pacing.

        The final block may be shorter than frames_per_buffer.
        """
        with sf.SoundFile(self._file_path) as f:
            for data in f.blocks(
                blocksize=self._frames_per_buffer, dtype="float32", always_2d=True
            ):
                yield self._prepare_block(data)

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        if self._running:
            logger.warning("File input already running")
            return False

        self._callback = callback
        self._stop_event.clear()
        self._running = True
        self._thread = threading.Thread(
            target=self._stream_data, name="wav-file-input", daemon=True
        )
        self._thread.start()
        logger.info(f"Streaming {self._file_path} ({self.duration:.2f}s)")
        return True

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self._running = False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a non-looping file has been fully streamed.

        Returns:
            True if streaming finished within the timeout
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _stream_data(self) -> None:
        block_duration = self._frames_per_buffer / self._sample_rate
        try:
            while not self._stop_event.is_set():
                delivered = 0
                for block in self.blocks():
                    if self._stop_event.is_set():
                        break
                    delivered += 1
                    if self._callback:
                        self._callback(block, time.time())
                    # Simulate real-time playback speed
                    if self._realtime:
                        self._stop_event.wait(block_duration)
                if not self._loop:
                    break
                if delivered == 0:
                    logger.warning(f"Nothing to loop over, {self._file_path} is empty")
                    break
        except (RuntimeError, OSError) as e:
            logger.error(f"Error streaming {self._file_path}: {e}", exc_info=True)
        finally:
            self._running = False
            logger.debug(f"Finished streaming {self._file_path}")
