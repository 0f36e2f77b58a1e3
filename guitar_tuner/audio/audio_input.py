"""Live microphone input for the tuner."""

from __future__ import annotations
import time
from typing import Optional, Callable, ClassVar

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from .base import AudioInputHandler

logger = get_logger(__name__)


class SoundDeviceInput(AudioInputHandler):
    """Audio input handler using sounddevice library."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 4096  # ~93ms per block at 44100Hz
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
        gain: float = 1.0,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Buffer size in frames, or None for default (4096)
            channels: Number of audio channels, or None for default (1)
            gain: Input gain multiplier between 0.0 and 10.0

        Raises:
            ConfigurationError: If a setting is out of range
        """
        super().__init__(
            sample_rate=sample_rate or self.SAMPLE_RATE,
            frames_per_buffer=frames_per_buffer or self.FRAMES_PER_BUFFER,
            gain=gain,
        )
        self._device_id = device_id
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Note:
            This is called from a separate audio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            self._callback(self._prepare_block(indata), time.time())

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio and pass each block to the callback."""
        if self._running:
            logger.warning("Audio input already running")
            return False

        self._callback = callback
        try:
            sd.check_input_settings(
                device=self._device_id,
                channels=self._channels,
                samplerate=self._sample_rate,
                dtype="float32",
            )
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                blocksize=self._frames_per_buffer,
                channels=self._channels,
                dtype="float32",
                callback=self._audio_callback,
            )
            self._stream.start()
        except (sd.PortAudioError, ValueError) as e:
            logger.error(f"Failed to start audio input: {e}")
            if self._stream is not None:
                self._stream.close()
                self._stream = None
            self._callback = None
            return False

        self._running = True
        logger.info(
            f"Audio input started: device={self._device_id if self._device_id is not None else 'default'}, "
            f"{self._sample_rate}Hz, {self._frames_per_buffer} frames/block"
        )
        return True

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        try:
            if self._stream:
                self._stream.stop()
                self._stream.close()
            logger.info("Audio input stopped")
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._stream = None
            self._callback = None
            self._running = False
