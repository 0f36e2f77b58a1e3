"""Tuner service that connects an audio source to the pitch detector."""

from __future__ import annotations
import threading
import time
from typing import Callable, Optional

import numpy as np

from ..core.config import ConfigurationError
from ..core.interfaces import IAudioInput, ITunerService
from ..detection.pitch_detector import PitchDetector
from ..logger import get_logger
from ..note_types import TunerReading
from ..note_utils import NoteMapper
from ..tuning import MAX_STRING_DISTANCE_HZ, STANDARD_TUNING, closest_string

logger = get_logger(__name__)


class TunerService(ITunerService):
    """Polls the newest captured block and turns it into tuner readings.

    The audio thread only stores a copy of each block under a lock. A worker
    thread wakes every poll_interval seconds, takes a copy of the newest block
    and runs detection on it, so the analysis rate is independent of the
    capture block rate and a slow reader never blocks the audio callback.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        detector: Optional[PitchDetector] = None,
        mapper: Optional[NoteMapper] = None,
        poll_interval: float = 0.05,
        tuning=STANDARD_TUNING,
        max_string_distance_hz: float = MAX_STRING_DISTANCE_HZ,
    ) -> None:
        """Initialize the tuner service.

        Args:
            audio_input: Source of mono sample blocks
            detector: Pitch detector, or None for one matching the input's sample rate
            mapper: Note mapper, or None for the A4 = 440Hz default
            poll_interval: Seconds between analysis passes (default 0.05, i.e. 20Hz)
            tuning: Open strings used to pick the string being tuned
            max_string_distance_hz: Largest distance from a string's target to still pick it

        Raises:
            ConfigurationError: If poll_interval is not positive
        """
        if poll_interval <= 0:
            raise ConfigurationError(
                f"poll_interval must be positive, got {poll_interval}"
            )

        self._audio_input = audio_input
        self._detector = detector or PitchDetector(sample_rate=audio_input.sample_rate)
        if self._detector.sample_rate != audio_input.sample_rate:
            logger.warning(
                f"Detector expects {self._detector.sample_rate}Hz but the audio input "
                f"delivers {audio_input.sample_rate}Hz"
            )
        self._mapper = mapper or NoteMapper()
        self._poll_interval = float(poll_interval)
        self._tuning = tuning
        self._max_string_distance_hz = max_string_distance_hz

        # Hand-off slot between the audio thread and the worker
        self._buffer_lock = threading.Lock()
        self._buffer: Optional[np.ndarray] = None
        self._buffer_timestamp = 0.0
        self._buffer_sequence = 0

        self._callback: Optional[Callable[[TunerReading], None]] = None
        self._latest_reading: Optional[TunerReading] = None
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._running = False

    @property
    def detector(self) -> PitchDetector:
        return self._detector

    def analyze(self, samples: np.ndarray, timestamp: Optional[float] = None) -> TunerReading:
        """Run one detection pass over a block and build a reading.

        Args:
            samples: Mono audio block
            timestamp: Capture time of the block, or None for now

        Returns:
            TunerReading: The pitch result, the mapped note (invalid when the
            pitch is) and the closest open string
        """
        pitch = self._detector.detect(samples)
        if pitch.is_valid:
            note = self._mapper.map_frequency(pitch.frequency)
            string = closest_string(
                note.actual_frequency, self._tuning, self._max_string_distance_hz
            )
        else:
            note = self._mapper.map_frequency(0.0)
            string = None

        return TunerReading(
            pitch=pitch,
            note=note,
            string=string,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    def start(self, callback: Callable[[TunerReading], None]) -> bool:
        """Start capturing and analysing audio.

        Args:
            callback: Called from the worker thread with every new reading

        Returns:
            True if started successfully, False otherwise
        """
        if self._running:
            logger.warning("Tuner already running")
            return False

        self._callback = callback
        self._stop_event.clear()
        with self._buffer_lock:
            self._buffer = None
            self._buffer_sequence = 0

        if not self._audio_input.start(self._on_audio_block):
            logger.error("Failed to start audio input")
            self._callback = None
            return False

        self._running = True
        self._worker = threading.Thread(
            target=self._poll_loop, name="tuner-poll", daemon=True
        )
        self._worker.start()
        logger.info(f"Tuner started, polling every {self._poll_interval * 1000:.0f}ms")
        return True

    def stop(self) -> None:
        """Stop the tuner and the audio input."""
        if not self._running:
            return

        self._stop_event.set()
        self._audio_input.stop()
        if self._worker and self._worker is not threading.current_thread():
            self._worker.join()
        self._worker = None
        self._running = False
        logger.info("Tuner stopped")

    def is_running(self) -> bool:
        return self._running

    def latest_reading(self) -> Optional[TunerReading]:
        return self._latest_reading

    def _on_audio_block(self, audio_data: np.ndarray, timestamp: float) -> None:
        """Store a copy of the newest block (runs on the audio thread)."""
        block = np.array(audio_data, dtype=np.float32)
        with self._buffer_lock:
            self._buffer = block
            self._buffer_timestamp = timestamp
            self._buffer_sequence += 1

    def _take_block(self, last_sequence: int):
        """Copy the newest block if one arrived after last_sequence."""
        with self._buffer_lock:
            if self._buffer is None or self._buffer_sequence == last_sequence:
                return None, 0.0, last_sequence
            return self._buffer.copy(), self._buffer_timestamp, self._buffer_sequence

    def _poll_loop(self) -> None:
        last_sequence = 0
        while not self._stop_event.wait(self._poll_interval):
            block, timestamp, last_sequence = self._take_block(last_sequence)
            if block is None:
                continue

            reading = self.analyze(block, timestamp)
            self._latest_reading = reading
            if reading.pitch.is_valid:
                logger.debug(
                    f"{reading.note.full_name} | {reading.pitch.frequency:.2f} Hz | "
                    f"{reading.note.cents_offset:+.1f} cents | "
                    f"conf: {reading.pitch.confidence:.2f}"
                )

            if self._callback:
                try:
                    self._callback(reading)
                except Exception as e:
                    logger.error(f"Error in tuner callback: {e}", exc_info=True)
                    # The worker dies with the exception, so the tuner stops too
                    self._stop_event.set()
                    self._running = False
                    self._audio_input.stop()
                    raise
