"""Type definitions for the guitar tuner."""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

# Offsets strictly below this many cents count as in tune
IN_TUNE_CENTS = 5.0


class TuningStatus(str, Enum):
    """Which way a note deviates from its equal-tempered pitch."""

    IN_TUNE = "in tune"
    FLAT = "flat"
    SHARP = "sharp"


@dataclass(frozen=True)
class PitchResult:
    """Outcome of one pitch detection call."""

    frequency: float  # Estimated fundamental in Hz (0 if none found)
    confidence: float  # Self-similarity at the detected period (0-1)
    is_valid: bool  # Signal, range and confidence checks all passed
    rms: float = 0.0  # RMS amplitude of the whole input buffer


@dataclass(frozen=True)
class MusicalNote:
    """A frequency mapped onto the nearest equal-tempered note."""

    pitch_class: str  # Letter name with sharps (e.g., 'C#'), empty if invalid
    solfege_name: str  # Solfege name (e.g., 'DO#'), empty if invalid
    octave: int  # Scientific octave, A4 = 440Hz lives in octave 4
    midi_number: int  # MIDI note number, A4 = 69
    exact_frequency: float  # Equal-tempered frequency of the note in Hz
    actual_frequency: float  # The frequency that was mapped
    cents_offset: float  # Negative = flat, positive = sharp
    is_valid: bool

    @property
    def is_in_tune(self) -> bool:
        return self.is_valid and abs(self.cents_offset) < IN_TUNE_CENTS

    @property
    def tuning_status(self) -> Optional[TuningStatus]:
        """In tune, flat or sharp; None for an invalid note."""
        if not self.is_valid:
            return None
        if self.is_in_tune:
            return TuningStatus.IN_TUNE
        return TuningStatus.SHARP if self.cents_offset > 0 else TuningStatus.FLAT

    @property
    def full_name(self) -> str:
        """Note name in Scientific Pitch Notation (e.g., 'E2')."""
        return f"{self.pitch_class}{self.octave}" if self.is_valid else ""

    @property
    def solfege_full_name(self) -> str:
        """Solfege name with octave (e.g., 'MI2')."""
        return f"{self.solfege_name}{self.octave}" if self.is_valid else ""

    def __str__(self):
        if not self.is_valid:
            return "---"
        return f"{self.full_name} ({self.cents_offset:+.1f} cents)"


@dataclass(frozen=True)
class GuitarString:
    """An open string of the guitar and the note it is tuned to."""

    number: int  # String number (1 is the thinnest string)
    note_name: str  # Target note in SPN (e.g., 'E2')
    midi_number: int
    frequency: float  # Target frequency in Hz

    def __str__(self):
        return f"S{self.number} {self.note_name} ({self.frequency:.2f} Hz)"


@dataclass(frozen=True)
class TunerReading:
    """One analysis step of the tuner loop."""

    pitch: PitchResult
    note: MusicalNote
    string: Optional[GuitarString]  # Closest open string, if any is near
    timestamp: float  # Capture time of the analysed block
