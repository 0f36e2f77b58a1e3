"""Utility functions for mapping frequencies onto musical notes."""

from typing import ClassVar, Dict, List

import numpy as np

from .core.config import ConfigurationError
from .logger import get_logger
from .note_types import MusicalNote

# Get logger for this module
logger = get_logger(__name__)

# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQ = 440.0
A4_MIDI = 69

SHARP_NOTES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]

SOLFEGE_NOTES: List[str] = [
    "DO",
    "DO#",
    "RE",
    "RE#",
    "MI",
    "FA",
    "FA#",
    "SOL",
    "SOL#",
    "LA",
    "LA#",
    "SI",
]

# Mapping between sharp and flat note names
SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}
FLAT_TO_SHARP: Dict[str, str] = {v: k for k, v in SHARP_TO_FLAT.items()}

INVALID_NOTE = MusicalNote(
    pitch_class="",
    solfege_name="",
    octave=0,
    midi_number=0,
    exact_frequency=0.0,
    actual_frequency=0.0,
    cents_offset=0.0,
    is_valid=False,
)


def note_frequency(midi_number: int, reference: float = A4_FREQ) -> float:
    """Equal-tempered frequency of a MIDI note number."""
    return reference * 2.0 ** ((midi_number - A4_MIDI) / 12.0)


class NoteMapper:
    """Maps frequencies onto the nearest note of the chromatic scale.

    The mapping is a pure function of the frequency and the reference pitch,
    so one instance can be shared between threads.
    """

    NOTE_NAMES: ClassVar[List[str]] = SHARP_NOTES
    SOLFEGE_NAMES: ClassVar[List[str]] = SOLFEGE_NOTES

    def __init__(self, reference_frequency: float = A4_FREQ) -> None:
        """Initialize the mapper.

        Args:
            reference_frequency: Frequency of A4 in Hz (default 440.0)

        Raises:
            ConfigurationError: If the reference frequency is not a positive number
        """
        reference_frequency = float(reference_frequency)
        if not np.isfinite(reference_frequency) or reference_frequency <= 0:
            raise ConfigurationError(
                f"Reference frequency must be positive, got {reference_frequency}"
            )
        self._reference_frequency = reference_frequency

    @property
    def reference_frequency(self) -> float:
        return self._reference_frequency

    def map_frequency(self, frequency: float) -> MusicalNote:
        """Convert a frequency in Hz to the nearest note and its cents offset.

        Args:
            frequency: The frequency in Hz to convert

        Returns:
            MusicalNote: The nearest note; is_valid is False for non-positive
            or non-finite input

        Note:
            The MIDI number uses Python's round(), which rounds exact halves to
            the even neighbour. A frequency exactly halfway between two notes
            therefore maps to the note with the even MIDI number.
        """
        frequency = float(frequency)
        if not np.isfinite(frequency):
            logger.warning(f"Invalid frequency value: {frequency}")
            return INVALID_NOTE

        if frequency <= 0:
            return INVALID_NOTE

        # Calculate half steps from A4
        half_steps = float(12 * np.log2(frequency / self._reference_frequency))
        midi_number = round(half_steps) + A4_MIDI

        exact_frequency = note_frequency(midi_number, self._reference_frequency)
        cents_offset = float(1200 * np.log2(frequency / exact_frequency))

        # SPN octave calculation (C4 is middle C)
        note_idx = midi_number % 12
        octave = (midi_number // 12) - 1

        return MusicalNote(
            pitch_class=self.NOTE_NAMES[note_idx],
            solfege_name=self.SOLFEGE_NAMES[note_idx],
            octave=octave,
            midi_number=midi_number,
            exact_frequency=exact_frequency,
            actual_frequency=frequency,
            cents_offset=cents_offset,
            is_valid=True,
        )


_default_mapper = NoteMapper()


def map_frequency(frequency: float) -> MusicalNote:
    """Map a frequency onto the nearest note using the A4 = 440Hz reference."""
    return _default_mapper.map_frequency(frequency)


def convert_note_notation(note_name: str, to_flats: bool = False) -> str:
    """Convert a note name between sharp and flat notation.

    Args:
        note_name: The note name to convert (e.g., 'F#2' or 'Gb2')
        to_flats: If True, convert to flats (e.g., 'Gb2'), otherwise to sharps (e.g., 'F#2')

    Returns:
        str: The converted note name, or original if no conversion needed or invalid

    Examples:
        >>> convert_note_notation('F#2', to_flats=True)
        'Gb2'
        >>> convert_note_notation('Gb2', to_flats=False)
        'F#2'
    """
    if not note_name or not isinstance(note_name, str):
        return note_name or ""

    # Split the note letter/accidental from the octave
    note_part = "".join(c for c in note_name if not c.isdigit() and c != "-").strip()
    octave_part = note_name[len(note_part) :]

    if to_flats and note_part in SHARP_TO_FLAT:
        return f"{SHARP_TO_FLAT[note_part]}{octave_part}"
    elif not to_flats and note_part in FLAT_TO_SHARP:
        return f"{FLAT_TO_SHARP[note_part]}{octave_part}"

    return note_name


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'C#4', 'Bb3'), or '---' if invalid

    Note:
        - Middle C is C4 (261.63 Hz)
        - A4 is 440 Hz
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    note = map_frequency(freq)
    if not note.is_valid:
        return "---"
    return convert_note_notation(note.full_name, to_flats=use_flats)
