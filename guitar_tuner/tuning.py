"""Open-string reference table for a six-string guitar."""

from typing import Optional, Sequence, Tuple

import numpy as np

from .note_types import GuitarString
from .note_utils import note_frequency

# Accept a string only when the played frequency is this close to its target
MAX_STRING_DISTANCE_HZ = 50.0


def _open_string(number: int, note_name: str, midi_number: int) -> GuitarString:
    return GuitarString(
        number=number,
        note_name=note_name,
        midi_number=midi_number,
        frequency=note_frequency(midi_number),
    )


# Standard tuning, low E (6th string) to high E (1st string):
# 82.41, 110.00, 146.83, 196.00, 246.94, 329.63 Hz
STANDARD_TUNING: Tuple[GuitarString, ...] = (
    _open_string(6, "E2", 40),
    _open_string(5, "A2", 45),
    _open_string(4, "D3", 50),
    _open_string(3, "G3", 55),
    _open_string(2, "B3", 59),
    _open_string(1, "E4", 64),
)


def closest_string(
    frequency: float,
    tuning: Sequence[GuitarString] = STANDARD_TUNING,
    max_distance_hz: float = MAX_STRING_DISTANCE_HZ,
) -> Optional[GuitarString]:
    """Find the open string whose target is nearest to a frequency.

    Args:
        frequency: Played frequency in Hz
        tuning: Open strings to choose from
        max_distance_hz: Strings further away than this are never chosen

    Returns:
        The closest string, or None if no string is within max_distance_hz
    """
    if not np.isfinite(frequency) or frequency <= 0:
        return None

    best: Optional[GuitarString] = None
    best_distance = max_distance_hz
    for string in tuning:
        distance = abs(frequency - string.frequency)
        if distance < best_distance:
            best = string
            best_distance = distance
    return best


def cents_from_string(frequency: float, string: GuitarString) -> float:
    """Signed cents between a frequency and an open string's target."""
    if frequency <= 0:
        return 0.0
    return float(1200 * np.log2(frequency / string.frequency))
