"""Console formatting for tuner readings."""

from typing import Optional

import pyfiglet

from .note_types import IN_TUNE_CENTS, TunerReading
from .note_utils import convert_note_notation

# Beyond this many cents a note is shown as clearly out of tune
CLOSE_CENTS = 15.0
NEEDLE_RANGE_CENTS = 50.0
METER_WIDTH = 20
NEEDLE_WIDTH = 41


def format_cents(cents: float) -> str:
    """Signed cents with one decimal, e.g. '+3.2' or '-12.0'."""
    return f"{cents:+.1f}"


def needle_position(cents: float) -> float:
    """Map a cents offset onto 0.0 (50 cents flat) .. 1.0 (50 cents sharp)."""
    cents = max(-NEEDLE_RANGE_CENTS, min(NEEDLE_RANGE_CENTS, cents))
    return 0.5 + cents / (2 * NEEDLE_RANGE_CENTS)


def level_fraction(rms: float) -> float:
    """Scale an RMS level to the 0..1 fill of a level meter."""
    return min(1.0, max(0.0, rms * 10.0))


def accuracy_band(cents: float) -> str:
    if abs(cents) < IN_TUNE_CENTS:
        return "in tune"
    if abs(cents) < CLOSE_CENTS:
        return "close"
    return "out of tune"


def level_meter(rms: float, width: int = METER_WIDTH) -> str:
    filled = int(round(level_fraction(rms) * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def needle(cents: float, width: int = NEEDLE_WIDTH) -> str:
    """Draw a text needle: '|' marks the centre, '^' the current offset."""
    chars = [" "] * width
    chars[width // 2] = "|"
    chars[int(round(needle_position(cents) * (width - 1)))] = "^"
    return "".join(chars)


def format_reading(reading: TunerReading, use_flats: bool = False) -> str:
    """One status line for a reading."""
    meter = level_meter(reading.pitch.rms)
    if not reading.pitch.is_valid:
        return f"{meter}  --     listening..."

    note = reading.note
    name = convert_note_notation(note.full_name, to_flats=use_flats)
    string = f"string {reading.string.number}" if reading.string else "no string"
    return (
        f"{meter}  {name:<4} {reading.pitch.frequency:8.2f} Hz  "
        f"{format_cents(note.cents_offset):>6} cents  {needle(note.cents_offset)}  "
        f"{note.tuning_status.value:<7}  {string}"
    )


def big_note(name: Optional[str], font: str = "standard") -> str:
    """Render a note name as large ASCII-art text."""
    return pyfiglet.figlet_format(name or "--", font=font)
