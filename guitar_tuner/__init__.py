"""Guitar tuner: autocorrelation pitch detection and note mapping."""

from .core.config import ConfigurationError, DetectorConfig
from .detection.pitch_detector import PitchDetector
from .note_types import GuitarString, MusicalNote, PitchResult, TunerReading, TuningStatus
from .note_utils import NoteMapper, get_note_name, map_frequency
from .tuning import STANDARD_TUNING, closest_string

__all__ = [
    "ConfigurationError",
    "DetectorConfig",
    "PitchDetector",
    "GuitarString",
    "MusicalNote",
    "PitchResult",
    "TunerReading",
    "TuningStatus",
    "NoteMapper",
    "get_note_name",
    "map_frequency",
    "STANDARD_TUNING",
    "closest_string",
]
