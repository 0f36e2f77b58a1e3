"""Pitch detection algorithms."""

from .pitch_detector import PitchDetector

__all__ = ["PitchDetector"]
