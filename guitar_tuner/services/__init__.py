"""Services that run the tuner on a stream of audio blocks."""

from .tuner_service import TunerService

__all__ = ["TunerService"]
