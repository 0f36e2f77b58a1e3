"""Core components for the guitar tuner."""

from .config import ConfigManager, ConfigurationError, DetectorConfig
from .interfaces import IAudioInput, ITunerService

__all__ = [
    "ConfigManager",
    "ConfigurationError",
    "DetectorConfig",
    "IAudioInput",
    "ITunerService",
]
