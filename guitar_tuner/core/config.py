"""Configuration management for guitar tuner components."""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..logger import get_logger

logger = get_logger(__name__)


class ConfigurationError(ValueError):
    """Raised when a component is constructed with invalid settings."""


@dataclass(frozen=True)
class DetectorConfig:
    """Immutable settings for the pitch detector."""

    sample_rate: int = 44100  # Hz
    min_frequency: int = 70  # Hz - lowest admissible fundamental
    max_frequency: int = 1500  # Hz - highest admissible fundamental
    signal_threshold: float = 0.1  # RMS below this is treated as silence

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ConfigurationError(
                f"Sample rate must be positive, got {self.sample_rate}"
            )
        if self.min_frequency <= 0 or self.max_frequency <= 0:
            raise ConfigurationError(
                f"Frequency range must be positive, got "
                f"{self.min_frequency}-{self.max_frequency}Hz"
            )
        if self.min_frequency >= self.max_frequency:
            raise ConfigurationError(
                f"min_frequency ({self.min_frequency}Hz) must be below "
                f"max_frequency ({self.max_frequency}Hz)"
            )
        # A zero minimum lag would make the period estimate meaningless
        if self.max_frequency >= self.sample_rate:
            raise ConfigurationError(
                f"max_frequency ({self.max_frequency}Hz) must be below the "
                f"sample rate ({self.sample_rate}Hz)"
            )
        if not 0.0 <= self.signal_threshold <= 1.0:
            raise ConfigurationError(
                f"signal_threshold must be within [0, 1], got {self.signal_threshold}"
            )

    @property
    def min_lag(self) -> int:
        """Shortest period searched, in samples (highest frequency)."""
        return self.sample_rate // self.max_frequency

    @property
    def max_lag(self) -> int:
        """Longest period searched, in samples (lowest frequency)."""
        return self.sample_rate // self.min_frequency

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DetectorConfig":
        """Build a config from a dictionary, ignoring unknown keys.

        Raises:
            ConfigurationError: If a value has the wrong type or is out of range
        """
        try:
            return cls(
                sample_rate=int(values.get("sample_rate", cls.sample_rate)),
                min_frequency=int(values.get("min_frequency", cls.min_frequency)),
                max_frequency=int(values.get("max_frequency", cls.max_frequency)),
                signal_threshold=float(
                    values.get("signal_threshold", cls.signal_threshold)
                ),
            )
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid detector configuration: {e}") from e


class ConfigManager:
    """Configuration manager for guitar tuner components."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/guitar_tuner by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "guitar_tuner")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default configurations
        self.default_configs = {
            "pitch_detector": {
                "sample_rate": 44100,
                "min_frequency": 70,
                "max_frequency": 1500,
                # Live capture runs with a lower gate than the detector default
                "signal_threshold": 0.05,
            },
            "audio_input": {
                "sample_rate": 44100,
                "frames_per_buffer": 4096,
                "channels": 1,
                "gain": 1.0,
            },
            "tuner": {
                "poll_interval": 0.05,
                "max_string_distance_hz": 50.0,
                "use_flats": False,
            },
        }

        # Load existing configurations or create default ones
        self.configs = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    config = json.load(f)
                logger.info(f"Loaded configuration from {config_file}")

                # Ensure all default keys are present
                for key, value in default_config.items():
                    if key not in config:
                        config[key] = value

                return config
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading configuration from {config_file}: {e}")
                return default_config.copy()
        else:
            config = default_config.copy()
            self.save_config(name, config)
            return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Save configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of the configuration section with the given name."""
        return self.configs.get(name, {}).copy()

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = self.default_configs[name].copy()
        return self.save_config(name, self.configs[name])

    def detector_config(self, **overrides) -> DetectorConfig:
        """Build a validated DetectorConfig from the stored section.

        Args:
            **overrides: Values that take precedence over the stored ones;
                None values are ignored

        Raises:
            ConfigurationError: If the resulting settings are invalid
        """
        values = self.get_config("pitch_detector")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return DetectorConfig.from_dict(values)
