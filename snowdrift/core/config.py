# snowdrift/core/config.py

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict
from snowdrift.core.logging import get_logger
from snowdrift.utils.math import clamp

logger = get_logger()


class Config:
    """
    Engine configuration management.
    Handles loading/saving settings from files.
    """

    def __init__(self, config_path: str = "config.json"):
        self.config_path = Path(config_path)
        self.data: Dict[str, Any] = {}

        # Default configuration
        self.defaults = {
            'engine': {
                'version': '0.1.0',
                'log_level': 'INFO',
                'fixed_timestep': 1 / 60.0,
                'profile_report_interval': 0,  # Frames between profiler reports, 0 disables
            },
            'rendering': {
                'width': 1280,
                'height': 720,
                'title': 'Snowdrift',
            },
            'snow': {
                'sample_size': 32,
                'snow_offset': 1.0,
                'edge_falloff': 1.0,
                'edge_falloff_strength': 10,
                'edge_height_offset': 0.0,
                'interpolate_heights': False,
            },
            'capture': {
                'height': 400.0,
                'near_clip': 0.3,
                'far_clip': 1000.0,
            },
        }

        self.load()

    def load(self):
        """Load configuration from file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    loaded_data = json.load(f)

                if not isinstance(loaded_data, dict):
                    raise ValueError(f"expected a JSON object, got {type(loaded_data).__name__}")

                # Merge with defaults (loaded values override defaults)
                self.data = self._deep_merge(self.defaults, loaded_data)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load configuration from {self.config_path}: {e}")
                self.data = self._deep_merge(self.defaults, {})
        else:
            # Use defaults
            self.data = self._deep_merge(self.defaults, {})
            logger.info(f"Configuration file not found, using defaults and creating {self.config_path}")
            self.save()  # Create default config file

    def save(self):
        """Save configuration to file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
            logger.info(f"Saved configuration to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save configuration to {self.config_path}: {e}")

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value by path.
        Example: config.get('snow.sample_size')
        """
        keys = path.split('.')
        value = self.data

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, path: str, value: Any):
        """
        Set configuration value by path.
        Example: config.set('snow.snow_offset', 0.5)
        """
        keys = path.split('.')
        data = self.data

        for key in keys[:-1]:
            if key not in data:
                data[key] = {}
            data = data[key]

        data[keys[-1]] = value

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Recursively merge override dict into a copy of base dict."""
        result = {key: (self._deep_merge(value, {}) if isinstance(value, dict) else value)
                  for key, value in base.items()}

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


    def section(self, name: str) -> Dict[str, Any]:
        """A top-level section as a dict; anything else falls back to empty."""
        value = self.data.get(name, {})
        if not isinstance(value, dict):
            logger.warning(f"Config section '{name}' is not an object, using defaults")
            return {}
        return value


@dataclass(frozen=True)
class SnowSettings:
    """
    Tunables read by the patch sampler before every pass.
    The sampler trusts these values; run them through clamped() first.
    """

    sample_size: int = 32
    snow_offset: float = 1.0
    edge_falloff: float = 1.0
    edge_falloff_strength: int = 10
    edge_height_offset: float = 0.0
    interpolate_heights: bool = False

    MIN_SAMPLE_SIZE = 4
    MAX_SAMPLE_SIZE = 128

    def clamped(self) -> 'SnowSettings':
        """Return a copy with every field forced into its valid range."""
        sample_size = int(clamp(int(self.sample_size), self.MIN_SAMPLE_SIZE, self.MAX_SAMPLE_SIZE))
        snow_offset = clamp(float(self.snow_offset), 0.0, 5.0)
        edge_falloff = clamp(float(self.edge_falloff), 0.0, 1.0)
        edge_height_offset = clamp(float(self.edge_height_offset), -10.0, 10.0)

        # Odd exponents flip sign below the grid centre
        strength = int(clamp(int(self.edge_falloff_strength), 2, 100))
        if strength % 2:
            strength += 1

        result = replace(
            self,
            sample_size=sample_size,
            snow_offset=snow_offset,
            edge_falloff=edge_falloff,
            edge_falloff_strength=strength,
            edge_height_offset=edge_height_offset,
            interpolate_heights=bool(self.interpolate_heights),
        )

        for name in ('sample_size', 'snow_offset', 'edge_falloff',
                     'edge_falloff_strength', 'edge_height_offset'):
            before, after = getattr(self, name), getattr(result, name)
            if before != after:
                logger.warning(f"Snow setting '{name}' adjusted from {before} to {after}")

        return result

    @classmethod
    def from_config(cls, config: Config) -> 'SnowSettings':
        """Read the 'snow' section of a Config and clamp it."""
        section = config.section('snow')
        defaults = cls()
        return cls(
            sample_size=section.get('sample_size', defaults.sample_size),
            snow_offset=section.get('snow_offset', defaults.snow_offset),
            edge_falloff=section.get('edge_falloff', defaults.edge_falloff),
            edge_falloff_strength=section.get('edge_falloff_strength', defaults.edge_falloff_strength),
            edge_height_offset=section.get('edge_height_offset', defaults.edge_height_offset),
            interpolate_heights=section.get('interpolate_heights', defaults.interpolate_heights),
        ).clamped()


@dataclass(frozen=True)
class CaptureSettings:
    """Placement of the top-down capture camera."""

    height: float = 400.0
    near_clip: float = 0.3
    far_clip: float = 1000.0

    @classmethod
    def from_config(cls, config: Config) -> 'CaptureSettings':
        section = config.section('capture')
        defaults = cls()
        return cls(
            height=float(section.get('height', defaults.height)),
            near_clip=float(section.get('near_clip', defaults.near_clip)),
            far_clip=float(section.get('far_clip', defaults.far_clip)),
        )
