"""
Configuration management for archforge.

Provides type-safe settings loading and validation with support for
multiple configuration sources and priority-based merging.
"""

from ..exceptions import ConfigError
from .loader import ConfigLoader, create_default_config, load_config
from .models import GeneratorSettings, OutputSettings, RegionDefaults

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "GeneratorSettings",
    "OutputSettings",
    "RegionDefaults",
    "create_default_config",
    "load_config",
]
