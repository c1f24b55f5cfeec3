"""
Configuration loader for archforge.

Handles loading from multiple sources with proper priority:
CLI Args > Environment Variables > Config File > Defaults
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import GeneratorSettings

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Priority order (highest to lowest):
    1. CLI arguments (passed directly to methods)
    2. Environment variables (ARCHFORGE_*)
    3. Configuration file
    4. Default values
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "archforge"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
    ENV_PREFIX = "ARCHFORGE_"
    CONFIG_PATH_ENV = "ARCHFORGE_CONFIG_PATH"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to configuration file. If None, uses default location.
        """
        self.config_path = Path(config_path) if config_path else self._get_config_path_from_env()

    @classmethod
    def _get_config_path_from_env(cls) -> Path:
        """Get configuration path from environment variable or default."""
        env_path = os.environ.get(cls.CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path).expanduser()
        return cls.DEFAULT_CONFIG_FILE

    def load(self) -> GeneratorSettings:
        """
        Load configuration from all sources and merge.

        Returns:
            Validated GeneratorSettings object

        Raises:
            ConfigError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            logger.debug(f"Loading configuration from {self.config_path}")
            config_dict = self._deep_merge(config_dict, self._load_file(self.config_path))

        config_dict = self._deep_merge(config_dict, self._load_from_env())

        try:
            return GeneratorSettings.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}", cause=e) from e

    def _load_file(self, path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", cause=e) from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}", cause=e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _load_from_env(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Environment variable format:
        - ARCHFORGE_DEFAULT_FORMAT
        - ARCHFORGE_REGIONS__AZURE
        - ARCHFORGE_OUTPUT__DIRECTORY

        Double underscore (__) separates nested keys.
        """
        config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX) or key == self.CONFIG_PATH_ENV:
                continue

            parts = key[len(self.ENV_PREFIX) :].lower().split("__")

            current = config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    raise ConfigError(
                        f"Environment variable {key} nests under '{part}', "
                        f"which is also set as a plain value"
                    )
            if isinstance(current.get(parts[-1]), dict):
                raise ConfigError(
                    f"Environment variable {key} sets '{parts[-1]}' as a plain value, "
                    f"but nested {self.ENV_PREFIX}{parts[-1].upper()}__* variables are also set"
                )
            current[parts[-1]] = self._convert_env_value(value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to bool where it reads as one."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False
        return value

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Returns:
            Merged dictionary (base is not modified)
        """
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def merge_cli_args(
        self,
        config: GeneratorSettings,
        cli_args: Dict[str, Any],
    ) -> GeneratorSettings:
        """
        Merge CLI arguments into configuration.

        CLI arguments have highest priority and override all other sources.

        Args:
            config: Base configuration
            cli_args: CLI arguments to merge (None values are ignored)

        Returns:
            New GeneratorSettings with CLI args applied
        """
        filtered_args = self._filter_none_values(cli_args)

        if not filtered_args:
            return config

        config_dict = self._deep_merge(config.model_dump(), filtered_args)
        try:
            return GeneratorSettings.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid command line settings: {e}", cause=e) from e

    def _filter_none_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively filter out None values from a dictionary."""
        result = {}
        for key, value in data.items():
            if value is None:
                continue
            elif isinstance(value, dict):
                filtered = self._filter_none_values(value)
                if filtered:
                    result[key] = filtered
            else:
                result[key] = value
        return result

    def create_default_config(self, force: bool = False) -> Path:
        """
        Create default configuration file with comments.

        Args:
            force: Overwrite existing file if True

        Returns:
            Path to created configuration file

        Raises:
            ConfigError: If file exists and force=False
        """
        if self.config_path.exists() and not force:
            raise ConfigError(
                f"Configuration file already exists at {self.config_path}. "
                "Use force=True to overwrite."
            )

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                f.write(DEFAULT_CONFIG_YAML)
        except OSError as e:
            raise ConfigError(
                f"Cannot write config file {self.config_path}: {e}", cause=e
            ) from e

        logger.info(f"Wrote default configuration to {self.config_path}")
        return self.config_path


DEFAULT_CONFIG_YAML = """\
# archforge - Configuration
# =========================

# Format used when --format is not given:
# terraform, cloudformation, arm, kubernetes or docker-compose
default_format: terraform

# Provider used when --provider is not given: aws, azure, gcp or oci
# (cloudformation always targets aws, arm always targets azure)
default_provider: aws

# Environment used when --environment is not given: dev, staging or prod
default_environment: dev

# Project name used in resource names and tags
# (defaults to the architecture name)
# project_name: my-project

# Default region per provider
regions:
  aws: us-east-1
  azure: eastus
  gcp: us-central1
  oci: us-ashburn-1

# Output settings
output:
  # Directory generated files are written to
  directory: iac-output

  # Overwrite files that already exist
  overwrite: false

# Logging level: DEBUG, INFO, WARNING, ERROR or CRITICAL
log_level: WARNING
"""


def load_config(
    config_path: Optional[Path] = None,
    cli_args: Optional[Dict[str, Any]] = None,
) -> GeneratorSettings:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to configuration file
        cli_args: CLI arguments to merge (highest priority)

    Returns:
        Validated GeneratorSettings object

    Raises:
        ConfigError: If configuration is invalid
    """
    loader = ConfigLoader(config_path)
    config = loader.load()

    if cli_args:
        config = loader.merge_cli_args(config, cli_args)

    return config


def create_default_config(
    config_path: Optional[Path] = None,
    force: bool = False,
) -> Path:
    """
    Create default configuration file.

    Raises:
        ConfigError: If file exists and force=False
    """
    loader = ConfigLoader(config_path)
    return loader.create_default_config(force=force)
