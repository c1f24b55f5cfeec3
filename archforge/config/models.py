"""
Configuration models for archforge.

Provides type-safe settings using pydantic with validation, defaults and
schema enforcement. Settings only supply defaults; each generation request
is still a fully specified ``GeneratorConfig``.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ConfigError
from ..iac.formats import get_compatible_providers
from ..models import CloudProvider, Environment, GeneratorConfig, IaCFormat

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RegionDefaults(BaseModel):
    """Default region per cloud provider."""

    aws: str = Field(default="us-east-1", description="Default AWS region")
    azure: str = Field(default="eastus", description="Default Azure location")
    gcp: str = Field(default="us-central1", description="Default GCP region")
    oci: str = Field(default="us-ashburn-1", description="Default OCI region")

    model_config = ConfigDict(extra="forbid")

    def for_provider(self, provider: CloudProvider) -> str:
        return getattr(self, CloudProvider(provider).value)


class OutputSettings(BaseModel):
    """Where the CLI writes generated files."""

    directory: Path = Field(
        default=Path("iac-output"),
        description="Directory generated files are written to",
    )
    overwrite: bool = Field(
        default=False,
        description="Overwrite files that already exist",
    )

    model_config = ConfigDict(extra="forbid")


class GeneratorSettings(BaseModel):
    """Root configuration for archforge."""

    default_format: IaCFormat = Field(
        default=IaCFormat.TERRAFORM,
        description="Format used when none is given",
    )
    default_provider: CloudProvider = Field(
        default=CloudProvider.AWS,
        description="Provider used when none is given",
    )
    default_environment: Environment = Field(
        default=Environment.DEV,
        description="Environment used when none is given",
    )
    project_name: Optional[str] = Field(
        default=None,
        description="Project name (defaults to the architecture name)",
    )
    regions: RegionDefaults = Field(
        default_factory=RegionDefaults,
        description="Per-provider default regions",
    )
    output: OutputSettings = Field(
        default_factory=OutputSettings,
        description="Output settings",
    )
    log_level: str = Field(default="WARNING", description="Logging level")

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def build_generator_config(
        self,
        iac_format: Optional[IaCFormat] = None,
        provider: Optional[CloudProvider] = None,
        region: Optional[str] = None,
        project_name: Optional[str] = None,
        environment: Optional[Environment] = None,
        fallback_project_name: str = "archforge-project",
    ) -> GeneratorConfig:
        """
        Derive a generation request from these settings.

        A format restricted to one provider selects that provider when none
        is given; the region falls back to the provider's default region.

        Raises:
            ConfigError: If the resulting request is invalid
        """
        fmt = IaCFormat(iac_format or self.default_format)
        if provider is None:
            compatible = get_compatible_providers(fmt)
            provider = compatible[0] if len(compatible) == 1 else self.default_provider
        cloud = CloudProvider(provider)
        try:
            return GeneratorConfig(
                format=fmt,
                provider=cloud,
                region=region or self.regions.for_provider(cloud),
                project_name=project_name or self.project_name or fallback_project_name,
                environment=environment or self.default_environment,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid generation settings: {e}", cause=e) from e
