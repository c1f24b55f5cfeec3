"""archforge - compile cloud architectures into Infrastructure-as-Code."""

from .exceptions import (
    ArchForgeError,
    ArchitectureLoadError,
    ConfigError,
    GenerationError,
    IdentifierCollisionError,
    UnsupportedCombinationError,
    UnsupportedFormatError,
)
from .iac import IaCGenerator, generate
from .iac.report import GenerationReport, GenerationResult
from .models import (
    Architecture,
    ArchitectureComponent,
    CloudProvider,
    Environment,
    GeneratedFile,
    GeneratorConfig,
    IaCFormat,
    ProviderBinding,
    ServiceType,
)

__version__ = "0.1.0"

__all__ = [
    "ArchForgeError",
    "Architecture",
    "ArchitectureComponent",
    "ArchitectureLoadError",
    "CloudProvider",
    "ConfigError",
    "Environment",
    "GeneratedFile",
    "GenerationError",
    "GenerationReport",
    "GenerationResult",
    "GeneratorConfig",
    "IaCFormat",
    "IaCGenerator",
    "IdentifierCollisionError",
    "ProviderBinding",
    "ServiceType",
    "UnsupportedCombinationError",
    "UnsupportedFormatError",
    "generate",
]
