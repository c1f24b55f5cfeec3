"""
Data model for architectures and generation requests.

The architecture types mirror the documents produced by the upstream
chat/wizard pipeline (camelCase keys such as ``serviceType`` are accepted
as aliases). All models are frozen: the generator treats them as read-only
input and never mutates them.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ValueEnum(str, Enum):
    def __str__(self) -> str:
        return str(self.value)


class CloudProvider(_ValueEnum):
    """Cloud providers an architecture can be priced and deployed on."""

    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"
    OCI = "oci"


class IaCFormat(_ValueEnum):
    """Infrastructure-as-Code target formats."""

    TERRAFORM = "terraform"
    CLOUDFORMATION = "cloudformation"
    ARM = "arm"
    KUBERNETES = "kubernetes"
    DOCKER_COMPOSE = "docker-compose"


class Environment(_ValueEnum):
    """Deployment environments threaded into tags, labels and defaults."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class ServiceType(_ValueEnum):
    """Abstract roles a component can play.

    Components may carry service types outside this set; those are kept as
    plain strings and handled by each emitter's fallback policy.
    """

    COMPUTE = "compute"
    DATABASE = "database"
    CACHE = "cache"
    STORAGE = "storage"
    QUEUE = "queue"
    CDN = "cdn"
    NETWORKING = "networking"


ALL_PROVIDERS: Tuple[CloudProvider, ...] = tuple(CloudProvider)

STATEFUL_SERVICE_TYPES = frozenset(
    {
        ServiceType.DATABASE.value,
        ServiceType.CACHE.value,
        ServiceType.QUEUE.value,
        ServiceType.STORAGE.value,
    }
)


class ProviderBinding(BaseModel):
    """A component's concrete service, SKU and price on one provider."""

    service: str = Field(default="", description="Provider service name")
    sku: str = Field(default="", description="Provider SKU / instance size")
    monthly_cost: float = Field(
        default=0.0, alias="monthlyCost", description="Estimated monthly cost"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ArchitectureComponent(BaseModel):
    """One logical infrastructure element of an architecture."""

    name: str
    service_type: str = Field(alias="serviceType")
    providers: Dict[CloudProvider, ProviderBinding] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("service_type")
    @classmethod
    def normalize_service_type(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("providers", mode="before")
    @classmethod
    def drop_empty_bindings(cls, v):
        # Upstream documents use null for providers a component is not priced on
        if isinstance(v, dict):
            return {k: b for k, b in v.items() if b is not None}
        return v

    def binding(self, provider: CloudProvider) -> Optional[ProviderBinding]:
        """Return the binding for ``provider`` or None when it is missing."""
        return self.providers.get(CloudProvider(provider))

    def sku_for(self, provider: CloudProvider, default: str = "") -> str:
        binding = self.binding(provider)
        if binding is None or not binding.sku:
            return default
        return binding.sku


class Architecture(BaseModel):
    """One proposed system design."""

    name: str
    variant: str = "balanced"
    description: str = ""
    components: Tuple[ArchitectureComponent, ...] = ()
    assumptions: Tuple[str, ...] = ()
    trade_offs: Tuple[str, ...] = Field(default=(), alias="tradeOffs")
    total_costs: Dict[CloudProvider, float] = Field(
        default_factory=dict, alias="totalCosts"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def total_cost(self, provider: CloudProvider) -> float:
        """Monthly cost on ``provider``, summed from components if not given."""
        provider = CloudProvider(provider)
        if provider in self.total_costs:
            return self.total_costs[provider]
        total = 0.0
        for component in self.components:
            binding = component.binding(provider)
            if binding is not None:
                total += binding.monthly_cost
        return total


class GeneratorConfig(BaseModel):
    """One generation request."""

    format: IaCFormat
    provider: CloudProvider
    region: str
    project_name: str = Field(alias="projectName")
    environment: Environment = Environment.DEV

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_validator("region", "project_name")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class GeneratedFile(BaseModel):
    """One emitted file."""

    filename: str
    content: str
    language: str

    model_config = ConfigDict(frozen=True)
