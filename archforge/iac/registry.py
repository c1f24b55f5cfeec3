"""Resource mapping registry for fragment-generator dispatch.

This module provides the immutable ``ResourceMappingRegistry`` that maps a
``(service type, provider, format)`` key to the function producing that
combination's resource fragments, and the ``MappingTable`` helper the
per-format mapping modules use to declare their generators.

Usage:
    TERRAFORM = MappingTable(IaCFormat.TERRAFORM)

    @TERRAFORM.register(ServiceType.CACHE, CloudProvider.AWS)
    def aws_elasticache(component, config, name):
        return [resource("aws_elasticache_cluster", name, {...})]

    registry = ResourceMappingRegistry.from_tables(TERRAFORM)
    generator = registry.lookup("cache", "aws", "terraform")
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from ..models import (
    ArchitectureComponent,
    CloudProvider,
    GeneratorConfig,
    IaCFormat,
    ServiceType,
)

logger = logging.getLogger(__name__)

ROLE_RESOURCE = "resource"
ROLE_VARIABLE = "variable"
ROLE_DATA = "data"
ROLE_VOLUME = "volume"


@dataclass(frozen=True)
class Fragment:
    """The unit of generated content for one declaration in one format.

    Attributes:
        kind: Format-native type (``aws_instance``, ``AWS::S3::Bucket``,
            ``Deployment``, ``service`` ...)
        name: Identifier of the declaration inside its document
        body: Structured content, serialized by the emitter
        role: ``resource`` for provisioned resources, otherwise an auxiliary
            declaration (``variable``, ``data``, ``volume``) shared by name
        meta: Emitter hints that are not part of the body (example values,
            dependency wiring)
    """

    kind: str
    name: str
    body: Any = field(default_factory=dict)
    role: str = ROLE_RESOURCE
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_resource(self) -> bool:
        return self.role == ROLE_RESOURCE


FragmentGenerator = Callable[
    [ArchitectureComponent, GeneratorConfig, str], Sequence[Fragment]
]

ServiceKey = Union[ServiceType, str]


class MappingKey(NamedTuple):
    service_type: str
    provider: CloudProvider
    iac_format: IaCFormat


def make_key(
    service_type: ServiceKey,
    provider: Union[CloudProvider, str],
    iac_format: Union[IaCFormat, str],
) -> MappingKey:
    """Normalize loose key parts into a ``MappingKey``."""
    service = service_type.value if isinstance(service_type, ServiceType) else service_type
    return MappingKey(
        str(service).strip().lower(), CloudProvider(provider), IaCFormat(iac_format)
    )


def resource(kind: str, name: str, body: Any, **meta: Any) -> Fragment:
    return Fragment(kind=kind, name=name, body=body, meta=meta)


class MappingTable:
    """Static table of fragment generators for one format.

    Generators are registered with the ``register`` decorator at import
    time; the table itself is only read when a registry is built from it.
    """

    def __init__(self, iac_format: IaCFormat) -> None:
        self.iac_format = IaCFormat(iac_format)
        self._entries: Dict[MappingKey, FragmentGenerator] = {}

    def register(
        self, service_type: ServiceKey, *providers: CloudProvider
    ) -> Callable[[FragmentGenerator], FragmentGenerator]:
        """Decorator registering a generator for one service type.

        Args:
            service_type: Service type the generator handles
            *providers: Providers the generator applies to

        Returns:
            Decorator returning the generator unchanged
        """

        def decorator(generator: FragmentGenerator) -> FragmentGenerator:
            for provider in providers:
                key = make_key(service_type, provider, self.iac_format)
                if key in self._entries:
                    raise ValueError(f"Duplicate mapping registered for {key}")
                self._entries[key] = generator
                logger.debug(
                    f"Registered mapping {generator.__name__} for "
                    f"{key.service_type}/{key.provider.value}/{key.iac_format.value}"
                )
            return generator

        return decorator

    def entries(self) -> Iterator[Tuple[MappingKey, FragmentGenerator]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)


class ResourceMappingRegistry:
    """Immutable lookup of fragment generators.

    Constructed once and passed to each emitter. Absence of an entry is a
    normal outcome that emitters handle with their fallback policy.
    """

    def __init__(
        self, entries: Optional[Mapping[MappingKey, FragmentGenerator]] = None
    ) -> None:
        self._entries: Mapping[MappingKey, FragmentGenerator] = MappingProxyType(
            dict(entries or {})
        )

    @classmethod
    def from_tables(cls, *tables: MappingTable) -> "ResourceMappingRegistry":
        """Build a registry from one or more mapping tables."""
        entries: Dict[MappingKey, FragmentGenerator] = {}
        for table in tables:
            for key, generator in table.entries():
                if key in entries:
                    raise ValueError(f"Mapping {key} declared by more than one table")
                entries[key] = generator
        logger.debug(f"Built resource mapping registry with {len(entries)} entries")
        return cls(entries)

    def lookup(
        self,
        service_type: ServiceKey,
        provider: Union[CloudProvider, str],
        iac_format: Union[IaCFormat, str],
    ) -> Optional[FragmentGenerator]:
        """Get the fragment generator for a combination.

        Args:
            service_type: Component service type
            provider: Target cloud provider
            iac_format: Target IaC format

        Returns:
            Fragment generator or None if the combination is not mapped
        """
        return self._entries.get(make_key(service_type, provider, iac_format))

    def supported_service_types(
        self, iac_format: Union[IaCFormat, str], provider: Union[CloudProvider, str]
    ) -> List[str]:
        """Sorted service types mapped for a format/provider pair."""
        fmt = IaCFormat(iac_format)
        prov = CloudProvider(provider)
        return sorted(
            {k.service_type for k in self._entries if k.iac_format == fmt and k.provider == prov}
        )

    def restricted_to(
        self,
        iac_formats: Optional[Iterable[Union[IaCFormat, str]]] = None,
        service_types: Optional[Iterable[ServiceKey]] = None,
        providers: Optional[Iterable[Union[CloudProvider, str]]] = None,
    ) -> "ResourceMappingRegistry":
        """Return a smaller registry keeping only matching entries."""
        formats = {IaCFormat(f) for f in iac_formats} if iac_formats is not None else None
        services = (
            {make_key(s, CloudProvider.AWS, IaCFormat.TERRAFORM).service_type for s in service_types}
            if service_types is not None
            else None
        )
        provs = {CloudProvider(p) for p in providers} if providers is not None else None
        return ResourceMappingRegistry(
            {
                key: generator
                for key, generator in self._entries.items()
                if (formats is None or key.iac_format in formats)
                and (services is None or key.service_type in services)
                and (provs is None or key.provider in provs)
            }
        )

    def with_entries(
        self, entries: Mapping[MappingKey, FragmentGenerator]
    ) -> "ResourceMappingRegistry":
        """Return a new registry with ``entries`` added or overridden."""
        merged = dict(self._entries)
        merged.update(entries)
        return ResourceMappingRegistry(merged)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[MappingKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
