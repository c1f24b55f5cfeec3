"""Base emitter class for Infrastructure-as-Code generation.

This module defines the abstract base class for all IaC emitters. The base
class owns the component walk shared by every format (identifier
allocation, registry lookup, fallback bookkeeping and the final identifier
collision check); subclasses only assemble their files.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from ...exceptions import IdentifierCollisionError
from ...models import (
    Architecture,
    ArchitectureComponent,
    GeneratedFile,
    GeneratorConfig,
    IaCFormat,
)
from ..context import EmitterContext, MappedComponent
from ..registry import Fragment, ResourceMappingRegistry
from ..report import (
    REASON_MISSING_BINDING,
    REASON_UNMAPPED,
    GenerationReport,
    GenerationResult,
    IdentifierRename,
    UnmappedComponent,
)
from ..sanitizer import COMPOSE_RULES, IdentifierAllocator, IdentifierRules, sanitize

logger = logging.getLogger(__name__)

# Upper bound on suffixed identifiers tried for one component
MAX_IDENTIFIER_ATTEMPTS = 1000


class FallbackPolicy(str, Enum):
    """How an emitter renders a component it has no mapping for."""

    PLACEHOLDER = "placeholder"
    METADATA = "metadata"
    OMIT = "omit"

    def __str__(self) -> str:
        return str(self.value)


class IaCEmitter(ABC):
    """Abstract base class for Infrastructure-as-Code emitters.

    Subclasses declare their format, identifier rules and fallback policy
    as class attributes and implement ``_assemble``.
    """

    FORMAT: IaCFormat
    IDENTIFIER_RULES: IdentifierRules
    FALLBACK_POLICY: FallbackPolicy = FallbackPolicy.PLACEHOLDER

    # Treat a component without a binding for the target provider as unmapped
    REQUIRES_PROVIDER_BINDING: bool = False

    def __init__(self, registry: ResourceMappingRegistry) -> None:
        """Initialize emitter with the resource mapping registry.

        Args:
            registry: Lookup of fragment generators, shared read-only
        """
        self.registry = registry

    def emit(
        self,
        architecture: Architecture,
        config: GeneratorConfig,
        generated_at: datetime,
    ) -> GenerationResult:
        """Generate the format's file set for an architecture.

        Args:
            architecture: Architecture to translate
            config: Generation request
            generated_at: Timestamp embedded in generated headers

        Returns:
            Generated files and the emission report
        """
        logger.info(
            f"Starting {self.FORMAT.value} emission for '{architecture.name}' "
            f"({len(architecture.components)} components, provider {config.provider.value})"
        )
        context = EmitterContext(
            architecture=architecture,
            config=config,
            generated_at=generated_at,
            allocator=IdentifierAllocator(self.IDENTIFIER_RULES),
        )
        self._prepare(context)
        self._map_components(context)
        files = self._assemble(context)
        self._validate_identifiers(context)

        report = self._build_report(context, files)
        self._log_statistics(report)
        return GenerationResult(files=tuple(files), report=report)

    def _prepare(self, context: EmitterContext) -> None:
        """Reserve emitter-owned identifiers before components are mapped."""

    @abstractmethod
    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        """Assemble the mapped components into output files."""
        raise NotImplementedError("File assembly not yet implemented")

    def fragment_key(self, fragment: Fragment) -> Tuple[str, ...]:
        """Key under which a resource fragment must be unique in its document."""
        return (fragment.kind, fragment.name)

    def _map_components(self, context: EmitterContext) -> None:
        provider = context.config.provider
        for component in context.architecture.components:
            generator = self.registry.lookup(
                component.service_type, provider, self.FORMAT
            )
            binding = component.binding(provider)

            reason: Optional[str] = None
            if generator is None:
                reason = REASON_UNMAPPED
            elif binding is None and self.REQUIRES_PROVIDER_BINDING:
                reason = REASON_MISSING_BINDING
            elif binding is None:
                logger.warning(
                    f"Component '{component.name}' has no {provider.value} binding, "
                    f"using default SKU"
                )

            if reason is not None:
                unmapped = UnmappedComponent(
                    name=component.name,
                    service_type=component.service_type,
                    reason=reason,
                    service=binding.service if binding else "",
                    sku=binding.sku if binding else "",
                )
                context.entries.append(unmapped)
                logger.warning(
                    f"No {self.FORMAT.value} mapping for '{component.name}' "
                    f"({component.service_type}/{provider.value}, {reason}); "
                    f"fallback: {self.FALLBACK_POLICY.value}"
                )
                continue

            identifier, fragments = self._generate_fragments(
                context, component, generator
            )
            for fragment in fragments:
                if fragment.is_resource:
                    context.declare(*self.fragment_key(fragment))
                else:
                    context.add_auxiliary(fragment)
            context.entries.append(MappedComponent(component, identifier, fragments))
            logger.debug(
                f"Mapped '{component.name}' -> {identifier} "
                f"({sum(1 for f in fragments if f.is_resource)} resources)"
            )

    def _generate_fragments(
        self, context: EmitterContext, component: ArchitectureComponent, generator
    ) -> Tuple[str, Tuple[Fragment, ...]]:
        """Call the generator with the first identifier whose fragments fit.

        A derived fragment name (``<id>-pvc``, ``<Id>Database``) can clash with
        another component's declaration even when the identifiers differ, so
        each candidate identifier is checked against everything declared so
        far before it is claimed.
        """
        for attempt, candidate in enumerate(context.allocator.candidates(component.name)):
            if attempt >= MAX_IDENTIFIER_ATTEMPTS:
                break
            fragments = tuple(generator(component, context.config, candidate))
            keys = [self.fragment_key(f) for f in fragments if f.is_resource]
            if len(set(keys)) == len(keys) and not any(
                context.is_declared(*key) for key in keys
            ):
                context.allocator.claim(component.name, candidate)
                return candidate, fragments

        raise IdentifierCollisionError(
            self.FORMAT.value,
            sanitize(component.name, self.IDENTIFIER_RULES),
            component.service_type,
        )

    def _validate_identifiers(self, context: EmitterContext) -> None:
        """Fail if two resource fragments in the document share a key."""
        seen = set()
        for mapped in context.mapped:
            for fragment in mapped.resources:
                key = self.fragment_key(fragment)
                if key in seen:
                    raise IdentifierCollisionError(
                        self.FORMAT.value, fragment.name, fragment.kind
                    )
                seen.add(key)

    def _build_report(
        self, context: EmitterContext, files: Sequence[GeneratedFile]
    ) -> GenerationReport:
        return GenerationReport(
            iac_format=self.FORMAT.value,
            provider=context.config.provider.value,
            architecture=context.architecture.name,
            generated_at=context.generated_at,
            fallback_policy=self.FALLBACK_POLICY.value,
            components_total=len(context.architecture.components),
            components_mapped=len(context.mapped),
            resources_generated=context.resource_count,
            files=[f.filename for f in files],
            unmapped=context.unmapped,
            renames=[
                IdentifierRename(name, base, identifier)
                for name, base, identifier in context.allocator.renames
            ],
        )

    def _log_statistics(self, report: GenerationReport) -> None:
        """Log emission statistics."""
        logger.info(
            f"{self.FORMAT.value} emission complete: "
            f"{report.components_mapped}/{report.components_total} components, "
            f"{report.resources_generated} resources, {len(report.files)} files"
        )
        if report.unmapped:
            logger.warning(
                f"{len(report.unmapped)} component(s) handled by fallback "
                f"'{self.FALLBACK_POLICY.value}': "
                f"{[u.name for u in report.unmapped]}"
            )

    @staticmethod
    def file_stem(context: EmitterContext) -> str:
        """``<project>-<variant>`` stem for generated file names."""
        project = sanitize(context.config.project_name, COMPOSE_RULES)
        variant = sanitize(context.architecture.variant, COMPOSE_RULES)
        return f"{project}-{variant}"

    @staticmethod
    def header_lines(context: EmitterContext, title: str) -> List[str]:
        """Common generated-file header lines (without comment markers)."""
        return [
            f"{title} for {context.architecture.name}",
            f"Generated by archforge - {context.generated_at.isoformat()}",
            f"Provider: {context.config.provider.value}",
            f"Environment: {context.config.environment.value}",
        ]


def unmapped_summary(unmapped: Iterable[UnmappedComponent]) -> List[str]:
    """One line per unmapped component, used in header comments."""
    return [
        f"- {u.name} ({u.service_type}): {u.service or 'Unknown'} / {u.sku or 'Unknown'} [{u.reason}]"
        for u in unmapped
    ]
