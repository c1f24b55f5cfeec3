"""EmitterContext - per-call state shared by an emitter's assembly steps.

Emitters are stateless between calls; everything accumulated while walking
an architecture's components lives in a fresh ``EmitterContext``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple, Union

from ..models import Architecture, ArchitectureComponent, GeneratorConfig
from .registry import Fragment
from .report import UnmappedComponent
from .sanitizer import IdentifierAllocator


@dataclass(frozen=True)
class MappedComponent:
    """A component together with the fragments generated for it."""

    component: ArchitectureComponent
    identifier: str
    fragments: Tuple[Fragment, ...]

    @property
    def resources(self) -> List[Fragment]:
        return [f for f in self.fragments if f.is_resource]

    @property
    def primary(self) -> Optional[Fragment]:
        """First resource fragment; outputs reference it."""
        resources = self.resources
        return resources[0] if resources else None

    @property
    def service_type(self) -> str:
        return self.component.service_type


Entry = Union[MappedComponent, UnmappedComponent]


@dataclass
class EmitterContext:
    """State accumulated during one emission.

    Usage:
        context = EmitterContext(architecture, config, generated_at, allocator)
        context.declare("aws_instance", "web")
        context.entries.append(mapped)
    """

    architecture: Architecture
    config: GeneratorConfig
    generated_at: datetime
    allocator: IdentifierAllocator

    # Component outcomes in architecture order
    entries: List[Entry] = field(default_factory=list)

    # Auxiliary declarations (variables, data sources, volumes) keyed by
    # (role, name); first declaration wins
    auxiliary: Dict[Tuple[str, str], Fragment] = field(default_factory=dict)

    # Identifier keys already declared in the document
    declared: Set[Tuple[str, ...]] = field(default_factory=set)

    @property
    def mapped(self) -> List[MappedComponent]:
        return [e for e in self.entries if isinstance(e, MappedComponent)]

    @property
    def unmapped(self) -> List[UnmappedComponent]:
        return [e for e in self.entries if isinstance(e, UnmappedComponent)]

    def declare(self, *key: str) -> None:
        self.declared.add(tuple(key))

    def is_declared(self, *key: str) -> bool:
        return tuple(key) in self.declared

    def add_auxiliary(self, fragment: Fragment) -> None:
        self.auxiliary.setdefault((fragment.role, fragment.name), fragment)

    def auxiliary_of(self, role: str) -> List[Fragment]:
        return [f for (r, _), f in self.auxiliary.items() if r == role]

    def mapped_of(self, service_type: str) -> List[MappedComponent]:
        return [m for m in self.mapped if m.service_type == service_type]

    @property
    def resource_count(self) -> int:
        return sum(len(m.resources) for m in self.mapped)
