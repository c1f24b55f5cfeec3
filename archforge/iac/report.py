"""Generation reporting for IaC emission.

Every emitter returns a ``GenerationReport`` next to its files, recording
how many resources were produced, which components degraded to a
placeholder (or were omitted) and which identifiers had to be renamed to
stay unique. The CLI surfaces this so soft-degraded output is never
mistaken for a complete artifact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Tuple

from ..models import GeneratedFile

REASON_UNMAPPED = "unmapped"
REASON_MISSING_BINDING = "missing-binding"


@dataclass(frozen=True)
class UnmappedComponent:
    """A component that produced no resources in the emitted document."""

    name: str
    service_type: str
    reason: str
    service: str = ""
    sku: str = ""

    def describe(self) -> str:
        target = self.service or "Unknown service"
        return f"{self.name} ({self.service_type}): {self.reason}, intended {target}"


@dataclass(frozen=True)
class IdentifierRename:
    name: str
    requested: str
    identifier: str


@dataclass
class GenerationReport:
    """Outcome of one emitter run."""

    iac_format: str
    provider: str
    architecture: str
    generated_at: datetime
    fallback_policy: str
    components_total: int = 0
    components_mapped: int = 0
    resources_generated: int = 0
    files: List[str] = field(default_factory=list)
    unmapped: List[UnmappedComponent] = field(default_factory=list)
    renames: List[IdentifierRename] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every component produced its resources."""
        return not self.unmapped

    def to_dict(self) -> Dict[str, object]:
        return {
            "format": self.iac_format,
            "provider": self.provider,
            "architecture": self.architecture,
            "generated_at": self.generated_at.isoformat(),
            "fallback_policy": self.fallback_policy,
            "components_total": self.components_total,
            "components_mapped": self.components_mapped,
            "resources_generated": self.resources_generated,
            "files": list(self.files),
            "unmapped": [
                {
                    "name": u.name,
                    "service_type": u.service_type,
                    "reason": u.reason,
                    "service": u.service,
                    "sku": u.sku,
                }
                for u in self.unmapped
            ],
            "renames": [
                {"name": r.name, "requested": r.requested, "identifier": r.identifier}
                for r in self.renames
            ],
        }

    def format_report(self) -> str:
        """Format the report as a human-readable string.

        Returns:
            Formatted report string ready for display.
        """
        lines = []
        lines.append("")
        lines.append("=" * 72)
        lines.append("IaC GENERATION REPORT")
        lines.append("=" * 72)
        lines.append(f"  Architecture:        {self.architecture}")
        lines.append(f"  Format / Provider:   {self.iac_format} / {self.provider}")
        lines.append(f"  Generated At:        {self.generated_at.isoformat()}")
        lines.append("")
        lines.append(f"  Components:          {self.components_total}")
        lines.append(f"  Components Mapped:   {self.components_mapped}")
        lines.append(f"  Resources Generated: {self.resources_generated}")
        lines.append(f"  Files:               {', '.join(self.files)}")
        lines.append("")

        if self.unmapped:
            handling = {
                "placeholder": "replaced by a placeholder comment",
                "metadata": "listed in template metadata",
                "omit": "omitted from the output",
            }.get(self.fallback_policy, self.fallback_policy)
            lines.append(f"INCOMPLETE OUTPUT ({len(self.unmapped)} component(s) {handling})")
            lines.append("-" * 72)
            for component in self.unmapped:
                lines.append(f"  • {component.describe()}")
            lines.append("")

        if self.renames:
            lines.append("RENAMED IDENTIFIERS")
            lines.append("-" * 72)
            for rename in self.renames:
                lines.append(
                    f"  • {rename.name}: '{rename.requested}' -> '{rename.identifier}'"
                )
            lines.append("")

        lines.append("=" * 72)
        return "\n".join(lines)


@dataclass(frozen=True)
class GenerationResult:
    files: Tuple[GeneratedFile, ...]
    report: GenerationReport
