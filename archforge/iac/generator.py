"""Generator facade: one entry point for every IaC format.

The facade validates the (format, provider) pair against the static format
table before any emitter runs, then hands the request to the emitter
registered for the format. It holds no state beyond the injected mapping
registry and clock, so one instance can serve any number of requests.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..models import Architecture, GeneratedFile, GeneratorConfig
from .emitters import get_emitter
from .formats import check_compatibility
from .mappings import build_default_registry
from .registry import ResourceMappingRegistry
from .report import GenerationResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IaCGenerator:
    """Translate architectures into IaC files.

    Args:
        registry: Mapping registry handed to emitters (defaults to the
            built-in tables)
        clock: Source of the timestamp embedded in file headers (defaults
            to the UTC wall clock)
    """

    def __init__(
        self,
        registry: Optional[ResourceMappingRegistry] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.registry = registry if registry is not None else build_default_registry()
        self.clock = clock or utc_now

    def generate_with_report(
        self, architecture: Architecture, config: GeneratorConfig
    ) -> GenerationResult:
        """Generate files and the emission report.

        Raises:
            UnsupportedCombinationError: If the format cannot target the provider
            UnsupportedFormatError: If the format is unknown
            IdentifierCollisionError: If identifiers cannot be made unique
        """
        check_compatibility(config.format, config.provider)

        emitter_class = get_emitter(config.format.value)
        emitter = emitter_class(self.registry)
        logger.debug(
            f"Dispatching '{architecture.name}' to {emitter_class.__name__} "
            f"({config.format.value}/{config.provider.value})"
        )
        return emitter.emit(architecture, config, self.clock())

    def generate(
        self, architecture: Architecture, config: GeneratorConfig
    ) -> List[GeneratedFile]:
        """Generate the files for ``architecture`` in the requested format."""
        return list(self.generate_with_report(architecture, config).files)


def generate(
    architecture: Architecture,
    config: GeneratorConfig,
    *,
    clock: Optional[Clock] = None,
    registry: Optional[ResourceMappingRegistry] = None,
) -> List[GeneratedFile]:
    """Module-level shortcut for ``IaCGenerator(registry, clock).generate``."""
    return IaCGenerator(registry=registry, clock=clock).generate(architecture, config)
