"""Static per-format mapping tables.

Each submodule declares one ``MappingTable`` whose generators register at
import time. ``build_default_registry`` combines them into the immutable
registry handed to emitters.
"""

from functools import lru_cache

from ..registry import ResourceMappingRegistry
from .arm import ARM
from .cloudformation import CLOUDFORMATION
from .docker_compose import DOCKER_COMPOSE
from .kubernetes import KUBERNETES
from .terraform import TERRAFORM

MAPPING_TABLES = (TERRAFORM, CLOUDFORMATION, ARM, KUBERNETES, DOCKER_COMPOSE)


@lru_cache(maxsize=1)
def build_default_registry() -> ResourceMappingRegistry:
    """Registry with every built-in mapping (built once, then shared)."""
    return ResourceMappingRegistry.from_tables(*MAPPING_TABLES)


__all__ = [
    "ARM",
    "CLOUDFORMATION",
    "DOCKER_COMPOSE",
    "KUBERNETES",
    "MAPPING_TABLES",
    "TERRAFORM",
    "build_default_registry",
]
