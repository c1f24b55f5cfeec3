"""IaC emitters package for the supported target formats.

One emitter class per format, registered by format id when its module is
imported:

- TerraformEmitter (aws, azure, gcp, oci)
- CloudFormationEmitter (aws)
- ArmEmitter (azure)
- KubernetesEmitter (provider-neutral manifests)
- DockerComposeEmitter (provider-neutral local stack)
"""

from typing import Dict, Type

from .base import FallbackPolicy, IaCEmitter

# Global emitter registry
_EMITTER_REGISTRY: Dict[str, Type[IaCEmitter]] = {}


def register_emitter(format_name: str, emitter_class: Type[IaCEmitter]) -> None:
    """Register an emitter class for a specific format.

    Args:
        format_name: IaC format id (e.g. 'terraform', 'arm', 'docker-compose')
        emitter_class: Emitter class implementing the IaCEmitter interface
    """
    _EMITTER_REGISTRY[format_name.lower()] = emitter_class


def get_emitter_registry() -> Dict[str, Type[IaCEmitter]]:
    """Get the current emitter registry.

    Returns:
        Dictionary mapping format ids to emitter classes
    """
    return _EMITTER_REGISTRY.copy()


def get_emitter(format_name: str) -> Type[IaCEmitter]:
    """Get emitter class for specified format.

    Args:
        format_name: IaC format id

    Returns:
        Emitter class for the specified format

    Raises:
        KeyError: If format is not registered
    """
    format_key = str(format_name).lower()
    if format_key not in _EMITTER_REGISTRY:
        available_formats = list(_EMITTER_REGISTRY.keys())
        raise KeyError(
            f"No emitter registered for format '{format_name}'. "
            f"Available formats: {available_formats}"
        )

    return _EMITTER_REGISTRY[format_key]


# Import emitter implementations to auto-register them
from . import (  # noqa: E402
    arm_emitter,
    cloudformation_emitter,
    docker_compose_emitter,
    kubernetes_emitter,
    terraform_emitter,
)

__all__ = [
    "FallbackPolicy",
    "IaCEmitter",
    "get_emitter",
    "get_emitter_registry",
    "register_emitter",
]
