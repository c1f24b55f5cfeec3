"""Infrastructure-as-Code generation package for archforge.

Translates provider-agnostic architectures into deployment artifacts:

- Terraform (aws, azure, gcp, oci)
- AWS CloudFormation
- Azure ARM templates
- Kubernetes manifests
- Docker Compose
"""

from .emitters import FallbackPolicy, IaCEmitter, get_emitter, get_emitter_registry
from .generator import IaCGenerator, generate
from .mappings import build_default_registry
from .registry import Fragment, ResourceMappingRegistry
from .report import GenerationReport, GenerationResult, UnmappedComponent

__all__ = [
    "FallbackPolicy",
    "Fragment",
    "GenerationReport",
    "GenerationResult",
    "IaCEmitter",
    "IaCGenerator",
    "ResourceMappingRegistry",
    "UnmappedComponent",
    "build_default_registry",
    "generate",
    "get_emitter",
    "get_emitter_registry",
]
