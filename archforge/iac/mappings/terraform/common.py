"""Shared helpers for Terraform fragment generators."""

import re
from typing import Any, Dict, Optional

from ....models import ArchitectureComponent, GeneratorConfig, IaCFormat
from ...registry import ROLE_DATA, ROLE_VARIABLE, Fragment, MappingTable
from ...sanitizer import TERRAFORM_RULES, sanitize, shorten
from ...serializers.hcl import Block, Expr, block, ref, var

TERRAFORM = MappingTable(IaCFormat.TERRAFORM)

MANAGED_BY = "terraform"


def project_slug(config: GeneratorConfig) -> str:
    return sanitize(config.project_name, TERRAFORM_RULES)


def cloud_name(identifier: str, suffix: str = "") -> str:
    """Provider-side resource name: hyphenated, lower case."""
    name = identifier.replace("_", "-")
    return f"{name}-{suffix}" if suffix else name


def bucket_name(config: GeneratorConfig, identifier: str) -> str:
    return (
        f"{cloud_name(project_slug(config))}-{cloud_name(identifier)}-"
        f"{config.environment.value}"
    )


def compact_name(*parts: str, max_length: int = 24) -> str:
    """Alphanumeric-only name for resources such as storage accounts."""
    return shorten(re.sub(r"[^a-z0-9]", "", "".join(parts).lower()), max_length)


def tags(
    component: ArchitectureComponent,
    config: GeneratorConfig,
    name: bool = True,
    project: bool = False,
    managed_by: bool = False,
) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if name:
        result["Name"] = component.name
    result["Environment"] = var("environment")
    if project:
        result["Project"] = config.project_name
    if managed_by:
        result["ManagedBy"] = MANAGED_BY
    return result


def labels(config: GeneratorConfig, project: bool = False) -> Dict[str, Any]:
    """GCP labels (lower-case keys and values)."""
    result: Dict[str, Any] = {"environment": var("environment")}
    if project:
        result["project"] = cloud_name(project_slug(config))
    return result


def freeform_tags(config: GeneratorConfig, project: bool = False) -> Dict[str, Any]:
    """OCI freeform tags."""
    result: Dict[str, Any] = {"Environment": var("environment")}
    if project:
        result["Project"] = config.project_name
    return result


def variable(
    name: str,
    description: str,
    type_: str = "string",
    default: Optional[Any] = None,
    sensitive: bool = False,
    example: Optional[Any] = None,
) -> Fragment:
    """Variable declaration fragment.

    Args:
        name: Variable name
        description: Variable description
        type_: Terraform type expression
        default: Default value (None for a required variable)
        sensitive: Mark the variable sensitive
        example: Value written to terraform.tfvars.example

    Returns:
        Auxiliary variable fragment
    """
    body: Dict[str, Any] = {"description": description, "type": Expr(type_)}
    if default is not None:
        body["default"] = default
    if sensitive:
        body["sensitive"] = True
    return Fragment(
        kind="variable", name=name, body=body, role=ROLE_VARIABLE, meta={"example": example}
    )


def data_source(kind: str, name: str, body: Dict[str, Any]) -> Fragment:
    return Fragment(kind=kind, name=name, body=body, role=ROLE_DATA)


def resource_ref(kind: str, name: str, attribute: str = "id") -> Expr:
    return ref(kind, name, attribute)


__all__ = [
    "TERRAFORM",
    "Block",
    "Expr",
    "block",
    "bucket_name",
    "cloud_name",
    "compact_name",
    "data_source",
    "freeform_tags",
    "labels",
    "project_slug",
    "ref",
    "resource_ref",
    "tags",
    "var",
    "variable",
]
