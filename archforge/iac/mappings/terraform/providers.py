"""Terraform provider preambles.

A preamble is the ``terraform``/``provider`` configuration a provider needs
before any resource, plus the variables it references. Providers without an
entry in ``PREAMBLES`` cannot be targeted by the Terraform emitter.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from ....models import CloudProvider, GeneratorConfig
from ...registry import Fragment
from ...serializers.hcl import Block
from .common import cloud_name, project_slug, var, variable


@dataclass(frozen=True)
class Preamble:
    blocks: Tuple[Block, ...]
    variables: Tuple[Fragment, ...] = ()
    # (kind, name) pairs of resources declared by the preamble itself
    resources: Tuple[Tuple[str, str], ...] = ()


def _terraform_block(name: str, source: str, version: str) -> Block:
    return Block(
        "terraform",
        body={
            "required_version": ">= 1.5.0",
            "required_providers": Block(
                body={name: {"source": source, "version": version}},
            ),
        },
    )


def aws_preamble(config: GeneratorConfig) -> Preamble:
    return Preamble(
        blocks=(
            _terraform_block("aws", "hashicorp/aws", "~> 5.0"),
            Block(
                "provider",
                ("aws",),
                {
                    "region": config.region,
                    "default_tags": Block(
                        body={"tags": {"Project": config.project_name, "ManagedBy": "terraform"}}
                    ),
                },
            ),
        ),
    )


def azure_preamble(config: GeneratorConfig) -> Preamble:
    return Preamble(
        blocks=(
            _terraform_block("azurerm", "hashicorp/azurerm", "~> 3.0"),
            Block("provider", ("azurerm",), {"features": Block()}),
            Block(
                "resource",
                ("azurerm_resource_group", "main"),
                {"name": var("resource_group_name"), "location": config.region},
            ),
        ),
        variables=(
            variable(
                "resource_group_name",
                "Azure Resource Group name",
                example=f"{cloud_name(project_slug(config))}-rg",
            ),
        ),
        resources=(("azurerm_resource_group", "main"),),
    )


def gcp_preamble(config: GeneratorConfig) -> Preamble:
    return Preamble(
        blocks=(
            _terraform_block("google", "hashicorp/google", "~> 5.0"),
            Block(
                "provider",
                ("google",),
                {"project": var("project_id"), "region": config.region},
            ),
        ),
        variables=(
            variable("project_id", "GCP Project ID", example="your-gcp-project-id"),
        ),
    )


def oci_preamble(config: GeneratorConfig) -> Preamble:
    return Preamble(
        blocks=(
            _terraform_block("oci", "oracle/oci", "~> 5.0"),
            Block(
                "provider",
                ("oci",),
                {
                    "tenancy_ocid": var("tenancy_ocid"),
                    "user_ocid": var("user_ocid"),
                    "fingerprint": var("fingerprint"),
                    "private_key_path": var("private_key_path"),
                    "region": config.region,
                },
            ),
        ),
        variables=(
            variable("tenancy_ocid", "OCI Tenancy OCID", example="ocid1.tenancy.oc1..example"),
            variable("user_ocid", "OCI User OCID", example="ocid1.user.oc1..example"),
            variable("fingerprint", "API Key fingerprint", example="xx:xx:xx:xx:xx"),
            variable(
                "private_key_path",
                "Path to OCI API private key",
                example="~/.oci/oci_api_key.pem",
            ),
            variable(
                "compartment_id",
                "OCI Compartment ID",
                example="ocid1.compartment.oc1..example",
            ),
        ),
    )


PREAMBLES: Dict[CloudProvider, Callable[[GeneratorConfig], Preamble]] = {
    CloudProvider.AWS: aws_preamble,
    CloudProvider.AZURE: azure_preamble,
    CloudProvider.GCP: gcp_preamble,
    CloudProvider.OCI: oci_preamble,
}
