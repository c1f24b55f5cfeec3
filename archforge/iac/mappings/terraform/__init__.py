"""Terraform fragment generators and provider preambles.

Importing this package registers every provider's generators on the
``TERRAFORM`` mapping table.
"""

from . import aws, azure, gcp, oci  # noqa: F401
from .common import TERRAFORM
from .providers import PREAMBLES, Preamble

__all__ = ["PREAMBLES", "Preamble", "TERRAFORM"]
