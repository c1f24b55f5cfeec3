"""Serializers turning structured fragment trees into file text."""

from . import documents, hcl

__all__ = ["documents", "hcl"]
