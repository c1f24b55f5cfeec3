"""Tests for the resource mapping registry."""

import pytest

from archforge.iac.mappings import build_default_registry
from archforge.iac.registry import (
    Fragment,
    MappingTable,
    ResourceMappingRegistry,
    make_key,
    resource,
)
from archforge.models import CloudProvider, IaCFormat, ServiceType


def _generator(component, config, name):
    return [resource("test_resource", name, {})]


@pytest.fixture
def table():
    table = MappingTable(IaCFormat.TERRAFORM)
    table.register(ServiceType.COMPUTE, CloudProvider.AWS, CloudProvider.GCP)(_generator)
    return table


@pytest.fixture
def registry(table):
    return ResourceMappingRegistry.from_tables(table)


class TestMappingTable:
    """Import-time registration of fragment generators."""

    def test_register_returns_generator_unchanged(self):
        table = MappingTable(IaCFormat.KUBERNETES)
        assert table.register("cache", CloudProvider.OCI)(_generator) is _generator
        assert len(table) == 1

    def test_duplicate_registration_raises(self, table):
        with pytest.raises(ValueError, match="Duplicate mapping"):
            table.register(ServiceType.COMPUTE, CloudProvider.AWS)(_generator)

    def test_keys_are_normalized(self):
        key = make_key(" Compute ", "aws", "terraform")
        assert key.service_type == "compute"
        assert key.provider is CloudProvider.AWS
        assert key.iac_format is IaCFormat.TERRAFORM


class TestResourceMappingRegistry:
    """Lookup, filtering and extension of the immutable registry."""

    def test_lookup_hit(self, registry):
        assert registry.lookup("compute", "aws", "terraform") is _generator
        assert registry.lookup(ServiceType.COMPUTE, CloudProvider.GCP, IaCFormat.TERRAFORM) is _generator

    def test_lookup_miss_returns_none(self, registry):
        assert registry.lookup("compute", "azure", "terraform") is None
        assert registry.lookup("search", "aws", "terraform") is None
        assert registry.lookup("compute", "aws", "kubernetes") is None

    def test_tables_cannot_overlap(self, table):
        other = MappingTable(IaCFormat.TERRAFORM)
        other.register(ServiceType.COMPUTE, CloudProvider.AWS)(_generator)
        with pytest.raises(ValueError, match="more than one table"):
            ResourceMappingRegistry.from_tables(table, other)

    def test_restricted_to(self):
        registry = build_default_registry()
        restricted = registry.restricted_to(
            iac_formats=["terraform"], service_types=[ServiceType.DATABASE]
        )
        assert len(restricted) == 4
        assert restricted.lookup("database", "oci", "terraform") is not None
        assert restricted.lookup("compute", "aws", "terraform") is None
        assert restricted.lookup("database", "aws", "kubernetes") is None

    def test_with_entries_leaves_original_untouched(self, registry):
        key = make_key("search", "aws", "terraform")
        extended = registry.with_entries({key: _generator})
        assert key in extended
        assert key not in registry
        assert len(extended) == len(registry) + 1

    def test_supported_service_types(self):
        registry = build_default_registry()
        assert registry.supported_service_types("terraform", "aws") == sorted(
            t.value for t in ServiceType
        )
        assert "storage" not in registry.supported_service_types("kubernetes", "aws")
        assert registry.supported_service_types("arm", "aws") == []

    def test_default_registry_is_shared(self):
        assert build_default_registry() is build_default_registry()


class TestFragment:
    def test_resource_helper_sets_meta(self):
        fragment = resource("aws_instance", "web", {"ami": "x"}, buildable=True)
        assert fragment.is_resource
        assert fragment.meta == {"buildable": True}

    def test_auxiliary_role(self):
        fragment = Fragment(kind="variable", name="project_id", role="variable")
        assert not fragment.is_resource
