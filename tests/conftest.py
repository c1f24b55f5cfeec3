"""Shared fixtures for the archforge test suite."""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from archforge.iac.generator import IaCGenerator
from archforge.models import Architecture, GeneratorConfig

FIXED_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

PROVIDER_BINDINGS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "compute": {
        "aws": {"service": "EC2", "sku": "t3.large", "monthlyCost": 60.7},
        "azure": {"service": "Virtual Machines", "sku": "Standard_D2s_v3", "monthlyCost": 70.1},
        "gcp": {"service": "Compute Engine", "sku": "e2-standard-2", "monthlyCost": 48.9},
        "oci": {"service": "Compute", "sku": "VM.Standard.E4.Flex", "monthlyCost": 36.5},
    },
    "database": {
        "aws": {"service": "RDS PostgreSQL", "sku": "db.t3.large", "monthlyCost": 98.0},
        "azure": {"service": "Azure Database for PostgreSQL", "sku": "B_Standard_B2s", "monthlyCost": 90.0},
        "gcp": {"service": "Cloud SQL", "sku": "db-custom-2-7680", "monthlyCost": 85.0},
        "oci": {"service": "Autonomous Database", "sku": "ATP", "monthlyCost": 120.0},
    },
    "cache": {
        "aws": {"service": "ElastiCache Redis", "sku": "cache.t3.small", "monthlyCost": 25.0},
        "azure": {"service": "Azure Cache for Redis", "sku": "C1", "monthlyCost": 40.0},
        "gcp": {"service": "Memorystore", "sku": "BASIC", "monthlyCost": 35.0},
        "oci": {"service": "OCI Cache", "sku": "REDIS_1", "monthlyCost": 30.0},
    },
    "storage": {
        "aws": {"service": "S3", "sku": "STANDARD", "monthlyCost": 5.0},
        "azure": {"service": "Blob Storage", "sku": "Standard_LRS", "monthlyCost": 5.0},
        "gcp": {"service": "Cloud Storage", "sku": "STANDARD", "monthlyCost": 5.0},
        "oci": {"service": "Object Storage", "sku": "Standard", "monthlyCost": 5.0},
    },
    "queue": {
        "aws": {"service": "SQS", "sku": "Standard", "monthlyCost": 2.0},
        "azure": {"service": "Service Bus", "sku": "Standard", "monthlyCost": 10.0},
        "gcp": {"service": "Pub/Sub", "sku": "Standard", "monthlyCost": 3.0},
        "oci": {"service": "Streaming", "sku": "Standard", "monthlyCost": 4.0},
    },
    "cdn": {
        "aws": {"service": "CloudFront", "sku": "PriceClass_100", "monthlyCost": 15.0},
        "azure": {"service": "Azure CDN", "sku": "Standard_Microsoft", "monthlyCost": 15.0},
        "gcp": {"service": "Cloud CDN", "sku": "Standard", "monthlyCost": 15.0},
        "oci": {"service": "WAA", "sku": "Standard", "monthlyCost": 15.0},
    },
    "networking": {
        "aws": {"service": "VPC", "sku": "Standard", "monthlyCost": 0.0},
        "azure": {"service": "Virtual Network", "sku": "Standard", "monthlyCost": 0.0},
        "gcp": {"service": "VPC", "sku": "Standard", "monthlyCost": 0.0},
        "oci": {"service": "VCN", "sku": "Standard", "monthlyCost": 0.0},
    },
}


def component(
    name: str, service_type: str, providers: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Component document in the upstream camelCase shape.

    Args:
        name: Component name
        service_type: Service type (bindings are looked up for known types)
        providers: Providers to bind (default: all four)
    """
    bindings = PROVIDER_BINDINGS.get(service_type, {})
    wanted = providers if providers is not None else list(bindings)
    return {
        "name": name,
        "serviceType": service_type,
        "providers": {p: bindings[p] for p in wanted if p in bindings},
    }


def architecture(*components: Dict[str, Any], **fields: Any) -> Architecture:
    doc = {
        "name": fields.pop("name", "Web Platform"),
        "variant": fields.pop("variant", "balanced"),
        "description": fields.pop("description", "Three-tier web application"),
        "components": list(components),
        **fields,
    }
    return Architecture.model_validate(doc)


def make_config(
    iac_format: str,
    provider: str,
    region: str = "us-east-1",
    project_name: str = "Shop Demo",
    environment: str = "dev",
) -> GeneratorConfig:
    return GeneratorConfig(
        format=iac_format,
        provider=provider,
        region=region,
        project_name=project_name,
        environment=environment,
    )


# ============================================================================
# Clock and generator
# ============================================================================


@pytest.fixture
def fixed_clock():
    """Clock returning the same instant on every call."""
    return lambda: FIXED_TIME


@pytest.fixture
def generator(fixed_clock):
    return IaCGenerator(clock=fixed_clock)


# ============================================================================
# Sample architectures
# ============================================================================


@pytest.fixture
def compute_db_architecture() -> Architecture:
    """One compute and one database component."""
    return architecture(
        component("Web Server", "compute"),
        component("Main DB", "database"),
    )


@pytest.fixture
def three_tier_architecture() -> Architecture:
    """Compute, database and cache components."""
    return architecture(
        component("Web Server", "compute"),
        component("Main DB", "database"),
        component("Session Cache", "cache"),
    )


@pytest.fixture
def full_architecture() -> Architecture:
    """One component for every known service type, bound on every provider."""
    return architecture(
        component("Edge Network", "networking"),
        component("Web Server", "compute"),
        component("Main DB", "database"),
        component("Session Cache", "cache"),
        component("Assets", "storage"),
        component("Jobs", "queue"),
        component("Static CDN", "cdn"),
        name="Full Platform",
        variant="performance-optimized",
    )


@pytest.fixture
def unknown_service_architecture() -> Architecture:
    """Compute plus a component whose service type has no mapping."""
    return architecture(
        component("Web Server", "compute"),
        {
            "name": "Search Cluster",
            "serviceType": "search",
            "providers": {
                "aws": {"service": "OpenSearch", "sku": "t3.small.search", "monthlyCost": 30.0}
            },
        },
    )


# ============================================================================
# Settings isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch, tmp_path):
    """Keep tests away from the user's settings file and ARCHFORGE_* variables."""
    for key in list(os.environ):
        if key.startswith("ARCHFORGE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ARCHFORGE_CONFIG_PATH", str(tmp_path / "settings" / "config.yaml"))


# ============================================================================
# Builders
# ============================================================================


@pytest.fixture
def build_component():
    return component


@pytest.fixture
def build_architecture():
    return architecture


@pytest.fixture
def build_config():
    return make_config
