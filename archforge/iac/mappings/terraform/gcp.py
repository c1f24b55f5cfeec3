"""Terraform mappings for Google Cloud."""

from ....models import CloudProvider, ServiceType
from ...registry import resource
from ..defaults import sku
from .common import (
    TERRAFORM,
    block,
    bucket_name,
    cloud_name,
    labels,
    resource_ref,
    var,
)

GCP = CloudProvider.GCP


@TERRAFORM.register(ServiceType.COMPUTE, GCP)
def google_compute_instance(component, config, name):
    return [
        resource(
            "google_compute_instance",
            name,
            {
                "name": cloud_name(name, "instance"),
                "machine_type": sku(component, GCP),
                "zone": f"{config.region}-a",
                "labels": labels(config, project=True),
                "boot_disk": block(
                    initialize_params=block(image="debian-cloud/debian-12"),
                ),
                "network_interface": block(
                    network="default",
                    access_config=block(),
                ),
            },
        )
    ]


@TERRAFORM.register(ServiceType.DATABASE, GCP)
def google_sql_database_instance(component, config, name):
    return [
        resource(
            "google_sql_database_instance",
            name,
            {
                "name": cloud_name(name, "sql"),
                "database_version": "POSTGRES_14",
                "region": config.region,
                "deletion_protection": False,
                "settings": block(
                    tier=sku(component, GCP),
                    user_labels=labels(config),
                    backup_configuration=block(enabled=True),
                ),
            },
        ),
        resource(
            "google_sql_user",
            f"{name}_admin",
            {
                "name": "dbadmin",
                "instance": resource_ref("google_sql_database_instance", name, "name"),
                "password": var("db_password"),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.CACHE, GCP)
def google_redis_instance(component, config, name):
    return [
        resource(
            "google_redis_instance",
            name,
            {
                "name": cloud_name(name, "redis"),
                "tier": "BASIC",
                "memory_size_gb": 1,
                "region": config.region,
                "redis_version": "REDIS_7_0",
                "labels": labels(config),
            },
        )
    ]


@TERRAFORM.register(ServiceType.STORAGE, GCP)
def google_storage_bucket(component, config, name):
    return [
        resource(
            "google_storage_bucket",
            name,
            {
                "name": bucket_name(config, name),
                "location": config.region,
                "force_destroy": True,
                "labels": labels(config),
                "versioning": block(enabled=True),
            },
        )
    ]


@TERRAFORM.register(ServiceType.CDN, GCP)
def google_compute_backend_bucket(component, config, name):
    origin = f"{name}_origin"
    return [
        resource(
            "google_compute_backend_bucket",
            name,
            {
                "name": cloud_name(name, "cdn"),
                "bucket_name": resource_ref("google_storage_bucket", origin, "name"),
                "enable_cdn": True,
            },
        ),
        resource(
            "google_storage_bucket",
            origin,
            {
                "name": f"{bucket_name(config, name)}-origin",
                "location": config.region,
                "force_destroy": True,
                "labels": labels(config),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.QUEUE, GCP)
def google_pubsub_topic(component, config, name):
    return [
        resource(
            "google_pubsub_topic",
            name,
            {
                "name": cloud_name(name, "topic"),
                "labels": labels(config),
            },
        ),
        resource(
            "google_pubsub_subscription",
            f"{name}_sub",
            {
                "name": cloud_name(name, "subscription"),
                "topic": resource_ref("google_pubsub_topic", name, "name"),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.NETWORKING, GCP)
def google_compute_network(component, config, name):
    return [
        resource(
            "google_compute_network",
            name,
            {
                "name": cloud_name(name, "vpc"),
                "auto_create_subnetworks": False,
            },
        ),
        resource(
            "google_compute_subnetwork",
            f"{name}_subnet",
            {
                "name": cloud_name(name, "subnet"),
                "ip_cidr_range": "10.0.1.0/24",
                "region": config.region,
                "network": resource_ref("google_compute_network", name),
            },
        ),
    ]
