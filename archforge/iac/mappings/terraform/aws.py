"""Terraform mappings for AWS."""

from ....models import CloudProvider, ServiceType
from ...registry import resource
from ..defaults import sku
from .common import (
    TERRAFORM,
    block,
    bucket_name,
    cloud_name,
    compact_name,
    project_slug,
    resource_ref,
    tags,
    var,
)

AWS = CloudProvider.AWS

# Amazon Linux 2
DEFAULT_AMI = "ami-0c55b159cbfafe1f0"


@TERRAFORM.register(ServiceType.COMPUTE, AWS)
def aws_instance(component, config, name):
    return [
        resource(
            "aws_instance",
            name,
            {
                "ami": DEFAULT_AMI,
                "instance_type": sku(component, AWS),
                "tags": tags(component, config, project=True, managed_by=True),
            },
        )
    ]


@TERRAFORM.register(ServiceType.DATABASE, AWS)
def aws_db_instance(component, config, name):
    return [
        resource(
            "aws_db_instance",
            name,
            {
                "identifier": cloud_name(name, "db"),
                "allocated_storage": 20,
                "storage_type": "gp2",
                "engine": "postgres",
                "engine_version": "14",
                "instance_class": sku(component, AWS),
                "db_name": compact_name(project_slug(config), "db", max_length=63),
                "username": "dbadmin",
                "password": var("db_password"),
                "parameter_group_name": "default.postgres14",
                "skip_final_snapshot": True,
                "publicly_accessible": False,
                "tags": tags(component, config),
            },
        )
    ]


@TERRAFORM.register(ServiceType.CACHE, AWS)
def aws_elasticache_cluster(component, config, name):
    return [
        resource(
            "aws_elasticache_cluster",
            name,
            {
                "cluster_id": cloud_name(name, "cache")[:40],
                "engine": "redis",
                "node_type": sku(component, AWS),
                "num_cache_nodes": 1,
                "parameter_group_name": "default.redis7",
                "engine_version": "7.0",
                "port": 6379,
                "tags": tags(component, config),
            },
        )
    ]


@TERRAFORM.register(ServiceType.STORAGE, AWS)
def aws_s3_bucket(component, config, name):
    return [
        resource(
            "aws_s3_bucket",
            name,
            {
                "bucket": bucket_name(config, name),
                "tags": tags(component, config),
            },
        ),
        resource(
            "aws_s3_bucket_versioning",
            f"{name}_versioning",
            {
                "bucket": resource_ref("aws_s3_bucket", name),
                "versioning_configuration": block(status="Enabled"),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.CDN, AWS)
def aws_cloudfront_distribution(component, config, name):
    origin = f"{name}_origin"
    origin_id = f"S3-{cloud_name(name)}"
    return [
        resource(
            "aws_cloudfront_distribution",
            name,
            {
                "enabled": True,
                "is_ipv6_enabled": True,
                "default_root_object": "index.html",
                "origin": block(
                    domain_name=resource_ref(
                        "aws_s3_bucket", origin, "bucket_regional_domain_name"
                    ),
                    origin_id=origin_id,
                ),
                "default_cache_behavior": block(
                    allowed_methods=["GET", "HEAD"],
                    cached_methods=["GET", "HEAD"],
                    target_origin_id=origin_id,
                    viewer_protocol_policy="redirect-to-https",
                    min_ttl=0,
                    default_ttl=3600,
                    max_ttl=86400,
                    forwarded_values=block(
                        query_string=False,
                        cookies=block(forward="none"),
                    ),
                ),
                "restrictions": block(
                    geo_restriction=block(restriction_type="none"),
                ),
                "viewer_certificate": block(cloudfront_default_certificate=True),
                "tags": tags(component, config, name=False),
            },
        ),
        resource(
            "aws_s3_bucket",
            origin,
            {
                "bucket": f"{bucket_name(config, name)}-origin",
                "tags": tags(component, config),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.QUEUE, AWS)
def aws_sqs_queue(component, config, name):
    return [
        resource(
            "aws_sqs_queue",
            name,
            {
                "name": cloud_name(name, "queue"),
                "delay_seconds": 0,
                "max_message_size": 262144,
                "message_retention_seconds": 345600,
                "receive_wait_time_seconds": 10,
                "tags": tags(component, config),
            },
        )
    ]


@TERRAFORM.register(ServiceType.NETWORKING, AWS)
def aws_vpc(component, config, name):
    return [
        resource(
            "aws_vpc",
            name,
            {
                "cidr_block": "10.0.0.0/16",
                "enable_dns_hostnames": True,
                "enable_dns_support": True,
                "tags": tags(component, config),
            },
        ),
        resource(
            "aws_subnet",
            f"{name}_public",
            {
                "vpc_id": resource_ref("aws_vpc", name),
                "cidr_block": "10.0.1.0/24",
                "map_public_ip_on_launch": True,
                "tags": {"Name": f"{component.name}-public"},
            },
        ),
    ]
