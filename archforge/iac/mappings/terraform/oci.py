"""Terraform mappings for Oracle Cloud Infrastructure.

OCI resources reference OCIDs the architecture does not know (images,
subnets, load balancers); each generator declares the variables and data
sources it needs so the configuration has no dangling references.
"""

from ....models import CloudProvider, ServiceType
from ...registry import resource
from ..defaults import sku
from .common import (
    TERRAFORM,
    block,
    cloud_name,
    compact_name,
    data_source,
    freeform_tags,
    project_slug,
    ref,
    var,
    variable,
)

OCI = CloudProvider.OCI

_EXAMPLE_OCID = "ocid1.{kind}.oc1..example"


def _ocid_variable(name: str, description: str, kind: str):
    return variable(name, description, example=_EXAMPLE_OCID.format(kind=kind))


def _availability_domain():
    return data_source(
        "oci_identity_availability_domain",
        "ad",
        {"compartment_id": var("tenancy_ocid"), "ad_number": 1},
    )


def _subnet_variable():
    return _ocid_variable("subnet_id", "OCID of the subnet for instances and clusters", "subnet")


@TERRAFORM.register(ServiceType.COMPUTE, OCI)
def oci_core_instance(component, config, name):
    shape = sku(component, OCI)
    body = {
        "availability_domain": ref("data", "oci_identity_availability_domain", "ad", "name"),
        "compartment_id": var("compartment_id"),
        "display_name": component.name,
        "shape": shape,
        "freeform_tags": freeform_tags(config, project=True),
        "source_details": block(source_type="image", source_id=var("instance_image_id")),
        "create_vnic_details": block(subnet_id=var("subnet_id")),
    }
    if shape.endswith(".Flex"):
        body["shape_config"] = block(ocpus=1, memory_in_gbs=16)
    return [
        resource("oci_core_instance", name, body),
        _availability_domain(),
        _ocid_variable("instance_image_id", "OCID of the instance image", "image"),
        _subnet_variable(),
    ]


@TERRAFORM.register(ServiceType.DATABASE, OCI)
def oci_database_autonomous_database(component, config, name):
    return [
        resource(
            "oci_database_autonomous_database",
            name,
            {
                "compartment_id": var("compartment_id"),
                "db_name": compact_name(name, "db", max_length=14),
                "display_name": component.name,
                "db_workload": "OLTP",
                "is_auto_scaling_enabled": True,
                "cpu_core_count": 1,
                "data_storage_size_in_tbs": 1,
                "admin_password": var("db_password"),
                "freeform_tags": freeform_tags(config),
            },
        )
    ]


@TERRAFORM.register(ServiceType.CACHE, OCI)
def oci_redis_redis_cluster(component, config, name):
    return [
        resource(
            "oci_redis_redis_cluster",
            name,
            {
                "compartment_id": var("compartment_id"),
                "display_name": component.name,
                "node_count": 1,
                "node_memory_in_gbs": 8,
                "software_version": "REDIS_7_0",
                "subnet_id": var("subnet_id"),
                "freeform_tags": freeform_tags(config),
            },
        ),
        _subnet_variable(),
    ]


@TERRAFORM.register(ServiceType.STORAGE, OCI)
def oci_objectstorage_bucket(component, config, name):
    return [
        resource(
            "oci_objectstorage_bucket",
            name,
            {
                "compartment_id": var("compartment_id"),
                "name": f"{cloud_name(project_slug(config))}-{cloud_name(name)}",
                "namespace": ref("data", "oci_objectstorage_namespace", "ns", "namespace"),
                "freeform_tags": freeform_tags(config),
            },
        ),
        data_source(
            "oci_objectstorage_namespace", "ns", {"compartment_id": var("compartment_id")}
        ),
    ]


@TERRAFORM.register(ServiceType.CDN, OCI)
def oci_waa_web_app_acceleration(component, config, name):
    return [
        resource(
            "oci_waa_web_app_acceleration",
            name,
            {
                "compartment_id": var("compartment_id"),
                "display_name": component.name,
                "backend_type": "LOAD_BALANCER",
                "web_app_acceleration_policy_id": var("waa_policy_id"),
                "load_balancer_id": var("lb_id"),
                "freeform_tags": freeform_tags(config),
            },
        ),
        _ocid_variable(
            "waa_policy_id", "OCID of the web app acceleration policy", "webappaccelerationpolicy"
        ),
        _ocid_variable("lb_id", "OCID of the origin load balancer", "loadbalancer"),
    ]


@TERRAFORM.register(ServiceType.QUEUE, OCI)
def oci_streaming_stream(component, config, name):
    return [
        resource(
            "oci_streaming_stream",
            name,
            {
                "compartment_id": var("compartment_id"),
                "name": cloud_name(name, "stream"),
                "partitions": 1,
                "retention_in_hours": 24,
            },
        )
    ]


@TERRAFORM.register(ServiceType.NETWORKING, OCI)
def oci_core_vcn(component, config, name):
    return [
        resource(
            "oci_core_vcn",
            name,
            {
                "compartment_id": var("compartment_id"),
                "cidr_blocks": ["10.0.0.0/16"],
                "display_name": component.name,
                "dns_label": compact_name(name, max_length=15),
            },
        ),
        resource(
            "oci_core_subnet",
            f"{name}_subnet",
            {
                "compartment_id": var("compartment_id"),
                "vcn_id": ref("oci_core_vcn", name, "id"),
                "cidr_block": "10.0.1.0/24",
                "display_name": f"{component.name}-subnet",
            },
        ),
    ]
