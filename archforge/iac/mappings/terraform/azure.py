"""Terraform mappings for Azure.

Every resource is placed in the ``azurerm_resource_group.main`` group
declared by the Azure provider preamble.
"""

from ....models import CloudProvider, ServiceType
from ...registry import resource
from ..defaults import sku
from .common import (
    TERRAFORM,
    block,
    cloud_name,
    compact_name,
    project_slug,
    ref,
    resource_ref,
    tags,
    var,
    variable,
)

AZURE = CloudProvider.AZURE

RESOURCE_GROUP = "main"


def _placement():
    return {
        "resource_group_name": ref("azurerm_resource_group", RESOURCE_GROUP, "name"),
        "location": ref("azurerm_resource_group", RESOURCE_GROUP, "location"),
    }


@TERRAFORM.register(ServiceType.COMPUTE, AZURE)
def azurerm_linux_virtual_machine(component, config, name):
    nic = f"{name}_nic"
    return [
        resource(
            "azurerm_linux_virtual_machine",
            name,
            {
                "name": cloud_name(name, "vm"),
                **_placement(),
                "size": sku(component, AZURE),
                "admin_username": "adminuser",
                "admin_password": var("admin_password"),
                "disable_password_authentication": False,
                "network_interface_ids": [resource_ref("azurerm_network_interface", nic)],
                "os_disk": block(caching="ReadWrite", storage_account_type="Standard_LRS"),
                "source_image_reference": block(
                    publisher="Canonical",
                    offer="0001-com-ubuntu-server-jammy",
                    sku="22_04-lts",
                    version="latest",
                ),
                "tags": tags(component, config, name=False, project=True),
            },
        ),
        resource(
            "azurerm_network_interface",
            nic,
            {
                "name": cloud_name(name, "nic"),
                **_placement(),
                "ip_configuration": block(
                    name="internal",
                    subnet_id=var("subnet_id"),
                    private_ip_address_allocation="Dynamic",
                ),
            },
        ),
        variable(
            "admin_password",
            "Administrator password for virtual machines",
            sensitive=True,
            example="CHANGE_ME_SECURE_PASSWORD",
        ),
        variable(
            "subnet_id",
            "Subnet ID for virtual machine network interfaces",
            example="/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/example-rg/providers/Microsoft.Network/virtualNetworks/example-vnet/subnets/internal",
        ),
    ]


@TERRAFORM.register(ServiceType.DATABASE, AZURE)
def azurerm_postgresql_flexible_server(component, config, name):
    return [
        resource(
            "azurerm_postgresql_flexible_server",
            name,
            {
                "name": cloud_name(name, "psql"),
                **_placement(),
                "version": "14",
                "administrator_login": "psqladmin",
                "administrator_password": var("db_password"),
                "storage_mb": 32768,
                "sku_name": component.sku_for(AZURE, "B_Standard_B1ms"),
                "tags": tags(component, config, name=False),
            },
        )
    ]


@TERRAFORM.register(ServiceType.CACHE, AZURE)
def azurerm_redis_cache(component, config, name):
    return [
        resource(
            "azurerm_redis_cache",
            name,
            {
                "name": cloud_name(name, "redis"),
                **_placement(),
                "capacity": 1,
                "family": "C",
                "sku_name": "Basic",
                "enable_non_ssl_port": False,
                "minimum_tls_version": "1.2",
                "tags": tags(component, config, name=False),
            },
        )
    ]


@TERRAFORM.register(ServiceType.STORAGE, AZURE)
def azurerm_storage_account(component, config, name):
    return [
        resource(
            "azurerm_storage_account",
            name,
            {
                "name": compact_name(project_slug(config), name),
                **_placement(),
                "account_tier": "Standard",
                "account_replication_type": "LRS",
                "tags": tags(component, config, name=False),
            },
        )
    ]


@TERRAFORM.register(ServiceType.CDN, AZURE)
def azurerm_cdn_profile(component, config, name):
    endpoint = f"{name}_endpoint"
    return [
        resource(
            "azurerm_cdn_profile",
            name,
            {
                "name": cloud_name(name, "cdn"),
                **_placement(),
                "sku": "Standard_Microsoft",
                "tags": tags(component, config, name=False),
            },
        ),
        resource(
            "azurerm_cdn_endpoint",
            endpoint,
            {
                "name": cloud_name(name, "endpoint"),
                "profile_name": resource_ref("azurerm_cdn_profile", name, "name"),
                **_placement(),
                "origin": block(name="origin", host_name=var("cdn_origin_host")),
            },
        ),
        variable(
            "cdn_origin_host",
            "Host name the CDN endpoint pulls content from",
            example="www.example.com",
        ),
    ]


@TERRAFORM.register(ServiceType.QUEUE, AZURE)
def azurerm_servicebus_queue(component, config, name):
    namespace = f"{name}_namespace"
    return [
        resource(
            "azurerm_servicebus_queue",
            name,
            {
                "name": cloud_name(name, "queue"),
                "namespace_id": resource_ref("azurerm_servicebus_namespace", namespace),
            },
        ),
        resource(
            "azurerm_servicebus_namespace",
            namespace,
            {
                "name": cloud_name(f"{project_slug(config)}_{name}", "sb"),
                **_placement(),
                "sku": "Standard",
                "tags": tags(component, config, name=False),
            },
        ),
    ]


@TERRAFORM.register(ServiceType.NETWORKING, AZURE)
def azurerm_virtual_network(component, config, name):
    return [
        resource(
            "azurerm_virtual_network",
            name,
            {
                "name": cloud_name(name, "vnet"),
                "address_space": ["10.0.0.0/16"],
                **_placement(),
                "tags": tags(component, config, name=False),
            },
        ),
        resource(
            "azurerm_subnet",
            f"{name}_subnet",
            {
                "name": "internal",
                "resource_group_name": ref("azurerm_resource_group", RESOURCE_GROUP, "name"),
                "virtual_network_name": resource_ref("azurerm_virtual_network", name, "name"),
                "address_prefixes": ["10.0.1.0/24"],
            },
        ),
    ]
