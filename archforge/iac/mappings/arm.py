"""ARM template fragment generators (Azure only).

Fragment names are Azure resource names. Each fragment carries the ARM
``resourceId(...)`` expression that identifies it in ``meta["resource_id"]``
so the emitter can wire ``dependsOn`` edges and outputs without parsing
names back apart.
"""

from ...models import CloudProvider, IaCFormat, ServiceType
from ..registry import MappingTable, resource
from ..sanitizer import shorten
from .defaults import sku

ARM = MappingTable(IaCFormat.ARM)

AZURE = CloudProvider.AZURE

LOCATION = "[variables('location')]"

VNET_NAME = "variables('vnetName')"

DEFAULT_SUBNET = "default"


def resource_id(resource_type: str, *names: str) -> str:
    """ARM ``resourceId`` expression (without the enclosing brackets)."""
    args = ", ".join(n if n.startswith("variables(") else f"'{n}'" for n in names)
    return f"resourceId('{resource_type}', {args})"


def expression(expr: str) -> str:
    return f"[{expr}]"


def arm_tags(component):
    return {
        "component": component.name,
        "environment": "[parameters('environment')]",
        "managedBy": "arm-template",
    }


def arm_resource(resource_type, api_version, name, body, *name_parts, **meta):
    parts = name_parts or (name,)
    return resource(
        resource_type,
        name,
        {"type": resource_type, "apiVersion": api_version, "name": name, **body},
        resource_id=resource_id(resource_type, *parts),
        **meta,
    )


def subnet_id_expression() -> str:
    return expression(
        resource_id("Microsoft.Network/virtualNetworks/subnets", VNET_NAME, DEFAULT_SUBNET)
    )


@ARM.register(ServiceType.COMPUTE, AZURE)
def virtual_machine(component, config, name):
    nic = f"{name}-nic"
    vm = f"{name}-vm"
    nic_id = resource_id("Microsoft.Network/networkInterfaces", nic)
    return [
        arm_resource(
            "Microsoft.Compute/virtualMachines",
            "2023-07-01",
            vm,
            {
                "location": LOCATION,
                "dependsOn": [expression(nic_id)],
                "properties": {
                    "hardwareProfile": {"vmSize": sku(component, AZURE)},
                    "storageProfile": {
                        "imageReference": {
                            "publisher": "Canonical",
                            "offer": "0001-com-ubuntu-server-jammy",
                            "sku": "22_04-lts",
                            "version": "latest",
                        },
                        "osDisk": {
                            "createOption": "FromImage",
                            "managedDisk": {"storageAccountType": "Standard_LRS"},
                        },
                    },
                    "osProfile": {
                        "computerName": vm,
                        "adminUsername": "[parameters('adminUsername')]",
                        "adminPassword": "[parameters('adminPassword')]",
                    },
                    "networkProfile": {"networkInterfaces": [{"id": expression(nic_id)}]},
                },
                "tags": arm_tags(component),
            },
        ),
        arm_resource(
            "Microsoft.Network/networkInterfaces",
            "2023-05-01",
            nic,
            {
                "location": LOCATION,
                "properties": {
                    "ipConfigurations": [
                        {
                            "name": "ipconfig1",
                            "properties": {
                                "subnet": {"id": subnet_id_expression()},
                                "privateIPAllocationMethod": "Dynamic",
                            },
                        }
                    ]
                },
                "tags": arm_tags(component),
            },
            attaches_to_network=True,
        ),
    ]


@ARM.register(ServiceType.DATABASE, AZURE)
def postgresql_flexible_server(component, config, name):
    return [
        arm_resource(
            "Microsoft.DBforPostgreSQL/flexibleServers",
            "2023-03-01-preview",
            f"{name}-psql",
            {
                "location": LOCATION,
                "sku": {"name": sku(component, AZURE), "tier": "Burstable"},
                "properties": {
                    "version": "14",
                    "administratorLogin": "[parameters('dbAdminUsername')]",
                    "administratorLoginPassword": "[parameters('dbAdminPassword')]",
                    "storage": {"storageSizeGB": 32},
                    "backup": {"backupRetentionDays": 7, "geoRedundantBackup": "Disabled"},
                },
                "tags": arm_tags(component),
            },
        )
    ]


@ARM.register(ServiceType.CACHE, AZURE)
def redis_cache(component, config, name):
    return [
        arm_resource(
            "Microsoft.Cache/redis",
            "2023-08-01",
            f"{name}-redis",
            {
                "location": LOCATION,
                "properties": {
                    "sku": {"name": "Basic", "family": "C", "capacity": 0},
                    "enableNonSslPort": False,
                    "minimumTlsVersion": "1.2",
                },
                "tags": arm_tags(component),
            },
        )
    ]


@ARM.register(ServiceType.STORAGE, AZURE)
def storage_account(component, config, name):
    return [
        arm_resource(
            "Microsoft.Storage/storageAccounts",
            "2023-01-01",
            f"{shorten(name, 17)}storage",
            {
                "location": LOCATION,
                "sku": {"name": "Standard_LRS"},
                "kind": "StorageV2",
                "properties": {
                    "accessTier": "Hot",
                    "supportsHttpsTrafficOnly": True,
                    "minimumTlsVersion": "TLS1_2",
                },
                "tags": arm_tags(component),
            },
        )
    ]


@ARM.register(ServiceType.QUEUE, AZURE)
def service_bus_queue(component, config, name):
    namespace = f"{name}-sb"
    queue = f"{name}-queue"
    namespace_id = resource_id("Microsoft.ServiceBus/namespaces", namespace)
    return [
        arm_resource(
            "Microsoft.ServiceBus/namespaces",
            "2022-10-01-preview",
            namespace,
            {
                "location": LOCATION,
                "sku": {"name": "Standard", "tier": "Standard"},
                "properties": {},
                "tags": arm_tags(component),
            },
        ),
        arm_resource(
            "Microsoft.ServiceBus/namespaces/queues",
            "2022-10-01-preview",
            f"{namespace}/{queue}",
            {
                "dependsOn": [expression(namespace_id)],
                "properties": {"maxSizeInMegabytes": 1024, "defaultMessageTimeToLive": "P14D"},
            },
            namespace,
            queue,
        ),
    ]


@ARM.register(ServiceType.CDN, AZURE)
def cdn_profile(component, config, name):
    profile = f"{name}-cdn"
    endpoint = f"{name}-endpoint"
    profile_id = resource_id("Microsoft.Cdn/profiles", profile)
    return [
        arm_resource(
            "Microsoft.Cdn/profiles",
            "2023-05-01",
            profile,
            {
                "location": "global",
                "sku": {"name": "Standard_Microsoft"},
                "properties": {},
                "tags": arm_tags(component),
            },
        ),
        arm_resource(
            "Microsoft.Cdn/profiles/endpoints",
            "2023-05-01",
            f"{profile}/{endpoint}",
            {
                "location": "global",
                "dependsOn": [expression(profile_id)],
                "properties": {
                    "originHostHeader": "[parameters('cdnOriginHost')]",
                    "origins": [
                        {
                            "name": "origin",
                            "properties": {"hostName": "[parameters('cdnOriginHost')]"},
                        }
                    ],
                },
            },
            profile,
            endpoint,
            parameters=("cdnOriginHost",),
        ),
    ]


@ARM.register(ServiceType.NETWORKING, AZURE)
def virtual_network(component, config, name):
    return [
        arm_resource(
            "Microsoft.Network/virtualNetworks",
            "2023-05-01",
            f"{name}-vnet",
            {
                "location": LOCATION,
                "properties": {
                    "addressSpace": {"addressPrefixes": ["10.0.0.0/16"]},
                    "subnets": [
                        {"name": DEFAULT_SUBNET, "properties": {"addressPrefix": "10.0.1.0/24"}}
                    ],
                },
                "tags": arm_tags(component),
            },
            provides_network=True,
        )
    ]
