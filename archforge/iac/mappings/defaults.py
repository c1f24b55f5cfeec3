"""Default SKUs used when a component's binding carries no SKU."""

from typing import Dict, Tuple

from ...models import ArchitectureComponent, CloudProvider, ServiceType

DEFAULT_SKUS: Dict[Tuple[CloudProvider, str], str] = {
    (CloudProvider.AWS, ServiceType.COMPUTE.value): "t3.medium",
    (CloudProvider.AWS, ServiceType.DATABASE.value): "db.t3.medium",
    (CloudProvider.AWS, ServiceType.CACHE.value): "cache.t3.micro",
    (CloudProvider.AZURE, ServiceType.COMPUTE.value): "Standard_B2s",
    (CloudProvider.AZURE, ServiceType.DATABASE.value): "Standard_B1ms",
    (CloudProvider.GCP, ServiceType.COMPUTE.value): "e2-medium",
    (CloudProvider.GCP, ServiceType.DATABASE.value): "db-f1-micro",
    (CloudProvider.OCI, ServiceType.COMPUTE.value): "VM.Standard.E4.Flex",
}


def sku(component: ArchitectureComponent, provider: CloudProvider) -> str:
    """The component's SKU on ``provider`` or the default for its type."""
    provider = CloudProvider(provider)
    default = DEFAULT_SKUS.get((provider, component.service_type), "")
    return component.sku_for(provider, default)
