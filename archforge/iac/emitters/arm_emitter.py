"""ARM template emitter for Infrastructure-as-Code generation.

Produces ``<stem>.arm.json``, a matching ``<stem>.parameters.json`` and a
``deploy.sh`` wrapper around ``az deployment group create``.
"""

import copy
import logging
import shlex
from typing import Any, Dict, List, Optional

from ...models import Environment, GeneratedFile, IaCFormat, ServiceType
from ..context import EmitterContext
from ..mappings.arm import expression, resource_id
from ..sanitizer import ARM_RULES, COMPOSE_RULES, sanitize
from ..serializers.documents import to_json
from . import register_emitter
from .base import FallbackPolicy, IaCEmitter

logger = logging.getLogger(__name__)

TEMPLATE_SCHEMA = (
    "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#"
)
PARAMETERS_SCHEMA = (
    "https://schema.management.azure.com/schemas/2019-04-01/deploymentParameters.json#"
)
CONTENT_VERSION = "1.0.0.0"

VNET_TYPE = "Microsoft.Network/virtualNetworks"

# Parameters a fragment may request through meta["parameters"]
OPTIONAL_PARAMETERS: Dict[str, Dict[str, Any]] = {
    "cdnOriginHost": {
        "type": "string",
        "metadata": {"description": "Host name of the CDN origin"},
    },
}

PARAMETER_EXAMPLES: Dict[str, str] = {
    "adminUsername": "azureuser",
    "adminPassword": "CHANGE_ME_SECURE_PASSWORD",
    "dbAdminUsername": "dbadmin",
    "dbAdminPassword": "CHANGE_ME_DB_PASSWORD",
    "cdnOriginHost": "origin.example.com",
}


class ArmEmitter(IaCEmitter):
    """Emitter for Azure Resource Manager (ARM) templates."""

    FORMAT = IaCFormat.ARM
    IDENTIFIER_RULES = ARM_RULES
    FALLBACK_POLICY = FallbackPolicy.METADATA

    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        stem = self.file_stem(context)
        template = self._template(context)
        template_file = f"{stem}.arm.json"
        parameters_file = f"{stem}.parameters.json"
        return [
            GeneratedFile(filename=template_file, content=to_json(template), language="json"),
            GeneratedFile(
                filename=parameters_file,
                content=to_json(self._parameters_file(context, template)),
                language="json",
            ),
            GeneratedFile(
                filename="deploy.sh",
                content=self._deployment_script(context, template_file, parameters_file),
                language="bash",
            ),
        ]

    def _network_name(self, context: EmitterContext) -> Optional[str]:
        """Name of the first virtual network, if the architecture declares one."""
        for mapped in context.mapped_of(ServiceType.NETWORKING.value):
            for fragment in mapped.resources:
                if fragment.meta.get("provides_network"):
                    return fragment.name
        return None

    def _template(self, context: EmitterContext) -> Dict[str, Any]:
        network = self._network_name(context)
        vnet_name = network or f"{sanitize(context.config.project_name, COMPOSE_RULES)}-vnet"

        resources: List[Dict[str, Any]] = []
        outputs: Dict[str, Any] = {}
        requested: List[str] = []
        for mapped in context.mapped:
            for fragment in mapped.resources:
                body = copy.deepcopy(fragment.body)
                if network and fragment.meta.get("attaches_to_network"):
                    depends_on = body.setdefault("dependsOn", [])
                    depends_on.append(expression(resource_id(VNET_TYPE, network)))
                for name in fragment.meta.get("parameters", ()):
                    if name not in requested:
                        requested.append(name)
                resources.append(body)

            primary = mapped.primary
            if primary is not None:
                outputs[f"{mapped.identifier}ResourceId"] = {
                    "type": "string",
                    "value": expression(primary.meta["resource_id"]),
                }

        if network is None and any(
            f.meta.get("attaches_to_network") for m in context.mapped for f in m.resources
        ):
            logger.warning(
                f"Network interfaces reference virtual network '{vnet_name}', "
                f"which this template does not declare"
            )

        parameters = self._parameters(context)
        for name in requested:
            parameters[name] = copy.deepcopy(OPTIONAL_PARAMETERS[name])

        template: Dict[str, Any] = {
            "$schema": TEMPLATE_SCHEMA,
            "contentVersion": CONTENT_VERSION,
            "metadata": {
                "description": context.architecture.description or context.architecture.name,
                "generator": "archforge",
                "generatedAt": context.generated_at.isoformat(),
                "variant": context.architecture.variant,
            },
            "parameters": parameters,
            "variables": {
                "vnetName": vnet_name,
                "location": "[resourceGroup().location]",
            },
            "resources": resources,
            "outputs": outputs,
        }
        if context.unmapped:
            template["metadata"]["unmappedComponents"] = [
                {
                    "name": u.name,
                    "serviceType": u.service_type,
                    "reason": u.reason,
                    "intendedService": u.service or "Unknown",
                    "intendedSku": u.sku or "Unknown",
                }
                for u in context.unmapped
            ]
        logger.debug(f"ARM template has {len(resources)} resources")
        return template

    @staticmethod
    def _parameters(context: EmitterContext) -> Dict[str, Any]:
        return {
            "adminUsername": {
                "type": "string",
                "metadata": {"description": "Admin username for virtual machines"},
            },
            "adminPassword": {
                "type": "securestring",
                "metadata": {"description": "Admin password for virtual machines"},
            },
            "dbAdminUsername": {
                "type": "string",
                "defaultValue": "dbadmin",
                "metadata": {"description": "Database administrator login"},
            },
            "dbAdminPassword": {
                "type": "securestring",
                "metadata": {"description": "Database administrator password"},
            },
            "environment": {
                "type": "string",
                "defaultValue": context.config.environment.value,
                "allowedValues": [e.value for e in Environment],
                "metadata": {"description": "Environment name"},
            },
        }

    @staticmethod
    def _parameters_file(context: EmitterContext, template: Dict[str, Any]) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for name in template["parameters"]:
            if name == "environment":
                values[name] = {"value": context.config.environment.value}
            else:
                values[name] = {"value": PARAMETER_EXAMPLES.get(name, "")}
        return {
            "$schema": PARAMETERS_SCHEMA,
            "contentVersion": CONTENT_VERSION,
            "parameters": values,
        }

    @staticmethod
    def _deployment_script(
        context: EmitterContext, template_file: str, parameters_file: str
    ) -> str:
        """Generate a deployment script for the ARM template."""
        project = sanitize(context.config.project_name, COMPOSE_RULES)
        lines = [
            "#!/bin/bash",
            "# Azure ARM Deployment Script",
            f"# Generated by archforge for {context.architecture.name}",
            "",
            "set -e  # Exit on any error",
            "",
            "# Check if Azure CLI is installed",
            "if ! command -v az &> /dev/null; then",
            "    echo 'Azure CLI is not installed. Please install it first.'",
            "    echo 'Visit: https://docs.microsoft.com/en-us/cli/azure/install-azure-cli'",
            "    exit 1",
            "fi",
            "",
            "# Check if user is logged in",
            "if ! az account show &> /dev/null; then",
            "    echo 'Please log in to Azure CLI first:'",
            "    echo 'az login'",
            "    exit 1",
            "fi",
            "",
            "# Variables",
            f"RESOURCE_GROUP={shlex.quote(f'{project}-rg')}",
            f"LOCATION={shlex.quote(context.config.region)}",
            f"DEPLOYMENT_NAME={shlex.quote(f'{project}-{context.config.environment.value}')}",
            "",
            'echo "Resource Group: $RESOURCE_GROUP"',
            'echo "Location: $LOCATION"',
            "",
            "# Create resource group if it doesn't exist",
            'az group create --name "$RESOURCE_GROUP" --location "$LOCATION"',
            "",
            "# Deploy the template",
            "az deployment group create \\",
            '    --resource-group "$RESOURCE_GROUP" \\',
            '    --name "$DEPLOYMENT_NAME" \\',
            f"    --template-file {shlex.quote(template_file)} \\",
            f"    --parameters @{shlex.quote(parameters_file)}",
            "",
            "echo 'Deployment completed.'",
        ]
        return "\n".join(lines) + "\n"


register_emitter(IaCFormat.ARM.value, ArmEmitter)
