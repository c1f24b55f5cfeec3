"""CloudFormation emitter for Infrastructure-as-Code generation.

The template is built once as a dict and rendered twice: ``<stem>.json`` is
the deployable source of truth, ``<stem>.yaml`` carries the same template
with a comment header for review. Components without a mapping are listed
under ``Metadata`` because JSON has no comments.
"""

import copy
import logging
from typing import Any, Dict, List, Tuple

from ...models import Environment, GeneratedFile, IaCFormat
from ..context import EmitterContext
from ..registry import Fragment
from ..sanitizer import CLOUDFORMATION_RULES
from ..serializers.documents import to_json, to_yaml
from . import register_emitter
from .base import FallbackPolicy, IaCEmitter, unmapped_summary

logger = logging.getLogger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"

LATEST_AMI_PARAMETER = "/aws/service/ami-amazon-linux-latest/amzn2-ami-hvm-x86_64-gp2"


class CloudFormationEmitter(IaCEmitter):
    """Emitter for AWS CloudFormation templates."""

    FORMAT = IaCFormat.CLOUDFORMATION
    IDENTIFIER_RULES = CLOUDFORMATION_RULES
    FALLBACK_POLICY = FallbackPolicy.METADATA

    def fragment_key(self, fragment: Fragment) -> Tuple[str, ...]:
        # Logical IDs share one namespace regardless of resource type
        return (fragment.name,)

    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        template = self._template(context)
        stem = self.file_stem(context)

        header = self.header_lines(context, "CloudFormation template")
        if context.unmapped:
            header.append("")
            header.append("Components without a CloudFormation mapping (not deployed):")
            header.extend(unmapped_summary(context.unmapped))

        return [
            GeneratedFile(filename=f"{stem}.json", content=to_json(template), language="json"),
            GeneratedFile(
                filename=f"{stem}.yaml",
                content=to_yaml(template, header="\n".join(header)),
                language="yaml",
            ),
        ]

    def _template(self, context: EmitterContext) -> Dict[str, Any]:
        architecture = context.architecture
        metadata: Dict[str, Any] = {
            "GeneratedAt": context.generated_at.isoformat(),
            "Variant": architecture.variant,
        }
        if context.unmapped:
            metadata["UnmappedComponents"] = [
                {
                    "Name": u.name,
                    "ServiceType": u.service_type,
                    "Reason": u.reason,
                    "IntendedService": u.service or "Unknown",
                    "IntendedSku": u.sku or "Unknown",
                }
                for u in context.unmapped
            ]

        resources: Dict[str, Any] = {}
        outputs: Dict[str, Any] = {}
        for mapped in context.mapped:
            for fragment in mapped.resources:
                resources[fragment.name] = copy.deepcopy(fragment.body)
                outputs[f"{fragment.name}Id"] = {
                    "Description": f"{mapped.component.name} {fragment.kind} ID",
                    "Value": {"Ref": fragment.name},
                    "Export": {"Name": {"Fn::Sub": f"${{AWS::StackName}}-{fragment.name}"}},
                }

        logger.debug(
            f"CloudFormation template has {len(resources)} resources "
            f"and {len(outputs)} outputs"
        )

        template: Dict[str, Any] = {
            "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
            "Description": (
                f"{architecture.description or architecture.name} "
                f"- generated by archforge"
            ),
            "Metadata": {"archforge": metadata},
            "Parameters": self._parameters(context),
            "Resources": resources,
        }
        if outputs:
            template["Outputs"] = outputs
        return template

    @staticmethod
    def _parameters(context: EmitterContext) -> Dict[str, Any]:
        return {
            "Environment": {
                "Type": "String",
                "Default": context.config.environment.value,
                "AllowedValues": [e.value for e in Environment],
                "Description": "Environment name",
            },
            "LatestAmiId": {
                "Type": "AWS::SSM::Parameter::Value<AWS::EC2::Image::Id>",
                "Default": LATEST_AMI_PARAMETER,
                "Description": "Latest Amazon Linux 2 AMI ID",
            },
            "DBUsername": {
                "Type": "String",
                "Default": "admin",
                "NoEcho": True,
                "Description": "Database master username",
            },
            "DBPassword": {
                "Type": "String",
                "NoEcho": True,
                "MinLength": 8,
                "Description": "Database master password",
            },
        }


register_emitter(IaCFormat.CLOUDFORMATION.value, CloudFormationEmitter)
