"""Terraform emitter for Infrastructure-as-Code generation.

Produces ``main.tf`` (provider preamble, data sources and one section per
component), ``variables.tf``, ``outputs.tf`` and
``terraform.tfvars.example``. Components without a mapping, or without a
binding for the target provider, become commented placeholders so the
configuration stays syntactically complete.
"""

import logging
from typing import Any, Dict, List

from ...exceptions import UnsupportedCombinationError
from ...models import GeneratedFile, IaCFormat
from ..context import EmitterContext, MappedComponent
from ..mappings.terraform import PREAMBLES
from ..mappings.terraform.common import variable
from ..registry import ROLE_DATA, ROLE_VARIABLE, Fragment
from ..report import REASON_MISSING_BINDING, UnmappedComponent
from ..sanitizer import TERRAFORM_RULES
from ..serializers import hcl
from ..serializers.hcl import Blank, Block, Comment, ref
from . import register_emitter
from .base import FallbackPolicy, IaCEmitter

logger = logging.getLogger(__name__)

LANGUAGE = "hcl"

PLACEHOLDER_SECRET = "CHANGE_ME_SECURE_PASSWORD"


class TerraformEmitter(IaCEmitter):
    """Emitter for Terraform HCL configurations on any supported cloud."""

    FORMAT = IaCFormat.TERRAFORM
    IDENTIFIER_RULES = TERRAFORM_RULES
    FALLBACK_POLICY = FallbackPolicy.PLACEHOLDER
    REQUIRES_PROVIDER_BINDING = True

    def _prepare(self, context: EmitterContext) -> None:
        provider = context.config.provider
        if provider not in PREAMBLES:
            raise UnsupportedCombinationError(
                self.FORMAT.value,
                provider.value,
                [p.value for p in PREAMBLES],
                display_name="Terraform",
            )
        for kind, name in PREAMBLES[provider](context.config).resources:
            context.declare(kind, name)

    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        variables = self._collect_variables(context)
        logger.debug(
            f"Declaring {len(variables)} variables for {context.config.provider.value}: "
            f"{[v.name for v in variables]}"
        )
        return [
            GeneratedFile(filename="main.tf", content=self._main(context), language=LANGUAGE),
            GeneratedFile(
                filename="variables.tf",
                content=self._variables(context, variables),
                language=LANGUAGE,
            ),
            GeneratedFile(filename="outputs.tf", content=self._outputs(context), language=LANGUAGE),
            GeneratedFile(
                filename="terraform.tfvars.example",
                content=self._tfvars_example(context, variables),
                language=LANGUAGE,
            ),
        ]

    def _main(self, context: EmitterContext) -> str:
        preamble = PREAMBLES[context.config.provider](context.config)
        items: List[Any] = [
            Comment("\n".join(self.header_lines(context, "Terraform configuration"))),
            Blank(),
        ]
        items.extend(preamble.blocks)

        data_sources = context.auxiliary_of(ROLE_DATA)
        if data_sources:
            items.append(Blank())
            items.append(Comment("Data sources"))
            items.extend(Block("data", (f.kind, f.name), f.body) for f in data_sources)

        for entry in context.entries:
            items.append(Blank())
            if isinstance(entry, MappedComponent):
                items.append(
                    Comment(f"{entry.component.name} ({entry.service_type})")
                )
                items.extend(
                    Block("resource", (f.kind, f.name), f.body) for f in entry.resources
                )
            else:
                items.append(Comment(self._placeholder(entry)))
        return hcl.render(items)

    @staticmethod
    def _placeholder(unmapped: UnmappedComponent) -> str:
        reason = (
            "no binding for the target provider"
            if unmapped.reason == REASON_MISSING_BINDING
            else "no Terraform mapping for this service type and provider"
        )
        return "\n".join(
            [
                f"TODO: {unmapped.name} ({unmapped.service_type})",
                f"Service: {unmapped.service or 'Unknown'}",
                f"SKU: {unmapped.sku or 'Unknown'}",
                f"Reason: {reason}",
            ]
        )

    def _collect_variables(self, context: EmitterContext) -> List[Fragment]:
        """Declared variables in order: common, preamble, then fragment-referenced."""
        config = context.config
        declared: Dict[str, Fragment] = {}
        common = [
            variable(
                "environment",
                "Environment name",
                default=config.environment.value,
                example=config.environment.value,
            ),
            variable("db_password", "Database password", sensitive=True, example=PLACEHOLDER_SECRET),
        ]
        preamble = PREAMBLES[config.provider](config)
        for fragment in [*common, *preamble.variables, *context.auxiliary_of(ROLE_VARIABLE)]:
            declared.setdefault(fragment.name, fragment)
        return list(declared.values())

    def _variables(self, context: EmitterContext, variables: List[Fragment]) -> str:
        items: List[Any] = [
            Comment(f"Variables for {context.architecture.name}\nGenerated by archforge"),
            Blank(),
        ]
        items.extend(Block("variable", (v.name,), v.body) for v in variables)
        return hcl.render(items)

    def _outputs(self, context: EmitterContext) -> str:
        items: List[Any] = [
            Comment(f"Outputs for {context.architecture.name}\nGenerated by archforge"),
            Blank(),
        ]
        for entry in context.entries:
            if isinstance(entry, MappedComponent):
                primary = entry.primary
                if primary is None:
                    continue
                items.append(
                    Block(
                        "output",
                        (f"{entry.identifier}_id",),
                        {
                            "description": f"{entry.component.name} resource ID",
                            "value": ref(primary.kind, primary.name, "id"),
                        },
                    )
                )
            else:
                items.append(Comment(f"{entry.name}: no output ({entry.reason})"))
        return hcl.render(items)

    def _tfvars_example(self, context: EmitterContext, variables: List[Fragment]) -> str:
        values = {}
        for fragment in variables:
            if "default" in fragment.body and fragment.name != "environment":
                continue
            example = fragment.meta.get("example")
            values[fragment.name] = example if example is not None else ""
        header = (
            f"Example variable values for {context.architecture.name}\n"
            "Copy this to terraform.tfvars and fill in your values.\n"
            "Placeholder secrets below are NOT safe for production use."
        )
        return hcl.render_attributes(values, header)


register_emitter(IaCFormat.TERRAFORM.value, TerraformEmitter)
