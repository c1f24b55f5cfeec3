"""Kubernetes emitter for Infrastructure-as-Code generation.

Writes the manifest set twice, as a multi-document YAML stream and as a
JSON list, plus a ``kustomization.yaml`` pointing at the YAML stream. The
namespace manifest always comes first; each component's manifests follow
in component order with the workload ahead of its Service.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from ...models import GeneratedFile, IaCFormat, ServiceType
from ..context import EmitterContext
from ..mappings.kubernetes import DEFAULT_INGRESS_BACKEND, MANAGED_BY, namespace_name
from ..sanitizer import KUBERNETES_RULES, sanitize
from ..serializers.documents import to_json, to_yaml, to_yaml_documents
from . import register_emitter
from .base import FallbackPolicy, IaCEmitter, unmapped_summary

logger = logging.getLogger(__name__)


class KubernetesEmitter(IaCEmitter):
    """Emitter for plain Kubernetes manifests with a Kustomize entry point."""

    FORMAT = IaCFormat.KUBERNETES
    IDENTIFIER_RULES = KUBERNETES_RULES
    FALLBACK_POLICY = FallbackPolicy.OMIT

    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        manifests = self.build_manifests(context)
        stem = self.file_stem(context)
        yaml_file = f"{stem}.yaml"

        header = self.header_lines(context, "Kubernetes manifests")
        header.append(f"Namespace: {namespace_name(context.config)}")
        if context.unmapped:
            header.append("")
            header.append("Omitted components (no Kubernetes mapping):")
            header.extend(unmapped_summary(context.unmapped))
        header.append("")
        header.append(f"Apply with: kubectl apply -f {yaml_file}")

        return [
            GeneratedFile(
                filename=yaml_file,
                content=to_yaml_documents(manifests, header="\n".join(header)),
                language="yaml",
            ),
            GeneratedFile(filename=f"{stem}.json", content=to_json(manifests), language="json"),
            GeneratedFile(
                filename="kustomization.yaml",
                content=to_yaml(self._kustomization(context, yaml_file)),
                language="yaml",
            ),
        ]

    def build_manifests(self, context: EmitterContext) -> List[Dict[str, Any]]:
        """Namespace manifest followed by every mapped component's manifests."""
        backend = self._ingress_backend(context)
        manifests = [self._namespace(context)]
        for mapped in context.mapped:
            for fragment in mapped.resources:
                body = copy.deepcopy(fragment.body)
                if fragment.meta.get("routes_traffic"):
                    self._route_to(body, backend)
                manifests.append(body)
        logger.debug(f"Built {len(manifests)} Kubernetes manifests")
        return manifests

    @staticmethod
    def _namespace(context: EmitterContext) -> Dict[str, Any]:
        name = namespace_name(context.config)
        return {
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": {
                "name": name,
                "labels": {
                    "name": name,
                    "environment": context.config.environment.value,
                    "managed-by": MANAGED_BY,
                },
            },
        }

    @staticmethod
    def _ingress_backend(context: EmitterContext) -> Optional[str]:
        """Service name of the first compute component, if any."""
        for mapped in context.mapped_of(ServiceType.COMPUTE.value):
            for fragment in mapped.resources:
                if fragment.kind == "Service":
                    return fragment.name
        return None

    @staticmethod
    def _route_to(ingress: Dict[str, Any], backend: Optional[str]) -> None:
        if backend is None:
            logger.warning(
                f"Ingress '{ingress['metadata']['name']}' has no compute service to route "
                f"to, keeping backend '{DEFAULT_INGRESS_BACKEND}'"
            )
            return
        for rule in ingress["spec"].get("rules", []):
            for path in rule.get("http", {}).get("paths", []):
                path["backend"]["service"]["name"] = backend

    @staticmethod
    def _kustomization(context: EmitterContext, yaml_file: str) -> Dict[str, Any]:
        return {
            "apiVersion": "kustomize.config.k8s.io/v1beta1",
            "kind": "Kustomization",
            "namespace": namespace_name(context.config),
            "resources": [yaml_file],
            "commonLabels": {
                "app.kubernetes.io/name": sanitize(context.config.project_name, KUBERNETES_RULES),
                "app.kubernetes.io/environment": context.config.environment.value,
                "app.kubernetes.io/managed-by": MANAGED_BY,
            },
        }


register_emitter(IaCFormat.KUBERNETES.value, KubernetesEmitter)
