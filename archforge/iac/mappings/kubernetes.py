"""Kubernetes manifest generators.

Manifests do not depend on the cloud provider, so every generator is
registered for all providers. Storage and CDN have no in-cluster
equivalent and are left unmapped.
"""

import base64

from ...models import ALL_PROVIDERS, GeneratorConfig, IaCFormat, ServiceType
from ..registry import MappingTable, resource
from ..sanitizer import KUBERNETES_RULES, sanitize

KUBERNETES = MappingTable(IaCFormat.KUBERNETES)

MANAGED_BY = "archforge"

DEFAULT_INGRESS_BACKEND = "app-service"

PLACEHOLDER_PASSWORD = "CHANGE_ME_SECURE_PASSWORD"


def namespace_name(config: GeneratorConfig) -> str:
    return f"{sanitize(config.project_name, KUBERNETES_RULES)}-{config.environment.value}"


def manifest(api_version, kind, name, config, labels=None, annotations=None, **fields):
    metadata = {"name": name, "namespace": namespace_name(config)}
    if labels:
        metadata["labels"] = labels
    if annotations:
        metadata["annotations"] = annotations
    return {"apiVersion": api_version, "kind": kind, "metadata": metadata, **fields}


def common_labels(component, config, name):
    return {
        "app": name,
        "component": component.service_type,
        "environment": config.environment.value,
        "managed-by": MANAGED_BY,
    }


def _container_resources(cpu_request, memory_request, cpu_limit, memory_limit):
    return {
        "requests": {"cpu": cpu_request, "memory": memory_request},
        "limits": {"cpu": cpu_limit, "memory": memory_limit},
    }


def _deployment(component, config, name, replicas, container):
    labels = common_labels(component, config, name)
    return resource(
        "Deployment",
        f"{name}-deployment",
        manifest(
            "apps/v1",
            "Deployment",
            f"{name}-deployment",
            config,
            labels,
            spec={
                "replicas": replicas,
                "selector": {"matchLabels": {"app": name}},
                "template": {
                    "metadata": {"labels": {"app": name}},
                    "spec": {"containers": [container]},
                },
            },
        ),
    )


def _service(component, config, name, ports):
    return resource(
        "Service",
        f"{name}-service",
        manifest(
            "v1",
            "Service",
            f"{name}-service",
            config,
            common_labels(component, config, name),
            spec={"selector": {"app": name}, "ports": ports, "type": "ClusterIP"},
        ),
    )


@KUBERNETES.register(ServiceType.COMPUTE, *ALL_PROVIDERS)
def compute_workload(component, config, name):
    container = {
        "name": name,
        "image": f"{name}:latest",
        "ports": [{"containerPort": 8080}],
        "env": [{"name": "ENVIRONMENT", "value": config.environment.value}],
        "resources": _container_resources("100m", "128Mi", "500m", "512Mi"),
        "livenessProbe": {
            "httpGet": {"path": "/health", "port": 8080},
            "initialDelaySeconds": 30,
            "periodSeconds": 10,
        },
        "readinessProbe": {
            "httpGet": {"path": "/ready", "port": 8080},
            "initialDelaySeconds": 5,
            "periodSeconds": 5,
        },
    }
    return [
        _deployment(component, config, name, 2, container),
        _service(
            component,
            config,
            name,
            [{"protocol": "TCP", "port": 80, "targetPort": 8080}],
        ),
        resource(
            "HorizontalPodAutoscaler",
            f"{name}-hpa",
            manifest(
                "autoscaling/v2",
                "HorizontalPodAutoscaler",
                f"{name}-hpa",
                config,
                common_labels(component, config, name),
                spec={
                    "scaleTargetRef": {
                        "apiVersion": "apps/v1",
                        "kind": "Deployment",
                        "name": f"{name}-deployment",
                    },
                    "minReplicas": 2,
                    "maxReplicas": 10,
                    "metrics": [
                        {
                            "type": "Resource",
                            "resource": {
                                "name": "cpu",
                                "target": {"type": "Utilization", "averageUtilization": 70},
                            },
                        }
                    ],
                },
            ),
        ),
    ]


@KUBERNETES.register(ServiceType.DATABASE, *ALL_PROVIDERS)
def database_statefulset(component, config, name):
    labels = common_labels(component, config, name)
    secret = f"{name}-secret"
    claim = f"{name}-pvc"
    encoded = base64.b64encode(PLACEHOLDER_PASSWORD.encode()).decode()
    return [
        resource(
            "PersistentVolumeClaim",
            claim,
            manifest(
                "v1",
                "PersistentVolumeClaim",
                claim,
                config,
                labels,
                spec={
                    "accessModes": ["ReadWriteOnce"],
                    "resources": {"requests": {"storage": "10Gi"}},
                },
            ),
        ),
        resource(
            "StatefulSet",
            f"{name}-statefulset",
            manifest(
                "apps/v1",
                "StatefulSet",
                f"{name}-statefulset",
                config,
                labels,
                spec={
                    "serviceName": f"{name}-service",
                    "replicas": 1,
                    "selector": {"matchLabels": {"app": name}},
                    "template": {
                        "metadata": {"labels": {"app": name}},
                        "spec": {
                            "containers": [
                                {
                                    "name": "postgres",
                                    "image": "postgres:14",
                                    "ports": [{"containerPort": 5432}],
                                    "env": [
                                        {
                                            "name": "POSTGRES_PASSWORD",
                                            "valueFrom": {
                                                "secretKeyRef": {"name": secret, "key": "password"}
                                            },
                                        },
                                        {"name": "POSTGRES_DB", "value": name.replace("-", "_")},
                                        {"name": "PGDATA", "value": "/var/lib/postgresql/data/pgdata"},
                                    ],
                                    "volumeMounts": [
                                        {"name": "data", "mountPath": "/var/lib/postgresql/data"}
                                    ],
                                    "resources": _container_resources("250m", "256Mi", "1", "1Gi"),
                                }
                            ],
                            "volumes": [
                                {"name": "data", "persistentVolumeClaim": {"claimName": claim}}
                            ],
                        },
                    },
                },
            ),
        ),
        _service(
            component,
            config,
            name,
            [{"protocol": "TCP", "port": 5432, "targetPort": 5432}],
        ),
        resource(
            "Secret",
            secret,
            manifest(
                "v1",
                "Secret",
                secret,
                config,
                labels,
                type="Opaque",
                data={"password": encoded},
            ),
        ),
    ]


@KUBERNETES.register(ServiceType.CACHE, *ALL_PROVIDERS)
def cache_deployment(component, config, name):
    container = {
        "name": "redis",
        "image": "redis:7-alpine",
        "ports": [{"containerPort": 6379}],
        "resources": _container_resources("100m", "128Mi", "500m", "512Mi"),
    }
    return [
        _deployment(component, config, name, 1, container),
        _service(
            component,
            config,
            name,
            [{"protocol": "TCP", "port": 6379, "targetPort": 6379}],
        ),
    ]


@KUBERNETES.register(ServiceType.QUEUE, *ALL_PROVIDERS)
def queue_deployment(component, config, name):
    container = {
        "name": "rabbitmq",
        "image": "rabbitmq:3-management-alpine",
        "ports": [
            {"containerPort": 5672, "name": "amqp"},
            {"containerPort": 15672, "name": "management"},
        ],
        "resources": _container_resources("200m", "256Mi", "500m", "512Mi"),
    }
    return [
        _deployment(component, config, name, 1, container),
        _service(
            component,
            config,
            name,
            [
                {"name": "amqp", "protocol": "TCP", "port": 5672, "targetPort": 5672},
                {"name": "management", "protocol": "TCP", "port": 15672, "targetPort": 15672},
            ],
        ),
    ]


@KUBERNETES.register(ServiceType.NETWORKING, *ALL_PROVIDERS)
def networking_ingress(component, config, name):
    labels = common_labels(component, config, name)
    host = f"{sanitize(config.project_name, KUBERNETES_RULES)}.example.com"
    return [
        resource(
            "Ingress",
            f"{name}-ingress",
            manifest(
                "networking.k8s.io/v1",
                "Ingress",
                f"{name}-ingress",
                config,
                labels,
                annotations={"cert-manager.io/cluster-issuer": "letsencrypt-prod"},
                spec={
                    "ingressClassName": "nginx",
                    "tls": [{"hosts": [host], "secretName": f"{name}-tls"}],
                    "rules": [
                        {
                            "host": host,
                            "http": {
                                "paths": [
                                    {
                                        "path": "/",
                                        "pathType": "Prefix",
                                        "backend": {
                                            "service": {
                                                "name": DEFAULT_INGRESS_BACKEND,
                                                "port": {"number": 80},
                                            }
                                        },
                                    }
                                ]
                            },
                        }
                    ],
                },
            ),
            routes_traffic=True,
        ),
        resource(
            "NetworkPolicy",
            f"{name}-network-policy",
            manifest(
                "networking.k8s.io/v1",
                "NetworkPolicy",
                f"{name}-network-policy",
                config,
                labels,
                spec={
                    "podSelector": {},
                    "policyTypes": ["Ingress", "Egress"],
                    "ingress": [
                        {
                            "from": [
                                {
                                    "namespaceSelector": {
                                        "matchLabels": {
                                            "kubernetes.io/metadata.name": namespace_name(config)
                                        }
                                    }
                                }
                            ]
                        }
                    ],
                    "egress": [{"to": [{"namespaceSelector": {}}]}],
                },
            ),
        ),
    ]
