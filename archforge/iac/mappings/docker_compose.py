"""Docker Compose service generators.

Like Kubernetes manifests, Compose services do not depend on the cloud
provider and are registered for all providers. Stateful services declare
their named volume and the secrets they read from ``.env`` as auxiliary
fragments. Container ports to publish are passed as ``publish`` metadata;
the emitter assigns host ports once every service is known.
"""

from ...models import ALL_PROVIDERS, IaCFormat, ServiceType
from ..registry import ROLE_VARIABLE, ROLE_VOLUME, Fragment, MappingTable, resource

DOCKER_COMPOSE = MappingTable(IaCFormat.DOCKER_COMPOSE)

NETWORK = "app-network"


def volume(name: str) -> Fragment:
    return Fragment(kind="volume", name=name, body={"driver": "local"}, role=ROLE_VOLUME)


def env_variable(name: str, example: str, section: str) -> Fragment:
    """A variable expected in ``.env``; ``example`` goes to ``.env.example``."""
    return Fragment(
        kind="env",
        name=name,
        body={},
        role=ROLE_VARIABLE,
        meta={"example": example, "section": section},
    )


def service(name, body, **meta):
    body = {**body, "restart": "unless-stopped", "networks": [NETWORK]}
    return resource("service", name, body, **meta)


@DOCKER_COMPOSE.register(ServiceType.COMPUTE, *ALL_PROVIDERS)
def app_service(component, config, name):
    return [
        service(
            name,
            {
                "build": {"context": f"./{name}", "dockerfile": "Dockerfile"},
                # Replicated: Docker picks the host ports
                "ports": ["8080"],
                "environment": [
                    "NODE_ENV=production",
                    f"ENVIRONMENT=${{ENVIRONMENT:-{config.environment.value}}}",
                ],
                "depends_on": [],
                "healthcheck": {
                    "test": ["CMD", "curl", "-f", "http://localhost:8080/health"],
                    "interval": "30s",
                    "timeout": "10s",
                    "retries": 3,
                    "start_period": "40s",
                },
                "deploy": {
                    "replicas": 2,
                    "resources": {
                        "limits": {"cpus": "0.5", "memory": "512M"},
                        "reservations": {"cpus": "0.1", "memory": "128M"},
                    },
                },
            },
            buildable=True,
        )
    ]


@DOCKER_COMPOSE.register(ServiceType.DATABASE, *ALL_PROVIDERS)
def postgres_service(component, config, name):
    data = f"{name}-data"
    return [
        service(
            name,
            {
                "image": "postgres:14-alpine",
                "environment": [
                    "POSTGRES_USER=admin",
                    "POSTGRES_PASSWORD=${DB_PASSWORD:-changeme}",
                    f"POSTGRES_DB={name.replace('-', '_')}",
                ],
                "volumes": [f"{data}:/var/lib/postgresql/data"],
                "healthcheck": {
                    "test": ["CMD-SHELL", "pg_isready -U admin"],
                    "interval": "10s",
                    "timeout": "5s",
                    "retries": 5,
                },
            },
            publish=(5432,),
        ),
        volume(data),
        env_variable("DB_PASSWORD", "CHANGE_ME_SECURE_PASSWORD", "Database"),
    ]


@DOCKER_COMPOSE.register(ServiceType.CACHE, *ALL_PROVIDERS)
def redis_service(component, config, name):
    data = f"{name}-data"
    return [
        service(
            name,
            {
                "image": "redis:7-alpine",
                "command": "redis-server --appendonly yes",
                "volumes": [f"{data}:/data"],
                "healthcheck": {
                    "test": ["CMD", "redis-cli", "ping"],
                    "interval": "10s",
                    "timeout": "5s",
                    "retries": 5,
                },
            },
            publish=(6379,),
        ),
        volume(data),
    ]


@DOCKER_COMPOSE.register(ServiceType.QUEUE, *ALL_PROVIDERS)
def rabbitmq_service(component, config, name):
    data = f"{name}-data"
    return [
        service(
            name,
            {
                "image": "rabbitmq:3-management-alpine",
                "environment": [
                    "RABBITMQ_DEFAULT_USER=admin",
                    "RABBITMQ_DEFAULT_PASS=${RABBITMQ_PASSWORD:-changeme}",
                ],
                "volumes": [f"{data}:/var/lib/rabbitmq"],
                "healthcheck": {
                    "test": ["CMD", "rabbitmq-diagnostics", "check_running"],
                    "interval": "30s",
                    "timeout": "10s",
                    "retries": 5,
                },
            },
            publish=(5672, 15672),
        ),
        volume(data),
        env_variable("RABBITMQ_PASSWORD", "CHANGE_ME_SECURE_PASSWORD", "Queue (RabbitMQ)"),
    ]


@DOCKER_COMPOSE.register(ServiceType.STORAGE, *ALL_PROVIDERS)
def minio_service(component, config, name):
    data = f"{name}-data"
    return [
        service(
            name,
            {
                "image": "minio/minio:latest",
                "command": 'server /data --console-address ":9001"',
                "environment": [
                    "MINIO_ROOT_USER=admin",
                    "MINIO_ROOT_PASSWORD=${MINIO_PASSWORD:-changeme123}",
                ],
                "volumes": [f"{data}:/data"],
                "healthcheck": {
                    "test": ["CMD", "curl", "-f", "http://localhost:9000/minio/health/live"],
                    "interval": "30s",
                    "timeout": "10s",
                    "retries": 3,
                },
            },
            publish=(9000, 9001),
        ),
        volume(data),
        env_variable("MINIO_PASSWORD", "CHANGE_ME_SECURE_PASSWORD_123", "Storage (MinIO)"),
    ]


@DOCKER_COMPOSE.register(ServiceType.CDN, *ALL_PROVIDERS)
@DOCKER_COMPOSE.register(ServiceType.NETWORKING, *ALL_PROVIDERS)
def nginx_gateway(component, config, name):
    return [
        service(
            name,
            {
                "image": "nginx:alpine",
                "volumes": [
                    "./nginx/nginx.conf:/etc/nginx/nginx.conf:ro",
                    "./nginx/conf.d:/etc/nginx/conf.d:ro",
                ],
            },
            publish=(80, 443),
        )
    ]
