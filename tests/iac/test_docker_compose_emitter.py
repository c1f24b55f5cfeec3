"""Tests for the Docker Compose emitter."""

import pytest
import yaml


@pytest.fixture
def compose_config(build_config):
    return build_config("docker-compose", "aws")


def _files(generator, architecture, config):
    return {f.filename: f for f in generator.generate(architecture, config)}


def _compose(files):
    return yaml.safe_load(files["docker-compose.yml"].content)


class TestComposeFile:
    """Services, volumes and networks for a three-tier stack."""

    def test_file_set(self, generator, three_tier_architecture, compose_config):
        files = generator.generate(three_tier_architecture, compose_config)
        assert [(f.filename, f.language) for f in files] == [
            ("docker-compose.yml", "yaml"),
            (".env.example", "bash"),
            ("docker-compose.override.yml", "yaml"),
            ("Dockerfile", "dockerfile"),
        ]

    def test_services(self, generator, three_tier_architecture, compose_config):
        compose = _compose(_files(generator, three_tier_architecture, compose_config))
        assert list(compose["services"]) == ["web-server", "main-db", "session-cache"]
        assert "version" not in compose
        assert compose["networks"] == {"app-network": {"driver": "bridge"}}

    def test_app_depends_on_backing_services(self, generator, three_tier_architecture, compose_config):
        services = _compose(_files(generator, three_tier_architecture, compose_config))["services"]
        assert services["web-server"]["depends_on"] == ["main-db", "session-cache"]
        assert "depends_on" not in services["main-db"]

    def test_one_volume_per_stateful_service(self, generator, three_tier_architecture, compose_config):
        compose = _compose(_files(generator, three_tier_architecture, compose_config))
        assert compose["volumes"] == {
            "main-db-data": {"driver": "local"},
            "session-cache-data": {"driver": "local"},
        }
        assert compose["services"]["main-db"]["volumes"] == ["main-db-data:/var/lib/postgresql/data"]
        assert compose["services"]["session-cache"]["volumes"] == ["session-cache-data:/data"]
        assert "volumes" not in compose["services"]["web-server"]

    def test_secrets_come_from_env(self, generator, three_tier_architecture, compose_config):
        services = _compose(_files(generator, three_tier_architecture, compose_config))["services"]
        assert "POSTGRES_PASSWORD=${DB_PASSWORD:-changeme}" in services["main-db"]["environment"]

    def test_header(self, generator, three_tier_architecture, compose_config):
        text = _files(generator, three_tier_architecture, compose_config)["docker-compose.yml"].content
        assert text.startswith("# Docker Compose configuration for Web Platform\n")
        assert "#   docker compose up -d" in text


class TestComposeSupportFiles:
    """.env.example, override file and Dockerfile."""

    def test_env_example(self, generator, three_tier_architecture, compose_config):
        env = _files(generator, three_tier_architecture, compose_config)[".env.example"].content
        assert "COMPOSE_PROJECT_NAME=shop-demo\n" in env
        assert "ENVIRONMENT=dev\n" in env
        assert "# Database\nDB_PASSWORD=CHANGE_ME_SECURE_PASSWORD\n" in env
        assert env.rstrip().endswith("LOG_LEVEL=info")

    def test_override_mounts_source(self, generator, three_tier_architecture, compose_config):
        override = yaml.safe_load(
            _files(generator, three_tier_architecture, compose_config)["docker-compose.override.yml"].content
        )
        assert override == {
            "services": {
                "web-server": {
                    "volumes": ["./web-server:/app"],
                    "environment": ["NODE_ENV=development", "DEBUG=*"],
                }
            }
        }

    def test_dockerfile(self, generator, three_tier_architecture, compose_config):
        dockerfile = _files(generator, three_tier_architecture, compose_config)["Dockerfile"].content
        assert "# Dockerfile for Shop Demo" in dockerfile
        assert "FROM node:20-alpine AS builder" in dockerfile
        assert "EXPOSE 8080" in dockerfile

    def test_no_dockerfile_without_compute(self, generator, build_component, build_architecture, compose_config):
        architecture = build_architecture(build_component("Main DB", "database"))
        files = _files(generator, architecture, compose_config)
        assert "Dockerfile" not in files
        assert yaml.safe_load(files["docker-compose.override.yml"].content) == {"services": {}}


class TestComposeFullStack:
    def test_every_service_type_maps(self, generator, full_architecture, compose_config):
        result = generator.generate_with_report(full_architecture, compose_config)
        files = {f.filename: f for f in result.files}
        compose = _compose(files)
        assert result.report.is_complete
        assert len(compose["services"]) == 7
        assert compose["services"]["edge-network"]["image"] == "nginx:alpine"
        assert compose["services"]["static-cdn"]["image"] == "nginx:alpine"
        assert set(compose["volumes"]) == {
            "main-db-data",
            "session-cache-data",
            "assets-data",
            "jobs-data",
        }
        env = files[".env.example"].content
        assert "RABBITMQ_PASSWORD=CHANGE_ME_SECURE_PASSWORD" in env
        assert "MINIO_PASSWORD=CHANGE_ME_SECURE_PASSWORD_123" in env

    def test_multiple_apps_do_not_depend_on_each_other(
        self, generator, build_component, build_architecture, compose_config
    ):
        architecture = build_architecture(
            build_component("API", "compute"),
            build_component("Worker", "compute"),
            build_component("Jobs", "queue"),
        )
        services = _compose(_files(generator, architecture, compose_config))["services"]
        assert services["api"]["depends_on"] == ["jobs"]
        assert services["worker"]["depends_on"] == ["jobs"]

    def test_host_ports_do_not_clash(self, generator, build_component, build_architecture, compose_config):
        architecture = build_architecture(
            build_component("Orders DB", "database"),
            build_component("Users DB", "database"),
            build_component("Edge", "networking"),
            build_component("Static", "cdn"),
        )
        services = _compose(_files(generator, architecture, compose_config))["services"]
        assert services["orders-db"]["ports"] == ["5432:5432"]
        assert services["users-db"]["ports"] == ["5433:5432"]
        assert services["edge"]["ports"] == ["80:80", "443:443"]
        assert services["static"]["ports"] == ["81:80", "444:443"]

    def test_replicated_app_publishes_container_port_only(
        self, generator, build_component, build_architecture, compose_config
    ):
        architecture = build_architecture(
            build_component("API", "compute"),
            build_component("Worker", "compute"),
        )
        services = _compose(_files(generator, architecture, compose_config))["services"]
        assert services["api"]["deploy"]["replicas"] == 2
        assert services["api"]["ports"] == ["8080"]
        assert services["worker"]["ports"] == ["8080"]

    def test_lone_app_has_no_depends_on(self, generator, build_component, build_architecture, compose_config):
        architecture = build_architecture(build_component("API", "compute"))
        services = _compose(_files(generator, architecture, compose_config))["services"]
        assert "depends_on" not in services["api"]

    def test_unknown_service_is_omitted(self, generator, unknown_service_architecture, compose_config):
        result = generator.generate_with_report(unknown_service_architecture, compose_config)
        text = result.files[0].content
        assert "# Omitted components (no Docker Compose mapping):" in text
        assert list(yaml.safe_load(text)["services"]) == ["web-server"]
        assert result.report.fallback_policy == "omit"
