"""Tests for the Terraform emitter."""

import re

import hcl2
import pytest


def _by_name(files):
    return {f.filename: f.content for f in files}


def _resource_lines(text):
    return [line for line in text.splitlines() if line.startswith('resource "')]


@pytest.fixture
def aws_config(build_config):
    return build_config("terraform", "aws")


class TestTerraformFiles:
    """File set and shared headers."""

    def test_file_set(self, generator, compute_db_architecture, aws_config):
        files = generator.generate(compute_db_architecture, aws_config)
        assert [f.filename for f in files] == [
            "main.tf",
            "variables.tf",
            "outputs.tf",
            "terraform.tfvars.example",
        ]
        assert {f.language for f in files} == {"hcl"}

    def test_header_carries_fixed_timestamp(self, generator, compute_db_architecture, aws_config):
        main = _by_name(generator.generate(compute_db_architecture, aws_config))["main.tf"]
        assert main.startswith("# Terraform configuration for Web Platform\n")
        assert "# Generated by archforge - 2024-01-15T12:00:00+00:00" in main
        assert "# Provider: aws" in main
        assert "# Environment: dev" in main


class TestTerraformAws:
    """Compute plus database on AWS."""

    def test_exactly_one_resource_per_component(self, generator, compute_db_architecture, aws_config):
        main = _by_name(generator.generate(compute_db_architecture, aws_config))["main.tf"]
        assert _resource_lines(main) == [
            'resource "aws_instance" "web_server" {',
            'resource "aws_db_instance" "main_db" {',
        ]

    def test_preamble(self, generator, compute_db_architecture, aws_config):
        main = _by_name(generator.generate(compute_db_architecture, aws_config))["main.tf"]
        assert 'source  = "hashicorp/aws"' in main
        assert 'provider "aws" {' in main
        assert 'region = "us-east-1"' in main
        assert 'Project   = "Shop Demo"' in main

    def test_binding_sku_is_used(self, generator, compute_db_architecture, aws_config):
        main = _by_name(generator.generate(compute_db_architecture, aws_config))["main.tf"]
        assert 'instance_type = "t3.large"' in main
        assert re.search(r'instance_class += "db.t3.large"', main)
        assert re.search(r"password += var.db_password", main)

    def test_db_password_is_sensitive(self, generator, compute_db_architecture, aws_config):
        variables = _by_name(generator.generate(compute_db_architecture, aws_config))["variables.tf"]
        block = variables.split('variable "db_password" {')[1].split("}")[0]
        assert "sensitive   = true" in block
        assert 'variable "environment" {' in variables
        assert 'default     = "dev"' in variables

    def test_tfvars_example(self, generator, compute_db_architecture, aws_config):
        tfvars = _by_name(generator.generate(compute_db_architecture, aws_config))[
            "terraform.tfvars.example"
        ]
        assert "NOT safe for production" in tfvars
        assert 'db_password = "CHANGE_ME_SECURE_PASSWORD"' in tfvars
        assert 'environment = "dev"' in tfvars

    def test_outputs_reference_primary_resources(self, generator, compute_db_architecture, aws_config):
        outputs = _by_name(generator.generate(compute_db_architecture, aws_config))["outputs.tf"]
        assert 'output "web_server_id" {' in outputs
        assert "value       = aws_instance.web_server.id" in outputs
        assert "value       = aws_db_instance.main_db.id" in outputs

    def test_report(self, generator, compute_db_architecture, aws_config):
        report = generator.generate_with_report(compute_db_architecture, aws_config).report
        assert report.is_complete
        assert report.resources_generated == 2
        assert report.components_mapped == 2
        assert report.fallback_policy == "placeholder"


class TestTerraformPlaceholders:
    """Unmapped components become commented placeholders."""

    def test_unknown_service_type(self, generator, unknown_service_architecture, aws_config):
        result = generator.generate_with_report(unknown_service_architecture, aws_config)
        main = _by_name(result.files)["main.tf"]
        assert "# TODO: Search Cluster (search)" in main
        assert "# Service: OpenSearch" in main
        assert "# SKU: t3.small.search" in main
        assert len(_resource_lines(main)) == 1

        assert not result.report.is_complete
        [unmapped] = result.report.unmapped
        assert unmapped.name == "Search Cluster"
        assert unmapped.reason == "unmapped"

    def test_placeholder_in_outputs(self, generator, unknown_service_architecture, aws_config):
        outputs = _by_name(generator.generate(unknown_service_architecture, aws_config))["outputs.tf"]
        assert "# Search Cluster: no output (unmapped)" in outputs

    def test_missing_binding(self, generator, build_component, build_architecture, build_config):
        architecture = build_architecture(
            build_component("Web Server", "compute", providers=["aws"]),
            build_component("Main DB", "database"),
        )
        result = generator.generate_with_report(architecture, build_config("terraform", "gcp"))
        main = _by_name(result.files)["main.tf"]
        assert "# TODO: Web Server (compute)" in main
        assert "# Service: Unknown" in main
        assert "# Reason: no binding for the target provider" in main
        assert [u.reason for u in result.report.unmapped] == ["missing-binding"]
        assert 'resource "google_sql_database_instance" "main_db" {' in main


class TestTerraformParses:
    """Every file stays valid HCL, placeholders and odd names included."""

    @pytest.fixture
    def mixed_architecture(self, build_component, build_architecture):
        return build_architecture(
            build_component("Edge Network", "networking"),
            build_component('Web "Front" ${env}', "compute"),
            build_component("9 Lives DB\nprimary", "database"),
            build_component("Session Cache", "cache"),
            build_component("Assets", "storage"),
            build_component("Jobs %{queue}", "queue"),
            build_component("Static CDN", "cdn"),
            {
                "name": "Search Cluster",
                "serviceType": "search",
                "providers": {"aws": {"service": "OpenSearch", "sku": "t3.small.search"}},
            },
        )

    @pytest.mark.parametrize("provider", ["aws", "azure", "gcp", "oci"])
    def test_all_files_parse(self, generator, mixed_architecture, build_config, provider):
        result = generator.generate_with_report(mixed_architecture, build_config("terraform", provider))
        assert [u.name for u in result.report.unmapped] == ["Search Cluster"]

        parsed = {f.filename: hcl2.loads(f.content) for f in result.files}
        assert "resource" in parsed["main.tf"]
        assert "terraform" in parsed["main.tf"]
        assert "variable" in parsed["variables.tf"]
        assert "output" in parsed["outputs.tf"]
        assert "environment" in parsed["terraform.tfvars.example"]

    def test_placeholder_only_document_parses(self, generator, build_architecture, build_config):
        architecture = build_architecture(
            {"name": "Search Cluster", "serviceType": "search", "providers": {}}
        )
        for generated in generator.generate(architecture, build_config("terraform", "aws")):
            assert isinstance(hcl2.loads(generated.content), dict)


class TestTerraformProviders:
    """Provider preambles and provider-specific variables."""

    def test_azure_resource_group(self, generator, compute_db_architecture, build_config):
        files = _by_name(
            generator.generate(compute_db_architecture, build_config("terraform", "azure", region="eastus"))
        )
        assert 'resource "azurerm_resource_group" "main" {' in files["main.tf"]
        assert "features {}" in files["main.tf"]
        assert 'variable "resource_group_name" {' in files["variables.tf"]
        assert 'resource_group_name = "shop-demo-rg"' in files["terraform.tfvars.example"]
        assert 'variable "admin_password" {' in files["variables.tf"]

    def test_gcp_project_variable(self, generator, compute_db_architecture, build_config):
        files = _by_name(
            generator.generate(compute_db_architecture, build_config("terraform", "gcp", region="us-central1"))
        )
        assert "project = var.project_id" in files["main.tf"]
        assert 'project_id  = "your-gcp-project-id"' in files["terraform.tfvars.example"]

    def test_oci_shared_declarations(self, generator, build_component, build_architecture, build_config):
        architecture = build_architecture(
            build_component("API", "compute"),
            build_component("Worker", "compute"),
        )
        files = _by_name(
            generator.generate(architecture, build_config("terraform", "oci", region="us-ashburn-1"))
        )
        main = files["main.tf"]
        assert main.count('data "oci_identity_availability_domain" "ad" {') == 1
        for name in ("tenancy_ocid", "user_ocid", "fingerprint", "private_key_path", "compartment_id"):
            assert f'variable "{name}" {{' in files["variables.tf"]
        assert files["variables.tf"].count('variable "subnet_id" {') == 1

    @pytest.mark.parametrize("provider", ["aws", "azure", "gcp", "oci"])
    def test_full_architecture_is_complete(self, generator, full_architecture, build_config, provider):
        result = generator.generate_with_report(full_architecture, build_config("terraform", provider))
        assert result.report.is_complete
        main = _by_name(result.files)["main.tf"]
        declared = re.findall(r'^resource "([^"]+)" "([^"]+)"', main, re.MULTILINE)
        assert len(declared) == len(set(declared))
