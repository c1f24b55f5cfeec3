"""Tests for the archforge command line interface."""

import json
import logging

import pytest
import yaml
from click.testing import CliRunner

from archforge.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging_handlers():
    """configure_logging binds handlers to the runner's captured stderr."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = before
    root.setLevel(level)


@pytest.fixture
def architecture_file(tmp_path, build_component):
    path = tmp_path / "architecture.json"
    path.write_text(
        json.dumps(
            {
                "name": "Web Platform",
                "variant": "balanced",
                "components": [
                    build_component("Web Server", "compute"),
                    build_component("Main DB", "database"),
                ],
            }
        )
    )
    return path


@pytest.fixture
def result_file(tmp_path, build_component):
    path = tmp_path / "result.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "architectures": [
                    {"name": "Lean", "variant": "cost-optimized", "components": [build_component("App", "compute")]},
                    {
                        "name": "Search",
                        "variant": "performance-optimized",
                        "components": [
                            build_component("App", "compute"),
                            {"name": "Search Cluster", "serviceType": "search", "providers": {}},
                        ],
                    },
                ]
            }
        )
    )
    return path


class TestFormatsCommand:
    def test_json(self, runner):
        result = runner.invoke(cli, ["formats", "--json"])
        assert result.exit_code == 0
        formats = json.loads(result.output)
        assert [f["id"] for f in formats] == [
            "terraform",
            "cloudformation",
            "arm",
            "kubernetes",
            "docker-compose",
        ]
        assert formats[2]["providers"] == ["azure"]

    def test_json_lists_mapped_service_types(self, runner):
        result = runner.invoke(cli, ["formats", "--json"])
        formats = {f["id"]: f for f in json.loads(result.output)}
        assert list(formats["arm"]["service_types"]) == ["azure"]
        assert "cdn" in formats["terraform"]["service_types"]["oci"]
        assert formats["kubernetes"]["service_types"]["gcp"] == [
            "cache",
            "compute",
            "database",
            "networking",
            "queue",
        ]

    def test_table(self, runner):
        result = runner.invoke(cli, ["formats"])
        assert result.exit_code == 0
        assert "Supported IaC Formats" in result.output
        assert "Terraform" in result.output
        assert "docker-compose" in result.output


class TestGenerateCommand:
    """generate: architecture file in, IaC files out."""

    def test_stdout(self, runner, architecture_file):
        result = runner.invoke(
            cli, ["generate", str(architecture_file), "--provider", "aws", "--stdout"]
        )
        assert result.exit_code == 0, result.output
        assert "# ===== main.tf (hcl) =====" in result.output
        assert 'resource "aws_instance" "web_server" {' in result.output
        assert "# ===== terraform.tfvars.example (hcl) =====" in result.output

    def test_writes_files(self, runner, architecture_file, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(
            cli,
            ["generate", str(architecture_file), "--format", "kubernetes", "--output-dir", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert "Wrote 3 file(s)" in result.output
        assert (output / "web-platform-balanced.yaml").exists()
        assert (output / "kustomization.yaml").exists()

    def test_refuses_to_overwrite(self, runner, architecture_file, tmp_path):
        args = ["generate", str(architecture_file), "--output-dir", str(tmp_path / "out")]
        assert runner.invoke(cli, args).exit_code == 0

        second = runner.invoke(cli, args)
        assert second.exit_code == 1
        assert "Refusing to overwrite" in second.output
        assert "Hint: Pass --overwrite" in second.output

        assert runner.invoke(cli, args + ["--overwrite"]).exit_code == 0

    def test_incompatible_pair(self, runner, architecture_file):
        result = runner.invoke(
            cli, ["generate", str(architecture_file), "--format", "arm", "--provider", "aws", "--stdout"]
        )
        assert result.exit_code == 1
        assert "Error: Azure ARM Template is only supported for 'azure'" in result.output
        assert "Hint: Choose one of: azure" in result.output

    def test_single_provider_format_infers_provider(self, runner, architecture_file):
        result = runner.invoke(
            cli,
            ["generate", str(architecture_file), "--format", "arm", "--project-name", "Shop Demo", "--stdout"],
        )
        assert result.exit_code == 0, result.output
        assert "# ===== shop-demo-balanced.arm.json (json) =====" in result.output
        assert "LOCATION=eastus" in result.output

    def test_variant_selection_and_incomplete_warning(self, runner, result_file):
        result = runner.invoke(
            cli,
            [
                "generate",
                str(result_file),
                "--variant",
                "performance-optimized",
                "--format",
                "docker-compose",
                "--stdout",
                "--report",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Warning: output is incomplete, 1 component(s) handled by fallback 'omit'" in result.output
        assert "Search Cluster (search): unmapped" in result.output
        assert "IaC GENERATION REPORT" in result.output

    def test_index_selection(self, runner, result_file):
        result = runner.invoke(
            cli, ["generate", str(result_file), "--index", "0", "--format", "docker-compose", "--stdout"]
        )
        assert result.exit_code == 0, result.output
        assert "Warning: output is incomplete" not in result.output

    def test_variant_and_index_are_exclusive(self, runner, result_file):
        result = runner.invoke(
            cli, ["generate", str(result_file), "--variant", "cost-optimized", "--index", "0"]
        )
        assert result.exit_code == 2
        assert "mutually exclusive" in result.output

    def test_unknown_variant(self, runner, result_file):
        result = runner.invoke(cli, ["generate", str(result_file), "--variant", "balanced", "--stdout"])
        assert result.exit_code == 1
        assert "No architecture with variant 'balanced'" in result.output

    def test_unparseable_file(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        result = runner.invoke(cli, ["generate", str(path), "--stdout"])
        assert result.exit_code == 1
        assert "Error: Cannot parse architecture file" in result.output

    def test_settings_from_environment(self, runner, architecture_file, monkeypatch):
        monkeypatch.setenv("ARCHFORGE_DEFAULT_FORMAT", "docker-compose")
        result = runner.invoke(cli, ["generate", str(architecture_file), "--stdout"])
        assert result.exit_code == 0, result.output
        assert "# ===== docker-compose.yml (yaml) =====" in result.output

    def test_settings_from_file(self, runner, architecture_file, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("default_format: cloudformation\nproject_name: Shop Demo\n")
        result = runner.invoke(
            cli, ["--config", str(settings), "generate", str(architecture_file), "--stdout"]
        )
        assert result.exit_code == 0, result.output
        assert "# ===== shop-demo-balanced.json (json) =====" in result.output

    def test_invalid_settings_file(self, runner, architecture_file, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("default_format: pulumi\n")
        result = runner.invoke(
            cli, ["--config", str(settings), "generate", str(architecture_file), "--stdout"]
        )
        assert result.exit_code == 1
        assert "Error: Configuration validation failed" in result.output


class TestConfigCommands:
    def test_init_and_show(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        init = runner.invoke(cli, ["--config", str(path), "config", "init"])
        assert init.exit_code == 0, init.output
        assert path.exists()

        show = runner.invoke(cli, ["--config", str(path), "config", "show"])
        assert show.exit_code == 0, show.output
        shown = yaml.safe_load(show.output)
        assert shown["default_format"] == "terraform"
        assert shown["output"] == {"directory": "iac-output", "overwrite": False}

    def test_init_refuses_existing_file(self, runner, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_format: arm\n")
        result = runner.invoke(cli, ["--config", str(path), "config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert runner.invoke(cli, ["--config", str(path), "config", "init", "--force"]).exit_code == 0

    def test_show_reflects_environment(self, runner, monkeypatch):
        monkeypatch.setenv("ARCHFORGE_REGIONS__AZURE", "westeurope")
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output)["regions"]["azure"] == "westeurope"
