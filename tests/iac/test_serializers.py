"""Tests for the HCL and document serializers."""

import json

import pytest
import yaml

from archforge.iac.serializers import hcl
from archforge.iac.serializers.documents import (
    parse_yaml_documents,
    to_dotenv,
    to_json,
    to_yaml,
    to_yaml_documents,
)
from archforge.iac.serializers.hcl import Blank, Block, Comment, block, ref, var


class TestHclValues:
    """Literal rendering and escaping."""

    def test_quote_escapes_quotes_and_interpolation(self):
        assert hcl.quote('say "hi" ${x} %{y}') == '"say \\"hi\\" $${x} %%{y}"'

    def test_quote_escapes_newlines_and_backslashes(self):
        assert hcl.quote("a\\b\nc") == '"a\\\\b\\nc"'

    def test_expressions_are_not_quoted(self):
        assert ref("aws_vpc", "main", "id") == "aws_vpc.main.id"
        assert var("environment") == "var.environment"
        rendered = hcl.render_block(
            Block("output", ("vpc_id",), {"value": ref("aws_vpc", "main", "id")})
        )
        assert "value = aws_vpc.main.id" in rendered

    def test_scalars(self):
        rendered = hcl.render_block(
            Block(
                "resource",
                ("aws_db_instance", "db"),
                {"allocated_storage": 20, "skip_final_snapshot": True, "methods": ["GET", "HEAD"]},
            )
        )
        assert "allocated_storage   = 20" in rendered
        assert "skip_final_snapshot = true" in rendered
        assert 'methods             = ["GET", "HEAD"]' in rendered

    def test_unsupported_value_raises(self):
        with pytest.raises(TypeError):
            hcl.render_block(Block("resource", ("x", "y"), {"bad": object()}))

    def test_non_identifier_keys_are_quoted(self):
        rendered = hcl.render_block(
            Block("resource", ("x", "y"), {"tags": {"kubernetes.io/name": "web"}})
        )
        assert '"kubernetes.io/name" = "web"' in rendered


class TestHclLayout:
    """Indentation, alignment and block nesting."""

    def test_attributes_are_aligned(self):
        rendered = hcl.render_block(
            Block("resource", ("aws_instance", "web"), {"ami": "ami-1", "instance_type": "t3.large"})
        )
        assert rendered == (
            'resource "aws_instance" "web" {\n'
            '  ami           = "ami-1"\n'
            '  instance_type = "t3.large"\n'
            "}"
        )

    def test_map_attribute(self):
        rendered = hcl.render_block(
            Block("resource", ("x", "y"), {"tags": {"Name": "web", "Environment": var("environment")}})
        )
        assert rendered == (
            'resource "x" "y" {\n'
            "  tags = {\n"
            '    Name        = "web"\n'
            "    Environment = var.environment\n"
            "  }\n"
            "}"
        )

    def test_nested_blocks_follow_attributes(self):
        rendered = hcl.render_block(
            Block(
                "resource",
                ("aws_s3_bucket_versioning", "assets"),
                {"bucket": ref("aws_s3_bucket", "assets", "id"), "versioning_configuration": block(status="Enabled")},
            )
        )
        assert rendered.splitlines() == [
            'resource "aws_s3_bucket_versioning" "assets" {',
            "  bucket = aws_s3_bucket.assets.id",
            "",
            "  versioning_configuration {",
            '    status = "Enabled"',
            "  }",
            "}",
        ]

    def test_empty_nested_block(self):
        rendered = hcl.render_block(Block("provider", ("azurerm",), {"features": Block()}))
        assert rendered == 'provider "azurerm" {\n  features {}\n}'

    def test_none_attributes_are_omitted(self):
        rendered = hcl.render_block(Block("variable", ("x",), {"default": None, "type": hcl.Expr("string")}))
        assert "default" not in rendered

    def test_render_document(self):
        text = hcl.render([Comment("Header\nSecond line"), Blank(), Block("a"), Block("b"), Comment("tail")])
        assert text == "# Header\n# Second line\n\na {}\n\nb {}\n\n# tail\n"

    def test_render_attributes(self):
        text = hcl.render_attributes({"db_password": "secret", "project_id": "demo"}, "Example values")
        assert text == (
            "# Example values\n"
            "\n"
            'db_password = "secret"\n'
            'project_id  = "demo"\n'
        )


class TestDocuments:
    """JSON, YAML and dotenv output."""

    def test_json_is_pretty_and_keeps_unicode(self):
        assert to_json({"name": "Données"}) == '{\n  "name": "Données"\n}\n'

    def test_yaml_header_and_key_order(self):
        text = to_yaml({"b": 1, "a": 2}, header="Title\nSubtitle")
        assert text == "# Title\n# Subtitle\nb: 1\na: 2\n"

    def test_yaml_sequences_are_indented(self):
        assert to_yaml({"items": ["a", "b"]}) == "items:\n  - a\n  - b\n"

    def test_yaml_multiline_strings_use_block_style(self):
        text = to_yaml({"script": "line one\nline two"})
        assert "script: |" in text
        assert yaml.safe_load(text) == {"script": "line one\nline two"}

    def test_yaml_documents(self):
        text = to_yaml_documents([{"kind": "Namespace"}, {"kind": "Service"}], header="Manifests")
        assert text.startswith("# Manifests\n---\n")
        assert text.count("---") == 2
        assert parse_yaml_documents(text) == [{"kind": "Namespace"}, {"kind": "Service"}]

    def test_dotenv_sections_and_quoting(self):
        text = to_dotenv(
            [
                (None, "Database"),
                ("DB_PASSWORD", "CHANGE_ME"),
                ("GREETING", "hello world"),
                ("EMPTY", None),
                (None, "Application"),
                ("PATTERN", "${HOME}"),
            ],
            header="Env file",
        )
        assert text == (
            "# Env file\n"
            "\n"
            "# Database\n"
            "DB_PASSWORD=CHANGE_ME\n"
            'GREETING="hello world"\n'
            "EMPTY=\n"
            "\n"
            "# Application\n"
            'PATTERN="${HOME}"\n'
        )

    def test_json_round_trips(self):
        data = {"resources": [{"type": "x", "dependsOn": []}]}
        assert json.loads(to_json(data)) == data
