"""JSON, YAML and dotenv serializers for structured IaC documents."""

import json
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import yaml


class IndentedSafeDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key.

    PyYAML's default output puts ``- item`` flush with the parent mapping
    key; Kubernetes and Compose files are conventionally written with the
    sequence indented one level.
    """

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.Node:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


IndentedSafeDumper.add_representer(str, _represent_str)


def comment_lines(text: Optional[str], prefix: str = "#") -> List[str]:
    if not text:
        return []
    return [f"{prefix} {line}".rstrip() for line in text.splitlines()]


def to_json(data: Any) -> str:
    """Serialize to pretty-printed JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def to_yaml(data: Any, header: Optional[str] = None) -> str:
    """Serialize one YAML document, optionally preceded by comment lines."""
    body = yaml.dump(
        data,
        Dumper=IndentedSafeDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=120,
    )
    lines = comment_lines(header)
    return "\n".join(lines + [body.rstrip("\n")]) + "\n"


def to_yaml_documents(
    documents: Sequence[Any], header: Optional[str] = None
) -> str:
    """Serialize a multi-document YAML stream separated by ``---``."""
    body = yaml.dump_all(
        documents,
        Dumper=IndentedSafeDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        explicit_start=True,
        width=120,
    )
    lines = comment_lines(header)
    return "\n".join(lines + [body.rstrip("\n")]) + "\n"


def to_dotenv(
    entries: Iterable[Tuple[str, Any]], header: Optional[str] = None
) -> str:
    """Render ``KEY=value`` lines; a None key renders a section comment."""
    lines = comment_lines(header)
    for key, value in entries:
        if key is None:
            if lines:
                lines.append("")
            lines.extend(comment_lines(str(value)))
            continue
        lines.append(f"{key}={_dotenv_value(value)}")
    return "\n".join(lines) + "\n"


def _dotenv_value(value: Any) -> str:
    text = "" if value is None else str(value)
    if any(c in text for c in " #\"'$"):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def parse_yaml_documents(text: str) -> List[Mapping[str, Any]]:
    """Load every document of a YAML stream (comments ignored)."""
    return [doc for doc in yaml.safe_load_all(text) if doc is not None]
