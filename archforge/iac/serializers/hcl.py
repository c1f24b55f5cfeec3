"""Line-oriented serializer for Terraform HCL.

Resources are built as plain trees and rendered here, so indentation,
quoting and attribute alignment live in one place. A body is an ordered
mapping whose values are rendered according to their Python type:

- ``str``: quoted string literal (escaped)
- ``Expr``: raw expression, emitted verbatim (``var.x``, ``aws_vpc.main.id``)
- ``bool``/``int``/``float``: HCL literals
- ``list``/``tuple`` of scalars: list literal
- ``dict``: map attribute (``tags = { ... }``)
- ``Block``: nested block named after the key
- ``list`` of ``Block``: repeated nested blocks
- ``None``: attribute omitted
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Tuple, Union

INDENT = "  "

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


class Expr(str):
    """A raw HCL expression, rendered without quoting."""


def ref(*parts: str) -> Expr:
    """Reference expression, e.g. ``ref("aws_vpc", "main", "id")``."""
    return Expr(".".join(parts))


def var(name: str) -> Expr:
    return Expr(f"var.{name}")


@dataclass(frozen=True)
class Block:
    """An HCL block: ``type "label" ... { body }``."""

    type: str = ""
    labels: Tuple[str, ...] = ()
    body: Mapping[str, Any] = field(default_factory=dict)


def block(**body: Any) -> Block:
    """Nested block body; the enclosing attribute key names the block."""
    return Block(body=body)


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Blank:
    pass


Item = Union[Block, Comment, Blank]


def quote(value: str) -> str:
    """Render a Python string as an HCL string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


def _scalar(value: Any) -> str:
    if isinstance(value, Expr):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return quote(value)
    raise TypeError(f"Cannot render {type(value).__name__} as an HCL value")


def _key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else quote(key)


def _value_lines(value: Any, depth: int) -> List[str]:
    """Render an attribute value; continuation lines are fully indented."""
    if isinstance(value, Mapping):
        if not value:
            return ["{}"]
        pad = INDENT * (depth + 1)
        lines = ["{"]
        lines.extend(pad + line for line in _attribute_run(value, depth + 1))
        lines.append(INDENT * depth + "}")
        return lines
    if isinstance(value, (list, tuple)):
        return ["[" + ", ".join(_scalar(v) for v in value) + "]"]
    return [_scalar(value)]


def _is_block_value(value: Any) -> bool:
    if isinstance(value, Block):
        return True
    return (
        isinstance(value, (list, tuple))
        and bool(value)
        and all(isinstance(v, Block) for v in value)
    )


def _attribute_run(body: Mapping[str, Any], depth: int) -> List[str]:
    """Render attributes with ``=`` aligned across runs of single-line values.

    Returned lines are relative to ``depth``: the first line of each entry
    carries no indentation, continuation lines carry their absolute indent
    stripped of the entry's own ``depth`` prefix.
    """
    rendered: List[Tuple[str, List[str]]] = []
    for key, value in body.items():
        if value is None:
            continue
        rendered.append((_key(key), _value_lines(value, depth)))

    lines: List[str] = []
    run: List[Tuple[str, str]] = []

    def flush() -> None:
        width = max((len(k) for k, _ in run), default=0)
        lines.extend(f"{k.ljust(width)} = {v}" for k, v in run)
        run.clear()

    for key, value_lines in rendered:
        if len(value_lines) == 1:
            run.append((key, value_lines[0]))
            continue
        flush()
        lines.append(f"{key} = {value_lines[0]}")
        prefix = INDENT * depth
        lines.extend(line[len(prefix):] for line in value_lines[1:])
    flush()
    return lines


def _block_lines(name: str, blk: Block, depth: int) -> List[str]:
    pad = INDENT * depth
    header = " ".join([name] + [quote(label) for label in blk.labels])
    attributes = {k: v for k, v in blk.body.items() if not _is_block_value(v)}
    nested = [(k, v) for k, v in blk.body.items() if _is_block_value(v)]

    if not attributes and not nested:
        return [f"{pad}{header} {{}}"]

    lines = [f"{pad}{header} {{"]
    lines.extend(pad + INDENT + line for line in _attribute_run(attributes, depth + 1))
    for key, value in nested:
        if lines[-1] != f"{pad}{header} {{":
            lines.append("")
        children = value if isinstance(value, (list, tuple)) else [value]
        for i, child in enumerate(children):
            if i:
                lines.append("")
            lines.extend(_block_lines(key, child, depth + 1))
    lines.append(f"{pad}}}")
    return lines


def render_block(blk: Block) -> str:
    return "\n".join(_block_lines(blk.type, blk, 0))


def render_comment(text: str) -> List[str]:
    return [f"# {line}".rstrip() for line in text.splitlines() or [""]]


def render(items: Iterable[Item]) -> str:
    """Render a sequence of top-level items into an HCL document.

    Consecutive top-level blocks are separated by a blank line; comments
    attach to the item that follows them.
    """
    lines: List[str] = []
    previous: Any = None
    for item in items:
        if isinstance(item, Blank):
            lines.append("")
        elif isinstance(item, Comment):
            if isinstance(previous, Block):
                lines.append("")
            lines.extend(render_comment(item.text))
        elif isinstance(item, Block):
            if isinstance(previous, Block):
                lines.append("")
            lines.extend(_block_lines(item.type, item, 0))
        else:
            raise TypeError(f"Cannot render {type(item).__name__} as an HCL item")
        previous = item
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines) + "\n"


def render_attributes(attributes: Mapping[str, Any], header: str = "") -> str:
    """Render bare top-level attributes, as in a ``.tfvars`` file."""
    lines = render_comment(header) + [""] if header else []
    lines.extend(_attribute_run(attributes, 0))
    return "\n".join(lines) + "\n"
