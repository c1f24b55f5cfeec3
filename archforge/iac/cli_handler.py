"""CLI handler helpers for IaC generation commands.

Everything here touches the filesystem (reading architecture documents,
writing generated files), which the generator core never does.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from ..exceptions import ArchForgeError, ArchitectureLoadError
from ..models import Architecture, GeneratedFile

logger = logging.getLogger(__name__)


def validate_output_path(user_path: str, base_dir: Path) -> Path:
    """
    Validate and sanitize output path to prevent path traversal attacks.

    Ensures the requested path is within the allowed base directory.

    Args:
        user_path: Requested path, relative to ``base_dir`` or absolute
        base_dir: Base directory for outputs

    Returns:
        Validated absolute path within base directory

    Raises:
        ValueError: If path attempts to traverse outside base directory

    Example:
        >>> validate_output_path("main.tf", Path("iac-output"))
        PosixPath('/home/user/project/iac-output/main.tf')
        >>> validate_output_path("../../etc/passwd", Path("iac-output"))
        ValueError: Output path must be within iac-output...
    """
    base_path = base_dir.resolve()
    requested_path = (base_path / user_path).resolve()

    try:
        requested_path.relative_to(base_path)
    except ValueError:
        raise ValueError(
            f"Output path must be within {base_dir}. "
            f"Requested path '{user_path}' resolves to '{requested_path}' "
            f"which is outside allowed base directory '{base_path}'"
        ) from None

    return requested_path


def _parse_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ArchitectureLoadError(
            f"Cannot read architecture file: {e}", path=str(path), cause=e
        ) from e

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ArchitectureLoadError(
            f"Cannot parse architecture file: {e}", path=str(path), cause=e
        ) from e


def load_architectures(path: Path) -> List[Architecture]:
    """
    Load every architecture from a JSON or YAML document.

    Accepts a single architecture, a list of architectures, or an upstream
    result object carrying them under ``architectures``.

    Raises:
        ArchitectureLoadError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    data = _parse_document(path)

    if isinstance(data, dict) and "architectures" in data:
        data = data["architectures"]
    items = data if isinstance(data, list) else [data]
    if not items or not all(isinstance(item, dict) for item in items):
        raise ArchitectureLoadError(
            "Expected an architecture object, a list of them, "
            "or an object with an 'architectures' list",
            path=str(path),
        )

    architectures = []
    for position, item in enumerate(items):
        try:
            architectures.append(Architecture.model_validate(item))
        except ValidationError as e:
            raise ArchitectureLoadError(
                f"Architecture #{position} is invalid: {e}", path=str(path), cause=e
            ) from e

    logger.info(f"Loaded {len(architectures)} architecture(s) from {path}")
    return architectures


def select_architecture(
    architectures: Sequence[Architecture],
    variant: Optional[str] = None,
    index: Optional[int] = None,
) -> Architecture:
    """
    Pick one architecture by variant name or position (default: the first).

    Raises:
        ArchitectureLoadError: If nothing matches
    """
    if variant is not None:
        for architecture in architectures:
            if architecture.variant == variant:
                return architecture
        available = ", ".join(a.variant for a in architectures)
        raise ArchitectureLoadError(
            f"No architecture with variant '{variant}' (available: {available})"
        )

    position = index or 0
    if not 0 <= position < len(architectures):
        raise ArchitectureLoadError(
            f"Architecture index {position} out of range "
            f"(document has {len(architectures)})"
        )
    return architectures[position]


def write_files(
    files: Sequence[GeneratedFile], output_dir: Path, overwrite: bool = False
) -> List[Path]:
    """
    Write generated files below ``output_dir``.

    Raises:
        ArchForgeError: If a file exists and ``overwrite`` is False
        ValueError: If a file name would escape ``output_dir``
    """
    output_dir = Path(output_dir)
    targets = [validate_output_path(f.filename, output_dir) for f in files]

    if not overwrite:
        existing = [str(t) for t in targets if t.exists()]
        if existing:
            raise ArchForgeError(
                f"Refusing to overwrite existing files: {', '.join(existing)}",
                error_code="OUTPUT_EXISTS",
                recovery_suggestion="Pass --overwrite or choose another --output-dir",
            )

    written = []
    for generated, target in zip(files, targets):
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        logger.debug(f"Wrote {target} ({len(generated.content)} bytes)")
        written.append(target)
    return written
