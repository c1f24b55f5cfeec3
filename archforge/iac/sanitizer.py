"""Identifier sanitization for generated IaC documents.

Each target format has its own identifier alphabet. A component called
``"Web API (v2)"`` becomes ``web_api_v2`` in Terraform, ``WebAPIv2`` as a
CloudFormation logical ID and ``web-api-v2`` in Kubernetes and Compose.

Sanitizing is total: any string yields a legal identifier, falling back to
the rule set's placeholder name when nothing usable is left.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifierRules:
    """Character set and shape constraints for one identifier namespace.

    Attributes:
        name: Rule set name, used in log messages
        invalid_pattern: Regex matching characters outside the legal alphabet
        separator: Replacement for runs of invalid characters ("" to drop them)
        lowercase: Lower-case the input before filtering
        max_length: Maximum identifier length (0 for unlimited)
        fallback: Identifier returned when sanitizing leaves nothing
        digit_prefix: Prefix added when the identifier would start with a digit
        suffix_separator: Joins an identifier and its disambiguation index
    """

    name: str
    invalid_pattern: str
    separator: str = ""
    lowercase: bool = True
    max_length: int = 0
    fallback: str = "resource"
    digit_prefix: str = ""
    suffix_separator: str = ""


TERRAFORM_RULES = IdentifierRules(
    name="terraform",
    invalid_pattern=r"[^a-z0-9_]",
    separator="_",
    fallback="resource",
    digit_prefix="r_",
    suffix_separator="_",
)

CLOUDFORMATION_RULES = IdentifierRules(
    name="cloudformation",
    invalid_pattern=r"[^A-Za-z0-9]",
    lowercase=False,
    max_length=200,
    fallback="Resource",
)

ARM_RULES = IdentifierRules(
    name="arm",
    invalid_pattern=r"[^a-z0-9]",
    max_length=40,
    fallback="resource",
)

# Suffixes such as "-statefulset" must still fit a 63 character DNS label
KUBERNETES_RULES = IdentifierRules(
    name="kubernetes",
    invalid_pattern=r"[^a-z0-9-]",
    separator="-",
    max_length=50,
    fallback="app",
    digit_prefix="app-",
    suffix_separator="-",
)

COMPOSE_RULES = IdentifierRules(
    name="docker-compose",
    invalid_pattern=r"[^a-z0-9-]",
    separator="-",
    fallback="service",
    suffix_separator="-",
)


def sanitize(name: Optional[str], rules: IdentifierRules) -> str:
    """Convert a free-form name into an identifier legal under ``rules``.

    Args:
        name: Original component or project name
        rules: Identifier rules of the target format

    Returns:
        Sanitized identifier (never empty)
    """
    text = str(name) if name is not None else ""
    if rules.lowercase:
        text = text.lower()

    text = re.sub(rules.invalid_pattern, rules.separator, text)

    if rules.separator:
        sep = re.escape(rules.separator)
        text = re.sub(f"{sep}{{2,}}", rules.separator, text)
        text = text.strip(rules.separator)

    if not text:
        return rules.fallback

    if rules.digit_prefix and text[0].isdigit():
        text = f"{rules.digit_prefix}{text}"

    if rules.max_length and len(text) > rules.max_length:
        text = text[: rules.max_length]
        if rules.separator:
            text = text.rstrip(rules.separator)

    return text or rules.fallback


def shorten(text: str, max_length: int, tail: int = 6) -> str:
    """Truncate to ``max_length`` keeping the tail, where index suffixes live."""
    if len(text) <= max_length:
        return text
    return text[: max_length - tail] + text[-tail:]


class IdentifierAllocator:
    """Hands out unique identifiers within one emitted document.

    Distinct source names that sanitize to the same identifier are
    disambiguated with a stable index suffix in allocation order, so the
    first ``"web api"`` keeps ``web_api`` and a later ``"web-api"`` becomes
    ``web_api_2``.
    """

    def __init__(self, rules: IdentifierRules) -> None:
        self.rules = rules
        self._taken: Set[str] = set()
        self.renames: List[Tuple[str, str, str]] = []  # (name, base, identifier)

    def candidates(self, name: str):
        """Yield identifiers for ``name`` in preference order, skipping taken ones."""
        base = sanitize(name, self.rules)
        if base not in self._taken:
            yield base
        index = 2
        while True:
            suffix = f"{self.rules.suffix_separator}{index}"
            stem = base
            if self.rules.max_length and len(stem) + len(suffix) > self.rules.max_length:
                stem = stem[: self.rules.max_length - len(suffix)]
            candidate = f"{stem}{suffix}"
            if candidate not in self._taken:
                yield candidate
            index += 1

    def allocate(self, name: str) -> str:
        """Allocate the first free identifier for ``name``."""
        identifier = next(self.candidates(name))
        self.claim(name, identifier)
        return identifier

    def claim(self, name: str, identifier: str) -> None:
        """Record ``identifier`` as used by ``name``."""
        self._taken.add(identifier)
        base = sanitize(name, self.rules)
        if identifier != base:
            self.renames.append((name, base, identifier))
            logger.warning(
                f"Identifier '{base}' for '{name}' already in use "
                f"({self.rules.name}), using '{identifier}'"
            )
