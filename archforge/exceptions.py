"""
Custom Exception Hierarchy for archforge

This module provides the exception hierarchy used across the generator,
the configuration layer and the CLI. Every error carries structured context
so callers (and the CLI) can surface a precise message to the user.
"""

from typing import Any, Dict, Iterable, Optional


class ArchForgeError(Exception):
    """
    Base exception class for all archforge related errors.

    Provides structured error information including context, error codes,
    and optional recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context
            cause: Optional underlying exception that caused this error
            recovery_suggestion: Optional suggestion for error recovery
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion

    def __str__(self) -> str:
        """Return a formatted error message with context."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            result += f" (context: {context_str})"
        if self.cause:
            result += f" (caused by: {self.cause})"
        if self.recovery_suggestion:
            result += f" (suggestion: {self.recovery_suggestion})"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "recovery_suggestion": self.recovery_suggestion,
        }


# Generation-related exceptions
class GenerationError(ArchForgeError):
    """Base class for errors raised while generating IaC output."""

    pass


class UnsupportedCombinationError(GenerationError):
    """Raised when a format cannot target the requested cloud provider."""

    def __init__(
        self,
        iac_format: str,
        provider: str,
        supported_providers: Iterable[str],
        display_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        supported = sorted(supported_providers)
        name = display_name or iac_format
        message = (
            f"{name} is only supported for "
            f"{_join_providers(supported)} (requested provider: '{provider}')"
        )
        context = kwargs.get("context", {})
        context["format"] = iac_format
        context["provider"] = provider
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNSUPPORTED_COMBINATION")
        kwargs.setdefault(
            "recovery_suggestion",
            f"Choose one of: {', '.join(supported)}, or pick a multi-cloud format",
        )
        super().__init__(message, **kwargs)
        self.iac_format = iac_format
        self.provider = provider
        self.supported_providers = supported


class UnsupportedFormatError(GenerationError):
    """Raised when an unknown IaC format is requested."""

    def __init__(
        self, iac_format: str, available: Iterable[str], **kwargs: Any
    ) -> None:
        available_formats = sorted(available)
        context = kwargs.get("context", {})
        context["format"] = iac_format
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNSUPPORTED_FORMAT")
        kwargs.setdefault(
            "recovery_suggestion",
            f"Available formats: {', '.join(available_formats)}",
        )
        super().__init__(f"Unsupported IaC format: {iac_format}", **kwargs)
        self.iac_format = iac_format


class IdentifierCollisionError(GenerationError):
    """Raised when two fragments in one document share an identifier."""

    def __init__(
        self, iac_format: str, identifier: str, kind: str, **kwargs: Any
    ) -> None:
        context = kwargs.get("context", {})
        context["format"] = iac_format
        context["kind"] = kind
        kwargs["context"] = context
        kwargs.setdefault("error_code", "IDENTIFIER_COLLISION")
        kwargs.setdefault(
            "recovery_suggestion",
            "Rename one of the components so their identifiers differ",
        )
        super().__init__(
            f"Identifier '{identifier}' is declared more than once", **kwargs
        )
        self.identifier = identifier


# Input-related exceptions
class ArchitectureLoadError(ArchForgeError):
    """Raised when an architecture document cannot be read or validated."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        if path:
            context["path"] = path
        kwargs["context"] = context
        kwargs.setdefault("error_code", "ARCHITECTURE_LOAD_FAILED")
        super().__init__(message, **kwargs)


# Configuration-related exceptions
class ConfigError(ArchForgeError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "CONFIG_ERROR")
        super().__init__(message, **kwargs)


def _join_providers(providers: list) -> str:
    quoted = [f"'{p}'" for p in providers]
    if len(quoted) <= 1:
        return "".join(quoted) or "no provider"
    return ", ".join(quoted[:-1]) + f" and {quoted[-1]}"
