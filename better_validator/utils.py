"""Exceptions and small helpers shared by the validator modules.

Validation *failures* are never raised: they are collected as
`ValidationResult` objects. The exceptions below signal misuse of the
engine or types whose rules cannot be discovered.

Exceptions:
    ValidatorError: Base class carrying `suggestions` and `context` metadata.
    IntrospectionError: Raised when a type's rules cannot be introspected.
    InstanceTypeError: Raised when a typed validator receives a foreign instance.

Helpers:
    get_type_name(cls, qualname=False): Return a human-readable type name.
"""

import logging
from inspect import isclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "ValidatorError",
    "IntrospectionError",
    "InstanceTypeError",
    "get_type_name",
]


class ValidatorError(Exception):
    """Base exception for engine misuse with structured context.

    Attributes:
        message: Human-readable error text.
        suggestions: List of short, imperative hints for remediation.
        context: Free-form key/value details safe to log and render.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}
        super().__init__(self._build_enhanced_message())

    def _build_enhanced_message(self) -> str:
        """Embed key context and suggestions into the exception string."""
        lines = [self.message]

        if self.context:
            if "expected_type" in self.context and "actual_type" in self.context:
                lines.append(f"  Expected: {self.context['expected_type']}")
                lines.append(f"  Actual: {self.context['actual_type']}")
            if "member_name" in self.context:
                lines.append(f"  Member: {self.context['member_name']}")

        if self.suggestions:
            lines.append("  Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"    • {suggestion}")

        return "\n".join(lines)


class IntrospectionError(ValidatorError):
    """Raised when the rules declared on a type cannot be read."""


class InstanceTypeError(ValidatorError, TypeError):
    """Raised when an instance does not match the validator's bound type."""


def get_type_name(cls: type, qualname: bool = False) -> str:
    """Return a readable name for a type.

    Args:
        cls: The class or type object.
        qualname: If True, return the qualified name when available.

    Returns:
        The type's `__qualname__`, `__name__`, or a string fallback.
    """
    if not isclass(cls):
        raise ValidatorError(f"{cls!r} is not a class")
    if qualname and hasattr(cls, "__qualname__"):
        return getattr(cls, "__qualname__")
    elif hasattr(cls, "__name__"):
        return getattr(cls, "__name__")
    else:
        return str(cls)
