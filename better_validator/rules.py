r"""Rule capability and a handful of stock rules.

A rule is an opaque check: the engine only calls `evaluate` and reads the
`is_required` flag. Rules attach to fields through ``typing.Annotated``
metadata and to types through the `validation_rules` class decorator:

    @validation_rules(Predicate(lambda o: o.start <= o.end, "start after end"))
    @dataclass
    class Booking:
        guest: Annotated[str, Required(), StringLength(80)]
        start: int
        end: int

Rules keep default identity semantics (no ``__eq__``). Two rules built
with the same arguments are different rules, and both run.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional, Union

from .context import ValidationContext, ValidationResult

logger = logging.getLogger(__name__)

__all__ = [
    "Rule",
    "Required",
    "StringLength",
    "Range",
    "RegularExpression",
    "Predicate",
]


class Rule(ABC):
    """Base class for validation rules.

    Subclasses implement `is_valid`. The failure message comes from
    `error_message`, a `str.format` template; ``{name}`` is bound to the
    context's display name and `format_message` may supply more fields.
    """

    is_required: ClassVar[bool] = False
    error_message: str = "{name} is invalid."

    def __init__(self, error_message: Optional[str] = None):
        if error_message is not None:
            self.error_message = error_message

    @abstractmethod
    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        """Return True when `value` satisfies the rule."""

    def format_message(self, context: ValidationContext) -> str:
        return self.render_message(name=context.display_name)

    def render_message(self, **fields: Any) -> str:
        """Fill `error_message` with `fields`.

        A template that cannot be filled (stray braces, unknown fields) is
        returned unchanged so a failure is still reported.
        """
        try:
            return self.error_message.format(**fields)
        except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Using raw error message of %r: %s", self, e)
            return self.error_message

    def evaluate(
        self, value: Any, context: ValidationContext
    ) -> Optional[ValidationResult]:
        """Return None on success, otherwise the failure for this member."""
        if self.is_valid(value, context):
            return None
        members = (context.member_name,) if context.member_name else ()
        return ValidationResult(
            message=self.format_message(context), member_names=members
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} at {id(self):#x}>"


class Required(Rule):
    """Fails on None, and on blank strings unless `allow_empty_strings`."""

    is_required = True
    error_message = "The {name} field is required."

    def __init__(
        self, allow_empty_strings: bool = False, error_message: Optional[str] = None
    ):
        super().__init__(error_message)
        self.allow_empty_strings = allow_empty_strings

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        if value is None:
            return False
        if isinstance(value, str) and not self.allow_empty_strings:
            return bool(value.strip())
        return True


class StringLength(Rule):
    """Length bounds for sized values; None passes."""

    error_message = (
        "The field {name} must be a string with a minimum length of {minimum} "
        "and a maximum length of {maximum}."
    )

    def __init__(
        self, maximum: int, minimum: int = 0, error_message: Optional[str] = None
    ):
        if minimum < 0 or maximum < minimum:
            raise ValueError(
                f"StringLength bounds must satisfy 0 <= minimum <= maximum, "
                f"got minimum={minimum}, maximum={maximum}"
            )
        super().__init__(error_message)
        self.maximum = maximum
        self.minimum = minimum

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        if value is None:
            return True
        return self.minimum <= len(value) <= self.maximum

    def format_message(self, context: ValidationContext) -> str:
        return self.render_message(
            name=context.display_name, minimum=self.minimum, maximum=self.maximum
        )


class Range(Rule):
    """Inclusive numeric (or otherwise ordered) bounds; None passes."""

    error_message = "The field {name} must be between {minimum} and {maximum}."

    def __init__(
        self, minimum: Any, maximum: Any, error_message: Optional[str] = None
    ):
        super().__init__(error_message)
        self.minimum = minimum
        self.maximum = maximum

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        if value is None:
            return True
        return self.minimum <= value <= self.maximum

    def format_message(self, context: ValidationContext) -> str:
        return self.render_message(
            name=context.display_name, minimum=self.minimum, maximum=self.maximum
        )


class RegularExpression(Rule):
    """The whole string value must match `pattern`; None passes."""

    error_message = "The field {name} must match the regular expression '{pattern}'."

    def __init__(
        self, pattern: Union[str, re.Pattern], error_message: Optional[str] = None
    ):
        super().__init__(error_message)
        self.pattern = re.compile(pattern)

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        if value is None:
            return True
        return self.pattern.fullmatch(str(value)) is not None

    def format_message(self, context: ValidationContext) -> str:
        return self.render_message(
            name=context.display_name, pattern=self.pattern.pattern
        )


class Predicate(Rule):
    """Adapts a plain ``func(value) -> bool`` into a rule."""

    def __init__(self, func: Callable[[Any], bool], error_message: Optional[str] = None):
        if not callable(func):
            raise TypeError(f"Predicate expects a callable, got {func!r}")
        super().__init__(error_message)
        self.func = func

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        return bool(self.func(value))
