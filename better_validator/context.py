r"""Validation context, results and the custom whole-object hook.

`ValidationContext` travels down the pipeline; `ValidationResult` and
`ValidationSummary` travel back up. Results are pydantic models so a
summary can be dumped straight to JSON for API responses or logs:

    summary = Validator().validate(order)
    payload = summary.model_dump()
    # {"results": [{"message": ..., "member_names": [...]}], "success": False}
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    MutableMapping,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .utils import get_type_name

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationContext",
    "ValidationResult",
    "ValidationSummary",
    "ValidatableObject",
]


class ValidationContext:
    """Describes the instance, and optionally the member, being validated.

    The `items` mapping is shared by reference with every child context made
    through `for_member`, so a value stored by one rule is visible to rules
    running later in the same call.
    """

    __slots__ = ("instance", "member_name", "items")

    def __init__(
        self,
        instance: Any,
        items: Optional[MutableMapping[Any, Any]] = None,
        member_name: Optional[str] = None,
    ):
        self.instance = instance
        self.member_name = member_name
        self.items: MutableMapping[Any, Any] = {} if items is None else items

    @property
    def object_type(self) -> type:
        return type(self.instance)

    @property
    def display_name(self) -> str:
        """Member name, or the instance's type name at object level."""
        if self.member_name:
            return self.member_name
        return get_type_name(self.object_type)

    def for_member(self, member_name: str) -> "ValidationContext":
        """Return a child context for `member_name` sharing this context's items."""
        return ValidationContext(self.instance, self.items, member_name)

    def __repr__(self) -> str:
        return (
            f"ValidationContext(object_type={get_type_name(self.object_type)}, "
            f"member_name={self.member_name!r})"
        )


class ValidationResult(BaseModel):
    """A single failure: message plus the member names it concerns."""

    model_config = ConfigDict(frozen=True)

    message: str
    member_names: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.member_names:
            return f"{', '.join(self.member_names)}: {self.message}"
        return self.message


class ValidationSummary(BaseModel):
    """Ordered outcome of one validation run.

    Results are kept in evaluation order: field failures (fields in
    declaration order), then type-level failures, then custom hook failures.
    """

    results: List[ValidationResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return not self.results

    def __bool__(self) -> bool:
        return self.success

    def errors_for(self, member_name: str) -> List[ValidationResult]:
        """Return the failures that mention `member_name`."""
        return [r for r in self.results if member_name in r.member_names]

    def messages(self) -> Dict[str, List[str]]:
        """Group messages by member name; object-level failures go under ``""``."""
        grouped: Dict[str, List[str]] = {}
        for result in self.results:
            for name in result.member_names or ("",):
                grouped.setdefault(name, []).append(result.message)
        return grouped


@runtime_checkable
class ValidatableObject(Protocol):
    """Optional whole-object hook, invoked after field and type rules.

    Yield (or return) one `ValidationResult` per failure. `None` entries are
    treated as success and dropped.
    """

    def validate_object(
        self, context: ValidationContext
    ) -> Iterable[Optional[ValidationResult]]: ...
