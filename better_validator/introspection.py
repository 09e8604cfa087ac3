r"""Discovery of the rules declared on a type and on its fields.

The engine never inspects classes itself; it asks an `Introspector`.
`AnnotationIntrospector` is the default and understands three sources:

  - type-level rules registered with the `validation_rules` decorator,
    collected along the MRO (base classes first);
  - field-level rules stored as ``typing.Annotated`` metadata. Pydantic
    models are read through ``model_fields`` (pydantic keeps unknown
    ``Annotated`` metadata on ``FieldInfo.metadata``); dataclasses and
    plain annotated classes go through ``get_type_hints``;
  - value-type rules, i.e. the type-level rules of the class a field is
    annotated with (after stripping ``Annotated`` and ``Optional``).

Anything that can produce the same `FieldDescriptor` shape, for instance a
code generator or a registry of hand-written descriptors, can stand in for
the default by implementing the two methods of `Introspector`.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from inspect import isclass
from typing import (
    Any,
    Callable,
    ClassVar,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from pydantic import BaseModel
from typing_extensions import Annotated, get_args, get_origin, get_type_hints

from .rules import Rule
from .utils import IntrospectionError, ValidatorError, get_type_name

if sys.version_info >= (3, 10):
    from types import UnionType
else:
    UnionType = None

logger = logging.getLogger(__name__)

__all__ = [
    "RULES_ATTRIBUTE",
    "FieldDescriptor",
    "Introspector",
    "AnnotationIntrospector",
    "validation_rules",
]

RULES_ATTRIBUTE = "__validation_rules__"
"""Class attribute holding the rules declared directly on that class."""

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """Rules surfaced for one declared field.

    Attributes:
        name: Attribute name used to read the field value.
        rules: Rules declared directly on the field.
        value_type_rules: Rules declared on the field's value type.
    """

    name: str
    rules: Tuple[Rule, ...] = ()
    value_type_rules: Tuple[Rule, ...] = ()


@runtime_checkable
class Introspector(Protocol):
    """Capability that enumerates the rules declared on a type."""

    def type_rules(self, cls: type) -> Sequence[Rule]: ...

    def fields(self, cls: type) -> Sequence[FieldDescriptor]: ...


def validation_rules(*rules: Rule) -> Callable[[Type[T]], Type[T]]:
    """Class decorator attaching type-level rules to the decorated class.

    Rules declared on a base class also apply to its subclasses. Applying
    the decorator more than once appends, innermost decorator first.
    """
    for rule in rules:
        if not isinstance(rule, Rule):
            raise ValidatorError(
                f"{rule!r} is not a Rule instance",
                ["Instantiate the rule: Required() rather than Required"],
                {"expected_type": "Rule", "actual_type": type(rule).__name__},
            )

    def decorator(cls: Type[T]) -> Type[T]:
        existing = vars(cls).get(RULES_ATTRIBUTE, ())
        setattr(cls, RULES_ATTRIBUTE, tuple(existing) + rules)
        return cls

    return decorator


def _split_annotated(hint: Any) -> Tuple[Any, Tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        base, *metadata = get_args(hint)
        return base, tuple(metadata)
    return hint, ()


def _unwrap_optional(hint: Any) -> Any:
    origin = get_origin(hint)
    if origin is Union or (UnionType is not None and origin is UnionType):
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _is_class_var(hint: Any) -> bool:
    base, _ = _split_annotated(hint)
    return base is ClassVar or get_origin(base) is ClassVar


def _is_pydantic_model(cls: type) -> bool:
    return isclass(cls) and issubclass(cls, BaseModel)


def _only_rules(metadata: Sequence[Any]) -> Tuple[Rule, ...]:
    return tuple(item for item in metadata if isinstance(item, Rule))


class AnnotationIntrospector:
    """Default introspector reading decorators and ``Annotated`` metadata."""

    def type_rules(self, cls: type) -> Tuple[Rule, ...]:
        if not isclass(cls):
            return ()
        collected: List[Rule] = []
        for klass in reversed(cls.__mro__):
            collected.extend(vars(klass).get(RULES_ATTRIBUTE, ()))
        return tuple(collected)

    def fields(self, cls: type) -> List[FieldDescriptor]:
        if not isclass(cls):
            raise IntrospectionError(
                f"{cls!r} is not a class",
                ["Validate class instances; pass type(obj), not obj"],
                {"expected_type": "class", "actual_type": type(cls).__name__},
            )
        if _is_pydantic_model(cls):
            return self._pydantic_fields(cls)
        return self._annotated_fields(cls)

    def value_type_rules(self, hint: Any) -> Tuple[Rule, ...]:
        """Type-level rules of the class a field annotation refers to."""
        base, _ = _split_annotated(hint)
        base, _ = _split_annotated(_unwrap_optional(base))
        if get_origin(base) is not None or not isclass(base):
            return ()
        return self.type_rules(base)

    def _pydantic_fields(self, cls: Type[BaseModel]) -> List[FieldDescriptor]:
        descriptors = []
        for name, info in cls.model_fields.items():
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    rules=_only_rules(info.metadata),
                    value_type_rules=self.value_type_rules(info.annotation),
                )
            )
        return descriptors

    def _annotated_fields(self, cls: type) -> List[FieldDescriptor]:
        try:
            hints = get_type_hints(cls, include_extras=True)
        except (NameError, TypeError, AttributeError, SyntaxError) as e:
            raise IntrospectionError(
                f"Cannot resolve annotations of {get_type_name(cls)}: {e}",
                [
                    "Make forward references importable from the class's module",
                    "Define referenced classes before validating",
                ],
                {"actual_type": get_type_name(cls, qualname=True)},
            ) from e

        if dataclasses.is_dataclass(cls):
            # dataclass field order, which skips ClassVar and InitVar pseudo-fields
            names = [f.name for f in dataclasses.fields(cls)]
        else:
            names = [
                name
                for name, hint in hints.items()
                if not _is_class_var(hint)
                and not isinstance(hint, dataclasses.InitVar)
            ]

        descriptors = []
        for name in names:
            if name.startswith("_"):
                continue
            hint = hints[name]
            _, metadata = _split_annotated(hint)
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    rules=_only_rules(metadata),
                    value_type_rules=self.value_type_rules(hint),
                )
            )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Introspected %d field(s) on %s", len(descriptors), get_type_name(cls)
            )
        return descriptors


def resolve_introspector(introspector: Optional[Introspector]) -> Introspector:
    """Return `introspector`, or a fresh `AnnotationIntrospector` when None."""
    if introspector is None:
        return AnnotationIntrospector()
    if not isinstance(introspector, Introspector):
        raise ValidatorError(
            f"{introspector!r} does not implement the Introspector protocol",
            ["Provide type_rules(cls) and fields(cls) methods"],
            {
                "expected_type": "Introspector",
                "actual_type": type(introspector).__name__,
            },
        )
    return introspector
