r"""Per-type rule metadata and its extraction.

`MetadataExtractor.extract(cls)` turns what an `Introspector` reports into
an immutable `ObjectMetadata`:

  - ``type_rules``: rules declared on the type itself, in declared order;
  - ``field_rules``: field name -> rules for that field, fields in
    declaration order. Fields without rules are left out.

A field's rules are the rules declared directly on it followed by the
rules of its value type. A value-type rule is dropped when that very
instance (``is``, never ``==``) is already among the direct rules, so an
introspection source that reports one rule in both places does not run it
twice, while two separately built rules that happen to look alike both
stay.

Extraction is a pure function of the type; `cache.MetadataCache` relies on
that to tolerate duplicate computation under contention.
"""

from __future__ import annotations

import dataclasses
import logging
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .introspection import Introspector, resolve_introspector
from .rules import Rule
from .utils import IntrospectionError, get_type_name

logger = logging.getLogger(__name__)

__all__ = ["ObjectMetadata", "MetadataExtractor", "extract_metadata"]


@dataclasses.dataclass(frozen=True, eq=False)
class ObjectMetadata:
    """Deduplicated rule sets for one type. Never mutated once built."""

    type_rules: Tuple[Rule, ...] = ()
    field_rules: Mapping[str, Tuple[Rule, ...]] = dataclasses.field(
        default_factory=lambda: MappingProxyType({})
    )

    def rules_for(self, field_name: str) -> Tuple[Rule, ...]:
        """Rules for `field_name`; empty when the field has none."""
        return self.field_rules.get(field_name, ())

    @property
    def is_empty(self) -> bool:
        return not self.type_rules and not self.field_rules


def _contains_instance(rules: Sequence[Any], candidate: Any) -> bool:
    return any(rule is candidate for rule in rules)


def merge_rules(
    direct: Iterable[Rule], inherited: Iterable[Rule]
) -> Tuple[Rule, ...]:
    """Direct rules, then inherited rules not already present by identity."""
    merged: List[Rule] = list(direct)
    for rule in inherited:
        if not _contains_instance(merged, rule):
            merged.append(rule)
    return tuple(merged)


def _count_required(rules: Iterable[Rule]) -> int:
    return sum(1 for rule in rules if rule.is_required)


class MetadataExtractor:
    """Builds `ObjectMetadata` from an `Introspector`."""

    def __init__(self, introspector: Optional[Introspector] = None):
        self.introspector = resolve_introspector(introspector)

    def extract(self, cls: type) -> ObjectMetadata:
        type_name = get_type_name(cls, qualname=True)
        try:
            type_rules = tuple(self.introspector.type_rules(cls))
            descriptors = list(self.introspector.fields(cls))
        except IntrospectionError:
            raise
        except Exception as e:
            raise IntrospectionError(
                f"Cannot introspect rules of {type_name}: {e}",
                ["Check the introspector used by this validator"],
                {"actual_type": type_name},
            ) from e

        self._check_rules(type_name, None, type_rules)
        self._warn_multiple_required(type_name, None, type_rules)

        field_rules = {}
        for descriptor in descriptors:
            rules = merge_rules(descriptor.rules, descriptor.value_type_rules)
            self._check_rules(type_name, descriptor.name, rules)
            if not rules:
                continue
            self._warn_multiple_required(type_name, descriptor.name, rules)
            field_rules[descriptor.name] = rules

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Extracted metadata for %s: %d type rule(s), %d field(s) with rules",
                type_name,
                len(type_rules),
                len(field_rules),
            )
        return ObjectMetadata(
            type_rules=type_rules, field_rules=MappingProxyType(field_rules)
        )

    __call__ = extract

    @staticmethod
    def _check_rules(
        type_name: str, field_name: Optional[str], rules: Sequence[Any]
    ) -> None:
        for rule in rules:
            if isinstance(rule, Rule):
                continue
            context = {"expected_type": "Rule", "actual_type": type(rule).__name__}
            if field_name is not None:
                context["member_name"] = field_name
            raise IntrospectionError(
                f"{type_name} reports {rule!r}, which is not a Rule instance",
                ["Introspectors must only report Rule instances"],
                context,
            )

    @staticmethod
    def _warn_multiple_required(
        type_name: str, field_name: Optional[str], rules: Sequence[Rule]
    ) -> None:
        # Several required rules in one set is undefined input; only the
        # first is run ahead of the others.
        if _count_required(rules) > 1:
            target = f"{type_name}.{field_name}" if field_name else type_name
            logger.warning(
                "%s declares more than one required rule; only the first is "
                "evaluated ahead of the others",
                target,
            )


def extract_metadata(
    cls: type, introspector: Optional[Introspector] = None
) -> ObjectMetadata:
    """Uncached one-shot extraction."""
    return MetadataExtractor(introspector).extract(cls)
