"""Pytest configuration and shared fixtures."""

import threading
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

import pytest

from better_validator import (
    AnnotationIntrospector,
    MetadataCache,
    Rule,
    ValidationContext,
    ValidationResult,
    Validator,
)

# =============================================================================
# Rule doubles
# =============================================================================


class AlwaysFails(Rule):
    """Fails every time and counts how often it ran."""

    def __init__(self, error_message: str = "{name} always fails.", required=False):
        super().__init__(error_message)
        self.calls = 0
        if required:
            self.is_required = True

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        self.calls += 1
        return False


class AlwaysPasses(Rule):
    """Passes every time and counts how often it ran."""

    def __init__(self, required=False):
        super().__init__()
        self.calls = 0
        if required:
            self.is_required = True

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        self.calls += 1
        return True


class RecordingRule(Rule):
    """Appends its label to a shared log when evaluated."""

    def __init__(self, label: str, log: List[str], passes: bool = True, required=False):
        super().__init__(f"{label} failed")
        self.label = label
        self.log = log
        self.passes = passes
        if required:
            self.is_required = True

    def is_valid(self, value: Any, context: ValidationContext) -> bool:
        self.log.append(self.label)
        return self.passes


# =============================================================================
# Introspector doubles
# =============================================================================


class CountingIntrospector(AnnotationIntrospector):
    """Default introspector that counts how often each type was inspected."""

    def __init__(self):
        self.type_rule_calls = 0
        self.field_calls = 0
        self._lock = threading.Lock()

    def type_rules(self, cls):
        with self._lock:
            self.type_rule_calls += 1
        return super().type_rules(cls)

    def fields(self, cls):
        with self._lock:
            self.field_calls += 1
        return super().fields(cls)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def introspector():
    """A fresh counting introspector."""
    return CountingIntrospector()


@pytest.fixture
def cache(introspector):
    """A private metadata cache over the counting introspector."""
    return MetadataCache(introspector=introspector)


@pytest.fixture
def make_validator(cache):
    """Factory for validators sharing the private cache."""

    def factory(**options) -> Validator:
        return Validator(cache=cache, **options)

    return factory


@pytest.fixture
def empty_object():
    """An instance with no rules attached anywhere."""

    @dataclass
    class Plain:
        name: Optional[str] = None
        count: int = 0

    return Plain()


@pytest.fixture
def hook_class():
    """Factory for classes whose validate_object hook yields the given failures."""

    def factory(*messages: str):
        @dataclass
        class WithHook:
            value: Optional[str] = None

            def validate_object(
                self, context: ValidationContext
            ) -> Iterable[ValidationResult]:
                for message in messages:
                    yield ValidationResult(message=message)

        return WithHook

    return factory
