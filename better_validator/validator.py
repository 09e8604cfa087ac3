r"""Validation orchestrator and its public shapes.

A run has three stages, each fed by cached `ObjectMetadata`:

  1. field rules, fields in declaration order, each in its own member context;
  2. type-level rules against the whole instance;
  3. the instance's `ValidatableObject.validate_object` hook, if it has one.

Within one rule set the required rule (if any) always runs first. Three
independent options shape short-circuiting:

  - ``stop_if_required_fails`` (default False): a failing required rule
    skips the remaining rules of that member only.
  - ``run_model_level_if_field_level_fails`` (default True): when False,
    any field failure skips the type stage and the hook.
  - ``break_on_first_error`` (default False): the first failure anywhere
    ends the run, so a summary never holds more than one result.

Usage
-----
    validator = Validator(stop_if_required_fails=True)
    summary = validator.validate(customer)
    if not summary.success:
        for result in summary.results:
            print(result)

    class CustomerValidator(TypedValidator[Customer]):
        pass

    CustomerValidator().validate(customer)

    # the classic "stop at the first required failure" behaviour
    StrictValidator().validate(customer)
"""

from __future__ import annotations

import logging
from functools import partial
from inspect import isclass
from typing import (
    Any,
    ClassVar,
    Generic,
    List,
    Optional,
    Protocol,
    Sequence,
    Type,
    TypeVar,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict
from typing_extensions import get_args, get_origin

from .cache import LazyMetadata, MetadataCache, get_shared_cache
from .context import (
    ValidatableObject,
    ValidationContext,
    ValidationResult,
    ValidationSummary,
)
from .introspection import Introspector
from .metadata import ObjectMetadata
from .rules import Rule
from .utils import InstanceTypeError, ValidatorError, get_type_name

logger = logging.getLogger(__name__)

__all__ = [
    "ValidatorOptions",
    "ObjectValidator",
    "Validator",
    "TypedValidator",
    "StrictValidator",
    "validate",
]

T = TypeVar("T")


class ValidatorOptions(BaseModel):
    """Short-circuit toggles. Defaults match a plain collect-everything run."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    stop_if_required_fails: bool = False
    run_model_level_if_field_level_fails: bool = True
    break_on_first_error: bool = False


@runtime_checkable
class ObjectValidator(Protocol):
    """Type-erased entry point: validate whatever instance a context carries."""

    def validate_context(self, context: ValidationContext) -> ValidationSummary: ...


class Validator:
    """Validates instances of any type, resolving metadata per call.

    Args:
        cache: Metadata cache to use. Defaults to the process-wide cache.
        introspector: Builds a private cache over this introspector instead.
        **options: Any `ValidatorOptions` field.

    Subclasses may fix option defaults with class keywords:

        class QuietValidator(Validator, break_on_first_error=True):
            pass
    """

    _default_options: ClassVar[ValidatorOptions] = ValidatorOptions()

    def __init_subclass__(
        cls,
        stop_if_required_fails: Optional[bool] = None,
        run_model_level_if_field_level_fails: Optional[bool] = None,
        break_on_first_error: Optional[bool] = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        overrides = {
            name: value
            for name, value in (
                ("stop_if_required_fails", stop_if_required_fails),
                (
                    "run_model_level_if_field_level_fails",
                    run_model_level_if_field_level_fails,
                ),
                ("break_on_first_error", break_on_first_error),
            )
            if value is not None
        }
        if overrides:
            cls._default_options = ValidatorOptions(
                **{**cls._default_options.model_dump(), **overrides}
            )

    def __init__(
        self,
        *,
        cache: Optional[MetadataCache] = None,
        introspector: Optional[Introspector] = None,
        **options: Any,
    ):
        if cache is not None and introspector is not None:
            raise ValidatorError(
                "Pass either a cache or an introspector, not both",
                ["Build the cache with MetadataCache(introspector=...)"],
            )
        if cache is None:
            cache = (
                MetadataCache(introspector=introspector)
                if introspector is not None
                else get_shared_cache()
            )
        self._cache = cache
        self.options = ValidatorOptions(
            **{**type(self)._default_options.model_dump(), **options}
        )

    # -- options -------------------------------------------------------------

    @property
    def stop_if_required_fails(self) -> bool:
        return self.options.stop_if_required_fails

    @stop_if_required_fails.setter
    def stop_if_required_fails(self, value: bool) -> None:
        self.options.stop_if_required_fails = value

    @property
    def run_model_level_if_field_level_fails(self) -> bool:
        return self.options.run_model_level_if_field_level_fails

    @run_model_level_if_field_level_fails.setter
    def run_model_level_if_field_level_fails(self, value: bool) -> None:
        self.options.run_model_level_if_field_level_fails = value

    @property
    def break_on_first_error(self) -> bool:
        return self.options.break_on_first_error

    @break_on_first_error.setter
    def break_on_first_error(self, value: bool) -> None:
        self.options.break_on_first_error = value

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    # -- entry points ----------------------------------------------------------

    def validate(
        self, instance: Any, context: Optional[ValidationContext] = None
    ) -> ValidationSummary:
        """Run the full pipeline against `instance` and summarize failures."""
        context = self._context_for(instance, context)
        metadata = self.get_metadata(type(instance))
        return self._run(instance, context, metadata)

    def validate_context(self, context: ValidationContext) -> ValidationSummary:
        """Validate ``context.instance``, dispatching on its runtime type."""
        return self.validate(context.instance, context)

    def get_metadata(self, cls: type) -> ObjectMetadata:
        return self._cache.get_or_compute(cls)

    # -- pipeline --------------------------------------------------------------

    @staticmethod
    def _context_for(
        instance: Any, context: Optional[ValidationContext]
    ) -> ValidationContext:
        if context is None:
            return ValidationContext(instance)
        if context.instance is not instance:
            raise ValidatorError(
                f"Context wraps a {get_type_name(context.object_type)} instance, "
                f"not the {get_type_name(type(instance))} being validated",
                [
                    "Build the context from the same object: "
                    "ValidationContext(instance)",
                    "Or call validate_context(context)",
                ],
                {
                    "expected_type": get_type_name(type(instance), qualname=True),
                    "actual_type": get_type_name(context.object_type, qualname=True),
                },
            )
        return context

    def _stops_after_failure(self) -> bool:
        return (
            not self.options.run_model_level_if_field_level_fails
            or self.options.break_on_first_error
        )

    def _run(
        self, instance: Any, context: ValidationContext, metadata: ObjectMetadata
    ) -> ValidationSummary:
        errors: List[ValidationResult] = self.get_field_errors(
            instance, context, metadata
        )
        if errors and self._stops_after_failure():
            logger.debug("Skipping type rules after %d field failure(s)", len(errors))
            return ValidationSummary(results=errors)

        errors.extend(self.get_type_errors(instance, context, metadata))
        if errors and self._stops_after_failure():
            logger.debug("Skipping custom validation after %d failure(s)", len(errors))
            return ValidationSummary(results=errors)

        errors.extend(self.get_custom_errors(instance, context))
        return ValidationSummary(results=errors)

    def get_field_errors(
        self, instance: Any, context: ValidationContext, metadata: ObjectMetadata
    ) -> List[ValidationResult]:
        """Evaluate every field's rules, fields in metadata order."""
        errors: List[ValidationResult] = []
        for name, rules in metadata.field_rules.items():
            member_context = context.for_member(name)
            # an attribute that was never set validates as None
            value = getattr(instance, name, None)
            errors.extend(self.evaluate_rules(value, member_context, rules))
            if errors and self.options.break_on_first_error:
                break
        return errors

    def get_type_errors(
        self, instance: Any, context: ValidationContext, metadata: ObjectMetadata
    ) -> List[ValidationResult]:
        """Evaluate the rules declared on the instance's type."""
        return self.evaluate_rules(instance, context, metadata.type_rules)

    def get_custom_errors(
        self, instance: Any, context: ValidationContext
    ) -> List[ValidationResult]:
        """Collect failures from the instance's `validate_object` hook."""
        if not isinstance(instance, ValidatableObject):
            return []
        errors: List[ValidationResult] = []
        for result in instance.validate_object(context) or ():
            if result is None:
                continue
            if not isinstance(result, ValidationResult):
                raise ValidatorError(
                    f"validate_object of {get_type_name(type(instance))} produced "
                    f"{result!r}",
                    ["Yield ValidationResult(message=..., member_names=(...))"],
                    {
                        "expected_type": "ValidationResult",
                        "actual_type": type(result).__name__,
                    },
                )
            errors.append(result)
            if self.options.break_on_first_error:
                break
        return errors

    def evaluate_rules(
        self, value: Any, context: ValidationContext, rules: Sequence[Rule]
    ) -> List[ValidationResult]:
        """Evaluate one member's rules, required rule first."""
        errors: List[ValidationResult] = []
        required = next((rule for rule in rules if rule.is_required), None)

        if required is not None:
            result = required.evaluate(value, context)
            if result is not None:
                errors.append(result)
                if self.options.stop_if_required_fails:
                    return errors

        if errors and self.options.break_on_first_error:
            return errors

        for rule in rules:
            if rule is required:
                continue
            result = rule.evaluate(value, context)
            if result is not None:
                errors.append(result)
                if self.options.break_on_first_error:
                    break
        return errors

    def __repr__(self) -> str:
        opts = ", ".join(f"{k}={v}" for k, v in self.options.model_dump().items())
        return f"{type(self).__name__}({opts})"


class StrictValidator(
    Validator,
    stop_if_required_fails=True,
    run_model_level_if_field_level_fails=False,
):
    """Stops a member at its failed required rule and skips object-level
    validation when any field fails."""


class TypedValidator(Validator, Generic[T]):
    """Validator bound to a single type.

    The type is given explicitly, ``TypedValidator(Customer)``, or through a
    parametrized base, ``class CustomerValidator(TypedValidator[Customer])``.
    Metadata is resolved once, on first use. Only instances of exactly that
    type are accepted; subclass instances raise `InstanceTypeError`.
    """

    def __init__(self, model_type: Optional[Type[T]] = None, **kwargs: Any):
        super().__init__(**kwargs)
        if model_type is None:
            model_type = self._resolve_model_type()
        if not isclass(model_type):
            raise ValidatorError(
                f"{model_type!r} is not a class",
                ["Bind the validator to a class: TypedValidator(Customer)"],
                {"expected_type": "class", "actual_type": type(model_type).__name__},
            )
        self.model_type: Type[T] = model_type
        self._metadata = LazyMetadata(partial(self._cache.get_or_compute, model_type))

    @classmethod
    def _resolve_model_type(cls) -> type:
        for klass in cls.__mro__:
            for base in getattr(klass, "__orig_bases__", ()):
                if get_origin(base) is TypedValidator:
                    (arg,) = get_args(base)
                    if isclass(arg):
                        return arg
        raise ValidatorError(
            f"{get_type_name(cls)} is not bound to a type",
            [
                "Pass the type: TypedValidator(Customer)",
                "Or subclass a parametrized base: class V(TypedValidator[Customer])",
            ],
        )

    def validate(
        self, instance: T, context: Optional[ValidationContext] = None
    ) -> ValidationSummary:
        self._check_instance(instance)
        context = self._context_for(instance, context)
        return self._run(instance, context, self._metadata.get())

    def validate_context(self, context: ValidationContext) -> ValidationSummary:
        return self.validate(context.instance, context)

    def get_metadata(self, cls: type) -> ObjectMetadata:
        if cls is self.model_type:
            return self._metadata.get()
        return super().get_metadata(cls)

    def _check_instance(self, instance: Any) -> None:
        # Exact match: rules declared on a subclass are not in this metadata.
        if type(instance) is self.model_type:
            return
        expected = get_type_name(self.model_type, qualname=True)
        actual = get_type_name(type(instance), qualname=True)
        logger.debug("Rejected %s instance in validator bound to %s", actual, expected)
        raise InstanceTypeError(
            f"{type(self).__name__} validates {expected} instances, got {actual}",
            [
                f"Pass a {expected} instance",
                "Bind a separate TypedValidator to each subclass",
                "Use Validator() to validate arbitrary types",
            ],
            {"expected_type": expected, "actual_type": actual},
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{get_type_name(self.model_type)}]"


def validate(
    instance: Any, context: Optional[ValidationContext] = None, **options: Any
) -> ValidationSummary:
    """Validate `instance` with a default `Validator` over the shared cache."""
    return Validator(**options).validate(instance, context)
