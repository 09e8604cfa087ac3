from ._version import __version__
from .cache import LazyMetadata, MetadataCache, get_shared_cache
from .context import (
    ValidatableObject,
    ValidationContext,
    ValidationResult,
    ValidationSummary,
)
from .introspection import (
    AnnotationIntrospector,
    FieldDescriptor,
    Introspector,
    validation_rules,
)
from .metadata import MetadataExtractor, ObjectMetadata, extract_metadata
from .rules import (
    Predicate,
    Range,
    RegularExpression,
    Required,
    Rule,
    StringLength,
)
from .utils import InstanceTypeError, IntrospectionError, ValidatorError
from .validator import (
    ObjectValidator,
    StrictValidator,
    TypedValidator,
    Validator,
    ValidatorOptions,
    validate,
)

__all__ = [
    "Validator",
    "TypedValidator",
    "StrictValidator",
    "ValidatorOptions",
    "ObjectValidator",
    "validate",
    "ValidationContext",
    "ValidationResult",
    "ValidationSummary",
    "ValidatableObject",
    "Rule",
    "Required",
    "StringLength",
    "Range",
    "RegularExpression",
    "Predicate",
    "Introspector",
    "AnnotationIntrospector",
    "FieldDescriptor",
    "validation_rules",
    "ObjectMetadata",
    "MetadataExtractor",
    "extract_metadata",
    "MetadataCache",
    "LazyMetadata",
    "get_shared_cache",
    "ValidatorError",
    "IntrospectionError",
    "InstanceTypeError",
    "__version__",
]
