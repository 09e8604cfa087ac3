from dataclasses import InitVar, dataclass
from typing import ClassVar, Optional

import pytest
from pydantic import BaseModel
from typing_extensions import Annotated

from better_validator import (
    AnnotationIntrospector,
    FieldDescriptor,
    Introspector,
    IntrospectionError,
    MetadataCache,
    Predicate,
    Range,
    Required,
    StringLength,
    ValidatorError,
    validation_rules,
)

NAME_REQUIRED = Required()
NAME_LENGTH = StringLength(20)
POSITIVE = Predicate(lambda v: v > 0, "{name} must be positive")
ADDRESS_RULE = Predicate(lambda a: a.city is not None, "{name} needs a city")
BASE_RULE = Predicate(lambda o: True)
CHILD_RULE = Predicate(lambda o: True)


@validation_rules(ADDRESS_RULE)
@dataclass
class Address:
    city: Optional[str] = None


@dataclass
class Person:
    name: Annotated[Optional[str], NAME_REQUIRED, NAME_LENGTH, "not a rule"] = None
    age: Annotated[int, POSITIVE] = 1
    home: Optional[Address] = None
    nickname: Optional[str] = None
    _secret: Annotated[Optional[str], Required()] = None
    registry: ClassVar[Annotated[int, Required()]] = 0


class PlainPerson:
    name: Annotated[str, NAME_REQUIRED]
    limit: ClassVar[int] = 3
    _hidden: Annotated[str, Required()]

    def __init__(self, name):
        self.name = name


class PydanticPerson(BaseModel):
    name: Annotated[Optional[str], NAME_REQUIRED, NAME_LENGTH] = None
    home: Optional[Address] = None


@validation_rules(BASE_RULE)
class Base:
    pass


@validation_rules(CHILD_RULE)
class Child(Base):
    pass


@pytest.fixture
def inspector():
    return AnnotationIntrospector()


def _by_name(descriptors):
    return {d.name: d for d in descriptors}


def test_default_introspector_satisfies_protocol(inspector):
    assert isinstance(inspector, Introspector)


def test_dataclass_fields_in_declaration_order(inspector):
    names = [d.name for d in inspector.fields(Person)]
    assert names == ["name", "age", "home", "nickname"]


def test_annotated_metadata_yields_only_rules(inspector):
    fields = _by_name(inspector.fields(Person))
    assert fields["name"].rules == (NAME_REQUIRED, NAME_LENGTH)
    assert fields["age"].rules == (POSITIVE,)
    assert fields["nickname"] == FieldDescriptor("nickname")


def test_value_type_rules_come_from_field_class(inspector):
    fields = _by_name(inspector.fields(Person))
    assert fields["home"].rules == ()
    assert fields["home"].value_type_rules == (ADDRESS_RULE,)


def test_plain_class_skips_classvars_and_private_names(inspector):
    assert [d.name for d in inspector.fields(PlainPerson)] == ["name"]


def test_dataclass_skips_initvars(inspector):
    @dataclass
    class WithInit:
        token: InitVar[str]
        name: Annotated[str, NAME_REQUIRED] = "x"

        def __post_init__(self, token):
            pass

    assert [d.name for d in inspector.fields(WithInit)] == ["name"]


def test_pydantic_model_fields(inspector):
    fields = _by_name(inspector.fields(PydanticPerson))
    assert fields["name"].rules == (NAME_REQUIRED, NAME_LENGTH)
    assert fields["home"].value_type_rules == (ADDRESS_RULE,)


def test_type_rules_follow_mro_base_first(inspector):
    assert inspector.type_rules(Base) == (BASE_RULE,)
    assert inspector.type_rules(Child) == (BASE_RULE, CHILD_RULE)
    assert inspector.type_rules(int) == ()


def test_stacked_decorators_append():
    first, second = Range(0, 1), Range(0, 2)

    @validation_rules(first)
    @validation_rules(second)
    class Stacked:
        pass

    assert AnnotationIntrospector().type_rules(Stacked) == (second, first)


def test_decorator_rejects_non_rules():
    with pytest.raises(ValidatorError):
        validation_rules(Required)


def test_unresolvable_annotation_raises(inspector):
    class Broken:
        ref: "DoesNotExist"  # noqa: F821

    with pytest.raises(IntrospectionError) as excinfo:
        inspector.fields(Broken)
    assert isinstance(excinfo.value.__cause__, NameError)


def test_fields_rejects_non_class(inspector):
    with pytest.raises(IntrospectionError):
        inspector.fields(Person())


def test_value_type_rules_ignore_generics(inspector):
    from typing import List

    assert inspector.value_type_rules(List[Address]) == ()
    assert inspector.value_type_rules(Annotated[Optional[Address], POSITIVE]) == (
        ADDRESS_RULE,
    )


def test_foreign_introspector_must_match_protocol():
    with pytest.raises(ValidatorError):
        MetadataCache(introspector=object())
