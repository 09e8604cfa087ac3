# Basic usage: field rules, type rules, a custom hook, and the three options

from dataclasses import dataclass
from typing import Optional

from typing_extensions import Annotated

from better_validator import (
    Predicate,
    Range,
    RegularExpression,
    Required,
    StrictValidator,
    StringLength,
    TypedValidator,
    ValidationResult,
    Validator,
    validation_rules,
)


@validation_rules(
    Predicate(lambda b: b.nights is None or b.nights <= 30, "{name} is too long")
)
@dataclass
class Booking:
    guest: Annotated[Optional[str], Required(), StringLength(40)] = None
    email: Annotated[Optional[str], RegularExpression(r"[^@\s]+@[^@\s]+")] = None
    nights: Annotated[Optional[int], Required(), Range(1, 60)] = None

    def validate_object(self, context):
        if self.email is None:
            yield ValidationResult(
                message="Bookings need an email for confirmation",
                member_names=("email",),
            )


class BookingValidator(TypedValidator[Booking]):
    pass


def show(title, summary):
    print(f"{title}: success={summary.success}")
    for result in summary.results:
        print(f"  - {result}")


if __name__ == "__main__":
    broken = Booking(guest="", email="not-an-email", nights=45)

    # Collect everything
    show("default", Validator().validate(broken))

    # Stop at the first failure anywhere
    show("break_on_first_error", Validator(break_on_first_error=True).validate(broken))

    # The classic behaviour: skip object-level checks when fields fail
    show("strict", StrictValidator().validate(broken))

    # Bound to a single type; rejects anything else
    show("typed", BookingValidator().validate(Booking(guest="Ann", nights=2)))
