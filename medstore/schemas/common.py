from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

TWO_PLACES = Decimal("0.01")


def two_places(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# Amounts stay Decimal in Python and go out as plain JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Prices, discounts and rates as entered, held to the paisa like the tables
Rate = Annotated[Decimal, AfterValidator(two_places)]
Price = Annotated[Decimal, AfterValidator(two_places), PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire; both accepted on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
