"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and carry the field-level
validation rules; FastAPI rejects invalid payloads before a service is
called. JSON field names are camelCase, snake_case is accepted on input.
"""

from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Prices travel as JSON numbers, not strings.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class ProductIn(CamelModel):
    """Payload for creating or replacing a product."""
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    price: JsonDecimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(ge=0)


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: JsonDecimal
    stock_quantity: int


class UserIn(CamelModel):
    """Payload for creating or replacing a user."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr


class UserOut(CamelModel):
    id: int
    name: str
    email: str


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ErrorOut(BaseModel):
    """Uniform error payload returned by every failing endpoint."""
    status: int
    message: str
    errors: Optional[List[FieldErrorOut]] = None
