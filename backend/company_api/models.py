"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Identifiers are assigned by the database on first insert and are never
changed afterwards.
"""

from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """A product available for sale.

    Fields:
    - `name`: display name, 2-100 characters
    - `description`: optional free text up to 500 characters
    - `price`: unit price, strictly positive
    - `stock_quantity`: units on hand, never negative
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=100, nullable=False)
    description: Optional[str] = Field(default=None, max_length=500)
    price: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    stock_quantity: int = Field(default=0, nullable=False)


class User(SQLModel, table=True):
    """A registered user.

    `email` carries a unique index: the database is the final arbiter of
    uniqueness when two requests race to register the same address.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, nullable=False)
    email: str = Field(index=True, unique=True, max_length=255, nullable=False)
