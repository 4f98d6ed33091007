from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CURRENCIES, UNCATEGORIZED_COLOR, UNCATEGORIZED_NAME

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryRef(BaseModel):
    """Category fields embedded in record responses and aggregations."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    color: str = Field(..., pattern=HEX_COLOR_PATTERN)


# Used wherever a record has no category
UNCATEGORIZED = CategoryRef(id=None, name=UNCATEGORIZED_NAME, color=UNCATEGORIZED_COLOR)


class Category(BaseModel):
    id: int
    owner_id: int
    name: str
    color: str = Field(..., pattern=HEX_COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class Record(BaseModel):
    """A single expense, amount always in its own currency."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    date: date
    currency: str
    amount: float = Field(..., ge=0)
    note: Optional[str] = None
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    @property
    def category_or_default(self) -> CategoryRef:
        return self.category if self.category is not None else UNCATEGORIZED
