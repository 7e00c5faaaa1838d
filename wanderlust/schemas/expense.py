from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wanderlust.core.enums import ExpenseCategory, SplitType
from wanderlust.schemas.common import Money


class SplitInput(BaseModel):
    user_id: int
    amount: Decimal


class PercentageSplitInput(BaseModel):
    user_id: int
    percentage: Decimal


class ExpenseCreate(BaseModel):
    trip_id: int
    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    category: ExpenseCategory
    amount: Decimal = Field(gt=0, decimal_places=2)
    currency: str = Field(default="USD", pattern="^[A-Za-z]{3}$")
    paid_at: datetime | None = None
    receipt_url: str | None = Field(default=None, max_length=1000)

    split_type: SplitType = SplitType.EQUAL
    split_with: List[int] | None = None
    custom_splits: List[SplitInput] | None = None
    percentage_splits: List[PercentageSplitInput] | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    def participants(self) -> list:
        if self.split_type is SplitType.EQUAL:
            return list(self.split_with or [])
        if self.split_type is SplitType.CUSTOM:
            return [(s.user_id, s.amount) for s in self.custom_splits or []]
        return [(s.user_id, s.percentage) for s in self.percentage_splits or []]


class ExpenseUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    category: ExpenseCategory | None = None
    paid_at: datetime | None = None
    receipt_url: str | None = Field(default=None, max_length=1000)
    # Optimistic locking: the updated_at the client last fetched
    client_updated_at: datetime | None = None


class SplitPaymentUpdate(BaseModel):
    is_paid: bool


class SplitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    split_type: SplitType
    amount: Money
    is_paid: bool = False
    paid_at: datetime | None = None


class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: int
    title: str
    description: str | None = None
    category: ExpenseCategory
    amount: Money
    currency: str
    split_type: SplitType
    paid_by: int
    paid_at: datetime
    receipt_url: str | None = None
    created_at: datetime
    updated_at: datetime
    splits: List[SplitOut]
