from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import get_settings
from records import BudgetPeriod, PaymentType, TransactionType

# Keeps cent values well inside a signed 64-bit column.
MAX_AMOUNT = 1_000_000_000_000


class TransactionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    type: TransactionType
    amount: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    date: datetime
    category: str = Field(..., min_length=1, max_length=100)
    account: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    notes: str = ""
    payment_type: Optional[PaymentType] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_note(cls, data: Any) -> Any:
        # Older exports carry a singular "note" field.
        if isinstance(data, dict) and not data.get("notes") and data.get("note"):
            data = {**data, "notes": data["note"]}
        return data

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("date")
    @classmethod
    def _to_local_time(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        local = ZoneInfo(get_settings().timezone)
        return value.astimezone(local).replace(tzinfo=None)


class BudgetIn(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    period: BudgetPeriod = BudgetPeriod.monthly
    name: Optional[str] = Field(default=None, max_length=120)
