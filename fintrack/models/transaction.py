"""
Pydantic models for ledger transactions.

occurred_at is a calendar date (YYYY-MM-DD); range filters compare it as a
string, which orders correctly for that format.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal, Optional

from fintrack.models.ai import IsoDate, MONEY_MAX

TransactionType = Literal["income", "expense"]


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    # The UI sends "" when no category is picked
    if v is None:
        return None
    v = v.strip()
    return v or None


class TransactionCreate(BaseModel):
    """Model for creating a transaction (incoming POST request)."""
    amount: float = Field(..., gt=0, le=MONEY_MAX, allow_inf_nan=False, description="Positive amount")
    type: TransactionType = Field(..., description="income or expense")
    category_id: Optional[str] = Field(None, max_length=64, description="Category id, empty for none")
    occurred_at: IsoDate = Field(..., description="Calendar date (YYYY-MM-DD)")
    note: Optional[str] = Field(None, max_length=255)

    @field_validator("category_id")
    @classmethod
    def _normalize_category(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": 450,
                "type": "expense",
                "category_id": "",
                "occurred_at": "2025-08-14",
                "note": "Swiggy dinner",
            }
        }


class TransactionUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    amount: Optional[float] = Field(None, gt=0, le=MONEY_MAX, allow_inf_nan=False)
    type: Optional[TransactionType] = None
    category_id: Optional[str] = Field(None, max_length=64)
    occurred_at: Optional[IsoDate] = None
    note: Optional[str] = Field(None, max_length=255)

    @field_validator("category_id")
    @classmethod
    def _normalize_category(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class TransactionResponse(BaseModel):
    id: str
    amount: float
    type: TransactionType
    category_id: Optional[str] = None
    occurred_at: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class TransactionFilters(BaseModel):
    """Query filters for listing transactions; all optional, dates inclusive."""
    from_: Optional[IsoDate] = None
    to: Optional[IsoDate] = None
    type: Optional[TransactionType] = None
    category_id: Optional[str] = None
