"""
Pydantic models for monthly category budgets.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from fintrack.models.ai import MONEY_MAX


class BudgetCreate(BaseModel):
    """A planned amount for one category in one month."""
    category_id: str = Field(..., min_length=1, max_length=64, description="Pick a category")
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    amount: float = Field(..., gt=0, le=MONEY_MAX, allow_inf_nan=False, description="Amount must be > 0")

    class Config:
        json_schema_extra = {
            "example": {"category_id": "cat_food", "month": 8, "year": 2025, "amount": 8000}
        }


class BudgetUpdate(BaseModel):
    category_id: Optional[str] = Field(None, min_length=1, max_length=64)
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    amount: Optional[float] = Field(None, gt=0, le=MONEY_MAX, allow_inf_nan=False)


class BudgetResponse(BaseModel):
    id: str
    category_id: str
    month: int
    year: int
    amount: float
    created_at: Optional[datetime] = None


class BudgetProgress(BaseModel):
    """Planned vs actual spend for one budget line."""
    budget_id: str
    category_id: str
    category: str
    planned: float
    actual: float
