"""
Pydantic models for report aggregates (KPIs, category breakdown, trend).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from fintrack.models.ai import IsoDate


class ReportKPIs(BaseModel):
    income: float = 0.0
    expense: float = 0.0
    net: float = 0.0
    count: int = 0


class BreakdownRow(BaseModel):
    """Expense total for one category; category_id is None for uncategorized."""
    category_id: Optional[str] = None
    name: str
    amount: float


class TrendPoint(BaseModel):
    label: str = Field(..., description="Month label (YYYY-MM)")
    income: float = 0.0
    expense: float = 0.0


class DateRange(BaseModel):
    """Inclusive date range used by ledger-backed AI actions."""
    model_config = ConfigDict(populate_by_name=True)

    from_: IsoDate = Field(..., alias="from")
    to: IsoDate
