"""
Pydantic models for the AI assistance layer.

Inputs are validated before any provider call (bounds, coercion of numeric
strings, finite numbers only, trimmed strings). Results are what providers
return; remote providers validate model output through them too.
"""

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from typing import Annotated, List, Literal, Optional

MONEY_MAX = 1_000_000_000_000  # 1e12

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
ISO_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2})?(\.\d+)?(Z|[+-]\d{2}:\d{2})$"

IsoDate = Annotated[str, StringConstraints(pattern=ISO_DATE_PATTERN)]
IsoDateTime = Annotated[str, StringConstraints(pattern=ISO_DATETIME_PATTERN)]
Money = Annotated[float, Field(ge=0, le=MONEY_MAX, allow_inf_nan=False)]
SignedMoney = Annotated[float, Field(ge=-MONEY_MAX, le=MONEY_MAX, allow_inf_nan=False)]
CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=60)]


class ReportSummaryInput(BaseModel):
    """Aggregates for a date range. Providers must not recompute net."""
    model_config = ConfigDict(populate_by_name=True)

    from_: IsoDate = Field(..., alias="from", description="Range start (YYYY-MM-DD)")
    to: IsoDate = Field(..., description="Range end (YYYY-MM-DD)")
    income: Money
    expense: Money
    net: SignedMoney
    count: int = Field(..., ge=0, le=1_000_000, description="Number of transactions")


class CategorySuggestInput(BaseModel):
    note: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
    candidates: Optional[List[CategoryName]] = Field(None, max_length=200, description="Existing category names")


class BudgetLine(BaseModel):
    category: CategoryName
    planned: Money
    actual: Money


class BudgetCoachInput(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    budgets: List[BudgetLine] = Field(..., min_length=1, max_length=1000)
    question: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]] = None


class DuplicateCandidate(BaseModel):
    id: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
    amount: Money
    note: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]] = None
    occurred_at: IsoDateTime


class DuplicatesInput(BaseModel):
    transactions: List[DuplicateCandidate] = Field(..., min_length=1, max_length=5000)


class NLFilterInput(BaseModel):
    text: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)]


class CategorySuggestResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_name: str = Field(..., alias="categoryName")
    confidence: float = Field(..., description="0..1")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float) -> float:
        # Remote models sometimes answer 85 or -1; keep the contract [0, 1].
        if v != v:  # NaN
            return 0.0
        return min(1.0, max(0.0, v))


class DuplicatesResult(BaseModel):
    """Ids of probable duplicates, unique, first-seen order."""
    ids: List[str] = Field(default_factory=list)

    @field_validator("ids")
    @classmethod
    def _unique(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))


class NLFilterResult(BaseModel):
    """Sparse filter; absent fields mean no constraint was inferred."""
    model_config = ConfigDict(populate_by_name=True)

    type: Optional[Literal["income", "expense"]] = None
    category_id: Optional[str] = Field(None, alias="categoryId")
    from_: Optional[IsoDate] = Field(None, alias="from")
    to: Optional[IsoDate] = None
    max_amount: Optional[float] = Field(None, alias="maxAmount", ge=0, allow_inf_nan=False)

    def to_public(self) -> dict:
        """Wire shape: camelCase keys, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
