"""
Pydantic models for spending/income categories.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class CategoryCreate(BaseModel):
    """Model for creating a category (incoming POST request)."""
    name: str = Field(..., min_length=1, max_length=60, description="Category name")
    color: str = Field(..., min_length=1, max_length=32, description="Display color, e.g. #22c55e")
    icon: Optional[str] = Field(None, max_length=64, description="Optional icon name")

    class Config:
        json_schema_extra = {
            "example": {"name": "Food", "color": "#f97316", "icon": "utensils"}
        }
        str_strip_whitespace = True


class CategoryUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=60)
    color: Optional[str] = Field(None, min_length=1, max_length=32)
    icon: Optional[str] = Field(None, max_length=64)

    class Config:
        str_strip_whitespace = True


class CategoryResponse(BaseModel):
    id: str
    name: str
    color: str
    icon: Optional[str] = None
    created_at: Optional[datetime] = None
