"""
Budget endpoints - CRUD plus planned-vs-actual progress for a month.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from fintrack.core.dependencies import get_budget_service, get_user_id
from fintrack.models.budget import BudgetCreate, BudgetProgress, BudgetResponse, BudgetUpdate
from fintrack.services.budget_service import BudgetService

router = APIRouter(prefix="/budgets", tags=["Budgets"])


@router.get("", response_model=List[BudgetResponse])
def list_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    return service.list_budgets(user_id, month=month, year=year)


@router.get("/progress/{year}/{month}", response_model=List[BudgetProgress])
def budget_progress(
    year: int = Path(..., ge=2000, le=2100),
    month: int = Path(..., ge=1, le=12),
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Planned vs actual expense for each budget of the month."""
    return service.budget_progress(user_id, month, year)


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: BudgetCreate,
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    return service.create_budget(user_id, budget)


@router.patch("/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: str,
    changes: BudgetUpdate,
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    return service.update_budget(user_id, budget_id, changes)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    service.delete_budget(user_id, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
