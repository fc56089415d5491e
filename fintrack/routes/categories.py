"""
Category endpoints - CRUD for the caller's categories.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from fintrack.core.dependencies import get_category_service, get_user_id
from fintrack.models.category import CategoryCreate, CategoryResponse, CategoryUpdate
from fintrack.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    user_id: str = Depends(get_user_id),
    service: CategoryService = Depends(get_category_service),
):
    return service.list_categories(user_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    user_id: str = Depends(get_user_id),
    service: CategoryService = Depends(get_category_service),
):
    return service.create_category(user_id, category)


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    changes: CategoryUpdate,
    user_id: str = Depends(get_user_id),
    service: CategoryService = Depends(get_category_service),
):
    return service.update_category(user_id, category_id, changes)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    user_id: str = Depends(get_user_id),
    service: CategoryService = Depends(get_category_service),
):
    service.delete_category(user_id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
