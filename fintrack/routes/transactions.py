"""
Transaction endpoints - CRUD and filtered listing of the caller's ledger.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from fintrack.core.dependencies import get_transaction_service, get_user_id
from fintrack.models.ai import ISO_DATE_PATTERN
from fintrack.models.transaction import (
    TransactionCreate,
    TransactionFilters,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)
from fintrack.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionResponse])
def list_transactions(
    from_: Optional[str] = Query(None, alias="from", pattern=ISO_DATE_PATTERN, description="Start date (inclusive)"),
    to: Optional[str] = Query(None, pattern=ISO_DATE_PATTERN, description="End date (inclusive)"),
    type: Optional[TransactionType] = Query(None, description="income or expense"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    List transactions ordered by date.

    Query parameters mirror the NL filter output (from, to, type, categoryId).
    """
    filters = TransactionFilters(from_=from_, to=to, type=type, category_id=category_id)
    return service.list_transactions(user_id, filters)


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return service.create_transaction(user_id, transaction)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return service.get_transaction(user_id, transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    changes: TransactionUpdate,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return service.update_transaction(user_id, transaction_id, changes)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    service.delete_transaction(user_id, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
