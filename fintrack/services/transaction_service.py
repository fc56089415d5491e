"""
Transaction Service - income/expense ledger entries in Firestore.

occurred_at is stored as "YYYY-MM-DD", so string comparison gives date
order and range filters can run in Firestore.
"""

from typing import Dict, List, Optional

from fintrack.models.transaction import TransactionCreate, TransactionFilters, TransactionUpdate
from fintrack.services.user_scoped import UserScopedService
from fintrack.utils.firestore_helpers import where_filter


class TransactionService(UserScopedService):
    """
    Service for transaction management.
    """

    collection_name = "transactions"

    def list_transactions(self, user_id: str, filters: Optional[TransactionFilters] = None) -> List[Dict]:
        """
        List a user's transactions, oldest first.

        Args:
            user_id: Owner
            filters: Optional from/to (inclusive), type and category_id

        Returns:
            Transaction dicts ordered by occurred_at, then created_at
        """
        filters = filters or TransactionFilters()
        query = self._query_for_user(user_id)
        if filters.from_:
            query = where_filter(query, "occurred_at", ">=", filters.from_)
        if filters.to:
            query = where_filter(query, "occurred_at", "<=", filters.to)
        if filters.type:
            query = where_filter(query, "type", "==", filters.type)
        if filters.category_id:
            query = where_filter(query, "category_id", "==", filters.category_id)

        transactions = self._list(query)
        return sorted(transactions, key=lambda t: (t.get("occurred_at", ""), self._created_key(t)))

    def get_transaction(self, user_id: str, transaction_id: str) -> Dict:
        return self._get_owned(user_id, transaction_id)

    def create_transaction(self, user_id: str, data: TransactionCreate) -> Dict:
        return self._create(user_id, data.model_dump())

    def update_transaction(self, user_id: str, transaction_id: str, data: TransactionUpdate) -> Dict:
        return self._update(user_id, transaction_id, data.model_dump(exclude_unset=True))

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        self._delete(user_id, transaction_id)
