"""
Budget Service - monthly planned amounts per category, and progress against
actual spend.
"""

from calendar import monthrange
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from fintrack.models.budget import BudgetCreate, BudgetProgress, BudgetUpdate
from fintrack.models.transaction import TransactionFilters
from fintrack.services.category_service import CategoryService
from fintrack.services.transaction_service import TransactionService
from fintrack.services.user_scoped import UserScopedService
from fintrack.utils.firestore_helpers import where_filter

UNKNOWN_CATEGORY = "Unknown"


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """First and last calendar day of a month as YYYY-MM-DD."""
    last_day = monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}"


class BudgetService(UserScopedService):
    """
    Service for budget management.
    """

    collection_name = "budgets"

    def list_budgets(self, user_id: str, month: Optional[int] = None, year: Optional[int] = None) -> List[Dict]:
        """A user's budgets, optionally for one month/year, newest first."""
        query = self._query_for_user(user_id)
        if month is not None:
            query = where_filter(query, "month", "==", month)
        if year is not None:
            query = where_filter(query, "year", "==", year)
        budgets = self._list(query)
        return sorted(budgets, key=self._created_key, reverse=True)

    def create_budget(self, user_id: str, data: BudgetCreate) -> Dict:
        return self._create(user_id, data.model_dump())

    def update_budget(self, user_id: str, budget_id: str, data: BudgetUpdate) -> Dict:
        return self._update(user_id, budget_id, data.model_dump(exclude_unset=True))

    def delete_budget(self, user_id: str, budget_id: str) -> None:
        self._delete(user_id, budget_id)

    def budget_progress(self, user_id: str, month: int, year: int) -> List[BudgetProgress]:
        """
        Planned vs actual for every budget of a month.

        Actual is the sum of that month's expense transactions in the
        budget's category.

        Returns:
            One BudgetProgress per budget, in list_budgets order
        """
        start, end = month_bounds(year, month)
        expenses = TransactionService(self.db).list_transactions(
            user_id, TransactionFilters(from_=start, to=end, type="expense")
        )

        spent: Dict[Optional[str], float] = defaultdict(float)
        for txn in expenses:
            spent[txn.get("category_id")] += float(txn.get("amount", 0))

        names = CategoryService(self.db).names_by_id(user_id)
        return [
            BudgetProgress(
                budget_id=b["id"],
                category_id=b["category_id"],
                category=names.get(b["category_id"]) or UNKNOWN_CATEGORY,
                planned=float(b["amount"]),
                actual=spent.get(b["category_id"], 0.0),
            )
            for b in self.list_budgets(user_id, month=month, year=year)
        ]
