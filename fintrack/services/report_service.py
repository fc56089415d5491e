"""
Report Service - aggregates over a user's transactions for a date range.

All three reports read the same transaction list; nothing is precomputed or
stored.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from fintrack.models.report import BreakdownRow, ReportKPIs, TrendPoint
from fintrack.models.transaction import TransactionFilters
from fintrack.services.category_service import CategoryService
from fintrack.services.transaction_service import TransactionService

UNCATEGORIZED = "Uncategorized"
UNKNOWN_CATEGORY = "Unknown"


class ReportService:
    """
    KPIs, expense breakdown by category, and monthly trend.
    """

    def __init__(self, db=None):
        self.transactions = TransactionService(db)
        self.categories = CategoryService(self.transactions.db)

    def _range(self, user_id: str, from_: Optional[str], to: Optional[str]) -> List[Dict]:
        return self.transactions.list_transactions(user_id, TransactionFilters(from_=from_, to=to))

    def kpis(self, user_id: str, from_: Optional[str] = None, to: Optional[str] = None) -> ReportKPIs:
        """
        Income, expense, net (= income - expense) and count for a range.
        """
        txs = self._range(user_id, from_, to)
        income = sum(float(t["amount"]) for t in txs if t.get("type") == "income")
        expense = sum(float(t["amount"]) for t in txs if t.get("type") == "expense")
        return ReportKPIs(income=income, expense=expense, net=income - expense, count=len(txs))

    def breakdown(self, user_id: str, from_: Optional[str] = None, to: Optional[str] = None) -> List[BreakdownRow]:
        """
        Expense totals per category, largest first.

        Transactions without a category go to "Uncategorized"; ids that no
        longer resolve to a category are labelled "Unknown".
        """
        sums: Dict[Optional[str], float] = defaultdict(float)
        for t in self._range(user_id, from_, to):
            if t.get("type") != "expense":
                continue
            sums[t.get("category_id")] += float(t["amount"])

        names = self.categories.names_by_id(user_id)
        rows = [
            BreakdownRow(
                category_id=category_id,
                name=UNCATEGORIZED if category_id is None else (names.get(category_id) or UNKNOWN_CATEGORY),
                amount=amount,
            )
            for category_id, amount in sums.items()
        ]
        return sorted(rows, key=lambda r: r.amount, reverse=True)

    def trend(self, user_id: str, from_: Optional[str] = None, to: Optional[str] = None) -> List[TrendPoint]:
        """Income/expense per calendar month (YYYY-MM), oldest month first."""
        months: Dict[str, TrendPoint] = {}
        for t in self._range(user_id, from_, to):
            label = str(t.get("occurred_at", ""))[:7]
            point = months.setdefault(label, TrendPoint(label=label))
            if t.get("type") == "income":
                point.income += float(t["amount"])
            else:
                point.expense += float(t["amount"])
        return [months[label] for label in sorted(months)]
