"""
Mock AI Provider - deterministic, offline provider.

Provides rule-based answers without external AI calls.
Default provider and the fallback when a remote provider cannot be loaded.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple
import logging
import re

from fintrack.models.ai import (
    BudgetCoachInput,
    CategorySuggestInput,
    CategorySuggestResult,
    DuplicatesInput,
    DuplicatesResult,
    NLFilterInput,
    NLFilterResult,
    ReportSummaryInput,
)
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.utils.formatting import format_inr, round_half_up
from fintrack.utils.sanitizer import clamp, sanitize_text

logger = logging.getLogger(__name__)


# Keyword -> category table. Longer keywords score higher.
CATEGORY_KEYWORDS: List[Tuple[List[str], str]] = [
    (["uber", "ola", "fuel", "petrol", "diesel", "metro", "bus", "cab", "train", "flight", "airfare"], "Transport"),
    (["grocery", "groceries", "swiggy", "zomato", "restaurant", "food", "dinner", "lunch", "breakfast", "snacks", "cafe"], "Food"),
    (["rent", "landlord", "lease"], "Rent"),
    (["electricity", "power", "bescom", "tneb", "mahavitaran", "water", "gas", "internet", "wifi", "broadband", "mobile", "recharge", "dth"], "Utilities"),
    (["medicine", "pharmacy", "doctor", "hospital", "clinic", "lab"], "Health"),
    (["amazon", "flipkart", "myntra", "nykaa", "shopping", "clothes", "apparel", "shoes"], "Shopping"),
    (["salary", "stipend", "payout", "freelance", "invoice", "payment received"], "Income"),
    (["school", "tuition", "course", "udemy", "coursera", "byju"], "Education"),
    (["emi", "loan", "interest", "credit card"], "Debt"),
    (["gift", "donation", "charity"], "Gifts/Donations"),
]

DEFAULT_CATEGORY = "Other"
DEFAULT_CONFIDENCE = 0.1

INCOME_PATTERN = re.compile(r"\b(income|salary|received)\b")
EXPENSE_PATTERN = re.compile(r"\b(expense|spent|pay|paid|purchase)\b")
MAX_AMOUNT_PATTERN = re.compile(r"(?:\b(?:under|less than)|<=?)\s*([0-9]+)\b")
LAST_MONTH_PATTERN = re.compile(r"\blast month\b")
FOOD_PATTERN = re.compile(r"\b(grocery|groceries|food|restaurant|swiggy|zomato)\b")
TRANSPORT_PATTERN = re.compile(r"\b(uber|ola|metro|bus|fuel|petrol|diesel)\b")

NOTE_STRIP_PATTERN = re.compile(r"[^a-z0-9 ]+")
NOTE_MAX_LEN = 40
NOTE_PREFIX_LEN = 10

COACH_TOP_N = 5
GENERAL_TIPS = (
    "General tips: move recurring bills to early-in-month, use category-level "
    "alerts at 80/100%, and review weekly."
)


class MockAIProvider(AIProvider):
    """
    Mock AI provider using keyword tables and simple arithmetic.

    This is the provider when:
    - AI_PROVIDER is unset or "mock"
    - The configured remote provider cannot be loaded
    - AI_PROVIDER names an unknown provider

    Same input always yields the same output. The only outside input is
    "today", used to resolve "last month" in nl_filter_to_query.
    """

    name = "mock"
    MODEL_NAME = "mock-rules-v1"

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self._today = today or date.today
        logger.info(f"✅ Mock AI Provider initialized: {self.MODEL_NAME}")

    def get_model_info(self) -> Dict[str, Optional[str]]:
        return {"provider": self.name, "model": self.MODEL_NAME, "endpoint": None}

    def summarize_report(self, data: ReportSummaryInput) -> str:
        burn = (data.expense / max(1, data.income)) * 100 if data.income > 0 else 0
        direction = "surplus" if data.net >= 0 else "deficit"
        return " ".join([
            f"Summary for {data.from_} → {data.to}:",
            f"• Transactions: {data.count}",
            f"• Income: ₹{format_inr(data.income)}",
            f"• Expense: ₹{format_inr(data.expense)} ({burn:.1f}% of income)",
            f"• Net: ₹{format_inr(data.net)} ({direction})",
            "Tip: Keep fixed costs ≤ 50% of income and discretionary ≤ 30%.",
        ])

    def suggest_category(self, data: CategorySuggestInput) -> CategorySuggestResult:
        note = sanitize_text(data.note, 200).lower()

        best_name, best_score = DEFAULT_CATEGORY, DEFAULT_CONFIDENCE
        for keywords, category in CATEGORY_KEYWORDS:
            for keyword in keywords:
                if keyword in note:
                    score = clamp(len(keyword) / 10, 0.3, 0.95)
                    if score > best_score:
                        best_name, best_score = category, score

        best_name = self.prefer_candidate_casing(best_name, data.candidates)
        return CategorySuggestResult(category_name=best_name, confidence=best_score)

    def budget_coach(self, data: BudgetCoachInput) -> str:
        overs = sorted(
            (b for b in data.budgets if b.actual - b.planned > 0),
            key=lambda b: b.actual - b.planned,
            reverse=True,
        )

        period = f"{data.month}/{data.year}"
        if not overs:
            return (
                f"Nice work for {period}! All categories are within budget. "
                "Consider increasing savings or debt repayment."
            )

        noun = "categories are" if len(overs) > 1 else "category is"
        lines = [f"For {period}, {len(overs)} {noun} over budget."]

        for b in overs[:COACH_TOP_N]:
            diff = b.actual - b.planned
            over_pct = (diff / max(1, b.planned)) * 100
            next_plan = max(0, round_half_up(b.planned * 0.9))  # 10% tighter next month
            lines.append(
                f"• {b.category}: overspent by ₹{format_inr(diff)} ({over_pct:.1f}%). "
                f"Try: cap discretionary, set alerts at 80%, plan next month = "
                f"₹{format_inr(next_plan)} if feasible."
            )

        lines.append(GENERAL_TIPS)
        return " ".join(lines)

    def find_duplicates(self, data: DuplicatesInput) -> DuplicatesResult:
        """
        Same calendar day + same rounded amount + same 10-char note prefix.

        Within a (day, amount) group, notes are sorted and only adjacent pairs
        are compared, so a chain A~B~C is caught only when every neighbouring
        pair shares the prefix.
        """
        groups: Dict[Tuple[str, int], List[Tuple[str, str]]] = defaultdict(list)
        for txn in data.transactions:
            key = (txn.occurred_at[:10], round_half_up(txn.amount))
            groups[key].append((self._normalize_note(txn.note), txn.id))

        ids: List[str] = []
        for entries in groups.values():
            if len(entries) < 2:
                continue
            entries.sort(key=lambda e: e[0])
            for (prev_note, prev_id), (cur_note, cur_id) in zip(entries, entries[1:]):
                if prev_note[:NOTE_PREFIX_LEN] == cur_note[:NOTE_PREFIX_LEN]:
                    ids.extend([prev_id, cur_id])

        return DuplicatesResult(ids=ids)

    def nl_filter_to_query(self, data: NLFilterInput) -> NLFilterResult:
        text = sanitize_text(data.text, 200).lower()
        result = NLFilterResult()

        # 1. TYPE (tested independently; a later match overwrites)
        if INCOME_PATTERN.search(text):
            result.type = "income"
        if EXPENSE_PATTERN.search(text):
            result.type = "expense"

        # 2. AMOUNT CEILING
        amount_match = MAX_AMOUNT_PATTERN.search(text)
        if amount_match:
            result.max_amount = float(amount_match.group(1))

        # 3. RELATIVE DATES
        if LAST_MONTH_PATTERN.search(text):
            first_of_this_month = self._today().replace(day=1)
            last_month_end = first_of_this_month - timedelta(days=1)
            result.from_ = last_month_end.replace(day=1).isoformat()
            result.to = last_month_end.isoformat()

        # 4. CATEGORY NAME (caller maps name -> id)
        if FOOD_PATTERN.search(text):
            result.category_id = "Food"
        if TRANSPORT_PATTERN.search(text):
            result.category_id = "Transport"

        return result

    @staticmethod
    def _normalize_note(note: Optional[str]) -> str:
        cleaned = NOTE_STRIP_PATTERN.sub("", (note or "").lower()).strip()
        return cleaned[:NOTE_MAX_LEN]
