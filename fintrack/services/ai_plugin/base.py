"""
AI Provider Base Interface.

Defines the contract for AI providers.
All AI providers (mock, OpenAI, Gemini) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

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


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    Every operation receives an already validated and sanitized input model.
    Remote providers raise ProviderCallError when the upstream call fails;
    callers are responsible for turning that into a safe message.
    """

    name: str = "base"

    @abstractmethod
    def summarize_report(self, data: ReportSummaryInput) -> str:
        """
        Produce a short natural-language summary of a date range.

        Args:
            data: Range and aggregate income/expense/net/count

        Returns:
            Summary text
        """
        pass

    @abstractmethod
    def suggest_category(self, data: CategorySuggestInput) -> CategorySuggestResult:
        """
        Guess a category for a free-text note.

        If the guess matches one of data.candidates (case-insensitive), the
        candidate's exact casing should be returned.
        """
        pass

    @abstractmethod
    def budget_coach(self, data: BudgetCoachInput) -> str:
        """Actionable guidance for a month, focused on overspent categories."""
        pass

    @abstractmethod
    def find_duplicates(self, data: DuplicatesInput) -> DuplicatesResult:
        """Return the ids judged to be probable duplicates of each other."""
        pass

    @abstractmethod
    def nl_filter_to_query(self, data: NLFilterInput) -> NLFilterResult:
        """Parse free text into a sparse transaction filter."""
        pass

    def get_model_info(self) -> Dict[str, Optional[str]]:
        """
        Get model information for diagnostics.

        Returns:
            Dict with 'provider', 'model' and 'endpoint' keys
        """
        return {"provider": self.name, "model": None, "endpoint": None}

    @staticmethod
    def prefer_candidate_casing(name: str, candidates: Optional[List[str]]) -> str:
        """Return the candidate matching name case-insensitively, else name."""
        for candidate in candidates or []:
            if candidate.lower() == name.lower():
                return candidate
        return name
