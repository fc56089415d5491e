"""
Shared plumbing for HTTP-backed AI providers.

Each operation is sent as a small JSON "task" document; the model is asked to
answer with JSON only, and the answer is validated through the result models.
Subclasses implement _call_json (one upstream round trip, parsed JSON back).
"""

from abc import abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar
import json
import logging

from pydantic import BaseModel, ValidationError
import requests

from fintrack.core.exceptions import ProviderCallError
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
from fintrack.utils.sanitizer import sanitize_text

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

# Per-field bounds applied again right before text leaves the process
CATEGORY_NOTE_MAX = 300
DUPLICATE_NOTE_MAX = 120
NL_TEXT_MAX = 200
QUESTION_MAX = 200


class RemoteAIProvider(AIProvider):
    """
    Base class for providers that call an external language-model API.

    System prompts live in SYSTEM_PROMPTS so each vendor can tune wording
    without touching the request/response handling.
    """

    SYSTEM_PROMPTS: Dict[str, str] = {
        "summarizeReport": "You are a concise finance assistant. Return JSON: {\"text\": string}.",
        "suggestCategory": "Return JSON: {\"categoryName\": string, \"confidence\": number}",
        "budgetCoach": "Return JSON: {\"text\": string}. Keep it actionable and brief.",
        "findDuplicates": "Return JSON: {\"ids\": string[]}.",
        "nlFilterToQuery": (
            "Return JSON: {\"type?\":\"income|expense\",\"categoryId?\":string,"
            "\"from?\":string,\"to?\":string,\"maxAmount?\":number}"
        ),
    }

    def __init__(self, timeout_seconds: float = 20.0, session: Optional[requests.Session] = None):
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @abstractmethod
    def _call_json(self, system: str, user: str) -> Any:
        """
        Perform one logical model call and return the parsed JSON answer.

        Raises:
            ProviderCallError: non-2xx response, transport failure, or an
                answer that is not JSON
        """
        pass

    def summarize_report(self, data: ReportSummaryInput) -> str:
        user = self._task("summarizeReport", input=data.model_dump(by_alias=True))
        return self._text(self._call_json(self.SYSTEM_PROMPTS["summarizeReport"], user))

    def suggest_category(self, data: CategorySuggestInput) -> CategorySuggestResult:
        user = self._task(
            "suggestCategory",
            note=sanitize_text(data.note, CATEGORY_NOTE_MAX),
            candidates=data.candidates or [],
        )
        answer = self._call_json(self.SYSTEM_PROMPTS["suggestCategory"], user)
        result = self._validate(CategorySuggestResult, answer)
        result.category_name = self.prefer_candidate_casing(result.category_name, data.candidates)
        return result

    def budget_coach(self, data: BudgetCoachInput) -> str:
        payload = data.model_dump(exclude_none=True)
        if data.question:
            payload["question"] = sanitize_text(data.question, QUESTION_MAX)
        user = self._task("budgetCoach", input=payload)
        return self._text(self._call_json(self.SYSTEM_PROMPTS["budgetCoach"], user))

    def find_duplicates(self, data: DuplicatesInput) -> DuplicatesResult:
        transactions = [
            {
                "id": t.id,
                "amount": t.amount,
                "note": sanitize_text(t.note, DUPLICATE_NOTE_MAX),
                "occurred_at": t.occurred_at,
            }
            for t in data.transactions
        ]
        user = self._task("findDuplicates", transactions=transactions)
        answer = self._call_json(self.SYSTEM_PROMPTS["findDuplicates"], user)
        return self._validate(DuplicatesResult, answer)

    def nl_filter_to_query(self, data: NLFilterInput) -> NLFilterResult:
        user = self._task("nlFilterToQuery", text=sanitize_text(data.text, NL_TEXT_MAX))
        answer = self._call_json(self.SYSTEM_PROMPTS["nlFilterToQuery"], user)
        return self._validate(NLFilterResult, answer)

    @staticmethod
    def _task(task: str, **fields: Any) -> str:
        return json.dumps({"task": task, **fields}, ensure_ascii=False)

    def _text(self, answer: Any) -> str:
        if not isinstance(answer, dict):
            raise ProviderCallError(f"{self.name} returned an unexpected JSON shape")
        text = answer.get("text")
        return text if isinstance(text, str) else ""

    def _validate(self, model: Type[ResultT], answer: Any) -> ResultT:
        if not isinstance(answer, dict):
            raise ProviderCallError(f"{self.name} returned an unexpected JSON shape")
        try:
            return model.model_validate(answer)
        except ValidationError as e:
            logger.debug(f"{self.name} answer failed validation: {e}")
            raise ProviderCallError(f"{self.name} returned an invalid {model.__name__}") from e
