"""
AI action handlers - the request pipeline in front of the provider.

Every action runs the same steps, in this order:
1. Validate the raw payload (400 on failure, no token consumed)
2. Admit through the per-user, per-action token bucket (429 + retry-after)
3. Cap list sizes and sanitize every string leaf
4. Call the provider (502 with a fixed message on failure)

Outcomes are plain values (status + JSON body) so the HTTP layer only has to
copy them onto a response.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError

from fintrack.core.exceptions import AIError, InputValidationError
from fintrack.models.ai import (
    BudgetCoachInput,
    CategorySuggestInput,
    DuplicatesInput,
    NLFilterInput,
    ReportSummaryInput,
)
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.rate_limiter import RateLimiter, RateLimitOptions, per_minute
from fintrack.utils.sanitizer import sanitize_strings

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)

ANONYMOUS_USER = "anon"


@dataclass(frozen=True)
class ActionSpec:
    """Static configuration of one AI action."""
    name: str
    limit: RateLimitOptions
    max_string_len: int
    failure_message: str
    max_items: Optional[int] = None  # cap for the action's main list field


SUGGEST_CATEGORY = ActionSpec(
    name="tx.suggestCategory",
    limit=per_minute(12),
    max_string_len=300,
    failure_message="Failed to suggest category",
)
FIND_DUPLICATES = ActionSpec(
    name="tx.findDuplicates",
    limit=per_minute(6),
    max_string_len=200,
    failure_message="Failed to detect duplicates",
    max_items=500,
)
NL_FILTER = ActionSpec(
    name="tx.nlFilter",
    limit=per_minute(30),
    max_string_len=200,
    failure_message="Failed to parse text",
)
BUDGET_COACH = ActionSpec(
    name="budgets.coach",
    limit=per_minute(6),
    max_string_len=200,
    failure_message="Couldn't generate budget advice.",
    max_items=200,
)
REPORT_SUMMARY = ActionSpec(
    name="reports.summarize",
    limit=per_minute(8),
    max_string_len=300,
    failure_message="Unable to summarize report right now.",
)

ACTIONS: Dict[str, ActionSpec] = {
    spec.name: spec
    for spec in (SUGGEST_CATEGORY, FIND_DUPLICATES, NL_FILTER, BUDGET_COACH, REPORT_SUMMARY)
}


@dataclass
class ActionOutcome:
    """HTTP-ready result of an action."""
    status: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return bool(self.body.get("ok"))

    @classmethod
    def success(cls, **payload: Any) -> "ActionOutcome":
        return cls(status=200, body={"ok": True, **payload})

    @classmethod
    def failure(cls, status: int, error: str, headers: Optional[Dict[str, str]] = None) -> "ActionOutcome":
        return cls(status=status, body={"ok": False, "error": error}, headers=headers or {})


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into "path: message; path: message"."""
    parts = []
    for err in error.errors():
        path = ".".join(str(p) for p in err.get("loc", ())) or "(root)"
        parts.append(f"{path}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_or_raise(model: Type[InputT], raw: Any) -> InputT:
    """
    Validate raw input against model.

    Raises:
        InputValidationError: with a flattened, field-by-field message
    """
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise InputValidationError(format_validation_error(e)) from e


class AIActions:
    """
    Runs AI actions for one provider and one rate limiter.

    Built per request by a FastAPI dependency; both collaborators are the
    app-wide instances kept on app.state.
    """

    def __init__(self, provider: AIProvider, limiter: RateLimiter):
        self.provider = provider
        self.limiter = limiter

    def suggest_category(self, raw: Any, user_id: Optional[str] = None) -> ActionOutcome:
        def invoke(data: CategorySuggestInput) -> ActionOutcome:
            result = self.provider.suggest_category(data)
            return ActionOutcome.success(categoryName=result.category_name, confidence=result.confidence)

        return self._run(SUGGEST_CATEGORY, CategorySuggestInput, raw, user_id, invoke)

    def find_duplicates(self, raw: Any, user_id: Optional[str] = None) -> ActionOutcome:
        def invoke(data: DuplicatesInput) -> ActionOutcome:
            return ActionOutcome.success(ids=self.provider.find_duplicates(data).ids)

        return self._run(FIND_DUPLICATES, DuplicatesInput, raw, user_id, invoke, list_field="transactions")

    def nl_filter(self, raw: Any, user_id: Optional[str] = None) -> ActionOutcome:
        def invoke(data: NLFilterInput) -> ActionOutcome:
            return ActionOutcome.success(filter=self.provider.nl_filter_to_query(data).to_public())

        return self._run(NL_FILTER, NLFilterInput, raw, user_id, invoke)

    def budget_coach(self, raw: Any, user_id: Optional[str] = None) -> ActionOutcome:
        def invoke(data: BudgetCoachInput) -> ActionOutcome:
            return ActionOutcome.success(advice=self.provider.budget_coach(data))

        return self._run(BUDGET_COACH, BudgetCoachInput, raw, user_id, invoke, list_field="budgets")

    def summarize_report(self, raw: Any, user_id: Optional[str] = None) -> ActionOutcome:
        def invoke(data: ReportSummaryInput) -> ActionOutcome:
            return ActionOutcome.success(summary=self.provider.summarize_report(data))

        return self._run(REPORT_SUMMARY, ReportSummaryInput, raw, user_id, invoke)

    def _run(
        self,
        spec: ActionSpec,
        model: Type[InputT],
        raw: Any,
        user_id: Optional[str],
        invoke: Callable[[InputT], ActionOutcome],
        list_field: Optional[str] = None,
    ) -> ActionOutcome:
        user = (user_id or "").strip() or ANONYMOUS_USER

        # 1. Validate
        try:
            data = parse_or_raise(model, raw)
        except InputValidationError as e:
            return ActionOutcome.failure(400, str(e))

        # 2. Admit
        decision = self.limiter.consume(f"{user}:{spec.name}", spec.limit)
        if not decision.allowed:
            seconds = decision.retry_after_seconds
            logger.info(f"[AI][{spec.name}] rate limited, retry in {seconds}s")
            return ActionOutcome.failure(
                429,
                f"Too many requests. Try again in {seconds}s.",
                headers={"Retry-After": str(seconds)},
            )

        # 3. Cap + sanitize
        payload = data.model_dump(by_alias=True, exclude_none=True)
        if list_field and spec.max_items is not None:
            payload[list_field] = payload[list_field][: spec.max_items]
        safe = model.model_validate(sanitize_strings(payload, spec.max_string_len))

        # 4. Provider
        try:
            return invoke(safe)
        except AIError as e:
            logger.warning(
                f"[AI][{spec.name}] provider={self.provider.name} "
                f"authenticated={user != ANONYMOUS_USER} error={e}"
            )
            return ActionOutcome.failure(502, spec.failure_message)
