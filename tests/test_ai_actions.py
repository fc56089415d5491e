"""Tests for the AI action pipeline (validate -> admit -> sanitize -> provider)."""

from typing import List

import pytest
import responses
from pydantic import ValidationError

from fintrack.core.exceptions import InputValidationError, ProviderCallError
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
from fintrack.services.ai_actions import (
    ACTIONS,
    AIActions,
    format_validation_error,
    parse_or_raise,
)
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.ai_plugin.openai_provider import DEFAULT_API_URL, OpenAIProvider


class RecordingProvider(AIProvider):
    """Records inputs; optionally fails every call."""

    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List = []

    def _record(self, data):
        self.calls.append(data)
        if self.fail:
            raise ProviderCallError("upstream said: secret internal detail", status_code=500)

    def summarize_report(self, data: ReportSummaryInput) -> str:
        self._record(data)
        return "summary"

    def suggest_category(self, data: CategorySuggestInput) -> CategorySuggestResult:
        self._record(data)
        return CategorySuggestResult(category_name="Food", confidence=0.5)

    def budget_coach(self, data: BudgetCoachInput) -> str:
        self._record(data)
        return "advice"

    def find_duplicates(self, data: DuplicatesInput) -> DuplicatesResult:
        self._record(data)
        return DuplicatesResult(ids=[])

    def nl_filter_to_query(self, data: NLFilterInput) -> NLFilterResult:
        self._record(data)
        return NLFilterResult(type="expense")


@pytest.fixture
def provider():
    return RecordingProvider()


@pytest.fixture
def actions(provider, limiter):
    return AIActions(provider, limiter)


def test_action_presets():
    assert {name: spec.limit.capacity for name, spec in ACTIONS.items()} == {
        "tx.suggestCategory": 12,
        "tx.findDuplicates": 6,
        "tx.nlFilter": 30,
        "budgets.coach": 6,
        "reports.summarize": 8,
    }


def test_success_envelope(actions):
    outcome = actions.suggest_category({"note": "lunch"}, "alice")
    assert outcome.status == 200
    assert outcome.body == {"ok": True, "categoryName": "Food", "confidence": 0.5}


def test_invalid_input_is_rejected_before_rate_limit(actions, limiter, provider):
    outcome = actions.nl_filter({"text": ""}, "alice")

    assert outcome.status == 400
    assert outcome.body["ok"] is False
    assert outcome.body["error"].startswith("text:")
    assert limiter.tokens("alice:tx.nlFilter") is None
    assert provider.calls == []


def test_non_object_payload(actions):
    outcome = actions.summarize_report(None, "alice")
    assert outcome.status == 400
    assert outcome.body["error"].startswith("(root):")


def test_rate_limited_after_capacity(actions, clock):
    for _ in range(6):
        assert actions.budget_coach(
            {"month": 8, "year": 2025, "budgets": [{"category": "Food", "planned": 1, "actual": 2}]}, "alice"
        ).ok

    outcome = actions.budget_coach(
        {"month": 8, "year": 2025, "budgets": [{"category": "Food", "planned": 1, "actual": 2}]}, "alice"
    )
    assert outcome.status == 429
    assert outcome.body == {"ok": False, "error": "Too many requests. Try again in 10s."}
    assert outcome.headers == {"Retry-After": "10"}

    # Other users and other actions have their own buckets
    assert actions.suggest_category({"note": "lunch"}, "bob").ok
    assert actions.nl_filter({"text": "food"}, "alice").ok


def test_missing_user_is_anonymous(actions, limiter):
    actions.nl_filter({"text": "food"}, None)
    assert limiter.tokens("anon:tx.nlFilter") == 29


def test_strings_are_capped_before_provider(actions, provider):
    actions.suggest_category({"note": "  " + "n" * 450 + "  ", "candidates": ["Food"]}, "alice")
    note = provider.calls[0].note
    assert len(note) == 300
    assert note.endswith("…")


def test_duplicates_list_is_capped(actions, provider):
    transactions = [
        {"id": f"t{i}", "amount": 1, "note": "x", "occurred_at": "2025-08-14T10:00:00Z"}
        for i in range(600)
    ]
    assert actions.find_duplicates({"transactions": transactions}, "alice").ok
    assert len(provider.calls[0].transactions) == 500


def test_budget_lines_are_capped(actions, provider):
    budgets = [{"category": f"C{i}", "planned": 1, "actual": 1} for i in range(250)]
    assert actions.budget_coach({"month": 1, "year": 2025, "budgets": budgets}, "alice").ok
    assert len(provider.calls[0].budgets) == 200


def test_numeric_strings_are_coerced(actions, provider):
    outcome = actions.summarize_report(
        {"from": "2025-08-01", "to": "2025-08-31", "income": "100", "expense": "40.5", "net": "59.5", "count": "3"},
        "alice",
    )
    assert outcome.ok
    assert provider.calls[0].expense == 40.5


def test_provider_failure_uses_safe_message(limiter):
    actions = AIActions(RecordingProvider(fail=True), limiter)
    outcome = actions.summarize_report(
        {"from": "2025-08-01", "to": "2025-08-31", "income": 1, "expense": 1, "net": 0, "count": 1},
        "alice",
    )
    assert outcome.status == 502
    assert outcome.body == {"ok": False, "error": "Unable to summarize report right now."}
    assert "secret internal detail" not in outcome.body["error"]


def test_parse_or_raise_flattens_errors():
    with pytest.raises(InputValidationError) as excinfo:
        parse_or_raise(BudgetCoachInput, {"month": 13, "year": 1999, "budgets": []})
    message = str(excinfo.value)
    assert "month:" in message
    assert "year:" in message
    assert "budgets:" in message
    assert message.count(";") == 2


def test_format_validation_error_nested_path():
    with pytest.raises(ValidationError) as excinfo:
        DuplicatesInput.model_validate({"transactions": [{"id": "a", "amount": -1, "occurred_at": "2025-08-14T10:00:00Z"}]})
    assert format_validation_error(excinfo.value).startswith("transactions.0.amount:")


@responses.activate
def test_malformed_openai_reply_is_a_safe_502(limiter):
    responses.add(responses.POST, DEFAULT_API_URL, json={"choices": [None]})
    actions = AIActions(OpenAIProvider(api_key="sk-test"), limiter)

    outcome = actions.nl_filter({"text": "food last month"}, "u1")

    assert outcome.status == 502
    assert outcome.body == {"ok": False, "error": "Failed to parse text"}
