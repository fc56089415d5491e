"""
AI endpoints - thin HTTP wrappers around AIActions plus provider diagnostics.

Action endpoints accept any JSON body: shape errors are reported by the
action pipeline as 400 with {"ok": false, "error": ...}, before any
rate-limit token is spent.
"""

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Body, Depends, Path, Request
from fastapi.responses import JSONResponse

from fintrack.core.dependencies import (
    get_ai_actions,
    get_ai_provider,
    get_budget_service,
    get_optional_category_service,
    get_report_service,
    get_user_id,
)
from fintrack.core.exceptions import AIError
from fintrack.models.ai import NLFilterInput
from fintrack.models.report import DateRange
from fintrack.services.ai_actions import ActionOutcome, AIActions
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.ai_plugin.gemini_provider import GeminiAIProvider
from fintrack.services.budget_service import BudgetService
from fintrack.services.category_service import CategoryService
from fintrack.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])

PING_TEXT = "groceries last month under 2000 expense"


def _respond(outcome: ActionOutcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status, content=outcome.body, headers=outcome.headers or None)


# ---- Actions ---------------------------------------------------------------

@router.post("/suggest-category")
def suggest_category(
    payload: Any = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
):
    """Suggest a category for a transaction note: {note, candidates?}."""
    return _respond(actions.suggest_category(payload, user_id))


@router.post("/find-duplicates")
def find_duplicates(
    payload: Any = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
):
    """Flag probable duplicate transactions: {transactions: [...]}."""
    return _respond(actions.find_duplicates(payload, user_id))


@router.post("/nl-filter")
def nl_filter(
    payload: Any = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
    categories: Optional[CategoryService] = Depends(get_optional_category_service),
):
    """
    Turn free text ("food last month under 500") into a transaction filter.

    Providers answer with a category name; when the caller has a category of
    that name, categoryId is replaced by its id.
    """
    outcome = actions.nl_filter(payload, user_id)
    query = outcome.body.get("filter") if outcome.ok else None
    if query and query.get("categoryId") and categories is not None:
        match = categories.find_by_name(user_id, query["categoryId"])
        if match:
            query["categoryId"] = match["id"]
    return _respond(outcome)


@router.post("/budget-coach")
def budget_coach(
    payload: Any = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
):
    """Advice for a month's budgets: {month, year, budgets: [{category, planned, actual}]}."""
    return _respond(actions.budget_coach(payload, user_id))


@router.post("/report-summary")
def report_summary(
    payload: Any = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
):
    """Summarize KPIs for a range: {from, to, income, expense, net, count}."""
    return _respond(actions.summarize_report(payload, user_id))


# ---- Ledger-backed actions -------------------------------------------------

@router.post("/budget-coach/{year}/{month}")
def budget_coach_for_month(
    year: int = Path(..., ge=2000, le=2100),
    month: int = Path(..., ge=1, le=12),
    payload: Optional[Dict[str, Any]] = Body(None),
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
    budgets: BudgetService = Depends(get_budget_service),
):
    """
    Budget coach over the caller's stored budgets for a month.

    Optional body: {"question": "..."}.
    """
    lines = [
        {"category": p.category, "planned": p.planned, "actual": p.actual}
        for p in budgets.budget_progress(user_id, month, year)
    ]
    raw: Dict[str, Any] = {"month": month, "year": year, "budgets": lines}
    if payload and payload.get("question"):
        raw["question"] = payload["question"]
    return _respond(actions.budget_coach(raw, user_id))


@router.post("/report-summary/range")
def report_summary_for_range(
    date_range: DateRange,
    user_id: str = Depends(get_user_id),
    actions: AIActions = Depends(get_ai_actions),
    reports: ReportService = Depends(get_report_service),
):
    """Summarize the caller's stored transactions for {from, to}."""
    kpis = reports.kpis(user_id, date_range.from_, date_range.to)
    raw = {"from": date_range.from_, "to": date_range.to, **kpis.model_dump()}
    return _respond(actions.summarize_report(raw, user_id))


# ---- Diagnostics -----------------------------------------------------------

@router.get("/provider")
def provider_info(request: Request, provider: AIProvider = Depends(get_ai_provider)):
    """Which provider is active, and what was configured."""
    return {
        "provider": provider.name,
        "configured": request.app.state.settings.AI_PROVIDER,
    }


@router.get("/model")
def model_info(provider: AIProvider = Depends(get_ai_provider)):
    """Model name and endpoint of the active provider."""
    return provider.get_model_info()


@router.get("/ping")
def ping(provider: AIProvider = Depends(get_ai_provider)):
    """One round trip through the active provider with a fixed query."""
    try:
        result = provider.nl_filter_to_query(NLFilterInput(text=PING_TEXT))
    except AIError as e:
        logger.warning(f"[AI][ping] provider={provider.name} error={e}")
        return JSONResponse(status_code=502, content={"ok": False, "error": "AI provider ping failed"})
    return {"ok": True, "provider": provider.name, "res": result.to_public()}


@router.get("/gemini-models")
def gemini_models(provider: AIProvider = Depends(get_ai_provider)):
    """Models visible to the configured Gemini key."""
    if not isinstance(provider, GeminiAIProvider):
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": "Active AI provider is not gemini"},
        )
    try:
        return provider.list_models()
    except AIError as e:
        logger.warning(f"[AI][gemini-models] error={e}")
        return JSONResponse(status_code=502, content={"ok": False, "error": "Could not list Gemini models"})
