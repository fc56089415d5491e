"""
FastAPI dependencies.

App-wide collaborators (AI provider, rate limiter, Firestore client) are
created once by create_app and kept on app.state; these functions hand them
to route handlers.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from fintrack.config.firebase import get_db
from fintrack.services.ai_actions import ANONYMOUS_USER, AIActions
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.budget_service import BudgetService
from fintrack.services.category_service import CategoryService
from fintrack.services.rate_limiter import RateLimiter
from fintrack.services.report_service import ReportService
from fintrack.services.transaction_service import TransactionService


def get_user_id(
    user_id: Optional[str] = Header(None, alias="X-User-ID", description="Caller id; anonymous when absent")
) -> str:
    return (user_id or "").strip() or ANONYMOUS_USER


def get_ai_provider(request: Request) -> AIProvider:
    return request.app.state.ai_provider


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter: RateLimiter = request.app.state.rate_limiter
    limiter.maybe_sweep(request.app.state.settings.RATE_LIMIT_IDLE_SECONDS * 1000)
    return limiter


def get_firestore(request: Request):
    """Firestore client injected at startup, or the global one."""
    db = getattr(request.app.state, "db", None)
    return db if db is not None else get_db()


def get_ai_actions(
    provider: AIProvider = Depends(get_ai_provider),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> AIActions:
    return AIActions(provider, limiter)


def get_category_service(db=Depends(get_firestore)) -> CategoryService:
    return CategoryService(db)


def get_optional_category_service(request: Request) -> Optional[CategoryService]:
    """Category service, or None when Firestore is not configured."""
    try:
        return CategoryService(get_firestore(request))
    except RuntimeError:
        return None


def get_transaction_service(db=Depends(get_firestore)) -> TransactionService:
    return TransactionService(db)


def get_budget_service(db=Depends(get_firestore)) -> BudgetService:
    return BudgetService(db)


def get_report_service(db=Depends(get_firestore)) -> ReportService:
    return ReportService(db)
