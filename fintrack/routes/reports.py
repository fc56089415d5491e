"""
Report endpoints - KPIs, expense breakdown and monthly trend for a range.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fintrack.core.dependencies import get_report_service, get_user_id
from fintrack.models.ai import ISO_DATE_PATTERN
from fintrack.models.report import BreakdownRow, ReportKPIs, TrendPoint
from fintrack.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/kpis", response_model=ReportKPIs)
def kpis(
    from_: Optional[str] = Query(None, alias="from", pattern=ISO_DATE_PATTERN),
    to: Optional[str] = Query(None, pattern=ISO_DATE_PATTERN),
    user_id: str = Depends(get_user_id),
    service: ReportService = Depends(get_report_service),
):
    return service.kpis(user_id, from_, to)


@router.get("/breakdown", response_model=List[BreakdownRow])
def breakdown(
    from_: Optional[str] = Query(None, alias="from", pattern=ISO_DATE_PATTERN),
    to: Optional[str] = Query(None, pattern=ISO_DATE_PATTERN),
    user_id: str = Depends(get_user_id),
    service: ReportService = Depends(get_report_service),
):
    return service.breakdown(user_id, from_, to)


@router.get("/trend", response_model=List[TrendPoint])
def trend(
    from_: Optional[str] = Query(None, alias="from", pattern=ISO_DATE_PATTERN),
    to: Optional[str] = Query(None, pattern=ISO_DATE_PATTERN),
    user_id: str = Depends(get_user_id),
    service: ReportService = Depends(get_report_service),
):
    return service.trend(user_id, from_, to)
