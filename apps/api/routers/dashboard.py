"""
Dashboard API Router

Center-wide numbers for admins: caseload KPIs, children needing a
monthly report, and decline alerts.
"""

from fastapi import APIRouter

from core.config import settings
from schemas import DashboardRequest
from services.caseload_summary import dashboard_summary, dashboard_to_dict

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])


@router.post("/summary")
def dashboard_summary_endpoint(request: DashboardRequest):
    summary = dashboard_summary(
        children=[c.to_record() for c in request.children],
        sessions=[s.to_record() for s in request.sessions],
        reports=[r.to_record() for r in request.reports],
        as_of=request.as_of,
        recent_days=settings.DASHBOARD_RECENT_DAYS,
        decline_window=settings.DECLINE_WINDOW_SESSIONS,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
    )
    return dashboard_to_dict(summary)
