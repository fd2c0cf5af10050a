"""
Parent API Router

Guardian-facing session summary for one child.
"""

from fastapi import APIRouter

from core.config import settings
from routers.analytics import unpack_case
from schemas import CaseSnapshot
from services.caseload_summary import parent_summary, parent_summary_to_dict

router = APIRouter(prefix="/v1/parent", tags=["parent"])


@router.post("/summary")
def parent_summary_endpoint(snapshot: CaseSnapshot):
    child, goals, sessions = unpack_case(snapshot)
    summary = parent_summary(
        sessions,
        goals,
        window_size=settings.PARENT_WINDOW_SESSIONS,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
    )
    return {"child_id": child.id, **parent_summary_to_dict(summary)}
