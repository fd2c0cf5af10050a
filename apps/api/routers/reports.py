"""
Reports API Router

Composes progress report drafts. Storing the report (and any later edits
to its summary or content) belongs to the caller.
"""

from fastapi import APIRouter

from core.config import settings
from core.exceptions import NotFoundError, ValidationError
from routers.analytics import unpack_case
from schemas import ReportComposeRequest
from services.report_narrative import compose_report, report_to_dict

router = APIRouter(prefix="/v1/reports", tags=["reports"])


@router.post("/compose")
def compose_report_endpoint(request: ReportComposeRequest):
    """
    Compose a report draft for one child over an inclusive date range.

    Without included_goal_ids, every active goal is considered. Goals with
    no trials in the period are left out of the draft.
    """
    if request.period_end < request.period_start:
        raise ValidationError("period_end must not be before period_start", field="period_end")

    child, goals, sessions = unpack_case(request)

    if request.included_goal_ids is not None:
        known = {g.id for g in goals}
        for goal_id in request.included_goal_ids:
            if goal_id not in known:
                raise NotFoundError("Goal", goal_id)

    draft = compose_report(
        child,
        goals,
        sessions,
        request.period_start,
        request.period_end,
        included_goal_ids=request.included_goal_ids,
        therapist_name=request.therapist_name,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
        prompt_threshold=settings.PROMPT_TREND_THRESHOLD,
        mastery_rate=settings.MASTERY_RATE,
        mastery_max_prompt_level=settings.MASTERY_MAX_PROMPT_LEVEL,
    )
    return {"child_id": child.id, **report_to_dict(draft)}
