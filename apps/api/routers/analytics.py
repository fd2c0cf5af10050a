"""
Analytics API Router

Case-level analytics for one child: per-goal statistics, insights, chart
series, overview numbers and the recomputed trend label.

The caller posts the snapshot it already holds; nothing is stored here.
"""

from typing import List, Tuple

from fastapi import APIRouter

from core.config import settings
from schemas import CaseSnapshot
from services.case_records import Child, Goal, SessionRecord, sessions_for_child
from services.caseload_summary import case_overview, case_overview_to_dict
from services.child_trend import update_child_trend
from services.goal_statistics import build_all_goal_stats, goal_stat_to_dict
from services.insight_generator import generate_case_insights, insights_to_dict
from services.progress_series import (
    prompt_level_series,
    series_to_dict,
    session_rate_series,
    session_rates_to_dict,
    success_rate_series,
)

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


def unpack_case(snapshot: CaseSnapshot) -> Tuple[Child, List[Goal], List[SessionRecord]]:
    """Snapshot -> domain records, keeping only this child's goals and sessions."""
    child = snapshot.child.to_record()
    goals = [g.to_record() for g in snapshot.goals if g.child_id == child.id]
    sessions = sessions_for_child((s.to_record() for s in snapshot.sessions), child.id)
    return child, goals, sessions


@router.post("/goal-stats")
def goal_stats_endpoint(snapshot: CaseSnapshot):
    """
    Per-goal statistics over all of the child's sessions.

    Goals without any recorded trials are omitted.
    """
    child, goals, sessions = unpack_case(snapshot)
    stats = build_all_goal_stats(
        goals,
        sessions,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
        prompt_threshold=settings.PROMPT_TREND_THRESHOLD,
        mastery_rate=settings.MASTERY_RATE,
        mastery_max_prompt_level=settings.MASTERY_MAX_PROMPT_LEVEL,
    )
    return {
        "child_id": child.id,
        "goal_stats": [goal_stat_to_dict(s) for s in stats],
    }


@router.post("/insights")
def insights_endpoint(snapshot: CaseSnapshot):
    """Insights from the most recent session window vs the one before it."""
    child, goals, sessions = unpack_case(snapshot)
    insights = generate_case_insights(
        goals,
        sessions,
        window_size=settings.CASE_WINDOW_SESSIONS,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
        prompt_threshold=settings.PROMPT_TREND_THRESHOLD,
        min_trials=settings.INSIGHT_MIN_TRIALS,
        mastery_rate=settings.MASTERY_RATE,
        mastery_max_prompt_level=settings.MASTERY_MAX_PROMPT_LEVEL,
        problem_behavior_limit=settings.PROBLEM_BEHAVIOR_ALERT_COUNT,
        max_insights=settings.MAX_INSIGHTS,
    )
    return {"child_id": child.id, "insights": insights_to_dict(insights)}


@router.post("/series")
def series_endpoint(snapshot: CaseSnapshot):
    """Chart series: success rate and prompt level per active goal, pooled rate per session."""
    child, goals, sessions = unpack_case(snapshot)
    return {
        "child_id": child.id,
        "success_rate": series_to_dict(success_rate_series(sessions, goals)),
        "prompt_level": series_to_dict(prompt_level_series(sessions, goals)),
        "session_rates": session_rates_to_dict(session_rate_series(sessions)),
    }


@router.post("/overview")
def overview_endpoint(snapshot: CaseSnapshot):
    child, goals, sessions = unpack_case(snapshot)
    return {"child_id": child.id, **case_overview_to_dict(case_overview(sessions, goals))}


@router.post("/child-trend")
def child_trend_endpoint(snapshot: CaseSnapshot):
    """
    Recompute the child's trend label from the full session history.

    The caller writes the returned value back to the child record.
    """
    child, _, sessions = unpack_case(snapshot)
    trend = update_child_trend(
        sessions,
        window_size=settings.CASE_WINDOW_SESSIONS,
        rate_threshold=settings.RATE_TREND_THRESHOLD,
    )
    return {
        "child_id": child.id,
        "previous_trend": child.trend.value,
        "trend": trend.value,
        "changed": trend != child.trend,
    }
