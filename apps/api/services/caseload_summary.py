"""
Caseload Summaries

Roll-ups for the three audiences of the analytics engine:
- case overview    (therapist, one child)
- dashboard        (center admin, all children)
- parent summary   (guardian, their child's sessions)

All of them are built from the shared aggregation and window comparison
so the numbers agree between screens.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from services.case_records import (
    Child,
    ChildStatus,
    Goal,
    ReportRecord,
    SessionRecord,
    Trend,
    group_sessions_by_child,
    sort_sessions_desc,
    trials_for_goal,
)
from services.decline_alerts import DECLINE_WINDOW_SESSIONS, DeclineAlert, declines_to_dict, scan_for_declines
from services.progress_series import SessionRatePoint, session_rate_series, session_rates_to_dict
from services.trend_classifier import DEFAULT_RATE_THRESHOLD, compare_windows
from services.trial_aggregation import aggregate, aggregate_sessions

logger = logging.getLogger(__name__)

DASHBOARD_RECENT_DAYS = 7
DASHBOARD_RECENT_SESSIONS = 5
PARENT_WINDOW_SESSIONS = 3


# =============================================================================
# CASE OVERVIEW
# =============================================================================

@dataclass(frozen=True)
class CaseOverview:
    total_sessions: int
    active_goals: int
    average_rate: float


def case_overview(sessions: Sequence[SessionRecord], goals: Iterable[Goal]) -> CaseOverview:
    return CaseOverview(
        total_sessions=len(sessions),
        active_goals=sum(1 for g in goals if g.is_active),
        average_rate=aggregate_sessions(sessions).rate,
    )


# =============================================================================
# DASHBOARD
# =============================================================================

@dataclass(frozen=True)
class RecentSession:
    session_id: str
    child_id: str
    child_name: Optional[str]
    date: date
    rate: float
    has_data: bool
    goal_count: int


@dataclass(frozen=True)
class DashboardSummary:
    active_cases: int
    sessions_last_7_days: int
    average_success_rate: float
    report_count: int
    children_needing_reports: List[Child]
    children_trending_down: List[Child]
    declines: List[DeclineAlert]
    recent_sessions: List[RecentSession]


def dashboard_summary(
    children: Sequence[Child],
    sessions: Sequence[SessionRecord],
    reports: Sequence[ReportRecord],
    as_of: date,
    recent_days: int = DASHBOARD_RECENT_DAYS,
    decline_window: int = DECLINE_WINDOW_SESSIONS,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
) -> DashboardSummary:
    """
    Center-wide summary as of a given day.

    `as_of` is passed in rather than read from the clock so results are
    reproducible. "Recent" means the last recent_days calendar days,
    as_of included.
    """
    cutoff = as_of - timedelta(days=recent_days - 1)
    current_period = as_of.strftime("%Y-%m")
    reported = {r.child_id for r in reports if r.period == current_period}
    names = {c.id: c.name for c in children}

    active = [c for c in children if c.status == ChildStatus.ACTIVE]

    recent = []
    for session in sort_sessions_desc(sessions)[:DASHBOARD_RECENT_SESSIONS]:
        agg = aggregate(session.trials)
        recent.append(RecentSession(
            session_id=session.id,
            child_id=session.child_id,
            child_name=names.get(session.child_id),
            date=session.date,
            rate=agg.rate,
            has_data=agg.has_data,
            goal_count=len(session.trials),
        ))

    declines = scan_for_declines(
        children,
        group_sessions_by_child(sessions),
        window_size=decline_window,
        rate_threshold=rate_threshold,
    )
    logger.debug("Dashboard as of %s: %d decline alerts", as_of.isoformat(), len(declines))

    return DashboardSummary(
        active_cases=len(active),
        sessions_last_7_days=sum(1 for s in sessions if cutoff <= s.date <= as_of),
        average_success_rate=aggregate_sessions(sessions).rate,
        report_count=len(reports),
        children_needing_reports=[c for c in active if c.id not in reported],
        children_trending_down=[c for c in children if c.trend == Trend.DOWN],
        declines=declines,
        recent_sessions=recent,
    )


# =============================================================================
# PARENT SUMMARY
# =============================================================================

@dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    rate: float
    trend: Trend
    session_count: int


@dataclass(frozen=True)
class ParentSummary:
    total_sessions: int
    active_goals: int
    average_rate: float
    recent_rate: float
    trend: Trend
    goals: List[GoalProgress]
    session_rates: List[SessionRatePoint]


def parent_summary(
    sessions: Sequence[SessionRecord],
    goals: Sequence[Goal],
    window_size: int = PARENT_WINDOW_SESSIONS,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
) -> ParentSummary:
    """Guardian-facing summary: overall and per-goal direction over short windows."""
    active_goals = [g for g in goals if g.is_active]
    overall = compare_windows(sessions, window_size, rate_threshold=rate_threshold)

    progress = []
    for goal in active_goals:
        goal_sessions = [s for s in sessions if s.trial_for(goal.id) is not None]
        comparison = compare_windows(goal_sessions, window_size, goal_id=goal.id, rate_threshold=rate_threshold)
        progress.append(GoalProgress(
            goal=goal,
            rate=aggregate(trials_for_goal(goal_sessions, goal.id)).rate,
            trend=comparison.trend.rate_trend,
            session_count=len(goal_sessions),
        ))

    return ParentSummary(
        total_sessions=len(sessions),
        active_goals=len(active_goals),
        average_rate=aggregate_sessions(sessions).rate,
        recent_rate=overall.recent.rate,
        trend=overall.trend.rate_trend,
        goals=progress,
        session_rates=session_rate_series(sessions),
    )


# =============================================================================
# SERIALIZATION
# =============================================================================

def _child_ref(child: Child) -> Dict:
    return {"id": child.id, "name": child.name, "trend": child.trend.value}


def case_overview_to_dict(overview: CaseOverview) -> Dict:
    return {
        "total_sessions": overview.total_sessions,
        "active_goals": overview.active_goals,
        "average_rate": overview.average_rate,
    }


def dashboard_to_dict(summary: DashboardSummary) -> Dict:
    return {
        "active_cases": summary.active_cases,
        "sessions_last_7_days": summary.sessions_last_7_days,
        "average_success_rate": summary.average_success_rate,
        "report_count": summary.report_count,
        "children_needing_reports": [_child_ref(c) for c in summary.children_needing_reports],
        "children_trending_down": [_child_ref(c) for c in summary.children_trending_down],
        "declines": declines_to_dict(summary.declines),
        "recent_sessions": [
            {
                "session_id": s.session_id,
                "child_id": s.child_id,
                "child_name": s.child_name,
                "date": s.date.isoformat(),
                "rate": s.rate,
                "has_data": s.has_data,
                "goal_count": s.goal_count,
            }
            for s in summary.recent_sessions
        ],
    }


def parent_summary_to_dict(summary: ParentSummary) -> Dict:
    return {
        "total_sessions": summary.total_sessions,
        "active_goals": summary.active_goals,
        "average_rate": summary.average_rate,
        "recent_rate": summary.recent_rate,
        "trend": summary.trend.value,
        "goals": [
            {
                "goal_id": g.goal.id,
                "title": g.goal.title,
                "rate": g.rate,
                "trend": g.trend.value,
                "session_count": g.session_count,
            }
            for g in summary.goals
        ],
        "session_rates": session_rates_to_dict(summary.session_rates),
    }
