"""
Progress Series

Numeric series behind the case analytics charts: per-goal success rate
and prompt level by session date, and pooled success rate per session.
Drawing them is the front end's job.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Sequence

from services.case_records import Goal, SessionRecord, sort_sessions_asc
from services.trial_aggregation import aggregate

PROMPT_LEVEL_LABELS = ("Independent", "Verbal prompt", "Partial physical", "Full physical")

SESSION_SERIES_LIMIT = 10


@dataclass(frozen=True)
class SeriesPoint:
    date: date
    session_id: str
    values: Dict[str, float] = field(default_factory=dict)  # goal_id -> value


@dataclass(frozen=True)
class SessionRatePoint:
    date: date
    session_id: str
    child_id: str
    rate: float
    has_data: bool


def prompt_level_label(level: float) -> str:
    """Label for a (possibly averaged) prompt level, rounded half up and clamped."""
    index = int(math.floor(level + 0.5))
    index = min(max(index, 0), len(PROMPT_LEVEL_LABELS) - 1)
    return PROMPT_LEVEL_LABELS[index]


def _goal_series(sessions: Sequence[SessionRecord], goals: Iterable[Goal], value_of) -> List[SeriesPoint]:
    active_ids = {g.id for g in goals if g.is_active}
    points = []
    for session in sort_sessions_asc(sessions):
        values = {
            trial.goal_id: value_of(trial)
            for trial in session.trials
            if trial.goal_id in active_ids
        }
        points.append(SeriesPoint(date=session.date, session_id=session.id, values=values))
    return points


def success_rate_series(sessions: Sequence[SessionRecord], goals: Iterable[Goal]) -> List[SeriesPoint]:
    """Per-session success fraction for each active goal, oldest first."""
    return _goal_series(sessions, goals, lambda t: aggregate([t]).rate)


def prompt_level_series(sessions: Sequence[SessionRecord], goals: Iterable[Goal]) -> List[SeriesPoint]:
    """Per-session prompt level for each active goal, oldest first."""
    return _goal_series(sessions, goals, lambda t: float(t.prompt_level))


def session_rate_series(
    sessions: Sequence[SessionRecord],
    limit: int = SESSION_SERIES_LIMIT,
) -> List[SessionRatePoint]:
    """Pooled rate of the last `limit` sessions, oldest first."""
    ordered = sort_sessions_asc(sessions)
    recent = ordered[-limit:] if limit > 0 else []
    points = []
    for session in recent:
        agg = aggregate(session.trials)
        points.append(SessionRatePoint(
            date=session.date,
            session_id=session.id,
            child_id=session.child_id,
            rate=agg.rate,
            has_data=agg.has_data,
        ))
    return points


def series_to_dict(points: List[SeriesPoint]) -> List[dict]:
    return [
        {"date": p.date.isoformat(), "session_id": p.session_id, "values": dict(p.values)}
        for p in points
    ]


def session_rates_to_dict(points: List[SessionRatePoint]) -> List[dict]:
    return [
        {
            "date": p.date.isoformat(),
            "session_id": p.session_id,
            "child_id": p.child_id,
            "rate": p.rate,
            "has_data": p.has_data,
        }
        for p in points
    ]
