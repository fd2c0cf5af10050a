"""
Case Records

Read-only snapshots of the records the analytics engine consumes:
children, goals, sessions and the per-goal trial rows inside a session.

Records arrive already validated (successes <= trials, prompt level in
0..3). Everything here is frozen; derived values are always returned as
new objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class Trend(str, Enum):
    """Three-way direction of change between two windows."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    MASTERED = "mastered"
    PAUSED = "paused"


class ChildStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class TrialRecord:
    """One goal's trial block within a session."""
    goal_id: str
    trials_attempted: int
    successes: int
    prompt_level: int  # 0 independent .. 3 full physical
    problem_behavior_count: int = 0


@dataclass(frozen=True)
class SessionRecord:
    id: str
    child_id: str
    date: date
    trials: Tuple[TrialRecord, ...] = ()
    therapist_id: Optional[str] = None
    duration_minutes: int = 0
    notes: str = ""
    created_at: Optional[datetime] = None

    def trial_for(self, goal_id: str) -> Optional[TrialRecord]:
        """Return this session's trial block for a goal, if recorded."""
        for trial in self.trials:
            if trial.goal_id == goal_id:
                return trial
        return None


@dataclass(frozen=True)
class Goal:
    id: str
    child_id: str
    title: str
    category: str = ""
    status: GoalStatus = GoalStatus.ACTIVE
    description: str = ""
    target_criteria: str = ""
    created_at: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status == GoalStatus.ACTIVE


@dataclass(frozen=True)
class Child:
    id: str
    name: str
    trend: Trend = Trend.STABLE
    status: ChildStatus = ChildStatus.ACTIVE
    last_session_date: Optional[date] = None
    therapist_id: Optional[str] = None
    guardian_name: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ReportRecord:
    """Minimal view of a stored report (dashboard only needs the period)."""
    id: str
    child_id: str
    period: str  # "YYYY-MM"
    created_by: str = ""
    included_goals: Tuple[str, ...] = field(default_factory=tuple)


def _session_sort_key(session: SessionRecord):
    # created_at/id break same-day ties so window splits are deterministic
    created = session.created_at.isoformat() if session.created_at else ""
    return (session.date, created, session.id)


def sort_sessions_asc(sessions: Iterable[SessionRecord]) -> List[SessionRecord]:
    """Oldest first. Returns a new list."""
    return sorted(sessions, key=_session_sort_key)


def sort_sessions_desc(sessions: Iterable[SessionRecord]) -> List[SessionRecord]:
    """Most recent first. Returns a new list."""
    return sorted(sessions, key=_session_sort_key, reverse=True)


def trials_for_goal(sessions: Iterable[SessionRecord], goal_id: str) -> List[TrialRecord]:
    """Trial blocks for one goal, in the order of the given sessions."""
    trials = []
    for session in sessions:
        trial = session.trial_for(goal_id)
        if trial is not None:
            trials.append(trial)
    return trials


def all_trials(sessions: Iterable[SessionRecord]) -> List[TrialRecord]:
    return [trial for session in sessions for trial in session.trials]


def sessions_for_child(sessions: Iterable[SessionRecord], child_id: str) -> List[SessionRecord]:
    return [s for s in sessions if s.child_id == child_id]


def group_sessions_by_child(sessions: Iterable[SessionRecord]) -> Dict[str, List[SessionRecord]]:
    grouped: Dict[str, List[SessionRecord]] = {}
    for session in sessions:
        grouped.setdefault(session.child_id, []).append(session)
    return grouped


def sessions_in_period(
    sessions: Iterable[SessionRecord],
    period_start: date,
    period_end: date,
) -> List[SessionRecord]:
    """Sessions dated within [period_start, period_end], inclusive."""
    return [s for s in sessions if period_start <= s.date <= period_end]
