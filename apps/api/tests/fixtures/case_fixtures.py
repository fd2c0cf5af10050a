"""Deterministic case record builders for analytics tests.

Sessions are spaced a fixed number of days apart starting from a fixed
date, so window splits and period filters are predictable.
"""
from datetime import date, timedelta
from typing import List, Optional, Sequence

from services.case_records import (
    Child,
    ChildStatus,
    Goal,
    GoalStatus,
    SessionRecord,
    TrialRecord,
    Trend,
)


def make_trial(
    goal_id: str = "g1",
    successes: int = 8,
    trials_attempted: int = 10,
    prompt_level: int = 1,
    problem_behavior_count: int = 0,
) -> TrialRecord:
    return TrialRecord(
        goal_id=goal_id,
        trials_attempted=trials_attempted,
        successes=successes,
        prompt_level=prompt_level,
        problem_behavior_count=problem_behavior_count,
    )


def make_session(
    session_id: str,
    day: date,
    trials: Sequence[TrialRecord] = (),
    child_id: str = "c1",
) -> SessionRecord:
    return SessionRecord(id=session_id, child_id=child_id, date=day, trials=tuple(trials))


def make_goal(
    goal_id: str,
    title: str = "Requesting",
    category: str = "Communication",
    status: str = "active",
    child_id: str = "c1",
    target_criteria: str = "",
) -> Goal:
    return Goal(
        id=goal_id,
        child_id=child_id,
        title=title,
        category=category,
        status=GoalStatus(status),
        target_criteria=target_criteria,
    )


def make_child(
    child_id: str = "c1",
    name: str = "Sky Kim",
    trend: Trend = Trend.STABLE,
    status: ChildStatus = ChildStatus.ACTIVE,
    guardian_name: str = "",
    notes: str = "",
) -> Child:
    return Child(
        id=child_id,
        name=name,
        trend=trend,
        status=status,
        guardian_name=guardian_name,
        notes=notes,
    )


def make_series(
    successes: Sequence[int],
    prompts: Optional[Sequence[int]] = None,
    goal_id: str = "g1",
    child_id: str = "c1",
    start: date = date(2025, 1, 2),
    step_days: int = 3,
    trials_attempted: int = 10,
) -> List[SessionRecord]:
    """One session per score, oldest first, each with a single trial block."""
    prompts = prompts if prompts is not None else [1] * len(successes)
    sessions = []
    for i, (score, prompt) in enumerate(zip(successes, prompts)):
        sessions.append(make_session(
            f"{child_id}-s{i + 1}",
            start + timedelta(days=i * step_days),
            [make_trial(goal_id, score, trials_attempted, prompt)],
            child_id=child_id,
        ))
    return sessions


def improving_sessions() -> List[SessionRecord]:
    """Eight sessions for c1, 2025-01-02 .. 2025-01-23.

    g1 climbs 5,5,6,6 -> 8,8,9,9 out of 10 with prompting fading 2 -> 0.
    g2 stays at 7/10 with a verbal prompt throughout.
    """
    g1_scores = [5, 5, 6, 6, 8, 8, 9, 9]
    g1_prompts = [2, 2, 2, 1, 1, 1, 0, 0]
    sessions = []
    for i, (score, prompt) in enumerate(zip(g1_scores, g1_prompts)):
        sessions.append(make_session(
            f"c1-s{i + 1}",
            date(2025, 1, 2) + timedelta(days=i * 3),
            [make_trial("g1", score, 10, prompt), make_trial("g2", 7, 10, 1)],
        ))
    return sessions


def declining_sessions() -> List[SessionRecord]:
    """Eight sessions for c2, 2025-01-03 .. 2025-01-24: six at 8/10, then two at 4/10."""
    return make_series(
        [8, 8, 8, 8, 8, 8, 4, 4],
        goal_id="g9",
        child_id="c2",
        start=date(2025, 1, 3),
    )
