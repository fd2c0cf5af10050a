"""
Per-Goal Statistics

For one goal over a set of sessions: pooled rate, first-half vs
second-half rate and prompt level, trend classification, session count
and mastery proximity.

The halves are cut from the goal's trial blocks in chronological order
at ceil(n/2), so a single block lands in the first half and the second
half is empty. With an empty second half the "last" values repeat the
"first" values and both trends are stable.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from services.case_records import Goal, SessionRecord, Trend, sort_sessions_asc
from services.trial_aggregation import TrialAggregate, aggregate, is_mastery_ready
from services.trend_classifier import (
    DEFAULT_PROMPT_THRESHOLD,
    DEFAULT_RATE_THRESHOLD,
    classify_trend,
    split_half,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalStat:
    goal: Goal
    session_count: int
    total: TrialAggregate
    first: TrialAggregate
    last: TrialAggregate
    first_rate: float
    last_rate: float
    first_prompt: float
    last_prompt: float
    success_trend: Trend
    prompt_trend: Trend
    mastery_ready: bool

    @property
    def rate(self) -> float:
        return self.total.rate

    @property
    def avg_prompt_level(self) -> float:
        return self.total.avg_prompt_level

    @property
    def problem_behavior_total(self) -> int:
        return self.total.total_problem_behaviors


def build_goal_stats(
    goal: Goal,
    sessions_in_scope: Sequence[SessionRecord],
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
    prompt_threshold: float = DEFAULT_PROMPT_THRESHOLD,
    mastery_rate: float = 0.80,
    mastery_max_prompt_level: int = 1,
) -> Optional[GoalStat]:
    """
    Build statistics for one goal.

    Returns None when no session in scope recorded a trial block for the
    goal; callers leave such goals out of the display.
    """
    blocks = []
    session_ids = set()
    for session in sort_sessions_asc(sessions_in_scope):
        trial = session.trial_for(goal.id)
        if trial is not None:
            blocks.append(trial)
            session_ids.add(session.id)

    if not blocks:
        logger.debug("No trials for goal %s in scope", goal.id)
        return None

    first_half, second_half = split_half(blocks)
    first = aggregate(first_half)
    last = aggregate(second_half)
    trend = classify_trend(last, first, rate_threshold, prompt_threshold)

    last_rate = last.rate if last.record_count else first.rate
    last_prompt = last.avg_prompt_level if last.record_count else first.avg_prompt_level
    recent_blocks = second_half or first_half

    return GoalStat(
        goal=goal,
        session_count=len(session_ids),
        total=aggregate(blocks),
        first=first,
        last=last,
        first_rate=first.rate,
        last_rate=last_rate,
        first_prompt=first.avg_prompt_level,
        last_prompt=last_prompt,
        success_trend=trend.rate_trend,
        prompt_trend=trend.prompt_trend,
        mastery_ready=is_mastery_ready(recent_blocks, mastery_rate, mastery_max_prompt_level),
    )


def build_all_goal_stats(
    goals: Iterable[Goal],
    sessions_in_scope: Sequence[SessionRecord],
    active_only: bool = False,
    **kwargs,
) -> List[GoalStat]:
    """Stats for each goal that has data, in goal order."""
    stats = []
    for goal in goals:
        if active_only and not goal.is_active:
            continue
        stat = build_goal_stats(goal, sessions_in_scope, **kwargs)
        if stat is not None:
            stats.append(stat)
    return stats


def goal_stat_to_dict(stat: GoalStat) -> dict:
    """Convert GoalStat to dictionary for API response."""
    return {
        "goal_id": stat.goal.id,
        "title": stat.goal.title,
        "category": stat.goal.category,
        "session_count": stat.session_count,
        "rate": stat.rate,
        "avg_prompt_level": stat.avg_prompt_level,
        "problem_behavior_total": stat.problem_behavior_total,
        "first_rate": stat.first_rate,
        "last_rate": stat.last_rate,
        "first_prompt": stat.first_prompt,
        "last_prompt": stat.last_prompt,
        "success_trend": stat.success_trend.value,
        "prompt_trend": stat.prompt_trend.value,
        "mastery_ready": stat.mastery_ready,
    }
