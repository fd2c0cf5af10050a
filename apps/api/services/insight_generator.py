"""
Insight Generator

Turns recent-vs-older window comparisons for each active goal into short,
readable observations for the case analytics view.

Rules, checked in this order for every active goal (a goal can produce
several insights):
    1. fewer than min_trials trial blocks in the recent window -> skip goal
    2. success rate up by more than the threshold             -> success
    3. success rate down by more than the threshold           -> warning
    4. prompt level down by more than the threshold           -> info
    5. mastery criterion met in the recent window             -> success
    6. recent problem behaviors above the alert count         -> warning
Rules 2-4 also need min_trials blocks in the older window.

Output keeps goal order and is truncated at max_insights. There is no
re-ranking by severity.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from services.case_records import Goal, SessionRecord, Trend, trials_for_goal
from services.trial_aggregation import aggregate, is_mastery_ready, to_percent
from services.trend_classifier import (
    DEFAULT_PROMPT_THRESHOLD,
    DEFAULT_RATE_THRESHOLD,
    INSUFFICIENT,
    classify_trend,
    split_session_windows,
)

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 5


class InsightType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class InsightCode(str, Enum):
    """Which rule produced the insight."""
    RATE_IMPROVED = "rate_improved"
    RATE_DECLINED = "rate_declined"
    PROMPT_DECREASED = "prompt_decreased"
    NEAR_MASTERY = "near_mastery"
    PROBLEM_BEHAVIOR = "problem_behavior"


@dataclass(frozen=True)
class Insight:
    type: InsightType
    message: str
    detail: Optional[str] = None
    goal_id: Optional[str] = None
    code: Optional[InsightCode] = None


def _goal_insights(
    goal: Goal,
    recent_sessions: Sequence[SessionRecord],
    older_sessions: Sequence[SessionRecord],
    rate_threshold: float,
    prompt_threshold: float,
    min_trials: int,
    mastery_rate: float,
    mastery_max_prompt_level: int,
    problem_behavior_limit: int,
) -> List[Insight]:
    recent_blocks = trials_for_goal(recent_sessions, goal.id)
    if len(recent_blocks) < min_trials:
        logger.debug("Skipping goal %s: %d recent trial blocks", goal.id, len(recent_blocks))
        return []

    older_blocks = trials_for_goal(older_sessions, goal.id)
    recent = aggregate(recent_blocks)
    older = aggregate(older_blocks)

    if len(older_blocks) >= min_trials:
        trend = classify_trend(recent, older, rate_threshold, prompt_threshold)
    else:
        trend = INSUFFICIENT

    insights = []
    change = f"{to_percent(older.rate)}% -> {to_percent(recent.rate)}%"

    if trend.rate_trend == Trend.UP:
        insights.append(Insight(
            type=InsightType.SUCCESS,
            message=f"{goal.title}: success rate is improving over recent sessions.",
            detail=change,
            goal_id=goal.id,
            code=InsightCode.RATE_IMPROVED,
        ))
    elif trend.rate_trend == Trend.DOWN:
        insights.append(Insight(
            type=InsightType.WARNING,
            message=f"{goal.title}: success rate has dropped recently. Consider adjusting the teaching strategy.",
            detail=change,
            goal_id=goal.id,
            code=InsightCode.RATE_DECLINED,
        ))

    if trend.prompt_trend == Trend.UP:
        insights.append(Insight(
            type=InsightType.INFO,
            message=f"{goal.title}: prompting is decreasing, independence is improving.",
            detail=f"Average prompt level {older.avg_prompt_level:.1f} -> {recent.avg_prompt_level:.1f}",
            goal_id=goal.id,
            code=InsightCode.PROMPT_DECREASED,
        ))

    if is_mastery_ready(recent_blocks, mastery_rate, mastery_max_prompt_level):
        detail = f"Target: {goal.target_criteria}" if goal.target_criteria else None
        insights.append(Insight(
            type=InsightType.SUCCESS,
            message=(
                f"{goal.title}: {to_percent(recent.rate)}% success with minimal prompting. "
                "Close to mastery."
            ),
            detail=detail,
            goal_id=goal.id,
            code=InsightCode.NEAR_MASTERY,
        ))

    if recent.total_problem_behaviors > problem_behavior_limit:
        insights.append(Insight(
            type=InsightType.WARNING,
            message=(
                f"{goal.title}: {recent.total_problem_behaviors} problem behaviors in recent sessions. "
                "Review antecedents and reinforcement."
            ),
            goal_id=goal.id,
            code=InsightCode.PROBLEM_BEHAVIOR,
        ))

    return insights


def generate_insights(
    goals: Iterable[Goal],
    recent_sessions: Sequence[SessionRecord],
    older_sessions: Sequence[SessionRecord],
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
    prompt_threshold: float = DEFAULT_PROMPT_THRESHOLD,
    min_trials: int = 2,
    mastery_rate: float = 0.80,
    mastery_max_prompt_level: int = 1,
    problem_behavior_limit: int = 4,
    max_insights: int = MAX_INSIGHTS,
) -> List[Insight]:
    """
    Generate insights for active goals from two session windows.

    Returns at most max_insights items.
    """
    insights: List[Insight] = []
    for goal in goals:
        if not goal.is_active:
            continue
        insights.extend(_goal_insights(
            goal,
            recent_sessions,
            older_sessions,
            rate_threshold,
            prompt_threshold,
            min_trials,
            mastery_rate,
            mastery_max_prompt_level,
            problem_behavior_limit,
        ))
        if len(insights) >= max_insights:
            break
    return insights[:max_insights]


def generate_case_insights(
    goals: Iterable[Goal],
    sessions: Sequence[SessionRecord],
    window_size: int = 4,
    **kwargs,
) -> List[Insight]:
    """Insights for one child's case: most recent window vs the one before it."""
    recent_sessions, older_sessions = split_session_windows(sessions, window_size)
    return generate_insights(goals, recent_sessions, older_sessions, **kwargs)


def insights_to_dict(insights: List[Insight]) -> List[dict]:
    """Convert insights to plain dicts for API responses."""
    return [
        {
            "type": i.type.value,
            "message": i.message,
            "detail": i.detail,
            "goal_id": i.goal_id,
            "code": i.code.value if i.code else None,
        }
        for i in insights
    ]
