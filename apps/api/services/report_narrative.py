"""
Report Narrative Composer

Builds the text of a periodic progress report for guardians from a
child's sessions in a date range: a one-sentence summary and a plain-text
body with a per-goal breakdown.

Output is a pure function of the inputs. No timestamps, ids or random
wording end up in the text besides the requested period, so composing the
same report twice yields identical strings.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from services.case_records import (
    Child,
    Goal,
    SessionRecord,
    Trend,
    sessions_for_child,
    sessions_in_period,
)
from services.goal_statistics import GoalStat, build_all_goal_stats, goal_stat_to_dict
from services.progress_series import prompt_level_label
from services.trial_aggregation import to_percent

logger = logging.getLogger(__name__)


TREND_LABELS: Dict[Trend, str] = {
    Trend.UP: "improved",
    Trend.DOWN: "declined",
    Trend.STABLE: "maintained",
}

DISCLAIMER = (
    "Note: This report summarizes what was observed during therapy sessions. "
    "It is not a diagnosis or a prescription."
)

# Keyed by normalized goal category.
HOME_SUGGESTIONS: Dict[str, str] = {
    "communication": "Give your child plenty of chances to ask for things they want using words.",
    "social": "Offer lots of positive feedback during interactions with siblings, peers and family.",
    "receptive language": "Practice simple one-step instructions during daily routines.",
    "expressive language": "Name objects and actions together during play and everyday routines.",
    "play": "Encourage imitation and joining in through a variety of play activities.",
    "sensory": "Offer a range of sensory experiences naturally throughout the day.",
    "self-care": "Give your child enough time to do things independently and praise each success.",
    "behavior": "Announce transitions between activities ahead of time and allow time to prepare.",
}
DEFAULT_HOME_SUGGESTION = "Keep practicing regularly and give plenty of positive feedback."
MAX_HOME_SUGGESTIONS = 3


@dataclass(frozen=True)
class ReportDraft:
    title: str
    summary: str
    content: str
    goal_stats: List[GoalStat]
    session_count: int
    period_start: date
    period_end: date


def _join_titles(titles: List[str]) -> str:
    if len(titles) == 1:
        return titles[0]
    return f"{', '.join(titles[:-1])} and {titles[-1]}"


def _sessions_phrase(count: int) -> str:
    return f"{count} session" if count == 1 else f"{count} sessions"


def compose_summary(goal_stats: Sequence[GoalStat], session_count: int) -> str:
    """One sentence naming goals that improved, declined or gained independence."""
    improved = [s.goal.title for s in goal_stats if s.success_trend == Trend.UP]
    declined = [s.goal.title for s in goal_stats if s.success_trend == Trend.DOWN]
    independent = [s.goal.title for s in goal_stats if s.prompt_trend == Trend.UP]

    clauses = []
    if improved:
        clauses.append(f"success rates improved for {_join_titles(improved)}")
    if declined:
        clauses.append(f"success rates declined for {_join_titles(declined)}")
    if independent:
        clauses.append(f"independence increased for {_join_titles(independent)}")

    if not clauses:
        return f"{_sessions_phrase(session_count)} conducted, stable performance across goals."
    return f"Across {_sessions_phrase(session_count)}, {'; '.join(clauses)}."


def _overall_observation(goal_stats: Sequence[GoalStat]) -> str:
    improved = sum(1 for s in goal_stats if s.success_trend == Trend.UP)
    declined = sum(1 for s in goal_stats if s.success_trend == Trend.DOWN)
    half = len(goal_stats) / 2

    if goal_stats and improved > half:
        return "Overall progress is positive and engagement with the therapy goals is high."
    if goal_stats and declined > half:
        return "Progress on some goals has slowed, and the teaching strategy may need adjusting."
    return "Performance is steady overall, with consistent practice taking place."


def _goal_block(index: int, stat: GoalStat) -> str:
    goal = stat.goal
    heading = f"{index}. {goal.title}"
    if goal.category:
        heading += f" ({goal.category})"

    lines = [
        heading,
        (
            f"   - Success rate: {to_percent(stat.first_rate)}% -> {to_percent(stat.last_rate)}% "
            f"({TREND_LABELS[stat.success_trend]}), overall {to_percent(stat.rate)}%"
        ),
        (
            f"   - Prompt level: {prompt_level_label(stat.first_prompt)} ({stat.first_prompt:.1f}) -> "
            f"{prompt_level_label(stat.last_prompt)} ({stat.last_prompt:.1f}) "
            f"({TREND_LABELS[stat.prompt_trend]})"
        ),
        f"   - Sessions: {stat.session_count}",
        f"   - Problem behaviors: {stat.problem_behavior_total}",
    ]
    if goal.target_criteria:
        lines.append(f"   - Target: {goal.target_criteria}")
    return "\n".join(lines)


def _home_suggestions(goal_stats: Sequence[GoalStat]) -> List[str]:
    suggestions = []
    for stat in goal_stats[:MAX_HOME_SUGGESTIONS]:
        key = stat.goal.category.strip().lower()
        suggestions.append(f"- {HOME_SUGGESTIONS.get(key, DEFAULT_HOME_SUGGESTION)}")
    return suggestions


def compose_content(
    child: Child,
    goal_stats: Sequence[GoalStat],
    session_count: int,
    period_start: date,
    period_end: date,
    guardian_name: str = "",
    therapist_name: str = "",
) -> str:
    start, end = period_start.isoformat(), period_end.isoformat()
    greeting = f"Dear {guardian_name}," if guardian_name else "Hello,"

    sections = [
        f"[{child.name} - Progress Report, {start} to {end}]",
        DISCLAIMER,
        greeting,
        f"This report covers {_sessions_phrase(session_count)} held between {start} and {end}.",
    ]

    if goal_stats:
        blocks = "\n\n".join(_goal_block(i, s) for i, s in enumerate(goal_stats, start=1))
    else:
        blocks = "No goal data was recorded during this period."
    sections.append(f"== Progress by Goal ==\n\n{blocks}")

    sections.append(
        "== Overall Observations ==\n"
        f"{child.name} took part in {_sessions_phrase(session_count)} during this period. "
        f"{_overall_observation(goal_stats)}"
    )

    if child.notes:
        sections.append(f"== Additional Notes ==\n{child.notes}")

    suggestions = _home_suggestions(goal_stats)
    if suggestions:
        sections.append("== Suggestions for Home ==\n" + "\n".join(suggestions))

    sections.append(f"Thank you.\nTherapist: {therapist_name}")
    return "\n\n".join(sections)


def compose_report(
    child: Child,
    goals: Iterable[Goal],
    sessions: Sequence[SessionRecord],
    period_start: date,
    period_end: date,
    included_goal_ids: Optional[Iterable[str]] = None,
    guardian_name: str = "",
    therapist_name: str = "",
    **stat_kwargs,
) -> ReportDraft:
    """
    Compose a progress report for one child over [period_start, period_end].

    included_goal_ids selects goals (in the order of `goals`); when omitted,
    all active goals are included. Goals without trials in the period are
    left out of both the breakdown and the summary.
    """
    in_range = sessions_in_period(sessions_for_child(sessions, child.id), period_start, period_end)

    if included_goal_ids is None:
        selected = [g for g in goals if g.is_active]
    else:
        wanted = set(included_goal_ids)
        selected = [g for g in goals if g.id in wanted]

    goal_stats = build_all_goal_stats(selected, in_range, **stat_kwargs)
    logger.debug(
        "Composing report for child %s: %d sessions, %d/%d goals with data",
        child.id, len(in_range), len(goal_stats), len(selected),
    )

    return ReportDraft(
        title=f"Progress report: {period_start.isoformat()} to {period_end.isoformat()}",
        summary=compose_summary(goal_stats, len(in_range)),
        content=compose_content(
            child,
            goal_stats,
            len(in_range),
            period_start,
            period_end,
            guardian_name=guardian_name or child.guardian_name,
            therapist_name=therapist_name,
        ),
        goal_stats=goal_stats,
        session_count=len(in_range),
        period_start=period_start,
        period_end=period_end,
    )


def report_to_dict(draft: ReportDraft) -> Dict:
    """Convert ReportDraft to dictionary for API response."""
    return {
        "title": draft.title,
        "summary": draft.summary,
        "content": draft.content,
        "period_start": draft.period_start.isoformat(),
        "period_end": draft.period_end.isoformat(),
        "session_count": draft.session_count,
        "included_goals": [s.goal.id for s in draft.goal_stats],
        "goal_stats": [goal_stat_to_dict(s) for s in draft.goal_stats],
    }
