"""
Windowed Trend Classifier

One parameterized comparison shared by every call site that needs a
direction of change: case insights, dashboard decline alerts, report
narratives, the parent summary and the child trend label. Callers differ
only in how they build the two windows and in window size.

Direction semantics:
- rate trend UP      -> success rate rose by more than rate_threshold
- prompt trend UP    -> prompt level FELL by more than prompt_threshold
                        (less prompting == more independent)
- Rate needs trials in both windows; prompt level needs trial blocks in
  both windows (a block with zero attempts still records its prompting).
  Whatever cannot be compared is STABLE, never an extrapolation.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TypeVar

from services.case_records import SessionRecord, Trend, sort_sessions_desc, trials_for_goal, all_trials
from services.trial_aggregation import TrialAggregate, aggregate

logger = logging.getLogger(__name__)

DEFAULT_RATE_THRESHOLD = 0.10
DEFAULT_PROMPT_THRESHOLD = 0.5

# Deltas are compared after rounding away float noise (0.8 - 0.7 != 0.1).
_DELTA_PRECISION = 9

T = TypeVar("T")


@dataclass(frozen=True)
class TrendResult:
    rate_trend: Trend
    prompt_trend: Trend
    rate_delta: Optional[float]    # recent - older; None when not comparable
    prompt_delta: Optional[float]

    @property
    def comparable(self) -> bool:
        return self.rate_delta is not None or self.prompt_delta is not None


INSUFFICIENT = TrendResult(
    rate_trend=Trend.STABLE,
    prompt_trend=Trend.STABLE,
    rate_delta=None,
    prompt_delta=None,
)


@dataclass(frozen=True)
class WindowComparison:
    """Aggregates of two adjacent windows and their classification."""
    recent: TrialAggregate
    older: TrialAggregate
    recent_session_count: int
    older_session_count: int
    trend: TrendResult


def _direction(delta: float, threshold: float) -> Trend:
    if delta > threshold:
        return Trend.UP
    if delta < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def classify_trend(
    recent: TrialAggregate,
    older: TrialAggregate,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
    prompt_threshold: float = DEFAULT_PROMPT_THRESHOLD,
) -> TrendResult:
    """
    Classify recent vs older window.

    Both thresholds are strict: a delta exactly at the threshold is STABLE.
    Rate and prompt level are compared independently, each only when both
    windows hold data for it.
    """
    rate_delta = None
    prompt_delta = None
    rate_trend = Trend.STABLE
    prompt_trend = Trend.STABLE

    if older.has_data and recent.has_data:
        rate_delta = round(recent.rate - older.rate, _DELTA_PRECISION)
        rate_trend = _direction(rate_delta, rate_threshold)

    if older.record_count and recent.record_count:
        prompt_delta = round(recent.avg_prompt_level - older.avg_prompt_level, _DELTA_PRECISION)
        # Inverted: a lower prompt level is the improvement.
        prompt_trend = _direction(-prompt_delta, prompt_threshold)

    if rate_delta is None and prompt_delta is None:
        return INSUFFICIENT

    return TrendResult(
        rate_trend=rate_trend,
        prompt_trend=prompt_trend,
        rate_delta=rate_delta,
        prompt_delta=prompt_delta,
    )


def classify_rate_trend(
    recent: TrialAggregate,
    older: TrialAggregate,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
) -> Trend:
    """Rate-only half of classify_trend."""
    return classify_trend(recent, older, rate_threshold=rate_threshold).rate_trend


def split_session_windows(
    sessions: Sequence[SessionRecord],
    window_size: int,
) -> Tuple[List[SessionRecord], List[SessionRecord]]:
    """
    Sort most-recent-first and cut two adjacent, non-overlapping windows.

    recent = sessions[0:N], older = sessions[N:2N]. The older window may be
    short or empty; callers decide what minimum they require.
    """
    if window_size < 1:
        raise ValueError("window_size must be at least 1")
    ordered = sort_sessions_desc(sessions)
    return ordered[:window_size], ordered[window_size:2 * window_size]


def split_half(items: Sequence[T]) -> Tuple[List[T], List[T]]:
    """Split an ordered sequence at ceil(n/2): (first half, second half)."""
    cut = math.ceil(len(items) / 2)
    return list(items[:cut]), list(items[cut:])


def compare_windows(
    sessions: Sequence[SessionRecord],
    window_size: int,
    goal_id: Optional[str] = None,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
    prompt_threshold: float = DEFAULT_PROMPT_THRESHOLD,
) -> WindowComparison:
    """Split into windows, aggregate each and classify the change."""
    recent_sessions, older_sessions = split_session_windows(sessions, window_size)

    if goal_id is None:
        recent = aggregate(all_trials(recent_sessions))
        older = aggregate(all_trials(older_sessions))
    else:
        recent = aggregate(trials_for_goal(recent_sessions, goal_id))
        older = aggregate(trials_for_goal(older_sessions, goal_id))

    trend = classify_trend(recent, older, rate_threshold, prompt_threshold)
    if not trend.comparable:
        logger.debug(
            "Window comparison not possible (recent=%d sessions, older=%d sessions, goal=%s)",
            len(recent_sessions), len(older_sessions), goal_id,
        )

    return WindowComparison(
        recent=recent,
        older=older,
        recent_session_count=len(recent_sessions),
        older_session_count=len(older_sessions),
        trend=trend,
    )
