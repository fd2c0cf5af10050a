"""
Child Trend Updater

A child's trend label is derived data: it is recomputed from the child's
full session history whenever a session is recorded, never edited by
hand. record_session() returns a replacement Child so the caller can
swap the stored record in one write.
"""

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from services.case_records import Child, SessionRecord, Trend
from services.trend_classifier import DEFAULT_RATE_THRESHOLD, compare_windows

logger = logging.getLogger(__name__)

CHILD_TREND_WINDOW_SESSIONS = 4


def update_child_trend(
    sessions: Sequence[SessionRecord],
    window_size: int = CHILD_TREND_WINDOW_SESSIONS,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
) -> Trend:
    """
    Overall success-rate trend for one child.

    Needs at least window_size sessions; the most recent window_size are
    compared with the window_size before them. A short older window is
    still compared, an empty one gives STABLE.
    """
    if len(sessions) < window_size:
        return Trend.STABLE
    return compare_windows(sessions, window_size, rate_threshold=rate_threshold).trend.rate_trend


def record_session(
    child: Child,
    session: SessionRecord,
    prior_sessions: Iterable[SessionRecord],
    **kwargs,
) -> Child:
    """
    Return the child as it should be stored after `session` is added.

    prior_sessions is the child's history without the new session.
    Raises ValueError when the session belongs to another child.
    """
    if session.child_id != child.id:
        raise ValueError(f"session {session.id} belongs to child {session.child_id}, not {child.id}")

    history = [s for s in prior_sessions if s.child_id == child.id and s.id != session.id]
    history.append(session)

    trend = update_child_trend(history, **kwargs)
    last_date = max(s.date for s in history)

    if trend != child.trend:
        logger.debug("Child %s trend %s -> %s", child.id, child.trend.value, trend.value)

    return replace(child, trend=trend, last_session_date=last_date)
