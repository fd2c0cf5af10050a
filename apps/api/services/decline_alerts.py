"""
Decline Alert Scanner

Center-wide scan for children whose latest sessions show a clear drop in
pooled success rate compared with the sessions just before them.

Same windowed comparison as the case view, applied per child over all of
the child's trials, with short windows (2 sessions by default) so a
sudden drop surfaces on the dashboard quickly. A child needs two full
windows of sessions to be considered at all.

Recomputed on demand; cost is O(children x sessions), fine for one
center's caseload.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from core.logging import log_fields
from services.case_records import Child, SessionRecord, Trend
from services.trend_classifier import DEFAULT_RATE_THRESHOLD, compare_windows

logger = logging.getLogger(__name__)

DECLINE_WINDOW_SESSIONS = 2


@dataclass(frozen=True)
class DeclineAlert:
    child: Child
    recent_rate: float
    older_rate: float
    change: float  # recent_rate - older_rate, negative


def scan_for_declines(
    children: Iterable[Child],
    sessions_by_child: Dict[str, Sequence[SessionRecord]],
    window_size: int = DECLINE_WINDOW_SESSIONS,
    rate_threshold: float = DEFAULT_RATE_THRESHOLD,
) -> List[DeclineAlert]:
    """
    Flag children whose recent window rate is more than rate_threshold
    below the previous window.

    Children with fewer than 2 * window_size sessions, or without trial
    data in either window, are not flagged.
    """
    alerts = []
    for child in children:
        sessions = sessions_by_child.get(child.id, ())
        if len(sessions) < 2 * window_size:
            continue

        comparison = compare_windows(sessions, window_size, rate_threshold=rate_threshold)
        if comparison.trend.rate_trend != Trend.DOWN:
            continue

        alert = DeclineAlert(
            child=child,
            recent_rate=comparison.recent.rate,
            older_rate=comparison.older.rate,
            change=comparison.trend.rate_delta,
        )
        logger.debug(
            "Decline alert for child %s: %.2f -> %.2f",
            child.id, alert.older_rate, alert.recent_rate,
            extra=log_fields(child_id=child.id, change=alert.change, window_size=window_size),
        )
        alerts.append(alert)

    return alerts


def declines_to_dict(alerts: List[DeclineAlert]) -> List[dict]:
    return [
        {
            "child_id": a.child.id,
            "child_name": a.child.name,
            "recent_rate": a.recent_rate,
            "older_rate": a.older_rate,
            "change": a.change,
        }
        for a in alerts
    ]
