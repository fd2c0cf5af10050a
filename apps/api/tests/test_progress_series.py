"""
Unit tests for Progress Series
"""

from datetime import date

import pytest

from fixtures.case_fixtures import make_goal, make_series, make_session, make_trial
from services.progress_series import (
    SESSION_SERIES_LIMIT,
    prompt_level_label,
    prompt_level_series,
    series_to_dict,
    session_rate_series,
    session_rates_to_dict,
    success_rate_series,
)


class TestPromptLevelLabel:
    """Test labels for averaged prompt levels."""

    @pytest.mark.parametrize("level,label", [
        (0, "Independent"),
        (0.49, "Independent"),
        (0.5, "Verbal prompt"),
        (1.75, "Partial physical"),
        (3, "Full physical"),
    ])
    def test_rounds_half_up(self, level, label):
        assert prompt_level_label(level) == label

    def test_clamped(self):
        assert prompt_level_label(-1) == "Independent"
        assert prompt_level_label(7) == "Full physical"


class TestGoalSeries:
    """Test per-goal chart series."""

    def test_success_rate_oldest_first(self, goals, improving):
        points = success_rate_series(list(reversed(improving)), goals)

        assert [p.session_id for p in points] == [f"c1-s{i}" for i in range(1, 9)]
        assert points[0].values == {"g1": 0.5, "g2": 0.7}
        assert points[-1].values == {"g1": 0.9, "g2": 0.7}

    def test_inactive_goals_left_out(self, improving):
        goals = [make_goal("g1", status="paused"), make_goal("g2")]

        points = success_rate_series(improving, goals)

        assert all(set(p.values) == {"g2"} for p in points)

    def test_prompt_levels(self, goals, improving):
        points = prompt_level_series(improving, goals)

        assert [p.values["g1"] for p in points] == [2.0, 2.0, 2.0, 1.0, 1.0, 1.0, 0.0, 0.0]

    def test_session_without_goal_block(self, goals):
        sessions = [make_session("s1", date(2025, 1, 1), [make_trial("g2", 5)])]

        assert success_rate_series(sessions, goals)[0].values == {"g2": 0.5}

    def test_to_dict(self, goals, improving):
        data = series_to_dict(success_rate_series(improving, goals))

        assert data[0] == {"date": "2025-01-02", "session_id": "c1-s1", "values": {"g1": 0.5, "g2": 0.7}}


class TestSessionRateSeries:
    """Test the pooled per-session series."""

    def test_limited_to_most_recent(self):
        sessions = make_series([i % 11 for i in range(12)])

        points = session_rate_series(sessions)

        assert len(points) == SESSION_SERIES_LIMIT
        assert points[0].session_id == "c1-s3"
        assert points[-1].session_id == "c1-s12"

    def test_pools_all_goals(self, improving):
        point = session_rate_series(improving, limit=1)[0]

        assert point.session_id == "c1-s8"
        assert point.rate == 0.8
        assert point.has_data is True

    def test_session_without_trials(self):
        points = session_rate_series([make_session("s1", date(2025, 1, 1))])

        assert points[0].rate == 0.0
        assert points[0].has_data is False

    def test_zero_limit(self, improving):
        assert session_rate_series(improving, limit=0) == []

    def test_to_dict(self, improving):
        data = session_rates_to_dict(session_rate_series(improving, limit=1))

        assert data == [{
            "date": "2025-01-23",
            "session_id": "c1-s8",
            "child_id": "c1",
            "rate": 0.8,
            "has_data": True,
        }]
