"""
Unit tests for Trial Aggregation Service

Tests pooled rates, the no-data sentinel, mastery checks and percentage
rounding.
"""

from fixtures.case_fixtures import make_trial, make_session
from datetime import date
from services.trial_aggregation import (
    EMPTY_AGGREGATE,
    aggregate,
    aggregate_sessions,
    is_mastery_ready,
    to_percent,
)


class TestAggregate:
    """Test pooling of trial blocks."""

    def test_empty_input_is_sentinel(self):
        """No blocks -> zeroed aggregate, never an exception."""
        agg = aggregate([])

        assert agg == EMPTY_AGGREGATE
        assert agg.rate == 0.0
        assert agg.avg_prompt_level == 0.0
        assert agg.has_data is False

    def test_pooled_rate_is_not_mean_of_rates(self):
        """Rate is total successes over total trials."""
        trials = [make_trial(successes=1, trials_attempted=2), make_trial(successes=9, trials_attempted=10)]

        agg = aggregate(trials)

        assert agg.total_trials == 12
        assert agg.total_successes == 10
        assert abs(agg.rate - 10 / 12) < 1e-9

    def test_prompt_level_is_mean_over_blocks(self):
        """Prompt level is averaged per block, not weighted by trials."""
        trials = [
            make_trial(trials_attempted=2, successes=1, prompt_level=0),
            make_trial(trials_attempted=20, successes=10, prompt_level=3),
        ]

        assert aggregate(trials).avg_prompt_level == 1.5

    def test_blocks_with_zero_trials(self):
        """Blocks with no attempts count as records but keep rate at zero."""
        agg = aggregate([make_trial(successes=0, trials_attempted=0, prompt_level=2)])

        assert agg.record_count == 1
        assert agg.rate == 0.0
        assert agg.has_data is False
        assert agg.avg_prompt_level == 2.0

    def test_problem_behaviors_summed(self):
        trials = [make_trial(problem_behavior_count=2), make_trial(problem_behavior_count=3)]

        assert aggregate(trials).total_problem_behaviors == 5

    def test_order_does_not_matter(self):
        """Aggregation is a pure reduction."""
        trials = [make_trial(successes=3, prompt_level=0), make_trial(successes=9, prompt_level=2)]

        assert aggregate(trials) == aggregate(list(reversed(trials)))

    def test_accepts_generator(self):
        agg = aggregate(make_trial(successes=s) for s in (4, 6))

        assert agg.rate == 0.5


class TestAggregateSessions:
    """Test session-level pooling."""

    def test_all_goals_or_one(self):
        """Without goal_id every block is pooled, with it only that goal's."""
        sessions = [
            make_session("s1", date(2025, 1, 2), [make_trial("g1", 10), make_trial("g2", 0)]),
            make_session("s2", date(2025, 1, 5), [make_trial("g1", 10)]),
        ]

        assert aggregate_sessions(sessions).rate == 20 / 30
        assert aggregate_sessions(sessions, goal_id="g1").rate == 1.0
        assert aggregate_sessions(sessions, goal_id="g2").rate == 0.0
        assert aggregate_sessions(sessions, goal_id="missing").has_data is False


class TestMasteryReady:
    """Test the mastery criterion."""

    def test_meets_rate_and_prompt(self):
        trials = [make_trial(successes=8, prompt_level=1), make_trial(successes=9, prompt_level=0)]

        assert is_mastery_ready(trials) is True

    def test_rate_exactly_at_threshold(self):
        """Mastery rate is inclusive."""
        assert is_mastery_ready([make_trial(successes=8, prompt_level=0)]) is True

    def test_any_heavy_prompt_blocks_mastery(self):
        trials = [make_trial(successes=10, prompt_level=0), make_trial(successes=10, prompt_level=2)]

        assert is_mastery_ready(trials) is False

    def test_low_rate(self):
        assert is_mastery_ready([make_trial(successes=7, prompt_level=0)]) is False

    def test_no_data(self):
        assert is_mastery_ready([]) is False

    def test_custom_criteria(self):
        trials = [make_trial(successes=9, prompt_level=2)]

        assert is_mastery_ready(trials, mastery_rate=0.9, max_prompt_level=2) is True


class TestToPercent:
    """Test percentage rounding."""

    def test_rounds_half_up(self):
        assert to_percent(0.125) == 13
        assert to_percent(0.5) == 50
        assert to_percent(2 / 3) == 67

    def test_bounds(self):
        assert to_percent(0.0) == 0
        assert to_percent(1.0) == 100
