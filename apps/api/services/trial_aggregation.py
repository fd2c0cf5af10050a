"""
Trial Aggregation Service

Reduces trial blocks into pooled success rate and prompt-level statistics.
Every other analytics service builds on this one.

Conventions:
- Rates are unrounded fractions in [0, 1]. Rounding to whole percentages
  happens only at presentation time (to_percent), so trend comparisons are
  never made on already-rounded numbers.
- No data is not an error: an empty input yields rate 0.0 and mean prompt
  level 0.0. Use TrialAggregate.has_data to tell "no data" from "0% success".
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from services.case_records import SessionRecord, TrialRecord, all_trials, trials_for_goal


@dataclass(frozen=True)
class TrialAggregate:
    """Pooled statistics over a set of trial blocks."""
    total_trials: int
    total_successes: int
    rate: float                  # total_successes / total_trials, 0.0 when no trials
    avg_prompt_level: float      # mean over blocks, 0.0 when no blocks
    total_problem_behaviors: int
    record_count: int            # number of trial blocks pooled

    @property
    def has_data(self) -> bool:
        return self.total_trials > 0


EMPTY_AGGREGATE = TrialAggregate(
    total_trials=0,
    total_successes=0,
    rate=0.0,
    avg_prompt_level=0.0,
    total_problem_behaviors=0,
    record_count=0,
)


def aggregate(trials: Iterable[TrialRecord]) -> TrialAggregate:
    """
    Pool a collection of trial blocks.

    Order does not matter and the input is only read.
    """
    total_trials = 0
    total_successes = 0
    prompt_sum = 0
    problem_behaviors = 0
    count = 0

    for trial in trials:
        total_trials += trial.trials_attempted
        total_successes += trial.successes
        prompt_sum += trial.prompt_level
        problem_behaviors += trial.problem_behavior_count
        count += 1

    if count == 0:
        return EMPTY_AGGREGATE

    return TrialAggregate(
        total_trials=total_trials,
        total_successes=total_successes,
        rate=total_successes / total_trials if total_trials > 0 else 0.0,
        avg_prompt_level=prompt_sum / count,
        total_problem_behaviors=problem_behaviors,
        record_count=count,
    )


def aggregate_sessions(
    sessions: Iterable[SessionRecord],
    goal_id: Optional[str] = None,
) -> TrialAggregate:
    """Pool every trial in the sessions, or only one goal's trials."""
    if goal_id is None:
        return aggregate(all_trials(sessions))
    return aggregate(trials_for_goal(sessions, goal_id))


def is_mastery_ready(
    trials: Iterable[TrialRecord],
    mastery_rate: float = 0.80,
    max_prompt_level: int = 1,
) -> bool:
    """
    True when the pooled rate reaches mastery_rate and no block needed
    more than max_prompt_level prompting.
    """
    trials = list(trials)
    agg = aggregate(trials)
    if not agg.has_data:
        return False
    return agg.rate >= mastery_rate and all(t.prompt_level <= max_prompt_level for t in trials)


def to_percent(rate: float) -> int:
    """Fraction -> whole percentage, rounding half up."""
    return int(math.floor(rate * 100 + 0.5))
