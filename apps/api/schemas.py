"""
Request schemas for the analytics API.

These models are the validation boundary: the analytics services assume
successes <= trials, prompt levels within 0..3 and one trial block per
goal per session, and anything that breaks those rules is rejected here
with a 422 before it reaches them.
"""
from pydantic import BaseModel, Field, model_validator
from datetime import datetime, date
from typing import Optional, List

from services.case_records import (
    Child,
    ChildStatus,
    Goal,
    GoalStatus,
    ReportRecord,
    SessionRecord,
    TrialRecord,
    Trend,
)


class TrialIn(BaseModel):
    goal_id: str
    trials_attempted: int = Field(ge=0)
    successes: int = Field(ge=0)
    prompt_level: int = Field(ge=0, le=3)  # 0 independent .. 3 full physical
    problem_behavior_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _successes_within_trials(self):
        if self.successes > self.trials_attempted:
            raise ValueError("successes cannot exceed trials_attempted")
        return self

    def to_record(self) -> TrialRecord:
        return TrialRecord(
            goal_id=self.goal_id,
            trials_attempted=self.trials_attempted,
            successes=self.successes,
            prompt_level=self.prompt_level,
            problem_behavior_count=self.problem_behavior_count,
        )


class SessionIn(BaseModel):
    id: str
    child_id: str
    date: date
    trials: List[TrialIn] = Field(default_factory=list)
    therapist_id: Optional[str] = None
    duration_minutes: int = Field(default=0, ge=0)
    notes: str = ""
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _one_block_per_goal(self):
        goal_ids = [t.goal_id for t in self.trials]
        if len(goal_ids) != len(set(goal_ids)):
            raise ValueError("a session may hold at most one trial block per goal")
        return self

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            id=self.id,
            child_id=self.child_id,
            date=self.date,
            trials=tuple(t.to_record() for t in self.trials),
            therapist_id=self.therapist_id,
            duration_minutes=self.duration_minutes,
            notes=self.notes,
            created_at=self.created_at,
        )


class GoalIn(BaseModel):
    id: str
    child_id: str
    title: str
    category: str = ""
    status: GoalStatus = GoalStatus.ACTIVE
    description: str = ""
    target_criteria: str = ""

    def to_record(self) -> Goal:
        return Goal(
            id=self.id,
            child_id=self.child_id,
            title=self.title,
            category=self.category,
            status=self.status,
            description=self.description,
            target_criteria=self.target_criteria,
        )


class ChildIn(BaseModel):
    id: str
    name: str
    trend: Trend = Trend.STABLE
    status: ChildStatus = ChildStatus.ACTIVE
    last_session_date: Optional[date] = None
    therapist_id: Optional[str] = None
    guardian_name: str = ""
    notes: str = ""

    def to_record(self) -> Child:
        return Child(
            id=self.id,
            name=self.name,
            trend=self.trend,
            status=self.status,
            last_session_date=self.last_session_date,
            therapist_id=self.therapist_id,
            guardian_name=self.guardian_name,
            notes=self.notes,
        )


class ReportIn(BaseModel):
    id: str
    child_id: str
    period: str = Field(pattern=r"^\d{4}-\d{2}$")
    created_by: str = ""

    def to_record(self) -> ReportRecord:
        return ReportRecord(
            id=self.id,
            child_id=self.child_id,
            period=self.period,
            created_by=self.created_by,
        )


class CaseSnapshot(BaseModel):
    """One child's goals and sessions as currently stored."""
    child: ChildIn
    goals: List[GoalIn] = Field(default_factory=list)
    sessions: List[SessionIn] = Field(default_factory=list)


class ReportComposeRequest(CaseSnapshot):
    period_start: date
    period_end: date
    included_goal_ids: Optional[List[str]] = None
    therapist_name: str = ""


class DashboardRequest(BaseModel):
    as_of: date
    children: List[ChildIn] = Field(default_factory=list)
    sessions: List[SessionIn] = Field(default_factory=list)
    reports: List[ReportIn] = Field(default_factory=list)
