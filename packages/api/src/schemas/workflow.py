# This project was developed with assistance from AI tools.
"""Policy workflow (status machine) schemas."""

from datetime import datetime
from typing import Literal

from db.enums import PolicyStatus
from pydantic import BaseModel, Field


class TransitionRequest(BaseModel):
    new_status: PolicyStatus
    notes: str | None = None
    reason: str | None = None


class ForceTransitionRequest(BaseModel):
    """Admin override: bypasses the transition graph and preconditions."""

    new_status: PolicyStatus
    reason: str = Field(min_length=1)


class TransitionResult(BaseModel):
    policy_id: int
    from_status: PolicyStatus
    to_status: PolicyStatus
    changed_at: datetime
    forced: bool = False


class ActorsCompletion(BaseModel):
    """Whether every actor the policy requires has submitted their information."""

    is_complete: bool
    primary_landlord: bool
    tenant: bool
    joint_obligors: bool
    avals: bool
    completed: list[str] = []
    pending: list[str] = []


class WorkflowStep(BaseModel):
    key: str
    name: str
    description: str
    status: Literal["completed", "current", "pending"]


class WorkflowProgress(BaseModel):
    policy_id: int
    current_status: PolicyStatus
    current_step: str
    progress: int
    steps: list[WorkflowStep]
    next_actions: list[str]
    allowed_transitions: list[PolicyStatus]


class AutoTransitionResult(BaseModel):
    """Counts from one run of the auto-transition sweep."""

    collecting_to_investigation: int = 0
    active_to_expired: int = 0
    failed_policy_ids: list[int] = []
