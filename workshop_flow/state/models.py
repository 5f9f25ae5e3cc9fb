"""
State Layer - Runtime Data Models

This module defines the runtime state that tracks a technician's progress
through one checklist run (the FlowInstance), the provenance records that
remember which decision injected which steps, and the snapshot/summary
shapes handed to persistence and finalization.
"""

from datetime import datetime
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from ..domain.models import Step


class Actor(BaseModel):
    """Employee (or account) that last touched a flow."""
    id: str
    name: str


class InspectionResult(BaseModel):
    """Sign-off given when a quality-control run is finalized."""
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = None


class Injection(BaseModel):
    """
    Provenance tag for steps a decision spliced into the sequence.

    One entry per decision step with an active injection. Injected decision
    steps can own injections themselves, which makes the entries a tree
    rooted at template decisions.
    """
    decision_step_id: str
    option_value: str
    step_ids: List[str] = Field(default_factory=list)


class FlowInstance(BaseModel):
    """
    The mutable aggregate for one checklist run.

    Only FlowEngine transitions mutate it.
    """
    sequence: List[str] = Field(default_factory=list)
    steps: Dict[str, Step] = Field(default_factory=dict)
    cursor: int = 0
    completed: Set[str] = Field(default_factory=set)
    skipped: Set[str] = Field(default_factory=set)
    notes: Dict[str, str] = Field(default_factory=dict)
    answers: Dict[str, str] = Field(default_factory=dict)
    finished: bool = False
    injections: Dict[str, Injection] = Field(default_factory=dict)

    @property
    def current_step(self) -> Optional[Step]:
        if not self.sequence:
            return None
        return self.steps[self.sequence[self.cursor]]

    def ordered(self, step_ids: Set[str]) -> List[str]:
        """Returns the given ids in sequence order."""
        return [step_id for step_id in self.sequence if step_id in step_ids]


class ProgressSnapshot(BaseModel):
    """
    Complete checkpoint of a FlowInstance (never a delta).

    The storage model is "last write wins" per flow instance. last_updated
    and last_actor are stamped by the PersistenceBridge when writing.
    """
    sequence_ids: List[str] = Field(default_factory=list)
    completed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    notes: Dict[str, str] = Field(default_factory=dict)
    answers: Dict[str, str] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None
    last_actor: Optional[Actor] = None


class FlowSummary(BaseModel):
    """
    Hand-off payload for business finalization (e.g. marking a build ready).

    all_required_completed is independent of the flow being finished: a
    technician can reach the end having skipped optional steps.
    """
    completed_steps: List[str]
    skipped_steps: List[str]
    answers: Dict[str, str]
    notes: Dict[str, str]
    all_required_completed: bool
    injected_steps: List[Step] = Field(default_factory=list)
    inspection: Optional[InspectionResult] = None
    completed_at: Optional[datetime] = None
