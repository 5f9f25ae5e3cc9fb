"""
Transition Types - FSM Requests and Read Models

Type definitions shared by the engine (to dispatch transitions) and the
presentation shell (to send gestures and render the derived view).
"""

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ...domain.models import Step


class FlowState(str, Enum):
    """
    The two states of the flow machine.

    IN_PROGRESS: The cursor points at the step being worked on.
    FINISHED: The technician advanced past the last step.
    """
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class TransitionKind(str, Enum):
    COMPLETE = "complete"
    SKIP = "skip"
    DECIDE = "decide"
    BACK = "back"
    JUMP = "jump"
    REVERT = "revert"
    NOTE = "note"


class TransitionRequest(BaseModel):
    """
    A gesture forwarded by the presentation shell (tap, swipe, keyboard).

    Only the fields relevant to `kind` are read: `value` for DECIDE, `index`
    for JUMP, `step_id` for REVERT and NOTE, `text` for NOTE.
    """
    kind: TransitionKind
    value: Optional[str] = None
    index: Optional[int] = None
    step_id: Optional[str] = None
    text: Optional[str] = None

    @model_validator(mode="after")
    def check_arguments(self) -> "TransitionRequest":
        needed = _REQUIRED_FIELDS.get(self.kind, ())
        missing = [name for name in needed if getattr(self, name) is None]
        if missing:
            raise ValueError(f"'{self.kind.value}' requires: {', '.join(missing)}")
        return self


_REQUIRED_FIELDS = {
    TransitionKind.DECIDE: ("value",),
    TransitionKind.JUMP: ("index",),
    TransitionKind.REVERT: ("step_id",),
    TransitionKind.NOTE: ("step_id", "text"),
}


StepProgress = Literal["open", "completed", "skipped"]


class StepIndicator(BaseModel):
    """One entry of the step indicator strip."""
    id: str
    title: str
    kind: str
    required: bool
    status: StepProgress
    injected: bool = False


class FlowView(BaseModel):
    """
    Derived read model recomputed after every transition.
    """
    state: FlowState
    cursor: int
    total: int
    progress: int
    current_step: Optional[Step] = None
    steps: List[StepIndicator] = Field(default_factory=list)
    notes: Dict[str, str] = Field(default_factory=dict)
    answers: Dict[str, str] = Field(default_factory=dict)
