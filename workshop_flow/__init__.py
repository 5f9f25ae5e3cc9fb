"""
Workshop Flow

Guided step-flow engine for bicycle workshop checklists: walks a technician
through assembly and inspection steps one at a time, branches on decisions,
and checkpoints progress so an interrupted run can be resumed.
"""

from workshop_flow.domain import (
    ChecklistTemplate,
    DecisionOption,
    Step,
    StepInput,
    StepKind,
)
from workshop_flow.state import (
    Actor,
    FlowInstance,
    FlowSummary,
    Injection,
    InspectionResult,
    ProgressSnapshot,
)
from workshop_flow.exceptions import (
    FlowValidationError,
    InvalidOptionError,
    OutOfRangeError,
    StepKindError,
    StepRequiredError,
    TemplateError,
    TemplateNotFoundError,
    UnknownStepError,
    WorkshopFlowError,
)
from workshop_flow.execution.schemas import (
    FlowState,
    FlowView,
    TransitionKind,
    TransitionRequest,
)
from workshop_flow.execution import FlowEngine
from workshop_flow.persistence import PersistenceBridge, SaveStatus

__all__ = [
    # Domain Layer
    "ChecklistTemplate",
    "DecisionOption",
    "Step",
    "StepInput",
    "StepKind",
    # State Layer
    "Actor",
    "FlowInstance",
    "FlowSummary",
    "Injection",
    "InspectionResult",
    "ProgressSnapshot",
    # Errors
    "FlowValidationError",
    "InvalidOptionError",
    "OutOfRangeError",
    "StepKindError",
    "StepRequiredError",
    "TemplateError",
    "TemplateNotFoundError",
    "UnknownStepError",
    "WorkshopFlowError",
    # Schemas
    "FlowState",
    "FlowView",
    "TransitionKind",
    "TransitionRequest",
    # Execution Layer
    "FlowEngine",
    "PersistenceBridge",
    "SaveStatus",
]
