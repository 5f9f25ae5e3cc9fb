"""
Execution Schemas - Transition requests and derived flow views.
"""

from workshop_flow.execution.schemas.transitions import (
    FlowState,
    FlowView,
    StepIndicator,
    TransitionKind,
    TransitionRequest,
)

__all__ = [
    "FlowState",
    "FlowView",
    "StepIndicator",
    "TransitionKind",
    "TransitionRequest",
]
