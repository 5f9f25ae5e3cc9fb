"""
State Layer - Runtime Data Models

Defines the runtime state that tracks technician progress through a
checklist, plus the snapshot and summary shapes built from it.
"""

from workshop_flow.state.models import (
    Actor,
    FlowInstance,
    FlowSummary,
    Injection,
    InspectionResult,
    ProgressSnapshot,
)

__all__ = [
    "Actor",
    "FlowInstance",
    "FlowSummary",
    "Injection",
    "InspectionResult",
    "ProgressSnapshot",
]
