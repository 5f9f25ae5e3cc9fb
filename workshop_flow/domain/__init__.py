"""
Domain Layer - Static Data Models

Defines the static structure of workshop checklists: Steps, decision
Options and Templates.
"""

from workshop_flow.domain.models import (
    ChecklistTemplate,
    DecisionOption,
    Step,
    StepInput,
    StepKind,
    validate_template,
)

__all__ = [
    "ChecklistTemplate",
    "DecisionOption",
    "Step",
    "StepInput",
    "StepKind",
    "validate_template",
]
