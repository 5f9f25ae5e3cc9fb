"""
Domain Layer - Static Data Models

This module defines the static structure of workshop checklists: the Steps a
technician walks through, the decision Options that can branch a checklist
at runtime, and the Templates that group them. These dataclasses are
sourced from checklist templates (database rows or built-in defaults) and
are never mutated by the engine.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Set

from ..exceptions import TemplateError

"""
StepKind classifies step behavior:
- action: Something the technician does and confirms (e.g. "Mount pedals")
- decision: Branch point with predefined options, may inject sub-steps
- input: Collects a measurement or free text (torque, serial number, ...)
"""
StepKind = Literal["action", "decision", "input"]

InputType = Literal["text", "number", "torque", "checkbox", "note"]


@dataclass(frozen=True)
class StepInput:
    """
    Descriptor for a value collected on an `input` step.

    Opaque to the engine; the presentation shell renders it and stores the
    entered value as a note on the step.
    """
    type: InputType
    label: str
    required: bool = False
    placeholder: Optional[str] = None
    unit: Optional[str] = None


@dataclass(frozen=True)
class DecisionOption:
    """
    One answer to a `decision` step.

    Attributes:
        label: Human-readable answer (e.g. "Hydraulic brakes").
        value: Stable key recorded in the flow's answers.
        injected_steps: Steps spliced into the sequence directly after the
            decision step when this option is chosen.
    """
    label: str
    value: str
    injected_steps: List["Step"] = field(default_factory=list)


@dataclass(frozen=True)
class Step:
    """
    Fundamental unit of work in a workshop checklist.

    Attributes:
        id: Unique identifier within one flow instance.
        kind: StepKind
        title: Short instruction shown to the technician.
        description: Longer explanation (tools, torque values, hints).
        required: If True the step cannot be skipped.
        options: Valid answers for a decision step, in display order.
        inputs: Values collected on an input step.
        warning: Advisory flag; highlighted by the UI, no engine effect.
    """
    id: str
    kind: StepKind
    title: str
    description: Optional[str] = None
    required: bool = False
    options: List[DecisionOption] = field(default_factory=list)
    inputs: List[StepInput] = field(default_factory=list)
    warning: bool = False

    @property
    def is_decision(self) -> bool:
        return self.kind == "decision"

    def option(self, value: str) -> Optional[DecisionOption]:
        return next((opt for opt in self.options if opt.value == value), None)


@dataclass
class ChecklistTemplate:
    """
    Ordered list of steps forming one checklist (e.g. "standard_assembly").

    Attributes:
        name: Template key, unique per workshop.
        title: Display title.
        steps: Top-level steps in execution order.
    """
    name: str
    title: str
    steps: List[Step] = field(default_factory=list)


def validate_template(steps: List[Step]) -> None:
    """
    Checks that a list of steps can drive a flow instance.

    Raises TemplateError if the list is empty, if two steps that could be
    materialized at the same time share an ID, or if a decision step has
    no options or repeats an option value. Options of one decision are
    mutually exclusive, so their injected sub-trees may reuse IDs.
    """
    if not steps:
        raise TemplateError("Checklist template contains no steps.")
    _collect_ids(steps)


def _collect_ids(steps: Iterable[Step]) -> Set[str]:
    seen: Set[str] = set()
    for step in steps:
        subtree = {step.id} | _collect_option_ids(step)
        clash = seen & subtree
        if clash:
            raise TemplateError(f"Duplicate step id(s) in template: {sorted(clash)}")
        seen |= subtree
    return seen


def _collect_option_ids(step: Step) -> Set[str]:
    if step.kind != "decision":
        return set()
    if not step.options:
        raise TemplateError(f"Decision step '{step.id}' declares no options.")

    values: Dict[str, int] = {}
    ids: Set[str] = set()
    for opt in step.options:
        values[opt.value] = values.get(opt.value, 0) + 1
        option_ids = _collect_ids(opt.injected_steps)
        if step.id in option_ids:
            raise TemplateError(f"Decision step '{step.id}' injects itself.")
        ids |= option_ids

    repeated = [value for value, count in values.items() if count > 1]
    if repeated:
        raise TemplateError(
            f"Decision step '{step.id}' repeats option value(s): {repeated}"
        )
    return ids
