"""
Engine Exceptions

Validation errors are raised synchronously by FlowEngine transitions and
leave the flow instance untouched. TemplateError is fatal at construction.
Persistence failures never surface here; the PersistenceBridge owns them.
"""


class WorkshopFlowError(Exception):
    """Base class for all workshop_flow errors."""
    pass


class TemplateError(WorkshopFlowError):
    """Raised when a checklist template is empty or inconsistent."""
    pass


class FlowValidationError(WorkshopFlowError):
    """A transition request that is invalid for the current flow state."""
    pass


class StepRequiredError(FlowValidationError):
    """Raised when skip() is requested on a required step."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"Step '{step_id}' is required and cannot be skipped.")


class InvalidOptionError(FlowValidationError):
    """Raised when decide() receives a value the step does not declare."""

    def __init__(self, step_id: str, value: str):
        self.step_id = step_id
        self.value = value
        super().__init__(f"'{value}' is not an option of decision step '{step_id}'.")


class OutOfRangeError(FlowValidationError):
    """Raised when jump() targets an index outside the sequence."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Step index {index} is out of range (0..{length - 1}).")


class StepKindError(FlowValidationError):
    """Raised when decide() is requested on a step that is not a decision."""

    def __init__(self, step_id: str, kind: str):
        self.step_id = step_id
        self.kind = kind
        super().__init__(f"Step '{step_id}' is of kind '{kind}', not 'decision'.")


class UnknownStepError(FlowValidationError):
    """Raised when a step id is not part of the materialized sequence."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"Step '{step_id}' is not part of this flow.")


class TemplateNotFoundError(WorkshopFlowError):
    """Raised when no checklist template exists for a workshop and name."""

    def __init__(self, workshop_id: str, template_name: str):
        self.workshop_id = workshop_id
        self.template_name = template_name
        super().__init__(
            f"Checklist template '{template_name}' not found for workshop '{workshop_id}'."
        )
