"""
Service Layer Exceptions

Custom exceptions for the FlowService and related orchestration logic.
"""

from ..exceptions import WorkshopFlowError


class FlowNotFoundError(WorkshopFlowError):
    """Raised when a flow id has no open flow instance."""

    def __init__(self, flow_id: str):
        self.flow_id = flow_id
        super().__init__(f"Flow {flow_id} is not open.")


class FlowNotFinishedError(WorkshopFlowError):
    """Raised when finalization is requested before the flow reached its end."""

    def __init__(self, flow_id: str):
        self.flow_id = flow_id
        super().__init__(f"Flow {flow_id} has not reached its last step yet.")
