"""
Finalization Sink Interface.

Defines the contract for the component that owns business finalization
once a technician confirms a finished checklist (e.g. moving a bike build
to "ready for pickup").
"""
from abc import ABC, abstractmethod
from typing import List, Tuple

from ..state.models import FlowSummary


class FinalizationSink(ABC):
    @abstractmethod
    async def finalize(self, flow_id: str, summary: FlowSummary) -> None:
        """
        Receives the summary of a confirmed flow. Errors raised here are
        reported to the caller; the flow stays open so it can be retried.
        """
        pass


class RecordingFinalizationSink(FinalizationSink):
    """
    Keeps finalized summaries in memory. Stands in for the order-status
    handler during development and tests.
    """

    def __init__(self):
        self.finalized: List[Tuple[str, FlowSummary]] = []

    async def finalize(self, flow_id: str, summary: FlowSummary) -> None:
        self.finalized.append((flow_id, summary))
