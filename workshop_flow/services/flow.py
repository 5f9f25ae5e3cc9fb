"""
Flow Service - Application Orchestration Layer

This service is the entry point for all checklist-run operations. It
orchestrates the Template source, the Progress storage, the FlowEngine and
the Finalization sink, and owns the set of flow instances open in this
process (single writer per flow for the duration of a session).
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from ..config import settings
from ..execution.engine import FlowEngine
from ..execution.schemas.transitions import FlowView, TransitionRequest
from ..persistence.bridge import PersistenceBridge, SaveStatus
from ..repositories.progress import ProgressRepository
from ..repositories.template import TemplateRepository
from ..state.models import Actor, FlowSummary, InspectionResult
from .exceptions import FlowNotFinishedError, FlowNotFoundError
from .finalization import FinalizationSink

logger = logging.getLogger(__name__)


class FlowService:
    def __init__(
        self,
        template_repository: TemplateRepository,
        progress_repository: ProgressRepository,
        finalization_sink: FinalizationSink,
    ):
        self.template_repo = template_repository
        self.progress_repo = progress_repository
        self.sink = finalization_sink
        self._flows: Dict[str, FlowEngine] = {}

    async def open_flow(
        self,
        flow_id: str,
        workshop_id: str,
        template_name: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> FlowEngine:
        """
        Opens a flow fresh, or resumes it from its last checkpoint.
        Re-opening a flow that is already open returns the same engine.
        """
        if flow_id in self._flows:
            engine = self._flows[flow_id]
            if actor is not None:
                engine.bridge.actor = actor
            return engine

        template_name = template_name or settings.DEFAULT_TEMPLATE_NAME
        template = self.template_repo.get_template(workshop_id, template_name)

        bridge = PersistenceBridge(self.progress_repo, flow_id, actor=actor)
        snapshot = await bridge.load()
        engine = FlowEngine(template, snapshot=snapshot, bridge=bridge)

        if snapshot is None:
            logger.info(f"Started flow {flow_id} with template '{template.name}'")
        else:
            logger.info(f"Resumed flow {flow_id} with template '{template.name}'")

        self._flows[flow_id] = engine
        return engine

    def get_flow(self, flow_id: str) -> FlowEngine:
        engine = self._flows.get(flow_id)
        if engine is None:
            raise FlowNotFoundError(flow_id)
        return engine

    def apply(self, flow_id: str, request: TransitionRequest) -> FlowView:
        """Forwards a transition request to the flow's engine."""
        return self.get_flow(flow_id).transition(request)

    def save_status(self, flow_id: str) -> SaveStatus:
        return self.get_flow(flow_id).bridge.status

    async def close_flow(self, flow_id: str) -> bool:
        """
        Exit without finalizing. Unsaved notes go out with a last
        checkpoint; the flow can be resumed later from storage.
        """
        engine = self._flows.pop(flow_id, None)
        if engine is None:
            return False
        engine.checkpoint()
        saved = await engine.bridge.close()
        logger.info(f"Closed flow {flow_id} (progress {engine.progress()}%, saved={saved})")
        return True

    async def finalize(
        self, flow_id: str, inspection: Optional[InspectionResult] = None
    ) -> FlowSummary:
        """
        Hands the summary of a finished flow to the finalization sink and
        discards the instance. The optional inspection sign-off (rating,
        feedback) rides along in the summary untouched.
        """
        engine = self.get_flow(flow_id)
        if not engine.is_finished():
            raise FlowNotFinishedError(flow_id)

        engine.checkpoint()
        await engine.bridge.close()

        summary = engine.summary()
        summary.inspection = inspection
        summary.completed_at = datetime.now(timezone.utc)
        await self.sink.finalize(flow_id, summary)
        del self._flows[flow_id]

        logger.info(
            f"Finalized flow {flow_id}: {len(summary.completed_steps)} completed, "
            f"{len(summary.skipped_steps)} skipped, "
            f"all required completed={summary.all_required_completed}"
        )
        return summary
