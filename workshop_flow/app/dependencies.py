"""
Dependency Injection Wiring (Composition Root).

Builds the process-wide singletons (template source, progress storage,
finalization sink, FlowService) and wires them together. Each provider is
wrapped in @lru_cache so FastAPI resolves the same instance on every
request; tests swap them through app.dependency_overrides.

Open flow instances live inside the FlowService, so it must be a singleton
for a technician's flow to survive across requests.
"""


from functools import lru_cache
from fastapi import Depends

from ..repositories.template import TemplateRepository, SqlTemplateRepository
from ..repositories.progress import ProgressRepository, SqlProgressRepository
from ..services.finalization import FinalizationSink, RecordingFinalizationSink
from ..services.flow import FlowService


# Template Repository (Singleton)
@lru_cache()
def get_template_repository() -> TemplateRepository:
    # return StaticTemplateRepository()
    return SqlTemplateRepository()

# Progress Repository (Singleton)
@lru_cache()
def get_progress_repository() -> ProgressRepository:
    # return InMemoryProgressRepository()
    return SqlProgressRepository()

# Finalization Sink (Singleton)
# Note: the order-status handler plugs in here; the recording sink keeps summaries in memory.
@lru_cache()
def get_finalization_sink() -> FinalizationSink:
    return RecordingFinalizationSink()

# The Flow Service (Singleton Service)
@lru_cache()
def get_flow_service(
    template_repo: TemplateRepository = Depends(get_template_repository),
    progress_repo: ProgressRepository = Depends(get_progress_repository),
    sink: FinalizationSink = Depends(get_finalization_sink),
) -> FlowService:
    """
    Injects all necessary components into the FlowService.
    """
    return FlowService(
        template_repository=template_repo,
        progress_repository=progress_repo,
        finalization_sink=sink,
    )
