import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import Response

from .dependencies import get_flow_service
from ..config import settings
from ..exceptions import FlowValidationError, TemplateNotFoundError
from ..execution.schemas.transitions import TransitionRequest
from ..infrastructure.database.connection import init_db
from ..services.exceptions import FlowNotFinishedError, FlowNotFoundError
from ..services.flow import FlowService
from ..state.models import FlowSummary
from .schemas import FinalizeRequest, FlowResponse, OpenFlowRequest

logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Workshop Flow", lifespan=lifespan)


def _flow_response(service: FlowService, flow_id: str) -> FlowResponse:
    engine = service.get_flow(flow_id)
    return FlowResponse(
        flow_id=flow_id,
        save_status=service.save_status(flow_id),
        view=engine.view(),
    )

# --- Endpoints ---

@app.post(
    "/flows",
    response_model=FlowResponse,
    status_code=status.HTTP_201_CREATED
)
async def open_flow(
    request: OpenFlowRequest,
    service: FlowService = Depends(get_flow_service)
):
    """Starts a flow, or resumes it from its last checkpoint."""
    try:
        await service.open_flow(
            flow_id=request.flow_id,
            workshop_id=request.workshop_id,
            template_name=request.template_name,
            actor=request.actor,
        )
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _flow_response(service, request.flow_id)


@app.get("/flows/{flow_id}", response_model=FlowResponse)
def get_flow(
    flow_id: str,
    service: FlowService = Depends(get_flow_service)
):
    try:
        return _flow_response(service, flow_id)
    except FlowNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/flows/{flow_id}/transitions", response_model=FlowResponse)
async def apply_transition(
    flow_id: str,
    request: TransitionRequest,
    service: FlowService = Depends(get_flow_service)
):
    """
    Applies one gesture (complete, skip, decide, back, jump, revert, note).
    Invalid requests leave the flow untouched and return 409.
    """
    try:
        service.apply(flow_id, request)
    except FlowNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FlowValidationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _flow_response(service, flow_id)


@app.post("/flows/{flow_id}/finalize", response_model=FlowSummary)
async def finalize_flow(
    flow_id: str,
    request: Optional[FinalizeRequest] = None,
    service: FlowService = Depends(get_flow_service)
):
    inspection = request.inspection if request else None
    try:
        return await service.finalize(flow_id, inspection)
    except FlowNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FlowNotFinishedError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.delete("/flows/{flow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_flow(
    flow_id: str,
    service: FlowService = Depends(get_flow_service)
):
    """
    Exits a flow without finalizing it. Progress stays resumable.
    """
    closed = await service.close_flow(flow_id)
    if not closed:
        raise HTTPException(status_code=404, detail="Flow not open")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)
