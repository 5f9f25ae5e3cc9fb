"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from typing import Optional

from pydantic import BaseModel

from ..execution.schemas.transitions import FlowView
from ..persistence.bridge import SaveStatus
from ..state.models import Actor, InspectionResult


class OpenFlowRequest(BaseModel):
    flow_id: str
    workshop_id: str
    template_name: Optional[str] = None
    actor: Optional[Actor] = None


class FinalizeRequest(BaseModel):
    inspection: Optional[InspectionResult] = None


class FlowResponse(BaseModel):
    flow_id: str
    save_status: SaveStatus
    view: FlowView
