"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the domain and state models (Step, ProgressSnapshot).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests and local runs).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FlowProgressDBModel(SQLModel, table=True):
    """
    Persistence model for flow checkpoints.
    One row per flow instance (e.g. one bike build's assembly run).
    """

    __tablename__ = "flow_progress"

    flow_id: str = Field(primary_key=True, index=True)

    # The entire ProgressSnapshot; the last write wins.
    snapshot: Dict[str, Any] = Field(sa_column=Column(JSONType, nullable=False))

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ChecklistStepDBModel(SQLModel, table=True):
    """
    Persistence model for checklist template steps.
    One row per top-level step; decision options and their injected steps
    live inside step_data.
    """

    __tablename__ = "checklist_steps"

    id: Optional[int] = Field(default=None, primary_key=True)
    workshop_id: str = Field(index=True)
    template_name: str = Field(index=True)
    template_title: str
    step_id: str
    order_index: int = Field(default=0)
    is_active: bool = Field(default=True)

    # The serialized Step (options, injected steps, inputs).
    step_data: Dict[str, Any] = Field(sa_column=Column(JSONType, nullable=False))

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
