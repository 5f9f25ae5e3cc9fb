"""
Engine for checklist templates and flow progress.

SQLite (the local default) and PostgreSQL share this module; repositories
take an explicit engine in tests and fall back to this one otherwise.
"""

from sqlmodel import create_engine, SQLModel
from ...config import settings


def _connect_args(url: str) -> dict:
    # Progress is flushed from the event loop thread, templates from request threads.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args=_connect_args(settings.DATABASE_URL),
)


def init_db(db_engine=None):
    """Create the flow_progress and checklist_steps tables when missing."""
    from . import tables  # noqa: F401

    SQLModel.metadata.create_all(db_engine or engine)
