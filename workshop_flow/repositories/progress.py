from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlmodel import Session, select

from ..state.models import ProgressSnapshot
from ..infrastructure.database.tables import FlowProgressDBModel
from ..infrastructure.database import connection


class ProgressRepository(ABC):
    """
    Defines how the application stores flow checkpoints.
    The PersistenceBridge only talks to this interface, so storage can move
    (Memory -> SQL -> API) without touching the engine.
    """

    @abstractmethod
    def get(self, flow_id: str) -> Optional[ProgressSnapshot]:
        """Retrieves the last snapshot of a flow, or None if never saved."""
        pass

    @abstractmethod
    def save(self, flow_id: str, snapshot: ProgressSnapshot):
        """Stores the complete snapshot, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self, flow_id: str) -> bool:
        """Deletes the stored progress. Returns True if found and deleted."""
        pass


class InMemoryProgressRepository(ProgressRepository):
    """
    Uses in-memory dictionary for progress storage for testing/dev purposes.
    """

    def __init__(self):
        self._store: Dict[str, ProgressSnapshot] = {}

    def get(self, flow_id: str) -> Optional[ProgressSnapshot]:
        snapshot = self._store.get(flow_id)
        return snapshot.model_copy(deep=True) if snapshot else None

    def save(self, flow_id: str, snapshot: ProgressSnapshot):
        self._store[flow_id] = snapshot.model_copy(deep=True)

    def delete(self, flow_id: str) -> bool:
        if flow_id in self._store:
            del self._store[flow_id]
            return True
        return False


class SqlProgressRepository(ProgressRepository):
    """
    SQL + JSON(B) storage for flow checkpoints.
    """

    def __init__(self, db_engine=None):
        self.engine = db_engine or connection.engine

    def get(self, flow_id: str) -> Optional[ProgressSnapshot]:
        with Session(self.engine) as db:
            statement = select(FlowProgressDBModel).where(
                FlowProgressDBModel.flow_id == flow_id
            )
            result = db.exec(statement).first()

            if not result:
                return None

            # Deserialize JSON back into the Pydantic snapshot
            return ProgressSnapshot.model_validate(result.snapshot)

    def save(self, flow_id: str, snapshot: ProgressSnapshot):
        with Session(self.engine) as db:
            statement = select(FlowProgressDBModel).where(
                FlowProgressDBModel.flow_id == flow_id
            )
            result = db.exec(statement).first()

            if result:
                # Update the JSON blob and the timestamp
                result.snapshot = snapshot.model_dump(mode="json")
                result.updated_at = datetime.now(timezone.utc)
            else:
                # First checkpoint of this flow
                result = FlowProgressDBModel(
                    flow_id=flow_id, snapshot=snapshot.model_dump(mode="json")
                )
            db.add(result)
            db.commit()

    def delete(self, flow_id: str) -> bool:
        with Session(self.engine) as db:
            statement = select(FlowProgressDBModel).where(
                FlowProgressDBModel.flow_id == flow_id
            )
            result = db.exec(statement).first()

            if result:
                db.delete(result)
                db.commit()
                return True
            return False
