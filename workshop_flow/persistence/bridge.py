"""
Persistence Bridge - Local-First Checkpointing

The engine hands every checkpoint to the bridge and moves on. The bridge
coalesces bursts of checkpoints into one write (last write wins), retries
failed writes with backoff, and reports degraded saving through `status`
instead of raising. The in-memory FlowInstance stays authoritative.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..config import settings
from ..repositories.progress import ProgressRepository
from ..state.models import Actor, ProgressSnapshot
from ..utils.retry import compute_backoff

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    """
    Non-blocking save indicator for the presentation layer.

    IDLE: Nothing has been checkpointed yet.
    PENDING: A checkpoint is waiting for the debounce window or a flush.
    SAVING: A write is in flight.
    SAVED: The latest checkpoint reached storage.
    DEGRADED: Retries were exhausted; the checkpoint is still pending.
    """
    IDLE = "IDLE"
    PENDING = "PENDING"
    SAVING = "SAVING"
    SAVED = "SAVED"
    DEGRADED = "DEGRADED"


class PersistenceBridge:
    def __init__(
        self,
        repository: ProgressRepository,
        flow_id: str,
        actor: Optional[Actor] = None,
        debounce_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        retry_jitter: Optional[float] = None,
    ):
        self.repository = repository
        self.flow_id = flow_id
        self.actor = actor
        self.debounce_seconds = (
            settings.SAVE_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.max_retries = settings.SAVE_MAX_RETRIES if max_retries is None else max_retries
        self.retry_base_delay = (
            settings.SAVE_RETRY_BASE_DELAY if retry_base_delay is None else retry_base_delay
        )
        self.retry_jitter = settings.SAVE_RETRY_JITTER if retry_jitter is None else retry_jitter

        self.status = SaveStatus.IDLE
        self.last_error: Optional[str] = None
        self._pending: Optional[ProgressSnapshot] = None
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def save(self, snapshot: ProgressSnapshot) -> None:
        """
        Fire-and-forget checkpoint. Replaces any snapshot still waiting and
        schedules a debounced flush when an event loop is running; without
        one the snapshot waits for an explicit flush().
        """
        self._pending = snapshot
        if self.status != SaveStatus.SAVING:
            self.status = SaveStatus.PENDING

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, checkpoint for flow {self.flow_id} deferred")
            return

        if self._task is None or self._task.done():
            self._task = loop.create_task(self._flush_later())

    async def load(self) -> Optional[ProgressSnapshot]:
        """Returns the last stored snapshot, or None if the flow never started."""
        return await asyncio.to_thread(self.repository.get, self.flow_id)

    async def flush(self) -> bool:
        """
        Writes the pending snapshot, if any. Returns False when retries ran
        out; the snapshot then stays pending for the next attempt.
        """
        async with self._lock:
            while self._pending is not None:
                snapshot = self._pending
                self._pending = None
                try:
                    written = await self._write(snapshot)
                except asyncio.CancelledError:
                    if self._pending is None:
                        self._pending = snapshot
                    raise
                if not written:
                    if self._pending is None:
                        self._pending = snapshot
                    self.status = SaveStatus.DEGRADED
                    return False
            return True

    async def close(self) -> bool:
        """Cancels a waiting debounce and flushes what is left."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        return await self.flush()

    async def _flush_later(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self.flush()

    async def _save_in_thread(self, snapshot: ProgressSnapshot) -> None:
        write = asyncio.ensure_future(
            asyncio.to_thread(self.repository.save, self.flow_id, snapshot)
        )
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            # The thread cannot be stopped; let it land before a newer write starts.
            await asyncio.wait([write])
            if not write.cancelled() and write.exception() is not None:
                logger.warning(
                    f"Interrupted save for flow {self.flow_id} failed: {write.exception()}"
                )
            raise

    async def _write(self, snapshot: ProgressSnapshot) -> bool:
        stamped = snapshot.model_copy(
            update={
                "last_updated": datetime.now(timezone.utc),
                "last_actor": self.actor,
            }
        )
        self.status = SaveStatus.SAVING

        for attempt in range(1, self.max_retries + 1):
            try:
                await self._save_in_thread(stamped)
            except Exception as e:
                self.last_error = str(e)
                logger.warning(
                    f"Saving progress for flow {self.flow_id} failed "
                    f"(attempt {attempt}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(
                        compute_backoff(attempt, self.retry_base_delay, self.retry_jitter)
                    )
                continue

            self.status = SaveStatus.SAVED
            self.last_error = None
            return True

        logger.error(
            f"Giving up on saving progress for flow {self.flow_id} after "
            f"{self.max_retries} attempts; keeping it in memory"
        )
        return False
