"""In-memory call record store."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.services.call_session.models import CallSession
from app.services.persistence.base import CallRecordStore, check_fields

logger = logging.getLogger(__name__)


class InMemoryCallRecordStore(CallRecordStore):
    """
    Call record store kept in process memory.

    Used when no database is configured or the database cannot be reached.
    Records are lost on restart.
    """

    def __init__(self):
        self._sessions: Dict[str, CallSession] = {}

    async def create(self, session: CallSession) -> CallSession:
        existing = self._sessions.get(session.call_id)
        if existing:
            return existing.model_copy()
        self._sessions[session.call_id] = session.model_copy()
        logger.debug(f"[MEMORY STORE] Created call record - CallSid: {session.call_id}")
        return session.model_copy()

    async def find_by_call_id(self, call_id: str) -> Optional[CallSession]:
        session = self._sessions.get(call_id)
        return session.model_copy() if session else None

    async def update(self, call_id: str, **fields: Any) -> Optional[CallSession]:
        check_fields(fields)
        session = self._sessions.get(call_id)
        if session is None:
            logger.debug(f"[MEMORY STORE] Update for unknown call - CallSid: {call_id}")
            return None
        updated = session.model_copy(
            update={**fields, "updated_at": datetime.now(timezone.utc)}
        )
        self._sessions[call_id] = updated
        return updated.model_copy()

    async def list(self, page: int = 1, limit: int = 10) -> Tuple[List[CallSession], int]:
        ordered = sorted(
            self._sessions.values(), key=lambda s: s.created_at, reverse=True
        )
        start = (max(page, 1) - 1) * limit
        return [s.model_copy() for s in ordered[start:start + limit]], len(ordered)
