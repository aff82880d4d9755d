"""Call record store interface."""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from app.services.call_session.models import CallSession


class CallRecordStore(ABC):
    """
    Abstract key-value store of call sessions keyed by call id.

    Implementations raise PersistenceError when the backing store fails.
    """

    @abstractmethod
    async def create(self, session: CallSession) -> CallSession:
        """Store a new session, or return the existing one for the same call id."""
        pass

    @abstractmethod
    async def find_by_call_id(self, call_id: str) -> Optional[CallSession]:
        """Get a session by call id."""
        pass

    @abstractmethod
    async def update(self, call_id: str, **fields: Any) -> Optional[CallSession]:
        """Overwrite the given fields. Returns None when the call id is unknown."""
        pass

    @abstractmethod
    async def list(self, page: int = 1, limit: int = 10) -> Tuple[List[CallSession], int]:
        """Get one page of sessions, newest first, with the total count."""
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        pass


UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "retry_count",
        "last_transcript",
        "adherence_status",
        "recording_url",
        "fallback_sent",
    }
)


def check_fields(fields: dict) -> None:
    """Reject updates to unknown or immutable fields."""
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
