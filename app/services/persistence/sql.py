"""SQL call record store."""
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.errors import PersistenceError
from app.db.models import CallLog
from app.services.call_session.models import AdherenceStatus, CallSession, CallStatus
from app.services.persistence.base import CallRecordStore, check_fields

logger = logging.getLogger(__name__)


def _to_session(record: CallLog) -> CallSession:
    return CallSession(
        call_id=record.call_sid,
        patient_phone_number=record.patient_phone_number,
        status=CallStatus(record.status),
        retry_count=record.retry_count,
        last_transcript=record.last_transcript,
        adherence_status=AdherenceStatus(record.adherence_status),
        recording_url=record.recording_url,
        fallback_sent=record.fallback_sent,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _to_column(value: Any) -> Any:
    if isinstance(value, (CallStatus, AdherenceStatus)):
        return value.value
    return value


class SqlCallRecordStore(CallRecordStore):
    """Call record store backed by SQLAlchemy."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.engine = engine

    async def _get_record(self, db: AsyncSession, call_id: str) -> Optional[CallLog]:
        result = await db.execute(select(CallLog).where(CallLog.call_sid == call_id))
        return result.scalar_one_or_none()

    async def create(self, session: CallSession) -> CallSession:
        """Create a new call record or return existing one."""
        try:
            async with self.session_factory() as db:
                existing = await self._get_record(db, session.call_id)
                if existing:
                    return _to_session(existing)

                record = CallLog(
                    call_sid=session.call_id,
                    patient_phone_number=session.patient_phone_number,
                    status=session.status.value,
                    retry_count=session.retry_count,
                    last_transcript=session.last_transcript,
                    adherence_status=session.adherence_status.value,
                    recording_url=session.recording_url,
                    fallback_sent=session.fallback_sent,
                    created_at=session.created_at,
                    updated_at=session.updated_at,
                )
                db.add(record)
                await db.commit()
                await db.refresh(record)
                return _to_session(record)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create call record: {e}") from e

    async def find_by_call_id(self, call_id: str) -> Optional[CallSession]:
        """Get call by Twilio call SID."""
        try:
            async with self.session_factory() as db:
                record = await self._get_record(db, call_id)
                return _to_session(record) if record else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load call record: {e}") from e

    async def update(self, call_id: str, **fields: Any) -> Optional[CallSession]:
        """Overwrite fields on a call record."""
        check_fields(fields)
        try:
            async with self.session_factory() as db:
                record = await self._get_record(db, call_id)
                if record is None:
                    return None
                for name, value in fields.items():
                    setattr(record, name, _to_column(value))
                await db.commit()
                await db.refresh(record)
                return _to_session(record)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update call record: {e}") from e

    async def list(self, page: int = 1, limit: int = 10) -> Tuple[List[CallSession], int]:
        """Get call records, newest first."""
        offset = (max(page, 1) - 1) * limit
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(CallLog)
                    .order_by(desc(CallLog.created_at), desc(CallLog.id))
                    .offset(offset)
                    .limit(limit)
                )
                records = result.scalars().all()
                total = await db.scalar(select(func.count()).select_from(CallLog))
                return [_to_session(r) for r in records], total or 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list call records: {e}") from e

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
