"""Database models."""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CallLog(Base):
    """Reminder call record model."""

    __tablename__ = "call_logs"

    id = Column(Integer, primary_key=True, index=True)
    call_sid = Column(String, unique=True, index=True, nullable=False)
    patient_phone_number = Column(String, index=True, nullable=False)
    status = Column(String, default="Initiated", index=True, nullable=False)
    retry_count = Column(Integer, default=0, nullable=False)
    last_transcript = Column(Text, nullable=True)
    adherence_status = Column(String, default="Unknown", index=True, nullable=False)
    recording_url = Column(String, nullable=True)
    fallback_sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_call_logs_phone_created", "patient_phone_number", "created_at"),
        Index("ix_call_logs_adherence_created", "adherence_status", "created_at"),
    )
