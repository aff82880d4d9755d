"""Call session models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CallStatus(str, Enum):
    """Lifecycle status of a reminder call."""

    INITIATED = "Initiated"
    RINGING = "Ringing"
    IN_PROGRESS = "InProgress"
    ANSWERED = "Answered"
    COMPLETED = "Completed"
    FAILED = "Failed"
    BUSY = "Busy"
    NO_ANSWER = "NoAnswer"
    VOICEMAIL_LEFT = "VoicemailLeft"
    SMS_SENT = "SmsSent"

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value


# Twilio CallStatus values mapped onto our lifecycle
PROVIDER_STATUS_MAP = {
    "queued": CallStatus.INITIATED,
    "initiated": CallStatus.INITIATED,
    "ringing": CallStatus.RINGING,
    "in-progress": CallStatus.IN_PROGRESS,
    "answered": CallStatus.IN_PROGRESS,
    "completed": CallStatus.COMPLETED,
    "busy": CallStatus.BUSY,
    "no-answer": CallStatus.NO_ANSWER,
    "failed": CallStatus.FAILED,
    "canceled": CallStatus.FAILED,
}


def map_provider_status(provider_status: str) -> Optional[CallStatus]:
    """Translate a Twilio CallStatus value, or None if it is not recognised."""
    return PROVIDER_STATUS_MAP.get((provider_status or "").strip().lower())


class AdherenceStatus(str, Enum):
    """Whether the patient reported taking their medication."""

    FULL = "Full"
    PARTIAL = "Partial"
    NONE = "None"
    UNCLEAR = "Unclear"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CallSession(BaseModel):
    """One outbound reminder call attempt."""

    call_id: str
    patient_phone_number: str
    status: CallStatus = CallStatus.INITIATED
    retry_count: int = Field(default=0, ge=0)
    last_transcript: Optional[str] = None
    adherence_status: AdherenceStatus = AdherenceStatus.UNKNOWN
    recording_url: Optional[str] = None
    fallback_sent: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
