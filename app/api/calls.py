"""Reminder call API endpoints."""
import logging
import math
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.core.dependencies import get_call_flow_controller, get_call_store
from app.core.errors import PersistenceError
from app.services.call_flow.controller import CallFlowController
from app.services.persistence.base import CallRecordStore

router = APIRouter()
logger = logging.getLogger(__name__)


class InitiateCallRequest(BaseModel):
    """Initiate call request model."""
    phone_number: Optional[str] = None


class InitiateCallResponse(BaseModel):
    """Initiate call response model."""
    success: bool = True
    message: str = "Call initiated successfully"
    call_sid: str
    status: str


class CallLogResponse(BaseModel):
    """Call log response model."""
    call_sid: str
    patient_phone_number: str
    status: str
    retry_count: int
    patient_response: Optional[str] = None
    adherence_status: str
    recording_url: Optional[str] = None
    fallback_sent: bool
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class CallLogsResponse(BaseModel):
    """Paginated call logs response model."""
    success: bool = True
    logs: List[CallLogResponse]
    pagination: Pagination


@router.post("/call", response_model=InitiateCallResponse)
async def initiate_call(
    body: InitiateCallRequest,
    controller: CallFlowController = Depends(get_call_flow_controller),
):
    """Place a medication reminder call to a patient."""
    logger.info("[INITIATE] Call requested")
    call = await controller.initiate_call(body.phone_number)
    return InitiateCallResponse(call_sid=call.sid, status=call.status)


@router.get("/logs", response_model=CallLogsResponse)
async def get_call_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: CallRecordStore = Depends(get_call_store),
):
    """Get reminder call logs, newest first."""
    logger.info(f"[CALL LOGS] Request received - page: {page}, limit: {limit}")

    try:
        sessions, total = await store.list(page=page, limit=limit)
    except PersistenceError as e:
        logger.error(f"[CALL LOGS] Error fetching call logs - Error: {e.message}")
        raise

    logs = [
        CallLogResponse(
            call_sid=s.call_id,
            patient_phone_number=s.patient_phone_number,
            status=s.status.value,
            retry_count=s.retry_count,
            patient_response=s.last_transcript,
            adherence_status=s.adherence_status.value,
            recording_url=s.recording_url,
            fallback_sent=s.fallback_sent,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
        for s in sessions
    ]
    logger.info(f"[CALL LOGS] Returning {len(logs)} of {total} call logs")
    return CallLogsResponse(
        logs=logs,
        pagination=Pagination(
            total=total, page=page, limit=limit, pages=math.ceil(total / limit)
        ),
    )
