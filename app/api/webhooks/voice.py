"""Twilio voice webhook endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import Response

from app.core.dependencies import get_call_flow_controller, get_messages
from app.services.call_flow.controller import CallFlowController
from app.services.call_flow.messages import ReminderMessages
from app.services.speech.twiml import TwimlRenderer

router = APIRouter()
logger = logging.getLogger(__name__)


def parse_int(value: Optional[str], default: int = 0) -> int:
    """Parse an integer webhook field, falling back to a default."""
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


def twiml_response(twiml: str) -> Response:
    return Response(content=twiml, media_type="application/xml")


@router.post("/voice")
async def handle_voice(
    request: Request,
    retryCount: Optional[str] = Query(None),
    CallSid: Optional[str] = Form(None),
    controller: CallFlowController = Depends(get_call_flow_controller),
    messages: ReminderMessages = Depends(get_messages),
):
    """
    Handle the voice leg of a reminder call.

    Twilio calls this when the call connects and again, with an incremented
    retryCount, whenever no speech was gathered.
    """
    retry_count = parse_int(retryCount)
    logger.info(
        f"[VOICE] Received voice webhook - CallSid: {CallSid}, retryCount: {retry_count}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        twiml = await controller.handle_voice(CallSid, retry_count)
        return twiml_response(twiml)
    except Exception as e:
        logger.error(
            f"[VOICE] Error handling voice webhook - CallSid: {CallSid}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        return twiml_response(TwimlRenderer().say_and_hangup(messages.error_reply))


@router.post("/gather")
async def handle_gather(
    request: Request,
    retryCount: Optional[str] = Query(None),
    CallSid: str = Form(...),
    SpeechResult: Optional[str] = Form(None),
    controller: CallFlowController = Depends(get_call_flow_controller),
    messages: ReminderMessages = Depends(get_messages),
):
    """
    Handle gathered speech from Twilio.

    This endpoint is called after Twilio collects the patient's answer.
    """
    retry_count = parse_int(retryCount)
    logger.info(
        f"[GATHER] Received speech input - CallSid: {CallSid}, "
        f"SpeechResult length: {len(SpeechResult) if SpeechResult else 0}, "
        f"retryCount: {retry_count}"
    )
    if SpeechResult:
        logger.debug(
            f"[GATHER] Speech text: '{SpeechResult[:200]}{'...' if len(SpeechResult) > 200 else ''}' - CallSid: {CallSid}"
        )

    try:
        twiml = await controller.handle_gather(CallSid, SpeechResult, retry_count)
        return twiml_response(twiml)
    except Exception as e:
        logger.error(
            f"[GATHER] Error processing speech input - CallSid: {CallSid}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        # Thank the patient and end the call rather than leave Twilio without TwiML
        return twiml_response(TwimlRenderer().say_and_hangup(messages.generic_reply))


@router.post("/status")
async def handle_call_status(
    request: Request,
    CallSid: str = Form(...),
    CallStatus: str = Form(...),
    AnsweredBy: Optional[str] = Form(None),
    CallDuration: Optional[str] = Form(None),
    To: Optional[str] = Form(None),
    controller: CallFlowController = Depends(get_call_flow_controller),
):
    """
    Handle call status updates from Twilio.

    This endpoint is called when call status changes (ringing, completed, failed, etc.).
    """
    logger.info(
        f"[CALL STATUS] Received status update - CallSid: {CallSid}, "
        f"CallStatus: {CallStatus}, AnsweredBy: {AnsweredBy}, CallDuration: {CallDuration}"
    )

    try:
        await controller.handle_status(
            CallSid,
            CallStatus,
            answered_by=AnsweredBy,
            duration=parse_int(CallDuration),
            to=To,
        )
    except Exception as e:
        logger.error(
            f"[CALL STATUS] Error handling call status update - CallSid: {CallSid}, "
            f"CallStatus: {CallStatus}, Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )

    # Always return OK to Twilio to avoid retries
    return Response(content="OK", media_type="text/plain")
