"""Call flow controller: drives one reminder call across Twilio webhooks."""
import logging
from typing import Optional, Tuple

from app.core.errors import ClassificationError, GatewayError, PersistenceError
from app.services.adherence.classifier import classify, is_filler_only
from app.services.call_flow.fallback import FallbackDispatcher
from app.services.call_flow.messages import ReminderMessages
from app.services.call_flow.retry_policy import MAX_RETRIES, PromptAction, next_prompt
from app.services.call_session.models import (
    AdherenceStatus,
    CallSession,
    CallStatus,
    map_provider_status,
)
from app.services.persistence.base import CallRecordStore
from app.services.speech.twiml import TwimlRenderer, with_retry_count
from app.services.telephony.gateway import PlacedCall, TwilioGateway, validate_phone_number

logger = logging.getLogger(__name__)

VOICE_PATH = "/api/twilio/voice"
GATHER_PATH = "/api/twilio/gather"
STATUS_PATH = "/api/twilio/status"

FALLBACK_PROVIDER_STATUSES = frozenset({"no-answer", "busy", "failed", "canceled"})
HUMAN = "human"
MIN_CALL_DURATION_SECONDS = 5


def needs_fallback(
    provider_status: str,
    answered_by: Optional[str],
    duration: int,
    min_duration: int = MIN_CALL_DURATION_SECONDS,
) -> bool:
    """
    Decide whether a finished call should be followed up by SMS.

    Unanswered calls always qualify. A completed call qualifies when it was
    not picked up by a person or lasted less than min_duration seconds.
    """
    status = (provider_status or "").strip().lower()
    if status in FALLBACK_PROVIDER_STATUSES:
        return True
    if status == "completed":
        return (answered_by or "").lower() != HUMAN or duration < min_duration
    return False


class CallFlowController:
    """
    Handles the inbound events of a reminder call.

    The controller keeps no state between requests: everything it needs is
    either in the call record store or, for the retry counter, carried in
    the callback URL.
    """

    def __init__(
        self,
        store: CallRecordStore,
        gateway: TwilioGateway,
        messages: ReminderMessages,
        webhook_base_url: str,
        renderer: Optional[TwimlRenderer] = None,
        max_retries: int = MAX_RETRIES,
        min_call_duration_seconds: int = MIN_CALL_DURATION_SECONDS,
        fallback: Optional[FallbackDispatcher] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.messages = messages
        self.renderer = renderer or TwimlRenderer()
        self.max_retries = max_retries
        self.min_call_duration_seconds = min_call_duration_seconds
        self.fallback = fallback or FallbackDispatcher(gateway, store, messages)

        base_url = webhook_base_url.rstrip("/")
        self.voice_url = f"{base_url}{VOICE_PATH}"
        self.gather_url = f"{base_url}{GATHER_PATH}"
        self.status_url = f"{base_url}{STATUS_PATH}"

    async def _find(self, call_id: str) -> Optional[CallSession]:
        try:
            return await self.store.find_by_call_id(call_id)
        except PersistenceError as e:
            logger.warning(f"[CALL FLOW] Failed to load call record - CallSid: {call_id}, Error: {e.message}")
            return None

    async def _update(self, call_id: str, **fields) -> Optional[CallSession]:
        try:
            return await self.store.update(call_id, **fields)
        except PersistenceError as e:
            logger.warning(
                f"[CALL FLOW] Failed to update call record - CallSid: {call_id}, "
                f"Fields: {sorted(fields)}, Error: {e.message}"
            )
            return None

    async def initiate_call(self, phone_number: str) -> PlacedCall:
        """
        Place a reminder call to a patient.

        Raises:
            ValidationError: phone number is not E.164
            GatewayError: Twilio rejected or failed the request
        """
        validate_phone_number(phone_number)

        call = await self.gateway.place_call(phone_number, self.voice_url, self.status_url)
        logger.info(
            f"[INITIATE] Call initiated - CallSid: {call.sid}, Status: {call.status}"
        )

        try:
            await self.store.create(
                CallSession(call_id=call.sid, patient_phone_number=phone_number)
            )
        except PersistenceError as e:
            # The call is already ringing; a missing record must not fail the request
            logger.warning(
                f"[INITIATE] Failed to store call record - CallSid: {call.sid}, Error: {e.message}"
            )
        return call

    async def handle_voice(self, call_id: Optional[str], retry_count: int) -> str:
        """Return the TwiML for a voice leg entered with the given retry count."""
        decision = next_prompt(retry_count, self.max_retries, self.messages)

        if call_id:
            await self._update(call_id, retry_count=min(max(retry_count, 0), self.max_retries))

        if decision.action == PromptAction.TERMINATE:
            logger.info(
                f"[VOICE] Max retries reached, ending call - CallSid: {call_id}, "
                f"retryCount: {retry_count}"
            )
            return self.renderer.say_and_hangup(decision.message)

        logger.info(
            f"[VOICE] Prompting patient - CallSid: {call_id}, retryCount: {retry_count}"
        )
        return self.renderer.gather_with_redirect(
            decision.message,
            gather_url=with_retry_count(self.gather_url, max(retry_count, 0)),
            redirect_url=with_retry_count(self.voice_url, decision.next_retry_count),
        )

    def _build_reply(self, transcript: str) -> Tuple[AdherenceStatus, str]:
        try:
            adherence = classify(transcript)
            return adherence, self.messages.reply_for(adherence)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ClassificationError(f"Failed to build adherence reply: {e}") from e

    async def handle_gather(
        self, call_id: str, transcript: Optional[str], retry_count: int
    ) -> str:
        """Return the TwiML answering a gathered speech result."""
        if is_filler_only(transcript or ""):
            next_count = max(retry_count, 0) + 1
            logger.info(
                f"[GATHER] No speech detected, re-prompting - CallSid: {call_id}, "
                f"retryCount: {next_count}"
            )
            return self.renderer.redirect(with_retry_count(self.voice_url, next_count))

        session = await self._update(
            call_id, status=CallStatus.ANSWERED, last_transcript=transcript
        )

        try:
            adherence, reply = self._build_reply(transcript)
        except ClassificationError as e:
            logger.error(f"[GATHER] {e.message} - CallSid: {call_id}", exc_info=True)
            return self.renderer.say_and_hangup(self.messages.generic_reply)

        logger.info(
            f"[GATHER] Adherence classified - CallSid: {call_id}, "
            f"AdherenceStatus: {adherence}"
        )

        if session is not None and session.adherence_status != AdherenceStatus.UNKNOWN:
            logger.info(
                f"[GATHER] Adherence already recorded, keeping first verdict - "
                f"CallSid: {call_id}, Existing: {session.adherence_status}"
            )
        else:
            await self._update(call_id, adherence_status=adherence)

        return self.renderer.say_and_hangup(reply)

    async def handle_status(
        self,
        call_id: str,
        provider_status: str,
        answered_by: Optional[str] = None,
        duration: int = 0,
        to: Optional[str] = None,
    ) -> None:
        """Apply a Twilio call status callback."""
        status = map_provider_status(provider_status)
        if status is None:
            logger.warning(
                f"[CALL STATUS] Unrecognised status ignored - CallSid: {call_id}, "
                f"CallStatus: {provider_status}"
            )
            return

        session = await self._find(call_id)
        if session is not None and session.status == CallStatus.SMS_SENT:
            logger.info(
                f"[CALL STATUS] Fallback SMS already sent, keeping SmsSent - "
                f"CallSid: {call_id}, CallStatus: {provider_status}"
            )
        else:
            await self._update(call_id, status=status)

        if needs_fallback(provider_status, answered_by, duration, self.min_call_duration_seconds):
            logger.info(
                f"[CALL STATUS] Call did not reach patient, sending SMS fallback - "
                f"CallSid: {call_id}, CallStatus: {provider_status}, "
                f"AnsweredBy: {answered_by}, Duration: {duration}"
            )
            if session is None:
                if not to:
                    logger.error(
                        f"[CALL STATUS] No phone number for SMS fallback - CallSid: {call_id}"
                    )
                    return
                session = CallSession(call_id=call_id, patient_phone_number=to, status=status)
            await self.fallback.dispatch(session)
            return

        if status == CallStatus.COMPLETED:
            await self._store_recording(call_id)

    async def _store_recording(self, call_id: str) -> None:
        try:
            urls = await self.gateway.list_recordings(call_id)
        except GatewayError as e:
            logger.error(
                f"[CALL STATUS] Failed to fetch recording - CallSid: {call_id}, Error: {e.message}"
            )
            return

        if not urls:
            logger.info(f"[CALL STATUS] No recording available - CallSid: {call_id}")
            return

        logger.info(f"[CALL STATUS] Recording stored - CallSid: {call_id}, URL: {urls[0]}")
        await self._update(call_id, recording_url=urls[0])
