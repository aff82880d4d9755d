"""SMS fallback for calls that did not reach a live person."""
import logging

from app.core.errors import GatewayError, PersistenceError, ValidationError
from app.services.call_flow.messages import ReminderMessages
from app.services.call_session.models import CallSession, CallStatus
from app.services.persistence.base import CallRecordStore
from app.services.telephony.gateway import TwilioGateway

logger = logging.getLogger(__name__)


class FallbackDispatcher:
    """Sends the voicemail text message when a reminder call fails."""

    def __init__(
        self,
        gateway: TwilioGateway,
        store: CallRecordStore,
        messages: ReminderMessages,
    ):
        self.gateway = gateway
        self.store = store
        self.messages = messages

    async def dispatch(self, session: CallSession) -> bool:
        """
        Send the fallback SMS for a session.

        A session that was already notified is skipped. Send failures are
        logged and leave the session status untouched; there is no retry
        within the same call cycle.

        Returns:
            True if an SMS was sent by this invocation
        """
        if session.fallback_sent or session.status == CallStatus.SMS_SENT:
            logger.info(
                f"[FALLBACK] SMS already sent, skipping - CallSid: {session.call_id}"
            )
            return False

        try:
            message_sid = await self.gateway.send_message(
                session.patient_phone_number, self.messages.voicemail
            )
        except (GatewayError, ValidationError) as e:
            logger.error(
                f"[FALLBACK] Failed to send SMS - CallSid: {session.call_id}, "
                f"Error: {type(e).__name__}: {e.message}"
            )
            return False

        logger.info(
            f"[FALLBACK] SMS sent - CallSid: {session.call_id}, MessageSid: {message_sid}"
        )

        try:
            await self.store.update(
                session.call_id, status=CallStatus.SMS_SENT, fallback_sent=True
            )
        except PersistenceError as e:
            logger.warning(
                f"[FALLBACK] Failed to record SMS status - CallSid: {session.call_id}, "
                f"Error: {e.message}"
            )
        return True
