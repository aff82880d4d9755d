"""FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends, Request

from app.core.config import settings
from app.services.call_flow.controller import CallFlowController
from app.services.call_flow.messages import ReminderMessages, load_messages
from app.services.persistence.base import CallRecordStore
from app.services.persistence.memory import InMemoryCallRecordStore
from app.services.telephony.gateway import TwilioGateway


def get_call_store(request: Request) -> CallRecordStore:
    """Get the call record store selected at startup."""
    store = getattr(request.app.state, "call_store", None)
    if store is None:
        store = InMemoryCallRecordStore()
        request.app.state.call_store = store
    return store


@lru_cache
def get_messages() -> ReminderMessages:
    """Get message templates."""
    return load_messages(settings.messages_file)


def get_telephony_gateway() -> TwilioGateway:
    """Get Twilio gateway instance."""
    return TwilioGateway(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_phone_number,
        api_base_url=settings.twilio_api_base_url,
        timeout=settings.http_timeout_seconds,
        record_calls=settings.record_calls,
        machine_detection=settings.machine_detection,
    )


def get_call_flow_controller(
    store: CallRecordStore = Depends(get_call_store),
    gateway: TwilioGateway = Depends(get_telephony_gateway),
    messages: ReminderMessages = Depends(get_messages),
) -> CallFlowController:
    """Get call flow controller."""
    return CallFlowController(
        store=store,
        gateway=gateway,
        messages=messages,
        webhook_base_url=settings.webhook_base_url,
        max_retries=settings.max_retries,
        min_call_duration_seconds=settings.min_call_duration_seconds,
    )
