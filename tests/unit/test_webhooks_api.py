"""Unit tests for Twilio webhook endpoints."""
import pytest

from app.core.errors import PersistenceError
from app.services.call_session.models import AdherenceStatus, CallSession, CallStatus

PATIENT_NUMBER = "+12345678900"
VOICE_URL = "https://reminders.example.com/api/twilio/voice"


@pytest.fixture
async def session(memory_store):
    return await memory_store.create(
        CallSession(call_id="CA123", patient_phone_number=PATIENT_NUMBER)
    )


class TestVoiceWebhook:
    """Test POST /api/twilio/voice."""

    def test_initial_prompt(self, test_client):
        response = test_client.post("/api/twilio/voice", data={"CallSid": "CA123"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert "<Gather" in response.text
        assert f"{VOICE_URL}?retryCount=1" in response.text

    def test_retry_count_from_query(self, test_client):
        response = test_client.post(
            "/api/twilio/voice?retryCount=2", data={"CallSid": "CA123"}
        )

        assert response.status_code == 200
        assert "<Hangup/>" in response.text
        assert "<Gather" not in response.text

    def test_malformed_retry_count_defaults_to_zero(self, test_client):
        response = test_client.post(
            "/api/twilio/voice?retryCount=abc", data={"CallSid": "CA123"}
        )
        assert f"{VOICE_URL}?retryCount=1" in response.text


class TestGatherWebhook:
    """Test POST /api/twilio/gather."""

    @pytest.mark.asyncio
    async def test_positive_answer(self, test_client, memory_store, session):
        response = test_client.post(
            "/api/twilio/gather?retryCount=0",
            data={"CallSid": "CA123", "SpeechResult": "yes I took my pills"},
        )

        assert response.status_code == 200
        assert "Thank you for confirming" in response.text
        assert "<Hangup/>" in response.text

    @pytest.mark.asyncio
    async def test_positive_answer_is_stored(self, test_client, memory_store, session):
        test_client.post(
            "/api/twilio/gather",
            data={"CallSid": "CA123", "SpeechResult": "yes I took my pills"},
        )

        stored = await memory_store.find_by_call_id("CA123")
        assert stored.adherence_status == AdherenceStatus.FULL
        assert stored.status == CallStatus.ANSWERED

    @pytest.mark.asyncio
    async def test_empty_speech_redirects(self, test_client, session):
        response = test_client.post(
            "/api/twilio/gather?retryCount=1",
            data={"CallSid": "CA123", "SpeechResult": ""},
        )

        assert response.status_code == 200
        assert f"{VOICE_URL}?retryCount=2</Redirect>" in response.text
        assert "<Say" not in response.text

    def test_missing_speech_redirects(self, test_client):
        response = test_client.post("/api/twilio/gather", data={"CallSid": "CA123"})
        assert f"{VOICE_URL}?retryCount=1</Redirect>" in response.text

    def test_unexpected_error_still_returns_twiml(self, test_client, memory_store, monkeypatch):
        async def broken_update(call_id, **fields):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(memory_store, "update", broken_update)

        response = test_client.post(
            "/api/twilio/gather", data={"CallSid": "CA123", "SpeechResult": "yes"}
        )

        assert response.status_code == 200
        assert "<Hangup/>" in response.text


class TestStatusWebhook:
    """Test POST /api/twilio/status."""

    @pytest.mark.asyncio
    async def test_voicemail_triggers_sms(self, test_client, memory_store, mock_gateway, session):
        response = test_client.post(
            "/api/twilio/status",
            data={
                "CallSid": "CA123",
                "CallStatus": "completed",
                "AnsweredBy": "machine_end_beep",
                "CallDuration": "25",
                "To": PATIENT_NUMBER,
            },
        )

        assert response.status_code == 200
        assert response.text == "OK"
        mock_gateway.send_message.assert_awaited_once()
        stored = await memory_store.find_by_call_id("CA123")
        assert stored.status == CallStatus.SMS_SENT

    @pytest.mark.asyncio
    async def test_duplicate_completed_sends_one_sms(self, test_client, memory_store, mock_gateway, session):
        payload = {"CallSid": "CA123", "CallStatus": "completed", "To": PATIENT_NUMBER}

        test_client.post("/api/twilio/status", data=payload)
        test_client.post("/api/twilio/status", data=payload)

        mock_gateway.send_message.assert_awaited_once()
        stored = await memory_store.find_by_call_id("CA123")
        assert stored.status == CallStatus.SMS_SENT

    @pytest.mark.asyncio
    async def test_human_call_fetches_recording(self, test_client, mock_gateway, session):
        response = test_client.post(
            "/api/twilio/status",
            data={
                "CallSid": "CA123",
                "CallStatus": "completed",
                "AnsweredBy": "human",
                "CallDuration": "10",
            },
        )

        assert response.status_code == 200
        mock_gateway.send_message.assert_not_awaited()
        mock_gateway.list_recordings.assert_awaited_once_with("CA123")

    def test_store_outage_still_returns_ok(self, test_client, memory_store, monkeypatch):
        async def broken_find(call_id):
            raise PersistenceError("db down")

        monkeypatch.setattr(memory_store, "find_by_call_id", broken_find)

        response = test_client.post(
            "/api/twilio/status", data={"CallSid": "CA123", "CallStatus": "ringing"}
        )

        assert response.status_code == 200
        assert response.text == "OK"
