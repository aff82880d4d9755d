"""Twilio REST gateway for calls, SMS and recordings."""
import logging
import re
from typing import List, Optional

import httpx
from pydantic import BaseModel

from app.core.errors import GatewayError, ValidationError

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

STATUS_CALLBACK_EVENTS = ["initiated", "ringing", "answered", "completed"]


def validate_phone_number(phone_number: Optional[str]) -> str:
    """Check a phone number is E.164 formatted and return it."""
    if not phone_number:
        raise ValidationError("Phone number is required")
    if not E164_PATTERN.match(phone_number):
        raise ValidationError(
            "Phone number must be in E.164 format (e.g., +12345678900)"
        )
    return phone_number


class PlacedCall(BaseModel):
    """Call created by the provider."""

    sid: str
    status: str


class TwilioGateway:
    """Thin async client for the Twilio REST API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        api_base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        record_calls: bool = True,
        machine_detection: bool = True,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.record_calls = record_calls
        self.machine_detection = machine_detection

    @property
    def account_url(self) -> str:
        return f"{self.api_base_url}/2010-04-01/Accounts/{self.account_sid}"

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.account_url}/{path}"
        try:
            async with httpx.AsyncClient(
                auth=(self.account_sid, self.auth_token), timeout=self.timeout
            ) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f"Twilio {method} {path} failed with status {e.response.status_code}",
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(f"Twilio {method} {path} failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise GatewayError(f"Twilio {method} {path} returned invalid JSON") from e

    async def place_call(
        self, to: str, voice_url: str, status_callback_url: str
    ) -> PlacedCall:
        """
        Start an outbound call.

        Args:
            to: Patient phone number in E.164 format
            voice_url: Webhook Twilio fetches TwiML from once the call connects
            status_callback_url: Webhook receiving call lifecycle events

        Returns:
            PlacedCall with the provider call SID and initial status
        """
        validate_phone_number(to)

        data = {
            "To": to,
            "From": self.from_number,
            "Url": voice_url,
            "Method": "POST",
            "StatusCallback": status_callback_url,
            "StatusCallbackMethod": "POST",
            "StatusCallbackEvent": STATUS_CALLBACK_EVENTS,
        }
        if self.record_calls:
            data["Record"] = "true"
        if self.machine_detection:
            data["MachineDetection"] = "Enable"

        payload = await self._request("POST", "Calls.json", data=data)
        logger.info(
            f"[TWILIO] Call placed - CallSid: {payload.get('sid')}, "
            f"Status: {payload.get('status')}"
        )
        return PlacedCall(sid=payload["sid"], status=payload.get("status", "queued"))

    async def send_message(self, to: str, text: str) -> str:
        """Send an SMS and return the message SID."""
        validate_phone_number(to)
        if not text or not text.strip():
            raise ValidationError("Message cannot be empty.")

        payload = await self._request(
            "POST", "Messages.json", data={"To": to, "From": self.from_number, "Body": text}
        )
        logger.info(f"[TWILIO] SMS sent - MessageSid: {payload.get('sid')}")
        return payload["sid"]

    async def list_recordings(self, call_id: str) -> List[str]:
        """Get media URLs of the recordings made for a call."""
        payload = await self._request(
            "GET", "Recordings.json", params={"CallSid": call_id}
        )
        urls = []
        for recording in payload.get("recordings", []):
            uri = recording.get("uri")
            if uri:
                urls.append(f"{self.api_base_url}{uri.removesuffix('.json')}")
        return urls
