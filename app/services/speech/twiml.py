"""TwiML rendering for the reminder call legs."""
from urllib.parse import urlencode

VOICE = "Polly.Joanna-Neural"


def escape_xml(text: str) -> str:
    """Escape XML special characters for text and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def with_retry_count(url: str, retry_count: int) -> str:
    """Append the retryCount query parameter to a webhook URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode({'retryCount': retry_count})}"


class TwimlRenderer:
    """Builds the TwiML documents returned to Twilio."""

    def __init__(self, voice: str = VOICE, language: str = "en-US"):
        self.voice = voice
        self.language = language

    def gather_with_redirect(self, text: str, gather_url: str, redirect_url: str) -> str:
        """
        Generate TwiML that speaks a prompt and collects a spoken answer.

        If the patient says nothing Twilio falls through to the redirect,
        which carries the next retry count back to the voice webhook.

        Args:
            text: Prompt to speak inside the Gather
            gather_url: URL Twilio posts the speech result to
            redirect_url: URL to continue with when nothing was gathered

        Returns:
            TwiML XML string
        """
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<Response>
    <Gather action="{escape_xml(gather_url)}" method="POST" input="speech" speechTimeout="auto" language="{self.language}">
        <Say voice="{self.voice}">{escape_xml(text)}</Say>
    </Gather>
    <Redirect method="POST">{escape_xml(redirect_url)}</Redirect>
</Response>"""

    def say_and_hangup(self, text: str) -> str:
        """Generate TwiML that speaks a final message and ends the call."""
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<Response>
    <Say voice="{self.voice}">{escape_xml(text)}</Say>
    <Hangup/>
</Response>"""

    def redirect(self, url: str) -> str:
        """Generate TwiML that sends the call to another webhook."""
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<Response>
    <Redirect method="POST">{escape_xml(url)}</Redirect>
</Response>"""
