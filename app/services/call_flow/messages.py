"""Spoken prompts, adherence replies and SMS text."""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

from app.services.call_session.models import AdherenceStatus

logger = logging.getLogger(__name__)


class ReminderMessages(BaseModel):
    """Every piece of text the service speaks or sends."""

    initial_reminder: str = (
        "Hello, this is a reminder from your healthcare provider to confirm your "
        "medications for the day. Please confirm if you have taken your Aspirin, "
        "Cardivol, and Metformin today."
    )
    reask: str = (
        "I'm sorry, I didn't catch that. Could you please repeat if you've taken "
        "your medications today?"
    )
    closing: str = (
        "We haven't received a clear response. Your healthcare provider will be "
        "notified. Please remember to take your medications as prescribed. "
        "Thank you and have a nice day."
    )
    voicemail: str = (
        "We called to check on your medication but couldn't reach you. Please call "
        "us back or take your medications if you haven't done so."
    )
    positive_reply: str = (
        "Thank you for confirming you've taken your medications. Have a nice day."
    )
    negative_reply: str = (
        "Thank you for letting us know. Please take your medications as prescribed. "
        "Your health provider will be notified about this. Have a nice day."
    )
    partial_reply: str = (
        "Thank you for your response. I've noted that you've taken some but not all "
        "of your medications. Please remember to take all your prescribed "
        "medications. Your health provider will be notified. Have a nice day."
    )
    unclear_reply: str = (
        "Thank you for your response. If you haven't taken all your medications yet, "
        "please do so as prescribed. Have a nice day."
    )
    generic_reply: str = "Thank you for your response. Have a nice day."
    error_reply: str = (
        "We're sorry, we are unable to continue this call right now. "
        "Please take your medications as prescribed. Goodbye."
    )

    def reply_for(self, adherence: AdherenceStatus) -> str:
        """Get the spoken reply for an adherence verdict."""
        replies = {
            AdherenceStatus.FULL: self.positive_reply,
            AdherenceStatus.NONE: self.negative_reply,
            AdherenceStatus.PARTIAL: self.partial_reply,
            AdherenceStatus.UNCLEAR: self.unclear_reply,
            AdherenceStatus.UNKNOWN: self.unclear_reply,
        }
        return replies[adherence]


def load_messages(messages_file: Optional[str] = None) -> ReminderMessages:
    """
    Load message templates, overriding defaults from a YAML file.

    Keys missing from the file keep their default text. A missing file
    yields the defaults.
    """
    if not messages_file:
        return ReminderMessages()

    path = Path(messages_file)
    if not path.exists():
        logger.warning(f"[MESSAGES] Messages file not found, using defaults - Path: {path}")
        return ReminderMessages()

    with open(path, "r") as f:
        overrides = yaml.safe_load(f) or {}
    logger.info(f"[MESSAGES] Loaded {len(overrides)} message overrides from {path}")
    return ReminderMessages(**overrides)
