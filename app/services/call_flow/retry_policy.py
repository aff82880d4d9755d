"""Decide which prompt to play on each voice leg and when to give up."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from app.services.call_flow.messages import ReminderMessages

MAX_RETRIES = 2


class PromptAction(str, Enum):
    """What the voice leg should do next."""

    PROMPT = "prompt"
    TERMINATE = "terminate"

    def __str__(self) -> str:
        return self.value


class PromptDecision(BaseModel):
    """Outcome of the retry policy for one voice leg."""

    action: PromptAction
    message: str
    next_retry_count: int


def next_prompt(
    retry_count: int,
    max_retries: int = MAX_RETRIES,
    messages: Optional[ReminderMessages] = None,
) -> PromptDecision:
    """
    Choose the prompt for a voice leg given how many attempts came before.

    Args:
        retry_count: Attempts already made, round-tripped through the callback URL
        max_retries: Attempts allowed before the call is closed
        messages: Message templates (defaults when omitted)

    Returns:
        PromptDecision. TERMINATE for every retry_count >= max_retries.
    """
    messages = messages or ReminderMessages()
    retry_count = max(retry_count, 0)

    if retry_count >= max_retries:
        return PromptDecision(
            action=PromptAction.TERMINATE,
            message=messages.closing,
            next_retry_count=retry_count,
        )

    message = messages.initial_reminder if retry_count == 0 else messages.reask
    return PromptDecision(
        action=PromptAction.PROMPT,
        message=message,
        next_retry_count=retry_count + 1,
    )
