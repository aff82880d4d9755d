"""Classify a spoken transcript into a medication adherence verdict."""
import re
from typing import Iterable

from app.services.adherence.constants import (
    FILLER_WORDS,
    MEDICATION_KEYWORDS,
    NEGATIVE_KEYWORDS,
    POSITIVE_KEYWORDS,
)
from app.services.call_session.models import AdherenceStatus

_WORD_RE = re.compile(r"[\w']+")


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def is_filler_only(transcript: str) -> bool:
    """
    Check whether a transcript carries no answer at all.

    Returns True for empty or whitespace-only text and for text made up
    solely of hesitation sounds such as "um" or "uh". Text in any other
    script, or bare punctuation, still counts as an answer.
    """
    text = (transcript or "").strip().lower()
    if not text:
        return True
    words = _WORD_RE.findall(text)
    return bool(words) and all(word in FILLER_WORDS for word in words)


def classify(transcript: str) -> AdherenceStatus:
    """
    Map a patient's spoken response to an adherence verdict.

    Matching is case-insensitive substring search against the positive,
    negative and medication keyword sets. A negative-only answer is NONE,
    positive-only is FULL, both together is PARTIAL, anything else UNCLEAR.

    Args:
        transcript: Non-empty speech recognition result

    Returns:
        FULL, PARTIAL, NONE or UNCLEAR. Never UNKNOWN.
    """
    text = transcript.lower()

    is_positive = _contains_any(text, POSITIVE_KEYWORDS)
    is_negative = _contains_any(text, NEGATIVE_KEYWORDS)
    has_medication_context = _contains_any(text, MEDICATION_KEYWORDS)

    if is_negative and not is_positive:
        return AdherenceStatus.NONE
    if is_positive and not is_negative:
        return AdherenceStatus.FULL
    if is_positive and is_negative:
        return AdherenceStatus.PARTIAL
    if not has_medication_context:
        # Response is not about medication at all
        return AdherenceStatus.UNCLEAR
    return AdherenceStatus.UNCLEAR
