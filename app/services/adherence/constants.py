"""Keyword sets used to classify spoken adherence responses."""

# Indicators that the patient has taken their medication
POSITIVE_KEYWORDS = [
    "yes",
    "yeah",
    "yep",
    "yup",
    "taken",
    "already",
    "completed",
]

# Indicators that the patient has not taken their medication
NEGATIVE_KEYWORDS = [
    "no",
    "not",
    "haven't",
    "didn't",
    "don't",
    "forgot",
    "later",
    "missed",
]

# Words showing the response is about medication at all
MEDICATION_KEYWORDS = [
    "medication",
    "medicine",
    "pill",
    "drug",
    "tablet",
    "aspirin",
    "cardivol",
    "metformin",
]

# Hesitation sounds speech recognition transcribes without an actual answer
FILLER_WORDS = [
    "um",
    "umm",
    "uh",
    "uhh",
    "er",
    "erm",
    "hmm",
    "mm",
    "ah",
]
