"""
Text normalization for reconstructed OCR text.

Deterministic, idempotent cleanup of whitespace runs and of common OCR
concatenation artifacts (camelCase joins, letter/digit joins, glued
function words). Wide-gap placeholders from the spacing engine are left
untouched.
"""

import re

# Closed list of short function words that OCR tends to glue to neighbours
FUNCTION_WORDS = (
    "and", "the", "to", "of", "in", "for", "with", "that", "this",
    "from", "will", "have", "are", "not", "can", "but", "was",
)

_FUNCTION_WORD_PATTERNS = [
    re.compile(rf"(?<=\w)({word})(?=\w)", re.IGNORECASE)
    for word in FUNCTION_WORDS
]

_LOWER_UPPER = re.compile(r"(?<=[a-z])(?=[A-Z])")
_LETTER_DIGIT = re.compile(r"(?<=[A-Za-z])(?=\d)")
_DIGIT_LETTER = re.compile(r"(?<=\d)(?=[A-Za-z])")
_SENTENCE_CAPITAL = re.compile(r"(?<=[.!?])(?=[A-Z])")
_PUNCT_LETTER = re.compile(r"(?<=[.!?,:;])(?=[A-Za-z])")

_HORIZONTAL_RUN = re.compile(r"[ \t]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_NEWLINE_RUN = re.compile(r"\n{4,}")
_MULTI_SPACE = re.compile(r" {2,}")


def split_glued_words(text: str) -> str:
    """
    Insert spaces at likely word boundaries inside glued tokens.

    Handles lowercase-to-uppercase and letter/digit transitions and the
    closed function-word list when surrounded by word characters.
    """
    text = _LOWER_UPPER.sub(" ", text)
    text = _LETTER_DIGIT.sub(" ", text)
    text = _DIGIT_LETTER.sub(" ", text)
    for pattern in _FUNCTION_WORD_PATTERNS:
        text = pattern.sub(r" \1 ", text)
    return text


def basic_spacing(text: str) -> str:
    """
    Last-resort tokenizer for text with no whitespace at all.

    Lossy and best-effort. Never raises and never returns an empty string
    for non-empty input.
    """
    if not text or any(ch.isspace() for ch in text):
        return text

    spaced = _PUNCT_LETTER.sub(" ", text)
    spaced = split_glued_words(spaced)
    spaced = _MULTI_SPACE.sub(" ", spaced).strip()
    return spaced or text


def normalize_text(text: str) -> str:
    """
    Normalize reconstructed page text.

    Collapses horizontal whitespace, trims spaces around line breaks,
    caps blank-line runs at two blank lines and splits glued words.
    Applying it twice yields the same string as applying it once.
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_RUN.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _NEWLINE_RUN.sub("\n\n\n", text)

    text = _SENTENCE_CAPITAL.sub(" ", text)
    text = split_glued_words(text)

    text = _MULTI_SPACE.sub(" ", text)
    return text.strip()
