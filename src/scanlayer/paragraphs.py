"""
Paragraph structuring for line-joined text.

Heuristic second pass that decides, for each line, whether the following
line starts a new paragraph, a new line, or continues a wrapped
sentence. It is best-effort and can misclassify short wrapped lines as
headings.
"""

import re

SHORT_LINE_CHARS = 50
LENGTH_JUMP_CHARS = 20

_SENTENCE_END = re.compile(r"[.!?]$")
_CAPITAL_START = re.compile(r"^[A-Z]")


def structure_paragraphs(text: str) -> str:
    """
    Re-flow lines into paragraphs.

    For each line, looking at the next one:
    - blank line: one newline, never more than one blank line in a row
    - ends with .!? and next starts uppercase: paragraph break
    - short line after a large length change: paragraph break (heading)
    - ends with .!?: newline
    - otherwise: join with a space
    """
    if not text:
        return ""

    lines = text.split("\n")
    out = ""
    previous_length = 0

    for i, raw in enumerate(lines):
        current = raw.strip()
        following = lines[i + 1].strip() if i < len(lines) - 1 else ""

        if not current:
            if out and not out.endswith("\n\n"):
                out += "\n"
            continue

        out += current

        if following:
            ends_sentence = bool(_SENTENCE_END.search(current))
            if ends_sentence and _CAPITAL_START.match(following):
                out += "\n\n"
            elif (len(current) < SHORT_LINE_CHARS
                  and abs(len(current) - previous_length) > LENGTH_JUMP_CHARS):
                out += "\n\n"
            elif ends_sentence:
                out += "\n"
            else:
                out += " "

        previous_length = len(current)

    return out.strip()
