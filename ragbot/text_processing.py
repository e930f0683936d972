"""
Text cleaning, chunking and chunk quality checks.
Everything here is pure: same input and parameters give the same output.
"""
import re
from typing import List

from .errors import InputError

MIN_CHUNK_CHARS = 80
MIN_MEANINGFUL_WORDS = 8
MIN_MEANINGFUL_RATIO = 0.3

# (delimiter, lookahead past the naive end) in priority order
_BOUNDARIES = (
    ("\n\n", 200),  # paragraph
    (". ", 150),    # sentence
    ("\n", 100),    # line
)

_PAGE_NUMBER_RE = re.compile(r"\b[Pp]age\s+\d+\b")
_PAGE_FRACTION_RE = re.compile(r"\b\d+[ \t]*/[ \t]*\d+\b")
# running headers such as "ANNUAL FINANCIAL REPORT"
_CAPS_RUN_RE = re.compile(r"\b[A-Z]{2,}(?:[ \t]+[A-Z]{2,}){2,}\b")
# upper-case header dates only ("12 JAN 2024"); dates in running text are content
_HEADER_DATE_RE = re.compile(
    r"\b\d{1,2}[ \t]*(?:JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)[A-Z]*\.?[ \t]*\d{4}\b"
)
_BULLET_RE = re.compile(r"^[ \t]*(?:•[ \t]*|[-*][ \t]+)", re.MULTILINE)
_NUMBERED_RE = re.compile(r"^[ \t]*\d{1,3}\.[ \t]+", re.MULTILINE)
_DISALLOWED_CHARS_RE = re.compile(r"[^\w\s.,!?;:\-()]")


def normalize_text(raw_text: str) -> str:
    """
    Strip PDF layout artifacts and collapse whitespace.

    Paragraph breaks survive as a single blank line; every other run of
    whitespace, single newlines included, becomes one space.

    Example:
        >>> normalize_text("Page 12\\n\\nHello   world.\\n\\n\\n\\nBye.")
        'Hello world.\\n\\nBye.'
    """
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")

    # List markers only make sense while lines still exist
    text = _BULLET_RE.sub("", text)
    text = _NUMBERED_RE.sub("", text)

    text = _PAGE_NUMBER_RE.sub("", text)
    text = _PAGE_FRACTION_RE.sub("", text)
    text = _CAPS_RUN_RE.sub("", text)
    text = _HEADER_DATE_RE.sub("", text)

    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"(?<!\n)\n(?!\n)", " ", text)
    text = re.sub(r" {2,}", " ", text)
    return text.strip()


def has_meaningful_content(chunk: str) -> bool:
    """
    Decide whether a chunk is worth embedding.

    A chunk passes when, after dropping page artifacts and odd symbols, it has
    at least 8 words containing a letter and those make up more than 30% of
    all words (single-character tokens are ignored).
    """
    cleaned = _PAGE_NUMBER_RE.sub("", chunk)
    cleaned = _PAGE_FRACTION_RE.sub("", cleaned)
    cleaned = _DISALLOWED_CHARS_RE.sub(" ", cleaned)

    words = [w for w in cleaned.split() if len(w) > 1]
    meaningful = [w for w in words if any(c.isalpha() for c in w)]

    return (
        len(meaningful) >= MIN_MEANINGFUL_WORDS
        and len(meaningful) / len(words) > MIN_MEANINGFUL_RATIO
    )


def _find_break(text: str, naive_end: int) -> int:
    """Search forward from naive_end for the best boundary, else hard cut."""
    for delimiter, lookahead in _BOUNDARIES:
        idx = text.find(delimiter, naive_end)
        if idx != -1 and idx <= naive_end + lookahead:
            return idx + len(delimiter)
    return naive_end


def chunk_text(text: str, target_size: int = 600, overlap: int = 100) -> List[str]:
    """
    Split normalized text into overlapping chunks cut on natural boundaries.

    Each window starts at `start` and ends near `start + target_size`, moved
    forward to just after a paragraph break, sentence end or newline when one
    is close enough. The next window starts `overlap` characters before the
    previous end. Chunks of 80 characters or fewer, or that fail
    has_meaningful_content, are dropped.

    Args:
        text: Normalized document text
        target_size: Desired chunk length in characters
        overlap: Characters shared by consecutive windows

    Returns:
        Chunks in original text order

    Raises:
        InputError: If target_size < 1 or overlap < 0
    """
    if target_size < 1:
        raise InputError("target_size must be at least 1")
    if overlap < 0:
        raise InputError("overlap must not be negative")

    chunks = []
    n = len(text)
    start = 0

    while start < n:
        end = start + target_size
        end = min(_find_break(text, end), n) if end < n else n

        piece = text[start:end].strip()
        if len(piece) > MIN_CHUNK_CHARS and has_meaningful_content(piece):
            chunks.append(piece)

        if end >= n:
            break

        # overlap >= window length would stall the walk
        next_start = end - overlap
        start = next_start if next_start > start else end

    return chunks
