"""Utility functions for captionfmt."""

import math
import os
import logging
import re
from typing import Tuple
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

TIMESTAMP_SEPARATORS = {"dot": ".", "comma": ","}

_TIMESTAMP_PATTERN = re.compile(r"^\s*(\d{2,}):(\d{2}):(\d{2})[.,](\d{3})\s*$")
_ENTITY_PATTERN = re.compile(r"&(#\d+|quot|amp|lt|gt|apos);")
_NUMERIC_ENTITY_PATTERN = re.compile(r"&#(\d+);")
_NAMED_ENTITIES = {
    "quot": '"',
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "apos": "'",
}

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def format_timestamp(seconds: float, style: str = "dot") -> str:
    """
    Formats seconds into HH:MM:SS.mmm (style "dot", WebVTT) or
    HH:MM:SS,mmm (style "comma", SRT).

    Hours are padded to two digits but never truncated, so 100 hours
    renders as "100:00:00.000".

    Args:
        seconds: Non-negative time in seconds.
        style: "dot" or "comma", selecting the milliseconds separator.

    Returns:
        Formatted time string.

    Raises:
        ValueError: If seconds is negative or not finite, or style is unknown.
    """
    if style not in TIMESTAMP_SEPARATORS:
        raise ValueError(f"Unknown timestamp style '{style}'. Choose one of: {', '.join(TIMESTAMP_SEPARATORS)}")
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Timestamp must be a finite, non-negative number of seconds, got {seconds!r}")
    milliseconds = round(seconds * 1000)
    hrs = milliseconds // 3600000
    milliseconds %= 3600000
    mins = milliseconds // 60000
    milliseconds %= 60000
    secs = milliseconds // 1000
    milliseconds %= 1000
    sep = TIMESTAMP_SEPARATORS[style]
    return f"{hrs:02d}:{mins:02d}:{secs:02d}{sep}{milliseconds:03d}"

def parse_timestamp(value: str) -> float:
    """Parses an HH:MM:SS.mmm or HH:MM:SS,mmm timestamp back to seconds."""
    match = _TIMESTAMP_PATTERN.match(value)
    if not match:
        raise ValueError(f"Malformed timestamp: {value!r}")
    hh, mm, ss, ms = (int(part) for part in match.groups())
    total_ms = hh * 3600000 + mm * 60000 + ss * 1000 + ms
    return total_ms / 1000.0


def _decode_entity(match: re.Match) -> Tuple[str, int]:
    """Returns the replacement for one reference and where scanning resumes."""
    name = match.group(1)
    if not name.startswith("#"):
        return _NAMED_ENTITIES[name], match.end()
    code = int(name[1:])
    if 0xD800 <= code <= 0xDBFF:
        # UTF-16 high surrogate: only meaningful when a low surrogate follows
        low = _NUMERIC_ENTITY_PATTERN.match(match.string, match.end())
        if low and 0xDC00 <= int(low.group(1)) <= 0xDFFF:
            combined = 0x10000 + ((code - 0xD800) << 10) + (int(low.group(1)) - 0xDC00)
            return chr(combined), low.end()
        return match.group(0), match.end()
    if 0xDC00 <= code <= 0xDFFF or code > 0x10FFFF:
        # Unpaired surrogate or out of the Unicode range, leave the reference as written
        return match.group(0), match.end()
    return chr(code), match.end()

def decode_entities(text: str) -> str:
    """
    Decodes decimal character references and the five XML named entities.

    The string is scanned once from left to right and replacements are never
    re-scanned, so "&amp;lt;" becomes "&lt;" rather than "<". A surrogate
    pair such as "&#55357;&#56832;" decodes to the single character it encodes.

    Args:
        text: Raw caption text.

    Returns:
        The decoded text. Unknown references, unpaired surrogates and
        out-of-range references are kept verbatim.
    """
    parts = []
    position = 0
    for match in _ENTITY_PATTERN.finditer(text):
        if match.start() < position:
            # Low surrogate already consumed by the pair before it
            continue
        replacement, end = _decode_entity(match)
        parts.append(text[position:match.start()])
        parts.append(replacement)
        position = end
    parts.append(text[position:])
    return "".join(parts)
