"""Handles rendering cue lists into subtitle and transcript formats."""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Dict, Iterable, List, Sequence

from .models import Cue
from .exceptions import EmptyInputError, InvalidCueError, UnsupportedFormatError
from .utils import format_timestamp

logger = logging.getLogger(__name__)

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    #: Output format identifier, e.g. "srt".
    name: str = ""
    #: File extension used when the rendered text is written to disk.
    extension: str = ""

    @abstractmethod
    def format_cues(self, cues: Sequence[Cue]) -> str:
        """
        Formats an already validated, non-empty cue list.

        Args:
            cues: The cues to render, in playback order.

        Returns:
            The rendered document as a single string.
        """
        pass


class VTTFormatter(SubtitleFormatter):
    """Formats cues into the WebVTT (Web Video Text Tracks) format."""

    name = "vtt"
    extension = "vtt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        blocks = ["WEBVTT\n\n"]
        for cue in cues:
            start = format_timestamp(cue.start, "dot")
            end = format_timestamp(cue.end, "dot")
            blocks.append(f"{start} --> {end}\n{cue.text}\n\n")
        return "".join(blocks)


class SRTFormatter(SubtitleFormatter):
    """Formats cues into the SRT (SubRip Text) format."""

    name = "srt"
    extension = "srt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        blocks = []
        # Index is positional, never taken from the cue itself
        for index, cue in enumerate(cues, start=1):
            start = format_timestamp(cue.start, "comma")
            end = format_timestamp(cue.end, "comma")
            blocks.append(f"{index}\n{start} --> {end}\n{cue.text}\n\n")
        return "".join(blocks)


class TextFormatter(SubtitleFormatter):
    """Formats cues as plain running text without timestamps."""

    name = "text"
    extension = "txt"

    def format_cues(self, cues: Sequence[Cue]) -> str:
        return " ".join(cue.text for cue in cues)


class JSONFormatter(SubtitleFormatter):
    """Formats cues as a pretty-printed JSON array of {start, end, text} objects."""

    name = "json"
    extension = "json"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format_cues(self, cues: Sequence[Cue]) -> str:
        return json.dumps([asdict(cue) for cue in cues], indent=self.indent, ensure_ascii=False)


FORMATTERS: Dict[str, SubtitleFormatter] = {
    formatter.name: formatter
    for formatter in (VTTFormatter(), SRTFormatter(), TextFormatter(), JSONFormatter())
}

SUPPORTED_FORMATS = tuple(FORMATTERS)


def normalize_format(fmt: str) -> str:
    """Lower-cases and strips a format identifier, rejecting unknown ones."""
    normalized = fmt.strip().lower() if isinstance(fmt, str) else None
    if normalized not in FORMATTERS:
        raise UnsupportedFormatError(
            f"Unsupported output format '{fmt}'. Supported formats: {', '.join(SUPPORTED_FORMATS)}"
        )
    return normalized


def get_formatter(fmt: str) -> SubtitleFormatter:
    """Returns the registered formatter for a format identifier."""
    return FORMATTERS[normalize_format(fmt)]


def validate_cues(cues: Sequence[Cue]) -> None:
    """
    Checks the timing of every cue in a list.

    Args:
        cues: The cue list to check.

    Raises:
        InvalidCueError: If a cue has non-finite or negative times, ends before
                         it starts, or starts before the cue preceding it.
    """
    previous_start = None
    for position, cue in enumerate(cues, start=1):
        if not (math.isfinite(cue.start) and math.isfinite(cue.end)):
            raise InvalidCueError(f"Cue {position} has a non-finite time ({cue.start!r} -> {cue.end!r}).")
        if cue.start < 0:
            raise InvalidCueError(f"Cue {position} starts before zero ({cue.start}s).")
        if cue.end < cue.start:
            raise InvalidCueError(f"Cue {position} ends before it starts ({cue.start}s -> {cue.end}s).")
        if previous_start is not None and cue.start < previous_start:
            raise InvalidCueError(
                f"Cue {position} starts at {cue.start}s, before the previous cue at {previous_start}s."
            )
        previous_start = cue.start


def render(cues: Iterable[Cue], fmt: str) -> str:
    """
    Renders a cue list in one of the supported formats.

    Args:
        cues: Cues ordered by start time; any iterable. The input is not modified.
        fmt: One of "vtt", "srt", "text" or "json".

    Returns:
        The rendered document.

    Raises:
        UnsupportedFormatError: If fmt is not a supported identifier.
        EmptyInputError: If the cue list is empty.
        InvalidCueError: If any cue fails validation.
    """
    formatter = get_formatter(fmt)
    # Iterators are materialised once so validation does not consume them
    cues = tuple(cues)
    if not cues:
        raise EmptyInputError(f"Cannot render an empty cue list as {formatter.name}.")
    validate_cues(cues)
    logger.debug(f"Rendering {len(cues)} cues as {formatter.name}")
    return formatter.format_cues(cues)


def render_all(cues: Iterable[Cue], formats: List[str]) -> Dict[str, str]:
    """Renders the same cue list in several formats, keyed by format identifier."""
    cues = tuple(cues)
    return {normalize_format(fmt): render(cues, fmt) for fmt in formats}
