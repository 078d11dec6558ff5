"""Convert timed caption cues into WebVTT, SRT, plain text and JSON."""

from .exceptions import (
    CaptionFmtError,
    EmptyInputError,
    ExtractionError,
    InvalidCueError,
    UnsupportedFormatError,
)
from .models import CaptionTrack, Cue, Transcript
from .subtitle_formatter import SUPPORTED_FORMATS, render
from .utils import decode_entities, format_timestamp

__version__ = "1.0.0"
