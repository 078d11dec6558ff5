"""Data models for captionfmt."""

from dataclasses import dataclass, field
from typing import List, Optional

@dataclass(frozen=True)
class Cue:
    """A single timed caption segment. Times are in seconds."""
    start: float
    end: float
    text: str

@dataclass(frozen=True)
class CaptionTrack:
    """One caption track advertised by a player response."""
    base_url: str
    language_code: Optional[str] = None
    name: Optional[str] = None
    kind: Optional[str] = None # "asr" for auto-generated tracks

@dataclass
class Transcript:
    """Holds the cues extracted from a caption payload."""
    cues: List[Cue] = field(default_factory=list)
    language: Optional[str] = None
    source_path: Optional[str] = None # Keep track of source if needed
