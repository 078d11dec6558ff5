"""Pulls caption tracks and cues out of YouTube player and timedtext payloads."""

import json
import logging
import os
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, List, Optional

from .models import CaptionTrack, Cue, Transcript
from .exceptions import ExtractionError
from .utils import decode_entities

logger = logging.getLogger(__name__)

_TRACKLIST_PATH = ("captions", "playerCaptionsTracklistRenderer", "captionTracks")


def _dig(payload: Any, *keys: str) -> Any:
    """Follows nested mapping keys, returning None at the first missing level."""
    current = payload
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _unwrap_player_response(payload: Any) -> Any:
    """
    Finds the player response inside whatever the caller handed us.

    Accepts the player response itself, a player config wrapping it under
    ``args.raw_player_response``, or the older ``args.player_response``
    JSON string.
    """
    if _dig(payload, "captions") is not None:
        return payload
    raw = _dig(payload, "args", "raw_player_response")
    if raw is not None:
        return raw
    encoded = _dig(payload, "args", "player_response")
    if isinstance(encoded, str):
        try:
            return json.loads(encoded)
        except ValueError as e:
            raise ExtractionError(f"args.player_response is not valid JSON: {e}") from e
    return payload


def _track_name(entry: Mapping) -> Optional[str]:
    name = entry.get("name")
    if isinstance(name, Mapping):
        if isinstance(name.get("simpleText"), str):
            return name["simpleText"]
        runs = name.get("runs")
        if isinstance(runs, list):
            return "".join(run.get("text", "") for run in runs if isinstance(run, Mapping)) or None
        return None
    return name if isinstance(name, str) else None


def list_caption_tracks(payload: Any) -> List[CaptionTrack]:
    """
    Lists the usable caption tracks advertised by a player response.

    Args:
        payload: Player response or player config, as decoded JSON.

    Returns:
        Tracks in the order the payload lists them.

    Raises:
        ExtractionError: If the payload carries no caption tracks.
    """
    entries = _dig(_unwrap_player_response(payload), *_TRACKLIST_PATH)
    if not isinstance(entries, list) or not entries:
        raise ExtractionError("No captions available for this video.")

    tracks = []
    for entry in entries:
        base_url = entry.get("baseUrl") if isinstance(entry, Mapping) else None
        if not isinstance(base_url, str) or not base_url:
            logger.warning(f"Skipping caption track without a baseUrl: {entry!r}")
            continue
        tracks.append(
            CaptionTrack(
                base_url=base_url,
                language_code=entry.get("languageCode"),
                name=_track_name(entry),
                kind=entry.get("kind"),
            )
        )
    if not tracks:
        raise ExtractionError("No captions available for this video.")
    return tracks


def select_caption_track(payload: Any, preferred_language: str = "en") -> CaptionTrack:
    """Picks the first track in the preferred language, else the first track."""
    tracks = list_caption_tracks(payload)
    for track in tracks:
        if track.language_code == preferred_language:
            logger.info(f"Selected '{preferred_language}' caption track")
            return track
    logger.info(
        f"No '{preferred_language}' caption track; falling back to '{tracks[0].language_code}'"
    )
    return tracks[0]


def _element_text(element: ET.Element) -> str:
    # itertext drops any inline markup and keeps the text inside it
    return decode_entities("".join(element.itertext())).strip()


def _float_attr(element: ET.Element, name: str, default: Optional[float] = None) -> float:
    raw = element.get(name)
    if raw is None:
        if default is None:
            raise ExtractionError(f"<{element.tag}> element is missing the '{name}' attribute.")
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ExtractionError(f"<{element.tag}> has a non-numeric '{name}' attribute: {raw!r}") from e


def parse_timedtext(xml_text: str, language: Optional[str] = None) -> Transcript:
    """
    Parses a timedtext caption document into cues.

    Both the classic layout (``<text start="1.2" dur="3.4">``, seconds) and
    format 3 (``<p t="1200" d="3400">``, milliseconds) are understood.
    Cues whose text is empty after cleanup are dropped.

    Args:
        xml_text: The XML document as returned by the caption track URL.
        language: Optional language code recorded on the transcript.

    Returns:
        A Transcript whose cues keep document order.

    Raises:
        ExtractionError: If the XML is malformed or a timing attribute is unusable.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ExtractionError(f"Could not parse timedtext XML: {e}") from e

    cues = []
    skipped = 0
    for element in root.iter():
        if element.tag == "text":
            start = _float_attr(element, "start")
            duration = _float_attr(element, "dur", 0.0)
        elif element.tag == "p" and element.get("t") is not None:
            start = _float_attr(element, "t") / 1000.0
            duration = _float_attr(element, "d", 0.0) / 1000.0
        else:
            continue
        text = _element_text(element)
        if not text:
            skipped += 1
            continue
        cues.append(Cue(start=start, end=start + duration, text=text))

    if skipped:
        logger.debug(f"Dropped {skipped} empty caption elements")
    logger.info(f"Parsed {len(cues)} cues from timedtext document")
    return Transcript(cues=cues, language=language)


class CueExtractor(ABC):
    """Abstract base class for cue sources."""

    @abstractmethod
    def extract(self, source_path: str) -> Transcript:
        """
        Reads a caption payload and returns its cues.

        Args:
            source_path: Path to the payload on disk.

        Returns:
            A Transcript object containing the cues.

        Raises:
            ExtractionError: If the payload cannot be interpreted.
            FileNotFoundError: If the file doesn't exist.
        """
        pass


class TimedTextExtractor(CueExtractor):
    """Extracts cues from a saved timedtext XML file."""

    def __init__(self, language: Optional[str] = None):
        self.language = language

    def extract(self, source_path: str) -> Transcript:
        logger.info(f"Reading timedtext document: {source_path}")
        if not os.path.isfile(source_path):
            raise FileNotFoundError(f"Caption file not found: {source_path}")
        try:
            with open(source_path, "r", encoding="utf-8") as f:
                xml_text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read caption file {source_path}: {e}", exc_info=True)
            raise ExtractionError(f"Could not read caption file {source_path}: {e}") from e

        transcript = parse_timedtext(xml_text, language=self.language)
        transcript.source_path = source_path
        return transcript


def load_player_response(path: str) -> Any:
    """Loads a player response (or player config) saved as JSON."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Player response file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as e:
        raise ExtractionError(f"Player response {path} is not valid JSON: {e}") from e
