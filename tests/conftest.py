"""Shared fixtures for the captionfmt test suite."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from captionfmt.models import Cue


# Classic timedtext layout: the text nodes are entity-escaped a second time,
# so after XML parsing "&amp;amp;" is still "&amp;" and must be decoded again.
SAMPLE_TIMEDTEXT = (
    '<?xml version="1.0" encoding="utf-8" ?>'
    "<transcript>"
    '<text start="0.5" dur="2.25">Hello &amp;amp; welcome</text>'
    '<text start="2.75" dur="1.5">It&amp;#39;s &amp;lt;b&amp;gt; fine</text>'
    '<text start="4.25" dur="0">   </text>'
    '<text start="3661.234" dur="1.1">the end</text>'
    "</transcript>"
)

SAMPLE_PLAYER_RESPONSE = {
    "videoDetails": {"videoId": "abc123"},
    "captions": {
        "playerCaptionsTracklistRenderer": {
            "captionTracks": [
                {
                    "baseUrl": "https://www.youtube.com/api/timedtext?v=abc123&lang=de",
                    "languageCode": "de",
                    "name": {"simpleText": "German"},
                },
                {
                    "baseUrl": "https://www.youtube.com/api/timedtext?v=abc123&lang=en",
                    "languageCode": "en",
                    "name": {"runs": [{"text": "English"}, {"text": " (auto-generated)"}]},
                    "kind": "asr",
                },
            ]
        }
    },
}


@pytest.fixture
def sample_cues() -> list[Cue]:
    return [
        Cue(start=0.5, end=2.75, text="Hello & welcome"),
        Cue(start=2.75, end=4.25, text="It's <b> fine"),
        Cue(start=3661.234, end=3662.334, text="the end"),
    ]


@pytest.fixture
def timedtext_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.xml"
    path.write_text(SAMPLE_TIMEDTEXT, encoding="utf-8")
    return path


@pytest.fixture
def player_response() -> dict:
    return SAMPLE_PLAYER_RESPONSE


@pytest.fixture(autouse=True)
def reset_root_logger():
    """setup_logging installs root handlers; close the ones a test left behind."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
