from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from captionfmt.config_loader import ConfigLoader
from captionfmt.exceptions import EmptyInputError, FileSystemError, UnsupportedFormatError
from captionfmt.exporter import TranscriptExporter
from captionfmt.extractor import CueExtractor, TimedTextExtractor
from captionfmt.models import Cue, Transcript


def _exporter(**overrides) -> TranscriptExporter:
    config = ConfigLoader().default_config()
    config.update(overrides)
    return TranscriptExporter(config=config, extractor=TimedTextExtractor())


def test_export_writes_every_configured_format(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    written = _exporter().export(str(timedtext_file), str(out_dir))

    assert [Path(p).name for p in written] == ["sample.vtt", "sample.srt", "sample.txt", "sample.json"]
    assert (out_dir / "sample.vtt").read_text(encoding="utf-8").startswith("WEBVTT\n\n00:00:00.500 --> ")
    assert (out_dir / "sample.txt").read_text(encoding="utf-8") == "Hello & welcome It's <b> fine the end"
    data = json.loads((out_dir / "sample.json").read_text(encoding="utf-8"))
    assert [cue["text"] for cue in data] == ["Hello & welcome", "It's <b> fine", "the end"]


def test_export_deduplicates_formats(timedtext_file: Path, tmp_path: Path) -> None:
    written = _exporter(output_formats=["srt", "SRT"]).export(str(timedtext_file), str(tmp_path / "out"))
    assert [Path(p).name for p in written] == ["sample.srt"]


def test_export_can_keep_source_xml(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    written = _exporter(output_formats=["text"], keep_source_xml=True).export(str(timedtext_file), str(out_dir))
    assert [Path(p).name for p in written] == ["sample.txt", "sample.xml"]
    assert (out_dir / "sample.xml").read_text(encoding="utf-8") == timedtext_file.read_text(encoding="utf-8")


def test_unknown_configured_format_fails_at_construction() -> None:
    with pytest.raises(UnsupportedFormatError):
        _exporter(output_formats=["vtt", "ass"])


def test_empty_transcript_writes_nothing(tmp_path: Path) -> None:
    source = tmp_path / "empty.xml"
    source.write_text("<transcript></transcript>", encoding="utf-8")
    out_dir = tmp_path / "out"

    with pytest.raises(EmptyInputError):
        _exporter().export(str(source), str(out_dir))
    assert not out_dir.exists()


def test_missing_source_propagates(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _exporter().export(str(tmp_path / "missing.xml"), str(tmp_path / "out"))


class _FixedExtractor(CueExtractor):
    """Hands back a prepared transcript regardless of the path."""

    def __init__(self, cues: list[Cue]):
        self.cues = cues

    def extract(self, source_path: str) -> Transcript:
        return Transcript(cues=list(self.cues), source_path=source_path)


def test_export_writes_surrogate_pair_references_as_utf8(tmp_path: Path) -> None:
    source = tmp_path / "emoji.xml"
    source.write_text(
        '<transcript><text start="0" dur="1">hi &amp;#55357;&amp;#56832;</text></transcript>',
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"
    _exporter(output_formats=["text"]).export(str(source), str(out_dir))
    assert (out_dir / "emoji.txt").read_text(encoding="utf-8") == "hi \U0001F600"


def test_unencodable_text_leaves_output_dir_empty(tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    exporter = TranscriptExporter(
        config=ConfigLoader().default_config(),
        extractor=_FixedExtractor([Cue(start=0.0, end=1.0, text="lone \ud83d surrogate")]),
    )

    with pytest.raises(FileSystemError, match="UTF-8"):
        exporter.export(str(tmp_path / "s.xml"), str(out_dir))
    assert list(out_dir.iterdir()) == []


def test_failed_write_removes_files_from_the_same_export(
    timedtext_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    out_dir = tmp_path / "out"
    real_replace = os.replace
    calls = []

    def failing_replace(src, dst):
        calls.append(dst)
        if len(calls) == 3:
            raise OSError("disk full")
        real_replace(src, dst)

    monkeypatch.setattr("captionfmt.exporter.os.replace", failing_replace)

    with pytest.raises(FileSystemError, match="disk full"):
        _exporter().export(str(timedtext_file), str(out_dir))
    assert len(calls) == 3
    assert list(out_dir.iterdir()) == []
