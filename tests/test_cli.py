from __future__ import annotations

import json
from pathlib import Path

import pytest

from captionfmt.batch import find_caption_files, run_batch_processing
from captionfmt.cli import CLIHandler


@pytest.fixture(autouse=True)
def _work_in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Log files and the default config.yaml lookup are relative to cwd
    monkeypatch.chdir(tmp_path)


def _run_cli(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        CLIHandler().run(argv)
    return excinfo.value.code


def test_cli_exports_requested_formats(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "exports"
    code = _run_cli(["-i", str(timedtext_file), "-o", str(out_dir), "-f", "srt", "-f", "vtt"])
    assert code == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["sample.srt", "sample.vtt"]
    assert (out_dir / "sample.srt").read_text(encoding="utf-8").startswith("1\n00:00:00,500 --> 00:00:02,750\n")


def test_cli_reads_config_file(timedtext_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "custom.yaml"
    config.write_text("output_formats: [json]\nkeep_source_xml: true\n", encoding="utf-8")
    out_dir = tmp_path / "exports"
    assert _run_cli(["-i", str(timedtext_file), "-o", str(out_dir), "-c", str(config)]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["sample.json", "sample.xml"]


def test_cli_stdout_prints_one_format(timedtext_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run_cli(["-i", str(timedtext_file), "-f", "text", "--stdout"]) == 0
    assert capsys.readouterr().out == "Hello & welcome It's <b> fine the end"


def test_cli_stdout_rejects_several_formats(timedtext_file: Path) -> None:
    assert _run_cli(["-i", str(timedtext_file), "-f", "text", "-f", "srt", "--stdout"]) == 2


def test_cli_player_response_prints_track_url(
    tmp_path: Path, player_response: dict, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "player.json"
    path.write_text(json.dumps(player_response), encoding="utf-8")
    assert _run_cli(["--player-response", str(path), "--language", "de"]) == 0
    assert capsys.readouterr().out == "https://www.youtube.com/api/timedtext?v=abc123&lang=de\n"


def test_cli_reports_errors_with_exit_code(tmp_path: Path) -> None:
    empty = tmp_path / "empty.xml"
    empty.write_text("<transcript/>", encoding="utf-8")
    assert _run_cli(["-i", str(empty)]) == 1
    assert _run_cli(["-i", str(tmp_path / "missing.xml")]) == 1
    assert _run_cli(["-i", str(empty), "-c", str(tmp_path / "missing.yaml")]) == 1


def test_find_caption_files_sorted_and_filtered(tmp_path: Path) -> None:
    for name in ["b.xml", "A.XML", "notes.txt"]:
        (tmp_path / name).write_text("<transcript/>", encoding="utf-8")
    (tmp_path / "dir.xml").mkdir()
    assert [Path(p).name for p in find_caption_files(str(tmp_path))] == ["A.XML", "b.xml"]


def test_batch_continues_past_failures(timedtext_file: Path, tmp_path: Path) -> None:
    (tmp_path / "broken.xml").write_text("<transcript>", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run_batch_processing(["-i", str(tmp_path), "-f", "srt"])

    assert excinfo.value.code == 1
    assert [p.name for p in (tmp_path / "Exports").iterdir()] == ["sample.srt"]


def test_batch_success_exit_code(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    with pytest.raises(SystemExit) as excinfo:
        run_batch_processing(["-i", str(tmp_path), "-o", str(out_dir), "-f", "text"])
    assert excinfo.value.code == 0
    assert (out_dir / "sample.txt").exists()


def test_cli_format_names_are_case_insensitive(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "exports"
    assert _run_cli(["-i", str(timedtext_file), "-o", str(out_dir), "-f", "SRT", "-f", "Json"]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["sample.json", "sample.srt"]


def test_batch_format_names_are_case_insensitive(timedtext_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    with pytest.raises(SystemExit) as excinfo:
        run_batch_processing(["-i", str(tmp_path), "-o", str(out_dir), "-f", "VTT"])
    assert excinfo.value.code == 0
    assert (out_dir / "sample.vtt").exists()
