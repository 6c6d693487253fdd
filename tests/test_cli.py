"""Tests for the ankibridge CLI."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from ankibridge.cli import main

CANONICAL = "# Cells\n\n```anki\n---\nid: 1\n---\nWhat is a cell?\n---\nThe unit of life.\n```\n"
MESSY = "# Membranes\n\n```anki\n---\ntags: [exam]\n---\nWhat surrounds a cell?\n```\n"
BROKEN = "```anki\n---\nid: [1\n---\nQ\n```\n"


@pytest.fixture
def vault():
    """A vault with one canonical and one non-canonical document."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "vault"
        (root / "Biology").mkdir(parents=True)
        (root / "Biology" / "Cells.md").write_text(CANONICAL)
        (root / "Biology" / "Membranes.md").write_text(MESSY)
        (root / "ankibridge.toml").write_text(
            '[deck]\ninherit = false\nfallback = "Default"\n\n[deck.maps]\nBiology = "Bio"\n'
        )
        orig_cwd = os.getcwd()
        try:
            # Keep the config search away from the real cwd
            os.chdir(tmpdir)
            yield root
        finally:
            os.chdir(orig_cwd)


def run(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


def test_version(capsys):
    """Test that --version prints name, python and platform."""
    assert run("--version") == 0

    out = capsys.readouterr().out
    assert "ankibridge" in out
    assert "python" in out
    assert "platform" in out


def test_scan_json(vault, capsys):
    """Test scanning the vault with machine-readable output."""
    assert run("--vault", str(vault), "--json", "scan") == 0

    data = json.loads(capsys.readouterr().out)
    by_file = {n["file"]: n for n in data["notes"]}
    assert by_file["Biology/Cells.md"]["id"] == 1
    assert by_file["Biology/Cells.md"]["deck"] == "Bio"
    assert by_file["Biology/Cells.md"]["needs_rewrite"] is False
    assert by_file["Biology/Membranes.md"]["tags"] == ["obsidian", "exam"]
    assert by_file["Biology/Membranes.md"]["needs_rewrite"] is True
    assert data["findings"] == []


def test_scan_reports_errors(vault, capsys):
    """Test that a broken note makes scan fail and names its location."""
    (vault / "Broken.md").write_text(BROKEN)

    assert run("--vault", str(vault), "scan") == 1

    out = capsys.readouterr().out
    assert "Broken.md:1:0: invalid note configuration" in out
    assert "Biology/Cells.md:3" in out


def test_fmt_check(vault, capsys):
    """Test that --check reports without writing."""
    assert run("--vault", str(vault), "fmt", "--check") == 1

    out = capsys.readouterr().out
    assert "Would reformat: Biology/Membranes.md" in out
    assert (vault / "Biology" / "Membranes.md").read_text() == MESSY


def test_fmt_writes_canonical_text(vault, capsys):
    """Test that fmt rewrites only what changed and is then a no-op."""
    assert run("--vault", str(vault), "fmt", "--diff") == 0

    out = capsys.readouterr().out
    assert "+- exam" in out
    assert (vault / "Biology" / "Membranes.md").read_text() == (
        "# Membranes\n\n```anki\n---\ntags:\n- exam\n---\nWhat surrounds a cell?\n```\n"
    )
    assert (vault / "Biology" / "Cells.md").read_text() == CANONICAL

    assert run("--vault", str(vault), "fmt", "--check") == 0


def test_fmt_single_path(vault, capsys):
    """Test restricting fmt to one document."""
    assert run("--vault", str(vault), "fmt", "Biology/Cells.md") == 0

    assert "Nothing to do" in capsys.readouterr().out
    assert (vault / "Biology" / "Membranes.md").read_text() == MESSY


def test_bad_config_is_an_error(vault, capsys):
    """Test that an invalid config file is reported cleanly."""
    (vault / "ankibridge.toml").write_text('[deck]\ninherit = "maybe"\n')

    assert run("--vault", str(vault), "scan") == 1
    assert "Error:" in capsys.readouterr().err


def test_undecodable_file_does_not_stop_scan(vault, capsys):
    """Test that a file that is not UTF-8 is reported and the rest is scanned."""
    (vault / "Latin1.md").write_bytes(b"caf\xe9\n```anki\nQ\n```\n")

    assert run("--vault", str(vault), "--json", "scan") == 1

    data = json.loads(capsys.readouterr().out)
    assert {n["file"] for n in data["notes"]} == {"Biology/Cells.md", "Biology/Membranes.md"}
    assert len(data["findings"]) == 1
    assert data["findings"][0]["severity"] == "error"
    assert data["findings"][0]["message"].startswith("Latin1.md: cannot read as UTF-8")


def test_undecodable_file_does_not_stop_fmt(vault, capsys):
    """Test that fmt still rewrites other documents around an unreadable one."""
    (vault / "Latin1.md").write_bytes(b"caf\xe9\n")

    assert run("--vault", str(vault), "fmt") == 1

    captured = capsys.readouterr()
    assert "Reformatted: Biology/Membranes.md" in captured.out
    assert "[error] Latin1.md: cannot read as UTF-8" in captured.err
    assert (vault / "Latin1.md").read_bytes() == b"caf\xe9\n"
