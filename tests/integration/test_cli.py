"""Smoke tests for the selection round CLI."""

import json
import subprocess
import sys
from pathlib import Path

from main_app import resolve_seed

ROOT = Path(__file__).resolve().parents[2]


def _run_cli(*args):
    return subprocess.run(
        [sys.executable, "main_app.py", *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )


def test_help():
    proc = _run_cli("--help")
    assert proc.returncode == 0
    assert "round_file" in proc.stdout
    assert "--seed" in proc.stdout


def test_writes_options_json(tmp_path, round_payload):
    round_file = tmp_path / "round.json"
    round_file.write_text(json.dumps(round_payload), encoding="utf-8")
    out = tmp_path / "options.json"

    proc = _run_cli(str(round_file), "--seed", "1", "--output", str(out), "--quiet")
    assert proc.returncode == 0, proc.stderr

    payload = json.loads(out.read_text(encoding="utf-8"))
    options = payload["options"]
    assert 0 < len(options) <= 9
    artist_ids = [o["artist_id"] for o in options]
    assert len(artist_ids) == len(set(artist_ids))
    assert {o["category"] for o in options} <= {"closer", "neutral", "further"}


def test_missing_round_file_fails(tmp_path):
    proc = _run_cli(str(tmp_path / "missing.json"), "--quiet")
    assert proc.returncode == 1


def test_incomplete_round_file_fails(tmp_path):
    round_file = tmp_path / "round.json"
    round_file.write_text(json.dumps({"round": 1}), encoding="utf-8")
    proc = _run_cli(str(round_file), "--quiet")
    assert proc.returncode == 1


def test_environment_seed_applies_without_config(monkeypatch):
    monkeypatch.setenv("DGS_RANDOM_SEED", "17")
    assert resolve_seed(None, None) == 17
    assert resolve_seed(3, None) == 3


def test_environment_seed_unset(monkeypatch):
    monkeypatch.delenv("DGS_RANDOM_SEED", raising=False)
    assert resolve_seed(None, None) is None
