"""Tests for the batch runner."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pandas as pd
import pytest

from matchmaking.data_loading import save_snapshot
from matchmaking.run import MATCH_ARTIFACTS, clear_previous_results, main, run_cycle
from tests.conftest import make_participant

CONFIG_PATH = str(Path(__file__).parent.parent / "configs" / "config.yaml")


class TestRunCycle:
    """One cycle end to end, from config file to written artifacts."""

    def test_synthetic_cycle_writes_results(self, tmp_path: Path) -> None:
        result = run_cycle(CONFIG_PATH, output_dir=str(tmp_path), synthetic=30)

        assert result["success"]
        assert result["status"] == "completed"
        assert result["n_participants"] == 30
        for name in MATCH_ARTIFACTS:
            assert (tmp_path / name).exists()

        matches = pd.read_csv(tmp_path / "matches.csv")
        unmatched = pd.read_csv(tmp_path / "unmatched.csv")
        assert len(matches) == 2 * result["n_matches"]
        assert len(matches) + len(unmatched) == 30
        # Each match is written in both directions
        pairs = set(zip(matches["participant_id"], matches["partner_id"]))
        assert all((b, a) in pairs for a, b in pairs)

    def test_snapshot_cycle(self, tmp_path: Path) -> None:
        snapshot = tmp_path / "snapshot.json"
        people = [
            make_participant("a", answers={"exercise": 1}),
            make_participant("b", answers={"exercise": 1}),
        ]
        save_snapshot(people, str(snapshot))
        # Small catalog config so the snapshot answers validate
        config = tmp_path / "config.yaml"
        config.write_text(
            "global:\n  random_seed: 1\n"
            "questions:\n"
            "  - {id: age, section: lifestyle, kind: range, hard_filter: true, required: false}\n"
            "  - {id: exercise, section: lifestyle, kind: scalar, scale: [1, 5]}\n"
            "  - {id: smoking, section: lifestyle, kind: categorical, options: [\"yes\", \"no\"]}\n"
            "  - {id: planning, section: personality, kind: scalar}\n"
            "  - {id: about_me, section: free_response, kind: free_text, required: false}\n"
        )
        result = run_cycle(str(config), snapshot_path=str(snapshot), output_dir=str(tmp_path / "out"))

        assert result["n_matches"] == 1
        matches = pd.read_csv(tmp_path / "out" / "matches.csv")
        assert sorted(matches["participant_id"]) == ["a", "b"]

    def test_dry_run_writes_only_diagnostics(self, tmp_path: Path) -> None:
        result = run_cycle(CONFIG_PATH, output_dir=str(tmp_path), synthetic=20, dry_run=True)

        assert result["dry_run"]
        assert set(result["artifacts"]) == {"diagnostics"}
        assert not (tmp_path / "matches.csv").exists()
        diagnostics = json.loads((tmp_path / "diagnostics.json").read_text())
        assert diagnostics["n_participants"] == 20

    def test_nothing_to_match_writes_nothing(self, tmp_path: Path) -> None:
        result = run_cycle(CONFIG_PATH, output_dir=str(tmp_path), synthetic=1)
        assert result["status"] == "nothing_to_match"
        assert list(tmp_path.iterdir()) == []

    def test_rerun_replaces_previous_results(self, tmp_path: Path) -> None:
        stale = tmp_path / "pair_scores.csv"
        stale.write_text("stale")
        run_cycle(CONFIG_PATH, output_dir=str(tmp_path), synthetic=20, rerun=True)
        assert stale.read_text() != "stale"

    def test_requires_a_source(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            run_cycle(CONFIG_PATH, output_dir=str(tmp_path))


class TestClearPreviousResults:

    def test_removes_only_match_artifacts(self, tmp_path: Path) -> None:
        (tmp_path / "matches.csv").write_text("x")
        (tmp_path / "diagnostics.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("keep")

        removed = clear_previous_results(tmp_path)

        assert sorted(removed) == ["diagnostics.json", "matches.csv"]
        assert (tmp_path / "notes.txt").exists()


class TestMain:

    def test_exit_codes(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", [
            "matchmaking-run", "--config", CONFIG_PATH, "--synthetic", "10", "--output-dir", str(tmp_path)
        ])
        assert main() == 0

        monkeypatch.setattr(sys, "argv", [
            "matchmaking-run", "--config", str(tmp_path / "missing.yaml"), "--synthetic", "10"
        ])
        assert main() == 1
