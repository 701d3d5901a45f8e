"""Tests for the analyze_topology command line."""

import json

import pytest

from wellgraph.analysis.analyze_topology import load_snapshot, main
from wellgraph.tests.conftest import FIXTURES_DIR


class TestLoadSnapshot:
    def test_bare_snapshot(self):
        snapshot, well_id = load_snapshot(FIXTURES_DIR / "cemented_annulus.json")
        assert "physics" in snapshot
        assert well_id is None

    def test_worker_payload(self, tmp_path, cemented_snapshot):
        path = tmp_path / "payload.json"
        path.write_text(json.dumps({"stateSnapshot": cemented_snapshot, "wellId": "well-7"}))
        snapshot, well_id = load_snapshot(path)
        assert snapshot == cemented_snapshot
        assert well_id == "well-7"

    def test_rejects_non_objects(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            load_snapshot(path)


class TestMain:
    """Output modes and failure exits."""

    def test_human_readable(self, capsys):
        main([str(FIXTURES_DIR / "cemented_annulus.json")])
        out = capsys.readouterr().out
        assert "TOPOLOGY SUMMARY" in out
        assert "Minimum failures to surface: 1" in out
        assert "explicit_scenario_source_mode_active" in out

    def test_no_warnings_banner(self, capsys):
        main([str(FIXTURES_DIR / "dual_barrier_completion.json")])
        assert "No warnings" in capsys.readouterr().out

    def test_json_with_scope(self, capsys):
        main([str(FIXTURES_DIR / "cemented_annulus.json"), "--json", "--scope", "spof", "--well-id", "w-1"])
        data = json.loads(capsys.readouterr().out)
        assert data["well_id"] == "w-1"
        assert data["surface_reachable"] is True
        assert data["spof_count"] == 1
        assert len(data["edges"]) == 1
        assert data["edges"][0]["is_spof"] is True

    def test_unreachable_surface(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text("{}")
        main([str(path)])
        assert "surface not reachable" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing.json")])
        assert excinfo.value.code == 1
        assert "snapshot file not found" in capsys.readouterr().err

    def test_invalid_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('"just a string"')
        with pytest.raises(SystemExit):
            main([str(path)])
        assert "could not build topology" in capsys.readouterr().err
