import json
import os

from mappath.main import main
from mappath.session import MapSessionController


def test_demo_routes_to_first_match(osm_file, tmp_path, capsys):
    log_dir = tmp_path / "out"
    code = main(["--osm", osm_file, "--query", "kopi", "--log-dir", str(log_dir)])
    out = capsys.readouterr().out

    assert code == 0
    assert "Route to Kopi Kenangan" in out
    assert "Visible markers: ['Kopi Kenangan']" in out
    with open(os.path.join(log_dir, "active_route.json"), encoding="utf-8") as f:
        assert json.load(f)["step_count"] == 3


def test_demo_reports_empty_search(osm_file, tmp_path, capsys):
    code = main(["--osm", osm_file, "--query", "sate", "--log-dir", str(tmp_path)])
    assert code == 1
    assert "Nothing found" in capsys.readouterr().out


def test_demo_rejects_out_of_range_pick(osm_file, tmp_path):
    assert main(["--osm", osm_file, "--pick", "7", "--log-dir", str(tmp_path)]) == 2


def test_demo_missing_map(tmp_path):
    assert main(["--osm", str(tmp_path / "missing.osm"), "--log-dir", str(tmp_path)]) == 1


def test_demo_closes_session_on_early_exit(osm_file, tmp_path, monkeypatch):
    sessions = []

    class RecordingController(MapSessionController):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            sessions.append(self)

    monkeypatch.setattr("mappath.main.MapSessionController", RecordingController)
    assert main(["--osm", osm_file, "--query", "sate", "--log-dir", str(tmp_path)]) == 1
    assert main(["--osm", osm_file, "--pick", "7", "--log-dir", str(tmp_path)]) == 2
    assert len(sessions) == 2
    assert all(s.is_closed for s in sessions)
