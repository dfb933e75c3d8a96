import json

import pytest

from balloon_tracks.io import load_event_points, load_snapshot_dir, save_json


def test_load_event_points_maps_firms_columns(tmp_path):
    csv_path = tmp_path / "fires.csv"
    csv_path.write_text(
        "latitude,longitude,confidence,frp,acq_date,acq_time,instrument\n"
        "34.5,-118.2,85,12.5,2024-07-01,930,MODIS\n"
        "bad,-118.0,50,1.0,2024-07-01,1200,MODIS\n"
        "35.0,-119.0,,,,,\n",
        encoding="utf-8",
    )

    events = load_event_points(csv_path)

    assert len(events) == 2
    first, second = events
    assert (first.lat, first.lon, first.conf, first.frp, first.src) == (34.5, -118.2, 85.0, 12.5, "MODIS")
    assert first.acq == 1719826200.0
    assert (second.conf, second.frp, second.acq, second.src) == (None, None, None, None)


def test_load_event_points_requires_coordinates(tmp_path):
    csv_path = tmp_path / "fires.csv"
    csv_path.write_text("lat,lon\n1,2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Missing required columns"):
        load_event_points(csv_path)


def test_load_snapshot_dir_reports_missing_hours(tmp_path):
    (tmp_path / "00.json").write_text("[[1, 2]]", encoding="utf-8")
    (tmp_path / "02.json").write_text("{}", encoding="utf-8")

    snapshots = load_snapshot_dir(tmp_path, hours=3)

    assert snapshots == {0: "[[1, 2]]", 1: None, 2: "{}"}


def test_save_json_creates_parent_directories(tmp_path):
    path = tmp_path / "nested" / "out.json"

    save_json({"tracks": []}, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {"tracks": []}
