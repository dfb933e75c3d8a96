"""CLI entry point for the balloon tracks pipeline.

Orchestrates snapshot retrieval (live feed or cached directory), track
reconstruction, optional proximity scoring against an event CSV, and
render-segment export, honoring the tunables from the config.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Dict, List

from balloon_tracks.config import TrackerConfig, load_config
from balloon_tracks.fetcher import SnapshotFetcher
from balloon_tracks.io import load_event_points, load_snapshot_dir, save_json
from balloon_tracks.pipeline import (
    analyze_proximity,
    build_insights_payload,
    build_tracks_payload,
    reconstruct_tracks,
    segment_for_render,
)


def configure_logging(log_cfg: Dict[str, object]) -> None:
    """Configure root logger with both file and console handlers."""

    log_dir = Path(log_cfg.get("dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    filename = log_cfg.get("filename", "tracks.log")
    log_path = log_dir / filename
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s - %(levelname)s - %(message)s"
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt))
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.info("Logging to %s (level=%s)", log_path, level_name)


def main(
    config_path: str = "config/tracks.yaml",
    snapshots_dir: str | None = None,
    events_csv: str | None = None,
    output_dir: str | None = None,
) -> None:
    cfg = load_config(config_path)
    config = TrackerConfig.from_dict(cfg)

    configure_logging(config.logging)
    out_dir = Path(output_dir) if output_dir else config.output_dir
    now = time.time()

    if snapshots_dir:
        cached = load_snapshot_dir(snapshots_dir, hours=config.hours)
        fetch_hour = cached.get
    else:
        logging.info("Fetching %d snapshots from %s", config.hours, config.url_template)
        fetch_hour = SnapshotFetcher(config).fetch_hour

    result = reconstruct_tracks(fetch_hour, hours=config.hours, now=now, config=config)
    tracks = result["tracks"]
    if not tracks:
        logging.warning("No tracks reconstructed; downstream outputs will be empty.")
    save_json(build_tracks_payload(result), out_dir / "tracks.json")

    if events_csv:
        events = load_event_points(events_csv)
        stats = analyze_proximity(tracks, events, threshold_km=config.proximity_threshold_km)
        save_json(build_insights_payload(stats, config.proximity_threshold_km), out_dir / "insights.json")

    cutoff_ts = now - config.render_window_hours * 3600
    segments: List[Dict[str, object]] = []
    for track in tracks:
        for idx, segment in enumerate(segment_for_render(track, cutoff_ts, config.max_hop_km)):
            segments.append({"id": f"{track.id}-{idx}", "track_id": track.id, "points": segment})
    logging.info("Built %d render segments from %d tracks", len(segments), len(tracks))
    save_json({"cutoff_ts": cutoff_ts, "segments": segments}, out_dir / "segments.json")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Balloon track reconstruction pipeline.")
    parser.add_argument(
        "-c",
        "--config",
        default="config/tracks.yaml",
        help="Path to YAML config file.",
    )
    parser.add_argument("--snapshots", default=None, help="Directory of cached 00.json..23.json snapshots.")
    parser.add_argument("--events", default=None, help="Event-point CSV (FIRMS columns) for proximity stats.")
    parser.add_argument("--output", default=None, help="Output directory (overrides config).")
    args = parser.parse_args()
    main(args.config, snapshots_dir=args.snapshots, events_csv=args.events, output_dir=args.output)
