"""Input/output helpers for the balloon tracks pipeline.

Covers event-point CSV loading with required-column checks, reading cached
hourly snapshots from disk, and JSON saving.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .models import EventPoint

REQUIRED_EVENT_COLUMNS: List[str] = ["latitude", "longitude"]


def ensure_required_columns(df: pd.DataFrame, required: List[str] = REQUIRED_EVENT_COLUMNS) -> pd.DataFrame:
    """Validate that the DataFrame contains the required columns."""

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    return df


def _optional_float(value: object) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _acquisition_ts(acq_date: object, acq_time: object) -> Optional[float]:
    """Combine a FIRMS ``acq_date`` and ``HHMM`` ``acq_time`` into epoch seconds."""

    if acq_date is None or acq_time is None or pd.isna(acq_date) or pd.isna(acq_time):
        return None
    hhmm = str(acq_time).split(".")[0].zfill(4)
    stamp = pd.to_datetime(f"{acq_date}T{hhmm[:2]}:{hhmm[2:4]}:00Z", utc=True, errors="coerce")
    if pd.isna(stamp):
        return None
    return float(stamp.timestamp())


def load_event_points(csv_path: str | Path) -> List[EventPoint]:
    """Load FIRMS-style event points; rows without finite coordinates are dropped."""

    df = ensure_required_columns(pd.read_csv(csv_path, low_memory=False))
    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")
    finite = df["latitude"].apply(math.isfinite) & df["longitude"].apply(math.isfinite)
    dropped = int((~finite).sum())
    if dropped:
        logging.warning("Dropped %d event rows with non-finite coordinates", dropped)

    events: List[EventPoint] = []
    for row in df[finite].to_dict(orient="records"):
        source = row.get("instrument")
        events.append(
            EventPoint(
                lat=float(row["latitude"]),
                lon=float(row["longitude"]),
                conf=_optional_float(row.get("confidence")),
                frp=_optional_float(row.get("frp")),
                acq=_acquisition_ts(row.get("acq_date"), row.get("acq_time")),
                src=str(source) if source is not None and not pd.isna(source) else None,
            )
        )
    logging.info("Loaded %d event points from %s", len(events), csv_path)
    return events


def load_snapshot_dir(directory: str | Path, hours: int = 24) -> Dict[int, Optional[str]]:
    """Read cached ``00.json`` … ``23.json`` files; missing hours map to ``None``."""

    directory = Path(directory)
    snapshots: Dict[int, Optional[str]] = {}
    for hour in range(hours):
        path = directory / f"{hour:02d}.json"
        snapshots[hour] = path.read_text(encoding="utf-8", errors="replace") if path.exists() else None
    logging.info(
        "Loaded %d/%d cached snapshots from %s",
        sum(1 for text in snapshots.values() if text is not None),
        hours,
        directory,
    )
    return snapshots


def save_json(payload: object, path: str | Path) -> None:
    """Persist a JSON document; non-finite floats must already be replaced."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, allow_nan=False)
    logging.info("Saved %s", path)
