"""Best-effort recovery and extraction of observations from snapshot payloads.

Snapshot bodies are occasionally truncated, carry trailing commas or bare
``NaN`` literals, or arrive as newline-delimited records. Recovery tries a fixed
ladder of parsing strategies and returns ``None`` instead of raising when none
succeeds. Extraction then runs an ordered list of shape-specific strategies
and keeps the first one that yields observations.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from .models import Observation

LAT_KEYS: Tuple[str, ...] = ("lat", "latitude", "Lat", "Latitude", "y", "Y")
LON_KEYS: Tuple[str, ...] = ("lon", "lng", "long", "longitude", "Lon", "Lng", "Longitude", "x", "X")
ALT_KEYS: Tuple[str, ...] = ("alt", "altitude", "Alt", "Altitude")
TS_KEYS: Tuple[str, ...] = ("ts", "time", "timestamp", "t", "epoch", "updated_at", "date")

# Numeric timestamps above this are milliseconds.
MILLISECONDS_THRESHOLD = 1e11
SECONDS_PER_HOUR = 3600

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_NON_FINITE_LITERAL = re.compile(r"([:\[,]\s*)-?(?:NaN|Infinity)\b", re.IGNORECASE)
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^']*)'")
_BLOCK = re.compile(r"[\[{].*[\]}]", re.DOTALL)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def _loads(text: str) -> Any:
    """Strict JSON parsing; ``NaN``/``Infinity`` are left to the repair stage."""

    return json.loads(text, parse_constant=_reject_constant)


def repair_text(text: str) -> str:
    """Apply light, lossy fixes for the malformations seen in the feed."""

    repaired = text.lstrip("\ufeff")
    repaired = _TRAILING_COMMA.sub(r"\1", repaired)
    repaired = _NON_FINITE_LITERAL.sub(r"\1null", repaired)
    return _SINGLE_QUOTED_VALUE.sub(r': "\1"', repaired)


def _parse_as_is(text: str) -> Any:
    return _loads(text.lstrip("\ufeff"))


def _parse_repaired(text: str) -> Any:
    return _loads(repair_text(text))


def _parse_lines(text: str) -> Any:
    records: List[Any] = []
    for line in repair_text(text).splitlines():
        line = line.strip()
        # Records only; bare scalar lines are left to the block stage.
        if not line or line[0] not in "{[":
            continue
        try:
            records.append(_loads(line))
        except ValueError:
            continue
    if not records:
        raise ValueError("No newline-delimited record could be parsed")
    return records


def _parse_first_block(text: str) -> Any:
    match = _BLOCK.search(repair_text(text))
    if match is None:
        raise ValueError("No bracketed block found")
    return _loads(match.group(0))


RECOVERY_STAGES: Tuple[Tuple[str, Callable[[str], Any]], ...] = (
    ("as-is", _parse_as_is),
    ("repaired", _parse_repaired),
    ("jsonl", _parse_lines),
    ("block", _parse_first_block),
)


def recover_structure(text: Optional[str]) -> Optional[Any]:
    """
    Parse ``text`` with the first recovery stage that succeeds.
    Returns ``None`` when every stage fails; never raises for bad input.
    """

    if not text:
        return None
    for name, stage in RECOVERY_STAGES:
        try:
            structure = stage(text)
        except ValueError:
            continue
        if name != "as-is":
            logging.debug("Recovered payload via %s stage", name)
        return structure
    logging.debug("Payload could not be recovered (%d chars)", len(text))
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _finite(value: Any) -> Optional[float]:
    number = _to_float(value)
    if number is None or not math.isfinite(number):
        return None
    return number


def _lookup(record: dict, keys: Sequence[str]) -> Any:
    """Return the first non-null value stored under any of ``keys``."""

    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def coerce_timestamp(value: Any) -> Optional[float]:
    """
    Convert a raw timestamp to epoch seconds.
    Large numerics are milliseconds; strings are tried as numbers, then as calendar text.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return float(round(value / 1000 if value > MILLISECONDS_THRESHOLD else value))
    if isinstance(value, str):
        number = _to_float(value)
        if number is not None:
            return coerce_timestamp(number)
        try:
            parsed = pd.to_datetime(value, utc=True, errors="coerce")
        except (ValueError, OverflowError):
            return None
        if pd.isna(parsed):
            return None
        return float(round(parsed.timestamp()))
    return None


def hour_timestamp(hour_index: int, now: Optional[float] = None) -> float:
    """Default timestamp for snapshot ``hour_index`` (taken that many hours ago)."""

    if now is None:
        now = time.time()
    return float(math.floor(now) - hour_index * SECONDS_PER_HOUR)


def _observation_from_record(record: dict, ts: float) -> Optional[Observation]:
    lat_raw = _lookup(record, LAT_KEYS)
    lon_raw = _lookup(record, LON_KEYS)
    if lat_raw is None or lon_raw is None:
        return None
    lat, lon = _finite(lat_raw), _finite(lon_raw)
    if lat is None or lon is None:
        return None
    return Observation(ts=ts, lat=lat, lon=lon, alt=_finite(_lookup(record, ALT_KEYS)))


def extract_coordinate_rows(structure: Any, default_ts: float) -> List[Observation]:
    """Rows shaped ``[lat, lon, alt?]``."""

    if not isinstance(structure, list) or not structure or not isinstance(structure[0], list):
        return []
    observations: List[Observation] = []
    for row in structure:
        if not isinstance(row, list) or len(row) < 2:
            continue
        lat, lon = _finite(row[0]), _finite(row[1])
        if lat is None or lon is None:
            continue
        alt = _finite(row[2]) if len(row) >= 3 else None
        observations.append(Observation(ts=default_ts, lat=lat, lon=lon, alt=alt))
    return observations


def extract_coordinate_records(structure: Any, default_ts: float) -> List[Observation]:
    """Flat records keyed by coordinate synonyms; timestamps are not consulted."""

    if not isinstance(structure, list) or not structure or not isinstance(structure[0], dict):
        return []
    observations: List[Observation] = []
    for record in structure:
        if not isinstance(record, dict):
            continue
        observation = _observation_from_record(record, default_ts)
        if observation is not None:
            observations.append(observation)
    return observations


def _walk_records(node: Any) -> Iterator[dict]:
    if isinstance(node, list):
        for item in node:
            yield from _walk_records(item)
    elif isinstance(node, dict):
        yield node
        for value in node.values():
            yield from _walk_records(value)


def extract_nested_records(structure: Any, default_ts: float) -> List[Observation]:
    """Depth-first search for coordinate records anywhere in the tree."""

    observations: List[Observation] = []
    for record in _walk_records(structure):
        ts = coerce_timestamp(_lookup(record, TS_KEYS))
        observation = _observation_from_record(record, default_ts if ts is None else ts)
        if observation is not None:
            observations.append(observation)
    return observations


ExtractionStrategy = Callable[[Any, float], List[Observation]]

EXTRACTION_STRATEGIES: Tuple[ExtractionStrategy, ...] = (
    extract_coordinate_rows,
    extract_coordinate_records,
    extract_nested_records,
)


def extract_observations(structure: Any, hour_index: int, now: Optional[float] = None) -> List[Observation]:
    """Return the observations of the first strategy that finds any."""

    if structure is None:
        return []
    default_ts = hour_timestamp(hour_index, now)
    for strategy in EXTRACTION_STRATEGIES:
        observations = strategy(structure, default_ts)
        if observations:
            return observations
    return []


def normalize_payload(text: Optional[str], hour_index: int, now: Optional[float] = None) -> List[Observation]:
    """Recover ``text`` and extract its observations; unrecoverable input yields ``[]``."""

    return extract_observations(recover_structure(text), hour_index, now)
