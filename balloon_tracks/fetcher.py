"""Retrieval of the hourly snapshot payloads.

Each hour is fetched independently with its own timeout. A failed hour is
logged and reported as ``None``; it never aborts the other fetches. The
concurrent join over all hours lives in :func:`balloon_tracks.pipeline.reconstruct_tracks`.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import requests

from .config import TrackerConfig


class SnapshotFetcher:
    """Fetch ``url_template.format(hour=h)`` for one hour of the window.

    ``fetch_hour`` is called from worker threads, so every thread gets its own
    session from ``session_factory``.
    """

    def __init__(
        self,
        config: TrackerConfig,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.config: TrackerConfig = config
        self.session_factory = session_factory
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            self._local.session = session
        return session

    def url_for(self, hour_index: int) -> str:
        return self.config.url_template.format(hour=hour_index)

    def fetch_hour(self, hour_index: int) -> Optional[str]:
        """Return the raw body for ``hour_index``, or ``None`` when it cannot be fetched."""

        url = self.url_for(hour_index)
        try:
            response = self.session.get(url, timeout=self.config.timeout_sec)
            response.raise_for_status()
        except requests.RequestException as exc:
            logging.warning("Snapshot %02d unavailable (%s): %s", hour_index, url, exc)
            return None

        text = response.text
        if not text or not text.strip():
            logging.warning("Snapshot %02d returned an empty body", hour_index)
            return None
        return text
