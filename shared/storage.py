"""Simple JSON-file backed storage for leaderboard snapshots."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Optional

import requests

from shared.config import DEFAULT_TIMEOUT, snapshot_path
from shared.models import Snapshot

LOCK = threading.Lock()


def write_snapshot(snapshot: Snapshot, path: Optional[Path] = None) -> Path:
    """Write the snapshot as indented JSON, replacing the previous file atomically."""
    path = Path(path or snapshot_path())
    with LOCK:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(snapshot.to_json_dict(), indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
    return path


def read_snapshot_payload(path: Optional[Path] = None) -> Any:
    """Return the raw decoded snapshot file; raises OSError or ValueError."""
    path = Path(path or snapshot_path())
    with LOCK:
        text = path.read_text(encoding="utf-8")
    return json.loads(text)


def fetch_snapshot_payload(
    url: str, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT
) -> Any:
    """Fetch a published snapshot over HTTP; raises requests.RequestException or ValueError."""
    session = session or requests.Session()
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    return response.json()
