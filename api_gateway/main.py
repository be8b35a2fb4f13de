"""FastAPI entrypoint serving the challenge leaderboard."""

from __future__ import annotations

import os
import sys
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import requests

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from shared.config import request_timeout, snapshot_path, snapshot_url
from shared.models import CamelModel, ChallengeDetails, GrandTotals, LeaderboardEntry, Snapshot
from shared.render import (
    LOAD_FAILED_MESSAGE,
    SnapshotError,
    SortState,
    render_page,
    sort_entries,
    validate_snapshot,
)
from shared.storage import fetch_snapshot_payload, read_snapshot_payload

app = FastAPI(title="Challenge Leaderboard API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SortPayload(BaseModel):
    column: str
    direction: str


class LeaderboardResponse(CamelModel):
    sort: SortPayload
    challenge_details: List[ChallengeDetails]
    entries: List[LeaderboardEntry]
    grand_totals: GrandTotals


def load_payload() -> Any:
    """Read the raw snapshot from SNAPSHOT_URL when set, otherwise from SNAPSHOT_PATH."""
    url = snapshot_url()
    if url:
        return fetch_snapshot_payload(url, timeout=request_timeout())
    return read_snapshot_payload(snapshot_path())


def load_snapshot() -> Snapshot:
    try:
        payload = load_payload()
    except (OSError, ValueError, requests.RequestException) as exc:
        print(f"[api] Error loading the leaderboard: {exc}")
        raise SnapshotError(LOAD_FAILED_MESSAGE) from exc
    return validate_snapshot(payload)


@app.get("/", response_class=HTMLResponse)
def leaderboard_page(
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    details: bool = False,
) -> HTMLResponse:
    try:
        snapshot = load_snapshot()
    except SnapshotError as exc:
        return HTMLResponse(render_page(None, error=str(exc)))
    state = SortState.from_params(sort, direction, snapshot.challenge_ids)
    return HTMLResponse(render_page(snapshot, state, show_details=details))


@app.get("/data.json")
def snapshot_data() -> Any:
    """Raw snapshot, as written by the leaderboard worker."""
    try:
        return load_payload()
    except (OSError, ValueError, requests.RequestException) as exc:
        print(f"[api] Error loading the leaderboard: {exc}")
        raise HTTPException(status_code=503, detail=LOAD_FAILED_MESSAGE)


@app.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    sort: Optional[str] = None,
    direction: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
) -> LeaderboardResponse:
    try:
        snapshot = load_snapshot()
    except SnapshotError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    state = SortState.from_params(sort, direction, snapshot.challenge_ids)
    sort_entries(snapshot.leaderboard, state, snapshot.challenge_ids)
    return LeaderboardResponse(
        sort=SortPayload(column=state.column, direction=state.direction),
        challenge_details=snapshot.challenge_details,
        entries=snapshot.leaderboard,
        grand_totals=snapshot.grand_totals,
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
