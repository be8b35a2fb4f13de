"""Builds a leaderboard snapshot offline from saved highscores payloads."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import List

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from shared.aggregation import build_snapshot
from shared.config import snapshot_path
from shared.geoguessr import ChallengeFetchError, parse_highscores
from shared.models import ChallengeResult
from shared.storage import write_snapshot

MOCK_DIR = Path(os.path.dirname(__file__), "..", "data", "mock_results")


def load_mock_results(directory: Path = MOCK_DIR) -> List[ChallengeResult]:
    """Parse every ``<challenge id>.json`` file in ``directory``, in name order."""
    results = []
    for path in sorted(Path(directory).glob("*.json")):
        challenge_id = path.stem
        try:
            with open(path, "r", encoding="utf-8") as fh:
                payload = json.load(fh)
            results.append(parse_highscores(challenge_id, payload))
        except (ValueError, ChallengeFetchError) as exc:
            print(f"[mock] Error: Skipping {path.name}: {exc}")
    return results


def main() -> None:
    directory = Path(sys.argv[1]) if len(sys.argv) > 1 else MOCK_DIR
    results = load_mock_results(directory)
    snapshot = build_snapshot(results)
    output = write_snapshot(snapshot, snapshot_path())
    print(f"[mock] Wrote {len(snapshot.leaderboard)} players from {len(results)} challenges -> {output}")


if __name__ == "__main__":
    main()
