"""Prints the current leaderboard snapshot to the console."""

from __future__ import annotations

import os
import sys
from typing import List

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from shared.config import snapshot_path
from shared.render import SnapshotError, validate_snapshot
from shared.storage import read_snapshot_payload


def format_lines(payload: object) -> List[str]:
    snapshot = validate_snapshot(payload)
    lines = [f"Leaderboard snapshot ({len(snapshot.challenge_details)} challenges):"]
    for entry in snapshot.leaderboard:
        lines.append(
            f"{entry.rank}. {entry.player_name} → weighted={entry.weighted_score} total={entry.total_score} "
            f"games={entry.games_played} wins={entry.challenges_won} perfect={entry.perfect_rounds}"
        )
    totals = snapshot.grand_totals
    lines.append(f"Grand totals: steps={totals.total_steps} time={totals.total_time}s")
    return lines


def main() -> None:
    try:
        lines = format_lines(read_snapshot_payload(snapshot_path()))
    except (OSError, ValueError, SnapshotError) as exc:
        print(f"Could not read snapshot: {exc}")
        sys.exit(1)
    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
