"""Leaderboard worker: fetches challenge highscores and writes the snapshot."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from shared.aggregation import LeaderboardAggregator
from shared.config import ConfigError, LeaderboardConfig, api_base, load_config, request_timeout, snapshot_path
from shared.geoguessr import ChallengeFetchError, GeoGuessrClient
from shared.models import Snapshot
from shared.storage import write_snapshot


class LeaderboardWorker:
    def __init__(self, config: LeaderboardConfig, client: Optional[GeoGuessrClient] = None) -> None:
        self.config = config
        self.client = client or GeoGuessrClient(config.cookie, api_base=api_base(), timeout=request_timeout())

    def run(self) -> Snapshot:
        """Fetch every configured challenge in order and build the ranked snapshot.

        A challenge that fails to fetch or parse is logged and left out; the
        run carries on with the remaining challenges.
        """
        aggregator = LeaderboardAggregator()
        for challenge_id in self.config.challenge_ids:
            try:
                result = self.client.fetch_challenge(challenge_id)
            except ChallengeFetchError as exc:
                print(f"[leaderboard] Error: Failed to fetch or process results for challenge {challenge_id}: {exc}")
                continue
            folded = aggregator.add(result)
            print(f"[leaderboard] challenge={challenge_id} map={result.map_name!r} submissions={folded}")
        return aggregator.snapshot()


def main(output: Optional[Path] = None) -> None:
    print("[leaderboard] Starting leaderboard update...")
    try:
        config = load_config()
        worker = LeaderboardWorker(config)
    except ConfigError as exc:
        print(f"[leaderboard] Error reading or parsing config: {exc}")
        sys.exit(1)
    print(f"[leaderboard] Found {len(config.challenge_ids)} challenges in config.")

    snapshot = worker.run()

    output = output or snapshot_path()
    try:
        write_snapshot(snapshot, output)
    except OSError as exc:
        print(f"[leaderboard] Error writing to file: {exc}")
        sys.exit(1)
    print(f"[leaderboard] Successfully wrote leaderboard to {output} with {len(snapshot.leaderboard)} players.")


if __name__ == "__main__":
    main()
