"""Folds challenge results into per-player aggregates and ranks them."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from shared.models import (
    ChallengeDetails,
    ChallengeResult,
    GrandTotals,
    LeaderboardEntry,
    PlayerAggregate,
    Snapshot,
)
from shared.scoring import assign_ranks, per_round, round_half_up, weighted_score


def find_winner(result: ChallengeResult) -> Optional[str]:
    """Return the player id of the first submission holding the highest score."""
    winner_id = None
    max_score = -1
    for submission in result.submissions:
        if submission.score is not None and submission.score > max_score:
            max_score = submission.score
            winner_id = submission.player_id
    return winner_id


def fold_challenge(aggregates: Dict[str, PlayerAggregate], result: ChallengeResult) -> int:
    """Add every usable submission of ``result`` to ``aggregates``.

    Returns the number of submissions folded in.
    """
    winner_id = find_winner(result)
    folded = 0
    for submission in result.submissions:
        if submission.score is None or submission.rounds == 0:
            print(
                f"[leaderboard] Warning: Could not parse score or found 0 rounds for player: "
                f"{submission.player_name}. Skipping."
            )
            continue

        player = aggregates.get(submission.player_id)
        if player is None:
            player = PlayerAggregate(player_id=submission.player_id, player_name=submission.player_name)
            aggregates[submission.player_id] = player

        player.total_score += submission.score
        player.games_played += 1
        player.total_rounds_played += submission.rounds
        player.challenge_scores[result.id] = submission.score
        player.total_steps += submission.steps
        player.total_time += submission.time
        if submission.player_id == winner_id:
            player.challenges_won += 1
        player.perfect_rounds += submission.perfect_rounds
        folded += 1
    return folded


def rank_players(aggregates: Iterable[PlayerAggregate]) -> List[LeaderboardEntry]:
    """Rank by unrounded weighted score (descending, stable), then round for display."""
    scored = []
    for player in aggregates:
        rounds = player.total_rounds_played
        scored.append(
            (
                weighted_score(player.total_score, rounds, player.games_played),
                per_round(player.total_score, rounds),
                per_round(player.total_steps, rounds),
                per_round(player.total_time, rounds),
                player,
            )
        )
    scored.sort(key=lambda row: row[0], reverse=True)

    entries = []
    for weighted, avg_score, avg_steps, avg_time, player in scored:
        entries.append(
            LeaderboardEntry(
                **player.model_dump(),
                rank=0,
                weighted_score=round_half_up(weighted),
                average_score_per_round=round_half_up(avg_score),
                average_steps_per_round=round_half_up(avg_steps, 2),
                average_time_per_round=round_half_up(avg_time, 2),
            )
        )
    assign_ranks(entries)
    return entries


def grand_totals(entries: Iterable[PlayerAggregate]) -> GrandTotals:
    totals = GrandTotals()
    for entry in entries:
        totals.total_steps += entry.total_steps
        totals.total_time += entry.total_time
    return totals


class LeaderboardAggregator:
    """Running state of one aggregation run."""

    def __init__(self) -> None:
        self.players: Dict[str, PlayerAggregate] = {}
        self.challenge_details: List[ChallengeDetails] = []

    def add(self, result: ChallengeResult) -> int:
        self.challenge_details.append(ChallengeDetails(id=result.id, name=result.map_name))
        return fold_challenge(self.players, result)

    def snapshot(self) -> Snapshot:
        leaderboard = rank_players(self.players.values())
        return Snapshot(
            challenge_details=list(self.challenge_details),
            leaderboard=leaderboard,
            grand_totals=grand_totals(leaderboard),
        )


def build_snapshot(results: Iterable[ChallengeResult]) -> Snapshot:
    aggregator = LeaderboardAggregator()
    for result in results:
        aggregator.add(result)
    return aggregator.snapshot()
