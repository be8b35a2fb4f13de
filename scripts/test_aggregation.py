"""Tests for folding challenge results into a ranked leaderboard."""

from shared.aggregation import (
    LeaderboardAggregator,
    build_snapshot,
    find_winner,
    fold_challenge,
    grand_totals,
    rank_players,
)
from shared.models import ChallengeResult, PlayerAggregate

from conftest import make_submission


def test_totals_are_summed_across_challenges(two_challenges):
    players = {}
    for result in two_challenges:
        fold_challenge(players, result)

    ann = players["p1"]
    assert ann.total_score == 30000
    assert ann.games_played == 2
    assert ann.total_rounds_played == 10
    assert ann.challenge_scores == {"c1": 20000, "c2": 10000}
    assert ann.total_steps == 10
    assert ann.total_time == 400
    assert ann.perfect_rounds == 2

    bruno = players["p2"]
    assert bruno.total_score == 39000
    assert bruno.perfect_rounds == 1
    assert players["p3"].games_played == 1


def test_each_challenge_winner_gets_one_win(two_challenges):
    players = {}
    for result in two_challenges:
        fold_challenge(players, result)
    assert players["p1"].challenges_won == 1
    assert players["p2"].challenges_won == 1
    assert players["p3"].challenges_won == 0


def test_name_comes_from_first_sighting():
    players = {}
    fold_challenge(players, ChallengeResult(id="c1", map_name="m", submissions=[make_submission("p1", "Old", 100)]))
    fold_challenge(players, ChallengeResult(id="c2", map_name="m", submissions=[make_submission("p1", "New", 100)]))
    assert players["p1"].player_name == "Old"
    assert players["p1"].games_played == 2


def test_winner_ignores_unparsable_scores_and_keeps_first_on_tie():
    result = ChallengeResult(
        id="c1",
        map_name="m",
        submissions=[
            make_submission("p0", "none", None),
            make_submission("p1", "first", 9000),
            make_submission("p2", "second", 9000),
        ],
    )
    assert find_winner(result) == "p1"
    assert find_winner(ChallengeResult(id="c2", map_name="m")) is None


def test_unusable_submissions_are_skipped_with_warning(capsys):
    players = {}
    result = ChallengeResult(
        id="c1",
        map_name="m",
        submissions=[
            make_submission("p1", "garbled", None),
            make_submission("p2", "idle", 0, rounds=0),
            make_submission("p3", "ok", 12000),
        ],
    )
    folded = fold_challenge(players, result)

    assert folded == 1
    assert list(players) == ["p3"]
    out = capsys.readouterr().out
    assert "Warning" in out
    assert "garbled" in out and "idle" in out


def test_rank_players_orders_by_weighted_score(two_challenges):
    snapshot = build_snapshot(two_challenges)
    board = snapshot.leaderboard

    assert [entry.player_id for entry in board] == ["p2", "p1", "p3"]
    assert [entry.rank for entry in board] == [1, 2, 3]
    assert [entry.weighted_score for entry in board] == [4285, 3296, 1155]
    assert board[2].average_score_per_round == 1667
    assert board[2].average_time_per_round == 30.0
    assert board[1].average_steps_per_round == 1.0


def test_equal_weighted_scores_keep_first_seen_order():
    players = [
        PlayerAggregate(player_id="a", player_name="a", total_score=5000, games_played=1, total_rounds_played=5),
        PlayerAggregate(player_id="b", player_name="b", total_score=5000, games_played=1, total_rounds_played=5),
        PlayerAggregate(player_id="c", player_name="c", total_score=5000, games_played=1, total_rounds_played=5),
    ]
    board = rank_players(players)
    assert [entry.player_id for entry in board] == ["a", "b", "c"]
    assert [entry.rank for entry in board] == [1, 2, 3]


def test_grand_totals_and_challenge_details(two_challenges):
    snapshot = build_snapshot(two_challenges)
    assert snapshot.grand_totals.total_steps == 20
    assert snapshot.grand_totals.total_time == 940
    assert grand_totals(snapshot.leaderboard) == snapshot.grand_totals
    assert [(c.id, c.name) for c in snapshot.challenge_details] == [("c1", "A Diverse World"), ("c2", "World Cities")]


def test_snapshot_uses_camel_case_keys(two_challenges):
    aggregator = LeaderboardAggregator()
    for result in two_challenges:
        aggregator.add(result)
    data = aggregator.snapshot().to_json_dict()

    assert set(data) == {"challengeDetails", "leaderboard", "grandTotals"}
    first = data["leaderboard"][0]
    assert first["playerName"] == "Bruno"
    assert first["challengeScores"] == {"c1": 15000, "c2": 24000}
    assert first["weightedScore"] == 4285
    assert isinstance(first["weightedScore"], int)
    assert data["grandTotals"] == {"totalSteps": 20, "totalTime": 940}


def test_empty_run_produces_empty_leaderboard():
    snapshot = LeaderboardAggregator().snapshot()
    assert snapshot.leaderboard == []
    assert snapshot.grand_totals.total_steps == 0
