"""Shared fixtures for the leaderboard tests."""

from __future__ import annotations

import copy
import json
from typing import Any, Dict, List

import pytest

from shared.models import ChallengeResult, Submission

SAMPLE_PAYLOAD: Dict[str, Any] = {
    "challengeDetails": [
        {"id": "c1", "name": "A Diverse World"},
        {"id": "c2", "name": "<b>Cities</b>"},
    ],
    "leaderboard": [
        {
            "rank": 1, "playerId": "p1", "playerName": "ann", "totalScore": 45850, "gamesPlayed": 2,
            "totalRoundsPlayed": 10, "weightedScore": 5037, "challengesWon": 1, "perfectRounds": 2,
            "challengeScores": {"c1": 23850, "c2": 22000}, "totalSteps": 0, "totalTime": 712,
            "averageScorePerRound": 4585, "averageStepsPerRound": 0, "averageTimePerRound": 71.2,
        },
        {
            "rank": 2, "playerId": "p2", "playerName": "Bruno", "totalScore": 45112, "gamesPlayed": 2,
            "totalRoundsPlayed": 10, "weightedScore": 4956, "challengesWon": 1, "perfectRounds": 3,
            "challengeScores": {"c1": 21012, "c2": 24100}, "totalSteps": 55, "totalTime": 1105,
            "averageScorePerRound": 4511, "averageStepsPerRound": 5.5, "averageTimePerRound": 110.5,
        },
        {
            "rank": 3, "playerId": "p3", "playerName": "<script>alert(1)</script>", "totalScore": 18440,
            "gamesPlayed": 1, "totalRoundsPlayed": 5, "weightedScore": 2556, "challengesWon": 0,
            "perfectRounds": 0, "challengeScores": {"c1": 18440}, "totalSteps": 12, "totalTime": 380,
            "averageScorePerRound": 3688, "averageStepsPerRound": 2.4, "averageTimePerRound": 76,
        },
    ],
    "grandTotals": {"totalSteps": 67, "totalTime": 2197},
}


def make_submission(
    player_id: str,
    name: str,
    score: Any,
    rounds: int = 5,
    perfect: int = 0,
    steps: int = 0,
    time: int = 0,
) -> Submission:
    round_scores: List[int] = [5000] * perfect + [1000] * (rounds - perfect)
    return Submission(
        player_id=player_id, player_name=name, score=score, round_scores=round_scores, steps=steps, time=time
    )


def make_item(player_id: str, nick: str, amount: Any, round_scores: List[Any], map_name: str = "World", **extra: Any) -> Dict:
    player = {
        "id": player_id,
        "nick": nick,
        "totalScore": {"amount": amount},
        "guesses": [{"roundScoreInPoints": points} for points in round_scores],
    }
    player.update(extra)
    return {"game": {"mapName": map_name, "player": player}}


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def two_challenges() -> List[ChallengeResult]:
    first = ChallengeResult(
        id="c1",
        map_name="A Diverse World",
        submissions=[
            make_submission("p1", "ann", 20000, perfect=2, steps=10, time=300),
            make_submission("p2", "Bruno", 15000, steps=4, time=250),
        ],
    )
    second = ChallengeResult(
        id="c2",
        map_name="World Cities",
        submissions=[
            make_submission("p2", "Bruno", 24000, perfect=1, steps=6, time=200),
            make_submission("p1", "ann", 10000, time=100),
            make_submission("p3", "chloe", 5000, rounds=3, time=90),
        ],
    )
    return [first, second]


@pytest.fixture
def snapshot_file(tmp_path, monkeypatch, sample_payload):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(sample_payload), encoding="utf-8")
    monkeypatch.setenv("SNAPSHOT_PATH", str(path))
    monkeypatch.delenv("SNAPSHOT_URL", raising=False)
    return path
