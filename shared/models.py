"""Pydantic models for challenge results, player aggregates and snapshots."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PERFECT_ROUND_SCORE = 5000


class CamelModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict:
        return self.model_dump(by_alias=True)


class Submission(BaseModel):
    player_id: str
    player_name: str
    score: Optional[int] = None  # None when the API score could not be parsed
    round_scores: List[Optional[int]] = Field(default_factory=list)
    steps: int = 0
    time: int = 0

    @property
    def rounds(self) -> int:
        return len(self.round_scores)

    @property
    def perfect_rounds(self) -> int:
        return sum(1 for points in self.round_scores if points == PERFECT_ROUND_SCORE)


class ChallengeResult(BaseModel):
    id: str
    map_name: str
    submissions: List[Submission] = Field(default_factory=list)


class ChallengeDetails(CamelModel):
    id: str
    name: str


class PlayerAggregate(CamelModel):
    player_id: str
    player_name: str
    total_score: int = 0
    games_played: int = 0
    total_rounds_played: int = 0
    challenges_won: int = 0
    perfect_rounds: int = 0
    challenge_scores: Dict[str, int] = Field(default_factory=dict)
    total_steps: int = 0
    total_time: int = 0


class LeaderboardEntry(PlayerAggregate):
    # Snapshots written before ids were exported carry no playerId.
    player_id: str = ""
    rank: int
    weighted_score: Union[int, float]
    average_score_per_round: Union[int, float] = 0
    average_steps_per_round: Union[int, float] = 0
    average_time_per_round: Union[int, float] = 0

    def challenge_score(self, challenge_id: str) -> int:
        return self.challenge_scores.get(challenge_id, 0)


class GrandTotals(CamelModel):
    total_steps: int = 0
    total_time: int = 0


class Snapshot(CamelModel):
    challenge_details: List[ChallengeDetails] = Field(default_factory=list)
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    grand_totals: GrandTotals = Field(default_factory=GrandTotals)

    @property
    def challenge_ids(self) -> List[str]:
        return [challenge.id for challenge in self.challenge_details]
