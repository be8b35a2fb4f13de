"""Client for the GeoGuessr challenge highscores endpoint."""

from __future__ import annotations

import re
from typing import Any, List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shared.config import DEFAULT_API_BASE, DEFAULT_TIMEOUT
from shared.models import ChallengeResult, Submission

COOKIE_NAME = "_ncfa"
HIGHSCORES_LIMIT = 100
UNKNOWN_MAP = "Unknown Map"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ChallengeFetchError(Exception):
    """Raised when a single challenge cannot be fetched or parsed."""


def parse_int(value: Any) -> Optional[int]:
    """Parse a leading base-10 integer the way the API's numbers need it.

    Integers pass through, floats are truncated, strings are read up to the
    first non-digit (``"12abc"`` -> 12). Everything else returns None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def round_points(value: Any) -> Optional[int]:
    """Round score as sent by the API; only genuine integers count."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def cookie_header(cookie: str) -> str:
    cookie = cookie.strip()
    if cookie.startswith(f"{COOKIE_NAME}="):
        return cookie
    return f"{COOKIE_NAME}={cookie}"


class _Amount(BaseModel):
    amount: Any = None


class _Guess(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    round_score_in_points: Any = Field(default=None, alias="roundScoreInPoints")


class _Player(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Union[str, int]
    nick: str = ""
    total_score: _Amount = Field(default_factory=_Amount, alias="totalScore")
    guesses: List[_Guess] = Field(default_factory=list)
    total_steps_count: Any = Field(default=None, alias="totalStepsCount")
    total_time: Any = Field(default=None, alias="totalTime")


class _Game(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    map_name: Optional[str] = Field(default=None, alias="mapName")
    player: _Player


class _HighscoreItem(BaseModel):
    game: _Game


class _HighscoresResponse(BaseModel):
    items: List[_HighscoreItem]


def parse_highscores(challenge_id: str, payload: Any) -> ChallengeResult:
    """Convert a raw highscores payload into a ChallengeResult."""
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise ChallengeFetchError("API response is not in the expected format.")
    try:
        response = _HighscoresResponse.model_validate(payload)
    except ValidationError as exc:
        raise ChallengeFetchError(f"API response is not in the expected format: {exc.error_count()} errors") from exc

    map_name = UNKNOWN_MAP
    if response.items:
        map_name = response.items[0].game.map_name or UNKNOWN_MAP

    submissions = []
    for item in response.items:
        player = item.game.player
        submissions.append(
            Submission(
                player_id=str(player.id),
                player_name=player.nick,
                score=parse_int(player.total_score.amount),
                round_scores=[round_points(guess.round_score_in_points) for guess in player.guesses],
                steps=parse_int(player.total_steps_count) or 0,
                time=parse_int(player.total_time) or 0,
            )
        )
    return ChallengeResult(id=challenge_id, map_name=map_name, submissions=submissions)


class GeoGuessrClient:
    def __init__(
        self,
        cookie: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.cookie = cookie_header(cookie)
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def highscores_url(self, challenge_id: str) -> str:
        return f"{self.api_base}/results/highscores/{challenge_id}"

    def fetch_highscores(self, challenge_id: str, limit: int = HIGHSCORES_LIMIT) -> Any:
        try:
            response = self.session.get(
                self.highscores_url(challenge_id),
                params={"limit": limit},
                headers={"Cookie": self.cookie},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ChallengeFetchError(f"API request failed: {exc}") from exc

        if not response.ok:
            raise ChallengeFetchError(f"API request failed with status {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise ChallengeFetchError("API response is not valid JSON.") from exc

    def fetch_challenge(self, challenge_id: str) -> ChallengeResult:
        print(f"[geoguessr] Fetching data for challenge: {challenge_id}")
        return parse_highscores(challenge_id, self.fetch_highscores(challenge_id))
