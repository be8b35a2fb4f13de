"""Sorting and HTML rendering of leaderboard snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

from pydantic import ValidationError

from shared.models import ChallengeDetails, LeaderboardEntry, Snapshot
from shared.scoring import assign_ranks

ASC = "asc"
DESC = "desc"
CHALLENGE_PREFIX = "challenge-"
CHALLENGE_URL = "https://www.geoguessr.com/challenge/{id}"

LOAD_FAILED_MESSAGE = "Failed to load leaderboard data. Please try again later."
EMPTY_MESSAGE = "Leaderboard data is empty or invalid."
WEIGHTED_SCORE_TITLE = "normalized_average_per_round * log(games_played + 1)"

ARROWS = {ASC: "▲", DESC: "▼"}

# camelCase sort key -> (attribute, is_string)
FIELD_KEYS = {
    "rank": ("rank", False),
    "playerName": ("player_name", True),
    "totalScore": ("total_score", False),
    "gamesPlayed": ("games_played", False),
    "weightedScore": ("weighted_score", False),
    "challengesWon": ("challenges_won", False),
    "perfectRounds": ("perfect_rounds", False),
    "totalSteps": ("total_steps", False),
    "totalTime": ("total_time", False),
    "averageScorePerRound": ("average_score_per_round", False),
    "averageStepsPerRound": ("average_steps_per_round", False),
    "averageTimePerRound": ("average_time_per_round", False),
}


class SnapshotError(Exception):
    """Raised when a snapshot cannot be displayed."""


@dataclass(frozen=True)
class SortState:
    column: str = "weightedScore"
    direction: str = DESC

    def select(self, column: str) -> "SortState":
        """State after clicking ``column``: same column flips, a new one starts descending."""
        if column == self.column:
            return SortState(column, ASC if self.direction == DESC else DESC)
        return SortState(column, DESC)

    @classmethod
    def from_params(
        cls, sort: Optional[str], direction: Optional[str], challenge_ids: Iterable[str]
    ) -> "SortState":
        """Build a state from request parameters, falling back to the default when invalid."""
        state = cls()
        if sort:
            try:
                resolve_sort_key(sort, challenge_ids)
            except KeyError:
                return state
            state = cls(sort, DESC)
        if direction in (ASC, DESC):
            state = cls(state.column, direction)
        return state


@dataclass(frozen=True)
class Column:
    text: str
    sort_key: str
    sortable: bool = True
    challenge_id: Optional[str] = None
    title: Optional[str] = None

    @property
    def is_challenge(self) -> bool:
        return self.challenge_id is not None


def resolve_sort_key(key: str, challenge_ids: Iterable[str]) -> Tuple[Callable[[LeaderboardEntry], Any], bool]:
    """Return ``(value getter, is_string)`` for a sort key.

    ``challenge-<id>`` keys are only valid for challenges in ``challenge_ids``.
    Raises KeyError for anything else.
    """
    if key in FIELD_KEYS:
        attribute, is_string = FIELD_KEYS[key]
        return (lambda entry: getattr(entry, attribute)), is_string
    if key.startswith(CHALLENGE_PREFIX):
        challenge_id = key[len(CHALLENGE_PREFIX):]
        if challenge_id in set(challenge_ids):
            return (lambda entry: entry.challenge_score(challenge_id)), False
    raise KeyError(key)


def sort_entries(entries: List[LeaderboardEntry], state: SortState, challenge_ids: Iterable[str]) -> None:
    """Sort ``entries`` in place by ``state`` and re-assign ranks 1..N."""
    getter, is_string = resolve_sort_key(state.column, challenge_ids)

    def sort_value(entry: LeaderboardEntry) -> Any:
        value = getter(entry)
        if is_string:
            return (value or "").casefold()
        return value or 0

    entries.sort(key=sort_value, reverse=state.direction == DESC)
    assign_ranks(entries)


def validate_snapshot(payload: Any) -> Snapshot:
    if not isinstance(payload, dict):
        raise SnapshotError(EMPTY_MESSAGE)
    leaderboard = payload.get("leaderboard")
    if not isinstance(leaderboard, list) or not leaderboard:
        raise SnapshotError(EMPTY_MESSAGE)
    try:
        return Snapshot.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotError(EMPTY_MESSAGE) from exc


def build_columns(challenge_details: Sequence[ChallengeDetails]) -> List[Column]:
    columns = [
        Column("Rank", "rank", sortable=False),
        Column("Player", "playerName"),
    ]
    for challenge in challenge_details:
        columns.append(Column(challenge.name, f"{CHALLENGE_PREFIX}{challenge.id}", challenge_id=challenge.id))
    columns.extend(
        [
            Column("Total Score", "totalScore"),
            Column("Games Played", "gamesPlayed"),
            Column("Weighted Score", "weightedScore", title=WEIGHTED_SCORE_TITLE),
            Column("Wins", "challengesWon"),
            Column("Perfect Rounds", "perfectRounds"),
        ]
    )
    return columns


def format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return escape(str(value))


def _sort_href(state: SortState, show_details: bool) -> str:
    params = {"sort": state.column, "direction": state.direction}
    if show_details:
        params["details"] = "1"
    return "?" + urlencode(params)


def render_header(column: Column, state: SortState, show_details: bool) -> str:
    classes = []
    if column.is_challenge:
        classes.append("challenge-col")
    if column.sortable:
        classes.append("sortable")
        if column.sort_key == state.column:
            classes.append(f"sorted-{state.direction}")

    title = escape(column.title or column.text)
    text = escape(column.text)
    if column.sortable:
        href = escape(_sort_href(state.select(column.sort_key), show_details))
        label = f'<a class="sort-link" href="{href}" title="{title}">{text}</a>'
    else:
        label = f'<span title="{title}">{text}</span>'

    icons = ""
    if column.is_challenge:
        link = escape(CHALLENGE_URL.format(id=quote(column.challenge_id, safe="")))
        icons += (
            f'<a class="challenge-link-icon" href="{link}" target="_blank" '
            f'rel="noopener noreferrer" title="Open challenge">&#128279;</a>'
        )
    if column.sortable and column.sort_key == state.column:
        icons += f'<span class="sort-icon">{ARROWS[state.direction]}</span>'

    class_attr = f' class="{" ".join(classes)}"' if classes else ""
    sort_attr = f' data-sort-key="{escape(column.sort_key)}"' if column.sortable else ""
    return (
        f'<th{class_attr}{sort_attr}><div class="header-content">{label}'
        f'<div class="header-icons">{icons}</div></div></th>'
    )


def render_row(entry: LeaderboardEntry, challenge_details: Sequence[ChallengeDetails]) -> str:
    cells = [f"<td>{entry.rank}</td>", f"<td>{escape(entry.player_name)}</td>"]
    for challenge in challenge_details:
        cells.append(f'<td class="challenge-col">{format_number(entry.challenge_score(challenge.id))}</td>')
    cells.extend(
        [
            f"<td>{format_number(entry.total_score)}</td>",
            f"<td>{entry.games_played}</td>",
            f"<td>{format_number(entry.weighted_score)}</td>",
            f"<td>{entry.challenges_won}</td>",
            f"<td>{format_number(entry.perfect_rounds)}</td>",
        ]
    )
    return "<tr>" + "".join(cells) + "</tr>"


def render_table(snapshot: Snapshot, state: SortState, show_details: bool = False) -> str:
    """Sort the snapshot's leaderboard by ``state`` and render it as a table."""
    sort_entries(snapshot.leaderboard, state, snapshot.challenge_ids)
    headers = "".join(render_header(column, state, show_details) for column in build_columns(snapshot.challenge_details))
    rows = "\n".join(render_row(entry, snapshot.challenge_details) for entry in snapshot.leaderboard)
    class_attr = ' class="show-details"' if show_details else ""
    return (
        f'<table id="leaderboard-table"{class_attr}>\n'
        f"<thead><tr>{headers}</tr></thead>\n"
        f'<tbody id="leaderboard-body">\n{rows}\n</tbody>\n'
        "</table>"
    )


def render_details_form(state: SortState, show_details: bool) -> str:
    """Details toggle as a GET form, so the choice travels with the current sort."""
    checked = " checked" if show_details else ""
    return (
        '<form id="details-form" class="controls" method="get" action="">'
        f'<input type="hidden" name="sort" value="{escape(state.column)}">'
        f'<input type="hidden" name="direction" value="{escape(state.direction)}">'
        f'<input type="checkbox" id="details-toggle" name="details" value="1"{checked} '
        'onchange="this.form.submit()">'
        '<label for="details-toggle"> Show challenge details</label>'
        '<noscript><button type="submit">Apply</button></noscript>'
        "</form>"
    )


STYLES = """
body { font-family: system-ui, sans-serif; margin: 2rem; background: #10151f; color: #e8ecf4; }
h1 { margin: 0 0 1rem; }
.controls { margin-bottom: 1rem; }
table { border-collapse: collapse; width: 100%; }
th, td { padding: 0.45rem 0.6rem; border-bottom: 1px solid #2b3447; text-align: right; }
th:nth-child(2), td:nth-child(2) { text-align: left; }
th { background: #18202e; white-space: nowrap; }
.header-content { display: flex; gap: 0.35rem; align-items: center; justify-content: space-between; }
.header-icons { display: inline-flex; gap: 0.2rem; }
a.sort-link, a.challenge-link-icon { color: inherit; text-decoration: none; }
th.sorted-asc, th.sorted-desc { color: #6ee7ff; }
.challenge-col { display: none; }
table.show-details .challenge-col { display: table-cell; }
#error { color: #ff8a8a; }
"""


def render_page(
    snapshot: Optional[Snapshot],
    state: Optional[SortState] = None,
    show_details: bool = False,
    error: Optional[str] = None,
) -> str:
    """Render the full leaderboard page, or the error message when there is nothing to show."""
    if error is not None or snapshot is None:
        body = f'<p id="error">{escape(error or LOAD_FAILED_MESSAGE)}</p>'
    else:
        state = state or SortState()
        body = f"{render_details_form(state, show_details)}\n{render_table(snapshot, state, show_details)}"
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        "<title>Challenge Leaderboard</title>\n"
        f"<style>{STYLES}</style>\n</head>\n<body>\n"
        "<h1>Challenge Leaderboard</h1>\n"
        f"{body}\n</body>\n</html>\n"
    )
