"""
Types for the Badminton Court Manager.

This module defines the domain enums, type aliases and dataclasses shared by
the pairing engine, the session store and the Streamlit pages.
"""

from dataclasses import dataclass, field
from enum import Enum

from constants import (
    EXHAUSTIVE_MAX_PLAYERS,
    LIGHT_GAME_SKILL_GAP,
    MAX_LIGHT_GAMES,
    MAX_REPEAT_COUNT,
    MAX_SKILL_DIFF,
    STRATEGY_PRIORITY,
    WAIT_TOLERANCE_SECONDS,
)

# =============================================================================
# Basic Type Aliases
# =============================================================================


class PlayerStatus(str, Enum):
    """Availability of a player within the session."""

    AVAILABLE = "available"
    IN_MATCH = "in-match"
    UNAVAILABLE = "unavailable"


class MatchStatus(str, Enum):
    """Lifecycle of a match. Transitions only move forward."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.CANCELLED)


# A player's stable identifier
PlayerId = str

# POSIX timestamp in seconds
Timestamp = float

# =============================================================================
# Domain Data Classes
# =============================================================================


@dataclass
class Player:
    """A club member taking part in the session.

    Attributes:
        id: Unique, stable identifier
        name: Display name
        skill_level: Integer skill from 1 (beginner) to 5 (strongest)
        matches_played: Completed matches this session
        available_since: Start of the current wait period, None while not waiting
        status: Availability of the player
        avoid_players: Ids this player must never share a court with
    """

    id: PlayerId
    name: str
    skill_level: int
    matches_played: int = 0
    available_since: Timestamp | None = None
    status: PlayerStatus = PlayerStatus.AVAILABLE
    avoid_players: set[PlayerId] = field(default_factory=set)


@dataclass
class Match:
    """A doubles match on a court.

    Teams hold player snapshots taken when the match was created.
    """

    id: str
    court_id: int
    team_a: list[Player]
    team_b: list[Player]
    score_a: int = 0
    score_b: int = 0
    status: MatchStatus = MatchStatus.SCHEDULED
    start_time: Timestamp | None = None
    end_time: Timestamp | None = None
    shuttlecocks_used: int = 0

    @property
    def players(self) -> list[Player]:
        return self.team_a + self.team_b

    @property
    def player_ids(self) -> set[PlayerId]:
        return {p.id for p in self.players}


@dataclass
class Court:
    id: int
    name: str
    match_id: str | None = None


# =============================================================================
# Pairing Engine Data Classes
# =============================================================================


@dataclass
class PlayerHistory:
    """Pairing history of one player, derived from completed matches.

    Attributes:
        teammates: How many times each other player was on this player's team
        opponents: How many times each other player was on the opposing team
        light_games: Matches that were lopsided in this player's favour
        last_teammates: Teammates from this player's most recent match
        last_opponents: Opponents from this player's most recent match
    """

    teammates: dict[PlayerId, int] = field(default_factory=dict)
    opponents: dict[PlayerId, int] = field(default_factory=dict)
    light_games: int = 0
    last_teammates: set[PlayerId] = field(default_factory=set)
    last_opponents: set[PlayerId] = field(default_factory=set)


# Mapping of player ids to their derived history
PlayerHistories = dict[PlayerId, PlayerHistory]

# A two-player team
Team = list[Player]


@dataclass
class Matchup:
    """One 2v2 split of four players, scored against the fairness rules."""

    team_a: Team
    team_b: Team
    skill_diff: int
    issues: list[str]
    max_skill_diff: int = MAX_SKILL_DIFF

    @property
    def score(self) -> tuple[int, int]:
        """Sort key: rule violations dominate, then skill difference."""
        return len(self.issues), self.skill_diff

    @property
    def is_perfect(self) -> bool:
        return not self.issues and self.skill_diff <= self.max_skill_diff


@dataclass
class MatchSuggestion:
    """Result handed back to the caller by the match generator.

    Attributes:
        team_a: First team (2 players)
        team_b: Second team (2 players)
        explanation: Human readable description of how the teams were chosen
        issues: Rule violations of the chosen split, empty if fully compliant
        skill_diff: Absolute difference of the summed team skill levels
    """

    team_a: Team
    team_b: Team
    explanation: str
    issues: list[str]
    skill_diff: int
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = not self.issues


@dataclass
class PairingConfig:
    """Tunables for one pairing request. Defaults reproduce the club rules."""

    light_game_gap: float = LIGHT_GAME_SKILL_GAP
    max_repeat_count: int = MAX_REPEAT_COUNT
    max_light_games: int = MAX_LIGHT_GAMES
    max_skill_diff: int = MAX_SKILL_DIFF
    wait_tolerance_seconds: float = WAIT_TOLERANCE_SECONDS
    strategy: str = STRATEGY_PRIORITY
    exhaustive_max_players: int = EXHAUSTIVE_MAX_PLAYERS
    seed: int | None = None
