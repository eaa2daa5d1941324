"""
Best 2v2 split of a group of four players.
"""

import logging
from collections.abc import Sequence

from app_types import Matchup, PairingConfig, Player, PlayerHistories, Team
from constants import PLAYERS_PER_MATCH
from constraints import check_constraints
from logger import log_matchup_debug

logger = logging.getLogger("app.matchup")


def team_skill(team: Sequence[Player]) -> int:
    return sum(p.skill_level for p in team)


def possible_splits(players: Sequence[Player]) -> list[tuple[Team, Team]]:
    """The three ways to split four players into two teams of two.

    The first player is paired with each of the others in turn.
    """
    first, *rest = players
    splits = []
    for i, partner in enumerate(rest):
        others = [p for j, p in enumerate(rest) if j != i]
        splits.append(([first, partner], others))
    return splits


def evaluate_split(
    team_a: Team,
    team_b: Team,
    histories: PlayerHistories,
    config: PairingConfig | None = None,
) -> Matchup:
    """Scores one split by rule violations and skill difference."""
    config = config or PairingConfig()
    issues = check_constraints(
        team_a,
        team_b,
        histories,
        max_repeat_count=config.max_repeat_count,
        max_light_games=config.max_light_games,
        light_game_gap=config.light_game_gap,
    )
    return Matchup(
        team_a=list(team_a),
        team_b=list(team_b),
        skill_diff=abs(team_skill(team_a) - team_skill(team_b)),
        issues=issues,
        max_skill_diff=config.max_skill_diff,
    )


def find_best_matchup(
    players: Sequence[Player],
    histories: PlayerHistories,
    config: PairingConfig | None = None,
) -> Matchup | None:
    """
    Finds the split of four players with the fewest issues, then the smallest skill gap.

    Issue count always dominates: a split that breaks fewer rules wins
    regardless of balance. On a full tie the earlier split is kept.

    Args:
        players: Exactly four players
        histories: Player histories keyed by player id
        config: Rule thresholds (defaults apply if omitted)

    Returns:
        The best Matchup, or None if the group is not exactly four players.
    """
    if len(players) != PLAYERS_PER_MATCH:
        return None

    best: Matchup | None = None
    for index, (team_a, team_b) in enumerate(possible_splits(players), start=1):
        matchup = evaluate_split(team_a, team_b, histories, config)
        log_matchup_debug(
            logger, f"Split {index}", matchup.team_a, matchup.team_b, matchup.skill_diff, matchup.issues
        )
        if best is None or matchup.score < best.score:
            best = matchup
    return best
