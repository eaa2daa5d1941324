"""
Pairing history derived from completed matches.

Histories are rebuilt from scratch for every pairing request and never
stored. Only completed matches with an end time count.
"""

import logging
from collections.abc import Iterable

from app_types import Match, MatchStatus, Player, PlayerHistories, PlayerHistory
from constants import LIGHT_GAME_SKILL_GAP
from constraints import is_light_game

logger = logging.getLogger("app.history")


def counted_matches(matches: Iterable[Match]) -> list[Match]:
    """Completed matches with an end time, oldest first."""
    finished = [
        m
        for m in matches
        if m.status == MatchStatus.COMPLETED and m.end_time is not None
    ]
    return sorted(finished, key=lambda m: m.end_time)


def build_histories(
    completed_matches: Iterable[Match],
    all_known_players: Iterable[Player],
    light_game_gap: float = LIGHT_GAME_SKILL_GAP,
) -> PlayerHistories:
    """
    Builds teammate/opponent counts, light games and last-match partners.

    Every known player gets an entry even if they have not played yet.
    Counts are symmetric because both sides of every pairing are recorded
    from the same match.

    Args:
        completed_matches: Match history; non-completed matches are ignored
        all_known_players: Players that must have an entry
        light_game_gap: Skill gap that makes a game light

    Returns:
        Dict mapping player ids to their PlayerHistory.
    """
    histories: PlayerHistories = {p.id: PlayerHistory() for p in all_known_players}
    matches = counted_matches(completed_matches)

    for match in matches:
        for own_team, other_team in ((match.team_a, match.team_b), (match.team_b, match.team_a)):
            for player in own_team:
                history = histories.setdefault(player.id, PlayerHistory())
                mates = [p.id for p in own_team if p.id != player.id]
                rivals = [p.id for p in other_team]

                for mate_id in mates:
                    history.teammates[mate_id] = history.teammates.get(mate_id, 0) + 1
                for rival_id in rivals:
                    history.opponents[rival_id] = history.opponents.get(rival_id, 0) + 1

                if is_light_game(player, other_team, light_game_gap):
                    history.light_games += 1

                # Matches are in end-time order, so the last write wins
                history.last_teammates = set(mates)
                history.last_opponents = set(rivals)

    logger.debug(
        "Built histories for %d player(s) from %d completed match(es)",
        len(histories),
        len(matches),
    )
    return histories
