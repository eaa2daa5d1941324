"""
Fairness rules for a prospective doubles match.

check_constraints() reports every rule a 2v2 split breaks. Each issue is a
display-ready sentence, so the list doubles as the explanation shown to the
organiser. An empty list means the split is valid.
"""

from collections.abc import Sequence

from app_types import Player, PlayerHistories, PlayerHistory
from constants import LIGHT_GAME_SKILL_GAP, MAX_LIGHT_GAMES, MAX_REPEAT_COUNT


def is_light_game(
    player: Player,
    opponents: Sequence[Player],
    gap: float = LIGHT_GAME_SKILL_GAP,
) -> bool:
    """True if the player out-skills the opposing team's average by at least `gap`."""
    if not opponents:
        return False
    average = sum(p.skill_level for p in opponents) / len(opponents)
    return player.skill_level - average >= gap


def check_constraints(
    team_a: Sequence[Player],
    team_b: Sequence[Player],
    histories: PlayerHistories,
    max_repeat_count: int = MAX_REPEAT_COUNT,
    max_light_games: int = MAX_LIGHT_GAMES,
    light_game_gap: float = LIGHT_GAME_SKILL_GAP,
) -> list[str]:
    """Lists every fairness rule the split breaks.

    Rules are evaluated per player, in team order (team A then team B):

    1. a teammate met as teammate `max_repeat_count` times or more
    2. an opponent met as opponent `max_repeat_count` times or more
    3. a teammate or opponent from the player's last match, in the same role
    4. a light game when the player already has `max_light_games`
    5. anyone on court listed in the player's avoid list

    Pair rules (1-3) are reported once per pair. Avoid lists are one-directional,
    so each player's list is reported separately.

    Args:
        team_a: The two players of the first team
        team_b: The two players of the second team
        histories: Player histories keyed by player id
        max_repeat_count: Past meetings at which a repeat is flagged
        max_light_games: Light games a player may already have
        light_game_gap: Skill gap that makes a game light

    Returns:
        Issue messages in deterministic order.
    """
    issues: list[str] = []
    reported: set[tuple[str, frozenset]] = set()

    def report_pair(rule: str, player: Player, other: Player, message: str) -> None:
        key = (rule, frozenset((player.id, other.id)))
        if key not in reported:
            reported.add(key)
            issues.append(message)

    sides = ((team_a, team_b), (team_b, team_a))
    for own_team, other_team in sides:
        for player in own_team:
            history = histories.get(player.id, PlayerHistory())
            teammates = [p for p in own_team if p.id != player.id]

            for mate in teammates:
                count = history.teammates.get(mate.id, 0)
                if count >= max_repeat_count:
                    report_pair(
                        "teammates",
                        player,
                        mate,
                        f"{player.name} and {mate.name} have played together too many times ({count}).",
                    )

            for opponent in other_team:
                count = history.opponents.get(opponent.id, 0)
                if count >= max_repeat_count:
                    report_pair(
                        "opponents",
                        player,
                        opponent,
                        f"{player.name} and {opponent.name} have played against each other too many times ({count}).",
                    )

            for mate in teammates:
                if mate.id in history.last_teammates:
                    report_pair(
                        "last_teammates",
                        player,
                        mate,
                        f"{player.name} and {mate.name} were teammates in {player.name}'s last match.",
                    )
            for opponent in other_team:
                if opponent.id in history.last_opponents:
                    report_pair(
                        "last_opponents",
                        player,
                        opponent,
                        f"{player.name} and {opponent.name} were opponents in {player.name}'s last match.",
                    )

            if (
                is_light_game(player, other_team, light_game_gap)
                and history.light_games >= max_light_games
            ):
                issues.append(
                    f"{player.name} would play a light game for the {_ordinal(history.light_games + 1)} time."
                )

            for other in list(own_team) + list(other_team):
                if other.id != player.id and other.id in player.avoid_players:
                    issues.append(f"{player.name} wants to avoid {other.name}.")

    return issues


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
