import random
from itertools import count

from app_types import Match, MatchStatus, Player

_match_ids = count(1)


class FakeClock:
    """Deterministic clock; advance() moves time forward in seconds."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def make_player(player_id, skill_level=3, matches_played=0, available_since=0.0, avoid=()):
    return Player(
        id=player_id,
        name=player_id.capitalize(),
        skill_level=skill_level,
        matches_played=matches_played,
        available_since=available_since,
        avoid_players=set(avoid),
    )


def make_match(team_a, team_b, end_time, status=MatchStatus.COMPLETED, score_a=21, score_b=15):
    """Builds a finished match between two lists of players."""
    return Match(
        id=f"m{next(_match_ids)}",
        court_id=1,
        team_a=list(team_a),
        team_b=list(team_b),
        score_a=score_a,
        score_b=score_b,
        status=status,
        start_time=None if end_time is None else end_time - 900,
        end_time=end_time,
        shuttlecocks_used=1,
    )


def generate_random_players(n, skill_range=(1, 5), seed=None):
    """
    Generates N players with ids p1 to pn and random skill levels.

    Args:
        n: Number of players to generate
        skill_range: Tuple of (min_skill, max_skill)
        seed: Seed for reproducible skills

    Returns:
        List of Player objects, each waiting a minute longer than the next.
    """
    rng = random.Random(seed)
    return [
        make_player(f"p{i}", skill_level=rng.randint(*skill_range), available_since=60.0 * i)
        for i in range(1, n + 1)
    ]
