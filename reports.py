"""
Session reports built from completed matches.

Each function returns a DataFrame ready for st.dataframe.
"""

from collections.abc import Iterable

import pandas as pd

from app_types import Match, MatchStatus, Player
from constants import DEFAULT_DAILY_FEE, DEFAULT_SHUTTLECOCK_FEE

WIN_RATE_COLUMNS = ["Player", "Played", "Wins", "Losses", "Win Rate (%)"]
COST_COLUMNS = ["Player", "Daily Fee", "Shuttlecocks", "Shuttlecock Cost", "Total"]
SUMMARY_COLUMNS = ["Court", "Team A", "Team B", "Score", "Shuttlecocks", "Duration"]


def _completed(matches: Iterable[Match]) -> list[Match]:
    return [m for m in matches if m.status == MatchStatus.COMPLETED]


def format_duration(total_seconds: float) -> str:
    """Formats seconds as mm:ss."""
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def win_rate_table(players: Iterable[Player], matches: Iterable[Match]) -> pd.DataFrame:
    """
    Wins and losses per player over completed matches.

    Team A wins only with the higher score; a tie goes to team B. Players
    without a completed match are left out.
    """
    stats = {p.id: {"name": p.name, "played": 0, "wins": 0} for p in players}

    for match in _completed(matches):
        team_a_won = match.score_a > match.score_b
        winners, losers = (match.team_a, match.team_b) if team_a_won else (match.team_b, match.team_a)
        for player in winners:
            entry = stats.setdefault(player.id, {"name": player.name, "played": 0, "wins": 0})
            entry["wins"] += 1
            entry["played"] += 1
        for player in losers:
            entry = stats.setdefault(player.id, {"name": player.name, "played": 0, "wins": 0})
            entry["played"] += 1

    rows = [
        {
            "Player": s["name"],
            "Played": s["played"],
            "Wins": s["wins"],
            "Losses": s["played"] - s["wins"],
            "Win Rate (%)": round(100 * s["wins"] / s["played"], 1),
        }
        for s in stats.values()
        if s["played"] > 0
    ]
    df = pd.DataFrame(rows, columns=WIN_RATE_COLUMNS)
    return df.sort_values(["Win Rate (%)", "Played"], ascending=False, kind="stable").reset_index(drop=True)


def cost_table(
    players: Iterable[Player],
    matches: Iterable[Match],
    daily_fee: float = DEFAULT_DAILY_FEE,
    shuttlecock_fee: float = DEFAULT_SHUTTLECOCK_FEE,
) -> pd.DataFrame:
    """
    What each player owes for the session.

    Shuttlecocks of a match are shared evenly by the players in it. Only
    players with at least one completed match are charged the daily fee.
    """
    names = {p.id: p.name for p in players}
    shares: dict[str, float] = {}

    for match in _completed(matches):
        on_court = match.players
        share = match.shuttlecocks_used / len(on_court)
        for player in on_court:
            names.setdefault(player.id, player.name)
            shares[player.id] = shares.get(player.id, 0.0) + share

    rows = [
        {
            "Player": names[pid],
            "Daily Fee": daily_fee,
            "Shuttlecocks": round(used, 2),
            "Shuttlecock Cost": round(used * shuttlecock_fee, 2),
            "Total": round(daily_fee + used * shuttlecock_fee, 2),
        }
        for pid, used in shares.items()
    ]
    df = pd.DataFrame(rows, columns=COST_COLUMNS)
    return df.sort_values("Total", ascending=False, kind="stable").reset_index(drop=True)


def match_summary_table(matches: Iterable[Match], court_names: dict[int, str] | None = None) -> pd.DataFrame:
    """Completed matches, most recent first."""
    court_names = court_names or {}
    finished = sorted(_completed(matches), key=lambda m: m.end_time or 0, reverse=True)
    rows = [
        {
            "Court": court_names.get(m.court_id, f"Court {m.court_id}"),
            "Team A": " & ".join(p.name for p in m.team_a),
            "Team B": " & ".join(p.name for p in m.team_b),
            "Score": f"{m.score_a} - {m.score_b}",
            "Shuttlecocks": m.shuttlecocks_used,
            "Duration": format_duration(m.end_time - m.start_time)
            if m.start_time is not None and m.end_time is not None
            else "",
        }
        for m in finished
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
