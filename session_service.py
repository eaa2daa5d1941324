"""
Service layer for orchestrating session operations.

This module sits between the UI (pages) and the lower-level logic modules,
ensuring that business rules are applied consistently regardless of where
the operation is initiated (UI or Tests). The match generator only ever
receives snapshots; every state change goes through the CourtSession and
is then persisted.
"""

import logging
import random
from datetime import datetime

import pandas as pd

from app_types import MatchStatus, MatchSuggestion, PairingConfig, PlayerId, PlayerStatus
from constraints import check_constraints
from exceptions import SessionError, ValidationError
from history import build_histories
from optimizer import generate_match
from session_logic import CourtSession, SessionManager

logger = logging.getLogger("app.session_service")

SESSION_OVERVIEW_COLUMNS = ["Session", "Players", "Courts", "On Court", "Completed"]


def suggest_match(session: CourtSession, config: PairingConfig | None = None) -> MatchSuggestion:
    """
    Suggests the next match from the session's available players.

    Raises:
        InsufficientPlayersError: Fewer than four players are available.
    """
    available, matches = session.snapshot()
    return generate_match(available, matches, config)


def review_manual_match(
    session: CourtSession,
    team_a_ids: list[PlayerId],
    team_b_ids: list[PlayerId],
    config: PairingConfig | None = None,
) -> list[str]:
    """
    Checks a hand-picked lineup against the pairing rules.

    Returns:
        Issue messages; empty if the lineup breaks no rule.
    """
    config = config or PairingConfig()
    team_a = [session.get_player(pid) for pid in team_a_ids]
    team_b = [session.get_player(pid) for pid in team_b_ids]
    histories = build_histories(
        session.matches.values(), session.players.values(), config.light_game_gap
    )
    return check_constraints(
        team_a,
        team_b,
        histories,
        max_repeat_count=config.max_repeat_count,
        max_light_games=config.max_light_games,
        light_game_gap=config.light_game_gap,
    )


def schedule_match(
    session: CourtSession,
    session_name: str,
    court_id: int,
    team_a_ids: list[PlayerId],
    team_b_ids: list[PlayerId],
):
    """
    Puts a suggested or hand-picked lineup on a court and persists the session.

    The lineup is re-checked against the current state first, so a
    suggestion made from an older snapshot is rejected if one of its
    players has since become busy or unavailable.

    Raises:
        SessionError: A player is no longer available or the court is busy.
        ValidationError: The lineup is not two disjoint pairs.
    """
    stale = [
        session.get_player(pid).name
        for pid in list(team_a_ids) + list(team_b_ids)
        if session.get_player(pid).status != PlayerStatus.AVAILABLE
    ]
    if stale:
        logger.warning("Rejected stale lineup; no longer available: %s", stale)
        raise SessionError(
            f"Lineup is out of date, no longer available: {', '.join(stale)}"
        )

    match = session.create_match(court_id, team_a_ids, team_b_ids)
    SessionManager.save(session, session_name)
    return match


def schedule_suggestion(
    session: CourtSession,
    session_name: str,
    court_id: int,
    suggestion: MatchSuggestion,
):
    """Schedules a MatchSuggestion on a court."""
    return schedule_match(
        session,
        session_name,
        court_id,
        [p.id for p in suggestion.team_a],
        [p.id for p in suggestion.team_b],
    )


def update_match_and_save(
    session: CourtSession,
    session_name: str,
    match_id: str,
    status: MatchStatus | None = None,
    score_a: int | None = None,
    score_b: int | None = None,
    shuttlecocks_used: int | None = None,
):
    """
    Updates a match and persists the change.

    Raises:
        SessionError: Illegal status transition or unknown match.
        ValidationError: Invalid score or shuttlecock count.
    """
    # 1. Modify session state
    match = session.update_match(
        match_id,
        status=status,
        score_a=score_a,
        score_b=score_b,
        shuttlecocks_used=shuttlecocks_used,
    )

    # 2. Persist state
    SessionManager.save(session, session_name)
    return match


def set_player_status_and_save(
    session: CourtSession,
    session_name: str,
    player_id: PlayerId,
    status: PlayerStatus,
):
    """Changes a player's availability and persists the change."""
    player = session.set_player_status(player_id, status)
    SessionManager.save(session, session_name)
    return player


def create_new_session(
    players,
    num_courts: int,
    session_name: str,
) -> CourtSession:
    """
    Creates and initializes a new session.

    1. Validates the session name is free
    2. Initializes the CourtSession object
    3. Saves session to disk

    Raises:
        ValidationError: If a session with the same name exists.
    """
    if session_name in SessionManager.list_sessions():
        raise ValidationError(f"A session named '{session_name}' already exists.")

    session = CourtSession(players=players, num_courts=num_courts)
    SessionManager.save(session, session_name)
    logger.info(
        "Created session '%s' with %d player(s) and %d court(s)",
        session_name,
        len(session.players),
        len(session.courts),
    )
    return session


SESSION_NAME_WORDS = ["Smash", "Drop", "Clear", "Drive", "Lift", "Net", "Rally", "Flick", "Kill", "Push"]


def generate_session_name(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Default session name such as 'Monday Smash 19:30', made unique against saved sessions."""
    now = now or datetime.now()
    rng = rng or random.Random()
    base = f"{now:%A} {rng.choice(SESSION_NAME_WORDS)} {now:%H:%M}"

    taken = set(SessionManager.list_sessions())
    name, suffix = base, 2
    while name in taken:
        name = f"{base} ({suffix})"
        suffix += 1
    return name


def saved_sessions_overview() -> pd.DataFrame:
    """
    One row per saved session for the resume list.

    Sessions that fail to load are left out; SessionManager already
    removes the broken file.
    """
    rows = []
    for name in SessionManager.list_sessions():
        session = SessionManager.load(name)
        if session is None:
            continue
        rows.append(
            {
                "Session": name,
                "Players": len(session.players),
                "Courts": len(session.courts),
                "On Court": len(session.active_matches()),
                "Completed": len(session.completed_matches()),
            }
        )
    return pd.DataFrame(rows, columns=SESSION_OVERVIEW_COLUMNS)
