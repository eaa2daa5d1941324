# session_logic.py
import copy
import logging
import os
import pickle
import time
import uuid
from collections.abc import Callable, Iterable

from app_types import Court, Match, MatchStatus, Player, PlayerId, PlayerStatus
from constants import (
    DEFAULT_NUM_COURTS,
    DEFAULT_SHUTTLECOCKS_PER_MATCH,
    MAX_SKILL_LEVEL,
    MIN_SKILL_LEVEL,
    PLAYERS_PER_TEAM,
    SESSIONS_DIR,
)
from exceptions import (
    CourtNotFoundError,
    MatchNotFoundError,
    PlayerNotFoundError,
    SessionError,
    ValidationError,
)

logger = logging.getLogger("app.session_logic")

# Forward-only ordering of match states; terminal states share the last rank
_STATUS_RANK = {
    MatchStatus.SCHEDULED: 0,
    MatchStatus.IN_PROGRESS: 1,
    MatchStatus.COMPLETED: 2,
    MatchStatus.CANCELLED: 2,
}


class SessionManager:
    """Handles loading, saving, and clearing named session states."""

    @staticmethod
    def _get_session_path(session_name: str) -> str:
        """Returns the file path for a given session name."""
        os.makedirs(SESSIONS_DIR, exist_ok=True)
        return os.path.join(SESSIONS_DIR, f"{session_name}.pkl")

    @staticmethod
    def save(session_instance, session_name: str):
        """Saves the given session instance to a named file."""
        path = SessionManager._get_session_path(session_name)
        with open(path, "wb") as f:
            pickle.dump(session_instance, f)
        logger.info("Session '%s' saved", session_name)

    @staticmethod
    def load(session_name: str):
        """
        Loads a session from a named file if it exists.
        Returns the session object or None.
        """
        path = SessionManager._get_session_path(session_name)
        if os.path.exists(path):
            try:
                with open(path, "rb") as f:
                    session = pickle.load(f)
                    logger.info("Session '%s' loaded", session_name)
                    return session
            except (pickle.UnpicklingError, EOFError):
                logger.warning("Failed to load session '%s'. It might be corrupted.", session_name)
                os.remove(path)
                return None
        return None

    @staticmethod
    def clear(session_name: str):
        """Clears a named session by deleting its file."""
        path = SessionManager._get_session_path(session_name)
        if os.path.exists(path):
            os.remove(path)
            logger.info("Session '%s' cleared", session_name)

    @staticmethod
    def list_sessions():
        """Returns a list of all available session names."""
        if not os.path.exists(SESSIONS_DIR):
            return []
        files = [f for f in os.listdir(SESSIONS_DIR) if f.endswith('.pkl')]
        return sorted(f[:-4] for f in files)  # Remove .pkl extension


def _validate_skill(skill_level: int) -> int:
    skill_level = int(skill_level)
    if not MIN_SKILL_LEVEL <= skill_level <= MAX_SKILL_LEVEL:
        raise ValidationError(
            f"Skill level must be between {MIN_SKILL_LEVEL} and {MAX_SKILL_LEVEL}, got {skill_level}."
        )
    return skill_level


class CourtSession:
    """
    In-memory store for one club night: players, courts and matches.

    The store owns all state changes (player availability, match lifecycle).
    The match generator only ever sees snapshots taken from it.
    This class only contains game logic and no persistence code.
    """

    def __init__(
        self,
        players: Iterable[Player] = (),
        num_courts: int = DEFAULT_NUM_COURTS,
        clock: Callable[[], float] = time.time,
    ):
        self.clock = clock
        self.players: dict[PlayerId, Player] = {}
        self.courts: dict[int, Court] = {}
        self.matches: dict[str, Match] = {}

        for player in players:
            self.add_player(
                player_id=player.id,
                name=player.name,
                skill_level=player.skill_level,
                avoid_players=player.avoid_players,
                status=player.status,
            )
        for _ in range(num_courts):
            self.add_court()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_player(self, player_id: PlayerId) -> Player:
        try:
            return self.players[player_id]
        except KeyError:
            raise PlayerNotFoundError(f"Player '{player_id}' is not in this session.") from None

    def get_court(self, court_id: int) -> Court:
        try:
            return self.courts[court_id]
        except KeyError:
            raise CourtNotFoundError(f"Court {court_id} does not exist.") from None

    def get_match(self, match_id: str) -> Match:
        try:
            return self.matches[match_id]
        except KeyError:
            raise MatchNotFoundError(f"Match '{match_id}' does not exist.") from None

    def available_players(self) -> list[Player]:
        return [p for p in self.players.values() if p.status == PlayerStatus.AVAILABLE]

    def active_matches(self) -> list[Match]:
        return [m for m in self.matches.values() if not m.status.is_terminal]

    def completed_matches(self) -> list[Match]:
        return [m for m in self.matches.values() if m.status == MatchStatus.COMPLETED]

    def match_on_court(self, court_id: int) -> Match | None:
        court = self.get_court(court_id)
        return self.matches.get(court.match_id) if court.match_id else None

    def snapshot(self) -> tuple[list[Player], list[Match]]:
        """Deep copies of the available players and all matches."""
        return copy.deepcopy(self.available_players()), copy.deepcopy(list(self.matches.values()))

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def add_player(
        self,
        player_id: PlayerId,
        name: str,
        skill_level: int,
        avoid_players: Iterable[PlayerId] = (),
        status: PlayerStatus = PlayerStatus.AVAILABLE,
    ) -> Player:
        """
        Adds a new player to the session.

        Raises:
            ValidationError: If the id is taken, the name is empty or the skill is out of range.
        """
        if player_id in self.players:
            raise ValidationError(f"A player with id '{player_id}' already exists.")
        if not name or not name.strip():
            raise ValidationError("Player name must not be empty.")
        if status == PlayerStatus.IN_MATCH:
            raise ValidationError("New players cannot start in a match.")

        player = Player(
            id=player_id,
            name=name.strip(),
            skill_level=_validate_skill(skill_level),
            status=PlayerStatus(status),
            available_since=self.clock() if status == PlayerStatus.AVAILABLE else None,
        )
        self.players[player_id] = player
        # Avoid lists may reference players added later in the same batch
        player.avoid_players = {pid for pid in avoid_players if pid != player_id}
        logger.debug("Added player %s (skill %d)", player.name, player.skill_level)
        return player

    def update_player(
        self,
        player_id: PlayerId,
        name: str | None = None,
        skill_level: int | None = None,
    ) -> Player:
        player = self.get_player(player_id)
        if name is not None:
            if not name.strip():
                raise ValidationError("Player name must not be empty.")
            player.name = name.strip()
        if skill_level is not None:
            player.skill_level = _validate_skill(skill_level)
        return player

    def set_avoid_players(self, player_id: PlayerId, avoid_ids: Iterable[PlayerId]) -> Player:
        """Replaces a player's avoid list. Self references are dropped."""
        player = self.get_player(player_id)
        avoid = {pid for pid in avoid_ids if pid != player_id}
        unknown = avoid - self.players.keys()
        if unknown:
            raise PlayerNotFoundError(f"Unknown player id(s) in avoid list: {', '.join(sorted(unknown))}")
        player.avoid_players = avoid
        return player

    def remove_player(self, player_id: PlayerId) -> None:
        """Removes a player who is not currently in a match."""
        player = self.get_player(player_id)
        if player.status == PlayerStatus.IN_MATCH:
            raise SessionError(f"{player.name} is in a match and cannot be removed.")
        del self.players[player_id]
        for other in self.players.values():
            other.avoid_players.discard(player_id)

    def set_player_status(self, player_id: PlayerId, status: PlayerStatus) -> Player:
        """
        Moves a player between available and unavailable.

        Entering available starts a new wait period. The in-match status is
        owned by the match lifecycle and cannot be set directly.
        """
        player = self.get_player(player_id)
        status = PlayerStatus(status)
        if status == PlayerStatus.IN_MATCH:
            raise SessionError("Players enter a match through create_match().")
        if player.status == PlayerStatus.IN_MATCH:
            raise SessionError(f"{player.name} is in a match.")
        if status == player.status:
            return player

        player.status = status
        player.available_since = self.clock() if status == PlayerStatus.AVAILABLE else None
        return player

    # ------------------------------------------------------------------
    # Courts
    # ------------------------------------------------------------------

    def add_court(self, name: str | None = None) -> Court:
        court_id = max(self.courts, default=0) + 1
        court = Court(id=court_id, name=name or f"Court {court_id}")
        self.courts[court_id] = court
        return court

    def rename_court(self, court_id: int, name: str) -> Court:
        if not name or not name.strip():
            raise ValidationError("Court name must not be empty.")
        court = self.get_court(court_id)
        court.name = name.strip()
        return court

    def remove_court(self, court_id: int) -> None:
        court = self.get_court(court_id)
        if court.match_id is not None:
            raise SessionError(f"{court.name} is currently in use for a match.")
        del self.courts[court_id]

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def create_match(
        self,
        court_id: int,
        team_a_ids: list[PlayerId],
        team_b_ids: list[PlayerId],
    ) -> Match:
        """
        Schedules a doubles match on a free court.

        Players are snapshotted into the match, marked in-match and stop
        waiting. On the first match of the session every other available
        player starts waiting from now.

        Raises:
            ValidationError: If the teams are not two disjoint pairs.
            SessionError: If the court is busy or a player is not available.
        """
        if len(team_a_ids) != PLAYERS_PER_TEAM or len(team_b_ids) != PLAYERS_PER_TEAM:
            raise ValidationError("Each team needs exactly 2 players.")
        all_ids = list(team_a_ids) + list(team_b_ids)
        if len(set(all_ids)) != len(all_ids):
            raise ValidationError("A player cannot appear twice in the same match.")

        court = self.get_court(court_id)
        if court.match_id is not None:
            raise SessionError(f"{court.name} already has a match.")

        players = [self.get_player(pid) for pid in all_ids]
        busy = [p.name for p in players if p.status != PlayerStatus.AVAILABLE]
        if busy:
            raise SessionError(f"Not available: {', '.join(busy)}")

        is_first_match = not self.matches
        now = self.clock()
        match = Match(
            id=uuid.uuid4().hex,
            court_id=court_id,
            team_a=[copy.deepcopy(p) for p in players[:PLAYERS_PER_TEAM]],
            team_b=[copy.deepcopy(p) for p in players[PLAYERS_PER_TEAM:]],
            shuttlecocks_used=DEFAULT_SHUTTLECOCKS_PER_MATCH,
        )
        self.matches[match.id] = match
        court.match_id = match.id

        for player in players:
            player.status = PlayerStatus.IN_MATCH
            player.available_since = None
        if is_first_match:
            for player in self.available_players():
                player.available_since = now

        logger.info(
            "Scheduled match on %s: %s vs %s",
            court.name,
            " & ".join(p.name for p in match.team_a),
            " & ".join(p.name for p in match.team_b),
        )
        return match

    def update_match(
        self,
        match_id: str,
        status: MatchStatus | None = None,
        score_a: int | None = None,
        score_b: int | None = None,
        shuttlecocks_used: int | None = None,
    ) -> Match:
        """
        Updates scores, shuttlecock count and/or status of a match.

        Status only moves forward. Entering a terminal state frees the court
        and returns the players to the waiting pool; completion also counts
        the match for each player.

        Raises:
            ValidationError: Negative numbers, or edits the current state does not allow.
            SessionError: A backward or repeated status transition.
        """
        match = self.get_match(match_id)
        target = MatchStatus(status) if status is not None else match.status
        if target != match.status:
            self._check_transition(match, target)

        for label, value in (("Score", score_a), ("Score", score_b), ("Shuttlecock count", shuttlecocks_used)):
            if value is not None and value < 0:
                raise ValidationError(f"{label} cannot be negative.")

        if (score_a is not None or score_b is not None) and match.status == MatchStatus.CANCELLED:
            raise ValidationError("Scores of a cancelled match cannot be changed.")
        if shuttlecocks_used is not None and MatchStatus.IN_PROGRESS not in (match.status, target):
            raise ValidationError("Shuttlecocks can only be updated while the match is in progress.")

        if score_a is not None:
            match.score_a = int(score_a)
        if score_b is not None:
            match.score_b = int(score_b)
        if shuttlecocks_used is not None:
            match.shuttlecocks_used = int(shuttlecocks_used)

        if target != match.status:
            self._transition(match, target)
        return match

    @staticmethod
    def _check_transition(match: Match, status: MatchStatus) -> None:
        if match.status.is_terminal or _STATUS_RANK[status] <= _STATUS_RANK[match.status]:
            raise SessionError(
                f"Cannot move a match from {match.status.value} to {status.value}."
            )

    def _transition(self, match: Match, status: MatchStatus) -> None:
        self._check_transition(match, status)

        now = self.clock()
        if status == MatchStatus.IN_PROGRESS or (
            status == MatchStatus.COMPLETED and match.start_time is None
        ):
            match.start_time = now
        match.status = status

        if not status.is_terminal:
            return

        match.end_time = now
        court = self.courts.get(match.court_id)
        if court is not None and court.match_id == match.id:
            court.match_id = None

        for snapshot in match.players:
            player = self.players.get(snapshot.id)
            if player is None:
                continue
            player.status = PlayerStatus.AVAILABLE
            player.available_since = now
            if status == MatchStatus.COMPLETED:
                player.matches_played += 1

        logger.info("Match %s on court %d %s", match.id, match.court_id, status.value)
