"""
Service layer for player registry operations.

This module handles conversion between Player objects and the DataFrames
edited in the Streamlit setup page, including the avoid lists that are
entered as comma separated player names.
"""

import logging

import pandas as pd

from app_types import Player, PlayerId
from constants import MAX_SKILL_LEVEL, MIN_SKILL_LEVEL
from exceptions import ValidationError

logger = logging.getLogger("app.player_service")

REGISTRY_COLUMNS = ["Player ID", "Player Name", "Skill", "Avoid"]


def _slugify(name: str) -> str:
    return "-".join(name.lower().split())


def create_registry_dataframe(players: dict[PlayerId, Player]) -> pd.DataFrame:
    """Creates a DataFrame for the player registry editor."""
    names_by_id = {p.id: p.name for p in players.values()}
    return pd.DataFrame(
        {
            "Player ID": [p.id for p in players.values()],
            "Player Name": [p.name for p in players.values()],
            "Skill": [p.skill_level for p in players.values()],
            "Avoid": [
                ", ".join(sorted(names_by_id[pid] for pid in p.avoid_players if pid in names_by_id))
                for p in players.values()
            ],
        },
        columns=REGISTRY_COLUMNS,
    )


def dataframe_to_players(edited_df: pd.DataFrame) -> dict[PlayerId, Player]:
    """
    Converts an edited registry DataFrame into a Player dict.

    New rows without an id get one derived from the name. Avoid entries are
    matched by player name; unknown names are ignored with a warning.

    Args:
        edited_df: DataFrame from the Streamlit data_editor

    Returns:
        Dictionary mapping player ids to Player objects

    Raises:
        ValidationError: Duplicate ids or a skill level outside 1-5.
    """
    rows = edited_df.dropna(subset=["Player Name"])
    rows = rows[rows["Player Name"].astype(str).str.strip() != ""]

    registry: dict[PlayerId, Player] = {}
    avoid_names: dict[PlayerId, list[str]] = {}
    for _, row in rows.iterrows():
        name = str(row["Player Name"]).strip()
        raw_id = row.get("Player ID")
        player_id = _slugify(name) if pd.isna(raw_id) or not str(raw_id).strip() else str(raw_id).strip()
        if player_id in registry:
            raise ValidationError(f"Duplicate player id '{player_id}'.")

        skill = pd.to_numeric(row.get("Skill"), errors="coerce")
        if pd.isna(skill) or skill != int(skill) or not MIN_SKILL_LEVEL <= skill <= MAX_SKILL_LEVEL:
            raise ValidationError(
                f"{name}: skill must be a whole number between {MIN_SKILL_LEVEL} and {MAX_SKILL_LEVEL}."
            )

        registry[player_id] = Player(id=player_id, name=name, skill_level=int(skill))
        avoid = row.get("Avoid")
        avoid_names[player_id] = [] if pd.isna(avoid) else [
            n.strip() for n in str(avoid).split(",") if n.strip()
        ]

    ids_by_name = {p.name: p.id for p in registry.values()}
    for player_id, names in avoid_names.items():
        for name in names:
            other_id = ids_by_name.get(name)
            if other_id is None:
                logger.warning("Ignoring unknown avoid entry '%s' for %s", name, player_id)
            elif other_id != player_id:
                registry[player_id].avoid_players.add(other_id)

    return registry


def players_status_dataframe(players: list[Player], now: float) -> pd.DataFrame:
    """Player overview for the session page, in the order given."""
    return pd.DataFrame(
        {
            "Player": [p.name for p in players],
            "Skill": [p.skill_level for p in players],
            "Played": [p.matches_played for p in players],
            "Status": [p.status.value for p in players],
            "Waiting (min)": [
                round((now - p.available_since) / 60) if p.available_since is not None else None
                for p in players
            ],
        }
    )
