import pandas as pd
import pytest

from app_types import Player, PlayerStatus
from exceptions import ValidationError
from player_service import (
    create_registry_dataframe,
    dataframe_to_players,
    players_status_dataframe,
)


def test_registry_dataframe_shows_avoid_names(players_by_id):
    players_by_id["alice"].avoid_players = {"bob", "dave"}

    df = create_registry_dataframe(players_by_id)

    assert list(df.columns) == ["Player ID", "Player Name", "Skill", "Avoid"]
    assert df.loc[df["Player ID"] == "alice", "Avoid"].item() == "Bob, Dave"
    assert len(df) == 8


def test_edited_dataframe_to_players():
    df = pd.DataFrame(
        {
            "Player ID": ["alice", None, None],
            "Player Name": ["Alice", "Mary Jane", None],
            "Skill": [5, 2, 3],
            "Avoid": ["Mary Jane, Nobody", None, ""],
        }
    )

    players = dataframe_to_players(df)

    assert set(players) == {"alice", "mary-jane"}
    assert players["mary-jane"].skill_level == 2
    assert players["alice"].avoid_players == {"mary-jane"}
    assert players["mary-jane"].avoid_players == set()


@pytest.mark.parametrize("skill", [9, 0, 3.7, "high"])
def test_edited_dataframe_rejects_bad_skill(skill):
    df = pd.DataFrame({"Player ID": [None], "Player Name": ["Zed"], "Skill": [skill], "Avoid": [""]})

    with pytest.raises(ValidationError):
        dataframe_to_players(df)


def test_edited_dataframe_accepts_whole_float_skill():
    df = pd.DataFrame({"Player ID": [None], "Player Name": ["Zed"], "Skill": [4.0], "Avoid": [""]})

    assert dataframe_to_players(df)["zed"].skill_level == 4


def test_edited_dataframe_rejects_duplicate_ids():
    df = pd.DataFrame(
        {"Player ID": [None, None], "Player Name": ["Sam", "sam"], "Skill": [3, 3], "Avoid": ["", ""]}
    )

    with pytest.raises(ValidationError):
        dataframe_to_players(df)


def test_players_status_dataframe():
    players = [
        Player(id="a", name="A", skill_level=3, available_since=0.0),
        Player(id="b", name="B", skill_level=4, status=PlayerStatus.IN_MATCH),
    ]

    df = players_status_dataframe(players, now=600.0)

    assert df["Waiting (min)"].tolist()[0] == 10
    assert pd.isna(df["Waiting (min)"].tolist()[1])
    assert df["Status"].tolist() == ["available", "in-match"]
