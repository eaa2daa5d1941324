import logging

import pandas as pd
import streamlit as st

from app_types import Player
from constants import DEFAULT_NUM_COURTS, MAX_SKILL_LEVEL, MIN_SKILL_LEVEL, PLAYERS_PER_MATCH
from exceptions import ValidationError
from logger import level_from_env, setup_logging
from player_service import create_registry_dataframe, dataframe_to_players
from session_logic import SessionManager
from session_service import create_new_session, generate_session_name, saved_sessions_overview

setup_logging(level_from_env())
logger = logging.getLogger("app.setup")

STARTER_ROSTER = {
    f"p{i}": Player(id=f"p{i}", name=f"Player {i}", skill_level=(i % MAX_SKILL_LEVEL) + 1)
    for i in range(1, 9)
}


def open_session(session, name: str):
    st.session_state.session = session
    st.session_state.current_session_name = name
    st.switch_page("pages/2_Session.py")


st.set_page_config(layout="wide", page_title="Badminton Setup")
st.title("🏸 Badminton Court Manager")

# --- Saved sessions ---
overview = saved_sessions_overview()
if not overview.empty:
    st.subheader("Saved Sessions")
    st.dataframe(overview, hide_index=True, use_container_width=True)

    chosen = st.selectbox("Session", overview["Session"], key="saved_session")
    col_resume, col_delete = st.columns(2)
    if col_resume.button("▶️ Resume", use_container_width=True):
        session = SessionManager.load(chosen)
        if session is None:
            st.error(f"Session '{chosen}' could not be loaded.")
        else:
            open_session(session, chosen)
    if col_delete.button("🗑️ Delete", use_container_width=True):
        SessionManager.clear(chosen)
        st.rerun()

    st.divider()

# --- Roster ---
st.header("New Session")
st.subheader("1. Roster")
st.info(
    f"Skill runs from {MIN_SKILL_LEVEL} (beginner) to {MAX_SKILL_LEVEL} (strongest). "
    "Under Avoid, list the names of players someone should never share a court with, separated by commas."
)

if "player_table" not in st.session_state:
    st.session_state.player_table = dict(STARTER_ROSTER)

if not isinstance(st.session_state.get("editor_df"), pd.DataFrame):
    st.session_state.editor_df = create_registry_dataframe(st.session_state.player_table)

edited_df = st.data_editor(
    st.session_state.editor_df,
    column_config={
        "Skill": st.column_config.NumberColumn(
            "Skill",
            default=3,
            min_value=MIN_SKILL_LEVEL,
            max_value=MAX_SKILL_LEVEL,
            step=1,
            required=True,
        ),
        "Avoid": st.column_config.TextColumn("Avoid", default=""),
    },
    disabled=["Player ID"],
    hide_index=True,
    num_rows="dynamic",
    use_container_width=True,
    key="player_editor",
)

if st.button("✅ Save Roster"):
    try:
        roster = dataframe_to_players(edited_df)
    except ValidationError as e:
        st.error(str(e))
    else:
        st.session_state.player_table = roster
        st.session_state.editor_df = create_registry_dataframe(roster)
        st.toast(f"Roster saved with {len(roster)} player(s).")
        st.rerun()

# --- Start ---
st.subheader("2. Courts")
col_name, col_courts = st.columns([3, 1])
session_name = col_name.text_input("Session Name", placeholder="Leave empty for a generated name", key="new_session_name")
num_courts = col_courts.number_input("Courts", min_value=1, value=DEFAULT_NUM_COURTS, step=1, key="num_courts_input")

roster = st.session_state.player_table
if len(roster) < PLAYERS_PER_MATCH:
    st.caption(f"At least {PLAYERS_PER_MATCH} players are needed before a match can be suggested.")

if st.button("🚀 Start Session", type="primary", disabled=not roster):
    name = session_name.strip() or generate_session_name()
    try:
        session = create_new_session(players=list(roster.values()), num_courts=int(num_courts), session_name=name)
    except ValidationError as e:
        st.error(str(e))
    else:
        open_session(session, name)
