import streamlit as st

from app_types import MatchStatus, PairingConfig, PlayerStatus
from constants import (
    DEFAULT_DAILY_FEE,
    DEFAULT_SHUTTLECOCK_FEE,
    EXHAUSTIVE_MAX_PLAYERS,
    STRATEGY_EXHAUSTIVE,
    STRATEGY_PRIORITY,
)
from exceptions import BadmintonAppError, InsufficientPlayersError
from player_service import players_status_dataframe
from reports import cost_table, match_summary_table, win_rate_table
from session_logic import SessionManager
from session_service import (
    review_manual_match,
    schedule_match,
    schedule_suggestion,
    set_player_status_and_save,
    suggest_match,
    update_match_and_save,
)

st.set_page_config(initial_sidebar_state="collapsed", layout="wide")

# --- Page Entry Logic ---
if "session" not in st.session_state or "current_session_name" not in st.session_state:
    st.error("No active session found. Please start or resume a session.")
    st.switch_page("1_Setup.py")

session = st.session_state.session
session_name = st.session_state.current_session_name
st.title(f"🏸 {session_name}")

with st.sidebar:
    st.header("Match Generator")
    strategy = st.radio(
        "Search",
        [STRATEGY_PRIORITY, STRATEGY_EXHAUSTIVE],
        horizontal=True,
        help=f"Exhaustive checks every group of four (up to {EXHAUSTIVE_MAX_PLAYERS} players).",
        key="strategy",
    )
    config = PairingConfig(strategy=strategy)

tab_courts, tab_players, tab_reports = st.tabs(["Courts", "Players", "Reports"])

# --- Courts ---
with tab_courts:
    for court in list(session.courts.values()):
        with st.container(border=True):
            st.markdown(f"#### {court.name}")
            match = session.match_on_court(court.id)

            if match is None:
                if st.button("🎲 Suggest Match", key=f"suggest_{court.id}"):
                    try:
                        st.session_state[f"suggestion_{court.id}"] = suggest_match(session, config)
                    except InsufficientPlayersError as e:
                        st.warning(str(e))

                suggestion = st.session_state.get(f"suggestion_{court.id}")
                if suggestion is not None:
                    st.markdown(
                        f"**{' & '.join(p.name for p in suggestion.team_a)}** vs "
                        f"**{' & '.join(p.name for p in suggestion.team_b)}**"
                    )
                    st.caption(suggestion.explanation)
                    for issue in suggestion.issues:
                        st.warning(issue)
                    if st.button("Schedule This Match", key=f"schedule_{court.id}"):
                        try:
                            schedule_suggestion(session, session_name, court.id, suggestion)
                        except BadmintonAppError as e:
                            st.error(str(e))
                        else:
                            del st.session_state[f"suggestion_{court.id}"]
                            st.rerun()

                with st.expander("Manual lineup"):
                    options = {p.id: p.name for p in session.available_players()}
                    team_a = st.multiselect(
                        "Team A", options, format_func=options.get, max_selections=2, key=f"team_a_{court.id}"
                    )
                    team_b = st.multiselect(
                        "Team B",
                        [pid for pid in options if pid not in team_a],
                        format_func=options.get,
                        max_selections=2,
                        key=f"team_b_{court.id}",
                    )
                    if len(team_a) == 2 and len(team_b) == 2:
                        for issue in review_manual_match(session, team_a, team_b, config):
                            st.warning(issue)
                        if st.button("Schedule Match", key=f"manual_{court.id}"):
                            try:
                                schedule_match(session, session_name, court.id, team_a, team_b)
                            except BadmintonAppError as e:
                                st.error(str(e))
                            else:
                                st.rerun()
            else:
                st.markdown(
                    f"**{' & '.join(p.name for p in match.team_a)}** vs "
                    f"**{' & '.join(p.name for p in match.team_b)}** ({match.status.value})"
                )
                cols = st.columns(3)
                score_a = cols[0].number_input("Score A", min_value=0, value=match.score_a, key=f"sa_{match.id}")
                score_b = cols[1].number_input("Score B", min_value=0, value=match.score_b, key=f"sb_{match.id}")
                shuttles = cols[2].number_input(
                    "Shuttlecocks",
                    min_value=0,
                    value=match.shuttlecocks_used,
                    key=f"sc_{match.id}",
                    disabled=match.status != MatchStatus.IN_PROGRESS,
                )

                next_status = {
                    MatchStatus.SCHEDULED: ("▶️ Start", MatchStatus.IN_PROGRESS),
                    MatchStatus.IN_PROGRESS: ("✅ Complete", MatchStatus.COMPLETED),
                }[match.status]
                col_next, col_cancel = st.columns(2)
                try:
                    if col_next.button(next_status[0], key=f"next_{match.id}", use_container_width=True):
                        update_match_and_save(
                            session,
                            session_name,
                            match.id,
                            status=next_status[1],
                            score_a=int(score_a),
                            score_b=int(score_b),
                            shuttlecocks_used=int(shuttles) if match.status == MatchStatus.IN_PROGRESS else None,
                        )
                        st.rerun()
                    if col_cancel.button("✖️ Cancel", key=f"cancel_{match.id}", use_container_width=True):
                        update_match_and_save(session, session_name, match.id, status=MatchStatus.CANCELLED)
                        st.rerun()
                except BadmintonAppError as e:
                    st.error(str(e))

    if st.button("Add court"):
        session.add_court()
        SessionManager.save(session, session_name)
        st.rerun()

# --- Players ---
with tab_players:
    now = session.clock()
    st.dataframe(
        players_status_dataframe(list(session.players.values()), now),
        use_container_width=True,
        hide_index=True,
    )
    idle = [p for p in session.players.values() if p.status != PlayerStatus.IN_MATCH]
    if idle:
        names = {p.id: p.name for p in idle}
        selected = st.selectbox("Player", list(names), format_func=names.get, key="status_player")
        col_in, col_out = st.columns(2)
        if col_in.button("Mark available", use_container_width=True):
            set_player_status_and_save(session, session_name, selected, PlayerStatus.AVAILABLE)
            st.rerun()
        if col_out.button("Mark unavailable", use_container_width=True):
            set_player_status_and_save(session, session_name, selected, PlayerStatus.UNAVAILABLE)
            st.rerun()

# --- Reports ---
with tab_reports:
    all_players = list(session.players.values())
    all_matches = list(session.matches.values())

    st.subheader("Win Rates")
    st.dataframe(win_rate_table(all_players, all_matches), use_container_width=True, hide_index=True)

    st.subheader("Costs")
    col_fee, col_shuttle = st.columns(2)
    daily_fee = col_fee.number_input("Daily fee", min_value=0, value=DEFAULT_DAILY_FEE)
    shuttle_fee = col_shuttle.number_input("Fee per shuttlecock", min_value=0, value=DEFAULT_SHUTTLECOCK_FEE)
    st.dataframe(
        cost_table(all_players, all_matches, daily_fee, shuttle_fee),
        use_container_width=True,
        hide_index=True,
    )

    st.subheader("Completed Matches")
    court_names = {c.id: c.name for c in session.courts.values()}
    st.dataframe(match_summary_table(all_matches, court_names), use_container_width=True, hide_index=True)

with st.sidebar:
    st.header("Manage Session")
    if st.button("⚠️ Terminate Session"):
        SessionManager.clear(session_name)
        del st.session_state["session"]
        del st.session_state["current_session_name"]
        st.switch_page("1_Setup.py")
