import os

from streamlit.testing.v1 import AppTest

from session_logic import CourtSession, SessionManager


def test_setup_page_smoke(sessions_dir):
    """Basic smoke test to ensure the setup page loads without crashing."""
    at = AppTest.from_file(os.path.abspath("1_Setup.py"))
    at.run(timeout=30)

    assert not at.exception
    assert "Badminton" in at.title[0].value


def test_session_page_smoke(sample_players, sessions_dir):
    """Basic smoke test for the Session page."""
    at = AppTest.from_file(os.path.abspath("pages/2_Session.py"))

    at.session_state.session = CourtSession(players=sample_players, num_courts=2)
    at.session_state.current_session_name = "Test Session"

    at.run(timeout=30)

    assert not at.exception
    assert "Test Session" in at.title[0].value


def test_setup_page_lists_saved_sessions(sample_players, sessions_dir):
    SessionManager.save(CourtSession(players=sample_players, num_courts=2), "Tuesday Drop 19:00")

    at = AppTest.from_file(os.path.abspath("1_Setup.py"))
    at.run(timeout=30)

    assert not at.exception
    assert list(at.dataframe[0].value["Session"]) == ["Tuesday Drop 19:00"]
