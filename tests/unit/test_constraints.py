from app_types import PlayerHistory
from constraints import check_constraints, is_light_game
from tests.utils import make_player


def test_no_history_no_issues():
    a, b, c, d = (make_player(x) for x in "abcd")

    assert check_constraints([a, b], [c, d], {}) == []


def test_repeat_teammate_cap_reported_once_per_pair():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {
        "a": PlayerHistory(teammates={"b": 2}),
        "b": PlayerHistory(teammates={"a": 2}),
    }

    issues = check_constraints([a, b], [c, d], histories)

    assert issues == ["A and B have played together too many times (2)."]


def test_repeat_teammate_below_cap_is_fine():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {"a": PlayerHistory(teammates={"b": 1}), "b": PlayerHistory(teammates={"a": 1})}

    assert check_constraints([a, b], [c, d], histories) == []


def test_repeat_opponent_cap():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {"a": PlayerHistory(opponents={"c": 3}), "c": PlayerHistory(opponents={"a": 3})}

    issues = check_constraints([a, b], [c, d], histories)

    assert issues == ["A and C have played against each other too many times (3)."]


def test_teammate_count_does_not_apply_across_the_net():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {"a": PlayerHistory(teammates={"c": 5})}

    assert check_constraints([a, b], [c, d], histories) == []


def test_last_match_teammates_and_opponents():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {
        "a": PlayerHistory(last_teammates={"b"}, last_opponents={"c"}),
    }

    issues = check_constraints([a, b], [c, d], histories)

    assert issues == [
        "A and B were teammates in A's last match.",
        "A and C were opponents in A's last match.",
    ]


def test_last_match_pair_not_duplicated_when_both_sides_flag_it():
    a, b, c, d = (make_player(x) for x in "abcd")
    histories = {
        "a": PlayerHistory(last_teammates={"b"}),
        "b": PlayerHistory(last_teammates={"a"}),
    }

    assert len(check_constraints([a, b], [c, d], histories)) == 1


def test_light_game_cap_flags_third_light_game():
    strong = make_player("strong", skill_level=5)
    partner = make_player("partner", skill_level=3)
    weak1 = make_player("weak1", skill_level=2)
    weak2 = make_player("weak2", skill_level=2)

    issues = check_constraints(
        [strong, partner], [weak1, weak2], {"strong": PlayerHistory(light_games=2)}
    )

    assert issues == ["Strong would play a light game for the 3rd time."]


def test_light_game_cap_ignores_balanced_game():
    a = make_player("a", skill_level=3)
    b, c, d = (make_player(x, skill_level=3) for x in "bcd")

    assert check_constraints([a, b], [c, d], {"a": PlayerHistory(light_games=5)}) == []


def test_avoid_list_checked_per_player():
    a = make_player("a", avoid={"d"})
    b = make_player("b")
    c = make_player("c")
    d = make_player("d", avoid={"a"})

    issues = check_constraints([a, b], [c, d], {})

    assert issues == ["A wants to avoid D.", "D wants to avoid A."]


def test_avoid_list_applies_to_teammates_too():
    a = make_player("a", avoid={"b"})
    b, c, d = (make_player(x) for x in "bcd")

    assert check_constraints([a, b], [c, d], {}) == ["A wants to avoid B."]


def test_issue_order_follows_players_then_rules():
    a = make_player("a", avoid={"c"})
    b, c, d = (make_player(x) for x in "bcd")
    histories = {
        "a": PlayerHistory(teammates={"b": 2}),
        "b": PlayerHistory(teammates={"a": 2}, opponents={"d": 2}),
        "d": PlayerHistory(opponents={"b": 2}),
    }

    issues = check_constraints([a, b], [c, d], histories)

    assert issues == [
        "A and B have played together too many times (2).",
        "A wants to avoid C.",
        "B and D have played against each other too many times (2).",
    ]


def test_is_light_game_threshold():
    player = make_player("p", skill_level=4)
    opponents = [make_player("x", skill_level=2), make_player("y", skill_level=2)]

    assert is_light_game(player, opponents) is True
    assert is_light_game(player, opponents, gap=3) is False
    assert is_light_game(player, []) is False
