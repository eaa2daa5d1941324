import logging
import random
from itertools import combinations

import pytest

import optimizer
from app_types import PairingConfig
from constants import STRATEGY_EXHAUSTIVE
from exceptions import InsufficientPlayersError, NoMatchupFoundError, ValidationError
from history import build_histories
from matchup import evaluate_split, possible_splits, team_skill
from optimizer import generate_match, priority_order
from tests.utils import generate_random_players, make_match, make_player


def _ids(team):
    return {p.id for p in team}


def _swap_scenario(newcomer_wait):
    """Top four (5, 5, 5, 1) cannot balance; a skill 4 newcomer can replace the 1."""
    players = [
        make_player("a", skill_level=5, available_since=0),
        make_player("b", skill_level=5, available_since=10),
        make_player("c", skill_level=5, available_since=20),
        make_player("d", skill_level=1, available_since=30),
        make_player("e", skill_level=4, available_since=newcomer_wait),
    ]
    return players


def test_insufficient_players():
    players = [make_player(x) for x in "abc"]

    with pytest.raises(InsufficientPlayersError) as excinfo:
        generate_match(players, [])

    assert excinfo.value.available == 3


def test_four_players_no_history():
    players = [make_player(f"s{skill}", skill_level=skill) for skill in (5, 4, 3, 2)]

    result = generate_match(players, [])

    assert {frozenset(_ids(result.team_a)), frozenset(_ids(result.team_b))} == {
        frozenset({"s5", "s2"}),
        frozenset({"s4", "s3"}),
    }
    assert result.issues == []
    assert result.skill_diff == 0
    assert result.success is True
    assert "perfect matchup" in result.explanation


def test_priority_order_prefers_fewer_matches_then_longer_wait():
    players = [
        make_player("late", matches_played=0, available_since=500),
        make_player("busy", matches_played=2, available_since=0),
        make_player("early", matches_played=0, available_since=100),
        make_player("never", matches_played=0, available_since=None),
        make_player("once", matches_played=1, available_since=0),
    ]

    assert [p.id for p in priority_order(players)] == ["never", "early", "late", "once", "busy"]


def test_initial_group_is_top_priority_players():
    players = [make_player(f"p{i}", matches_played=1 if i < 3 else 0, available_since=i) for i in range(8)]

    result = generate_match(players, [])

    assert _ids(result.team_a) | _ids(result.team_b) == {"p3", "p4", "p5", "p6"}
    assert "top 4" in result.explanation


def test_swap_finds_perfect_matchup_within_tolerance():
    players = _swap_scenario(newcomer_wait=40)

    result = generate_match(players, [])

    assert _ids(result.team_a) | _ids(result.team_b) == {"a", "b", "c", "e"}
    assert result.issues == []
    assert result.skill_diff == 1
    assert "D was swapped for E" in result.explanation


def test_swap_respects_wait_tolerance():
    players = _swap_scenario(newcomer_wait=30 + 10 * 60 + 1)

    result = generate_match(players, [])

    assert _ids(result.team_a) | _ids(result.team_b) == {"a", "b", "c", "d"}
    assert result.issues == []
    assert result.skill_diff == 4
    assert "All pairing rules are satisfied" in result.explanation


def test_fallback_reports_rule_violations():
    a, b, c, d = (make_player(x, skill_level=3, avoid={"abcd".replace(x, "")[0]}) for x in "abcd")

    result = generate_match([a, b, c, d], [])

    assert result.issues
    assert result.success is False
    assert any("wants to avoid" in issue for issue in result.issues)
    assert "fewest rule violations" in result.explanation


def test_avoid_list_always_reported_for_a_forced_group():
    a = make_player("a", avoid={"b"})
    b, c, d = (make_player(x) for x in "bcd")

    result = generate_match([a, b, c, d], [])

    assert result.issues == ["A wants to avoid B."]


def test_history_splits_repeated_partners():
    a = make_player("a", skill_level=5)
    b = make_player("b", skill_level=1)
    c = make_player("c", skill_level=3)
    d = make_player("d", skill_level=3)
    history = [
        make_match([a, b], [c, d], end_time=100),
        make_match([a, b], [c, d], end_time=200),
        make_match([a, c], [b, d], end_time=300),
        make_match([c, b], [a, d], end_time=400),
    ]

    result = generate_match([a, b, c, d], history)

    for team in (result.team_a, result.team_b):
        assert _ids(team) != {"a", "b"}


def test_exhaustive_finds_match_outside_swap_tolerance():
    players = _swap_scenario(newcomer_wait=10_000)

    result = generate_match(players, [], PairingConfig(strategy=STRATEGY_EXHAUSTIVE, seed=7))

    assert result.issues == []
    assert result.skill_diff <= 1
    assert result.explanation.startswith("Checked")


def test_exhaustive_is_deterministic_with_seed():
    players = generate_random_players(10, seed=3)
    config = PairingConfig(strategy=STRATEGY_EXHAUSTIVE, seed=42)

    first = generate_match(players, [], config)
    second = generate_match(players, [], config)

    assert _ids(first.team_a) == _ids(second.team_a)
    assert _ids(first.team_b) == _ids(second.team_b)
    assert first.explanation == second.explanation


def test_exhaustive_gated_for_large_pools(caplog):
    players = generate_random_players(13, seed=5)

    with caplog.at_level(logging.WARNING, logger="app.optimizer"):
        result = generate_match(players, [], PairingConfig(strategy=STRATEGY_EXHAUSTIVE, seed=1))

    assert "using priority search instead" in caplog.text
    assert not result.explanation.startswith("Checked")


def test_unknown_strategy_rejected():
    players = [make_player(x) for x in "abcd"]

    with pytest.raises(ValidationError):
        generate_match(players, [], PairingConfig(strategy="ai"))


def test_no_matchup_is_an_invariant_error(monkeypatch):
    players = [make_player(x) for x in "abcd"]
    monkeypatch.setattr(optimizer, "find_best_matchup", lambda *args, **kwargs: None)

    with pytest.raises(NoMatchupFoundError):
        generate_match(players, [])


def test_generation_does_not_mutate_inputs():
    players = generate_random_players(6, seed=11)
    before = [(p.id, p.status, p.matches_played, p.available_since) for p in players]

    generate_match(players, [])

    assert [(p.id, p.status, p.matches_played, p.available_since) for p in players] == before


@pytest.mark.parametrize("seed", range(20))
def test_random_pools_keep_invariants(seed):
    rng = random.Random(seed)
    players = generate_random_players(rng.randint(4, 10), seed=seed)
    history = []
    for t in range(rng.randint(0, 8)):
        four = rng.sample(players, 4)
        history.append(make_match(four[:2], four[2:], end_time=100.0 * (t + 1)))

    result = generate_match(players, history)

    ids_a, ids_b = _ids(result.team_a), _ids(result.team_b)
    assert len(result.team_a) == len(result.team_b) == 2
    assert ids_a.isdisjoint(ids_b)
    assert ids_a | ids_b <= {p.id for p in players}
    assert result.skill_diff == abs(team_skill(result.team_a) - team_skill(result.team_b))

    histories = build_histories(history, players)
    chosen = result.team_a + result.team_b
    for team_a, team_b in possible_splits(chosen):
        assert len(result.issues) <= len(evaluate_split(team_a, team_b, histories).issues)


@pytest.mark.parametrize("seed", range(10))
def test_exhaustive_always_finds_an_existing_perfect_matchup(seed):
    players = generate_random_players(8, seed=100 + seed)

    perfect_exists = any(
        evaluate_split(team_a, team_b, {}).is_perfect
        for group in combinations(players, 4)
        for team_a, team_b in possible_splits(group)
    )
    result = generate_match(players, [], PairingConfig(strategy=STRATEGY_EXHAUSTIVE, seed=seed))

    assert (result.issues == [] and result.skill_diff <= 1) == perfect_exists
