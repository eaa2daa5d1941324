# optimizer.py
"""
Match generator for the next doubles game.

generate_match() picks four players from the available pool and splits them
into two teams. Players are ranked by fairness priority (fewest matches
played, then longest waiting). The search then walks a fixed ladder:

1. the top four players in priority order
2. swapping one of them for a waiting player within the wait tolerance
3. the best-scored group seen so far

The first perfect matchup (no rule violations, skill difference within the
limit) wins. The exhaustive strategy replaces steps 1-2 with a shuffled scan
of every group of four, for small pools.

The generator is a pure function of its inputs: it never changes player or
match state.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations
from math import comb

from app_types import Match, Matchup, MatchSuggestion, PairingConfig, Player, PlayerHistories
from constants import PAIRING_STRATEGIES, PLAYERS_PER_MATCH, STRATEGY_EXHAUSTIVE, STRATEGY_PRIORITY
from exceptions import InsufficientPlayersError, NoMatchupFoundError, ValidationError
from history import build_histories
from matchup import find_best_matchup, team_skill

logger = logging.getLogger("app.optimizer")

TIER_INITIAL = "initial"
TIER_SWAP = "swap"
TIER_EXHAUSTIVE = "exhaustive"
TIER_FALLBACK = "fallback"


@dataclass
class SearchOutcome:
    """Which rung of the ladder produced a matchup."""

    matchup: Matchup | None
    tier: str
    group: list[Player]
    swapped_out: Player | None = None
    swapped_in: Player | None = None
    groups_checked: int = 1
    groups_total: int = 1


def wait_start(player: Player) -> float:
    """Start of the player's wait; a missing value counts as the earliest."""
    return player.available_since or 0


def priority_order(players: Sequence[Player]) -> list[Player]:
    """Fewest matches played first, then longest waiting. Ties keep input order."""
    return sorted(players, key=lambda p: (p.matches_played, wait_start(p)))


def _keep_best(best: SearchOutcome, candidate: SearchOutcome) -> SearchOutcome:
    if best.matchup is None:
        return candidate
    if candidate.matchup is not None and candidate.matchup.score < best.matchup.score:
        return candidate
    return best


def priority_search(
    ordered: Sequence[Player],
    histories: PlayerHistories,
    config: PairingConfig,
) -> SearchOutcome:
    """Top four by priority, then single-player swaps within the wait tolerance."""
    group = list(ordered[:PLAYERS_PER_MATCH])
    pool = list(ordered[PLAYERS_PER_MATCH:])

    initial = SearchOutcome(find_best_matchup(group, histories, config), TIER_INITIAL, group)
    if initial.matchup is not None and initial.matchup.is_perfect:
        return initial

    best = initial
    checked = 1
    for position, swapped_out in enumerate(group):
        for swapped_in in pool:
            if wait_start(swapped_in) - wait_start(swapped_out) > config.wait_tolerance_seconds:
                continue
            candidate_group = group[:position] + [swapped_in] + group[position + 1 :]
            checked += 1
            outcome = SearchOutcome(
                find_best_matchup(candidate_group, histories, config),
                TIER_SWAP,
                candidate_group,
                swapped_out=swapped_out,
                swapped_in=swapped_in,
            )
            if outcome.matchup is not None and outcome.matchup.is_perfect:
                outcome.groups_checked = checked
                return outcome
            best = _keep_best(best, outcome)

    logger.debug("No perfect swap found after checking %d group(s)", checked)
    best.tier = TIER_FALLBACK
    best.groups_checked = checked
    return best


def exhaustive_search(
    ordered: Sequence[Player],
    histories: PlayerHistories,
    config: PairingConfig,
) -> SearchOutcome:
    """Every group of four in shuffled order; stops at the first perfect matchup."""
    groups = [list(g) for g in combinations(ordered, PLAYERS_PER_MATCH)]
    random.Random(config.seed).shuffle(groups)

    best = SearchOutcome(None, TIER_FALLBACK, [], groups_total=len(groups))
    for checked, group in enumerate(groups, start=1):
        outcome = SearchOutcome(
            find_best_matchup(group, histories, config),
            TIER_EXHAUSTIVE,
            group,
            groups_checked=checked,
            groups_total=len(groups),
        )
        if outcome.matchup is not None and outcome.matchup.is_perfect:
            return outcome
        best = _keep_best(best, outcome)

    best.tier = TIER_FALLBACK
    best.groups_checked = len(groups)
    return best


def _names(players: Sequence[Player]) -> str:
    return ", ".join(p.name for p in players)


def build_explanation(outcome: SearchOutcome) -> str:
    """Describes which rung of the ladder produced the matchup."""
    matchup = outcome.matchup
    balance = f"(Team A: {team_skill(matchup.team_a)}, Team B: {team_skill(matchup.team_b)})"

    if outcome.tier == TIER_INITIAL:
        return (
            f"Selected the top 4 players by matches played and wait time ({_names(outcome.group)}). "
            f"Found a perfect matchup with a skill difference of {matchup.skill_diff} {balance}."
        )
    if outcome.tier == TIER_SWAP:
        return (
            f"The top 4 players had no perfect matchup, so {outcome.swapped_out.name} was swapped "
            f"for {outcome.swapped_in.name}. Found a perfect matchup with a skill difference of "
            f"{matchup.skill_diff} {balance}."
        )
    if outcome.tier == TIER_EXHAUSTIVE:
        return (
            f"Checked {outcome.groups_checked} of {outcome.groups_total} possible groups and found "
            f"a perfect matchup ({_names(outcome.group)}) with a skill difference of "
            f"{matchup.skill_diff} {balance}."
        )
    if matchup.issues:
        return (
            f"No perfect matchup found among {outcome.groups_checked} group(s). Selected the matchup "
            f"with the fewest rule violations ({len(matchup.issues)}) and a skill difference of "
            f"{matchup.skill_diff} {balance}."
        )
    return (
        f"No perfect matchup found among {outcome.groups_checked} group(s). All pairing rules are "
        f"satisfied, but the closest skill difference is {matchup.skill_diff} {balance}."
    )


def _choose_strategy(num_players: int, config: PairingConfig) -> str:
    if config.strategy not in PAIRING_STRATEGIES:
        raise ValidationError(
            f"Unknown pairing strategy '{config.strategy}'. Choose one of: {', '.join(PAIRING_STRATEGIES)}."
        )
    if config.strategy == STRATEGY_EXHAUSTIVE and num_players > config.exhaustive_max_players:
        logger.warning(
            "Exhaustive search over %d players would check %d groups; using priority search instead",
            num_players,
            comb(num_players, PLAYERS_PER_MATCH),
        )
        return STRATEGY_PRIORITY
    return config.strategy


def generate_match(
    available_players: Sequence[Player],
    previous_matches: Sequence[Match],
    config: PairingConfig | None = None,
) -> MatchSuggestion:
    """
    Generates a balanced doubles match from the available players.

    Args:
        available_players: Players free to play (at least four)
        previous_matches: Match history; only completed matches with an end time count
        config: Pairing rules and strategy (defaults apply if omitted)

    Returns:
        MatchSuggestion with both teams, an explanation and the remaining issues.

    Raises:
        InsufficientPlayersError: Fewer than four players are available.
        NoMatchupFoundError: No group could be evaluated (invariant violation).
        ValidationError: The configured strategy is unknown.
    """
    config = config or PairingConfig()

    if len(available_players) < PLAYERS_PER_MATCH:
        raise InsufficientPlayersError(len(available_players), PLAYERS_PER_MATCH)

    histories = build_histories(previous_matches, available_players, config.light_game_gap)
    ordered = priority_order(available_players)

    if _choose_strategy(len(ordered), config) == STRATEGY_EXHAUSTIVE:
        outcome = exhaustive_search(ordered, histories, config)
    else:
        outcome = priority_search(ordered, histories, config)

    if outcome.matchup is None:
        error = NoMatchupFoundError(
            f"No matchup could be formed from {len(ordered)} available players."
        )
        logger.error("Match generation invariant violated", exc_info=error)
        raise error

    matchup = outcome.matchup
    explanation = build_explanation(outcome)
    logger.info(
        "Generated match via %s tier: %s vs %s (skill diff %d, %d issue(s))",
        outcome.tier,
        _names(matchup.team_a),
        _names(matchup.team_b),
        matchup.skill_diff,
        len(matchup.issues),
    )

    return MatchSuggestion(
        team_a=matchup.team_a,
        team_b=matchup.team_b,
        explanation=explanation,
        issues=list(matchup.issues),
        skill_diff=matchup.skill_diff,
    )
