"""Point awards, completion rate and end-of-run statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .state import GameState, Outcome
from .timekeeping import format_clock
from .world import REQUIRED_KEYS, LocationGraph

KEY_POINTS = 1000
RIDDLE_POINTS = 500
VAULT_BONUS = 10000
WRONG_ANSWER_PENALTY = 10

# (title, blurb), best first.
RANK_TIERS: Sequence[Tuple[str, str]] = (
    ("Master of Time", "Perfect completion!"),
    ("Time Collector", "All keys found!"),
    ("Time Seeker", "Good progress!"),
    ("Time Novice", "Keep exploring!"),
    ("Time Student", "Practice makes perfect!"),
)


@dataclass(frozen=True)
class ScoreBreakdown:
    keys: int
    riddles: int
    vault_bonus: int

    @property
    def key_points(self) -> int:
        return self.keys * KEY_POINTS

    @property
    def riddle_points(self) -> int:
        return self.riddles * RIDDLE_POINTS

    @property
    def total(self) -> int:
        return self.key_points + self.riddle_points + self.vault_bonus


@dataclass(frozen=True)
class FinalStats:
    outcome: Optional[Outcome]
    score: int
    game_time: float
    real_time: float
    health: int
    keys: Tuple[str, ...]
    visited: Tuple[str, ...]
    completion_rate: float
    breakdown: ScoreBreakdown
    rank: str
    rank_blurb: str


def completion_rate(keys: Sequence[str]) -> float:
    return len(keys) / len(REQUIRED_KEYS) * 100


def rank_for(score: int, key_count: int) -> Tuple[str, str]:
    if score >= VAULT_BONUS:
        return RANK_TIERS[0]
    if key_count >= len(REQUIRED_KEYS):
        return RANK_TIERS[1]
    if key_count >= 2:
        return RANK_TIERS[2]
    if key_count >= 1:
        return RANK_TIERS[3]
    return RANK_TIERS[4]


def score_breakdown(key_count: int, riddles_answered: int, won: bool) -> ScoreBreakdown:
    return ScoreBreakdown(
        keys=key_count,
        riddles=riddles_answered,
        vault_bonus=VAULT_BONUS if won else 0,
    )


def compute_final_stats(state: GameState, graph: LocationGraph) -> FinalStats:
    won = state.outcome is Outcome.WON
    breakdown = score_breakdown(len(state.keys), len(graph.answered_riddles()), won)
    rank, blurb = rank_for(state.score, len(state.keys))
    return FinalStats(
        outcome=state.outcome,
        score=state.score,
        game_time=state.game_time,
        real_time=state.real_time,
        health=state.health,
        keys=tuple(state.keys),
        visited=tuple(state.visited_locations),
        completion_rate=completion_rate(state.keys),
        breakdown=breakdown,
        rank=rank,
        rank_blurb=blurb,
    )


def format_report(stats: FinalStats) -> List[str]:
    b = stats.breakdown
    lines = [
        "======== GAME OVER ========",
        f"FINAL SCORE: {stats.score:,} POINTS",
        "",
        "=== DETAILED STATISTICS ===",
        f"Total Game Time: {format_clock(stats.game_time)}",
        f"Real Time Spent: {format_clock(stats.real_time)}",
        f"Final Health: {stats.health}/100",
        f"Keys Collected: {', '.join(stats.keys) or 'None'} ({len(stats.keys)}/{len(REQUIRED_KEYS)})",
        f"Locations Visited: {', '.join(stats.visited)}",
        f"Completion Rate: {stats.completion_rate:.1f}%",
        "",
        "=== SCORE BREAKDOWN ===",
        f"Keys Collected: {b.keys} x {KEY_POINTS:,} = {b.key_points:,} pts",
        f"Questions Answered: {b.riddles} x {RIDDLE_POINTS:,} = {b.riddle_points:,} pts",
    ]
    if b.vault_bonus:
        lines.append(f"Treasure Vault Bonus: {b.vault_bonus:,} pts")
    lines.append(f"TOTAL SCORE: {b.total:,} POINTS")
    lines.append("")
    lines.append(f"RANK: {stats.rank.upper()}! {stats.rank_blurb}")
    return lines
