"""
XP reward rules: multiplier bands and the final award for a quest completion.
Pure functions, no I/O.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

from .normalize import finite_or_zero, local_naive

KNOWN_CATEGORIES = ("daily", "weekly", "spiritual", "work")

# (exclusive upper bound, multiplier); values at or past the last bound use the fallback.
STREAK_BANDS = [(3, 1.0), (7, 1.10), (14, 1.25), (30, 1.50), (60, 1.75)]
STREAK_MAX = 2.00

COMPLETION_BANDS = [(3, 1.0), (5, 1.10), (7, 1.20), (10, 1.30)]
COMPLETION_MAX = 1.50

VARIETY_BY_COUNT = {0: 1.0, 1: 1.0, 2: 1.10, 3: 1.25}
VARIETY_MAX = 1.50

DIFFICULTY_MULTIPLIERS = {
    "easy":      1.0,
    "medium":    1.2,
    "hard":      1.5,
    "legendary": 2.0,
}

CONSISTENCY_PER_DAY = 0.05
CONSISTENCY_CAP = 2.0
FIRST_QUEST_MULTIPLIER = 1.25


@dataclass(frozen=True)
class Bonus:
    name: str
    percent: int

    def label(self) -> str:
        return f"{self.name} +{self.percent}%"


@dataclass(frozen=True)
class RewardResult:
    final_xp: int
    streak_multiplier: float
    variety_multiplier: float
    difficulty_multiplier: float
    completion_multiplier: float
    consistency_multiplier: float
    first_quest_multiplier: float
    bonuses: list[Bonus] = field(default_factory=list)

    @property
    def total_multiplier(self) -> float:
        return (
            self.streak_multiplier * self.variety_multiplier * self.difficulty_multiplier
            * self.completion_multiplier * self.consistency_multiplier * self.first_quest_multiplier
        )


@dataclass(frozen=True)
class QuestCompletion:
    quest_id: str
    category: str
    difficulty: str
    base_xp: int
    completed_at: datetime


def round_half_away(value: float) -> int:
    """Round to the nearest integer, .5 ties away from zero (-2.5 -> -3)."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # adding 0.5 first would round 0.49999999999999994 up to 1
    if magnitude - whole >= 0.5:
        whole += 1
    return -whole if value < 0 else whole


def _band(value: float, bands: list[tuple[int, float]], top: float) -> float:
    value = finite_or_zero(value)
    for bound, multiplier in bands:
        if value < bound:
            return multiplier
    return top


def streak_multiplier(streak: int) -> float:
    return _band(streak, STREAK_BANDS, STREAK_MAX)


def variety_multiplier(categories: Iterable[str]) -> float:
    """Bonus for distinct categories completed today: 2 -> +10%, 3 -> +25%, 4+ -> +50%."""
    count = len(set(categories or ()))
    return VARIETY_BY_COUNT.get(count, VARIETY_MAX)


def difficulty_multiplier(difficulty: str) -> float:
    if not isinstance(difficulty, str):
        return 1.0
    return DIFFICULTY_MULTIPLIERS.get(difficulty.lower(), 1.0)


def completion_multiplier(quests_completed_today: int) -> float:
    return _band(quests_completed_today, COMPLETION_BANDS, COMPLETION_MAX)


def consistency_multiplier(consecutive_days: int) -> float:
    """5% per consecutive day on this quest, capped at +200% (40 days)."""
    bonus = min(max(finite_or_zero(consecutive_days), 0) * CONSISTENCY_PER_DAY, CONSISTENCY_CAP)
    return 1.0 + bonus


def _as_percent(multiplier: float) -> int:
    return round_half_away((multiplier - 1) * 100)


def compute_reward(
    base_xp: float,
    streak: int,
    categories_today: Iterable[str],
    difficulty: str,
    quests_completed_today: int,
    is_first_quest_of_day: bool = False,
    consecutive_days: int = 0,
) -> RewardResult:
    """
    Apply every multiplier to base_xp and round the product.

    quests_completed_today counts this completion. Penalties (negative base XP)
    pass through the same multipliers, so bonuses make them larger.
    """
    base_xp = finite_or_zero(base_xp)

    streak_mult = streak_multiplier(streak)
    variety_mult = variety_multiplier(categories_today)
    difficulty_mult = difficulty_multiplier(difficulty)
    completion_mult = completion_multiplier(quests_completed_today)
    consistency_mult = consistency_multiplier(consecutive_days)
    first_mult = FIRST_QUEST_MULTIPLIER if is_first_quest_of_day else 1.0

    final = base_xp * streak_mult * variety_mult * difficulty_mult * completion_mult * consistency_mult
    final *= first_mult
    # huge base XP can overflow the product to inf
    final = finite_or_zero(final)

    bonuses = [
        Bonus(name, _as_percent(mult))
        for name, mult in (
            ("Streak", streak_mult),
            ("Variety", variety_mult),
            ("Difficulty", difficulty_mult),
            ("Completion", completion_mult),
            ("Consistency", consistency_mult),
            ("First Quest", first_mult),
        )
        if mult > 1
    ]

    return RewardResult(
        final_xp=round_half_away(final),
        streak_multiplier=streak_mult,
        variety_multiplier=variety_mult,
        difficulty_multiplier=difficulty_mult,
        completion_multiplier=completion_mult,
        consistency_multiplier=consistency_mult,
        first_quest_multiplier=first_mult,
        bonuses=bonuses,
    )


def variety_score(
    completions: Iterable[QuestCompletion],
    now: datetime,
    window_days: int = 7,
) -> float:
    """Share (0-100) of the known categories touched within the trailing window."""
    cutoff = local_naive(now) - timedelta(days=window_days)
    seen = {
        c.category for c in completions
        if local_naive(c.completed_at) >= cutoff and c.category in KNOWN_CATEGORIES
    }
    return 100.0 * len(seen) / len(KNOWN_CATEGORIES)
