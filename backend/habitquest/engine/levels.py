"""
Leveling curve: cumulative XP thresholds per level and the inverse lookup.
Pure functions, no I/O.
"""
import math
from dataclasses import dataclass
from fractions import Fraction

from .normalize import finite_or_zero

# (first_level, last_level, base_cost, growth). The last band is open-ended.
BANDS: list[tuple[int, int | None, int, float]] = [
    (2,   10,   500,   1.2),
    (11,  30,   1500,  1.25),
    (31,  60,   5000,  1.3),
    (61,  100,  15000, 1.35),
    (101, None, 50000, 1.4),
]

# Step costs up to this level are floored floats; past it 1.4 ** n would
# overflow a float, so the exact ratio is used with integer floor division.
FLOAT_STEP_LIMIT = 2000

EXAMPLE_LEVELS = [1, 2, 3, 4, 5, 10, 15, 20, 30, 40, 50, 60, 70, 80, 90, 100, 150, 200, 500, 1000]

LEVEL_TITLES = [
    (100, "Grandmaster"),
    (75,  "Master"),
    (50,  "Legend"),
    (30,  "Hero"),
    (20,  "Champion"),
    (10,  "Explorer"),
    (5,   "Adventurer"),
    (1,   "Seeker"),
]

# Index is the level; entries 0 and 1 are both 0 XP. Append-only.
_THRESHOLDS: list[int] = [0, 0]


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_at_level_start: int
    xp_at_next_level: int
    progress_percent: float
    xp_to_next: float


def step_cost(level: int) -> int:
    """XP needed to go from level - 1 to level. Zero for level <= 1."""
    if level <= 1:
        return 0
    level = int(level)
    for first, last, base, growth in BANDS:
        if last is None or level <= last:
            n = level - first
            if level <= FLOAT_STEP_LIMIT:
                return int(math.floor(base * math.pow(growth, n)))
            ratio = Fraction(str(growth))
            return base * ratio.numerator ** n // ratio.denominator ** n
    return 0


def xp_for_level(level: int) -> int:
    """Minimum cumulative XP needed to reach this level."""
    if level <= 1:
        return 0
    level = int(level)
    while len(_THRESHOLDS) <= level:
        nxt = len(_THRESHOLDS)
        _THRESHOLDS.append(_THRESHOLDS[-1] + step_cost(nxt))
    return _THRESHOLDS[level]


def xp_between_levels(from_level: int, to_level: int) -> int:
    return xp_for_level(to_level) - xp_for_level(from_level)


def level_for_xp(total_xp: float) -> int:
    """
    Largest level whose threshold is <= total_xp.

    Doubles an upper bound until its threshold exceeds total_xp, then binary
    searches the last doubling interval.
    """
    total_xp = finite_or_zero(total_xp)
    if total_xp <= 0:
        return 1

    high = 2
    while xp_for_level(high) <= total_xp:
        high *= 2

    # invariant: xp_for_level(low) <= total_xp < xp_for_level(high)
    low = 1
    while high - low > 1:
        mid = (low + high) // 2
        if xp_for_level(mid) <= total_xp:
            low = mid
        else:
            high = mid
    return low


def level_progress(total_xp: float) -> LevelProgress:
    total_xp = finite_or_zero(total_xp)
    if isinstance(total_xp, float) and total_xp.is_integer():
        # keeps huge totals in exact int arithmetic against int thresholds
        total_xp = int(total_xp)
    level = level_for_xp(total_xp)
    start = xp_for_level(level)
    nxt = xp_for_level(level + 1)
    span = nxt - start
    percent = (total_xp - start) * 100 / span if span > 0 else 100.0
    # XP <= 0 sits on level 1 with a negative offset; clamp keeps it at 0%.
    return LevelProgress(
        level=level,
        xp_at_level_start=start,
        xp_at_next_level=nxt,
        progress_percent=max(0.0, min(100.0, percent)),
        xp_to_next=nxt - total_xp,
    )


def level_title(level: int) -> str:
    for threshold, title in LEVEL_TITLES:
        if level >= threshold:
            return title
    return "Seeker"


def example_levels() -> list[dict]:
    """Reference rows for a level requirements table."""
    return [
        {
            "level": lvl,
            "total_xp": xp_for_level(lvl),
            "xp_this_level": 0 if lvl == 1 else xp_between_levels(lvl - 1, lvl),
        }
        for lvl in EXAMPLE_LEVELS
    ]
