"""
Achievement rules evaluated against a session snapshot.

Each rule reads plain attributes of the session (streak, total_xp,
quests_completed_total), so this module does not import session.py.
Unlocks are sticky: once an id is in the session's unlocked list it stays.
"""
from dataclasses import dataclass
from typing import Callable, Iterable

from .levels import level_for_xp

RARITIES = ("common", "rare", "epic", "legendary")


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    rarity: str
    check: Callable[[object], bool]


ACHIEVEMENTS: list[Achievement] = [
    Achievement("first-quest",    "First Steps",    "Complete your first quest", "common",
                lambda s: s.quests_completed_total >= 1),
    Achievement("streak-warrior", "Streak Warrior", "Maintain a 7-day streak",   "rare",
                lambda s: s.streak >= 7),
    Achievement("level-master",   "Level Master",   "Reach level 5",             "epic",
                lambda s: level_for_xp(s.total_xp) >= 5),
    Achievement("xp-hunter",      "XP Hunter",      "Earn 10,000 total XP",      "legendary",
                lambda s: s.total_xp >= 10000),
]

ACHIEVEMENT_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def earned_achievements(state) -> list[str]:
    """Ids of every achievement whose rule the state currently meets, in catalog order."""
    return [a.id for a in ACHIEVEMENTS if a.check(state)]


def newly_unlocked(state, unlocked: Iterable[str]) -> list[str]:
    """Achievements met by state that are not already unlocked."""
    have = set(unlocked)
    return [a_id for a_id in earned_achievements(state) if a_id not in have]
