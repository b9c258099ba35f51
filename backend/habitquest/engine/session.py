"""
Quest completion pipeline: sequences the activity tracker, the reward rules and
the level curve over an explicit session state. Never mutates its inputs.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta

from .achievements import newly_unlocked
from .activity import ActivityRecord, record_completion, sweep_activities
from .levels import level_for_xp
from .normalize import local_naive
from .quests import Quest, base_xp
from .rewards import QuestCompletion, RewardResult, compute_reward, variety_score

logger = logging.getLogger(__name__)

VARIETY_WINDOW_DAYS = 7

NO_REWARD = RewardResult(0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0)


@dataclass(frozen=True)
class SessionState:
    day: date | None = None
    streak: int = 0
    last_active_day: date | None = None
    categories_today: tuple[str, ...] = ()
    quests_completed_today: int = 0
    total_xp: int = 0
    activities: dict[str, ActivityRecord] = field(default_factory=dict)
    completions: tuple[QuestCompletion, ...] = ()
    completed_today: tuple[str, ...] = ()
    quests_completed_total: int = 0
    achievements: tuple[str, ...] = ()

    @property
    def is_first_quest_of_day(self) -> bool:
        return self.quests_completed_today == 0


@dataclass(frozen=True)
class CompletionOutcome:
    state: SessionState
    base_xp: int
    reward: RewardResult
    activity: ActivityRecord | None
    old_level: int
    new_level: int
    variety_score: float
    achievements_unlocked: tuple[str, ...] = ()
    already_completed: bool = False

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def advance_streak(last_active_day: date | None, current_streak: int, today: date) -> int:
    """
    New engagement streak after activity today.
    Same day keeps it, yesterday extends it, anything else restarts at 1.
    """
    if last_active_day == today:
        return max(current_streak, 1)
    if last_active_day == today - timedelta(days=1):
        return current_streak + 1
    return 1


def start_day(state: SessionState, today: date) -> SessionState:
    """Clear the per-day counters when the calendar day has changed."""
    if state.day == today:
        return state
    return replace(state, day=today, categories_today=(), quests_completed_today=0, completed_today=())


def complete_quest(
    state: SessionState,
    quest: Quest,
    now: datetime,
    quantity: int | None = None,
    endless: bool = False,
) -> CompletionOutcome:
    """
    Award a quest completion and return the updated state.

    Outside endless mode a quest pays out once per calendar day; a repeat
    returns the day-rolled state unchanged with already_completed set.
    Aware timestamps are compared as naive local time.
    """
    now = local_naive(now)
    today = now.date()
    state = start_day(state, today)

    if not endless and quest.id in state.completed_today:
        level = level_for_xp(state.total_xp)
        return CompletionOutcome(
            state=state,
            base_xp=0,
            reward=NO_REWARD,
            activity=state.activities.get(quest.id),
            old_level=level,
            new_level=level,
            variety_score=variety_score(state.completions, now, VARIETY_WINDOW_DAYS),
            already_completed=True,
        )

    amount = base_xp(quest, quantity)
    is_first = state.is_first_quest_of_day
    streak = advance_streak(state.last_active_day, state.streak, today) if is_first else state.streak

    categories = state.categories_today
    if quest.category and quest.category not in categories:
        categories = categories + (quest.category,)

    activity = record_completion(state.activities.get(quest.id), quest.id, today, endless)

    reward = compute_reward(
        amount,
        streak,
        categories,
        quest.difficulty,
        state.quests_completed_today + 1,
        is_first,
        activity.consecutive_days,
    )

    old_level = level_for_xp(state.total_xp)
    total_xp = state.total_xp + reward.final_xp
    new_level = level_for_xp(total_xp)

    completion = QuestCompletion(quest.id, quest.category or "daily", quest.difficulty, amount, now)
    cutoff = now - timedelta(days=VARIETY_WINDOW_DAYS)
    history = tuple(c for c in (*state.completions, completion) if local_naive(c.completed_at) >= cutoff)

    new_state = replace(
        state,
        streak=streak,
        last_active_day=today,
        categories_today=categories,
        quests_completed_today=state.quests_completed_today + 1,
        total_xp=total_xp,
        activities={**state.activities, quest.id: activity},
        completions=history,
        completed_today=tuple(dict.fromkeys((*state.completed_today, quest.id))),
        quests_completed_total=state.quests_completed_total + 1,
    )
    unlocked = tuple(newly_unlocked(new_state, state.achievements))
    if unlocked:
        new_state = replace(new_state, achievements=state.achievements + unlocked)
        logger.info("Achievements unlocked: %s", ", ".join(unlocked))

    if new_level > old_level:
        logger.info("Level up: %d -> %d (%d XP)", old_level, new_level, total_xp)
    elif new_level < old_level:
        logger.info("Level lost: %d -> %d (%d XP)", old_level, new_level, total_xp)

    return CompletionOutcome(
        state=new_state,
        base_xp=amount,
        reward=reward,
        activity=activity,
        old_level=old_level,
        new_level=new_level,
        variety_score=variety_score(history, now, VARIETY_WINDOW_DAYS),
        achievements_unlocked=unlocked,
    )


def run_maintenance(state: SessionState, today: date) -> SessionState:
    return replace(state, activities=sweep_activities(state.activities, today))
