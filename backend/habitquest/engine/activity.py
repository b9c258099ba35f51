"""
Per-quest activity tracking at calendar-day granularity. Pure functions, no I/O.
"""
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone

logger = logging.getLogger(__name__)

RESET_AFTER_DAYS = 2
PRUNE_AFTER_DAYS = 30


@dataclass(frozen=True)
class ActivityRecord:
    quest_id: str
    last_completed_date: date
    consecutive_days: int
    total_completions: int


@dataclass(frozen=True)
class TimeRemaining:
    hours: int
    minutes: int
    seconds: int


def as_date(value) -> date | None:
    """Coerce a date, datetime or ISO date string to a date. None if malformed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def days_since(last_completed_date, today: date) -> int | None:
    last = as_date(last_completed_date)
    if last is None:
        return None
    return abs((today - last).days)


def record_completion(
    record: ActivityRecord | None,
    quest_id: str,
    today: date,
    endless: bool = False,
) -> ActivityRecord:
    """
    Returns the activity record after one more completion of quest_id today.

    Endless mode lets a quest be repeated within a day; each repeat counts as
    another consecutive day.
    """
    if record is None:
        return ActivityRecord(quest_id, today, 1, 1)

    last = as_date(record.last_completed_date)
    gap = (today - last).days if last is not None else None
    total = record.total_completions + 1

    if gap == 0:
        if endless:
            return replace(record, consecutive_days=record.consecutive_days + 1, total_completions=total)
        return replace(record, total_completions=total)

    if gap == 1:
        return replace(
            record,
            last_completed_date=today,
            consecutive_days=record.consecutive_days + 1,
            total_completions=total,
        )

    if gap is not None and gap >= RESET_AFTER_DAYS:
        logger.debug("Streak for %s broken after %d days", quest_id, gap)
        return replace(record, last_completed_date=today, consecutive_days=1, total_completions=total)

    logger.debug("Unusable last date %r for %s, starting fresh", record.last_completed_date, quest_id)
    return replace(record, last_completed_date=today, consecutive_days=1, total_completions=total)


def should_reset_multiplier(last_completed_date, today: date) -> bool:
    """True once a quest has gone untouched for 2+ calendar days."""
    gap = days_since(last_completed_date, today)
    return gap is not None and gap >= RESET_AFTER_DAYS


def reset_expired_multipliers(activities: dict[str, ActivityRecord], today: date) -> dict[str, ActivityRecord]:
    return {
        quest_id: (
            replace(record, consecutive_days=0)
            if should_reset_multiplier(record.last_completed_date, today)
            else record
        )
        for quest_id, record in activities.items()
    }


def prune_stale_activities(
    activities: dict[str, ActivityRecord],
    today: date,
    max_age_days: int = PRUNE_AFTER_DAYS,
) -> dict[str, ActivityRecord]:
    kept = {}
    for quest_id, record in activities.items():
        age = days_since(record.last_completed_date, today)
        if age is not None and age <= max_age_days:
            kept[quest_id] = record
    return kept


def sweep_activities(activities: dict[str, ActivityRecord], today: date) -> dict[str, ActivityRecord]:
    """Periodic maintenance: drop month-old records, zero lapsed streaks."""
    swept = reset_expired_multipliers(prune_stale_activities(activities, today), today)
    dropped = len(activities) - len(swept)
    if dropped:
        logger.info("Pruned %d stale activity records", dropped)
    return swept


def time_until_next_day(now: datetime) -> TimeRemaining:
    midnight = datetime.combine(now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo)
    if now.tzinfo is not None:
        # same-zone aware subtraction ignores DST shifts; compare in UTC
        midnight = midnight.astimezone(timezone.utc)
        now = now.astimezone(timezone.utc)
    remaining = max(int((midnight - now).total_seconds()), 0)
    hours, rest = divmod(remaining, 3600)
    minutes, seconds = divmod(rest, 60)
    return TimeRemaining(hours, minutes, seconds)


def format_time_remaining(remaining: TimeRemaining) -> str:
    if remaining.hours > 0:
        return f"{remaining.hours}h {remaining.minutes}m"
    if remaining.minutes > 0:
        return f"{remaining.minutes}m {remaining.seconds}s"
    return f"{remaining.seconds}s"
