from datetime import date, datetime, timedelta, timezone

import pytest

from habitquest.engine.activity import (
    ActivityRecord, TimeRemaining, days_since, format_time_remaining,
    prune_stale_activities, record_completion, reset_expired_multipliers,
    should_reset_multiplier, sweep_activities, time_until_next_day,
)

TODAY = date(2026, 2, 27)
YESTERDAY = TODAY - timedelta(days=1)
TWO_DAYS_AGO = TODAY - timedelta(days=2)


def make_record(last=YESTERDAY, consecutive=3, total=5, quest_id="meditate"):
    return ActivityRecord(quest_id, last, consecutive, total)


class TestRecordCompletion:
    def test_first_completion_creates_record(self):
        record = record_completion(None, "meditate", TODAY)
        assert record == ActivityRecord("meditate", TODAY, 1, 1)

    def test_meditate_scenario(self):
        day1 = record_completion(None, "meditate", TODAY)
        day2 = record_completion(day1, "meditate", TODAY + timedelta(days=1))
        assert (day2.consecutive_days, day2.total_completions) == (2, 2)
        # skip two days
        day5 = record_completion(day2, "meditate", TODAY + timedelta(days=4))
        assert (day5.consecutive_days, day5.total_completions) == (1, 3)
        assert day5.last_completed_date == TODAY + timedelta(days=4)

    def test_consecutive_day_increments(self):
        record = record_completion(make_record(), "meditate", TODAY)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 4
        assert record.total_completions == 6

    def test_same_day_only_counts_total(self):
        record = record_completion(make_record(last=TODAY), "meditate", TODAY)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 3
        assert record.total_completions == 6

    def test_same_day_endless_mode_advances_streak(self):
        record = record_completion(make_record(last=TODAY), "meditate", TODAY, endless=True)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 4
        assert record.total_completions == 6

    def test_endless_mode_is_normal_across_days(self):
        record = record_completion(make_record(), "meditate", TODAY, endless=True)
        assert record.consecutive_days == 4

    def test_two_day_gap_resets(self):
        record = record_completion(make_record(last=TWO_DAYS_AGO, consecutive=12), "meditate", TODAY)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 1
        assert record.total_completions == 6

    def test_future_date_starts_fresh(self):
        record = record_completion(make_record(last=TODAY + timedelta(days=3)), "meditate", TODAY)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 1
        assert record.total_completions == 6

    def test_malformed_date_starts_fresh(self):
        record = record_completion(make_record(last="not-a-date"), "meditate", TODAY)
        assert record.last_completed_date == TODAY
        assert record.consecutive_days == 1
        assert record.total_completions == 6

    def test_iso_string_date_accepted(self):
        record = record_completion(make_record(last=YESTERDAY.isoformat()), "meditate", TODAY)
        assert record.consecutive_days == 4

    def test_input_record_untouched(self):
        original = make_record()
        record_completion(original, "meditate", TODAY)
        assert original == make_record()


class TestShouldResetMultiplier:
    def test_same_day(self):
        assert should_reset_multiplier(TODAY, TODAY) is False

    def test_one_day_gap_keeps_multiplier(self):
        assert should_reset_multiplier(YESTERDAY, TODAY) is False

    def test_two_day_gap_resets(self):
        assert should_reset_multiplier(TWO_DAYS_AGO, TODAY) is True

    def test_long_gap_resets(self):
        assert should_reset_multiplier(TODAY - timedelta(days=30), TODAY) is True

    def test_malformed_date(self):
        assert should_reset_multiplier("garbage", TODAY) is False

    def test_days_since(self):
        assert days_since(TWO_DAYS_AGO, TODAY) == 2
        assert days_since(datetime(2026, 2, 26, 23, 59), TODAY) == 1
        assert days_since("bad", TODAY) is None


class TestMaintenance:
    def test_reset_expired_multipliers_keeps_history(self):
        activities = {
            "fresh": make_record(last=YESTERDAY, quest_id="fresh"),
            "lapsed": make_record(last=TWO_DAYS_AGO, consecutive=9, total=20, quest_id="lapsed"),
        }
        result = reset_expired_multipliers(activities, TODAY)
        assert result["fresh"].consecutive_days == 3
        assert result["lapsed"].consecutive_days == 0
        assert result["lapsed"].total_completions == 20
        assert result["lapsed"].last_completed_date == TWO_DAYS_AGO
        assert activities["lapsed"].consecutive_days == 9

    def test_prune_boundary(self):
        activities = {
            "kept": make_record(last=TODAY - timedelta(days=30), quest_id="kept"),
            "dropped": make_record(last=TODAY - timedelta(days=31), quest_id="dropped"),
            "broken": make_record(last="??", quest_id="broken"),
        }
        assert list(prune_stale_activities(activities, TODAY)) == ["kept"]

    def test_sweep(self):
        activities = {
            "active": make_record(last=TODAY, quest_id="active"),
            "lapsed": make_record(last=TODAY - timedelta(days=5), quest_id="lapsed"),
            "stale": make_record(last=TODAY - timedelta(days=45), quest_id="stale"),
        }
        result = sweep_activities(activities, TODAY)
        assert set(result) == {"active", "lapsed"}
        assert result["active"].consecutive_days == 3
        assert result["lapsed"].consecutive_days == 0


class TestDayBoundary:
    def test_evening(self):
        remaining = time_until_next_day(datetime(2026, 2, 27, 22, 30, 15))
        assert remaining == TimeRemaining(1, 29, 45)
        assert format_time_remaining(remaining) == "1h 29m"

    def test_at_midnight_full_day_left(self):
        remaining = time_until_next_day(datetime(2026, 2, 27, 0, 0, 0))
        assert remaining == TimeRemaining(24, 0, 0)
        assert format_time_remaining(remaining) == "24h 0m"

    def test_last_minutes(self):
        remaining = time_until_next_day(datetime(2026, 2, 27, 23, 58, 10))
        assert remaining == TimeRemaining(0, 1, 50)
        assert format_time_remaining(remaining) == "1m 50s"

    def test_last_seconds(self):
        remaining = time_until_next_day(datetime(2026, 2, 27, 23, 59, 30))
        assert format_time_remaining(remaining) == "30s"

    def test_sub_second_floors(self):
        remaining = time_until_next_day(datetime(2026, 2, 27, 23, 59, 59, 500000))
        assert format_time_remaining(remaining) == "0s"

    def test_aware_time_same_as_naive(self):
        aware = datetime(2026, 2, 27, 22, 30, 15, tzinfo=timezone.utc)
        assert time_until_next_day(aware) == TimeRemaining(1, 29, 45)

    def test_spring_forward_day_is_23_hours(self):
        zoneinfo = pytest.importorskip("zoneinfo")
        try:
            new_york = zoneinfo.ZoneInfo("America/New_York")
        except zoneinfo.ZoneInfoNotFoundError:
            pytest.skip("tz database not installed")
        # clocks jump 02:00 -> 03:00 on 2026-03-08
        remaining = time_until_next_day(datetime(2026, 3, 8, 0, 30, tzinfo=new_york))
        assert remaining == TimeRemaining(22, 30, 0)

    def test_fall_back_day_is_25_hours(self):
        zoneinfo = pytest.importorskip("zoneinfo")
        try:
            new_york = zoneinfo.ZoneInfo("America/New_York")
        except zoneinfo.ZoneInfoNotFoundError:
            pytest.skip("tz database not installed")
        remaining = time_until_next_day(datetime(2026, 11, 1, 0, 0, tzinfo=new_york))
        assert remaining == TimeRemaining(25, 0, 0)
