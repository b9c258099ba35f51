from habitquest.engine.achievements import (
    ACHIEVEMENT_BY_ID, ACHIEVEMENTS, RARITIES, earned_achievements, newly_unlocked,
)
from habitquest.engine.levels import xp_for_level
from habitquest.engine.session import SessionState


class TestCatalog:
    def test_ids_unique(self):
        assert len(ACHIEVEMENT_BY_ID) == len(ACHIEVEMENTS)

    def test_rarities_known(self):
        for a in ACHIEVEMENTS:
            assert a.rarity in RARITIES, a.id


class TestEarnedAchievements:
    def test_fresh_session_has_none(self):
        assert earned_achievements(SessionState()) == []

    def test_first_quest(self):
        assert earned_achievements(SessionState(quests_completed_total=1)) == ["first-quest"]

    def test_streak_warrior_at_seven_days(self):
        assert "streak-warrior" not in earned_achievements(SessionState(streak=6))
        assert "streak-warrior" in earned_achievements(SessionState(streak=7))

    def test_level_master_at_level_5(self):
        assert "level-master" not in earned_achievements(SessionState(total_xp=xp_for_level(5) - 1))
        assert "level-master" in earned_achievements(SessionState(total_xp=xp_for_level(5)))

    def test_xp_hunter_at_10000(self):
        assert "xp-hunter" not in earned_achievements(SessionState(total_xp=9_999))
        assert "xp-hunter" in earned_achievements(SessionState(total_xp=10_000))

    def test_catalog_order(self):
        state = SessionState(quests_completed_total=50, streak=30, total_xp=50_000)
        assert earned_achievements(state) == [a.id for a in ACHIEVEMENTS]


class TestNewlyUnlocked:
    def test_skips_already_unlocked(self):
        state = SessionState(quests_completed_total=3, streak=8)
        assert newly_unlocked(state, ["first-quest"]) == ["streak-warrior"]

    def test_unlocks_are_sticky(self):
        # streak has lapsed; the badge stays
        state = SessionState(quests_completed_total=3, streak=1)
        assert newly_unlocked(state, ["first-quest", "streak-warrior"]) == []
