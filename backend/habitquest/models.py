from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .engine.achievements import Achievement
from .engine.activity import ActivityRecord
from .engine.levels import LevelProgress
from .engine.normalize import local_naive
from .engine.quests import MAX_QUANTITY, Quest
from .engine.rewards import QuestCompletion, RewardResult
from .engine.session import SessionState

QUEST_KINDS = ("standard", "numeric")


class ActivityRecordModel(BaseModel):
    quest_id: str
    # Unparseable dates are passed through; the tracker treats them as a fresh start.
    last_completed_date: date | str
    consecutive_days: int = 1
    total_completions: int = 1

    def to_engine(self) -> ActivityRecord:
        return ActivityRecord(self.quest_id, self.last_completed_date, self.consecutive_days, self.total_completions)

    @classmethod
    def from_engine(cls, record: ActivityRecord) -> "ActivityRecordModel":
        return cls(
            quest_id=record.quest_id,
            last_completed_date=record.last_completed_date,
            consecutive_days=record.consecutive_days,
            total_completions=record.total_completions,
        )


class QuestCompletionModel(BaseModel):
    quest_id: str
    category: str = "daily"
    difficulty: str = "easy"
    base_xp: int = 0
    completed_at: datetime

    @field_validator("completed_at")
    @classmethod
    def to_local_time(cls, v):
        return local_naive(v)


class SessionModel(BaseModel):
    day: Optional[date] = None
    streak: int = 0
    last_active_day: Optional[date] = None
    categories_today: list[str] = []
    quests_completed_today: int = 0
    total_xp: int = 0
    activities: dict[str, ActivityRecordModel] = {}
    completions: list[QuestCompletionModel] = []
    completed_today: list[str] = []
    quests_completed_total: int = 0
    achievements: list[str] = []

    @field_validator("categories_today", "completed_today", "achievements")
    @classmethod
    def dedupe(cls, v):
        return list(dict.fromkeys(v))

    def to_engine(self) -> SessionState:
        return SessionState(
            day=self.day,
            streak=self.streak,
            last_active_day=self.last_active_day,
            categories_today=tuple(self.categories_today),
            quests_completed_today=self.quests_completed_today,
            total_xp=self.total_xp,
            activities={k: v.to_engine() for k, v in self.activities.items()},
            completions=tuple(QuestCompletion(**c.model_dump()) for c in self.completions),
            completed_today=tuple(self.completed_today),
            quests_completed_total=self.quests_completed_total,
            achievements=tuple(self.achievements),
        )

    @classmethod
    def from_engine(cls, state: SessionState) -> "SessionModel":
        return cls(
            day=state.day,
            streak=state.streak,
            last_active_day=state.last_active_day,
            categories_today=list(state.categories_today),
            quests_completed_today=state.quests_completed_today,
            total_xp=state.total_xp,
            activities={k: ActivityRecordModel.from_engine(v) for k, v in state.activities.items()},
            completions=[QuestCompletionModel(**vars(c)) for c in state.completions],
            completed_today=list(state.completed_today),
            quests_completed_total=state.quests_completed_total,
            achievements=list(state.achievements),
        )


class QuestModel(BaseModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = ""
    xp_reward: int
    difficulty: str = "easy"
    category: str = "daily"
    kind: str = "standard"
    input_type: Optional[str] = None
    description: str = ""

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v):
        if v not in QUEST_KINDS:
            raise ValueError(f"kind must be one of {', '.join(QUEST_KINDS)}")
        return v

    def to_engine(self) -> Quest:
        return Quest(**self.model_dump())


class CompleteQuestRequest(BaseModel):
    session: SessionModel = SessionModel()
    quest_id: Optional[str] = None
    quest: Optional[QuestModel] = None
    quantity: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    endless: bool = False
    now: Optional[datetime] = None

    @field_validator("now")
    @classmethod
    def now_to_local_time(cls, v):
        return local_naive(v) if v is not None else v

    @model_validator(mode="after")
    def require_quest(self):
        if not self.quest_id and self.quest is None:
            raise ValueError("either quest_id or quest is required")
        return self


class RewardRequest(BaseModel):
    base_xp: float
    streak: int = 0
    categories_today: list[str] = []
    difficulty: str = "easy"
    quests_completed_today: int = 1
    is_first_quest_of_day: bool = False
    consecutive_days: int = 0


class BonusModel(BaseModel):
    name: str
    percent: int
    label: str


class RewardModel(BaseModel):
    final_xp: int
    multipliers: dict[str, float]
    total_multiplier: float
    bonuses: list[BonusModel] = []

    @classmethod
    def from_engine(cls, result: RewardResult) -> "RewardModel":
        return cls(
            final_xp=result.final_xp,
            multipliers={
                "streak": result.streak_multiplier,
                "variety": result.variety_multiplier,
                "difficulty": result.difficulty_multiplier,
                "completion": result.completion_multiplier,
                "consistency": result.consistency_multiplier,
                "first_quest": result.first_quest_multiplier,
            },
            total_multiplier=result.total_multiplier,
            bonuses=[BonusModel(name=b.name, percent=b.percent, label=b.label()) for b in result.bonuses],
        )


class LevelProgressModel(BaseModel):
    level: int
    level_title: str
    xp_at_level_start: int
    xp_at_next_level: int
    progress_percent: float
    xp_to_next: float

    @classmethod
    def from_engine(cls, progress: LevelProgress, title: str) -> "LevelProgressModel":
        return cls(level_title=title, **vars(progress))


class AchievementModel(BaseModel):
    id: str
    name: str
    description: str
    rarity: str
    unlocked: bool = False

    @classmethod
    def from_engine(cls, achievement: Achievement, unlocked: bool = False) -> "AchievementModel":
        return cls(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            rarity=achievement.rarity,
            unlocked=unlocked,
        )


class CompleteQuestResponse(BaseModel):
    session: SessionModel
    base_xp: int
    reward: RewardModel
    activity: ActivityRecordModel
    achievements_unlocked: list[AchievementModel] = []
    old_level: int
    new_level: int
    leveled_up: bool
    variety_score: float
    progress: LevelProgressModel


class SweepRequest(BaseModel):
    activities: dict[str, ActivityRecordModel] = {}
    today: Optional[date] = None
