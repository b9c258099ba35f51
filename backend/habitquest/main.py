"""
Habit Quest: FastAPI front-end for the reward engine.

Stateless: callers send their session state and get the updated state back.
"""
import logging
import os
from datetime import date, datetime

from fastapi import FastAPI, HTTPException, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .engine.achievements import ACHIEVEMENT_BY_ID, ACHIEVEMENTS
from .engine.activity import format_time_remaining, sweep_activities, time_until_next_day
from .engine.levels import (
    example_levels, level_progress, level_title, step_cost, xp_for_level,
)
from .engine.quests import QUEST_BY_ID, QUESTS, sort_quests
from .engine.rewards import compute_reward
from .engine.session import complete_quest
from .models import (
    AchievementModel, ActivityRecordModel, CompleteQuestRequest, CompleteQuestResponse,
    LevelProgressModel, RewardModel, RewardRequest, SessionModel, SweepRequest,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Upper bound for single-level lookups; thresholds themselves are unbounded.
MAX_LOOKUP_LEVEL = 5000

DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5173"
ALLOWED_ORIGINS = [
    o.strip() for o in os.environ.get("ALLOWED_ORIGINS", DEFAULT_ORIGINS).split(",") if o.strip()
]

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="Habit Quest API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


# ── Levels ────────────────────────────────────────────────────────────────────

@app.get("/api/levels")
def get_level_table():
    return {"levels": example_levels()}


@app.get("/api/levels/{level}")
def get_level(level: int = Path(ge=1, le=MAX_LOOKUP_LEVEL)):
    return {
        "level": level,
        "total_xp": xp_for_level(level),
        "xp_this_level": step_cost(level),
        "level_title": level_title(level),
    }


@app.get("/api/progress")
def get_progress(total_xp: int = Query(0)):
    progress = level_progress(total_xp)
    return LevelProgressModel.from_engine(progress, level_title(progress.level))


# ── Quests & rewards ──────────────────────────────────────────────────────────

@app.get("/api/quests")
def list_quests():
    return {"quests": [
        {
            "id": q.id,
            "name": q.name,
            "description": q.description,
            "xp_reward": q.xp_reward,
            "difficulty": q.difficulty,
            "category": q.category,
            "kind": q.kind,
            "input_type": q.input_type,
            "is_negative": q.is_negative,
        }
        for q in sort_quests(QUESTS)
    ]}


@app.post("/api/rewards")
@limiter.limit("120/minute")
def preview_reward(request: Request, body: RewardRequest):
    result = compute_reward(
        body.base_xp,
        body.streak,
        body.categories_today,
        body.difficulty,
        body.quests_completed_today,
        body.is_first_quest_of_day,
        body.consecutive_days,
    )
    return RewardModel.from_engine(result)


@app.post("/api/quests/complete", response_model=CompleteQuestResponse)
@limiter.limit("60/minute")
def complete(request: Request, body: CompleteQuestRequest):
    if body.quest is not None:
        quest = body.quest.to_engine()
    else:
        quest = QUEST_BY_ID.get(body.quest_id)
        if quest is None:
            raise HTTPException(status_code=404, detail="Quest not found")

    now = body.now or datetime.now()
    outcome = complete_quest(body.session.to_engine(), quest, now, body.quantity, body.endless)
    if outcome.already_completed:
        raise HTTPException(status_code=409, detail="Quest already completed today")
    progress = level_progress(outcome.state.total_xp)

    if outcome.leveled_up:
        logger.info("Quest %s pushed player to level %d", quest.id, outcome.new_level)

    return CompleteQuestResponse(
        session=SessionModel.from_engine(outcome.state),
        base_xp=outcome.base_xp,
        reward=RewardModel.from_engine(outcome.reward),
        activity=ActivityRecordModel.from_engine(outcome.activity),
        achievements_unlocked=[
            AchievementModel.from_engine(ACHIEVEMENT_BY_ID[a_id], unlocked=True)
            for a_id in outcome.achievements_unlocked
        ],
        old_level=outcome.old_level,
        new_level=outcome.new_level,
        leveled_up=outcome.leveled_up,
        variety_score=outcome.variety_score,
        progress=LevelProgressModel.from_engine(progress, level_title(progress.level)),
    )


# ── Achievements ──────────────────────────────────────────────────────────────

@app.post("/api/achievements")
def list_achievements(body: SessionModel):
    unlocked = set(body.achievements)
    return {"achievements": [AchievementModel.from_engine(a, a.id in unlocked) for a in ACHIEVEMENTS]}


# ── Activity maintenance ──────────────────────────────────────────────────────

@app.post("/api/activity/sweep")
def sweep(body: SweepRequest):
    today = body.today or date.today()
    records = {k: v.to_engine() for k, v in body.activities.items()}
    swept = sweep_activities(records, today)
    return {
        "activities": {k: ActivityRecordModel.from_engine(v) for k, v in swept.items()},
        "pruned": sorted(set(records) - set(swept)),
    }


@app.get("/api/day/remaining")
def day_remaining():
    remaining = time_until_next_day(datetime.now())
    return {
        "hours": remaining.hours,
        "minutes": remaining.minutes,
        "seconds": remaining.seconds,
        "display": format_time_remaining(remaining),
    }
