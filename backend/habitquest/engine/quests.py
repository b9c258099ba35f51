"""
Quest definitions, base XP and display ordering.
"""
from dataclasses import dataclass

MAX_QUANTITY = 999

DIFFICULTY_ORDER = {"legendary": 4, "hard": 3, "medium": 2, "easy": 1}


@dataclass(frozen=True)
class Quest:
    id: str
    name: str
    xp_reward: int          # per unit for numeric quests; negative for penalties
    difficulty: str         # 'easy' | 'medium' | 'hard' | 'legendary'
    category: str = "daily"
    kind: str = "standard"  # 'standard' | 'numeric'
    input_type: str | None = None   # 'count' | 'minutes', numeric quests only
    description: str = ""

    @property
    def is_negative(self) -> bool:
        return self.xp_reward < 0

    @property
    def requires_input(self) -> bool:
        return self.kind == "numeric"


QUESTS: list[Quest] = [
    # Legendary
    Quest("fix-broken",         "Fix Something Broken",     2000, "legendary", "weekly",    description="Repair something that has been broken for a while"),
    Quest("try-new-hobby",      "Try a New Hobby",          1500, "legendary", "weekly",    description="Step outside your comfort zone"),
    Quest("tzedakah-10",        "Give 10% to Charity",      1000, "legendary", "daily",     description="Donate a tenth of today's income"),

    # Hard
    Quest("sell-unused",        "Sell Unused Items",        1000, "hard",      "weekly",    description="Declutter and sell what you no longer use"),
    Quest("exercise-3x",        "Exercise 3x This Week",    700,  "hard",      "weekly",    description="Three full workouts in one week"),
    Quest("clean-house",        "Clean the House",          500,  "hard",      "weekly",    description="Deep clean your living space"),
    Quest("eat-healthy-day",    "Eat Healthy All Day",      500,  "hard",      "daily",     description="Only nourishing meals today"),

    # Medium
    Quest("torah-reading",      "Read Torah Portion",       500,  "medium",    "spiritual", description="Complete today's reading with focus"),
    Quest("family-time",        "Family Time",              350,  "medium",    "daily",     description="Quality time with family"),
    Quest("running",            "Go Running",               300,  "medium",    "daily",     description="A run of any distance"),
    Quest("attend-work",        "Attend Work",              300,  "medium",    "work",      description="Show up and do your best"),
    Quest("buy-clothes",        "Buy Clothes (Count)",      100,  "medium",    "weekly",    "numeric", "count",   "XP per clothing item purchased"),
    Quest("torah-minutes",      "Torah Study (Minutes)",    20,   "medium",    "spiritual", "numeric", "minutes", "XP per minute of study"),

    # Easy
    Quest("morning-prayer",     "Morning Prayer",           250,  "easy",      "spiritual", description="Start the day with gratitude"),
    Quest("clean-room",         "Clean Your Room",          250,  "easy",      "daily",     description="Organize your personal space"),
    Quest("walk-in-nature",     "Walk in Nature",           250,  "easy",      "daily",     description="Connect with the natural world"),
    Quest("drink-water",        "Drink 8 Glasses of Water", 200,  "easy",      "daily",     description="Stay hydrated"),
    Quest("gratitude",          "Gratitude",                150,  "easy",      "daily",     description="Write one thing you are thankful for"),

    # Penalties
    Quest("gossip",             "Gossip",                   -200, "easy",      "daily",     description="Negative speech about others"),
    Quest("smoking",            "Smoking",                  -75,  "easy",      "daily",     "numeric", "count",   "XP lost per cigarette"),
    Quest("dirty-room",         "Dirty Room",               -100, "easy",      "daily",     description="Personal space left messy"),
    Quest("dirty-house",        "Dirty House",              -300, "medium",    "daily",     description="Living space left unclean"),
]

QUEST_BY_ID: dict[str, Quest] = {q.id: q for q in QUESTS}


def clamp_quantity(quantity: int | None) -> int:
    if not quantity or quantity < 0:
        return 0
    return min(int(quantity), MAX_QUANTITY)


def base_xp(quest: Quest, quantity: int | None = None) -> int:
    """
    XP before multipliers. Numeric quests pay xp_reward per unit; the other
    kinds ignore quantity.
    """
    if quest.requires_input:
        return quest.xp_reward * clamp_quantity(quantity)
    return quest.xp_reward


def sort_quests(quests: list[Quest]) -> list[Quest]:
    """Rewards before penalties, hardest first within each group."""
    return sorted(
        quests,
        key=lambda q: (q.is_negative, -DIFFICULTY_ORDER.get(q.difficulty, 0)),
    )
