"""
Print the level requirement table, or where a given XP total lands on it.

Usage:
    cd backend
    python scripts/level_table.py                 # reference levels
    python scripts/level_table.py 1 40            # every level in a range
    python scripts/level_table.py --xp 125000     # progress for an XP total
"""
import os
import sys

# Add project root to path so we can import engine modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from habitquest.engine.levels import (
    example_levels, level_progress, level_title, step_cost, xp_for_level,
)


def print_rows(rows: list[dict]) -> None:
    print(f"  {'level':>6}  {'total XP':>16}  {'this level':>14}  title")
    for row in rows:
        lvl = row["level"]
        print(f"  {lvl:>6}  {row['total_xp']:>16,}  {row['xp_this_level']:>14,}  {level_title(lvl)}")


def level_range(first: int, last: int) -> list[dict]:
    return [
        {"level": lvl, "total_xp": xp_for_level(lvl), "xp_this_level": step_cost(lvl)}
        for lvl in range(max(first, 1), last + 1)
    ]


def show_progress(total_xp: int) -> None:
    p = level_progress(total_xp)
    print(f"\n  {total_xp:,} XP -> level {p.level} ({level_title(p.level)})")
    print(f"    level starts at {p.xp_at_level_start:,} XP, next at {p.xp_at_next_level:,} XP")
    print(f"    {p.progress_percent:.1f}% through, {p.xp_to_next:,} XP to go\n")


if __name__ == "__main__":
    args = sys.argv[1:]

    if args[:1] == ["--xp"]:
        if len(args) != 2 or not args[1].lstrip("-").isdigit():
            print("Usage: python scripts/level_table.py --xp <total_xp>")
            sys.exit(1)
        show_progress(int(args[1]))
    elif len(args) == 2 and all(a.isdigit() for a in args):
        print_rows(level_range(int(args[0]), int(args[1])))
    elif not args:
        print_rows(example_levels())
    else:
        print(__doc__)
        sys.exit(1)
