"""
Input normalization shared by the engine modules.
"""
import math
from datetime import datetime


def finite_or_zero(value) -> float:
    """Non-numeric, NaN and infinite inputs count as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if math.isfinite(value) else 0


def local_naive(moment: datetime) -> datetime:
    """Aware datetimes become naive local time; naive ones are already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)
