from datetime import timedelta
from typing import Iterable, Optional

from tracker.schemas import StreakResult
from tracker.timeutils import day_key, now_ms

MAX_LOOKBACK_DAYS = 365


def compute_streak(activity_timestamps: Iterable[int], now: Optional[int] = None) -> StreakResult:
    """
    Count consecutive calendar days with activity, ending today.
    
    Today missing does not break the streak since the day may not be
    finished yet; any earlier gap does. Input order does not matter.
    
    Args:
        activity_timestamps: Epoch milliseconds of recorded activity
        now: Reference time (defaults to the current time)
    
    Returns:
        Streak length and whether both yesterday and today are empty
    """
    current = now if now is not None else now_ms()
    today = day_key(current)
    yesterday = today - timedelta(days=1)
    
    days = {day_key(ts) for ts in activity_timestamps}
    
    missed_yesterday = yesterday not in days and today not in days
    
    streak = 0
    for offset in range(MAX_LOOKBACK_DAYS):
        if today - timedelta(days=offset) in days:
            streak += 1
        elif offset == 0:
            continue
        else:
            break
    
    return StreakResult(streak=streak, missed_yesterday=missed_yesterday)
