from datetime import timedelta
from typing import Iterable, List, Optional

from tracker.schemas import DayActivity, ProgressStats, ReviewSnapshot, TopicSnapshot, TopicStatus
from tracker.streak import compute_streak
from tracker.timeutils import day_key, now_ms
from tracker.utils import round_half_up

PASSING_QUALITY = 3
HISTOGRAM_DAYS = 7


def compute_progress(
    topics: Iterable[TopicSnapshot],
    reviews: Iterable[ReviewSnapshot],
    review_timestamps: Iterable[int],
    now: Optional[int] = None,
) -> ProgressStats:
    """
    Summarize learning progress over non-archived topics.
    
    Args:
        topics: All topics
        reviews: All review records
        review_timestamps: Times of completed reviews (REVIEW_COMPLETED activity)
        now: Reference time (defaults to the current time)
    """
    now = now if now is not None else now_ms()
    active = [t for t in topics if not t.is_archived]
    active_ids = {t.id for t in active}
    reviews = list(reviews)
    review_timestamps = list(review_timestamps)
    
    studied = [t for t in active if t.status != TopicStatus.NOT_STUDIED]
    mastered = sum(1 for t in active if t.status == TopicStatus.MASTERED)
    avg_mastery = (
        int(round_half_up(sum(t.mastery_score for t in studied) / len(studied)))
        if studied else 0
    )
    
    due_count = sum(1 for r in reviews if r.topic_id in active_ids and r.due_at <= now)
    
    scored = [r for r in reviews if r.last_score is not None]
    passed = sum(1 for r in scored if r.last_score >= PASSING_QUALITY)
    retention = int(round_half_up(passed / len(scored) * 100)) if scored else 0
    
    streak = compute_streak(review_timestamps, now).streak
    
    # Activity histogram, oldest day first
    today = day_key(now)
    counts = {}
    for ts in review_timestamps:
        key = day_key(ts)
        counts[key] = counts.get(key, 0) + 1
    weekly: List[DayActivity] = []
    for offset in range(HISTOGRAM_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        weekly.append(DayActivity(day=day.strftime("%a"), count=counts.get(day, 0)))
    
    return ProgressStats(
        total_studied=len(studied),
        mastered=mastered,
        avg_mastery=avg_mastery,
        due_count=due_count,
        retention=retention,
        streak=streak,
        weekly=weekly,
    )
