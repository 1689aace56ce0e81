"""Adaptive daily feed.

Builds today's queue from three stages in strict order: overdue reviews,
weak topics to strengthen, then topics never studied. The queue length is
capped by an intensity level that grows with the activity streak; a missed
day lowers the cap instead of resetting the streak.
"""

from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from tracker.schemas import (
    CompletionMessage,
    FeedCard,
    FeedMode,
    FeedResult,
    IntensityLevel,
    ReviewSnapshot,
    TopicSnapshot,
    TopicStatus,
)
from tracker.sm2 import SM2Algorithm
from tracker.streak import compute_streak
from tracker.timeutils import now_ms

MISSED_DAY_PENALTY = 2
MIN_DAILY_LIMIT = 2
WEAK_MASTERY_THRESHOLD = 50

# (max streak, daily limit, label, description); last row has no upper bound
INTENSITY_TABLE = [
    (0, 3, "Warm-up", "Ease in with a few reviews"),
    (3, 5, "Building", "Review + Strengthen"),
    (7, 7, "Balanced", "Full training mix"),
    (14, 9, "Strong", "Add new meditations"),
    (None, 12, "Advanced", "Deep comprehensive training"),
]

MODE_PRIORITY = {
    FeedMode.REVIEW: 3,
    FeedMode.STRENGTHEN: 2,
    FeedMode.NEW: 1,
}

BADGES = {
    FeedMode.REVIEW: "Due for Review",
    FeedMode.STRENGTHEN: "Strengthen Understanding",
    FeedMode.NEW: "New Meditation",
}

ENCOURAGEMENTS = {
    FeedMode.REVIEW: "Explain this clearly.",
    FeedMode.STRENGTHEN: "Deepen your grasp.",
    FeedMode.NEW: "Begin meditation.",
}


def get_intensity(streak: int, missed_yesterday: bool) -> IntensityLevel:
    """Daily card limit for a streak, lowered by 2 (floor 2) after a missed day"""
    for max_streak, limit, label, description in INTENSITY_TABLE:
        if max_streak is None or streak <= max_streak:
            break
    penalty = MISSED_DAY_PENALTY if missed_yesterday else 0
    return IntensityLevel(
        daily_limit=max(MIN_DAILY_LIMIT, limit - penalty),
        label=label,
        description=description,
    )


def _make_card(topic: TopicSnapshot, mode: FeedMode) -> FeedCard:
    return FeedCard(
        topic_id=topic.id,
        topic_name=topic.name,
        mode=mode,
        priority=MODE_PRIORITY[mode],
        badge=BADGES[mode],
        encouragement=ENCOURAGEMENTS[mode],
        mastery_score=topic.mastery_score,
    )


def get_daily_feed(
    topics: Iterable[TopicSnapshot],
    reviews: Iterable[ReviewSnapshot],
    activity_timestamps: Iterable[int],
    now: Optional[int] = None,
) -> FeedResult:
    """
    Compose today's feed.
    
    Args:
        topics: All topics, archived ones included (they are filtered out)
        reviews: Review records keyed by topic id
        activity_timestamps: Epoch milliseconds of recorded activity
        now: Reference time (defaults to the current time)
    
    Returns:
        Ordered cards plus the intensity and streak they were built from
    """
    now = now if now is not None else now_ms()
    streak = compute_streak(activity_timestamps, now)
    intensity = get_intensity(streak.streak, streak.missed_yesterday)
    limit = intensity.daily_limit
    
    review_map: Dict[str, ReviewSnapshot] = {r.topic_id: r for r in reviews}
    active = [t for t in topics if not t.is_archived]
    
    cards: List[FeedCard] = []
    used: Set[str] = set()
    
    def fill(candidates: List[TopicSnapshot], mode: FeedMode) -> None:
        for topic in candidates:
            if len(cards) >= limit:
                return
            if topic.id in used:
                continue
            used.add(topic.id)
            cards.append(_make_card(topic, mode))
    
    # Stage 1: due reviews, oldest due first
    overdue = sorted(
        (t for t in active if t.id in review_map and SM2Algorithm.is_due_for_review(review_map[t.id].due_at, now)),
        key=lambda t: review_map[t.id].due_at,
    )
    fill(overdue, FeedMode.REVIEW)
    
    # Stage 2: weak topics, weakest first
    weak = sorted(
        (
            t for t in active
            if t.mastery_score < WEAK_MASTERY_THRESHOLD
            and t.status != TopicStatus.NOT_STUDIED
            and t.id not in used
        ),
        key=lambda t: t.mastery_score,
    )
    fill(weak, FeedMode.STRENGTHEN)
    
    # Stage 3: never studied, alphabetical
    fresh = sorted(
        (t for t in active if t.status == TopicStatus.NOT_STUDIED and t.id not in used),
        key=lambda t: t.name.casefold(),
    )
    fill(fresh, FeedMode.NEW)
    
    logger.debug(
        f"feed: streak={streak.streak} missed={streak.missed_yesterday} "
        f"limit={limit} cards={len(cards)}"
    )
    
    return FeedResult(
        cards=cards[:limit],
        intensity=intensity,
        streak=streak.streak,
        missed_yesterday=streak.missed_yesterday,
        feed_exhausted=len(cards) == 0,
    )


def completion_message(streak: int) -> CompletionMessage:
    """Message shown once the day's feed has been worked through"""
    if streak >= 15:
        return CompletionMessage(
            title="Exceptional Discipline",
            message=f"{streak}-day streak! Your depth of understanding grows.",
            scripture='"Make your advancement manifest." — 1 Tim. 4:15',
        )
    if streak >= 8:
        return CompletionMessage(
            title="Strong Consistency",
            message=f"{streak} days running. You're building real mastery.",
            scripture='"Buy out the opportune time." — Eph. 5:16',
        )
    if streak >= 4:
        return CompletionMessage(
            title="Gaining Momentum",
            message=f"{streak}-day streak! Keep pressing forward.",
            scripture='"Let us not give up." — Gal. 6:9',
        )
    if streak >= 1:
        plural = "s" if streak > 1 else ""
        return CompletionMessage(
            title="Building the Habit",
            message=f"{streak} day{plural} in. Come back tomorrow.",
            scripture='"The plans of the diligent surely lead to success." — Prov. 21:5',
        )
    return CompletionMessage(
        title="Today's Training Complete",
        message="Great start. Return tomorrow to begin your streak.",
        scripture='"Make your advancement manifest." — 1 Tim. 4:15',
    )


def missed_day_message() -> CompletionMessage:
    return CompletionMessage(
        title="Welcome Back",
        message=(
            "Missed yesterday? No worries, your streak is preserved, "
            "but today's load is lighter to help you ease back in."
        ),
    )
