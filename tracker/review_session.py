"""Review session controller.

A session is an immutable ``ReviewSession`` value; every transition returns
a new value. Grading computes the new SM-2 state, mastery and status first,
hands the result to a persistence callable, and only then moves to the next
card, so a failed write leaves the session exactly where it was.
"""

import json
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from tracker.errors import ConfidenceRequiredError, InvalidInputError, InvalidQualityError
from tracker.mastery import compute_mastery, derive_status
from tracker.schemas import (
    GradeResult,
    MasteryInput,
    RecallQuestion,
    ReviewCardItem,
    ReviewSession,
    Sm2State,
)
from tracker.sm2 import SM2Algorithm
from tracker.timeutils import DAY_MS, days_between
from tracker.utils import clamp

MAX_OVERDUE_WEIGHT_DAYS = 5
MAX_UNSEEN_DAYS = 60
LAPSE_SATURATION = 5
NEVER_REVIEWED_DAYS = 999

CONFIDENCE_MIN = 1
CONFIDENCE_MAX = 5
CONFIDENCE_SCALE = 20  # 1-5 picker stored as 0-100


def parse_recall_questions(raw: Optional[str]) -> List[RecallQuestion]:
    """Leniently decode stored recall questions; malformed data yields []"""
    try:
        data = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed recall questions JSON")
        return []
    if not isinstance(data, list):
        return []
    questions = []
    for item in data:
        if not isinstance(item, dict):
            continue
        qid = str(item.get("id") or "")
        text = str(item.get("q") or "")
        if qid and text:
            questions.append(RecallQuestion(id=qid, q=text))
    return questions


def compute_priority(item: ReviewCardItem, now: int) -> float:
    """Composite presentation priority within a due batch; higher first"""
    overdue_days = SM2Algorithm.get_days_overdue(item.due_at, now)
    weakness = (100 - clamp(item.mastery_score, 0, 100)) / 100
    lapse_boost = min(1, item.lapses / LAPSE_SATURATION)
    if item.topic_last_reviewed_at:
        unseen_days = min(MAX_UNSEEN_DAYS, (now - item.topic_last_reviewed_at) / DAY_MS)
    else:
        unseen_days = MAX_UNSEEN_DAYS
    return (
        3.0 * min(MAX_OVERDUE_WEIGHT_DAYS, overdue_days)
        + 2.0 * weakness
        + 1.0 * (unseen_days / MAX_UNSEEN_DAYS)
        + 1.0 * lapse_boost
    )


def start_session(items: Sequence[ReviewCardItem], now: int) -> ReviewSession:
    """Begin a session over due items, most urgent first"""
    ordered = sorted(items, key=lambda it: compute_priority(it, now), reverse=True)
    return ReviewSession(items=ordered)


def current_item(session: ReviewSession) -> Optional[ReviewCardItem]:
    if session.complete or session.current_index >= len(session.items):
        return None
    return session.items[session.current_index]


def reveal(session: ReviewSession) -> ReviewSession:
    return session.model_copy(update={"show_answer": True})


def set_confidence(session: ReviewSession, confidence: int) -> ReviewSession:
    if not CONFIDENCE_MIN <= confidence <= CONFIDENCE_MAX:
        raise InvalidInputError(f"Confidence must be between {CONFIDENCE_MIN} and {CONFIDENCE_MAX}")
    return session.model_copy(update={"confidence": confidence})


def advance(session: ReviewSession) -> ReviewSession:
    """Move past the current card, completing the session after the last one"""
    if session.current_index < len(session.items) - 1:
        return session.model_copy(update={
            "current_index": session.current_index + 1,
            "show_answer": False,
            "confidence": None,
        })
    return session.model_copy(update={"show_answer": False, "confidence": None, "complete": True})


def compute_grade(item: ReviewCardItem, quality: int, confidence: int, now: int) -> GradeResult:
    """Pure scoring for one grading event"""
    overdue_days = SM2Algorithm.get_days_overdue(item.due_at, now)
    state = Sm2State(
        ease_factor=item.ease_factor,
        repetitions=item.repetitions,
        interval_days=item.interval_days,
        due_at=item.due_at,
        lapses=item.lapses,
    )
    updated = SM2Algorithm.advance(state, quality, now)
    
    confidence_rating = confidence * CONFIDENCE_SCALE
    if item.topic_last_reviewed_at:
        days_since = days_between(now, item.topic_last_reviewed_at)
    else:
        days_since = NEVER_REVIEWED_DAYS
    
    mastery = compute_mastery(MasteryInput(
        last_score=quality,
        repetitions=updated.repetitions,
        ease_factor=updated.ease_factor,
        confidence_rating=confidence_rating,
        days_since_last_review=days_since,
        has_study_entry=True,
    ))
    status = derive_status(True, updated.repetitions, mastery, overdue_days)
    
    return GradeResult(
        review_id=item.review_id,
        topic_id=item.topic_id,
        quality=quality,
        confidence_rating=confidence_rating,
        state=updated,
        mastery_score=mastery,
        status=status,
        graded_at=now,
        expected_updated_at=item.review_updated_at,
    )


def grade(
    session: ReviewSession,
    quality: int,
    now: int,
    persist: Callable[[GradeResult], None],
) -> Tuple[ReviewSession, GradeResult]:
    """
    Grade the current card and persist the outcome.
    
    Args:
        session: Session whose current card is being graded
        quality: SM-2 quality 0-5
        now: Grading time in epoch milliseconds
        persist: Writes the result atomically; any exception it raises
            propagates and the session is not advanced
    
    Returns:
        (next session, grade result)
    """
    item = current_item(session)
    if item is None:
        raise InvalidInputError("No card left to grade in this session")
    if session.confidence is None:
        raise ConfidenceRequiredError("Pick a confidence rating (1-5) before grading.")
    if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 5:
        raise InvalidQualityError(f"Quality must be an integer between 0 and 5, got {quality!r}")
    
    result = compute_grade(item, quality, session.confidence, now)
    persist(result)
    logger.debug(
        f"graded {item.topic_id}: q={quality} reps={result.state.repetitions} "
        f"interval={result.state.interval_days} mastery={result.mastery_score}"
    )
    return advance(session), result
