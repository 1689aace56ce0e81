from sqlalchemy.orm import Session
from loguru import logger
from tracker.models import Review, StudyEntry, Topic
from tracker.schemas import GradeResult, ReviewCardItem, ReviewSnapshot
from tracker.review_session import parse_recall_questions
from tracker.crud.activity_log import log_activity, REVIEW_COMPLETED
from tracker.crud.transaction import atomic
from tracker.errors import PersistenceError, StaleReviewError
from tracker.timeutils import now_ms
from typing import Dict, List, Optional

def get_review_for_topic(db: Session, topic_id: str) -> Optional[Review]:
    """Get the review record of a topic"""
    return db.query(Review).filter(Review.topic_id == topic_id).first()

def get_review_snapshots(db: Session) -> List[ReviewSnapshot]:
    """All reviews as plain records for the feed and progress engines"""
    return [ReviewSnapshot.model_validate(r) for r in db.query(Review).all()]

def get_due_reviews(db: Session, now: Optional[int] = None) -> List[tuple]:
    """Due (review, topic) pairs for non-archived topics, oldest due first"""
    now = now if now is not None else now_ms()
    return db.query(Review, Topic).join(Topic, Review.topic_id == Topic.id).filter(
        Review.due_at <= now,
        Topic.is_archived == False  # noqa: E712
    ).order_by(Review.due_at).all()

def load_due_items(db: Session, now: Optional[int] = None) -> List[ReviewCardItem]:
    """
    Build review cards for every due topic.
    
    Card content comes from the topic's latest study entry; topics without
    an entry or without a usable recall question are skipped.
    """
    rows = get_due_reviews(db, now)
    if not rows:
        return []
    
    topic_ids = [topic.id for _, topic in rows]
    entries = db.query(StudyEntry).filter(
        StudyEntry.topic_id.in_(topic_ids)
    ).order_by(StudyEntry.created_at.desc()).all()
    
    latest: Dict[str, StudyEntry] = {}
    for entry in entries:
        latest.setdefault(entry.topic_id, entry)
    
    items = []
    for review, topic in rows:
        entry = latest.get(topic.id)
        if not entry:
            continue
        questions = parse_recall_questions(entry.recall_questions_json)
        if not questions:
            logger.warning(f"Topic {topic.id} has no usable recall questions, skipping")
            continue
        items.append(ReviewCardItem(
            review_id=review.id,
            topic_id=topic.id,
            topic_name=topic.name,
            question=questions[0].q,
            question_index=1,
            question_count=len(questions),
            summary=entry.summary,
            ministry_application=entry.ministry_application,
            contrast_notes=entry.contrast_notes,
            mastery_score=topic.mastery_score,
            topic_last_reviewed_at=topic.last_reviewed_at,
            due_at=review.due_at,
            ease_factor=review.ease_factor,
            interval_days=review.interval_days,
            repetitions=review.repetitions,
            lapses=review.lapses,
            last_score=review.last_score,
            confidence_rating=review.confidence_rating,
            review_updated_at=review.updated_at
        ))
    return items

def save_grade(db: Session, result: GradeResult) -> None:
    """
    Persist one grading event atomically.
    
    Review state, topic mastery/status and the activity record are written
    in a single transaction; on failure nothing is written. The review must
    still carry the `updated_at` the grade was computed from, otherwise
    StaleReviewError is raised and nothing is written.
    """
    state = result.state
    with atomic(db, "save review"):
        review = db.query(Review).populate_existing().filter(Review.id == result.review_id).first()
        topic = db.query(Topic).populate_existing().filter(Topic.id == result.topic_id).first()
        if not review or not topic:
            raise PersistenceError(f"Review {result.review_id} for topic {result.topic_id} no longer exists")
        if review.updated_at != result.expected_updated_at:
            logger.warning(
                f"Review {review.id} changed since load "
                f"(expected {result.expected_updated_at}, found {review.updated_at})"
            )
            raise StaleReviewError(review.id)
        
        review.due_at = state.due_at
        review.interval_days = state.interval_days
        review.ease_factor = state.ease_factor
        review.repetitions = state.repetitions
        review.lapses = state.lapses
        review.last_score = result.quality
        review.confidence_rating = result.confidence_rating
        # strictly increasing so a same-millisecond grade still invalidates older loads
        review.updated_at = max(result.graded_at, review.updated_at + 1)
        
        topic.mastery_score = result.mastery_score
        topic.status = result.status.value
        topic.last_reviewed_at = result.graded_at
        topic.next_due_at = state.due_at
        topic.updated_at = result.graded_at
        
        log_activity(db, REVIEW_COMPLETED, result.graded_at, topic.id, result.activity_payload())
    
    logger.info(
        f"Saved review for topic {topic.id}: next due in {state.interval_days} days, "
        f"mastery {result.mastery_score} ({result.status.value})"
    )
