from sqlalchemy.orm import Session
from loguru import logger
from tracker.models import ActivityLog, Review, StudyEntry, Topic
from tracker.schemas import TopicStatus
from tracker.crud.transaction import atomic
from tracker.timeutils import now_ms
from typing import Optional

def reset_progress(db: Session, now: Optional[int] = None) -> int:
    """
    Wipe all study progress but keep registered topics.
    
    Returns:
        Number of topics reset
    """
    now = now if now is not None else now_ms()
    with atomic(db, "reset progress"):
        db.query(ActivityLog).delete()
        db.query(Review).delete()
        db.query(StudyEntry).delete()
        count = db.query(Topic).update({
            Topic.status: TopicStatus.NOT_STUDIED.value,
            Topic.mastery_score: 0,
            Topic.last_reviewed_at: None,
            Topic.next_due_at: None,
            Topic.updated_at: now
        })
    logger.info(f"Reset progress for {count} topics")
    return count
