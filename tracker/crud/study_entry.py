from sqlalchemy.orm import Session
from loguru import logger
from tracker.models import StudyEntry, Review
from tracker.schemas import StudyEntryCreate, TopicStatus
from tracker.sm2 import SM2Algorithm
from tracker.errors import InvalidInputError
from tracker.crud.topic import require_topic
from tracker.crud.activity_log import log_activity, STUDY_ENTRY_CREATED
from tracker.crud.transaction import atomic
from tracker.timeutils import now_ms
from typing import Optional
import json
import uuid

MIN_RECALL_QUESTIONS = 2

def create_study_entry(db: Session, entry: StudyEntryCreate, now: Optional[int] = None) -> StudyEntry:
    """
    Record a study entry and put the topic into the review cycle.
    
    Inserts the entry, creates the topic's review on first study (due
    immediately), moves the topic out of not_studied and logs the activity,
    all in one transaction.
    """
    summary = entry.summary.strip()
    questions = [q.strip() for q in entry.recall_questions if q and q.strip()]
    application = entry.ministry_application.strip()
    contrast = (entry.contrast_notes or "").strip() or None
    
    if not summary:
        raise InvalidInputError("Summary required: write a summary of what you studied.")
    if len(questions) < MIN_RECALL_QUESTIONS:
        raise InvalidInputError(f"Enter at least {MIN_RECALL_QUESTIONS} recall questions.")
    if not application:
        raise InvalidInputError("Ministry application required: how would you explain this?")
    
    topic = require_topic(db, entry.topic_id)
    now = now if now is not None else now_ms()
    
    db_entry = StudyEntry(
        id=str(uuid.uuid4()),
        topic_id=topic.id,
        summary=summary,
        recall_questions_json=json.dumps([{"id": str(uuid.uuid4()), "q": q} for q in questions]),
        ministry_application=application,
        contrast_notes=contrast,
        created_at=now
    )
    
    with atomic(db, "save study entry"):
        db.add(db_entry)
        
        existing = db.query(Review).filter(Review.topic_id == topic.id).first()
        if not existing:
            initial = SM2Algorithm.initial_state(now)
            db.add(Review(
                id=str(uuid.uuid4()),
                topic_id=topic.id,
                ease_factor=initial.ease_factor,
                interval_days=initial.interval_days,
                repetitions=initial.repetitions,
                due_at=initial.due_at,
                lapses=initial.lapses,
                updated_at=now
            ))
        
        if topic.status == TopicStatus.NOT_STUDIED.value:
            topic.status = TopicStatus.STUDIED_ONCE.value
        topic.next_due_at = now
        topic.updated_at = now
        
        log_activity(db, STUDY_ENTRY_CREATED, now, topic.id, {"entryId": db_entry.id})
    
    logger.info(f"Recorded study entry {db_entry.id} for topic {topic.id}")
    return db_entry

