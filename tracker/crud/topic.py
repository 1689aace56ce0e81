from sqlalchemy.orm import Session
from loguru import logger
from tracker.models import Topic
from tracker.schemas import TopicCreate, TopicSnapshot, TopicStatus
from tracker.errors import InvalidInputError, TopicNotFoundError
from tracker.crud.transaction import atomic
from tracker.timeutils import now_ms
from typing import List, Optional
import uuid

def create_topic(db: Session, topic: TopicCreate, now: Optional[int] = None) -> Topic:
    """Register a new topic, initially not studied"""
    name = topic.name.strip()
    url = topic.reference_url.strip()
    if not name:
        raise InvalidInputError("Topic name is required")
    if not url:
        raise InvalidInputError("Reference URL is required")
    
    now = now if now is not None else now_ms()
    db_topic = Topic(
        id=str(uuid.uuid4()),
        name=name,
        letter=name[0].upper(),
        reference_url=url,
        status=TopicStatus.NOT_STUDIED.value,
        mastery_score=0,
        created_at=now,
        updated_at=now,
        is_archived=False
    )
    with atomic(db, "save topic"):
        db.add(db_topic)
    db.refresh(db_topic)
    logger.info(f"Created topic {db_topic.id} '{name}'")
    return db_topic

def get_topic(db: Session, topic_id: str) -> Optional[Topic]:
    """Get topic by ID"""
    return db.query(Topic).filter(Topic.id == topic_id).first()

def require_topic(db: Session, topic_id: str) -> Topic:
    """Get topic by ID or raise TopicNotFoundError"""
    topic = get_topic(db, topic_id)
    if not topic:
        raise TopicNotFoundError(topic_id)
    return topic

def find_topics(db: Session, search: str) -> List[Topic]:
    """Find active topics whose name contains the search term"""
    return db.query(Topic).filter(
        Topic.is_archived == False,  # noqa: E712
        Topic.name.icontains(search, autoescape=True)
    ).order_by(Topic.name).all()

def list_topics(db: Session, include_archived: bool = False, letter: Optional[str] = None) -> List[Topic]:
    """List topics ordered by name"""
    query = db.query(Topic)
    if not include_archived:
        query = query.filter(Topic.is_archived == False)  # noqa: E712
    if letter:
        query = query.filter(Topic.letter == letter.upper())
    return query.order_by(Topic.name).all()

def get_topic_snapshots(db: Session) -> List[TopicSnapshot]:
    """All topics as plain records for the feed and progress engines"""
    return [TopicSnapshot.model_validate(t) for t in db.query(Topic).all()]

def archive_topic(db: Session, topic_id: str, now: Optional[int] = None) -> Topic:
    """Soft-delete a topic"""
    topic = require_topic(db, topic_id)
    with atomic(db, "archive topic"):
        topic.is_archived = True
        topic.updated_at = now if now is not None else now_ms()
    logger.info(f"Archived topic {topic_id}")
    return topic
