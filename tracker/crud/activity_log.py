from sqlalchemy.orm import Session
from tracker.models import ActivityLog
from typing import Any, Dict, List, Optional
import uuid

STUDY_ENTRY_CREATED = "STUDY_ENTRY_CREATED"
REVIEW_COMPLETED = "REVIEW_COMPLETED"

def log_activity(
    db: Session,
    activity_type: str,
    timestamp: int,
    topic_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None
) -> ActivityLog:
    """Append an activity record to the current transaction (caller commits)"""
    entry = ActivityLog(
        id=str(uuid.uuid4()),
        type=activity_type,
        timestamp=timestamp,
        topic_id=topic_id,
        payload=payload
    )
    db.add(entry)
    return entry

def get_activity_timestamps(db: Session, activity_type: Optional[str] = None) -> List[int]:
    """Get activity timestamps, optionally for one activity type"""
    query = db.query(ActivityLog.timestamp)
    if activity_type:
        query = query.filter(ActivityLog.type == activity_type)
    return [row.timestamp for row in query.all()]
