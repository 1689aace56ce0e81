from tracker.crud.topic import (
    create_topic,
    get_topic,
    require_topic,
    find_topics,
    list_topics,
    get_topic_snapshots,
    archive_topic
)
from tracker.crud.study_entry import create_study_entry
from tracker.crud.review import (
    get_review_for_topic,
    get_review_snapshots,
    get_due_reviews,
    load_due_items,
    save_grade
)
from tracker.crud.activity_log import (
    log_activity,
    get_activity_timestamps,
    STUDY_ENTRY_CREATED,
    REVIEW_COMPLETED
)
from tracker.crud.reset import reset_progress

__all__ = [
    "create_topic",
    "get_topic",
    "require_topic",
    "find_topics",
    "list_topics",
    "get_topic_snapshots",
    "archive_topic",
    "create_study_entry",
    "get_review_for_topic",
    "get_review_snapshots",
    "get_due_reviews",
    "load_due_items",
    "save_grade",
    "log_activity",
    "get_activity_timestamps",
    "STUDY_ENTRY_CREATED",
    "REVIEW_COMPLETED",
    "reset_progress",
]
