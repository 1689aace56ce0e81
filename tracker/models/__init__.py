from tracker.models.topic import Topic
from tracker.models.study_entry import StudyEntry
from tracker.models.review import Review
from tracker.models.activity_log import ActivityLog

__all__ = [
    "Topic",
    "StudyEntry",
    "Review",
    "ActivityLog",
]
