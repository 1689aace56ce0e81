from sqlalchemy import Column, String, BigInteger, JSON
from tracker.database import Base

class ActivityLog(Base):
    """Append-only event record used for streaks and history"""
    __tablename__ = "activity_log"
    
    id = Column(String, primary_key=True, index=True)
    type = Column(String, nullable=False, index=True)  # STUDY_ENTRY_CREATED, REVIEW_COMPLETED
    timestamp = Column(BigInteger, nullable=False)
    topic_id = Column(String)
    payload = Column(JSON)
