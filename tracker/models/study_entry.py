from sqlalchemy import Column, String, Text, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from tracker.database import Base

class StudyEntry(Base):
    """Immutable record of study content for a topic"""
    __tablename__ = "study_entries"
    
    id = Column(String, primary_key=True, index=True)
    topic_id = Column(String, ForeignKey("topics.id"), nullable=False, index=True)
    summary = Column(Text, nullable=False)
    recall_questions_json = Column(Text, nullable=False)  # [{"id": ..., "q": ...}, ...]
    ministry_application = Column(Text, nullable=False)
    contrast_notes = Column(Text)
    created_at = Column(BigInteger, nullable=False)
    
    topic = relationship("Topic", back_populates="study_entries")
