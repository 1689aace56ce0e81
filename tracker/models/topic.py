from sqlalchemy import Column, String, Integer, BigInteger, Boolean
from sqlalchemy.orm import relationship
from tracker.database import Base

class Topic(Base):
    """Named study subject with derived status and mastery"""
    __tablename__ = "topics"
    
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    letter = Column(String(1), nullable=False, index=True)  # first-letter grouping key
    reference_url = Column(String, nullable=False)
    
    # Derived from the latest review; never edited directly
    status = Column(String, nullable=False, default="not_studied")
    mastery_score = Column(Integer, nullable=False, default=0)
    
    # Epoch milliseconds
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
    last_reviewed_at = Column(BigInteger)
    next_due_at = Column(BigInteger)
    
    is_archived = Column(Boolean, nullable=False, default=False)
    
    study_entries = relationship("StudyEntry", back_populates="topic")
    review = relationship("Review", back_populates="topic", uselist=False)
