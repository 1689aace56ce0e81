from sqlalchemy import Column, String, Integer, Float, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from tracker.database import Base

class Review(Base):
    """SM-2 scheduling state, one row per topic"""
    __tablename__ = "reviews"
    
    id = Column(String, primary_key=True, index=True)
    topic_id = Column(String, ForeignKey("topics.id"), nullable=False, unique=True)
    
    # SM-2 algorithm fields
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column(Integer, nullable=False, default=0)
    repetitions = Column(Integer, nullable=False, default=0)
    due_at = Column(BigInteger, nullable=False, index=True)
    lapses = Column(Integer, nullable=False, default=0)
    
    last_score = Column(Integer)  # 0-5
    confidence_rating = Column(Integer)  # 0-100
    updated_at = Column(BigInteger, nullable=False)
    
    topic = relationship("Topic", back_populates="review")
