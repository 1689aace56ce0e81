from enum import Enum
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class TopicStatus(str, Enum):
    """Topic lifecycle, derived from review statistics"""
    NOT_STUDIED = "not_studied"
    STUDIED_ONCE = "studied_once"
    IN_REVIEW = "in_review"
    MASTERED = "mastered"


class FeedMode(str, Enum):
    """Feed stage a card was drawn from"""
    REVIEW = "review"
    STRENGTHEN = "strengthen"
    NEW = "new"


class Sm2State(BaseModel):
    """SM-2 scheduling state for one topic"""
    ease_factor: float
    repetitions: int
    interval_days: int
    due_at: int
    lapses: int

    class Config:
        frozen = True


class MasteryInput(BaseModel):
    """Review statistics feeding the mastery score"""
    last_score: Optional[int] = None
    repetitions: int
    ease_factor: float
    confidence_rating: Optional[int] = None
    days_since_last_review: float
    has_study_entry: bool


class Coverage(BaseModel):
    """Study coverage for topics sharing a grouping key"""
    total: int
    studied: int
    mastered: int
    pct: int


class StreakResult(BaseModel):
    streak: int
    missed_yesterday: bool


class TopicSnapshot(BaseModel):
    """Topic record as consumed by the feed composer"""
    id: str
    name: str
    status: TopicStatus = TopicStatus.NOT_STUDIED
    mastery_score: int = 0
    next_due_at: Optional[int] = None
    is_archived: bool = False

    class Config:
        from_attributes = True


class ReviewSnapshot(BaseModel):
    """Review record as consumed by the feed composer"""
    topic_id: str
    due_at: int
    repetitions: int = 0
    last_score: Optional[int] = None
    confidence_rating: Optional[int] = None

    class Config:
        from_attributes = True


class IntensityLevel(BaseModel):
    """Daily card budget for a streak band"""
    daily_limit: int
    label: str
    description: str


class FeedCard(BaseModel):
    """One topic presented in the daily feed"""
    topic_id: str
    topic_name: str
    mode: FeedMode
    priority: int  # informational only, stage order already ranks cards
    badge: str
    encouragement: str
    mastery_score: int


class FeedResult(BaseModel):
    cards: List[FeedCard]
    intensity: IntensityLevel
    streak: int
    missed_yesterday: bool
    feed_exhausted: bool


class RecallQuestion(BaseModel):
    id: str
    q: str


class ReviewCardItem(BaseModel):
    """A due review joined with its topic and latest study entry"""
    review_id: str
    topic_id: str
    topic_name: str
    question: str
    question_index: int = 1
    question_count: int
    summary: str
    ministry_application: str
    contrast_notes: Optional[str] = None
    mastery_score: int
    topic_last_reviewed_at: Optional[int] = None
    due_at: int
    ease_factor: float
    interval_days: int
    repetitions: int
    lapses: int
    last_score: Optional[int] = None
    confidence_rating: Optional[int] = None
    review_updated_at: int

    class Config:
        frozen = True


class ReviewSession(BaseModel):
    """Explicit state of one review session"""
    items: List[ReviewCardItem] = Field(default_factory=list)
    current_index: int = 0
    show_answer: bool = False
    confidence: Optional[int] = None  # 1-5 as picked by the learner
    complete: bool = False

    class Config:
        frozen = True


class GradeResult(BaseModel):
    """Everything a single grading event writes back to storage"""
    review_id: str
    topic_id: str
    quality: int
    confidence_rating: int
    state: Sm2State
    mastery_score: int
    status: TopicStatus
    graded_at: int
    expected_updated_at: int  # review.updated_at the grade was computed from

    def activity_payload(self) -> Dict[str, Any]:
        return {"quality": self.quality, "confidenceRating": self.confidence_rating}


class CompletionMessage(BaseModel):
    title: str
    message: str
    scripture: Optional[str] = None


class DayActivity(BaseModel):
    day: str  # weekday label, e.g. "Mon"
    count: int


class ProgressStats(BaseModel):
    """Dashboard numbers for the progress view"""
    total_studied: int
    mastered: int
    avg_mastery: int
    due_count: int
    retention: int
    streak: int
    weekly: List[DayActivity]


class TopicCreate(BaseModel):
    """Schema for registering a topic"""
    name: str
    reference_url: str


class StudyEntryCreate(BaseModel):
    """Schema for recording a study entry"""
    topic_id: str
    summary: str
    recall_questions: List[str]
    ministry_application: str
    contrast_notes: Optional[str] = None
