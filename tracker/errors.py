"""Exceptions raised at the storage and input boundaries.

The scheduling engines themselves never raise; everything here is about
rejecting bad user input or reporting a failed write.
"""


class TrackerError(Exception):
    """Base class for errors shown to the user"""


class InvalidInputError(TrackerError, ValueError):
    """User-supplied data failed validation"""


class InvalidQualityError(InvalidInputError):
    """Quality grade outside 0-5 or an unknown grade button"""


class ConfidenceRequiredError(InvalidInputError):
    """A grade was submitted before a confidence rating was picked"""


class TopicNotFoundError(TrackerError, LookupError):
    def __init__(self, topic_id: str):
        super().__init__(f"Topic {topic_id} not found")
        self.topic_id = topic_id


class PersistenceError(TrackerError):
    """A storage transaction failed and was rolled back"""


class StaleReviewError(PersistenceError):
    """The review changed since it was loaded; the grade was not written"""
    def __init__(self, review_id: str):
        super().__init__(f"Review {review_id} was updated elsewhere since it was loaded")
        self.review_id = review_id
