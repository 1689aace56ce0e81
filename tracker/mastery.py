"""Mastery scoring (0-100) and topic status derivation.

The score blends five normalized components:

    R  recall accuracy       last quality / 5
    S  repetition streak     min(repetitions, 10) / 10
    E  ease                  (ease - 1.3) / (2.8 - 1.3), clamped to [0, 1]
    C  confidence            confidence rating / 100
    T  freshness             exp(-days since last review / TAU)

Weights and thresholds are product constants and are intentionally not
exposed through settings.
"""

import math
from typing import Iterable

from loguru import logger

from tracker.schemas import Coverage, MasteryInput, TopicStatus
from tracker.utils import clamp, round_half_up

TAU = 10  # time decay constant in days

WEIGHT_RECALL = 0.35
WEIGHT_CONFIDENCE = 0.20
WEIGHT_STREAK = 0.15
WEIGHT_EASE = 0.15
WEIGHT_FRESHNESS = 0.15

EASE_FLOOR = 1.3
EASE_CEILING = 2.8
STREAK_CAP = 10

MASTERED_MIN_SCORE = 85
MASTERED_MIN_REPETITIONS = 8
MASTERED_MAX_OVERDUE_DAYS = 3


def compute_mastery(data: MasteryInput) -> int:
    """Mastery score in [0, 100]; always 0 for a topic never studied."""
    if not data.has_study_entry:
        return 0

    recall = data.last_score / 5 if data.last_score is not None else 0
    streak = min(data.repetitions, STREAK_CAP) / STREAK_CAP
    ease = clamp((data.ease_factor - EASE_FLOOR) / (EASE_CEILING - EASE_FLOOR), 0, 1)
    confidence = data.confidence_rating / 100 if data.confidence_rating is not None else 0
    freshness = math.exp(-data.days_since_last_review / TAU)

    raw = (
        WEIGHT_RECALL * recall
        + WEIGHT_CONFIDENCE * confidence
        + WEIGHT_STREAK * streak
        + WEIGHT_EASE * ease
        + WEIGHT_FRESHNESS * freshness
    )
    score = int(round_half_up(clamp(raw, 0, 1) * 100))
    logger.debug(
        f"mastery R={recall:.2f} C={confidence:.2f} S={streak:.2f} "
        f"E={ease:.2f} T={freshness:.2f} -> {score}"
    )
    return score


def derive_status(
    has_study_entry: bool,
    repetitions: int,
    mastery_score: int,
    overdue_days: float,
) -> TopicStatus:
    """Re-derive the lifecycle status from current stats.

    Idempotent; a mastered topic falls back to in_review once it is overdue
    or its score drops.
    """
    if not has_study_entry:
        return TopicStatus.NOT_STUDIED
    if repetitions == 0:
        return TopicStatus.STUDIED_ONCE
    if (
        mastery_score >= MASTERED_MIN_SCORE
        and repetitions >= MASTERED_MIN_REPETITIONS
        and overdue_days <= MASTERED_MAX_OVERDUE_DAYS
    ):
        return TopicStatus.MASTERED
    return TopicStatus.IN_REVIEW


def compute_coverage(statuses: Iterable[str]) -> Coverage:
    """Aggregate coverage for topics sharing a grouping letter"""
    statuses = [TopicStatus(s) for s in statuses]
    total = len(statuses)
    studied = sum(1 for s in statuses if s != TopicStatus.NOT_STUDIED)
    mastered = sum(1 for s in statuses if s == TopicStatus.MASTERED)
    return Coverage(
        total=total,
        studied=studied,
        mastered=mastered,
        pct=int(round_half_up(studied / total * 100)) if total > 0 else 0,
    )
