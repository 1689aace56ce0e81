"""
Unit tests for mastery scoring, status derivation and coverage.
"""

import itertools

import pytest

from tracker.mastery import compute_coverage, compute_mastery, derive_status
from tracker.schemas import MasteryInput, TopicStatus


def _input(**overrides):
    values = dict(
        last_score=None,
        repetitions=0,
        ease_factor=2.5,
        confidence_rating=None,
        days_since_last_review=0.0,
        has_study_entry=True,
    )
    values.update(overrides)
    return MasteryInput(**values)


class TestComputeMastery:
    @pytest.mark.parametrize("last_score,reps,conf", [(5, 10, 100), (0, 0, 0), (None, 3, None)])
    def test_zero_without_study_entry(self, last_score, reps, conf):
        data = _input(last_score=last_score, repetitions=reps, confidence_rating=conf, has_study_entry=False)
        assert compute_mastery(data) == 0

    def test_perfect_inputs_score_100(self):
        data = _input(last_score=5, repetitions=12, ease_factor=3.0, confidence_rating=100)
        assert compute_mastery(data) == 100

    def test_only_freshness_contributes(self):
        data = _input(ease_factor=1.3)
        assert compute_mastery(data) == 15

    def test_weighted_blend(self):
        # 0.35*0.8 + 0.20*0.6 + 0.15*0.3 + 0.15*0.8 + 0.15*exp(-0.5) = 0.656
        data = _input(last_score=4, repetitions=3, ease_factor=2.5, confidence_rating=60, days_since_last_review=5)
        assert compute_mastery(data) == 66

    def test_freshness_decays_over_time(self):
        fresh = compute_mastery(_input(last_score=4, repetitions=4, days_since_last_review=0))
        stale = compute_mastery(_input(last_score=4, repetitions=4, days_since_last_review=30))
        assert stale < fresh

    def test_always_integer_in_range(self):
        grid = itertools.product(
            [None, 0, 3, 5],
            [0, 4, 20],
            [1.3, 2.5, 4.0],
            [None, 0, 100],
            [0, 2.5, 999],
        )
        for last, reps, ease, conf, days in grid:
            score = compute_mastery(_input(
                last_score=last, repetitions=reps, ease_factor=ease,
                confidence_rating=conf, days_since_last_review=days,
            ))
            assert isinstance(score, int)
            assert 0 <= score <= 100


class TestDeriveStatus:
    def test_not_studied_without_entry(self):
        assert derive_status(False, 9, 95, 0) == TopicStatus.NOT_STUDIED

    def test_studied_once_before_first_grade(self):
        assert derive_status(True, 0, 95, 0) == TopicStatus.STUDIED_ONCE

    def test_mastered(self):
        assert derive_status(True, 8, 90, 0) == TopicStatus.MASTERED

    def test_overdue_regresses_to_in_review(self):
        assert derive_status(True, 8, 90, 5) == TopicStatus.IN_REVIEW

    @pytest.mark.parametrize("reps,score,overdue", [(7, 90, 0), (8, 84, 0), (8, 90, 3.01)])
    def test_in_review_when_any_threshold_missed(self, reps, score, overdue):
        assert derive_status(True, reps, score, overdue) == TopicStatus.IN_REVIEW

    def test_boundary_values_are_mastered(self):
        assert derive_status(True, 8, 85, 3) == TopicStatus.MASTERED


class TestCoverage:
    def test_empty_group(self):
        coverage = compute_coverage([])
        assert (coverage.total, coverage.studied, coverage.mastered, coverage.pct) == (0, 0, 0, 0)

    def test_mixed_group(self):
        coverage = compute_coverage(["not_studied", "studied_once", "mastered"])
        assert coverage.total == 3
        assert coverage.studied == 2
        assert coverage.mastered == 1
        assert coverage.pct == 67
