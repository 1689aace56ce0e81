"""
Unit tests for the SM-2 scheduler.
"""

import pytest

from tracker.errors import InvalidQualityError
from tracker.schemas import Sm2State
from tracker.sm2 import MIN_EASE, QUALITY_MAP, SM2Algorithm, quality_for


class TestInitialState:
    def test_defaults(self, now):
        state = SM2Algorithm.initial_state(now)
        assert state.ease_factor == 2.5
        assert state.repetitions == 0
        assert state.interval_days == 0
        assert state.due_at == now
        assert state.lapses == 0


class TestSuccessfulRecall:
    def test_three_perfect_grades_from_initial_state(self, now):
        state = SM2Algorithm.initial_state(now)
        eases = [state.ease_factor]

        state = SM2Algorithm.advance(state, 5, now)
        assert (state.repetitions, state.interval_days) == (1, 1)
        eases.append(state.ease_factor)

        state = SM2Algorithm.advance(state, 5, now)
        assert (state.repetitions, state.interval_days) == (2, 6)
        eases.append(state.ease_factor)

        state = SM2Algorithm.advance(state, 5, now)
        eases.append(state.ease_factor)
        assert state.repetitions == 3
        # interval grows by the ease factor updated in the same step
        assert state.ease_factor == 2.8
        assert state.interval_days == 17

        assert eases == sorted(eases)
        assert len(set(eases)) == 4

    @pytest.mark.parametrize("quality", [3, 4, 5])
    def test_repetitions_increase_and_interval_never_shrinks(self, now, quality):
        state = SM2Algorithm.initial_state(now)
        previous = state
        for _ in range(10):
            state = SM2Algorithm.advance(state, quality, now)
            assert state.repetitions == previous.repetitions + 1
            if previous.repetitions >= 2:
                assert state.interval_days >= previous.interval_days
            previous = state

    def test_due_at_is_now_plus_interval(self, now, day_ms):
        state = Sm2State(ease_factor=2.5, repetitions=2, interval_days=6, due_at=now, lapses=0)
        updated = SM2Algorithm.advance(state, 4, now)
        assert updated.interval_days == 15
        assert updated.due_at == now + 15 * day_ms

    def test_interval_rounds_half_up(self, now):
        # quality 4 leaves the ease unchanged, so 6 * 2.25 = 13.5
        state = Sm2State(ease_factor=2.25, repetitions=2, interval_days=6, due_at=now, lapses=0)
        assert SM2Algorithm.advance(state, 4, now).interval_days == 14

    def test_ease_rounded_to_two_decimals(self, now):
        state = SM2Algorithm.initial_state(now)
        assert SM2Algorithm.advance(state, 3, now).ease_factor == 2.36


class TestFailedRecall:
    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_failure_resets_progress(self, now, day_ms, quality):
        state = Sm2State(ease_factor=2.2, repetitions=6, interval_days=40, due_at=now, lapses=2)
        updated = SM2Algorithm.advance(state, quality, now)
        assert updated.repetitions == 0
        assert updated.interval_days == 1
        assert updated.lapses == 3
        assert updated.due_at == now + day_ms

    def test_input_state_is_untouched(self, now):
        state = Sm2State(ease_factor=2.2, repetitions=6, interval_days=40, due_at=now, lapses=2)
        SM2Algorithm.advance(state, 1, now)
        assert state.repetitions == 6
        assert state.lapses == 2


class TestEaseFloor:
    @pytest.mark.parametrize("quality", range(6))
    @pytest.mark.parametrize("ease", [1.3, 1.35, 1.8, 2.5])
    def test_ease_never_below_floor(self, now, quality, ease):
        state = Sm2State(ease_factor=ease, repetitions=3, interval_days=10, due_at=now, lapses=0)
        assert SM2Algorithm.advance(state, quality, now).ease_factor >= MIN_EASE


class TestDueHelpers:
    def test_is_due(self, now, day_ms):
        assert SM2Algorithm.is_due_for_review(now, now)
        assert not SM2Algorithm.is_due_for_review(now + 1, now)

    def test_days_overdue(self, now, day_ms):
        assert SM2Algorithm.get_days_overdue(now - 2 * day_ms, now) == 2
        assert SM2Algorithm.get_days_overdue(now + day_ms, now) == 0


class TestQualityButtons:
    def test_button_map(self):
        assert QUALITY_MAP == {"again": 1, "hard": 3, "good": 4, "easy": 5}

    def test_lookup_is_case_insensitive(self):
        assert quality_for(" Good ") == 4

    def test_unknown_button_rejected(self):
        with pytest.raises(InvalidQualityError):
            quality_for("perfect")
