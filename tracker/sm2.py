from typing import Dict

from tracker.errors import InvalidQualityError
from tracker.schemas import Sm2State
from tracker.timeutils import DAY_MS, days_between
from tracker.utils import round_half_up

INITIAL_EASE = 2.5
MIN_EASE = 1.3

# Grade buttons shown during review, mapped to SM-2 quality
QUALITY_MAP: Dict[str, int] = {
    "again": 1,
    "hard": 3,
    "good": 4,
    "easy": 5,
}


def quality_for(button: str) -> int:
    """Resolve a grade button name to its SM-2 quality"""
    try:
        return QUALITY_MAP[button.strip().lower()]
    except KeyError:
        raise InvalidQualityError(
            f"Unknown grade '{button}'. Use one of: {', '.join(QUALITY_MAP)}"
        ) from None


class SM2Algorithm:
    """
    SM-2 spaced repetition algorithm for calculating review intervals.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.
    """
    
    @staticmethod
    def advance(state: Sm2State, quality: int, now: int) -> Sm2State:
        """
        Apply one grading event to a scheduling state.
        
        Args:
            state: Current SM-2 state
            quality: Response quality (0-5). 0=total blackout, 5=perfect.
                Values outside 0-5 must be rejected by the caller.
            now: Grading time in epoch milliseconds
        
        Returns:
            New state; the input is left untouched
        """
        # Update easiness factor based on quality
        new_ef = state.ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
        
        # Ensure EF stays within bounds
        if new_ef < MIN_EASE:
            new_ef = MIN_EASE
        
        lapses = state.lapses
        
        # If quality < 3, reset repetitions (failed recall)
        if quality < 3:
            new_repetitions = 0
            new_interval = 1
            lapses += 1
        else:
            new_repetitions = state.repetitions + 1
            
            # Calculate new interval based on repetition count
            if new_repetitions == 1:
                new_interval = 1
            elif new_repetitions == 2:
                new_interval = 6
            else:
                new_interval = int(round_half_up(state.interval_days * new_ef))
        
        return Sm2State(
            ease_factor=round_half_up(new_ef, 2),
            repetitions=new_repetitions,
            interval_days=new_interval,
            due_at=now + new_interval * DAY_MS,
            lapses=lapses,
        )
    
    @staticmethod
    def initial_state(now: int) -> Sm2State:
        """SM-2 parameters for a topic that has just been studied, due immediately"""
        return Sm2State(
            ease_factor=INITIAL_EASE,
            repetitions=0,
            interval_days=0,
            due_at=now,
            lapses=0,
        )
    
    @staticmethod
    def is_due_for_review(due_at: int, now: int) -> bool:
        """Check if a review is due"""
        return due_at <= now
    
    @staticmethod
    def get_days_overdue(due_at: int, now: int) -> float:
        """Real-valued days past the due time, 0 if not yet due"""
        return days_between(now, due_at)
