"""
Unit tests for the adaptive daily feed.
"""

import pytest

from tracker.feed import completion_message, get_daily_feed, get_intensity, missed_day_message
from tracker.schemas import FeedMode, ReviewSnapshot, TopicSnapshot, TopicStatus


def _topic(topic_id, name=None, status=TopicStatus.IN_REVIEW, mastery=60, archived=False):
    return TopicSnapshot(
        id=topic_id,
        name=name or topic_id,
        status=status,
        mastery_score=mastery,
        is_archived=archived,
    )


def _review(topic_id, due_at):
    return ReviewSnapshot(topic_id=topic_id, due_at=due_at, repetitions=2)


def _streak_activity(now, day_ms, days):
    return [now - i * day_ms for i in range(days)]


class TestIntensity:
    @pytest.mark.parametrize("streak,limit,label", [
        (0, 3, "Warm-up"),
        (1, 5, "Building"),
        (3, 5, "Building"),
        (4, 7, "Balanced"),
        (7, 7, "Balanced"),
        (8, 9, "Strong"),
        (14, 9, "Strong"),
        (15, 12, "Advanced"),
        (200, 12, "Advanced"),
    ])
    def test_table(self, streak, limit, label):
        intensity = get_intensity(streak, False)
        assert intensity.daily_limit == limit
        assert intensity.label == label

    @pytest.mark.parametrize("streak,limit", [(0, 2), (1, 3), (4, 5), (15, 10)])
    def test_missed_day_penalty_with_floor(self, streak, limit):
        assert get_intensity(streak, True).daily_limit == limit


class TestDailyFeed:
    def test_single_overdue_topic(self, now, day_ms):
        topics = [_topic("t1", mastery=70)]
        reviews = [_review("t1", now - 10 * day_ms)]
        result = get_daily_feed(topics, reviews, [], now)

        assert result.streak == 0
        assert result.intensity.label == "Warm-up"
        assert [(c.topic_id, c.mode) for c in result.cards] == [("t1", FeedMode.REVIEW)]
        assert result.feed_exhausted is False

    def test_nothing_eligible(self, now, day_ms):
        topics = [
            _topic("archived", status=TopicStatus.NOT_STUDIED, archived=True),
            _topic("strong", mastery=90),
        ]
        reviews = [_review("strong", now + 5 * day_ms)]
        result = get_daily_feed(topics, reviews, [], now)
        assert result.cards == []
        assert result.feed_exhausted is True

    def test_no_topics_at_all(self, now):
        result = get_daily_feed([], [], [], now)
        assert result.cards == []
        assert result.feed_exhausted is True

    def test_overdue_topic_not_repeated_in_later_stages(self, now, day_ms):
        topics = [_topic("weak", mastery=10)]
        reviews = [_review("weak", now - day_ms)]
        result = get_daily_feed(topics, reviews, _streak_activity(now, day_ms, 5), now)
        assert [c.topic_id for c in result.cards] == ["weak"]
        assert result.cards[0].mode == FeedMode.REVIEW

    def test_stage_order_and_sorting(self, now, day_ms):
        topics = [
            _topic("due-recent", mastery=80),
            _topic("due-old", mastery=80),
            _topic("weak-30", mastery=30),
            _topic("weak-10", mastery=10),
            _topic("zeta", name="Zeta", status=TopicStatus.NOT_STUDIED, mastery=0),
            _topic("alpha", name="alpha", status=TopicStatus.NOT_STUDIED, mastery=0),
        ]
        reviews = [
            _review("due-recent", now - day_ms),
            _review("due-old", now - 4 * day_ms),
            _review("weak-30", now + 3 * day_ms),
            _review("weak-10", now + 3 * day_ms),
        ]
        # 5-day streak -> Balanced, 7 cards
        result = get_daily_feed(topics, reviews, _streak_activity(now, day_ms, 5), now)

        assert result.intensity.daily_limit == 7
        assert [c.topic_id for c in result.cards] == [
            "due-old", "due-recent", "weak-10", "weak-30", "alpha", "zeta",
        ]
        assert [c.priority for c in result.cards] == [3, 3, 2, 2, 1, 1]

    def test_truncates_at_daily_limit(self, now, day_ms):
        topics = [_topic(f"t{i}", mastery=80) for i in range(10)]
        reviews = [_review(f"t{i}", now - (i + 1) * day_ms) for i in range(10)]
        result = get_daily_feed(topics, reviews, [], now)

        assert result.missed_yesterday is True
        assert len(result.cards) == result.intensity.daily_limit == 2
        assert [c.topic_id for c in result.cards] == ["t9", "t8"]

    def test_due_exactly_now_counts_as_review(self, now):
        result = get_daily_feed([_topic("t1")], [_review("t1", now)], [now], now)
        assert result.cards[0].mode == FeedMode.REVIEW

    def test_archived_topics_excluded(self, now, day_ms):
        topics = [
            _topic("gone", mastery=10, archived=True),
            _topic("new", status=TopicStatus.NOT_STUDIED, mastery=0, archived=True),
        ]
        reviews = [_review("gone", now - day_ms)]
        assert get_daily_feed(topics, reviews, [], now).feed_exhausted is True

    def test_not_studied_never_strengthened(self, now):
        result = get_daily_feed([_topic("n", status=TopicStatus.NOT_STUDIED, mastery=0)], [], [now], now)
        assert result.cards[0].mode == FeedMode.NEW

    def test_card_text_fields(self, now, day_ms):
        topics = [
            _topic("r", mastery=70),
            _topic("s", mastery=20),
            _topic("n", status=TopicStatus.NOT_STUDIED, mastery=0),
        ]
        result = get_daily_feed(topics, [_review("r", now - day_ms)], [now], now)
        by_mode = {c.mode: c for c in result.cards}
        assert by_mode[FeedMode.REVIEW].badge == "Due for Review"
        assert by_mode[FeedMode.STRENGTHEN].badge == "Strengthen Understanding"
        assert by_mode[FeedMode.NEW].badge == "New Meditation"
        assert by_mode[FeedMode.REVIEW].encouragement == "Explain this clearly."
        assert by_mode[FeedMode.STRENGTHEN].mastery_score == 20


class TestMessages:
    @pytest.mark.parametrize("streak,title", [
        (0, "Today's Training Complete"),
        (1, "Building the Habit"),
        (4, "Gaining Momentum"),
        (8, "Strong Consistency"),
        (15, "Exceptional Discipline"),
    ])
    def test_completion_titles(self, streak, title):
        assert completion_message(streak).title == title

    def test_day_pluralization(self):
        assert completion_message(1).message.startswith("1 day in.")
        assert completion_message(2).message.startswith("2 days in.")

    def test_missed_day(self):
        assert missed_day_message().title == "Welcome Back"

    @pytest.mark.parametrize("streak,reference", [
        (0, "1 Tim. 4:15"),
        (2, "Prov. 21:5"),
        (5, "Gal. 6:9"),
        (10, "Eph. 5:16"),
        (20, "1 Tim. 4:15"),
    ])
    def test_completion_scripture(self, streak, reference):
        assert completion_message(streak).scripture.endswith(reference)

    def test_missed_day_has_no_scripture(self):
        assert missed_day_message().scripture is None
