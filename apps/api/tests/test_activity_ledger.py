"""
Tests for the Activity Ledger and its SQL store
"""
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from models import Badge, Profile, WeeklyHistory
from services.activity_ledger import (
    ActivityLedger,
    ActivityType,
    SqlActivityStore,
    new_activity_record,
)


NOW = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)  # a Wednesday


class TestNewActivityRecord:
    def test_co2_fixed_from_size(self):
        record = new_activity_record(ActivityType.PHOTO, 5, now=NOW)
        assert record.co2_grams == 0.1
        assert record.size_mb == 5
        assert record.created_at == NOW
        assert record.id is None

    def test_accepts_plain_string_type(self):
        record = new_activity_record("video", 50, now=NOW)
        assert record.activity_type is ActivityType.VIDEO
        assert record.co2_grams == 1.0

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            new_activity_record("podcast", 1, now=NOW)


class TestActivityLedger:
    """Totals are always the sum of the listed records"""

    def test_empty_ledger(self):
        ledger = ActivityLedger()
        assert ledger.count == 0
        assert ledger.total_co2_grams == 0
        assert ledger.total_size_mb == 0
        assert ledger.co2_by_type() == {}

    def test_append_puts_newest_first(self):
        ledger = ActivityLedger()
        first = new_activity_record(ActivityType.PHOTO, 5, now=NOW)
        second = new_activity_record(ActivityType.MESSAGE, 0.5, now=NOW + timedelta(minutes=1))
        ledger.append(first)
        ledger.append(second)
        assert ledger.records == (second, first)

    def test_totals(self):
        ledger = ActivityLedger([
            new_activity_record(ActivityType.VIDEO, 50, now=NOW),
            new_activity_record(ActivityType.PHOTO, 5, now=NOW),
            new_activity_record(ActivityType.PHOTO, 10, now=NOW),
        ])
        assert ledger.count == 3
        assert ledger.total_co2_grams == pytest.approx(1.3)
        assert ledger.total_size_mb == 65
        assert ledger.co2_by_type() == pytest.approx({"video": 1.0, "photo": 0.3})
        assert list(ledger.co2_by_type()) == ["video", "photo"]


class TestSqlActivityStore:
    def test_add_activity_updates_profile_and_week(self, db_session, profile_factory):
        profile = profile_factory()
        store = SqlActivityStore(db_session)

        saved = store.add_activity(profile.id, new_activity_record(ActivityType.PHOTO, 5, now=NOW))
        store.add_activity(profile.id, new_activity_record(ActivityType.VIDEO, 50, now=NOW))

        assert saved.id is not None
        db_session.refresh(profile)
        assert profile.co2_emitted == pytest.approx(1.1)
        assert profile.total_data_used_mb == pytest.approx(55)

        weeks = db_session.query(WeeklyHistory).filter(WeeklyHistory.user_id == profile.id).all()
        assert len(weeks) == 1
        assert weeks[0].week_start == date(2024, 3, 4)
        assert weeks[0].co2_emitted_grams == pytest.approx(1.1)
        assert weeks[0].data_used_mb == pytest.approx(55)

    def test_separate_weeks_get_separate_rows(self, db_session, profile_factory):
        profile = profile_factory()
        store = SqlActivityStore(db_session)
        store.add_activity(profile.id, new_activity_record(ActivityType.PHOTO, 5, now=NOW - timedelta(days=7)))
        store.add_activity(profile.id, new_activity_record(ActivityType.PHOTO, 10, now=NOW))

        history = store.weekly_history(profile.id, limit=8)
        assert [h.week_start for h in history] == [date(2024, 3, 4), date(2024, 2, 26)]
        assert history[0].co2_emitted_grams == pytest.approx(0.2)
        assert history[1].co2_emitted_grams == pytest.approx(0.1)

    def test_list_newest_first_with_limit(self, db_session, profile_factory):
        profile = profile_factory()
        store = SqlActivityStore(db_session)
        for minutes, size in enumerate([1, 2, 3]):
            store.add_activity(
                profile.id,
                new_activity_record(ActivityType.MESSAGE, size, now=NOW + timedelta(minutes=minutes)),
            )

        records = store.list_activities(profile.id)
        assert [r.size_mb for r in records] == [3, 2, 1]
        assert [r.size_mb for r in store.list_activities(profile.id, limit=2)] == [3, 2]

    def test_activities_scoped_to_user(self, db_session, profile_factory):
        alice = profile_factory(username="alice")
        bob = profile_factory(username="bob")
        store = SqlActivityStore(db_session)
        store.add_activity(alice.id, new_activity_record(ActivityType.PHOTO, 5, now=NOW))

        assert store.list_activities(bob.id) == []
        assert store.weekly_history(bob.id, limit=4) == []

    def test_missing_profile(self, db_session, profile_factory):
        store = SqlActivityStore(db_session)
        with pytest.raises(LookupError):
            store.add_activity(uuid4(), new_activity_record(ActivityType.PHOTO, 5, now=NOW))

    def test_award_green_points_grants_badges_once(self, db_session, profile_factory):
        profile = profile_factory(green_points=200)
        store = SqlActivityStore(db_session)

        earned = store.award_green_points(profile.id, 100)
        assert [t.name for t in earned] == ["Getting Started"]
        assert db_session.get(Profile, profile.id).green_points == 300

        assert store.award_green_points(profile.id, 50) == []

        earned = store.award_green_points(profile.id, 500)
        assert [t.name for t in earned] == ["Digital Minimalist", "Eco Messenger"]

        names = {b.badge_name for b in db_session.query(Badge).filter(Badge.user_id == profile.id)}
        assert names == {"Getting Started", "Digital Minimalist", "Eco Messenger"}
