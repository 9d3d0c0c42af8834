"""Tests for digest selection."""

import logging
from datetime import date, timedelta

from conftest import make_record

from shared.birthdays.digest import (
    build_digest,
    select_due_today,
    select_upcoming_within_week,
)
from shared.models.birthday import ReminderPreference

P = ReminderPreference


def _ids(records):
    return [r.id for r in records]


class TestSelectDueToday:
    def test_day_of_preferences_included(self, today):
        records = [
            make_record("morning", 15, 6, preference=P.DUE_MORNING_OF),
            make_record("day-before", 15, 6, preference=P.DUE_ONE_DAY_BEFORE),
        ]
        assert sorted(_ids(select_due_today(records, today))) == ["day-before", "morning"]

    def test_week_before_and_none_suppressed(self, today):
        records = [
            make_record("week", 15, 6, preference=P.DUE_SEVEN_DAYS_BEFORE),
            make_record("none", 15, 6, preference=P.NONE),
        ]
        assert select_due_today(records, today) == []

    def test_acknowledged_and_other_days_excluded(self, today):
        records = [
            make_record("done", 15, 6, last_acknowledged_year=2024),
            make_record("tomorrow", 16, 6),
            make_record("yesterday", 14, 6),
        ]
        assert select_due_today(records, today) == []

    def test_leap_day_in_common_year(self):
        records = [make_record("leap", 29, 2)]
        assert _ids(select_due_today(records, date(2023, 2, 28))) == ["leap"]


class TestSelectUpcomingWithinWeek:
    def test_window_is_zero_to_seven_days(self, today):
        records = [
            make_record("d8", 23, 6),
            make_record("d7", 22, 6),
            make_record("d0", 15, 6),
            make_record("past", 14, 6),
            make_record("d3", 18, 6),
        ]
        assert _ids(select_upcoming_within_week(records, today)) == ["d0", "d3", "d7"]

    def test_every_active_preference_is_included(self, today):
        records = [
            make_record("a", 16, 6, preference=P.DUE_MORNING_OF),
            make_record("b", 16, 6, preference=P.DUE_ONE_DAY_BEFORE),
            make_record("c", 16, 6, preference=P.DUE_SEVEN_DAYS_BEFORE),
            make_record("d", 16, 6, preference=P.NONE),
        ]
        assert sorted(_ids(select_upcoming_within_week(records, today))) == ["a", "b", "c"]

    def test_wraps_into_next_year(self):
        records = [make_record("jan2", 2, 1), make_record("dec30", 30, 12)]
        result = select_upcoming_within_week(records, date(2024, 12, 28))
        assert _ids(result) == ["dec30", "jan2"]


class TestMalformedRecords:
    def test_bad_record_skipped_with_warning(self, today, caplog):
        records = [
            make_record("bad-feb", 31, 2),
            make_record("bad-month", 15, 13),
            make_record("good", 15, 6),
        ]
        with caplog.at_level(logging.WARNING):
            assert _ids(select_due_today(records, today)) == ["good"]
            assert _ids(select_upcoming_within_week(records, today)) == ["good"]
        assert "bad-feb" in caplog.text
        assert "bad-month" in caplog.text


def test_none_preference_never_selected():
    records = [
        make_record("n1", 1, 1, preference=P.NONE),
        make_record("n2", 29, 2, preference=P.NONE),
        make_record("n3", 15, 6, preference=P.NONE),
    ]
    day = date(2024, 1, 1)
    while day.year == 2024:
        assert select_due_today(records, day) == []
        assert select_upcoming_within_week(records, day) == []
        day += timedelta(days=1)


class TestBuildDigest:
    def test_daily_run_has_no_weekly_section(self, today):
        records = [make_record("t", 15, 6, year=1990), make_record("soon", 18, 6)]
        digest = build_digest("u1", records, today, include_weekly=False)

        assert digest.user_id == "u1"
        assert [e.record_id for e in digest.due_today] == ["t"]
        assert digest.due_today[0].turning_age == 34
        assert digest.due_today[0].days_until == 0
        assert digest.due_this_week == []

    def test_weekly_run_fills_both_sections(self, today):
        records = [make_record("t", 15, 6), make_record("soon", 18, 6)]
        digest = build_digest("u1", records, today, include_weekly=True)

        assert [e.record_id for e in digest.due_today] == ["t"]
        assert [(e.record_id, e.days_until) for e in digest.due_this_week] == [
            ("t", 0),
            ("soon", 3),
        ]

    def test_empty_digest(self, today):
        digest = build_digest("u1", [make_record("far", 1, 12)], today, include_weekly=True)
        assert digest.is_empty
