import time
from datetime import date, datetime, timedelta, timezone

import pytest

from mood_engine import config
from mood_engine.aggregator import (
    active_day_count,
    average_mood,
    daily_series,
    entries_for_local_day,
    group_by_day,
    local_day,
    mood_sparkline,
    reflections_count,
    streak,
    summarize,
)
from mood_engine.models import EntryKind, JournalEntry


def _entry(now, days_ago, *tags, hour=12, kind=EntryKind.JOURNAL, eid=None):
    local = (now - timedelta(days=days_ago)).replace(hour=hour, minute=0)
    return JournalEntry(
        id=eid or f"e-{days_ago}-{hour}",
        created_at=local.astimezone(timezone.utc),
        kind=kind,
        tags=tuple(tags),
    )


@pytest.fixture
def week(now):
    """Five active days in a row ending today, plus an old entry without mood."""
    return [
        _entry(now, 10, "sport"),
        _entry(now, 4, "moodScore:4"),
        _entry(now, 3, "mood:Glücklich"),
        _entry(now, 2, "mood:Wütend", kind=EntryKind.REFLECTION),
        _entry(now, 1, "moodScore:3", hour=9),
        _entry(now, 1, "mood:Traurig", hour=20),
        _entry(now, 0, "mood:Ruhig", "sport"),
    ]


class TestSeries:
    def test_daily_series(self, week, now, tz):
        assert daily_series(week, 30, now, tz) == [2.0, 2.0, -2.0, 0.0, 1.0]

    def test_window_cuts_old_days(self, week, now, tz):
        assert daily_series(week, 2, now, tz) == [0.0, 1.0]

    def test_empty(self, now, tz):
        assert daily_series([], 30, now, tz) == []
        assert daily_series([_entry(now, 0, "sport")], 30, now, tz) == []

    def test_average(self, week, now):
        # per entry, not per day: (2 + 2 - 2 + 1 - 1 + 1) / 6
        assert average_mood(week, 30, now) == 0.5

    def test_average_without_values(self, now):
        assert average_mood([], 30, now) == 0.0
        assert average_mood([_entry(now, 0, "mood:Müde")], 30, now) == 0.0

    def test_score_tag_wins_inside_a_day(self, now, tz):
        e = _entry(now, 0, "mood:Wütend", "moodScore:4")
        assert daily_series([e], 30, now, tz) == [2.0]


class TestActivity:
    def test_active_days(self, week, tz, now):
        assert active_day_count(week, tz) == 6
        assert active_day_count(week, tz, window_days=7, now=now) == 5

    def test_streak(self, week, now, tz):
        assert streak(week, now, tz) == 5

    def test_streak_needs_today(self, week, now, tz):
        assert streak(week[:-1], now, tz) == 0
        assert streak([], now, tz) == 0

    def test_local_midnight(self, now, tz):
        # 23:30 UTC on the 9th is already the 10th in Berlin
        late = JournalEntry(id="x", created_at=datetime(2026, 3, 9, 23, 30, tzinfo=timezone.utc))
        assert local_day(late.created_at, tz) == date(2026, 3, 10)
        assert local_day(late.created_at, timezone.utc) == date(2026, 3, 9)
        assert streak([late], now, tz) == 1

    def test_naive_timestamps_are_utc(self, tz):
        assert local_day(datetime(2026, 3, 9, 23, 30), tz) == date(2026, 3, 10)

    def test_reflections(self, week, now):
        assert reflections_count(week) == 1
        assert reflections_count(week, window_days=1, now=now) == 0


class TestSparkline:
    def test_seven_days(self, week, now, tz):
        assert mood_sparkline(week, 7, now, tz) == [0.0, 0.0, 2.0, 2.0, -2.0, 0.0, 1.0]

    def test_empty_is_zero_filled(self, now, tz):
        assert mood_sparkline([], 3, now, tz) == [0.0, 0.0, 0.0]
        assert mood_sparkline([], 0, now, tz) == []


class TestGrouping:
    def test_group_by_day(self, week, now, tz):
        groups = group_by_day(week, now=now, tz=tz)
        assert [g.label for g in groups[:3]] == ["Heute", "Gestern", "08.03.2026"]
        assert [e.id for e in groups[1].entries] == ["e-1-20", "e-1-9"]
        assert groups[-1].day == date(2026, 2, 28)

    def test_limit_days(self, week, now, tz):
        assert len(group_by_day(week, limit_days=3, now=now, tz=tz)) == 4

    def test_entries_for_local_day(self, week, tz):
        assert [e.id for e in entries_for_local_day(week, date(2026, 3, 9), tz)] == ["e-1-9", "e-1-20"]


class TestSummary:
    def test_summarize(self, week, now, tz):
        s = summarize(week, 30, now, tz)
        assert s.to_dict() == {
            "days": 30,
            "series": [2.0, 2.0, -2.0, 0.0, 1.0],
            "average": 0.5,
            "active_days": 6,
            "streak": 5,
            "sparkline": [0.0, 0.0, 2.0, 2.0, -2.0, 0.0, 1.0],
            "entries": 7,
        }

    def test_active_window(self, week, now, tz):
        assert summarize(week, 30, now, tz, active_window_days=7).active_days == 5

    def test_summarize_empty(self, now, tz):
        s = summarize([], 30, now, tz)
        assert (s.series, s.average, s.active_days, s.streak) == ([], 0.0, 0, 0)
        assert s.sparkline == [0.0] * 7


class TestScoreSeries:
    def test_score_tags_map_to_valence(self, now, tz):
        entries = [_entry(now, 4 - i, f"moodScore:{s}") for i, s in enumerate([4, 4, 0, 2, 3])]
        assert daily_series(entries, 30, now, tz) == [2.0, 2.0, -2.0, 0.0, 1.0]
        assert average_mood(entries, 30, now) == 0.6


@pytest.fixture
def system_berlin(monkeypatch):
    """Process zone Europe/Berlin and no MOOD_LOCAL_TZ, so buckets use the system rules."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    monkeypatch.setattr(config, "MOOD_LOCAL_TZ", "")
    time.tzset()
    if "CET" not in time.tzname:
        monkeypatch.undo()
        time.tzset()
        pytest.skip("system tz database has no Europe/Berlin")
    yield
    monkeypatch.undo()
    time.tzset()


class TestSystemZone:
    def test_unconfigured_zone_resolves_to_none(self, system_berlin):
        assert config.local_timezone() is None

    def test_winter_entries_near_midnight(self, system_berlin):
        cet = timezone(timedelta(hours=1))
        late = JournalEntry(id="a", created_at=datetime(2026, 1, 5, 23, 30, tzinfo=cet).astimezone(timezone.utc))
        morning = JournalEntry(id="b", created_at=datetime(2026, 1, 6, 10, 0, tzinfo=cet).astimezone(timezone.utc))
        assert local_day(late.created_at) == date(2026, 1, 5)
        assert active_day_count([late, morning]) == 2

    def test_summer_entries_near_midnight(self, system_berlin):
        cest = timezone(timedelta(hours=2))
        late = JournalEntry(id="a", created_at=datetime(2026, 7, 5, 23, 30, tzinfo=cest).astimezone(timezone.utc))
        morning = JournalEntry(id="b", created_at=datetime(2026, 7, 6, 10, 0, tzinfo=cest).astimezone(timezone.utc))
        assert local_day(late.created_at) == date(2026, 7, 5)
        assert active_day_count([late, morning]) == 2

    def test_streak_across_dst_change(self, system_berlin):
        # clocks go forward on 2026-03-29; "today" is in CEST, the entries before it in CET
        cet = timezone(timedelta(hours=1))
        entries = [
            JournalEntry(id=f"d{d}", created_at=datetime(2026, 3, d, 23, 30, tzinfo=cet).astimezone(timezone.utc))
            for d in (26, 27, 28)
        ]
        entries.append(JournalEntry(id="today", created_at=datetime(2026, 3, 29, 12, 0, tzinfo=timezone.utc)))
        now = datetime(2026, 3, 29, 18, 0, tzinfo=timezone.utc)
        assert streak(entries, now) == 4
        assert [g.label for g in group_by_day(entries, now=now)][:2] == ["Heute", "Gestern"]
