from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from . import config
from .models import DayGroup, EntryKind, JournalEntry, MoodSummary
from .mood_scale import mood_value_from_tags

# Aggregation over journal entries (read-only).
# Policy:
# - Mood values come only from mood_value_from_tags (moodScore first, then label).
# - Entries without a resolvable mood still count as activity (active days, streak).
# - Day buckets are local calendar days; naive timestamps are taken as UTC.
# - Nothing here raises on empty input or bad tags.

SERIES_MIN = -2.0
SERIES_MAX = 2.0


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return _utc(now) if now is not None else datetime.now(timezone.utc)


def _tz(tz: Optional[tzinfo]) -> Optional[tzinfo]:
    # None: system rules per instant (astimezone() without argument)
    return tz if tz is not None else config.local_timezone()


def _day(dt: datetime, zone: Optional[tzinfo]) -> date:
    return _utc(dt).astimezone(zone).date()


def local_day(dt: datetime, tz: Optional[tzinfo] = None) -> date:
    return _day(dt, _tz(tz))


def _clamp(v: float) -> float:
    return max(SERIES_MIN, min(SERIES_MAX, v))


def _in_window(entries: Iterable[JournalEntry], days: float, now: datetime) -> List[JournalEntry]:
    cut = now - timedelta(days=days)
    return [e for e in entries if _utc(e.created_at) >= cut]


def daily_series(
    entries: Sequence[JournalEntry],
    days: int = config.MOOD_DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[float]:
    """Per-day mood averages, oldest first. Days without a mood value are left out."""
    if days <= 0 or not entries:
        return []
    zone = _tz(tz)
    buckets: Dict[date, List[float]] = defaultdict(list)
    for e in _in_window(entries, days, _now(now)):
        v = mood_value_from_tags(e.tags)
        if v is None:
            continue
        buckets[_day(e.created_at, zone)].append(v)
    return [_clamp(sum(vals) / len(vals)) for _, vals in sorted(buckets.items())]


def average_mood(
    entries: Sequence[JournalEntry],
    window_days: int = config.MOOD_DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> float:
    """Mean over every resolved value in the window (not day-weighted); 0.0 if none."""
    if window_days <= 0 or not entries:
        return 0.0
    vals = [v for v in (mood_value_from_tags(e.tags) for e in _in_window(entries, window_days, _now(now))) if v is not None]
    if not vals:
        return 0.0
    return round(sum(vals) / len(vals), 2)


def active_day_count(
    entries: Sequence[JournalEntry],
    tz: Optional[tzinfo] = None,
    window_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    """Distinct local days with at least one entry (whole history unless window_days is set)."""
    zone = _tz(tz)
    pool = entries if window_days is None else _in_window(entries, window_days, _now(now))
    return len({_day(e.created_at, zone) for e in pool})


def streak(
    entries: Sequence[JournalEntry],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> int:
    """Consecutive active days ending today. 0 when today has no entry."""
    if not entries:
        return 0
    zone = _tz(tz)
    days = {_day(e.created_at, zone) for e in entries}
    cursor = _day(_now(now), zone)
    n = 0
    while cursor in days:
        n += 1
        cursor -= timedelta(days=1)
    return n


def mood_sparkline(
    entries: Sequence[JournalEntry],
    days: int = 7,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[float]:
    """Exactly `days` values ending today; days without mood are 0.0."""
    if days <= 0:
        return []
    zone = _tz(tz)
    today = _day(_now(now), zone)
    start = today - timedelta(days=days - 1)
    sums: Dict[date, float] = defaultdict(float)
    counts: Dict[date, int] = defaultdict(int)
    for e in entries:
        d = _day(e.created_at, zone)
        if d < start or d > today:
            continue
        v = mood_value_from_tags(e.tags)
        if v is None:
            continue
        sums[d] += v
        counts[d] += 1
    out = []
    for i in range(days):
        d = start + timedelta(days=i)
        out.append(round(sums[d] / counts[d], 2) if counts[d] else 0.0)
    return out


def reflections_count(
    entries: Sequence[JournalEntry],
    window_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    pool = entries if window_days is None else _in_window(entries, window_days, _now(now))
    return sum(1 for e in pool if e.kind == EntryKind.REFLECTION)


def entries_for_local_day(
    entries: Sequence[JournalEntry],
    day: date,
    tz: Optional[tzinfo] = None,
) -> List[JournalEntry]:
    zone = _tz(tz)
    return [e for e in entries if _day(e.created_at, zone) == day]


def _day_label(day: date, today: date) -> str:
    if day == today:
        return "Heute"
    if day == today - timedelta(days=1):
        return "Gestern"
    return day.strftime("%d.%m.%Y")


def group_by_day(
    entries: Sequence[JournalEntry],
    limit_days: Optional[int] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[DayGroup]:
    """Timeline groups, newest day first; entries inside a group newest first."""
    zone = _tz(tz)
    today = _day(_now(now), zone)
    buckets: Dict[date, List[JournalEntry]] = defaultdict(list)
    for e in entries:
        d = _day(e.created_at, zone)
        if limit_days is not None and (today - d).days > limit_days:
            continue
        buckets[d].append(e)

    groups = []
    for d in sorted(buckets, reverse=True):
        items = sorted(buckets[d], key=lambda e: _utc(e.created_at), reverse=True)
        groups.append(DayGroup(day=d, label=_day_label(d, today), entries=items))
    return groups


def summarize(
    entries: Sequence[JournalEntry],
    days: int = config.MOOD_DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    sparkline_days: int = 7,
    active_window_days: Optional[int] = None,
) -> MoodSummary:
    """Bundle of the Pro metrics. `active_window_days` limits active_days (default: whole history)."""
    zone = _tz(tz)
    ref = _now(now)
    return MoodSummary(
        days=days,
        series=daily_series(entries, days, ref, zone),
        average=average_mood(entries, days, ref),
        active_days=active_day_count(entries, zone, active_window_days, ref),
        streak=streak(entries, ref, zone),
        sparkline=mood_sparkline(entries, sparkline_days, ref, zone),
        entries=len(entries),
    )
