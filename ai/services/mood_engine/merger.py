# -*- coding: utf-8 -*-
"""
merger.py

One timeline out of two sources:
  - provider: canonical store entries (always kept)
  - legacy:   older local entries (kept unless the provider already has them)

Two rows are the same occurrence when their fingerprints are equal and their
UTC timestamps are at most `tolerance` apart. Pairwise comparison (n * m) is
fine at journal scale (hundreds to low thousands of rows); a larger store
would want an index keyed by fingerprint.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from . import config
from .models import EntryView
from .normalize import collapse_whitespace
from .observability import log_event

logger = logging.getLogger("mood_engine.merger")

FP_SEP = "|"


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def fingerprint(view: EntryView) -> str:
    return FP_SEP.join([
        collapse_whitespace(view.text),
        collapse_whitespace(view.mood),
        view.kind.code,
        collapse_whitespace(view.ai_question),
    ])


class EntryMerger:
    def __init__(self, tolerance: Optional[timedelta] = None) -> None:
        if tolerance is None:
            tolerance = timedelta(seconds=config.MOOD_MERGE_TOLERANCE_SECONDS)
        self.tolerance = tolerance

    def is_same_entry(self, a: EntryView, b: EntryView) -> bool:
        if fingerprint(a) != fingerprint(b):
            return False
        return abs(_utc(a.created_at) - _utc(b.created_at)) <= self.tolerance

    def merge(self, provider: Sequence[EntryView], legacy: Iterable[EntryView]) -> List[EntryView]:
        """Provider rows plus legacy rows the provider does not have, newest first."""
        merged = list(provider)
        dropped = 0
        for lv in legacy:
            if any(self.is_same_entry(pv, lv) for pv in provider):
                dropped += 1
                continue
            merged.append(lv)
        # stable: equal timestamps keep provider-before-legacy order
        merged.sort(key=lambda v: _utc(v.created_at), reverse=True)
        log_event(
            logger,
            "timeline_merged",
            level="debug",
            provider=len(provider),
            legacy_added=len(merged) - len(provider),
            duplicates=dropped,
        )
        return merged


def merge_timelines(
    provider: Sequence[EntryView],
    legacy: Iterable[EntryView],
    tolerance: Optional[timedelta] = None,
) -> List[EntryView]:
    return EntryMerger(tolerance).merge(provider, legacy)


def find_recent_duplicate(
    candidate: EntryView,
    existing: Iterable[EntryView],
    window: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> Optional[EntryView]:
    """
    Add-time guard against double submits: the first existing row created
    within `window` before `now` with the candidate's fingerprint.
    """
    if window is None:
        window = timedelta(seconds=config.MOOD_DUPE_WINDOW_SECONDS)
    since = _utc(now or datetime.now(timezone.utc)) - window
    fp = fingerprint(candidate)
    for e in existing:
        if _utc(e.created_at) < since:
            continue
        if fingerprint(e) == fp:
            return e
    return None
