# -*- coding: utf-8 -*-
"""
Mood Timeline API
-----------------
- POST /mood/timeline/merge

Role:
- Merge the canonical journal (provider) with the legacy local list the
  app still carries, dropping legacy rows that are the same occurrence as a
  provider row (same text / mood / kind / question, timestamps within the
  tolerance).

Payload:
- provider: journal entries (same format as /mood/stats)
- legacy:   timeline rows {createdAt|date, kind, text, mood, aiQuestion?}
- tolerance_seconds: optional override of MOOD_MERGE_TOLERANCE_SECONDS
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from mood_engine.merger import EntryMerger
from mood_engine.models import EntryView, parse_entries
from mood_engine.observability import log_event

logger = logging.getLogger("mood_api.timeline")


class MergeRequest(BaseModel):
    provider: List[Dict[str, Any]] = Field(default_factory=list)
    legacy: List[Dict[str, Any]] = Field(default_factory=list)
    tolerance_seconds: Optional[int] = Field(default=None, ge=0, le=86400)


class TimelineRow(BaseModel):
    id: Optional[str] = None
    createdAt: str
    kind: str
    text: str
    mood: str = ""
    aiQuestion: Optional[str] = None


class MergeResponse(BaseModel):
    entries: List[TimelineRow]
    skipped: int = 0


def _legacy_views(rows: List[Dict[str, Any]]):
    views: List[EntryView] = []
    skipped = 0
    for r in rows:
        try:
            views.append(EntryView.from_dict(r))
        except ValueError:
            skipped += 1
    return views, skipped


def register_mood_timeline_routes(app: FastAPI) -> None:
    """Register /mood/timeline/merge endpoint."""

    @app.post("/mood/timeline/merge", response_model=MergeResponse)
    async def mood_timeline_merge(req: MergeRequest) -> MergeResponse:
        entries, skipped_p = parse_entries(req.provider)
        provider = [EntryView.from_journal(e) for e in entries]
        legacy, skipped_l = _legacy_views(req.legacy)

        tolerance = timedelta(seconds=req.tolerance_seconds) if req.tolerance_seconds is not None else None
        merged = EntryMerger(tolerance).merge(provider, legacy)

        skipped = skipped_p + skipped_l
        if skipped:
            log_event(logger, "timeline_rows_skipped", level="warning", provider=skipped_p, legacy=skipped_l)
        return MergeResponse(entries=[TimelineRow(**v.to_dict()) for v in merged], skipped=skipped)
