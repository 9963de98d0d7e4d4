# -*- coding: utf-8 -*-
"""
Mood Stats API
--------------
- POST /mood/stats

Role:
- Compute the Pro metrics for a list of journal entries sent by the app:
  per-day mood series, average mood, active days, current streak and the
  7-day sparkline.

Design:
- Stateless: entries come in the body, nothing is stored.
- Entries use the tolerant journal format (createdAt / created_at / ts,
  tags as list or comma string, legacy mood / moodScore fields).
  Rows without a usable timestamp are skipped and counted in `skipped`.
- Day boundaries follow `tz` (IANA name), else MOOD_LOCAL_TZ, else the
  server zone.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from mood_engine import config
from mood_engine.aggregator import summarize
from mood_engine.models import parse_entries
from mood_engine.observability import log_event

logger = logging.getLogger("mood_api.stats")


class StatsRequest(BaseModel):
    entries: List[Dict[str, Any]] = Field(default_factory=list, description="Journal entries (read-only)")
    days: int = Field(config.MOOD_DEFAULT_WINDOW_DAYS, ge=1, le=3650, description="Window for series / average")
    sparkline_days: int = Field(7, ge=1, le=366)
    window_days: Optional[int] = Field(default=None, ge=1, le=3650, description="Limit active_days to this window (default: all)")
    now: Optional[datetime] = Field(default=None, description="Reference time (default: server now)")
    tz: Optional[str] = Field(default=None, description="IANA zone for day buckets, e.g. Europe/Berlin")


class StatsResponse(BaseModel):
    days: int
    series: List[float]
    average: float
    active_days: int
    streak: int
    sparkline: List[float]
    entries: int
    skipped: int = 0


def _resolve_tz(name: Optional[str]) -> Optional[tzinfo]:
    if name is None or not name.strip():
        return config.local_timezone()
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {name}")


def register_mood_stats_routes(app: FastAPI) -> None:
    """Register /mood/stats endpoint."""

    @app.post("/mood/stats", response_model=StatsResponse)
    async def mood_stats(req: StatsRequest) -> StatsResponse:
        zone = _resolve_tz(req.tz)
        entries, skipped = parse_entries(req.entries)
        if skipped:
            log_event(logger, "mood_stats_rows_skipped", level="warning", skipped=skipped, total=len(req.entries))

        summary = summarize(
            entries,
            req.days,
            req.now,
            zone,
            sparkline_days=req.sparkline_days,
            active_window_days=req.window_days,
        )
        return StatsResponse(**summary.to_dict(), skipped=skipped)
