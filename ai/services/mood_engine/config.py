# -*- coding: utf-8 -*-
"""config.py

Runtime knobs for the mood core
-------------------------------

All values come from environment variables and are read once at import.
Invalid values never crash the import; they fall back to the defaults.

- MOOD_LOCAL_TZ=Europe/Berlin          (default: system local zone)
- MOOD_MERGE_TOLERANCE_SECONDS=30
- MOOD_DUPE_WINDOW_SECONDS=5
- MOOD_DEFAULT_WINDOW_DAYS=30
- MOOD_CLASSIFIER_TIMEOUT_SECONDS=2.0
- MOOD_KEYWORDS_PATH=/path/to/keywords.json   (optional override)
- MOOD_DEFAULT_LOCALE=de
"""

from __future__ import annotations

import logging
import os
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("mood_engine.config")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)) or str(default))
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)) or str(default))
    except Exception:
        return default


MOOD_LOCAL_TZ = (os.getenv("MOOD_LOCAL_TZ") or "").strip()
MOOD_MERGE_TOLERANCE_SECONDS = max(0, _env_int("MOOD_MERGE_TOLERANCE_SECONDS", 30))
MOOD_DUPE_WINDOW_SECONDS = max(0, _env_int("MOOD_DUPE_WINDOW_SECONDS", 5))
MOOD_DEFAULT_WINDOW_DAYS = max(1, _env_int("MOOD_DEFAULT_WINDOW_DAYS", 30))
MOOD_CLASSIFIER_TIMEOUT_SECONDS = _env_float("MOOD_CLASSIFIER_TIMEOUT_SECONDS", 2.0)
MOOD_KEYWORDS_PATH = (os.getenv("MOOD_KEYWORDS_PATH") or "").strip()
MOOD_DEFAULT_LOCALE = (os.getenv("MOOD_DEFAULT_LOCALE", "de") or "de").strip().lower()


def local_timezone(name: Optional[str] = None) -> Optional[tzinfo]:
    """Resolve the zone used for day buckets.

    Explicit name > MOOD_LOCAL_TZ > None. None means the system zone rules,
    applied per timestamp with `datetime.astimezone()`; a fixed offset taken
    from the current moment would misplace entries across DST changes.
    An unknown name logs a warning and also returns None.
    """
    key = (name if name is not None else MOOD_LOCAL_TZ).strip()
    if not key:
        return None
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Unknown timezone %r, using system zone: %s", key, exc)
        return None
